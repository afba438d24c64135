"""Primary output file and optional progress file, rewritten after every step.

The primary file has an immutable ``# Input`` header followed by a region
(``# Progress`` + ``# Output``) that is overwritten wholesale from a fixed
offset recorded once after the header. A reader therefore always finds a
complete progress block followed by every result written so far.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Sequence, TextIO

from grating_sweep.domain.errors import ArtifactOpenError
from grating_sweep.domain.models import Progress, StepResult, SweepConfiguration
from grating_sweep.domain.ports import ResultSink

logger = logging.getLogger(__name__)

FAILED_MARKER = "failed"


def _fmt(value: float) -> str:
    return f"{value:.10g}"


def _fmt_eff(value: float) -> str:
    return f"{value:.8g}"


def header_items(config: SweepConfiguration) -> list[tuple[str, str]]:
    """`key=value` pairs echoed in the ``# Input`` section, in file order."""
    items: list[tuple[str, str]] = [("mode", config.mode)]
    if config.mode == "constantIncidence" and config.incidence_deg is not None:
        items.append(("incidenceAngle", _fmt(config.incidence_deg)))
    elif config.mode == "constantIncludedAngle":
        if config.included_deg is not None:
            items.append(("includedAngle", _fmt(config.included_deg)))
        if config.to_order is not None:
            items.append(("toOrder", str(config.to_order)))
    elif config.wavelength is not None:
        items.append(("wavelength", _fmt(config.wavelength)))
    g = config.grating
    items += [
        ("units", config.units),
        ("min", _fmt(config.minimum)),
        ("max", _fmt(config.maximum)),
        ("increment", _fmt(config.increment)),
        ("gratingType", g.grating_type),
        ("gratingPeriod", _fmt(g.period_um)),
        ("gratingGeometry", ",".join(_fmt(v) for v in g.geometry())),
        ("gratingMaterial", g.material),
        ("N", str(config.N)),
        ("printDebugOutput", "true" if config.debug_output else "false"),
    ]
    return items


def render_header(config: SweepConfiguration) -> str:
    lines = ["# Input"] + [f"{k}={v}" for k, v in header_items(config)]
    return "\n".join(lines) + "\n"


def render_progress(progress: Progress) -> str:
    return (
        "# Progress\n"
        f"status={progress.status}\n"
        f"completedSteps={progress.completed_steps}\n"
        f"totalSteps={progress.total_steps}\n"
    )


def render_result(result: StepResult) -> str:
    # failed steps keep their line so Output always has completedSteps lines
    values = ",".join(_fmt_eff(v) for v in result.efficiencies) if result.ok else FAILED_MARKER
    return f"{_fmt(result.coordinate)}\t{values}\n"


def render_region(progress: Progress, results: Iterable[StepResult]) -> str:
    return render_progress(progress) + "# Output\n" + "".join(render_result(r) for r in results)


class ResumableWriter(ResultSink):
    """File-backed `ResultSink`.

    Use as a context manager so the primary file is closed after the run.
    """

    def __init__(self, output_path: str | Path, progress_path: str | Path | None = None) -> None:
        self.output_path = Path(output_path)
        self.progress_path = Path(progress_path) if progress_path is not None else None
        self._fh: TextIO | None = None
        self._region_start: int | None = None

    # --- ResultSink ------------------------------------------------------------
    def begin(self, config: SweepConfiguration, progress: Progress) -> None:
        try:
            fh = self.output_path.open("w", encoding="utf-8", newline="\n")
        except OSError as e:
            raise ArtifactOpenError("output", self.output_path) from e
        if self.progress_path is not None:
            try:
                self.progress_path.write_text(
                    render_progress(progress), encoding="utf-8", newline="\n"
                )
            except OSError as e:
                fh.close()
                raise ArtifactOpenError("progress", self.progress_path) from e

        fh.write(render_header(config))
        fh.flush()
        self._region_start = fh.tell()
        self._fh = fh
        self._rewrite_region(render_region(progress, ()))
        logger.debug("opened %s (region offset %s)", self.output_path, self._region_start)

    def update(self, progress: Progress, results: Sequence[StepResult]) -> None:
        self._rewrite_region(render_region(progress, results))
        if self.progress_path is not None:
            try:
                self.progress_path.write_text(
                    render_progress(progress), encoding="utf-8", newline="\n"
                )
            except OSError as e:
                logger.warning("could not update progress file %s: %s", self.progress_path, e)

    def close(self) -> None:
        if self._fh is not None:
            self._fh.close()
            self._fh = None

    # --- helpers ---------------------------------------------------------------
    def _rewrite_region(self, text: str) -> None:
        if self._fh is None or self._region_start is None:
            raise RuntimeError("ResumableWriter.begin() must be called before writing results")
        self._fh.seek(self._region_start)
        self._fh.truncate()
        self._fh.write(text)
        self._fh.flush()

    def __enter__(self) -> "ResumableWriter":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()
