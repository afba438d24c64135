from __future__ import annotations

import io
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable

import numpy as np
import pandas as pd
import xarray as xr

from grating_sweep.domain.models import StepResult
from grating_sweep.exporting.writer import FAILED_MARKER

_ORDER_COL = re.compile(r"^e(-?\d+)$")


def order_column(m: int) -> str:
    return f"e{m}"


def order_columns(N: int) -> list[str]:
    return [order_column(m) for m in range(-N, N + 1)]


@dataclass
class OutputSnapshot:
    """Parsed state of a primary output file, complete or mid-run."""

    inputs: dict[str, str] = field(default_factory=dict)
    status: str = "inProgress"
    completed_steps: int = 0
    total_steps: int = 0
    table: pd.DataFrame = field(default_factory=pd.DataFrame)

    @property
    def done(self) -> bool:
        return self.status != "inProgress"


def results_table(results: Iterable[StepResult], N: int) -> pd.DataFrame:
    """One row per step: coordinate, status, physical inputs and e-N..eN (NaN if failed)."""
    cols = order_columns(N)
    rows: list[dict[str, Any]] = []
    for r in results:
        row: dict[str, Any] = {
            "coordinate": r.coordinate,
            "status": r.status,
            "wavelength_um": r.physical.wavelength_um if r.physical else np.nan,
            "incidence_deg": r.physical.incidence_deg if r.physical else np.nan,
        }
        effs = r.efficiencies if r.ok else (np.nan,) * len(cols)
        row.update(zip(cols, effs))
        rows.append(row)
    return pd.DataFrame(rows, columns=["coordinate", "status", "wavelength_um", "incidence_deg", *cols])


def dataset_from_table(df: pd.DataFrame) -> xr.Dataset:
    """Efficiency table → Dataset with `eff(coordinate, order)` and per-step variables."""
    eff_cols = [c for c in df.columns if _ORDER_COL.match(str(c))]
    orders = np.array([int(str(c)[1:]) for c in eff_cols], dtype=int)
    coord = df["coordinate"].to_numpy(dtype=float)
    eff = df[eff_cols].to_numpy(dtype=float) if eff_cols else np.empty((coord.size, 0))
    data_vars: dict[str, Any] = {
        "eff": (("coordinate", "order"), eff),
        "ok": (("coordinate",), (df["status"] == "success").to_numpy()),
    }
    for extra in ("wavelength_um", "incidence_deg"):
        if extra in df.columns:
            data_vars[extra] = (("coordinate",), df[extra].to_numpy(dtype=float))
    return xr.Dataset(data_vars=data_vars, coords=dict(coordinate=coord, order=orders))


def results_dataset(results: Iterable[StepResult], N: int) -> xr.Dataset:
    return dataset_from_table(results_table(results, N))


def _parse_output_line(line: str, cols: list[str]) -> dict[str, Any] | None:
    """Row for one ``# Output`` line, or None if the line is incomplete."""
    coord_text, tab, values = line.partition("\t")
    if not tab:
        return None
    try:
        row: dict[str, Any] = {"coordinate": float(coord_text)}
    except ValueError:
        return None
    if values.strip() == FAILED_MARKER:
        row["status"] = "failure"
        row.update({c: np.nan for c in cols})
        return row
    parts = values.split(",")
    if len(parts) != len(cols):
        return None
    try:
        effs = [float(v) for v in parts]
    except ValueError:
        return None
    row["status"] = "success"
    row.update(zip(cols, effs))
    return row


def read_output_file(path: str | Path) -> OutputSnapshot:
    """Parse a primary output file written by ResumableWriter.

    Safe to call while a sweep is running. A line caught half-written is
    skipped, and no more than ``completedSteps`` rows are returned.
    """
    snap = OutputSnapshot()
    section = ""
    output_lines: list[str] = []
    for raw in Path(path).read_text(encoding="utf-8").splitlines():
        line = raw.rstrip("\n")
        if line.startswith("# "):
            section = line[2:].strip()
            continue
        if not line.strip():
            continue
        if section == "Input":
            key, _, value = line.partition("=")
            snap.inputs[key] = value
        elif section == "Progress":
            key, _, value = line.partition("=")
            if key == "status":
                snap.status = value
            elif key == "completedSteps" and value.isdigit():
                snap.completed_steps = int(value)
            elif key == "totalSteps" and value.isdigit():
                snap.total_steps = int(value)
        elif section == "Output":
            output_lines.append(line)

    N = int(snap.inputs.get("N", "0"))
    cols = order_columns(N)
    rows = [row for row in (_parse_output_line(line, cols) for line in output_lines) if row]
    snap.table = pd.DataFrame(rows[: snap.completed_steps], columns=["coordinate", "status", *cols])
    return snap


def to_csv_bytes(df: pd.DataFrame) -> bytes:
    buf = io.StringIO()
    df.to_csv(buf, index=False)
    return buf.getvalue().encode("utf-8")
