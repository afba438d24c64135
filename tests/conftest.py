from __future__ import annotations

from typing import Any, Callable, List, Sequence, Tuple

import pytest

from grating_sweep.domain.errors import SolverFailure
from grating_sweep.domain.models import (
    BlazedProfile,
    GratingConfig,
    Progress,
    StepResult,
    SweepConfiguration,
)
from grating_sweep.domain.ports import ResultSink, SolverAdapter


class ScriptedSolver(SolverAdapter):
    """Returns fixed efficiencies; fails on the listed call numbers (0-based)."""

    name = "scripted"

    def __init__(self, fail_calls: Sequence[int] = (), values: Sequence[float] | None = None) -> None:
        self.fail_calls = set(fail_calls)
        self.values = values
        self.calls: List[Tuple[float, float, int]] = []

    def efficiencies(
        self,
        incidence_deg: float,
        wavelength_um: float,
        N: int,
        grating: GratingConfig,
        debug_output: bool,
    ) -> Sequence[float]:
        call = len(self.calls)
        self.calls.append((incidence_deg, wavelength_um, N))
        if call in self.fail_calls:
            raise SolverFailure(f"scripted failure on call {call}")
        if self.values is not None:
            return list(self.values)
        return [0.1] * (2 * N + 1)


class RecordingSink(ResultSink):
    """In-memory sink that snapshots every write."""

    def __init__(self) -> None:
        self.begun: List[Progress] = []
        self.updates: List[Tuple[Progress, Tuple[StepResult, ...]]] = []

    def begin(self, config: SweepConfiguration, progress: Progress) -> None:
        self.begun.append(progress)

    def update(self, progress: Progress, results: Sequence[StepResult]) -> None:
        self.updates.append((progress, tuple(results)))

    @property
    def statuses(self) -> List[str]:
        return [p.status for p in self.begun] + [p.status for p, _ in self.updates]


@pytest.fixture
def grating() -> GratingConfig:
    """1 μm blazed gold grating."""
    return GratingConfig(
        period_um=1.0,
        material="Au",
        profile=BlazedProfile(blaze_deg=2.5, anti_blaze_deg=30.0),
    )


@pytest.fixture
def make_config(grating: GratingConfig) -> Callable[..., SweepConfiguration]:
    """Factory: constant incidence 100–110 (step 5) at 88°, overridable by keyword."""

    def _make(**overrides: Any) -> SweepConfiguration:
        fields: dict[str, Any] = dict(
            mode="constantIncidence",
            minimum=100.0,
            maximum=110.0,
            increment=5.0,
            incidence_deg=88.0,
            energy_units=True,
            grating=grating,
            N=2,
        )
        fields.update(overrides)
        return SweepConfiguration(**fields)

    return _make


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def scripted() -> Callable[..., ScriptedSolver]:
    return ScriptedSolver
