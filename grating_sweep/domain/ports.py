# """
# Ports (interfaces) for adapters. The controller and UI depend ONLY on these.
# """
from __future__ import annotations

import logging
import math
from abc import ABC, abstractmethod
from typing import Any, Sequence

from .models import GratingConfig, Progress, SolverResult, StepResult, SweepConfiguration

logger = logging.getLogger(__name__)


class SolverAdapter(ABC):
    """Boundary to a diffraction-efficiency solver.

    Subclasses implement `efficiencies`; `evaluate` turns any exception they
    raise, and any malformed output, into a failed `SolverResult` so a sweep
    can continue past them.
    """

    name = "solver"

    def evaluate(
        self,
        incidence_deg: float,
        wavelength_um: float,
        N: int,
        grating: GratingConfig,
        debug_output: bool = False,
    ) -> SolverResult:
        if not (math.isfinite(wavelength_um) and wavelength_um > 0.0):
            return SolverResult.failed(f"non-physical wavelength {wavelength_um!r} um")
        if not math.isfinite(incidence_deg):
            return SolverResult.failed(f"non-finite incidence angle {incidence_deg!r}")
        try:
            values = self.efficiencies(incidence_deg, wavelength_um, N, grating, debug_output)
            eff = tuple(float(v) for v in values)
        except Exception as exc:  # noqa: BLE001
            logger.warning(
                "%s failed at incidence=%g deg, wavelength=%g um: %s",
                self.name,
                incidence_deg,
                wavelength_um,
                exc,
            )
            return SolverResult.failed(str(exc) or type(exc).__name__)
        if len(eff) != 2 * N + 1:
            return SolverResult.failed(f"expected {2 * N + 1} orders, got {len(eff)}")
        if not all(math.isfinite(v) for v in eff):
            return SolverResult.failed("non-finite efficiencies")
        return SolverResult.succeeded(eff)

    def validate(self, grating: GratingConfig) -> None:
        """Raise ValueError if this solver cannot handle `grating` at all."""

    @abstractmethod
    def efficiencies(
        self,
        incidence_deg: float,
        wavelength_um: float,
        N: int,
        grating: GratingConfig,
        debug_output: bool,
    ) -> Sequence[float]:
        """Return efficiencies for orders -N..+N (2N+1 values)."""


class ResultSink(ABC):
    @abstractmethod
    def begin(self, config: SweepConfiguration, progress: Progress) -> None:
        """Open the outputs and write the header and initial progress."""

    @abstractmethod
    def update(self, progress: Progress, results: Sequence[StepResult]) -> None:
        """Persist the current progress and every result so far."""

    def close(self) -> None:
        """Release any open resources."""


class MaterialDB(ABC):
    @abstractmethod
    def list_materials(self) -> list[str]:
        """Return available material identifiers."""

    @abstractmethod
    def n_of_lambda(self, name: str, lambda_um: float) -> complex:
        """Return the complex refractive index n + ik of `name` at `lambda_um`."""


class PlotPresenter(ABC):
    @abstractmethod
    def efficiency_curves(self, data: Any) -> Any:
        """Figure: efficiency of each order versus the sweep coordinate."""

    @abstractmethod
    def order_spectrum(self, data: Any, i_step: int) -> Any:
        """Figure: order-resolved efficiencies at one sweep step."""
