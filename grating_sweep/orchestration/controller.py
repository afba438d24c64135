from __future__ import annotations

import logging
from typing import List

from grating_sweep.domain.errors import DegenerateSweepError, PhysicalDomainError
from grating_sweep.domain.models import (
    Progress,
    RunStatus,
    StepResult,
    SweepConfiguration,
    SweepStep,
    missing_mode_parameters,
    sweep_step,
    total_steps,
)
from grating_sweep.domain.ports import ResultSink, SolverAdapter
from grating_sweep.physics.angles import resolve

__all__ = ["SweepController"]

logger = logging.getLogger(__name__)


class SweepController:
    """
    Runs the steps of one sweep in ascending order.

    After every step the result is appended, the success/failure flags are
    OR-ed in, and the sink is updated before the next step starts. Per-step
    failures are recorded as data; only an unopenable sink or a degenerate
    configuration stops the run, and both happen before the first step.
    """

    def __init__(self, config: SweepConfiguration, solver: SolverAdapter, sink: ResultSink) -> None:
        missing = missing_mode_parameters(config)
        if missing:
            raise DegenerateSweepError(f"mode {config.mode} requires {', '.join(missing)}")
        n = total_steps(config)
        if n < 1:
            raise DegenerateSweepError(
                f"sweep from {config.minimum:g} to {config.maximum:g} "
                f"in steps of {config.increment:g} has no steps"
            )
        self.config = config
        self.solver = solver
        self.sink = sink
        self.total_steps = n
        self._results: List[StepResult] = []
        self._any_success = False
        self._any_failure = False

    # --- state ---------------------------------------------------------------
    @property
    def results(self) -> tuple[StepResult, ...]:
        return tuple(self._results)

    @property
    def progress(self) -> Progress:
        return Progress(
            completed_steps=len(self._results),
            total_steps=self.total_steps,
            any_success=self._any_success,
            any_failure=self._any_failure,
        )

    @property
    def status(self) -> RunStatus:
        return self.progress.status

    # --- run -----------------------------------------------------------------
    def run(self) -> List[StepResult]:
        self.sink.begin(self.config, self.progress)
        logger.info("sweep started: %s, %d steps", self.config.mode, self.total_steps)
        for i in range(self.total_steps):
            result = self.run_step(sweep_step(self.config, i))
            self._results.append(result)
            if result.ok:
                self._any_success = True
            else:
                self._any_failure = True
            progress = self.progress
            self.sink.update(progress, self._results)
            logger.info(
                "step %d/%d at %g: %s",
                progress.completed_steps,
                progress.total_steps,
                result.coordinate,
                result.status if result.ok else f"{result.status} ({result.message})",
            )
        logger.info("sweep finished: %s", self.status)
        return list(self._results)

    def run_step(self, step: SweepStep) -> StepResult:
        """Resolve the physical inputs for `step` and evaluate it once."""
        try:
            physical = resolve(self.config, step)
        except PhysicalDomainError as e:
            logger.warning("step %d at %g: %s", step.index, step.coordinate, e)
            return StepResult(step=step, status="failure", message=str(e))

        out = self.solver.evaluate(
            physical.incidence_deg,
            physical.wavelength_um,
            self.config.N,
            self.config.grating,
            self.config.debug_output,
        )
        return StepResult(
            step=step,
            status=out.status,
            efficiencies=out.efficiencies,
            physical=physical,
            message=out.message,
        )
