#"""
#Domain models.
#
#Pydantic v2 models define the validated sweep configuration; per-step values
#and results are small frozen dataclasses produced by the controller.
#"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

# --- Basic enums/types ---
SweepMode = Literal["constantIncidence", "constantIncludedAngle", "constantWavelength"]
GratingType = Literal["rectangular", "blazed", "sinusoidal", "trapezoidal"]
StepStatus = Literal["success", "failure"]
RunStatus = Literal["inProgress", "succeeded", "someFailed", "allFailed"]

# ratio slack so that e.g. (0.3 - 0.1) / 0.1 still counts three steps
_STEP_RTOL = 1e-9


# --- Grating profiles (tagged by `profile`) ---
class RectangularProfile(BaseModel):
    model_config = ConfigDict(frozen=True)

    profile: Literal["rectangular"] = "rectangular"
    depth_um: float = Field(..., gt=0.0, description="Groove depth (μm)")
    valley_um: float = Field(..., ge=0.0, description="Valley width (μm)")

    def geometry(self) -> tuple[float, ...]:
        return (self.depth_um, self.valley_um)


class BlazedProfile(BaseModel):
    model_config = ConfigDict(frozen=True)

    profile: Literal["blazed"] = "blazed"
    blaze_deg: float = Field(..., gt=0.0, lt=90.0)
    anti_blaze_deg: float = Field(..., gt=0.0, lt=90.0)

    def geometry(self) -> tuple[float, ...]:
        return (self.blaze_deg, self.anti_blaze_deg)


class SinusoidalProfile(BaseModel):
    model_config = ConfigDict(frozen=True)

    profile: Literal["sinusoidal"] = "sinusoidal"
    depth_um: float = Field(..., gt=0.0, description="Peak-to-valley depth (μm)")

    def geometry(self) -> tuple[float, ...]:
        return (self.depth_um,)


class TrapezoidalProfile(BaseModel):
    model_config = ConfigDict(frozen=True)

    profile: Literal["trapezoidal"] = "trapezoidal"
    depth_um: float = Field(..., gt=0.0)
    valley_um: float = Field(..., ge=0.0)
    blaze_deg: float = Field(..., gt=0.0, lt=90.0)
    anti_blaze_deg: float = Field(..., gt=0.0, lt=90.0)

    def geometry(self) -> tuple[float, ...]:
        return (self.depth_um, self.valley_um, self.blaze_deg, self.anti_blaze_deg)


GratingProfile = Annotated[
    Union[RectangularProfile, BlazedProfile, SinusoidalProfile, TrapezoidalProfile],
    Field(discriminator="profile"),
]


class GratingConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    period_um: float = Field(..., gt=0.0, description="Grating period (μm)")
    material: str = Field(..., min_length=1)
    profile: GratingProfile

    @property
    def grating_type(self) -> GratingType:
        return self.profile.profile

    def geometry(self) -> tuple[float, ...]:
        """Geometry values in command-line order for this profile type."""
        return self.profile.geometry()


class SweepConfiguration(BaseModel):
    """Immutable description of one sweep run."""

    model_config = ConfigDict(frozen=True)

    mode: SweepMode
    minimum: float
    maximum: float
    increment: float
    incidence_deg: float | None = None
    included_deg: float | None = None
    to_order: int | None = None
    wavelength: float | None = Field(None, description="Fixed wavelength (μm) or energy (eV)")
    energy_units: bool = False
    debug_output: bool = False
    grating: GratingConfig
    N: int = Field(15, ge=1, description="Truncation order: Fourier orders -N..N")

    @model_validator(mode="after")
    def _check_mode_parameters(self) -> "SweepConfiguration":
        missing = missing_mode_parameters(self)
        if missing:
            raise ValueError(f"mode {self.mode} requires {', '.join(missing)}")
        return self

    @property
    def units(self) -> str:
        return "eV" if self.energy_units else "um"


def missing_mode_parameters(config: SweepConfiguration) -> list[str]:
    """Names of the mode-specific parameters that are absent from `config`."""
    if config.mode == "constantIncidence":
        required = {"incidenceAngle": config.incidence_deg}
    elif config.mode == "constantIncludedAngle":
        required = {"includedAngle": config.included_deg, "toOrder": config.to_order}
    else:
        required = {"wavelength": config.wavelength}
    return [name for name, value in required.items() if value is None]


def total_steps(config: SweepConfiguration) -> int:
    """floor((max - min) / increment) + 1; a single point when min == max.

    Returns a value < 1 for sweeps that run the wrong way or have a zero
    increment; the controller rejects those.
    """
    span = config.maximum - config.minimum
    if span == 0.0:
        return 1
    if config.increment == 0.0 or not math.isfinite(span / config.increment):
        return 0
    ratio = span / config.increment
    return int(math.floor(ratio + _STEP_RTOL * max(1.0, abs(ratio)))) + 1


# --- Per-step values ---
@dataclass(frozen=True)
class SweepStep:
    index: int
    coordinate: float


def sweep_step(config: SweepConfiguration, index: int) -> SweepStep:
    return SweepStep(index=index, coordinate=config.minimum + config.increment * index)


@dataclass(frozen=True)
class PhysicalInput:
    wavelength_um: float
    incidence_deg: float


@dataclass(frozen=True)
class SolverResult:
    """Tagged outcome returned across the solver boundary.

    `efficiencies` is ordered from order -N to +N and is empty on failure.
    """

    status: StepStatus
    efficiencies: tuple[float, ...] = ()
    message: str = ""

    @classmethod
    def succeeded(cls, efficiencies: tuple[float, ...]) -> "SolverResult":
        return cls(status="success", efficiencies=efficiencies)

    @classmethod
    def failed(cls, message: str) -> "SolverResult":
        return cls(status="failure", message=message)

    @property
    def ok(self) -> bool:
        return self.status == "success"


@dataclass(frozen=True)
class StepResult:
    step: SweepStep
    status: StepStatus
    efficiencies: tuple[float, ...] = ()
    physical: PhysicalInput | None = None
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.status == "success"

    @property
    def index(self) -> int:
        return self.step.index

    @property
    def coordinate(self) -> float:
        return self.step.coordinate


def run_status(completed: int, total: int, any_success: bool, any_failure: bool) -> RunStatus:
    if completed < total:
        return "inProgress"
    if any_success and any_failure:
        return "someFailed"
    if any_failure:
        return "allFailed"
    return "succeeded"


@dataclass(frozen=True)
class Progress:
    completed_steps: int
    total_steps: int
    any_success: bool = False
    any_failure: bool = False

    @property
    def status(self) -> RunStatus:
        return run_status(
            self.completed_steps, self.total_steps, self.any_success, self.any_failure
        )
