from __future__ import annotations


class SweepError(RuntimeError):
    """Base class for errors that stop a sweep run."""


class ArtifactOpenError(SweepError):
    """An output or progress file could not be opened; raised before any step runs."""

    def __init__(self, kind: str, path: object) -> None:
        super().__init__(f"Could not open {kind} file {path}")
        self.kind = kind
        self.path = path


class DegenerateSweepError(SweepError, ValueError):
    """The sweep has no runnable steps or lacks its mode parameter."""


class PhysicalDomainError(ValueError):
    """A physical input has no real value at this step (e.g. zero photon energy)."""


class AngleDomainError(PhysicalDomainError):
    """The included-angle equation has no real solution at this wavelength."""


class SolverFailure(RuntimeError):
    """Raised inside a solver adapter to report a failed calculation."""
