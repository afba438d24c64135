# grating_sweep/adapters/registry.py
from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, List, Type

if TYPE_CHECKING:
    from grating_sweep.domain.ports import SolverAdapter  # pragma: no cover

from grating_sweep.adapters.solver_mock.engine import MockSolverAdapter
from grating_sweep.adapters.solver_scalar.engine import ScalarGratingSolver

__all__ = ["list_solvers", "make_solver"]

# Registry: command-line name → solver class
_REGISTRY: Dict[str, Type[Any]] = {
    "scalar": ScalarGratingSolver,
    "mock": MockSolverAdapter,
}


def list_solvers() -> List[str]:
    return list(_REGISTRY.keys())


def make_solver(name: str, **kwargs: Any) -> SolverAdapter:
    """Instantiate the requested solver; kwargs go to its constructor."""
    cls = _REGISTRY.get(name)
    if cls is None:
        raise KeyError(f"Unknown solver '{name}'. Available: {', '.join(_REGISTRY)}")
    return cls(**kwargs)
