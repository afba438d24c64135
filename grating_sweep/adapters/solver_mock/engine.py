# """
# Mock solver implementing the SolverAdapter port.
# Produces shape-correct, deterministic surrogate efficiencies.
# """
from __future__ import annotations

import logging
from typing import Sequence

import numpy as np

from grating_sweep.adapters.solver_scalar.orders import order_indices, propagating_mask
from grating_sweep.domain.errors import SolverFailure
from grating_sweep.domain.models import GratingConfig
from grating_sweep.domain.ports import SolverAdapter

logger = logging.getLogger(__name__)


def g(mu: float, sig: float) -> float:
    """Gaussian helper used in the mock spectrum."""
    return float(np.exp(-(mu**2) / (2.0 * sig**2)))


class MockSolverAdapter(SolverAdapter):
    """Smooth Gaussian spread over propagating orders, total efficiency `reflectivity`."""

    name = "mock"

    def __init__(self, reflectivity: float = 0.8) -> None:
        self.reflectivity = float(reflectivity)

    def efficiencies(
        self,
        incidence_deg: float,
        wavelength_um: float,
        N: int,
        grating: GratingConfig,
        debug_output: bool,
    ) -> Sequence[float]:
        if abs(incidence_deg) >= 90.0:
            raise SolverFailure(f"incidence angle {incidence_deg:g} deg is at or beyond grazing")
        m = order_indices(N)
        mask = propagating_mask(wavelength_um, incidence_deg, grating.period_um, m)
        sig = 1.0 + grating.period_um / wavelength_um * 0.1
        w = np.array([g(float(k), sig) for k in m]) * mask
        eff = self.reflectivity * w / w.sum()
        if debug_output:
            logger.debug("mock: orders=%s eff=%s", m.tolist(), np.round(eff, 6).tolist())
        return eff.tolist()
