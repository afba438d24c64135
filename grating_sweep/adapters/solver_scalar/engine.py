from __future__ import annotations

import logging
from typing import Sequence

import numpy as np

from grating_sweep.adapters.materials.builtin import BuiltinMaterialDB
from grating_sweep.adapters.solver_scalar.fresnel import Pol, reflectance
from grating_sweep.adapters.solver_scalar.orders import (
    distribute,
    modulation_depth_um,
    order_indices,
    phase_weights,
    propagating_mask,
)
from grating_sweep.domain.errors import SolverFailure
from grating_sweep.domain.models import GratingConfig
from grating_sweep.domain.ports import MaterialDB, SolverAdapter
from grating_sweep.physics.angles import diffraction_angle

logger = logging.getLogger(__name__)


class ScalarGratingSolver(SolverAdapter):
    """Scalar reflection-grating model behind the solver port.

    The planar reflectance of the grating material is split over the
    propagating reflected orders with phase-grating weights set by the groove
    height of the profile. Evanescent orders carry zero efficiency.
    """

    name = "scalar"

    def __init__(self, materials: MaterialDB | None = None, pol: Pol = "UNPOL") -> None:
        self.materials = materials or BuiltinMaterialDB()
        self.pol: Pol = pol

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
        n_sub = self.materials.n_of_lambda(grating.material, wavelength_um)
        R = reflectance(n_sub, incidence_deg, pol=self.pol)

        mask = propagating_mask(wavelength_um, incidence_deg, grating.period_um, m)
        depth = modulation_depth_um(grating)
        w = phase_weights(wavelength_um, incidence_deg, depth, m)
        eff = distribute(R, w, mask, m)

        if debug_output:
            betas = {
                int(k): round(diffraction_angle(wavelength_um, grating.period_um, int(k), incidence_deg), 4)
                for k in m[mask]
            }
            logger.debug(
                "alpha=%g deg lambda=%g um n=%s R=%.6g depth=%g um beta(deg)=%s",
                incidence_deg,
                wavelength_um,
                n_sub,
                R,
                depth,
                betas,
            )
        return np.asarray(eff, dtype=float).tolist()

    def validate(self, grating: GratingConfig) -> None:
        if grating.material not in self.materials.list_materials():
            raise ValueError(
                f"unknown grating material {grating.material!r}; "
                f"available: {', '.join(self.materials.list_materials())}"
            )
