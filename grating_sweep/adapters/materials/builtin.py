from __future__ import annotations

from typing import Dict

from grating_sweep.domain.errors import SolverFailure
from grating_sweep.domain.ports import MaterialDB

# Minimal builtin optical constants: wavelength-independent placeholders.
# Values are complex refractive indices n + ik, representative of the soft
# x-ray range (n slightly below 1) for the mirror coatings used on gratings.


class BuiltinMaterialDB(MaterialDB):
    def __init__(self) -> None:
        self._const: Dict[str, complex] = {
            "Air": 1.0 + 0.0j,
            "Au": 0.9583 + 0.0330j,
            "Ni": 0.9640 + 0.0210j,
            "Pt": 0.9560 + 0.0380j,
            "C": 0.9960 + 0.0015j,
            "SiO2": 0.9920 + 0.0040j,
            "Si": 0.9990 + 0.0018j,
        }

    def list_materials(self) -> list[str]:
        return sorted(self._const)

    def n_of_lambda(self, name: str, lambda_um: float) -> complex:
        # Extend later with tabulated nk files; constants above for now
        try:
            return self._const[name]
        except KeyError:
            raise SolverFailure(f"no refractive index data for material {name!r}") from None
