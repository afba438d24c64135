from __future__ import annotations

import numpy as np
import pytest

from grating_sweep.adapters.materials.builtin import BuiltinMaterialDB
from grating_sweep.adapters.registry import list_solvers, make_solver
from grating_sweep.adapters.solver_mock.engine import MockSolverAdapter
from grating_sweep.adapters.solver_scalar.engine import ScalarGratingSolver
from grating_sweep.adapters.solver_scalar.fresnel import reflectance
from grating_sweep.adapters.solver_scalar.orders import (
    modulation_depth_um,
    order_indices,
    propagating_mask,
)
from grating_sweep.domain.models import GratingConfig, SinusoidalProfile
from grating_sweep.domain.ports import SolverAdapter
from grating_sweep.physics.units import HC_EV_UM


def test_scalar_solver_distributes_reflectance(grating) -> None:
    N, alpha, wl = 5, 88.0, HC_EV_UM / 100.0
    out = ScalarGratingSolver().evaluate(alpha, wl, N, grating)
    assert out.ok and len(out.efficiencies) == 2 * N + 1

    eff = np.array(out.efficiencies)
    R = reflectance(BuiltinMaterialDB().n_of_lambda("Au", wl), alpha)
    assert np.all(eff >= 0.0)
    assert eff.sum() == pytest.approx(R, rel=1e-12)

    # at 88° and this wavelength, outside orders (m > 0) are evanescent
    m = order_indices(N)
    assert np.allclose(eff[m > 0], 0.0)
    assert np.array_equal(m > 0, ~propagating_mask(wl, alpha, grating.period_um, m))


def test_flat_grating_sends_everything_specular() -> None:
    flat = GratingConfig(period_um=1.0, material="Ni", profile=SinusoidalProfile(depth_um=1e-12))
    out = ScalarGratingSolver().evaluate(10.0, 0.5, 3, flat)
    eff = np.array(out.efficiencies)
    assert eff[3] > 0.0 and np.allclose(np.delete(eff, 3), 0.0)


def test_blazed_depth_is_triangle_height(grating) -> None:
    tb, ta = np.tan(np.deg2rad(2.5)), np.tan(np.deg2rad(30.0))
    assert modulation_depth_um(grating) == pytest.approx(tb * ta / (tb + ta))


def test_grazing_and_unknown_material_fail_without_raising(grating) -> None:
    solver = ScalarGratingSolver()
    out = solver.evaluate(90.0, 0.01, 3, grating)
    assert not out.ok and out.efficiencies == () and "grazing" in out.message

    unknown = grating.model_copy(update={"material": "Unobtainium"})
    out = solver.evaluate(45.0, 0.01, 3, unknown)
    assert not out.ok and "Unobtainium" in out.message
    with pytest.raises(ValueError):
        solver.validate(unknown)
    solver.validate(grating)


@pytest.mark.parametrize("wl", [0.0, -0.1, float("nan"), float("inf")])
def test_non_physical_wavelength_is_rejected(grating, wl: float) -> None:
    out = MockSolverAdapter().evaluate(30.0, wl, 2, grating)
    assert out.status == "failure"


def test_port_checks_order_count_and_finiteness(grating) -> None:
    class Short(SolverAdapter):
        def efficiencies(self, incidence_deg, wavelength_um, N, grating, debug_output):
            return [0.5]

    class NotFinite(SolverAdapter):
        def efficiencies(self, incidence_deg, wavelength_um, N, grating, debug_output):
            return [np.nan] * (2 * N + 1)

    assert "expected 5 orders" in Short().evaluate(10.0, 0.5, 2, grating).message
    assert NotFinite().evaluate(10.0, 0.5, 2, grating).message == "non-finite efficiencies"


def test_mock_solver_total_and_debug_log(grating, caplog) -> None:
    with caplog.at_level("DEBUG", logger="grating_sweep.adapters"):
        out = MockSolverAdapter(reflectivity=0.6).evaluate(20.0, 0.3, 4, grating, debug_output=True)
    assert out.ok and sum(out.efficiencies) == pytest.approx(0.6)
    assert "mock: orders" in caplog.text


def test_registry() -> None:
    assert list_solvers() == ["scalar", "mock"]
    assert isinstance(make_solver("scalar"), ScalarGratingSolver)
    assert make_solver("mock", reflectivity=0.5).reflectivity == 0.5
    with pytest.raises(KeyError):
        make_solver("fdtd")


def test_scalar_debug_log_lists_diffraction_angles(grating, caplog) -> None:
    wl = HC_EV_UM / 100.0
    solver = ScalarGratingSolver()
    with caplog.at_level("DEBUG", logger="grating_sweep.adapters"):
        loud = solver.evaluate(88.0, wl, 3, grating, debug_output=True)
    quiet = solver.evaluate(88.0, wl, 3, grating, debug_output=False)

    assert loud == quiet
    assert "beta(deg)=" in caplog.text
    assert "0: 88.0" in caplog.text
