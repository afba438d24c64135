from __future__ import annotations

from typing import Literal

import numpy as np

Pol = Literal["TE", "TM", "UNPOL"]


def _cos_theta_in_medium(n0: complex, n: complex, theta0_rad: float) -> complex:
    # Snell: n0 sinθ0 = n sinθ; cosθ = sqrt(1 - (n0/n)^2 sin^2 θ0) with principal branch
    s2 = (n0 / n) ** 2 * (np.sin(theta0_rad) ** 2)
    return complex(np.sqrt(1.0 - s2 + 0j))


def _q_param(pol: Literal["TE", "TM"], n: complex, cos_t: complex) -> complex:
    # TE: q = n cosθ ; TM: q = cosθ / n
    return n * cos_t if pol == "TE" else cos_t / n


def reflection_coefficient(
    pol: Literal["TE", "TM"], n0: complex, ns: complex, theta0_deg: float
) -> complex:
    """Field reflection coefficient of a bare substrate ns under ambient n0."""
    th0 = np.deg2rad(theta0_deg)
    q0 = _q_param(pol, n0, _cos_theta_in_medium(n0, n0, th0))
    qs = _q_param(pol, ns, _cos_theta_in_medium(n0, ns, th0))
    denom = q0 + qs
    if denom == 0:
        raise ZeroDivisionError("degenerate admittances at the substrate interface")
    return (q0 - qs) / denom


def reflectance(ns: complex, theta0_deg: float, pol: Pol = "UNPOL", n0: complex = 1.0 + 0.0j) -> float:
    """Planar power reflectance |r|^2; UNPOL averages TE and TM."""
    pols: tuple[Literal["TE", "TM"], ...] = ("TE", "TM") if pol == "UNPOL" else (pol,)
    R = [float(np.abs(reflection_coefficient(p, n0, ns, theta0_deg)) ** 2) for p in pols]
    return sum(R) / len(R)
