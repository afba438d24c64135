from __future__ import annotations

import numpy as np

from grating_sweep.domain.models import (
    BlazedProfile,
    GratingConfig,
    RectangularProfile,
    SinusoidalProfile,
    TrapezoidalProfile,
)


def order_indices(N: int) -> np.ndarray:
    """Orders -N..+N in output order."""
    return np.arange(-int(N), int(N) + 1, dtype=int)


def propagating_mask(
    lambda_um: float, theta_deg: float, period_um: float, m_orders: np.ndarray, n_ambient: float = 1.0
) -> np.ndarray:
    """Reflected orders that propagate in the ambient medium.

    Grating equation: sin(beta_m) = sin(theta) + m * lambda / (n * period);
    propagating iff |sin(beta_m)| ≤ 1.
    """
    s = np.sin(np.deg2rad(theta_deg)) + (lambda_um / period_um) * m_orders / max(n_ambient, 1e-12)
    return np.abs(s) <= 1.0 + 1e-12


def modulation_depth_um(grating: GratingConfig) -> float:
    """Peak-to-valley groove height implied by the profile."""
    p = grating.profile
    if isinstance(p, BlazedProfile):
        # triangular groove spanning one period
        tb = np.tan(np.deg2rad(p.blaze_deg))
        ta = np.tan(np.deg2rad(p.anti_blaze_deg))
        return float(grating.period_um * tb * ta / (tb + ta))
    if isinstance(p, (RectangularProfile, SinusoidalProfile, TrapezoidalProfile)):
        return float(p.depth_um)
    raise ValueError(f"unsupported grating profile {type(p).__name__}")


def phase_weights(
    lambda_um: float, theta_deg: float, depth_um: float, m_orders: np.ndarray
) -> np.ndarray:
    """Relative order weights from a reflective phase-grating approximation.

    Phase depth φ = 4π h cos θ / λ; the spread over orders widens with φ and
    collapses to the specular order as h → 0.
    """
    cos_t = np.cos(np.deg2rad(theta_deg))
    phi = (4.0 * np.pi * max(depth_um, 0.0) * max(cos_t, 0.0)) / max(lambda_um, 1e-12)
    if phi < 1e-6:
        return (m_orders == 0).astype(float)
    sigma = max(phi / np.pi, 1e-6)
    return np.exp(-((m_orders / sigma) ** 2))


def distribute(total: float, weights: np.ndarray, mask: np.ndarray, m_orders: np.ndarray) -> np.ndarray:
    """Split `total` over the masked orders in proportion to `weights`."""
    w = weights * mask.astype(float)
    s = float(np.sum(w))
    out = np.zeros(m_orders.shape, dtype=float)
    if s <= 0.0:
        out[m_orders == 0] = total  # all to specular if no propagating side orders
        return out
    return total * w / s
