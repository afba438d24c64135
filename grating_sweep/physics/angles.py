from __future__ import annotations

import numpy as np

from grating_sweep.domain.errors import AngleDomainError, DegenerateSweepError
from grating_sweep.domain.models import PhysicalInput, SweepConfiguration, SweepStep
from grating_sweep.physics.units import to_wavelength


def included_angle_incidence(
    wavelength_um: float, period_um: float, order: int, included_deg: float
) -> float:
    """Incidence angle (deg) that keeps `order` at a fixed included angle.

    Solves alpha + beta = cia together with the grating equation
    m * lambda / d = sin(beta) - sin(alpha) (inside orders negative):

        alpha = asin(-m * lambda / (2 d cos(cia / 2))) + cia / 2
    """
    cia = np.deg2rad(float(included_deg))
    arg = -order * wavelength_um / (2.0 * period_um * np.cos(cia / 2.0))
    if not np.isfinite(arg) or abs(arg) > 1.0:
        raise AngleDomainError(
            f"no incidence angle gives order {order} an included angle of {included_deg:g} deg "
            f"at {wavelength_um:g} um (asin argument {arg:.6g})"
        )
    return float(np.rad2deg(np.arcsin(arg) + cia / 2.0))


def diffraction_angle(wavelength_um: float, period_um: float, order: int, incidence_deg: float) -> float:
    """beta (deg) from the grating equation; raises AngleDomainError for evanescent orders."""
    s = order * wavelength_um / period_um + np.sin(np.deg2rad(float(incidence_deg)))
    if abs(s) > 1.0 + 1e-12:
        raise AngleDomainError(f"order {order} is evanescent (sin beta = {s:.6g})")
    return float(np.rad2deg(np.arcsin(np.clip(s, -1.0, 1.0))))


def resolve(config: SweepConfiguration, step: SweepStep) -> PhysicalInput:
    """Wavelength (μm) and incidence angle (deg) for one sweep step.

    Raises PhysicalDomainError when the step has no physical solution; the
    energy conversion is redone for every step.
    """
    if config.mode == "constantWavelength":
        if config.wavelength is None:
            raise DegenerateSweepError("constantWavelength mode requires a wavelength")
        wavelength = to_wavelength(config.wavelength, config.energy_units)
        # the swept coordinate is the angle itself, never unit-converted
        return PhysicalInput(wavelength_um=wavelength, incidence_deg=step.coordinate)

    wavelength = to_wavelength(step.coordinate, config.energy_units)
    if config.mode == "constantIncidence":
        if config.incidence_deg is None:
            raise DegenerateSweepError("constantIncidence mode requires an incidence angle")
        return PhysicalInput(wavelength_um=wavelength, incidence_deg=float(config.incidence_deg))

    if config.included_deg is None or config.to_order is None:
        raise DegenerateSweepError("constantIncludedAngle mode requires includedAngle and toOrder")
    alpha = included_angle_incidence(
        wavelength, config.grating.period_um, config.to_order, config.included_deg
    )
    return PhysicalInput(wavelength_um=wavelength, incidence_deg=alpha)
