from __future__ import annotations

from grating_sweep.domain.errors import PhysicalDomainError

# Photon energy × wavelength product, h·c in eV·μm.
HC_EV_UM = 1.23984172


def to_wavelength(value: float, energy_units: bool) -> float:
    """Return the wavelength (μm) for a sweep value.

    With `energy_units` the value is a photon energy in eV and λ = hc / E;
    otherwise it already is the wavelength and is returned unchanged.
    """
    if not energy_units:
        return value
    if value == 0:
        raise PhysicalDomainError("photon energy of 0 eV has no wavelength")
    return HC_EV_UM / value


def to_energy(wavelength_um: float) -> float:
    """Inverse of `to_wavelength(..., energy_units=True)`: E = hc / λ in eV."""
    if wavelength_um == 0:
        raise PhysicalDomainError("wavelength of 0 um has no photon energy")
    return HC_EV_UM / wavelength_um
