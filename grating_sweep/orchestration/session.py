from __future__ import annotations

from typing import Any, Mapping, Sequence

from grating_sweep.domain.models import (
    BlazedProfile,
    GratingConfig,
    RectangularProfile,
    SinusoidalProfile,
    SweepConfiguration,
    TrapezoidalProfile,
)

__all__ = [
    "GEOMETRY_FIELDS",
    "default_config",
    "make_profile",
    "parse_geometry",
    "build_config",
    "config_from_input_items",
]

# Geometry values per grating type, in command-line order.
GEOMETRY_FIELDS: dict[str, tuple[str, ...]] = {
    "rectangular": ("depth_um", "valley_um"),
    "blazed": ("blaze_deg", "anti_blaze_deg"),
    "sinusoidal": ("depth_um",),
    "trapezoidal": ("depth_um", "valley_um", "blaze_deg", "anti_blaze_deg"),
}

_PROFILES = {
    "rectangular": RectangularProfile,
    "blazed": BlazedProfile,
    "sinusoidal": SinusoidalProfile,
    "trapezoidal": TrapezoidalProfile,
}


def default_config() -> SweepConfiguration:
    """
    Return a fully-populated sweep configuration.

    Constant incidence at 88° over 100–300 eV on a 1.6 μm blazed gold grating,
    the grazing-incidence soft x-ray case the tool was written for.
    """
    grating = GratingConfig(
        period_um=1.6,
        material="Au",
        profile=BlazedProfile(blaze_deg=3.2, anti_blaze_deg=30.0),
    )
    return SweepConfiguration(
        mode="constantIncidence",
        minimum=100.0,
        maximum=300.0,
        increment=5.0,
        incidence_deg=88.0,
        energy_units=True,
        grating=grating,
        N=5,
    )


def parse_geometry(text: str) -> list[float]:
    """'2.5,30' → [2.5, 30.0]."""
    parts = [p.strip() for p in text.split(",") if p.strip()]
    try:
        return [float(p) for p in parts]
    except ValueError:
        raise ValueError(f"gratingGeometry must be comma-separated numbers, got {text!r}") from None


def make_profile(grating_type: str, geometry: Sequence[float]) -> Any:
    """Build the tagged profile model for `grating_type` from its geometry values."""
    fields = GEOMETRY_FIELDS.get(grating_type)
    if fields is None:
        raise ValueError(
            f"gratingType must be one of {', '.join(GEOMETRY_FIELDS)}, got {grating_type!r}"
        )
    if len(geometry) != len(fields):
        raise ValueError(
            f"{grating_type} gratingGeometry needs {len(fields)} values "
            f"({', '.join(fields)}), got {len(geometry)}"
        )
    return _PROFILES[grating_type](**dict(zip(fields, (float(v) for v in geometry))))


def build_config(
    *,
    mode: str,
    minimum: float,
    maximum: float,
    increment: float,
    grating_type: str,
    grating_period: float,
    grating_geometry: Sequence[float] | str,
    grating_material: str,
    N: int,
    incidence_deg: float | None = None,
    included_deg: float | None = None,
    to_order: int | None = None,
    wavelength: float | None = None,
    energy_units: bool = False,
    debug_output: bool = False,
) -> SweepConfiguration:
    """
    Validate loose options into a SweepConfiguration.

    Raises ValueError (pydantic ValidationError is a ValueError) on any
    inconsistency, e.g. a missing mode parameter or the wrong geometry count.
    """
    geometry = (
        parse_geometry(grating_geometry) if isinstance(grating_geometry, str) else grating_geometry
    )
    payload: Mapping[str, Any] = {
        "mode": mode,
        "minimum": minimum,
        "maximum": maximum,
        "increment": increment,
        "incidence_deg": incidence_deg,
        "included_deg": included_deg,
        "to_order": to_order,
        "wavelength": wavelength,
        "energy_units": energy_units,
        "debug_output": debug_output,
        "grating": {
            "period_um": grating_period,
            "material": grating_material,
            "profile": make_profile(grating_type, geometry).model_dump(),
        },
        "N": N,
    }
    return SweepConfiguration.model_validate(payload)


def _optional(items: Mapping[str, Any], key: str, cast: Any) -> Any:
    value = items.get(key)
    return None if value is None or value == "" else cast(value)


def _flag(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() == "true"
    return bool(value)


def config_from_input_items(items: Mapping[str, Any]) -> SweepConfiguration:
    """
    Rebuild a configuration from ``# Input``-style keys (``min``, ``gratingType``, ...).

    Accepts the header of an output file as parsed by `read_output_file`, or a
    flat preset written with the same keys. Values may be strings or numbers.
    Raises KeyError for a missing required key and ValueError otherwise.
    """
    geometry = items["gratingGeometry"]
    return build_config(
        mode=items["mode"],
        minimum=float(items["min"]),
        maximum=float(items["max"]),
        increment=float(items["increment"]),
        grating_type=items["gratingType"],
        grating_period=float(items["gratingPeriod"]),
        grating_geometry=geometry if isinstance(geometry, str) else [float(v) for v in geometry],
        grating_material=items["gratingMaterial"],
        N=int(items["N"]),
        incidence_deg=_optional(items, "incidenceAngle", float),
        included_deg=_optional(items, "includedAngle", float),
        to_order=_optional(items, "toOrder", int),
        wavelength=_optional(items, "wavelength", float),
        energy_units=items.get("units") == "eV",
        debug_output=_flag(items.get("printDebugOutput", False)),
    )
