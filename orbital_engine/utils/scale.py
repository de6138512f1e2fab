"""Unit and scale conversions between physical and scene space.

Every conversion goes through ``SCALE_KM`` (km per scene unit) and
``AU`` (scene units per astronomical unit). Functions accept floats or
numpy arrays and never raise.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Union

import numpy as np

from orbital_engine.core.coordinate_transforms import geodetic_to_globe
from orbital_engine.utils.constants import (
    AU,
    DISPLAY_MULTIPLIERS,
    DISPLAY_RADIUS_OVERRIDES,
    MIN_DISPLAY_RADIUS,
    PHYSICAL_RADII_KM,
    R_EARTH,
    SCALE_KM,
)

if TYPE_CHECKING:
    from orbital_engine.core.bodies import Body

Scalar = Union[float, np.ndarray]

EARTH_RADIUS_UNITS: float = R_EARTH / SCALE_KM


def to_scene_units(km: Scalar) -> Scalar:
    """Kilometres to scene units."""
    return km / SCALE_KM


def to_km(units: Scalar) -> Scalar:
    """Scene units to kilometres."""
    return units * SCALE_KM


def from_au(au: Scalar) -> Scalar:
    """Astronomical units to scene units."""
    return au * AU


def to_au(units: Scalar) -> Scalar:
    """Scene units to astronomical units."""
    return units / AU


def display_radius(body: Body) -> float:
    """Radius used to draw a body, in scene units.

    Order of precedence: the body's own ``display_radius``, the override
    table, then physical radius times the per-class multiplier, floored
    at ``MIN_DISPLAY_RADIUS``.
    """
    if body.display_radius is not None:
        return body.display_radius
    if body.body_id in DISPLAY_RADIUS_OVERRIDES:
        return DISPLAY_RADIUS_OVERRIDES[body.body_id]

    physical_km = PHYSICAL_RADII_KM.get(body.body_id, 0.0)
    multiplier = DISPLAY_MULTIPLIERS.get(body.body_class.value, 1.0)
    return max(MIN_DISPLAY_RADIUS, to_scene_units(physical_km) * multiplier)


def globe_point(lat_deg: Scalar, lon_deg: Scalar, altitude_km: Scalar = 0.0) -> np.ndarray:
    """Earth-fixed point on (or above) the tracker globe, in scene units."""
    return geodetic_to_globe(lat_deg, lon_deg, radius=EARTH_RADIUS_UNITS + to_scene_units(altitude_km))
