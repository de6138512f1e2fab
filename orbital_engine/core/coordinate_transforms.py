"""Coordinate frame transformations.

Provides conversions between:
- J2000 equatorial <-> J2000 ecliptic (heliocentric bodies)
- Perifocal (orbital plane) -> inertial for Keplerian elements
- ECI (TEME) -> ECEF -> geodetic WGS84 lat/lon/alt (satellites)
- Geodetic -> display globe surface points
- Geodetic -> coarse ground region labels
- Inertial -> scene axes (the one place the renderer convention lives)

All angles in radians internally unless suffixed with _deg.
"""

from __future__ import annotations

import numpy as np

from orbital_engine.utils.constants import (
    DEG_TO_RAD,
    ECCENTRICITY_SQ,
    GLOBE_RADIUS,
    GROUND_TRACK_LIFT,
    OBLIQUITY_J2000_DEG,
    R_EARTH_EQUATORIAL,
    RAD_TO_DEG,
)

_COS_EPS = np.cos(OBLIQUITY_J2000_DEG * DEG_TO_RAD)
_SIN_EPS = np.sin(OBLIQUITY_J2000_DEG * DEG_TO_RAD)


# =============================================================================
# Scene axes
# =============================================================================

def to_scene_axes(vectors: np.ndarray) -> np.ndarray:
    """Swap inertial y/z so the reference-plane normal becomes scene "up".

    Works on a single [x, y, z] vector or an (N, 3) array. Ecliptic
    north (heliocentric scenes) and the celestial pole (geocentric
    scenes) both map to scene +y.
    """
    return np.asarray(vectors, dtype=np.float64)[..., [0, 2, 1]]


def ecliptic_to_scene(position: np.ndarray, scale: float) -> np.ndarray:
    """Ecliptic coordinates in some unit to scene units.

    Args:
        position: [x, y, z] or (N, 3) in the source unit
        scale: scene units per source unit
    """
    return to_scene_axes(position) * scale


# =============================================================================
# Equatorial <-> Ecliptic (J2000)
# =============================================================================

def equatorial_to_ecliptic(position: np.ndarray) -> np.ndarray:
    """Rotate J2000 mean-equator vectors onto the J2000 ecliptic.

    Accepts [x, y, z] or (N, 3).
    """
    p = np.asarray(position, dtype=np.float64)
    result = np.empty_like(p)
    result[..., 0] = p[..., 0]
    result[..., 1] = _COS_EPS * p[..., 1] + _SIN_EPS * p[..., 2]
    result[..., 2] = -_SIN_EPS * p[..., 1] + _COS_EPS * p[..., 2]
    return result


# =============================================================================
# Perifocal -> Inertial
# =============================================================================

def perifocal_rotation(
    ascending_node_deg: float, inclination_deg: float, arg_periapsis_deg: float
) -> np.ndarray:
    """3x3 rotation taking perifocal (P, Q, W) vectors to the reference frame.

    R = Rz(ascending node) . Rx(inclination) . Rz(argument of periapsis)
    """
    om = ascending_node_deg * DEG_TO_RAD
    inc = inclination_deg * DEG_TO_RAD
    w = arg_periapsis_deg * DEG_TO_RAD

    cos_om, sin_om = np.cos(om), np.sin(om)
    cos_i, sin_i = np.cos(inc), np.sin(inc)
    cos_w, sin_w = np.cos(w), np.sin(w)

    return np.array([
        [cos_om * cos_w - sin_om * sin_w * cos_i, -cos_om * sin_w - sin_om * cos_w * cos_i, sin_om * sin_i],
        [sin_om * cos_w + cos_om * sin_w * cos_i, -sin_om * sin_w + cos_om * cos_w * cos_i, -cos_om * sin_i],
        [sin_w * sin_i, cos_w * sin_i, cos_i],
    ])


# =============================================================================
# ECI <-> ECEF
# =============================================================================

def eci_to_ecef_batch(
    positions_eci: np.ndarray, gmst_array: np.ndarray
) -> np.ndarray:
    """Vectorized ECI to ECEF conversion for (N, 3) positions."""
    cos_g = np.cos(gmst_array)
    sin_g = np.sin(gmst_array)

    result = np.empty_like(positions_eci)
    result[:, 0] = cos_g * positions_eci[:, 0] + sin_g * positions_eci[:, 1]
    result[:, 1] = -sin_g * positions_eci[:, 0] + cos_g * positions_eci[:, 1]
    result[:, 2] = positions_eci[:, 2]
    return result


# =============================================================================
# ECEF -> Geodetic (WGS84)
# =============================================================================

def ecef_to_geodetic_batch(
    positions_ecef: np.ndarray,
) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Bowring iteration with a fixed count so it vectorizes.

    Args:
        positions_ecef: shape (N, 3) ECEF positions in km

    Returns:
        (latitudes_deg, longitudes_deg, altitudes_km) each shape (N,)
    """
    x = positions_ecef[:, 0]
    y = positions_ecef[:, 1]
    z = positions_ecef[:, 2]
    a = R_EARTH_EQUATORIAL
    e2 = ECCENTRICITY_SQ

    lon = np.arctan2(y, x)
    p = np.sqrt(x ** 2 + y ** 2)
    lat = np.arctan2(z, p * (1.0 - e2))

    for _ in range(5):
        sin_lat = np.sin(lat)
        n = a / np.sqrt(1.0 - e2 * sin_lat ** 2)
        lat = np.arctan2(z + e2 * n * sin_lat, p)

    sin_lat = np.sin(lat)
    cos_lat = np.cos(lat)
    n = a / np.sqrt(1.0 - e2 * sin_lat ** 2)

    alt = np.where(
        np.abs(cos_lat) > 1e-10,
        p / np.where(np.abs(cos_lat) > 1e-10, cos_lat, 1.0) - n,
        np.abs(z) / np.maximum(np.abs(sin_lat), 1e-20) - n * (1.0 - e2),
    )

    return (lat * RAD_TO_DEG, lon * RAD_TO_DEG, alt)


# =============================================================================
# Geodetic -> Globe
# =============================================================================

def geodetic_to_globe(
    lat_deg: np.ndarray,
    lon_deg: np.ndarray,
    radius: float = GLOBE_RADIUS * GROUND_TRACK_LIFT,
) -> np.ndarray:
    """Project latitude/longitude onto a y-up display globe.

    Longitude 0 faces scene +z, east is +x, north pole is +y.

    Returns:
        shape (N, 3) points, or (3,) for scalar input
    """
    lat = np.asarray(lat_deg, dtype=np.float64) * DEG_TO_RAD
    lon = np.asarray(lon_deg, dtype=np.float64) * DEG_TO_RAD
    return np.stack([
        radius * np.cos(lat) * np.sin(lon),
        radius * np.sin(lat),
        radius * np.cos(lat) * np.cos(lon),
    ], axis=-1)


# =============================================================================
# Ground regions
# =============================================================================

def ground_region(lat_deg: float, lon_deg: float) -> str:
    """Coarse geographic label for a sub-satellite point."""
    if lat_deg > 60.0:
        return "Arctic"
    if lat_deg < -60.0:
        return "Antarctic"
    if -30.0 < lon_deg < 60.0:
        if lat_deg > 35.0:
            return "Europe"
        return "North Africa / Middle East" if lat_deg > 0.0 else "Africa"
    if 60.0 <= lon_deg < 150.0:
        if lat_deg > 35.0:
            return "Russia / Central Asia"
        return "South Asia" if lat_deg > 0.0 else "Southeast Asia / Australia"
    if -170.0 <= lon_deg < -30.0:
        if lat_deg > 35.0:
            return "North America"
        return "Central America / Caribbean" if lat_deg > 0.0 else "South America"
    return "Pacific Ocean"
