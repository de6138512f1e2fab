"""Analytic planetary theory via ERFA.

Wraps ``erfa.plan94`` (Mercury..Neptune), ``erfa.epv00`` (Earth) and
``erfa.moon98`` (Moon) behind heliocentric/geocentric vectors on the
J2000 ecliptic, in AU and AU/day. ERFA flags dates outside its fitted
range with ``ErfaWarning``; accuracy degrades there but a value is still
returned, so those warnings are silenced.
"""

from __future__ import annotations

import warnings

import erfa
import numpy as np

from orbital_engine.core.coordinate_transforms import equatorial_to_ecliptic
from orbital_engine.utils.time_utils import JulianDate

EARTH_ERFA_INDEX = 3
PLAN94_BODIES = frozenset(range(1, 9))

# (position AU, velocity AU/day), ecliptic
State = tuple[np.ndarray, np.ndarray]


def _ecliptic_state(pv) -> State:
    position = np.array(pv["p"], dtype=np.float64)
    velocity = np.array(pv["v"], dtype=np.float64)
    return equatorial_to_ecliptic(position), equatorial_to_ecliptic(velocity)


def earth_state(jd: JulianDate) -> State:
    """Earth's heliocentric ecliptic state."""
    with warnings.catch_warnings():
        warnings.simplefilter("ignore", erfa.ErfaWarning)
        pvh, _pvb = erfa.epv00(jd.jd, jd.fr)
    return _ecliptic_state(pvh)


def planet_state(erfa_index: int, jd: JulianDate) -> State:
    """Heliocentric ecliptic state for ERFA planet number 1-8.

    Number 3 is the Earth itself (not the Earth-Moon barycentre that
    ``plan94`` would return).
    """
    if erfa_index == EARTH_ERFA_INDEX:
        return earth_state(jd)
    if erfa_index not in PLAN94_BODIES:
        raise ValueError(f"ERFA planet number must be 1-8, got {erfa_index}")

    with warnings.catch_warnings():
        warnings.simplefilter("ignore", erfa.ErfaWarning)
        pv = erfa.plan94(jd.jd, jd.fr, erfa_index)
    return _ecliptic_state(pv)


def moon_geocentric_state(jd: JulianDate) -> State:
    """Geocentric ecliptic state of the Moon."""
    with warnings.catch_warnings():
        warnings.simplefilter("ignore", erfa.ErfaWarning)
        pv = erfa.moon98(jd.jd, jd.fr)
    return _ecliptic_state(pv)


def earth_heliocentric(jd: JulianDate) -> np.ndarray:
    return earth_state(jd)[0]


def planet_heliocentric(erfa_index: int, jd: JulianDate) -> np.ndarray:
    return planet_state(erfa_index, jd)[0]


def moon_geocentric(jd: JulianDate) -> np.ndarray:
    return moon_geocentric_state(jd)[0]


def moon_heliocentric(jd: JulianDate) -> np.ndarray:
    """Moon position relative to the Sun: Earth plus geocentric Moon."""
    return earth_heliocentric(jd) + moon_geocentric(jd)
