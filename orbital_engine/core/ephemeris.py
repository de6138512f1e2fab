"""Ephemeris adapter: one entry point for "where is this body now".

Dispatches on the body class to the right source (ERFA for planets and
the Moon, tabulated trajectories for probes, SGP4 for satellites,
Keplerian elements for comets) and returns positions in scene units.
Heliocentric scenes use AU-based scene coordinates on the ecliptic;
Earth-centred scenes use kilometre-based coordinates on the equator.
"""

from __future__ import annotations

import logging
import math
from datetime import datetime
from typing import Iterable, Optional

import numpy as np

from orbital_engine.core.bodies import Body, BodyClass, Position
from orbital_engine.core.catalog import BodyCatalog, UnknownBodyError
from orbital_engine.core.coordinate_transforms import ecliptic_to_scene, ground_region, to_scene_axes
from orbital_engine.core.kepler import OrbitalElements, elements_from_state, vis_viva_speed_km_s
from orbital_engine.core.planetary import (
    earth_heliocentric,
    moon_geocentric_state,
    moon_heliocentric,
    planet_heliocentric,
    planet_state,
)
from orbital_engine.core.propagator import SatellitePropagator, SatelliteState
from orbital_engine.utils.constants import (
    AU,
    GM_EARTH_MOON_AU3_DAY2,
    MAX_TAIL_LENGTH_AU,
    MIN_TAIL_LENGTH_AU,
    TAIL_VISIBLE_AU,
    TLE_STALE_DAYS,
)
from orbital_engine.utils.scale import globe_point, to_scene_units
from orbital_engine.utils.time_utils import datetime_to_jd, ensure_utc

logger = logging.getLogger(__name__)

__all__ = [
    "EphemerisAdapter",
    "EphemerisError",
    "UnknownBodyError",
    "tail_length",
    "tail_visible",
]


class EphemerisError(Exception):
    """A body is missing the parameter set its class needs."""

    def __init__(self, message: str, body_id: str = ""):
        self.body_id = body_id
        super().__init__(message)


def tail_length(distance_au: float) -> float:
    """Display length of a comet tail in AU; zero once the tail is not visible."""
    if not tail_visible(distance_au):
        return 0.0
    return min(MAX_TAIL_LENGTH_AU, max(MIN_TAIL_LENGTH_AU, 5.0 / math.sqrt(distance_au)))


def tail_visible(distance_au: float) -> bool:
    return 0.0 < distance_au < TAIL_VISIBLE_AU


class EphemerisAdapter:
    """Positions for catalog bodies at arbitrary instants.

    Deterministic: the same (body, time) always gives the same result.
    SGP4 records are built lazily and kept per element set; a refreshed
    TLE gets a fresh record.
    """

    def __init__(self, catalog: Optional[BodyCatalog] = None, stale_days: float = TLE_STALE_DAYS):
        self._catalog = catalog
        self._stale_days = stale_days
        self._propagators: dict[tuple[str, str, str], SatellitePropagator] = {}

    # =========================================================================
    # Scene positions
    # =========================================================================

    def position(self, body: Body, time: datetime) -> Position:
        """Scene-space position of ``body`` at ``time``."""
        time = ensure_utc(time)
        if body.body_class is BodyClass.SATELLITE:
            return self._satellite_position(body, time)
        if body.body_class is BodyClass.PROBE:
            fix = self._require_trajectory(body).fix(time)
            return Position.from_vector(ecliptic_to_scene(fix.position, AU), extrapolated=fix.extrapolated)

        helio = self.heliocentric_au(body, time)
        if body.body_class is not BodyClass.COMET:
            return Position.from_vector(ecliptic_to_scene(helio, AU))

        distance = float(np.linalg.norm(helio))
        direction = to_scene_axes(helio / distance) if distance > 0 else None
        return Position.from_vector(
            ecliptic_to_scene(helio, AU),
            tail_direction=tuple(float(c) for c in direction) if direction is not None else None,
            speed_km_s=vis_viva_speed_km_s(distance, body.elements.semi_major_axis),
        )

    def position_of(self, body_id: str, time: datetime) -> Position:
        return self.position(self._lookup(body_id), time)

    def globe_position(self, body: Body, time: datetime) -> Position:
        """Earth-fixed position of a satellite over the tracker globe."""
        state = self.satellite_state(body, time)
        return Position.from_vector(
            globe_point(state.latitude, state.longitude, state.altitude),
            degraded=state.degraded,
            latitude=state.latitude,
            longitude=state.longitude,
            altitude_km=state.altitude,
            speed_km_s=state.speed,
            in_shadow=state.in_shadow,
            region=ground_region(state.latitude, state.longitude),
        )

    # =========================================================================
    # Physical vectors
    # =========================================================================

    def heliocentric_au(self, body: Body, time: datetime) -> np.ndarray:
        """Heliocentric ecliptic position in AU (planets, Moon, comets, probes)."""
        jd = datetime_to_jd(time)
        if body.body_class is BodyClass.PLANET:
            if body.erfa_index is None:
                raise EphemerisError(f"Planet {body.body_id} has no ERFA planet number", body.body_id)
            return planet_heliocentric(body.erfa_index, jd)
        if body.body_class is BodyClass.MOON:
            if body.parent_id != "earth":
                raise EphemerisError(f"No lunar theory for parent {body.parent_id!r}", body.body_id)
            return moon_heliocentric(jd)
        if body.body_class is BodyClass.COMET:
            return self._require_elements(body).state_at(jd.full).position
        if body.body_class is BodyClass.PROBE:
            return self._require_trajectory(body).fix(time).position
        raise EphemerisError(f"{body.body_id} is not heliocentric", body.body_id)

    def osculating_elements(self, body: Body, time: datetime) -> OrbitalElements:
        """Elements of the orbit ``body`` is on at ``time``, relative to its parent.

        Planets and the Moon take them from the same ERFA state that places
        them, so a ring sampled from these elements passes through
        ``position(body, time)``.
        """
        jd = datetime_to_jd(ensure_utc(time))
        if body.body_class is BodyClass.PLANET:
            if body.erfa_index is None:
                raise EphemerisError(f"Planet {body.body_id} has no ERFA planet number", body.body_id)
            return elements_from_state(*planet_state(body.erfa_index, jd), jd.full)
        if body.body_class is BodyClass.MOON:
            if body.parent_id != "earth":
                raise EphemerisError(f"No lunar theory for parent {body.parent_id!r}", body.body_id)
            return elements_from_state(*moon_geocentric_state(jd), jd.full, mu=GM_EARTH_MOON_AU3_DAY2)
        if body.body_class is BodyClass.COMET:
            return self._require_elements(body).at(jd.full)
        raise EphemerisError(f"{body.body_id} does not follow a closed orbit", body.body_id)

    def parent_offset_au(self, body: Body, time: datetime) -> np.ndarray:
        """Heliocentric position of the body an orbit is drawn around."""
        if body.parent_id is None:
            return np.zeros(3)
        if body.parent_id == "earth":
            return earth_heliocentric(datetime_to_jd(time))
        return self.heliocentric_au(self._lookup(body.parent_id), time)

    def satellite_state(self, body: Body, time: datetime) -> SatelliteState:
        return self.propagator(body).propagate(ensure_utc(time))

    def propagator(self, body: Body) -> SatellitePropagator:
        """SGP4 record for a satellite's current element set."""
        if body.tle is None:
            raise EphemerisError(f"Satellite {body.body_id} has no element set", body.body_id)
        key = (body.body_id, body.tle.line1, body.tle.line2)
        propagator = self._propagators.get(key)
        if propagator is None:
            # Drop records for element sets this body no longer uses
            for stale in [k for k in self._propagators if k[0] == body.body_id]:
                del self._propagators[stale]
            propagator = SatellitePropagator(body.tle, stale_days=self._stale_days)
            self._propagators[key] = propagator
            logger.debug("Initialized SGP4 for %s (epoch %s)", body.body_id, body.tle.epoch_datetime)
        return propagator

    def distance_au(self, body: Body, time: datetime) -> float:
        return float(np.linalg.norm(self.heliocentric_au(body, time)))

    def comets_by_distance(self, bodies: Iterable[Body], time: datetime) -> list[tuple[Body, float]]:
        """Comets with their heliocentric distance (AU), closest first."""
        ranked = [
            (body, self.distance_au(body, time))
            for body in bodies
            if body.body_class is BodyClass.COMET
        ]
        return sorted(ranked, key=lambda pair: pair[1])

    def clear(self) -> None:
        self._propagators.clear()

    # =========================================================================
    # Internals
    # =========================================================================

    def _satellite_position(self, body: Body, time: datetime) -> Position:
        state = self.satellite_state(body, time)
        return Position.from_vector(
            to_scene_units(to_scene_axes(state.position_eci)),
            degraded=state.degraded,
            latitude=state.latitude,
            longitude=state.longitude,
            altitude_km=state.altitude,
            speed_km_s=state.speed,
            in_shadow=state.in_shadow,
            region=ground_region(state.latitude, state.longitude),
        )

    def _lookup(self, body_id: str) -> Body:
        if self._catalog is None:
            raise UnknownBodyError(body_id)
        return self._catalog.get(body_id)

    @staticmethod
    def _require_elements(body: Body):
        if body.elements is None:
            raise EphemerisError(f"{body.body_id} has no orbital elements", body.body_id)
        return body.elements

    @staticmethod
    def _require_trajectory(body: Body):
        if body.trajectory is None:
            raise EphemerisError(f"Probe {body.body_id} has no trajectory", body.body_id)
        return body.trajectory
