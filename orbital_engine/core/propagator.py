"""SGP4-based propagation for Earth-orbiting objects.

Wraps the sgp4 library with geodetic conversion and batch propagation
for ground tracks. Propagation far from the element epoch is allowed
and flagged as degraded. When SGP4 itself reports a runtime error
(decayed orbit, eccentricity out of range) the position falls back to
two-body motion of the mean elements, also flagged, so an object never
drops out of a scene because its elements went stale. Each state also
reports whether the object sits in Earth's cylindrical shadow.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import datetime

import numpy as np
from sgp4.api import Satrec

from orbital_engine.core.coordinate_transforms import (
    ecef_to_geodetic_batch,
    eci_to_ecef_batch,
)
from orbital_engine.core.kepler import OrbitalElements
from orbital_engine.core.tle_parser import TLEData
from orbital_engine.utils.constants import (
    AU_KM,
    MU_EARTH,
    R_EARTH,
    SECONDS_PER_DAY,
    TLE_STALE_DAYS,
    TWO_PI,
)
from orbital_engine.utils.time_utils import (
    add_seconds,
    compute_gmst_batch,
    datetime_to_jd,
    ensure_utc,
    generate_time_steps,
    sun_position_eci_batch,
)

logger = logging.getLogger(__name__)


class PropagationError(Exception):
    """Raised when an element set cannot seed SGP4 at all."""

    def __init__(
        self, message: str, error_code: int = 0, satellite_name: str = ""
    ):
        self.error_code = error_code
        self.satellite_name = satellite_name
        super().__init__(message)

    @staticmethod
    def error_message(code: int) -> str:
        messages = {
            1: "Mean elements: eccentricity >= 1.0 or < -0.001 or a < 0.95",
            2: "Mean motion less than 0.0",
            3: "Perturbed eccentricity < 0.0 or > 1.0",
            4: "Semi-latus rectum < 0.0",
            5: "Epoch elements are sub-orbital",
            6: "Satellite has decayed",
        }
        return messages.get(code, f"Unknown SGP4 error code {code}")


@dataclass(frozen=True, slots=True)
class SatelliteState:
    """State of an Earth-orbiting object at one instant."""

    datetime_utc: datetime
    position_eci: np.ndarray  # [x, y, z] km, TEME
    velocity_eci: np.ndarray  # [vx, vy, vz] km/s
    latitude: float  # degrees [-90, 90]
    longitude: float  # degrees [-180, 180]
    altitude: float  # km above WGS84 ellipsoid
    speed: float  # km/s
    degraded: bool
    in_shadow: bool = False


@dataclass(frozen=True, slots=True)
class GroundTrackPoint:
    """A single point on a satellite's ground track."""

    datetime_utc: datetime
    latitude: float  # degrees
    longitude: float  # degrees
    altitude: float  # km


class SatellitePropagator:
    """SGP4 propagator for one element set."""

    def __init__(self, tle_data: TLEData, stale_days: float = TLE_STALE_DAYS):
        """Initialize the SGP4 record; a bad element set is a catalog bug."""
        self._tle = tle_data
        self._stale_days = stale_days
        self._satellite = Satrec.twoline2rv(tle_data.line1, tle_data.line2)

        if self._satellite.error != 0:
            raise PropagationError(
                f"SGP4 init failed for {tle_data.name}: "
                f"{PropagationError.error_message(self._satellite.error)}",
                error_code=self._satellite.error,
                satellite_name=tle_data.name,
            )

        a_km = (MU_EARTH / (tle_data.mean_motion * TWO_PI / SECONDS_PER_DAY) ** 2) ** (1.0 / 3.0)
        self._mean_elements = OrbitalElements(
            semi_major_axis=a_km / AU_KM,
            eccentricity=tle_data.eccentricity,
            inclination=tle_data.inclination,
            ascending_node=tle_data.raan,
            arg_periapsis=tle_data.arg_perigee,
            mean_anomaly=tle_data.mean_anomaly,
            epoch_jd=datetime_to_jd(tle_data.epoch_datetime).full,
            mean_motion=tle_data.mean_motion * 360.0,
        )

    @property
    def tle(self) -> TLEData:
        return self._tle

    def is_stale(self, dt: datetime) -> bool:
        return abs(self._tle.age_days(dt)) > self._stale_days

    def propagate(self, dt: datetime) -> SatelliteState:
        """Propagate to a single datetime. Never raises for a valid record."""
        return self.propagate_many([ensure_utc(dt)])[0]

    def propagate_many(self, times: list[datetime]) -> list[SatelliteState]:
        """Vectorized propagation to an explicit list of datetimes."""
        jds = [datetime_to_jd(t) for t in times]
        jd_arr = np.array([j.jd for j in jds])
        fr_arr = np.array([j.fr for j in jds])
        return self._propagate_arrays(list(times), jd_arr, fr_arr)

    def propagate_range(
        self,
        start: datetime,
        end: datetime,
        step_seconds: float = 60.0,
    ) -> list[SatelliteState]:
        """Batch propagation at a fixed step, inclusive of both ends."""
        times, jd_arr, fr_arr = generate_time_steps(start, end, step_seconds)
        return self._propagate_arrays(times, jd_arr, fr_arr)

    def get_ground_track(
        self,
        center: datetime,
        half_window_minutes: float,
        step_seconds: float = 60.0,
    ) -> list[GroundTrackPoint]:
        """Sub-satellite points from ``center - window`` to ``center + window``.

        The window is clipped at the representable datetime range.
        """
        window = half_window_minutes * 60.0
        center = ensure_utc(center)
        return [
            GroundTrackPoint(
                datetime_utc=s.datetime_utc,
                latitude=s.latitude,
                longitude=s.longitude,
                altitude=s.altitude,
            )
            for s in self.propagate_range(add_seconds(center, -window), add_seconds(center, window), step_seconds)
        ]

    def _propagate_arrays(
        self, times: list[datetime], jd_arr: np.ndarray, fr_arr: np.ndarray
    ) -> list[SatelliteState]:
        errors, positions, velocities = self._satellite.sgp4_array(jd_arr, fr_arr)
        positions = np.array(positions, dtype=np.float64)
        velocities = np.array(velocities, dtype=np.float64)

        failed = np.asarray(errors) != 0
        if np.any(failed):
            logger.debug(
                "%d/%d SGP4 points failed for %s, using two-body fallback",
                int(np.sum(failed)),
                len(times),
                self._tle.name,
            )
            for i in np.flatnonzero(failed):
                jd_full = jd_arr[i] + fr_arr[i]
                positions[i], velocities[i] = self._two_body(jd_full)

        gmst_arr = compute_gmst_batch(jd_arr, fr_arr)
        ecef_arr = eci_to_ecef_batch(positions, gmst_arr)
        lats, lons, alts = ecef_to_geodetic_batch(ecef_arr)
        speeds = np.linalg.norm(velocities, axis=1)
        shadows = _in_shadow_batch(positions, sun_position_eci_batch(jd_arr, fr_arr))

        return [
            SatelliteState(
                datetime_utc=t,
                position_eci=positions[i].copy(),
                velocity_eci=velocities[i].copy(),
                latitude=float(lats[i]),
                longitude=float(lons[i]),
                altitude=float(alts[i]),
                speed=float(speeds[i]),
                degraded=bool(failed[i]) or self.is_stale(t),
                in_shadow=bool(shadows[i]),
            )
            for i, t in enumerate(times)
        ]

    def _two_body(self, jd: float) -> tuple[np.ndarray, np.ndarray]:
        """Unperturbed Keplerian position/velocity (km, km/s) of the mean elements."""
        step_days = 1.0 / SECONDS_PER_DAY
        p0 = self._mean_elements.state_at(jd).position * AU_KM
        p1 = self._mean_elements.state_at(jd + step_days).position * AU_KM
        if not np.all(np.isfinite(p0)):
            radius = self._mean_elements.semi_major_axis * AU_KM
            p0 = np.array([radius, 0.0, 0.0])
            p1 = p0 + np.array([0.0, math.sqrt(MU_EARTH / radius), 0.0])
        return p0, p1 - p0


def _in_shadow_batch(positions_eci: np.ndarray, sun_eci: np.ndarray) -> np.ndarray:
    """Cylindrical Earth shadow test for N positions against N Sun vectors."""
    sun_hat = sun_eci / np.linalg.norm(sun_eci, axis=1, keepdims=True)
    proj = np.einsum("ij,ij->i", positions_eci, sun_hat)
    perp = positions_eci - proj[:, None] * sun_hat
    perp_dist = np.linalg.norm(perp, axis=1)
    return (proj <= 0) & (perp_dist < R_EARTH)
