"""Path sampling for orbit rings, probe trails and satellite tracks.

Sampling is the expensive part of a frame, so every path goes through a
``PathCache`` keyed by ``(body_id, kind, bucket)``. The bucket is the
simulated hour for closed orbits, the last tabulated index for probe
trails and the wall-clock second for satellite tracks.
"""

from __future__ import annotations

import enum
import logging
import math
import time as _time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Hashable, Optional

import numpy as np

from orbital_engine.core.bodies import Body, BodyClass
from orbital_engine.core.coordinate_transforms import ecliptic_to_scene, geodetic_to_globe, to_scene_axes
from orbital_engine.core.ephemeris import EphemerisAdapter, EphemerisError
from orbital_engine.utils.constants import (
    AU,
    COMET_SAMPLE_COUNT,
    DEFAULT_SAMPLE_COUNT,
    GLOBE_RADIUS,
    GROUND_TRACK_HALF_WINDOW_MINUTES,
    GROUND_TRACK_LIFT,
    GROUND_TRACK_STEP_SECONDS,
    MIN_SAMPLE_COUNT,
    ORBIT_CACHE_BUCKET_SECONDS,
    SATELLITE_ORBIT_SAMPLE_COUNT,
    SECONDS_PER_DAY,
    TRACK_CACHE_BUCKET_SECONDS,
)
from orbital_engine.utils.scale import to_scene_units
from orbital_engine.utils.time_utils import J2000_DATETIME, add_seconds, ensure_utc

logger = logging.getLogger(__name__)


class PathKind(str, enum.Enum):
    ORBIT = "orbit"
    TRAJECTORY = "trajectory"
    GROUND_TRACK = "ground_track"
    ORBIT_TRACK = "orbit_track"


@dataclass(frozen=True, eq=False)
class PathSample:
    """Ordered points for drawing one body's path, in scene units."""

    body_id: str
    kind: PathKind
    times: tuple[datetime, ...]
    points: np.ndarray = field(repr=False)  # (N, 3)
    closed: bool = False
    geodetic: Optional[np.ndarray] = field(default=None, repr=False)  # (N, 2) lat/lon deg

    def __len__(self) -> int:
        return len(self.points)


CacheKey = tuple[str, PathKind, Hashable]


class PathCache:
    """Per-scene path cache; cleared when the scene closes."""

    def __init__(self):
        self._entries: dict[CacheKey, PathSample] = {}
        self.hits = 0
        self.misses = 0

    def get_or_compute(self, key: CacheKey, compute: Callable[[], PathSample]) -> PathSample:
        sample = self._entries.get(key)
        if sample is not None:
            self.hits += 1
            return sample
        self.misses += 1
        # One bucket per (body, kind); older buckets are dead weight
        body_id, kind, _bucket = key
        for old in [k for k in self._entries if k[0] == body_id and k[1] == kind]:
            del self._entries[old]
        sample = compute()
        self._entries[key] = sample
        return sample

    def invalidate(self, body_id: str) -> None:
        for key in [k for k in self._entries if k[0] == body_id]:
            del self._entries[key]

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


class PathSampler:
    """Produces (and caches) paths for every body class."""

    def __init__(
        self,
        ephemeris: EphemerisAdapter,
        cache: Optional[PathCache] = None,
        wall_clock: Callable[[], float] = _time.monotonic,
        sample_count: int = DEFAULT_SAMPLE_COUNT,
        comet_sample_count: int = COMET_SAMPLE_COUNT,
    ):
        self._ephemeris = ephemeris
        self._cache = cache if cache is not None else PathCache()
        self._wall_clock = wall_clock
        self._sample_count = sample_count
        self._comet_sample_count = comet_sample_count

    @property
    def cache(self) -> PathCache:
        return self._cache

    def sample_path(self, body: Body, time: datetime, sample_count: Optional[int] = None) -> PathSample:
        """Path to draw for ``body`` at ``time``.

        Closed orbits for planets, the Moon and comets; the flown trail
        for probes; the ground track for satellites.
        """
        time = ensure_utc(time)
        if body.body_class is BodyClass.PROBE:
            return self.probe_trail(body, time)
        if not body.is_closed_orbit:
            return self.ground_track(body, time)

        if sample_count is None:
            sample_count = self._comet_sample_count if body.body_class is BodyClass.COMET else self._sample_count
        if sample_count < MIN_SAMPLE_COUNT:
            raise ValueError(f"sample_count must be at least {MIN_SAMPLE_COUNT}, got {sample_count}")

        bucket = (math.floor((time - J2000_DATETIME).total_seconds() / ORBIT_CACHE_BUCKET_SECONDS), sample_count)
        return self._cache.get_or_compute(
            (body.body_id, PathKind.ORBIT, bucket),
            lambda: self._closed_orbit(body, time, sample_count),
        )

    def probe_trail(self, body: Body, time: datetime) -> PathSample:
        """Tabulated samples from launch up to (never past) ``time``."""
        if body.trajectory is None:
            raise EphemerisError(f"Probe {body.body_id} has no trajectory", body.body_id)
        index = body.trajectory.index_at_or_before(time)
        return self._cache.get_or_compute(
            (body.body_id, PathKind.TRAJECTORY, index),
            lambda: self._trail(body, index),
        )

    def ground_track(self, body: Body, time: datetime) -> PathSample:
        """Sub-satellite points 45 minutes either side of ``time`` on the globe."""
        return self._cache.get_or_compute(
            (body.body_id, PathKind.GROUND_TRACK, self._wall_bucket()),
            lambda: self._ground_track(body, ensure_utc(time)),
        )

    def orbit_track(self, body: Body, time: datetime) -> PathSample:
        """One orbital period centred on ``time``, geocentric scene points."""
        return self._cache.get_or_compute(
            (body.body_id, PathKind.ORBIT_TRACK, self._wall_bucket()),
            lambda: self._orbit_track(body, ensure_utc(time)),
        )

    # =========================================================================
    # Builders
    # =========================================================================

    def _closed_orbit(self, body: Body, time: datetime, sample_count: int) -> PathSample:
        elements = self._ephemeris.osculating_elements(body, time)
        mean_anomaly = math.radians(elements.mean_anomaly)
        anomalies = np.linspace(mean_anomaly - math.pi, mean_anomaly + math.pi, sample_count)

        positions = elements.positions_for_mean_anomalies(anomalies)
        positions += self._ephemeris.parent_offset_au(body, time)
        points = ecliptic_to_scene(positions, AU)
        points[-1] = points[0]

        seconds_per_radian = SECONDS_PER_DAY / elements.mean_motion_rad_per_day
        times = tuple(add_seconds(time, (m - mean_anomaly) * seconds_per_radian) for m in anomalies)
        logger.debug("Sampled %d-point orbit for %s", sample_count, body.body_id)
        return PathSample(body.body_id, PathKind.ORBIT, times, points, closed=True)

    def _trail(self, body: Body, index: int) -> PathSample:
        trajectory = body.trajectory
        if index < 0:
            return PathSample(body.body_id, PathKind.TRAJECTORY, (), np.empty((0, 3)))
        points = ecliptic_to_scene(trajectory.positions[: index + 1], AU)
        return PathSample(body.body_id, PathKind.TRAJECTORY, trajectory.times[: index + 1], points)

    def _ground_track(self, body: Body, time: datetime) -> PathSample:
        track = self._ephemeris.propagator(body).get_ground_track(
            time, GROUND_TRACK_HALF_WINDOW_MINUTES, GROUND_TRACK_STEP_SECONDS
        )
        lats = np.array([p.latitude for p in track])
        lons = np.array([p.longitude for p in track])
        points = geodetic_to_globe(lats, lons, radius=GLOBE_RADIUS * GROUND_TRACK_LIFT)
        return PathSample(
            body.body_id,
            PathKind.GROUND_TRACK,
            tuple(p.datetime_utc for p in track),
            points,
            geodetic=np.column_stack([lats, lons]),
        )

    def _orbit_track(self, body: Body, time: datetime) -> PathSample:
        propagator = self._ephemeris.propagator(body)
        period = propagator.tle.orbital_period_seconds
        offsets = np.linspace(-period / 2.0, period / 2.0, SATELLITE_ORBIT_SAMPLE_COUNT)
        times = [add_seconds(time, float(s)) for s in offsets]
        states = propagator.propagate_many(times)
        points = to_scene_units(to_scene_axes(np.array([s.position_eci for s in states])))
        return PathSample(body.body_id, PathKind.ORBIT_TRACK, tuple(times), points)

    def _wall_bucket(self) -> int:
        return math.floor(self._wall_clock() / TRACK_CACHE_BUCKET_SECONDS)
