"""Tabulated deep-space probe trajectories.

A trajectory is an ordered table of heliocentric ecliptic positions
(AU) keyed by time. Positions between samples are linearly
interpolated; outside the table they are linearly extrapolated from the
two nearest samples and flagged.
"""

from __future__ import annotations

import bisect
import logging
import math
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Optional, Sequence

import numpy as np

from orbital_engine.utils.constants import AU_KM, SPEED_OF_LIGHT
from orbital_engine.utils.time_utils import ensure_utc

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Milestone:
    """A named mission event, optionally tied to a planet."""

    date: datetime
    name: str
    body: Optional[str] = None


@dataclass(frozen=True, slots=True)
class TrajectoryFix:
    """Interpolated or extrapolated position on a trajectory."""

    position: np.ndarray  # [x, y, z] AU, ecliptic
    extrapolated: bool


@dataclass(frozen=True, eq=False)
class ProbeTrajectory:
    """Time-ordered heliocentric samples for one mission."""

    launch: datetime
    times: tuple[datetime, ...]
    positions: np.ndarray = field(repr=False)  # (N, 3) AU
    milestones: tuple[Milestone, ...] = ()

    def __post_init__(self) -> None:
        if len(self.times) < 2:
            raise ValueError("A trajectory needs at least two samples")
        if len(self.times) != len(self.positions):
            raise ValueError("Trajectory times and positions differ in length")
        if any(b <= a for a, b in zip(self.times, self.times[1:])):
            raise ValueError("Trajectory times must be strictly increasing")
        object.__setattr__(self, "_epochs", [t.timestamp() for t in self.times])

    @property
    def start(self) -> datetime:
        return self.times[0]

    @property
    def end(self) -> datetime:
        return self.times[-1]

    def index_at_or_before(self, time: datetime) -> int:
        """Index of the last sample not after ``time`` (-1 if none)."""
        return bisect.bisect_right(self._epochs, ensure_utc(time).timestamp()) - 1

    def fix(self, time: datetime) -> TrajectoryFix:
        """Position at ``time``; extrapolates linearly outside the table."""
        ts = ensure_utc(time).timestamp()
        epochs = self._epochs
        extrapolated = ts < epochs[0] or ts > epochs[-1]

        i = bisect.bisect_right(epochs, ts) - 1
        i = min(max(i, 0), len(epochs) - 2)

        t0, t1 = epochs[i], epochs[i + 1]
        frac = (ts - t0) / (t1 - t0)
        p0, p1 = self.positions[i], self.positions[i + 1]
        return TrajectoryFix(position=p0 + frac * (p1 - p0), extrapolated=extrapolated)

    def milestones_until(self, time: datetime) -> list[Milestone]:
        """Milestones reached on or before ``time``."""
        time = ensure_utc(time)
        return [m for m in self.milestones if m.date <= time]


def decimal_year_to_datetime(year: float) -> datetime:
    whole = int(math.floor(year))
    start = datetime(whole, 1, 1, tzinfo=timezone.utc)
    length = datetime(whole + 1, 1, 1, tzinfo=timezone.utc) - start
    return start + (year - whole) * length


def light_travel_time_hours(distance_au: float) -> float:
    """One-way light time from a distance in AU."""
    return distance_au * AU_KM / SPEED_OF_LIGHT / 3600.0


def build_flyout_trajectory(
    launch: datetime,
    key_distances: Sequence[tuple[float, float]],
    heading_deg: float,
    elevation_deg: float,
    step_days: float = 36.5,
    end_year: Optional[float] = None,
    milestones: Sequence[Milestone] = (),
) -> ProbeTrajectory:
    """Approximate an outbound probe path from distance milestones.

    Distances (AU) are interpolated between ``(decimal_year, distance)``
    key points. The in-ecliptic direction swings from 0 to
    ``heading_deg`` as gravity assists bend the path, and the path
    leaves the ecliptic at ``elevation_deg``.
    """
    years = [y for y, _ in key_distances]
    distances = [d for _, d in key_distances]
    launch = ensure_utc(launch)
    launch_year = years[0]
    last_year = end_year if end_year is not None else years[-1]

    times: list[datetime] = []
    points: list[tuple[float, float, float]] = []
    step = timedelta(days=step_days)
    t = launch
    end = decimal_year_to_datetime(last_year)
    elev = math.radians(elevation_deg)

    while t <= end:
        year = launch_year + (t - launch).total_seconds() / (365.25 * 86400.0)
        distance = float(np.interp(year, years, distances))
        since_launch = year - launch_year

        if since_launch < 3:
            angle = 0.0
        elif since_launch < 5:
            angle = heading_deg * 0.3
        else:
            angle = heading_deg * min(1.0, (since_launch - 3) / 10)
        # Leave the ecliptic gradually after the first flyby
        tilt = elev * min(1.0, since_launch / 4.0)

        a = math.radians(angle)
        points.append((
            distance * math.cos(a) * math.cos(tilt),
            distance * math.sin(a) * math.cos(tilt),
            distance * math.sin(tilt),
        ))
        times.append(t)
        t += step

    logger.debug("Built trajectory with %d samples from %s", len(times), launch.date())
    return ProbeTrajectory(
        launch=launch,
        times=tuple(times),
        positions=np.array(points),
        milestones=tuple(milestones),
    )
