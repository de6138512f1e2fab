"""Time conversion utilities for ephemeris and propagation.

Provides conversions between Python datetime, split Julian Date, GMST
and TLE epoch formats, a low-precision Sun direction for shadow checks,
plus display formatting for the simulation clock and probe readouts.
Julian dates are computed from exact datetime arithmetic so they stay
valid over the full ``datetime`` range, not only 1900-2100.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import numpy as np

from orbital_engine.utils.constants import (
    AU_KM,
    DAYS_PER_JULIAN_CENTURY,
    DEG_TO_RAD,
    J2000_JD,
    SECONDS_PER_DAY,
    TWO_PI,
)

J2000_DATETIME = datetime(2000, 1, 1, 12, 0, 0, tzinfo=timezone.utc)
MIN_DATETIME = datetime.min.replace(tzinfo=timezone.utc)
MAX_DATETIME = datetime.max.replace(tzinfo=timezone.utc)


@dataclass(frozen=True, slots=True)
class JulianDate:
    """Split Julian Date for SGP4 and ERFA compatibility.

    Both libraries take the date as two floats (whole-day part and
    fraction) to keep sub-millisecond precision.
    """

    jd: float
    fr: float

    @property
    def full(self) -> float:
        return self.jd + self.fr


def ensure_utc(dt: datetime) -> datetime:
    """Attach UTC to naive datetimes; convert aware ones to UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def datetime_to_jd(dt: datetime) -> JulianDate:
    """Convert a datetime (UTC) to a split Julian Date."""
    delta = ensure_utc(dt) - J2000_DATETIME
    seconds = delta.seconds + delta.microseconds / 1e6
    # J2000 falls at noon; whole JD days below start at midnight
    jd = J2000_JD - 0.5 + delta.days
    fr = 0.5 + seconds / SECONDS_PER_DAY
    if fr >= 1.0:
        jd += 1.0
        fr -= 1.0
    return JulianDate(jd=jd, fr=fr)


def jd_to_datetime(jd: JulianDate) -> datetime:
    """Convert a split Julian Date back to a UTC datetime."""
    days = (jd.jd - J2000_JD) + jd.fr
    return J2000_DATETIME + timedelta(days=days)


def add_seconds(dt: datetime, seconds: float) -> datetime:
    """Offset a datetime, clamping to the representable range."""
    try:
        return dt + timedelta(seconds=seconds)
    except OverflowError:
        return MAX_DATETIME if seconds > 0 else MIN_DATETIME


def seconds_between(start: datetime, end: datetime) -> float:
    return (ensure_utc(end) - ensure_utc(start)).total_seconds()


def compute_gmst_batch(
    jd_array: np.ndarray, fr_array: np.ndarray
) -> np.ndarray:
    """Vectorized GMST for arrays of split Julian dates (radians)."""
    t_ut1 = ((jd_array - J2000_JD) + fr_array) / DAYS_PER_JULIAN_CENTURY
    gmst_sec = (
        67310.54841
        + (876600.0 * 3600.0 + 8640184.812866) * t_ut1
        + 0.093104 * t_ut1 ** 2
        - 6.2e-6 * t_ut1 ** 3
    )
    gmst_rad = (gmst_sec % SECONDS_PER_DAY) / SECONDS_PER_DAY * TWO_PI
    return gmst_rad % TWO_PI


def sun_position_eci_batch(
    jd_array: np.ndarray, fr_array: np.ndarray
) -> np.ndarray:
    """Low-precision Sun position in the equatorial frame, shape (N, 3) km.

    Good to about a degree, which is plenty for deciding whether a
    satellite sits in Earth's shadow.
    """
    t = ((jd_array - J2000_JD) + fr_array) / DAYS_PER_JULIAN_CENTURY

    l0 = (280.46646 + 36000.76983 * t) % 360.0
    m_rad = ((357.52911 + 35999.05029 * t) % 360.0) * DEG_TO_RAD

    # Equation of center
    c = 1.9146 * np.sin(m_rad) + 0.02 * np.sin(2.0 * m_rad)
    sun_lon = (l0 + c) * DEG_TO_RAD
    obliquity = (23.439 - 0.013 * t) * DEG_TO_RAD

    dist_km = (1.00014 - 0.01671 * np.cos(m_rad)) * AU_KM

    result = np.empty((len(t), 3))
    result[:, 0] = dist_km * np.cos(sun_lon)
    result[:, 1] = dist_km * np.sin(sun_lon) * np.cos(obliquity)
    result[:, 2] = dist_km * np.sin(sun_lon) * np.sin(obliquity)
    return result


def tle_epoch_to_datetime(epoch_year: int, epoch_day: float) -> datetime:
    """Convert TLE epoch (2-digit year + fractional day-of-year) to datetime.

    Year rule: 0-56 -> 2000-2056; 57-99 -> 1957-1999.
    """
    if epoch_year < 57:
        full_year = 2000 + epoch_year
    else:
        full_year = 1900 + epoch_year

    base = datetime(full_year, 1, 1, tzinfo=timezone.utc)
    return base + timedelta(days=epoch_day - 1.0)


def generate_time_steps(
    start: datetime, end: datetime, step_seconds: float
) -> tuple[list[datetime], np.ndarray, np.ndarray]:
    """Datetimes plus (jd, fr) arrays for vectorized SGP4 propagation.

    The step count is rounded so ``end`` is included whenever the window
    is a whole multiple of ``step_seconds``.
    """
    start = ensure_utc(start)
    total_seconds = seconds_between(start, end)
    n_steps = max(1, int(round(total_seconds / step_seconds)) + 1)

    offsets = np.arange(n_steps, dtype=np.float64) * step_seconds
    times = [add_seconds(start, float(s)) for s in offsets]

    start_jd = datetime_to_jd(start)
    jd_arr = np.full(n_steps, start_jd.jd, dtype=np.float64)
    fr_arr = start_jd.fr + offsets / SECONDS_PER_DAY

    # Carry whole days out of the fraction
    carry = np.floor(fr_arr)
    jd_arr += carry
    fr_arr -= carry
    return times, jd_arr, fr_arr


def format_sim_time(dt: datetime) -> str:
    """Render a simulation time as ``YYYY-MM-DD HH:MM:SS UTC``."""
    return ensure_utc(dt).strftime("%Y-%m-%d %H:%M:%S UTC")


def format_speed(rate: float) -> str:
    """Human label for a clock rate, e.g. ``1 day/s`` or ``-10x``."""
    sign = "-" if rate < 0 else ""
    speed = abs(rate)
    if speed >= 2592000:
        return f"{sign}{speed / 2592000:.0f} month/s"
    if speed >= 604800:
        return f"{sign}{speed / 604800:.0f} week/s"
    if speed >= 86400:
        return f"{sign}{speed / 86400:.0f} day/s"
    if speed >= 3600:
        return f"{sign}{speed / 3600:.0f} hr/s"
    if speed >= 60:
        return f"{sign}{speed / 60:.0f} min/s"
    if math.isclose(speed, round(speed)):
        return f"{sign}{int(round(speed))}x"
    return f"{sign}{speed:g}x"


def format_distance(distance_au: float) -> str:
    """Distance readout for deep-space probes, e.g. ``1.52 AU`` or ``163.4 AU``."""
    if distance_au < 10.0:
        return f"{distance_au:.2f} AU"
    return f"{distance_au:.1f} AU"


def format_light_time(hours: float) -> str:
    """One-way light travel time as minutes, hours or days."""
    if hours < 1.0:
        return f"{hours * 60.0:.0f} minutes"
    if hours < 24.0:
        return f"{hours:.1f} hours"
    return f"{hours / 24.0:.1f} days"
