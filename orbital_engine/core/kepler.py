"""Keplerian orbit utilities.

Osculating element sets, Kepler's equation, and conversion of
elements to heliocentric (or geocentric) Cartesian positions. Distances
are in AU and angles in degrees on the element set itself; radians are
used internally.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import Optional

import numpy as np

from orbital_engine.core.coordinate_transforms import perifocal_rotation
from orbital_engine.utils.constants import (
    AU_KM,
    DAYS_PER_JULIAN_CENTURY,
    DEG_TO_RAD,
    GAUSSIAN_GRAVITATIONAL_CONSTANT,
    GM_SUN_AU3_DAY2,
    J2000_JD,
    KEPLER_MAX_ITERATIONS,
    KEPLER_TOLERANCE,
    RAD_TO_DEG,
    SECONDS_PER_DAY,
    TWO_PI,
)


@dataclass(frozen=True, slots=True)
class ElementRates:
    """Secular element rates per Julian century (AU and degrees)."""

    semi_major_axis: float = 0.0
    eccentricity: float = 0.0
    inclination: float = 0.0
    ascending_node: float = 0.0
    arg_periapsis: float = 0.0


@dataclass(frozen=True, slots=True)
class KeplerState:
    """Solved position on an orbit at one instant."""

    position: np.ndarray  # [x, y, z] AU, reference frame of the elements
    radius: float  # AU
    eccentric_anomaly: float  # rad
    true_anomaly: float  # rad
    iterations: int


@dataclass(frozen=True, slots=True)
class OrbitalElements:
    """Osculating Keplerian elements at ``epoch_jd``.

    ``mean_motion`` (deg/day) may be given explicitly; otherwise it is
    derived from the Sun's gravitational parameter, which is only right
    for heliocentric orbits.
    """

    semi_major_axis: float  # AU
    eccentricity: float
    inclination: float  # deg
    ascending_node: float  # deg
    arg_periapsis: float  # deg
    mean_anomaly: float  # deg at epoch
    epoch_jd: float = J2000_JD
    mean_motion: Optional[float] = None  # deg/day
    rates: Optional[ElementRates] = None

    def __post_init__(self) -> None:
        if not 0.0 <= self.eccentricity < 1.0:
            raise ValueError(
                f"Only elliptical orbits are supported (e={self.eccentricity})"
            )
        if self.semi_major_axis <= 0:
            raise ValueError(f"Semi-major axis must be positive ({self.semi_major_axis})")

    @classmethod
    def from_longitudes(
        cls,
        semi_major_axis: float,
        eccentricity: float,
        inclination: float,
        mean_longitude: float,
        longitude_of_periapsis: float,
        ascending_node: float,
        rates: Optional[ElementRates] = None,
        mean_longitude_rate: Optional[float] = None,
        longitude_of_periapsis_rate: float = 0.0,
        epoch_jd: float = J2000_JD,
    ) -> OrbitalElements:
        """Build from the (L, varpi, Omega) form used by planetary tables.

        Rates of L and varpi are in degrees per Julian century.
        """
        mean_motion = None
        if mean_longitude_rate is not None:
            mean_motion = (mean_longitude_rate - longitude_of_periapsis_rate) / DAYS_PER_JULIAN_CENTURY
        return cls(
            semi_major_axis=semi_major_axis,
            eccentricity=eccentricity,
            inclination=inclination,
            ascending_node=ascending_node,
            arg_periapsis=longitude_of_periapsis - ascending_node,
            mean_anomaly=mean_longitude - longitude_of_periapsis,
            epoch_jd=epoch_jd,
            mean_motion=mean_motion,
            rates=rates,
        )

    @property
    def mean_motion_rad_per_day(self) -> float:
        if self.mean_motion is not None:
            return self.mean_motion * DEG_TO_RAD
        return GAUSSIAN_GRAVITATIONAL_CONSTANT / self.semi_major_axis ** 1.5

    @property
    def period_days(self) -> float:
        return TWO_PI / self.mean_motion_rad_per_day

    @property
    def periapsis_distance(self) -> float:
        return self.semi_major_axis * (1.0 - self.eccentricity)

    @property
    def apoapsis_distance(self) -> float:
        return self.semi_major_axis * (1.0 + self.eccentricity)

    def mean_anomaly_at(self, jd: float) -> float:
        """Mean anomaly in radians at ``jd`` (not wrapped)."""
        return self.mean_anomaly * DEG_TO_RAD + self.mean_motion_rad_per_day * (jd - self.epoch_jd)

    def at(self, jd: float) -> OrbitalElements:
        """Osculating elements re-referenced to ``jd``.

        Secular rates (if any) are applied; the mean anomaly is advanced.
        """
        mean_anomaly = (self.mean_anomaly_at(jd) * RAD_TO_DEG) % 360.0
        if self.rates is None:
            return replace(self, mean_anomaly=mean_anomaly, epoch_jd=jd)

        centuries = (jd - self.epoch_jd) / DAYS_PER_JULIAN_CENTURY
        r = self.rates
        return replace(
            self,
            semi_major_axis=self.semi_major_axis + r.semi_major_axis * centuries,
            eccentricity=min(max(self.eccentricity + r.eccentricity * centuries, 0.0), 0.99),
            inclination=self.inclination + r.inclination * centuries,
            ascending_node=self.ascending_node + r.ascending_node * centuries,
            arg_periapsis=self.arg_periapsis + r.arg_periapsis * centuries,
            mean_anomaly=mean_anomaly,
            epoch_jd=jd,
        )

    def rotation(self) -> np.ndarray:
        return perifocal_rotation(self.ascending_node, self.inclination, self.arg_periapsis)

    def state_at(self, jd: float) -> KeplerState:
        """Solve Kepler's equation and return the position at ``jd``."""
        elements = self.at(jd) if self.rates is not None else self
        e = elements.eccentricity
        ecc_anomaly, iterations = solve_kepler(elements.mean_anomaly_at(jd), e)
        nu = true_anomaly_from_eccentric(ecc_anomaly, e)
        radius = elements.semi_major_axis * (1.0 - e * math.cos(ecc_anomaly))
        perifocal = np.array([radius * math.cos(nu), radius * math.sin(nu), 0.0])
        return KeplerState(
            position=elements.rotation() @ perifocal,
            radius=radius,
            eccentric_anomaly=ecc_anomaly,
            true_anomaly=nu,
            iterations=iterations,
        )

    def positions_for_mean_anomalies(self, mean_anomalies: np.ndarray) -> np.ndarray:
        """(N, 3) positions in AU for an array of mean anomalies (rad)."""
        e = self.eccentricity
        ecc = solve_kepler_batch(mean_anomalies, e)
        nu = true_anomaly_from_eccentric(ecc, e)
        radius = self.semi_major_axis * (1.0 - e * np.cos(ecc))
        perifocal = np.column_stack([
            radius * np.cos(nu),
            radius * np.sin(nu),
            np.zeros_like(radius),
        ])
        return perifocal @ self.rotation().T


def elements_from_state(
    position: np.ndarray,
    velocity: np.ndarray,
    epoch_jd: float,
    mu: float = GM_SUN_AU3_DAY2,
) -> OrbitalElements:
    """Osculating elements from a position/velocity state.

    Args:
        position: [x, y, z] in AU
        velocity: [vx, vy, vz] in AU/day
        epoch_jd: instant of the state
        mu: gravitational parameter in AU^3/day^2

    Returns:
        Elements whose mean anomaly at ``epoch_jd`` reproduces ``position``.
        Angles are measured in the frame of the input vectors.
    """
    r = np.asarray(position, dtype=np.float64)
    v = np.asarray(velocity, dtype=np.float64)
    r_mag = float(np.linalg.norm(r))

    # Specific angular momentum and node vector (k_hat x h)
    h = np.cross(r, v)
    h_mag = float(np.linalg.norm(h))
    n = np.array([-h[1], h[0], 0.0])
    n_mag = float(np.linalg.norm(n))

    e_vec = ((np.dot(v, v) - mu / r_mag) * r - np.dot(r, v) * v) / mu
    ecc = float(np.linalg.norm(e_vec))

    energy = np.dot(v, v) / 2.0 - mu / r_mag
    if energy >= 0.0:
        raise ValueError(f"State is not bound (specific energy {energy:.3e})")
    sma = -mu / (2.0 * energy)

    inc = math.atan2(math.hypot(h[0], h[1]), h[2])
    # Equatorial orbits have no node line; measure from the x-axis
    raan = math.atan2(n[1], n[0]) if n_mag > 1e-12 * h_mag else 0.0

    node_dir = np.array([math.cos(raan), math.sin(raan), 0.0])
    in_plane = np.cross(h / h_mag, node_dir)
    arg_latitude = math.atan2(np.dot(r, in_plane), np.dot(r, node_dir))
    if ecc > 1e-12:
        arg_periapsis = math.atan2(np.dot(e_vec, in_plane), np.dot(e_vec, node_dir))
    else:
        arg_periapsis = 0.0
    true_anomaly = arg_latitude - arg_periapsis

    ecc_anomaly = 2.0 * math.atan2(
        math.sqrt(1.0 - ecc) * math.sin(true_anomaly / 2.0),
        math.sqrt(1.0 + ecc) * math.cos(true_anomaly / 2.0),
    )
    mean_anomaly = ecc_anomaly - ecc * math.sin(ecc_anomaly)

    return OrbitalElements(
        semi_major_axis=sma,
        eccentricity=ecc,
        inclination=inc * RAD_TO_DEG,
        ascending_node=(raan * RAD_TO_DEG) % 360.0,
        arg_periapsis=(arg_periapsis * RAD_TO_DEG) % 360.0,
        mean_anomaly=(mean_anomaly * RAD_TO_DEG) % 360.0,
        epoch_jd=epoch_jd,
        mean_motion=math.sqrt(mu / sma ** 3) * RAD_TO_DEG,
    )


def solve_kepler(
    mean_anomaly: float,
    eccentricity: float,
    tolerance: float = KEPLER_TOLERANCE,
    max_iterations: int = KEPLER_MAX_ITERATIONS,
) -> tuple[float, int]:
    """Newton-Raphson solve of M = E - e sin E.

    Returns:
        (eccentric anomaly in radians, iterations used). The mean anomaly
        is wrapped to [0, 2pi) first; the iteration cap bounds cost even
        for near-parabolic orbits that converge slowly.
    """
    m = mean_anomaly % TWO_PI
    ecc_anomaly = m if eccentricity < 0.8 else math.pi

    for iteration in range(1, max_iterations + 1):
        delta = (ecc_anomaly - eccentricity * math.sin(ecc_anomaly) - m) / (
            1.0 - eccentricity * math.cos(ecc_anomaly)
        )
        ecc_anomaly -= delta
        if abs(delta) < tolerance:
            return ecc_anomaly, iteration

    return ecc_anomaly, max_iterations


def solve_kepler_batch(
    mean_anomalies: np.ndarray,
    eccentricity: float,
    tolerance: float = KEPLER_TOLERANCE,
    max_iterations: int = KEPLER_MAX_ITERATIONS,
) -> np.ndarray:
    """Vectorized Kepler solve; stops once every element has converged.

    Unlike the scalar solver the mean anomalies are not wrapped, so the
    result stays continuous across 2pi.
    """
    m = np.asarray(mean_anomalies, dtype=np.float64)
    turns = np.floor(m / TWO_PI) * TWO_PI
    m_wrapped = m - turns
    ecc = m_wrapped.copy() if eccentricity < 0.8 else np.full_like(m_wrapped, math.pi)

    for _ in range(max_iterations):
        delta = (ecc - eccentricity * np.sin(ecc) - m_wrapped) / (1.0 - eccentricity * np.cos(ecc))
        ecc -= delta
        if np.all(np.abs(delta) < tolerance):
            break

    return ecc + turns


def true_anomaly_from_eccentric(ecc_anomaly, eccentricity: float):
    """True anomaly (rad) for a scalar or array eccentric anomaly."""
    half = np.asarray(ecc_anomaly) / 2.0
    nu = 2.0 * np.arctan2(
        math.sqrt(1.0 + eccentricity) * np.sin(half),
        math.sqrt(1.0 - eccentricity) * np.cos(half),
    )
    if np.ndim(nu) == 0:
        return float(nu)
    return nu


def vis_viva_speed_km_s(radius_au: float, semi_major_axis_au: float) -> float:
    """Heliocentric orbital speed from the vis-viva equation."""
    if radius_au <= 0 or semi_major_axis_au <= 0:
        return 0.0
    v_au_per_day = math.sqrt(max(0.0, GM_SUN_AU3_DAY2 * (2.0 / radius_au - 1.0 / semi_major_axis_au)))
    return v_au_per_day * AU_KM / SECONDS_PER_DAY
