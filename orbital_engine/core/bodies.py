"""Body descriptors and per-instant position values.

A ``Body`` is defined once when a catalog loads and never mutated. A
``Position`` is only meaningful for the (body, time) pair that produced
it.
"""

from __future__ import annotations

import enum
import math
from dataclasses import dataclass, field, replace
from typing import Any, Mapping, Optional

import numpy as np

from orbital_engine.core.kepler import OrbitalElements
from orbital_engine.core.tle_parser import TLEData
from orbital_engine.core.trajectory import ProbeTrajectory


class BodyClass(str, enum.Enum):
    PLANET = "planet"
    MOON = "moon"
    PROBE = "probe"
    COMET = "comet"
    SATELLITE = "satellite"


CLOSED_ORBIT_CLASSES = frozenset({BodyClass.PLANET, BodyClass.MOON, BodyClass.COMET})


@dataclass(frozen=True)
class Body:
    """Immutable description of something the scenes can place in space.

    Exactly one of ``elements``, ``trajectory`` or ``tle`` carries the
    class-specific orbit. Planets also name their ERFA planet number
    (``erfa_index``; Earth uses 3 and is handled separately). The Moon
    names its ``parent_id``.
    """

    body_id: str
    name: str
    body_class: BodyClass
    color: str
    display_radius: Optional[float] = None
    elements: Optional[OrbitalElements] = None
    trajectory: Optional[ProbeTrajectory] = None
    tle: Optional[TLEData] = None
    erfa_index: Optional[int] = None
    parent_id: Optional[str] = None
    info: Mapping[str, Any] = field(default_factory=dict, compare=False, hash=False)

    @property
    def is_closed_orbit(self) -> bool:
        return self.body_class in CLOSED_ORBIT_CLASSES

    def with_tle(self, tle: TLEData) -> Body:
        """Copy of this satellite with a refreshed element set."""
        if self.body_class is not BodyClass.SATELLITE:
            raise TypeError(f"{self.body_id} is not a satellite")
        return replace(self, tle=tle)


@dataclass(frozen=True, slots=True)
class Position:
    """Scene-space position of one body at one instant."""

    x: float
    y: float
    z: float
    distance_from_origin: float
    tail_direction: Optional[tuple[float, float, float]] = None
    extrapolated: bool = False
    degraded: bool = False
    latitude: Optional[float] = None  # degrees, Earth-orbiting only
    longitude: Optional[float] = None
    altitude_km: Optional[float] = None
    speed_km_s: Optional[float] = None
    in_shadow: Optional[bool] = None
    region: Optional[str] = None

    @classmethod
    def from_vector(cls, vector: np.ndarray, **kwargs: Any) -> Position:
        x, y, z = (float(c) for c in vector)
        return cls(x=x, y=y, z=z, distance_from_origin=math.sqrt(x * x + y * y + z * z), **kwargs)

    @property
    def vector(self) -> np.ndarray:
        return np.array([self.x, self.y, self.z])
