"""Built-in body catalog for the orbital scenes.

Planet elements are the J2000 mean elements and per-century rates of
Standish, "Keplerian Elements for Approximate Positions of the Major
Planets" (JPL). They drive orbit rings; planet positions themselves come
from ERFA. Comet elements are from the JPL Small-Body Database. Probe
trajectories are coarse fly-out models built from known distances.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Iterable, Iterator, Optional

from orbital_engine.core.bodies import Body, BodyClass
from orbital_engine.core.kepler import ElementRates, OrbitalElements
from orbital_engine.core.tle_parser import TLEData, parse_tle_lines
from orbital_engine.core.trajectory import Milestone, build_flyout_trajectory
from orbital_engine.utils.constants import AU_KM, BODY_COLORS, CONSTELLATION_COLORS

logger = logging.getLogger(__name__)


class UnknownBodyError(KeyError):
    """Raised when a body id is not in the catalog."""

    def __init__(self, body_id: object):
        self.body_id = body_id
        super().__init__(f"Unknown body id: {body_id!r}")


# (a AU, e, I deg, L deg, varpi deg, Omega deg) at J2000 and rates per century
_PLANET_TABLE: dict[str, tuple[tuple[float, ...], tuple[float, ...], int, float]] = {
    "mercury": ((0.38709927, 0.20563593, 7.00497902, 252.25032350, 77.45779628, 48.33076593),
                (0.00000037, 0.00001906, -0.00594749, 149472.67411175, 0.16047689, -0.12534081), 1, 87.97),
    "venus": ((0.72333566, 0.00677672, 3.39467605, 181.97909950, 131.60246718, 76.67984255),
              (0.00000390, -0.00004107, -0.00078890, 58517.81538729, 0.00268329, -0.27769418), 2, 224.70),
    "earth": ((1.00000261, 0.01671123, -0.00001531, 100.46457166, 102.93768193, 0.0),
              (0.00000562, -0.00004392, -0.01294668, 35999.37244981, 0.32327364, 0.0), 3, 365.25),
    "mars": ((1.52371034, 0.09339410, 1.84969142, -4.55343205, -23.94362959, 49.55953891),
             (0.00001847, 0.00007882, -0.00813131, 19140.30268499, 0.44441088, -0.29257343), 4, 686.98),
    "jupiter": ((5.20288700, 0.04838624, 1.30439695, 34.39644051, 14.72847983, 100.47390909),
                (-0.00011607, -0.00013253, -0.00183714, 3034.74612775, 0.21252668, 0.20469106), 5, 4332.59),
    "saturn": ((9.53667594, 0.05386179, 2.48599187, 49.95424423, 92.59887831, 113.66242448),
               (-0.00125060, -0.00050991, 0.00193609, 1222.49362201, -0.41897216, -0.28867794), 6, 10759.22),
    "uranus": ((19.18916464, 0.04725744, 0.77263783, 313.23810451, 170.95427630, 74.01692503),
               (-0.00196176, -0.00004397, -0.00242939, 428.48202785, 0.40805281, 0.04240589), 7, 30688.5),
    "neptune": ((30.06992276, 0.00859048, 1.77004347, -55.12002969, 44.96476227, 131.78422574),
                (0.00026291, 0.00005105, 0.00035372, 218.45945325, -0.32241464, -0.00508664), 8, 60182.0),
}

INNER_PLANETS = ("mercury", "venus", "earth", "mars")
OUTER_PLANETS = ("jupiter", "saturn", "uranus", "neptune")


def _planet(body_id: str) -> Body:
    (a, e, inc, mean_lon, varpi, node), (da, de, di, dl, dvarpi, dnode), index, period = _PLANET_TABLE[body_id]
    elements = OrbitalElements.from_longitudes(
        semi_major_axis=a,
        eccentricity=e,
        inclination=inc,
        mean_longitude=mean_lon,
        longitude_of_periapsis=varpi,
        ascending_node=node,
        rates=ElementRates(
            semi_major_axis=da,
            eccentricity=de,
            inclination=di,
            ascending_node=dnode,
            arg_periapsis=dvarpi - dnode,
        ),
        mean_longitude_rate=dl,
        longitude_of_periapsis_rate=dvarpi,
    )
    return Body(
        body_id=body_id,
        name=body_id.capitalize(),
        body_class=BodyClass.PLANET,
        color=BODY_COLORS[body_id],
        elements=elements,
        erfa_index=index,
        info={"period_days": period, "inner": body_id in INNER_PLANETS},
    )


def _moon() -> Body:
    # Mean lunar elements on the ecliptic (Meeus), geocentric
    elements = OrbitalElements.from_longitudes(
        semi_major_axis=384400.0 / AU_KM,
        eccentricity=0.0549,
        inclination=5.145,
        mean_longitude=218.3164477,
        longitude_of_periapsis=83.3530513,
        ascending_node=125.0445479,
        rates=ElementRates(ascending_node=-1934.1362891, arg_periapsis=6003.1500178),
        mean_longitude_rate=481267.88123421,
        longitude_of_periapsis_rate=4069.0137287,
    )
    return Body(
        body_id="moon",
        name="Moon",
        body_class=BodyClass.MOON,
        color=BODY_COLORS["moon"],
        elements=elements,
        parent_id="earth",
        info={"period_days": 27.32},
    )


# (id, name, designation, (a, e, i, om, w, ma, epoch_jd), period_years, type, color)
_COMET_TABLE = [
    ("halley", "Halley's Comet", "1P/Halley",
     (17.834, 0.96714, 162.26, 58.42, 111.33, 38.38, 2449400.5), 75.32, "short-period", "#88CCFF"),
    ("hale-bopp", "Comet Hale-Bopp", "C/1995 O1",
     (186.0, 0.995, 89.43, 282.47, 130.59, 0.0, 2450538.0), 2533.0, "long-period", "#FFFFAA"),
    ("neowise", "Comet NEOWISE", "C/2020 F3",
     (364.0, 0.999, 128.94, 61.01, 37.28, 0.0, 2459034.0), 6800.0, "long-period", "#FFDD88"),
    ("encke", "Comet Encke", "2P/Encke",
     (2.215, 0.848, 11.78, 334.57, 186.54, 215.0, 2459000.5), 3.30, "short-period", "#AADDFF"),
    ("tempel-1", "Comet Tempel 1", "9P/Tempel",
     (3.138, 0.512, 10.53, 68.93, 178.93, 180.0, 2453500.5), 5.56, "short-period", "#99BBDD"),
    ("churyumov-gerasimenko", "Comet 67P", "67P/Churyumov-Gerasimenko",
     (3.463, 0.641, 7.04, 50.19, 12.78, 180.0, 2457260.5), 6.44, "short-period", "#778899"),
    ("wirtanen", "Comet Wirtanen", "46P/Wirtanen",
     (3.092, 0.659, 11.75, 82.16, 356.34, 0.0, 2458468.5), 5.44, "short-period", "#AACCEE"),
    ("hyakutake", "Comet Hyakutake", "C/1996 B2",
     (2364.0, 0.9999, 124.92, 188.04, 130.17, 0.0, 2450183.0), 114000.0, "long-period", "#66AAFF"),
]


def _comet(row) -> Body:
    body_id, name, designation, (a, e, i, om, w, ma, epoch), period, kind, color = row
    return Body(
        body_id=body_id,
        name=name,
        body_class=BodyClass.COMET,
        color=color,
        elements=OrbitalElements(
            semi_major_axis=a,
            eccentricity=e,
            inclination=i,
            ascending_node=om,
            arg_periapsis=w,
            mean_anomaly=ma,
            epoch_jd=epoch,
        ),
        info={"designation": designation, "period_years": period, "type": kind},
    )


def _utc(year: int, month: int, day: int) -> datetime:
    return datetime(year, month, day, tzinfo=timezone.utc)


def _voyager(number: int) -> Body:
    if number == 1:
        launch = _utc(1977, 9, 5)
        key_distances = [(1977.68, 1.0), (1979.2, 5.2), (1980.9, 9.5), (1990.0, 40.0),
                         (2000.0, 76.0), (2012.0, 122.0), (2020.0, 150.0), (2026.0, 165.0),
                         (2030.0, 179.0)]
        heading, elevation, color = 35.0, 35.0, "#00FF88"
        milestones = [
            Milestone(launch, "Launch"),
            Milestone(_utc(1979, 3, 5), "Jupiter Flyby", "jupiter"),
            Milestone(_utc(1980, 11, 12), "Saturn Flyby", "saturn"),
            Milestone(_utc(1990, 2, 14), "Pale Blue Dot"),
            Milestone(_utc(2004, 12, 16), "Termination Shock"),
            Milestone(_utc(2012, 8, 25), "Interstellar Space"),
        ]
    else:
        launch = _utc(1977, 8, 20)
        key_distances = [(1977.64, 1.0), (1979.5, 5.2), (1981.7, 9.5), (1986.1, 19.2),
                         (1989.7, 30.0), (2000.0, 63.0), (2018.0, 119.0), (2026.0, 137.0),
                         (2030.0, 149.0)]
        heading, elevation, color = 55.0, -10.0, "#00AAFF"
        milestones = [
            Milestone(launch, "Launch"),
            Milestone(_utc(1979, 7, 9), "Jupiter Flyby", "jupiter"),
            Milestone(_utc(1981, 8, 26), "Saturn Flyby", "saturn"),
            Milestone(_utc(1986, 1, 24), "Uranus Flyby", "uranus"),
            Milestone(_utc(1989, 8, 25), "Neptune Flyby", "neptune"),
            Milestone(_utc(2007, 9, 1), "Termination Shock"),
            Milestone(_utc(2018, 11, 5), "Interstellar Space"),
        ]

    return Body(
        body_id=f"voyager{number}",
        name=f"Voyager {number}",
        body_class=BodyClass.PROBE,
        color=color,
        display_radius=1500.0,
        trajectory=build_flyout_trajectory(
            launch, key_distances, heading, elevation, milestones=milestones
        ),
        info={"naif_id": -30 - number, "launch_date": launch.date().isoformat()},
    )


# Last-known-good element sets; the live feed replaces them when it can
DEFAULT_STATION_TLES: dict[str, tuple[str, str, str]] = {
    "iss": (
        "ISS (ZARYA)",
        "1 25544U 98067A   24001.50000000  .00016717  00000-0  10270-3 0  9997",
        "2 25544  51.6400 100.0000 0001234  90.0000 270.0000 15.50000000000008",
    ),
    "tiangong": (
        "CSS (TIANHE)",
        "1 48274U 21035A   24001.50000000  .00020000  00000-0  15000-3 0  9999",
        "2 48274  41.4700 200.0000 0001000 180.0000  90.0000 15.60000000000006",
    ),
}

_STATION_INFO = {
    "iss": ("International Space Station", "#00FF88", {"crew": 7, "country": "International",
                                                       "launch_date": "1998-11-20"}),
    "tiangong": ("Tiangong Space Station", "#FF4444", {"crew": 3, "country": "China",
                                                      "launch_date": "2021-04-29"}),
}


def satellite_body(
    tle: TLEData, body_id: Optional[str] = None, color: Optional[str] = None, group: str = "active"
) -> Body:
    """Wrap an element set as a satellite body (id defaults to the NORAD number)."""
    return Body(
        body_id=body_id or str(tle.catalog_number),
        name=tle.name,
        body_class=BodyClass.SATELLITE,
        color=color or CONSTELLATION_COLORS.get(group, CONSTELLATION_COLORS["active"]),
        tle=tle,
        info={"norad_id": tle.catalog_number, "group": group},
    )


def station_bodies() -> list[Body]:
    bodies = []
    for station_id, (name, line1, line2) in DEFAULT_STATION_TLES.items():
        display_name, color, info = _STATION_INFO[station_id]
        tle = parse_tle_lines(name, line1, line2)
        body = satellite_body(tle, body_id=station_id, color=color, group="stations")
        bodies.append(Body(
            body_id=body.body_id,
            name=display_name,
            body_class=body.body_class,
            color=body.color,
            tle=tle,
            info={**body.info, **info},
        ))
    return bodies


def planet_bodies(names: Iterable[str] = INNER_PLANETS + OUTER_PLANETS) -> list[Body]:
    return [_planet(name) for name in names]


def moon_body() -> Body:
    return _moon()


def comet_bodies() -> list[Body]:
    return [_comet(row) for row in _COMET_TABLE]


def probe_bodies() -> list[Body]:
    return [_voyager(1), _voyager(2)]


class BodyCatalog:
    """Id-indexed, read-only set of bodies for one scene."""

    def __init__(self, bodies: Iterable[Body]):
        self._bodies: dict[str, Body] = {}
        for body in bodies:
            if body.body_id in self._bodies:
                raise ValueError(f"Duplicate body id: {body.body_id}")
            self._bodies[body.body_id] = body

    def get(self, body_id: str) -> Body:
        try:
            return self._bodies[body_id]
        except KeyError:
            raise UnknownBodyError(body_id) from None

    def replace(self, body: Body) -> None:
        """Swap in a new version of a known body (e.g. refreshed TLE)."""
        if body.body_id not in self._bodies:
            raise UnknownBodyError(body.body_id)
        self._bodies[body.body_id] = body

    def __contains__(self, body_id: object) -> bool:
        return body_id in self._bodies

    def __iter__(self) -> Iterator[Body]:
        return iter(list(self._bodies.values()))

    def __len__(self) -> int:
        return len(self._bodies)

    @property
    def ids(self) -> list[str]:
        return list(self._bodies)

    def of_class(self, body_class: BodyClass) -> list[Body]:
        return [b for b in self._bodies.values() if b.body_class is body_class]
