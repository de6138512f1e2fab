"""Shared fixtures: a controllable wall clock and common bodies."""

from datetime import datetime, timezone

import pytest

from orbital_engine.core.catalog import BodyCatalog, comet_bodies, moon_body, planet_bodies, probe_bodies, station_bodies
from orbital_engine.core.ephemeris import EphemerisAdapter


class FakeWallClock:
    """Monotonic seconds that only move when a test says so."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def wall_clock():
    return FakeWallClock()


@pytest.fixture
def epoch():
    return datetime(2024, 3, 20, 0, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def catalog():
    return BodyCatalog(planet_bodies() + [moon_body()] + comet_bodies() + probe_bodies() + station_bodies())


@pytest.fixture
def ephemeris(catalog):
    return EphemerisAdapter(catalog)


@pytest.fixture
def iss(catalog):
    return catalog.get("iss")
