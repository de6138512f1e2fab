"""Tests for the built-in body catalog."""

import pytest

from orbital_engine.core.bodies import BodyClass
from orbital_engine.core.catalog import (
    DEFAULT_STATION_TLES,
    BodyCatalog,
    UnknownBodyError,
    comet_bodies,
    moon_body,
    planet_bodies,
    probe_bodies,
    satellite_body,
    station_bodies,
)
from orbital_engine.core.tle_parser import parse_tle_lines


class TestBodies:
    def test_planets_have_erfa_numbers(self):
        planets = planet_bodies()
        assert [p.erfa_index for p in planets] == list(range(1, 9))
        assert all(p.elements is not None for p in planets)

    def test_planet_periods_match_elements(self):
        # Kepler rings and ERFA positions must agree on how fast a planet moves
        for planet in planet_bodies():
            assert planet.elements.period_days == pytest.approx(planet.info["period_days"], rel=0.01)

    def test_moon_orbits_earth(self):
        moon = moon_body()
        assert moon.parent_id == "earth"
        assert moon.elements.period_days == pytest.approx(27.55, abs=0.05)

    def test_comets(self):
        comets = comet_bodies()
        assert len(comets) == 8
        halley = next(c for c in comets if c.body_id == "halley")
        assert halley.elements.periapsis_distance == pytest.approx(0.586, abs=0.01)
        assert halley.elements.apoapsis_distance == pytest.approx(35.1, abs=0.5)
        assert halley.info["designation"] == "1P/Halley"

    def test_probes_have_milestones(self):
        voyager1, voyager2 = probe_bodies()
        assert voyager1.trajectory.milestones[0].name == "Launch"
        assert any(m.body == "neptune" for m in voyager2.trajectory.milestones)

    def test_station_elements_pass_checksums(self):
        for name, line1, line2 in DEFAULT_STATION_TLES.values():
            parse_tle_lines(name, line1, line2, strict=True)

    def test_station_elements_share_an_epoch(self):
        epochs = {s.body_id: s.tle.epoch_datetime for s in station_bodies()}
        assert epochs["iss"] == epochs["tiangong"]
        assert epochs["iss"].year >= 2024

    def test_stations(self):
        stations = {s.body_id: s for s in station_bodies()}
        assert stations["iss"].tle.catalog_number == 25544
        assert stations["tiangong"].tle.catalog_number == 48274
        assert stations["iss"].info["crew"] == 7

    def test_satellite_body_defaults(self):
        name, line1, line2 = DEFAULT_STATION_TLES["iss"]
        body = satellite_body(parse_tle_lines(name, line1, line2))
        assert body.body_id == "25544"
        assert body.body_class is BodyClass.SATELLITE


class TestBodyCatalog:
    def test_lookup(self):
        catalog = BodyCatalog(planet_bodies())
        assert catalog.get("mars").name == "Mars"
        assert "mars" in catalog
        assert len(catalog) == 8

    def test_unknown_id_raises(self):
        catalog = BodyCatalog(planet_bodies())
        with pytest.raises(UnknownBodyError):
            catalog.get("pluto")
        with pytest.raises(KeyError):
            catalog.get("vulcan")

    def test_duplicate_ids_rejected(self):
        with pytest.raises(ValueError):
            BodyCatalog(planet_bodies() + planet_bodies())

    def test_replace_only_known(self):
        catalog = BodyCatalog(station_bodies())
        with pytest.raises(UnknownBodyError):
            catalog.replace(moon_body())

    def test_of_class(self):
        catalog = BodyCatalog(planet_bodies() + comet_bodies())
        assert len(catalog.of_class(BodyClass.COMET)) == 8
