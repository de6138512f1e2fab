"""Tests for the ephemeris adapter."""

from datetime import datetime, timedelta, timezone

import numpy as np
import pytest

from orbital_engine.core.bodies import Body, BodyClass
from orbital_engine.core.coordinate_transforms import ground_region
from orbital_engine.core.ephemeris import EphemerisAdapter, EphemerisError, UnknownBodyError, tail_length, tail_visible
from orbital_engine.utils.constants import AU, AU_KM
from orbital_engine.utils.time_utils import datetime_to_jd, sun_position_eci_batch


def _utc(*args):
    return datetime(*args, tzinfo=timezone.utc)


class TestPlanets:
    def test_earth_near_one_au(self, ephemeris, catalog, epoch):
        for offset_days in (0, 91, 182, 273):
            position = ephemeris.position(catalog.get("earth"), epoch + timedelta(days=offset_days))
            assert 0.983 <= position.distance_from_origin / AU <= 1.017

    def test_deterministic(self, ephemeris, catalog, epoch):
        mars = catalog.get("mars")
        assert ephemeris.position(mars, epoch) == ephemeris.position(mars, epoch)
        assert ephemeris.position(mars, epoch) == EphemerisAdapter().position(mars, epoch)

    def test_ecliptic_north_is_scene_up(self, ephemeris, catalog, epoch):
        earth = ephemeris.position(catalog.get("earth"), epoch)
        assert abs(earth.y) < 1e-3 * AU

    def test_jupiter_distance(self, ephemeris, catalog, epoch):
        assert 4.9 <= ephemeris.position(catalog.get("jupiter"), epoch).distance_from_origin / AU <= 5.5

    def test_total_over_datetime_range(self, ephemeris, catalog):
        for time in (_utc(1, 1, 1), _utc(9999, 12, 31)):
            position = ephemeris.position(catalog.get("neptune"), time)
            assert np.isfinite(position.vector).all()

    def test_missing_erfa_number(self, ephemeris):
        body = Body(body_id="x", name="X", body_class=BodyClass.PLANET, color="#FFFFFF")
        with pytest.raises(EphemerisError):
            ephemeris.position(body, _utc(2024, 1, 1))


class TestMoon:
    def test_distance_from_earth(self, ephemeris, catalog, epoch):
        moon = ephemeris.position(catalog.get("moon"), epoch)
        earth = ephemeris.position(catalog.get("earth"), epoch)
        separation_km = np.linalg.norm(moon.vector - earth.vector) * 1000.0
        assert 356000.0 <= separation_km <= 407000.0

    def test_osculating_orbit_is_lunar(self, ephemeris, catalog, epoch):
        elements = ephemeris.osculating_elements(catalog.get("moon"), epoch)
        assert elements.semi_major_axis * AU_KM == pytest.approx(384400.0, rel=0.03)
        assert 3.0 < elements.inclination < 7.0
        assert elements.period_days == pytest.approx(27.3, abs=1.5)

    def test_no_osculating_orbit_for_probes(self, ephemeris, catalog, epoch):
        with pytest.raises(EphemerisError):
            ephemeris.osculating_elements(catalog.get("voyager1"), epoch)


class TestComets:
    def test_halley_perihelion_1986(self, ephemeris, catalog):
        assert ephemeris.distance_au(catalog.get("halley"), _utc(1986, 2, 9)) == pytest.approx(0.586, abs=0.05)

    def test_tail_points_away_from_sun(self, ephemeris, catalog, epoch):
        position = ephemeris.position(catalog.get("encke"), epoch)
        direction = np.array(position.tail_direction)
        assert np.linalg.norm(direction) == pytest.approx(1.0)
        np.testing.assert_allclose(direction, position.vector / position.distance_from_origin, atol=1e-12)

    def test_speed_is_reported(self, ephemeris, catalog, epoch):
        assert ephemeris.position(catalog.get("encke"), epoch).speed_km_s > 0.0

    def test_sorted_by_distance(self, ephemeris, catalog, epoch):
        ranked = ephemeris.comets_by_distance(catalog, epoch)
        assert len(ranked) == 8
        distances = [d for _, d in ranked]
        assert distances == sorted(distances)

    @pytest.mark.parametrize(
        "distance, length",
        [(0.1, 10.0), (0.5, 7.0710678), (1.0, 5.0), (4.0, 2.5), (5.0, 0.0), (30.0, 0.0)],
    )
    def test_tail_length(self, distance, length):
        assert tail_length(distance) == pytest.approx(length)

    def test_tail_visible_inside_five_au(self):
        assert tail_visible(4.99)
        assert not tail_visible(5.0)


class TestProbes:
    def test_in_table_not_extrapolated(self, ephemeris, catalog):
        position = ephemeris.position(catalog.get("voyager1"), _utc(2012, 8, 25))
        assert not position.extrapolated
        assert 118.0 <= position.distance_from_origin / AU <= 130.0

    def test_beyond_table_extrapolated(self, ephemeris, catalog):
        assert ephemeris.position(catalog.get("voyager2"), _utc(2040, 1, 1)).extrapolated
        assert ephemeris.position(catalog.get("voyager2"), _utc(1970, 1, 1)).extrapolated

    def test_voyager1_leaves_north(self, ephemeris, catalog):
        assert ephemeris.position(catalog.get("voyager1"), _utc(2020, 1, 1)).y > 0.0


class TestSatellites:
    def test_iss_near_epoch(self, ephemeris, iss):
        position = ephemeris.position(iss, iss.tle.epoch_datetime)
        assert 300.0 <= position.altitude_km <= 450.0
        assert position.distance_from_origin == pytest.approx(6.7, abs=0.15)
        assert not position.degraded

    def test_old_elements_flagged_not_raised(self, ephemeris, iss):
        position = ephemeris.position(iss, iss.tle.epoch_datetime + timedelta(days=30))
        assert position.degraded
        assert np.isfinite(position.vector).all()

    def test_equator_plane_is_scene_xz(self, ephemeris, iss):
        position = ephemeris.position(iss, iss.tle.epoch_datetime)
        state = ephemeris.satellite_state(iss, iss.tle.epoch_datetime)
        assert position.y == pytest.approx(state.position_eci[2] / 1000.0)

    def test_globe_position(self, ephemeris, iss):
        position = ephemeris.globe_position(iss, iss.tle.epoch_datetime)
        assert abs(position.latitude) <= 52.0
        assert position.distance_from_origin == pytest.approx(6.371 + position.altitude_km / 1000.0)

    def test_propagator_reused_per_element_set(self, ephemeris, iss):
        assert ephemeris.propagator(iss) is ephemeris.propagator(iss)

    def test_position_carries_region_and_shadow(self, ephemeris, iss):
        position = ephemeris.globe_position(iss, iss.tle.epoch_datetime)
        assert position.region == ground_region(position.latitude, position.longitude)
        assert isinstance(position.in_shadow, bool)

    def test_shadow_only_on_night_side(self, ephemeris, iss):
        start = iss.tle.epoch_datetime
        states = ephemeris.propagator(iss).propagate_range(start, start + timedelta(minutes=95), 60.0)
        shadowed = [s for s in states if s.in_shadow]
        assert shadowed
        assert len(shadowed) < len(states)
        for state in shadowed:
            jd = datetime_to_jd(state.datetime_utc)
            sun = sun_position_eci_batch(np.array([jd.jd]), np.array([jd.fr]))[0]
            assert np.dot(state.position_eci, sun) < 0.0


class TestLookup:
    def test_unknown_body_id(self, ephemeris, epoch):
        with pytest.raises(UnknownBodyError):
            ephemeris.position_of("pluto", epoch)

    def test_known_body_id(self, ephemeris, catalog, epoch):
        assert ephemeris.position_of("venus", epoch) == ephemeris.position(catalog.get("venus"), epoch)
