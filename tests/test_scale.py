"""Tests for unit conversion and display sizing."""

import numpy as np
import pytest

from orbital_engine.core.bodies import Body, BodyClass
from orbital_engine.utils.constants import AU, AU_KM, MIN_DISPLAY_RADIUS, SCALE_KM
from orbital_engine.utils.scale import (
    EARTH_RADIUS_UNITS,
    display_radius,
    from_au,
    globe_point,
    to_au,
    to_km,
    to_scene_units,
)


class TestConversions:
    def test_km_anchor(self):
        assert to_scene_units(SCALE_KM) == pytest.approx(1.0)
        assert to_scene_units(AU_KM) == pytest.approx(AU)

    def test_au_is_linear(self):
        assert from_au(2.5) == pytest.approx(2.5 * from_au(1.0))
        assert from_au(0.0) == 0.0
        assert from_au(-3.0) == pytest.approx(-3.0 * AU)

    def test_inverses(self):
        assert to_au(from_au(39.5)) == pytest.approx(39.5)
        assert to_km(to_scene_units(6371.0)) == pytest.approx(6371.0)

    def test_arrays(self):
        values = np.array([0.0, 1.0, 30.0])
        np.testing.assert_allclose(from_au(values), values * AU)

    def test_earth_radius_derived_from_scale(self):
        assert EARTH_RADIUS_UNITS == pytest.approx(6371.0 / SCALE_KM)


class TestDisplayRadius:
    def _body(self, body_id, body_class, radius=None):
        return Body(body_id=body_id, name=body_id, body_class=body_class, color="#FFFFFF", display_radius=radius)

    def test_override_table(self):
        assert display_radius(self._body("jupiter", BodyClass.PLANET)) == 12000.0

    def test_physical_times_multiplier(self):
        assert display_radius(self._body("earth", BodyClass.PLANET)) == pytest.approx(6371.0 / SCALE_KM * 500.0)

    def test_explicit_radius_wins(self):
        assert display_radius(self._body("jupiter", BodyClass.PLANET, radius=42.0)) == 42.0

    def test_floor_for_unknown_sizes(self):
        assert display_radius(self._body("12345", BodyClass.SATELLITE)) == MIN_DISPLAY_RADIUS


class TestGlobePoint:
    def test_prime_meridian_faces_z(self):
        np.testing.assert_allclose(globe_point(0.0, 0.0), [0.0, 0.0, EARTH_RADIUS_UNITS], atol=1e-12)

    def test_north_pole_is_up(self):
        np.testing.assert_allclose(globe_point(90.0, 0.0), [0.0, EARTH_RADIUS_UNITS, 0.0], atol=1e-12)

    def test_altitude_raises_point(self):
        point = globe_point(10.0, 20.0, altitude_km=400.0)
        assert np.linalg.norm(point) == pytest.approx(EARTH_RADIUS_UNITS + 0.4)
