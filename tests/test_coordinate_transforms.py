"""Tests for frame conversions."""

import numpy as np
import pytest

from orbital_engine.core.coordinate_transforms import (
    ecef_to_geodetic_batch,
    ecliptic_to_scene,
    eci_to_ecef_batch,
    equatorial_to_ecliptic,
    geodetic_to_globe,
    ground_region,
    perifocal_rotation,
    to_scene_axes,
)
from orbital_engine.utils.constants import OBLIQUITY_J2000_DEG, R_EARTH_EQUATORIAL


class TestSceneAxes:
    def test_reference_normal_becomes_up(self):
        np.testing.assert_array_equal(to_scene_axes([1.0, 2.0, 3.0]), [1.0, 3.0, 2.0])

    def test_batch(self):
        points = np.arange(6, dtype=float).reshape(2, 3)
        np.testing.assert_array_equal(to_scene_axes(points), [[0.0, 2.0, 1.0], [3.0, 5.0, 4.0]])

    def test_ecliptic_to_scene_scales(self):
        np.testing.assert_allclose(ecliptic_to_scene(np.array([0.0, 0.0, 1.0]), 10.0), [0.0, 10.0, 0.0])


class TestEquatorialToEcliptic:
    def test_equinox_direction_unchanged(self):
        np.testing.assert_allclose(equatorial_to_ecliptic([1.0, 0.0, 0.0]), [1.0, 0.0, 0.0])

    def test_ecliptic_pole(self):
        eps = np.radians(OBLIQUITY_J2000_DEG)
        pole_equatorial = np.array([0.0, -np.sin(eps), np.cos(eps)])
        np.testing.assert_allclose(equatorial_to_ecliptic(pole_equatorial), [0.0, 0.0, 1.0], atol=1e-12)


class TestPerifocal:
    def test_identity_for_zero_angles(self):
        np.testing.assert_allclose(perifocal_rotation(0.0, 0.0, 0.0), np.eye(3), atol=1e-12)

    def test_is_orthonormal(self):
        rotation = perifocal_rotation(58.42, 162.26, 111.33)
        np.testing.assert_allclose(rotation @ rotation.T, np.eye(3), atol=1e-12)


class TestGeodetic:
    def test_eci_to_ecef_rotates_about_pole(self):
        rotated = eci_to_ecef_batch(np.array([[1.0, 0.0, 5.0], [0.0, 1.0, 0.0]]), np.array([np.pi / 2, 0.0]))
        np.testing.assert_allclose(rotated, [[0.0, -1.0, 5.0], [0.0, 1.0, 0.0]], atol=1e-12)

    def test_equator_surface_point(self):
        lats, lons, alts = ecef_to_geodetic_batch(np.array([[R_EARTH_EQUATORIAL + 400.0, 0.0, 0.0]]))
        assert lats[0] == pytest.approx(0.0, abs=1e-9)
        assert lons[0] == pytest.approx(0.0, abs=1e-9)
        assert alts[0] == pytest.approx(400.0, abs=1e-6)

    def test_globe_east_is_positive_x(self):
        np.testing.assert_allclose(geodetic_to_globe(0.0, 90.0, radius=2.0), [2.0, 0.0, 0.0], atol=1e-12)

    def test_globe_batch_shape(self):
        points = geodetic_to_globe(np.zeros(5), np.linspace(-180, 180, 5), radius=1.0)
        assert points.shape == (5, 3)
        np.testing.assert_allclose(np.linalg.norm(points, axis=1), 1.0)


class TestGroundRegion:
    @pytest.mark.parametrize(
        "lat, lon, region",
        [
            (70.0, 10.0, "Arctic"),
            (-75.0, 100.0, "Antarctic"),
            (48.0, 2.0, "Europe"),
            (25.0, 45.0, "North Africa / Middle East"),
            (-10.0, 20.0, "Africa"),
            (55.0, 90.0, "Russia / Central Asia"),
            (20.0, 78.0, "South Asia"),
            (-30.0, 135.0, "Southeast Asia / Australia"),
            (40.0, -100.0, "North America"),
            (15.0, -80.0, "Central America / Caribbean"),
            (-20.0, -60.0, "South America"),
            (0.0, 170.0, "Pacific Ocean"),
            (0.0, -175.0, "Pacific Ocean"),
        ],
    )
    def test_labels(self, lat, lon, region):
        assert ground_region(lat, lon) == region

    def test_polar_caps_win_over_longitude(self):
        assert ground_region(61.0, -100.0) == "Arctic"
