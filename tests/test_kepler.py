"""Tests for Kepler's equation and element-to-position conversion."""

import math

import numpy as np
import pytest

from orbital_engine.core.kepler import (
    ElementRates,
    OrbitalElements,
    elements_from_state,
    solve_kepler,
    solve_kepler_batch,
    true_anomaly_from_eccentric,
)
from orbital_engine.utils.constants import GAUSSIAN_GRAVITATIONAL_CONSTANT, J2000_JD, KEPLER_MAX_ITERATIONS


class TestSolveKepler:
    def test_circular_converges_immediately(self):
        ecc_anomaly, iterations = solve_kepler(1.0, 0.0)
        assert ecc_anomaly == pytest.approx(1.0)
        assert iterations == 1

    @pytest.mark.parametrize("eccentricity", [0.1, 0.5, 0.9, 0.967])
    def test_satisfies_equation(self, eccentricity):
        mean_anomaly = 2.0
        ecc_anomaly, iterations = solve_kepler(mean_anomaly, eccentricity)
        assert ecc_anomaly - eccentricity * math.sin(ecc_anomaly) == pytest.approx(mean_anomaly, abs=1e-6)
        assert iterations <= KEPLER_MAX_ITERATIONS

    def test_near_parabolic_is_bounded(self):
        _, iterations = solve_kepler(1e-4, 0.9999)
        assert iterations <= KEPLER_MAX_ITERATIONS

    def test_batch_is_continuous_across_two_pi(self):
        anomalies = np.linspace(-math.pi, 3.0 * math.pi, 101)
        ecc = solve_kepler_batch(anomalies, 0.3)
        assert (np.diff(ecc) > 0).all()
        np.testing.assert_allclose(ecc - 0.3 * np.sin(ecc), anomalies, atol=1e-6)

    def test_true_anomaly_at_apsides(self):
        assert true_anomaly_from_eccentric(0.0, 0.5) == pytest.approx(0.0)
        assert abs(true_anomaly_from_eccentric(math.pi, 0.5)) == pytest.approx(math.pi)


class TestOrbitalElements:
    def test_rejects_open_orbits(self):
        with pytest.raises(ValueError):
            OrbitalElements(1.0, 1.2, 0.0, 0.0, 0.0, 0.0)

    def test_rejects_non_positive_axis(self):
        with pytest.raises(ValueError):
            OrbitalElements(0.0, 0.1, 0.0, 0.0, 0.0, 0.0)

    def test_one_au_period_is_a_year(self):
        assert OrbitalElements(1.0, 0.0, 0.0, 0.0, 0.0, 0.0).period_days == pytest.approx(365.2569, rel=1e-5)

    def test_circular_radius_constant(self):
        elements = OrbitalElements(2.0, 0.0, 30.0, 40.0, 50.0, 0.0)
        positions = elements.positions_for_mean_anomalies(np.linspace(0.0, 2.0 * math.pi, 17))
        np.testing.assert_allclose(np.linalg.norm(positions, axis=1), 2.0)

    def test_periapsis_at_zero_mean_anomaly(self):
        elements = OrbitalElements(3.0, 0.5, 0.0, 0.0, 0.0, 0.0)
        state = elements.state_at(J2000_JD)
        np.testing.assert_allclose(state.position, [1.5, 0.0, 0.0], atol=1e-9)
        assert state.radius == pytest.approx(elements.periapsis_distance)

    def test_inclination_lifts_out_of_plane(self):
        # Quarter orbit past an ascending node on +x puts the body at max height
        elements = OrbitalElements(1.0, 0.0, 90.0, 0.0, 0.0, 90.0)
        np.testing.assert_allclose(elements.state_at(J2000_JD).position, [0.0, 0.0, 1.0], atol=1e-9)

    def test_from_longitudes(self):
        elements = OrbitalElements.from_longitudes(
            1.0, 0.0167, 0.0, mean_longitude=100.0, longitude_of_periapsis=103.0, ascending_node=1.0,
            mean_longitude_rate=36000.0, longitude_of_periapsis_rate=0.3,
        )
        assert elements.arg_periapsis == pytest.approx(102.0)
        assert elements.mean_anomaly == pytest.approx(-3.0)
        assert elements.mean_motion == pytest.approx((36000.0 - 0.3) / 36525.0)

    def test_rates_apply_per_century(self):
        elements = OrbitalElements(1.0, 0.1, 1.0, 10.0, 20.0, 0.0, rates=ElementRates(ascending_node=1.0))
        later = elements.at(J2000_JD + 36525.0)
        assert later.ascending_node == pytest.approx(11.0)
        assert later.epoch_jd == J2000_JD + 36525.0


class TestElementsFromState:
    def test_circular_orbit(self):
        k = GAUSSIAN_GRAVITATIONAL_CONSTANT
        elements = elements_from_state(np.array([1.0, 0.0, 0.0]), np.array([0.0, k, 0.0]), J2000_JD)
        assert elements.semi_major_axis == pytest.approx(1.0)
        assert elements.eccentricity == pytest.approx(0.0, abs=1e-9)
        assert elements.inclination == pytest.approx(0.0)
        assert elements.period_days == pytest.approx(365.2569, rel=1e-5)

    @pytest.mark.parametrize("direction", [1.0, -1.0])
    def test_elements_reproduce_the_position(self, direction):
        position = np.array([0.3, -1.2, 0.4])
        velocity = direction * np.array([0.012, 0.004, -0.003])
        elements = elements_from_state(position, velocity, J2000_JD + 100.0)

        assert (elements.inclination > 90.0) == (direction < 0)
        np.testing.assert_allclose(elements.state_at(J2000_JD + 100.0).position, position, atol=1e-9)
        ring = elements.positions_for_mean_anomalies(np.array([math.radians(elements.mean_anomaly)]))
        np.testing.assert_allclose(ring[0], position, atol=1e-9)

    def test_unbound_state(self):
        with pytest.raises(ValueError):
            elements_from_state(np.array([1.0, 0.0, 0.0]), np.array([0.0, 0.05, 0.0]), J2000_JD)
