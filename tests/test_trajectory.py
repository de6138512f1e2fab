"""Tests for tabulated probe trajectories."""

from datetime import datetime, timedelta, timezone

import numpy as np
import pytest

from orbital_engine.core.trajectory import (
    Milestone,
    ProbeTrajectory,
    build_flyout_trajectory,
    decimal_year_to_datetime,
    light_travel_time_hours,
)

T0 = datetime(2000, 1, 1, tzinfo=timezone.utc)


@pytest.fixture
def trajectory():
    return ProbeTrajectory(
        launch=T0,
        times=(T0, T0 + timedelta(days=10), T0 + timedelta(days=20)),
        positions=np.array([[1.0, 0.0, 0.0], [2.0, 0.0, 0.0], [2.0, 2.0, 0.0]]),
        milestones=(Milestone(T0, "Launch"), Milestone(T0 + timedelta(days=15), "Flyby", "jupiter")),
    )


class TestFix:
    def test_interpolates_between_samples(self, trajectory):
        fix = trajectory.fix(T0 + timedelta(days=5))
        np.testing.assert_allclose(fix.position, [1.5, 0.0, 0.0])
        assert not fix.extrapolated

    def test_exact_sample(self, trajectory):
        np.testing.assert_allclose(trajectory.fix(T0 + timedelta(days=20)).position, [2.0, 2.0, 0.0])

    def test_extrapolates_past_the_end(self, trajectory):
        fix = trajectory.fix(T0 + timedelta(days=30))
        np.testing.assert_allclose(fix.position, [2.0, 4.0, 0.0])
        assert fix.extrapolated

    def test_extrapolates_before_the_start(self, trajectory):
        fix = trajectory.fix(T0 - timedelta(days=10))
        np.testing.assert_allclose(fix.position, [0.0, 0.0, 0.0], atol=1e-12)
        assert fix.extrapolated

    def test_index_at_or_before(self, trajectory):
        assert trajectory.index_at_or_before(T0 - timedelta(seconds=1)) == -1
        assert trajectory.index_at_or_before(T0) == 0
        assert trajectory.index_at_or_before(T0 + timedelta(days=19)) == 1
        assert trajectory.index_at_or_before(T0 + timedelta(days=400)) == 2

    def test_milestones_until(self, trajectory):
        assert [m.name for m in trajectory.milestones_until(T0 + timedelta(days=14))] == ["Launch"]
        assert len(trajectory.milestones_until(T0 + timedelta(days=16))) == 2


class TestValidation:
    def test_needs_increasing_times(self):
        with pytest.raises(ValueError):
            ProbeTrajectory(launch=T0, times=(T0, T0), positions=np.zeros((2, 3)))

    def test_lengths_must_match(self):
        with pytest.raises(ValueError):
            ProbeTrajectory(launch=T0, times=(T0, T0 + timedelta(days=1)), positions=np.zeros((3, 3)))


class TestFlyout:
    def test_distance_follows_key_points(self):
        launch = datetime(1977, 9, 5, tzinfo=timezone.utc)
        trajectory = build_flyout_trajectory(launch, [(1977.68, 1.0), (1987.68, 51.0)], 35.0, 35.0)
        assert trajectory.start == launch
        assert trajectory.end <= decimal_year_to_datetime(1987.68)
        distances = np.linalg.norm(trajectory.positions, axis=1)
        assert distances[0] == pytest.approx(1.0)
        assert (np.diff(distances) > 0).all()
        # Halfway in time is halfway in distance
        mid = trajectory.fix(launch + timedelta(days=5 * 365.25)).position
        assert np.linalg.norm(mid) == pytest.approx(26.0, abs=0.2)

    def test_leaves_the_ecliptic(self):
        launch = datetime(1977, 8, 20, tzinfo=timezone.utc)
        trajectory = build_flyout_trajectory(launch, [(1977.64, 1.0), (1990.0, 30.0)], 55.0, -10.0)
        assert trajectory.positions[0][2] == pytest.approx(0.0)
        assert trajectory.positions[-1][2] < 0.0


def test_decimal_year():
    assert decimal_year_to_datetime(2000.0) == datetime(2000, 1, 1, tzinfo=timezone.utc)
    assert decimal_year_to_datetime(2001.5) == datetime(2001, 7, 2, 12, tzinfo=timezone.utc)


def test_light_travel_time():
    assert light_travel_time_hours(1.0) * 3600.0 == pytest.approx(499.005, abs=1e-3)
