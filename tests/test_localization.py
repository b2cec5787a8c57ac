import pytest
import numpy as np
import math
import logging
import dataclasses
import sys
import os

# Add the src directory to Python path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from robo_position.geometry import Pose, Velocity, to_local
from robo_position.localization import (
    OdometryErrorLimits, IntegrationError, LocalizationMode, PositionEstimate,
    PoseEstimator, parse_localization_mode, compute_drift_statistics
)


class TestIntegrationError:
    """Test the systematic odometry error model"""

    def test_default_limits(self):
        """Test default maximum error proportions"""
        limits = OdometryErrorLimits()
        assert (limits.x, limits.y, limits.a) == (0.03, 0.03, 0.05)

    def test_negative_limits_rejected(self):
        """Test negative maxima raise"""
        with pytest.raises(ValueError):
            OdometryErrorLimits(x=-0.01)

    def test_samples_within_half_range(self):
        """Test samples lie in [-E/2, +E/2) on every axis"""
        rng = np.random.default_rng(3)
        limits = OdometryErrorLimits(0.03, 0.03, 0.05)

        samples = np.array([
            [e.x, e.y, e.a] for e in (IntegrationError.sample(limits, rng) for _ in range(2000))
        ])

        assert np.all(samples[:, 0] >= -0.015) and np.all(samples[:, 0] < 0.015)
        assert np.all(samples[:, 1] >= -0.015) and np.all(samples[:, 1] < 0.015)
        assert np.all(samples[:, 2] >= -0.025) and np.all(samples[:, 2] < 0.025)

        # Uniform over the range: mean near zero, spread close to E/sqrt(12)
        assert abs(np.mean(samples[:, 2])) < 0.002
        assert np.std(samples[:, 2]) == pytest.approx(0.05 / math.sqrt(12), rel=0.1)

    def test_zero_limits_give_zero_error(self):
        """Test zero maxima give an unbiased integrator"""
        error = IntegrationError.sample(OdometryErrorLimits(0.0, 0.0, 0.0), np.random.default_rng(0))
        assert error == IntegrationError(0.0, 0.0, 0.0)

    def test_seeded_sampling_reproducible(self):
        """Test the same seed gives the same bias"""
        a = IntegrationError.sample(rng=np.random.default_rng(11))
        b = IntegrationError.sample(rng=np.random.default_rng(11))
        assert a == b

    def test_error_is_immutable(self):
        """Test a sampled bias cannot be modified in place"""
        error = IntegrationError(0.01, 0.02, 0.03)
        with pytest.raises(dataclasses.FrozenInstanceError):
            error.x = 0.5

    def test_scale_factors(self):
        """Test (1 + e) multipliers"""
        np.testing.assert_allclose(IntegrationError(0.01, -0.02, 0.03).scale_factors(), [1.01, 0.98, 1.03])


class TestParseLocalizationMode:
    """Test localization keyword parsing"""

    def test_valid_keywords(self):
        assert parse_localization_mode("gps") is LocalizationMode.EXACT
        assert parse_localization_mode("odom") is LocalizationMode.DEAD_RECKONING

    def test_invalid_keyword_falls_back(self, caplog):
        """Test unknown keywords are reported and exact localization is used"""
        with caplog.at_level(logging.ERROR):
            mode = parse_localization_mode("slam", "robot1")

        assert mode is LocalizationMode.EXACT
        assert 'Unrecognized localization mode "slam" for model "robot1"' in caplog.text

    def test_missing_keyword_falls_back(self, caplog):
        """Test an empty keyword is reported"""
        with caplog.at_level(logging.ERROR):
            mode = parse_localization_mode("", "robot1")

        assert mode is LocalizationMode.EXACT
        assert "No localization mode string specified" in caplog.text


class TestPoseEstimator:
    """Test exact and dead-reckoning pose estimation"""

    def test_exact_mode_tracks_true_pose(self):
        """Test the exact estimate is the true pose in the origin frame"""
        origin = Pose(1.0, 2.0, 0.3)
        estimator = PoseEstimator(origin, IntegrationError(0.01, 0.01, 0.01), LocalizationMode.EXACT)

        true_pose = Pose(4.0, -1.0, 2.5)
        estimate = estimator.update(true_pose, Velocity(5.0, 5.0, 5.0), 0.1)

        assert estimate.pose == to_local(true_pose, origin)

    def test_exact_mode_ignores_velocity(self):
        """Test the exact estimate has no history dependence"""
        origin = Pose()
        estimator = PoseEstimator(origin, IntegrationError(), LocalizationMode.EXACT)

        for k in range(10):
            estimator.update(Pose(float(k), 0.0, 0.0), Velocity(1.0, 0.0, 1.0), 0.1)
        estimate = estimator.update(Pose(2.0, 3.0, 1.0), Velocity(), 0.1)

        np.testing.assert_allclose(estimate.pose.to_array(), [2.0, 3.0, 1.0], atol=1e-12)

    def test_dead_reckoning_straight_line(self):
        """Test forward integration with no bias"""
        estimator = PoseEstimator(Pose(), IntegrationError(), LocalizationMode.DEAD_RECKONING)

        estimate = estimator.update(Pose(100.0, 100.0, 0.0), Velocity(1.0, 0.0, 0.0), 0.1)

        np.testing.assert_allclose(estimate.pose.to_array(), [0.1, 0.0, 0.0], atol=1e-12)

    def test_dead_reckoning_uses_updated_heading(self):
        """Test translation is rotated by the heading after this tick's rotation"""
        estimator = PoseEstimator(Pose(), IntegrationError(), LocalizationMode.DEAD_RECKONING)

        estimate = estimator.update(Pose(), Velocity(1.0, 0.0, math.pi / 2), 1.0)

        np.testing.assert_allclose(estimate.pose.to_array(), [0.0, 1.0, math.pi / 2], atol=1e-12)

    def test_dead_reckoning_applies_bias(self):
        """Test each axis is scaled by its (1 + e) factor"""
        error = IntegrationError(0.1, 0.2, 0.5)
        estimator = PoseEstimator(Pose(), error, LocalizationMode.DEAD_RECKONING)

        estimate = estimator.update(Pose(), Velocity(1.0, 0.0, 0.2), 1.0)

        heading = 0.2 * 1.5
        assert estimate.pose.a == pytest.approx(heading)
        assert estimate.pose.x == pytest.approx(1.1 * math.cos(heading))
        assert estimate.pose.y == pytest.approx(1.1 * math.sin(heading))

    def test_dead_reckoning_lateral_axis(self):
        """Test lateral increments follow the integrator's sign convention"""
        estimator = PoseEstimator(Pose(), IntegrationError(), LocalizationMode.DEAD_RECKONING)

        estimate = estimator.update(Pose(), Velocity(0.0, 1.0, 0.0), 1.0)

        np.testing.assert_allclose(estimate.pose.to_array(), [0.0, -1.0, 0.0], atol=1e-12)

    def test_dead_reckoning_heading_wraps(self):
        """Test the integrated heading stays in (-pi, pi]"""
        estimator = PoseEstimator(Pose(), IntegrationError(), LocalizationMode.DEAD_RECKONING)

        for _ in range(100):
            estimate = estimator.update(Pose(), Velocity(0.0, 0.0, 1.0), 0.1)
            assert -math.pi < estimate.pose.a <= math.pi

        assert estimate.pose.a == pytest.approx(10.0 - 4.0 * math.pi, abs=1e-9)

    def test_unknown_mode_leaves_pose(self, caplog):
        """Test an unknown localization mode is reported and the pose kept"""
        estimator = PoseEstimator(Pose(), IntegrationError(), LocalizationMode.EXACT)
        before = estimator.update(Pose(1.0, 1.0, 1.0), Velocity(), 0.1).pose.copy()

        estimator.mode = "slam"
        with caplog.at_level(logging.ERROR):
            estimate = estimator.update(Pose(5.0, 5.0, 0.0), Velocity(1.0, 0.0, 0.0), 0.1)

        assert estimate.pose == before
        assert "Unknown localization mode" in caplog.text

    def test_non_finite_velocity_not_integrated(self, caplog):
        """Test an infinite velocity is reported and the estimate kept"""
        estimator = PoseEstimator(Pose(), IntegrationError(), LocalizationMode.DEAD_RECKONING)
        before = estimator.update(Pose(), Velocity(1.0, 0.0, 0.0), 0.1).pose.copy()

        with caplog.at_level(logging.ERROR):
            estimate = estimator.update(Pose(), Velocity(0.0, 0.0, float('inf')), 0.1)

        assert estimate.pose == before
        assert "Non-finite velocity" in caplog.text

    def test_reset_origin(self):
        """Test moving the origin recomputes the estimate and zeroes its error"""
        estimator = PoseEstimator(Pose(), IntegrationError(), LocalizationMode.DEAD_RECKONING)
        estimator.estimate.pose_error = Pose(0.1, 0.1, 0.1)
        origin = Pose(1.0, 0.0, math.pi / 4)
        true_pose = Pose(2.0, 1.0, math.pi / 2)

        estimator.reset_origin(origin, true_pose)

        assert estimator.estimate.origin == origin
        assert estimator.estimate.pose == to_local(true_pose, origin)
        assert estimator.estimate.pose_error == Pose()

    def test_estimate_copy_is_independent(self):
        """Test copies do not share pose objects"""
        estimate = PositionEstimate(Pose(1.0, 0.0, 0.0), Pose(2.0, 0.0, 0.0))
        copied = estimate.copy()
        copied.pose.x = 9.0

        assert estimate.pose.x == 2.0


class TestDriftStatistics:
    """Test drift analysis against ground truth"""

    def test_identical_sequences(self):
        """Test a perfect estimate has zero error and drift"""
        poses = [Pose(0.1 * k, 0.0, 0.0) for k in range(20)]
        stats = compute_drift_statistics(poses, poses, 0.1)

        assert stats.max_position_error == 0.0
        assert stats.mean_heading_error == 0.0
        assert stats.drift_rate == 0.0

    def test_linear_drift_rate(self):
        """Test a linearly growing error gives its slope as the drift rate"""
        dt = 0.1
        truth = [Pose(0.4 * dt * k, 0.0, 0.0) for k in range(1, 51)]
        estimate = [Pose(0.4 * dt * k * 1.03, 0.0, 0.0) for k in range(1, 51)]

        stats = compute_drift_statistics(truth, estimate, dt)

        assert stats.drift_rate == pytest.approx(0.4 * 0.03, rel=1e-6)
        assert stats.drift_r_value == pytest.approx(1.0)
        assert stats.final_position_error == pytest.approx(0.4 * 5.0 * 0.03)
        assert stats.max_position_error == pytest.approx(stats.final_position_error)

    def test_heading_error_wraps(self):
        """Test heading differences across the +/-pi seam are small"""
        truth = [Pose(0.0, 0.0, 3.1)]
        estimate = [Pose(0.0, 0.0, -3.1)]

        stats = compute_drift_statistics(truth, estimate, 0.1)

        assert stats.max_heading_error == pytest.approx(2.0 * math.pi - 6.2)

    def test_invalid_inputs(self):
        """Test mismatched, empty and zero-step inputs raise"""
        with pytest.raises(ValueError):
            compute_drift_statistics([Pose()], [Pose(), Pose()], 0.1)
        with pytest.raises(ValueError):
            compute_drift_statistics([], [], 0.1)
        with pytest.raises(ValueError):
            compute_drift_statistics([Pose()], [Pose()], 0.0)
