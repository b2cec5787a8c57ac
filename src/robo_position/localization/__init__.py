"""
Localization for the position model.

This module contains the exact and dead-reckoning pose estimators, the
systematic odometry error model, and drift analysis against ground truth.
"""

from .error_model import OdometryErrorLimits, IntegrationError
from .estimator import (
    LocalizationMode, DEFAULT_LOCALIZATION_MODE, PositionEstimate, PoseEstimator,
    parse_localization_mode
)
from .analysis import DriftStatistics, compute_drift_statistics

__all__ = [
    "OdometryErrorLimits",
    "IntegrationError",
    "LocalizationMode",
    "DEFAULT_LOCALIZATION_MODE",
    "PositionEstimate",
    "PoseEstimator",
    "parse_localization_mode",
    "DriftStatistics",
    "compute_drift_statistics"
]
