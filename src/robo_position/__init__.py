"""
Robo Position: Motion Control and Localization for Simulated Robot Bases

The motion and localization core of a simulated mobile-robot base. Each
simulation tick it turns a motion command into an actuation velocity for the
engine that owns ground truth, and reports a pose estimate that is either
exact or drifts like real odometry.

This package implements:
- Differential and omnidirectional drive kinematics
- Velocity pass-through and rotate-then-drive position control
- Exact ("gps") and dead-reckoning ("odom") localization with a fixed
  random integration bias
- World-file style configuration, drift analysis and visualization
"""

from .geometry.frames import Pose, Velocity, normalize_angle, to_local, to_global
from .kinematics.drive import DriveMode, apply_drive_mode
from .control.controller import ControlMode, Command, ControllerLimits, CommandController
from .localization.error_model import OdometryErrorLimits, IntegrationError
from .localization.estimator import LocalizationMode, PositionEstimate, PoseEstimator
from .localization.analysis import DriftStatistics, compute_drift_statistics
from .simulation.engine import SimulationEngine, KinematicWorld
from .simulation.config import PositionConfig, load_config
from .simulation.position_model import PositionModel, StepResult

# Optional visualization import (graceful failure if not available)
try:
    from .visualization.plotter import EstimateRenderer, plot_localization_comparison
    _has_visualization = True
except ImportError:
    EstimateRenderer = None
    plot_localization_comparison = None
    _has_visualization = False

__version__ = "1.0.0"
__author__ = "Robo Localization Team"

__all__ = [
    "Pose",
    "Velocity",
    "normalize_angle",
    "to_local",
    "to_global",
    "DriveMode",
    "apply_drive_mode",
    "ControlMode",
    "Command",
    "ControllerLimits",
    "CommandController",
    "OdometryErrorLimits",
    "IntegrationError",
    "LocalizationMode",
    "PositionEstimate",
    "PoseEstimator",
    "DriftStatistics",
    "compute_drift_statistics",
    "SimulationEngine",
    "KinematicWorld",
    "PositionConfig",
    "load_config",
    "PositionModel",
    "StepResult"
]

# Add visualization to __all__ only if available
if _has_visualization:
    __all__.extend(["EstimateRenderer", "plot_localization_comparison"])
