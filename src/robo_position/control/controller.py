"""
Command Controller for the Position Model

This module turns the stored motion command into an actuation velocity once
per simulation tick. Two control laws are available, selected by the command
itself and re-evaluated from scratch every tick.

Control Laws:
    - Velocity control: the command is a body-frame velocity and is passed
      straight through the drive-mode kinematics.
    - Position control: the command is a target pose in the local estimated
      frame. Errors are reduced by a speed-limited proportional controller.

Position Control:
    Errors are measured against the current pose estimate:

    e_x = cmd.x - pose.x
    e_y = cmd.y - pose.y
    e_a = normalize(cmd.a - pose.a)

    Omnidirectional bases reduce each axis independently:

    v = clip(e, -v_max, v_max)

    Differential bases cannot move sideways, so they rotate then drive:

    1. Within the close-enough radius of the goal point, turn on the spot
       towards cmd.a.
    2. Otherwise turn to face the goal point,
           theta_goal = atan2(e_y, e_x),  e_h = normalize(theta_goal - pose.a)
       and drive forward at min(hypot(e_x, e_y), v_max) only once
       |e_h| < heading_tolerance.
"""

import math
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

import numpy as np

from ..geometry.frames import Pose, Velocity, normalize_angle
from ..kinematics.drive import DriveMode, apply_drive_mode

logger = logging.getLogger(__name__)


class ControlMode(Enum):
    """Interpretation of the command triple."""
    VELOCITY = "velocity"    # (x, y, a) are body-frame velocities
    POSITION = "position"    # (x, y, a) is a target pose in the estimate frame


DEFAULT_CONTROL_MODE = ControlMode.VELOCITY


@dataclass
class Command:
    """Desired control input written by the robot's client between ticks."""

    mode: ControlMode = DEFAULT_CONTROL_MODE
    x: float = 0.0
    y: float = 0.0
    a: float = 0.0

    def is_finite(self) -> bool:
        return all(math.isfinite(v) for v in (self.x, self.y, self.a))


@dataclass
class ControllerLimits:
    """Speed limits and tolerances for the position controller."""

    # TODO: expose these as world-file properties alongside drive/localization
    max_speed_x: float = 0.4                 # Forward speed limit [m/s]
    max_speed_y: float = 0.4                 # Lateral speed limit [m/s]
    max_speed_a: float = 1.0                 # Turn rate limit [rad/s]
    close_enough: float = 0.02               # Goal point radius per axis [m]
    heading_tolerance: float = math.pi / 16  # Heading error allowing forward motion [rad]

    def __post_init__(self):
        """Validate controller limits."""
        if any(limit <= 0 for limit in [self.max_speed_x, self.max_speed_y, self.max_speed_a]):
            raise ValueError("Controller speed limits must be positive")
        if self.close_enough <= 0:
            raise ValueError(f"Close-enough threshold must be positive, got {self.close_enough}")
        if not (0 < self.heading_tolerance < math.pi):
            raise ValueError(f"Heading tolerance must be in (0, pi), got {self.heading_tolerance}")


def _clamp(value: float, limit: float) -> float:
    return float(np.clip(value, -limit, limit))


class CommandController:
    """
    Per-tick command controller.

    Holds no state between ticks other than its limits; the command, drive
    mode and pose estimate are supplied on every call.

    Attributes:
        limits (ControllerLimits): Speed limits and tolerances
    """

    def __init__(self, limits: Optional[ControllerLimits] = None):
        self.limits = limits or ControllerLimits()

    def compute_velocity(self, command: Command, drive_mode: DriveMode,
                         estimated_pose: Pose) -> Velocity:
        """
        Compute the actuation velocity for this tick.

        Args:
            command: Current motion command
            drive_mode: Drivetrain topology
            estimated_pose: Current pose estimate in the origin frame

        Returns:
            Velocity satisfying the drive-mode constraints. Unrecognized
            control or drive modes, and non-finite commands, are logged and
            give a zero velocity.
        """
        if not command.is_finite():
            logger.error(f"Non-finite command values {command}, stopping for this tick")
            return Velocity()

        if command.mode is ControlMode.VELOCITY:
            logger.debug(f"Velocity control: command ({command.x:.2f} {command.y:.2f} {command.a:.2f})")
            return apply_drive_mode(drive_mode, Velocity(command.x, command.y, command.a))

        elif command.mode is ControlMode.POSITION:
            return self._position_control(command, drive_mode, estimated_pose)

        logger.error(f"Unrecognized position command mode {command.mode!r}")
        return Velocity()

    def _position_control(self, command: Command, drive_mode: DriveMode,
                          pose: Pose) -> Velocity:
        x_error = command.x - pose.x
        y_error = command.y - pose.y
        a_error = normalize_angle(command.a - pose.a)

        logger.debug(f"Position control errors: {x_error:.2f} {y_error:.2f} {a_error:.2f}")

        if drive_mode is DriveMode.OMNIDIRECTIONAL:
            # reduce the error in each axis independently
            calc = Velocity(
                _clamp(x_error, self.limits.max_speed_x),
                _clamp(y_error, self.limits.max_speed_y),
                _clamp(a_error, self.limits.max_speed_a),
            )

        elif drive_mode is DriveMode.DIFFERENTIAL:
            calc = self._differential_position_control(x_error, y_error, a_error, pose)

        else:
            logger.error(f"Unknown steering mode {drive_mode!r}")
            return Velocity()

        return apply_drive_mode(drive_mode, calc)

    def _differential_position_control(self, x_error: float, y_error: float,
                                       a_error: float, pose: Pose) -> Velocity:
        """
        Rotate-then-drive controller for bases without lateral motion.

        Args:
            x_error: Goal x minus estimated x [m]
            y_error: Goal y minus estimated y [m]
            a_error: Normalized goal heading minus estimated heading [rad]
            pose: Current pose estimate

        Returns:
            Velocity with zero lateral component
        """
        limits = self.limits
        calc = Velocity()

        if abs(x_error) < limits.close_enough and abs(y_error) < limits.close_enough:
            logger.debug("Turning on the spot")
            calc.a = _clamp(a_error, limits.max_speed_a)
            return calc

        goal_angle = math.atan2(y_error, x_error)
        goal_distance = math.hypot(x_error, y_error)
        heading_error = normalize_angle(goal_angle - pose.a)

        logger.debug(f"Turning to face the goal point: steer errors {heading_error:.2f} {goal_distance:.2f}")
        calc.a = _clamp(heading_error, limits.max_speed_a)

        if abs(heading_error) < limits.heading_tolerance:
            logger.debug("Driving towards the goal")
            calc.x = min(goal_distance, limits.max_speed_x)

        return calc
