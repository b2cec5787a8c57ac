"""
Pose estimation for the position model.

The estimator maintains the localization result reported to the robot's
clients. It runs once per tick, after the engine has moved the robot with the
velocity produced by the command controller.

Localization Modes:
    Exact ("gps"):
        The estimate is recomputed from ground truth every tick,

        pose = to_local(true_pose, origin)

        so it carries no history and never drifts.

    Dead reckoning ("odom"):
        The commanded velocity is integrated over the tick length dt with a
        persistent multiplicative bias e:

        a  <- normalize(a + v_a dt (1 + e_a))
        dx  = v_x dt (1 + e_x)
        dy  = v_y dt (1 + e_y)
        x  <- x + dx cos(a) + dy sin(a)
        y  <- y - (dy cos(a) - dx sin(a))

        The translation is rotated by the heading after this tick's rotation
        (first-order integration). Drift grows because the same bias
        compounds every tick.

References:
    - Siegwart, R., Nourbakhsh, I. R. (2004). Introduction to Autonomous Mobile Robots
"""

import math
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from ..geometry.frames import Pose, Velocity, normalize_angle, to_local
from .error_model import IntegrationError

logger = logging.getLogger(__name__)


class LocalizationMode(Enum):
    """Localization models, valued by their configuration keyword."""
    EXACT = "gps"
    DEAD_RECKONING = "odom"


DEFAULT_LOCALIZATION_MODE = LocalizationMode.EXACT


@dataclass
class PositionEstimate:
    """
    Localization result reported to clients.

    Attributes:
        origin: Reference frame of the estimate, in global coordinates
        pose: Estimated pose relative to origin
        pose_error: Reported uncertainty of the estimate (zero: the model
            assumes it knows exactly where it starts)
    """
    origin: Pose = field(default_factory=Pose)
    pose: Pose = field(default_factory=Pose)
    pose_error: Pose = field(default_factory=Pose)

    def copy(self) -> "PositionEstimate":
        return PositionEstimate(self.origin.copy(), self.pose.copy(), self.pose_error.copy())


def parse_localization_mode(value: Optional[str], model_name: str = "position") -> LocalizationMode:
    """
    Parse a localization keyword ("gps" or "odom").

    Missing or invalid keywords are reported and the default mode is used.

    Args:
        value: Keyword read from configuration
        model_name: Model name used in the log message

    Returns:
        Parsed localization mode, or DEFAULT_LOCALIZATION_MODE
    """
    if not value:
        logger.error(f'No localization mode string specified for model "{model_name}"')
        return DEFAULT_LOCALIZATION_MODE

    try:
        return LocalizationMode(value)
    except ValueError:
        valid = " and ".join(f'"{m.value}"' for m in LocalizationMode)
        logger.error(
            f'Unrecognized localization mode "{value}" for model "{model_name}". '
            f'Valid choices are {valid}.'
        )
        return DEFAULT_LOCALIZATION_MODE


class PoseEstimator:
    """
    Per-tick pose estimator.

    Owns the PositionEstimate and the integration error of one model.

    Attributes:
        mode (LocalizationMode): Active localization model
        estimate (PositionEstimate): Current localization result
        integration_error (IntegrationError): Fixed dead-reckoning bias
    """

    def __init__(self,
                 origin: Pose,
                 integration_error: IntegrationError,
                 mode: LocalizationMode = DEFAULT_LOCALIZATION_MODE):
        self.mode = mode
        self.integration_error = integration_error
        self.estimate = PositionEstimate(origin=origin.copy())

    def reset_origin(self, origin: Pose, true_pose: Pose) -> None:
        """
        Move the localization origin and recompute the estimate from truth.

        The pose error is zeroed: the robot is assumed to know exactly where
        it is at configuration time.

        Args:
            origin: New origin in global coordinates
            true_pose: Current ground-truth pose
        """
        self.estimate.origin = origin.copy()
        self.estimate.pose = to_local(true_pose, origin)
        self.estimate.pose_error = Pose()

    def update(self, true_pose: Pose, velocity: Velocity, dt: float) -> PositionEstimate:
        """
        Advance the estimate by one tick.

        Args:
            true_pose: Ground-truth pose after the engine moved the robot
            velocity: Commanded velocity used for this tick
            dt: Tick length [s]

        Returns:
            The updated estimate. For an unknown localization mode, or a
            non-finite velocity under dead reckoning, the error is logged and
            the estimate is left unchanged.
        """
        if self.mode is LocalizationMode.EXACT:
            self.estimate.pose = to_local(true_pose, self.estimate.origin)

        elif self.mode is LocalizationMode.DEAD_RECKONING:
            if not velocity.is_finite():
                logger.error(f"Non-finite velocity {velocity}, estimate not integrated")
            else:
                self.estimate.pose = self.integrate(self.estimate.pose, velocity, dt)

        else:
            logger.error(f"Unknown localization mode {self.mode!r}")

        return self.estimate

    def integrate(self, pose: Pose, velocity: Velocity, dt: float) -> Pose:
        """
        Integrate a velocity over one tick with the systematic bias applied.

        Args:
            pose: Estimate before the tick
            velocity: Body-frame velocity
            dt: Tick length [s]

        Returns:
            Estimate after the tick
        """
        err = self.integration_error

        a = normalize_angle(pose.a + (velocity.a * dt) * (1.0 + err.a))

        cosa = math.cos(a)
        sina = math.sin(a)
        dx = (velocity.x * dt) * (1.0 + err.x)
        dy = (velocity.y * dt) * (1.0 + err.y)

        return Pose(
            x=pose.x + dx * cosa + dy * sina,
            y=pose.y - (dy * cosa - dx * sina),
            a=a,
        )
