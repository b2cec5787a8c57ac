"""
Drive-mode kinematics for mobile robot bases.

Maps an abstract three degree-of-freedom velocity request onto the velocity a
given drivetrain can actually produce.

Physical Models:
    - Differential drive (e.g. a Pioneer): turning and forward motion are
      coupled through the two driven wheels, so lateral motion cannot be
      expressed. Output is (v_x, 0, omega).
    - Omnidirectional drive: each of the three axes is independently
      controllable. Output equals the request.
"""

import logging
from enum import Enum
from typing import Optional

from ..geometry.frames import Velocity

logger = logging.getLogger(__name__)


class DriveMode(Enum):
    """Drivetrain topologies, valued by their configuration keyword."""
    DIFFERENTIAL = "diff"
    OMNIDIRECTIONAL = "omni"


DEFAULT_DRIVE_MODE = DriveMode.DIFFERENTIAL


def apply_drive_mode(mode: DriveMode, requested: Velocity) -> Velocity:
    """
    Restrict a requested velocity to what the drivetrain can achieve.

    Args:
        mode: Drivetrain topology
        requested: Desired body-frame velocity

    Returns:
        Achievable body-frame velocity. For an unrecognized mode the error is
        logged and a zero velocity is returned.
    """
    if mode is DriveMode.DIFFERENTIAL:
        return Velocity(requested.x, 0.0, requested.a)
    elif mode is DriveMode.OMNIDIRECTIONAL:
        return Velocity(requested.x, requested.y, requested.a)

    logger.error(f"Unknown steering mode {mode!r}")
    return Velocity()


def parse_drive_mode(value: Optional[str], model_name: str = "position") -> DriveMode:
    """
    Parse a drive keyword ("diff" or "omni").

    Invalid keywords are reported and the default drive mode is used.

    Args:
        value: Keyword read from configuration, or None when absent
        model_name: Model name used in the log message

    Returns:
        Parsed drive mode, or DEFAULT_DRIVE_MODE
    """
    if value is None:
        return DEFAULT_DRIVE_MODE

    try:
        return DriveMode(value)
    except ValueError:
        valid = ", ".join(f'"{m.value}"' for m in DriveMode)
        logger.error(
            f'Invalid position drive mode specified for model "{model_name}": "{value}" - '
            f'should be one of: {valid}. Using "{DEFAULT_DRIVE_MODE.value}" as default.'
        )
        return DEFAULT_DRIVE_MODE
