"""
Drivetrain kinematics for the position model.
"""

from .drive import DriveMode, DEFAULT_DRIVE_MODE, apply_drive_mode, parse_drive_mode

__all__ = [
    "DriveMode",
    "DEFAULT_DRIVE_MODE",
    "apply_drive_mode",
    "parse_drive_mode"
]
