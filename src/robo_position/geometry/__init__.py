"""
Planar geometry for the position model.

Pose and velocity value types, angle normalization, and the origin-relative
frame transforms used by both localization modes.
"""

from .frames import Pose, Velocity, normalize_angle, to_local, to_global

__all__ = [
    "Pose",
    "Velocity",
    "normalize_angle",
    "to_local",
    "to_global"
]
