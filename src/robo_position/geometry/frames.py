"""
Planar pose and velocity types with origin-relative frame transforms.

This module holds the value types shared by every other part of the position
model, plus the rigid-body frame change used by both localization modes.

Mathematical Model:
    Expressing a global pose g in the frame of origin o rotates the offset
    by -o.a:

    a' = normalize(g.a - o.a)
    x' =  (g.x - o.x) cos(o.a) + (g.y - o.y) sin(o.a)
    y' =  (g.y - o.y) cos(o.a) - (g.x - o.x) sin(o.a)

    The inverse rotates the local offset by +o.a and translates by o:

    x = o.x + x' cos(o.a) - y' sin(o.a)
    y = o.y + x' sin(o.a) + y' cos(o.a)
    a = normalize(a' + o.a)

Coordinate Frames:
    - Global frame: world frame owned by the simulation engine
    - Origin frame: localization reference frame, fixed after configuration
    - Body frame: x-forward, y-left (velocity components)
"""

import math
from dataclasses import dataclass

import numpy as np


def normalize_angle(angle: float) -> float:
    """
    Wrap an angle to the half-open interval (-pi, pi].

    Args:
        angle: Angle in radians, any magnitude

    Returns:
        Equivalent angle in (-pi, pi]
    """
    wrapped = math.fmod(angle + math.pi, 2.0 * math.pi)
    if wrapped <= 0.0:
        wrapped += 2.0 * math.pi
    return wrapped - math.pi


@dataclass
class Pose:
    """2D position and heading [m, m, rad]."""

    x: float = 0.0
    y: float = 0.0
    a: float = 0.0

    def __post_init__(self):
        if not all(math.isfinite(v) for v in (self.x, self.y, self.a)):
            raise ValueError(f"Pose contains NaN or infinite values: {self}")

    def to_array(self) -> np.ndarray:
        return np.array([self.x, self.y, self.a])

    @classmethod
    def from_array(cls, values) -> "Pose":
        values = np.asarray(values, dtype=float)
        if values.shape != (3,):
            raise ValueError(f"Pose array must have 3 elements, got shape {values.shape}")
        return cls(float(values[0]), float(values[1]), float(values[2]))

    def copy(self) -> "Pose":
        return Pose(self.x, self.y, self.a)


@dataclass
class Velocity:
    """Body-frame velocity: forward [m/s], lateral [m/s], angular [rad/s]."""

    x: float = 0.0
    y: float = 0.0
    a: float = 0.0

    def to_array(self) -> np.ndarray:
        return np.array([self.x, self.y, self.a])

    @classmethod
    def from_array(cls, values) -> "Velocity":
        values = np.asarray(values, dtype=float)
        if values.shape != (3,):
            raise ValueError(f"Velocity array must have 3 elements, got shape {values.shape}")
        return cls(float(values[0]), float(values[1]), float(values[2]))

    def is_zero(self) -> bool:
        return self.x == 0.0 and self.y == 0.0 and self.a == 0.0

    def is_finite(self) -> bool:
        return all(math.isfinite(v) for v in (self.x, self.y, self.a))


def to_local(global_pose: Pose, origin: Pose) -> Pose:
    """
    Express a global pose in the frame of the given origin.

    Args:
        global_pose: Pose in the global frame
        origin: Origin of the local frame, in the global frame

    Returns:
        Pose relative to origin
    """
    cosa = math.cos(origin.a)
    sina = math.sin(origin.a)
    dx = global_pose.x - origin.x
    dy = global_pose.y - origin.y

    return Pose(
        x=dx * cosa + dy * sina,
        y=dy * cosa - dx * sina,
        a=normalize_angle(global_pose.a - origin.a),
    )


def to_global(local_pose: Pose, origin: Pose) -> Pose:
    """
    Inverse of to_local: map an origin-relative pose back to the global frame.

    Args:
        local_pose: Pose relative to origin
        origin: Origin of the local frame, in the global frame

    Returns:
        Pose in the global frame
    """
    cosa = math.cos(origin.a)
    sina = math.sin(origin.a)

    return Pose(
        x=origin.x + local_pose.x * cosa - local_pose.y * sina,
        y=origin.y + local_pose.x * sina + local_pose.y * cosa,
        a=normalize_angle(local_pose.a + origin.a),
    )
