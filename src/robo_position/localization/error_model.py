"""
Systematic odometry error model.

Each position model carries a fixed multiplicative bias per axis that is
applied when integrating velocities into the dead-reckoning estimate. The
bias models calibration error (wheel radius, wheelbase) that does not change
while the robot runs.

Mathematical Model:
    For a configured maximum proportion E on an axis, the bias is drawn once

    e ~ U[-E/2, +E/2)

    and every integrated increment on that axis is scaled by (1 + e).

Note:
    Setting every maximum to zero does not give perfect localization, since
    the integrator still truncates. Exact localization is a separate mode.
"""

from dataclasses import dataclass
from typing import Optional

import numpy as np


@dataclass
class OdometryErrorLimits:
    """Maximum error proportions for the x, y and heading integrators."""

    x: float = 0.03
    y: float = 0.03
    a: float = 0.05

    def __post_init__(self):
        """Validate error limits."""
        for axis, value in (("x", self.x), ("y", self.y), ("a", self.a)):
            if not np.isfinite(value) or value < 0:
                raise ValueError(f"Odometry error limit for {axis} must be non-negative, got {value}")


@dataclass(frozen=True)
class IntegrationError:
    """
    Per-axis multiplicative integration bias.

    Frozen: a sampled bias stays fixed for the lifetime of the model that
    owns it.
    """

    x: float = 0.0
    y: float = 0.0
    a: float = 0.0

    @classmethod
    def sample(cls, limits: Optional[OdometryErrorLimits] = None,
               rng: Optional[np.random.Generator] = None) -> "IntegrationError":
        """
        Draw a bias uniformly from [-E/2, +E/2) on each axis.

        Args:
            limits: Maximum error proportions E. Defaults to OdometryErrorLimits().
            rng: Random source, seeded once by the caller. Defaults to a fresh
                numpy Generator.

        Returns:
            Sampled integration error
        """
        limits = limits or OdometryErrorLimits()
        rng = rng if rng is not None else np.random.default_rng()

        maxima = np.array([limits.x, limits.y, limits.a])
        draws = rng.uniform(-maxima / 2.0, maxima / 2.0)

        return cls(float(draws[0]), float(draws[1]), float(draws[2]))

    def scale_factors(self) -> np.ndarray:
        """Return the (1 + e) multipliers for x, y and heading."""
        return 1.0 + np.array([self.x, self.y, self.a])
