"""
Drift analysis for comparing localization output against ground truth.

Mathematical Model:
    Position error at tick k:   e_k = ||p_est,k - p_true,k||
    Heading error at tick k:    h_k = |normalize(a_est,k - a_true,k)|
    Drift rate:                 slope of the least-squares line e_k ~ t_k
"""

from dataclasses import dataclass
from typing import Sequence

import numpy as np
import scipy.stats

from ..geometry.frames import Pose, normalize_angle


@dataclass
class DriftStatistics:
    """Summary of estimate error over a run."""
    mean_position_error: float
    max_position_error: float
    final_position_error: float
    rms_position_error: float
    mean_heading_error: float
    max_heading_error: float
    drift_rate: float          # Position error growth [m/s]
    drift_r_value: float       # Correlation of error with time


def compute_drift_statistics(true_poses: Sequence[Pose],
                             estimated_poses: Sequence[Pose],
                             dt: float) -> DriftStatistics:
    """
    Compare two pose sequences expressed in the same frame.

    Args:
        true_poses: Ground-truth poses, one per tick
        estimated_poses: Estimated poses, one per tick
        dt: Tick length [s]

    Returns:
        Drift statistics

    Raises:
        ValueError: If the sequences are empty or of different lengths
    """
    if len(true_poses) != len(estimated_poses):
        raise ValueError(
            f"Pose sequences must have equal length, got {len(true_poses)} and {len(estimated_poses)}"
        )
    if len(true_poses) == 0:
        raise ValueError("Pose sequences must not be empty")
    if dt <= 0:
        raise ValueError(f"Time step must be positive, got {dt}")

    truth = np.array([p.to_array() for p in true_poses])
    estimate = np.array([p.to_array() for p in estimated_poses])

    position_errors = np.linalg.norm(estimate[:, :2] - truth[:, :2], axis=1)
    heading_errors = np.abs([normalize_angle(d) for d in estimate[:, 2] - truth[:, 2]])

    # A regression needs at least two distinct samples
    if len(position_errors) > 1 and np.ptp(position_errors) > 0:
        times = np.arange(1, len(position_errors) + 1) * dt
        regression = scipy.stats.linregress(times, position_errors)
        drift_rate = float(regression.slope)
        drift_r_value = float(regression.rvalue)
    else:
        drift_rate = 0.0
        drift_r_value = 0.0

    return DriftStatistics(
        mean_position_error=float(np.mean(position_errors)),
        max_position_error=float(np.max(position_errors)),
        final_position_error=float(position_errors[-1]),
        rms_position_error=float(np.sqrt(np.mean(position_errors**2))),
        mean_heading_error=float(np.mean(heading_errors)),
        max_heading_error=float(np.max(heading_errors)),
        drift_rate=drift_rate,
        drift_r_value=drift_r_value,
    )
