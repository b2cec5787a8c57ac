"""
Visualization of position model localization output.

Classes:
    EstimateRenderer: Draws a model's estimate in its origin frame

Functions:
    plot_localization_comparison: Ground truth vs estimate trajectory figure
"""

import logging
from typing import List, Optional, Sequence, Tuple

import numpy as np
import matplotlib.pyplot as plt
from matplotlib.patches import Polygon

from ..geometry.frames import Pose, Velocity, to_global
from ..localization.estimator import PositionEstimate

logger = logging.getLogger(__name__)


def _square_corners(center: Pose, width: float, height: float) -> np.ndarray:
    """Corners of a width x height rectangle centred on a pose, rotated by its heading."""
    half = np.array([[-width, -height], [width, -height], [width, height], [-width, height]]) / 2.0
    c, s = np.cos(center.a), np.sin(center.a)
    rotation = np.array([[c, -s], [s, c]])
    return half @ rotation.T + np.array([center.x, center.y])


class EstimateRenderer:
    """
    Draws the localization estimate of one position model.

    The drawing lives in the estimate's origin frame: a small marker at the
    origin, guide lines running along x then y to the estimated pose, a
    marker and heading arrow at the pose, and a text label with the current
    velocity and pose.

    Parameters:
        ax: Axes to draw on. A new figure is created when omitted.
        color: Matplotlib color for all artists
        robot_size: Robot footprint (length, width) [m], sizes the heading arrow
    """

    def __init__(self,
                 ax=None,
                 color: str = "tab:blue",
                 robot_size: Tuple[float, float] = (0.44, 0.38)):
        if robot_size[0] <= 0 or robot_size[1] <= 0:
            raise ValueError(f"Robot size must be positive, got {robot_size}")

        if ax is None:
            fig = plt.figure(figsize=(8, 8))
            ax = fig.add_subplot(1, 1, 1)
            ax.set_aspect('equal')
            ax.set_xlabel('X (m)')
            ax.set_ylabel('Y (m)')
            ax.set_title('Position Estimate')

        self.ax = ax
        self.color = color
        self.robot_size = robot_size
        self._artists: List = []

    @staticmethod
    def format_label(estimate: PositionEstimate, velocity: Velocity) -> str:
        pose = estimate.pose
        return (f"vel({velocity.x:.3f},{velocity.y:.3f},{velocity.a:.1f})\n"
                f"pos({pose.x:.3f},{pose.y:.3f},{pose.a:.1f})")

    def render(self, estimate: PositionEstimate, velocity: Velocity) -> List:
        """
        Redraw the estimate, replacing any previous drawing.

        Args:
            estimate: Localization result to draw
            velocity: Current model velocity, shown in the label

        Returns:
            The created matplotlib artists
        """
        self.clear()

        origin = estimate.origin
        pose = estimate.pose

        def to_world(x: float, y: float, a: float = 0.0) -> Pose:
            return to_global(Pose(x, y, a), origin)

        corner = to_world(pose.x, 0.0)
        target = to_world(pose.x, pose.y, pose.a)

        self._artists.append(self.ax.add_patch(Polygon(
            _square_corners(origin, 0.06, 0.06), closed=True, fill=False, edgecolor=self.color)))

        guide_x = [origin.x, corner.x, target.x]
        guide_y = [origin.y, corner.y, target.y]
        self._artists.extend(self.ax.plot(guide_x, guide_y, color=self.color, linewidth=1))

        self._artists.append(self.ax.add_patch(Polygon(
            _square_corners(target, 0.1, 0.1), closed=True, fill=False, edgecolor=self.color)))

        arrow_length = self.robot_size[0] / 2.0
        self._artists.append(self.ax.arrow(
            target.x, target.y,
            arrow_length * np.cos(target.a), arrow_length * np.sin(target.a),
            width=self.robot_size[1] / 40.0, color=self.color, length_includes_head=True))

        label_at = to_world(pose.x + 0.4, pose.y + 0.2)
        self._artists.append(self.ax.text(
            label_at.x, label_at.y, self.format_label(estimate, velocity),
            color=self.color, fontsize=8, family='monospace'))

        return list(self._artists)

    def clear(self) -> None:
        """Remove everything drawn by this renderer."""
        for artist in self._artists:
            artist.remove()
        self._artists = []


def plot_localization_comparison(true_poses: Sequence[Pose],
                                 estimated_poses: Sequence[Pose],
                                 origin: Pose,
                                 dt: float,
                                 title: Optional[str] = None):
    """
    Plot ground truth against the estimate mapped back to the global frame.

    Args:
        true_poses: Ground-truth global poses, one per tick
        estimated_poses: Estimated poses in the origin frame, one per tick
        origin: Localization origin of the estimates
        dt: Tick length [s]
        title: Optional figure title

    Returns:
        The matplotlib Figure

    Raises:
        ValueError: If the sequences are empty or of different lengths
    """
    if len(true_poses) != len(estimated_poses):
        raise ValueError("Ground truth and estimate must have the same length")
    if len(true_poses) == 0:
        raise ValueError("Trajectory must contain at least 1 pose")

    truth = np.array([p.to_array() for p in true_poses])
    estimate = np.array([to_global(p, origin).to_array() for p in estimated_poses])
    errors = np.linalg.norm(estimate[:, :2] - truth[:, :2], axis=1)
    times = np.arange(1, len(errors) + 1) * dt

    fig = plt.figure(figsize=(14, 6))

    ax1 = fig.add_subplot(1, 2, 1)
    ax1.plot(truth[:, 0], truth[:, 1], 'g-', linewidth=2, label='Ground Truth', alpha=0.8)
    ax1.plot(estimate[:, 0], estimate[:, 1], 'r--', linewidth=2, label='Estimate', alpha=0.8)
    ax1.plot(origin.x, origin.y, 'ks', label='Localization Origin')
    ax1.set_xlabel('X (m)')
    ax1.set_ylabel('Y (m)')
    ax1.set_title('Trajectory Comparison')
    ax1.set_aspect('equal', adjustable='datalim')
    ax1.legend()
    ax1.grid(True)

    ax2 = fig.add_subplot(1, 2, 2)
    ax2.plot(times, errors, 'b-', linewidth=1)
    ax2.set_xlabel('Time (s)')
    ax2.set_ylabel('Position Error (m)')
    ax2.set_title('Position Error Over Time')
    ax2.grid(True)

    if title:
        fig.suptitle(title)
    fig.tight_layout()

    logger.info(f"Plotted {len(errors)} poses, final position error {errors[-1]:.3f} m")
    return fig
