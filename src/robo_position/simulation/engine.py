"""
Simulation engine interface and a kinematic reference engine.

The position model does not move the robot itself. It reads ground truth
from, and hands its actuation velocity to, an engine implementing
SimulationEngine. KinematicWorld is a minimal engine that integrates the
velocity kinematically with no collisions; it drives the demo and the tests.

Mathematical Model:
    Body-frame velocity v = (v_x, v_y, omega) is rotated into the world
    frame with the heading at the start of the tick:

    x <- x + dt (v_x cos(a) - v_y sin(a))
    y <- y + dt (v_x sin(a) + v_y cos(a))
    a <- normalize(a + dt omega)
"""

import math
import logging
import warnings
from abc import ABC, abstractmethod
from typing import Optional

from ..geometry.frames import Pose, Velocity, normalize_angle

logger = logging.getLogger(__name__)


class SimulationEngine(ABC):
    """Services the position model consumes from the owning simulation."""

    @abstractmethod
    def get_true_pose(self) -> Pose:
        """Current ground-truth global pose."""

    @abstractmethod
    def advance(self, velocity: Velocity) -> None:
        """Move the robot with the given body-frame velocity for one tick."""

    @abstractmethod
    def tick_duration(self) -> float:
        """Simulation step length [s]."""

    @abstractmethod
    def is_active(self) -> bool:
        """Whether any client is currently subscribed to the model."""

    def attach(self, model) -> None:
        """
        Register a model whose startup() and shutdown() hooks the engine calls
        when its first client subscribes and its last client unsubscribes.

        Engines that do not report subscription changes may ignore this; the
        model then detects transitions of is_active() when it steps.
        """


class KinematicWorld(SimulationEngine):
    """
    Obstacle-free kinematic engine for a single robot.

    Attributes:
        pose (Pose): Ground-truth global pose
        velocity (Velocity): Velocity applied during the last tick
        interval_ms (int): Simulation step length [ms]
        sim_time_ms (int): Elapsed simulated time [ms]
        subscriptions (int): Number of subscribed clients

    Attached models are started when the first client subscribes and shut
    down as soon as the last client unsubscribes, even between two ticks.
    """

    def __init__(self, initial_pose: Optional[Pose] = None, interval_ms: int = 100):
        """
        Args:
            initial_pose: Starting global pose. Defaults to the world origin.
            interval_ms: Simulation step length [ms]

        Raises:
            ValueError: If the step length is not positive
        """
        if interval_ms <= 0:
            raise ValueError(f"Simulation interval must be positive, got {interval_ms} ms")
        if interval_ms > 100:
            warnings.warn(f"Large simulation interval {interval_ms} ms may cause visible integration error")

        self.pose = initial_pose.copy() if initial_pose is not None else Pose()
        self.velocity = Velocity()
        self.interval_ms = interval_ms
        self.sim_time_ms = 0
        self.subscriptions = 0
        self._models = []

    def get_true_pose(self) -> Pose:
        return self.pose.copy()

    def set_pose(self, pose: Pose) -> None:
        """Teleport the robot to a global pose."""
        self.pose = pose.copy()

    def advance(self, velocity: Velocity) -> None:
        dt = self.tick_duration()
        cosa = math.cos(self.pose.a)
        sina = math.sin(self.pose.a)

        self.pose = Pose(
            x=self.pose.x + dt * (velocity.x * cosa - velocity.y * sina),
            y=self.pose.y + dt * (velocity.x * sina + velocity.y * cosa),
            a=normalize_angle(self.pose.a + dt * velocity.a),
        )
        self.velocity = Velocity(velocity.x, velocity.y, velocity.a)
        self.sim_time_ms += self.interval_ms

        logger.debug(f"[{self.sim_time_ms}] world pose ({self.pose.x:.3f} {self.pose.y:.3f} {self.pose.a:.3f})")

    def tick_duration(self) -> float:
        return self.interval_ms / 1e3

    def is_active(self) -> bool:
        return self.subscriptions > 0

    def attach(self, model) -> None:
        self._models.append(model)

    def subscribe(self) -> None:
        self.subscriptions += 1
        if self.subscriptions == 1:
            for model in self._models:
                model.startup()

    def unsubscribe(self) -> None:
        if self.subscriptions == 0:
            logger.warning("Unsubscribe called with no active subscriptions")
            return
        self.subscriptions -= 1
        if self.subscriptions == 0:
            for model in self._models:
                model.shutdown()

    def __repr__(self) -> str:
        return (f"KinematicWorld(t={self.sim_time_ms}ms, "
                f"pose=[{self.pose.x:.2f}, {self.pose.y:.2f}, {self.pose.a:.2f}])")
