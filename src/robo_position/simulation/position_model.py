"""
Position Model for Simulated Mobile Robot Bases

This module implements the motion and localization core of a simulated robot
base. Once per simulation tick the model converts the client's command into
an actuation velocity, hands it to the engine that owns ground truth, and
updates the reported pose estimate.

Per-Tick Pipeline:
    1. Lifecycle: startup()/shutdown() when the engine reports a subscription
       change, or on changes of engine.is_active() seen here
    2. Control: command + current estimate -> velocity (zero when inactive)
    3. Actuation: engine.advance(velocity) moves the true pose
    4. Localization: exact transform of the new true pose, or dead-reckoning
       integration of the commanded velocity
    5. Notification: StepResult returned and emitted to listeners

Drive Modes:
    - Differential: forward and angular velocity only, like a Pioneer
    - Omnidirectional: all three axes independently controllable

Localization Modes:
    - "gps": perfect localization relative to the origin
    - "odom": odometry with a fixed random bias per axis, drifting over time

Tip:
    With localization "gps" and an origin of (0, 0, 0) the model reports its
    true global pose. This abstracts localization away entirely.
"""

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional

import numpy as np

from ..geometry.frames import Pose, Velocity
from ..kinematics.drive import DriveMode
from ..control.controller import Command, CommandController
from ..localization.error_model import IntegrationError
from ..localization.estimator import LocalizationMode, PositionEstimate, PoseEstimator
from .config import PositionConfig
from .engine import SimulationEngine

logger = logging.getLogger(__name__)


@dataclass
class StepResult:
    """Outcome of one simulation tick, emitted to listeners."""
    sim_tick: int
    active: bool
    velocity: Velocity
    estimate: PositionEstimate


StepListener = Callable[[StepResult], None]


class PositionModel:
    """
    Mobile robot base with command control and localization.

    The model exclusively owns its command, drive mode, localization mode,
    integration error and position estimate. Ground truth belongs to the
    engine.

    Attributes:
        engine (SimulationEngine): Owner of true pose and physics stepping
        config (PositionConfig): Load-time configuration
        drive_mode (DriveMode): Drivetrain topology
        controller (CommandController): Per-tick control law
        estimator (PoseEstimator): Localization state
    """

    def __init__(self,
                 engine: SimulationEngine,
                 config: Optional[PositionConfig] = None,
                 rng: Optional[np.random.Generator] = None):
        """
        Create a position model and sample its integration error.

        Args:
            engine: Simulation engine owning the robot's true pose
            config: Load-time configuration. Defaults to PositionConfig().
            rng: Random source, seeded once per process by the caller.
                Defaults to a fresh numpy Generator.
        """
        self.engine = engine
        self.config = config or PositionConfig()
        self.name = self.config.name

        self.drive_mode = self.config.drive_mode
        self.controller = CommandController()

        self._command = Command()
        self._velocity = Velocity()
        self._listeners: List[StepListener] = []
        self._was_active = False
        self._tick = 0

        # the bias is drawn here and never again for this instance
        integration_error = IntegrationError.sample(self.config.odom_error, rng)

        # report position relative to where the robot starts out, unless an
        # origin was given
        self.estimator = PoseEstimator(
            origin=self.engine.get_true_pose(),
            integration_error=integration_error,
            mode=self.config.localization_mode,
        )
        if self.config.localization_origin is not None:
            self.estimator.reset_origin(self.config.localization_origin, self.engine.get_true_pose())

        self.engine.attach(self)

        logger.info(
            f'Created position model "{self.name}": drive={self.drive_mode.value}, '
            f'localization={self.localization_mode.value}, '
            f'integration_error=({integration_error.x:+.4f}, {integration_error.y:+.4f}, '
            f'{integration_error.a:+.4f})'
        )

    @property
    def localization_mode(self) -> LocalizationMode:
        return self.estimator.mode

    @localization_mode.setter
    def localization_mode(self, mode: LocalizationMode) -> None:
        self.estimator.mode = mode

    @property
    def integration_error(self) -> IntegrationError:
        return self.estimator.integration_error

    def configure(self,
                  drive_mode: Optional[DriveMode] = None,
                  localization_mode: Optional[LocalizationMode] = None,
                  origin: Optional[Pose] = None,
                  integration_error: Optional[IntegrationError] = None) -> None:
        """
        Apply load-time settings. Arguments left as None are unchanged.

        Args:
            drive_mode: Drivetrain topology
            localization_mode: Localization model
            origin: New localization origin. The estimate is recomputed from
                the true pose in the new frame and its error zeroed.
            integration_error: Explicit bias replacing the sampled one
        """
        if drive_mode is not None:
            self.drive_mode = drive_mode
        if localization_mode is not None:
            self.estimator.mode = localization_mode
        if integration_error is not None:
            self.estimator.integration_error = integration_error
        if origin is not None:
            self.estimator.reset_origin(origin, self.engine.get_true_pose())

        logger.debug(
            f'Configured position model "{self.name}": drive={self.drive_mode}, '
            f'localization={self.estimator.mode}, origin={self.estimator.estimate.origin}'
        )

    def set_command(self, command: Command) -> None:
        """
        Store the control input used from the next tick on.

        Commands with NaN or infinite values are reported and replaced by a
        stop command.
        """
        if not command.is_finite():
            logger.error(f'Rejected non-finite command {command} for model "{self.name}"')
            self._command = Command()
            return
        self._command = Command(command.mode, command.x, command.y, command.a)

    def get_command(self) -> Command:
        return Command(self._command.mode, self._command.x, self._command.y, self._command.a)

    def get_estimate(self) -> PositionEstimate:
        """Current localization result (a copy)."""
        return self.estimator.estimate.copy()

    def get_velocity(self) -> Velocity:
        """Velocity computed in the last tick."""
        return Velocity(self._velocity.x, self._velocity.y, self._velocity.a)

    def startup(self) -> None:
        """Called when the first client subscribes."""
        logger.debug(f'Position model "{self.name}" startup')
        self._was_active = True

    def shutdown(self) -> None:
        """
        Called when the last client unsubscribes, by the engine when it
        reports subscription changes, otherwise from the next step().

        Resets the command and velocity to zero so the robot cannot keep
        driving unattended.
        """
        logger.debug(f'Position model "{self.name}" shutdown')
        self._was_active = False
        self._command = Command()
        self._velocity = Velocity()

    def add_listener(self, callback: StepListener) -> None:
        """Register a callback receiving a StepResult after every tick."""
        self._listeners.append(callback)

    def remove_listener(self, callback: StepListener) -> None:
        self._listeners.remove(callback)

    def step(self) -> StepResult:
        """
        Advance the model by one simulation tick.

        Returns:
            The velocity used and the updated estimate for this tick
        """
        self._tick += 1
        logger.debug(f'[{self._tick}] position update for "{self.name}"')

        active = self.engine.is_active()
        if active and not self._was_active:
            self.startup()
        elif self._was_active and not active:
            self.shutdown()

        # stop by default; no driving if no one is subscribed
        velocity = Velocity()
        if active:
            velocity = self.controller.compute_velocity(
                self._command, self.drive_mode, self.estimator.estimate.pose)
        self._velocity = velocity

        self.engine.advance(velocity)

        self.estimator.update(self.engine.get_true_pose(), velocity, self.engine.tick_duration())

        result = StepResult(
            sim_tick=self._tick,
            active=active,
            velocity=self.get_velocity(),
            estimate=self.get_estimate(),
        )
        for listener in list(self._listeners):
            listener(result)

        return result

    def __repr__(self) -> str:
        pose = self.estimator.estimate.pose
        return (f"PositionModel(name={self.name!r}, drive={self.drive_mode}, "
                f"localization={self.localization_mode}, "
                f"pose=[{pose.x:.2f}, {pose.y:.2f}, {pose.a:.2f}])")
