"""
Simulation components for the position model.

Components:
    - PositionModel: Command/config surface and per-tick step function
    - SimulationEngine: Interface to the engine owning ground truth
    - KinematicWorld: Obstacle-free kinematic engine for demos and tests
    - PositionConfig: World-file style configuration with defaults
"""

from .engine import SimulationEngine, KinematicWorld
from .config import PositionConfig, load_config
from .position_model import PositionModel, StepResult

__all__ = [
    "SimulationEngine",
    "KinematicWorld",
    "PositionConfig",
    "load_config",
    "PositionModel",
    "StepResult"
]
