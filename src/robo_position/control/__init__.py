"""
Command control for the position model.

Selects between velocity pass-through and position servoing every tick.
"""

from .controller import (
    ControlMode, DEFAULT_CONTROL_MODE, Command, ControllerLimits, CommandController
)

__all__ = [
    "ControlMode",
    "DEFAULT_CONTROL_MODE",
    "Command",
    "ControllerLimits",
    "CommandController"
]
