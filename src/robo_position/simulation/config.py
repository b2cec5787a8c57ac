"""
Configuration for the position model.

Position models are configured with world-file style properties:

    drive                "diff" | "omni"             (default "diff")
    localization         "gps" | "odom"              (default "gps")
    localization_origin  [x, y, a]                   (default: start pose)
    odom_error           [x, y, a]                   (default [0.03, 0.03, 0.05])

Angles are in radians. Configuration problems are reported and the
documented default is used; loading never fails because of a bad value.
The "odom" property was removed in favour of "localization_origin" and only
produces a warning.
"""

import json
import math
import logging
import warnings
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from ..geometry.frames import Pose
from ..kinematics.drive import DriveMode, DEFAULT_DRIVE_MODE, parse_drive_mode
from ..localization.estimator import (
    LocalizationMode, DEFAULT_LOCALIZATION_MODE, parse_localization_mode
)
from ..localization.error_model import OdometryErrorLimits

logger = logging.getLogger(__name__)


@dataclass
class PositionConfig:
    """
    Load-time settings for one position model.

    Attributes:
        name: Model name used in log messages
        drive_mode: Drivetrain topology
        localization_mode: Localization model
        localization_origin: Origin of the estimate frame; None uses the
            model's true pose at creation
        odom_error: Maximum integration error proportions
    """
    name: str = "position"
    drive_mode: DriveMode = DEFAULT_DRIVE_MODE
    localization_mode: LocalizationMode = DEFAULT_LOCALIZATION_MODE
    localization_origin: Optional[Pose] = None
    odom_error: OdometryErrorLimits = field(default_factory=OdometryErrorLimits)

    def __post_init__(self):
        """Validate configuration types."""
        if not isinstance(self.drive_mode, DriveMode):
            raise ValueError(f"Invalid drive mode: {self.drive_mode}")
        if not isinstance(self.localization_mode, LocalizationMode):
            raise ValueError(f"Invalid localization mode: {self.localization_mode}")

    @classmethod
    def from_properties(cls, properties: Mapping[str, Any],
                        name: Optional[str] = None) -> "PositionConfig":
        """
        Build a configuration from world-file style properties.

        Args:
            properties: Property mapping, e.g. parsed from JSON
            name: Model name; defaults to properties["name"] or "position"

        Returns:
            Validated configuration with defaults filled in
        """
        name = name or properties.get("name", "position")

        if "odom" in properties:
            warnings.warn(
                f'The odom property is specified for model "{name}", but this property is '
                f'no longer available. Use localization_origin instead.'
            )

        drive_mode = parse_drive_mode(properties.get("drive"), name)

        localization_mode = DEFAULT_LOCALIZATION_MODE
        if "localization" in properties:
            localization_mode = parse_localization_mode(properties["localization"], name)

        localization_origin = None
        if "localization_origin" in properties:
            values = _read_tuple(properties["localization_origin"], [0.0, 0.0, 0.0],
                                 "localization_origin", name)
            if values is not None:
                localization_origin = Pose(*values)

        odom_error = OdometryErrorLimits()
        if "odom_error" in properties:
            defaults = [odom_error.x, odom_error.y, odom_error.a]
            values = _read_tuple(properties["odom_error"], defaults, "odom_error", name)
            if values is not None:
                if any(v < 0 for v in values):
                    logger.error(
                        f'Negative odom_error {values} for model "{name}". Using defaults {defaults}.'
                    )
                else:
                    odom_error = OdometryErrorLimits(*values)

        return cls(
            name=name,
            drive_mode=drive_mode,
            localization_mode=localization_mode,
            localization_origin=localization_origin,
            odom_error=odom_error,
        )

    def to_properties(self) -> Dict[str, Any]:
        """Export as world-file style properties."""
        properties = {
            "name": self.name,
            "drive": self.drive_mode.value,
            "localization": self.localization_mode.value,
            "odom_error": [self.odom_error.x, self.odom_error.y, self.odom_error.a],
        }
        if self.localization_origin is not None:
            origin = self.localization_origin
            properties["localization_origin"] = [origin.x, origin.y, origin.a]
        return properties


def _read_tuple(value: Any, defaults: List[float], keyword: str,
                model_name: str) -> Optional[List[float]]:
    """
    Read an up-to-three element numeric tuple, filling missing entries.

    Returns None (after logging) when the value is malformed.
    """
    if isinstance(value, (str, bytes)) or not hasattr(value, "__len__"):
        logger.error(f'Property "{keyword}" for model "{model_name}" must be a list, got {value!r}')
        return None

    if len(value) > len(defaults):
        logger.error(
            f'Property "{keyword}" for model "{model_name}" has {len(value)} elements, '
            f'expected at most {len(defaults)}'
        )
        return None

    result = list(defaults)
    for i, element in enumerate(value):
        try:
            number = float(element)
        except (TypeError, ValueError):
            logger.error(f'Property "{keyword}" for model "{model_name}" has non-numeric element {element!r}')
            return None
        if not math.isfinite(number):
            logger.error(f'Property "{keyword}" for model "{model_name}" has non-finite element {element!r}')
            return None
        result[i] = number

    return result


def load_config(path: str) -> PositionConfig:
    """
    Load a position model configuration from a JSON file.

    The properties may sit at the top level or under a "position" key.

    Args:
        path: JSON file path

    Returns:
        Parsed configuration

    Raises:
        OSError: If the file cannot be read
        ValueError: If the file is not a JSON object
    """
    with open(path, encoding='utf-8') as f:
        document = json.load(f)

    if not isinstance(document, dict):
        raise ValueError(f"Configuration file {path} must contain a JSON object")

    properties = document.get("position", document)
    if not isinstance(properties, dict):
        raise ValueError(f'"position" section in {path} must be a JSON object')

    logger.info(f"Loaded position configuration from {path}")
    return PositionConfig.from_properties(properties)
