import pytest
import json
import math
import logging
import sys
import os

# Add the src directory to Python path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from robo_position.geometry import Pose
from robo_position.kinematics import DriveMode
from robo_position.localization import LocalizationMode, OdometryErrorLimits
from robo_position.simulation import PositionConfig, load_config


class TestFromProperties:
    """Test world-file style property parsing"""

    def test_defaults(self):
        """Test an empty property set gives the documented defaults"""
        config = PositionConfig.from_properties({})

        assert config.name == "position"
        assert config.drive_mode is DriveMode.DIFFERENTIAL
        assert config.localization_mode is LocalizationMode.EXACT
        assert config.localization_origin is None
        assert config.odom_error == OdometryErrorLimits(0.03, 0.03, 0.05)

    def test_full_properties(self):
        """Test every property is read"""
        config = PositionConfig.from_properties({
            "name": "robot1",
            "drive": "omni",
            "localization": "odom",
            "localization_origin": [1.0, 2.0, math.pi / 2],
            "odom_error": [0.1, 0.2, 0.3],
        })

        assert config.name == "robot1"
        assert config.drive_mode is DriveMode.OMNIDIRECTIONAL
        assert config.localization_mode is LocalizationMode.DEAD_RECKONING
        assert config.localization_origin == Pose(1.0, 2.0, math.pi / 2)
        assert config.odom_error == OdometryErrorLimits(0.1, 0.2, 0.3)

    def test_name_argument_wins(self):
        config = PositionConfig.from_properties({"name": "robot1"}, name="robot2")
        assert config.name == "robot2"

    def test_invalid_drive(self, caplog):
        """Test an invalid drive keyword is reported and differential used"""
        with caplog.at_level(logging.ERROR):
            config = PositionConfig.from_properties({"name": "robot1", "drive": "tank"})

        assert config.drive_mode is DriveMode.DIFFERENTIAL
        assert 'Invalid position drive mode specified for model "robot1"' in caplog.text

    def test_invalid_localization(self, caplog):
        """Test an invalid localization keyword is reported and exact used"""
        with caplog.at_level(logging.ERROR):
            config = PositionConfig.from_properties({"localization": "slam"})

        assert config.localization_mode is LocalizationMode.EXACT
        assert 'Unrecognized localization mode "slam"' in caplog.text

    def test_empty_localization(self, caplog):
        """Test an empty localization keyword is reported"""
        with caplog.at_level(logging.ERROR):
            config = PositionConfig.from_properties({"localization": ""})

        assert config.localization_mode is LocalizationMode.EXACT
        assert "No localization mode string specified" in caplog.text

    def test_deprecated_odom_property(self):
        """Test the removed odom property only warns"""
        with pytest.warns(UserWarning, match="localization_origin"):
            config = PositionConfig.from_properties({"odom": [1.0, 2.0, 0.0]})

        assert config.localization_origin is None

    def test_partial_origin_filled(self):
        """Test missing origin elements default to zero"""
        config = PositionConfig.from_properties({"localization_origin": [1.5]})
        assert config.localization_origin == Pose(1.5, 0.0, 0.0)

    def test_malformed_origin(self, caplog):
        """Test malformed origins are reported and ignored"""
        for value in ["1 2 3", [1.0, 2.0, 3.0, 4.0], [1.0, "north"], [float('nan')]]:
            caplog.clear()
            with caplog.at_level(logging.ERROR):
                config = PositionConfig.from_properties({"localization_origin": value})

            assert config.localization_origin is None
            assert "localization_origin" in caplog.text

    def test_partial_odom_error(self):
        """Test missing odom_error elements keep their defaults"""
        config = PositionConfig.from_properties({"odom_error": [0.1]})
        assert config.odom_error == OdometryErrorLimits(0.1, 0.03, 0.05)

    def test_negative_odom_error(self, caplog):
        """Test negative error maxima are reported and the defaults used"""
        with caplog.at_level(logging.ERROR):
            config = PositionConfig.from_properties({"odom_error": [-0.1, 0.0, 0.0]})

        assert config.odom_error == OdometryErrorLimits()
        assert "Negative odom_error" in caplog.text

    def test_to_properties_round_trip(self):
        """Test exported properties rebuild the same configuration"""
        config = PositionConfig(
            name="robot1",
            drive_mode=DriveMode.OMNIDIRECTIONAL,
            localization_mode=LocalizationMode.DEAD_RECKONING,
            localization_origin=Pose(1.0, -1.0, 0.5),
            odom_error=OdometryErrorLimits(0.01, 0.02, 0.03),
        )

        assert PositionConfig.from_properties(config.to_properties()) == config

    def test_to_properties_without_origin(self):
        properties = PositionConfig().to_properties()

        assert "localization_origin" not in properties
        assert properties["drive"] == "diff"
        assert properties["localization"] == "gps"

    def test_enum_types_validated(self):
        """Test raw strings are rejected by the constructor"""
        with pytest.raises(ValueError):
            PositionConfig(drive_mode="diff")
        with pytest.raises(ValueError):
            PositionConfig(localization_mode="odom")


class TestLoadConfig:
    """Test JSON configuration files"""

    def test_flat_document(self, tmp_path):
        path = tmp_path / "robot.json"
        path.write_text(json.dumps({"name": "robot1", "drive": "omni"}))

        config = load_config(str(path))

        assert config.name == "robot1"
        assert config.drive_mode is DriveMode.OMNIDIRECTIONAL

    def test_nested_document(self, tmp_path):
        """Test properties nested under a position section"""
        path = tmp_path / "world.json"
        path.write_text(json.dumps({"position": {"localization": "odom", "odom_error": [0.0, 0.0, 0.0]}}))

        config = load_config(str(path))

        assert config.localization_mode is LocalizationMode.DEAD_RECKONING
        assert config.odom_error == OdometryErrorLimits(0.0, 0.0, 0.0)

    def test_non_object_rejected(self, tmp_path):
        """Test documents that are not JSON objects raise"""
        path = tmp_path / "bad.json"
        path.write_text(json.dumps([1, 2, 3]))
        with pytest.raises(ValueError):
            load_config(str(path))

        path.write_text(json.dumps({"position": "diff"}))
        with pytest.raises(ValueError):
            load_config(str(path))

    def test_missing_file(self, tmp_path):
        with pytest.raises(OSError):
            load_config(str(tmp_path / "missing.json"))
