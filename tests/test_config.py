"""
Tests for simulator configuration.

These tests verify:
- Defaults and validation of SimulatorConfig
- Building from mappings, rejecting unknown keys and wrong types
- Loading from YAML files, at top level or under a simulator key
"""

import pytest

from virtual_screen_reader.config import SimulatorConfig, load_config
from virtual_screen_reader.errors import ConfigError


class TestSimulatorConfig:
    """Tests for SimulatorConfig."""

    def test_defaults(self) -> None:
        """Test default settings."""
        config = SimulatorConfig()

        assert config.verbosity == "standard"
        assert config.announce_descriptions is True
        assert config.announce_landmarks is True
        assert config.auto_deliver is False
        assert config.history_limit == 1000

    def test_invalid_verbosity(self) -> None:
        """Test that unknown verbosity levels are rejected."""
        with pytest.raises(ConfigError) as exc_info:
            SimulatorConfig(verbosity="chatty")

        assert exc_info.value.key == "verbosity"
        assert exc_info.value.value == "chatty"

    def test_invalid_history_limit(self) -> None:
        """Test that the history limit must be positive."""
        with pytest.raises(ConfigError, match="history_limit"):
            SimulatorConfig(history_limit=0)

    def test_unlimited_history(self) -> None:
        """Test that None keeps all history."""
        assert SimulatorConfig(history_limit=None).history_limit is None


class TestFromDict:
    """Tests for SimulatorConfig.from_dict."""

    def test_valid_mapping(self) -> None:
        """Test a mapping with valid settings."""
        config = SimulatorConfig.from_dict({"verbosity": "full", "auto_deliver": True})

        assert config.verbosity == "full"
        assert config.auto_deliver is True

    def test_unknown_key(self) -> None:
        """Test that unknown keys are rejected."""
        with pytest.raises(ConfigError, match="Unknown configuration key 'verbose'"):
            SimulatorConfig.from_dict({"verbose": True})

    def test_boolean_type_checked(self) -> None:
        """Test that switches must be booleans."""
        with pytest.raises(ConfigError, match="true or false"):
            SimulatorConfig.from_dict({"announce_landmarks": "yes"})

    def test_history_limit_type_checked(self) -> None:
        """Test that the history limit must be an integer."""
        with pytest.raises(ConfigError, match="integer"):
            SimulatorConfig.from_dict({"history_limit": "many"})


class TestLoadConfig:
    """Tests for load_config."""

    def test_top_level_settings(self, tmp_path) -> None:
        """Test a file with settings at top level."""
        path = tmp_path / "vsr.yaml"
        path.write_text("verbosity: minimal\nannounce_descriptions: false\n", encoding="utf-8")

        config = load_config(path)
        assert config.verbosity == "minimal"
        assert config.announce_descriptions is False

    def test_simulator_section(self, tmp_path) -> None:
        """Test a file with settings under a simulator key."""
        path = tmp_path / "vsr.yaml"
        path.write_text("simulator:\n  history_limit: 10\n", encoding="utf-8")

        assert load_config(path).history_limit == 10

    def test_empty_file(self, tmp_path) -> None:
        """Test that an empty file gives the defaults."""
        path = tmp_path / "vsr.yaml"
        path.write_text("", encoding="utf-8")

        assert load_config(path) == SimulatorConfig()

    def test_not_a_mapping(self, tmp_path) -> None:
        """Test that a list is rejected."""
        path = tmp_path / "vsr.yaml"
        path.write_text("- verbosity\n", encoding="utf-8")

        with pytest.raises(ConfigError, match="must contain a mapping"):
            load_config(path)

    def test_invalid_yaml(self, tmp_path) -> None:
        """Test that malformed YAML is rejected."""
        path = tmp_path / "vsr.yaml"
        path.write_text("verbosity: [minimal\n", encoding="utf-8")

        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_config(path)

    def test_invalid_section(self, tmp_path) -> None:
        """Test that the simulator key must hold a mapping."""
        path = tmp_path / "vsr.yaml"
        path.write_text("simulator: loud\n", encoding="utf-8")

        with pytest.raises(ConfigError, match="'simulator' must be a mapping"):
            load_config(path)
