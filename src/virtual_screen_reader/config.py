"""
Simulator configuration.

SimulatorConfig controls how much the simulated screen reader says and how
announcements are delivered. It can be built in code or loaded from a YAML
file.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

import yaml

from .errors import ConfigError

VERBOSITY_LEVELS = ("minimal", "standard", "full")


@dataclass
class SimulatorConfig:
    """Configuration for a screen reader session.

    Attributes:
        verbosity: Tree serialization level ("minimal", "standard", "full")
        announce_descriptions: Append accessible descriptions to announcements
        announce_table_positions: Append row/column positions inside tables
        announce_set_positions: Append "N of M" for items in sets
        announce_landmarks: Announce entering and exiting landmarks
        announce_document_load: Announce the document and first node on load
        auto_deliver: Deliver live region events as soon as they are queued
        history_limit: Delivered events to keep (None keeps all)
    """

    verbosity: str = "standard"
    announce_descriptions: bool = True
    announce_table_positions: bool = True
    announce_set_positions: bool = True
    announce_landmarks: bool = True
    announce_document_load: bool = True
    auto_deliver: bool = False
    history_limit: int | None = 1000

    def __post_init__(self) -> None:
        """Validate settings."""
        if self.verbosity not in VERBOSITY_LEVELS:
            raise ConfigError(
                f"verbosity must be one of {VERBOSITY_LEVELS}, got '{self.verbosity}'",
                key="verbosity",
                value=self.verbosity,
            )
        if self.history_limit is not None and self.history_limit < 1:
            raise ConfigError(
                f"history_limit must be positive or null, got {self.history_limit}",
                key="history_limit",
                value=self.history_limit,
            )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SimulatorConfig:
        """Build a config from a mapping, rejecting unknown keys.

        Raises:
            ConfigError: If a key is unknown or a value has the wrong type
        """
        known = {f.name: f for f in fields(cls)}
        for key, value in data.items():
            if key not in known:
                raise ConfigError(f"Unknown configuration key '{key}'", key=key, value=value)
            if key.startswith("announce_") or key == "auto_deliver":
                if not isinstance(value, bool):
                    raise ConfigError(f"'{key}' must be true or false", key=key, value=value)
            if key == "history_limit" and value is not None and not isinstance(value, int):
                raise ConfigError("'history_limit' must be an integer", key=key, value=value)
        return cls(**data)


def load_config(path: str | Path) -> SimulatorConfig:
    """Load a SimulatorConfig from a YAML file.

    The file may hold the settings at top level or under a ``simulator`` key.

    Raises:
        ConfigError: If the file is not valid YAML or holds invalid settings
    """
    path = Path(path)
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path.name}: {e}") from e

    if data is None:
        return SimulatorConfig()
    if not isinstance(data, dict):
        raise ConfigError(f"{path.name} must contain a mapping")
    if "simulator" in data:
        data = data["simulator"]
        if not isinstance(data, dict):
            raise ConfigError("'simulator' must be a mapping")
    return SimulatorConfig.from_dict(data)
