"""
Recording and replaying sessions.

A SessionRecorder captures the commands run against a session and every
event it delivered. Replaying the commands against the same document must
produce the same events, which makes recordings usable as regression
fixtures.

Example:
    >>> session = ScreenReaderSession(config=config)
    >>> recorder = SessionRecorder(session)
    >>> session.load(raw)
    >>> events = session.execute("next:heading")
    >>> recording = recorder.stop()
    >>> replay(recording, raw).matched
    True
"""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any

import yaml

from .announcements import AnnouncementEvent
from .config import SimulatorConfig
from .errors import ConfigError, RecordingError
from .raw import RawElement
from .session import ScreenReaderSession

RECORDING_FORMAT = 1


@dataclass
class SessionRecording:
    """Commands and delivered events of one session.

    Attributes:
        commands: Executed command strings, in order
        events: Delivered events as dictionaries, in delivery order
        config: Session configuration as a dictionary
        metadata: Free-form information such as the recording time
    """

    commands: list[str] = field(default_factory=list)
    events: list[dict[str, Any]] = field(default_factory=list)
    config: dict[str, Any] = field(default_factory=dict)
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def transcript(self) -> list[str]:
        """Spoken text of every event."""
        return [event["text"] for event in self.events]

    def to_dict(self) -> dict[str, Any]:
        return {
            "format": RECORDING_FORMAT,
            "metadata": self.metadata,
            "config": self.config,
            "commands": self.commands,
            "events": self.events,
        }

    def to_yaml(self) -> str:
        return yaml.safe_dump(self.to_dict(), sort_keys=False, allow_unicode=True)

    def to_json(self, indent: int | None = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)

    @classmethod
    def from_dict(cls, data: Any) -> SessionRecording:
        """Build a recording from parsed YAML or JSON.

        Raises:
            RecordingError: If the data is not a recording
        """
        if not isinstance(data, dict):
            raise RecordingError("Recording must be a mapping")
        version = data.get("format", RECORDING_FORMAT)
        if version != RECORDING_FORMAT:
            raise RecordingError(f"Unsupported recording format {version}")

        commands = data.get("commands") or []
        events = data.get("events") or []
        if not isinstance(commands, list) or not all(isinstance(c, str) for c in commands):
            raise RecordingError("'commands' must be a list of strings")
        if not isinstance(events, list) or not all(isinstance(e, dict) for e in events):
            raise RecordingError("'events' must be a list of mappings")
        for index, event in enumerate(events):
            if "text" not in event:
                raise RecordingError(f"Event {index} has no 'text'")

        return cls(
            commands=list(commands),
            events=[dict(e) for e in events],
            config=dict(data.get("config") or {}),
            metadata=dict(data.get("metadata") or {}),
        )

    @classmethod
    def from_yaml(cls, text: str) -> SessionRecording:
        """Parse a recording written by ``to_yaml`` (or ``to_json``)."""
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise RecordingError(f"Invalid recording YAML: {e}") from e
        return cls.from_dict(data)


class SessionRecorder:
    """Records commands and delivered events of a session.

    Attach the recorder before loading the document to capture the load
    announcement as well.

    Args:
        session: Session to record
    """

    def __init__(self, session: ScreenReaderSession) -> None:
        self.session = session
        self._recording = SessionRecording(
            config=asdict(session.config),
            metadata={"recorded_at": datetime.now(timezone.utc).isoformat()},
        )
        self._unsubscribe_events = session.subscribe(self._on_event)
        self._unsubscribe_commands = session.on_command(self._recording.commands.append)
        self._active = True

    @property
    def recording(self) -> SessionRecording:
        return self._recording

    def stop(self) -> SessionRecording:
        """Detach from the session and return the recording."""
        if self._active:
            self._unsubscribe_events()
            self._unsubscribe_commands()
            self._active = False
        return self._recording

    def _on_event(self, event: AnnouncementEvent) -> None:
        self._recording.events.append(event.to_dict())


@dataclass
class ReplayResult:
    """Outcome of replaying a recording.

    Attributes:
        matched: True when the replay spoke exactly the recorded navigation events
        expected: Recorded navigation events
        actual: Navigation events delivered by the replay
        first_mismatch: Index of the first differing event, if any
    """

    matched: bool
    expected: list[dict[str, Any]]
    actual: list[dict[str, Any]]
    first_mismatch: int | None = None


def replay(
    recording: SessionRecording,
    raw: RawElement,
    config: SimulatorConfig | None = None,
) -> ReplayResult:
    """Run a recording's commands against a document and compare the events.

    Args:
        recording: Recording to replay
        raw: The document the recording was made against
        config: Overrides the configuration stored in the recording

    Raises:
        RecordingError: If the stored configuration is invalid
    """
    if config is None:
        try:
            config = SimulatorConfig.from_dict(recording.config)
        except ConfigError as e:
            raise RecordingError(f"Recording has invalid configuration: {e}") from e

    session = ScreenReaderSession(config=config)
    delivered: list[dict[str, Any]] = []
    session.subscribe(lambda event: delivered.append(event.to_dict()))
    session.load(raw)
    for command in recording.commands:
        session.execute(command)

    expected = _navigation_events(recording.events)
    actual = _navigation_events(delivered)
    first_mismatch = None
    for index in range(max(len(expected), len(actual))):
        if index >= len(expected) or index >= len(actual) or expected[index] != actual[index]:
            first_mismatch = index
            break

    return ReplayResult(
        matched=first_mismatch is None,
        expected=list(expected),
        actual=actual,
        first_mismatch=first_mismatch,
    )


def _navigation_events(events: list[dict[str, Any]]) -> list[dict[str, Any]]:
    # Live region events depend on host changes, which are not recorded
    return [
        {key: value for key, value in event.items() if key != "sequence"}
        for event in events
        if event.get("source", "navigation") == "navigation"
    ]
