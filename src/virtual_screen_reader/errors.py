"""
Custom exception classes for the virtual_screen_reader package.

Only caller contract violations and malformed front-end input raise. Broken
references, cycles and stale ids inside a document are recoverable and are
handled by falling back to defaults.
"""

from typing import Any


class ScreenReaderError(Exception):
    """Base exception for all virtual_screen_reader errors."""

    pass


class CommandRejectedError(ScreenReaderError):
    """Raised when a navigation or query command receives invalid arguments.

    The session state is left unchanged when this is raised.

    Attributes:
        command: The command that was rejected
        reason: Why the command was rejected
    """

    def __init__(self, command: str, reason: str) -> None:
        self.command = command
        self.reason = reason
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        return f"Command '{self.command}' rejected: {self.reason}"


class UnknownFilterError(CommandRejectedError):
    """Raised when a filter, outline kind or query criterion name is unknown.

    Attributes:
        name: The unknown name that was given
        available: All accepted names
        suggestions: Closest accepted names, best first
    """

    def __init__(
        self,
        name: str,
        available: list[str],
        suggestions: list[str] | None = None,
        kind: str = "filter",
        command: str = "next_of_type",
    ) -> None:
        self.name = name
        self.available = available
        self.suggestions = suggestions or []
        self.kind = kind
        super().__init__(command, f"unknown {kind} '{name}'")

    def _format_message(self) -> str:
        """Format a helpful error message with suggestions."""
        msg = f"Unknown {self.kind} '{self.name}'"

        if self.suggestions:
            msg += "\n\nDid you mean:\n"
            for suggestion in self.suggestions:
                msg += f"  • {suggestion}\n"

        msg += f"\nAvailable: {', '.join(self.available)}"
        return msg


class RawTreeError(ScreenReaderError):
    """Raised when a raw element tree cannot be read.

    Attributes:
        message: The main error message
        errors: Individual problems found in the input
    """

    def __init__(self, message: str, errors: list[str] | None = None) -> None:
        self.message = message
        self.errors = errors or []
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        msg = self.message
        if self.errors:
            msg += "\n\nProblems:\n"
            for error in self.errors:
                msg += f"  - {error}\n"
        return msg


class ConfigError(ScreenReaderError):
    """Raised when simulator configuration is invalid.

    Attributes:
        key: The offending configuration key, if known
        value: The rejected value
    """

    def __init__(self, message: str, key: str | None = None, value: Any = None) -> None:
        self.key = key
        self.value = value
        super().__init__(message)


class RecordingError(ScreenReaderError):
    """Raised when a session recording cannot be read."""

    pass
