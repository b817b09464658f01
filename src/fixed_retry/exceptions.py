from __future__ import annotations

from collections.abc import Sequence


class FixedRetryError(Exception):
    """Base exception for fixed-retry."""


class NonRetryableError(FixedRetryError):
    """Raised by an operation to stop retrying regardless of attempts left."""


class CommandFailedError(FixedRetryError):
    """Raised when an external command exits with a non-zero status."""

    def __init__(self, command: Sequence[str] | str, returncode: int) -> None:
        self.command = command
        self.returncode = returncode
        shown = command if isinstance(command, str) else " ".join(command)
        super().__init__(f"Command {shown!r} exited with status {returncode}.")


class NonRetryableCommandError(CommandFailedError, NonRetryableError):
    """Raised when a command exits with a status marked as final."""
