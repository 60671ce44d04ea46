"""Exception hierarchy for the stay-open driver."""
from __future__ import annotations

from typing import Optional


class StayOpenError(Exception):
    """Base class for all errors raised by stayopen."""


class SpawnError(StayOpenError):
    """The child executable could not be started."""

    def __init__(self, executable: str, cause: Optional[BaseException] = None):
        self.executable = executable
        self.cause = cause
        detail = f": {cause}" if cause else ""
        super().__init__(f"Could not start {executable!r}{detail}")


class StreamUnavailableError(StayOpenError):
    """A child stream that should have been piped is missing."""

    def __init__(self, stream: str):
        self.stream = stream
        super().__init__(f"Child process has no piped {stream}")


class StreamReadError(StayOpenError):
    """Reading or decoding a child stream failed."""

    def __init__(self, stream: str, cause: BaseException):
        self.stream = stream
        self.cause = cause
        super().__init__(f"Failed reading {stream}: {cause}")


class CommandWriteError(StayOpenError):
    """Writing a command batch to the child's stdin failed."""


class ProcessStateError(StayOpenError):
    """An operation was attempted in the wrong process lifecycle state."""


class ChannelError(StayOpenError):
    """Base class for channel failures."""


class ChannelClosed(ChannelError):
    """send() was called after the receiver was closed."""


class ChannelDisconnected(ChannelError):
    """Every sender is gone and nothing is left to receive."""


class ReceiveTimeout(ChannelError):
    """receive() gave up waiting."""

    def __init__(self, timeout: float):
        self.timeout = timeout
        super().__init__(f"Nothing received within {timeout}s")
