"""Domain models - channel messages and batch outcomes."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union


# ExifTool prints this on stdout once a batch has finished
SENTINEL = "{ready}"
# Tells ExifTool to run everything queued since the previous directive
EXECUTE_DIRECTIVE = "-execute"


class Outcome(Enum):
    """How a command batch ended."""
    READY = "ready"
    UNEXPECTED = "unexpected"
    TIMED_OUT = "timed_out"
    DISCONNECTED = "disconnected"


@dataclass(frozen=True, slots=True)
class BatchComplete:
    """The output stream produced the sentinel line."""


@dataclass(frozen=True, slots=True)
class ErrorLine:
    """A line read from the child's error stream."""
    text: str


@dataclass(frozen=True, slots=True)
class ReaderFailed:
    """A reader thread stopped because its stream could not be read."""
    stream: str
    error: BaseException

    @property
    def text(self) -> str:
        return f"{self.stream} reader failed: {self.error}"


Message = Union[BatchComplete, ErrorLine, ReaderFailed]


def classify(message: object) -> Outcome:
    """Decide the outcome of a batch from the first message received.

    A ``BatchComplete`` (or the raw sentinel string) means ExifTool is ready
    for the next batch. Anything else is unexpected.
    """
    if isinstance(message, BatchComplete) or message == SENTINEL:
        return Outcome.READY
    return Outcome.UNEXPECTED


def describe(message: object) -> str:
    """Human-readable text for a message."""
    if isinstance(message, BatchComplete):
        return SENTINEL
    if isinstance(message, (ErrorLine, ReaderFailed)):
        return message.text
    return str(message)


@dataclass(slots=True)
class BatchResult:
    """Result of sending one batch and waiting for its answer."""
    outcome: Outcome
    message: Optional[Message] = None
    late_errors: list[str] = field(default_factory=list)
    elapsed_seconds: float = 0.0

    @property
    def is_success(self) -> bool:
        return self.outcome == Outcome.READY

    @property
    def detail(self) -> Optional[str]:
        if self.message is None:
            return None
        return describe(self.message)
