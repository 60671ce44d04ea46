"""Protocol definitions (interfaces) for dependency injection."""
from __future__ import annotations

from abc import abstractmethod
from typing import Protocol


class Reporter(Protocol):
    """Interface for everything the user gets to see.

    Implementations:
    - RichReporter: Rich console output
    - QuietReporter: plain prints, only the essentials
    """

    @abstractmethod
    def output(self, line: str) -> None:
        """Pass through one line of command output. Called from reader threads."""
        ...

    @abstractmethod
    def success(self, message: str) -> None:
        ...

    @abstractmethod
    def failure(self, message: str) -> None:
        ...

    @abstractmethod
    def warning(self, message: str) -> None:
        ...

    @abstractmethod
    def error(self, message: str) -> None:
        ...

    @abstractmethod
    def debug(self, message: str) -> None:
        """Only shown in verbose mode."""
        ...

    @abstractmethod
    def print_header(self, title: str) -> None:
        ...

    @abstractmethod
    def print_config(self, config_items: dict) -> None:
        ...
