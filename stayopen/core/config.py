from __future__ import annotations

import json
import os
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator


def _default_executable() -> str:
    return os.environ.get("EXIFTOOL_PATH", "exiftool")


def _reject_newlines(values: List[str]) -> List[str]:
    for value in values:
        if "\n" in value or "\r" in value:
            raise ValueError(f"Argument may not contain a newline: {value!r}")
    return values


class StayOpenConfig(BaseModel):
    """Configuration for one stay-open session.

    All options can also be supplied via CLI flags. CLI flags override config file values.
    """
    executable: str = Field(
        default_factory=_default_executable,
        description="ExifTool executable, resolved via PATH (env: EXIFTOOL_PATH)"
    )
    command: List[str] = Field(
        default_factory=lambda: ["-ver"],
        description="Arguments of the command batch, one per line"
    )
    common_args: List[str] = Field(
        default_factory=list,
        description="Arguments passed with -common_args at startup"
    )
    timeout: Optional[float] = Field(
        default=30.0,
        description="Seconds to wait for the batch to finish (None=forever)"
    )
    shutdown_timeout: float = Field(
        default=5.0,
        description="Seconds to wait for ExifTool to exit before killing it"
    )

    @field_validator("executable")
    @classmethod
    def check_executable(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Executable must not be empty")
        return value

    @field_validator("command")
    @classmethod
    def check_command(cls, value: List[str]) -> List[str]:
        if not value:
            raise ValueError("Command must have at least one argument")
        return _reject_newlines(value)

    @field_validator("common_args")
    @classmethod
    def check_common_args(cls, value: List[str]) -> List[str]:
        return _reject_newlines(value)

    @field_validator("timeout")
    @classmethod
    def check_timeout(cls, value: Optional[float]) -> Optional[float]:
        if value is not None and value <= 0:
            raise ValueError("Timeout must be positive")
        return value

    @field_validator("shutdown_timeout")
    @classmethod
    def check_shutdown_timeout(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("Shutdown timeout must be positive")
        return value

    @classmethod
    def from_file(cls, path: Path) -> "StayOpenConfig":
        """Load configuration from a JSON file."""
        with Path(path).expanduser().open("r", encoding="utf-8") as f:
            data = json.load(f)
        return cls.model_validate(data)

    def with_overrides(self, **kwargs) -> "StayOpenConfig":
        """Create a new config with the given non-None values overridden."""
        current = self.model_dump()
        current.update({k: v for k, v in kwargs.items() if v is not None})
        return StayOpenConfig.model_validate(current)
