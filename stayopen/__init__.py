"""Drive ExifTool in stay-open batch mode.

One persistent ExifTool process receives command batches on stdin. Two
reader threads watch stdout and stderr and report back to the caller over
a single channel.
"""

__version__ = "0.1.0"

# Core exports
from .core.config import StayOpenConfig
from .core.models import (
    SENTINEL,
    Outcome,
    BatchComplete,
    ErrorLine,
    ReaderFailed,
    BatchResult,
    classify,
)
from .core.errors import StayOpenError, SpawnError

# Engine exports
from .engines.process import ExifToolProcess

# Service exports
from .services.coordinator import BatchCoordinator

# Logging exports
from .logging.rich_logger import RichReporter, QuietReporter

__all__ = [
    # Core
    "StayOpenConfig",
    "SENTINEL",
    "Outcome",
    "BatchComplete",
    "ErrorLine",
    "ReaderFailed",
    "BatchResult",
    "classify",
    "StayOpenError",
    "SpawnError",
    # Engines
    "ExifToolProcess",
    # Services
    "BatchCoordinator",
    # Logging
    "RichReporter",
    "QuietReporter",
]
