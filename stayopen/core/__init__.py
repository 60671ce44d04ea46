"""Core domain models, channel and protocols."""
from .channel import Receiver, Sender, open_channel
from .config import StayOpenConfig
from .errors import (
    StayOpenError,
    SpawnError,
    StreamUnavailableError,
    StreamReadError,
    CommandWriteError,
    ProcessStateError,
    ChannelError,
    ChannelClosed,
    ChannelDisconnected,
    ReceiveTimeout,
)
from .models import (
    SENTINEL,
    EXECUTE_DIRECTIVE,
    Outcome,
    BatchComplete,
    ErrorLine,
    ReaderFailed,
    BatchResult,
    classify,
)
from .protocols import Reporter

__all__ = [
    # Channel
    "Sender",
    "Receiver",
    "open_channel",
    # Config
    "StayOpenConfig",
    # Errors
    "StayOpenError",
    "SpawnError",
    "StreamUnavailableError",
    "StreamReadError",
    "CommandWriteError",
    "ProcessStateError",
    "ChannelError",
    "ChannelClosed",
    "ChannelDisconnected",
    "ReceiveTimeout",
    # Models
    "SENTINEL",
    "EXECUTE_DIRECTIVE",
    "Outcome",
    "BatchComplete",
    "ErrorLine",
    "ReaderFailed",
    "BatchResult",
    "classify",
    # Protocols
    "Reporter",
]
