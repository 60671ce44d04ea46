"""Terminal reporting and logging setup."""
from .rich_logger import OUTPUT_MARKER, QuietReporter, RichReporter, configure_logging

__all__ = ["OUTPUT_MARKER", "QuietReporter", "RichReporter", "configure_logging"]
