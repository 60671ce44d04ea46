"""Service layer."""
from .coordinator import BatchCoordinator

__all__ = ["BatchCoordinator"]
