"""
Utility modules for the schedule services.

Provides common utilities for:
- Structured logging
- Error handling
"""

from .logging import setup_logging, get_logger
from .errors import (
    DataProcessingError,
    ValidationError,
    NotFoundError,
    ProjectionError,
    StorageError,
    StoreUnavailableError,
    ConfigurationError,
)

__all__ = [
    "setup_logging",
    "get_logger",
    "DataProcessingError",
    "ValidationError",
    "NotFoundError",
    "ProjectionError",
    "StorageError",
    "StoreUnavailableError",
    "ConfigurationError",
]
