"""
Core module initialization.
Exports configuration, logging utilities and the error taxonomy.
"""

from bistro.core.config import get_settings, setup_logging, Settings, EnvironmentMode
from bistro.core.exceptions import (
    BistroError,
    ValidationError,
    InvalidStatusTransition,
    NotFoundError,
    ConflictError,
    StorageError,
)

__all__ = [
    "get_settings",
    "setup_logging",
    "Settings",
    "EnvironmentMode",
    "BistroError",
    "ValidationError",
    "InvalidStatusTransition",
    "NotFoundError",
    "ConflictError",
    "StorageError",
]
