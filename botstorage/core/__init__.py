"""Core module initialization."""

from .config_manager import ConfigManager, StorageConfig, LoggingConfig, DEFAULT_COLLECTIONS
from .logging_config import setup_logging

__all__ = [
    "ConfigManager",
    "StorageConfig",
    "LoggingConfig",
    "DEFAULT_COLLECTIONS",
    "setup_logging",
]
