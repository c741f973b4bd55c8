"""
CacheWarmer Utilities Package.

Configuration, logging and error types shared across all backend modules.
Requires Python 3.11+.
"""

from utils.config import Settings, WatchConfiguration, get_settings, load_settings
from utils.errors import (
    CacheWarmerError,
    CommandFailedError,
    CommandLaunchError,
    ConfigurationError,
    ConsoleNotFoundError,
    NothingToWatchError,
    RebuildError,
)
from utils.logger import configure_logging, get_logger, LoggerMixin

__all__ = [
    "Settings",
    "WatchConfiguration",
    "get_settings",
    "load_settings",
    "CacheWarmerError",
    "CommandFailedError",
    "CommandLaunchError",
    "ConfigurationError",
    "ConsoleNotFoundError",
    "NothingToWatchError",
    "RebuildError",
    "configure_logging",
    "get_logger",
    "LoggerMixin",
]
