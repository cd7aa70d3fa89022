"""Configuration package exports."""

from .loader import ConfigLocator, ConfigRepository
from .models import ExtractionConfig, LoggingConfig, StoreConfig, SyncConfig

__all__ = [
    "ConfigLocator",
    "ConfigRepository",
    "ExtractionConfig",
    "LoggingConfig",
    "StoreConfig",
    "SyncConfig",
]
