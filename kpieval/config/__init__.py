"""Configuration module for kpieval."""

from .loader import ConfigLoader, load_config
from .models import DatabaseSettings, KpievalConfig, LoggingSettings

__all__ = [
    "ConfigLoader",
    "DatabaseSettings",
    "KpievalConfig",
    "LoggingSettings",
    "load_config",
]
