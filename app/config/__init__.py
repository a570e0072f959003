"""
Configuration package for the Class Finder backend.
"""

from .settings import (
    Settings,
    Environment,
    LogLevel,
    DistanceUnit,
    ContentStoreSettings,
    AuthSettings,
    RedisSettings,
    SearchSettings,
    SecuritySettings,
    settings,
    get_settings,
    reload_settings,
)

__all__ = [
    "Settings",
    "Environment",
    "LogLevel",
    "DistanceUnit",
    "ContentStoreSettings",
    "AuthSettings",
    "RedisSettings",
    "SearchSettings",
    "SecuritySettings",
    "settings",
    "get_settings",
    "reload_settings",
]
