"""
Configuration module.

Exports:
    settings: Application settings instance
    get_settings: Function to get settings (for dependency injection)
    AnalyticsThresholds: Classification thresholds structure
    DEFAULT_THRESHOLDS: Thresholds used in production
"""

from config.settings import settings, get_settings, Settings
from config.analytics import AnalyticsThresholds, DEFAULT_THRESHOLDS

__all__ = [
    # Settings
    "settings",
    "get_settings",
    "Settings",

    # Analytics
    "AnalyticsThresholds",
    "DEFAULT_THRESHOLDS",
]
