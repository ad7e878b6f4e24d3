"""
Storage package.

Public API:
- DriverDatabase: sessions, zone dwells, offers, bucket stats, CSV export
- SettingsStore: earnings logs, app settings, preferences, receipt queue, context EMA
"""
from .database import CSV_HEADER, DriverDatabase, StoreNotOpenError
from .settings_store import ContextEma, SettingsStore, UserPreferences, context_key

__all__ = [
    "CSV_HEADER",
    "DriverDatabase",
    "StoreNotOpenError",
    "ContextEma",
    "SettingsStore",
    "UserPreferences",
    "context_key",
]
