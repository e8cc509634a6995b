"""Data models for the person updates task."""

from person_updates.models.config import (
    AppConfig,
    LoggingConfig,
    ProvidersConfig,
    StorageConfig,
    SyncConfig,
    TmdbConfig,
)
from person_updates.models.person import ChangedPerson, PersonChangesPage, SyncCursor

__all__ = [
    "AppConfig",
    "ChangedPerson",
    "LoggingConfig",
    "PersonChangesPage",
    "ProvidersConfig",
    "StorageConfig",
    "SyncConfig",
    "SyncCursor",
    "TmdbConfig",
]
