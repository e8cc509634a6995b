"""Synchronization components for incremental person updates."""

from person_updates.sync.change_aggregator import ChangeSetAggregator
from person_updates.sync.cursor_store import CursorStore
from person_updates.sync.local_index import LocalPersonIndex
from person_updates.sync.models import SyncOutcome, SyncReport
from person_updates.sync.person_updates_task import PersonUpdatesTask

__all__ = [
    "ChangeSetAggregator",
    "CursorStore",
    "LocalPersonIndex",
    "PersonUpdatesTask",
    "SyncOutcome",
    "SyncReport",
]
