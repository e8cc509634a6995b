"""Aggregation of the paginated person change feed."""

import threading
from datetime import date
from typing import Protocol

import structlog

from person_updates.ingestion.http import check_cancelled
from person_updates.models.person import PersonChangesPage

log = structlog.stdlib.get_logger()


class ChangeFeed(Protocol):
    def fetch_page(
        self,
        start_date: date,
        page: int,
        cancel_event: threading.Event | None = None,
    ) -> PersonChangesPage: ...


class ChangeSetAggregator:
    """Walks every page of the change feed and collects the changed ids."""

    def __init__(self, feed: ChangeFeed):
        self._feed = feed

    def collect_changed_ids(
        self,
        start_date: date,
        cancel_event: threading.Event | None = None,
    ) -> list[str]:
        """
        Collect the ids of all people changed since ``start_date``.

        Pages are fetched in order from page 1 up to the ``total_pages``
        reported by page 1. The walk stops early at a page with no results.
        Ids are returned in page order and are not deduplicated.

        Args:
            start_date: First day of the change window
            cancel_event: Optional cancellation signal, checked before each page

        Returns:
            Flat list of changed person ids

        Raises:
            TransportError: If any page cannot be fetched
            DecodeError: If any page cannot be decoded
            SyncCancelledError: If cancelled
        """
        changed_ids: list[str] = []
        total_pages = 1
        page = 1

        while True:
            check_cancelled(cancel_event, "change_feed")
            result = self._feed.fetch_page(start_date, page, cancel_event)

            if page == 1:
                total_pages = result.total_pages

            changed_ids.extend(result.person_ids)

            if not result.results or page >= total_pages:
                break
            page += 1

        log.info(
            "person_changes_collected",
            start_date=start_date.isoformat(),
            pages_fetched=page,
            total_pages=total_pages,
            changed_count=len(changed_ids),
        )
        return changed_ids
