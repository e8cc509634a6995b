"""Incremental refresh of cached people from the TMDb change feed."""

import threading
from datetime import datetime, timedelta
from typing import Callable, Iterable

import requests
import structlog

from person_updates.exceptions import SyncCancelledError
from person_updates.ingestion.http import build_session, check_cancelled
from person_updates.ingestion.person_refresher import PersonRefresher, TmdbPersonRefresher
from person_updates.ingestion.tmdb_client import Deserializer, TmdbChangesClient, decode_changes_page
from person_updates.models.config import AppConfig, ProvidersConfig
from person_updates.sync.change_aggregator import ChangeSetAggregator
from person_updates.sync.cursor_store import CursorStore
from person_updates.sync.local_index import LocalPersonIndex
from person_updates.sync.models import SyncOutcome, SyncReport
from person_updates.utils.ticks import as_utc, utc_now

log = structlog.stdlib.get_logger()

ProgressCallback = Callable[[float], None]

DEFAULT_MAX_LOOKBACK = timedelta(days=13)


def _ignore_progress(value: float) -> None:
    pass


class PersonUpdatesTask:
    """Refreshes locally cached people that TMDb reports as changed.

    A run is throttled by the cursor file, queries the change feed from the
    last synced-through date (clamped to the feed's retention window), keeps
    only ids already cached locally, refreshes them one by one and finally
    commits the cursor.
    """

    def __init__(
        self,
        cursor_store: CursorStore,
        local_index: LocalPersonIndex,
        aggregator: ChangeSetAggregator,
        refresher: PersonRefresher,
        providers: ProvidersConfig | None = None,
        max_lookback: timedelta = DEFAULT_MAX_LOOKBACK,
        clock: Callable[[], datetime] = utc_now,
    ):
        """
        Initialize the person updates task.

        Args:
            cursor_store: Cursor file access
            local_index: Index of people cached on disk
            aggregator: Collects changed ids across all feed pages
            refresher: Re-downloads one person
            providers: Feature flags gating the task (all enabled if None)
            max_lookback: Furthest back the change feed is queried
            clock: Returns the current UTC time
        """
        self._cursor_store = cursor_store
        self._local_index = local_index
        self._aggregator = aggregator
        self._refresher = refresher
        self._providers = providers or ProvidersConfig()
        self._max_lookback = max_lookback
        self._clock = clock

    @classmethod
    def from_config(
        cls,
        config: AppConfig,
        session: requests.Session | None = None,
        deserializer: Deserializer = decode_changes_page,
        refresher: PersonRefresher | None = None,
    ) -> "PersonUpdatesTask":
        """
        Wire a task from application configuration.

        Args:
            config: Application configuration
            session: HTTP session (a new one is built if None)
            deserializer: Decoder for change feed payloads
            refresher: Person refresher (TmdbPersonRefresher if None)
        """
        if session is None:
            session = build_session(config.tmdb.accept_header)

        base_url = str(config.tmdb.base_url)
        timeout = config.tmdb.request_timeout_seconds
        people_root = config.storage.people_data_path

        feed = TmdbChangesClient(
            session=session,
            api_key=config.tmdb.api_key,
            base_url=base_url,
            timeout=timeout,
            deserializer=deserializer,
        )
        if refresher is None:
            refresher = TmdbPersonRefresher(
                session=session,
                api_key=config.tmdb.api_key,
                base_url=base_url,
                timeout=timeout,
            )

        local_index = LocalPersonIndex(people_root)
        return cls(
            cursor_store=CursorStore(
                local_index.root / config.storage.cursor_file_name,
                min_interval=timedelta(hours=config.sync.min_interval_hours),
            ),
            local_index=local_index,
            aggregator=ChangeSetAggregator(feed),
            refresher=refresher,
            providers=config.providers,
            max_lookback=timedelta(days=config.sync.max_lookback_days),
        )

    @property
    def enabled(self) -> bool:
        return self._providers.enable_internet_providers and self._providers.enable_tmdb_updates

    def run(
        self,
        progress: ProgressCallback | None = None,
        cancel_event: threading.Event | None = None,
    ) -> SyncReport:
        """
        Run one incremental update.

        The cursor is committed with the time the run started, so changes
        published while people are being refreshed are picked up next run.

        Args:
            progress: Receives completion percentages in [0, 100]
            cancel_event: Cooperative cancellation signal

        Returns:
            SyncReport describing the run

        Raises:
            TransportError: If the change feed cannot be fetched (cursor not written)
            DecodeError: If a change feed page cannot be decoded (cursor not written)
            SyncCancelledError: If cancelled (cursor not written)
        """
        report_progress = progress or _ignore_progress
        now = as_utc(self._clock())

        if not self.enabled:
            log.info("person_updates_disabled")
            report_progress(100.0)
            return SyncReport(outcome=SyncOutcome.DISABLED, start_time=now, end_time=now)

        self._local_index.ensure_root()

        if not self._cursor_store.should_run(now):
            return SyncReport(outcome=SyncOutcome.NOT_DUE, start_time=now, end_time=now)

        last_synced_through = self._cursor_store.load()

        if last_synced_through is None:
            log.info("person_updates_bootstrap", cursor_path=str(self._cursor_store.path))
            self._cursor_store.save(now)
            report_progress(100.0)
            return SyncReport(
                outcome=SyncOutcome.BOOTSTRAPPED, start_time=now, end_time=as_utc(self._clock())
            )

        start = self.effective_start(last_synced_through, now)
        log.info(
            "person_updates_started",
            last_synced_through=last_synced_through.isoformat(),
            start_date=start.date().isoformat(),
        )

        changed_ids = self._aggregator.collect_changed_ids(start.date(), cancel_event)
        local_ids = self._local_index.list_ids()
        ids_to_refresh = self.select_ids_to_refresh(changed_ids, local_ids)

        log.info(
            "person_updates_reconciled",
            changed_count=len(changed_ids),
            local_count=len(local_ids),
            refresh_count=len(ids_to_refresh),
        )

        refreshed, failed_ids = self.refresh_people(
            ids_to_refresh, local_ids, report_progress, cancel_event
        )

        self._cursor_store.save(now)
        report_progress(100.0)

        report = SyncReport(
            outcome=SyncOutcome.COMPLETED,
            start_date=start.date(),
            changed_ids=len(changed_ids),
            candidate_ids=len(ids_to_refresh),
            refreshed=refreshed,
            failed_ids=failed_ids,
            start_time=now,
            end_time=as_utc(self._clock()),
        )
        log.info(
            "person_updates_completed",
            refreshed=report.refreshed,
            failed=len(report.failed_ids),
            duration_seconds=report.duration_seconds,
        )
        return report

    def effective_start(self, last_synced_through: datetime, now: datetime) -> datetime:
        """
        Clamp the query start to the change feed's retention window.

        Returns:
            ``now - max_lookback`` if the cursor is older than that, the cursor otherwise
        """
        last_synced_through = as_utc(last_synced_through)
        now = as_utc(now)
        earliest = now - self._max_lookback
        if now - last_synced_through > self._max_lookback:
            log.info(
                "person_updates_window_clamped",
                last_synced_through=last_synced_through.isoformat(),
                clamped_to=earliest.isoformat(),
            )
            return earliest
        return last_synced_through

    @staticmethod
    def select_ids_to_refresh(changed_ids: Iterable[str], local_ids: Iterable[str]) -> list[str]:
        """
        Keep the changed ids that are cached locally.

        Matching is case-insensitive. Empty and whitespace-only ids are dropped.
        Order and duplicates of ``changed_ids`` are preserved.
        """
        known = {local_id.casefold() for local_id in local_ids}
        return [
            person_id
            for person_id in changed_ids
            if person_id and person_id.strip() and person_id.casefold() in known
        ]

    def refresh_people(
        self,
        person_ids: list[str],
        local_ids: Iterable[str],
        progress: ProgressCallback,
        cancel_event: threading.Event | None = None,
    ) -> tuple[int, list[str]]:
        """
        Refresh each person in order, isolating failures.

        Args:
            person_ids: Ids to refresh
            local_ids: Cached directory names, used to resolve each person's path
            progress: Receives ``completed / total * 100`` after every person
            cancel_event: Checked before every refresh

        Returns:
            Number of successful refreshes and the ids that failed

        Raises:
            SyncCancelledError: If cancelled; people already refreshed stay refreshed
        """
        directory_names = {local_id.casefold(): local_id for local_id in local_ids}
        total = len(person_ids)
        refreshed = 0
        failed_ids: list[str] = []

        for completed, person_id in enumerate(person_ids, start=1):
            check_cancelled(cancel_event, "refresh")

            person_path = self._local_index.person_path(
                directory_names.get(person_id.casefold(), person_id)
            )
            log.info("updating_person", person_id=person_id)

            try:
                person_path.mkdir(parents=True, exist_ok=True)
                self._refresher.refresh(person_id, person_path, cancel_event)
                refreshed += 1
            except SyncCancelledError:
                raise
            except Exception as e:
                failed_ids.append(person_id)
                log.error(
                    "person_refresh_failed",
                    person_id=person_id,
                    error=str(e),
                    error_type=type(e).__name__,
                )

            progress(completed / total * 100)

        return refreshed, failed_ids
