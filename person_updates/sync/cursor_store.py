"""Persistence of the sync cursor in a single-value text file."""

import os
import tempfile
from datetime import datetime, timedelta, timezone
from pathlib import Path

import structlog

from person_updates.models.person import SyncCursor
from person_updates.utils.ticks import as_utc, datetime_to_ticks, ticks_to_datetime

log = structlog.stdlib.get_logger()

DEFAULT_MIN_INTERVAL = timedelta(hours=24)


class CursorStore:
    """Reads and writes the person updates cursor file.

    The file holds the last synced-through timestamp as a decimal tick count.
    Its modification time doubles as the time of the last committed attempt,
    which is what throttles runs.
    """

    def __init__(self, cursor_path: Path | str, min_interval: timedelta = DEFAULT_MIN_INTERVAL):
        """
        Initialize cursor store.

        Args:
            cursor_path: Path of the cursor file
            min_interval: Minimum time between two committed runs
        """
        self._path = Path(cursor_path)
        self._min_interval = min_interval

    @property
    def path(self) -> Path:
        return self._path

    def read_cursor(self) -> SyncCursor:
        """
        Read both cursor facts.

        Returns:
            SyncCursor with the attempt time from the file mtime and the
            synced-through time from the file content. Missing facts are None.
        """
        try:
            mtime = self._path.stat().st_mtime
        except FileNotFoundError:
            return SyncCursor()

        return SyncCursor(
            last_attempted_at=datetime.fromtimestamp(mtime, tz=timezone.utc),
            last_synced_through=self.load(),
        )

    def should_run(self, now: datetime) -> bool:
        """
        Check whether a sync is due.

        Args:
            now: Current time

        Returns:
            False if the cursor file was written less than ``min_interval``
            before ``now``, True otherwise
        """
        cursor = self.read_cursor()
        if cursor.last_attempted_at is None:
            log.debug("cursor_file_missing", cursor_path=str(self._path))
            return True

        elapsed = as_utc(now) - cursor.last_attempted_at
        if elapsed < self._min_interval:
            log.info(
                "person_updates_not_due",
                last_attempted_at=cursor.last_attempted_at.isoformat(),
                elapsed_hours=round(elapsed.total_seconds() / 3600, 2),
            )
            return False

        return True

    def load(self) -> datetime | None:
        """
        Load the synced-through timestamp.

        Returns:
            Stored timestamp as an aware UTC datetime, or None if the file is
            absent or its content is not a valid tick count
        """
        try:
            raw = self._path.read_text(encoding="utf-8-sig")
        except FileNotFoundError:
            return None
        except UnicodeDecodeError as e:
            log.warning(
                "cursor_file_unparsable",
                cursor_path=str(self._path),
                error=str(e),
            )
            return None

        text = raw.strip()
        if not text:
            return None

        try:
            return ticks_to_datetime(int(text))
        except ValueError:
            log.warning(
                "cursor_file_unparsable",
                cursor_path=str(self._path),
                content=text[:64],
            )
            return None

    def save(self, now: datetime) -> None:
        """
        Overwrite the cursor file with ``now`` as a tick count.

        The content is written to a temporary file in the same directory and
        moved into place, so readers never see a partial value.

        Args:
            now: Timestamp the feed has been consulted through
        """
        self._path.parent.mkdir(parents=True, exist_ok=True)
        ticks = datetime_to_ticks(now)

        fd, tmp_name = tempfile.mkstemp(
            dir=self._path.parent, prefix=f".{self._path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(str(ticks))
            os.replace(tmp_name, self._path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

        log.info("cursor_saved", cursor_path=str(self._path), synced_through=as_utc(now).isoformat())
