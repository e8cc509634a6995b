"""Refreshing the cached details of a single person."""

import json
import os
import tempfile
import threading
from pathlib import Path
from typing import Protocol

import requests
import structlog

from person_updates.exceptions import RefreshError
from person_updates.ingestion.http import get_bytes
from person_updates.ingestion.tmdb_client import DEFAULT_BASE_URL

log = structlog.stdlib.get_logger()


class PersonRefresher(Protocol):
    """Re-downloads the details of one cached person."""

    def refresh(
        self,
        person_id: str,
        person_data_path: Path,
        cancel_event: threading.Event | None = None,
    ) -> None: ...


class TmdbPersonRefresher:
    """Downloads person details from TMDb into ``info.json``."""

    INFO_FILE_NAME = "info.json"
    APPEND_TO_RESPONSE = "credits,images,external_ids"

    def __init__(
        self,
        session: requests.Session,
        api_key: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 30.0,
    ):
        self._session = session
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout

    def refresh(
        self,
        person_id: str,
        person_data_path: Path,
        cancel_event: threading.Event | None = None,
    ) -> None:
        """
        Download one person and replace its ``info.json``.

        Args:
            person_id: TMDb person id
            person_data_path: Directory holding the person's cached data
            cancel_event: Optional cancellation signal passed to the transport

        Raises:
            TransportError: If the HTTP call fails
            RefreshError: If TMDb returns something other than a person object
            SyncCancelledError: If cancelled while the call is in flight
        """
        url = f"{self._base_url}/person/{person_id}"
        params = {"api_key": self._api_key, "append_to_response": self.APPEND_TO_RESPONSE}

        payload = get_bytes(self._session, url, params, self._timeout, cancel_event)

        try:
            data = json.loads(payload)
        except ValueError as e:
            raise RefreshError(person_id, f"invalid JSON: {e}") from e
        if not isinstance(data, dict) or "id" not in data:
            raise RefreshError(person_id, "response is not a person object")

        self._write_info(Path(person_data_path), payload)
        log.debug("person_info_written", person_id=person_id, size=len(payload))

    def _write_info(self, person_data_path: Path, payload: bytes) -> None:
        person_data_path.mkdir(parents=True, exist_ok=True)
        target = person_data_path / self.INFO_FILE_NAME

        fd, tmp_name = tempfile.mkstemp(dir=person_data_path, prefix=".info.", suffix=".tmp")
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(payload)
            os.replace(tmp_name, target)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
