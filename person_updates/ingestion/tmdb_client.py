"""Client for the TMDb person change feed."""

import threading
from datetime import date
from typing import Callable

import requests
import structlog
from pydantic import ValidationError

from person_updates.exceptions import DecodeError
from person_updates.ingestion.http import get_bytes
from person_updates.models.person import PersonChangesPage

log = structlog.stdlib.get_logger()

DEFAULT_BASE_URL = "https://api.themoviedb.org/3"

# A deserializer signals a malformed payload with ValueError, TypeError or KeyError
Deserializer = Callable[[bytes], PersonChangesPage]


def decode_changes_page(payload: bytes) -> PersonChangesPage:
    """Decode a raw ``person/changes`` payload."""
    return PersonChangesPage.model_validate_json(payload)


class TmdbChangesClient:
    """Fetches pages of the TMDb ``person/changes`` feed."""

    CHANGES_PATH = "/person/changes"

    def __init__(
        self,
        session: requests.Session,
        api_key: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 30.0,
        deserializer: Deserializer = decode_changes_page,
    ):
        """
        Initialize the change feed client.

        Args:
            session: HTTP session carrying the Accept and compression headers
            api_key: TMDb API key
            base_url: TMDb API base URL
            timeout: Per-request timeout in seconds
            deserializer: Turns a response body into a PersonChangesPage
        """
        self._session = session
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._deserializer = deserializer

    @property
    def changes_url(self) -> str:
        return f"{self._base_url}{self.CHANGES_PATH}"

    def fetch_page(
        self,
        start_date: date,
        page: int,
        cancel_event: threading.Event | None = None,
    ) -> PersonChangesPage:
        """
        Fetch one page of changed person ids.

        Args:
            start_date: First day of the change window
            page: Page number, starting at 1
            cancel_event: Optional cancellation signal passed to the transport

        Returns:
            Decoded page

        Raises:
            TransportError: If the HTTP call fails
            DecodeError: If the payload is not a valid changes page
            SyncCancelledError: If cancelled while the call is in flight
        """
        params = {
            "start_date": start_date.strftime("%Y-%m-%d"),
            "api_key": self._api_key,
            "page": page,
        }
        log.debug("fetching_person_changes_page", start_date=params["start_date"], page=page)

        payload = get_bytes(self._session, self.changes_url, params, self._timeout, cancel_event)

        try:
            result = self._deserializer(payload)
        except (ValidationError, ValueError, TypeError, KeyError) as e:
            log.error(
                "person_changes_decode_failed",
                start_date=params["start_date"],
                page=page,
                error=str(e),
            )
            raise DecodeError(f"Invalid person changes payload for page {page}: {e}") from e

        log.info(
            "person_changes_page_fetched",
            page=result.page,
            total_pages=result.total_pages,
            result_count=len(result.results),
        )
        return result
