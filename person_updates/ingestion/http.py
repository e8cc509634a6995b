"""HTTP transport helpers shared by the TMDb clients."""

import threading
from typing import Any, Mapping

import requests
import structlog

from person_updates.exceptions import SyncCancelledError, TransportError

log = structlog.stdlib.get_logger()

CHUNK_SIZE = 16 * 1024


def build_session(accept_header: str = "application/json") -> requests.Session:
    """
    Create the HTTP session used for all TMDb calls.

    Args:
        accept_header: Value of the Accept header

    Returns:
        Session with Accept and gzip Accept-Encoding headers set
    """
    session = requests.Session()
    session.headers.update(
        {
            "Accept": accept_header,
            "Accept-Encoding": "gzip, deflate",
        }
    )
    return session


def check_cancelled(cancel_event: threading.Event | None, stage: str) -> None:
    """Raise SyncCancelledError if the cancel event is set."""
    if cancel_event is not None and cancel_event.is_set():
        log.info("person_updates_cancelled", stage=stage)
        raise SyncCancelledError(f"Person updates cancelled during {stage}")


def get_bytes(
    session: requests.Session,
    url: str,
    params: Mapping[str, Any],
    timeout: float,
    cancel_event: threading.Event | None = None,
) -> bytes:
    """
    Perform a GET request and return the response body.

    The body is streamed so the cancel event can abort a call that is
    already in flight.

    Args:
        session: HTTP session to use
        url: Request URL
        params: Query string parameters
        timeout: Connect and read timeout in seconds
        cancel_event: Optional cancellation signal

    Returns:
        Raw (decompressed) response body

    Raises:
        TransportError: If the request fails or returns an error status
        SyncCancelledError: If the cancel event is set during the call
    """
    check_cancelled(cancel_event, "request")

    try:
        response = session.get(url, params=params, timeout=timeout, stream=True)
    except requests.RequestException as e:
        raise TransportError(f"GET {url} failed: {e}") from e

    with response:
        if response.status_code >= 400:
            raise TransportError(
                f"GET {url} returned HTTP {response.status_code}",
                status_code=response.status_code,
            )

        chunks: list[bytes] = []
        try:
            for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                check_cancelled(cancel_event, "response_read")
                if chunk:
                    chunks.append(chunk)
        except requests.RequestException as e:
            raise TransportError(f"Reading response from {url} failed: {e}") from e

    return b"".join(chunks)
