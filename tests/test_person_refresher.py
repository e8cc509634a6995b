"""Tests for downloading person details from TMDb."""

import json
import tempfile
import threading
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from person_updates.exceptions import RefreshError, SyncCancelledError, TransportError
from person_updates.ingestion.person_refresher import TmdbPersonRefresher


def make_session(body: bytes, status_code: int = 200) -> MagicMock:
    response = MagicMock()
    response.status_code = status_code
    response.iter_content.return_value = [body]
    session = MagicMock()
    session.get.return_value = response
    return session


def make_refresher(session: MagicMock) -> TmdbPersonRefresher:
    return TmdbPersonRefresher(
        session=session, api_key="test-key", base_url="https://api.themoviedb.org/3"
    )


def test_writes_info_json() -> None:
    body = json.dumps({"id": 287, "name": "Brad Pitt", "credits": {"cast": []}}).encode()
    session = make_session(body)

    with tempfile.TemporaryDirectory() as tmp_dir:
        person_path = Path(tmp_dir) / "287"
        make_refresher(session).refresh("287", person_path)

        assert json.loads((person_path / "info.json").read_bytes())["name"] == "Brad Pitt"
        assert sorted(p.name for p in person_path.iterdir()) == ["info.json"]

    args, kwargs = session.get.call_args
    assert args[0] == "https://api.themoviedb.org/3/person/287"
    assert kwargs["params"] == {
        "api_key": "test-key",
        "append_to_response": "credits,images,external_ids",
    }


def test_replaces_existing_info_json() -> None:
    session = make_session(b'{"id": 287, "name": "New"}')

    with tempfile.TemporaryDirectory() as tmp_dir:
        person_path = Path(tmp_dir) / "287"
        person_path.mkdir()
        (person_path / "info.json").write_text('{"id": 287, "name": "Old"}')

        make_refresher(session).refresh("287", person_path)

        assert json.loads((person_path / "info.json").read_text())["name"] == "New"


@pytest.mark.parametrize("body", [b"not json", b"[1, 2, 3]", b'{"status_code": 34}'])
def test_invalid_person_payload_raises_refresh_error(body: bytes) -> None:
    with tempfile.TemporaryDirectory() as tmp_dir:
        person_path = Path(tmp_dir) / "287"
        person_path.mkdir()
        (person_path / "info.json").write_text('{"id": 287, "name": "Old"}')

        with pytest.raises(RefreshError) as exc_info:
            make_refresher(make_session(body)).refresh("287", person_path)

        assert exc_info.value.person_id == "287"
        assert json.loads((person_path / "info.json").read_text())["name"] == "Old"


def test_http_error_raises_transport_error() -> None:
    with tempfile.TemporaryDirectory() as tmp_dir:
        with pytest.raises(TransportError):
            make_refresher(make_session(b"{}", status_code=404)).refresh(
                "287", Path(tmp_dir) / "287"
            )


def test_cancelled_refresh_makes_no_request() -> None:
    session = make_session(b'{"id": 287}')
    cancel_event = threading.Event()
    cancel_event.set()

    with tempfile.TemporaryDirectory() as tmp_dir:
        with pytest.raises(SyncCancelledError):
            make_refresher(session).refresh("287", Path(tmp_dir) / "287", cancel_event)

    session.get.assert_not_called()
