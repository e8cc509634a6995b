"""Tests for the scheduled person updates entry point."""

import os
import tempfile
import threading
from pathlib import Path

import pytest

from person_updates import cli
from person_updates.exceptions import TransportError
from person_updates.sync.cursor_store import CursorStore
from person_updates.sync.person_updates_task import PersonUpdatesTask


def write_config(tmp_dir: str, enabled: bool = True) -> str:
    path = Path(tmp_dir) / "config.yaml"
    path.write_text(
        "tmdb:\n"
        "  api_key: test-key\n"
        "providers:\n"
        f"  enable_tmdb_updates: {'true' if enabled else 'false'}\n"
        "storage:\n"
        f"  people_data_path: {Path(tmp_dir) / 'people'}\n"
        "logging:\n"
        "  json_logs: false\n"
    )
    return str(path)


def test_first_run_bootstraps() -> None:
    with tempfile.TemporaryDirectory() as tmp_dir:
        stats = cli.perform_sync(config_path=write_config(tmp_dir))

        assert stats["success"]
        assert stats["outcome"] == "bootstrapped"
        assert (Path(tmp_dir) / "people" / "time.txt").exists()


def test_disabled_run_succeeds() -> None:
    with tempfile.TemporaryDirectory() as tmp_dir:
        stats = cli.perform_sync(config_path=write_config(tmp_dir, enabled=False))

        assert stats["success"]
        assert stats["outcome"] == "disabled"


def test_missing_config_fails() -> None:
    stats = cli.perform_sync(config_path="/nonexistent/config.yaml")

    assert not stats["success"]
    assert cli.exit_code(stats) == cli.EXIT_FAILED


def test_feed_failure_is_reported(monkeypatch: pytest.MonkeyPatch) -> None:
    def failing_run(self, progress=None, cancel_event=None):
        raise TransportError("GET /person/changes returned HTTP 503", status_code=503)

    monkeypatch.setattr(PersonUpdatesTask, "run", failing_run)

    with tempfile.TemporaryDirectory() as tmp_dir:
        stats = cli.perform_sync(config_path=write_config(tmp_dir))

    assert not stats["success"]
    assert "503" in stats["error"]
    assert cli.exit_code(stats) == cli.EXIT_FAILED


def test_cursor_write_failure_is_reported(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture
) -> None:
    def failing_save(self, now):
        raise OSError(28, "No space left on device")

    monkeypatch.setattr(CursorStore, "save", failing_save)
    monkeypatch.setattr(cli, "install_cancel_handlers", lambda event: None)

    with tempfile.TemporaryDirectory() as tmp_dir:
        code = cli.main(["--config", write_config(tmp_dir)])

    assert code == cli.EXIT_FAILED
    out = capsys.readouterr().out
    assert "Status: FAILED" in out
    assert "No space left on device" in out


def test_cancelled_run_exit_code() -> None:
    with tempfile.TemporaryDirectory() as tmp_dir:
        config_path = write_config(tmp_dir)
        people = Path(tmp_dir) / "people"
        people.mkdir()
        (people / "time.txt").write_text("621355968000000000")
        os.utime(people / "time.txt", (0, 0))
        cancel_event = threading.Event()
        cancel_event.set()

        stats = cli.perform_sync(config_path=config_path, cancel_event=cancel_event)

    assert stats["cancelled"]
    assert cli.exit_code(stats) == cli.EXIT_CANCELLED


def test_main_prints_summary(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture) -> None:
    monkeypatch.setattr(cli, "install_cancel_handlers", lambda event: None)

    with tempfile.TemporaryDirectory() as tmp_dir:
        code = cli.main(["--config", write_config(tmp_dir)])

    assert code == cli.EXIT_OK
    out = capsys.readouterr().out
    assert "PERSON UPDATES SUMMARY" in out
    assert "bootstrapped" in out


def test_progress_logger_tracks_last_value() -> None:
    progress = cli.ProgressLogger(step=25.0)

    for value in [10.0, 30.0, 55.0, 100.0]:
        progress(value)

    assert progress.last == 100.0
