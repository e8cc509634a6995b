"""Command-line entry point for scheduled person updates.

Usage:
    person-updates-sync [--config CONFIG_PATH] [--verbose]
"""

import argparse
import signal
import sys
import threading
from datetime import datetime, timezone

import structlog

from person_updates.exceptions import SyncCancelledError
from person_updates.sync.person_updates_task import PersonUpdatesTask
from person_updates.utils.config_loader import ConfigLoader, ConfigurationError
from person_updates.utils.logging_config import configure_logging

log = structlog.stdlib.get_logger()

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_CANCELLED = 130


class ProgressLogger:
    """Logs progress at most once per ``step`` percent."""

    def __init__(self, step: float = 10.0):
        self._step = step
        self._next = step
        self.last: float | None = None

    def __call__(self, value: float) -> None:
        self.last = value
        if value >= self._next or value >= 100.0:
            log.info("person_updates_progress", percent=round(value, 1))
            while self._next <= value:
                self._next += self._step


def install_cancel_handlers(cancel_event: threading.Event) -> None:
    """Set ``cancel_event`` on SIGINT and SIGTERM."""

    def handler(signum, frame):
        log.warning("cancellation_requested", signal=signal.Signals(signum).name)
        cancel_event.set()

    signal.signal(signal.SIGINT, handler)
    signal.signal(signal.SIGTERM, handler)


def perform_sync(
    config_path: str | None = None,
    verbose: bool = False,
    cancel_event: threading.Event | None = None,
) -> dict:
    """
    Load configuration and run one person updates pass.

    Args:
        config_path: Optional path to configuration file
        verbose: If True, log at DEBUG level
        cancel_event: Optional cancellation signal

    Returns:
        Dictionary with run statistics
    """
    start_time = datetime.now(timezone.utc)

    try:
        config_loader = ConfigLoader()
        config = config_loader.load_config(config_path)
    except ConfigurationError as e:
        log.error("configuration_error", error=str(e))
        return {"success": False, "cancelled": False, "error": str(e)}

    configure_logging(
        log_level="DEBUG" if verbose else config.logging.log_level,
        json_logs=config.logging.json_logs,
        log_file=config.logging.log_file,
    )
    config_loader.validate_config(config)

    task = PersonUpdatesTask.from_config(config)
    progress = ProgressLogger()

    try:
        report = task.run(progress=progress, cancel_event=cancel_event)
    except SyncCancelledError as e:
        return {"success": False, "cancelled": True, "error": str(e)}
    except Exception as e:
        duration = (datetime.now(timezone.utc) - start_time).total_seconds()
        log.error(
            "person_updates_failed",
            error=str(e),
            error_type=type(e).__name__,
            duration_seconds=duration,
        )
        return {"success": False, "cancelled": False, "error": str(e)}

    return {
        "success": True,
        "cancelled": False,
        "outcome": report.outcome.value,
        "start_date": report.start_date.isoformat() if report.start_date else None,
        "changed_ids": report.changed_ids,
        "candidate_ids": report.candidate_ids,
        "refreshed": report.refreshed,
        "failed_ids": report.failed_ids,
        "duration_seconds": report.duration_seconds,
    }


def print_summary(stats: dict) -> None:
    print("\n" + "=" * 60)
    print("PERSON UPDATES SUMMARY")
    print("=" * 60)

    if stats.get("success"):
        print("Status: SUCCESS")
        print(f"Outcome: {stats.get('outcome')}")
        if stats.get("start_date"):
            print(f"Changes Since: {stats['start_date']}")
        print(f"Changed Ids: {stats.get('changed_ids', 0)}")
        print(f"Cached Matches: {stats.get('candidate_ids', 0)}")
        print(f"Refreshed: {stats.get('refreshed', 0)}")
        print(f"Failed: {len(stats.get('failed_ids', []))}")
        print(f"Duration: {stats.get('duration_seconds', 0):.2f} seconds")
    elif stats.get("cancelled"):
        print("Status: CANCELLED")
    else:
        print("Status: FAILED")
        print(f"Error: {stats.get('error', 'Unknown error')}")

    print("=" * 60)


def exit_code(stats: dict) -> int:
    if stats.get("success"):
        return EXIT_OK
    if stats.get("cancelled"):
        return EXIT_CANCELLED
    return EXIT_FAILED


def main(argv: list[str] | None = None) -> int:
    """Main entry point for scheduled person updates."""
    parser = argparse.ArgumentParser(
        description="Refresh cached TMDb people that changed since the last sync"
    )
    parser.add_argument("--config", type=str, default=None, help="Path to configuration file")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    args = parser.parse_args(argv)

    cancel_event = threading.Event()
    install_cancel_handlers(cancel_event)

    stats = perform_sync(config_path=args.config, verbose=args.verbose, cancel_event=cancel_event)
    print_summary(stats)
    return exit_code(stats)


if __name__ == "__main__":
    sys.exit(main())
