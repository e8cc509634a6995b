#!/usr/bin/env python3
"""
Scheduled person updates for the local TMDb people cache.

Refreshes cached people that TMDb reports as changed since the last run.
Designed to be run on a schedule (e.g. via cron or a systemd timer); runs
more frequent than the configured interval are no-ops.

Usage:
    python scripts/scheduled_sync.py [--config CONFIG_PATH] [--verbose]
"""

import sys

from person_updates.cli import main

if __name__ == "__main__":
    sys.exit(main())
