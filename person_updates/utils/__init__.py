"""Shared utilities for configuration, logging, and time handling"""

from person_updates.utils.ticks import datetime_to_ticks, ticks_to_datetime, utc_now

__all__ = ["datetime_to_ticks", "ticks_to_datetime", "utc_now"]
