"""Incremental TMDb person updates for a local people cache."""

__version__ = "0.1.0"
