"""Utility functions for vault records."""

from vault_sync.utils.timestamps import format_timestamp, utc_now

__all__ = [
    "format_timestamp",
    "utc_now",
]
