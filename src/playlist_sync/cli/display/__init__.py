"""CLI display and formatting utilities."""

from .formatters import display_playlists, display_scan_result, display_sync_records

__all__ = [
    "display_playlists",
    "display_scan_result",
    "display_sync_records",
]
