"""CLI command modules."""

from .init import init_command
from .library import media, playlists_command, status_command
from .sync import export_command, scan_command, watch_command

__all__ = [
    "export_command",
    "init_command",
    "media",
    "playlists_command",
    "scan_command",
    "status_command",
    "watch_command",
]
