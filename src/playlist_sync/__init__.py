"""Playlist Sync.

Keeps a playlist library and a folder of ``.m3u`` playlist files in sync in
both directions.
"""

__version__ = "1.0.0"

from .config import Config
from .core.sync import PlaylistObserver
from .database import DatabaseService, PlaylistLibrary

__all__ = [
    "Config",
    "DatabaseService",
    "PlaylistLibrary",
    "PlaylistObserver",
]
