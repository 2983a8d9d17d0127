"""Database package for sync metadata and the playlist library."""

from .library import (
    FileQuery,
    LibraryChange,
    LibraryError,
    LibraryObserver,
    MediaResolver,
    PlaylistLibrary,
)
from .models import ChangeKind, MediaItem, Playlist, PlaylistEntry, SyncRecord
from .service import DatabaseService

__all__ = [
    # Models
    "ChangeKind",
    "MediaItem",
    "Playlist",
    "PlaylistEntry",
    "SyncRecord",
    # Metadata store
    "DatabaseService",
    # Library
    "FileQuery",
    "LibraryChange",
    "LibraryError",
    "LibraryObserver",
    "MediaResolver",
    "PlaylistLibrary",
]
