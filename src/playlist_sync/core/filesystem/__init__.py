"""Filesystem module.

Handles the sync folder, playlist filenames and entry paths, fingerprints and
folder change notifications.
"""

from .codec import (
    BACKUP_EXTENSION,
    PLAYLIST_EXTENSION,
    PLAYLIST_MIME_TYPE,
    derive_playlist_name,
    is_playlist_filename,
    normalize_separators,
    sanitize_filename,
    to_absolute,
    to_relative,
)
from .fingerprint import compute_fingerprint, fingerprint_bytes, fingerprint_file
from .sync_folder import LocalSyncFolder, SyncFile, SyncFolder, SyncFolderError
from .watcher import SyncFolderEventHandler, SyncFolderWatcher

__all__ = [
    # Codec
    "BACKUP_EXTENSION",
    "PLAYLIST_EXTENSION",
    "PLAYLIST_MIME_TYPE",
    "derive_playlist_name",
    "is_playlist_filename",
    "normalize_separators",
    "sanitize_filename",
    "to_absolute",
    "to_relative",
    # Fingerprints
    "compute_fingerprint",
    "fingerprint_bytes",
    "fingerprint_file",
    # Sync folder
    "LocalSyncFolder",
    "SyncFile",
    "SyncFolder",
    "SyncFolderError",
    # Watcher
    "SyncFolderEventHandler",
    "SyncFolderWatcher",
]
