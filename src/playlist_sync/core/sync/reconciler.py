"""Reconciliation scan between sync records, library playlists and files.

A scan walks every SyncRecord and decides, per record, whether the playlist or
its file vanished and what to do about it. Afterwards every playlist file that
is neither known nor present in the library is queued for import.
"""

import logging
from dataclasses import dataclass
from dataclasses import field as dataclass_field
from typing import Any, Callable, Dict, List, Optional, Set

from ...database.library import PlaylistLibrary
from ...database.models import SyncRecord
from ...database.service import DatabaseService
from ..filesystem.codec import (
    BACKUP_EXTENSION,
    PLAYLIST_EXTENSION,
    derive_playlist_name,
    sanitize_filename,
)
from ..filesystem.sync_folder import SyncFile, SyncFolder
from .exporter import PlaylistExporter

logger = logging.getLogger(__name__)


@dataclass
class ReconcileResult:
    """Statistics from a reconciliation scan."""

    records_checked: int = 0
    records_removed: int = 0
    files_backed_up: int = 0
    playlists_backed_up: int = 0
    playlists_deleted: int = 0
    imports_queued: List[str] = dataclass_field(default_factory=list)
    errors: List[str] = dataclass_field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert statistics to dictionary format."""
        return {
            "records_checked": self.records_checked,
            "records_removed": self.records_removed,
            "files_backed_up": self.files_backed_up,
            "playlists_backed_up": self.playlists_backed_up,
            "playlists_deleted": self.playlists_deleted,
            "imports_queued": len(self.imports_queued),
            "error_count": len(self.errors),
            "errors": self.errors[:10],
        }


class Reconciler:
    """Brings sync records, library and sync folder back into agreement."""

    def __init__(
        self,
        db_service: DatabaseService,
        library: PlaylistLibrary,
        sync_folder: SyncFolder,
        exporter: PlaylistExporter,
        enqueue_import: Callable[[SyncFile], None],
        purge: bool = False,
    ) -> None:
        """Initialize the reconciler.

        Args:
            db_service: Metadata store
            library: Playlist library
            sync_folder: Folder holding the playlist files
            exporter: Used to write ``.backup`` files before purging
            enqueue_import: Queues an import of an unknown playlist file
            purge: Delete stranded playlists and records (leaving backups)
        """
        self.db_service = db_service
        self.library = library
        self.sync_folder = sync_folder
        self.exporter = exporter
        self.enqueue_import = enqueue_import
        self.purge = purge

    def scan(self) -> ReconcileResult:
        """Run a full reconciliation pass."""
        result = ReconcileResult()
        known_files: Set[str] = set()

        for record in self.db_service.get_all_records():
            result.records_checked += 1
            filename = self._reconcile_record(record, result)
            if filename is not None:
                known_files.add(filename)

        try:
            files = self.sync_folder.list_files()
        except OSError as e:
            message = f"Failed to list sync folder: {e}"
            logger.error(message)
            result.errors.append(message)
            return result

        for file in files:
            playlist_name = derive_playlist_name(file.name)
            if playlist_name is None or file.name in known_files:
                continue

            # Name-based check; a same-named playlist created meanwhile is skipped
            if self.library.get_playlist_id(playlist_name) is None:
                logger.debug("Queueing import of new playlist file: %s", file.name)
                self.enqueue_import(file)
                result.imports_queued.append(file.name)

        logger.info("Scan finished: %s", result.to_dict())
        return result

    def _reconcile_record(
        self, record: SyncRecord, result: ReconcileResult
    ) -> Optional[str]:
        """Apply the purge/backup rules to one record.

        Returns:
            The record's filename if its file still exists, else None
        """
        filename = sanitize_filename(record.name, PLAYLIST_EXTENSION)
        file = self.sync_folder.find_file(filename)

        if self.library.get_playlist_name(record.id) is None:
            # The playlist was deleted from the library
            if self.purge and file is not None:
                backup_name = sanitize_filename(record.name, BACKUP_EXTENSION)
                if self.sync_folder.rename(file, backup_name):
                    result.files_backed_up += 1
                    logger.info("Renamed %s to %s", filename, backup_name)
                    file = None
                else:
                    result.errors.append(f"Failed to rename {filename}")

            self.db_service.delete_record(record.id)
            result.records_removed += 1
            logger.info("Forgot deleted playlist: %s (ID: %s)", record.name, record.id)

        elif file is None and self.purge:
            # The playlist file was deleted; keep a backup before forgetting it
            if not self.exporter.export_playlist(record.id, BACKUP_EXTENSION):
                result.errors.append(f"Failed to back up playlist {record.name}")
                logger.warning(
                    "Keeping playlist %s, its backup could not be written",
                    record.name,
                )
                return None

            result.playlists_backed_up += 1
            self.library.delete_playlist(record.id)
            self.db_service.delete_record(record.id)
            result.playlists_deleted += 1
            result.records_removed += 1
            logger.info(
                "Removed playlist whose file vanished: %s (ID: %s)",
                record.name,
                record.id,
            )

        return filename if file is not None else None
