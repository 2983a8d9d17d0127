"""Import playlist files from the sync folder into the library."""

import logging
from contextlib import nullcontext
from typing import Callable, ContextManager, List, Optional

from ...database.library import MediaResolver, PlaylistLibrary
from ...database.service import DatabaseService
from ..filesystem.codec import derive_playlist_name, normalize_separators, to_absolute
from ..filesystem.fingerprint import fingerprint_file
from ..filesystem.sync_folder import SyncFile, SyncFolder

logger = logging.getLogger(__name__)

SuspendNotifications = Callable[[], ContextManager[None]]


def parse_playlist_lines(lines: List[str], sync_folder_path: Optional[str]) -> List[str]:
    """Turn playlist file lines into absolute media paths.

    Blank lines and ``#`` comments are skipped; the remaining lines are
    resolved against the sync folder when its real path is known.
    """
    paths = []
    for raw_line in lines:
        line = raw_line.rstrip("\r\n")
        if not line or line.startswith("#"):
            continue
        paths.append(to_absolute(normalize_separators(line), sync_folder_path))
    return paths


class PlaylistImporter:
    """Imports ``.m3u`` files into library playlists."""

    def __init__(
        self,
        db_service: DatabaseService,
        library: PlaylistLibrary,
        sync_folder: SyncFolder,
        media_resolver: Optional[MediaResolver] = None,
        suspend_notifications: Optional[SuspendNotifications] = None,
    ) -> None:
        """Initialize the importer.

        Args:
            db_service: Metadata store
            library: Playlist library receiving the imported playlists
            sync_folder: Folder holding the playlist files
            media_resolver: Builds media queries from entry paths
            suspend_notifications: Context manager factory that detaches the
                library observer while the import mutates the library
        """
        self.db_service = db_service
        self.library = library
        self.sync_folder = sync_folder
        self.media_resolver = media_resolver or MediaResolver()
        self.suspend_notifications = suspend_notifications or nullcontext

    def import_file(self, file: SyncFile) -> bool:
        """Import a playlist file unless its content is already imported.

        Args:
            file: Playlist file inside the sync folder

        Returns:
            True if the library was updated
        """
        file_hash = fingerprint_file(self.sync_folder, file)
        if file_hash is None:
            return False

        playlist_name = derive_playlist_name(file.name)
        if playlist_name is None:
            logger.error("Cannot import file without playlist name: %s", file)
            return False

        existing = self.db_service.get_record_by_name(playlist_name)
        if existing is not None and existing.hash == file_hash:
            logger.debug("Skipping import (hash unchanged): %s", file)
            return False
        previous_id = existing.id if existing is not None else None

        paths = self._read_paths(file)
        if paths is None:
            return False

        with self.suspend_notifications():
            playlist_id = self.library.create_playlist(playlist_name)

            for path in paths:
                query = self.media_resolver.build_file_query(path)
                self.library.append_entry(playlist_id, query)

            if previous_id is None:
                self.db_service.create_record(playlist_id, playlist_name, file_hash)
            else:
                self.db_service.update_record(
                    previous_id, id=playlist_id, hash=file_hash
                )

        logger.info(
            "Imported playlist %s (%d entries) from %s",
            playlist_name,
            len(paths),
            file.name,
        )
        return True

    def _read_paths(self, file: SyncFile) -> Optional[List[str]]:
        """Read and parse the whole file; None on I/O or decoding failure."""
        real_path = self.sync_folder.best_effort_real_path()
        if real_path is None:
            logger.debug("Sync folder has no real path, importing paths verbatim")

        try:
            with self.sync_folder.open_read(file) as stream:
                text = stream.read().decode("utf-8-sig")
        except (OSError, UnicodeDecodeError) as e:
            logger.error("Failed to import playlist %s: %s", file, e)
            return None

        return parse_playlist_lines(
            text.splitlines(), str(real_path) if real_path is not None else None
        )
