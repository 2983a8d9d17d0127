"""Export library playlists as playlist files in the sync folder."""

import logging
import zlib
from typing import Optional, Tuple

from ...database.library import PlaylistLibrary
from ...database.service import DatabaseService
from ..filesystem.codec import (
    PLAYLIST_EXTENSION,
    PLAYLIST_MIME_TYPE,
    sanitize_filename,
    to_relative,
)
from ..filesystem.sync_folder import SyncFile, SyncFolder

logger = logging.getLogger(__name__)


class PlaylistExporter:
    """Writes library playlists to ``<name>.<extension>`` files."""

    def __init__(
        self,
        db_service: DatabaseService,
        library: PlaylistLibrary,
        sync_folder: SyncFolder,
        export_relative_paths: bool = True,
    ) -> None:
        """Initialize the exporter.

        Args:
            db_service: Metadata store
            library: Playlist library providing the entries
            sync_folder: Folder receiving the playlist files
            export_relative_paths: Write paths relative to the sync folder
                when its real path is known
        """
        self.db_service = db_service
        self.library = library
        self.sync_folder = sync_folder
        self.export_relative_paths = export_relative_paths

    def export_playlist(
        self, playlist_id: int, extension: str = PLAYLIST_EXTENSION
    ) -> bool:
        """Export a playlist.

        Exports to the live extension also record the fingerprint of the
        written content, so the resulting folder notification does not
        re-import the file.

        Args:
            playlist_id: Library playlist id
            extension: File extension (``m3u`` or ``backup``)

        Returns:
            True if the file was written
        """
        name = self.library.get_playlist_name(playlist_id)
        if name is None:
            logger.error("Cannot export, no such playlist: %s", playlist_id)
            return False

        filename = sanitize_filename(name, extension)
        file, created = self._find_or_create(filename)
        if file is None:
            return False

        real_path = self.sync_folder.best_effort_real_path()
        relativize = self.export_relative_paths and real_path is not None
        if self.export_relative_paths and real_path is None:
            logger.debug("Sync folder has no real path, exporting absolute paths")

        crc = 0
        entries = 0
        written = False
        try:
            with self.sync_folder.open_write(file) as sink:
                for path in self.library.stream_paths(playlist_id):
                    if relativize:
                        path = to_relative(path, real_path)
                    line = f"{path}\n".encode("utf-8")
                    sink.write(line)
                    crc = zlib.crc32(line, crc)
                    entries += 1
                sink.flush()
            written = True
        except OSError as e:
            logger.error("Failed to export playlist %s: %s", filename, e)
            return False
        finally:
            # Never leave an empty placeholder behind
            if created and not written:
                self.sync_folder.delete(file)

        if extension == PLAYLIST_EXTENSION:
            self.db_service.upsert_record(playlist_id, name, crc & 0xFFFFFFFF)

        logger.info("Exported playlist %s (%d entries) to %s", name, entries, filename)
        return True

    def _find_or_create(self, filename: str) -> Tuple[Optional[SyncFile], bool]:
        """Return the target file and whether this call created it."""
        file = self.sync_folder.find_file(filename)
        if file is not None:
            return file, False

        file = self.sync_folder.create_file(PLAYLIST_MIME_TYPE, filename)
        if file is None:
            logger.error("Failed to create file: %s", filename)
        return file, file is not None
