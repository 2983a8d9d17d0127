"""SQLite-backed playlist library and media index.

The sync engine treats the library as an external collaborator: it creates,
deletes and enumerates playlists, appends entries resolved through the media
index, and notifies registered observers about completed changes.
"""

import logging
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterator, List, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session, sessionmaker

from .models import Base, ChangeKind, MediaItem, Playlist, PlaylistEntry
from .service import create_sqlite_engine

logger = logging.getLogger(__name__)


class LibraryError(Exception):
    """Raised for invalid library operations."""


@dataclass(frozen=True)
class LibraryChange:
    """Notification about a change in the library."""

    kind: ChangeKind
    id: int
    ongoing: bool = False


@dataclass(frozen=True)
class FileQuery:
    """Query selecting the media item stored at ``path``."""

    path: str


LibraryObserver = Callable[[LibraryChange], None]


class MediaResolver:
    """Builds queries the library can use to locate media by file path."""

    def build_file_query(self, path: str) -> FileQuery:
        """Build a query for the media item at ``path``."""
        return FileQuery(path=str(path))


class PlaylistLibrary:
    """Playlist store with a path-indexed media table and change observers."""

    LIBRARY_TABLES = (MediaItem.__table__, Playlist.__table__, PlaylistEntry.__table__)

    def __init__(self, db_path: Path) -> None:
        """Initialize the library.

        Args:
            db_path: Path to SQLite database file (may be shared with the
                metadata store)
        """
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        self.engine = create_sqlite_engine(self.db_path)
        self.SessionLocal = sessionmaker(
            autocommit=False, autoflush=False, expire_on_commit=False, bind=self.engine
        )
        Base.metadata.create_all(bind=self.engine, tables=list(self.LIBRARY_TABLES))

        self._observers: List[LibraryObserver] = []
        self._observers_lock = threading.Lock()

        logger.debug("Playlist library opened at: %s", self.db_path)

    def get_session(self) -> Session:
        """Get a new database session."""
        return self.SessionLocal()

    # =========================================================================
    # Observers
    # =========================================================================

    def register_observer(self, observer: LibraryObserver) -> None:
        """Register a callback for library change notifications."""
        with self._observers_lock:
            if observer not in self._observers:
                self._observers.append(observer)

    def unregister_observer(self, observer: LibraryObserver) -> None:
        """Remove a previously registered callback."""
        with self._observers_lock:
            if observer in self._observers:
                self._observers.remove(observer)

    def notify(self, kind: ChangeKind, item_id: int, ongoing: bool = False) -> None:
        """Deliver a change notification to all registered observers."""
        with self._observers_lock:
            observers = list(self._observers)

        change = LibraryChange(kind=kind, id=item_id, ongoing=ongoing)
        for observer in observers:
            observer(change)

    # =========================================================================
    # Media Index
    # =========================================================================

    def add_media(self, path: str) -> int:
        """Add a media file to the index (no-op if already indexed).

        Args:
            path: Absolute path of the media file

        Returns:
            Media item id
        """
        with self.get_session() as session:
            item = session.scalar(select(MediaItem).where(MediaItem.path == path))
            if item is None:
                item = MediaItem(path=path)
                session.add(item)
                session.commit()
                logger.debug("Indexed media: %s (ID: %s)", path, item.id)
            media_id = item.id

        self.notify(ChangeKind.MEDIA, media_id)
        return media_id

    def find_media(self, query: FileQuery) -> Optional[MediaItem]:
        """Resolve a file query to a media item."""
        with self.get_session() as session:
            return session.scalar(select(MediaItem).where(MediaItem.path == query.path))

    # =========================================================================
    # Playlists
    # =========================================================================

    def create_playlist(self, name: str) -> int:
        """Create a playlist, emptying any existing playlist of the same name.

        Args:
            name: Playlist name

        Returns:
            Playlist id
        """
        if not name:
            raise LibraryError("Playlist name must not be empty")

        with self.get_session() as session:
            playlist = session.scalar(select(Playlist).where(Playlist.name == name))
            if playlist is None:
                playlist = Playlist(name=name)
                session.add(playlist)
                logger.info("Created playlist: %s", name)
            else:
                playlist.entries.clear()
                logger.info("Overwriting playlist: %s (ID: %s)", name, playlist.id)
            session.commit()
            playlist_id = playlist.id

        self.notify(ChangeKind.PLAYLIST, playlist_id)
        return playlist_id

    def delete_playlist(self, playlist_id: int) -> bool:
        """Delete a playlist and its entries.

        Returns:
            True if the playlist existed
        """
        with self.get_session() as session:
            playlist = session.get(Playlist, playlist_id)
            if playlist is None:
                logger.warning("Playlist not found for deletion: %s", playlist_id)
                return False
            session.delete(playlist)
            session.commit()
            logger.info("Deleted playlist: %s", playlist_id)

        self.notify(ChangeKind.PLAYLIST, playlist_id)
        return True

    def get_playlist_name(self, playlist_id: int) -> Optional[str]:
        """Get the name of a playlist, or None if it does not exist."""
        with self.get_session() as session:
            playlist = session.get(Playlist, playlist_id)
            return playlist.name if playlist else None

    def get_playlist_id(self, name: str) -> Optional[int]:
        """Get the id of the playlist called ``name``, or None."""
        with self.get_session() as session:
            return session.scalar(select(Playlist.id).where(Playlist.name == name))

    def list_playlists(self) -> List[Playlist]:
        """Get all playlists ordered by name."""
        with self.get_session() as session:
            return list(session.scalars(select(Playlist).order_by(Playlist.name)))

    def count_entries(self, playlist_id: int) -> int:
        """Count the entries of a playlist."""
        with self.get_session() as session:
            stmt = select(func.count(PlaylistEntry.id)).where(
                PlaylistEntry.playlist_id == playlist_id
            )
            return session.scalar(stmt) or 0

    def append_entry(
        self, playlist_id: int, query: FileQuery, ongoing: bool = False
    ) -> bool:
        """Append the media item selected by ``query`` to a playlist.

        Entries whose path is not in the media index are skipped.

        Args:
            playlist_id: Playlist id
            query: Media query built by a MediaResolver
            ongoing: Whether more changes to this playlist follow

        Returns:
            True if an entry was appended
        """
        with self.get_session() as session:
            playlist = session.get(Playlist, playlist_id)
            if playlist is None:
                raise LibraryError(f"Playlist not found: {playlist_id}")

            media = session.scalar(select(MediaItem).where(MediaItem.path == query.path))
            if media is None:
                logger.warning("Media not in library, skipping entry: %s", query.path)
                return False

            last_position = session.scalar(
                select(func.max(PlaylistEntry.position)).where(
                    PlaylistEntry.playlist_id == playlist_id
                )
            )
            position = 0 if last_position is None else last_position + 1
            session.add(
                PlaylistEntry(playlist_id=playlist_id, media_id=media.id, position=position)
            )
            session.commit()

        self.notify(ChangeKind.PLAYLIST, playlist_id, ongoing=ongoing)
        return True

    def stream_paths(self, playlist_id: int) -> Iterator[str]:
        """Yield the media paths of a playlist in store order."""
        stmt = (
            select(MediaItem.path)
            .join(PlaylistEntry, PlaylistEntry.media_id == MediaItem.id)
            .where(PlaylistEntry.playlist_id == playlist_id)
            .order_by(PlaylistEntry.position, PlaylistEntry.id)
        )
        with self.get_session() as session:
            for path in session.scalars(stmt):
                yield path

    def close(self) -> None:
        """Close database connection."""
        self.engine.dispose()
