"""Bidirectional sync between the playlist library and a playlist folder.

``PlaylistObserver`` is the composition root of the sync engine. It listens to
two notification sources (the folder watcher and the library), turns their
events into router messages, and runs the scan, import and export pipelines on
the router's worker thread.
"""

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Callable, Iterator, Optional, Union

from ...config import Config
from ...database.library import LibraryChange, MediaResolver, PlaylistLibrary
from ...database.models import ChangeKind
from ...database.service import DatabaseService
from ..filesystem.codec import is_playlist_filename
from ..filesystem.sync_folder import LocalSyncFolder, SyncFolder, SyncFolderError
from ..filesystem.watcher import SyncFolderWatcher
from .exporter import PlaylistExporter
from .importer import PlaylistImporter
from .reconciler import ReconcileResult, Reconciler
from .router import ChangeRouter, MessageKind, SyncMessage

logger = logging.getLogger(__name__)

WatcherFactory = Callable[[Path, Callable[[Optional[str]], None]], Any]


class PlaylistObserver:
    """Keeps library playlists and ``.m3u`` files in the sync folder in sync.

    When the sync folder cannot be opened the observer stays inert: nothing is
    registered and every public method is a no-op.
    """

    def __init__(
        self,
        db_service: DatabaseService,
        library: PlaylistLibrary,
        sync_folder: Union[str, Path, SyncFolder, None],
        purge: bool = False,
        export_relative_paths: bool = True,
        media_resolver: Optional[MediaResolver] = None,
        watcher_factory: Optional[WatcherFactory] = SyncFolderWatcher,
    ) -> None:
        """Initialize the observer and start syncing.

        Args:
            db_service: Metadata store
            library: Playlist library
            sync_folder: Folder backend or location of a local folder
            purge: Enable destructive reconciliation (with backups)
            export_relative_paths: Export entry paths relative to the folder
            media_resolver: Builds media queries for imported entries
            watcher_factory: Creates the folder watcher; None disables
                watching (scans, imports and exports can still be posted)
        """
        self.db_service = db_service
        self.library = library
        self.purge = purge
        self.export_relative_paths = export_relative_paths
        self.sync_folder: Optional[SyncFolder] = None
        self.router: Optional[ChangeRouter] = None
        self.watcher: Optional[Any] = None
        self.last_scan: Optional[ReconcileResult] = None

        try:
            self.sync_folder = self._open_folder(sync_folder)
        except SyncFolderError as e:
            logger.error("Failed to open sync folder %s: %s", sync_folder, e)
            return

        self.exporter = PlaylistExporter(
            db_service, library, self.sync_folder, export_relative_paths
        )
        self.importer = PlaylistImporter(
            db_service,
            library,
            self.sync_folder,
            media_resolver=media_resolver,
            suspend_notifications=self.suspend_library_notifications,
        )
        self.router = ChangeRouter(
            {
                MessageKind.SCAN: self._handle_scan,
                MessageKind.IMPORT: self._handle_import,
                MessageKind.EXPORT: self._handle_export,
            }
        )
        self.reconciler = Reconciler(
            db_service,
            library,
            self.sync_folder,
            self.exporter,
            enqueue_import=self.router.post_import,
            purge=purge,
        )

        self.router.start()

        real_path = self.sync_folder.best_effort_real_path()
        if watcher_factory is not None and real_path is not None:
            self.watcher = watcher_factory(real_path, self.on_folder_change)
            self.watcher.start()

        self.library.register_observer(self.on_library_change)

        # Start with a full scan
        self.router.post_scan()

    @classmethod
    def from_config(
        cls,
        config: Config,
        db_service: Optional[DatabaseService] = None,
        library: Optional[PlaylistLibrary] = None,
        **kwargs: Any,
    ) -> "PlaylistObserver":
        """Create an observer from application configuration."""
        return cls(
            db_service or DatabaseService(config.database_path),
            library or PlaylistLibrary(config.database_path),
            config.sync_folder,
            purge=config.purge,
            export_relative_paths=config.export_relative_paths,
            **kwargs,
        )

    @staticmethod
    def _open_folder(location: Union[str, Path, SyncFolder, None]) -> SyncFolder:
        if location is None:
            raise SyncFolderError("No sync folder configured")
        if isinstance(location, SyncFolder):
            return location
        return LocalSyncFolder(location)

    @property
    def is_active(self) -> bool:
        """Whether the observer is syncing (not inert and not unregistered)."""
        return self.router is not None

    # =========================================================================
    # Notification sources
    # =========================================================================

    def on_folder_change(self, path: Optional[str]) -> None:
        """Handle a folder change; ``None`` means the scope is unknown."""
        if self.router is None or self.sync_folder is None:
            return

        if path is None:
            self.router.post_scan()
            return

        file = self.sync_folder.resolve(path)
        if file is None:
            return

        if is_playlist_filename(file.name):
            self.router.post_import(file)

    def on_library_change(self, change: LibraryChange) -> None:
        """Handle a library change; only finished playlist changes export."""
        if self.router is None:
            return
        if change.kind != ChangeKind.PLAYLIST or change.ongoing:
            return
        self.router.post_export(change.id)

    @contextmanager
    def suspend_library_notifications(self) -> Iterator[None]:
        """Detach the library observer for the duration of the block."""
        self.library.unregister_observer(self.on_library_change)
        try:
            yield
        finally:
            if self.router is not None:
                self.library.register_observer(self.on_library_change)

    # =========================================================================
    # Router handlers (worker thread)
    # =========================================================================

    def _handle_scan(self, message: SyncMessage) -> None:
        self.last_scan = self.reconciler.scan()

    def _handle_import(self, message: SyncMessage) -> None:
        self.importer.import_file(message.payload)

    def _handle_export(self, message: SyncMessage) -> None:
        self.exporter.export_playlist(message.payload, message.extension)

    # =========================================================================
    # Public operations
    # =========================================================================

    def request_scan(self) -> None:
        """Queue a reconciliation scan."""
        if self.router is not None:
            self.router.post_scan()

    def request_export(self, playlist_id: int) -> None:
        """Queue the export of a playlist."""
        if self.router is not None:
            self.router.post_export(playlist_id)

    def wait_idle(self) -> None:
        """Block until all queued work has been processed."""
        if self.router is not None:
            self.router.join()

    def unregister(self) -> None:
        """Stop observing and let the worker finish queued work."""
        if self.router is None:
            return

        router = self.router
        self.router = None

        if self.watcher is not None:
            self.watcher.stop()
            self.watcher = None

        self.library.unregister_observer(self.on_library_change)
        router.stop(drain=True)
        logger.info("Playlist observer unregistered")
