"""Watch the sync folder for playlist file changes."""

import logging
from pathlib import Path
from typing import Any, Callable, Optional, Union

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from .codec import is_playlist_filename

logger = logging.getLogger(__name__)

# Called with the changed path, or None when the scope of a change is unknown
FolderChangeCallback = Callable[[Optional[str]], None]


class SyncFolderEventHandler(FileSystemEventHandler):
    """Forwards watchdog events as folder change notifications."""

    def __init__(self, callback: FolderChangeCallback) -> None:
        super().__init__()
        self._callback = callback

    def on_created(self, event: FileSystemEvent) -> None:
        self._handle(event, str(event.src_path))

    def on_modified(self, event: FileSystemEvent) -> None:
        # The folder itself reports a modification for every entry change
        if event.is_directory:
            return
        self._handle(event, str(event.src_path))

    def on_closed(self, event: FileSystemEvent) -> None:
        self._handle(event, str(event.src_path))

    def on_moved(self, event: FileSystemEvent) -> None:
        if not event.is_directory and is_playlist_filename(
            Path(str(event.src_path)).name
        ):
            # A playlist file moved away or renamed counts as deleted
            self._callback(None)
        dest_path = getattr(event, "dest_path", "") or ""
        self._handle(event, str(dest_path) or None)

    def on_deleted(self, event: FileSystemEvent) -> None:
        # A vanished file can only be reconciled by a full scan
        self._callback(None)

    def _handle(self, event: FileSystemEvent, path: Optional[str]) -> None:
        if event.is_directory:
            self._callback(None)
            return
        self._callback(path)


class SyncFolderWatcher:
    """Runs a watchdog observer on the sync folder (non-recursive)."""

    def __init__(
        self,
        folder_path: Union[str, Path],
        callback: FolderChangeCallback,
        observer_factory: Callable[[], Any] = Observer,
    ) -> None:
        """Initialize the watcher.

        Args:
            folder_path: Directory to watch
            callback: Receives the changed path or None
            observer_factory: Creates the watchdog observer
        """
        self.folder_path = Path(folder_path)
        self.handler = SyncFolderEventHandler(callback)
        self._observer_factory = observer_factory
        self._observer: Optional[Any] = None

    @property
    def is_running(self) -> bool:
        """Whether the observer thread has been started."""
        return self._observer is not None

    def start(self) -> None:
        """Start watching the folder."""
        if self._observer is not None:
            return
        observer = self._observer_factory()
        observer.schedule(self.handler, str(self.folder_path), recursive=False)
        observer.start()
        self._observer = observer
        logger.info("Watching sync folder: %s", self.folder_path)

    def stop(self) -> None:
        """Stop watching and wait for the observer thread."""
        if self._observer is None:
            return
        self._observer.stop()
        self._observer.join()
        self._observer = None
        logger.info("Stopped watching sync folder: %s", self.folder_path)
