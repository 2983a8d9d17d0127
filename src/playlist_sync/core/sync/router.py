"""Single-worker queue serializing scan, import and export requests.

Folder and library notifications arrive on arbitrary threads. They only post
messages here; one background worker executes the messages strictly in arrival
order, so the pipelines never run concurrently.
"""

import logging
import queue
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Optional

from ..filesystem.codec import PLAYLIST_EXTENSION
from ..filesystem.sync_folder import SyncFile

logger = logging.getLogger(__name__)


class MessageKind(str, Enum):
    """Kinds of work the router executes."""

    SCAN = "scan"
    IMPORT = "import"
    EXPORT = "export"


@dataclass(frozen=True)
class SyncMessage:
    """A unit of work for the router."""

    kind: MessageKind
    payload: Any = None
    extension: str = PLAYLIST_EXTENSION


Handler = Callable[[SyncMessage], None]

_STOP = object()


class ChangeRouter:
    """FIFO work queue drained by one daemon thread."""

    def __init__(self, handlers: Dict[MessageKind, Handler], name: str = "PlaylistSync"):
        """Initialize the router.

        Args:
            handlers: Callable per message kind
            name: Worker thread name
        """
        self.handlers = handlers
        self.name = name
        self._queue: "queue.Queue[Any]" = queue.Queue()
        self._thread: Optional[threading.Thread] = None
        self._accepting = False
        self._draining = False
        self._lock = threading.Lock()

    @property
    def is_running(self) -> bool:
        """Whether the worker thread is alive."""
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start the worker thread."""
        with self._lock:
            if self._thread is not None:
                return
            self._accepting = True
            self._thread = threading.Thread(
                target=self._run, name=self.name, daemon=True
            )
            self._thread.start()
        logger.debug("Change router started")

    def post(self, message: SyncMessage) -> bool:
        """Queue a message; safe from any thread.

        While a draining stop is in progress, only follow-up messages posted
        by handlers on the worker thread are accepted.

        Returns:
            False if the router is not accepting messages
        """
        with self._lock:
            if not (self._accepting or self._posted_while_draining()):
                logger.debug("Router not accepting messages, dropping %s", message)
                return False
            self._queue.put(message)
        return True

    def post_scan(self) -> bool:
        """Queue a reconciliation scan."""
        return self.post(SyncMessage(MessageKind.SCAN))

    def post_import(self, file: SyncFile) -> bool:
        """Queue the import of a playlist file."""
        return self.post(SyncMessage(MessageKind.IMPORT, file))

    def post_export(self, playlist_id: int, extension: str = PLAYLIST_EXTENSION) -> bool:
        """Queue the export of a library playlist."""
        return self.post(SyncMessage(MessageKind.EXPORT, playlist_id, extension))

    def join(self) -> None:
        """Block until every queued message has been processed."""
        self._queue.join()

    def stop(self, drain: bool = True, timeout: Optional[float] = None) -> None:
        """Stop accepting messages and end the worker.

        Args:
            drain: Process already queued messages before stopping; otherwise
                stop after the current message
            timeout: Seconds to wait for the worker thread
        """
        with self._lock:
            if self._thread is None:
                return
            self._accepting = False
            self._draining = drain
            if not drain:
                self._discard_pending()
            self._queue.put(_STOP)
            thread = self._thread

        thread.join(timeout)
        with self._lock:
            self._thread = None
            self._draining = False
        logger.debug("Change router stopped")

    def _posted_while_draining(self) -> bool:
        return self._draining and threading.current_thread() is self._thread

    def _discard_pending(self) -> None:
        while True:
            try:
                self._queue.get_nowait()
            except queue.Empty:
                return
            self._queue.task_done()

    def _run(self) -> None:
        while True:
            message = self._queue.get()
            try:
                if message is _STOP:
                    self._run_late_messages()
                    return
                self.dispatch(message)
            finally:
                self._queue.task_done()

    def _run_late_messages(self) -> None:
        # Posted by handlers after the stop marker was queued
        while True:
            try:
                message = self._queue.get_nowait()
            except queue.Empty:
                return
            try:
                self.dispatch(message)
            finally:
                self._queue.task_done()

    def dispatch(self, message: SyncMessage) -> None:
        """Execute one message, logging any failure."""
        handler = self.handlers.get(message.kind)
        if handler is None:
            logger.error("Unknown message type: %s", message.kind)
            return

        try:
            handler(message)
        except Exception:
            logger.exception("Failed to handle %s message", message.kind.value)
