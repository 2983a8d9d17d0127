"""Access to the folder holding the synced playlist files."""

import logging
import os
import tempfile
from abc import ABC, abstractmethod
from contextlib import contextmanager, suppress
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, ContextManager, Iterator, List, Optional, Union

logger = logging.getLogger(__name__)


class SyncFolderError(Exception):
    """Raised when a sync folder location cannot be used."""


@dataclass(frozen=True)
class SyncFile:
    """A file directly inside the sync folder."""

    name: str
    path: Path

    def __str__(self) -> str:
        """Return the file path."""
        return str(self.path)


class SyncFolder(ABC):
    """Operations the sync engine needs from the folder backend."""

    @abstractmethod
    def list_files(self) -> List[SyncFile]:
        """List the files directly inside the folder."""

    @abstractmethod
    def find_file(self, name: str) -> Optional[SyncFile]:
        """Find a file by name."""

    @abstractmethod
    def create_file(self, mime_type: str, name: str) -> Optional[SyncFile]:
        """Create an empty file; returns None on failure."""

    @abstractmethod
    def rename(self, file: SyncFile, new_name: str) -> bool:
        """Rename a file within the folder; returns False on failure."""

    @abstractmethod
    def delete(self, file: SyncFile) -> bool:
        """Delete a file; returns False on failure."""

    @abstractmethod
    def open_read(self, file: SyncFile) -> BinaryIO:
        """Open a file for binary reading."""

    @abstractmethod
    def open_write(self, file: SyncFile) -> ContextManager[BinaryIO]:
        """Context manager yielding a binary sink that replaces the content."""

    @abstractmethod
    def best_effort_real_path(self) -> Optional[Path]:
        """Real filesystem path of the folder, when the backend exposes one."""

    @abstractmethod
    def resolve(self, path: Union[str, Path]) -> Optional[SyncFile]:
        """Map a changed path reported by a watcher to a file of this folder."""


class LocalSyncFolder(SyncFolder):
    """Sync folder backed by a local directory."""

    def __init__(self, root: Union[str, Path], expose_real_path: bool = True) -> None:
        """Open a local sync folder.

        Args:
            root: Directory holding the playlist files
            expose_real_path: Whether entry paths may be resolved against the
                directory's real path

        Raises:
            SyncFolderError: If the directory is missing or not accessible
        """
        self.root = Path(root).expanduser()
        if not self.root.is_dir():
            raise SyncFolderError(f"Sync folder is not a directory: {self.root}")
        if not os.access(self.root, os.R_OK | os.W_OK | os.X_OK):
            raise SyncFolderError(f"Sync folder is not accessible: {self.root}")

        self.expose_real_path = expose_real_path

    def __repr__(self) -> str:
        """String representation of LocalSyncFolder."""
        return f"<LocalSyncFolder(root='{self.root}')>"

    def _file(self, path: Path) -> SyncFile:
        return SyncFile(name=path.name, path=path)

    def list_files(self) -> List[SyncFile]:
        """List regular files in the folder, sorted by name."""
        return [
            self._file(entry)
            for entry in sorted(self.root.iterdir())
            if entry.is_file()
        ]

    def find_file(self, name: str) -> Optional[SyncFile]:
        """Find a regular file called ``name``."""
        candidate = self.root / name
        if candidate.parent != self.root or not candidate.is_file():
            return None
        return self._file(candidate)

    def create_file(self, mime_type: str, name: str) -> Optional[SyncFile]:
        """Create an empty file called ``name``."""
        candidate = self.root / name
        try:
            candidate.touch(exist_ok=False)
        except OSError as e:
            logger.error("Failed to create %s (%s): %s", candidate, mime_type, e)
            return None
        return self._file(candidate)

    def rename(self, file: SyncFile, new_name: str) -> bool:
        """Rename ``file``, refusing to overwrite an existing file."""
        target = self.root / new_name
        if target.exists():
            logger.error("Cannot rename %s: %s already exists", file.name, new_name)
            return False
        try:
            file.path.rename(target)
        except OSError as e:
            logger.error("Failed to rename %s to %s: %s", file.name, new_name, e)
            return False
        return True

    def delete(self, file: SyncFile) -> bool:
        """Delete ``file``; a file that is already gone counts as deleted."""
        try:
            file.path.unlink()
        except FileNotFoundError:
            return True
        except OSError as e:
            logger.error("Failed to delete %s: %s", file.name, e)
            return False
        return True

    def open_read(self, file: SyncFile) -> BinaryIO:
        """Open ``file`` for binary reading."""
        return open(file.path, "rb")

    @contextmanager
    def open_write(self, file: SyncFile) -> Iterator[BinaryIO]:
        """Write through a temporary sibling file and swap it in on success."""
        fd, temp_name = tempfile.mkstemp(
            prefix=f".{file.name}.", suffix=".tmp", dir=str(self.root)
        )
        try:
            with os.fdopen(fd, "wb") as sink:
                yield sink
            os.replace(temp_name, file.path)
        except BaseException:
            with suppress(FileNotFoundError):
                os.unlink(temp_name)
            raise

    def best_effort_real_path(self) -> Optional[Path]:
        """Real path of the folder unless disabled."""
        if not self.expose_real_path:
            return None
        return self.root.resolve()

    def resolve(self, path: Union[str, Path]) -> Optional[SyncFile]:
        """Map ``path`` to a regular file directly inside the folder."""
        candidate = Path(path)
        if candidate.parent.resolve() != self.root.resolve():
            return None
        if not candidate.is_file():
            return None
        return self._file(self.root / candidate.name)

