"""Conversion between playlist names, playlist filenames and entry paths."""

import os
from pathlib import Path
from typing import Optional, Union

PLAYLIST_EXTENSION = "m3u"
BACKUP_EXTENSION = "backup"
PLAYLIST_MIME_TYPE = "audio/x-mpegurl"

PathLike = Union[str, Path]


def sanitize_filename(name: str, extension: str = PLAYLIST_EXTENSION) -> str:
    """Turn a playlist name into a filename inside the sync folder.

    Path separators become ``_``, so ``"a/b"`` and ``"a_b"`` map to the same
    filename.

    Args:
        name: Playlist name
        extension: Extension without the leading dot

    Returns:
        Filename such as ``"a_b.m3u"``
    """
    safe_name = name.replace("/", "_").replace("\\", "_")
    return f"{safe_name}.{extension}"


def derive_playlist_name(
    filename: Optional[str], extension: str = PLAYLIST_EXTENSION
) -> Optional[str]:
    """Recover the playlist name from a playlist filename.

    Args:
        filename: Name of a file in the sync folder
        extension: Expected extension without the leading dot

    Returns:
        Playlist name, or None if the file does not carry the extension or
        has an empty stem
    """
    if not filename:
        return None

    suffix = f".{extension}"
    if not filename.endswith(suffix):
        return None

    name = filename[: -len(suffix)]
    return name or None


def is_playlist_filename(filename: Optional[str]) -> bool:
    """Check whether ``filename`` names a live playlist file."""
    return derive_playlist_name(filename) is not None


def normalize_separators(line: str) -> str:
    """Convert Windows directory separators to ``/``."""
    return line.replace("\\", "/")


def to_absolute(path: str, sync_folder_path: Optional[PathLike]) -> str:
    """Resolve an entry path against the sync folder.

    Args:
        path: Entry path, relative to the sync folder or absolute
        sync_folder_path: Real path of the sync folder, if known

    Returns:
        Normalized absolute path, or ``path`` unchanged when the folder path
        is unknown
    """
    if sync_folder_path is None:
        return path
    return os.path.normpath(os.path.join(str(sync_folder_path), path))


def to_relative(path: str, sync_folder_path: Optional[PathLike]) -> str:
    """Express an absolute entry path relative to the sync folder.

    Args:
        path: Absolute media path
        sync_folder_path: Real path of the sync folder, if known

    Returns:
        Relative path, or ``path`` unchanged when the folder path is unknown
        or ``path`` lies outside the folder
    """
    if sync_folder_path is None:
        return path

    folder = Path(os.path.normpath(str(sync_folder_path)))
    try:
        return Path(os.path.normpath(path)).relative_to(folder).as_posix()
    except ValueError:
        return path
