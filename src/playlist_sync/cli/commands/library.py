"""Library commands: sync status, playlists and the media index."""

import logging
from pathlib import Path
from typing import Iterator, Tuple

import click
from rich.console import Console

from ...config import Config
from ...core.filesystem import LocalSyncFolder, SyncFolderError
from ...database import DatabaseService, PlaylistLibrary
from ..display import display_playlists, display_sync_records

console = Console()
logger = logging.getLogger(__name__)

AUDIO_EXTENSIONS = (".mp3", ".flac", ".ogg", ".opus", ".m4a", ".aac", ".wav")


def iter_media_files(path: Path, recursive: bool) -> Iterator[Path]:
    """Yield audio files at ``path`` (a file or a directory)."""
    if path.is_file():
        yield path
        return

    pattern = "**/*" if recursive else "*"
    for candidate in sorted(path.glob(pattern)):
        if candidate.is_file() and candidate.suffix.lower() in AUDIO_EXTENSIONS:
            yield candidate


@click.command("status")
@click.pass_obj
def status_command(config: Config) -> None:
    """Show the playlists currently under sync."""
    db_service = DatabaseService(config.database_path)

    sync_folder = None
    if config.sync_folder is not None:
        try:
            sync_folder = LocalSyncFolder(config.sync_folder)
        except SyncFolderError as e:
            console.print(f"[yellow]⚠️  {e}[/yellow]")

    display_sync_records(db_service.get_all_records(), sync_folder)


@click.command("playlists")
@click.pass_obj
def playlists_command(config: Config) -> None:
    """List the playlists in the library."""
    library = PlaylistLibrary(config.database_path)
    db_service = DatabaseService(config.database_path)
    synced_ids = [record.id for record in db_service.get_all_records()]
    display_playlists(library, synced_ids)


@click.group("media")
def media() -> None:
    """Manage the media index used to resolve playlist entries."""
    pass


@media.command(name="add")
@click.argument(
    "paths", nargs=-1, required=True, type=click.Path(exists=True, path_type=Path)
)
@click.option("--recursive/--no-recursive", default=True, help="Descend into folders")
@click.pass_obj
def media_add(config: Config, paths: Tuple[Path, ...], recursive: bool) -> None:
    """Add media files (or folders of media files) to the index."""
    library = PlaylistLibrary(config.database_path)

    added = 0
    for path in paths:
        for media_file in iter_media_files(path, recursive):
            library.add_media(str(media_file.resolve()))
            added += 1

    console.print(f"[green]✓ Indexed {added} media file(s)[/green]")
