"""Sync commands: watch the folder, run a scan, export a playlist."""

import logging
import time
from typing import Any, Callable, Dict

import click
from rich.console import Console

from ...config import Config
from ...core.filesystem import LocalSyncFolder, SyncFolderError
from ...core.sync import PlaylistExporter, PlaylistObserver
from ...database import DatabaseService, PlaylistLibrary
from ..display import display_scan_result

console = Console()
logger = logging.getLogger(__name__)


def sync_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Options overriding the sync settings from the environment."""
    func = click.option(
        "--relative/--absolute",
        "export_relative_paths",
        default=None,
        help="Export entry paths relative to the sync folder",
    )(func)
    func = click.option(
        "--purge/--no-purge",
        default=None,
        help="Delete stranded playlists and records (backups are kept)",
    )(func)
    func = click.option(
        "--folder",
        "sync_folder",
        type=click.Path(file_okay=False),
        help="Sync folder (default: PLAYLIST_SYNC_FOLDER)",
    )(func)
    return func


def apply_overrides(config: Config, **overrides: Any) -> Config:
    """Return a config with the given CLI overrides applied."""
    values = {key: value for key, value in overrides.items() if value is not None}
    if not values:
        return config
    return Config({**vars(config), **values})


def open_observer(config: Config, watch: bool) -> PlaylistObserver:
    """Create a playlist observer or fail with a CLI error."""
    if config.sync_folder is None:
        raise click.ClickException(
            "No sync folder configured (use --folder or PLAYLIST_SYNC_FOLDER)"
        )

    kwargs: Dict[str, Any] = {}
    if not watch:
        kwargs["watcher_factory"] = None

    observer = PlaylistObserver.from_config(config, **kwargs)
    if not observer.is_active:
        raise click.ClickException(f"Cannot use sync folder: {config.sync_folder}")
    return observer


@click.command("watch")
@sync_options
@click.pass_obj
def watch_command(config: Config, **overrides: Any) -> None:
    """Keep the library and the sync folder in sync until interrupted."""
    config = apply_overrides(config, **overrides)
    observer = open_observer(config, watch=True)

    console.print(f"[bold blue]👀 Watching {config.sync_folder}[/bold blue]")
    console.print(
        f"  purge: {'on' if config.purge else 'off'}, "
        f"paths: {'relative' if config.export_relative_paths else 'absolute'}"
    )
    try:
        while True:
            time.sleep(1)
    except KeyboardInterrupt:
        console.print("\n[dim]Stopping...[/dim]")
    finally:
        observer.unregister()


@click.command("scan")
@sync_options
@click.pass_obj
def scan_command(config: Config, **overrides: Any) -> None:
    """Run one reconciliation pass and the imports it queues."""
    config = apply_overrides(config, **overrides)
    observer = open_observer(config, watch=False)

    try:
        observer.wait_idle()
    finally:
        observer.unregister()

    if observer.last_scan is None:
        raise click.ClickException("Scan did not complete, see log for details")
    display_scan_result(observer.last_scan.to_dict())


@click.command("export")
@click.argument("name")
@sync_options
@click.pass_obj
def export_command(config: Config, name: str, **overrides: Any) -> None:
    """Export the library playlist NAME to the sync folder."""
    config = apply_overrides(config, **overrides)
    if config.sync_folder is None:
        raise click.ClickException(
            "No sync folder configured (use --folder or PLAYLIST_SYNC_FOLDER)"
        )

    try:
        sync_folder = LocalSyncFolder(config.sync_folder)
    except SyncFolderError as e:
        raise click.ClickException(str(e))

    library = PlaylistLibrary(config.database_path)
    playlist_id = library.get_playlist_id(name)
    if playlist_id is None:
        raise click.ClickException(f"Playlist '{name}' not found")

    exporter = PlaylistExporter(
        DatabaseService(config.database_path),
        library,
        sync_folder,
        export_relative_paths=config.export_relative_paths,
    )
    if not exporter.export_playlist(playlist_id):
        raise click.ClickException(f"Failed to export playlist '{name}'")

    console.print(f"[green]✓ Exported {name}[/green]")
