"""Initialization command for the playlist sync application.

``init_db()`` opens the sync database, creating or upgrading its schema, and is
shared by the ``init`` command and its checks.
"""

import logging
from typing import Any, Dict, Optional

import click
from rich.console import Console
from rich.table import Table

from ...config import Config
from ...core.filesystem import LocalSyncFolder, SyncFolderError, is_playlist_filename
from ...database import DatabaseService
from .sync import apply_overrides, sync_options

console = Console()
logger = logging.getLogger(__name__)


class InitializationError(Exception):
    """Raised when initialization fails."""

    pass


def init_db(config: Optional[Config] = None) -> DatabaseService:
    """Open the sync database and bring its schema up to date.

    Args:
        config: Application configuration (creates new if not provided)

    Returns:
        DatabaseService instance

    Raises:
        InitializationError: If database cannot be initialized
    """
    if config is None:
        config = Config()

    try:
        db_service = DatabaseService(db_path=config.database_path)
        db_service.run_migrations()

        stats = db_service.get_statistics()
        logger.debug(
            "Database connected: %s sync records, %s playlists",
            stats["sync_records"],
            stats["playlists"],
        )
        return db_service

    except Exception as e:
        logger.exception("Database initialization failed")
        raise InitializationError(f"Database initialization failed: {e}")


def check_database(config: Config) -> Dict[str, Any]:
    """Check the database and report its contents."""
    console.print("[cyan]Checking database...[/cyan]")
    db_service = init_db(config)
    try:
        stats = db_service.get_statistics()
    finally:
        db_service.close()

    return {
        "status": "success",
        "message": "Database ready",
        "details": {
            "path": stats["database_path"],
            "sync_records": stats["sync_records"],
            "playlists": stats["playlists"],
            "media_items": stats["media_items"],
        },
    }


def check_sync_folder(config: Config) -> Dict[str, Any]:
    """Check that the sync folder can be used."""
    console.print("[cyan]Checking sync folder...[/cyan]")
    if config.sync_folder is None:
        return {
            "status": "warning",
            "message": "No sync folder configured",
            "details": {},
        }

    try:
        folder = LocalSyncFolder(config.sync_folder)
    except SyncFolderError as e:
        return {"status": "error", "message": str(e), "details": {}}

    playlist_files = [f for f in folder.list_files() if is_playlist_filename(f.name)]
    return {
        "status": "success",
        "message": "Sync folder ready",
        "details": {
            "path": str(folder.root),
            "playlist_files": len(playlist_files),
        },
    }


@click.command("init")
@sync_options
@click.pass_obj
def init_command(config: Config, **overrides: Any) -> None:
    """Create or upgrade the sync database and check the sync folder."""
    config = apply_overrides(config, **overrides)
    try:
        results = {
            "Database": check_database(config),
            "Sync folder": check_sync_folder(config),
        }
    except InitializationError as e:
        raise click.ClickException(str(e))

    table = Table(show_header=True, header_style="bold magenta", title="Initialization")
    table.add_column("Component", style="cyan")
    table.add_column("Status")
    table.add_column("Details", style="dim")

    styles = {"success": "green", "warning": "yellow", "error": "red"}
    for component, result in results.items():
        style = styles.get(result["status"], "white")
        details = ", ".join(f"{k}: {v}" for k, v in result["details"].items())
        table.add_row(
            component, f"[{style}]{result['message']}[/{style}]", details
        )

    console.print(table)

    if results["Sync folder"]["status"] == "error":
        raise click.ClickException(results["Sync folder"]["message"])
