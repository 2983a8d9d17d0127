"""Command-line interface for the playlist sync application.

This is the main entry point that delegates to command modules.
"""

from pathlib import Path
from typing import Any, Optional

import click

from ..config import Config
from ..utils.logging_config import configure_third_party_loggers, setup_logging
from .commands import (
    export_command,
    init_command,
    media,
    playlists_command,
    scan_command,
    status_command,
    watch_command,
)


@click.group()
@click.option(
    "--log-level",
    default=None,
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]),
    help="Set logging level (default: PLAYLIST_SYNC_LOG_LEVEL or INFO)",
)
@click.option("--log-file", type=click.Path(), help="Log to file")
@click.option(
    "--database",
    "database_path",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Sync database (default: PLAYLIST_SYNC_DATABASE_PATH)",
)
@click.pass_context
def cli(
    ctx: Any,
    log_level: Optional[str],
    log_file: Optional[str],
    database_path: Optional[Path],
) -> None:
    """Playlist Sync.

    Keeps a playlist library and a folder of .m3u playlist files in sync.
    """
    config = Config({"database_path": database_path, "log_level": log_level})

    setup_logging(
        log_level=config.log_level,
        log_file=Path(log_file) if log_file else None,
    )
    configure_third_party_loggers()

    ctx.obj = config


# Register command groups and commands
cli.add_command(init_command)
cli.add_command(watch_command)
cli.add_command(scan_command)
cli.add_command(export_command)
cli.add_command(status_command)
cli.add_command(playlists_command)
cli.add_command(media)


if __name__ == "__main__":
    cli()
