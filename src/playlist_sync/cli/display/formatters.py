"""Display formatters and UI helpers for CLI."""

import logging
from typing import Any, Dict, List, Optional

from rich.console import Console
from rich.table import Table

from ...core.filesystem import SyncFolder, sanitize_filename
from ...database import PlaylistLibrary, SyncRecord

console = Console()
logger = logging.getLogger(__name__)


def display_scan_result(summary: Dict[str, Any]) -> None:
    """Display reconciliation scan results.

    Args:
        summary: ReconcileResult.to_dict() output
    """
    console.print("\n[bold green]✓ Scan completed[/bold green]\n")

    table = Table(show_header=True, header_style="bold magenta", title="Reconcile")
    table.add_column("Metric", style="cyan", width=30)
    table.add_column("Count", style="green", justify="right")

    table.add_row("Records Checked", str(summary["records_checked"]))
    table.add_row("Records Removed", str(summary["records_removed"]))
    table.add_row("Files Renamed to Backup", str(summary["files_backed_up"]))
    table.add_row("Playlists Backed Up", str(summary["playlists_backed_up"]))
    table.add_row("Playlists Deleted", str(summary["playlists_deleted"]))
    table.add_row("Imports Queued", str(summary["imports_queued"]))

    console.print(table)

    errors: List[str] = summary.get("errors", [])
    if errors:
        console.print(
            f"\n[yellow]⚠️  {summary['error_count']} error(s) occurred:[/yellow]"
        )
        for error in errors:
            console.print(f"  • {error}")
    console.print()


def display_sync_records(
    records: List[SyncRecord], sync_folder: Optional[SyncFolder]
) -> None:
    """Display the sync metadata table.

    Args:
        records: Sync records to show
        sync_folder: Folder used to check whether each file exists
    """
    if not records:
        console.print("[dim]No playlists under sync[/dim]")
        return

    table = Table(show_header=True, header_style="bold magenta", title="Sync Records")
    table.add_column("ID", style="cyan", justify="right")
    table.add_column("Name", style="green")
    table.add_column("Hash", style="dim")
    table.add_column("File")

    for record in records:
        filename = sanitize_filename(record.name)
        if sync_folder is None:
            file_status = "[dim]?[/dim]"
        elif sync_folder.find_file(filename) is not None:
            file_status = f"[green]{filename}[/green]"
        else:
            file_status = f"[red]missing ({filename})[/red]"
        table.add_row(str(record.id), record.name, f"{record.hash:08x}", file_status)

    console.print(table)


def display_playlists(library: PlaylistLibrary, synced_ids: List[int]) -> None:
    """Display library playlists with entry counts.

    Args:
        library: Playlist library
        synced_ids: Ids of playlists that have a sync record
    """
    playlists = library.list_playlists()
    if not playlists:
        console.print("[dim]Library has no playlists[/dim]")
        return

    table = Table(show_header=True, header_style="bold magenta", title="Playlists")
    table.add_column("ID", style="cyan", justify="right")
    table.add_column("Name", style="green")
    table.add_column("Entries", justify="right")
    table.add_column("Synced")

    for playlist in playlists:
        synced = "✓" if playlist.id in synced_ids else ""
        table.add_row(
            str(playlist.id),
            playlist.name,
            str(library.count_entries(playlist.id)),
            synced,
        )

    console.print(table)
