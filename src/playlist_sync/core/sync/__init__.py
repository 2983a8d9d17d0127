"""Synchronization module.

Handles importing, exporting and reconciling playlists, and serializing the
work triggered by folder and library notifications.
"""

from .exporter import PlaylistExporter
from .importer import PlaylistImporter, parse_playlist_lines
from .observer import PlaylistObserver
from .reconciler import ReconcileResult, Reconciler
from .router import ChangeRouter, MessageKind, SyncMessage

__all__ = [
    # Pipelines
    "PlaylistExporter",
    "PlaylistImporter",
    "parse_playlist_lines",
    # Reconciliation
    "ReconcileResult",
    "Reconciler",
    # Routing
    "ChangeRouter",
    "MessageKind",
    "SyncMessage",
    # Observer
    "PlaylistObserver",
]
