"""Core business logic modules.

This package contains the sync engine, organized by concern:
- filesystem: Sync folder access, filename/path codec, fingerprints, watcher
- sync: Import, export, reconciliation, routing and the playlist observer
"""
