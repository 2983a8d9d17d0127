"""Command-line interface for playlist sync."""
