"""Configuration management for the playlist sync application."""

import os
from pathlib import Path
from typing import Any, Dict, Optional

from dotenv import load_dotenv

# Load .env file from config directory or project root
config_env = Path(__file__).parent.parent.parent / "config" / ".env"
if config_env.exists():
    load_dotenv(config_env)
else:
    # Fallback to working directory .env
    load_dotenv()

TRUE_VALUES = ("1", "true", "yes", "on")


def _env_flag(name: str, default: bool) -> bool:
    """Read a boolean flag from the environment."""
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in TRUE_VALUES


class Config:
    """Application configuration."""

    def __init__(self, overrides: Optional[Dict[str, Any]] = None) -> None:
        """Initialize configuration from environment variables.

        Args:
            overrides: Optional values that take precedence over the environment
                (used by the CLI options)
        """
        # Sync folder settings
        sync_folder = os.getenv("PLAYLIST_SYNC_FOLDER")
        self.sync_folder: Optional[Path] = (
            Path(sync_folder).expanduser() if sync_folder else None
        )

        # Sync mode settings
        self.purge = _env_flag("PLAYLIST_SYNC_PURGE", False)
        self.export_relative_paths = _env_flag("PLAYLIST_SYNC_EXPORT_RELATIVE", True)

        # Database settings
        default_db_path = str(Path.home() / ".playlist-sync" / "sync.db")
        self.database_path = Path(
            os.getenv("PLAYLIST_SYNC_DATABASE_PATH", default_db_path)
        ).expanduser()

        # Logging
        self.log_level = os.getenv("PLAYLIST_SYNC_LOG_LEVEL", "INFO").upper()

        for key, value in (overrides or {}).items():
            if value is None:
                continue
            if not hasattr(self, key):
                raise ValueError(f"Unknown configuration key: {key}")
            if key in ("sync_folder", "database_path"):
                value = Path(value).expanduser()
            setattr(self, key, value)

        # Ensure directories exist
        self._ensure_directories()

    def _ensure_directories(self) -> None:
        """Ensure required directories exist."""
        # The sync folder is never created here; a missing folder keeps the
        # observer inert.
        self.database_path.parent.mkdir(parents=True, exist_ok=True)


def get_config(overrides: Optional[Dict[str, Any]] = None) -> Config:
    """Get application configuration."""
    return Config(overrides)
