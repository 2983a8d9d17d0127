"""Database service for the playlist sync metadata store."""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from sqlalchemy import create_engine, delete, inspect, select, update
from sqlalchemy.orm import Session, sessionmaker

from alembic import command  # type: ignore[attr-defined]
from alembic.config import Config as AlembicConfig  # type: ignore[import-not-found]

from .models import Base, MediaItem, Playlist, SyncRecord

logger = logging.getLogger(__name__)

DEFAULT_DATABASE_PATH = Path.home() / ".playlist-sync" / "sync.db"


def create_sqlite_engine(db_path: Path) -> Any:
    """Create an engine usable from the notification and worker threads."""
    return create_engine(
        f"sqlite:///{db_path}",
        echo=False,
        connect_args={"check_same_thread": False},
    )


class DatabaseService:
    """Service for sync metadata operations and transaction management.

    Each SyncRecord ties a library playlist id to a playlist name and the
    fingerprint of its file. All methods open their own session, so the service
    can be shared between threads.
    """

    def __init__(self, db_path: Optional[Path] = None) -> None:
        """Initialize database service.

        Args:
            db_path: Path to SQLite database file.
                    If None, uses default ~/.playlist-sync/sync.db
        """
        if db_path is None:
            db_path = DEFAULT_DATABASE_PATH

        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        # Check if database exists before creating engine
        db_exists = self.db_path.exists()

        self.engine = create_sqlite_engine(self.db_path)
        self.SessionLocal = sessionmaker(
            autocommit=False, autoflush=False, expire_on_commit=False, bind=self.engine
        )

        logger.info("Database initialized at: %s", self.db_path)

        if not db_exists:
            logger.info("New database detected, initializing schema...")
            self.init_db()
        elif not self.is_initialized():
            logger.info("Sync metadata table missing, creating schema...")
            self.init_db()

    def init_db(self) -> None:
        """Initialize database schema.

        Creates all tables using SQLAlchemy and then stamps Alembic to mark the
        database as current.
        """
        Base.metadata.create_all(bind=self.engine)
        logger.info("Database schema created successfully")

        self._stamp_migrations()

    def _alembic_config(self) -> Optional[AlembicConfig]:
        """Build an Alembic config pointing at this database, if available."""
        package_dir = Path(__file__).parent.parent.parent.parent
        alembic_ini = package_dir / "alembic.ini"
        alembic_dir = package_dir / "alembic"

        if not alembic_ini.exists() or not alembic_dir.exists():
            logger.debug("Alembic not found at %s", package_dir)
            return None

        alembic_cfg = AlembicConfig(str(alembic_ini))
        alembic_cfg.set_main_option("script_location", str(alembic_dir))
        alembic_cfg.set_main_option("sqlalchemy.url", f"sqlite:///{self.db_path}")
        return alembic_cfg

    def _stamp_migrations(self) -> None:
        """Stamp database as being at the latest migration version."""
        try:
            alembic_cfg = self._alembic_config()
            if alembic_cfg is None:
                logger.warning("Alembic not found, skipping migration stamp")
                return

            command.stamp(alembic_cfg, "head")
            logger.info("Database stamped with latest migration version")

        except Exception as e:
            logger.error("Failed to stamp migrations: %s", e)
            logger.warning("Database may need manual migration")

    def run_migrations(self) -> None:
        """Run Alembic migrations to upgrade database to latest version."""
        try:
            alembic_cfg = self._alembic_config()
            if alembic_cfg is None:
                logger.warning("Alembic not found, skipping migrations")
                return

            command.upgrade(alembic_cfg, "head")
            logger.info("Database migrations applied successfully")

        except Exception as e:
            logger.error("Failed to run migrations: %s", e)
            logger.warning("Continuing with base schema only")

    def get_session(self) -> Session:
        """Get a new database session.

        Returns:
            SQLAlchemy Session object

        Note:
            Caller is responsible for closing the session
        """
        return self.SessionLocal()

    def is_initialized(self) -> bool:
        """Check if the metadata table exists and a session can be opened."""
        try:
            inspector = inspect(self.engine)
            if not inspector.has_table(SyncRecord.__tablename__):
                logger.debug("Table %s missing", SyncRecord.__tablename__)
                return False

            with self.SessionLocal() as session:
                session.execute(select(1))

            return True
        except Exception as e:
            logger.debug("Database initialization check failed: %s", e)
            return False

    # =========================================================================
    # Sync Record Operations
    # =========================================================================

    def get_all_records(self) -> List[SyncRecord]:
        """Get all sync records.

        Returns:
            List of SyncRecord objects ordered by id
        """
        with self.get_session() as session:
            stmt = select(SyncRecord).order_by(SyncRecord.id)
            return list(session.scalars(stmt).all())

    def get_record_by_id(self, record_id: int) -> Optional[SyncRecord]:
        """Get sync record by playlist id.

        Args:
            record_id: Library playlist id

        Returns:
            SyncRecord or None if not found
        """
        with self.get_session() as session:
            return session.get(SyncRecord, record_id)

    def get_record_by_name(self, name: str) -> Optional[SyncRecord]:
        """Get sync record by playlist name.

        Args:
            name: Playlist name (without extension)

        Returns:
            SyncRecord or None if not found
        """
        with self.get_session() as session:
            stmt = select(SyncRecord).where(SyncRecord.name == name)
            return session.scalar(stmt)

    def query_records(
        self, record_id: Optional[int] = None, name: Optional[str] = None
    ) -> List[SyncRecord]:
        """Query sync records filtered by id and/or name.

        Args:
            record_id: Optional playlist id filter
            name: Optional playlist name filter

        Returns:
            Matching SyncRecord objects
        """
        with self.get_session() as session:
            stmt = select(SyncRecord)
            if record_id is not None:
                stmt = stmt.where(SyncRecord.id == record_id)
            if name is not None:
                stmt = stmt.where(SyncRecord.name == name)
            return list(session.scalars(stmt.order_by(SyncRecord.id)).all())

    def create_record(self, record_id: int, name: str, file_hash: int) -> SyncRecord:
        """Create a new sync record.

        Args:
            record_id: Library playlist id
            name: Playlist name
            file_hash: Fingerprint of the playlist file

        Returns:
            Created SyncRecord
        """
        with self.get_session() as session:
            record = SyncRecord(id=record_id, name=name, hash=file_hash)
            session.add(record)
            session.commit()
            logger.info("Created sync record: %s (ID: %s)", name, record_id)
            return record

    def update_record(self, previous_id: int, **values: Any) -> bool:
        """Update the record currently stored under ``previous_id``.

        Args:
            previous_id: Playlist id the record is stored under
            **values: Columns to update (``id``, ``name``, ``hash``)

        Returns:
            True if a record was updated
        """
        unknown = set(values) - {"id", "name", "hash"}
        if unknown:
            raise ValueError(f"Unknown sync record fields: {sorted(unknown)}")

        with self.get_session() as session:
            result = session.execute(
                update(SyncRecord)
                .where(SyncRecord.id == previous_id)
                .values(**values)
            )
            session.commit()
            updated = bool(result.rowcount)

        if updated:
            logger.debug("Updated sync record %s: %s", previous_id, values)
        else:
            logger.warning("Sync record not found for update: %s", previous_id)
        return updated

    def upsert_record(self, record_id: int, name: str, file_hash: int) -> SyncRecord:
        """Store ``{id, name, hash}``, replacing records that hold the id or name.

        Args:
            record_id: Library playlist id
            name: Playlist name
            file_hash: Fingerprint of the playlist file

        Returns:
            The stored SyncRecord
        """
        with self.get_session() as session:
            by_id = session.get(SyncRecord, record_id)
            by_name = session.scalar(select(SyncRecord).where(SyncRecord.name == name))

            if by_name is not None and by_name is not by_id:
                # The name moved to another playlist id
                session.delete(by_name)
                session.flush()

            if by_id is None:
                record = SyncRecord(id=record_id, name=name, hash=file_hash)
                session.add(record)
            else:
                record = by_id
                record.name = name
                record.hash = file_hash

            session.commit()
            logger.debug("Upserted sync record: %s (ID: %s)", name, record_id)
            return record

    def delete_record(self, record_id: int) -> bool:
        """Delete a sync record.

        Args:
            record_id: Library playlist id

        Returns:
            True if a record was deleted
        """
        with self.get_session() as session:
            result = session.execute(
                delete(SyncRecord).where(SyncRecord.id == record_id)
            )
            session.commit()
            deleted = bool(result.rowcount)

        if deleted:
            logger.info("Deleted sync record: %s", record_id)
        return deleted

    # =========================================================================
    # Utility Methods
    # =========================================================================

    def get_statistics(self) -> Dict[str, Any]:
        """Get database statistics.

        Returns:
            Dictionary with statistics
        """
        with self.get_session() as session:
            return {
                "sync_records": session.query(SyncRecord).count(),
                "playlists": session.query(Playlist).count(),
                "media_items": session.query(MediaItem).count(),
                "database_path": str(self.db_path),
            }

    def close(self) -> None:
        """Close database connection."""
        if hasattr(self, "engine"):
            self.engine.dispose()
            logger.info("Database connection closed")
