"""SQLAlchemy database models for playlist sync metadata and the playlist library."""

from datetime import datetime
from enum import Enum
from typing import List

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class ChangeKind(str, Enum):
    """Kind of entity a library change notification refers to."""

    PLAYLIST = "playlist"
    MEDIA = "media"


class Base(DeclarativeBase):
    """Base class for all database models."""

    pass


class SyncRecord(Base):
    """A playlist known to be under sync.

    Links a library playlist (by id) to a playlist file (by sanitized name) and
    remembers the fingerprint of the file content at the last import or export.
    """

    __tablename__ = "playlist_metadata"

    # Library playlist id, not generated here
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)

    # CRC-32 of the playlist file content
    hash: Mapped[int] = mapped_column(Integer, nullable=False)

    # Logical playlist name, without extension
    name: Mapped[str] = mapped_column(Text, nullable=False, unique=True, index=True)

    def __repr__(self) -> str:
        """String representation of SyncRecord."""
        return f"<SyncRecord(id={self.id}, name='{self.name}', hash={self.hash})>"


class MediaItem(Base):
    """A playable media file known to the library's media index."""

    __tablename__ = "media_items"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    path: Mapped[str] = mapped_column(
        String(4096), nullable=False, unique=True, index=True
    )
    added_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow
    )

    def __repr__(self) -> str:
        """String representation of MediaItem."""
        return f"<MediaItem(id={self.id}, path='{self.path}')>"


class Playlist(Base):
    """A playlist stored in the library."""

    __tablename__ = "playlists"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(
        String(500), nullable=False, unique=True, index=True
    )

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    # Relationships
    entries: Mapped[List["PlaylistEntry"]] = relationship(
        "PlaylistEntry",
        back_populates="playlist",
        cascade="all, delete-orphan",
        order_by="PlaylistEntry.position",
    )

    def __repr__(self) -> str:
        """String representation of Playlist."""
        return f"<Playlist(id={self.id}, name='{self.name}')>"


class PlaylistEntry(Base):
    """An ordered entry of a library playlist."""

    __tablename__ = "playlist_entries"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # Foreign keys
    playlist_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("playlists.id", ondelete="CASCADE"), nullable=False
    )
    media_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("media_items.id", ondelete="CASCADE"), nullable=False
    )

    # Ordering (store order)
    position: Mapped[int] = mapped_column(Integer, nullable=False)

    # Relationships
    playlist: Mapped["Playlist"] = relationship("Playlist", back_populates="entries")
    media: Mapped["MediaItem"] = relationship("MediaItem")

    __table_args__ = (
        Index("idx_playlist_entry_position", "playlist_id", "position"),
    )

    def __repr__(self) -> str:
        """String representation of PlaylistEntry."""
        return (
            f"<PlaylistEntry(playlist_id={self.playlist_id}, "
            f"media_id={self.media_id}, position={self.position})>"
        )
