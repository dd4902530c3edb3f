"""SQLAlchemy database models for galleries, albums and media objects."""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import (
    DeclarativeBase,
    Mapped,
    mapped_column,
    reconstructor,
    relationship,
)

from ..models import GallerySettings


class MediaObjectType(str, Enum):
    """Kind of media object stored in an album."""

    IMAGE = "image"
    VIDEO = "video"
    AUDIO = "audio"
    GENERIC = "generic"
    EXTERNAL = "external"


class SyncState(str, Enum):
    """State of a synchronization run."""

    NOT_STARTED = "not_started"
    SCANNING = "scanning"
    PERSISTING_TO_DATA_STORE = "persisting_to_data_store"
    COMPLETE = "complete"
    CANCELLED = "cancelled"
    ERROR = "error"


class Base(DeclarativeBase):
    """Base class for all database models."""

    pass


class Gallery(Base):
    """A gallery: one media root with its own settings and album tree."""

    __tablename__ = "galleries"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    settings_json: Mapped[str] = mapped_column(Text, nullable=False)  # GallerySettings

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    @property
    def settings(self) -> GallerySettings:
        """Validated settings for this gallery."""
        return GallerySettings.model_validate_json(self.settings_json)

    def __repr__(self) -> str:
        """String representation of Gallery."""
        return f"<Gallery(id={self.id}, name='{self.name}')>"


class Album(Base):
    """A directory-backed container of media objects and child albums."""

    __tablename__ = "albums"

    # Primary key
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # Foreign keys
    gallery_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("galleries.id", ondelete="CASCADE"), nullable=False
    )
    parent_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("albums.id", ondelete="CASCADE"), nullable=True
    )  # None for the root album

    # Album metadata
    directory_name: Mapped[str] = mapped_column(
        String(255), nullable=False, default=""
    )  # Empty for the root album
    title: Mapped[str] = mapped_column(String(500), nullable=False, default="")
    summary: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    is_private: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    thumbnail_media_object_id: Mapped[Optional[int]] = mapped_column(
        Integer, nullable=True
    )
    seq: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    # Audit
    created_by: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    date_added: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    last_modified_by: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    date_last_modified: Mapped[Optional[datetime]] = mapped_column(
        DateTime, nullable=True
    )

    # Relationships
    parent: Mapped[Optional["Album"]] = relationship(
        "Album", remote_side="Album.id", back_populates="children"
    )
    children: Mapped[List["Album"]] = relationship(
        "Album",
        back_populates="parent",
        cascade="all, delete-orphan",
        order_by="Album.directory_name",
    )
    media_objects: Mapped[List["MediaObject"]] = relationship(
        "MediaObject",
        back_populates="album",
        cascade="all, delete-orphan",
        order_by="MediaObject.id",
    )

    __table_args__ = (Index("idx_album_gallery_parent", "gallery_id", "parent_id"),)

    def __init__(self, **kwargs) -> None:
        """Create an album with fresh run-scoped flags."""
        super().__init__(**kwargs)
        self._init_run_flags()

    @reconstructor
    def _init_run_flags(self) -> None:
        # Run-scoped, never persisted
        self.synchronized = False
        self.regenerate_thumbnail_on_save = False

    @property
    def is_root(self) -> bool:
        """Check whether this is the gallery's root album."""
        return self.parent_id is None and self.parent is None

    def __repr__(self) -> str:
        """String representation of Album."""
        return (
            f"<Album(id={self.id}, directory_name='{self.directory_name}', "
            f"parent_id={self.parent_id})>"
        )


class MediaObject(Base):
    """A file-backed (or URL-embedded) item inside an album."""

    __tablename__ = "media_objects"

    # Primary key
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # Foreign keys
    gallery_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("galleries.id", ondelete="CASCADE"), nullable=False
    )
    album_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("albums.id", ondelete="CASCADE"), nullable=False
    )

    # Classification
    media_type: Mapped[str] = mapped_column(
        String(20), nullable=False, index=True
    )  # Enum: image, video, audio, generic, external
    mime_type: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    # Identity: md5(file name + timestamp); externals have none
    hash_key: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)

    title: Mapped[str] = mapped_column(String(500), nullable=False, default="")
    external_html: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Original artifact
    original_filename: Mapped[str] = mapped_column(
        String(255), nullable=False, default=""
    )
    original_width: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    original_height: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    original_size_kb: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    # Optimized artifact (empty filename when none exists)
    optimized_filename: Mapped[str] = mapped_column(
        String(255), nullable=False, default=""
    )
    optimized_width: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    optimized_height: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    optimized_size_kb: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    # Thumbnail artifact
    thumbnail_filename: Mapped[str] = mapped_column(
        String(255), nullable=False, default=""
    )
    thumbnail_width: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    thumbnail_height: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    thumbnail_size_kb: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    seq: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    # Audit
    created_by: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    date_added: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    last_modified_by: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    date_last_modified: Mapped[Optional[datetime]] = mapped_column(
        DateTime, nullable=True
    )

    # Relationships
    album: Mapped["Album"] = relationship("Album", back_populates="media_objects")
    metadata_items: Mapped[List["MediaObjectMetadata"]] = relationship(
        "MediaObjectMetadata",
        back_populates="media_object",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        UniqueConstraint("gallery_id", "hash_key", name="uq_gallery_hash_key"),
        Index("idx_media_object_album", "album_id"),
    )

    def __init__(self, **kwargs) -> None:
        """Create a media object with fresh run-scoped flags."""
        super().__init__(**kwargs)
        self._init_run_flags()

    @reconstructor
    def _init_run_flags(self) -> None:
        # Run-scoped, never persisted
        self.synchronized = False
        self.regenerate_thumbnail_on_save = False
        self.regenerate_optimized_on_save = False
        self.extract_metadata_on_save = False

    @property
    def object_type(self) -> MediaObjectType:
        """Media type as enum."""
        return MediaObjectType(self.media_type)

    @property
    def is_image(self) -> bool:
        """Check whether this is an image media object."""
        return self.media_type == MediaObjectType.IMAGE.value

    @property
    def is_external(self) -> bool:
        """Check whether this is an external (URL-embedded) media object."""
        return self.media_type == MediaObjectType.EXTERNAL.value

    def copy_original_to_optimized(self) -> None:
        """Make the optimized descriptor identical to the original one."""
        self.optimized_filename = self.original_filename
        self.optimized_width = self.original_width
        self.optimized_height = self.original_height
        self.optimized_size_kb = self.original_size_kb

    def __repr__(self) -> str:
        """String representation of MediaObject."""
        return (
            f"<MediaObject(id={self.id}, type='{self.media_type}', "
            f"original='{self.original_filename}')>"
        )


class MediaObjectMetadata(Base):
    """A single extracted metadata item (EXIF tag, duration, ...)."""

    __tablename__ = "media_object_metadata"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    media_object_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("media_objects.id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    value: Mapped[str] = mapped_column(Text, nullable=False, default="")

    media_object: Mapped["MediaObject"] = relationship(
        "MediaObject", back_populates="metadata_items"
    )

    __table_args__ = (Index("idx_metadata_media_object", "media_object_id"),)

    def __repr__(self) -> str:
        """String representation of MediaObjectMetadata."""
        return f"<MediaObjectMetadata(name='{self.name}', value='{self.value}')>"


class SynchronizationRecord(Base):
    """Persisted status of the latest synchronization run of a gallery."""

    __tablename__ = "synchronizations"

    gallery_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("galleries.id", ondelete="CASCADE"), primary_key=True
    )
    sync_id: Mapped[str] = mapped_column(String(255), nullable=False)
    state: Mapped[str] = mapped_column(
        String(40), nullable=False, default=SyncState.NOT_STARTED.value
    )
    total_files: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    current_file_index: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    skipped_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    started_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    completed_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    def __repr__(self) -> str:
        """String representation of SynchronizationRecord."""
        return (
            f"<SynchronizationRecord(gallery_id={self.gallery_id}, "
            f"sync_id='{self.sync_id}', state='{self.state}')>"
        )
