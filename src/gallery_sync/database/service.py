"""Database service for galleries and synchronization records."""

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

from sqlalchemy import create_engine, event, inspect, select
from sqlalchemy.orm import Session, sessionmaker

from alembic import command  # type: ignore[attr-defined]
from alembic.config import Config as AlembicConfig  # type: ignore[import-not-found]

from ..models import GallerySettings
from .models import (
    Album,
    Base,
    Gallery,
    MediaObject,
    MediaObjectMetadata,
    SynchronizationRecord,
)

logger = logging.getLogger(__name__)


def _enable_sqlite_foreign_keys(dbapi_connection: Any, connection_record: Any) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class DatabaseService:
    """Service for database setup, gallery records and session management."""

    def __init__(self, db_path: Optional[Path] = None) -> None:
        """Initialize database service.

        Args:
            db_path: Path to SQLite database file.
                    If None, uses default ~/.gallery-sync/gallery.db
        """
        if db_path is None:
            db_path = Path.home() / ".gallery-sync" / "gallery.db"

        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        # Check if database exists before creating engine
        db_exists = self.db_path.exists()

        # Create engine
        db_url = f"sqlite:///{self.db_path}"
        self.engine = create_engine(db_url, echo=False)
        event.listen(self.engine, "connect", _enable_sqlite_foreign_keys)

        # Create session factory
        self.SessionLocal = sessionmaker(
            autocommit=False, autoflush=False, bind=self.engine
        )

        logger.info("Database initialized at: %s", self.db_path)

        # If database didn't exist, initialize it with schema and migrations
        if not db_exists:
            logger.info("New database detected, initializing schema...")
            self.init_db()

    def init_db(self) -> None:
        """Initialize database schema.

        This creates base tables using SQLAlchemy and then stamps Alembic to mark the
        database as current (since all tables are created).
        """
        Base.metadata.create_all(bind=self.engine)
        logger.info("Database schema created successfully")

        self._stamp_migrations()

    def _alembic_config(self) -> Optional[AlembicConfig]:
        # alembic.ini and alembic/ live in the project root, three levels above
        # src/gallery_sync/database/
        package_dir = Path(__file__).parent.parent.parent.parent
        alembic_ini = package_dir / "alembic.ini"
        alembic_dir = package_dir / "alembic"

        if not alembic_ini.exists() or not alembic_dir.exists():
            logger.warning("Alembic not found at %s, skipping", package_dir)
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

    def create_run_session(self) -> Session:
        """Get a session for a long-running synchronization.

        Objects loaded through it stay usable across checkpoint commits.

        Returns:
            SQLAlchemy Session object that does not expire on commit
        """
        return self.SessionLocal(expire_on_commit=False)

    def is_initialized(self) -> bool:
        """Check if the required tables exist.

        Returns:
            True if the schema is present, False otherwise
        """
        try:
            inspector = inspect(self.engine)
            return all(
                inspector.has_table(name)
                for name in ("galleries", "albums", "media_objects")
            )
        except Exception as e:
            logger.debug("Database initialization check failed: %s", e)
            return False

    # =========================================================================
    # Gallery Operations
    # =========================================================================

    def create_gallery(self, name: str, settings: GallerySettings) -> int:
        """Create a gallery together with its root album.

        Args:
            name: Unique gallery name
            settings: Gallery settings to persist

        Returns:
            ID of the created gallery
        """
        with self.get_session() as session:
            gallery = Gallery(name=name, settings_json=settings.model_dump_json())
            session.add(gallery)
            session.flush()

            root = Album(
                gallery_id=gallery.id,
                directory_name="",
                title="All albums",
                is_private=False,
                seq=0,
                date_added=datetime.now(timezone.utc),
            )
            session.add(root)
            session.commit()
            logger.info("Created gallery: %s (ID: %s)", name, gallery.id)
            return gallery.id

    def get_gallery_id_by_name(self, name: str) -> Optional[int]:
        """Get a gallery ID by name.

        Args:
            name: Gallery name

        Returns:
            Gallery ID or None if not found
        """
        with self.get_session() as session:
            return session.scalar(select(Gallery.id).where(Gallery.name == name))

    def get_gallery_settings(self, gallery_id: int) -> GallerySettings:
        """Load and validate the settings of a gallery.

        Args:
            gallery_id: Gallery database ID

        Returns:
            GallerySettings

        Raises:
            ValueError: If the gallery does not exist
        """
        with self.get_session() as session:
            gallery = session.get(Gallery, gallery_id)
            if gallery is None:
                raise ValueError(f"Gallery not found: {gallery_id}")
            return gallery.settings

    def update_gallery_settings(
        self, gallery_id: int, settings: GallerySettings
    ) -> None:
        """Replace the settings of a gallery.

        Args:
            gallery_id: Gallery database ID
            settings: New settings
        """
        with self.get_session() as session:
            gallery = session.get(Gallery, gallery_id)
            if gallery is None:
                raise ValueError(f"Gallery not found: {gallery_id}")
            gallery.settings_json = settings.model_dump_json()
            session.commit()
            logger.debug("Updated settings of gallery %s", gallery_id)

    def get_root_album_id(self, gallery_id: int) -> int:
        """Get the ID of a gallery's root album.

        Args:
            gallery_id: Gallery database ID

        Returns:
            Root album ID

        Raises:
            ValueError: If the gallery has no root album
        """
        with self.get_session() as session:
            album_id = session.scalar(
                select(Album.id).where(
                    Album.gallery_id == gallery_id, Album.parent_id.is_(None)
                )
            )
            if album_id is None:
                raise ValueError(f"No root album for gallery: {gallery_id}")
            return album_id

    # =========================================================================
    # Synchronization Records
    # =========================================================================

    def save_sync_record(self, gallery_id: int, status_data: Dict[str, Any]) -> None:
        """Insert or update the synchronization record of a gallery.

        Args:
            gallery_id: Gallery database ID
            status_data: Column values (sync_id, state, total_files, ...)
        """
        with self.get_session() as session:
            record = session.get(SynchronizationRecord, gallery_id)
            if record is None:
                record = SynchronizationRecord(gallery_id=gallery_id)
                session.add(record)

            for key, value in status_data.items():
                if hasattr(record, key):
                    setattr(record, key, value)

            session.commit()
            logger.debug(
                "Saved sync record for gallery %s: %s",
                gallery_id,
                status_data.get("state"),
            )

    def get_sync_record(self, gallery_id: int) -> Optional[Dict[str, Any]]:
        """Get the last persisted synchronization status of a gallery.

        Args:
            gallery_id: Gallery database ID

        Returns:
            Dictionary with the record's columns, or None if never synchronized
        """
        with self.get_session() as session:
            record = session.get(SynchronizationRecord, gallery_id)
            if record is None:
                return None
            return {
                "gallery_id": record.gallery_id,
                "sync_id": record.sync_id,
                "state": record.state,
                "total_files": record.total_files,
                "current_file_index": record.current_file_index,
                "skipped_count": record.skipped_count,
                "started_at": record.started_at,
                "completed_at": record.completed_at,
            }

    # =========================================================================
    # Utility Methods
    # =========================================================================

    def get_statistics(self) -> Dict[str, Any]:
        """Get database statistics.

        Returns:
            Dictionary with statistics
        """
        with self.get_session() as session:
            gallery_count = session.query(Gallery).count()
            album_count = session.query(Album).count()
            media_object_count = session.query(MediaObject).count()
            metadata_count = session.query(MediaObjectMetadata).count()

            return {
                "galleries": gallery_count,
                "albums": album_count,
                "media_objects": media_object_count,
                "metadata_items": metadata_count,
                "database_path": str(self.db_path),
            }

    def close(self) -> None:
        """Close database connection."""
        if hasattr(self, "engine"):
            self.engine.dispose()
            logger.info("Database connection closed")
