"""create_gallery_schema

Revision ID: 3f9a1c2e7b40
Revises:
Create Date: 2026-10-19 09:12:44.318207

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "3f9a1c2e7b40"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "galleries",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("settings_json", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name"),
    )
    op.create_table(
        "albums",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("gallery_id", sa.Integer(), nullable=False),
        sa.Column("parent_id", sa.Integer(), nullable=True),
        sa.Column("directory_name", sa.String(length=255), nullable=False),
        sa.Column("title", sa.String(length=500), nullable=False),
        sa.Column("summary", sa.Text(), nullable=True),
        sa.Column("is_private", sa.Boolean(), nullable=False),
        sa.Column("thumbnail_media_object_id", sa.Integer(), nullable=True),
        sa.Column("seq", sa.Integer(), nullable=False),
        sa.Column("created_by", sa.String(length=255), nullable=True),
        sa.Column("date_added", sa.DateTime(), nullable=True),
        sa.Column("last_modified_by", sa.String(length=255), nullable=True),
        sa.Column("date_last_modified", sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(["gallery_id"], ["galleries.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["parent_id"], ["albums.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_album_gallery_parent", "albums", ["gallery_id", "parent_id"])
    op.create_table(
        "media_objects",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("gallery_id", sa.Integer(), nullable=False),
        sa.Column("album_id", sa.Integer(), nullable=False),
        sa.Column("media_type", sa.String(length=20), nullable=False),
        sa.Column("mime_type", sa.String(length=100), nullable=True),
        sa.Column("hash_key", sa.String(length=64), nullable=True),
        sa.Column("title", sa.String(length=500), nullable=False),
        sa.Column("external_html", sa.Text(), nullable=True),
        sa.Column("original_filename", sa.String(length=255), nullable=False),
        sa.Column("original_width", sa.Integer(), nullable=False),
        sa.Column("original_height", sa.Integer(), nullable=False),
        sa.Column("original_size_kb", sa.Integer(), nullable=False),
        sa.Column("optimized_filename", sa.String(length=255), nullable=False),
        sa.Column("optimized_width", sa.Integer(), nullable=False),
        sa.Column("optimized_height", sa.Integer(), nullable=False),
        sa.Column("optimized_size_kb", sa.Integer(), nullable=False),
        sa.Column("thumbnail_filename", sa.String(length=255), nullable=False),
        sa.Column("thumbnail_width", sa.Integer(), nullable=False),
        sa.Column("thumbnail_height", sa.Integer(), nullable=False),
        sa.Column("thumbnail_size_kb", sa.Integer(), nullable=False),
        sa.Column("seq", sa.Integer(), nullable=False),
        sa.Column("created_by", sa.String(length=255), nullable=True),
        sa.Column("date_added", sa.DateTime(), nullable=True),
        sa.Column("last_modified_by", sa.String(length=255), nullable=True),
        sa.Column("date_last_modified", sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(["gallery_id"], ["galleries.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["album_id"], ["albums.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("gallery_id", "hash_key", name="uq_gallery_hash_key"),
    )
    op.create_index("idx_media_object_album", "media_objects", ["album_id"])
    op.create_index("ix_media_objects_media_type", "media_objects", ["media_type"])
    op.create_table(
        "media_object_metadata",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("media_object_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("description", sa.String(length=255), nullable=False),
        sa.Column("value", sa.Text(), nullable=False),
        sa.ForeignKeyConstraint(
            ["media_object_id"], ["media_objects.id"], ondelete="CASCADE"
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "idx_metadata_media_object", "media_object_metadata", ["media_object_id"]
    )
    op.create_table(
        "synchronizations",
        sa.Column("gallery_id", sa.Integer(), nullable=False),
        sa.Column("sync_id", sa.String(length=255), nullable=False),
        sa.Column("state", sa.String(length=40), nullable=False),
        sa.Column("total_files", sa.Integer(), nullable=False),
        sa.Column("current_file_index", sa.Integer(), nullable=False),
        sa.Column("skipped_count", sa.Integer(), nullable=False),
        sa.Column("started_at", sa.DateTime(), nullable=True),
        sa.Column("completed_at", sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(["gallery_id"], ["galleries.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("gallery_id"),
    )


def downgrade() -> None:
    op.drop_table("synchronizations")
    op.drop_index("idx_metadata_media_object", table_name="media_object_metadata")
    op.drop_table("media_object_metadata")
    op.drop_index("ix_media_objects_media_type", table_name="media_objects")
    op.drop_index("idx_media_object_album", table_name="media_objects")
    op.drop_table("media_objects")
    op.drop_index("idx_album_gallery_parent", table_name="albums")
    op.drop_table("albums")
    op.drop_table("galleries")
