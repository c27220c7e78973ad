"""Initial schema: users, activity logs, marker catalog, saved routes

Revision ID: 001
Revises: None
Create Date: 2025-05-01 00:00:00.000000+00:00

Rollback: downgrade() drops every table (destructive).
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

_JSON = sa.JSON().with_variant(postgresql.JSONB(), "postgresql")


def _timestamps() -> list:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False,
                  server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False,
                  server_default=sa.text("CURRENT_TIMESTAMP")),
    ]


def _deleted_at() -> sa.Column:
    return sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True, index=True)


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("username", sa.String(100), nullable=False, unique=True),
        sa.Column("email", sa.String(255), nullable=False, unique=True),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("role", sa.String(20), nullable=False, server_default="user"),
        sa.Column("whatsapp", sa.String(30), nullable=True),
        sa.Column("last_active_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        _deleted_at(),
    )

    op.create_table(
        "user_activity_logs",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column(
            "user_id",
            sa.Uuid(),
            sa.ForeignKey("users.id", onupdate="CASCADE", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
        sa.Column("activity_type", sa.String(100), nullable=False),
        sa.Column("target_id", sa.Uuid(), nullable=True),
        sa.Column("activity_data", _JSON, nullable=False),
        sa.Column("timestamp", sa.DateTime(timezone=True), nullable=False,
                  server_default=sa.text("CURRENT_TIMESTAMP")),
    )

    op.create_table(
        "marker_categories",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("name", sa.String(100), nullable=False, unique=True),
        sa.Column("description", sa.Text(), nullable=True),
        *_timestamps(),
        _deleted_at(),
    )

    op.create_table(
        "marker_tags",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("name", sa.String(100), nullable=False, unique=True),
        *_timestamps(),
        _deleted_at(),
    )

    op.create_table(
        "markers",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("latitude", sa.Float(), nullable=False),
        sa.Column("longitude", sa.Float(), nullable=False),
        sa.Column("category_id", sa.Uuid(), sa.ForeignKey("marker_categories.id"),
                  nullable=False, index=True),
        sa.Column("avg_rating", sa.Numeric(2, 1), nullable=False, server_default="0.0"),
        sa.Column("total_reviews", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("view_count", sa.BigInteger(), nullable=False, server_default="0"),
        sa.Column("added_by_user_id", sa.Uuid(), sa.ForeignKey("users.id"),
                  nullable=False, index=True),
        *_timestamps(),
        _deleted_at(),
    )

    op.create_table(
        "marker_has_tags",
        sa.Column("marker_id", sa.Uuid(), sa.ForeignKey("markers.id", ondelete="CASCADE"),
                  primary_key=True),
        sa.Column("tag_id", sa.Uuid(), sa.ForeignKey("marker_tags.id", ondelete="CASCADE"),
                  primary_key=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False,
                  server_default=sa.text("CURRENT_TIMESTAMP")),
    )

    op.create_table(
        "marker_images",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("marker_id", sa.Uuid(), sa.ForeignKey("markers.id", ondelete="CASCADE"),
                  nullable=False, index=True),
        sa.Column("image_url", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("uploaded_at", sa.DateTime(timezone=True), nullable=False,
                  server_default=sa.text("CURRENT_TIMESTAMP")),
        _deleted_at(),
    )

    op.create_table(
        "marker_reviews",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("marker_id", sa.Uuid(), sa.ForeignKey("markers.id", ondelete="CASCADE"),
                  nullable=False, index=True),
        sa.Column("user_id", sa.Uuid(), sa.ForeignKey("users.id"), nullable=False, index=True),
        sa.Column("rating", sa.SmallInteger(), nullable=False),
        sa.Column("comment", sa.Text(), nullable=True),
        *_timestamps(),
        _deleted_at(),
        sa.CheckConstraint("rating >= 1 AND rating <= 5", name="ck_marker_reviews_rating"),
    )

    op.create_table(
        "routes",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("origin_text", sa.String(255), nullable=False),
        sa.Column("destination_text", sa.String(255), nullable=False),
        sa.Column("origin_lat", sa.Float(), nullable=True),
        sa.Column("origin_lng", sa.Float(), nullable=True),
        sa.Column("destination_lat", sa.Float(), nullable=True),
        sa.Column("destination_lng", sa.Float(), nullable=True),
        sa.Column("route_data", _JSON, nullable=False),
        sa.Column("distance_meters", sa.BigInteger(), nullable=True),
        sa.Column("duration_seconds", sa.BigInteger(), nullable=True),
        sa.Column("user_id", sa.Uuid(), sa.ForeignKey("users.id"), nullable=False, index=True),
        sa.Column("is_public", sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
        _deleted_at(),
    )


def downgrade() -> None:
    for table in (
        "routes",
        "marker_reviews",
        "marker_images",
        "marker_has_tags",
        "markers",
        "marker_tags",
        "marker_categories",
        "user_activity_logs",
        "users",
    ):
        op.drop_table(table)
