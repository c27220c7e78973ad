"""
Ulyngo Backend — Marker Catalog Models
========================================

What:  ORM models for geolocated points of interest and their taxonomy:
       marker_categories, marker_tags, markers, marker_has_tags,
       marker_images, marker_reviews.
Who:   MarkerService and TaxonomyService; the seed script fills categories
       and tags.

Relationships:
    MarkerCategory 1 ── * Marker
    Marker * ── * MarkerTag        (through marker_has_tags)
    Marker 1 ── * MarkerImage
    Marker 1 ── * MarkerReview * ── 1 User

avg_rating / total_reviews are denormalised counters on the marker row so
the list endpoint never has to aggregate reviews.
"""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import (
    BigInteger,
    CheckConstraint,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    Numeric,
    SmallInteger,
    String,
    Table,
    Text,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base, utcnow
from app.models.mixins import SoftDeleteMixin, TimestampMixin, UUIDPrimaryKeyMixin


# Junction table; the composite primary key prevents duplicate tag links.
marker_has_tags = Table(
    "marker_has_tags",
    Base.metadata,
    Column("marker_id", Uuid, ForeignKey("markers.id", ondelete="CASCADE"), primary_key=True),
    Column("tag_id", Uuid, ForeignKey("marker_tags.id", ondelete="CASCADE"), primary_key=True),
    Column("created_at", DateTime(timezone=True), nullable=False, default=utcnow),
)


class MarkerCategory(UUIDPrimaryKeyMixin, TimestampMixin, SoftDeleteMixin, Base):
    __tablename__ = "marker_categories"

    name: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    markers: Mapped[List["Marker"]] = relationship(back_populates="category")

    def __repr__(self) -> str:
        return f"<MarkerCategory(id={self.id}, name='{self.name}')>"


class MarkerTag(UUIDPrimaryKeyMixin, TimestampMixin, SoftDeleteMixin, Base):
    __tablename__ = "marker_tags"

    name: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)

    markers: Mapped[List["Marker"]] = relationship(
        secondary=marker_has_tags, back_populates="tags"
    )

    def __repr__(self) -> str:
        return f"<MarkerTag(id={self.id}, name='{self.name}')>"


class Marker(UUIDPrimaryKeyMixin, TimestampMixin, SoftDeleteMixin, Base):
    __tablename__ = "markers"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    latitude: Mapped[float] = mapped_column(Float, nullable=False)
    longitude: Mapped[float] = mapped_column(Float, nullable=False)
    category_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("marker_categories.id"), nullable=False, index=True
    )
    avg_rating: Mapped[Decimal] = mapped_column(
        Numeric(2, 1), nullable=False, default=Decimal("0.0")
    )
    total_reviews: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    view_count: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    added_by_user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id"), nullable=False, index=True
    )

    category: Mapped[MarkerCategory] = relationship(back_populates="markers")
    tags: Mapped[List[MarkerTag]] = relationship(
        secondary=marker_has_tags, back_populates="markers"
    )
    images: Mapped[List["MarkerImage"]] = relationship(
        back_populates="marker", cascade="all, delete-orphan"
    )
    reviews: Mapped[List["MarkerReview"]] = relationship(
        back_populates="marker", cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return (
            f"<Marker(id={self.id}, name='{self.name}', "
            f"lat={self.latitude}, lng={self.longitude})>"
        )


class MarkerImage(UUIDPrimaryKeyMixin, SoftDeleteMixin, Base):
    __tablename__ = "marker_images"

    marker_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("markers.id", ondelete="CASCADE"), nullable=False, index=True
    )
    image_url: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    uploaded_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    marker: Mapped[Marker] = relationship(back_populates="images")


class MarkerReview(UUIDPrimaryKeyMixin, TimestampMixin, SoftDeleteMixin, Base):
    __tablename__ = "marker_reviews"
    __table_args__ = (
        CheckConstraint("rating >= 1 AND rating <= 5", name="ck_marker_reviews_rating"),
    )

    marker_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("markers.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id"), nullable=False, index=True
    )
    rating: Mapped[int] = mapped_column(SmallInteger, nullable=False)
    comment: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    marker: Mapped[Marker] = relationship(back_populates="reviews")
