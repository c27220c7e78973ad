"""
Ulyngo Backend — Saved Route Model
====================================

What:  ORM model for the `routes` table: a travel route a user fetched from
       the Directions API and chose to keep.
How:   Endpoints and headline numbers are stored as columns for listing;
       the full RouteResult payload is kept in route_data (JSONB on
       PostgreSQL) so the polyline can be redrawn without another API call.
"""

import uuid
from typing import Any, Dict, Optional

from sqlalchemy import JSON, BigInteger, Boolean, Float, ForeignKey, String, Uuid
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base
from app.models.mixins import SoftDeleteMixin, TimestampMixin, UUIDPrimaryKeyMixin


class Route(UUIDPrimaryKeyMixin, TimestampMixin, SoftDeleteMixin, Base):
    __tablename__ = "routes"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    origin_text: Mapped[str] = mapped_column(String(255), nullable=False)
    destination_text: Mapped[str] = mapped_column(String(255), nullable=False)
    origin_lat: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    origin_lng: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    destination_lat: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    destination_lng: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    route_data: Mapped[Dict[str, Any]] = mapped_column(
        JSON().with_variant(JSONB(), "postgresql"),
        nullable=False,
        default=dict,
    )
    distance_meters: Mapped[Optional[int]] = mapped_column(BigInteger, nullable=True)
    duration_seconds: Mapped[Optional[int]] = mapped_column(BigInteger, nullable=True)
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id"), nullable=False, index=True
    )
    is_public: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    def __repr__(self) -> str:
        return (
            f"<Route(id={self.id}, name='{self.name}', "
            f"origin='{self.origin_text}', destination='{self.destination_text}')>"
        )
