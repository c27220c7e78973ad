"""
Ulyngo Backend — User and Activity Log Models
===============================================

What:  ORM models for the `users` and `user_activity_logs` tables.
Who:   AuthService writes both; every protected route relies on the user id
       carried in the bearer token.

Table notes:
    - username and email are unique; lookups at login go through username.
    - password_hash holds a bcrypt hash, never the plaintext.
    - role is a short enum-like string: 'user' or 'admin'.
    - Activity logs are append-only. target_id is polymorphic (a marker or a
      route) so it carries no foreign key.
"""

import uuid
from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy import JSON, DateTime, ForeignKey, String, Uuid
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base, utcnow
from app.models.mixins import SoftDeleteMixin, TimestampMixin, UUIDPrimaryKeyMixin

ROLE_USER = "user"
ROLE_ADMIN = "admin"


class User(UUIDPrimaryKeyMixin, TimestampMixin, SoftDeleteMixin, Base):
    __tablename__ = "users"

    username: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(String(20), nullable=False, default=ROLE_USER)
    whatsapp: Mapped[Optional[str]] = mapped_column(String(30), nullable=True)
    last_active_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    activity_logs: Mapped[list["UserActivityLog"]] = relationship(
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username='{self.username}', role='{self.role}')>"


class UserActivityLog(UUIDPrimaryKeyMixin, Base):
    """
    One row per notable user action.

    activity_type values written by the services:
        register, login, create_marker, update_marker, delete_marker,
        save_route, plan_trip
    """

    __tablename__ = "user_activity_logs"

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", onupdate="CASCADE", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    activity_type: Mapped[str] = mapped_column(String(100), nullable=False)
    target_id: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid, nullable=True)
    activity_data: Mapped[Dict[str, Any]] = mapped_column(
        JSON().with_variant(JSONB(), "postgresql"),
        nullable=False,
        default=dict,
    )
    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )

    user: Mapped[User] = relationship(back_populates="activity_logs")

    def __repr__(self) -> str:
        return (
            f"<UserActivityLog(user_id={self.user_id}, "
            f"activity_type='{self.activity_type}', timestamp='{self.timestamp}')>"
        )
