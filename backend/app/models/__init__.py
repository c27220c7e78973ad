"""
Ulyngo Backend — ORM Models
=============================

Importing this package registers every table with Base.metadata, which
Alembic autogenerate and the seed script rely on.
"""

from app.models.marker import (
    Marker,
    MarkerCategory,
    MarkerImage,
    MarkerReview,
    MarkerTag,
    marker_has_tags,
)
from app.models.route import Route
from app.models.user import ROLE_ADMIN, ROLE_USER, User, UserActivityLog

__all__ = [
    "Marker",
    "MarkerCategory",
    "MarkerImage",
    "MarkerReview",
    "MarkerTag",
    "marker_has_tags",
    "Route",
    "User",
    "UserActivityLog",
    "ROLE_ADMIN",
    "ROLE_USER",
]
