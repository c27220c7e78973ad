"""
Ulyngo Backend — Marker Service
=================================

What:  Listing, lookup and admin CRUD for markers.
How:   Stateless; the request's AsyncSession is passed to every call.
       Relationships are eager-loaded with selectinload because async
       sessions cannot lazy-load while the response is being serialized.
Who:   /api/markers routes.

Ownership:
    Update and delete are allowed for admins, and for the user who added the
    marker. Anyone else gets the same 404 as for a missing marker, so the
    response does not reveal that the marker exists.
"""

import logging
import uuid
from typing import List, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.exceptions import BadRequestError, NotFoundError
from app.models.marker import Marker, MarkerCategory, MarkerTag
from app.schemas.auth import CurrentUser
from app.schemas.marker import MarkerCreate, MarkerUpdate
from app.services.activity_service import record_activity

logger = logging.getLogger(__name__)

_MARKER_LOAD_OPTIONS = (
    selectinload(Marker.category),
    selectinload(Marker.tags),
    selectinload(Marker.images),
)


class MarkerService:
    async def list_markers(self, db: AsyncSession) -> List[Marker]:
        result = await db.execute(
            select(Marker)
            .where(Marker.deleted_at.is_(None))
            .options(*_MARKER_LOAD_OPTIONS)
            .order_by(Marker.created_at.desc())
        )
        return list(result.scalars().all())

    async def get_marker(self, db: AsyncSession, marker_id: uuid.UUID) -> Marker:
        result = await db.execute(
            select(Marker)
            .where(Marker.id == marker_id, Marker.deleted_at.is_(None))
            .options(*_MARKER_LOAD_OPTIONS)
            .execution_options(populate_existing=True)
        )
        marker = result.scalar_one_or_none()
        if marker is None:
            raise NotFoundError(resource="marker", resource_id=str(marker_id))
        return marker

    async def create_marker(
        self, db: AsyncSession, body: MarkerCreate, user: CurrentUser
    ) -> Marker:
        """
        Creates a marker owned by the caller.

        Raises:
            BadRequestError: category_id or one of tag_ids does not exist.
        """
        await self._require_category(db, body.category_id)
        tags = await self._load_tags(db, body.tag_ids)

        marker = Marker(
            name=body.name,
            description=body.description,
            latitude=body.latitude,
            longitude=body.longitude,
            category_id=body.category_id,
            added_by_user_id=user.id,
            tags=tags,
        )
        db.add(marker)
        await db.flush()
        await record_activity(
            db, user.id, "create_marker", target_id=marker.id, data={"name": marker.name}
        )
        logger.info("Marker created: %s (%s) by %s", marker.name, marker.id, user.username)
        return await self.get_marker(db, marker.id)

    async def update_marker(
        self, db: AsyncSession, marker_id: uuid.UUID, body: MarkerUpdate, user: CurrentUser
    ) -> Marker:
        marker = await self._get_owned(db, marker_id, user, action="update")
        changes = body.model_dump(exclude_unset=True)

        tag_ids = changes.pop("tag_ids", None)
        if changes.get("category_id") is not None:
            await self._require_category(db, changes["category_id"])

        for field, value in changes.items():
            # Explicit nulls are ignored for required columns
            if value is None and field not in ("description",):
                continue
            setattr(marker, field, value)

        if tag_ids is not None:
            marker.tags = await self._load_tags(db, tag_ids)

        await db.flush()
        await record_activity(
            db,
            user.id,
            "update_marker",
            target_id=marker.id,
            data={"fields": sorted(body.model_fields_set)},
        )
        logger.info("Marker updated: %s by %s", marker.id, user.username)
        return await self.get_marker(db, marker.id)

    async def delete_marker(
        self, db: AsyncSession, marker_id: uuid.UUID, user: CurrentUser
    ) -> None:
        marker = await self._get_owned(db, marker_id, user, action="delete")
        marker.soft_delete()
        await db.flush()
        await record_activity(db, user.id, "delete_marker", target_id=marker.id)
        logger.info("Marker deleted: %s by %s", marker.id, user.username)

    # ── Helpers ───────────────────────────────────────────────────────────

    async def _get_owned(
        self, db: AsyncSession, marker_id: uuid.UUID, user: CurrentUser, action: str
    ) -> Marker:
        message = f"Marker not found or you don't have permission to {action} it"
        try:
            marker = await self.get_marker(db, marker_id)
        except NotFoundError:
            raise NotFoundError(resource="marker", resource_id=str(marker_id), message=message)
        if not user.is_admin and marker.added_by_user_id != user.id:
            raise NotFoundError(resource="marker", resource_id=str(marker_id), message=message)
        return marker

    @staticmethod
    async def _require_category(db: AsyncSession, category_id: uuid.UUID) -> None:
        result = await db.execute(
            select(MarkerCategory.id).where(
                MarkerCategory.id == category_id, MarkerCategory.deleted_at.is_(None)
            )
        )
        if result.first() is None:
            raise BadRequestError(
                message=f"Category with ID '{category_id}' does not exist",
                field="category_id",
            )

    @staticmethod
    async def _load_tags(db: AsyncSession, tag_ids: Sequence[uuid.UUID]) -> List[MarkerTag]:
        if not tag_ids:
            return []
        unique_ids = list(dict.fromkeys(tag_ids))
        result = await db.execute(
            select(MarkerTag).where(MarkerTag.id.in_(unique_ids), MarkerTag.deleted_at.is_(None))
        )
        tags = list(result.scalars().all())
        missing = set(unique_ids) - {tag.id for tag in tags}
        if missing:
            raise BadRequestError(
                message="One or more tags do not exist",
                field="tag_ids",
                details=", ".join(sorted(str(m) for m in missing)),
            )
        return tags


marker_service = MarkerService()
