"""
Ulyngo Backend — Category and Tag Service
===========================================

What:  CRUD for marker categories and marker tags.
How:   Both tables have the same shape (unique name, soft delete), so one
       class parameterised by model serves both. Deletes are soft; a name
       that collides with a live row is a 409.
Who:   /api/marker/categories and /api/marker/tags routes; MarkerService
       uses get() to validate category ids.
"""

import logging
import uuid
from typing import Generic, List, Type, TypeVar

from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import ConflictError, NotFoundError
from app.models.marker import MarkerCategory, MarkerTag

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", MarkerCategory, MarkerTag)


class TaxonomyService(Generic[ModelT]):
    def __init__(self, model: Type[ModelT], resource: str):
        self.model = model
        self.resource = resource

    async def list(self, db: AsyncSession) -> List[ModelT]:
        result = await db.execute(
            select(self.model)
            .where(self.model.deleted_at.is_(None))
            .order_by(self.model.name)
        )
        return list(result.scalars().all())

    async def get(self, db: AsyncSession, item_id: uuid.UUID) -> ModelT:
        result = await db.execute(
            select(self.model).where(
                self.model.id == item_id, self.model.deleted_at.is_(None)
            )
        )
        item = result.scalar_one_or_none()
        if item is None:
            raise NotFoundError(resource=self.resource, resource_id=str(item_id))
        return item

    async def create(self, db: AsyncSession, body: BaseModel) -> ModelT:
        data = body.model_dump()
        await self._ensure_name_free(db, data["name"])
        item = self.model(**data)
        db.add(item)
        await self._flush(db, data["name"])
        logger.info("%s created: %s (%s)", self.resource.capitalize(), item.name, item.id)
        return item

    async def update(self, db: AsyncSession, item_id: uuid.UUID, body: BaseModel) -> ModelT:
        item = await self.get(db, item_id)
        changes = body.model_dump(exclude_unset=True)
        if changes.get("name") and changes["name"] != item.name:
            await self._ensure_name_free(db, changes["name"])
        for field, value in changes.items():
            if field == "name" and value is None:
                continue
            setattr(item, field, value)
        await self._flush(db, item.name)
        logger.info("%s updated: %s", self.resource.capitalize(), item.id)
        return item

    async def delete(self, db: AsyncSession, item_id: uuid.UUID) -> None:
        item = await self.get(db, item_id)
        item.soft_delete()
        await db.flush()
        logger.info("%s deleted: %s", self.resource.capitalize(), item.id)

    # ── Helpers ───────────────────────────────────────────────────────────

    async def _ensure_name_free(self, db: AsyncSession, name: str) -> None:
        result = await db.execute(select(self.model.id).where(self.model.name == name))
        if result.first() is not None:
            raise ConflictError(
                message=f"{self.resource.capitalize()} '{name}' already exists"
            )

    async def _flush(self, db: AsyncSession, name: str) -> None:
        try:
            await db.flush()
        except IntegrityError as e:
            raise ConflictError(
                message=f"{self.resource.capitalize()} '{name}' already exists"
            ) from e


category_service: TaxonomyService[MarkerCategory] = TaxonomyService(MarkerCategory, "category")
tag_service: TaxonomyService[MarkerTag] = TaxonomyService(MarkerTag, "tag")
