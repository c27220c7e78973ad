"""
Ulyngo Backend — Category and Tag Routes
==========================================

/api/marker/categories[/{id}] and /api/marker/tags[/{id}].
Reads are public; create, update and delete need an admin token.
"""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.dependencies import require_admin
from app.schemas.auth import CurrentUser
from app.schemas.common import ErrorResponse, MessageResponse
from app.schemas.marker import (
    CategoryCreate,
    CategoryMutationResponse,
    CategoryResponse,
    CategoryUpdate,
    TagCreate,
    TagMutationResponse,
    TagResponse,
    TagUpdate,
)
from app.services.taxonomy_service import category_service, tag_service

router = APIRouter(prefix="/api/marker", tags=["Marker Taxonomy"])

_ERRORS = {
    404: {"description": "Not found", "model": ErrorResponse},
    409: {"description": "Name already exists", "model": ErrorResponse},
}


# ── Categories ────────────────────────────────────────────────────────────


@router.get("/categories", response_model=List[CategoryResponse])
async def list_categories(db: AsyncSession = Depends(get_db_session)) -> List[CategoryResponse]:
    return [CategoryResponse.model_validate(c) for c in await category_service.list(db)]


@router.get("/categories/{category_id}", response_model=CategoryResponse, responses=_ERRORS)
async def get_category(
    category_id: UUID, db: AsyncSession = Depends(get_db_session)
) -> CategoryResponse:
    return CategoryResponse.model_validate(await category_service.get(db, category_id))


@router.post(
    "/categories",
    response_model=CategoryMutationResponse,
    status_code=status.HTTP_201_CREATED,
    responses=_ERRORS,
)
async def create_category(
    body: CategoryCreate,
    user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> CategoryMutationResponse:
    category = await category_service.create(db, body)
    return CategoryMutationResponse(
        message="Category created successfully",
        category=CategoryResponse.model_validate(category),
    )


@router.put("/categories/{category_id}", response_model=CategoryMutationResponse, responses=_ERRORS)
async def update_category(
    category_id: UUID,
    body: CategoryUpdate,
    user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> CategoryMutationResponse:
    category = await category_service.update(db, category_id, body)
    return CategoryMutationResponse(
        message="Category updated successfully",
        category=CategoryResponse.model_validate(category),
    )


@router.delete("/categories/{category_id}", response_model=MessageResponse, responses=_ERRORS)
async def delete_category(
    category_id: UUID,
    user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    await category_service.delete(db, category_id)
    return MessageResponse(message="Category deleted successfully")


# ── Tags ──────────────────────────────────────────────────────────────────


@router.get("/tags", response_model=List[TagResponse])
async def list_tags(db: AsyncSession = Depends(get_db_session)) -> List[TagResponse]:
    return [TagResponse.model_validate(t) for t in await tag_service.list(db)]


@router.get("/tags/{tag_id}", response_model=TagResponse, responses=_ERRORS)
async def get_tag(tag_id: UUID, db: AsyncSession = Depends(get_db_session)) -> TagResponse:
    return TagResponse.model_validate(await tag_service.get(db, tag_id))


@router.post(
    "/tags",
    response_model=TagMutationResponse,
    status_code=status.HTTP_201_CREATED,
    responses=_ERRORS,
)
async def create_tag(
    body: TagCreate,
    user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> TagMutationResponse:
    tag = await tag_service.create(db, body)
    return TagMutationResponse(
        message="Tag created successfully", tag=TagResponse.model_validate(tag)
    )


@router.put("/tags/{tag_id}", response_model=TagMutationResponse, responses=_ERRORS)
async def update_tag(
    tag_id: UUID,
    body: TagUpdate,
    user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> TagMutationResponse:
    tag = await tag_service.update(db, tag_id, body)
    return TagMutationResponse(
        message="Tag updated successfully", tag=TagResponse.model_validate(tag)
    )


@router.delete("/tags/{tag_id}", response_model=MessageResponse, responses=_ERRORS)
async def delete_tag(
    tag_id: UUID,
    user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    await tag_service.delete(db, tag_id)
    return MessageResponse(message="Tag deleted successfully")
