"""
Ulyngo Backend — Marker Routes
================================

GET    /api/markers          public list (with category, tags and images)
GET    /api/markers/{id}     public detail
POST   /api/markers          admin, 201
PUT    /api/markers/{id}     admin (owner or admin)
DELETE /api/markers/{id}     admin (owner or admin), soft delete
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
    MarkerCreate,
    MarkerMutationResponse,
    MarkerResponse,
    MarkerUpdate,
)
from app.services.marker_service import marker_service

router = APIRouter(prefix="/api/markers", tags=["Markers"])

_NOT_FOUND = {404: {"description": "Marker not found", "model": ErrorResponse}}


@router.get("", response_model=List[MarkerResponse], summary="List markers")
async def list_markers(db: AsyncSession = Depends(get_db_session)) -> List[MarkerResponse]:
    markers = await marker_service.list_markers(db)
    return [MarkerResponse.model_validate(m) for m in markers]


@router.get(
    "/{marker_id}",
    response_model=MarkerResponse,
    responses=_NOT_FOUND,
    summary="Get a marker by ID",
)
async def get_marker(
    marker_id: UUID,
    db: AsyncSession = Depends(get_db_session),
) -> MarkerResponse:
    return MarkerResponse.model_validate(await marker_service.get_marker(db, marker_id))


@router.post(
    "",
    response_model=MarkerMutationResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"description": "Unknown category or tag", "model": ErrorResponse}},
    summary="Create a marker",
)
async def create_marker(
    body: MarkerCreate,
    user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> MarkerMutationResponse:
    marker = await marker_service.create_marker(db, body, user)
    return MarkerMutationResponse(
        message="Marker created successfully",
        marker=MarkerResponse.model_validate(marker),
    )


@router.put(
    "/{marker_id}",
    response_model=MarkerMutationResponse,
    responses=_NOT_FOUND,
    summary="Update a marker",
)
async def update_marker(
    marker_id: UUID,
    body: MarkerUpdate,
    user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> MarkerMutationResponse:
    marker = await marker_service.update_marker(db, marker_id, body, user)
    return MarkerMutationResponse(
        message="Marker updated successfully",
        marker=MarkerResponse.model_validate(marker),
    )


@router.delete(
    "/{marker_id}",
    response_model=MessageResponse,
    responses=_NOT_FOUND,
    summary="Delete a marker",
)
async def delete_marker(
    marker_id: UUID,
    user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    await marker_service.delete_marker(db, marker_id, user)
    return MessageResponse(message="Marker deleted successfully")
