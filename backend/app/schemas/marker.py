"""
Ulyngo Backend — Marker Catalog Schemas
=========================================

What:  API contracts for markers, categories and tags.
How:   Create models validate required fields; Update models make every
       field optional and services apply only the fields the client sent
       (model_dump(exclude_unset=True)).
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


# ══════════════════════════════════════════════════════════════════════════
# Categories & Tags
# ══════════════════════════════════════════════════════════════════════════


class CategoryCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    description: Optional[str] = None


class CategoryUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = None


class CategoryResponse(BaseModel):
    id: uuid.UUID
    name: str
    description: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class TagCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)


class TagUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)


class TagResponse(BaseModel):
    id: uuid.UUID
    name: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


# ══════════════════════════════════════════════════════════════════════════
# Markers
# ══════════════════════════════════════════════════════════════════════════


class MarkerCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)
    category_id: uuid.UUID
    tag_ids: List[uuid.UUID] = Field(default_factory=list)


class MarkerUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None
    latitude: Optional[float] = Field(default=None, ge=-90, le=90)
    longitude: Optional[float] = Field(default=None, ge=-180, le=180)
    category_id: Optional[uuid.UUID] = None
    tag_ids: Optional[List[uuid.UUID]] = None


class MarkerImageResponse(BaseModel):
    id: uuid.UUID
    image_url: str
    description: Optional[str] = None
    uploaded_at: datetime

    model_config = {"from_attributes": True}


class MarkerResponse(BaseModel):
    id: uuid.UUID
    name: str
    description: Optional[str] = None
    latitude: float
    longitude: float
    category_id: uuid.UUID
    category: Optional[CategoryResponse] = None
    tags: List[TagResponse] = Field(default_factory=list)
    images: List[MarkerImageResponse] = Field(default_factory=list)
    avg_rating: float
    total_reviews: int
    view_count: int
    added_by_user_id: uuid.UUID
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class MarkerMutationResponse(BaseModel):
    message: str
    marker: MarkerResponse


class CategoryMutationResponse(BaseModel):
    message: str
    category: CategoryResponse


class TagMutationResponse(BaseModel):
    message: str
    tag: TagResponse
