"""
Ulyngo Backend — Travel Routes
================================

What:  Trip planning, place search and saved routes. All require a bearer
       token and all call paid Google APIs, so they sit behind the rate
       limiter (see RateLimitMiddleware.LIMITED_PREFIXES).

Endpoints:
    POST /api/plan-trip        free text → TripPlan
    POST /api/places/search    text search, optional location bias
    POST /api/routes           fetch a route and save it
    GET  /api/routes           own routes plus public ones
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.dependencies import (
    get_current_user,
    get_directions_client,
    get_places_client,
    get_trip_planner,
)
from app.schemas.auth import CurrentUser
from app.schemas.common import ErrorResponse
from app.schemas.trip import (
    PlaceSearchRequest,
    PlacesResult,
    SavedRouteResponse,
    SaveRouteRequest,
    TripPlan,
    TripQuery,
)
from app.services.activity_service import record_activity
from app.services.google_maps_service import DirectionsClient, PlacesClient
from app.services.route_service import route_service
from app.services.trip_planner import TripPlanner

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Travel"])


@router.post(
    "/plan-trip",
    response_model=TripPlan,
    response_model_exclude_none=True,
    responses={
        400: {"description": "Invalid body or no destination found", "model": ErrorResponse},
        401: {"description": "Missing or invalid token", "model": ErrorResponse},
        500: {"description": "Query not understood or no main route", "model": ErrorResponse},
    },
    summary="Plan a trip from a free-text request",
    description=(
        "Extracts destination, stops and a return-trip plan from the query, "
        "routes origin to destination, then searches places for each stop and "
        "for the return-trip plan near the destination. Stops whose search "
        "fails are left out of suggested_stops."
    ),
)
async def plan_trip(
    body: TripQuery,
    planner: TripPlanner = Depends(get_trip_planner),
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> TripPlan:
    plan = await planner.plan_trip(body)
    try:
        await record_activity(
            db,
            user.id,
            "plan_trip",
            data={
                "query": body.query,
                "origin": body.origin,
                "destination": plan.interpretation.destination,
            },
        )
    except SQLAlchemyError as e:
        # Activity logging never fails a computed plan
        logger.warning(
            "Could not record plan_trip activity for user %s: %s",
            user.id,
            type(e).__name__,
            exc_info=True,
        )
        await db.rollback()
    return plan


@router.post(
    "/places/search",
    response_model=PlacesResult,
    responses={502: {"description": "Places API failure", "model": ErrorResponse}},
    summary="Search places by text",
)
async def search_places(
    body: PlaceSearchRequest,
    places: PlacesClient = Depends(get_places_client),
    user: CurrentUser = Depends(get_current_user),
) -> PlacesResult:
    return await places.search_text(body.query, location_bias=body.location_bias)


@router.post(
    "/routes",
    response_model=SavedRouteResponse,
    status_code=status.HTTP_201_CREATED,
    responses={502: {"description": "No route found", "model": ErrorResponse}},
    summary="Fetch a route and save it",
)
async def save_route(
    body: SaveRouteRequest,
    directions: DirectionsClient = Depends(get_directions_client),
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> SavedRouteResponse:
    route = await route_service.save_route(db, directions, body, user)
    return SavedRouteResponse.model_validate(route)


@router.get(
    "/routes",
    response_model=List[SavedRouteResponse],
    summary="List own and public saved routes",
)
async def list_routes(
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> List[SavedRouteResponse]:
    routes = await route_service.list_routes(db, user)
    return [SavedRouteResponse.model_validate(r) for r in routes]
