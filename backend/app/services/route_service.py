"""
Ulyngo Backend — Saved Route Service
======================================

What:  Saves a Directions result for a user and lists saved routes.
How:   save_route() makes one Directions call, then stores headline fields
       as columns and the full RouteResult as JSON.
Who:   POST /api/routes and GET /api/routes.
"""

import logging
from typing import List

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.route import Route
from app.schemas.auth import CurrentUser
from app.schemas.trip import SaveRouteRequest
from app.services.activity_service import record_activity
from app.services.google_maps_service import DirectionsClient

logger = logging.getLogger(__name__)


class RouteService:
    async def save_route(
        self,
        db: AsyncSession,
        directions: DirectionsClient,
        body: SaveRouteRequest,
        user: CurrentUser,
    ) -> Route:
        """
        Raises whatever the Directions client raises (NoRouteFoundError,
        UpstreamError, ...); nothing is written in that case.
        """
        result = await directions.get_route(body.origin, body.destination)

        route = Route(
            name=body.name or f"{body.origin} to {body.destination}",
            origin_text=body.origin,
            destination_text=body.destination,
            origin_lat=result.start_location.lat,
            origin_lng=result.start_location.lng,
            destination_lat=result.end_location.lat,
            destination_lng=result.end_location.lng,
            route_data=result.model_dump(mode="json"),
            distance_meters=result.distance.value,
            duration_seconds=result.duration.value,
            user_id=user.id,
            is_public=body.is_public,
        )
        db.add(route)
        await db.flush()
        await record_activity(
            db,
            user.id,
            "save_route",
            target_id=route.id,
            data={"origin": body.origin, "destination": body.destination},
        )
        logger.info("Route saved: %s (%s) by %s", route.name, route.id, user.username)
        return route

    async def list_routes(self, db: AsyncSession, user: CurrentUser) -> List[Route]:
        """The caller's own routes plus every public route, newest first."""
        result = await db.execute(
            select(Route)
            .where(
                Route.deleted_at.is_(None),
                or_(Route.user_id == user.id, Route.is_public.is_(True)),
            )
            .order_by(Route.created_at.desc())
        )
        return list(result.scalars().all())


route_service = RouteService()
