"""
Ulyngo Backend — Trip Planner (Orchestrator)
==============================================

What:  Turns one free-text trip request into a TripPlan.
How:   Composes an IntentExtractor, a DirectionsClient and a PlacesClient.
       No database access; activity logging for the caller is done by the
       route after the plan is built.
Who:   POST /api/plan-trip, through the get_trip_planner dependency.

Orchestration Flow (strictly sequential, nothing retried):
    ┌──────────────┐   ┌──────────────┐   ┌──────────────────┐   ┌──────────────┐
    │ 1. Extract   │──▶│ 2. Main      │──▶│ 3. Places search │──▶│ 4. Return    │
    │    intent    │   │    route     │   │    per stop      │   │    trip shop │
    └──────────────┘   └──────────────┘   └──────────────────┘   └──────────────┘
        abort              abort              omit failed            omit on
        on failure         on failure         stop                   failure

    Stages 3 and 4 are biased toward the end of the main route's first leg.
"""

import logging
from typing import Optional

from app.exceptions import BadRequestError, TripPlanningError, UlyngoError
from app.schemas.trip import ExtractedIntent, PlacesResult, RouteResult, TripPlan, TripQuery
from app.services.google_maps_service import (
    DirectionsClient,
    PlacesClient,
    format_location_bias,
)
from app.services.llm_base import IntentExtractor

logger = logging.getLogger(__name__)


class TripPlanner:
    """
    Stateless apart from its three collaborators; safe to share between
    concurrent requests.
    """

    def __init__(
        self,
        extractor: IntentExtractor,
        directions: DirectionsClient,
        places: PlacesClient,
    ):
        self._extractor = extractor
        self._directions = directions
        self._places = places

    async def plan_trip(self, query: TripQuery) -> TripPlan:
        """
        Builds the plan for a trip request.

        Raises:
            TripPlanningError: Intent extraction or the main route failed.
                `details` carries the collaborator's message.
            BadRequestError: No destination could be extracted.
        """
        intent = await self._extract(query.query)
        main_route = await self._main_route(query.origin, intent.destination)

        bias = format_location_bias(main_route.end_location.lat, main_route.end_location.lng)

        suggested_stops = {}
        for stop in intent.stops_along_the_way:
            result = await self._search_best_effort(stop, bias, label="stop")
            if result is not None:
                suggested_stops[stop] = result

        return_trip_shop = None
        if intent.return_trip_plan:
            return_trip_shop = await self._search_best_effort(
                intent.return_trip_plan, bias, label="return trip"
            )

        logger.info(
            "Trip planned to %r: %d/%d stops resolved, return shop=%s",
            intent.destination,
            len(suggested_stops),
            len(intent.stops_along_the_way),
            "yes" if return_trip_shop is not None else "no",
        )
        return TripPlan(
            interpretation=intent,
            main_route=main_route,
            suggested_stops=suggested_stops,
            return_trip_shop=return_trip_shop,
        )

    # ── Stages ────────────────────────────────────────────────────────────

    async def _extract(self, sentence: str) -> ExtractedIntent:
        try:
            intent = await self._extractor.extract(sentence)
        except UlyngoError as e:
            logger.error("Intent extraction failed: %s (%s)", e.message, e.details)
            raise TripPlanningError(
                message="Failed to understand query",
                details=e.details or e.message,
                context={"stage": "extract", "error_type": type(e).__name__},
            ) from e

        if not intent.destination:
            logger.info("No destination found in query")
            raise BadRequestError(
                message="Could not determine a destination from the query.",
                field="query",
            )
        return intent

    async def _main_route(self, origin: str, destination: str) -> RouteResult:
        try:
            return await self._directions.get_route(origin, destination)
        except UlyngoError as e:
            logger.error("Main route lookup failed: %s", e.message)
            raise TripPlanningError(
                message="Failed to get main route",
                details=e.details or e.message,
                context={"stage": "main_route", "error_type": type(e).__name__},
            ) from e

    async def _search_best_effort(
        self, query: str, bias: str, label: str
    ) -> Optional[PlacesResult]:
        """Places search that logs and returns None instead of raising."""
        try:
            return await self._places.search_text(query, location_bias=bias)
        except UlyngoError as e:
            logger.warning(
                "Skipping %s %r: place search failed: %s", label, query, e.message
            )
            return None
