"""
Ulyngo Backend — Trip Planner Tests
=====================================

TripPlanner with AsyncMock collaborators.

What we test:
    ✅ Kota Tua: route only, no place searches
    ✅ Extractor failure aborts with "Failed to understand query"
    ✅ Empty destination aborts with a 400 and no downstream calls
    ✅ A failing stop is omitted, the rest of the plan survives
    ✅ A malformed Places result drops only that stop
    ✅ Location bias is the first leg's end coordinate at 6 decimals
    ✅ Identical inputs give identical plans
"""

from unittest.mock import AsyncMock, call

import httpx
import pytest

from app.exceptions import (
    BadRequestError,
    NoRouteFoundError,
    TripPlanningError,
    UpstreamError,
)
from app.schemas.trip import (
    ExtractedIntent,
    LatLng,
    PlacesResult,
    RouteResult,
    TextValue,
    TripQuery,
    Venue,
)
from app.services.google_maps_service import DirectionsClient, PlacesClient
from app.services.llm_base import IntentExtractor
from app.services.trip_planner import TripPlanner


def make_route(end_lat=-6.917464, end_lng=107.60981) -> RouteResult:
    return RouteResult(
        distance=TextValue(text="150 km", value=150000),
        duration=TextValue(text="3 hours", value=10800),
        start_location=LatLng(lat=-6.2, lng=106.8),
        end_location=LatLng(lat=end_lat, lng=end_lng),
        start_address="Jakarta, Indonesia",
        end_address="Jalan Braga, Bandung, Indonesia",
        polyline="xyz",
    )


def places_for(query: str) -> PlacesResult:
    return PlacesResult(status="OK", results=[Venue(place_id=f"id-{query}", name=f"{query} place")])


class TestTripPlanner:
    def setup_method(self):
        self.extractor = AsyncMock(spec=IntentExtractor)
        self.directions = AsyncMock(spec=DirectionsClient)
        self.places = AsyncMock(spec=PlacesClient)
        self.planner = TripPlanner(self.extractor, self.directions, self.places)

    @pytest.mark.asyncio
    async def test_route_only_when_no_stops(self):
        self.extractor.extract.return_value = ExtractedIntent(
            destination="Kota Tua, Jakarta, Indonesia"
        )
        self.directions.get_route.return_value = make_route(-6.1352, 106.8133)

        plan = await self.planner.plan_trip(
            TripQuery(query="Mau ke Kota Tua dari Bekasi", origin="Bekasi")
        )

        self.directions.get_route.assert_awaited_once_with("Bekasi", "Kota Tua, Jakarta, Indonesia")
        self.places.search_text.assert_not_awaited()
        assert plan.suggested_stops == {}
        assert plan.return_trip_shop is None
        assert plan.main_route.end_location.lat == -6.1352

    @pytest.mark.asyncio
    async def test_extractor_failure_aborts(self):
        self.extractor.extract.side_effect = UpstreamError(
            message="Vertex AI returned HTTP 500", upstream_status=500, body="internal"
        )

        with pytest.raises(TripPlanningError) as exc_info:
            await self.planner.plan_trip(TripQuery(query="ke puncak", origin="Jakarta"))

        assert exc_info.value.message == "Failed to understand query"
        assert exc_info.value.status_code == 500
        assert exc_info.value.details == "internal"
        self.directions.get_route.assert_not_awaited()
        self.places.search_text.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_empty_destination_makes_no_downstream_calls(self):
        self.extractor.extract.return_value = ExtractedIntent(destination="")

        with pytest.raises(BadRequestError) as exc_info:
            await self.planner.plan_trip(TripQuery(query="halo", origin="Jakarta"))

        assert exc_info.value.message == "Could not determine a destination from the query."
        assert exc_info.value.status_code == 400
        self.directions.get_route.assert_not_awaited()
        self.places.search_text.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_main_route_failure_aborts(self):
        self.extractor.extract.return_value = ExtractedIntent(
            destination="Braga", stops_along_the_way=["cimol"]
        )
        self.directions.get_route.side_effect = NoRouteFoundError(
            upstream_status="ZERO_RESULTS"
        )

        with pytest.raises(TripPlanningError) as exc_info:
            await self.planner.plan_trip(TripQuery(query="ke braga", origin="Mars"))

        assert exc_info.value.message == "Failed to get main route"
        assert "ZERO_RESULTS" in exc_info.value.details
        self.places.search_text.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_failing_stop_is_omitted(self):
        self.extractor.extract.return_value = ExtractedIntent(
            destination="Jalan Braga, Bandung, Indonesia",
            stops_along_the_way=["cimol", "thai tea"],
            return_trip_plan="beli oleh-oleh bolu susu lembang",
        )
        self.directions.get_route.return_value = make_route()

        async def search(query, location_bias=None):
            if query == "cimol":
                raise UpstreamError(message="Places API returned status 'UNKNOWN_ERROR'")
            return places_for(query)

        self.places.search_text.side_effect = search

        plan = await self.planner.plan_trip(
            TripQuery(query="ke braga jajan cimol sama thai tea", origin="Jakarta")
        )

        assert list(plan.suggested_stops) == ["thai tea"]
        assert plan.suggested_stops["thai tea"].results[0].name == "thai tea place"
        assert plan.return_trip_shop.results[0].name == "beli oleh-oleh bolu susu lembang place"

    @pytest.mark.asyncio
    async def test_failing_return_shop_is_omitted(self):
        self.extractor.extract.return_value = ExtractedIntent(
            destination="Lembang", return_trip_plan="beli bolu susu"
        )
        self.directions.get_route.return_value = make_route()
        self.places.search_text.side_effect = UpstreamError(message="boom")

        plan = await self.planner.plan_trip(TripQuery(query="ke lembang", origin="Bandung"))

        assert plan.return_trip_shop is None

    @pytest.mark.asyncio
    async def test_searches_are_biased_to_route_end_in_order(self):
        self.extractor.extract.return_value = ExtractedIntent(
            destination="Braga",
            stops_along_the_way=["cimol", "thai tea"],
            return_trip_plan="bolu susu",
        )
        self.directions.get_route.return_value = make_route(-6.91746412, 107.6098)
        self.places.search_text.side_effect = lambda q, location_bias=None: places_for(q)

        await self.planner.plan_trip(TripQuery(query="...", origin="Jakarta"))

        bias = "-6.917464,107.609800"
        assert self.places.search_text.await_args_list == [
            call("cimol", location_bias=bias),
            call("thai tea", location_bias=bias),
            call("bolu susu", location_bias=bias),
        ]

    @pytest.mark.asyncio
    async def test_identical_inputs_give_identical_plans(self):
        self.extractor.extract.return_value = ExtractedIntent(
            destination="Braga", stops_along_the_way=["cimol"], return_trip_plan="bolu"
        )
        self.directions.get_route.return_value = make_route()
        self.places.search_text.side_effect = lambda q, location_bias=None: places_for(q)

        query = TripQuery(query="ke braga jajan cimol", origin="Jakarta")
        first = await self.planner.plan_trip(query)
        second = await self.planner.plan_trip(query)

        assert first.model_dump() == second.model_dump()

    @pytest.mark.asyncio
    async def test_malformed_places_result_only_drops_that_stop(self):
        def handler(request):
            query = request.url.params["query"]
            if query == "cimol":
                results = [{"place_id": "p1", "name": None}]
            else:
                results = [{"place_id": "p2", "name": "Haus Thai Tea"}]
            return httpx.Response(200, json={"status": "OK", "results": results})

        self.extractor.extract.return_value = ExtractedIntent(
            destination="Braga", stops_along_the_way=["cimol", "thai tea"]
        )
        self.directions.get_route.return_value = make_route()

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
            places = PlacesClient(http, api_key="test-maps-key", url="https://maps.test/place")
            planner = TripPlanner(self.extractor, self.directions, places)
            plan = await planner.plan_trip(TripQuery(query="ke braga", origin="Jakarta"))

        assert list(plan.suggested_stops) == ["thai tea"]
        assert plan.suggested_stops["thai tea"].results[0].name == "Haus Thai Tea"
