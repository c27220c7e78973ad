"""
Ulyngo Backend — Google Maps Client Tests (Mocked)
====================================================

DirectionsClient and PlacesClient against httpx.MockTransport.
"""

import httpx
import pytest

from app.exceptions import ConfigurationError, NoRouteFoundError, ParseError, UpstreamError
from app.services.google_maps_service import (
    DirectionsClient,
    PlacesClient,
    format_location_bias,
)

DIRECTIONS_URL = "https://maps.test/directions/json"
PLACES_URL = "https://maps.test/place/textsearch/json"

DIRECTIONS_OK = {
    "status": "OK",
    "routes": [
        {
            "overview_polyline": {"points": "abc123"},
            "legs": [
                {
                    "distance": {"text": "25.1 km", "value": 25100},
                    "duration": {"text": "48 mins", "value": 2880},
                    "start_location": {"lat": -6.2383, "lng": 106.9756},
                    "end_location": {"lat": -6.1352, "lng": 106.8133},
                    "start_address": "Bekasi, Indonesia",
                    "end_address": "Kota Tua, Jakarta, Indonesia",
                }
            ],
        }
    ],
}


class TestFormatLocationBias:
    def test_six_decimals(self):
        assert format_location_bias(-6.1352, 106.8133) == "-6.135200,106.813300"

    def test_rounds_long_coordinates(self):
        assert format_location_bias(-6.91474412, 107.60981) == "-6.914744,107.609810"


class TestDirectionsClient:
    def setup_method(self):
        self.requests = []

    def client(self, handler, api_key="test-maps-key"):
        http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        return DirectionsClient(http, api_key=api_key, url=DIRECTIONS_URL), http

    @pytest.mark.asyncio
    async def test_get_route_reduces_first_leg(self):
        def handler(request):
            self.requests.append(request)
            return httpx.Response(200, json=DIRECTIONS_OK)

        directions, http = self.client(handler)
        async with http:
            route = await directions.get_route("Bekasi", "Kota Tua, Jakarta, Indonesia")

        assert route.distance.value == 25100
        assert route.duration.text == "48 mins"
        assert route.end_location.lat == -6.1352
        assert route.end_address == "Kota Tua, Jakarta, Indonesia"
        assert route.polyline == "abc123"

        params = self.requests[0].url.params
        assert params["origin"] == "Bekasi"
        assert params["destination"] == "Kota Tua, Jakarta, Indonesia"
        assert params["key"] == "test-maps-key"

    @pytest.mark.asyncio
    async def test_non_ok_status_raises_no_route_found(self):
        def handler(request):
            return httpx.Response(
                200, json={"status": "NOT_FOUND", "error_message": "origin not found", "routes": []}
            )

        directions, http = self.client(handler)
        async with http:
            with pytest.raises(NoRouteFoundError) as exc_info:
                await directions.get_route("nowhere", "Braga")

        assert exc_info.value.upstream_status == "NOT_FOUND"
        assert "NOT_FOUND" in exc_info.value.message
        assert "origin not found" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_ok_without_routes_raises_no_route_found(self):
        def handler(request):
            return httpx.Response(200, json={"status": "OK", "routes": []})

        directions, http = self.client(handler)
        async with http:
            with pytest.raises(NoRouteFoundError):
                await directions.get_route("A", "B")

    @pytest.mark.asyncio
    async def test_http_error_raises_upstream_error(self):
        def handler(request):
            return httpx.Response(500, text="backend error")

        directions, http = self.client(handler)
        async with http:
            with pytest.raises(UpstreamError) as exc_info:
                await directions.get_route("A", "B")

        assert exc_info.value.upstream_status == 500
        assert exc_info.value.details == "backend error"

    @pytest.mark.asyncio
    async def test_non_json_body_raises_parse_error(self):
        def handler(request):
            return httpx.Response(200, text="<html>oops</html>")

        directions, http = self.client(handler)
        async with http:
            with pytest.raises(ParseError):
                await directions.get_route("A", "B")

    @pytest.mark.asyncio
    async def test_missing_key_makes_no_request(self):
        def handler(request):
            self.requests.append(request)
            return httpx.Response(200, json=DIRECTIONS_OK)

        directions, http = self.client(handler, api_key="")
        async with http:
            with pytest.raises(ConfigurationError):
                await directions.get_route("A", "B")

        assert self.requests == []


class TestPlacesClient:
    def setup_method(self):
        self.requests = []

    def client(self, handler):
        http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        return PlacesClient(http, api_key="test-maps-key", url=PLACES_URL, bias_radius_m=100), http

    @pytest.mark.asyncio
    async def test_search_with_bias_sends_location_and_radius(self):
        def handler(request):
            self.requests.append(request)
            return httpx.Response(
                200,
                json={
                    "status": "OK",
                    "results": [
                        {
                            "place_id": "p1",
                            "name": "Cimol Bojot AA",
                            "formatted_address": "Jl. Braga, Bandung",
                            "geometry": {"location": {"lat": -6.917, "lng": 107.609}},
                            "rating": 4.6,
                        }
                    ],
                },
            )

        places, http = self.client(handler)
        async with http:
            result = await places.search_text("cimol", location_bias="-6.917464,107.609810")

        assert result.status == "OK"
        assert result.results[0].name == "Cimol Bojot AA"
        assert result.results[0].location.lat == -6.917
        assert result.results[0].rating == 4.6

        params = self.requests[0].url.params
        assert params["query"] == "cimol"
        assert params["location"] == "-6.917464,107.609810"
        assert params["radius"] == "100"

    @pytest.mark.asyncio
    async def test_search_without_bias_omits_location(self):
        def handler(request):
            self.requests.append(request)
            return httpx.Response(200, json={"status": "OK", "results": []})

        places, http = self.client(handler)
        async with http:
            await places.search_text("thai tea")

        params = self.requests[0].url.params
        assert "location" not in params
        assert "radius" not in params

    @pytest.mark.asyncio
    async def test_zero_results_is_success(self):
        def handler(request):
            return httpx.Response(200, json={"status": "ZERO_RESULTS", "results": []})

        places, http = self.client(handler)
        async with http:
            result = await places.search_text("something obscure")

        assert result.status == "ZERO_RESULTS"
        assert result.results == []

    @pytest.mark.asyncio
    async def test_denied_status_raises_upstream_error(self):
        def handler(request):
            return httpx.Response(
                200, json={"status": "REQUEST_DENIED", "error_message": "API key invalid"}
            )

        places, http = self.client(handler)
        async with http:
            with pytest.raises(UpstreamError) as exc_info:
                await places.search_text("cimol")

        assert exc_info.value.upstream_status == "REQUEST_DENIED"
        assert exc_info.value.details == "API key invalid"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "item",
        [
            {"place_id": "p1", "name": None},
            {"place_id": None, "name": "Cimol Bojot AA"},
            {"place_id": "p1", "name": "Cimol", "geometry": {"location": {"lat": "north", "lng": 1}}},
        ],
    )
    async def test_malformed_result_raises_parse_error(self, item):
        def handler(request):
            return httpx.Response(200, json={"status": "OK", "results": [item]})

        places, http = self.client(handler)
        async with http:
            with pytest.raises(ParseError) as exc_info:
                await places.search_text("cimol")

        assert exc_info.value.context["query"] == "cimol"
