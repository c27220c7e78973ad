"""
Ulyngo Backend — Google Maps Platform Clients
===============================================

What:  Thin async clients for the two Maps endpoints the planner uses:
       Directions (origin → destination) and Places Text Search.
How:   One GET per call through the shared httpx.AsyncClient. The raw
       Google payload is reduced to RouteResult / PlacesResult before it
       leaves this module. The API key is sent as a query parameter and is
       never written to the log.
Who:   TripPlanner (main route, stop lookups), the /api/places/search route
       and RouteService when a route is saved.

Error mapping (no retries, one attempt per call):
    missing API key                       → ConfigurationError
    transport error, HTTP status != 200   → UpstreamError
    body is not JSON / unexpected shape   → ParseError
    Directions status != OK, or no legs   → NoRouteFoundError
    Places status not OK / ZERO_RESULTS   → UpstreamError
"""

import logging
import time
from typing import Any, Dict, Optional

import httpx

from app.exceptions import ConfigurationError, NoRouteFoundError, ParseError, UpstreamError
from app.schemas.trip import LatLng, PlacesResult, RouteResult, TextValue, Venue

logger = logging.getLogger(__name__)

PLACES_OK_STATUSES = frozenset({"OK", "ZERO_RESULTS"})


def format_location_bias(lat: float, lng: float) -> str:
    """Formats a coordinate as the 'lat,lng' string Places expects (6 decimals)."""
    return f"{lat:.6f},{lng:.6f}"


class _GoogleMapsClient:
    """Shared GET + decode plumbing for the Maps web services."""

    api_name = "Google Maps"

    def __init__(self, http_client: httpx.AsyncClient, api_key: str, url: str):
        self._http = http_client
        self._api_key = api_key
        self._url = url

    @property
    def is_configured(self) -> bool:
        return bool(self._api_key)

    async def _get_json(self, params: Dict[str, Any]) -> Dict[str, Any]:
        if not self._api_key:
            raise ConfigurationError(
                message=f"{self.api_name} is not configured",
                details="Set GOOGLE_MAPS_API_KEY",
            )

        start_time = time.perf_counter()
        try:
            response = await self._http.get(self._url, params={**params, "key": self._api_key})
        except httpx.HTTPError as e:
            logger.warning("%s request failed: %s", self.api_name, type(e).__name__)
            raise UpstreamError(
                message=f"Failed to call {self.api_name}",
                body=str(e) or type(e).__name__,
                context={"error_type": type(e).__name__},
            ) from e

        duration_ms = (time.perf_counter() - start_time) * 1000
        logger.debug(
            "%s %s → HTTP %d in %.0fms", self.api_name, params, response.status_code, duration_ms
        )

        if response.status_code != 200:
            raise UpstreamError(
                message=f"{self.api_name} returned HTTP {response.status_code}",
                upstream_status=response.status_code,
                body=response.text,
            )

        try:
            body = response.json()
        except ValueError as e:
            raise ParseError(
                message=f"{self.api_name} returned a non-JSON body",
                body=response.text,
            ) from e
        if not isinstance(body, dict):
            raise ParseError(
                message=f"{self.api_name} returned an unexpected body",
                body=response.text,
            )
        return body


class DirectionsClient(_GoogleMapsClient):
    """Google Directions API: first leg of the first route."""

    api_name = "Directions API"

    async def get_route(self, origin: str, destination: str) -> RouteResult:
        """
        Fetches a driving route (the API default mode) between two places.

        Both arguments are free text or 'lat,lng' pairs and are passed
        through untouched.
        """
        logger.info("Requesting directions: origin=%r destination=%r", origin, destination)
        body = await self._get_json({"origin": origin, "destination": destination})

        status = body.get("status", "")
        if status != "OK":
            raise NoRouteFoundError(
                upstream_status=status,
                error_message=body.get("error_message", ""),
            )

        routes = body.get("routes") or []
        legs = (routes[0].get("legs") or []) if routes else []
        if not legs:
            raise NoRouteFoundError(
                upstream_status=status,
                error_message="no route legs in response",
            )

        try:
            leg = legs[0]
            route = RouteResult(
                distance=TextValue(**leg["distance"]),
                duration=TextValue(**leg["duration"]),
                start_location=LatLng(**leg["start_location"]),
                end_location=LatLng(**leg["end_location"]),
                start_address=leg.get("start_address"),
                end_address=leg.get("end_address"),
                polyline=(routes[0].get("overview_polyline") or {}).get("points", ""),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise ParseError(
                message="Directions API route leg has an unexpected shape",
                body=str(leg),
                context={"error": str(e)},
            ) from e

        logger.info(
            "Route found: %s, %s (%s → %s)",
            route.distance.text,
            route.duration.text,
            route.start_address or origin,
            route.end_address or destination,
        )
        return route


class PlacesClient(_GoogleMapsClient):
    """Google Places Text Search."""

    api_name = "Places API"

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        api_key: str,
        url: str,
        bias_radius_m: int = 100,
    ):
        super().__init__(http_client, api_key, url)
        self._bias_radius_m = bias_radius_m

    async def search_text(self, query: str, location_bias: Optional[str] = None) -> PlacesResult:
        """
        Text search, optionally biased toward a 'lat,lng' location.

        ZERO_RESULTS is a normal answer and yields an empty result list.
        """
        params: Dict[str, Any] = {"query": query}
        if location_bias:
            params["location"] = location_bias
            params["radius"] = self._bias_radius_m

        body = await self._get_json(params)
        status = body.get("status", "")
        if status not in PLACES_OK_STATUSES:
            error_message = body.get("error_message", "")
            raise UpstreamError(
                message=f"Places API returned status '{status}'",
                upstream_status=status,
                body=error_message or None,
            )

        try:
            venues = [
                self._to_venue(item) for item in body.get("results") or [] if isinstance(item, dict)
            ]
        except (KeyError, TypeError, ValueError) as e:
            raise ParseError(
                message="Places API result has an unexpected shape",
                body=str(body.get("results")),
                context={"query": query, "error": str(e)},
            ) from e

        logger.info(
            "Places search %r (bias=%s): %s, %d results",
            query,
            location_bias or "-",
            status,
            len(venues),
        )
        return PlacesResult(status=status, results=venues)

    @staticmethod
    def _to_venue(item: Dict[str, Any]) -> Venue:
        location = (item.get("geometry") or {}).get("location")
        rating = item.get("rating")
        return Venue(
            place_id=item.get("place_id", ""),
            name=item.get("name", ""),
            formatted_address=item.get("formatted_address", ""),
            location=LatLng(**location) if isinstance(location, dict) and "lat" in location else None,
            rating=float(rating) if isinstance(rating, (int, float)) else None,
        )
