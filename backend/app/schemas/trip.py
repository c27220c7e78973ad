"""
Ulyngo Backend — Trip Planning Schemas
========================================

What:  Pydantic models for the trip-planning flow and the map endpoints:
       the request bodies, the structured intent extracted by the language
       model, and the normalised Directions / Places results.
How:   None of these are persisted (except a RouteResult copied into a saved
       route's route_data). Upstream payloads are reduced to these shapes by
       the clients in app.services.google_maps_service.

Response shape of POST /api/plan-trip:
    {
        "interpretation":   ExtractedIntent,
        "main_route":       RouteResult,
        "suggested_stops":  {<stop query>: PlacesResult, ...},
        "return_trip_shop": PlacesResult        (omitted when absent)
    }
"""

import uuid
from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, field_validator


# ══════════════════════════════════════════════════════════════════════════
# Requests
# ══════════════════════════════════════════════════════════════════════════


class TripQuery(BaseModel):
    """Body of POST /api/plan-trip."""

    query: str = Field(
        min_length=1,
        description="Free-text trip request, e.g. 'pengen ke braga jajan cimol'",
    )
    origin: str = Field(
        min_length=1,
        description="Starting point: an address or a 'lat,lng' pair",
    )

    model_config = {"frozen": True}


class PlaceSearchRequest(BaseModel):
    """Body of POST /api/places/search."""

    query: str = Field(min_length=1, description="Free-text place query")
    location_bias: Optional[str] = Field(
        default=None,
        description="Optional 'lat,lng' to prefer nearby results",
    )


class SaveRouteRequest(BaseModel):
    """Body of POST /api/routes."""

    origin: str = Field(min_length=1)
    destination: str = Field(min_length=1)
    name: Optional[str] = Field(default=None, max_length=255)
    is_public: bool = False


# ══════════════════════════════════════════════════════════════════════════
# Intent extraction
# ══════════════════════════════════════════════════════════════════════════


class TravelMode(BaseModel):
    """
    Travel mode inferred by the language model.

    Kept in the interpretation returned to clients; nothing downstream
    consumes it (routes are always requested with the Directions default).
    """

    mode: str = ""
    preferences: List[str] = Field(default_factory=list)

    @field_validator("mode", mode="before")
    @classmethod
    def coerce_mode(cls, v):
        return v.strip() if isinstance(v, str) else ""

    @field_validator("preferences", mode="before")
    @classmethod
    def coerce_preferences(cls, v):
        if isinstance(v, str):
            v = [v]
        if not isinstance(v, list):
            return []
        return [p.strip() for p in v if isinstance(p, str) and p.strip()]


class ExtractedIntent(BaseModel):
    """
    Structured fields pulled out of a TripQuery sentence.

    An empty destination means extraction failed to find one; the planner
    treats that as a caller error.
    """

    destination: str = ""
    travel_mode: Optional[TravelMode] = None
    stops_along_the_way: List[str] = Field(default_factory=list)
    return_trip_plan: str = ""

    @field_validator("destination", "return_trip_plan", mode="before")
    @classmethod
    def strip_text(cls, v):
        if v is None:
            return ""
        return v.strip() if isinstance(v, str) else v

    @field_validator("stops_along_the_way", mode="before")
    @classmethod
    def clean_stops(cls, v):
        if v is None:
            return []
        if isinstance(v, list):
            return [s.strip() for s in v if isinstance(s, str) and s.strip()]
        return v

    @field_validator("travel_mode", mode="before")
    @classmethod
    def coerce_travel_mode(cls, v):
        # The prompt allows "{}" for "no information"
        if isinstance(v, str):
            return {"mode": v} if v.strip() else None
        if isinstance(v, dict):
            return v or None
        return None


# ══════════════════════════════════════════════════════════════════════════
# Directions
# ══════════════════════════════════════════════════════════════════════════


class LatLng(BaseModel):
    lat: float
    lng: float


class TextValue(BaseModel):
    """Google's {text, value} pair: '12.3 km' / 12345 metres, '25 mins' / 1500 s."""

    text: str = ""
    value: int = 0


class RouteResult(BaseModel):
    """First leg of the first route, plus the route's overview polyline."""

    distance: TextValue
    duration: TextValue
    start_location: LatLng
    end_location: LatLng
    start_address: Optional[str] = None
    end_address: Optional[str] = None
    polyline: str = Field(default="", description="Encoded overview polyline")


# ══════════════════════════════════════════════════════════════════════════
# Places
# ══════════════════════════════════════════════════════════════════════════


class Venue(BaseModel):
    place_id: str = ""
    name: str = ""
    formatted_address: str = ""
    location: Optional[LatLng] = None
    rating: Optional[float] = None


class PlacesResult(BaseModel):
    """One Places text search: 'OK' or 'ZERO_RESULTS' plus the venues found."""

    status: str
    results: List[Venue] = Field(default_factory=list)


# ══════════════════════════════════════════════════════════════════════════
# Aggregates
# ══════════════════════════════════════════════════════════════════════════


class TripPlan(BaseModel):
    """
    The sole response of POST /api/plan-trip.

    suggested_stops keeps the order of interpretation.stops_along_the_way;
    a stop whose lookup failed has no key. return_trip_shop is None when no
    return-trip plan was extracted or its lookup failed.
    """

    interpretation: ExtractedIntent
    main_route: RouteResult
    suggested_stops: Dict[str, PlacesResult] = Field(default_factory=dict)
    return_trip_shop: Optional[PlacesResult] = None


class SavedRouteResponse(BaseModel):
    id: uuid.UUID
    name: str
    origin_text: str
    destination_text: str
    origin_lat: Optional[float] = None
    origin_lng: Optional[float] = None
    destination_lat: Optional[float] = None
    destination_lng: Optional[float] = None
    distance_meters: Optional[int] = None
    duration_seconds: Optional[int] = None
    is_public: bool
    user_id: uuid.UUID
    route_data: RouteResult
    created_at: datetime

    model_config = {"from_attributes": True}
