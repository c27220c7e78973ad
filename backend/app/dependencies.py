"""
Ulyngo Backend — FastAPI Dependencies
=======================================

What:  Accessors for the components built in the lifespan, plus the
       bearer-token and admin guards.
How:   Components live on app.state; routes reach them through Depends()
       so tests can swap them with app.dependency_overrides.
"""

import uuid
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.exceptions import AuthenticationError, ConfigurationError, PermissionDeniedError
from app.schemas.auth import CurrentUser
from app.services.google_maps_service import DirectionsClient, PlacesClient
from app.services.security import decode_access_token
from app.services.trip_planner import TripPlanner

_bearer = HTTPBearer(auto_error=False)


def _from_state(request: Request, name: str):
    component = getattr(request.app.state, name, None)
    if component is None:
        raise ConfigurationError(message=f"{name} is not initialized")
    return component


def get_trip_planner(request: Request) -> TripPlanner:
    return _from_state(request, "trip_planner")


def get_directions_client(request: Request) -> DirectionsClient:
    return _from_state(request, "directions_client")


def get_places_client(request: Request) -> PlacesClient:
    return _from_state(request, "places_client")


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer),
) -> CurrentUser:
    """Caller identity from a verified `Authorization: Bearer <jwt>` header."""
    if credentials is None or not credentials.credentials:
        raise AuthenticationError(message="Authorization token required")

    claims = decode_access_token(credentials.credentials)
    try:
        return CurrentUser(
            id=uuid.UUID(claims["sub"]),
            username=claims.get("username", ""),
            role=claims.get("role", ""),
        )
    except (KeyError, ValueError) as e:
        raise AuthenticationError(message="Invalid or expired token") from e


async def require_admin(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
    if not user.is_admin:
        raise PermissionDeniedError()
    return user
