"""
Ulyngo Backend — FastAPI Application Factory
==============================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() wires middleware, exception handlers and routers; the
       lifespan builds the shared outbound components and tears them down.
Who:   uvicorn (`uvicorn app.main:app`), tests (`create_app()` + ASGITransport).

Application Architecture:
    ┌──────────────────────────────────────────────────────────────┐
    │                        FastAPI App                           │
    │                                                              │
    │  Middleware: Request ID → Rate Limit → Access Log → GZip     │
    │              → CORS                                          │
    │                                                              │
    │  Routers: auth │ travel │ markers │ taxonomy │ health        │
    │                                                              │
    │  app.state (built in lifespan):                              │
    │    http_client ─┬─ VertexIntentExtractor ─┐                  │
    │                 ├─ DirectionsClient ──────┼─ TripPlanner     │
    │                 └─ PlacesClient ──────────┘                  │
    │                                                              │
    │  Exception handlers: UlyngoError → its status │              │
    │    RequestValidationError → 400 │ Exception → 500            │
    └──────────────────────────────────────────────────────────────┘
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator

import httpx
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from app import __version__
from app.config import Settings, settings
from app.database import dispose_engine
from app.exceptions import RateLimitExceededError, UlyngoError
from app.middleware.logging import RequestLoggingMiddleware
from app.middleware.rate_limit import RateLimitMiddleware
from app.middleware.request_id import RequestIDMiddleware, request_id_var
from app.routes import auth, health, markers, taxonomy, travel
from app.services.google_maps_service import DirectionsClient, PlacesClient
from app.services.trip_planner import TripPlanner
from app.services.vertex_service import VertexIntentExtractor

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )
    # httpx logs full request URLs at INFO, which would include the Maps key
    for noisy in ("uvicorn.access", "sqlalchemy.engine", "httpcore", "httpx"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Outbound Components
# ══════════════════════════════════════════════════════════════════════════

def build_components(app: FastAPI, config: Settings) -> httpx.AsyncClient:
    """
    Builds the shared HTTP client, the three API clients and the planner and
    stores them on app.state. Returns the HTTP client so the caller can close it.
    """
    http_client = httpx.AsyncClient(timeout=httpx.Timeout(config.http_timeout_seconds))

    extractor = VertexIntentExtractor(
        http_client,
        project_id=config.google_vertex_ai_project_id,
        location=config.google_vertex_ai_location,
        model=config.vertex_model,
    )
    directions = DirectionsClient(
        http_client, api_key=config.google_maps_api_key, url=config.directions_api_url
    )
    places = PlacesClient(
        http_client,
        api_key=config.google_maps_api_key,
        url=config.places_text_search_url,
        bias_radius_m=config.places_bias_radius_m,
    )

    app.state.http_client = http_client
    app.state.intent_extractor = extractor
    app.state.directions_client = directions
    app.state.places_client = places
    app.state.trip_planner = TripPlanner(extractor, directions, places)
    return http_client


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Startup:  logging, config check (logged, never fatal), outbound components.
    Shutdown: close the shared HTTP client, dispose the database engine.
    """
    setup_logging(settings.log_level)
    logger.info("=" * 60)
    logger.info("Ulyngo Backend %s starting up...", __version__)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        # Keep serving: requests that need a missing value fail with ConfigurationError
        logger.error("%s", e)

    http_client = build_components(app, settings)

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    logger.info("Ulyngo Backend shutting down...")
    await http_client.aclose()
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _request_id(request: Request) -> str:
    return request_id_var.get("") or getattr(request.state, "request_id", "")


def _error_body(request: Request, error: str, code: str, details=None) -> dict:
    return {
        "error": error,
        "code": code,
        "details": details,
        "request_id": _request_id(request),
    }


def _flatten_validation_errors(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        location = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        parts.append(f"{location}: {err.get('msg')}" if location else str(err.get("msg")))
    return "; ".join(parts)


def register_exception_handlers(app: FastAPI) -> None:
    """
    Every error leaves as {"error", "code", "details", "request_id"}.

        UlyngoError subclasses  → exc.status_code, details as raised
        RateLimitExceededError  → 429 + Retry-After
        RequestValidationError  → 400 "Invalid request body"
        Exception               → 500, generic message, traceback logged
    """

    @app.exception_handler(RateLimitExceededError)
    async def handle_rate_limit(request: Request, exc: RateLimitExceededError):
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(request, exc.message, exc.code),
            headers={"Retry-After": str(exc.retry_after)},
        )

    @app.exception_handler(UlyngoError)
    async def handle_ulyngo_error(request: Request, exc: UlyngoError):
        rid = _request_id(request)
        if exc.status_code >= 500:
            logger.error(
                "[%s] %s: %s | details=%s | context=%s",
                rid, type(exc).__name__, exc.message, exc.details, exc.context,
            )
        else:
            logger.info("[%s] %s: %s", rid, type(exc).__name__, exc.message)
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(request, exc.message, exc.code, exc.details),
        )

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        details = _flatten_validation_errors(exc)
        logger.info("[%s] Invalid request body: %s", _request_id(request), details)
        return JSONResponse(
            status_code=400,
            content=_error_body(request, "Invalid request body", "bad_request", details),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error("[%s] Unexpected error: %s", _request_id(request), exc, exc_info=True)
        return JSONResponse(
            status_code=500,
            content=_error_body(
                request,
                "An unexpected error occurred. Please try again or contact support.",
                "internal_server_error",
            ),
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    app = FastAPI(
        title="Ulyngo API",
        description=(
            "Travel planning from free-text requests (Vertex AI Gemini + Google Maps) "
            "and a curated catalog of map markers."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # Last added runs first: Request ID → Rate Limit → Access Log → GZip → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "Retry-After"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(
        RateLimitMiddleware,
        max_requests=settings.rate_limit_requests,
        window_seconds=settings.rate_limit_window,
    )
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.include_router(auth.router)
    app.include_router(travel.router)
    app.include_router(markers.router)
    app.include_router(taxonomy.router)
    app.include_router(health.router)

    return app


app = create_app()
