"""
backend/clash_hub/main.py

Purpose:
    FastAPI application bootstrap: logging, CORS, sessions, routers,
    exception handlers, and lifespan-managed gateway/page state.

Dependencies:
    - clash_hub.config
    - clash_hub.providers.royale_api
    - clash_hub.services.pages
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.sessions import SessionMiddleware

from clash_hub.config import settings
from clash_hub.errors import ConfigurationError, TransportError
from clash_hub.middleware.logging import StructuredLoggingMiddleware, setup_logging
from clash_hub.providers.royale_api import RoyaleApiGateway
from clash_hub.services.hub_client import RoyaleHubClient
from clash_hub.services.pages import LocationCatalog, PageSessions

logger = logging.getLogger("clash_hub")


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    if not settings.CR_API_TOKEN.strip():
        logger.error("CR_API_TOKEN is not set; every upstream request will fail with 500")

    gateway = RoyaleApiGateway()
    hub_client = RoyaleHubClient(gateway)
    app.state.gateway = gateway
    app.state.hub_client = hub_client
    app.state.page_sessions = PageSessions(
        hub_client,
        page_size=settings.CLAN_PAGE_SIZE,
        max_sessions=settings.PAGE_SESSIONS_MAX,
    )
    app.state.location_catalog = LocationCatalog(hub_client)
    logger.info("Clash Hub gateway ready (upstream %s)", gateway.base_url)

    yield

    await gateway.aclose()


app = FastAPI(
    title="Clash Hub",
    description="Clash Royale fan site: API proxy and player/match/clan pages",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.BACKEND_CORS_ORIGINS.split(","),
    allow_methods=["GET", "OPTIONS"],
    allow_headers=["Content-Type"],
)

# Session middleware (per-browser clan search state and display preferences)
app.add_middleware(
    SessionMiddleware,
    secret_key=settings.SESSION_SECRET,
    max_age=settings.SESSION_MAX_AGE_SECONDS,
)

# Structured logging
app.add_middleware(StructuredLoggingMiddleware)

# Routers
from clash_hub.routers.proxy import router as proxy_router
from clash_hub.routers.pages import router as pages_router
from clash_hub.routers.settings import router as settings_router

app.include_router(proxy_router)
app.include_router(pages_router)
app.include_router(settings_router)


@app.exception_handler(ConfigurationError)
async def configuration_error_handler(request: Request, exc: ConfigurationError):
    # Never echo which setting is missing.
    logger.error("Configuration error on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=500, content={"error": "Internal Server Error"})


@app.exception_handler(TransportError)
async def transport_error_handler(request: Request, exc: TransportError):
    logger.error("Upstream unreachable on %s %s: %r", request.method, request.url.path, exc.__cause__)
    return JSONResponse(status_code=500, content={"error": "Failed to reach the Clash Royale API"})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    """Return clean validation errors without leaking internal field paths."""
    errors = []
    for err in exc.errors():
        loc = err.get("loc", ())
        field = ".".join(str(l) for l in loc[1:]) if len(loc) > 1 else str(loc[-1]) if loc else "unknown"
        errors.append({"field": field, "message": err.get("msg", "Invalid value.")})
    return JSONResponse(status_code=422, content={"error": "Validation error", "errors": errors})


@app.exception_handler(ValueError)
async def value_error_handler(request: Request, exc: ValueError):
    logger.warning("ValueError on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=400, content={"error": "Invalid input"})


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    """Catch-all: log the real error, return a safe generic message."""
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"error": "Internal Server Error"})


@app.get("/health")
async def health():
    """Liveness plus whether the upstream credential is configured."""
    return {
        "status": "healthy" if settings.CR_API_TOKEN.strip() else "degraded",
        "upstream": settings.ROYALE_API_BASE_URL,
        "token_configured": bool(settings.CR_API_TOKEN.strip()),
    }
