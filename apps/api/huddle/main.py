"""FastAPI application issuing room tokens and controlling room recordings."""
from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from .core.config import settings
from .core.errors import HuddleError
from .routers import recordings as recordings_router
from .routers import rtc as rtc_router

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

logger = logging.getLogger(__name__)

app = FastAPI(title="Huddle Room Control API", version="0.1.0")

if settings.cors_allow_origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials="*" not in settings.cors_allow_origins,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type"],
    )


@app.exception_handler(HuddleError)
async def huddle_error_handler(_request: Request, exc: HuddleError) -> JSONResponse:
    """Render service errors as ``{"error": ...}`` with their mapped status."""

    if exc.status_code >= 500:
        logger.error("%s: %s", type(exc).__name__, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_body())


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(_request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail}, headers=exc.headers)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(_request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": "Invalid request parameters"},
    )


app.include_router(rtc_router.router, prefix="/api", tags=["rtc"])
app.include_router(recordings_router.router, prefix="/api", tags=["recording"])
# the local development client requests tokens from /token on the token server port
app.include_router(rtc_router.router, include_in_schema=False)


@app.get("/api/health", tags=["meta"])
async def health() -> dict[str, str]:
    """Simple liveness check."""

    return {"status": "ok"}


@app.head("/api/health", tags=["meta"])
async def health_head() -> Response:
    """Allow HEAD for uptime monitors that only need the status code."""

    return Response(status_code=200)


def run() -> None:
    """Serve the API with uvicorn using the configured host and port."""

    import uvicorn

    missing = settings.missing_livekit_credentials()
    if missing:
        logger.warning("API credentials not configured (%s); token requests will fail", ", ".join(missing))
    logger.info("Token endpoint: http://%s:%s/token?identity=USERNAME&room=ROOM_NAME", settings.host, settings.port)
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())
