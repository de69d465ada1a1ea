"""
Events tracker backend: FastAPI application.

Wires together:
- SessionMiddleware (signed cookie holding the server-side session GUID)
- Request ID / access logging and CORS
- slowapi rate limiting for register and login
- Error handlers that render every failure as {"error": ...}
- The auth and events routers under EVENTS_API_PREFIX

Run with:
    uvicorn backend.src.main:app --reload
"""

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.sessions import SessionMiddleware

from backend.src.api import auth, events
from backend.src.config.session import generate_secret_key, get_session_settings
from backend.src.config.settings import get_settings
from backend.src.middleware.request_logging import RequestLoggingMiddleware
from backend.src.utils.logging_config import get_logger, init_logging


APP_VERSION = "1.0.0"

init_logging()
logger = get_logger("api")

settings = get_settings()
session_settings = get_session_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(
        "Events tracker backend starting",
        extra={"version": APP_VERSION, "environment": settings.environment},
    )
    yield
    logger.info("Events tracker backend stopped")


app = FastAPI(
    title="Events Tracker API",
    description="Team-scoped calendar events with optimistic concurrency control.",
    version=APP_VERSION,
    lifespan=lifespan,
)


# ============================================================================
# Middleware
# ============================================================================

secret_key = session_settings.secret_key
if not secret_key:
    logger.warning(
        "SESSION_SECRET_KEY is not set; using a random key. "
        "Sessions will not survive a restart.",
        extra={"event": "config.session_key.generated"},
    )
    secret_key = generate_secret_key()

app.add_middleware(SessionMiddleware, **session_settings.middleware_options(secret_key))
app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID"],
)

app.state.limiter = auth.limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


# ============================================================================
# Error handlers
# ============================================================================


def _request_fields(request: Request) -> Dict[str, Any]:
    return {
        "path": request.url.path,
        "method": request.method,
        "request_id": getattr(request.state, "request_id", None),
    }


def _error_response(
    status_code: int, content: Dict[str, Any], headers: Optional[Dict[str, str]] = None
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code, content=jsonable_encoder(content), headers=headers
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """
    Routes raise HTTPException with a dict detail such as
    {"error": "Event not found"}; that dict is the response body.
    String details are wrapped as {"error": detail}.
    """
    content = exc.detail if isinstance(exc.detail, dict) else {"error": exc.detail}
    return _error_response(exc.status_code, content, getattr(exc, "headers", None))


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed bodies and query strings are 400 with the pydantic error list."""
    details = jsonable_encoder(exc.errors())
    logger.warning(
        "Request validation failed",
        extra={**_request_fields(request), "errors": details},
    )
    return _error_response(
        status.HTTP_400_BAD_REQUEST,
        {"error": "Validation failed", "details": details},
    )


@app.exception_handler(SQLAlchemyError)
async def database_exception_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    get_logger("db").error(
        "Database error",
        extra={**_request_fields(request), "error": str(exc)},
    )
    return _error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        {"error": "Database error", "message": "The request could not be completed."},
    )


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "Unhandled exception",
        extra={**_request_fields(request), "error_type": type(exc).__name__, "error": str(exc)},
        exc_info=True,
    )
    return _error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        {"error": "Internal server error"},
    )


# ============================================================================
# Routes
# ============================================================================


@app.get("/health", tags=["Health"])
async def health_check() -> Dict[str, str]:
    """Liveness probe with the server's current UTC time."""
    now = datetime.now(timezone.utc).replace(microsecond=0)
    return {"status": "ok", "timestamp": now.isoformat().replace("+00:00", "Z")}


@app.get("/", tags=["Root"])
async def root() -> Dict[str, str]:
    return {"name": "Events Tracker API", "version": APP_VERSION, "docs": "/docs"}


app.include_router(auth.router, prefix=settings.api_prefix)
app.include_router(events.router, prefix=settings.api_prefix)
