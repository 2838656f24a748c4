"""ohabits Sync API - FastAPI application."""

import asyncio
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from ohabits.logging_config import configure_logging, get_logger
from ohabits.sync import SyncReadError

from .config import get_settings
from .database import Store
from .rate_limit import limiter
from .routes import sync_router

logger = get_logger("api")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    # Startup
    settings = get_settings()
    configure_logging(settings.log_level)
    logger.info(f"Starting ohabits Sync API (debug={settings.debug})")
    yield
    # Shutdown
    logger.info("Shutting down ohabits Sync API")


app = FastAPI(
    title="ohabits Sync API",
    description="Offline-first sync for the ohabits native clients",
    version="0.1.0",
    lifespan=lifespan,
)


def _error(status_code: int, message: str, headers: dict | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"status": "error", "error": message},
        headers=headers,
    )


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return _error(exc.status_code, str(exc.detail), getattr(exc, "headers", None))


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    parts = []
    for error in exc.errors():
        location = ".".join(str(p) for p in error.get("loc", ()) if p != "body")
        parts.append(f"{location or 'body'}: {error.get('msg', 'invalid')}")
    return _error(422, "; ".join(parts) or "Invalid request")


@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
    return _error(status.HTTP_429_TOO_MANY_REQUESTS, f"Rate limit exceeded: {exc.detail}")


@app.exception_handler(SyncReadError)
async def sync_read_error_handler(request: Request, exc: SyncReadError):
    # Bucket and cause are already logged by the reader
    return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to retrieve sync data")


# Rate limiting
app.state.limiter = limiter

# CORS middleware
settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(sync_router)


@app.get("/")
async def root():
    """Liveness check."""
    return {
        "service": "ohabits-sync",
        "version": "0.1.0",
        "status": "ok",
    }


@app.get("/health")
async def health(store: Store):
    """Health check with an actual store query."""
    db_status = "disconnected"
    try:
        await asyncio.to_thread(store.ping)
        db_status = "connected"
    except Exception as e:
        db_status = f"error: {str(e)[:50]}"

    overall_status = "healthy" if db_status == "connected" else "degraded"

    return {
        "status": overall_status,
        "database": db_status,
    }
