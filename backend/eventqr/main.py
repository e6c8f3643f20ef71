from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from typing import Any, Dict, List, Optional

from eventqr.core.config import Settings, settings
from eventqr.core.database import close_db, init_db
from eventqr.core.exceptions import EventQRError, StorageUnavailableError, ValidationError, error_response
from eventqr.core.logging_config import logger
from eventqr.core.middleware import RequestLoggingMiddleware, SecurityHeadersMiddleware
from eventqr.core.rate_limiter import limiter, rate_limit_exceeded_handler
from eventqr.api.router import api_router
from eventqr.modules.auth.session_cookie import clear_session_cookie
from eventqr.services.session_store import SessionSweeper, session_store
from slowapi.errors import RateLimitExceeded
import eventqr.models  # noqa: F401  Import models so metadata knows about them


# Resource named in the "Invalid ... data" message, by path prefix
VALIDATION_MESSAGES = (
    ("/api/register", "Invalid user data"),
    ("/api/login", "Invalid login data"),
    ("/api/users", "Invalid user data"),
    ("/api/events", "Invalid event data"),
    ("/api/registrations", "Invalid registration data"),
    ("/api/qr-settings", "Invalid QR settings data"),
    ("/api/form-schemas", "Invalid form schema data"),
)


async def validate_critical_config(config: Optional[Settings] = None):
    """Validate critical configuration at startup - fail fast if missing"""
    config = config or settings
    errors = []
    warnings = []

    if not config.DATABASE_URL:
        errors.append("DATABASE_URL is not set")

    if config.uses_default_secret():
        if config.is_production:
            errors.append("SECRET_KEY is not set or using default value")
        else:
            warnings.append("SECRET_KEY is the development placeholder")

    if config.is_production and not config.session_cookie_secure:
        warnings.append("SESSION_COOKIE_SECURE is off in production")

    if errors:
        for err in errors:
            logger.critical(f"[Startup] CRITICAL: {err}")
        raise RuntimeError(f"Missing critical configuration: {', '.join(errors)}")

    for warn in warnings:
        logger.warning(f"[Startup] WARNING: {warn}")

    logger.info("[Startup] Critical configuration validated")
    return True


async def ensure_database_ready() -> bool:
    """Create any missing tables"""
    try:
        await init_db()
        logger.info("[Startup] Database tables ready")
        return True
    except Exception as e:
        logger.error(f"[Startup] Failed to ensure database ready: {e}", exc_info=True)
        return False


session_sweeper = SessionSweeper(session_store)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan event handler for startup and shutdown"""
    logger.info("=" * 60)
    logger.info(f"Starting {settings.APP_NAME}...")
    logger.info(f"Environment: {settings.ENVIRONMENT}")
    logger.info("=" * 60)

    # Step 1: Validate critical configuration (fail fast!)
    await validate_critical_config()

    # Step 2: Ensure database tables exist
    if not await ensure_database_ready():
        logger.warning("[Startup] Database not ready - requests will fail until it is reachable")

    # Step 3: Periodic purge of expired sessions
    session_sweeper.start()

    yield

    logger.info(f"Shutting down {settings.APP_NAME}...")
    await session_sweeper.stop()
    await close_db()


# Create FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    description="Events, QR registration pages and attendee registrations",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
    redirect_slashes=False
)

# Add rate limiter state and exception handler
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

# Add middleware (order matters - last added runs first)
app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(SecurityHeadersMiddleware)
# Credentialed CORS: the session cookie has to travel with the browser's requests
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID", "X-Response-Time"],
)


def _validation_message(path: str) -> str:
    for prefix, message in VALIDATION_MESSAGES:
        if path.startswith(prefix):
            return message
    return "Invalid request data"


def _field_errors(exc: RequestValidationError) -> List[Dict[str, Any]]:
    errors = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")]
        errors.append({
            "field": ".".join(loc),
            "message": err.get("msg", ""),
            "type": err.get("type", ""),
        })
    return errors


# Exception handlers
@app.exception_handler(EventQRError)
async def eventqr_exception_handler(request: Request, exc: EventQRError):
    if isinstance(exc, StorageUnavailableError):
        logger.error(f"Storage unavailable on {request.method} {request.url.path}")

    response = JSONResponse(status_code=exc.status_code, content=error_response(exc))
    if getattr(request.state, "session_revoked", False):
        clear_session_cookie(response)
    return response


@app.exception_handler(RequestValidationError)
async def request_validation_exception_handler(request: Request, exc: RequestValidationError):
    error = ValidationError(_validation_message(request.url.path), _field_errors(exc))
    return JSONResponse(status_code=error.status_code, content=error_response(error))


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.log_error_with_context(exc, context=f"{request.method} {request.url.path}")
    content = {"message": "Internal server error"}
    if settings.DEBUG and not settings.is_production:
        content["detail"] = str(exc)
    return JSONResponse(status_code=500, content=content)


# Health check endpoint
@app.get("/health", tags=["Health"])
async def health_check():
    """Liveness only; see /api/health/ready for the database check"""
    return {
        "status": "healthy",
        "app_name": settings.APP_NAME,
        "version": "1.0.0",
        "environment": settings.ENVIRONMENT
    }


# Include API router
app.include_router(api_router, prefix="/api")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "eventqr.main:app",
        host=settings.SERVER_HOST,
        port=settings.SERVER_PORT,
        reload=settings.DEBUG
    )
