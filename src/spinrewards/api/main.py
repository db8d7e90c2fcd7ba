"""Main FastAPI application for the rewards API."""

from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from starlette.middleware.base import BaseHTTPMiddleware

from spinrewards import __version__, notifications
from spinrewards.api.rate_limit import limiter
from spinrewards.api.v1.auth import router as auth_router
from spinrewards.api.v1.profile import router as profile_router
from spinrewards.api.v1.referral import router as referral_router
from spinrewards.api.v1.spins import router as spins_router
from spinrewards.api.v1.withdrawals import router as withdrawals_router
from spinrewards.errors import RewardsError
from spinrewards.logging_config import configure_logging, get_logger
from spinrewards.settings import settings
from spinrewards.storage.db import db

logger = get_logger(__name__)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add security headers to all responses."""

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)

        # Prevent clickjacking - don't allow embedding in iframes
        response.headers["X-Frame-Options"] = "DENY"

        # Prevent MIME type sniffing
        response.headers["X-Content-Type-Options"] = "nosniff"

        # Referrer Policy - don't leak URLs to other sites
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"

        return response


def _error_body(code: str, detail: str, title: str, **extra) -> dict:
    return {
        "detail": detail,
        "code": code,
        "notice": notifications.error(title, detail).model_dump(mode="json"),
        **extra,
    }


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    # Startup
    logger.info("app_starting", env=settings.env)

    # Initialize database tables
    db.create_tables()

    yield

    # Shutdown
    logger.info("app_shutting_down")


def create_app() -> FastAPI:
    """Create and configure FastAPI application.

    Returns:
        Configured FastAPI app
    """
    configure_logging()

    # Hide API docs in production
    is_production = settings.env == "production"

    app = FastAPI(
        title="Spin Rewards API",
        description="Daily spins, points, referrals and withdrawal requests",
        version=__version__,
        docs_url=None if is_production else "/api/docs",
        redoc_url=None if is_production else "/api/redoc",
        openapi_url=None if is_production else "/api/openapi.json",
        lifespan=lifespan,
    )

    # Security Headers middleware (must be added before CORS)
    app.add_middleware(SecurityHeadersMiddleware)

    # CORS middleware - credentials are required for the session cookie
    allowed_origins = [
        origin.strip()
        for origin in settings.allowed_origins.split(",")
        if origin.strip()
    ]

    # Block wildcard in production
    if is_production and "*" in allowed_origins:
        logger.error("cors_wildcard_blocked", message="Wildcard CORS not allowed in production")
        allowed_origins = []

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH", "OPTIONS"],
        allow_headers=["Content-Type", "Accept", "Idempotency-Key"],
        max_age=3600,  # Cache preflight for 1 hour
    )

    # Rate limiting (shared instance from rate_limit module)
    app.state.limiter = limiter

    @app.exception_handler(RateLimitExceeded)
    async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
        return JSONResponse(
            status_code=429,
            content=_error_body(
                "rate_limited",
                "Too many requests. Please try again later.",
                "Slow down",
            ),
        )

    @app.exception_handler(RewardsError)
    async def rewards_error_handler(request: Request, exc: RewardsError):
        logger.info(
            "request_rejected",
            path=request.url.path,
            code=exc.code,
            status=exc.status_code,
            detail=exc.message,
        )
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(exc.code, exc.message, exc.title),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=400,
            content=_error_body(
                "validation_error",
                "Invalid request data",
                "Invalid request",
                errors=jsonable_encoder(exc.errors()),
            ),
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("unhandled_error", path=request.url.path, method=request.method)
        return JSONResponse(
            status_code=500,
            content=_error_body("internal_error", "Something went wrong", "Request failed"),
        )

    # Include v1 API routers
    app.include_router(auth_router, prefix="/api")
    app.include_router(spins_router, prefix="/api")
    app.include_router(withdrawals_router, prefix="/api")
    app.include_router(profile_router, prefix="/api")
    app.include_router(referral_router, prefix="/api")

    @app.get("/api/ping")
    async def ping():
        """Liveness probe."""
        return {"message": "pong", "time": datetime.now(timezone.utc).isoformat()}

    # Health check endpoint
    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {
            "status": "healthy",
            "version": __version__,
            "env": settings.env,
        }

    return app


# Create app instance
app = create_app()
