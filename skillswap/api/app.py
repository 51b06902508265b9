"""
FastAPI application factory.
"""

import time
import uuid
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from skillswap import __version__
from skillswap.api.dependencies import cleanup_dependencies
from skillswap.api.routes import (
    assignments,
    credibility,
    feedback,
    health,
    session_requests,
    sessions,
    skill_scores,
    users,
)
from skillswap.config.settings import get_settings
from skillswap.errors import SkillSwapError
from skillswap.observability.logging import bind_context, clear_context

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    logger.info("skillswap API starting up")

    yield

    logger.info("skillswap API shutting down")
    await cleanup_dependencies()


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application
    """
    settings = get_settings()

    openapi_tags = [
        {"name": "health", "description": "Service health checks"},
        {"name": "skill-scores", "description": "Per-skill 0-100 scores"},
        {"name": "credibility", "description": "Per-user credibility score and dashboard"},
        {"name": "users", "description": "Registration, profiles and skill listings"},
        {"name": "requests", "description": "Session requests: send, accept, confirm"},
        {"name": "sessions", "description": "Session scheduling and completion"},
        {"name": "feedback", "description": "Session feedback ratings"},
        {"name": "assignments", "description": "Post-session assignments and grading"},
    ]

    app = FastAPI(
        title="skillswap API",
        description="""
Peer-tutoring backend with skill and credibility scoring.

## Scoring

Completing a session, submitting feedback and grading an assignment
recompute the affected users' skill and credibility scores. Scoring
failures never fail the action; they are reported in the response's
`scoring` block.

## Authentication

Requires `X-API-KEY` (unless no keys are configured) and `X-User-ID`
identifying the acting user, for all requests except `/health`.
        """,
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
        openapi_tags=openapi_tags,
    )

    # Add CORS middleware (origins from CORS_ORIGINS env var, comma-separated)
    cors_origins = [o.strip() for o in settings.cors_origins.split(",") if o.strip()]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )

    # Request logging and correlation ID middleware
    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        request_id = (
            request.headers.get("X-Request-ID")
            or request.headers.get("X-Correlation-ID")
            or str(uuid.uuid4())
        )
        bind_context(request_id=request_id)

        start_time = time.perf_counter()
        try:
            response = await call_next(request)
            duration = time.perf_counter() - start_time

            response.headers["X-Request-ID"] = request_id

            logger.info(
                "HTTP request",
                method=request.method,
                path=request.url.path,
                status_code=response.status_code,
                duration_ms=round(duration * 1000, 2),
            )
            return response
        finally:
            clear_context()

    @app.exception_handler(SkillSwapError)
    async def domain_exception_handler(request: Request, exc: SkillSwapError):
        if exc.status_code >= 500:
            logger.error("Request failed", error=exc.message, error_type=exc.error_type)
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.message, "error_type": exc.error_type},
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled exception: {exc}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error", "error_type": "internal"},
        )

    # Include routers
    app.include_router(health.router, tags=["health"])
    app.include_router(skill_scores.router, tags=["skill-scores"])
    app.include_router(credibility.router, tags=["credibility"])
    app.include_router(users.router, tags=["users"])
    app.include_router(session_requests.router, tags=["requests"])
    app.include_router(sessions.router, tags=["sessions"])
    app.include_router(feedback.router, tags=["feedback"])
    app.include_router(assignments.router, tags=["assignments"])

    @app.get("/", include_in_schema=False)
    async def root():
        return {
            "service": "skillswap API",
            "version": __version__,
            "docs": "/docs",
        }

    return app
