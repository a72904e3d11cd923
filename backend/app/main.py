"""Teacher Feedback Portal: FastAPI Application Entry Point."""

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from sqlalchemy.exc import SQLAlchemyError

from app.backend import Backend, build_backend
from app.config import Settings, settings as default_settings
from app.errors import StoreError
from app.middleware.rate_limit import bind_rate_limits, limiter
from app.routers import admin, auth, dashboards, feedback, screens, students, teachers
from app.services.route_guard import AccessDenied

logger = logging.getLogger(__name__)


async def access_denied_handler(request: Request, exc: AccessDenied):
    decision = exc.decision
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "detail": decision.notice,
            "state": decision.state,
            "redirect_to": decision.redirect_to,
        },
    )


async def store_error_handler(request: Request, exc: StoreError):
    logger.error("Store error (%s) on %s %s", exc.kind, request.method, request.url.path)
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "kind": exc.kind},
    )


async def database_error_handler(request: Request, exc: SQLAlchemyError):
    """Render database failures that no service wrapped as a StoreError."""
    return await store_error_handler(request, StoreError.from_exception(exc))


def create_app(settings: Optional[Settings] = None, backend: Optional[Backend] = None) -> FastAPI:
    """Build the application around an explicitly constructed backend."""
    settings = settings or (backend.settings if backend else default_settings)
    backend = backend or build_backend(settings)
    logging.basicConfig(level=settings.LOG_LEVEL.upper())

    backend.create_tables()

    app = FastAPI(
        title="Teacher Feedback Portal",
        description="Student feedback on teachers with role-based dashboards.",
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )
    app.state.backend = backend

    # Rate limiting
    app.state.limiter = limiter
    app.middleware("http")(bind_rate_limits)
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    app.add_exception_handler(AccessDenied, access_denied_handler)
    app.add_exception_handler(StoreError, store_error_handler)
    app.add_exception_handler(SQLAlchemyError, database_error_handler)

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[o.strip() for o in settings.ALLOWED_ORIGINS.split(",") if o.strip()],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Routers
    app.include_router(auth.router)
    app.include_router(students.router)
    app.include_router(feedback.router)
    app.include_router(teachers.router)
    app.include_router(admin.router)
    app.include_router(dashboards.router)
    app.include_router(screens.router)

    @app.get("/")
    def root():
        return {
            "name": "Teacher Feedback Portal API",
            "version": "1.0.0",
            "docs": "/docs",
        }

    @app.get("/health")
    def health():
        return {"status": "ok", "federated_sign_in": backend.federated is not None}

    return app


app = create_app()
