"""FastAPI application — SecOps Dashboard API."""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError

from app.core.config import get_settings
from app.core.exceptions import DomainError
from app.core.logging import get_logger, setup_logging
from app.routes import (
    auth,
    dashboard,
    health,
    incidents,
    projects,
    reports,
    search,
    threats,
    users,
)

settings = get_settings()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    if settings.auto_create_tables:
        from app.core.database import init_db
        await init_db()

    yield

    # Shutdown
    from app.core.database import engine
    from app.core.redis import redis_client
    await redis_client.aclose()
    await engine.dispose()


app = FastAPI(
    title="SecOps Dashboard API",
    description="Threats, incidents, projects, reports and search for the security operations dashboard",
    version="1.0.0",
    lifespan=lifespan,
    docs_url=f"{settings.api_prefix}/docs" if settings.environment != "production" else None,
    redoc_url=f"{settings.api_prefix}/redoc" if settings.environment != "production" else None,
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(DomainError)
async def domain_error_handler(request: Request, exc: DomainError):
    logger.warning(
        "request_rejected",
        path=request.url.path,
        error_code=exc.error_code,
        detail=exc.message,
    )
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "error_code": exc.error_code},
    )


@app.exception_handler(IntegrityError)
async def integrity_error_handler(request: Request, exc: IntegrityError):
    logger.warning("integrity_violation", path=request.url.path, error=str(exc.orig))
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content={"detail": "Request conflicts with existing data", "error_code": "Conflict"},
    )


# Mount routes
PREFIX = settings.api_prefix
app.include_router(health.router, prefix=PREFIX)
app.include_router(auth.router, prefix=PREFIX)
app.include_router(projects.router, prefix=PREFIX)
app.include_router(incidents.router, prefix=PREFIX)
app.include_router(threats.router, prefix=PREFIX)
app.include_router(reports.router, prefix=PREFIX)
app.include_router(search.router, prefix=PREFIX)
app.include_router(users.router, prefix=PREFIX)
app.include_router(dashboard.router, prefix=PREFIX)


@app.get("/")
async def root():
    return {"message": "SecOps Dashboard API", "version": "1.0.0"}
