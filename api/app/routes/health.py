"""Health check endpoint."""

from __future__ import annotations

from fastapi import APIRouter
from sqlalchemy import text

from app.core.config import get_settings
from app.core.logging import get_logger
from app.core.redis import redis_client
from app.schemas import HealthResponse

logger = get_logger(__name__)

router = APIRouter(tags=["health"])
settings = get_settings()


@router.get("/health", response_model=HealthResponse)
async def health_check():
    db_ok = False
    redis_ok = False

    try:
        from app.core.database import engine
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        db_ok = True
    except Exception as e:
        logger.warning("health_database_down", error=str(e))

    try:
        await redis_client.ping()
        redis_ok = True
    except Exception as e:
        logger.warning("health_redis_down", error=str(e))

    return HealthResponse(
        status="ok" if (db_ok and redis_ok) else "degraded",
        version="1.0.0",
        database=db_ok,
        redis=redis_ok,
        environment=settings.environment,
    )
