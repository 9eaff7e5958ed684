"""Threat catalogue service: CRUD plus the aggregate analysis shown on the AI assistant page."""

from __future__ import annotations

import uuid

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import NotFoundError
from app.core.logging import get_logger
from app.models.models import Threat, ThreatSeverity
from app.services.repository import Repository

logger = get_logger(__name__)

UPDATABLE_FIELDS = ("title", "description", "severity")

AI_RECOMMENDATIONS = [
    "Implement additional input validation",
    "Enable rate limiting on API endpoints",
    "Update security headers configuration",
    "Conduct regular security audits",
]


async def create_threat(db: AsyncSession, data: dict) -> Threat:
    threat = await Repository(db, Threat).create(
        title=data["title"],
        description=data["description"],
        severity=data["severity"],
    )
    logger.info("threat_created", threat_id=str(threat.id), severity=threat.severity)
    return threat


async def list_threats(db: AsyncSession) -> list[Threat]:
    return await Repository(db, Threat).find_many(order_by=Threat.created_at.desc())


async def get_threat(db: AsyncSession, threat_id: uuid.UUID | str) -> Threat:
    threat = await Repository(db, Threat).find_by_id(threat_id)
    if threat is None:
        raise NotFoundError("Threat not found")
    return threat


async def update_threat(db: AsyncSession, threat_id: uuid.UUID | str, patch: dict) -> Threat:
    repo = Repository(db, Threat)
    values = {k: v for k, v in patch.items() if k in UPDATABLE_FIELDS and v is not None}
    if not values:
        return await get_threat(db, threat_id)
    if not await repo.update_by_id(threat_id, values):
        raise NotFoundError("Threat not found")
    logger.info("threat_updated", threat_id=str(threat_id), fields=list(values))
    return await get_threat(db, threat_id)


async def delete_threat(db: AsyncSession, threat_id: uuid.UUID | str) -> dict:
    if not await Repository(db, Threat).delete_by_id(threat_id):
        raise NotFoundError("Threat not found")
    logger.info("threat_deleted", threat_id=str(threat_id))
    return {"message": "Threat deleted successfully"}


async def severity_breakdown(db: AsyncSession) -> dict[str, int]:
    """Count threats per severity; every severity is present, zero if unused."""
    rows = await db.execute(
        select(Threat.severity, func.count(Threat.id)).group_by(Threat.severity)
    )
    counts = {row[0]: row[1] for row in rows}
    return {s.value: counts.get(s.value, 0) for s in reversed(ThreatSeverity)}


async def analyze_threats(db: AsyncSession) -> dict:
    repo = Repository(db, Threat)
    recent = await repo.find_many(order_by=Threat.created_at.desc(), limit=5)
    return {
        "analysis": {
            "total_threats": await repo.count(),
            "severity_breakdown": await severity_breakdown(db),
            "recent_threats": recent,
            "ai_recommendations": list(AI_RECOMMENDATIONS),
        },
        "message": "AI analysis completed successfully",
    }
