"""Threat catalogue endpoints."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.redis import invalidate_pattern
from app.middleware.audit import log_audit
from app.middleware.auth import CurrentUser
from app.schemas import (
    MessageResponse,
    ThreatAnalysisResponse,
    ThreatCreate,
    ThreatResponse,
    ThreatUpdate,
)
from app.services import threats as threat_service

router = APIRouter(prefix="/threats", tags=["threats"])


@router.post("", response_model=ThreatResponse, status_code=201)
async def create_threat(
    body: ThreatCreate,
    user: CurrentUser,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    threat = await threat_service.create_threat(db, body.model_dump(mode="json"))
    await log_audit(
        db,
        user_id=user.id,
        action="create_threat",
        resource_type="threat",
        resource_id=str(threat.id),
    )
    await db.commit()
    await invalidate_pattern("dashboard:*")
    return ThreatResponse.model_validate(threat)


@router.get("", response_model=list[ThreatResponse])
async def list_threats(
    user: CurrentUser,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    threats = await threat_service.list_threats(db)
    return [ThreatResponse.model_validate(t) for t in threats]


@router.get("/analysis", response_model=ThreatAnalysisResponse)
async def analyze_threats(
    user: CurrentUser,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Aggregate counts per severity, the five newest threats and standing recommendations."""
    return ThreatAnalysisResponse.model_validate(
        await threat_service.analyze_threats(db), from_attributes=True
    )


@router.get("/{threat_id}", response_model=ThreatResponse)
async def get_threat(
    threat_id: str,
    user: CurrentUser,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    return ThreatResponse.model_validate(await threat_service.get_threat(db, threat_id))


@router.put("/{threat_id}", response_model=ThreatResponse)
async def update_threat(
    threat_id: str,
    body: ThreatUpdate,
    user: CurrentUser,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    patch = body.model_dump(exclude_unset=True, mode="json")
    threat = await threat_service.update_threat(db, threat_id, patch)
    await log_audit(
        db,
        user_id=user.id,
        action="update_threat",
        resource_type="threat",
        resource_id=threat_id,
        details=patch,
    )
    await db.commit()
    await invalidate_pattern("dashboard:*")
    return ThreatResponse.model_validate(threat)


@router.delete("/{threat_id}", response_model=MessageResponse)
async def delete_threat(
    threat_id: str,
    user: CurrentUser,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    result = await threat_service.delete_threat(db, threat_id)
    await log_audit(
        db,
        user_id=user.id,
        action="delete_threat",
        resource_type="threat",
        resource_id=threat_id,
    )
    await db.commit()
    await invalidate_pattern("dashboard:*")
    return result
