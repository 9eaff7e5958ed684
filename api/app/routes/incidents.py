"""Incident endpoints. Any authenticated caller may manage any incident."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.redis import invalidate_pattern
from app.middleware.audit import log_audit
from app.middleware.auth import CurrentUser
from app.schemas import IncidentCreate, IncidentResponse, IncidentStatusUpdate, MessageResponse
from app.services import incidents as incident_service

router = APIRouter(prefix="/incidents", tags=["incidents"])


@router.post("", response_model=IncidentResponse, status_code=201)
async def create_incident(
    body: IncidentCreate,
    user: CurrentUser,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    incident = await incident_service.create_incident(db, body.model_dump())
    await log_audit(
        db,
        user_id=user.id,
        action="create_incident",
        resource_type="incident",
        resource_id=str(incident.id),
    )
    await db.commit()
    await invalidate_pattern("dashboard:*")
    return IncidentResponse.model_validate(incident)


@router.get("", response_model=list[IncidentResponse])
async def list_incidents(
    user: CurrentUser,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """All incidents, newest first."""
    incidents = await incident_service.list_incidents(db)
    return [IncidentResponse.model_validate(i) for i in incidents]


@router.get("/{incident_id}", response_model=IncidentResponse)
async def get_incident(
    incident_id: str,
    user: CurrentUser,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    incident = await incident_service.get_incident(db, incident_id)
    return IncidentResponse.model_validate(incident)


@router.patch("/{incident_id}/status", response_model=IncidentResponse)
async def update_incident_status(
    incident_id: str,
    body: IncidentStatusUpdate,
    user: CurrentUser,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    incident = await incident_service.update_incident_status(db, incident_id, body.status.value)
    await log_audit(
        db,
        user_id=user.id,
        action="update_incident_status",
        resource_type="incident",
        resource_id=incident_id,
        details={"status": body.status.value},
    )
    await db.commit()
    await invalidate_pattern("dashboard:*")
    return IncidentResponse.model_validate(incident)


@router.delete("/{incident_id}", response_model=MessageResponse)
async def delete_incident(
    incident_id: str,
    user: CurrentUser,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    result = await incident_service.delete_incident(db, incident_id)
    await log_audit(
        db,
        user_id=user.id,
        action="delete_incident",
        resource_type="incident",
        resource_id=incident_id,
    )
    await db.commit()
    await invalidate_pattern("dashboard:*")
    return result
