"""Incident service. Incidents are shared: any authenticated caller may manage any incident."""

from __future__ import annotations

import uuid

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import NotFoundError
from app.core.logging import get_logger
from app.models.models import Incident
from app.services.repository import Repository, parse_id

logger = get_logger(__name__)


async def create_incident(db: AsyncSession, data: dict) -> Incident:
    """Create an incident in status ``open``.

    ``project_id`` is stored as given; whether it points at a real project is
    left to the foreign key.
    """
    values = {"title": data["title"]}
    if data.get("project_id") is not None:
        values["project_id"] = parse_id(data["project_id"])
    incident = await Repository(db, Incident).create(**values)
    logger.info("incident_created", incident_id=str(incident.id), project_id=str(incident.project_id))
    return incident


async def list_incidents(db: AsyncSession) -> list[Incident]:
    return await Repository(db, Incident).find_many(order_by=Incident.created_at.desc())


async def get_incident(db: AsyncSession, incident_id: uuid.UUID | str) -> Incident:
    incident = await Repository(db, Incident).find_by_id(incident_id)
    if incident is None:
        raise NotFoundError("Incident not found")
    return incident


async def update_incident_status(db: AsyncSession, incident_id: uuid.UUID | str, status: str) -> Incident:
    """Move an incident to ``status``. There is no transition graph; any status may follow any other."""
    repo = Repository(db, Incident)
    if not await repo.update_by_id(incident_id, {"status": status}):
        raise NotFoundError("Incident not found")
    logger.info("incident_status_updated", incident_id=str(incident_id), status=status)
    return await get_incident(db, incident_id)


async def delete_incident(db: AsyncSession, incident_id: uuid.UUID | str) -> dict:
    if not await Repository(db, Incident).delete_by_id(incident_id):
        raise NotFoundError("Incident not found")
    logger.info("incident_deleted", incident_id=str(incident_id))
    return {"message": "Incident deleted successfully"}
