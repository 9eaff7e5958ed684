"""Dashboard statistics."""

from __future__ import annotations

import uuid

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.models import Incident, IncidentStatus, Project, Report, Threat
from app.services.repository import Repository
from app.services.threats import severity_breakdown


async def incident_status_breakdown(db: AsyncSession) -> dict[str, int]:
    rows = await db.execute(
        select(Incident.status, func.count(Incident.id)).group_by(Incident.status)
    )
    counts = {row[0]: row[1] for row in rows}
    return {s.value: counts.get(s.value, 0) for s in IncidentStatus}


async def get_dashboard_stats(db: AsyncSession, caller_id: uuid.UUID) -> dict:
    """Totals are global except projects, which count only the caller's own."""
    return {
        "total_threats": await Repository(db, Threat).count(),
        "total_incidents": await Repository(db, Incident).count(),
        "open_incidents": await Repository(db, Incident).count(
            Incident.status.in_(("open", "investigating"))
        ),
        "total_projects": await Repository(db, Project).count(Project.owner_id == caller_id),
        "total_reports": await Repository(db, Report).count(),
        "threat_severity": await severity_breakdown(db),
        "incident_status": await incident_status_breakdown(db),
        "recent_incidents": await Repository(db, Incident).find_many(
            order_by=Incident.created_at.desc(), limit=5
        ),
    }
