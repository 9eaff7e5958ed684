"""Global search across threats, incidents and the caller's own projects."""

from __future__ import annotations

import uuid

from sqlalchemy import String, cast, or_
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.models import Incident, Project, Threat
from app.services.repository import Repository


def _contains(column, query: str):
    # Enum columns are cast so the match works on PostgreSQL native enums too;
    # autoescape makes % and _ in the query match literally.
    return cast(column, String).icontains(query, autoescape=True)


async def search_threats(db: AsyncSession, query: str) -> list[Threat]:
    return await Repository(db, Threat).find_many(
        or_(
            _contains(Threat.title, query),
            _contains(Threat.description, query),
            _contains(Threat.severity, query),
        ),
        order_by=Threat.created_at.desc(),
    )


async def search_incidents(db: AsyncSession, query: str) -> list[Incident]:
    return await Repository(db, Incident).find_many(
        or_(
            _contains(Incident.title, query),
            _contains(Incident.status, query),
        ),
        order_by=Incident.created_at.desc(),
    )


async def search_projects(db: AsyncSession, query: str, owner_id: uuid.UUID) -> list[Project]:
    """Only the caller's projects are searchable; search must not widen project visibility."""
    return await Repository(db, Project).find_many(
        Project.owner_id == owner_id,
        or_(
            _contains(Project.name, query),
            _contains(Project.description, query),
        ),
        order_by=Project.created_at.desc(),
    )


async def global_search(db: AsyncSession, query: str, caller_id: uuid.UUID) -> dict:
    # One AsyncSession cannot run statements concurrently, so the three lookups are sequential.
    threats = await search_threats(db, query)
    incidents = await search_incidents(db, query)
    projects = await search_projects(db, query, caller_id)
    return {
        "query": query,
        "threats": threats,
        "incidents": incidents,
        "projects": projects,
        "total_results": len(threats) + len(incidents) + len(projects),
    }
