"""Project endpoints — every route is scoped to the authenticated owner.

- POST   /projects        — create a project owned by the caller
- GET    /projects        — list the caller's projects
- GET    /projects/{id}   — get one (404 missing, 403 not owner)
- PUT    /projects/{id}   — partial update (404, 403)
- DELETE /projects/{id}   — delete, detaching its incidents (404, 403)
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.redis import invalidate_pattern
from app.middleware.audit import log_audit
from app.middleware.auth import CurrentUser
from app.schemas import MessageResponse, ProjectCreate, ProjectResponse, ProjectUpdate
from app.services import projects as project_service

router = APIRouter(prefix="/projects", tags=["projects"])


@router.post("", response_model=ProjectResponse, status_code=201)
async def create_project(
    body: ProjectCreate,
    user: CurrentUser,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    project = await project_service.create_project(db, body.model_dump(), user.id)
    await log_audit(
        db,
        user_id=user.id,
        action="create_project",
        resource_type="project",
        resource_id=str(project.id),
        details={"name": project.name},
    )
    await db.commit()
    await invalidate_pattern("dashboard:*")
    return ProjectResponse.model_validate(project)


@router.get("", response_model=list[ProjectResponse])
async def list_projects(
    user: CurrentUser,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """List the caller's projects with their incidents."""
    projects = await project_service.list_projects(db, user.id)
    return [ProjectResponse.model_validate(p) for p in projects]


@router.get("/{project_id}", response_model=ProjectResponse)
async def get_project(
    project_id: str,
    user: CurrentUser,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    project = await project_service.get_project(db, project_id, user.id)
    return ProjectResponse.model_validate(project)


@router.put("/{project_id}", response_model=ProjectResponse)
async def update_project(
    project_id: str,
    body: ProjectUpdate,
    user: CurrentUser,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    patch = body.model_dump(exclude_unset=True)
    project = await project_service.update_project(db, project_id, patch, user.id)
    await log_audit(
        db,
        user_id=user.id,
        action="update_project",
        resource_type="project",
        resource_id=str(project.id),
        details=patch,
    )
    await db.commit()
    await invalidate_pattern("dashboard:*")
    return ProjectResponse.model_validate(project)


@router.delete("/{project_id}", response_model=MessageResponse)
async def delete_project(
    project_id: str,
    user: CurrentUser,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    result = await project_service.delete_project(db, project_id, user.id)
    await log_audit(
        db,
        user_id=user.id,
        action="delete_project",
        resource_type="project",
        resource_id=project_id,
    )
    await db.commit()
    await invalidate_pattern("dashboard:*")
    return result
