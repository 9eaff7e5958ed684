"""Report generation API routes.

Provides:
- POST /reports              — generate a report (summary, comprehensive, detailed)
- GET  /reports              — list reports, newest first
- GET  /reports/{id}         — report with content and download link
- GET  /reports/{id}/content — raw Markdown download
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import get_settings
from app.core.database import get_db
from app.core.redis import invalidate_pattern
from app.middleware.auth import CurrentUser
from app.schemas import (
    ReportDownloadResponse,
    ReportGenerateRequest,
    ReportGenerateResponse,
    ReportListItem,
)
from app.services import reports as report_service

router = APIRouter(prefix="/reports", tags=["reports"])
settings = get_settings()


@router.post("", response_model=ReportGenerateResponse, status_code=201)
async def generate_report(
    body: ReportGenerateRequest,
    user: CurrentUser,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    result = await report_service.generate_report(db, body.model_dump(mode="json"))
    await db.commit()
    await invalidate_pattern("dashboard:*")
    return result


@router.get("", response_model=list[ReportListItem])
async def list_reports(
    user: CurrentUser,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    reports = await report_service.list_reports(db)
    return [ReportListItem.model_validate(r) for r in reports]


@router.get("/{report_id}", response_model=ReportDownloadResponse)
async def get_report(
    report_id: str,
    user: CurrentUser,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    return await report_service.download_report(db, report_id, prefix=settings.api_prefix)


@router.get("/{report_id}/content")
async def get_report_content(
    report_id: str,
    user: CurrentUser,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    report = await report_service.get_report(db, report_id)
    return PlainTextResponse(
        content=report.content,
        media_type="text/markdown",
        headers={"Content-Disposition": f'attachment; filename="report-{report.id}.md"'},
    )
