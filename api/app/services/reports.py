"""Report generation service.

Reports are rendered once, from a snapshot of the threat and incident tables
at generation time, into Markdown text. They are never edited afterwards.

Report types:
  - summary:       threat and incident totals
  - comprehensive: the ten newest threats and incidents plus recommendations
  - detailed:      severity breakdown, every threat and incident, recommendations
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import NotFoundError
from app.core.logging import get_logger
from app.models.models import Incident, Report, Threat
from app.services.repository import Repository, parse_id
from app.services.threats import severity_breakdown

logger = get_logger(__name__)


def _incident_filter(project_id: uuid.UUID | None) -> tuple:
    return (Incident.project_id == project_id,) if project_id else ()


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


async def _summary(db: AsyncSession, project_id: uuid.UUID | None) -> str:
    threats_count = await Repository(db, Threat).count()
    incidents_count = await Repository(db, Incident).count(*_incident_filter(project_id))
    return "\n".join([
        "# Security Summary Report",
        "",
        "## Overview",
        f"- Total Threats: {threats_count}",
        f"- Total Incidents: {incidents_count}",
        f"- Generated: {_timestamp()}",
        "",
        "## Key Findings",
        "This is a summary report of the current security posture.",
    ])


async def _comprehensive(db: AsyncSession, project_id: uuid.UUID | None) -> str:
    threats = await Repository(db, Threat).find_many(order_by=Threat.created_at.desc(), limit=10)
    incidents = await Repository(db, Incident).find_many(
        *_incident_filter(project_id), order_by=Incident.created_at.desc(), limit=10
    )
    lines = [
        "# Comprehensive Security Report",
        "",
        "## Executive Summary",
        "This comprehensive security report provides detailed analysis of threats and incidents.",
        "",
        "## Threats Analysis",
        *[f"- {t.title} ({t.severity})" for t in threats],
        "",
        "## Incidents Overview",
        *[f"- {i.title} ({i.status})" for i in incidents],
        "",
        "## Recommendations",
        "1. Implement additional security measures",
        "2. Regular security audits",
        "3. Employee security training",
        "4. Incident response planning",
        "",
        f"Generated: {_timestamp()}",
    ]
    return "\n".join(lines)


async def _detailed(db: AsyncSession, project_id: uuid.UUID | None) -> str:
    threats = await Repository(db, Threat).find_many(order_by=Threat.created_at.desc())
    incidents = await Repository(db, Incident).find_many(
        *_incident_filter(project_id), order_by=Incident.created_at.desc()
    )
    breakdown = await severity_breakdown(db)

    lines = [
        "# Detailed Security Report",
        "",
        "## Executive Summary",
        "Comprehensive analysis of all security threats and incidents.",
        "",
        "## Threats Analysis",
        "### Severity Breakdown",
        *[f"- {severity}: {count}" for severity, count in breakdown.items() if count],
        "",
        "### Recent Threats",
    ]
    for t in threats:
        lines += [
            "",
            f"**{t.title}**",
            f"- Severity: {t.severity}",
            f"- Description: {t.description}",
            f"- Date: {t.created_at.isoformat()}",
        ]
    lines += ["", "## Incidents Analysis", "### Status Overview"]
    for i in incidents:
        lines += [
            "",
            f"**{i.title}**",
            f"- Status: {i.status}",
            f"- Date: {i.created_at.isoformat()}",
        ]
    lines += [
        "",
        "## Detailed Recommendations",
        "1. **Immediate Actions**",
        "   - Review all critical threats",
        "   - Update security policies",
        "",
        "2. **Short-term Goals**",
        "   - Implement automated threat detection",
        "   - Enhance incident response procedures",
        "",
        "3. **Long-term Strategy**",
        "   - Continuous security monitoring",
        "   - Regular penetration testing",
        "",
        f"Generated: {_timestamp()}",
    ]
    return "\n".join(lines)


_BUILDERS = {
    "summary": _summary,
    "comprehensive": _comprehensive,
    "detailed": _detailed,
}


async def generate_report(db: AsyncSession, data: dict) -> dict:
    """Render and persist a report. Unknown types fall back to ``summary``."""
    report_type = data.get("type") or "summary"
    builder = _BUILDERS.get(report_type, _summary)
    content = await builder(db, parse_id(data.get("project_id")))

    report = await Repository(db, Report).create(title=data["title"], content=content)
    logger.info("report_generated", report_id=str(report.id), report_type=report_type)
    return {
        "id": report.id,
        "title": report.title,
        "type": report_type,
        "message": "Report generated successfully",
    }


async def list_reports(db: AsyncSession) -> list[Report]:
    return await Repository(db, Report).find_many(order_by=Report.created_at.desc())


async def get_report(db: AsyncSession, report_id: uuid.UUID | str) -> Report:
    report = await Repository(db, Report).find_by_id(report_id)
    if report is None:
        raise NotFoundError("Report not found")
    return report


async def download_report(db: AsyncSession, report_id: uuid.UUID | str, prefix: str = "/api") -> dict:
    report = await get_report(db, report_id)
    return {
        "id": report.id,
        "title": report.title,
        "content": report.content,
        "created_at": report.created_at,
        "download_url": f"{prefix}/reports/{report.id}/content",
    }
