#!/usr/bin/env python3
"""Seed a development database with two users, their projects, threats, incidents and reports.

Running it again is a no-op once the admin account owns projects.

Usage (from the repository root):
    DATABASE_URL_OVERRIDE=sqlite+aiosqlite:///./secops.db python scripts/seed.py
"""

from __future__ import annotations

import asyncio

from app.core.database import async_session_factory, init_db
from app.core.logging import get_logger, setup_logging
from app.models.models import User
from app.services import incidents, projects, reports, threats
from app.services.auth import register_user
from app.services.repository import Repository
from app.services.users import get_user_by_email

logger = get_logger(__name__)

USERS = [
    {"email": "admin@acme-sec.io", "password": "admin123", "display_name": "Admin User", "role": "admin"},
    {"email": "user@acme-sec.io", "password": "user123", "display_name": "Test User", "role": "user"},
]

THREATS = [
    {"title": "SQL Injection Attack", "description": "Malicious SQL code injection attempt detected", "severity": "high"},
    {"title": "Cross-Site Scripting (XSS)", "description": "Reflected XSS vulnerability found in login form", "severity": "medium"},
    {"title": "Brute Force Attack", "description": "Multiple failed login attempts detected", "severity": "critical"},
    {"title": "Outdated SSL Certificate", "description": "SSL certificate expired, needs renewal", "severity": "low"},
]


async def _ensure_user(db, account: dict) -> User:
    user = await get_user_by_email(db, account["email"])
    if user:
        return user
    user = await register_user(db, account["email"], account["password"], account["display_name"])
    if account["role"] != "user":
        await Repository(db, User).update_by_id(user.id, {"role": account["role"]})
    return user


async def seed_data(db) -> bool:
    """Insert the demo data. Returns False and adds nothing beyond the accounts if it is already there."""
    admin, user = [await _ensure_user(db, account) for account in USERS]
    if await projects.list_projects(db, admin.id):
        logger.info("seed_skipped", reason="admin already owns projects")
        return False

    web = await projects.create_project(
        db, {"name": "Web Application Security", "description": "Security assessment for web application"}, admin.id
    )
    api = await projects.create_project(
        db, {"name": "API Security Audit", "description": "Comprehensive API security audit"}, user.id
    )

    for data in THREATS:
        await threats.create_threat(db, data)

    for title, status, project in [
        ("Data Breach Attempt", "investigating", web),
        ("Unauthorized Access", "open", api),
        ("Malware Detection", "resolved", web),
    ]:
        incident = await incidents.create_incident(db, {"title": title, "project_id": project.id})
        if status != "open":
            await incidents.update_incident_status(db, incident.id, status)

    await reports.generate_report(db, {"title": "Monthly Security Report", "type": "summary"})
    await reports.generate_report(db, {"title": "Incident Response Summary", "type": "comprehensive"})
    return True


async def seed() -> None:
    setup_logging()
    await init_db()

    async with async_session_factory() as db:
        seeded = await seed_data(db)
        await db.commit()

    if seeded:
        logger.info("seed_complete", users=[u["email"] for u in USERS])


if __name__ == "__main__":
    asyncio.run(seed())
