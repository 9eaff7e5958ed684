"""Pydantic schemas for API request/response models."""

from __future__ import annotations

import uuid
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, EmailStr, Field


# ─── Enums ───────────────────────────────────────────────
class UserRole(str, Enum):
    admin = "admin"
    user = "user"


class IncidentStatus(str, Enum):
    open = "open"
    investigating = "investigating"
    resolved = "resolved"
    closed = "closed"


class ThreatSeverity(str, Enum):
    low = "low"
    medium = "medium"
    high = "high"
    critical = "critical"


class ReportType(str, Enum):
    summary = "summary"
    comprehensive = "comprehensive"
    detailed = "detailed"


class MessageResponse(BaseModel):
    message: str


# ─── User ────────────────────────────────────────────────
class UserSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    email: str
    display_name: str


class UserResponse(UserSummary):
    role: UserRole
    created_at: datetime
    updated_at: datetime


class UserUpdate(BaseModel):
    display_name: str | None = Field(default=None, min_length=1, max_length=255)
    role: UserRole | None = None


# ─── Auth ────────────────────────────────────────────────
class RegisterRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=128)
    display_name: str = Field(..., min_length=1, max_length=255)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1, max_length=128)


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserResponse


# ─── Project ─────────────────────────────────────────────
class ProjectCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: str | None = None


class ProjectUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None


class ProjectRef(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str


class IncidentSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    title: str
    status: IncidentStatus
    project_id: uuid.UUID | None = None
    created_at: datetime
    updated_at: datetime


class ProjectResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    description: str | None = None
    owner_id: uuid.UUID
    owner: UserSummary
    incidents: list[IncidentSummary] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime


# ─── Incident ────────────────────────────────────────────
class IncidentCreate(BaseModel):
    title: str = Field(..., min_length=1)
    project_id: uuid.UUID | None = None


class IncidentStatusUpdate(BaseModel):
    status: IncidentStatus


class IncidentResponse(IncidentSummary):
    project: ProjectRef | None = None


# ─── Threat ──────────────────────────────────────────────
class ThreatCreate(BaseModel):
    title: str = Field(..., min_length=1)
    description: str
    severity: ThreatSeverity


class ThreatUpdate(BaseModel):
    title: str | None = Field(default=None, min_length=1)
    description: str | None = None
    severity: ThreatSeverity | None = None


class ThreatResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    title: str
    description: str
    severity: ThreatSeverity
    created_at: datetime


class SeverityBreakdown(BaseModel):
    critical: int = 0
    high: int = 0
    medium: int = 0
    low: int = 0


class ThreatAnalysis(BaseModel):
    total_threats: int
    severity_breakdown: SeverityBreakdown
    recent_threats: list[ThreatResponse]
    ai_recommendations: list[str]


class ThreatAnalysisResponse(BaseModel):
    analysis: ThreatAnalysis
    message: str


# ─── Report ──────────────────────────────────────────────
class ReportGenerateRequest(BaseModel):
    title: str = Field(..., min_length=1)
    type: ReportType = ReportType.summary
    project_id: uuid.UUID | None = None


class ReportGenerateResponse(BaseModel):
    id: uuid.UUID
    title: str
    type: ReportType
    message: str


class ReportListItem(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    title: str
    created_at: datetime


class ReportDownloadResponse(ReportListItem):
    content: str
    download_url: str


# ─── Search ──────────────────────────────────────────────
class SearchResponse(BaseModel):
    query: str
    threats: list[ThreatResponse]
    incidents: list[IncidentResponse]
    projects: list[ProjectResponse]
    total_results: int


# ─── Dashboard ───────────────────────────────────────────
class IncidentStatusBreakdown(BaseModel):
    open: int = 0
    investigating: int = 0
    resolved: int = 0
    closed: int = 0


class DashboardResponse(BaseModel):
    total_threats: int
    total_incidents: int
    open_incidents: int
    total_projects: int
    total_reports: int
    threat_severity: SeverityBreakdown
    incident_status: IncidentStatusBreakdown
    recent_incidents: list[IncidentResponse]


# ─── Health ──────────────────────────────────────────────
class HealthResponse(BaseModel):
    status: str
    version: str
    database: bool
    redis: bool
    environment: str
