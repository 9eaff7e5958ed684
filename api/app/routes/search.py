"""Search endpoint."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.middleware.auth import CurrentUser
from app.schemas import SearchResponse
from app.services.search import global_search

router = APIRouter(prefix="/search", tags=["search"])


@router.get("", response_model=SearchResponse)
async def search(
    user: CurrentUser,
    db: Annotated[AsyncSession, Depends(get_db)],
    q: str = Query(..., min_length=1, max_length=500),
):
    """Case-insensitive search over threats, incidents and the caller's projects."""
    return SearchResponse.model_validate(
        await global_search(db, q, user.id), from_attributes=True
    )
