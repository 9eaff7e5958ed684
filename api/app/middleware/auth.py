"""Authentication dependency — resolves the bearer token on a request to a ``User``.

A request is authenticated when:
1. it carries ``Authorization: Bearer <jwt>`` signed with our secret,
2. the token's session id is still live in Redis (not logged out), and
3. the token's subject is an existing user.

Anything else is rejected with 401 before a route handler runs.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.logging import get_logger
from app.models.models import User
from app.services.auth import decode_access_token, is_session_valid
from app.services.repository import Repository

logger = get_logger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def _unauthorized(detail: str = "Authentication required") -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_token_claims(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
) -> dict:
    """Verified JWT claims of a live session."""
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise _unauthorized()

    payload = decode_access_token(credentials.credentials)
    if not payload or "sub" not in payload:
        raise _unauthorized("Invalid or expired token")

    sid = payload.get("sid")
    if not sid or not await is_session_valid(sid, payload["sub"]):
        raise _unauthorized("Session expired or revoked")

    return payload


async def get_current_user(
    claims: Annotated[dict, Depends(get_token_claims)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> User:
    user = await Repository(db, User).find_by_id(claims["sub"])
    if user is None:
        logger.warning("token_for_unknown_user", user_id=claims["sub"])
        raise _unauthorized("User no longer exists")
    return user


CurrentUser = Annotated[User, Depends(get_current_user)]
