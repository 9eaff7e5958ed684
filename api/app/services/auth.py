"""Authentication service — password hashing, JWT issuance and Redis-backed sessions.

Every issued token carries a session id (``sid``). The session id is stored
in Redis with the token's lifetime so a logout can revoke the token before it
expires.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone
from typing import Any

import bcrypt
from jose import JWTError, jwt
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import get_settings
from app.core.logging import get_logger
from app.core.redis import redis_client
from app.models.models import User
from app.services.repository import Repository
from app.services.users import get_user_by_email

logger = get_logger(__name__)
settings = get_settings()

# ─── Passwords ───────────────────────────────────────────


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))


# ─── JWT Token Management ────────────────────────────────


def create_access_token(data: dict[str, Any], expires_delta: timedelta | None = None) -> str:
    """Create a signed JWT access token."""
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=settings.jwt_expire_minutes))
    to_encode.update({"exp": expire, "iat": datetime.now(timezone.utc), "jti": str(uuid.uuid4())})
    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> dict[str, Any] | None:
    """Decode and verify a JWT token. Returns claims or None."""
    try:
        return jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None


# ─── Session Management (Redis-backed) ──────────────────


async def create_session(user: User) -> str:
    """Create a session token for a user and store the session in Redis."""
    session_id = str(uuid.uuid4())
    token = create_access_token({
        "sub": str(user.id),
        "email": user.email,
        "sid": session_id,
    })
    await redis_client.set(
        f"session:{session_id}",
        str(user.id),
        ex=settings.jwt_expire_minutes * 60,
    )
    logger.info("session_created", user_id=str(user.id), session_id=session_id)
    return token


async def revoke_session(session_id: str) -> None:
    await redis_client.delete(f"session:{session_id}")
    logger.info("session_revoked", session_id=session_id)


async def is_session_valid(session_id: str, user_id: str) -> bool:
    """A session is valid while Redis still maps it to the token's subject."""
    return await redis_client.get(f"session:{session_id}") == user_id


# ─── Registration & Login ───────────────────────────────


async def register_user(
    db: AsyncSession,
    email: str,
    password: str,
    display_name: str,
) -> User | None:
    """Create a ``user``-role account. Returns None if the email is already registered."""
    email = email.lower()
    if await get_user_by_email(db, email):
        return None
    user = await Repository(db, User).create(
        email=email,
        password_hash=hash_password(password),
        display_name=display_name,
        role="user",
    )
    logger.info("user_registered", user_id=str(user.id), email=email)
    return user


async def authenticate(db: AsyncSession, email: str, password: str) -> User | None:
    user = await get_user_by_email(db, email)
    if user is None or not verify_password(password, user.password_hash):
        logger.warning("login_failed", email=email.lower())
        return None
    return user
