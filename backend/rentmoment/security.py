"""
Rent The Moment Backend — Authentication & Authorization
=======================================================

What:  Password hashing, JWT issuing/decoding, and the FastAPI dependencies
       that protect routes (`get_current_user`, `require_admin`).
How:   bcrypt for password hashes; python-jose for HS256 bearer tokens.
       Tokens carry the user id in `sub` and expire after JWT_EXPIRE_DAYS.

Request flow for a protected route:
    Authorization: Bearer <jwt>
        → decode + verify signature/expiry     (401 on failure)
        → load user by id, must be active      (401 on failure)
        → require_admin: role == "admin"       (403 on failure)
"""

import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import bcrypt
from fastapi import Depends, Header
from jose import JWTError, jwt
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from rentmoment.config import settings
from rentmoment.database import get_db_session
from rentmoment.exceptions import AuthenticationError, PermissionDeniedError
from rentmoment.models.user import User

logger = logging.getLogger(__name__)


# ── Passwords ─────────────────────────────────────────────────────────────
def hash_password(password: str) -> str:
    """Hash a password using bcrypt."""
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, hashed: str) -> bool:
    """Verify a password against a bcrypt hash."""
    try:
        return bcrypt.checkpw(password.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        # Malformed hash in storage
        return False


# ── Tokens ────────────────────────────────────────────────────────────────
def create_access_token(user_id: uuid.UUID, role: str) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        "sub": str(user_id),
        "role": role,
        "jti": str(uuid.uuid4()),
        "iat": now,
        "exp": now + timedelta(days=settings.jwt_expire_days),
    }
    return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> Dict[str, Any]:
    """Verify signature and expiry. Raises AuthenticationError if invalid."""
    try:
        return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError as e:
        logger.info("Rejected token: %s", str(e))
        raise AuthenticationError("Not authorized, token failed")


def extract_bearer_token(authorization: Optional[str]) -> str:
    if not authorization:
        raise AuthenticationError("Not authorized, no token")
    parts = authorization.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        raise AuthenticationError("Authorization header must be: Bearer <token>")
    return parts[1]


# ── Dependencies ──────────────────────────────────────────────────────────
async def get_current_user(
    authorization: Optional[str] = Header(default=None),
    db: AsyncSession = Depends(get_db_session),
) -> User:
    """Resolve the bearer token to an active User row."""
    payload = decode_access_token(extract_bearer_token(authorization))

    try:
        user_id = uuid.UUID(str(payload.get("sub")))
    except ValueError:
        raise AuthenticationError("Not authorized, token failed")

    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if user is None or not user.is_active:
        raise AuthenticationError("Not authorized, user not found")
    return user


async def require_admin(user: User = Depends(get_current_user)) -> User:
    if not user.is_admin:
        raise PermissionDeniedError()
    return user
