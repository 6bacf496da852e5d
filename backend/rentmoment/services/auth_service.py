"""
Rent The Moment Backend — Auth Service
=====================================

What:  Registration and login. Both return `{token, user}` so the client
       can store the bearer token right away.

Security:
    Login answers the same 401 for "no such email" and "wrong password" so
    the endpoint cannot be used to probe which emails are registered.
"""

import logging

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from rentmoment.exceptions import AuthenticationError, ConflictError, StorageFailure
from rentmoment.models.user import User
from rentmoment.schemas.user import AuthData, LoginRequest, RegisterRequest, UserResponse
from rentmoment.security import create_access_token, hash_password, verify_password
from rentmoment.services.base import EntityService

logger = logging.getLogger(__name__)


class AuthService(EntityService):
    model = User
    resource = "user"

    async def _by_email(self, db: AsyncSession, email: str):
        try:
            result = await db.execute(select(User).where(User.email == email))
        except SQLAlchemyError as e:
            logger.error("Database error looking up user by email: %s", str(e))
            raise StorageFailure(context={"resource": "user", "error_type": type(e).__name__})
        return result.scalar_one_or_none()

    def _issue(self, user: User) -> AuthData:
        return AuthData(
            token=create_access_token(user.id, user.role),
            user=UserResponse.model_validate(user),
        )

    async def register(self, db: AsyncSession, data: RegisterRequest) -> AuthData:
        if await self._by_email(db, data.email) is not None:
            raise ConflictError("User already exists")

        user = User(
            name=data.name,
            email=data.email,
            password_hash=hash_password(data.password),
            phone=data.phone,
            address=data.address,
        )
        db.add(user)
        await self._flush(db, conflict_message="User already exists")
        logger.info("User registered: %s", user.id)
        return self._issue(user)

    async def login(self, db: AsyncSession, data: LoginRequest) -> AuthData:
        user = await self._by_email(db, data.email)
        if user is None or not verify_password(data.password, user.password_hash):
            raise AuthenticationError("Invalid email or password")
        if not user.is_active:
            raise AuthenticationError("Account is deactivated")
        logger.info("User logged in: %s", user.id)
        return self._issue(user)


auth_service = AuthService()
