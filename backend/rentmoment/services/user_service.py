"""
Rent The Moment Backend — User Service
=====================================

What:  Admin user management plus self-service profile edits.

Listing profile:
    role        exact, user | admin
    isActive    exact boolean
    search      name OR email substring
    sort        createdAt (default, desc), name, email
"""

import logging
import uuid

from sqlalchemy.ext.asyncio import AsyncSession

from rentmoment.exceptions import ValidationFailure
from rentmoment.models.user import USER_ROLES, User
from rentmoment.schemas.listing import ListingRequest
from rentmoment.schemas.user import ProfileUpdate, UserAdminUpdate, UserListData, UserResponse
from rentmoment.security import hash_password
from rentmoment.services.base import EntityService
from rentmoment.services.collection import ListingFields, as_bool, exact, one_of, search

logger = logging.getLogger(__name__)

USER_FIELDS = ListingFields(
    filters={
        "role": exact("role", one_of(USER_ROLES)),
        "isActive": exact("is_active", as_bool),
        "search": search("name", "email"),
    },
    sortable={
        "createdAt": "created_at",
        "name": "name",
        "email": "email",
    },
)


class UserService(EntityService):
    model = User
    resource = "user"
    fields = USER_FIELDS

    async def list(self, db: AsyncSession, request: ListingRequest) -> UserListData:
        result = await self._list(db, request)
        users = [UserResponse.model_validate(u) for u in result.items]
        return UserListData(**result.to_data("users", users))

    async def get(self, db: AsyncSession, user_id: uuid.UUID) -> UserResponse:
        return UserResponse.model_validate(await self._get(db, user_id))

    async def update(
        self, db: AsyncSession, user_id: uuid.UUID, data: UserAdminUpdate, actor: User
    ) -> UserResponse:
        user = await self._get(db, user_id)
        changes = data.model_dump(exclude_unset=True)
        if user.id == actor.id and (
            changes.get("role") == "user" or changes.get("is_active") is False
        ):
            raise ValidationFailure("Admins cannot demote or deactivate themselves")
        self._apply(user, changes, required=("name", "role", "is_active"))
        await self._flush(db)
        logger.info("User %s updated by admin %s: %s", user.id, actor.id, sorted(changes))
        return UserResponse.model_validate(user)

    async def delete(self, db: AsyncSession, user_id: uuid.UUID, actor: User) -> None:
        if user_id == actor.id:
            raise ValidationFailure("Admins cannot delete their own account")
        user = await self._get(db, user_id)
        await db.delete(user)
        await self._flush(db)
        logger.info("User %s deleted by admin %s", user_id, actor.id)

    async def update_profile(self, db: AsyncSession, user: User, data: ProfileUpdate) -> UserResponse:
        changes = data.model_dump(exclude_unset=True)
        password = changes.pop("password", None)
        self._apply(user, changes, required=("name",))
        if password:
            user.password_hash = hash_password(password)
        await self._flush(db)
        return UserResponse.model_validate(user)


user_service = UserService()
