"""
Rent The Moment Backend — User Routes
====================================

What:  Admin user management plus PUT /api/users/profile for the
       logged-in user.
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from rentmoment.database import get_db_session
from rentmoment.models.user import User
from rentmoment.schemas.common import ApiResponse, ErrorResponse
from rentmoment.schemas.listing import ListingRequest
from rentmoment.schemas.user import ProfileUpdate, UserAdminUpdate, UserData, UserListData
from rentmoment.security import get_current_user, require_admin
from rentmoment.services.user_service import user_service

router = APIRouter(prefix="/api/users", tags=["Users"])

NOT_FOUND = {404: {"description": "User not found", "model": ErrorResponse}}


# Registered before /{user_id} so "profile" is not parsed as an id
@router.put("/profile", response_model=ApiResponse[UserData], summary="Update my profile")
async def update_profile(
    body: ProfileUpdate,
    db: AsyncSession = Depends(get_db_session),
    user: User = Depends(get_current_user),
) -> ApiResponse[UserData]:
    updated = await user_service.update_profile(db, user, body)
    return ApiResponse(message="Profile updated successfully", data=UserData(user=updated))


@router.get("", response_model=ApiResponse[UserListData], summary="List users")
async def list_users(
    response: Response,
    page: str | None = Query(default=None),
    limit: str | None = Query(default=None),
    role: str | None = Query(default=None),
    is_active: str | None = Query(default=None, alias="isActive"),
    search: str | None = Query(default=None, description="Substring of name or email"),
    sort: str | None = Query(default=None),
    db: AsyncSession = Depends(get_db_session),
    _admin: User = Depends(require_admin),
) -> ApiResponse[UserListData]:
    request = ListingRequest.from_query(
        page=page, limit=limit, sort=sort, role=role, isActive=is_active, search=search
    )
    data = await user_service.list(db, request)
    response.headers["X-Total-Count"] = str(data.total)
    return ApiResponse(data=data)


@router.get("/{user_id}", response_model=ApiResponse[UserData], responses=NOT_FOUND)
async def get_user(
    user_id: UUID,
    db: AsyncSession = Depends(get_db_session),
    _admin: User = Depends(require_admin),
) -> ApiResponse[UserData]:
    return ApiResponse(data=UserData(user=await user_service.get(db, user_id)))


@router.put("/{user_id}", response_model=ApiResponse[UserData], responses=NOT_FOUND)
async def update_user(
    user_id: UUID,
    body: UserAdminUpdate,
    db: AsyncSession = Depends(get_db_session),
    admin: User = Depends(require_admin),
) -> ApiResponse[UserData]:
    user = await user_service.update(db, user_id, body, actor=admin)
    return ApiResponse(message="User updated successfully", data=UserData(user=user))


@router.delete("/{user_id}", response_model=ApiResponse[None], responses=NOT_FOUND)
async def delete_user(
    user_id: UUID,
    db: AsyncSession = Depends(get_db_session),
    admin: User = Depends(require_admin),
) -> ApiResponse[None]:
    await user_service.delete(db, user_id, actor=admin)
    return ApiResponse(message="User deleted successfully")
