"""
Rent The Moment Backend — Auth Routes
====================================

What:  POST /api/auth/register, POST /api/auth/login, GET /api/auth/me.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from rentmoment.database import get_db_session
from rentmoment.models.user import User
from rentmoment.schemas.common import ApiResponse, ErrorResponse
from rentmoment.schemas.user import AuthData, LoginRequest, RegisterRequest, UserData, UserResponse
from rentmoment.security import get_current_user
from rentmoment.services.auth_service import auth_service

router = APIRouter(prefix="/api/auth", tags=["Auth"])


@router.post(
    "/register",
    status_code=status.HTTP_201_CREATED,
    response_model=ApiResponse[AuthData],
    responses={409: {"description": "Email already registered", "model": ErrorResponse}},
    summary="Create an account",
)
async def register(
    body: RegisterRequest,
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[AuthData]:
    data = await auth_service.register(db, body)
    return ApiResponse(message="User registered successfully", data=data)


@router.post(
    "/login",
    response_model=ApiResponse[AuthData],
    responses={401: {"description": "Invalid email or password", "model": ErrorResponse}},
    summary="Log in",
)
async def login(
    body: LoginRequest,
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[AuthData]:
    data = await auth_service.login(db, body)
    return ApiResponse(message="Login successful", data=data)


@router.get("/me", response_model=ApiResponse[UserData], summary="Current user")
async def me(user: User = Depends(get_current_user)) -> ApiResponse[UserData]:
    return ApiResponse(data=UserData(user=UserResponse.model_validate(user)))
