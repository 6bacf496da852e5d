"""
User & Auth Schemas
===================

Security: UserResponse deliberately has no password field; it is the only
shape a user row is ever serialized through.
"""

import uuid
from datetime import datetime
from typing import List, Literal, Optional

from pydantic import EmailStr, Field, field_validator

from rentmoment.schemas.common import CamelModel
from rentmoment.schemas.listing import PaginatedData

Role = Literal["user", "admin"]


class RegisterRequest(CamelModel):
    name: str = Field(min_length=2, max_length=50)
    email: EmailStr
    password: str = Field(min_length=6, max_length=128)
    phone: Optional[str] = Field(default=None, max_length=20)
    address: Optional[str] = Field(default=None, max_length=500)

    @field_validator("email")
    @classmethod
    def lower_email(cls, v: str) -> str:
        return v.lower()


class LoginRequest(CamelModel):
    email: EmailStr
    password: str = Field(min_length=1, max_length=128)

    @field_validator("email")
    @classmethod
    def lower_email(cls, v: str) -> str:
        return v.lower()


class ProfileUpdate(CamelModel):
    name: Optional[str] = Field(default=None, min_length=2, max_length=50)
    phone: Optional[str] = Field(default=None, max_length=20)
    address: Optional[str] = Field(default=None, max_length=500)
    password: Optional[str] = Field(default=None, min_length=6, max_length=128)


class UserAdminUpdate(CamelModel):
    name: Optional[str] = Field(default=None, min_length=2, max_length=50)
    role: Optional[Role] = None
    is_active: Optional[bool] = None
    phone: Optional[str] = Field(default=None, max_length=20)
    address: Optional[str] = Field(default=None, max_length=500)


class UserResponse(CamelModel):
    id: uuid.UUID
    name: str
    email: str
    role: str
    phone: Optional[str] = None
    address: Optional[str] = None
    is_active: bool
    created_at: datetime
    updated_at: datetime


class AuthData(CamelModel):
    token: str
    user: UserResponse


class UserData(CamelModel):
    user: UserResponse


class UserListData(PaginatedData):
    users: List[UserResponse]
