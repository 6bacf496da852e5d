"""
Merchant Schemas
================

Field rules carried over from the admin merchant form:
    name:         required on create, 2-100 characters after trimming
    mobilenumber: optional, digits only (numbers are accepted and stringified)
    address:      optional free text
"""

import uuid
from datetime import datetime
from typing import Any, List, Optional

from pydantic import Field, field_validator

from rentmoment.schemas.common import CamelModel
from rentmoment.schemas.listing import PaginatedData


def _digits_only(v: Any) -> Any:
    if v is None:
        return v
    if isinstance(v, bool):
        raise ValueError("Mobile number must be numeric")
    if isinstance(v, int):
        v = str(v)
    if isinstance(v, str):
        v = v.strip()
        if not v:
            return None
        if not v.isdigit():
            raise ValueError("Mobile number must be numeric")
    return v


class MerchantCreate(CamelModel):
    name: str = Field(min_length=2, max_length=100)
    mobilenumber: Optional[str] = Field(default=None, max_length=20)
    address: Optional[str] = None

    check_mobile = field_validator("mobilenumber", mode="before")(_digits_only)


class MerchantUpdate(CamelModel):
    name: Optional[str] = Field(default=None, min_length=2, max_length=100)
    mobilenumber: Optional[str] = Field(default=None, max_length=20)
    address: Optional[str] = None

    check_mobile = field_validator("mobilenumber", mode="before")(_digits_only)


class MerchantResponse(CamelModel):
    id: uuid.UUID
    name: str
    mobilenumber: Optional[str] = None
    address: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class MerchantData(CamelModel):
    merchant: MerchantResponse


class MerchantListData(PaginatedData):
    merchants: List[MerchantResponse]
