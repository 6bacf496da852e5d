"""
Rent The Moment Backend — Merchant Service
=========================================

What:  CRUD and listing for merchant records (admin back office).

Listing profile:
    name        case-insensitive substring of name
    search      name OR address, case-insensitive substring
    sort        createdAt (default, desc), name
"""

import logging
import uuid

from sqlalchemy.ext.asyncio import AsyncSession

from rentmoment.models.merchant import Merchant
from rentmoment.schemas.listing import ListingRequest
from rentmoment.schemas.merchant import (
    MerchantCreate,
    MerchantListData,
    MerchantResponse,
    MerchantUpdate,
)
from rentmoment.services.base import EntityService
from rentmoment.services.collection import ListingFields, search

logger = logging.getLogger(__name__)

MERCHANT_FIELDS = ListingFields(
    filters={
        "name": search("name"),
        "search": search("name", "address"),
    },
    sortable={
        "createdAt": "created_at",
        "name": "name",
    },
)


class MerchantService(EntityService):
    model = Merchant
    resource = "merchant"
    fields = MERCHANT_FIELDS

    async def list(self, db: AsyncSession, request: ListingRequest) -> MerchantListData:
        result = await self._list(db, request)
        merchants = [MerchantResponse.model_validate(m) for m in result.items]
        return MerchantListData(**result.to_data("merchants", merchants))

    async def get(self, db: AsyncSession, merchant_id: uuid.UUID) -> MerchantResponse:
        return MerchantResponse.model_validate(await self._get(db, merchant_id))

    async def create(self, db: AsyncSession, data: MerchantCreate) -> MerchantResponse:
        merchant = Merchant(**data.model_dump())
        db.add(merchant)
        await self._flush(db)
        logger.info("Merchant created: %s", merchant.id)
        return MerchantResponse.model_validate(merchant)

    async def update(
        self, db: AsyncSession, merchant_id: uuid.UUID, data: MerchantUpdate
    ) -> MerchantResponse:
        merchant = await self._get(db, merchant_id)
        self._apply(merchant, data.model_dump(exclude_unset=True), required=("name",))
        await self._flush(db)
        return MerchantResponse.model_validate(merchant)

    async def delete(self, db: AsyncSession, merchant_id: uuid.UUID) -> None:
        merchant = await self._get(db, merchant_id)
        await db.delete(merchant)
        await self._flush(db)
        logger.info("Merchant deleted: %s", merchant_id)


merchant_service = MerchantService()
