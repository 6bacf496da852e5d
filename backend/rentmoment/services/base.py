"""
Rent The Moment Backend — Shared Entity Service Helpers
======================================================

What:  The lookup / flush / list plumbing every entity service repeats.
How:   Entity services subclass `EntityService`, set `model`, `resource` and
       `fields`, and get:
           _get(db, id)        → row or NotFoundError
           _flush(db, ...)     → IntegrityError → ConflictError,
                                 other SQLAlchemyError → StorageFailure
           _list(db, request)  → ListingResult via the shared ListingService

Sessions are never committed here; `get_db_session` commits once per
request after the route returns.
"""

import logging
import uuid
from typing import Any, ClassVar, Dict, Iterable, Optional, Type

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from rentmoment.exceptions import ConflictError, NotFoundError, StorageFailure
from rentmoment.schemas.listing import ListingRequest
from rentmoment.services.collection import ListingFields, SqlAlchemyCollection
from rentmoment.services.listing_service import ListingResult, listing_service

logger = logging.getLogger(__name__)


class EntityService:
    model: ClassVar[Type[Any]]
    resource: ClassVar[str]
    fields: ClassVar[ListingFields]

    async def _get(self, db: AsyncSession, entity_id: uuid.UUID) -> Any:
        try:
            result = await db.execute(select(self.model).where(self.model.id == entity_id))
        except SQLAlchemyError as e:
            logger.error("Database error fetching %s %s: %s", self.resource, entity_id, str(e))
            raise StorageFailure(context={"resource": self.resource, "error_type": type(e).__name__})
        entity = result.scalar_one_or_none()
        if entity is None:
            raise NotFoundError(resource=self.resource, resource_id=str(entity_id))
        return entity

    @staticmethod
    def _apply(entity: Any, changes: Dict[str, Any], required: Iterable[str] = ()) -> None:
        """Copy provided fields onto the row; an explicit null never clears a required column."""
        required = set(required)
        for key, value in changes.items():
            if value is None and key in required:
                continue
            setattr(entity, key, value)

    async def _flush(self, db: AsyncSession, conflict_message: Optional[str] = None) -> None:
        try:
            await db.flush()
        except IntegrityError as e:
            await db.rollback()
            logger.info("Integrity error on %s: %s", self.resource, str(e.orig))
            raise ConflictError(
                message=conflict_message or f"{self.resource.capitalize()} already exists",
                context={"resource": self.resource},
            )
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error("Database error writing %s: %s", self.resource, str(e), exc_info=True)
            raise StorageFailure(context={"resource": self.resource, "error_type": type(e).__name__})

    async def _list(
        self,
        db: AsyncSession,
        request: ListingRequest,
        fields: Optional[ListingFields] = None,
    ) -> ListingResult:
        collection = SqlAlchemyCollection(db, self.model, fields or self.fields)
        result = await listing_service.list(collection, request)
        if result.ignored_filters:
            logger.info(
                "Listed %s with ignored filters: %s",
                self.resource,
                ", ".join(result.ignored_filters),
            )
        return result
