"""
Rent The Moment Backend — Listing Service
=========================================

What:  The one filter → count → sort → paginate protocol shared by every
       collection endpoint (merchants, products, categories, orders, users).
Why:   Each route used to carry its own skip/limit/count block, each with
       slightly different page maths. One implementation means one set of
       edge cases to get right.
How:   ListingService.list(collection, request):
           1. request is already normalized (ListingRequest validators)
           2. build AND-combined conditions from the collection's field profile
           3. total = collection.count(conditions)
           4. items = collection.find(conditions, sort + id, skip, limit)
              (skipped when the page starts past the last match)
           5. derive totalPages / hasNextPage / hasPrevPage

Consistency:
    Count and fetch are two independent reads. No snapshot isolation:
    under concurrent writes `total` may describe a slightly different
    moment than `items`. On unmutated data adjacent pages partition the
    match set exactly, because the entity id is always the final sort key.

Bounding:
    Both reads run inside one task guarded by a timeout (mandatory, default
    LISTING_TIMEOUT_SECONDS) and an optional caller-supplied asyncio.Event.
    Whichever fires first cancels the reads and raises CancellationFailure.
"""

import asyncio
import logging
import math
from dataclasses import dataclass, field
from typing import Any, Awaitable, Dict, List, Optional, Tuple, TypeVar

from rentmoment.config import settings
from rentmoment.exceptions import (
    CancellationFailure,
    RentMomentError,
    StorageFailure,
    ValidationFailure,
)
from rentmoment.schemas.listing import ListingRequest, PaginatedData, SortDirection
from rentmoment.services.collection import Collection, Condition, SortKey

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class ListingResult:
    """
    One page of a listing plus its pagination metadata.

    Attributes:
        items:           entities on this page (len ≤ limit)
        total_count:     entities matching the filters, ignoring pagination
        current_page:    normalized page number
        limit:           normalized page size
        total_pages:     ceil(total_count / limit); 0 when nothing matches
        has_next_page:   page * limit < total_count
        has_prev_page:   page > 1
        ignored_filters: filter names dropped because their value was invalid
    """

    items: List[Any]
    total_count: int
    current_page: int
    limit: int
    total_pages: int
    has_next_page: bool
    has_prev_page: bool
    ignored_filters: List[str] = field(default_factory=list)

    def to_data(self, plural: str, items: Optional[List[Any]] = None) -> Dict[str, Any]:
        """
        Shape the `data` object of the HTTP envelope.

        Args:
            plural: entity array key, e.g. "merchants"
            items:  serialized items (defaults to the raw items)
        """
        meta = PaginatedData(
            total_pages=self.total_pages,
            current_page=self.current_page,
            total=self.total_count,
            has_next_page=self.has_next_page,
            has_prev_page=self.has_prev_page,
        )
        return {plural: self.items if items is None else items, **meta.model_dump(by_alias=True)}


def paginate(total_count: int, page: int, limit: int) -> Tuple[int, bool, bool]:
    """Returns (total_pages, has_next_page, has_prev_page) for normalized inputs."""
    if total_count <= 0:
        return 0, False, False
    total_pages = math.ceil(total_count / limit)
    return total_pages, page * limit < total_count, page > 1


class ListingService:
    """
    Stateless listing engine.

    Args:
        timeout: default bound (seconds) on the count + fetch pair; callers
                 may pass a tighter one per call
    """

    def __init__(self, timeout: Optional[float] = None):
        self.timeout = timeout if timeout is not None else settings.listing_timeout_seconds

    # ── Query Building ────────────────────────────────────────────────────

    def build_conditions(
        self, collection: Collection, request: ListingRequest
    ) -> Tuple[List[Condition], List[str]]:
        """
        Turn request.filters into AND-combined conditions.

        Unknown filter names are skipped. Values that fail coercion are
        dropped and reported, unless the field is required.

        Returns:
            (conditions, ignored_filter_names)
        """
        conditions: List[Condition] = []
        ignored: List[str] = []

        for name in sorted(request.filters):
            filter_field = collection.fields.filters.get(name)
            if filter_field is None:
                logger.debug("Ignoring unknown filter '%s'", name)
                continue
            raw = request.filters[name]
            try:
                value = filter_field.coerce(raw)
            except ValidationFailure as e:
                if filter_field.required:
                    raise ValidationFailure(
                        message=f"Invalid value for '{name}': {e.message}",
                        field=name,
                    ) from e
                logger.warning("Dropping filter '%s'=%r: %s", name, raw, e.message)
                ignored.append(name)
                continue
            conditions.append(Condition(columns=filter_field.columns, mode=filter_field.mode, value=value))

        return conditions, ignored

    def build_sort(self, collection: Collection, request: ListingRequest) -> List[SortKey]:
        """
        Resolve API sort names to columns and append the id tie-break.

        Unknown sort fields are dropped; if nothing valid remains the
        collection falls back to createdAt desc (when sortable).
        """
        sortable = collection.fields.sortable
        id_column = collection.fields.id_column
        keys: List[SortKey] = []
        seen = set()

        for term in request.sort:
            column = sortable.get(term.field)
            if column is None:
                logger.debug("Ignoring unknown sort field '%s'", term.field)
                continue
            if column in seen:
                continue
            seen.add(column)
            keys.append(SortKey(column=column, descending=term.direction is SortDirection.DESC))

        if not keys and "createdAt" in sortable:
            keys.append(SortKey(column=sortable["createdAt"], descending=True))
            seen.add(sortable["createdAt"])

        if id_column not in seen:
            keys.append(SortKey(column=id_column, descending=False))
        return keys

    # ── Listing ───────────────────────────────────────────────────────────

    async def list(
        self,
        collection: Collection,
        request: ListingRequest,
        *,
        timeout: Optional[float] = None,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> ListingResult:
        """
        Return one bounded, stably ordered page of `collection`.

        Raises:
            ValidationFailure:   a required filter field had an invalid value
            StorageFailure:      count or fetch failed
            CancellationFailure: timeout elapsed or cancel_event was set
        """
        conditions, ignored = self.build_conditions(collection, request)
        sort = self.build_sort(collection, request)

        async def read() -> Tuple[int, List[Any]]:
            total = await collection.count(conditions)
            if total <= request.offset:
                return total, []
            items = await collection.find(conditions, sort, request.offset, request.limit)
            return total, items

        total_count, items = await self._bounded(
            read(),
            timeout=self.timeout if timeout is None else timeout,
            cancel_event=cancel_event,
        )

        total_pages, has_next, has_prev = paginate(total_count, request.page, request.limit)
        return ListingResult(
            items=items,
            total_count=total_count,
            current_page=request.page,
            limit=request.limit,
            total_pages=total_pages,
            has_next_page=has_next,
            has_prev_page=has_prev,
            ignored_filters=ignored,
        )

    async def _bounded(
        self,
        operation: Awaitable[T],
        timeout: float,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> T:
        """
        Await `operation` unless the timeout or cancel_event fires first.

        On timeout/cancel the operation task is cancelled and awaited, so no
        read is left running, then CancellationFailure is raised.
        """
        task = asyncio.ensure_future(operation)
        waiters = {task}
        cancel_waiter = None
        if cancel_event is not None:
            cancel_waiter = asyncio.ensure_future(cancel_event.wait())
            waiters.add(cancel_waiter)

        try:
            done, _ = await asyncio.wait(
                waiters, timeout=timeout, return_when=asyncio.FIRST_COMPLETED
            )
        except asyncio.CancelledError:
            task.cancel()
            raise
        finally:
            if cancel_waiter is not None:
                cancel_waiter.cancel()

        if task in done:
            try:
                return task.result()
            except RentMomentError:
                raise
            except Exception as e:
                logger.error("Listing read failed: %s", str(e), exc_info=True)
                raise StorageFailure(context={"error_type": type(e).__name__}) from e

        reason = "cancelled" if cancel_event is not None and cancel_event.is_set() else "timeout"
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        except Exception as e:
            # The read failed while being torn down; the cancellation is still what the caller sees
            logger.debug("Listing read raised during cancellation: %s", str(e))
        logger.warning("Listing %s after %.2fs", reason, timeout)
        raise CancellationFailure(reason=reason, timeout=timeout)


listing_service = ListingService()
