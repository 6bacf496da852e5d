"""
Rent The Moment Backend — Listing Service Tests
==============================================

What:  The filter → count → sort → paginate protocol, exercised against a
       real (in-memory SQLite) collection, plus fake collections for the
       timeout / cancellation / storage-failure paths.

Test Strategy:
    ✅ 25-entity walk: page sizes, totalPages, next/prev flags, page past the end
    ✅ Partition: pages 1..N concatenate to the full match set, no dupes or gaps
    ✅ Count consistency and empty filter = unconditional count
    ✅ Substring search ("silk" matches only "Red Silk Saree")
    ✅ page=0 / limit=-5 behaves like the defaults
    ✅ Tie-break on id when sort keys are equal
    ✅ Invalid filter values dropped (or fatal when required)
    ✅ Timeout and cancel_event → CancellationFailure; read errors → StorageFailure
"""

import asyncio
from datetime import datetime, timedelta, timezone
from typing import Any, List
from unittest.mock import AsyncMock

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError

from rentmoment.config import settings
from rentmoment.exceptions import CancellationFailure, StorageFailure, ValidationFailure
from rentmoment.models.merchant import Merchant
from rentmoment.models.order import Order
from rentmoment.models.product import Product
from rentmoment.schemas.listing import ListingRequest
from rentmoment.services.collection import (
    MatchMode,
    SqlAlchemyCollection,
    escape_like,
)
from rentmoment.services.listing_service import ListingService, listing_service, paginate
from rentmoment.services.merchant_service import MERCHANT_FIELDS
from rentmoment.services.order_service import MY_ORDER_FIELDS
from rentmoment.services.product_service import PRODUCT_FIELDS

from tests.conftest import create_category, create_product

BASE_TIME = datetime(2024, 1, 1, tzinfo=timezone.utc)


async def seed_merchants(session, count: int, same_timestamp: bool = False) -> List[Merchant]:
    merchants = []
    for i in range(count):
        created = BASE_TIME if same_timestamp else BASE_TIME + timedelta(minutes=i)
        merchant = Merchant(
            name=f"Merchant {i:02d}",
            address="Silk Road" if i % 5 == 0 else "Main Street",
            created_at=created,
            updated_at=created,
        )
        session.add(merchant)
        merchants.append(merchant)
    await session.commit()
    return merchants


def merchants(session) -> SqlAlchemyCollection:
    return SqlAlchemyCollection(session, Merchant, MERCHANT_FIELDS)


class SlowCollection:
    """Collection whose count never finishes in time; records whether it was cancelled."""

    fields = MERCHANT_FIELDS

    def __init__(self, delay: float = 5.0):
        self.delay = delay
        self.cancelled = False

    async def count(self, conditions) -> int:
        try:
            await asyncio.sleep(self.delay)
        except asyncio.CancelledError:
            self.cancelled = True
            raise
        return 0

    async def find(self, conditions, sort, skip, limit) -> List[Any]:
        return []


class CountOnlyCollection:
    """Reports a fixed total; any fetch is a test failure."""

    fields = MERCHANT_FIELDS

    def __init__(self, total: int):
        self.total = total

    async def count(self, conditions) -> int:
        return self.total

    async def find(self, conditions, sort, skip, limit) -> List[Any]:
        raise AssertionError("find must not run for a page past the last match")


class BrokenCollection:
    fields = MERCHANT_FIELDS

    async def count(self, conditions) -> int:
        raise RuntimeError("connection reset by peer")

    async def find(self, conditions, sort, skip, limit) -> List[Any]:
        raise AssertionError("find must not run after a failed count")


# ══════════════════════════════════════════════════════════════════════════
# Pagination maths
# ══════════════════════════════════════════════════════════════════════════

class TestPaginate:
    def test_empty_collection(self):
        assert paginate(0, 1, 10) == (0, False, False)
        assert paginate(0, 3, 10) == (0, False, False)

    def test_partial_last_page(self):
        assert paginate(25, 1, 10) == (3, True, False)
        assert paginate(25, 3, 10) == (3, False, True)

    def test_exact_multiple(self):
        assert paginate(20, 2, 10) == (2, False, True)

    def test_past_the_end(self):
        assert paginate(25, 4, 10) == (3, False, True)


# ══════════════════════════════════════════════════════════════════════════
# Against SQLite
# ══════════════════════════════════════════════════════════════════════════

class TestListingAgainstDatabase:
    @pytest.mark.asyncio
    async def test_twenty_five_entities_walk(self, db_session):
        await seed_merchants(db_session, 25)
        collection = merchants(db_session)

        first = await listing_service.list(collection, ListingRequest(page=1, limit=10))
        assert len(first.items) == 10
        assert first.total_count == 25
        assert first.total_pages == 3
        assert first.has_next_page is True
        assert first.has_prev_page is False

        third = await listing_service.list(collection, ListingRequest(page=3, limit=10))
        assert len(third.items) == 5
        assert third.has_next_page is False
        assert third.has_prev_page is True

        fourth = await listing_service.list(collection, ListingRequest(page=4, limit=10))
        assert fourth.items == []
        assert fourth.total_count == 25
        assert fourth.has_next_page is False
        assert fourth.has_prev_page is True

    @pytest.mark.asyncio
    async def test_default_sort_is_newest_first(self, db_session):
        await seed_merchants(db_session, 5)
        result = await listing_service.list(merchants(db_session), ListingRequest())
        assert [m.name for m in result.items] == [f"Merchant {i:02d}" for i in (4, 3, 2, 1, 0)]

    @pytest.mark.asyncio
    async def test_pages_partition_the_match_set(self, db_session):
        await seed_merchants(db_session, 23)
        collection = merchants(db_session)

        first = await listing_service.list(collection, ListingRequest(limit=4, sort="name"))
        seen = []
        for page in range(1, first.total_pages + 1):
            result = await listing_service.list(
                collection, ListingRequest(page=page, limit=4, sort="name")
            )
            assert len(result.items) <= 4
            seen.extend(m.id for m in result.items)

        assert len(seen) == 23
        assert len(set(seen)) == 23

    @pytest.mark.asyncio
    async def test_id_breaks_ties_between_equal_sort_keys(self, db_session):
        created = await seed_merchants(db_session, 12, same_timestamp=True)
        collection = merchants(db_session)

        ids = []
        for page in (1, 2, 3):
            result = await listing_service.list(collection, ListingRequest(page=page, limit=5))
            ids.extend(m.id for m in result.items)

        assert sorted(ids, key=lambda i: i.hex) == ids
        assert set(ids) == {m.id for m in created}

        again = await listing_service.list(collection, ListingRequest(page=2, limit=5))
        assert [m.id for m in again.items] == ids[5:10]

    @pytest.mark.asyncio
    async def test_count_matches_independent_count(self, db_session):
        await seed_merchants(db_session, 20)
        result = await listing_service.list(
            merchants(db_session), ListingRequest(filters={"search": "silk"})
        )

        independent = await db_session.execute(
            select(func.count()).select_from(Merchant).where(Merchant.address.ilike("%silk%"))
        )
        assert result.total_count == independent.scalar() == 4
        assert all("Silk" in m.address for m in result.items)

    @pytest.mark.asyncio
    async def test_empty_filter_matches_everything(self, db_session):
        await seed_merchants(db_session, 7)
        result = await listing_service.list(merchants(db_session), ListingRequest(filters={}))
        assert result.total_count == 7
        assert result.ignored_filters == []

    @pytest.mark.asyncio
    async def test_zero_page_and_negative_limit_behave_like_defaults(self, db_session):
        await seed_merchants(db_session, 15)
        collection = merchants(db_session)

        odd = await listing_service.list(collection, ListingRequest(page=0, limit=-5))
        default = await listing_service.list(
            collection, ListingRequest(page=1, limit=settings.listing_default_limit)
        )
        assert odd.current_page == default.current_page == 1
        assert odd.limit == default.limit
        assert [m.id for m in odd.items] == [m.id for m in default.items]
        assert odd.has_next_page == default.has_next_page

    @pytest.mark.asyncio
    async def test_substring_search_is_case_insensitive(self, database, db_session):
        sarees = await create_category(database)
        await create_product(database, sarees)
        await create_product(
            database, sarees, name="Blue Cotton Saree", color="Blue", slug="blue-cotton-saree"
        )

        collection = SqlAlchemyCollection(db_session, Product, PRODUCT_FIELDS)
        result = await listing_service.list(collection, ListingRequest(filters={"name": "silk"}))

        assert [p.name for p in result.items] == ["Red Silk Saree"]
        assert result.total_count == 1

    @pytest.mark.asyncio
    async def test_like_wildcards_are_literal(self, db_session):
        db_session.add(Merchant(name="100% Cotton House"))
        db_session.add(Merchant(name="Cotton Barn"))
        await db_session.commit()

        result = await listing_service.list(merchants(db_session), ListingRequest(filters={"name": "%"}))
        assert [m.name for m in result.items] == ["100% Cotton House"]

    @pytest.mark.asyncio
    async def test_invalid_filter_value_is_dropped(self, database, db_session):
        sarees = await create_category(database)
        await create_product(database, sarees)
        await create_product(database, sarees, name="Gown", price=5000.0, slug="gown")

        collection = SqlAlchemyCollection(db_session, Product, PRODUCT_FIELDS)
        result = await listing_service.list(
            collection, ListingRequest(filters={"minPrice": "abc", "maxPrice": "2000"})
        )

        assert result.ignored_filters == ["minPrice"]
        assert [p.name for p in result.items] == ["Red Silk Saree"]

    @pytest.mark.asyncio
    async def test_unknown_filters_and_sort_fields_are_ignored(self, db_session):
        await seed_merchants(db_session, 3)
        result = await listing_service.list(
            merchants(db_session),
            ListingRequest(filters={"password": "x"}, sort="-secret"),
        )
        assert result.total_count == 3
        assert result.ignored_filters == []
        assert [m.name for m in result.items][0] == "Merchant 02"

    @pytest.mark.asyncio
    async def test_page_far_past_the_end_is_empty(self, db_session):
        await seed_merchants(db_session, 3)
        result = await listing_service.list(
            merchants(db_session), ListingRequest(page="99999999999999999999")
        )
        assert result.items == []
        assert result.total_count == 3
        assert result.total_pages == 1
        assert result.has_next_page is False
        assert result.has_prev_page is True

    @pytest.mark.asyncio
    async def test_out_of_range_page_skips_the_fetch(self):
        result = await listing_service.list(CountOnlyCollection(25), ListingRequest(page=4, limit=10))
        assert result.items == []
        assert result.total_count == 25
        assert result.current_page == 4


# ══════════════════════════════════════════════════════════════════════════
# Query building
# ══════════════════════════════════════════════════════════════════════════

class TestQueryBuilding:
    def test_id_is_appended_as_final_ascending_key(self):
        collection = SqlAlchemyCollection(None, Merchant, MERCHANT_FIELDS)
        keys = listing_service.build_sort(collection, ListingRequest(sort="name"))
        assert [(k.column, k.descending) for k in keys] == [("name", False), ("id", False)]

    def test_duplicate_sort_fields_keep_the_first(self):
        collection = SqlAlchemyCollection(None, Merchant, MERCHANT_FIELDS)
        keys = listing_service.build_sort(collection, ListingRequest(sort="-name,name"))
        assert [(k.column, k.descending) for k in keys] == [("name", True), ("id", False)]

    def test_conditions_follow_the_profile(self):
        collection = SqlAlchemyCollection(None, Product, PRODUCT_FIELDS)
        conditions, ignored = listing_service.build_conditions(
            collection,
            ListingRequest(filters={"size": "m", "isAvailable": "yes", "search": "silk"}),
        )
        by_columns = {c.columns: c for c in conditions}

        assert ignored == []
        assert by_columns[("size",)].value == "M"
        assert by_columns[("is_available",)].value is True
        assert by_columns[("name", "description", "brand")].mode is MatchMode.SEARCH

    def test_required_filter_failure_propagates(self):
        collection = SqlAlchemyCollection(None, Order, MY_ORDER_FIELDS)
        with pytest.raises(ValidationFailure) as exc_info:
            listing_service.build_conditions(
                collection, ListingRequest(filters={"user": "not-a-uuid"})
            )
        assert exc_info.value.field == "user"

    def test_escape_like(self):
        assert escape_like("50%_off\\") == "50\\%\\_off\\\\"


# ══════════════════════════════════════════════════════════════════════════
# Bounding and failures
# ══════════════════════════════════════════════════════════════════════════

class TestBoundedReads:
    @pytest.mark.asyncio
    async def test_timeout_raises_cancellation_failure(self):
        collection = SlowCollection()
        service = ListingService(timeout=0.05)

        with pytest.raises(CancellationFailure) as exc_info:
            await service.list(collection, ListingRequest())

        assert exc_info.value.reason == "timeout"
        assert exc_info.value.status_code == 504
        assert collection.cancelled is True

    @pytest.mark.asyncio
    async def test_per_call_timeout_overrides_default(self):
        with pytest.raises(CancellationFailure):
            await ListingService(timeout=30).list(SlowCollection(), ListingRequest(), timeout=0.05)

    @pytest.mark.asyncio
    async def test_cancel_event_stops_the_reads(self):
        collection = SlowCollection()
        cancel = asyncio.Event()
        asyncio.get_running_loop().call_later(0.02, cancel.set)

        with pytest.raises(CancellationFailure) as exc_info:
            await ListingService(timeout=5).list(collection, ListingRequest(), cancel_event=cancel)

        assert exc_info.value.reason == "cancelled"
        assert collection.cancelled is True

    @pytest.mark.asyncio
    async def test_outer_cancellation_propagates(self):
        collection = SlowCollection()
        task = asyncio.create_task(ListingService(timeout=5).list(collection, ListingRequest()))
        await asyncio.sleep(0.02)
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task
        await asyncio.sleep(0.01)
        assert collection.cancelled is True

    @pytest.mark.asyncio
    async def test_read_error_becomes_storage_failure(self):
        with pytest.raises(StorageFailure) as exc_info:
            await listing_service.list(BrokenCollection(), ListingRequest())
        assert exc_info.value.context["error_type"] == "RuntimeError"

    @pytest.mark.asyncio
    async def test_sqlalchemy_error_becomes_storage_failure(self):
        session = AsyncMock()
        session.execute.side_effect = OperationalError("SELECT", {}, Exception("db down"))
        collection = SqlAlchemyCollection(session, Merchant, MERCHANT_FIELDS)

        with pytest.raises(StorageFailure) as exc_info:
            await listing_service.list(collection, ListingRequest())
        assert exc_info.value.context["table"] == "merchants"
        assert "db down" not in exc_info.value.message

