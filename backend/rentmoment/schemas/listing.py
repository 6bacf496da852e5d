"""
Rent The Moment Backend — Listing Request & Envelope Schemas
============================================================

What:  The typed contract every collection endpoint hands to ListingService,
       and the `{success, data}` envelope the results go back out in.
Why:   Query strings arrive as loose strings ("0", "-5", "abc"). They are
       normalized HERE, at the boundary, so ListingService only ever sees a
       valid page, a bounded limit and a parsed sort.

Normalization rules (permissive: pagination parameters are advisory):
    page:  non-numeric or ≤ 0       → 1
           > MAX_PAGE               → MAX_PAGE (keeps the offset a 64-bit integer)
    limit: non-numeric or ≤ 0       → LISTING_DEFAULT_LIMIT
           > LISTING_MAX_LIMIT      → LISTING_MAX_LIMIT
    sort:  "-createdAt,name"        → [createdAt desc, name asc]
           missing / empty          → [createdAt desc]
"""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from rentmoment.config import settings

# Far beyond any real collection; page * LISTING_MAX_LIMIT stays well inside int64
MAX_PAGE = 1_000_000_000


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


class SortField(BaseModel):
    """One (field, direction) sort term, using the API (camelCase) field name."""

    field: str
    direction: SortDirection = SortDirection.DESC

    model_config = ConfigDict(frozen=True)


def default_sort() -> List[SortField]:
    return [SortField(field="createdAt", direction=SortDirection.DESC)]


def parse_sort(raw: Optional[str]) -> List[SortField]:
    """
    Parse a `sort` query value into SortField terms.

    Examples:
        "-createdAt"        → [createdAt desc]
        "price,-rating"     → [price asc, rating desc]
        "name:desc"         → [name desc]
    """
    if not raw:
        return default_sort()

    terms: List[SortField] = []
    for chunk in raw.split(","):
        chunk = chunk.strip()
        if not chunk:
            continue
        direction = SortDirection.ASC
        if ":" in chunk:
            chunk, _, suffix = chunk.partition(":")
            if suffix.strip().lower() == "desc":
                direction = SortDirection.DESC
        elif chunk.startswith("-"):
            chunk, direction = chunk[1:], SortDirection.DESC
        elif chunk.startswith("+"):
            chunk = chunk[1:]
        chunk = chunk.strip()
        if chunk:
            terms.append(SortField(field=chunk, direction=direction))
    return terms or default_sort()


def _positive_int(value: Any) -> Optional[int]:
    """Best-effort conversion to a positive int; None when not possible."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value > 0 else None
    if isinstance(value, float):
        return int(value) if value.is_integer() and value > 0 else None
    if isinstance(value, str):
        try:
            number = int(value.strip())
        except ValueError:
            return None
        return number if number > 0 else None
    return None


class ListingRequest(BaseModel):
    """
    A normalized listing query.

    Constructed once per incoming request (see `from_query`), consumed by
    ListingService.list(), then discarded.

    Attributes:
        page:    1-indexed page number (always ≥ 1 after validation)
        limit:   page size (always within 1..LISTING_MAX_LIMIT)
        filters: raw filter values keyed by API field name; the collection's
                 field profile decides how each one is matched
        sort:    ordered sort terms
    """

    page: int = 1
    limit: int = Field(default_factory=lambda: settings.listing_default_limit)
    filters: Dict[str, Any] = Field(default_factory=dict)
    sort: List[SortField] = Field(default_factory=default_sort)

    @field_validator("page", mode="before")
    @classmethod
    def normalize_page(cls, v: Any) -> int:
        return min(_positive_int(v) or 1, MAX_PAGE)

    @field_validator("limit", mode="before")
    @classmethod
    def normalize_limit(cls, v: Any) -> int:
        limit = _positive_int(v)
        if limit is None:
            return settings.listing_default_limit
        return min(limit, settings.listing_max_limit)

    @field_validator("sort", mode="before")
    @classmethod
    def normalize_sort(cls, v: Any) -> Any:
        if v is None:
            return default_sort()
        if isinstance(v, str):
            return parse_sort(v)
        if isinstance(v, (list, tuple)) and not v:
            return default_sort()
        return v

    @field_validator("filters", mode="before")
    @classmethod
    def drop_empty_filters(cls, v: Any) -> Any:
        # Absent or empty filter entries impose no condition
        if v is None:
            return {}
        if isinstance(v, dict):
            return {
                key: value
                for key, value in v.items()
                if value is not None and not (isinstance(value, str) and not value.strip())
            }
        return v

    @classmethod
    def from_query(
        cls,
        page: Any = None,
        limit: Any = None,
        sort: Optional[str] = None,
        **filters: Any,
    ) -> "ListingRequest":
        """Build a request from raw query-string values."""
        return cls(
            page=page,
            limit=limit,
            sort=sort,
            filters=filters,
        )

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


class PaginatedData(BaseModel):
    """
    The `data` object of a listing response, minus the entity array.

    The entity array is attached under the collection's plural name
    ("merchants", "products", ...) by ListingResult.to_data().
    """

    total_pages: int = Field(alias="totalPages")
    current_page: int = Field(alias="currentPage")
    total: int
    has_next_page: bool = Field(alias="hasNextPage")
    has_prev_page: bool = Field(alias="hasPrevPage")

    model_config = ConfigDict(populate_by_name=True)
