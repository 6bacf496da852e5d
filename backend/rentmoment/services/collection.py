"""
Rent The Moment Backend — Collections (Storage Collaborator)
============================================================

What:  The storage side of the listing protocol: per-collection field
       profiles, backend-neutral conditions, and the SQLAlchemy adapter that
       turns them into COUNT and SELECT statements.
Why:   ListingService should not know SQL. It hands a list of `Condition`s
       and `SortKey`s to a `Collection`, which only has to answer two
       questions: "how many match?" and "give me this slice".
How:   A `ListingFields` profile declares, for one table, which query fields
       can filter (and how each is matched and coerced) and which can sort.

Match modes:
    EXACT   column == value            (enumerations, booleans, ids)
    SEARCH  column ILIKE '%value%'     (free text, OR-ed across columns)
    MIN     column >= value            (range lower bound)
    MAX     column <= value            (range upper bound)
"""

import logging
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Iterable, List, Mapping, Protocol, Sequence, Tuple, Type

from sqlalchemy import and_, func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from rentmoment.exceptions import StorageFailure, ValidationFailure

logger = logging.getLogger(__name__)


class MatchMode(str, Enum):
    EXACT = "exact"
    SEARCH = "search"
    MIN = "min"
    MAX = "max"


# ── Value Coercers ────────────────────────────────────────────────────────
# Each takes the raw query value and returns the typed value, or raises
# ValidationFailure. ListingService decides whether that drops the term.

_TRUE = {"true", "1", "yes", "on"}
_FALSE = {"false", "0", "no", "off"}


def as_str(value: Any) -> str:
    text = str(value).strip()
    if not text:
        raise ValidationFailure("Empty value")
    return text


def as_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    raise ValidationFailure(f"'{value}' is not a boolean")


def as_float(value: Any) -> float:
    if isinstance(value, bool):
        raise ValidationFailure(f"'{value}' is not a number")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationFailure(f"'{value}' is not a number")
    if number != number or number in (float("inf"), float("-inf")):
        raise ValidationFailure(f"'{value}' is not a finite number")
    return number


def as_uuid(value: Any) -> uuid.UUID:
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value).strip())
    except (TypeError, ValueError, AttributeError):
        raise ValidationFailure(f"'{value}' is not a valid id")


def one_of(choices: Iterable[str]) -> Callable[[Any], str]:
    """Case-insensitive enumeration match returning the canonical spelling."""
    canonical = {choice.lower(): choice for choice in choices}

    def coerce(value: Any) -> str:
        text = str(value).strip().lower()
        if text not in canonical:
            raise ValidationFailure(
                f"'{value}' is not one of: {', '.join(canonical.values())}"
            )
        return canonical[text]

    return coerce


# ── Profile Types ─────────────────────────────────────────────────────────
@dataclass(frozen=True)
class FilterField:
    """
    How one query field filters a collection.

    Attributes:
        columns:  model attribute(s) the value is matched against; several
                  columns are OR-ed (e.g. search over name OR address)
        mode:     MatchMode
        coerce:   raw value → typed value, raises ValidationFailure
        required: a bad value fails the request instead of being dropped
    """

    columns: Tuple[str, ...]
    mode: MatchMode = MatchMode.EXACT
    coerce: Callable[[Any], Any] = as_str
    required: bool = False


def exact(column: str, coerce: Callable[[Any], Any] = as_str, required: bool = False) -> FilterField:
    return FilterField(columns=(column,), mode=MatchMode.EXACT, coerce=coerce, required=required)


def search(*columns: str) -> FilterField:
    return FilterField(columns=tuple(columns), mode=MatchMode.SEARCH, coerce=as_str)


def at_least(column: str, coerce: Callable[[Any], Any] = as_float) -> FilterField:
    return FilterField(columns=(column,), mode=MatchMode.MIN, coerce=coerce)


def at_most(column: str, coerce: Callable[[Any], Any] = as_float) -> FilterField:
    return FilterField(columns=(column,), mode=MatchMode.MAX, coerce=coerce)


@dataclass(frozen=True)
class ListingFields:
    """
    Per-collection listing profile.

    Attributes:
        filters:   query field name → FilterField
        sortable:  API sort name → model column
        id_column: unique column appended as the final sort key
    """

    filters: Mapping[str, FilterField] = field(default_factory=dict)
    sortable: Mapping[str, str] = field(default_factory=dict)
    id_column: str = "id"


@dataclass(frozen=True)
class Condition:
    """A coerced filter term, ready for the storage backend."""

    columns: Tuple[str, ...]
    mode: MatchMode
    value: Any


@dataclass(frozen=True)
class SortKey:
    column: str
    descending: bool = False


# ── Collection Port ───────────────────────────────────────────────────────
class Collection(Protocol):
    """
    What ListingService needs from storage.

    Conditions are AND-combined. `find` must apply the sort keys in order
    and then skip/limit.
    """

    fields: ListingFields

    async def count(self, conditions: Sequence[Condition]) -> int:
        ...

    async def find(
        self,
        conditions: Sequence[Condition],
        sort: Sequence[SortKey],
        skip: int,
        limit: int,
    ) -> List[Any]:
        ...


def escape_like(term: str) -> str:
    """Escape LIKE wildcards so user input is matched literally."""
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class SqlAlchemyCollection:
    """
    Collection backed by one SQLAlchemy model, read through an AsyncSession.

    Example:
        merchants = SqlAlchemyCollection(db, Merchant, MERCHANT_FIELDS)
        total = await merchants.count([Condition(("name",), MatchMode.SEARCH, "silk")])
    """

    def __init__(self, session: AsyncSession, model: Type[Any], fields: ListingFields):
        self.session = session
        self.model = model
        self.fields = fields

    def _column(self, name: str):
        return getattr(self.model, name)

    def _clause(self, condition: Condition):
        columns = [self._column(name) for name in condition.columns]

        if condition.mode is MatchMode.SEARCH:
            pattern = f"%{escape_like(str(condition.value))}%"
            clauses = [column.ilike(pattern, escape="\\") for column in columns]
        elif condition.mode is MatchMode.MIN:
            clauses = [column >= condition.value for column in columns]
        elif condition.mode is MatchMode.MAX:
            clauses = [column <= condition.value for column in columns]
        else:
            clauses = [column == condition.value for column in columns]

        return clauses[0] if len(clauses) == 1 else or_(*clauses)

    def _where(self, conditions: Sequence[Condition]):
        return [self._clause(condition) for condition in conditions]

    async def count(self, conditions: Sequence[Condition]) -> int:
        stmt = select(func.count()).select_from(self.model)
        clauses = self._where(conditions)
        if clauses:
            stmt = stmt.where(and_(*clauses))
        try:
            result = await self.session.execute(stmt)
        except SQLAlchemyError as e:
            logger.error("Count failed on %s: %s", self.model.__tablename__, str(e))
            raise StorageFailure(
                context={"table": self.model.__tablename__, "error_type": type(e).__name__}
            ) from e
        return int(result.scalar() or 0)

    async def find(
        self,
        conditions: Sequence[Condition],
        sort: Sequence[SortKey],
        skip: int,
        limit: int,
    ) -> List[Any]:
        stmt = select(self.model)
        clauses = self._where(conditions)
        if clauses:
            stmt = stmt.where(and_(*clauses))

        order_by = []
        for key in sort:
            column = self._column(key.column)
            order_by.append(column.desc() if key.descending else column.asc())
        if order_by:
            stmt = stmt.order_by(*order_by)

        stmt = stmt.offset(skip).limit(limit)
        try:
            result = await self.session.execute(stmt)
        except SQLAlchemyError as e:
            logger.error("Find failed on %s: %s", self.model.__tablename__, str(e))
            raise StorageFailure(
                context={"table": self.model.__tablename__, "error_type": type(e).__name__}
            ) from e
        return list(result.scalars().all())
