"""Keyset pagination shared by every listing page.

A page is addressed by a ``start`` id and a ``direction``. Walking forwards
moves away from the listing's first row, walking backwards moves towards it.
Rows are always handed back in the listing's natural order, whichever way the
query ran, together with the cursors for the neighbouring pages and the
min/max id of the whole filtered set so links can be disabled at either end.
"""

from __future__ import annotations

import enum
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from sqlalchemy import func, select
from sqlalchemy.orm import InstrumentedAttribute, Session
from sqlalchemy.sql import ColumnElement

# Largest id representable by a signed 64-bit column.
MAX_ID = 2**63 - 1

MIN_LIMIT = 1
MAX_LIMIT = 100
DEFAULT_LIMIT = 40

T = TypeVar("T")


class Direction(str, enum.Enum):
    FORWARDS = "forwards"
    BACKWARDS = "backwards"

    @classmethod
    def parse(cls, raw: str | None) -> Direction:
        """Return the direction named ``raw``, falling back to forwards."""
        try:
            return cls(raw)
        except ValueError:
            return cls.FORWARDS


class Order(enum.Enum):
    """Natural order of a listing."""

    NEWEST_FIRST = "newest_first"
    OLDEST_FIRST = "oldest_first"

    @property
    def default_start(self) -> int:
        return MAX_ID if self is Order.NEWEST_FIRST else 0


def clamp_limit(limit: int | None) -> int:
    """Clamp ``limit`` into ``[MIN_LIMIT, MAX_LIMIT]``; ``None`` means the default."""
    if limit is None:
        return DEFAULT_LIMIT
    return max(MIN_LIMIT, min(limit, MAX_LIMIT))


def saturating_inc(value: int) -> int:
    return min(value + 1, MAX_ID)


def saturating_dec(value: int) -> int:
    return max(value - 1, 0)


@dataclass(frozen=True)
class PageRequest:
    """Validated pagination parameters taken from a query string."""

    direction: Direction = Direction.FORWARDS
    start: int | None = None
    limit: int = DEFAULT_LIMIT

    @classmethod
    def from_query(
        cls,
        direction: str | None = None,
        start_id: int | None = None,
        limit: int | None = None,
    ) -> PageRequest:
        if start_id is not None:
            start_id = max(0, min(start_id, MAX_ID))
        return cls(
            direction=Direction.parse(direction),
            start=start_id,
            limit=clamp_limit(limit),
        )

    def start_for(self, order: Order) -> int:
        return order.default_start if self.start is None else self.start

    def fetches_ascending(self, order: Order) -> bool:
        """Whether the SQL query runs with ascending ids."""
        return (order is Order.OLDEST_FIRST) == (self.direction is Direction.FORWARDS)


@dataclass(frozen=True)
class Page(Generic[T]):
    """One window of a listing plus everything needed to render its links."""

    items: list[T]
    order: Order
    request: PageRequest
    prev_start: int
    next_start: int
    min_id: int | None
    max_id: int | None

    @property
    def limit(self) -> int:
        return self.request.limit

    @property
    def has_prev(self) -> bool:
        """Whether a page exists before this one in natural order."""
        if self.order is Order.NEWEST_FIRST:
            return self.max_id is not None and self.prev_start <= self.max_id
        return self.min_id is not None and self.prev_start >= self.min_id

    @property
    def has_next(self) -> bool:
        """Whether a page exists after this one in natural order."""
        if self.order is Order.NEWEST_FIRST:
            return self.min_id is not None and self.next_start >= self.min_id
        return self.max_id is not None and self.next_start <= self.max_id

    def map(self, convert: Any) -> Page[Any]:
        """Return the same page with every item passed through ``convert``."""
        return Page(
            items=[convert(item) for item in self.items],
            order=self.order,
            request=self.request,
            prev_start=self.prev_start,
            next_start=self.next_start,
            min_id=self.min_id,
            max_id=self.max_id,
        )


def boundary_cursors(ids: Sequence[int], order: Order) -> tuple[int, int]:
    """Return ``(prev_start, next_start)`` for a page whose ids are ``ids``.

    ``ids`` must already be in the listing's natural order. An empty page gets
    the extreme values so both links point past the ends of the listing.
    """
    if order is Order.NEWEST_FIRST:
        prev_start = saturating_inc(ids[0]) if ids else MAX_ID
        next_start = saturating_dec(ids[-1]) if ids else 0
    else:
        prev_start = saturating_dec(ids[0]) if ids else 0
        next_start = saturating_inc(ids[-1]) if ids else MAX_ID
    return prev_start, next_start


def fetch_bounds(
    db: Session,
    id_column: InstrumentedAttribute[int],
    filters: Sequence[ColumnElement[bool]],
) -> tuple[int | None, int | None]:
    """Return the smallest and largest id matching ``filters``."""
    row = db.execute(select(func.min(id_column), func.max(id_column)).where(*filters)).one()
    return row[0], row[1]


def fetch_page(
    db: Session,
    entity: type[T],
    id_column: InstrumentedAttribute[int],
    request: PageRequest,
    order: Order,
    filters: Sequence[ColumnElement[bool]] = (),
    options: Sequence[Any] = (),
) -> Page[T]:
    """Run a keyset query for ``entity`` and wrap the result in a ``Page``.

    Args:
        db: Database session.
        entity: Mapped class being listed.
        id_column: Monotonic id column used as the cursor.
        request: Direction, start cursor and limit.
        order: Natural order of the listing.
        filters: Extra conditions, applied to both the page and the bounds query.
        options: Loader options for the page query.

    Returns:
        The rows in natural order with cursors and bounds.
    """
    start = request.start_for(order)
    if request.fetches_ascending(order):
        window = id_column >= start
        ordering = id_column.asc()
    else:
        window = id_column <= start
        ordering = id_column.desc()

    stmt = (
        select(entity)
        .where(*filters, window)
        .order_by(ordering)
        .limit(request.limit)
        .options(*options)
    )
    items = list(db.scalars(stmt).unique())
    if request.direction is Direction.BACKWARDS:
        items.reverse()

    ids = [item.id for item in items]  # type: ignore[attr-defined]
    prev_start, next_start = boundary_cursors(ids, order)
    min_id, max_id = fetch_bounds(db, id_column, filters)

    return Page(
        items=items,
        order=order,
        request=request,
        prev_start=prev_start,
        next_start=next_start,
        min_id=min_id,
        max_id=max_id,
    )
