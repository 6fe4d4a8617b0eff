"""
Court directory service: create, list, update, remove.

Listing routes every call to exactly one index (see court_query) and pages
through it with opaque continuation cursors. Text search uses PostgreSQL
full-text search; other dialects fall back to case-insensitive term matching
on the court name.
"""

import logging
import os
from typing import Any, Dict, List, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from court_directory.database.models import (
    COURT_SEARCH_INDEX,
    SEARCH_TS_CONFIG,
    Court,
    CourtCost,
    CourtStatus,
    CourtType,
)
from court_directory.services.court_query import CourtFilters, QueryStrategy, select_strategy
from court_directory.services.pagination import (
    KEYSET,
    OFFSET,
    Cursor,
    decode_cursor,
    encode_cursor,
    query_scope,
)
from court_directory.utils.constants import (
    COST_FILTER_MODES,
    COST_FILTER_POST_PAGE,
    DEFAULT_PAGE_SIZE,
    MAX_PAGE_SIZE,
)
from court_directory.utils.datetime_utils import epoch_millis

logger = logging.getLogger(__name__)


class CourtNotFoundError(ValueError):
    """Raised when the target court does not exist."""


class CourtValidationError(ValueError):
    """Raised when a court value is rejected before or at write time."""


MUTABLE_FIELDS = (
    "name",
    "address_street",
    "address_city",
    "address_state",
    "address_zip",
    "num_courts",
    "court_type",
    "cost",
    "cost_notes",
    "admin_notes",
    "status",
)

_ENUM_FIELDS = {
    "court_type": CourtType,
    "cost": CourtCost,
    "status": CourtStatus,
}

_NULLABLE_FIELDS = {"cost_notes", "admin_notes"}

# Listing filters the text search may narrow by, in application order.
_SEARCH_FILTERS = ("status", "court_type", "cost")


def _escape_like(value: str) -> str:
    """Escape LIKE-special characters (%, _) so they match literally."""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _coerce_enum(field: str, value: Any) -> str:
    enum_cls = _ENUM_FIELDS[field]
    try:
        return enum_cls(value).value
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise CourtValidationError(f"Invalid {field} {value!r}; expected one of: {allowed}")


def _validated_values(fields: Dict[str, Any]) -> Dict[str, Any]:
    """Check supplied court values and normalize enum members to their literals."""
    values = {}
    for field, value in fields.items():
        if field in _ENUM_FIELDS:
            value = _coerce_enum(field, value)
        elif field == "num_courts":
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise CourtValidationError(
                    f"num_courts must be a non-negative integer, got {value!r}"
                )
        elif value is None and field not in _NULLABLE_FIELDS:
            raise CourtValidationError(f"{field} cannot be null")
        values[field] = value
    return values


def _serialize_court(court: Court) -> Dict:
    return {
        "id": court.id,
        "name": court.name,
        "address_street": court.address_street,
        "address_city": court.address_city,
        "address_state": court.address_state,
        "address_zip": court.address_zip,
        "num_courts": court.num_courts,
        "court_type": court.court_type,
        "cost": court.cost,
        "cost_notes": court.cost_notes,
        "admin_notes": court.admin_notes,
        "status": court.status,
        "submitted_by": court.submitted_by,
        "last_verified_at": court.last_verified_at,
        "created_at": court.created_at,
        "updated_at": court.updated_at,
    }


def resolve_cost_filter_mode(mode: Optional[str] = None) -> str:
    """Return the cost filter mode to use, defaulting to COURT_COST_FILTER_MODE."""
    resolved = (mode or os.getenv("COURT_COST_FILTER_MODE") or COST_FILTER_POST_PAGE).lower()
    if resolved not in COST_FILTER_MODES:
        raise CourtValidationError(
            f"Unknown cost filter mode {resolved!r}; expected one of: {', '.join(COST_FILTER_MODES)}"
        )
    return resolved


async def _commit_or_reject(session: AsyncSession, action: str) -> None:
    try:
        await session.commit()
    except IntegrityError as e:
        await session.rollback()
        logger.warning("Court %s rejected by database: %s", action, e.orig)
        raise CourtValidationError(f"Court {action} rejected: {e.orig}") from e


# ---------------------------------------------------------------------------
# Mutations
# ---------------------------------------------------------------------------


async def create_court(
    session: AsyncSession,
    *,
    name: str,
    address_street: str,
    address_city: str,
    address_state: str,
    address_zip: str,
    num_courts: int,
    court_type: str,
    cost: str,
    status: str,
    cost_notes: Optional[str] = None,
    admin_notes: Optional[str] = None,
    submitted_by: Optional[int] = None,
) -> int:
    """
    Insert a court and return its id.

    ``created_at``, ``updated_at`` and ``last_verified_at`` all receive the same
    timestamp. The status is taken as given; there is no dedup or address check.

    Raises:
        CourtValidationError: If any value is rejected. Nothing is written.
    """
    values = _validated_values(
        {
            "name": name,
            "address_street": address_street,
            "address_city": address_city,
            "address_state": address_state,
            "address_zip": address_zip,
            "num_courts": num_courts,
            "court_type": court_type,
            "cost": cost,
            "cost_notes": cost_notes,
            "admin_notes": admin_notes,
            "status": status,
        }
    )
    now = epoch_millis()
    court = Court(
        **values,
        submitted_by=submitted_by,
        last_verified_at=now,
        created_at=now,
        updated_at=now,
    )
    session.add(court)
    try:
        await session.flush()
    except IntegrityError as e:
        await session.rollback()
        logger.warning("Court create rejected by database: %s", e.orig)
        raise CourtValidationError(f"Court create rejected: {e.orig}") from e
    court_id = court.id
    await _commit_or_reject(session, "create")

    logger.info("Created court %s (%s, status=%s)", court_id, values["name"], values["status"])
    return court_id


async def update_court(session: AsyncSession, court_id: int, **fields) -> int:
    """
    Patch the supplied fields of a court and bump ``updated_at``.

    Only keys present in ``fields`` are written; ``created_at``,
    ``last_verified_at`` and ``submitted_by`` never change here.

    Raises:
        CourtValidationError: On unknown fields or rejected values.
        CourtNotFoundError: If the court does not exist. Nothing is written.
    """
    unknown = sorted(set(fields) - set(MUTABLE_FIELDS))
    if unknown:
        raise CourtValidationError(f"Fields cannot be updated: {', '.join(unknown)}")
    values = _validated_values(fields)

    court = await session.get(Court, court_id)
    if court is None:
        raise CourtNotFoundError(f"Court {court_id} not found")

    for field, value in values.items():
        setattr(court, field, value)
    # Strictly increasing even when two updates land in the same millisecond
    court.updated_at = max(epoch_millis(), court.updated_at + 1)
    await _commit_or_reject(session, "update")

    logger.info("Updated court %s fields=%s", court_id, sorted(values))
    return court_id


async def remove_court(session: AsyncSession, court_id: int) -> int:
    """
    Permanently delete a court.

    Raises:
        CourtNotFoundError: If the court does not exist.
    """
    court = await session.get(Court, court_id)
    if court is None:
        raise CourtNotFoundError(f"Court {court_id} not found")

    await session.delete(court)
    await session.commit()

    logger.info("Removed court %s", court_id)
    return court_id


async def get_court(session: AsyncSession, court_id: int) -> Optional[Dict]:
    """Return the court as a dict, or None if not found."""
    court = await session.get(Court, court_id)
    if court is None:
        return None
    return _serialize_court(court)


# ---------------------------------------------------------------------------
# Listing
# ---------------------------------------------------------------------------


def _dialect_name(session: AsyncSession) -> str:
    bind = session.bind
    return bind.dialect.name if bind is not None else ""


def _search_query(session: AsyncSession, text_query: str):
    """Base select for a text search over court names, ordered by relevance."""
    if _dialect_name(session) == "postgresql":
        ts_query = func.plainto_tsquery(SEARCH_TS_CONFIG, text_query)
        document = func.to_tsvector(SEARCH_TS_CONFIG, Court.name)
        return (
            select(Court)
            .where(document.op("@@")(ts_query))
            .order_by(func.ts_rank(document, ts_query).desc(), Court.id)
        )

    # Every term must appear somewhere in the name
    query = select(Court)
    for term in text_query.split():
        query = query.where(Court.name.ilike(f"%{_escape_like(term)}%", escape="\\"))
    return query.order_by(Court.id)


async def _list_by_search(
    session: AsyncSession,
    filters: CourtFilters,
    num_items: int,
    cursor: Optional[str],
) -> Dict:
    text_query = " ".join(filters.search_query.split())
    # Offsets are only meaningful for the same search text and filters
    scope = query_scope(text_query.lower(), filters.status, filters.court_type, filters.cost)
    decoded = decode_cursor(cursor, QueryStrategy.SEARCH.value, OFFSET, scope)
    offset = decoded.position if decoded else 0

    query = _search_query(session, text_query)
    for field in _SEARCH_FILTERS:
        value = getattr(filters, field)
        if value is None:
            continue
        if not COURT_SEARCH_INDEX.is_filterable(field):
            logger.debug("Search index %s cannot filter on %s; ignoring", COURT_SEARCH_INDEX.name, field)
            continue
        query = query.where(getattr(Court, field) == value)

    rows = (await session.execute(query.offset(offset).limit(num_items + 1))).scalars().all()
    courts = rows[:num_items]
    return {
        "page": [_serialize_court(c) for c in courts],
        "continue_cursor": encode_cursor(
            Cursor(QueryStrategy.SEARCH.value, OFFSET, offset + len(courts), scope)
        ),
        "is_done": len(rows) <= num_items,
    }


async def list_courts(
    session: AsyncSession,
    *,
    num_items: int = DEFAULT_PAGE_SIZE,
    cursor: Optional[str] = None,
    search_query: Optional[str] = None,
    status: Optional[str] = None,
    court_type: Optional[str] = None,
    cost: Optional[str] = None,
    state: Optional[str] = None,
    city: Optional[str] = None,
    cost_filter_mode: Optional[str] = None,
) -> Dict:
    """
    List one page of courts.

    Exactly one strategy answers the call, chosen in priority order: text
    search, status, court type, location (state and/or city), full scan.
    Filters the chosen strategy does not cover are ignored, except ``cost``:

    * inside a text search, cost narrows the search like status and court type;
    * otherwise, with the default ``post_page`` mode, the fetched page is
      filtered in memory. The page can then hold fewer than ``num_items``
      courts (even none) while more matches remain, and ``continue_cursor`` /
      ``is_done`` describe the unfiltered page;
    * with ``pre_page`` mode the cost condition is part of the query.

    Args:
        session: Database session.
        num_items: Page size (1..MAX_PAGE_SIZE).
        cursor: ``continue_cursor`` from the previous page, or None.
        search_query: Free text matched against court names.
        status: Filter by CourtStatus literal.
        court_type: Filter by CourtType literal.
        cost: Filter by CourtCost literal.
        state: Filter by address state (exact match).
        city: Filter by address city (exact match).
        cost_filter_mode: ``post_page`` or ``pre_page``; defaults to the
            COURT_COST_FILTER_MODE environment variable, then ``post_page``.

    Returns:
        Dict with ``page``, ``continue_cursor``, ``is_done``.

    Raises:
        CourtValidationError: On an out-of-range page size or bad enum literal.
        InvalidCursorError: If the cursor is malformed or from another query.
    """
    if num_items < 1 or num_items > MAX_PAGE_SIZE:
        raise CourtValidationError(f"num_items must be between 1 and {MAX_PAGE_SIZE}")

    filters = CourtFilters(
        search_query=search_query,
        status=_coerce_enum("status", status) if status else None,
        court_type=_coerce_enum("court_type", court_type) if court_type else None,
        cost=_coerce_enum("cost", cost) if cost else None,
        state=state or None,
        city=city or None,
    )
    strategy = select_strategy(filters)
    logger.debug("Listing courts via %s", strategy.value)

    if strategy is QueryStrategy.SEARCH:
        return await _list_by_search(session, filters, num_items, cursor)

    query = select(Court)
    if strategy is QueryStrategy.BY_STATUS:
        query = query.where(Court.status == filters.status)
    elif strategy is QueryStrategy.BY_COURT_TYPE:
        query = query.where(Court.court_type == filters.court_type)
    elif strategy is QueryStrategy.BY_LOCATION:
        if filters.state:
            query = query.where(Court.address_state == filters.state)
        if filters.city:
            query = query.where(Court.address_city == filters.city)

    post_filter_cost = False
    if filters.cost:
        if resolve_cost_filter_mode(cost_filter_mode) == COST_FILTER_POST_PAGE:
            post_filter_cost = True
        else:
            query = query.where(Court.cost == filters.cost)

    decoded = decode_cursor(cursor, strategy.value, KEYSET)
    if decoded:
        query = query.where(Court.id > decoded.position)

    rows = (await session.execute(query.order_by(Court.id).limit(num_items + 1))).scalars().all()
    courts: List[Court] = list(rows[:num_items])
    if courts:
        last_id = courts[-1].id
    else:
        last_id = decoded.position if decoded else 0

    page = [_serialize_court(c) for c in courts]
    if post_filter_cost:
        page = [c for c in page if c["cost"] == filters.cost]

    return {
        "page": page,
        "continue_cursor": encode_cursor(Cursor(strategy.value, KEYSET, last_id)),
        "is_done": len(rows) <= num_items,
    }
