"""
Query routing for court listings.

Only one index is used per listing call. The strategy is picked from the
supplied filters in fixed priority order: text search, status, court type,
location, and finally a full scan. Filters that the chosen strategy does not
cover are ignored, except ``cost`` which court_service applies separately.
"""

import enum
from dataclasses import dataclass
from typing import Optional


class QueryStrategy(str, enum.Enum):
    """Closed set of ways a court listing can be answered."""

    SEARCH = "search"
    BY_STATUS = "by_status"
    BY_COURT_TYPE = "by_court_type"
    BY_LOCATION = "by_location"
    FULL_SCAN = "full_scan"


@dataclass(frozen=True)
class CourtFilters:
    """Optional listing filters as supplied by the caller."""

    search_query: Optional[str] = None
    status: Optional[str] = None
    court_type: Optional[str] = None
    cost: Optional[str] = None
    state: Optional[str] = None
    city: Optional[str] = None

    @property
    def has_search(self) -> bool:
        return bool(self.search_query and self.search_query.strip())


def select_strategy(filters: CourtFilters) -> QueryStrategy:
    """Pick the single strategy used to answer a listing with these filters."""
    if filters.has_search:
        return QueryStrategy.SEARCH
    if filters.status:
        return QueryStrategy.BY_STATUS
    if filters.court_type:
        return QueryStrategy.BY_COURT_TYPE
    if filters.state or filters.city:
        return QueryStrategy.BY_LOCATION
    return QueryStrategy.FULL_SCAN
