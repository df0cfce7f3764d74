"""
Query Module
Search, filter and sort stored transactions into a view. Pure functions; inputs are never mutated.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, Optional

from .models import Transaction, amount_text

logger = logging.getLogger(__name__)

ALL = "all"

SORT_KEYS = {
    "date": lambda tx: tx.date_key,
    "title": lambda tx: tx.title,
    "category": lambda tx: tx.category,
    "type": lambda tx: tx.type.value,
    "amount": lambda tx: tx.amount,
}

SORT_DIRECTIONS = ("asc", "desc")


@dataclass(frozen=True)
class ViewFilters:
    """Filter settings. "all" and empty dates mean no restriction."""

    type: str = ALL
    category: str = ALL
    start_date: str = ""
    end_date: str = ""


@dataclass(frozen=True)
class SortSpec:
    """Sort key and direction; key None keeps input order."""

    key: Optional[str] = "date"
    direction: str = "desc"

    def __post_init__(self):
        if self.key is not None and self.key not in SORT_KEYS:
            raise ValueError(f"Unknown sort key {self.key!r}. Allowed: {', '.join(SORT_KEYS)}")
        if self.direction not in SORT_DIRECTIONS:
            raise ValueError(f"Unknown sort direction {self.direction!r}. Use 'asc' or 'desc'")


class TransactionFilter:
    """Filters transactions by search term, type, category and date range."""

    @staticmethod
    def matches_search(tx: Transaction, term: str) -> bool:
        """Case-insensitive substring match on title, category and amount text."""
        if not term:
            return True
        term = term.lower()
        return (
            term in tx.title.lower()
            or term in tx.category.lower()
            or term in amount_text(tx.amount)
        )

    @staticmethod
    def matches_filters(tx: Transaction, filters: ViewFilters) -> bool:
        """All filter predicates must hold."""
        if filters.type != ALL and tx.type.value != filters.type:
            return False
        if filters.category != ALL and tx.category != filters.category:
            return False
        # YYYY-MM-DD compares lexicographically in calendar order
        if filters.start_date and tx.date_key < filters.start_date:
            return False
        if filters.end_date and tx.date_key > filters.end_date:
            return False
        return True


def view(
    records: Iterable[Transaction],
    search_term: str = "",
    filters: Optional[ViewFilters] = None,
    sort: Optional[SortSpec] = None
) -> list[Transaction]:
    """
    Produce the view-ordered subset of records.

    Args:
        records: Stored transactions
        search_term: Free-text search
        filters: Type/category/date filters (defaults to no filtering)
        sort: Sort specification (defaults to newest date first)

    Returns:
        New list; the input collection is left untouched
    """
    filters = filters or ViewFilters()
    sort = sort or SortSpec()
    records = list(records)

    result = [
        tx for tx in records
        if TransactionFilter.matches_search(tx, search_term)
        and TransactionFilter.matches_filters(tx, filters)
    ]

    if sort.key is not None:
        # sorted() is stable, also with reverse=True, so ties keep input order
        result = sorted(result, key=SORT_KEYS[sort.key], reverse=sort.direction == "desc")

    logger.debug(f"View: {len(result)}/{len(records)} transactions (search={search_term!r}, sort={sort})")
    return result


def categories_in(records: Iterable[Transaction]) -> list[str]:
    """Distinct categories in first-seen order, for building a category filter."""
    return list(dict.fromkeys(tx.category for tx in records))
