"""
Catalog query executor.

Filters the catalog with the text-query matcher, orders the matches with a
sort strategy, and slices out one page.

Ordering is deterministic: cards with equal sort keys are ordered by id
ascending in both directions, so repeated calls with the same parameters
always return the same pages regardless of storage order.
"""

import logging
import math
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field

from cardkeeper.models.card import CatalogCard
from cardkeeper.models.failure import InvalidPaginationError
from cardkeeper.models.sorting import SortDirection, SortField
from cardkeeper.services.card_search import match_cards
from cardkeeper.sorting.registry import SortStrategy, resolve_sort_strategy

logger = logging.getLogger(__name__)

Matcher = Callable[[Iterable[CatalogCard], str | None], list[CatalogCard]]


@dataclass
class PageResult:
    """One page of ordered catalog cards plus pagination metadata."""

    items: list[CatalogCard] = field(default_factory=list)
    total: int = 0
    page: int = 1
    page_length: int = 1
    total_pages: int = 0
    has_more: bool = False


def order_cards(
    cards: Iterable[CatalogCard],
    strategy: SortStrategy,
    direction: SortDirection,
) -> list[CatalogCard]:
    """
    Order cards by the strategy's derived key.

    Two stable sorts: id ascending first, then the derived key with the
    direction applied, which leaves id order intact among equal keys.
    """
    ordered = sorted(cards, key=lambda card: card.id)
    ordered.sort(
        key=lambda card: strategy.key_for(card, direction),
        reverse=not direction.is_ascending,
    )
    return ordered


def paginate(
    candidates: Iterable[CatalogCard],
    strategy: SortStrategy,
    direction: SortDirection,
    page: int,
    page_length: int,
) -> PageResult:
    """
    Order candidates and return the requested 1-indexed page.

    Pages below 1 are clamped to 1. A page past the end is empty with
    has_more False.

    Raises:
        InvalidPaginationError: If page_length is less than 1
    """
    if page_length < 1:
        raise InvalidPaginationError(page_length)
    page = max(page, 1)

    ordered = order_cards(candidates, strategy, direction)
    total = len(ordered)
    total_pages = math.ceil(total / page_length)

    start = (page - 1) * page_length
    return PageResult(
        items=ordered[start : start + page_length],
        total=total,
        page=page,
        page_length=page_length,
        total_pages=total_pages,
        has_more=page < total_pages,
    )


def execute_query(
    cards: Iterable[CatalogCard],
    query: str | None,
    sort_field: str | SortField,
    direction: SortDirection,
    page: int,
    page_length: int,
    matcher: Matcher = match_cards,
) -> PageResult:
    """
    Search, order and paginate the catalog.

    Args:
        cards: Catalog snapshot to search (not modified)
        query: Free-text query; empty matches everything
        sort_field: Name of a registered sort field
        direction: Sort direction
        page: 1-indexed page number
        page_length: Cards per page
        matcher: Text-query matcher producing the candidate set

    Raises:
        InvalidSortFieldError: If sort_field is not registered
        InvalidPaginationError: If page_length is less than 1
    """
    strategy = resolve_sort_strategy(sort_field)
    candidates = matcher(cards, query)
    logger.debug(
        "Query %r matched %d cards, ordering by %s %s",
        query,
        len(candidates),
        strategy.field.value,
        direction.value,
    )
    return paginate(candidates, strategy, direction, page, page_length)
