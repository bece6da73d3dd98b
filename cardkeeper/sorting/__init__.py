"""
Catalog ordering.

Derived keys for color, rarity and power/toughness, plus the registry
that maps sort field names to key strategies.
"""

from cardkeeper.sorting.ranking import (
    COLOR_COMBINATION_ORDER,
    RARITY_ORDER,
    coerce_numeric,
    normalize_colors,
    rank_color,
    rank_or_sentinel,
    rank_rarity,
)
from cardkeeper.sorting.registry import (
    SORT_STRATEGIES,
    SortStrategy,
    get_sort_strategy,
    resolve_sort_strategy,
    valid_sort_fields,
)

__all__ = [
    "COLOR_COMBINATION_ORDER",
    "RARITY_ORDER",
    "SORT_STRATEGIES",
    "SortStrategy",
    "coerce_numeric",
    "get_sort_strategy",
    "normalize_colors",
    "rank_color",
    "rank_or_sentinel",
    "rank_rarity",
    "resolve_sort_strategy",
    "valid_sort_fields",
]
