"""
Sort key registry.

Maps each SortField to the way its key is derived from a catalog card:
either the raw attribute value or a ranker applied to an attribute.
"""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from cardkeeper.models.card import CatalogCard
from cardkeeper.models.failure import InvalidSortFieldError
from cardkeeper.models.sorting import SortDirection, SortField
from cardkeeper.sorting.ranking import coerce_numeric, rank_color, rank_rarity

Ranker = Callable[[Any, SortDirection], int]


@dataclass(frozen=True, slots=True)
class SortStrategy:
    """
    How to derive a sort key for one field.

    Attributes:
        field: The sort field this strategy serves
        attribute: CatalogCard attribute the key is read from
        ranker: Derives an int key from the attribute; None compares the
            attribute value directly
    """

    field: SortField
    attribute: str
    ranker: Ranker | None = None

    def key_for(self, card: CatalogCard, direction: SortDirection) -> Any:
        value = getattr(card, self.attribute)
        if self.ranker is None:
            return value
        return self.ranker(value, direction)


SORT_STRATEGIES: dict[SortField, SortStrategy] = {
    SortField.NAME: SortStrategy(SortField.NAME, "name"),
    SortField.CMC: SortStrategy(SortField.CMC, "cmc"),
    SortField.POWER: SortStrategy(SortField.POWER, "power", coerce_numeric),
    SortField.TOUGHNESS: SortStrategy(SortField.TOUGHNESS, "toughness", coerce_numeric),
    SortField.RARITY: SortStrategy(SortField.RARITY, "rarity", rank_rarity),
    SortField.SET: SortStrategy(SortField.SET, "set_code"),
    SortField.COLOR: SortStrategy(SortField.COLOR, "colors", rank_color),
    SortField.IDENTITY: SortStrategy(SortField.IDENTITY, "color_identity", rank_color),
}


def valid_sort_fields() -> list[str]:
    """Names accepted by resolve_sort_strategy, in registry order."""
    return [sort_field.value for sort_field in SORT_STRATEGIES]


def get_sort_strategy(field: str | SortField) -> SortStrategy | None:
    """Look up the strategy for a field name; None if it is not registered."""
    try:
        sort_field = SortField(field)
    except ValueError:
        return None
    return SORT_STRATEGIES.get(sort_field)


def resolve_sort_strategy(field: str | SortField) -> SortStrategy:
    """
    Look up the strategy for a field name.

    Raises:
        InvalidSortFieldError: If the name is not a registered sort field
    """
    strategy = get_sort_strategy(field)
    if strategy is None:
        raise InvalidSortFieldError(str(field), valid_sort_fields())
    return strategy
