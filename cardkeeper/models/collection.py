from dataclasses import dataclass, field
from enum import Enum


class CollectionType(str, Enum):
    """What a card collection is used for."""

    COLLECTION = "collection"
    WISHLIST = "wishlist"
    DECK = "deck"


@dataclass(frozen=True, slots=True)
class LineItem:
    """
    One catalog card held in a collection.

    A collection holds at most one line item per item_id, and a retained
    line item always has quantity >= 1.
    """

    item_id: str
    quantity: int
    notes: str | None = None
    tags: tuple[str, ...] = ()


@dataclass
class CardCollection:
    """
    A named group of line items: a collection, a wishlist, or a deck.

    Quantities change only through the quantity ledger
    (see cardkeeper.services.quantity_ledger).
    """

    id: int | None
    name: str
    collection_type: CollectionType = CollectionType.COLLECTION
    description: str = ""
    is_active: bool = False
    line_items: list[LineItem] = field(default_factory=list)

    def get_quantity(self, item_id: str) -> int:
        """Get quantity held of a catalog card (0 if absent)."""
        for item in self.line_items:
            if item.item_id == item_id:
                return item.quantity
        return 0

    def total_cards(self) -> int:
        """Total number of cards in collection."""
        return sum(item.quantity for item in self.line_items)

    def unique_cards(self) -> int:
        """Number of distinct catalog cards in collection."""
        return len(self.line_items)
