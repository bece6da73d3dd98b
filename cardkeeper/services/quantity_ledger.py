"""
Collection quantity ledger.

Applies batches of quantity modifications to a collection's line items.
Every function here is a pure transform: it returns a new line-item list
and never mutates its input. Persisting the result is the caller's job.

Invariants on every returned list:
- each line item has quantity >= 1
- no two line items share an item_id
"""

import logging
from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import replace
from typing import Any

from cardkeeper.models.collection import LineItem
from cardkeeper.models.failure import InvalidModificationError, NotFoundError
from cardkeeper.models.modification import QuantityModification, QuantityOperator

logger = logging.getLogger(__name__)

# Next quantity from (current, amount); a result <= 0 removes the line item
QUANTITY_RULES: dict[QuantityOperator, Callable[[int, int], int]] = {
    QuantityOperator.SET: lambda current, amount: amount,
    QuantityOperator.ADD: lambda current, amount: current + amount,
    QuantityOperator.SUBTRACT: lambda current, amount: max(0, current - amount),
}


def _is_count(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def validate_modifications(modifications: Sequence[QuantityModification]) -> None:
    """
    Check a whole batch before anything is applied.

    Raises:
        InvalidModificationError: For the first entry with an empty item id,
            an unknown operator, or an amount that is not a non-negative int
    """
    for index, modification in enumerate(modifications):
        if not isinstance(modification.item_id, str) or not modification.item_id.strip():
            raise InvalidModificationError(index, "item id is required")
        if not isinstance(modification.operator, QuantityOperator):
            raise InvalidModificationError(
                index, f"unknown operator '{modification.operator}'"
            )
        if not _is_count(modification.amount):
            raise InvalidModificationError(index, "amount must be an integer")
        if modification.amount < 0:
            raise InvalidModificationError(
                index, f"amount must be zero or more, got {modification.amount}"
            )


def parse_modifications(raw: Iterable[Mapping[str, Any]]) -> list[QuantityModification]:
    """
    Build modifications from untrusted mappings.

    Accepts "item_id" or "cardId" for the item, plus "operator" and "amount".

    Raises:
        InvalidModificationError: For the first malformed entry
    """
    modifications: list[QuantityModification] = []
    for index, entry in enumerate(raw):
        item_id = entry.get("item_id", entry.get("cardId"))
        if not isinstance(item_id, str) or not item_id.strip():
            raise InvalidModificationError(index, "item id is required")

        try:
            operator = QuantityOperator(entry.get("operator"))
        except ValueError:
            valid = ", ".join(op.value for op in QuantityOperator)
            raise InvalidModificationError(
                index, f"operator must be one of: {valid}"
            ) from None

        amount = entry.get("amount")
        if not _is_count(amount):
            raise InvalidModificationError(index, "amount must be an integer")

        modifications.append(QuantityModification(item_id, operator, amount))

    validate_modifications(modifications)
    return modifications


def _index_line_items(line_items: Iterable[LineItem]) -> dict[str, LineItem]:
    """Key line items by item_id, merging any duplicates into the first."""
    indexed: dict[str, LineItem] = {}
    for item in line_items:
        existing = indexed.get(item.item_id)
        if existing is None:
            indexed[item.item_id] = item
            continue
        logger.warning("Merging duplicate line items for %s", item.item_id)
        indexed[item.item_id] = replace(existing, quantity=existing.quantity + item.quantity)
    return indexed


def apply_modifications(
    line_items: Sequence[LineItem],
    modifications: Sequence[QuantityModification],
) -> list[LineItem]:
    """
    Apply a batch of quantity modifications.

    The batch is validated up front and either applies completely or not at
    all. Modifications are applied in order, so several entries for the same
    item fold left. Surviving line items keep their position, notes and
    tags; newly created ones are appended.

    Examples:
        >>> apply_modifications([], [QuantityModification.subtract("a", 5)])
        []
        >>> apply_modifications(
        ...     [LineItem("a", 2)],
        ...     [QuantityModification.add("a", 1), QuantityModification.subtract("a", 3)],
        ... )
        []

    Raises:
        InvalidModificationError: If any modification in the batch is invalid
    """
    validate_modifications(modifications)

    items = _index_line_items(line_items)
    for modification in modifications:
        existing = items.get(modification.item_id)
        current = existing.quantity if existing else 0
        quantity = QUANTITY_RULES[modification.operator](current, modification.amount)

        if quantity <= 0:
            items.pop(modification.item_id, None)
        elif existing is None:
            items[modification.item_id] = LineItem(modification.item_id, quantity)
        else:
            items[modification.item_id] = replace(existing, quantity=quantity)

    return list(items.values())


def normalize_tags(tags: Iterable[str] | None) -> tuple[str, ...]:
    """Strip tag labels, dropping blanks and repeats while keeping order."""
    seen: dict[str, None] = {}
    for tag in tags or ():
        label = tag.strip()
        if label:
            seen.setdefault(label, None)
    return tuple(seen)


def add_line_item(line_items: Sequence[LineItem], entry: LineItem) -> list[LineItem]:
    """
    Add a line item, merging into an existing one for the same card.

    On merge the quantities are summed; notes and tags from `entry` replace
    the existing ones only when given.

    Raises:
        InvalidModificationError: If entry.quantity is less than 1
    """
    if not _is_count(entry.quantity) or entry.quantity < 1:
        raise InvalidModificationError(0, "quantity must be at least 1")

    items = apply_modifications(
        line_items, [QuantityModification.add(entry.item_id, entry.quantity)]
    )
    tags = normalize_tags(entry.tags)
    return [
        replace(
            item,
            notes=entry.notes if entry.notes is not None else item.notes,
            tags=tags or item.tags,
        )
        if item.item_id == entry.item_id
        else item
        for item in items
    ]


def update_line_item(
    line_items: Sequence[LineItem],
    item_id: str,
    *,
    notes: str | None = None,
    tags: Iterable[str] | None = None,
    quantity: int | None = None,
) -> list[LineItem]:
    """
    Edit notes, tags and/or quantity of one line item.

    Setting quantity to 0 removes the line item.

    Raises:
        NotFoundError: If no line item exists for item_id
        InvalidModificationError: If quantity is negative
    """
    if not any(item.item_id == item_id for item in line_items):
        raise NotFoundError("line item", item_id)

    updated = [
        replace(
            item,
            notes=notes if notes is not None else item.notes,
            tags=normalize_tags(tags) if tags is not None else item.tags,
        )
        if item.item_id == item_id
        else item
        for item in line_items
    ]
    if quantity is None:
        return updated
    return apply_modifications(updated, [QuantityModification.set(item_id, quantity)])


def remove_line_item(line_items: Sequence[LineItem], item_id: str) -> list[LineItem]:
    """
    Drop the line item for item_id.

    Raises:
        NotFoundError: If no line item exists for item_id
    """
    remaining = [item for item in line_items if item.item_id != item_id]
    if len(remaining) == len(line_items):
        raise NotFoundError("line item", item_id)
    return remaining
