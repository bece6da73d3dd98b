from dataclasses import dataclass
from enum import Enum


class QuantityOperator(str, Enum):
    """How a modification's amount combines with the current quantity."""

    ADD = "add"
    SUBTRACT = "subtract"
    SET = "set"


@dataclass(frozen=True, slots=True)
class QuantityModification:
    """
    A requested change to one line item's quantity.

    The amount is never negative; the operator alone carries the sign.
    """

    item_id: str
    operator: QuantityOperator
    amount: int

    @classmethod
    def add(cls, item_id: str, amount: int) -> "QuantityModification":
        return cls(item_id=item_id, operator=QuantityOperator.ADD, amount=amount)

    @classmethod
    def subtract(cls, item_id: str, amount: int) -> "QuantityModification":
        return cls(item_id=item_id, operator=QuantityOperator.SUBTRACT, amount=amount)

    @classmethod
    def set(cls, item_id: str, amount: int) -> "QuantityModification":
        return cls(item_id=item_id, operator=QuantityOperator.SET, amount=amount)
