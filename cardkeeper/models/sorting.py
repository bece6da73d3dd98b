from enum import Enum


class SortField(str, Enum):
    """Fields the catalog can be ordered by."""

    NAME = "name"
    CMC = "cmc"
    POWER = "power"
    TOUGHNESS = "toughness"
    RARITY = "rarity"
    SET = "set"
    COLOR = "color"
    IDENTITY = "identity"


class SortDirection(str, Enum):
    """
    Sort direction.

    Applied to the comparator after key derivation: DESC reverses the
    comparison of derived keys, it never re-derives them.
    """

    ASC = "asc"
    DESC = "desc"

    @property
    def is_ascending(self) -> bool:
        return self is SortDirection.ASC
