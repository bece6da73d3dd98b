"""
Derived sort keys for catalog fields with no natural scalar order.

Three rankers:
- Color combinations: fixed presentation order over all 32 WUBRG subsets
- Rarity: common < uncommon < rare < mythic
- Power/toughness: digit strings compare numerically, symbolic values
  (e.g. "*", "1+*") get a direction-dependent key

Every ranker is total: malformed catalog data gets a sentinel key
instead of an exception.
"""

import re
import sys
from collections.abc import Iterable

from cardkeeper.models.sorting import SortDirection

# Canonical color alphabet, in WUBRG presentation order
COLOR_ORDER: tuple[str, ...] = ("W", "U", "B", "R", "G")

# Presentation order of every color combination. Pairs and triples follow
# the card-game convention, which is not lexicographic over WUBRG.
COLOR_COMBINATION_ORDER: tuple[tuple[str, ...], ...] = (
    (),
    ("W",),
    ("U",),
    ("B",),
    ("R",),
    ("G",),
    ("W", "U"),
    ("W", "B"),
    ("W", "R"),
    ("W", "G"),
    ("U", "B"),
    ("U", "R"),
    ("U", "G"),
    ("B", "R"),
    ("B", "G"),
    ("R", "G"),
    ("W", "U", "B"),
    ("W", "U", "R"),
    ("W", "U", "G"),
    ("W", "B", "R"),
    ("W", "B", "G"),
    ("W", "R", "G"),
    ("U", "B", "R"),
    ("U", "B", "G"),
    ("U", "R", "G"),
    ("B", "R", "G"),
    ("W", "U", "B", "R"),
    ("W", "U", "B", "G"),
    ("W", "U", "R", "G"),
    ("W", "B", "R", "G"),
    ("U", "B", "R", "G"),
    ("W", "U", "B", "R", "G"),
)

_COLOR_COMBINATION_INDEX: dict[tuple[str, ...], int] = {
    combo: index for index, combo in enumerate(COLOR_COMBINATION_ORDER)
}

RARITY_ORDER: tuple[str, ...] = ("common", "uncommon", "rare", "mythic")

# Keys for unrecognized values; they stay at the end of results either way
SENTINEL_HIGH = sys.maxsize
SENTINEL_LOW = -sys.maxsize

# Power/toughness keys for non-numeric text
NON_NUMERIC_ASC_KEY = -1
NON_NUMERIC_DESC_KEY = 999999

_DIGITS = re.compile(r"^[0-9]+$")


def rank_or_sentinel(index: int | None, direction: SortDirection) -> int:
    """
    Return `index`, or a key that sorts last in `direction` when it is None.

    Ascending puts the largest key last, descending the smallest.
    """
    if index is not None:
        return index
    return SENTINEL_HIGH if direction.is_ascending else SENTINEL_LOW


def normalize_colors(symbols: Iterable[str] | None) -> tuple[str, ...]:
    """Reduce symbols to their canonical WUBRG subsequence, dropping unknowns."""
    present = set(symbols or ())
    return tuple(color for color in COLOR_ORDER if color in present)


def rank_color(symbols: Iterable[str] | None, direction: SortDirection) -> int:
    """
    Position of a color combination in the presentation order.

    Colorless ranks first, then monocolor, two-color and so on up to
    five-color. Unknown symbols are ignored; None is colorless.
    """
    index = _COLOR_COMBINATION_INDEX.get(normalize_colors(symbols))
    return rank_or_sentinel(index, direction)


def rank_rarity(value: str | None, direction: SortDirection) -> int:
    """Position of a rarity in RARITY_ORDER; unknown rarities sort last."""
    try:
        index: int | None = RARITY_ORDER.index(value) if value is not None else None
    except ValueError:
        index = None
    return rank_or_sentinel(index, direction)


def coerce_numeric(text: str | None, direction: SortDirection) -> int:
    """
    Sort key for power/toughness text.

    Digit-only text is its integer value. Anything else (including None)
    keys to -1 ascending and 999999 descending, so symbolic values lead
    the results in both directions.
    """
    if text is not None and _DIGITS.match(text):
        return int(text)
    return NON_NUMERIC_ASC_KEY if direction.is_ascending else NON_NUMERIC_DESC_KEY
