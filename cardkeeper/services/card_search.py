"""
Catalog text-query matcher.

Supports a subset of Scryfall search syntax. Terms are ANDed unless
joined with "or"; parentheses group terms:
- "dragon" -> name contains "dragon"
- 'o:"draw a card"' -> oracle text contains "draw a card"
- "t:creature c:rg" -> creature with at least red and green
- "id<=esper" -> color identity within white, blue, black
- "mv>=3 pow<5" -> mana value and power comparisons
- "mv:even" -> even mana value
- "r>=rare" -> rare or mythic
- "-t:land" or "t!=land" -> anything that is not a land
- "c:red (t:goblin or t:elf)" -> red goblins and red elves
- "exclude:extras" -> no tokens, emblems, planes and other non-game cards

Unknown keys are ignored.
"""

import logging
import operator
import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import Union

from cardkeeper.models.card import CatalogCard
from cardkeeper.sorting.ranking import RARITY_ORDER

logger = logging.getLogger(__name__)

_COMPARISON = re.compile(r"^([a-z]+)(>=|<=|!=|>|<|=)(.+)$", re.IGNORECASE)
_DIGITS = re.compile(r"^[0-9]+$")

_COMPARATORS: dict[str, Callable[[float, float], bool]] = {
    ":": operator.eq,
    "=": operator.eq,
    "!=": operator.ne,
    "<": operator.lt,
    "<=": operator.le,
    ">": operator.gt,
    ">=": operator.ge,
}

_ORDERED_COMPARISONS = frozenset({"<", "<=", ">", ">="})

# Single letters, color names, and guild, shard and wedge names
_COLOR_NAMES: dict[str, frozenset[str]] = {
    "w": frozenset("W"),
    "u": frozenset("U"),
    "b": frozenset("B"),
    "r": frozenset("R"),
    "g": frozenset("G"),
    "c": frozenset(),
    "white": frozenset("W"),
    "blue": frozenset("U"),
    "black": frozenset("B"),
    "red": frozenset("R"),
    "green": frozenset("G"),
    "colorless": frozenset(),
    "azorius": frozenset("WU"),
    "dimir": frozenset("UB"),
    "rakdos": frozenset("BR"),
    "gruul": frozenset("RG"),
    "selesnya": frozenset("GW"),
    "orzhov": frozenset("WB"),
    "izzet": frozenset("UR"),
    "golgari": frozenset("BG"),
    "boros": frozenset("RW"),
    "simic": frozenset("GU"),
    "bant": frozenset("GWU"),
    "esper": frozenset("WUB"),
    "grixis": frozenset("UBR"),
    "jund": frozenset("BRG"),
    "naya": frozenset("RGW"),
    "abzan": frozenset("WBG"),
    "jeskai": frozenset("URW"),
    "sultai": frozenset("BGU"),
    "mardu": frozenset("RWB"),
    "temur": frozenset("GUR"),
}

_RARITY_ALIASES: dict[str, str] = {
    "c": "common",
    "u": "uncommon",
    "r": "rare",
    "m": "mythic",
}

# Layouts of cards that are not played as part of a deck
EXTRA_LAYOUTS = frozenset(
    {
        "battle",
        "planar",
        "scheme",
        "vanguard",
        "token",
        "double_faced_token",
        "emblem",
    }
)


@dataclass(frozen=True, slots=True)
class SearchTerm:
    """
    One parsed query term.

    Attributes:
        key: Operator key as typed (e.g. "t", "mv"); None for plain name text
        value: Term value with quotes removed
        comparison: ":" for key:value terms, else the comparison operator
        negated: True when the term was prefixed with "-"
    """

    key: str | None
    value: str
    comparison: str = ":"
    negated: bool = False


QueryNode = Union[SearchTerm, "SearchQuery"]


@dataclass
class SearchQuery:
    """
    A parsed query: every clause must match, and a clause matches when any
    of its alternatives does. Alternatives are terms or nested groups.

    A query with no clauses matches every card.
    """

    clauses: list[list[QueryNode]] = field(default_factory=list)

    def matches(self, card: CatalogCard) -> bool:
        return all(
            any(_node_matches(card, node) for node in alternatives)
            for alternatives in self.clauses
        )


def tokenize_query(query: str) -> list[str]:
    """
    Split a query into terms on whitespace, keeping quoted text together.
    Parentheses outside quotes are tokens of their own.

    Examples:
        'c:red t:creature' -> ["c:red", "t:creature"]
        'o:"draw a card"' -> ["o:draw a card"]
        'c:red (t:goblin or t:elf)' -> ["c:red", "(", "t:goblin", "or", "t:elf", ")"]
    """
    tokens: list[str] = []
    current: list[str] = []
    quote: str | None = None

    def flush() -> None:
        if current:
            tokens.append("".join(current))
            current.clear()

    for char in query:
        if quote is None and char in ("'", '"'):
            quote = char
            continue
        if char == quote:
            quote = None
            continue
        if quote is None and char in "()":
            flush()
            tokens.append(char)
            continue
        if quote is None and char.isspace():
            flush()
            continue
        current.append(char)

    flush()
    return tokens


def parse_term(token: str) -> SearchTerm:
    """Parse a single token into key, comparison, value and negation."""
    negated = token.startswith("-") and len(token) > 1
    if negated:
        token = token[1:]

    match = _COMPARISON.match(token)
    if match:
        return SearchTerm(
            key=match.group(1).lower(),
            value=match.group(3),
            comparison=match.group(2),
            negated=negated,
        )

    colon = token.find(":")
    if colon > 0:
        return SearchTerm(key=token[:colon].lower(), value=token[colon + 1 :], negated=negated)

    return SearchTerm(key=None, value=token, negated=negated)


def _is_or(token: str) -> bool:
    return token.lower() == "or"


def _parse_group(tokens: list[str], index: int, nested: bool) -> tuple[SearchQuery, int]:
    """
    Parse tokens from `index` up to the closing parenthesis of this group.

    Returns the group and the index of its closing parenthesis (or the end
    of the tokens). Terms that resolve to no filter are dropped.
    """
    query = SearchQuery()
    alternatives: list[QueryNode] = []

    while index < len(tokens):
        token = tokens[index]
        if token == ")":
            if nested:
                break
            # Stray closing parenthesis at top level
            index += 1
            continue
        if _is_or(token):
            index += 1
            continue

        if token == "(":
            group, index = _parse_group(tokens, index + 1, nested=True)
            alternatives.append(group)
            index += 1
        else:
            term = parse_term(token)
            if resolve_term(term) is not None:
                alternatives.append(term)
            else:
                logger.debug("Ignoring search term without a filter: %s", token)
            index += 1

        if index < len(tokens) and _is_or(tokens[index]):
            continue
        if alternatives:
            query.clauses.append(alternatives)
            alternatives = []

    if alternatives:
        query.clauses.append(alternatives)
    return query, index


def parse_query(query: str | None) -> SearchQuery:
    """Parse a full query string; an empty or missing query has no clauses."""
    if not query or not query.strip():
        return SearchQuery()
    parsed, _ = _parse_group(tokenize_query(query), 0, nested=False)
    return parsed


# --- Term predicates ---


def _contains(haystack: str | None, needle: str) -> bool:
    return needle.lower() in (haystack or "").lower()


def _parse_colors(value: str) -> frozenset[str]:
    """
    Parse "wu", "red", "esper" or "colorless" into color symbols.

    Letters that name no color are skipped, so unreadable text is colorless.
    """
    lowered = value.lower()
    if lowered in _COLOR_NAMES:
        return _COLOR_NAMES[lowered]
    symbols: set[str] = set()
    for char in lowered:
        symbols |= _COLOR_NAMES.get(char, frozenset())
    return frozenset(symbols)


def _match_colors(card_colors: Iterable[str], term: SearchTerm) -> bool:
    """
    Compare a card's colors with the term's.

    ":" and ">=" mean the card has at least these colors, "=" exactly these,
    "<=" at most these. A colorless value matches colorless cards only.
    """
    wanted = _parse_colors(term.value)
    have = frozenset(card_colors)
    if not wanted:
        return not have

    checks: dict[str, Callable[[], bool]] = {
        ":": lambda: have >= wanted,
        "=": lambda: have == wanted,
        "!=": lambda: have != wanted,
        ">=": lambda: have >= wanted,
        ">": lambda: have > wanted,
        "<=": lambda: have <= wanted,
        "<": lambda: have < wanted,
    }
    return checks[term.comparison]()


def _numeric(value: str | None) -> float | None:
    if value is None:
        return None
    try:
        return float(value)
    except ValueError:
        return None


def _compare_numbers(card_value: str | float | None, term: SearchTerm) -> bool:
    wanted = _numeric(term.value)
    if isinstance(card_value, str):
        # Only plain digit strings count; "*" and "1+*" never compare
        card_value = float(card_value) if _DIGITS.match(card_value) else None
    if wanted is None or card_value is None:
        return False
    return _COMPARATORS[term.comparison](card_value, wanted)


def _match_rarity(rarity: str, term: SearchTerm) -> bool:
    wanted = _RARITY_ALIASES.get(term.value.lower(), term.value.lower())
    if term.comparison in (":", "="):
        return rarity == wanted
    if wanted not in RARITY_ORDER or rarity not in RARITY_ORDER:
        return False
    return _COMPARATORS[term.comparison](
        RARITY_ORDER.index(rarity), RARITY_ORDER.index(wanted)
    )


TermPredicate = Callable[[CatalogCard, SearchTerm], bool]


@dataclass(frozen=True, slots=True)
class TermFilter:
    """
    How one search key filters cards.

    Attributes:
        predicate: Decides whether a card matches the term
        textual: Only ":", "=" and "!=" apply; "!=" inverts the predicate
            and ordered comparisons make the term ignored
        accepts: Values the key understands; other values make the term
            ignored (None accepts everything)
    """

    predicate: TermPredicate
    textual: bool = False
    accepts: Callable[[str], bool] | None = None

    def applies_to(self, term: SearchTerm) -> bool:
        if self.textual and term.comparison in _ORDERED_COMPARISONS:
            return False
        return self.accepts is None or self.accepts(term.value)


_FILTERS: dict[str, TermFilter] = {}


def _register(
    *aliases: str,
    textual: bool = False,
    accepts: Callable[[str], bool] | None = None,
) -> Callable[[TermPredicate], TermPredicate]:
    def decorator(predicate: TermPredicate) -> TermPredicate:
        term_filter = TermFilter(predicate, textual=textual, accepts=accepts)
        for alias in aliases:
            _FILTERS[alias] = term_filter
        return predicate

    return decorator


@_register("name", "n", textual=True)
def _name(card: CatalogCard, term: SearchTerm) -> bool:
    return _contains(card.name, term.value)


@_register("type", "t", textual=True)
def _type(card: CatalogCard, term: SearchTerm) -> bool:
    return _contains(card.type_line, term.value)


@_register("oracle", "o", textual=True)
def _oracle(card: CatalogCard, term: SearchTerm) -> bool:
    return _contains(card.oracle_text, term.value)


@_register("flavorname", "fn", textual=True)
def _flavor_name(card: CatalogCard, term: SearchTerm) -> bool:
    return _contains(card.flavor_name, term.value)


@_register("set", "s", "e", "edition", textual=True)
def _set(card: CatalogCard, term: SearchTerm) -> bool:
    return card.set_code.lower() == term.value.lower()


@_register("lang", "l", "language", textual=True)
def _lang(card: CatalogCard, term: SearchTerm) -> bool:
    return card.lang.lower() == term.value.lower()


@_register("layout", textual=True)
def _layout(card: CatalogCard, term: SearchTerm) -> bool:
    return card.layout.lower() == term.value.lower()


@_register("keyword", "kw", textual=True)
def _keyword(card: CatalogCard, term: SearchTerm) -> bool:
    return term.value.lower() in (k.lower() for k in card.keywords)


@_register("exclude", textual=True, accepts=lambda value: value.lower() == "extras")
def _exclude(card: CatalogCard, term: SearchTerm) -> bool:
    return card.layout not in EXTRA_LAYOUTS and card.type_line != "Card"


@_register("rarity", "r")
def _rarity(card: CatalogCard, term: SearchTerm) -> bool:
    return _match_rarity(card.rarity, term)


@_register("color", "c")
def _color(card: CatalogCard, term: SearchTerm) -> bool:
    return _match_colors(card.colors, term)


@_register("identity", "id", "ci")
def _identity(card: CatalogCard, term: SearchTerm) -> bool:
    return _match_colors(card.color_identity, term)


@_register("manavalue", "mv", "cmc")
def _mana_value(card: CatalogCard, term: SearchTerm) -> bool:
    parity = term.value.lower()
    if parity in ("even", "odd"):
        return int(card.cmc) % 2 == (0 if parity == "even" else 1)
    return _compare_numbers(card.cmc, term)


@_register("power", "pow")
def _power(card: CatalogCard, term: SearchTerm) -> bool:
    return _compare_numbers(card.power, term)


@_register("toughness", "tou")
def _toughness(card: CatalogCard, term: SearchTerm) -> bool:
    return _compare_numbers(card.toughness, term)


@_register("loyalty", "loy")
def _loyalty(card: CatalogCard, term: SearchTerm) -> bool:
    return _compare_numbers(card.loyalty, term)


def resolve_term(term: SearchTerm) -> TermFilter | None:
    """
    The filter a term applies, or None when the term is ignored.

    Plain text filters by name. Unknown keys, values a key does not accept,
    and ordered comparisons on text fields resolve to None.
    """
    term_filter = _FILTERS["name"] if term.key is None else _FILTERS.get(term.key)
    if term_filter is None or not term_filter.applies_to(term):
        return None
    return term_filter


def term_matches(card: CatalogCard, term: SearchTerm) -> bool:
    """Evaluate one term against a card, honoring negation. Ignored terms match."""
    term_filter = resolve_term(term)
    if term_filter is None:
        return True
    result = term_filter.predicate(card, term)
    if term_filter.textual and term.comparison == "!=":
        result = not result
    return result != term.negated


def _node_matches(card: CatalogCard, node: QueryNode) -> bool:
    if isinstance(node, SearchQuery):
        return node.matches(card)
    return term_matches(card, node)


def match_cards(cards: Iterable[CatalogCard], query: str | None) -> list[CatalogCard]:
    """
    Return the cards matching `query`.

    An empty or missing query matches every card. Input order is kept.
    """
    parsed = parse_query(query)
    if not parsed.clauses:
        return list(cards)
    return [card for card in cards if parsed.matches(card)]
