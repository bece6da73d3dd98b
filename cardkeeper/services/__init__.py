"""
CardKeeper services.

Catalog search and ordering, and collection quantity bookkeeping.
"""

from cardkeeper.services.card_database import (
    download_card_database,
    load_card_database,
    parse_catalog,
)
from cardkeeper.services.card_search import (
    SearchQuery,
    SearchTerm,
    match_cards,
    parse_query,
    parse_term,
    tokenize_query,
)
from cardkeeper.services.catalog_query import (
    PageResult,
    execute_query,
    order_cards,
    paginate,
)
from cardkeeper.services.quantity_ledger import (
    QUANTITY_RULES,
    add_line_item,
    apply_modifications,
    normalize_tags,
    parse_modifications,
    remove_line_item,
    update_line_item,
    validate_modifications,
)

__all__ = [
    "PageResult",
    "QUANTITY_RULES",
    "SearchQuery",
    "SearchTerm",
    "add_line_item",
    "apply_modifications",
    "download_card_database",
    "execute_query",
    "load_card_database",
    "match_cards",
    "normalize_tags",
    "order_cards",
    "paginate",
    "parse_catalog",
    "parse_modifications",
    "parse_query",
    "parse_term",
    "remove_line_item",
    "tokenize_query",
    "update_line_item",
    "validate_modifications",
]
