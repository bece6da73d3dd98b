from cardkeeper.db.database import get_session, init_db
from cardkeeper.db.operations import (
    card_to_db,
    card_to_model,
    collection_to_model,
    count_cards,
    create_collection,
    delete_all_cards,
    delete_collection,
    find_collections_holding,
    get_card,
    get_cards_by_ids,
    get_cards_by_name,
    get_collection,
    line_items_to_model,
    list_cards,
    list_collections,
    list_tags,
    register_tags,
    replace_line_items,
    require_collection,
    set_collection_active,
    update_collection,
    upsert_cards,
)

__all__ = [
    "card_to_db",
    "card_to_model",
    "collection_to_model",
    "count_cards",
    "create_collection",
    "delete_all_cards",
    "delete_collection",
    "find_collections_holding",
    "get_card",
    "get_cards_by_ids",
    "get_cards_by_name",
    "get_collection",
    "get_session",
    "init_db",
    "line_items_to_model",
    "list_cards",
    "list_collections",
    "list_tags",
    "register_tags",
    "replace_line_items",
    "require_collection",
    "set_collection_active",
    "update_collection",
    "upsert_cards",
]
