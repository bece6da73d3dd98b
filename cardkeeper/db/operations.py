"""
Database CRUD operations.

Provides async functions for the catalog, collections, their line items,
and the tag registry. Line-item quantities are computed by the quantity
ledger; these functions only persist the result.
"""

from collections.abc import Iterable, Sequence
from datetime import UTC, datetime

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from cardkeeper.models.card import CatalogCard
from cardkeeper.models.collection import CardCollection, CollectionType, LineItem
from cardkeeper.models.db import CardCollectionDB, CatalogCardDB, LineItemDB, TagDB
from cardkeeper.models.failure import NotFoundError


def _now() -> datetime:
    return datetime.now(UTC)


# --- Catalog Operations ---


def card_to_model(db_card: CatalogCardDB) -> CatalogCard:
    """Convert a database catalog card to a domain model."""
    return CatalogCard(
        id=db_card.id,
        name=db_card.name,
        cmc=db_card.cmc,
        colors=tuple(db_card.colors or ()),
        color_identity=tuple(db_card.color_identity or ()),
        rarity=db_card.rarity,
        power=db_card.power,
        toughness=db_card.toughness,
        set_code=db_card.set_code,
        set_name=db_card.set_name,
        type_line=db_card.type_line,
        mana_cost=db_card.mana_cost,
        oracle_text=db_card.oracle_text,
        keywords=tuple(db_card.keywords or ()),
        collector_number=db_card.collector_number,
        lang=db_card.lang,
        layout=db_card.layout,
        loyalty=db_card.loyalty,
        flavor_name=db_card.flavor_name,
    )


def card_to_db(card: CatalogCard) -> CatalogCardDB:
    """Convert a domain catalog card to an ORM row."""
    return CatalogCardDB(
        id=card.id,
        name=card.name,
        cmc=card.cmc,
        colors=list(card.colors),
        color_identity=list(card.color_identity),
        rarity=card.rarity,
        power=card.power,
        toughness=card.toughness,
        set_code=card.set_code,
        set_name=card.set_name,
        type_line=card.type_line,
        mana_cost=card.mana_cost,
        oracle_text=card.oracle_text,
        keywords=list(card.keywords),
        collector_number=card.collector_number,
        lang=card.lang,
        layout=card.layout,
        loyalty=card.loyalty,
        flavor_name=card.flavor_name,
    )


async def upsert_cards(session: AsyncSession, cards: Iterable[CatalogCard]) -> int:
    """
    Insert or update catalog cards by id.

    Returns the number of cards written.
    """
    count = 0
    for card in cards:
        await session.merge(card_to_db(card))
        count += 1
    await session.flush()
    return count


async def delete_all_cards(session: AsyncSession) -> int:
    """
    Delete the whole catalog.

    Returns the number of deleted records.
    """
    result = await session.execute(delete(CatalogCardDB))
    # rowcount is available on DELETE results; type stubs incomplete for async
    return int(result.rowcount)  # type: ignore[attr-defined]


async def count_cards(session: AsyncSession) -> int:
    result = await session.execute(select(func.count()).select_from(CatalogCardDB))
    return int(result.scalar_one())


async def list_cards(session: AsyncSession) -> list[CatalogCard]:
    """Load a snapshot of the whole catalog (storage order, unsorted)."""
    result = await session.execute(select(CatalogCardDB))
    return [card_to_model(row) for row in result.scalars().all()]


async def get_card(session: AsyncSession, card_id: str) -> CatalogCard | None:
    """Get one catalog card by id; None if absent."""
    db_card = await session.get(CatalogCardDB, card_id)
    return card_to_model(db_card) if db_card else None


async def get_cards_by_ids(
    session: AsyncSession, card_ids: Iterable[str]
) -> dict[str, CatalogCard]:
    """Load catalog cards for a set of ids, keyed by id. Missing ids are omitted."""
    ids = set(card_ids)
    if not ids:
        return {}
    result = await session.execute(select(CatalogCardDB).where(CatalogCardDB.id.in_(ids)))
    return {row.id: card_to_model(row) for row in result.scalars().all()}


async def get_cards_by_name(session: AsyncSession, name: str) -> list[CatalogCard]:
    """All printings with exactly this name (case-sensitive)."""
    result = await session.execute(select(CatalogCardDB).where(CatalogCardDB.name == name))
    return [card_to_model(row) for row in result.scalars().all()]


# --- Collection Operations ---


async def create_collection(
    session: AsyncSession,
    name: str,
    collection_type: CollectionType,
    description: str = "",
) -> CardCollectionDB:
    """Create a new, empty collection."""
    now = _now()
    collection = CardCollectionDB(
        name=name,
        description=description,
        collection_type=collection_type.value,
        is_active=False,
        created_at=now,
        updated_at=now,
        line_items=[],
    )
    session.add(collection)
    await session.flush()
    return collection


async def get_collection(session: AsyncSession, collection_id: int) -> CardCollectionDB | None:
    """
    Get a collection with its line items.

    Returns None if no collection exists with this id.
    """
    result = await session.execute(
        select(CardCollectionDB)
        .where(CardCollectionDB.id == collection_id)
        .options(selectinload(CardCollectionDB.line_items))
    )
    return result.scalar_one_or_none()


async def require_collection(session: AsyncSession, collection_id: int) -> CardCollectionDB:
    """
    Get a collection with its line items.

    Raises:
        NotFoundError: If no collection exists with this id
    """
    collection = await get_collection(session, collection_id)
    if collection is None:
        raise NotFoundError("collection", str(collection_id))
    return collection


async def list_collections(
    session: AsyncSession,
    collection_type: CollectionType | None = None,
) -> list[CardCollectionDB]:
    """List collections, most recently updated first."""
    query = select(CardCollectionDB).order_by(
        CardCollectionDB.updated_at.desc(), CardCollectionDB.id.desc()
    )
    if collection_type is not None:
        query = query.where(CardCollectionDB.collection_type == collection_type.value)
    result = await session.execute(query)
    return list(result.scalars().all())


async def update_collection(
    session: AsyncSession,
    collection_id: int,
    name: str | None = None,
    description: str | None = None,
) -> CardCollectionDB:
    """
    Update a collection's name and/or description.

    Raises:
        NotFoundError: If no collection exists with this id
    """
    collection = await require_collection(session, collection_id)
    if name is not None:
        collection.name = name
    if description is not None:
        collection.description = description
    collection.updated_at = _now()
    await session.flush()
    return collection


async def set_collection_active(
    session: AsyncSession,
    collection_id: int,
    is_active: bool,
) -> CardCollectionDB:
    """
    Set a collection's active flag.

    Activating a collection deactivates every other one.

    Raises:
        NotFoundError: If no collection exists with this id
    """
    collection = await require_collection(session, collection_id)
    now = _now()
    if is_active:
        await session.execute(
            update(CardCollectionDB)
            .where(CardCollectionDB.id != collection_id, CardCollectionDB.is_active.is_(True))
            .values(is_active=False, updated_at=now)
            .execution_options(synchronize_session="fetch")
        )
    collection.is_active = is_active
    collection.updated_at = now
    await session.flush()
    return collection


async def delete_collection(session: AsyncSession, collection_id: int) -> bool:
    """
    Delete a collection and its line items.

    Returns True if deleted, False if not found.
    """
    collection = await get_collection(session, collection_id)
    if not collection:
        return False

    await session.delete(collection)
    await session.flush()
    return True


async def replace_line_items(
    session: AsyncSession,
    collection: CardCollectionDB,
    line_items: Sequence[LineItem],
) -> CardCollectionDB:
    """
    Make the collection's stored line items equal `line_items`.

    Rows are matched by item_id and updated in place; rows for items no
    longer present are deleted. Order of `line_items` becomes display order.
    """
    existing = {row.item_id: row for row in collection.line_items}
    rows: list[LineItemDB] = []

    for position, item in enumerate(line_items):
        row = existing.get(item.item_id)
        if row is None:
            row = LineItemDB(item_id=item.item_id)
        row.quantity = item.quantity
        row.notes = item.notes
        row.tags = list(item.tags)
        row.position = position
        rows.append(row)

    # Assigning the list orphans (and so deletes) rows that were dropped
    collection.line_items = rows
    collection.updated_at = _now()
    await session.flush()
    return collection


def line_items_to_model(collection: CardCollectionDB) -> list[LineItem]:
    return [
        LineItem(
            item_id=row.item_id,
            quantity=row.quantity,
            notes=row.notes,
            tags=tuple(row.tags or ()),
        )
        for row in collection.line_items
    ]


def collection_to_model(collection: CardCollectionDB) -> CardCollection:
    """Convert a database collection to a domain model."""
    return CardCollection(
        id=collection.id,
        name=collection.name,
        collection_type=CollectionType(collection.collection_type),
        description=collection.description,
        is_active=collection.is_active,
        line_items=line_items_to_model(collection),
    )


async def find_collections_holding(
    session: AsyncSession, item_ids: Iterable[str]
) -> list[CardCollectionDB]:
    """Collections with at least one line item for any of `item_ids`."""
    ids = set(item_ids)
    if not ids:
        return []
    result = await session.execute(
        select(CardCollectionDB)
        .where(CardCollectionDB.line_items.any(LineItemDB.item_id.in_(ids)))
        .options(selectinload(CardCollectionDB.line_items))
        .order_by(CardCollectionDB.id)
    )
    return list(result.scalars().all())


# --- Tag Operations ---


async def register_tags(session: AsyncSession, labels: Iterable[str]) -> list[str]:
    """
    Record tag labels that are not known yet.

    Returns the newly registered labels.
    """
    wanted = {label for label in labels if label}
    if not wanted:
        return []

    result = await session.execute(select(TagDB.label).where(TagDB.label.in_(wanted)))
    known = set(result.scalars().all())
    new_labels = sorted(wanted - known)
    session.add_all(TagDB(label=label) for label in new_labels)
    await session.flush()
    return new_labels


async def list_tags(session: AsyncSession) -> list[str]:
    """All known tag labels, sorted."""
    result = await session.execute(select(TagDB.label).order_by(TagDB.label))
    return list(result.scalars().all())
