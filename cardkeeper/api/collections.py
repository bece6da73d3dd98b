"""
Collection API endpoints.

CRUD for collections, wishlists and decks, and quantity bookkeeping for
their line items. Quantities are computed by the quantity ledger and the
resulting line-item list is written back in the request's transaction.
"""

import logging
from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, Query, Response, status
from pydantic import AliasChoices, BaseModel, Field, StrictBool
from sqlalchemy.ext.asyncio import AsyncSession

from cardkeeper.api.cards import CardResponse, DetailedLineItem
from cardkeeper.db import (
    collection_to_model,
    create_collection,
    delete_collection,
    get_cards_by_ids,
    line_items_to_model,
    list_collections,
    register_tags,
    replace_line_items,
    require_collection,
    set_collection_active,
    update_collection,
)
from cardkeeper.db.database import get_session
from cardkeeper.models.collection import CardCollection, CollectionType, LineItem
from cardkeeper.models.db import CardCollectionDB
from cardkeeper.models.failure import FailureKind, KnownError, NotFoundError
from cardkeeper.services.quantity_ledger import (
    add_line_item,
    apply_modifications,
    normalize_tags,
    parse_modifications,
    remove_line_item,
    update_line_item,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/collections", tags=["collections"])


class LineItemResponse(BaseModel):
    item_id: str
    quantity: int
    notes: str | None = None
    tags: list[str] = Field(default_factory=list)


class CollectionResponse(BaseModel):
    """Response model for collection data."""

    id: int
    name: str
    description: str = ""
    collection_type: CollectionType
    is_active: bool = False
    line_items: list[LineItemResponse] = Field(default_factory=list)
    total_cards: int = 0
    unique_cards: int = 0
    cards_detailed: list[DetailedLineItem] | None = Field(
        default=None,
        description="Line items joined with catalog data (only with details=true)",
    )


class CollectionSummary(BaseModel):
    id: int
    name: str
    collection_type: CollectionType
    is_active: bool = False


class CollectionSummariesResponse(BaseModel):
    collections: list[CollectionSummary] = Field(default_factory=list)


class CollectionCreateRequest(BaseModel):
    """Request model for creating a collection."""

    name: str = Field(..., min_length=1, max_length=255)
    description: str = ""
    collection_type: CollectionType = Field(
        ...,
        validation_alias=AliasChoices("collection_type", "collectionType"),
        description="collection, wishlist, or deck",
    )


class CollectionUpdateRequest(BaseModel):
    """Request model for renaming or re-describing a collection."""

    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None


class ActiveRequest(BaseModel):
    is_active: StrictBool = Field(
        ...,
        validation_alias=AliasChoices("is_active", "isActive"),
    )


class LineItemCreateRequest(BaseModel):
    """Request model for adding a card to a collection."""

    item_id: str = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices("item_id", "cardId"),
    )
    quantity: int = Field(default=1, ge=1)
    notes: str | None = None
    tags: list[str] = Field(default_factory=list)


class LineItemUpdateRequest(BaseModel):
    """Request model for editing one line item. At least one field is required."""

    notes: str | None = None
    tags: list[str] | None = None
    quantity: int | None = Field(default=None, ge=0)


def _to_response(
    collection: CardCollection,
    detailed: list[DetailedLineItem] | None = None,
) -> CollectionResponse:
    return CollectionResponse(
        id=collection.id or 0,
        name=collection.name,
        description=collection.description,
        collection_type=collection.collection_type,
        is_active=collection.is_active,
        line_items=[
            LineItemResponse(
                item_id=item.item_id,
                quantity=item.quantity,
                notes=item.notes,
                tags=list(item.tags),
            )
            for item in collection.line_items
        ],
        total_cards=collection.total_cards(),
        unique_cards=collection.unique_cards(),
        cards_detailed=detailed,
    )


async def _require_cards_exist(
    session: AsyncSession,
    before: list[LineItem],
    after: list[LineItem],
) -> None:
    """Line items created by an edit must reference real catalog cards."""
    known = {item.item_id for item in before}
    created = [item.item_id for item in after if item.item_id not in known]
    if not created:
        return
    found = await get_cards_by_ids(session, created)
    for item_id in created:
        if item_id not in found:
            raise NotFoundError("card", item_id)


async def _save_line_items(
    session: AsyncSession,
    db_collection: CardCollectionDB,
    before: list[LineItem],
    after: list[LineItem],
) -> CollectionResponse:
    await _require_cards_exist(session, before, after)
    await register_tags(session, {tag for item in after for tag in item.tags})
    await replace_line_items(session, db_collection, after)
    return _to_response(collection_to_model(db_collection))


@router.post("", response_model=CollectionResponse, status_code=status.HTTP_201_CREATED)
async def create_card_collection(
    request: CollectionCreateRequest,
    response: Response,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> CollectionResponse:
    """Create an empty collection, wishlist or deck."""
    db_collection = await create_collection(
        session, request.name, request.collection_type, request.description
    )
    response.headers["Location"] = f"/collections/{db_collection.id}"
    logger.info("Created %s %d", request.collection_type.value, db_collection.id)
    return _to_response(collection_to_model(db_collection))


@router.get("/summaries", response_model=CollectionSummariesResponse)
async def get_collection_summaries(
    session: Annotated[AsyncSession, Depends(get_session)],
    collection_type: Annotated[CollectionType | None, Query(alias="type")] = None,
) -> CollectionSummariesResponse:
    """
    List collections without their line items.

    Optionally filtered by type; most recently updated first.
    """
    collections = await list_collections(session, collection_type)
    return CollectionSummariesResponse(
        collections=[
            CollectionSummary(
                id=c.id,
                name=c.name,
                collection_type=CollectionType(c.collection_type),
                is_active=c.is_active,
            )
            for c in collections
        ]
    )


@router.get("/{collection_id}", response_model=CollectionResponse)
async def get_card_collection(
    collection_id: int,
    session: Annotated[AsyncSession, Depends(get_session)],
    details: bool = False,
) -> CollectionResponse:
    """
    Get a collection and its line items.

    With details=true each line item is joined with its catalog card.
    """
    model = collection_to_model(await require_collection(session, collection_id))
    if not details:
        return _to_response(model)

    cards = await get_cards_by_ids(session, (item.item_id for item in model.line_items))
    detailed = [
        DetailedLineItem(
            item_id=item.item_id,
            quantity=item.quantity,
            notes=item.notes,
            tags=list(item.tags),
            card=CardResponse.from_card(cards[item.item_id]) if item.item_id in cards else None,
        )
        for item in model.line_items
    ]
    return _to_response(model, detailed)


@router.patch("/{collection_id}", response_model=CollectionResponse)
async def update_card_collection(
    collection_id: int,
    request: CollectionUpdateRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> CollectionResponse:
    """Rename a collection and/or change its description."""
    if request.name is None and request.description is None:
        raise KnownError(
            kind=FailureKind.INVALID_INPUT,
            message="No valid fields provided. Allowed fields: name, description",
        )
    db_collection = await update_collection(
        session, collection_id, name=request.name, description=request.description
    )
    return _to_response(collection_to_model(db_collection))


@router.delete("/{collection_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_card_collection(
    collection_id: int,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> Response:
    """Delete a collection and all of its line items."""
    if not await delete_collection(session, collection_id):
        raise NotFoundError("collection", str(collection_id))
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.patch("/{collection_id}/active", response_model=CollectionResponse)
async def set_active_collection(
    collection_id: int,
    request: ActiveRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> CollectionResponse:
    """
    Mark a collection active or inactive.

    Only one collection is active at a time; activating one deactivates
    the rest.
    """
    db_collection = await set_collection_active(session, collection_id, request.is_active)
    return _to_response(collection_to_model(db_collection))


@router.patch("/{collection_id}/cards", response_model=CollectionResponse)
async def modify_card_quantities(
    collection_id: int,
    modifications: Annotated[list[dict[str, Any]], Body()],
    session: Annotated[AsyncSession, Depends(get_session)],
) -> CollectionResponse:
    """
    Apply a batch of quantity modifications.

    Body: [{"item_id": "...", "operator": "add" | "subtract" | "set", "amount": n}]

    The batch applies completely or not at all. Line items reaching zero
    are removed; entries for the same card apply in order.
    """
    db_collection = await require_collection(session, collection_id)
    batch = parse_modifications(modifications)

    before = line_items_to_model(db_collection)
    after = apply_modifications(before, batch)
    logger.info(
        "Applied %d modifications to collection %d (%d -> %d line items)",
        len(batch),
        collection_id,
        len(before),
        len(after),
    )
    return await _save_line_items(session, db_collection, before, after)


@router.post("/{collection_id}/cards", response_model=CollectionResponse)
async def add_card_to_collection(
    collection_id: int,
    request: LineItemCreateRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> CollectionResponse:
    """
    Add a card to a collection.

    If the card is already held its quantity is increased; notes and tags
    given here replace the existing ones.
    """
    db_collection = await require_collection(session, collection_id)
    before = line_items_to_model(db_collection)
    after = add_line_item(
        before,
        LineItem(
            item_id=request.item_id,
            quantity=request.quantity,
            notes=request.notes,
            tags=normalize_tags(request.tags),
        ),
    )
    return await _save_line_items(session, db_collection, before, after)


@router.patch("/{collection_id}/cards/{item_id}", response_model=CollectionResponse)
async def update_collection_card(
    collection_id: int,
    item_id: str,
    request: LineItemUpdateRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> CollectionResponse:
    """
    Edit the notes, tags and/or quantity of one line item.

    A quantity of 0 removes the line item.
    """
    if request.notes is None and request.tags is None and request.quantity is None:
        raise KnownError(
            kind=FailureKind.INVALID_INPUT,
            message="At least one field required: notes, tags, quantity",
        )

    db_collection = await require_collection(session, collection_id)
    before = line_items_to_model(db_collection)
    after = update_line_item(
        before,
        item_id,
        notes=request.notes,
        tags=request.tags,
        quantity=request.quantity,
    )
    return await _save_line_items(session, db_collection, before, after)


@router.delete("/{collection_id}/cards/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_collection_card(
    collection_id: int,
    item_id: str,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> Response:
    """Remove a card from a collection regardless of quantity."""
    db_collection = await require_collection(session, collection_id)
    remaining = remove_line_item(line_items_to_model(db_collection), item_id)
    await replace_line_items(session, db_collection, remaining)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
