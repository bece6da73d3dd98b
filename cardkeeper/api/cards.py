"""
Catalog API endpoints.

Search, sort and paginate the card catalog, and look up single cards.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from cardkeeper.config import settings
from cardkeeper.db import find_collections_holding, get_card, get_cards_by_name, list_cards
from cardkeeper.db.database import get_session
from cardkeeper.models.card import CatalogCard
from cardkeeper.models.failure import NotFoundError
from cardkeeper.models.sorting import SortDirection
from cardkeeper.services.catalog_query import execute_query

router = APIRouter(prefix="/cards", tags=["cards"])


class CardResponse(BaseModel):
    """A catalog card as returned to clients."""

    id: str
    name: str
    cmc: float
    colors: list[str] = Field(default_factory=list)
    color_identity: list[str] = Field(default_factory=list)
    rarity: str
    power: str | None = None
    toughness: str | None = None
    set_code: str
    set_name: str = ""
    type_line: str = ""
    mana_cost: str = ""
    oracle_text: str = ""
    keywords: list[str] = Field(default_factory=list)
    collector_number: str = ""
    lang: str = "en"
    layout: str = "normal"
    loyalty: str | None = None
    flavor_name: str | None = None

    @classmethod
    def from_card(cls, card: CatalogCard) -> "CardResponse":
        return cls(**card.to_dict())


class PaginationInfo(BaseModel):
    total: int
    page: int
    page_len: int
    total_pages: int
    has_more: bool


class SortInfo(BaseModel):
    order: str
    dir: SortDirection


class CardSearchResponse(BaseModel):
    """Response model for a catalog search page."""

    cards: list[CardResponse] = Field(default_factory=list)
    query: str | None = None
    pagination: PaginationInfo
    sort: SortInfo


class DetailedLineItem(BaseModel):
    """A line item joined with its catalog card (None if the card is gone)."""

    item_id: str
    quantity: int
    notes: str | None = None
    tags: list[str] = Field(default_factory=list)
    card: CardResponse | None = None


class CardLocation(BaseModel):
    """Where printings of a card name are held."""

    collection_id: int
    collection_name: str
    cards: list[DetailedLineItem] = Field(default_factory=list)


class CardLocationsResponse(BaseModel):
    locations: list[CardLocation] = Field(default_factory=list)


@router.get("", response_model=CardSearchResponse)
async def search_cards(
    session: Annotated[AsyncSession, Depends(get_session)],
    q: str | None = None,
    page: int = 1,
    page_len: Annotated[
        int, Query(alias="page-len", ge=1, le=settings.max_page_length)
    ] = settings.default_page_length,
    order: str = "name",
    direction: Annotated[SortDirection, Query(alias="dir")] = SortDirection.ASC,
) -> CardSearchResponse:
    """
    Search the catalog.

    `q` uses the catalog query syntax (e.g. "t:creature c:r mv<=3").
    Results are ordered by `order` in direction `dir`; ties are broken by
    card id so pages never shift between identical requests.
    Pages are 1-indexed; a page past the end is empty.

    Matching and sorting run in a worker thread.
    """
    cards = await list_cards(session)
    result = await run_in_threadpool(execute_query, cards, q, order, direction, page, page_len)

    return CardSearchResponse(
        cards=[CardResponse.from_card(card) for card in result.items],
        query=q or None,
        pagination=PaginationInfo(
            total=result.total,
            page=result.page,
            page_len=result.page_length,
            total_pages=result.total_pages,
            has_more=result.has_more,
        ),
        sort=SortInfo(order=order, dir=direction),
    )


@router.get("/locations", response_model=CardLocationsResponse)
async def get_card_locations(
    session: Annotated[AsyncSession, Depends(get_session)],
    name: str | None = None,
) -> CardLocationsResponse:
    """
    Find the collections holding any printing of a card name.

    Matches the exact (case-sensitive) card name. Each location lists only
    the matching line items.
    """
    if not name:
        return CardLocationsResponse()

    printings = {card.id: card for card in await get_cards_by_name(session, name)}
    if not printings:
        return CardLocationsResponse()

    locations = []
    for collection in await find_collections_holding(session, printings):
        entries = [
            DetailedLineItem(
                item_id=row.item_id,
                quantity=row.quantity,
                notes=row.notes,
                tags=list(row.tags or ()),
                card=CardResponse.from_card(printings[row.item_id]),
            )
            for row in collection.line_items
            if row.item_id in printings
        ]
        locations.append(
            CardLocation(
                collection_id=collection.id,
                collection_name=collection.name,
                cards=entries,
            )
        )

    return CardLocationsResponse(locations=locations)


@router.get("/{card_id}", response_model=CardResponse)
async def get_catalog_card(
    card_id: str,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> CardResponse:
    """Get a single catalog card by id."""
    card = await get_card(session, card_id)
    if card is None:
        raise NotFoundError("card", card_id)
    return CardResponse.from_card(card)
