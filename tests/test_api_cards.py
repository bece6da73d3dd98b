"""Tests for catalog API endpoints."""

import threading
from unittest.mock import patch

import pytest
from httpx import AsyncClient

from cardkeeper.db.operations import create_collection, replace_line_items, upsert_cards
from cardkeeper.models.card import CatalogCard
from cardkeeper.models.collection import CollectionType, LineItem
from cardkeeper.services.catalog_query import execute_query


@pytest.fixture
async def seeded(session_factory, sample_catalog) -> list[CatalogCard]:
    """Import the sample catalog."""
    async with session_factory() as session:
        await upsert_cards(session, sample_catalog)
        await session.commit()
    return sample_catalog


def card_ids(response) -> list[str]:
    return [card["id"] for card in response.json()["cards"]]


class TestSearchCards:
    async def test_default_sort_by_name(self, client: AsyncClient, seeded) -> None:
        response = await client.get("/cards")

        assert response.status_code == 200
        data = response.json()
        assert [card["name"] for card in data["cards"]] == sorted(c.name for c in seeded)
        assert data["sort"] == {"order": "name", "dir": "asc"}
        assert data["query"] is None

    async def test_pagination_metadata(self, client: AsyncClient, seeded) -> None:
        response = await client.get("/cards", params={"page": 2, "page-len": 4})

        pagination = response.json()["pagination"]
        assert pagination == {
            "total": 6,
            "page": 2,
            "page_len": 4,
            "total_pages": 2,
            "has_more": False,
        }
        assert len(response.json()["cards"]) == 2

    async def test_page_past_end_is_empty(self, client: AsyncClient, seeded) -> None:
        response = await client.get("/cards", params={"page": 9, "page-len": 4})

        assert response.status_code == 200
        assert response.json()["cards"] == []

    async def test_query_and_order(self, client: AsyncClient, seeded) -> None:
        response = await client.get(
            "/cards", params={"q": "t:creature", "order": "power", "dir": "desc"}
        )

        assert response.status_code == 200
        assert card_ids(response) == ["c-goyf", "c-colossus", "c-bear"]
        assert response.json()["query"] == "t:creature"

    async def test_query_runs_off_the_event_loop(self, client: AsyncClient, seeded) -> None:
        threads: list[int] = []

        def recording_execute_query(*args, **kwargs):
            threads.append(threading.get_ident())
            return execute_query(*args, **kwargs)

        with patch("cardkeeper.api.cards.execute_query", recording_execute_query):
            response = await client.get("/cards", params={"q": "t:instant or t:artifact"})

        assert response.status_code == 200
        assert sorted(card_ids(response)) == ["c-bolt", "c-sol"]
        assert threads and threads[0] != threading.get_ident()

    async def test_order_by_rarity(self, client: AsyncClient, seeded) -> None:
        response = await client.get("/cards", params={"order": "rarity"})

        assert card_ids(response) == [
            "c-bear",
            "c-bolt",
            "c-colossus",
            "c-sol",
            "c-goyf",
            "c-teferi",
        ]

    async def test_invalid_order(self, client: AsyncClient, seeded) -> None:
        response = await client.get("/cards", params={"order": "price"})

        assert response.status_code == 400
        data = response.json()
        assert data["outcome"] == "known_failure"
        assert data["failure"]["kind"] == "invalid_sort_field"
        assert "name" in data["failure"]["detail"]

    async def test_invalid_direction(self, client: AsyncClient) -> None:
        response = await client.get("/cards", params={"dir": "sideways"})

        assert response.status_code == 400
        assert response.json()["failure"]["kind"] == "invalid_input"

    async def test_zero_page_length(self, client: AsyncClient) -> None:
        response = await client.get("/cards", params={"page-len": 0})

        assert response.status_code == 400
        assert "page-len" in response.json()["failure"]["detail"]

    async def test_empty_catalog(self, client: AsyncClient) -> None:
        response = await client.get("/cards")

        assert response.status_code == 200
        assert response.json()["pagination"]["total"] == 0


class TestGetCard:
    async def test_get_card(self, client: AsyncClient, seeded) -> None:
        response = await client.get("/cards/c-bolt")

        assert response.status_code == 200
        data = response.json()
        assert data["name"] == "Lightning Bolt"
        assert data["colors"] == ["R"]

    async def test_card_not_found(self, client: AsyncClient) -> None:
        response = await client.get("/cards/missing")

        assert response.status_code == 404
        assert response.json()["failure"]["kind"] == "not_found"


class TestCardLocations:
    async def test_lists_collections_holding_printings(
        self, client: AsyncClient, session_factory
    ) -> None:
        async with session_factory() as session:
            await upsert_cards(
                session,
                [
                    CatalogCard(id="opt-xln", name="Opt", set_code="xln"),
                    CatalogCard(id="opt-dom", name="Opt", set_code="dom"),
                    CatalogCard(id="shock", name="Shock"),
                ],
            )
            binder = await create_collection(session, "Binder", CollectionType.COLLECTION)
            deck = await create_collection(session, "Izzet", CollectionType.DECK)
            await replace_line_items(
                session, binder, [LineItem("opt-xln", 3), LineItem("shock", 4)]
            )
            await replace_line_items(session, deck, [LineItem("opt-dom", 4)])
            await session.commit()

        response = await client.get("/cards/locations", params={"name": "Opt"})

        assert response.status_code == 200
        locations = response.json()["locations"]
        assert [loc["collection_name"] for loc in locations] == ["Binder", "Izzet"]
        assert [entry["item_id"] for entry in locations[0]["cards"]] == ["opt-xln"]
        assert locations[1]["cards"][0]["card"]["set_code"] == "dom"

    async def test_unknown_name(self, client: AsyncClient, seeded) -> None:
        response = await client.get("/cards/locations", params={"name": "Nope"})

        assert response.status_code == 200
        assert response.json()["locations"] == []

    async def test_missing_name(self, client: AsyncClient) -> None:
        response = await client.get("/cards/locations")

        assert response.json() == {"locations": []}
