from collections.abc import Callable

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from cardkeeper.db.database import get_session
from cardkeeper.main import app
from cardkeeper.models.card import CatalogCard
from cardkeeper.models.db import Base


@pytest.fixture
async def async_engine():
    """Create an in-memory SQLite engine for testing."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def session_factory(async_engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(async_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def session(session_factory) -> AsyncSession:
    """Provide a database session for tests."""
    async with session_factory() as session:
        yield session


@pytest.fixture
async def client(session_factory):
    """Provide an async test client with overridden database session."""

    async def override_get_session():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_session] = override_get_session

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def make_card() -> Callable[..., CatalogCard]:
    """Factory for catalog cards with sensible defaults."""

    def _make(card_id: str, name: str | None = None, **fields) -> CatalogCard:
        return CatalogCard(id=card_id, name=name or f"Card {card_id}", **fields)

    return _make


@pytest.fixture
def sample_catalog() -> list[CatalogCard]:
    """A small catalog covering every sort field."""
    return [
        CatalogCard(
            id="c-bolt",
            name="Lightning Bolt",
            cmc=1.0,
            colors=("R",),
            color_identity=("R",),
            rarity="common",
            set_code="leb",
            type_line="Instant",
            oracle_text="Lightning Bolt deals 3 damage to any target.",
        ),
        CatalogCard(
            id="c-goyf",
            name="Tarmogoyf",
            cmc=2.0,
            colors=("G",),
            color_identity=("G",),
            rarity="mythic",
            power="*",
            toughness="1+*",
            set_code="fut",
            type_line="Creature — Lhurgoyf",
        ),
        CatalogCard(
            id="c-bear",
            name="Grizzly Bears",
            cmc=2.0,
            colors=("G",),
            color_identity=("G",),
            rarity="common",
            power="2",
            toughness="2",
            set_code="leb",
            type_line="Creature — Bear",
        ),
        CatalogCard(
            id="c-sol",
            name="Sol Ring",
            cmc=1.0,
            rarity="uncommon",
            set_code="cmd",
            type_line="Artifact",
            oracle_text="{T}: Add {C}{C}.",
        ),
        CatalogCard(
            id="c-teferi",
            name="Teferi, Hero of Dominaria",
            cmc=5.0,
            colors=("W", "U"),
            color_identity=("W", "U"),
            rarity="mythic",
            set_code="dom",
            type_line="Legendary Planeswalker — Teferi",
            loyalty="4",
        ),
        CatalogCard(
            id="c-colossus",
            name="Colossal Dreadmaw",
            cmc=6.0,
            colors=("G",),
            color_identity=("G",),
            rarity="common",
            power="6",
            toughness="6",
            set_code="xln",
            type_line="Creature — Dinosaur",
            keywords=("Trample",),
        ),
    ]
