"""
SQLAlchemy ORM models for persistent storage.

Models mirror the dataclass models but add database persistence.
"""

from datetime import datetime

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


class CatalogCardDB(Base):
    """
    A catalog printing imported from Scryfall bulk data.

    Keyed by the Scryfall printing id, so re-imports update in place.
    """

    __tablename__ = "catalog_cards"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), index=True)
    cmc: Mapped[float] = mapped_column(Float, default=0.0)
    colors: Mapped[list[str]] = mapped_column(JSON, default=list)
    color_identity: Mapped[list[str]] = mapped_column(JSON, default=list)
    rarity: Mapped[str] = mapped_column(String(20), default="common")
    power: Mapped[str | None] = mapped_column(String(16), nullable=True)
    toughness: Mapped[str | None] = mapped_column(String(16), nullable=True)
    set_code: Mapped[str] = mapped_column(String(16), index=True, default="")
    set_name: Mapped[str] = mapped_column(String(255), default="")
    type_line: Mapped[str] = mapped_column(String(255), default="")
    mana_cost: Mapped[str] = mapped_column(String(128), default="")
    oracle_text: Mapped[str] = mapped_column(Text, default="")
    keywords: Mapped[list[str]] = mapped_column(JSON, default=list)
    collector_number: Mapped[str] = mapped_column(String(32), default="")
    lang: Mapped[str] = mapped_column(String(8), default="en")
    layout: Mapped[str] = mapped_column(String(32), default="normal")
    loyalty: Mapped[str | None] = mapped_column(String(16), nullable=True)
    flavor_name: Mapped[str | None] = mapped_column(String(255), nullable=True)

    def __repr__(self) -> str:
        return f"<CatalogCardDB(id={self.id}, name={self.name})>"


class CardCollectionDB(Base):
    """
    A collection, wishlist or deck.

    Owns its line items; deleting the collection deletes them.
    """

    __tablename__ = "card_collections"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255))
    description: Mapped[str] = mapped_column(Text, default="")
    collection_type: Mapped[str] = mapped_column(String(20), index=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    # Relationship to line items, in display order
    line_items: Mapped[list["LineItemDB"]] = relationship(
        back_populates="collection",
        cascade="all, delete-orphan",
        order_by="LineItemDB.position",
    )

    def __repr__(self) -> str:
        return f"<CardCollectionDB(id={self.id}, name={self.name})>"


class LineItemDB(Base):
    """
    One catalog card held in a collection.

    At most one row per (collection, item).
    """

    __tablename__ = "line_items"
    __table_args__ = (UniqueConstraint("collection_id", "item_id", name="uq_collection_item"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    collection_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("card_collections.id", ondelete="CASCADE"), index=True
    )
    item_id: Mapped[str] = mapped_column(String(64), index=True)
    quantity: Mapped[int] = mapped_column(Integer, default=1)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    tags: Mapped[list[str]] = mapped_column(JSON, default=list)
    position: Mapped[int] = mapped_column(Integer, default=0)

    # Relationship back to collection
    collection: Mapped["CardCollectionDB"] = relationship(back_populates="line_items")

    def __repr__(self) -> str:
        return f"<LineItemDB(item={self.item_id}, qty={self.quantity})>"


class TagDB(Base):
    """A tag label that has been used on a line item."""

    __tablename__ = "tags"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    label: Mapped[str] = mapped_column(String(100), unique=True, index=True)

    def __repr__(self) -> str:
        return f"<TagDB(label={self.label})>"
