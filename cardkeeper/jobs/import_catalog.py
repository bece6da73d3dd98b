"""
Import the Scryfall card catalog into the database.

Usage:
    cardkeeper-import --download          # fetch latest bulk data, then import
    cardkeeper-import --file cards.json   # import a local bulk data file
    cardkeeper-import --clear ...         # replace the catalog instead of upserting
"""

import argparse
import asyncio
import logging
from collections.abc import Sequence
from pathlib import Path

from cardkeeper.config import IMPORT_BATCH_SIZE
from cardkeeper.db.database import async_session_factory, init_db
from cardkeeper.db.operations import delete_all_cards, upsert_cards
from cardkeeper.models.card import CatalogCard
from cardkeeper.services.card_database import download_card_database, load_card_database

logger = logging.getLogger(__name__)


async def import_cards(
    cards: Sequence[CatalogCard],
    clear: bool = False,
    batch_size: int = IMPORT_BATCH_SIZE,
) -> int:
    """
    Write catalog cards in batches, committing after each batch.

    The catalog is cleared in the first transaction when `clear` is set,
    after the input has already been read.

    Returns:
        Number of cards written
    """
    total = 0
    async with async_session_factory() as session:
        if clear:
            deleted = await delete_all_cards(session)
            logger.info("Cleared %d catalog cards", deleted)

        for start in range(0, len(cards), batch_size):
            batch = cards[start : start + batch_size]
            total += await upsert_cards(session, batch)
            await session.commit()
            logger.info("Imported %d/%d cards", total, len(cards))

        if clear and not cards:
            await session.commit()

    return total


async def run_import(
    path: Path | None = None,
    download: bool = False,
    clear: bool = False,
) -> int:
    """Download (optionally) and import the catalog file."""
    await init_db()

    if download:
        logger.info("Downloading Scryfall card database...")
        try:
            path = await download_card_database(path)
        except Exception as e:
            logger.error("Failed to download card database: %s", e)
            raise
        logger.info("Downloaded card database to %s", path)

    cards = load_card_database(path)
    logger.info("Loaded %d catalog cards from file", len(cards))
    return await import_cards(cards, clear=clear)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cardkeeper-import",
        description="Import Scryfall card data into the catalog",
    )
    parser.add_argument("-f", "--file", type=Path, help="Path to a default-cards JSON file")
    parser.add_argument(
        "--download", action="store_true", help="Download the latest bulk data first"
    )
    parser.add_argument(
        "-c", "--clear", action="store_true", help="Clear existing catalog before importing"
    )
    return parser


def main(argv: Sequence[str] | None = None) -> None:
    """CLI entry point."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    args = build_parser().parse_args(argv)
    asyncio.run(run_import(args.file, download=args.download, clear=args.clear))


if __name__ == "__main__":
    main()
