"""
Card catalog file service.

Downloads Scryfall bulk card data and loads it into catalog records.
"""

import json
import logging
from pathlib import Path
from typing import Any

import httpx

from cardkeeper.config import settings
from cardkeeper.models.card import CatalogCard

logger = logging.getLogger(__name__)

BULK_DATA_TYPE = "default_cards"


def default_catalog_path() -> Path:
    return settings.data_dir / "default-cards.json"


async def download_card_database(
    output_path: Path | None = None,
    bulk_data_url: str | None = None,
) -> Path:
    """
    Download latest Scryfall default-cards bulk data.

    Args:
        output_path: Where to save the file. Defaults to data/default-cards.json
        bulk_data_url: Bulk data index URL. Defaults to settings.bulk_data_url

    Returns:
        Path to downloaded file.

    Raises:
        ValueError: If bulk data URL not found
        httpx.HTTPError: If download fails
    """
    if output_path is None:
        output_path = default_catalog_path()
    if bulk_data_url is None:
        bulk_data_url = settings.bulk_data_url

    output_path.parent.mkdir(parents=True, exist_ok=True)

    # Get download URL from the bulk data index
    async with httpx.AsyncClient(timeout=30.0) as client:
        response = await client.get(bulk_data_url)
        response.raise_for_status()
        data = response.json()

        download_url = None
        for item in data["data"]:
            if item["type"] == BULK_DATA_TYPE:
                download_url = item["download_uri"]
                break

        if not download_url:
            raise ValueError(f"Could not find {BULK_DATA_TYPE} bulk data URL")

        logger.info("Downloading %s from %s", BULK_DATA_TYPE, download_url)

        # Stream download (file is several hundred MB)
        async with client.stream("GET", download_url, timeout=300.0) as response:
            response.raise_for_status()
            with open(output_path, "wb") as f:
                async for chunk in response.aiter_bytes(8192):
                    f.write(chunk)

    return output_path


def parse_catalog(raw_cards: list[dict[str, Any]]) -> list[CatalogCard]:
    """
    Convert Scryfall card objects to catalog records.

    Entries without an id or name are skipped; a repeated id keeps the
    first occurrence.
    """
    cards: list[CatalogCard] = []
    seen: set[str] = set()
    skipped = 0

    for raw in raw_cards:
        card_id = raw.get("id")
        if not card_id or not raw.get("name"):
            skipped += 1
            continue
        if card_id in seen:
            continue
        seen.add(card_id)
        cards.append(CatalogCard.from_scryfall(raw))

    if skipped:
        logger.warning("Skipped %d catalog entries without id or name", skipped)
    return cards


def load_card_database(path: Path | None = None) -> list[CatalogCard]:
    """
    Load catalog records from a bulk data file.

    Args:
        path: Path to JSON file. Defaults to data/default-cards.json

    Raises:
        FileNotFoundError: If database file doesn't exist
    """
    if path is None:
        path = default_catalog_path()

    if not path.exists():
        raise FileNotFoundError(
            f"Card database not found at {path}. "
            "Run `cardkeeper-import --download` first."
        )

    with open(path, encoding="utf-8") as f:
        raw_cards = json.load(f)

    return parse_catalog(raw_cards)
