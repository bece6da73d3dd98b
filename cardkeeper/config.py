from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(env_file=".env", env_prefix="CARDKEEPER_")

    app_name: str = "CardKeeper"
    debug: bool = False

    database_url: str = "sqlite+aiosqlite:///./cardkeeper.db"

    # Scryfall bulk data index; the import job picks the default_cards entry
    bulk_data_url: str = "https://api.scryfall.com/bulk-data"
    data_dir: Path = Path(__file__).parent / "data"

    # Catalog search paging
    default_page_length: int = 100
    max_page_length: int = 500


settings = Settings()


# =============================================================================
# CATALOG IMPORT LIMITS
# =============================================================================

# Cards inserted per flush when importing the catalog
IMPORT_BATCH_SIZE = 1000
