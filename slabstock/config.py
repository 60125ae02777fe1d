"""
Centralized configuration for Slabstock.

All environment variables and settings are defined here
to avoid duplication across modules.
"""
import os
from functools import lru_cache
from pathlib import Path
from typing import Union

# Bundled baseline catalogue shipped with the package
PACKAGE_DATA_DIR = Path(__file__).resolve().parent / "data"
DEFAULT_BASELINE_CSV = PACKAGE_DATA_DIR / "slabs.csv"

# Characters tesseract may emit for a slab label
OCR_CHAR_WHITELIST = (
    "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789#-/.()×x"
)


class Settings:
    """Application settings loaded from environment variables."""

    # Database
    DB_PATH: str = os.environ.get("SLABSTOCK_DB_PATH", "data/slabstock.db")

    # Baseline catalogue used to seed an empty store
    BASELINE_CSV: str = os.environ.get("SLABSTOCK_BASELINE_CSV", str(DEFAULT_BASELINE_CSV))

    # Logging
    LOG_LEVEL: str = os.environ.get("SLABSTOCK_LOG_LEVEL", "INFO")

    # OCR
    OCR_LANG: str = os.environ.get("SLABSTOCK_OCR_LANG", "eng")
    TESSERACT_CMD: str = os.environ.get("SLABSTOCK_TESSERACT_CMD", "")


def database_url(db_path: Union[str, Path]) -> str:
    """Build the async SQLite URL for a database file."""
    return f"sqlite+aiosqlite:///{db_path}"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Singleton instance for easy import
settings = get_settings()
