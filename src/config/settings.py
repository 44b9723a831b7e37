"""Configuration settings for Patient Search Engine"""
import os
from typing import Optional
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


def _optional_int(value: Optional[str]) -> Optional[int]:
    if value is None or value.strip() == "":
        return None
    return int(value)


class Settings:

    # API settings
    API_TITLE = "Patient Search Engine"
    API_VERSION = "1.0.0"

    # Corpus provider: "synthetic" or "csv"
    CORPUS_SOURCE = os.getenv("CORPUS_SOURCE", "synthetic").lower()
    CORPUS_SIZE = int(os.getenv("CORPUS_SIZE", "100"))
    CORPUS_CSV_PATH = os.getenv("CORPUS_CSV_PATH", "patients.csv")

    # Background sync simulation (seconds)
    SYNC_MIN_DELAY_SECONDS = float(os.getenv("SYNC_MIN_DELAY_SECONDS", "1.0"))
    SYNC_MAX_DELAY_SECONDS = float(os.getenv("SYNC_MAX_DELAY_SECONDS", "3.0"))

    # Caller side
    REQUEST_TIMEOUT_SECONDS = float(os.getenv("REQUEST_TIMEOUT_SECONDS", "5.0"))
    SEARCH_CACHE_TTL_SECONDS = float(os.getenv("SEARCH_CACHE_TTL_SECONDS", "300"))
    SEARCH_CACHE_SIZE = int(os.getenv("SEARCH_CACHE_SIZE", "100"))

    # None returns every match
    DEFAULT_SEARCH_LIMIT = _optional_int(os.getenv("DEFAULT_SEARCH_LIMIT"))

    # Logging
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"


settings = Settings()
