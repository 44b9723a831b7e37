"""Configuration validation"""
import logging
from src.config.settings import settings

logger = logging.getLogger(__name__)

CORPUS_SOURCES = ("synthetic", "csv")


def validate_config(config=settings):
    """Validate required configuration"""
    errors = []

    if config.CORPUS_SOURCE not in CORPUS_SOURCES:
        errors.append(f"CORPUS_SOURCE must be one of {CORPUS_SOURCES}, got '{config.CORPUS_SOURCE}'")
    if config.CORPUS_SOURCE == "csv" and not config.CORPUS_CSV_PATH:
        errors.append("CORPUS_CSV_PATH is required when CORPUS_SOURCE=csv")
    if config.CORPUS_SIZE <= 0:
        errors.append("CORPUS_SIZE must be positive")

    if config.SYNC_MIN_DELAY_SECONDS < 0:
        errors.append("SYNC_MIN_DELAY_SECONDS must not be negative")
    if config.SYNC_MAX_DELAY_SECONDS < config.SYNC_MIN_DELAY_SECONDS:
        errors.append("SYNC_MAX_DELAY_SECONDS must be >= SYNC_MIN_DELAY_SECONDS")

    if config.REQUEST_TIMEOUT_SECONDS <= 0:
        errors.append("REQUEST_TIMEOUT_SECONDS must be positive")
    if config.SEARCH_CACHE_SIZE < 0:
        errors.append("SEARCH_CACHE_SIZE must not be negative")
    if config.DEFAULT_SEARCH_LIMIT is not None and config.DEFAULT_SEARCH_LIMIT <= 0:
        errors.append("DEFAULT_SEARCH_LIMIT must be positive when set")

    if errors:
        for error in errors:
            logger.error(f"❌ Config Error: {error}")
        raise ValueError(f"Configuration validation failed: {', '.join(errors)}")

    logger.info("✅ Configuration validation passed")
