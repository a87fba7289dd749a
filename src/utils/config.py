"""Configuration loading and validation for tubescout."""

import logging
import os
from pathlib import Path

from dotenv import load_dotenv
from rich.logging import RichHandler

from utils.duration import BUCKET_TABLES

# Get the project root directory (parent of src)
PROJECT_ROOT = Path(__file__).parent.parent.parent

# Load environment variables from .env file in project root
load_dotenv(PROJECT_ROOT / ".env")

# Template placeholder values; never treated as real keys
PLACEHOLDER_KEYS = {
    "your_primary_api_key_here",
    "your_secondary_api_key_here",
    "your_tertiary_api_key_here",
    "your_first_api_key_here",
    "your_second_api_key_here",
    "your_third_api_key_here",
}


def collect_api_keys(max_keys: int) -> list[str]:
    """Collect YOUTUBE_API_KEY_1..N from the environment, in order.

    YOUTUBE_API_KEY is accepted as an alias for slot 1. Empty slots and
    placeholder values are skipped.
    """
    keys = []
    for i in range(1, max_keys + 1):
        key = os.getenv(f"YOUTUBE_API_KEY_{i}") or (os.getenv("YOUTUBE_API_KEY") if i == 1 else None)
        if key and key.strip() and key.strip() not in PLACEHOLDER_KEYS:
            keys.append(key.strip())
    return keys


def load_config() -> dict:
    """Load configuration from environment variables."""
    max_keys = int(os.getenv("MAX_API_KEYS", "10") or 10)

    config = {
        # Credential pool
        "max_api_keys": max_keys,
        "youtube_api_keys": collect_api_keys(max_keys),
        # Server
        "port": int(os.getenv("PORT", "3000")),
        "cors_origins": [
            origin.strip() for origin in os.getenv("CORS_ORIGINS", "*").split(",") if origin.strip()
        ],
        # Search behaviour
        "page_delay_seconds": float(os.getenv("PAGE_DELAY_SECONDS", "0.5")),
        "enrich_subscribers": os.getenv("ENRICH_SUBSCRIBERS", "true").lower() == "true",
        # false lets the same video id appear more than once in a result set
        "deduplicate_results": os.getenv("DEDUPLICATE_RESULTS", "true").lower() == "true",
        "duration_buckets": os.getenv("DURATION_BUCKETS", "fine").lower(),
        "default_min_views": int(os.getenv("DEFAULT_MIN_VIEWS", "100000")),
        # Optional seed for the keyword-less filler term
        "filler_seed": int(os.getenv("FILLER_SEED")) if os.getenv("FILLER_SEED") else None,
        # Logging
        "log_level": os.getenv("LOG_LEVEL", "INFO"),
        "log_json": os.getenv("LOG_JSON", "false").lower() == "true",
    }

    return config


def validate_config(config: dict) -> list[str]:
    """Validate configuration and return list of errors.

    Valid settings that weaken result guarantees, such as
    ``deduplicate_results=False`` allowing repeated video ids, are reported by
    ``config_notices`` instead.
    """
    errors = []

    if not config.get("youtube_api_keys"):
        errors.append(
            "At least one YouTube API key is required: YOUTUBE_API_KEY_1 (or YOUTUBE_API_KEY)"
        )

    if config.get("max_api_keys", 0) < 1:
        errors.append("MAX_API_KEYS must be at least 1")

    if config.get("page_delay_seconds", 0) < 0:
        errors.append("PAGE_DELAY_SECONDS cannot be negative")

    if config.get("duration_buckets") not in BUCKET_TABLES:
        errors.append(
            f"DURATION_BUCKETS must be one of: {', '.join(sorted(BUCKET_TABLES))}"
        )

    if config.get("default_min_views", 0) < 0:
        errors.append("DEFAULT_MIN_VIEWS cannot be negative")

    return errors


def config_notices(config: dict) -> list[str]:
    """Settings that are valid but change documented result guarantees."""
    notices = []

    if not config.get("deduplicate_results", True):
        notices.append(
            "DEDUPLICATE_RESULTS=false: a video returned on several pages is listed once per page, "
            "so result ids are no longer unique"
        )

    return notices


def setup_logging(log_level: str = "INFO") -> None:
    """Rich console logging for the command line tools.

    The API server uses ``utils.logging.setup_logging`` (structlog) instead.
    """
    handler = RichHandler(
        show_time=True,
        show_level=True,
        show_path=False,
        rich_tracebacks=True,
        markup=False,  # titles can contain square brackets
    )
    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.INFO),
        handlers=[handler],
        format="%(message)s",
        force=True,
    )

    for name in ("httpx", "googleapiclient.discovery", "googleapiclient.discovery_cache", "urllib3.connectionpool"):
        logging.getLogger(name).setLevel(logging.WARNING)
