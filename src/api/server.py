#!/usr/bin/env python
"""FastAPI server for the tubescout search interface."""

import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path

# Add src directory to Python path for imports
src_dir = Path(__file__).parent.parent
if str(src_dir) not in sys.path:
    sys.path.insert(0, str(src_dir))

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.dependencies import get_credential_pool, shutdown_services
from api.routers import core, downloads, search
from services.errors import ConfigurationError
from utils.config import config_notices, load_config, validate_config
from utils.logging import setup_logging

logger = logging.getLogger(__name__)

config = load_config()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Configure logging, check keys at startup, close clients at shutdown."""
    setup_logging(config["log_level"], json_output=config["log_json"])

    for error in validate_config(config):
        logger.warning(f"Configuration: {error}")
    for notice in config_notices(config):
        logger.warning(f"Configuration: {notice}")

    try:
        pool = get_credential_pool()
    except ConfigurationError as e:
        logger.error(f"Cannot start without YouTube API keys: {e}")
        raise

    logger.info(f"Loaded {len(pool)} YouTube API key(s)")
    pool.log_usage_stats()

    yield

    await shutdown_services()


app = FastAPI(title="TubeScout API", version="1.0.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config["cors_origins"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["Content-Disposition"],
)

app.include_router(core.router)
app.include_router(search.router)
app.include_router(downloads.router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=config["port"], log_level="info")
