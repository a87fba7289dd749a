"""Deployment launcher for the tubescout API.

Serves ``api.server:app`` with uvicorn on the configured PORT. When the app
cannot be imported (bad dependency pin, broken module), a stand-in app serves
the traceback on ``/`` and answers ``/api/health`` with 503, so the platform
health check reports the failure instead of a crash loop.
"""
import sys
import traceback
from pathlib import Path

src_dir = Path(__file__).parent / "src"
if str(src_dir) not in sys.path:
    sys.path.insert(0, str(src_dir))

import uvicorn
from fastapi import FastAPI
from fastapi.responses import PlainTextResponse

from utils.config import load_config
from utils.logging import get_logger, setup_logging

logger = get_logger("tubescout.start")


def fallback_app(failure: str) -> FastAPI:
    """Stand-in app that reports an import failure."""
    app = FastAPI(title="TubeScout API (import failed)")

    @app.get("/", response_class=PlainTextResponse)
    async def root():
        return f"tubescout failed to start:\n{failure}"

    @app.get("/api/health", response_class=PlainTextResponse, status_code=503)
    async def health():
        return f"UNHEALTHY - tubescout failed to start:\n{failure}"

    return app


def load_app() -> FastAPI:
    try:
        from api.server import app
    except Exception as e:
        failure = f"{type(e).__name__}: {e}\n{traceback.format_exc()}"
        logger.error("tubescout API import failed, serving fallback app", error=f"{type(e).__name__}: {e}")
        return fallback_app(failure)
    return app


def main() -> None:
    config = load_config()
    setup_logging(config["log_level"], json_output=config["log_json"])

    if not config["youtube_api_keys"]:
        logger.warning("No YouTube API keys configured; startup will fail. Set YOUTUBE_API_KEY_1 in .env")

    app = load_app()
    logger.info("Starting tubescout API", port=config["port"])
    uvicorn.run(app, host="0.0.0.0", port=config["port"], log_level=config["log_level"].lower())


if __name__ == "__main__":
    main()
