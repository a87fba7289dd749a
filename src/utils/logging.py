"""Structured logging for the tubescout server.

structlog renders both structlog and stdlib records, so services can keep
using ``logging.getLogger(__name__)`` while the API layer logs key/value
events. Every event carries the request id of the search that produced it,
and anything that looks like a YouTube API key is redacted before rendering.
"""

import logging
import re
import sys
from contextvars import ContextVar

import structlog

current_request_id: ContextVar[str | None] = ContextVar("current_request_id", default=None)

# Google API keys: "AIza" followed by 35 url-safe characters
_API_KEY_RE = re.compile(r"AIza[0-9A-Za-z_\-]{35}")

QUIET_LOGGERS = (
    "httpx",
    "httpcore",
    "googleapiclient.discovery",
    "googleapiclient.discovery_cache",
    "urllib3.connectionpool",
    "uvicorn.access",
)


def add_request_id(_logger, _method_name, event_dict):
    """Inject the current request id into the event."""
    request_id = current_request_id.get()
    if request_id:
        event_dict["request_id"] = request_id
    return event_dict


def redact_api_keys(_logger, _method_name, event_dict):
    """Replace raw API keys in string values with their masked form."""
    for key, value in event_dict.items():
        if isinstance(value, str) and "AIza" in value:
            event_dict[key] = _API_KEY_RE.sub(lambda m: f"***{m.group(0)[-4:]}", value)
    return event_dict


def _shared_processors() -> list:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        add_request_id,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        redact_api_keys,
    ]


def setup_logging(log_level: str = "INFO", json_output: bool = False) -> None:
    """Configure structlog and route the root logger through it.

    Args:
        log_level: DEBUG, INFO, WARNING or ERROR
        json_output: JSON lines (deployments) instead of colored console output
    """
    shared = _shared_processors()

    structlog.configure(
        processors=[*shared, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    renderer = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())
    )
    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared,
        processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structlog logger (typically ``get_logger(__name__)``)."""
    return structlog.get_logger(name)


def set_request_context(request_id: str, **fields) -> None:
    """Tag subsequent log events with ``request_id`` and any extra ``fields``."""
    current_request_id.set(request_id)
    if fields:
        structlog.contextvars.bind_contextvars(**fields)


def clear_request_context() -> None:
    current_request_id.set(None)
    structlog.contextvars.clear_contextvars()
