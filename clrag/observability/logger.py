"""structlog setup shared by every clrag module.

Modules log snake_case events with keyword fields:

    logger = get_logger(__name__)
    logger.info("category_search_complete", category="projects", count=3)

Fields bound with `request_context` (the retrieval request id) are merged into
every event logged inside the block, including events from concurrent
category searches.
"""

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

import structlog
from structlog.types import EventDict, Processor

from .. import __version__

APP_NAME = "clrag"

# HTTP and vector-store clients log every request at INFO.
NOISY_LOGGERS = ("httpx", "httpcore", "openai", "chromadb")


def add_app_context(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Stamp every event with the application name and version."""
    event_dict.setdefault("app", APP_NAME)
    event_dict.setdefault("version", __version__)
    return event_dict


def _renderers(log_format: str) -> list[Processor]:
    if log_format == "console":
        return [
            structlog.processors.ExceptionPrettyPrinter(),
            structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty()),
        ]
    return [
        structlog.processors.format_exc_info,
        structlog.processors.JSONRenderer(),
    ]


def setup_logging(
    log_level: str = "INFO",
    log_format: str = "json",
    log_file: str | Path | None = None,
    third_party_level: str = "WARNING",
) -> None:
    """Configure structlog on top of stdlib logging.

    Args:
        log_level: Level for clrag events (DEBUG, INFO, WARNING, ERROR)
        log_format: "json" (default) or "console"
        log_file: Optional file that receives a copy of every event
        third_party_level: Level applied to the HTTP and ChromaDB client loggers
    """
    numeric_level = getattr(logging, log_level.upper(), logging.INFO)

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        add_app_context,
    ]

    structlog.configure(
        processors=shared_processors + _renderers(log_format),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=numeric_level)
    logging.getLogger().setLevel(numeric_level)

    quiet_level = getattr(logging, third_party_level.upper(), logging.WARNING)
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(quiet_level)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        root_logger = logging.getLogger()
        if not any(
            isinstance(h, logging.FileHandler) and Path(h.baseFilename) == log_path.resolve()
            for h in root_logger.handlers
        ):
            file_handler = logging.FileHandler(log_path)
            file_handler.setLevel(numeric_level)
            file_handler.setFormatter(logging.Formatter("%(message)s"))
            root_logger.addHandler(file_handler)


def setup_logging_from_config(config: dict[str, Any]) -> None:
    """Apply the `logging` section of a loaded configuration."""
    section = config.get("logging", {}) or {}
    setup_logging(
        log_level=section.get("level", "INFO"),
        log_format=section.get("format", "json"),
        log_file=section.get("file"),
        third_party_level=section.get("third_party_level", "WARNING"),
    )


@contextmanager
def request_context(**fields: Any) -> Iterator[None]:
    """Bind fields (e.g. request_id) to every event logged inside the block."""
    with structlog.contextvars.bound_contextvars(**fields):
        yield


def get_logger(name: str | None = None) -> structlog.BoundLogger:
    return structlog.get_logger(name)


# Defaults until a caller applies its own configuration
setup_logging()
