"""
Configures structured logging for readercore using structlog.
"""

from __future__ import annotations

import logging
import sys
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, Dict, Iterator, List, Optional

import structlog

if TYPE_CHECKING:
    from readercore.config.config import LoggingConfig

# --- Custom Processors ---


def drop_missing_url(logger: logging.Logger, method_name: str, event_dict: Dict[Any, Any]) -> Dict[Any, Any]:
    """
    Removes the bound document_url when the document was parsed without one.
    """
    if event_dict.get("document_url") is None:
        event_dict.pop("document_url", None)
    return event_dict


@contextmanager
def parse_context(url: Optional[str], **values: Any) -> Iterator[None]:
    """Bind the document URL (and any extra values) to every log line in the block."""
    with structlog.contextvars.bound_contextvars(document_url=url, **values):
        yield


# --- Configuration ---


def configure_logging(config: LoggingConfig) -> None:
    """
    Sets up structlog on top of the standard logging library.
    """
    shared_processors: List[Any] = [
        structlog.contextvars.merge_contextvars,
        drop_missing_url,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    log_renderer: Any
    if config.log_file:
        # JSON lines for files
        log_renderer = structlog.processors.JSONRenderer()
        handler: logging.Handler = logging.FileHandler(config.log_file)
    else:
        log_renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())
        handler = logging.StreamHandler(sys.stderr)

    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=log_renderer,
            foreign_pre_chain=shared_processors,
        )
    )

    logging.basicConfig(
        format="%(message)s",
        level=config.log_level.upper(),
        handlers=[handler],
        force=True,
    )

    structlog.configure(
        processors=shared_processors
        + [
            structlog.stdlib.filter_by_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    logger = structlog.get_logger("readercore.logging")
    logger.debug("Logging configured", level=config.log_level, output=config.log_file or "stderr")
