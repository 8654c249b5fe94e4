"""
Configures structured logging for the application using structlog.
"""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING, Any, Dict, List
from urllib.parse import urlsplit

import structlog

if TYPE_CHECKING:
    from ogextract.config.config import MonitoringConfig

# --- Custom Processors ---


def add_source_host(logger: logging.Logger, method_name: str, event_dict: Dict[Any, Any]) -> Dict[Any, Any]:
    """
    Adds the host of the URL being processed, so log lines can be grouped by site.
    Runs after ``merge_contextvars``, which copies the ``source_url`` the fetch
    client binds around each request.
    """
    source_url = event_dict.get("source_url")
    if isinstance(source_url, str) and "source_host" not in event_dict:
        try:
            host = urlsplit(source_url).hostname
        except ValueError:
            host = None
        if host:
            event_dict["source_host"] = host
    return event_dict


# --- Configuration ---


def configure_logging(config: MonitoringConfig) -> None:
    """
    Sets up structlog and the standard logging library to share one pipeline.

    Library modules log through ``logging.getLogger(__name__)``; the client and
    the CLI use ``structlog.get_logger``. Both end up in the same handler.
    """
    shared_processors: List[Any] = [  # Using Any for Processor compatibility
        structlog.contextvars.merge_contextvars,
        add_source_host,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    log_renderer: Any  # Using Any for Processor compatibility
    if config.log_file:
        # Structured JSON logging for file output
        log_renderer = structlog.processors.JSONRenderer()
        handler: logging.Handler = logging.FileHandler(config.log_file)
    else:
        if config.json_logs:
            log_renderer = structlog.processors.JSONRenderer()
        else:
            log_renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())
        handler = logging.StreamHandler(sys.stderr)

    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared_processors,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                log_renderer,
            ],
        )
    )

    # Route the standard logging library through the same handler
    logging.basicConfig(
        format="%(message)s",
        level=config.log_level.upper(),
        handlers=[handler],
        force=True,
    )

    structlog.configure(
        processors=shared_processors
        + [
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    logger = structlog.get_logger("ogextract.logging")
    logger.debug("Logging configured", level=config.log_level, output=config.log_file or "stderr")
