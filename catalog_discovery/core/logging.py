"""
Logging configuration for catalog layer discovery.

Every discovery run binds a short run id into structlog's context
variables, so all warnings emitted while expanding records (from the
client, the engine and the reconciler) can be correlated to one run:

    with run_context(mode="dry-run") as run_id:
        ...
"""

import logging
import sys
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import structlog
from structlog.types import Processor


@contextmanager
def run_context(**fields: Any) -> Iterator[str]:
    """Bind a run id (plus any extra fields) for the duration of a run."""
    run_id = str(uuid.uuid4())[:8]
    structlog.contextvars.bind_contextvars(run_id=run_id, **fields)
    try:
        yield run_id
    finally:
        structlog.contextvars.unbind_contextvars("run_id", *fields)


def configure_logging(json_logs: bool = False, log_level: str = "INFO") -> None:
    """
    Configure structlog.

    Args:
        json_logs: If True, output JSON format (for CI / scheduled runs).
                   If False, output colored console format.
        log_level: Minimum log level (DEBUG, INFO, WARNING, ERROR).
    """
    level = getattr(logging, log_level.upper(), logging.INFO)

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if json_logs:
        shared_processors.append(structlog.processors.format_exc_info)
        renderer: Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    structlog.configure(
        processors=[*shared_processors, renderer],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )

    # httpx logs every request at INFO through the standard library
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=level,
    )
    logging.getLogger("httpx").setLevel(max(level, logging.WARNING))
