"""structlog configuration for cdpgen.

Two output modes:
- Human (default): colored console output to stderr
- JSON (--log-json): Structured JSON lines to stderr

Both modes render stdlib ``logging`` records from ``cdpgen.*`` modules
through the same structlog processor chain, so ``logger.debug(...)`` in
the core and ``structlog.get_logger()`` elsewhere look alike. Fields
bound with :func:`run_context` (for example the schema source being
loaded) are attached to every line logged inside the block.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import structlog

HANDLER_NAME = "cdpgen"

# Loggers of libraries whose DEBUG output is noise even with --verbose.
_QUIET_LIBRARIES = ("httpx", "httpcore")


def _level(*, verbose: bool, quiet: bool) -> int:
    if verbose:
        return logging.DEBUG
    if quiet:
        return logging.ERROR
    return logging.WARNING


def _shared_processors() -> list[structlog.types.Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]


def _build_handler(*, log_json: bool) -> logging.Handler:
    if log_json:
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=_shared_processors(),
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )
    handler = logging.StreamHandler(sys.stderr)
    handler.set_name(HANDLER_NAME)
    handler.setFormatter(formatter)
    return handler


def configure_logging(
    *,
    verbose: bool = False,
    quiet: bool = False,
    log_json: bool = False,
) -> None:
    """Configure structlog processors and output routing.

    Installs one stderr handler on the root logger, replacing the handler
    a previous call installed and leaving any other handler in place.

    Args:
        verbose: Enable DEBUG-level output for ``cdpgen.*`` loggers.
        quiet: Only show errors. Ignored when *verbose* is set.
        log_json: Use JSON renderer instead of console renderer.
    """
    structlog.configure(
        processors=[
            *_shared_processors(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    root_logger = logging.getLogger()
    for existing in [h for h in root_logger.handlers if h.get_name() == HANDLER_NAME]:
        root_logger.removeHandler(existing)
    root_logger.addHandler(_build_handler(log_json=log_json))
    root_logger.setLevel(logging.WARNING)

    logging.getLogger("cdpgen").setLevel(_level(verbose=verbose, quiet=quiet))
    for name in _QUIET_LIBRARIES:
        logging.getLogger(name).setLevel(logging.WARNING)


@contextmanager
def run_context(**values: Any) -> Iterator[None]:
    """Bind *values* to every log line emitted inside the block."""
    with structlog.contextvars.bound_contextvars(**values):
        yield
