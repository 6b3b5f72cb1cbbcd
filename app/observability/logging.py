"""Operational logging for the service itself.

Access logs and shipper delivery failures go through structlog onto stderr;
stdout belongs to the log shipper's colored console mirror. Production
renders one JSON object per line, development renders structlog's
key=value console format.
"""

from __future__ import annotations

import logging
import sys
from typing import Any, TextIO

import structlog


_CONFIGURED = False

# Loggers that install their own handlers and must be pointed at ours.
SERVER_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")


def resolve_level(level: int | str) -> int:
    """Map ``"debug"``/``"WARNING"``/``10`` to a stdlib level; unknown names mean INFO."""

    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.strip().upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def shared_processors() -> list[Any]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]


def build_handler(*, json_output: bool, stream: TextIO | None = None) -> logging.Handler:
    renderer: Any
    if json_output:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=False)

    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
            foreign_pre_chain=shared_processors(),
        )
    )
    return handler


def configure_logging(
    level: int | str = logging.INFO,
    *,
    json_output: bool = True,
    stream: TextIO | None = None,
) -> None:
    """Route structlog and stdlib records through one handler.

    Only the first call takes effect.
    """

    global _CONFIGURED
    if _CONFIGURED:
        return

    numeric_level = resolve_level(level)
    handler = build_handler(json_output=json_output, stream=stream)

    structlog.configure(
        processors=[*shared_processors(), structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(numeric_level)

    for name in SERVER_LOGGERS:
        server_logger = logging.getLogger(name)
        server_logger.handlers = [handler]
        server_logger.propagate = False
        server_logger.setLevel(numeric_level)

    _CONFIGURED = True
