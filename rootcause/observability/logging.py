"""Structured logging configuration using structlog.

Log events pass through the same redaction as tool results before they are
rendered, so an identifier or error message that happens to embed a
credential never reaches the log stream verbatim.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import MutableMapping
from typing import IO, Any

import structlog

from rootcause.redact import redact_value

# Added by the processor chain itself; never user data.
_STRUCTURAL_KEYS = frozenset({"level", "ts", "component", "exc_info", "stack_info"})


def redact_event(
    _logger: Any, _method: str, event_dict: MutableMapping[str, Any]
) -> MutableMapping[str, Any]:
    """structlog processor: redact every user-supplied field of the event."""
    for key, value in event_dict.items():
        if key not in _STRUCTURAL_KEYS:
            event_dict[key] = redact_value(value)
    return event_dict


def setup_logging(level: str = "info", *, json_output: bool = True, stream: IO[str] | None = None) -> None:
    """Configure structlog.

    Args:
        level:       Minimum level name (debug, info, warning, error).
        json_output: JSON lines when True, human-readable console output
                     otherwise.
        stream:      Destination; defaults to stderr so that a stdio tool
                     transport can own stdout.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)
    renderer: Any = structlog.processors.JSONRenderer() if json_output else structlog.dev.ConsoleRenderer(colors=False)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            redact_event,
            structlog.processors.TimeStamper(fmt="iso", utc=True, key="ts"),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=stream or sys.stderr),
        cache_logger_on_first_use=True,
    )


def get_logger(component: str) -> structlog.stdlib.BoundLogger:
    """Get a logger bound with a component name."""
    return structlog.get_logger(component=component)  # type: ignore[no-any-return]
