"""Logging setup for skybuild.

Pipeline modules log through `logging.getLogger(__name__)`; the CLI logs
key/value events through `structlog.get_logger()`. Both end up on one
stderr handler whose formatter is a structlog `ProcessorFormatter`, so a
run renders uniformly: coloured console lines with --debug, one JSON
object per line with --no-debug.

The running operation (build, bundle, test, ...) is bound by the CLI and
stamped onto every record, stdlib or structlog.
"""

from __future__ import annotations

import logging
import sys
from contextvars import ContextVar
from typing import Optional

import structlog

_operation_var: ContextVar[str] = ContextVar("operation", default="")

_handler: Optional[logging.Handler] = None


def bind_operation(name: str) -> None:
    _operation_var.set(name)


def get_operation() -> str:
    """Return the running operation name, or empty string if not set."""
    return _operation_var.get()


def _add_operation(
    logger: logging.Logger,
    method: str,
    event_dict: dict,
) -> dict:
    operation = get_operation()
    if operation:
        event_dict.setdefault("operation", operation)
    return event_dict


def _renderer(debug: bool):
    if debug:
        return structlog.dev.ConsoleRenderer()
    return structlog.processors.JSONRenderer()


def configure_structlog(debug: bool = True) -> logging.Handler:
    """Install the shared stderr handler and configure structlog.

    Calling again replaces the handler from the previous call; handlers
    installed by anyone else are left alone. Returns the installed handler.
    """
    global _handler

    pre_chain: list = [
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        _add_operation,
    ]

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *pre_chain,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=pre_chain,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                _renderer(debug),
            ],
        )
    )

    root = logging.getLogger()
    if _handler is not None:
        root.removeHandler(_handler)
    root.addHandler(handler)
    root.setLevel(logging.DEBUG if debug else logging.INFO)
    _handler = handler
    return handler
