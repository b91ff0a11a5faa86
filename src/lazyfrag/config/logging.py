"""structlog configuration for lazyfrag.

Two output modes:
- Human (default): colored console output to stderr
- JSON (--log-json): Structured JSON lines to stderr

Library modules log through stdlib ``logging.getLogger(__name__)``; the
formatter installed here routes those records through structlog too, so
both kinds of record pass the same processor chain.

INVARIANT: No signed token body reaches a log line. :func:`redact_tokens`
replaces anything shaped like ``base64--hexdigest`` with a short marker
that keeps the last digest characters for correlation.
"""

from __future__ import annotations

import logging
import re
import sys
from typing import Any

import structlog

# base64 body, separator, hex digest of a supported HMAC (sha256 and up)
TOKEN_PATTERN = re.compile(r"[A-Za-z0-9+/]{8,}={0,2}--(?P<digest>[0-9a-f]{64,128})\b")

_QUIET_LOGGERS = ("sqlalchemy", "jinja2")


def _redact(value: Any) -> Any:
    if isinstance(value, str):
        return TOKEN_PATTERN.sub(lambda m: f"<token:{m['digest'][-8:]}>", value)
    if isinstance(value, dict):
        return {key: _redact(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return type(value)(_redact(item) for item in value)
    return value


def redact_tokens(
    _logger: Any, _method_name: str, event_dict: structlog.types.EventDict
) -> structlog.types.EventDict:
    """Processor: mask signed tokens in the event and every bound value."""
    for key, value in event_dict.items():
        if key.startswith("_"):
            continue
        event_dict[key] = _redact(value)
    return event_dict


def configure_logging(
    *,
    verbose: bool = False,
    log_json: bool = False,
    app: str | None = None,
) -> None:
    """Configure structlog processors and output routing.

    Args:
        verbose: Enable DEBUG-level output. When False, only WARNING+.
        log_json: Use JSON renderer instead of console renderer.
        app: Entity application name, bound to every record as ``app``.
    """
    lazyfrag_level = logging.DEBUG if verbose else logging.WARNING

    structlog.contextvars.clear_contextvars()
    if app is not None:
        structlog.contextvars.bind_contextvars(app=app)

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        redact_tokens,
    ]

    if log_json:
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(logging.WARNING)

    logging.getLogger("lazyfrag").setLevel(lazyfrag_level)
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
