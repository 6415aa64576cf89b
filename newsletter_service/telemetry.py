"""
Logging setup.

Standard library logging with one stream handler. Every record carries the
id of the HTTP request it was emitted under (or "-" outside a request),
taken from a context variable the request middleware sets.
"""

from __future__ import annotations

import logging
import sys
from contextvars import ContextVar
from typing import TextIO

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - [%(request_id)s] %(message)s"

request_id_var: ContextVar[str] = ContextVar("request_id", default="-")

_HANDLER_NAME = "newsletter_service"


class RequestIdFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_var.get()
        return True


def configure_logging(level: str | int = logging.INFO, stream: TextIO | None = None) -> None:
    """Install the service handler on the root logger (once per process)."""
    root = logging.getLogger()
    root.setLevel(level)

    if any(h.get_name() == _HANDLER_NAME for h in root.handlers):
        return

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler.addFilter(RequestIdFilter())
    root.addHandler(handler)


def error_chain(exc: BaseException) -> str:
    """Render an exception and its causes, outermost first."""
    parts = []
    current: BaseException | None = exc
    seen: set[int] = set()
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        parts.append(f"{type(current).__name__}: {current}")
        current = current.__cause__ or current.__context__
    return "\n\tCaused by: ".join(parts)
