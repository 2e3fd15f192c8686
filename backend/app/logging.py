"""Process-wide logging setup.

Every record carries the id of the request it was emitted under (``-``
outside a request), set by the request-id middleware in ``app.main``.
"""

from __future__ import annotations

import contextvars
import logging

from app.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(request_id)s] %(name)s: %(message)s"

# Chatty third-party loggers kept at WARNING unless running in debug mode.
_QUIET_LOGGERS = ("httpx", "httpcore", "sqlalchemy.engine", "aiosqlite")

request_id_var: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "request_id",
    default=None,
)


class RequestIdFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = getattr(record, "request_id", None) or request_id_var.get() or "-"
        return True


def configure_logging(level: str | None = None) -> None:
    """Install the request-aware handler on the root logger.

    Safe to call more than once; the handler is only added the first time.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, (level or settings.log_level).upper(), logging.INFO))

    if not any(getattr(handler, "_clerksmart", False) for handler in root_logger.handlers):
        handler = logging.StreamHandler()
        handler._clerksmart = True
        handler.addFilter(RequestIdFilter())
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root_logger.addHandler(handler)

    quiet_level = logging.DEBUG if settings.debug else logging.WARNING
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(quiet_level)
