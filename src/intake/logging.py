"""Process-wide logger with a per-request correlation id."""
from __future__ import annotations
import logging
import sys
import uuid
from contextvars import ContextVar

_request_id: ContextVar[str] = ContextVar("request_id", default="-")

logger = logging.getLogger("intake")


class _RequestIdFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = _request_id.get()
        return True


def configure_logging(level: str = "INFO") -> None:
    """Attach a stdout handler once and set the level."""
    logger.setLevel(level.upper())
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.addFilter(_RequestIdFilter())
        handler.setFormatter(
            logging.Formatter("%(asctime)s [%(levelname)s] [%(request_id)s] %(message)s")
        )
        logger.addHandler(handler)


def new_request_id() -> str:
    return uuid.uuid4().hex[:12]


def bind_request_id(request_id: str):
    """Set the id for the current context; returns the token for reset_request_id."""
    return _request_id.set(request_id)


def reset_request_id(token) -> None:
    _request_id.reset(token)
