"""Request correlation IDs for availability queries and rule writes.

Every CLI invocation or service call runs inside a ``request_scope``; each
log record emitted while it is open carries the scope's ``request_id``,
and ``LOG_FORMAT`` prints it, so one query can be followed from the store
through the engine to the result.

Usage:
    from src.logging_context import get_request_logger, request_scope

    logger = get_request_logger(__name__)
    with request_scope() as request_id:
        logger.info("Resolving availability")  # ... [REQ-1a2b3c4d] Resolving availability
"""

import logging
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator, Optional

LOG_FORMAT = "%(asctime)s [%(name)s] %(levelname)s [%(request_id)s]: %(message)s"

_request_id: ContextVar[str] = ContextVar("request_id", default="-")


def set_request_id(request_id: str) -> None:
    _request_id.set(request_id)


def get_request_id() -> str:
    return _request_id.get()


def new_request_id() -> str:
    """Return a fresh ``REQ-`` prefixed ID without installing it."""
    return f"REQ-{uuid.uuid4().hex[:8]}"


@contextmanager
def request_scope(request_id: Optional[str] = None) -> Iterator[str]:
    """Install ``request_id`` (or a fresh one) until the block exits."""
    token = _request_id.set(request_id or new_request_id())
    try:
        yield _request_id.get()
    finally:
        _request_id.reset(token)


class RequestIdFilter(logging.Filter):
    """Stamps the current request ID onto each record it sees."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = _request_id.get()  # type: ignore[attr-defined]
        return True


def attach_request_id(handler: logging.Handler) -> None:
    """Make ``handler`` safe for ``LOG_FORMAT`` whatever logger the record came from."""
    if not any(isinstance(f, RequestIdFilter) for f in handler.filters):
        handler.addFilter(RequestIdFilter())


def get_request_logger(name: str) -> logging.Logger:
    """Logger whose records carry ``request_id`` even when captured off-handler."""
    logger = logging.getLogger(name)
    if not any(isinstance(f, RequestIdFilter) for f in logger.filters):
        logger.addFilter(RequestIdFilter())
    return logger
