import logging
import uuid
import contextvars
from contextlib import contextmanager
from typing import Iterator, Optional

from bunktrack.core import settings

# Include request_id in the log format; filled by RequestContextFilter
default_format = "%(asctime)s - %(levelname)s - [%(request_id)s] - %(message)s"

REQUEST_ID_HEADER = "X-Request-ID"

# Context variable carrying the current request id (per task)
current_request_id: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar(
    "request_id", default=None
)


class RequestContextFilter(logging.Filter):
    """Injects request_id from contextvar into every record."""

    def filter(self, record: logging.LogRecord) -> bool:  # type: ignore[override]
        req_id = current_request_id.get()
        # Always set attribute to avoid KeyError in formatters
        record.request_id = req_id or "-"  # type: ignore[attr-defined]
        return True


def setup_logger(name=None, level=None, format_str=None):
    logger = logging.getLogger(name)
    logger.setLevel((level or settings.LOG_LEVEL).upper())

    # Clear existing handlers to avoid duplicates
    if logger.hasHandlers():
        logger.handlers.clear()

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(logging.Formatter(format_str or default_format))
    console_handler.addFilter(RequestContextFilter())
    logger.addHandler(console_handler)

    # Ensure request_id is available on all records
    logger.addFilter(RequestContextFilter())

    # Prevent propagation to root to avoid duplicate logs
    logger.propagate = False

    return logger


# Default application logger
app_logger = setup_logger("bunktrack")


def new_request_id() -> str:
    return uuid.uuid4().hex


@contextmanager
def request_logging_context(request_id: str) -> Iterator[str]:
    """Scope logs to a specific request.

    Every record emitted inside the block carries ``request_id``.
    """
    token = current_request_id.set(request_id)
    try:
        yield request_id
    finally:
        current_request_id.reset(token)
