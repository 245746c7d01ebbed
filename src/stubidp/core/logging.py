"""Logging configuration for the stubidp OIDC provider."""

import logging
import sys
from contextvars import ContextVar

# Context variable to store request_id across async calls
request_id_ctx: ContextVar[str | None] = ContextVar("request_id", default=None)

LOG_FORMAT = (
    "%(asctime)s [%(levelname)s] [%(name)s] %(request_id)s"
    "model=%(model)s op=%(operation)s %(message)s"
)


class AdapterContextFilter(logging.Filter):
    """Logging filter that adds request_id, model and operation to records."""

    def filter(self, record):
        request_id = request_id_ctx.get()
        record.request_id = f"[{request_id}] " if request_id else ""
        if not hasattr(record, "model"):
            record.model = "-"
        if not hasattr(record, "operation"):
            record.operation = "-"
        return True


def configure_logging(level: str | int = logging.INFO) -> logging.Logger:
    """Configure and return the logger for the application."""
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler.addFilter(AdapterContextFilter())

    logger = logging.getLogger("stubidp")
    logger.handlers = [handler]
    logger.setLevel(level)
    logger.propagate = False

    logger.debug("Logging configured at level %s", logging.getLevelName(level))
    return logger


logger = logging.getLogger("stubidp")
