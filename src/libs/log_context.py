"""
Logging context management using contextvars.

Each HTTP request gets its own request_id so log lines from the handler,
the thread-pooled inference call and the store client can be correlated.
"""

import logging
import uuid
from contextvars import ContextVar

request_id_ctx: ContextVar[str] = ContextVar("request_id", default="-")


def new_request_id() -> str:
    """Generate a short request_id and bind it to the current context."""
    request_id = uuid.uuid4().hex[:12]
    request_id_ctx.set(request_id)
    return request_id


class RequestIdFilter(logging.Filter):
    """Logging filter that stamps request_id onto log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_ctx.get()
        return True
