"""
Request context for log records.

`RequestIDLogMiddleware` binds the current request id to `request_id_var`.
`RequestContextFilter` stamps that id on every record and fills the other
request fields used by the `structured` formatter (`method`, `path`, `status`,
`user_id`, `duration_ms`) with `"-"` when a record lacks them. Registration
logs, health warnings and management commands can then share one format with
the per-request line.
"""

from __future__ import annotations

import logging
from contextvars import ContextVar

request_id_var: ContextVar[str] = ContextVar("request_id", default="-")

REQUEST_FIELDS = ("method", "path", "status", "user_id", "duration_ms")


class RequestContextFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "request_id"):
            record.request_id = request_id_var.get()
        for name in REQUEST_FIELDS:
            if not hasattr(record, name):
                setattr(record, name, "-")
        return True
