"""
Request-safety and observability middleware.

- `RequestSizeLimitMiddleware` answers 413 with a JSON body when a POST, PUT or
  PATCH declares a `Content-Length` above `MAX_REQUEST_BYTES`. Requests without
  a usable length header pass through.
- `RequestIDLogMiddleware` accepts a safe client `X-Request-ID` or mints one,
  binds it to `core.logging.request_id_var`, echoes it on the response and logs
  exactly one structured line per request to `musicjungle.request`.
"""

from __future__ import annotations

import logging
import re
import time
import uuid
from typing import Callable, Optional

from django.conf import settings
from django.http import HttpRequest, HttpResponse
from rest_framework.renderers import JSONRenderer
from rest_framework.response import Response

from .logging import request_id_var

logger = logging.getLogger("musicjungle.request")

_SAFE_REQUEST_ID = re.compile(r"^[A-Za-z0-9._\-]{1,200}$")
_BODY_METHODS = frozenset({"POST", "PUT", "PATCH"})


def _coerce_request_id(raw: Optional[str]) -> str:
    """Return `raw` when it is a safe token, else a fresh uuid4 hex."""
    if raw and _SAFE_REQUEST_ID.match(raw):
        return raw
    return uuid.uuid4().hex


def _declared_length(request: HttpRequest) -> Optional[int]:
    raw = request.META.get("CONTENT_LENGTH")
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError:
        return None


class RequestSizeLimitMiddleware:
    """Reject oversized request bodies before any parsing happens."""

    def __init__(self, get_response: Callable[[HttpRequest], HttpResponse]) -> None:
        self.get_response = get_response
        self.max_bytes: int = int(getattr(settings, "MAX_REQUEST_BYTES", 1_000_000))

    def __call__(self, request: HttpRequest) -> HttpResponse:
        if self.max_bytes > 0 and request.method.upper() in _BODY_METHODS:
            length = _declared_length(request)
            if length is not None and length > self.max_bytes:
                return self._too_large()
        return self.get_response(request)

    def _too_large(self) -> Response:
        # Pre-rendered DRF Response so clients and tests get `.data` and `.content`.
        resp = Response(
            {
                "detail": f"Request entity too large. Max {self.max_bytes} bytes.",
                "code": "request_too_large",
                "max_bytes": self.max_bytes,
            },
            status=413,
        )
        resp.accepted_renderer = JSONRenderer()
        resp.accepted_media_type = "application/json"
        resp.renderer_context = {}
        resp.render()
        return resp


class RequestIDLogMiddleware:
    """Correlate each request with an id and log one line when it completes."""

    def __init__(self, get_response: Callable[[HttpRequest], HttpResponse]) -> None:
        self.get_response = get_response

    def __call__(self, request: HttpRequest) -> HttpResponse:
        rid = _coerce_request_id(request.headers.get("X-Request-ID"))
        request.request_id = rid
        token = request_id_var.set(rid)

        try:
            start = time.perf_counter()
            response = self.get_response(request)
            duration_ms = int((time.perf_counter() - start) * 1000)

            response.headers["X-Request-ID"] = rid

            # Authenticated users only; never forces a DB hit for anonymous requests.
            user = getattr(request, "user", None)
            user_id = getattr(user, "pk", None) if getattr(user, "is_authenticated", False) else None

            logger.info(
                "request",
                extra={
                    "request_id": rid,
                    "method": request.method,
                    "path": request.path,
                    "status": getattr(response, "status_code", 0),
                    "user_id": user_id,
                    "duration_ms": duration_ms,
                },
            )
            return response
        finally:
            request_id_var.reset(token)
