"""Readiness endpoint for the MusicJungle site.

`/health/` answers whether the pieces registration depends on are usable: the
user table (every page and the registration flow read it) and the cache that
backs the DRF throttles (`users-register`, `auth-login`). It returns one entry
per check plus an overall status, and never includes per-user data.
"""

from __future__ import annotations

import logging
import uuid
from typing import Callable, Dict, Tuple

from django.contrib.auth import get_user_model
from django.core.cache import cache
from django.http import JsonResponse
from django.utils.timezone import now
from django.views.decorators.cache import never_cache
from django.views.decorators.http import require_GET

logger = logging.getLogger("musicjungle.health")


def check_user_table() -> None:
    get_user_model().objects.exists()


def check_throttle_cache() -> None:
    """Round-trip a throwaway key through the cache DRF throttles use."""
    key = f"health:{uuid.uuid4().hex}"
    cache.set(key, "1", timeout=5)
    try:
        if cache.get(key) != "1":
            raise RuntimeError("cache did not return the value just written")
    finally:
        cache.delete(key)


CHECKS: Tuple[Tuple[str, Callable[[], None]], ...] = (
    ("users", check_user_table),
    ("throttle_cache", check_throttle_cache),
)


@never_cache
@require_GET
def health(request):
    results: Dict[str, str] = {}
    failed = False
    for name, check in CHECKS:
        try:
            check()
        except Exception as exc:  # a probe reports any backend error as "down"
            logger.warning("health check %s failed: %s", name, exc)
            results[name] = "down"
            failed = True
        else:
            results[name] = "ok"

    payload = {
        "app": "musicjungle",
        "status": "down" if failed else "ok",
        "checks": results,
        "time": now().isoformat(),
    }
    return JsonResponse(payload, status=503 if failed else 200)
