"""
Project URL configuration.

Surfaces
--------
- `/admin/` — Django admin (back-office only).
- `/health/` — unauthenticated readiness probe (JSON).
- Everything else is the HTML site served by the `users` app: home page,
  login/logout, user listing, registration and single-user pages.
"""

from __future__ import annotations

from django.contrib import admin
from django.urls import include, path

from core.views import health

urlpatterns = [
    path("admin/", admin.site.urls),
    path("health/", health, name="health"),
    path("", include("users.urls")),
]
