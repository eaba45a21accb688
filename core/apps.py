"""AppConfig for the `core` app.

Shared infrastructure used by the site: request-size and request-id
middleware, the request-id logging filter and the health endpoint.
"""

from django.apps import AppConfig


class CoreConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "core"
