"""Django AppConfig for the users app.

This app houses the project's custom user model (`users.User`), the user store
(`users.dao`), the registration flow and the HTML pages built on them.
"""

from django.apps import AppConfig


class UsersConfig(AppConfig):
    """Standard Django app config; uses BigAutoField as the default PK type."""
    default_auto_field = "django.db.models.BigAutoField"
    name = "users"
