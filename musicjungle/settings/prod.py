"""
Production settings (extends base).

Everything secret or host-specific comes from the environment with no default:
`SECRET_KEY`, `DATABASE_URL`, `ALLOWED_HOSTS`. Session and CSRF cookies are
HTTPS-only since sign-in and registration post credentials through them.
"""

from .base import *  # noqa

DEBUG = False

SECRET_KEY = env("SECRET_KEY")
ALLOWED_HOSTS = env.list("ALLOWED_HOSTS")
CSRF_TRUSTED_ORIGINS = env.list("CSRF_TRUSTED_ORIGINS", default=[])

# The user table must live in a real database, not the dev SQLite file.
DATABASES = {"default": env.db("DATABASE_URL")}

STATIC_ROOT = BASE_DIR / "staticfiles"

SECURE_SSL_REDIRECT = env.bool("SECURE_SSL_REDIRECT", True)
SECURE_PROXY_SSL_HEADER = ("HTTP_X_FORWARDED_PROTO", "https")
SECURE_HSTS_SECONDS = env.int("SECURE_HSTS_SECONDS", 60 * 60 * 24 * 7)
SESSION_COOKIE_SECURE = True
CSRF_COOKIE_SECURE = True

# Rejected sign-ins and CSRF failures share the structured console handler.
LOGGING["loggers"]["django.security"] = {  # type: ignore[name-defined]
    "handlers": ["console"],
    "level": "WARNING",
    "propagate": False,
}
