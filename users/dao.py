"""
User store used by the pages.

`UserDao` is a thin repository over the `User` model exposing only the
operations the views and the registration flow need. Views receive an instance
per request (see `users.views.UserPageView.get_dao`), so tests can swap in a
fake store through `as_view(dao=...)`.
"""

from __future__ import annotations

from typing import Optional

from django.db import transaction

from .models import User


class UserDao:
    """ORM-backed user store."""

    def refresh(self, user: User) -> None:
        """Reload `user`'s fields from the database (no-op for unsaved users)."""
        if user is not None and user.pk is not None:
            user.refresh_from_db()

    def list_all(self) -> Optional[list[User]]:
        return list(User.objects.order_by("name", "login"))

    def contains_user_with_login(self, login: str) -> bool:
        return User.objects.filter(login=login).exists()

    def add(self, user: User) -> User:
        """
        Insert a new user.

        A raw password placed on the instance (`user.password`) is hashed before
        saving; an empty one yields an unusable password. Duplicate logins raise
        `IntegrityError` from the unique constraint.
        """
        raw_password = user.password
        if raw_password:
            user.set_password(raw_password)
        else:
            user.set_unusable_password()
        with transaction.atomic():
            user.save(force_insert=True)
        return user

    def find(self, login: str) -> Optional[User]:
        return User.objects.filter(login=login).first()
