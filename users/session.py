"""Access to the user bound to the current session."""

from __future__ import annotations

from typing import Optional

from django.contrib.auth import login as dj_login, logout as dj_logout


class UserInfo:
    """
    Request-scoped view of the logged-in user.

    Wraps `django.contrib.auth` so pages talk about "the current user" without
    touching session plumbing directly.
    """

    def __init__(self, request) -> None:
        self.request = request

    @property
    def user(self):
        user = getattr(self.request, "user", None)
        if user is None or not user.is_authenticated:
            return None
        return user

    @property
    def is_logged_in(self) -> bool:
        return self.user is not None

    def login(self, user) -> None:
        dj_login(self.request, user)

    def logout(self) -> None:
        dj_logout(self.request)
