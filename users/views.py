"""
HTML pages for MusicJungle users.

Pages
-----
- `HomeView` (GET /): refreshes the current user and lists music categories.
- `UsersView` (GET /users/): all users. (POST /users/): registration, see
  `users.registration`.
- `UserDetailView` (GET /users/<login>/): one user; unknown logins are 404.
- `LoginView` / `LogoutView`: session sign-in and sign-out. The login page also
  hosts the registration form and is the registration fallback page.

Access
------
- Home, listing and detail require a session. Anonymous requests are redirected
  to the login page with `?next=` instead of receiving a 403.
- Registration and login are public. Registration is throttled with the
  `users-register` scope, password sign-in with `auth-login`.

Dependencies
------------
- The user store is resolved per request via `get_dao()`; pass
  `as_view(dao=...)` to inject another store (tests use an in-memory fake).
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from django.contrib import messages
from django.contrib.auth import authenticate
from django.contrib.auth.views import redirect_to_login
from django.http import Http404
from django.shortcuts import redirect
from django.urls import reverse
from django.utils.http import url_has_allowed_host_and_scheme
from django.utils.translation import gettext as _
from rest_framework import exceptions, permissions, status
from rest_framework.renderers import TemplateHTMLRenderer
from rest_framework.response import Response
from rest_framework.throttling import ScopedRateThrottle
from rest_framework.views import APIView

from music.models import MusicType

from .dao import UserDao
from .registration import Disposition, register
from .session import UserInfo

logger = logging.getLogger("musicjungle.users")

LOGIN_TEMPLATE = "users/login.html"


class UserPageView(APIView):
    """Base for HTML pages backed by the user store."""
    renderer_classes = [TemplateHTMLRenderer]
    dao: Optional[UserDao] = None

    def get_dao(self) -> UserDao:
        return self.dao if self.dao is not None else UserDao()

    def get_throttles(self):
        throttles = super().get_throttles()
        # Scoped rates (`throttle_scope`) apply to form submissions only.
        if self.request.method == "POST" and getattr(self, "throttle_scope", None):
            throttles.append(ScopedRateThrottle())
        return throttles

    def handle_exception(self, exc):
        # Pages send anonymous visitors to sign in rather than showing a 403.
        if isinstance(exc, exceptions.NotAuthenticated):
            return redirect_to_login(self.request.get_full_path(), reverse("users:login"))
        return super().handle_exception(exc)


def _login_page_context(
    *,
    values: Optional[Dict[str, str]] = None,
    errors: Optional[Dict[str, List[Dict[str, str]]]] = None,
    login_error: Optional[str] = None,
    next_url: str = "",
) -> Dict[str, Any]:
    return {
        "values": values or {},
        "errors": errors or {},
        "login_error": login_error,
        "next": next_url,
    }


def _errors_payload(disposition: Disposition) -> Dict[str, List[Dict[str, str]]]:
    """Group field errors for templates: {field: [{"code", "message"}, ...]}."""
    return {
        field_name: [{"code": e.code, "message": e.message} for e in errs]
        for field_name, errs in disposition.errors_by_field().items()
    }


class HomeView(UserPageView):
    template_name = "users/home.html"

    def get(self, request, *args, **kwargs):
        user = UserInfo(request).user
        self.get_dao().refresh(user)
        return Response({"user": user, "music_types": MusicType.choices})


class UsersView(UserPageView):
    """GET lists users; POST registers a new one."""
    template_name = "users/list.html"
    throttle_scope = "users-register"

    def get_permissions(self):
        if self.request.method == "POST":
            return [permissions.AllowAny()]
        return super().get_permissions()

    def get(self, request, *args, **kwargs):
        users = self.get_dao().list_all()
        if users is None:
            users = []
        return Response({"users": users})

    def post(self, request, *args, **kwargs):
        disposition = register(request.data, self.get_dao())

        if not disposition.ok:
            values = {
                "name": request.data.get("name", ""),
                "login": request.data.get("login", ""),
            }
            return Response(
                _login_page_context(values=values, errors=_errors_payload(disposition)),
                status=status.HTTP_400_BAD_REQUEST,
                template_name=LOGIN_TEMPLATE,
            )

        # Flash notice survives the redirect and is shown once on the next page.
        messages.success(request, disposition.notice)
        return redirect(disposition.target)


class UserDetailView(UserPageView):
    template_name = "users/view.html"

    def get(self, request, login: str, *args, **kwargs):
        user = self.get_dao().find(login)
        if user is None:
            raise Http404(_("No user with login %(login)s.") % {"login": login})
        return Response({"user": user})


class LoginView(UserPageView):
    """Login page (GET) and session sign-in (POST)."""
    permission_classes = [permissions.AllowAny]
    template_name = LOGIN_TEMPLATE
    throttle_scope = "auth-login"

    def get(self, request, *args, **kwargs):
        return Response(_login_page_context(next_url=request.query_params.get("next", "")))

    def post(self, request, *args, **kwargs):
        login = request.data.get("login", "")
        password = request.data.get("password", "")
        next_url = request.data.get("next", "")

        user = None
        if "\x00" not in login:
            user = authenticate(request, username=login, password=password)
        if user is None or not user.is_active:
            logger.info("sign-in rejected login=%r", login)
            return Response(
                _login_page_context(
                    values={"login": login},
                    login_error="invalid_credentials",
                    next_url=next_url,
                ),
                status=status.HTTP_400_BAD_REQUEST,
            )

        UserInfo(request).login(user)
        if next_url and url_has_allowed_host_and_scheme(
            next_url, allowed_hosts={request.get_host()}, require_https=request.is_secure()
        ):
            return redirect(next_url)
        return redirect("users:home")


class LogoutView(UserPageView):
    """Session sign-out (idempotent)."""
    permission_classes = [permissions.AllowAny]

    def post(self, request, *args, **kwargs):
        UserInfo(request).logout()
        return redirect("users:login")
