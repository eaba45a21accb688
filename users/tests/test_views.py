"""
Page tests for home, listing, registration, detail, login and logout.

What these tests verify
-----------------------
- **Registration**: POST /users/ with a valid user redirects to the login page,
  inserts one row and flashes "User <name> successfully added"; invalid or
  duplicate logins re-render the login page with 400, field error codes and no
  insert.
- **Listing**: exposes every user; a store answering `None` yields `[]`.
- **Detail**: known login renders; unknown login is 404.
- **Access**: anonymous visitors to protected pages are redirected to the login
  page with `?next=`.
- **Session**: login/logout round trip, safe `next` handling and the
  `auth-login` throttle on sign-in posts.

Notes
-----
- The throttle cache is cleared per test so anon/register rates never bleed
  across cases.
- `RequestFactory` + `as_view(dao=...)` exercises store injection without the DB.
"""

from __future__ import annotations

from unittest.mock import patch

from django.contrib.auth import get_user_model
from django.contrib.messages import get_messages
from django.core.cache import cache
from django.test import RequestFactory, TestCase
from django.urls import reverse
from rest_framework.test import force_authenticate
from rest_framework.throttling import ScopedRateThrottle

from music.models import MusicType
from users.tests.fakes import FakeUserDao
from users.views import HomeView, UserDetailView, UsersView

User = get_user_model()


class RegistrationPageTests(TestCase):
    def setUp(self) -> None:
        cache.clear()
        self.url = reverse("users:list")

    def test_valid_registration_redirects_with_notice(self):
        r = self.client.post(self.url, {"name": "Nico", "login": "555555"})

        self.assertEqual(r.status_code, 302)
        self.assertEqual(r["Location"], reverse("users:login"))
        self.assertEqual(User.objects.filter(login="555555").count(), 1)
        self.assertEqual(User.objects.get(login="555555").name, "Nico")
        notices = [m.message for m in get_messages(r.wsgi_request)]
        self.assertEqual(notices, ["User Nico successfully added"])

    def test_notice_is_shown_once_on_next_page(self):
        r = self.client.post(self.url, {"name": "Nico", "login": "nico"}, follow=True)
        self.assertEqual(r.status_code, 200)
        self.assertContains(r, "User Nico successfully added")

        again = self.client.get(reverse("users:login"))
        self.assertNotContains(again, "successfully added")

    def test_invalid_login_rerenders_login_page(self):
        r = self.client.post(self.url, {"name": "Ana", "login": "Ana!"})

        self.assertEqual(r.status_code, 400)
        self.assertTemplateUsed(r, "users/login.html")
        codes = [e["code"] for e in r.data["errors"]["login"]]
        self.assertEqual(codes, ["invalid_login"])
        self.assertFalse(User.objects.filter(name="Ana").exists())

    def test_existing_login_rejected(self):
        User.objects.create_user(login="bob", name="Bob", password="old-pass-123")
        r = self.client.post(self.url, {"name": "Bob", "login": "bob"})

        self.assertEqual(r.status_code, 400)
        codes = [e["code"] for e in r.data["errors"]["login"]]
        self.assertEqual(codes, ["login_already_exists"])
        self.assertEqual(User.objects.filter(login="bob").count(), 1)

    def test_submitted_values_are_kept_on_failure(self):
        r = self.client.post(self.url, {"name": "Ana", "login": "Ana!"})
        self.assertEqual(r.data["values"], {"name": "Ana", "login": "Ana!"})
        self.assertContains(r, 'value="Ana"', status_code=400)

    def test_registered_password_allows_sign_in(self):
        self.client.post(self.url, {"name": "Carol", "login": "carol", "password": "Tr1cky-Pass!"})
        self.assertTrue(self.client.login(login="carol", password="Tr1cky-Pass!"))

    def test_registration_without_password_cannot_sign_in(self):
        self.client.post(self.url, {"name": "Dave", "login": "dave"})
        self.assertFalse(User.objects.get(login="dave").has_usable_password())

    def test_registration_is_throttled(self):
        # Rates are read into the throttle class at import time; patch them there.
        with patch.object(ScopedRateThrottle, "THROTTLE_RATES", {"users-register": "2/min"}):
            for login in ("first", "second"):
                self.assertEqual(self.client.post(self.url, {"name": "N", "login": login}).status_code, 302)
            r3 = self.client.post(self.url, {"name": "N", "login": "third"})
        self.assertEqual(r3.status_code, 429)
        self.assertFalse(User.objects.filter(login="third").exists())

    def test_nul_in_login_rerenders_with_invalid_login(self):
        r = self.client.post(self.url, {"name": "N", "login": "ab\x00c"})
        self.assertEqual(r.status_code, 400)
        self.assertIn("invalid_login", [e["code"] for e in r.data["errors"]["login"]])
        self.assertEqual(User.objects.count(), 0)


class ProtectedPagesTests(TestCase):
    def setUp(self) -> None:
        cache.clear()
        self.alice = User.objects.create_user(login="alice", name="Alice", password="Sup3r-Secret!")
        self.bob = User.objects.create_user(login="bob", name="Bob", password="Sup3r-Secret!")

    def test_anonymous_is_redirected_to_login(self):
        for url in (reverse("users:home"), reverse("users:list"), reverse("users:view", args=["alice"])):
            with self.subTest(url=url):
                r = self.client.get(url)
                self.assertEqual(r.status_code, 302)
                self.assertTrue(r["Location"].startswith(reverse("users:login") + "?next="))

    def test_home_lists_music_types(self):
        self.client.force_login(self.alice)
        r = self.client.get(reverse("users:home"))

        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.data["user"], self.alice)
        self.assertEqual(r.data["music_types"], MusicType.choices)
        self.assertContains(r, "Bossa Nova")

    def test_list_shows_all_users(self):
        self.client.force_login(self.alice)
        r = self.client.get(reverse("users:list"))

        self.assertEqual(r.status_code, 200)
        self.assertEqual([u.login for u in r.data["users"]], ["alice", "bob"])
        self.assertContains(r, reverse("users:view", args=["bob"]))

    def test_view_known_user(self):
        self.client.force_login(self.alice)
        r = self.client.get(reverse("users:view", args=["bob"]))

        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.data["user"], self.bob)
        self.assertContains(r, "Bob")

    def test_view_unknown_user_is_404(self):
        self.client.force_login(self.alice)
        r = self.client.get(reverse("users:view", args=["nobody"]))
        self.assertEqual(r.status_code, 404)


class StoreInjectionTests(TestCase):
    """Pages resolved against an injected in-memory store."""

    def setUp(self) -> None:
        cache.clear()
        self.factory = RequestFactory()
        self.viewer = User(login="viewer", name="Viewer")

    def _get(self, view, path, **kwargs):
        request = self.factory.get(path)
        force_authenticate(request, user=self.viewer)
        return view(request, **kwargs)

    def test_list_defaults_to_empty_when_store_returns_none(self):
        view = UsersView.as_view(dao=FakeUserDao(list_returns_none=True))
        r = self._get(view, "/users/")
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.data["users"], [])

    def test_home_refreshes_current_user(self):
        dao = FakeUserDao()
        r = self._get(HomeView.as_view(dao=dao), "/")
        self.assertEqual(r.status_code, 200)
        self.assertEqual(dao.refreshed, [self.viewer])

    def test_detail_uses_injected_store(self):
        dao = FakeUserDao(["zed"])
        r = self._get(UserDetailView.as_view(dao=dao), "/users/zed/", login="zed")
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.data["user"].login, "zed")


class SessionPagesTests(TestCase):
    def setUp(self) -> None:
        cache.clear()
        User.objects.create_user(login="alice", name="Alice", password="Sup3r-Secret!")

    def test_login_page_renders(self):
        r = self.client.get(reverse("users:login"))
        self.assertEqual(r.status_code, 200)
        self.assertTemplateUsed(r, "users/login.html")

    def test_login_success_then_logout(self):
        r = self.client.post(reverse("users:login"), {"login": "alice", "password": "Sup3r-Secret!"})
        self.assertEqual(r.status_code, 302)
        self.assertEqual(r["Location"], reverse("users:home"))
        self.assertEqual(self.client.get(reverse("users:home")).status_code, 200)

        r_out = self.client.post(reverse("users:logout"))
        self.assertEqual(r_out.status_code, 302)
        self.assertEqual(self.client.get(reverse("users:home")).status_code, 302)

    def test_login_follows_safe_next(self):
        target = reverse("users:list")
        r = self.client.post(
            reverse("users:login"),
            {"login": "alice", "password": "Sup3r-Secret!", "next": target},
        )
        self.assertEqual(r["Location"], target)

    def test_login_ignores_offsite_next(self):
        r = self.client.post(
            reverse("users:login"),
            {"login": "alice", "password": "Sup3r-Secret!", "next": "https://evil.example.com/"},
        )
        self.assertEqual(r["Location"], reverse("users:home"))

    def test_login_invalid_credentials_400(self):
        r = self.client.post(reverse("users:login"), {"login": "alice", "password": "wrong"})
        self.assertEqual(r.status_code, 400)
        self.assertEqual(r.data["login_error"], "invalid_credentials")

    def test_login_with_nul_is_rejected(self):
        r = self.client.post(reverse("users:login"), {"login": "ali\x00ce", "password": "Sup3r-Secret!"})
        self.assertEqual(r.status_code, 400)
        self.assertEqual(r.data["login_error"], "invalid_credentials")

    def test_sign_in_attempts_are_throttled(self):
        url = reverse("users:login")
        with patch.object(ScopedRateThrottle, "THROTTLE_RATES", {"auth-login": "2/min"}):
            for _ in range(2):
                self.assertEqual(self.client.post(url, {"login": "alice", "password": "wrong"}).status_code, 400)
            r3 = self.client.post(url, {"login": "alice", "password": "Sup3r-Secret!"})
            # The page itself stays reachable.
            self.assertEqual(self.client.get(url).status_code, 200)
        self.assertEqual(r3.status_code, 429)
        self.assertEqual(self.client.get(reverse("users:home")).status_code, 302)
