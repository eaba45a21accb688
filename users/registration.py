"""
User registration flow.

Steps
-----
1. Structural validation: submitted fields are bound into an unsaved `User`
   and checked by `UserRegistrationSerializer` (required fields, lengths,
   password strength when one is given).
2. Domain validation: `login_rules` checks login uniqueness against the store
   and the `[a-z0-9_]+` format. Both rules always run, so a login breaking
   both reports both errors.
3. Disposition: any error from (1) or (2) produces a failure `Disposition`
   carrying every error and the fallback page; nothing is written.
4. Otherwise the user is inserted exactly once and a success `Disposition`
   carries the redirect target and the flash notice.

Error reporting contract
------------------------
- Invalid input never raises; it is reported through `Disposition.errors` as
  `FieldError(field, code, message)` entries. Codes owned here are
  `login_already_exists` and `invalid_login`; structural codes come from DRF
  (`required`, `blank`, `max_length`, ...) and Django password validators.
- Store failures (including `IntegrityError` from a racing duplicate insert)
  propagate to the caller.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple

from django.contrib.auth import password_validation
from django.utils.translation import gettext as _
from rest_framework import serializers

from .dao import UserDao
from .models import LOGIN_MAX_LENGTH, NAME_MAX_LENGTH, User

logger = logging.getLogger("musicjungle.users")

LOGIN_PATTERN = re.compile(r"^[a-z0-9_]+$")

# URL names for both outcomes. Failure re-renders the login page (which also
# holds the registration form); success redirects to it.
FALLBACK_PAGE = "users:login"
SUCCESS_REDIRECT = "users:login"


@dataclass(frozen=True)
class FieldError:
    """A single validation failure tied to one input field."""
    field: str
    code: str
    message: str = ""


@dataclass
class Disposition:
    """Outcome of a registration attempt.

    Attributes:
        ok: True when the user was persisted.
        target: URL name to render on failure or redirect to on success.
        errors: Every recorded field error (empty on success).
        notice: Flash message for the next page load (success only).
        user: The persisted user (success only).
    """
    ok: bool
    target: str
    errors: List[FieldError] = field(default_factory=list)
    notice: Optional[str] = None
    user: Optional[User] = None

    def errors_by_field(self) -> Dict[str, List[FieldError]]:
        grouped: Dict[str, List[FieldError]] = {}
        for err in self.errors:
            grouped.setdefault(err.field, []).append(err)
        return grouped

    def error_codes(self, field_name: str) -> List[str]:
        return [err.code for err in self.errors if err.field == field_name]


class UserRegistrationSerializer(serializers.Serializer):
    """Structural rules for a submitted user."""
    name = serializers.CharField(max_length=NAME_MAX_LENGTH)
    # Format is a domain rule (see `login_rules`); keep the raw value intact here.
    login = serializers.CharField(max_length=LOGIN_MAX_LENGTH, trim_whitespace=False)
    password = serializers.CharField(
        required=False, allow_blank=True, write_only=True, trim_whitespace=False
    )

    def validate_password(self, value: str) -> str:
        if value:
            # Django validators raise DjangoValidationError; DRF keeps their codes.
            password_validation.validate_password(value)
        return value


def _as_text(value: Any) -> str:
    """Return `value` as a string; None becomes empty string."""
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def bind_user(data: Mapping[str, Any]) -> User:
    """Populate an unsaved `User` from raw submitted data (no validation)."""
    return User(
        name=_as_text(data.get("name")),
        login=_as_text(data.get("login")),
        password=_as_text(data.get("password")),
    )


def structural_errors(data: Mapping[str, Any]) -> Tuple[User, List[FieldError]]:
    """
    Bind `data` into a candidate user and run the declarative field rules.

    Returns:
        The unsaved candidate and the structural errors, in serializer field order.
    """
    candidate = bind_user(data)
    ser = UserRegistrationSerializer(data=data)
    if ser.is_valid():
        return candidate, []

    errors: List[FieldError] = []
    for field_name, details in ser.errors.items():
        for detail in details:
            errors.append(FieldError(field_name, getattr(detail, "code", "invalid"), str(detail)))
    return candidate, errors


def login_rules(candidate: User, dao: UserDao) -> List[FieldError]:
    """
    Domain rules for a candidate login. Pure apart from the store lookup.

    Both checks run unconditionally so simultaneous violations are all reported.
    """
    login = candidate.login or ""
    errors: List[FieldError] = []
    # No stored login holds NUL, and some database drivers reject it outright.
    exists = "\x00" not in login and dao.contains_user_with_login(login)
    if exists:
        errors.append(FieldError("login", "login_already_exists", _("Login already exists.")))
    if not LOGIN_PATTERN.fullmatch(login):
        errors.append(
            FieldError(
                "login",
                "invalid_login",
                _("Invalid login: use lowercase letters, digits and underscores only."),
            )
        )
    return errors


def register(data: Mapping[str, Any], dao: UserDao) -> Disposition:
    """
    Validate submitted user data and, when valid, add the user to the store.

    Args:
        data: Raw submitted fields (`name`, `login`, optional `password`).
        dao: User store; `add` is called at most once, and only on success.
    """
    candidate, errors = structural_errors(data)
    errors.extend(login_rules(candidate, dao))

    if errors:
        logger.info(
            "registration rejected login=%r errors=%s",
            candidate.login,
            ",".join(f"{e.field}:{e.code}" for e in errors),
        )
        return Disposition(ok=False, target=FALLBACK_PAGE, errors=errors)

    dao.add(candidate)
    user = candidate
    logger.info("registration accepted login=%s", user.login)
    return Disposition(
        ok=True,
        target=SUCCESS_REDIRECT,
        notice=_("User %(name)s successfully added") % {"name": user.name},
        user=user,
    )
