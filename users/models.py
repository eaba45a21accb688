"""Custom user model for MusicJungle.

Identity
--------
- Users are identified by `login`, a short lowercase handle (`[a-z0-9_]+`) that
  also appears in page URLs (`/users/<login>/`). `name` is the display string.
- `login` carries a database unique constraint. The registration flow checks
  uniqueness first, but the check and the insert are not atomic; the constraint
  is what rejects a racing duplicate.

Passwords
---------
- Optional at registration. Accounts created without one get an unusable
  password and cannot sign in until an admin sets one.
"""

from django.contrib.auth.base_user import AbstractBaseUser, BaseUserManager
from django.contrib.auth.models import PermissionsMixin
from django.db import models
from django.utils import timezone

LOGIN_MAX_LENGTH = 20
NAME_MAX_LENGTH = 100


class UserManager(BaseUserManager):
    use_in_migrations = True

    def _create_user(self, login, name, password, **extra_fields):
        if not login:
            raise ValueError("The login must be set")
        user = self.model(login=login, name=name, **extra_fields)
        if password:
            user.set_password(password)
        else:
            user.set_unusable_password()
        user.save(using=self._db)
        return user

    def create_user(self, login, name="", password=None, **extra_fields):
        extra_fields.setdefault("is_staff", False)
        extra_fields.setdefault("is_superuser", False)
        return self._create_user(login, name, password, **extra_fields)

    def create_superuser(self, login, name="", password=None, **extra_fields):
        extra_fields.setdefault("is_staff", True)
        extra_fields.setdefault("is_superuser", True)
        if extra_fields.get("is_staff") is not True:
            raise ValueError("Superuser must have is_staff=True.")
        if extra_fields.get("is_superuser") is not True:
            raise ValueError("Superuser must have is_superuser=True.")
        return self._create_user(login, name, password, **extra_fields)


class User(AbstractBaseUser, PermissionsMixin):
    """A registered MusicJungle member."""

    login = models.CharField(max_length=LOGIN_MAX_LENGTH, unique=True)
    name = models.CharField(max_length=NAME_MAX_LENGTH)
    is_active = models.BooleanField(default=True)
    is_staff = models.BooleanField(default=False)
    date_joined = models.DateTimeField(default=timezone.now)

    objects = UserManager()

    USERNAME_FIELD = "login"
    REQUIRED_FIELDS = ["name"]

    class Meta:
        ordering = ["name", "login"]

    def __str__(self) -> str:
        return self.name or self.login

    def get_full_name(self) -> str:
        return self.name

    def get_short_name(self) -> str:
        return self.login
