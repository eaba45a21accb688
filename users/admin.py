"""Admin registrations for the users app.

Admin is back-office only (not a public UI). Django's `UserAdmin` and its forms
assume a `username` field, so the forms, fieldsets and list columns are
re-declared around `login` and `name`.
"""

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as DjangoUserAdmin
from django.contrib.auth.forms import UserChangeForm, UserCreationForm

from .models import User


class AdminUserCreationForm(UserCreationForm):
    class Meta:
        model = User
        fields = ("login", "name")


class AdminUserChangeForm(UserChangeForm):
    class Meta:
        model = User
        fields = "__all__"


@admin.register(User)
class UserAdmin(DjangoUserAdmin):
    form = AdminUserChangeForm
    add_form = AdminUserCreationForm
    ordering = ("name", "login")
    list_display = ("login", "name", "is_active", "is_staff", "date_joined")
    search_fields = ("login", "name")
    fieldsets = (
        (None, {"fields": ("login", "password")}),
        ("Profile", {"fields": ("name",)}),
        ("Permissions", {"fields": ("is_active", "is_staff", "is_superuser", "groups", "user_permissions")}),
        ("Important dates", {"fields": ("last_login", "date_joined")}),
    )
    add_fieldsets = (
        (None, {"classes": ("wide",), "fields": ("login", "name", "password1", "password2")}),
    )
