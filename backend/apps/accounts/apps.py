"""Accounts app configuration."""

from django.apps import AppConfig


class AccountsConfig(AppConfig):
    """Configuration for accounts app (Stytch identity integration)."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.accounts"
