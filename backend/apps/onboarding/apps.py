"""Onboarding app configuration."""

from django.apps import AppConfig


class OnboardingConfig(AppConfig):
    """Configuration for the organization onboarding saga."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.onboarding"
