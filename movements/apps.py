"""Django app configuration for the movements app."""

from django.apps import AppConfig


class MovementsConfig(AppConfig):
    """AppConfig for movement logs and bulk transfers."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "movements"
