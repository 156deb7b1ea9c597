"""Django app configuration for the locations app."""

from django.apps import AppConfig


class LocationsConfig(AppConfig):
    """AppConfig for physical locations, departments and people."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "locations"
