"""Django app configuration for the inventory app."""

from django.apps import AppConfig


class InventoryConfig(AppConfig):
    """AppConfig for products, kanbans and the stock ledger."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "inventory"
