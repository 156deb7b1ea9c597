"""Shared enumerations and choices used across apps."""

from django.db import models


class KanbanType(models.TextChoices):
    ORDER = "order", "Order"
    RECEIVE = "receive", "Receive"


class ColumnStatus(models.TextChoices):
    """Workflow columns a product passes through on order and receive kanbans."""

    NEW_REQUEST = "New Request", "New Request"
    IN_REVIEW = "In Review", "In Review"
    PURCHASED = "Purchased", "Purchased"
    RECEIVED = "Received", "Received"
    STORED = "Stored", "Stored"
    IN_TRANSIT = "In Transit", "In Transit"


class ValidationColumn(models.TextChoices):
    """Columns that require a validation record on receive kanbans."""

    RECEIVED = "Received", "Received"
    STORED = "Stored", "Stored"


class TransferType(models.TextChoices):
    AUTOMATIC = "automatic", "Automatic"
    MANUAL = "manual", "Manual"


class MovementStatus(models.TextChoices):
    """Lifecycle statuses for single-product movements."""

    COMPLETED = "completed", "Completed"
    PENDING = "pending", "Pending"
    RECEIVED = "received", "Received"
    EXPIRED = "expired", "Expired"
    CANCELLED = "cancelled", "Cancelled"


class BulkMovementStatus(models.TextChoices):
    """Lifecycle statuses for bulk movements.

    Cancellation shares the terminal ``expired`` status; ``cancelled_at`` tells them apart.
    """

    PENDING = "pending", "Pending"
    IN_TRANSIT = "in_transit", "In Transit"
    RECEIVED = "received", "Received"
    EXPIRED = "expired", "Expired"
