"""Movement models: audit log of stock moves and token-gated bulk transfers.

MovementLog rows are immutable apart from the single confirm/expire/cancel
transition of a deferred movement. BulkMovement rows are never deleted;
cancelling flips them to ``expired`` and stamps ``cancelled_at``.
"""

from common.choices import BulkMovementStatus, MovementStatus
from common.models import TimeStampedModel
from django.conf import settings
from django.db import models
from django.utils import timezone


class MovementLog(TimeStampedModel):
    STATUS_COMPLETED = MovementStatus.COMPLETED
    STATUS_PENDING = MovementStatus.PENDING
    STATUS_RECEIVED = MovementStatus.RECEIVED
    STATUS_EXPIRED = MovementStatus.EXPIRED
    STATUS_CANCELLED = MovementStatus.CANCELLED
    STATUS_CHOICES = MovementStatus.choices

    product = models.ForeignKey("inventory.Product", on_delete=models.CASCADE, related_name="movement_logs")
    bulk_movement = models.ForeignKey(
        "movements.BulkMovement", null=True, blank=True, on_delete=models.SET_NULL, related_name="movement_logs"
    )
    from_location = models.ForeignKey(
        "locations.Location", null=True, blank=True, on_delete=models.SET_NULL, related_name="+"
    )
    to_location = models.ForeignKey(
        "locations.Location", null=True, blank=True, on_delete=models.SET_NULL, related_name="+"
    )
    from_person = models.ForeignKey(
        "locations.Person", null=True, blank=True, on_delete=models.SET_NULL, related_name="+"
    )
    to_person = models.ForeignKey(
        "locations.Person", null=True, blank=True, on_delete=models.SET_NULL, related_name="+"
    )
    from_area = models.CharField(max_length=255, blank=True, null=True)
    to_area = models.CharField(max_length=255, blank=True, null=True)
    # Stock at the source immediately before the move
    from_stock_level = models.IntegerField(null=True, blank=True)
    # Aggregate stock at the destination after the move
    to_stock_level = models.IntegerField(null=True, blank=True)
    quantity_moved = models.IntegerField(default=0)
    notes = models.TextField(blank=True, null=True)
    moved_by = models.CharField(max_length=255, blank=True, null=True)
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_COMPLETED)
    requires_confirmation = models.BooleanField(default=False)
    public_token = models.CharField(max_length=64, unique=True, null=True, blank=True)
    token_expires_at = models.DateTimeField(null=True, blank=True)
    confirmed_by = models.CharField(max_length=255, blank=True, null=True)
    confirmed_at = models.DateTimeField(null=True, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-created_at", "-id"]
        constraints = [
            models.CheckConstraint(name="movement_quantity_non_negative", condition=models.Q(quantity_moved__gte=0)),
        ]
        indexes = [
            models.Index(fields=["product"], name="movementlog_product_idx"),
            models.Index(fields=["created_at"], name="movementlog_created_at_idx"),
            models.Index(fields=["status", "token_expires_at"], name="movementlog_status_expiry_idx"),
        ]

    @property
    def is_expired(self) -> bool:
        return bool(self.token_expires_at and self.token_expires_at < timezone.now())

    def __str__(self) -> str:  # pragma: no cover
        return f"Movement<{self.id}> product={self.product_id} qty={self.quantity_moved} {self.status}"


class BulkMovement(TimeStampedModel):
    STATUS_PENDING = BulkMovementStatus.PENDING
    STATUS_IN_TRANSIT = BulkMovementStatus.IN_TRANSIT
    STATUS_RECEIVED = BulkMovementStatus.RECEIVED
    STATUS_EXPIRED = BulkMovementStatus.EXPIRED
    STATUS_CHOICES = BulkMovementStatus.choices
    OPEN_STATUSES = (STATUS_PENDING, STATUS_IN_TRANSIT)

    from_location = models.ForeignKey("locations.Location", on_delete=models.PROTECT, related_name="+")
    to_location = models.ForeignKey("locations.Location", on_delete=models.PROTECT, related_name="+")
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_PENDING)
    public_token = models.CharField(max_length=64, unique=True)
    token_expires_at = models.DateTimeField()
    created_by = models.CharField(max_length=255, blank=True, null=True)
    confirmed_by = models.CharField(max_length=255, blank=True, null=True)
    confirmed_at = models.DateTimeField(null=True, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)
    notes = models.TextField(blank=True, null=True)

    class Meta:
        ordering = ["-created_at", "-id"]
        constraints = [
            models.CheckConstraint(
                name="bulk_movement_distinct_locations",
                condition=~models.Q(from_location=models.F("to_location")),
            ),
        ]
        indexes = [
            models.Index(fields=["status"], name="bulkmovement_status_idx"),
            models.Index(fields=["token_expires_at"], name="bulkmovement_expiry_idx"),
        ]

    @property
    def is_expired(self) -> bool:
        return self.token_expires_at < timezone.now()

    @property
    def public_url(self) -> str:
        base = str(getattr(settings, "FRONTEND_URL", "")).rstrip("/")
        return f"{base}/bulk-movement/confirm/{self.public_token}"

    def __str__(self) -> str:  # pragma: no cover
        return f"BulkMovement<{self.id}> {self.from_location_id}->{self.to_location_id} {self.status}"


class BulkMovementItem(TimeStampedModel):
    bulk_movement = models.ForeignKey(BulkMovement, on_delete=models.CASCADE, related_name="items")
    product = models.ForeignKey("inventory.Product", on_delete=models.PROTECT, related_name="bulk_items")
    quantity_sent = models.IntegerField()
    quantity_received = models.IntegerField(null=True, blank=True)
    # Snapshot at creation time
    sku = models.CharField(max_length=120, blank=True, null=True)
    product_details = models.TextField(blank=True)
    product_image = models.TextField(blank=True, null=True)
    unit = models.CharField(max_length=32, blank=True, null=True)

    class Meta:
        ordering = ["id"]
        constraints = [
            models.CheckConstraint(name="bulk_item_quantity_sent_positive", condition=models.Q(quantity_sent__gt=0)),
            models.CheckConstraint(
                name="bulk_item_received_within_sent",
                condition=models.Q(quantity_received__isnull=True)
                | models.Q(quantity_received__gte=0, quantity_received__lte=models.F("quantity_sent")),
            ),
            models.UniqueConstraint(fields=["bulk_movement", "product"], name="unique_bulk_item_product"),
        ]

    def __str__(self) -> str:  # pragma: no cover
        return f"BulkItem<{self.bulk_movement_id}> product={self.product_id} sent={self.quantity_sent}"


# EOF
