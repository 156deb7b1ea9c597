"""Inventory models: kanbans, products and their transfer/validation audit.

Products flow through order and receive kanbans by ``column_status``. Once
``Stored`` they carry a ``stock_level`` and sit at a location or with a person.
Splitting stock creates a new product row pointing back through
``source_product``; that lineage is written once at creation.
"""

from common.choices import ColumnStatus, KanbanType, TransferType, ValidationColumn
from common.models import TimeStampedModel
from django.db import models
from django.utils import timezone

# Descriptive fields duplicated onto every product created from another one's stock.
DESCRIPTIVE_FIELDS = (
    "kanban_id",
    "product_details",
    "product_link",
    "priority",
    "product_image",
    "category",
    "tags",
    "supplier",
    "sku",
    "dimensions",
    "weight",
    "unit",
    "unit_price",
    "notes",
)


class Kanban(TimeStampedModel):
    TYPE_ORDER = KanbanType.ORDER
    TYPE_RECEIVE = KanbanType.RECEIVE
    TYPE_CHOICES = KanbanType.choices

    name = models.CharField(max_length=255)
    type = models.CharField(max_length=16, choices=TYPE_CHOICES)
    description = models.TextField(blank=True)
    # Default receive kanban for an order kanban
    linked_kanban = models.ForeignKey(
        "self", null=True, blank=True, on_delete=models.SET_NULL, related_name="linked_from"
    )
    # Where products landing on a receive kanban are placed
    location = models.ForeignKey(
        "locations.Location", null=True, blank=True, on_delete=models.SET_NULL, related_name="kanbans"
    )

    class Meta:
        ordering = ["name", "id"]
        indexes = [
            models.Index(fields=["type"], name="kanban_type_idx"),
        ]

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.name} ({self.type})"


class KanbanLink(TimeStampedModel):
    """Authorizes an order kanban to hand products over to a receive kanban."""

    order_kanban = models.ForeignKey(Kanban, on_delete=models.CASCADE, related_name="receive_links")
    receive_kanban = models.ForeignKey(Kanban, on_delete=models.CASCADE, related_name="order_links")

    class Meta:
        ordering = ["id"]
        constraints = [
            models.UniqueConstraint(fields=["order_kanban", "receive_kanban"], name="unique_kanban_link"),
        ]

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.order_kanban_id} -> {self.receive_kanban_id}"


class Product(TimeStampedModel):
    STATUS_NEW_REQUEST = ColumnStatus.NEW_REQUEST
    STATUS_IN_REVIEW = ColumnStatus.IN_REVIEW
    STATUS_PURCHASED = ColumnStatus.PURCHASED
    STATUS_RECEIVED = ColumnStatus.RECEIVED
    STATUS_STORED = ColumnStatus.STORED
    STATUS_IN_TRANSIT = ColumnStatus.IN_TRANSIT
    STATUS_CHOICES = ColumnStatus.choices

    kanban = models.ForeignKey(Kanban, null=True, blank=True, on_delete=models.SET_NULL, related_name="products")
    column_status = models.CharField(max_length=32, choices=STATUS_CHOICES)
    product_details = models.TextField()
    product_link = models.TextField(blank=True, null=True)
    location = models.ForeignKey(
        "locations.Location", null=True, blank=True, on_delete=models.SET_NULL, related_name="products"
    )
    assigned_to_person = models.ForeignKey(
        "locations.Person", null=True, blank=True, on_delete=models.SET_NULL, related_name="products"
    )
    preferred_receive_kanban = models.ForeignKey(
        Kanban, null=True, blank=True, on_delete=models.SET_NULL, related_name="preferred_by"
    )
    priority = models.CharField(max_length=32, blank=True, null=True)
    # Null until the product is stored and stock starts being tracked
    stock_level = models.IntegerField(null=True, blank=True)
    source_product = models.ForeignKey(
        "self", null=True, blank=True, on_delete=models.SET_NULL, related_name="splits"
    )
    product_image = models.TextField(blank=True, null=True)
    category = models.CharField(max_length=255, blank=True, null=True)
    tags = models.JSONField(default=list, blank=True)
    supplier = models.CharField(max_length=255, blank=True, null=True)
    sku = models.CharField(max_length=120, blank=True, null=True)
    dimensions = models.CharField(max_length=255, blank=True, null=True)
    weight = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    unit = models.CharField(max_length=32, blank=True, null=True)
    unit_price = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    notes = models.TextField(blank=True, null=True)
    is_draft = models.BooleanField(default=False)
    column_entered_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["-updated_at", "id"]
        constraints = [
            models.CheckConstraint(
                name="product_stock_non_negative",
                condition=models.Q(stock_level__isnull=True) | models.Q(stock_level__gte=0),
            ),
        ]
        indexes = [
            models.Index(fields=["column_status"], name="product_column_status_idx"),
            models.Index(fields=["location", "sku"], name="product_location_sku_idx"),
            models.Index(fields=["sku"], name="product_sku_idx"),
        ]

    def __str__(self) -> str:  # pragma: no cover
        return f"Product<{self.id}> {self.column_status} stock={self.stock_level}"


class ProductValidation(TimeStampedModel):
    COLUMN_CHOICES = ValidationColumn.choices

    product = models.ForeignKey(Product, on_delete=models.CASCADE, related_name="validations")
    column_status = models.CharField(max_length=32, choices=COLUMN_CHOICES)
    recipient_name = models.CharField(max_length=255)
    location = models.ForeignKey(
        "locations.Location", null=True, blank=True, on_delete=models.SET_NULL, related_name="+"
    )
    received_image = models.TextField(blank=True, null=True)
    storage_photo = models.TextField(blank=True, null=True)
    validated_by = models.CharField(max_length=255)
    notes = models.TextField(blank=True, null=True)

    class Meta:
        ordering = ["created_at", "id"]
        constraints = [
            models.UniqueConstraint(fields=["product", "column_status"], name="unique_validation_per_column"),
        ]

    def __str__(self) -> str:  # pragma: no cover
        return f"Validation<{self.product_id}> {self.column_status}"


class TransferLog(TimeStampedModel):
    TYPE_AUTOMATIC = TransferType.AUTOMATIC
    TYPE_MANUAL = TransferType.MANUAL
    TYPE_CHOICES = TransferType.choices

    product = models.ForeignKey(Product, on_delete=models.CASCADE, related_name="transfer_logs")
    from_kanban = models.ForeignKey(Kanban, null=True, on_delete=models.SET_NULL, related_name="+")
    to_kanban = models.ForeignKey(Kanban, null=True, on_delete=models.SET_NULL, related_name="+")
    from_column = models.CharField(max_length=32)
    to_column = models.CharField(max_length=32)
    from_location = models.ForeignKey(
        "locations.Location", null=True, blank=True, on_delete=models.SET_NULL, related_name="+"
    )
    to_location = models.ForeignKey(
        "locations.Location", null=True, blank=True, on_delete=models.SET_NULL, related_name="+"
    )
    transfer_type = models.CharField(max_length=16, choices=TYPE_CHOICES)
    notes = models.TextField(blank=True)
    transferred_by = models.CharField(max_length=255, blank=True)

    class Meta:
        ordering = ["-created_at", "id"]
        indexes = [
            models.Index(fields=["product"], name="transferlog_product_idx"),
        ]

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.transfer_type} {self.from_kanban_id}->{self.to_kanban_id} for {self.product_id}"


# EOF
