"""Inventory services: the stock ledger and kanban transfer side-effects.

Every mutation runs in ``transaction.atomic`` and locks product rows with
``select_for_update`` before reading ``stock_level``, so the stock check and
the write happen under the same row lock.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from common.choices import ColumnStatus, ValidationColumn
from common.events import INVENTORY_KEYS, emit_event, invalidate_caches
from common.exceptions import (
    InsufficientStock,
    InvalidDestination,
    InvalidQuantity,
    InvalidStateTransition,
    LocationNotFound,
    NotFoundError,
    ProductNotFound,
    ValidationFailed,
    ValidationRequired,
)
from django.db import transaction
from django.utils import timezone
from locations.models import Location

from .models import DESCRIPTIVE_FIELDS, Kanban, KanbanLink, Product, ProductValidation, TransferLog
from .selectors import has_validation, total_stock_for

logger = logging.getLogger("stockroute.inventory")

RECEIVE_COLUMNS = (
    ColumnStatus.PURCHASED,
    ColumnStatus.RECEIVED,
    ColumnStatus.STORED,
    ColumnStatus.IN_TRANSIT,
)
AUTO_TRANSFER_NOTE = "Automatic transfer when product moved to Purchased column"


@dataclass
class StockMoveResult:
    source: Product
    destination: Product
    destination_total_stock: Optional[int]
    split: bool


def lock_product(product_id: int) -> Product:
    """Fetch a product row with a row lock; caller must be inside a transaction."""

    try:
        return Product.objects.select_for_update().get(id=product_id)
    except Product.DoesNotExist:
        raise ProductNotFound(product_id=product_id)


def materialize_stock(
    *,
    source: Product,
    quantity: int,
    location_id: Optional[int] = None,
    person_id: Optional[int] = None,
    notes: Optional[str] = None,
) -> Product:
    """Create a Stored product holding ``quantity`` units taken from ``source``.

    Descriptive fields are copied verbatim and ``source_product`` records the
    lineage. The caller is responsible for having removed the stock from the
    source (or for it already being in transit).
    """

    fields = {name: getattr(source, name) for name in DESCRIPTIVE_FIELDS}
    fields["tags"] = list(source.tags or [])
    if notes is not None:
        fields["notes"] = notes
    return Product.objects.create(
        **fields,
        column_status=Product.STATUS_STORED,
        stock_level=int(quantity),
        location_id=location_id,
        assigned_to_person_id=person_id,
        source_product=source,
        column_entered_at=timezone.now(),
    )


@transaction.atomic
def move_stock(
    *,
    product_id: int,
    quantity: int,
    to_location_id: Optional[int] = None,
    to_person_id: Optional[int] = None,
) -> StockMoveResult:
    """Move ``quantity`` units of a product to a location and/or person.

    Moving the whole stock relocates the product in place. Moving part of it
    decrements the source and creates a new product for the moved units.
    """

    if not to_location_id and not to_person_id:
        raise InvalidDestination("A destination location or person is required")
    quantity = int(quantity)
    if quantity <= 0:
        raise InvalidQuantity("Quantity to move must be positive", quantity=quantity)

    product = lock_product(product_id)
    current = int(product.stock_level or 0)
    if quantity > current:
        raise InsufficientStock(product_id=product.id, requested=quantity, available=current)

    if quantity == current:
        product.location_id = to_location_id or product.location_id
        product.assigned_to_person_id = to_person_id or product.assigned_to_person_id
        product.stock_level = quantity
        product.save(update_fields=["location", "assigned_to_person", "stock_level", "updated_at"])
        destination = product
        split = False
    else:
        product.stock_level = current - quantity
        product.save(update_fields=["stock_level", "updated_at"])
        destination = materialize_stock(
            source=product, quantity=quantity, location_id=to_location_id, person_id=to_person_id
        )
        split = True

    total = total_stock_for(destination, location_id=to_location_id)
    logger.info(
        "stock.moved",
        extra={
            "event": "stock.moved",
            "product_id": product.id,
            "destination_product_id": destination.id,
            "quantity": quantity,
            "stock_before": current,
            "split": split,
            "to_location_id": to_location_id,
            "to_person_id": to_person_id,
        },
    )
    return StockMoveResult(source=product, destination=destination, destination_total_stock=total, split=split)


def _receive_target(product: Product, kanban: Kanban) -> Optional[Kanban]:
    """Pick the receive kanban an order product is handed to, if any.

    A per-product preference wins when a KanbanLink authorizes it; otherwise
    the order kanban's own linked receive kanban is used.
    """

    preferred = product.preferred_receive_kanban
    if preferred is not None and preferred.type == Kanban.TYPE_RECEIVE:
        if KanbanLink.objects.filter(order_kanban=kanban, receive_kanban=preferred).exists():
            return preferred
    linked = kanban.linked_kanban
    if linked is not None and linked.type == Kanban.TYPE_RECEIVE:
        return linked
    return None


def _relocate(
    *,
    product: Product,
    target: Kanban,
    to_column: str,
    transfer_type: str,
    notes: str,
    transferred_by: str,
) -> Product:
    from_kanban_id = product.kanban_id
    from_column = product.column_status
    from_location_id = product.location_id
    to_location_id = target.location_id or from_location_id

    TransferLog.objects.create(
        product=product,
        from_kanban_id=from_kanban_id,
        to_kanban=target,
        from_column=from_column,
        to_column=to_column,
        from_location_id=from_location_id,
        to_location_id=to_location_id,
        transfer_type=transfer_type,
        notes=notes,
        transferred_by=transferred_by,
    )
    product.kanban = target
    product.column_status = to_column
    product.location_id = to_location_id
    product.column_entered_at = timezone.now()
    product.save(update_fields=["kanban", "column_status", "location", "column_entered_at", "updated_at"])
    logger.info(
        "product.transferred",
        extra={
            "event": "product.transferred",
            "product_id": product.id,
            "from_kanban_id": from_kanban_id,
            "to_kanban_id": target.id,
            "transfer_type": transfer_type,
        },
    )
    invalidate_caches(*INVENTORY_KEYS)
    emit_event("product-updated", product_id=product.id, kanban_id=target.id, column_status=to_column)
    return product


@transaction.atomic
def change_column_status(*, product_id: int, column_status: str, changed_by: Optional[str] = None) -> Product:
    """Move a product to another kanban column, applying transfer side-effects.

    Raises ValidationRequired when entering Received/Stored on a receive kanban
    without a matching ProductValidation.
    """

    if column_status not in ColumnStatus.values:
        raise InvalidStateTransition(f"Unknown column status '{column_status}'", column_status=column_status)

    product = lock_product(product_id)
    previous = product.column_status
    if previous == column_status:
        return product
    kanban = product.kanban

    if (
        column_status in ValidationColumn.values
        and kanban is not None
        and kanban.type == Kanban.TYPE_RECEIVE
        and not has_validation(product_id=product.id, column_status=column_status)
    ):
        raise ValidationRequired(product_id=product.id, column_status=column_status)

    if (
        kanban is not None
        and kanban.type == Kanban.TYPE_ORDER
        and column_status == Product.STATUS_PURCHASED
        and not product.is_draft
    ):
        target = _receive_target(product, kanban)
        if target is not None:
            return _relocate(
                product=product,
                target=target,
                to_column=Product.STATUS_PURCHASED,
                transfer_type=TransferLog.TYPE_AUTOMATIC,
                notes=AUTO_TRANSFER_NOTE,
                transferred_by="system",
            )

    update_fields = ["column_status", "column_entered_at", "updated_at"]
    if column_status == Product.STATUS_STORED:
        if product.stock_level is None:
            product.stock_level = 0
            update_fields.append("stock_level")
        if product.location_id is None:
            validation = ProductValidation.objects.filter(
                product=product, column_status=ValidationColumn.STORED, location__isnull=False
            ).first()
            if validation is not None:
                product.location_id = validation.location_id
                update_fields.append("location")

    product.column_status = column_status
    product.column_entered_at = timezone.now()
    product.save(update_fields=update_fields)
    logger.info(
        "product.column_changed",
        extra={
            "event": "product.column_changed",
            "product_id": product.id,
            "status_from": previous,
            "status_to": column_status,
            "changed_by": changed_by,
        },
    )
    invalidate_caches(*INVENTORY_KEYS)
    emit_event("product-updated", product_id=product.id, column_status=column_status)
    return product


@transaction.atomic
def transfer_product(*, product_id: int, to_kanban_id: int, transferred_by: str = "", notes: str = "") -> Product:
    """Manually hand a product over to a kanban linked to its current one."""

    product = lock_product(product_id)
    try:
        target = Kanban.objects.get(id=to_kanban_id)
    except Kanban.DoesNotExist:
        raise NotFoundError("Kanban not found", kanban_id=to_kanban_id)
    current = product.kanban
    if current is None or current.id == target.id:
        raise InvalidStateTransition("Product cannot be transferred to this kanban", kanban_id=target.id)
    authorized = current.linked_kanban_id == target.id or KanbanLink.objects.filter(
        order_kanban=current, receive_kanban=target
    ).exists()
    if not authorized:
        raise InvalidStateTransition("Kanbans are not linked", kanban_id=target.id)

    to_column = product.column_status
    if target.type == Kanban.TYPE_RECEIVE and to_column not in RECEIVE_COLUMNS:
        to_column = Product.STATUS_PURCHASED
    return _relocate(
        product=product,
        target=target,
        to_column=to_column,
        transfer_type=TransferLog.TYPE_MANUAL,
        notes=notes,
        transferred_by=transferred_by,
    )


@transaction.atomic
def record_validation(
    *,
    product_id: int,
    column_status: str,
    recipient_name: str,
    validated_by: str,
    location_id: Optional[int] = None,
    received_image: Optional[str] = None,
    storage_photo: Optional[str] = None,
    notes: Optional[str] = None,
) -> ProductValidation:
    """Record the validation that unlocks a Received/Stored transition."""

    if column_status not in ValidationColumn.values:
        raise ValidationFailed("Validation is only recorded for Received or Stored", column_status=column_status)
    product = lock_product(product_id)
    if ProductValidation.objects.filter(product=product, column_status=column_status).exists():
        raise ValidationFailed(
            f"Product already has a validation for {column_status}",
            product_id=product.id,
            column_status=column_status,
        )
    if column_status == ValidationColumn.RECEIVED and not received_image:
        raise ValidationFailed("A received image is required for Received", field="received_image")
    if column_status == ValidationColumn.STORED:
        if not location_id:
            raise ValidationFailed("A location is required for Stored", field="location_id")
        if not storage_photo:
            raise ValidationFailed("A storage photo is required for Stored", field="storage_photo")
    if location_id and not Location.objects.filter(id=location_id).exists():
        raise LocationNotFound(location_id=location_id)

    validation = ProductValidation.objects.create(
        product=product,
        column_status=column_status,
        recipient_name=recipient_name,
        location_id=location_id,
        received_image=received_image,
        storage_photo=storage_photo,
        validated_by=validated_by,
        notes=notes,
    )
    logger.info(
        "product.validated",
        extra={
            "event": "product.validated",
            "product_id": product.id,
            "column_status": column_status,
            "validated_by": validated_by,
        },
    )
    return validation


# EOF
