"""Bulk movement services: eager deduction at creation, token-gated receipt.

Creating a bulk movement removes each item's quantity from its source
product right away (the stock is then "in transit"); destination products
only appear when the public token is confirmed. A product whose stock hits
zero while in transit is flagged ``In Transit`` and flipped back to
``Stored`` whenever stock is restored to it.
"""

import logging
from datetime import datetime
from typing import Dict, List, Optional

from common.events import STOCK_KEYS, emit_event, invalidate_caches
from common.exceptions import (
    AlreadyConfirmed,
    Expired,
    InsufficientStock,
    InvalidDestination,
    InvalidQuantity,
    InvalidStateTransition,
    LocationNotFound,
    MovementNotFound,
    TokenExpired,
    ValidationFailed,
)
from django.db import transaction
from django.utils import timezone
from inventory.models import Product
from inventory.selectors import total_stock_for
from inventory.services import materialize_stock
from locations.models import Location
from locations.services import normalize_area, resolve_or_create_general

from .models import BulkMovement, BulkMovementItem, MovementLog
from .tokens import bulk_token_expiry, generate_public_token

logger = logging.getLogger("stockroute.movements")

NOT_AT_SOURCE = "Some products not found, not stored, or not at source location"


def _get_location(location_id: int) -> Location:
    try:
        return Location.objects.get(id=location_id)
    except Location.DoesNotExist:
        raise LocationNotFound(location_id=location_id)


def _normalize_items(items) -> Dict[int, int]:
    """Map product id to quantity sent, rejecting empty, duplicate and non-positive lines."""

    if not items:
        raise ValidationFailed("At least one item is required")
    quantities: Dict[int, int] = {}
    for entry in items:
        product_id = int(entry["product_id"])
        quantity = int(entry["quantity_sent"])
        if quantity <= 0:
            raise InvalidQuantity("Quantity sent must be positive", product_id=product_id, quantity_sent=quantity)
        if product_id in quantities:
            raise ValidationFailed("Duplicate product in items", product_ids=[product_id])
        quantities[product_id] = quantity
    return quantities


def _snapshot(product: Product) -> dict:
    return {
        "sku": product.sku,
        "product_details": product.product_details,
        "product_image": product.product_image,
        "unit": product.unit,
    }


def _check_available(products: Dict[int, Product], deltas: Dict[int, int]) -> None:
    for product_id, delta in deltas.items():
        available = int(products[product_id].stock_level or 0)
        if delta > available:
            raise InsufficientStock(product_id=product_id, requested=delta, available=available)


def _deduct(product: Product, quantity: int) -> None:
    product.stock_level = int(product.stock_level or 0) - int(quantity)
    fields = ["stock_level", "updated_at"]
    if product.stock_level == 0 and product.column_status != Product.STATUS_IN_TRANSIT:
        product.column_status = Product.STATUS_IN_TRANSIT
        product.column_entered_at = timezone.now()
        fields += ["column_status", "column_entered_at"]
    product.save(update_fields=fields)


def _restore(product: Product, quantity: int) -> None:
    product.stock_level = int(product.stock_level or 0) + int(quantity)
    fields = ["stock_level", "updated_at"]
    if product.column_status == Product.STATUS_IN_TRANSIT and product.stock_level > 0:
        product.column_status = Product.STATUS_STORED
        product.column_entered_at = timezone.now()
        fields += ["column_status", "column_entered_at"]
    product.save(update_fields=fields)


def _restore_items(bulk: BulkMovement) -> int:
    items = list(bulk.items.all())
    products = {
        p.id: p for p in Product.objects.select_for_update().filter(id__in=[item.product_id for item in items])
    }
    restored = 0
    for item in items:
        _restore(products[item.product_id], item.quantity_sent)
        restored += item.quantity_sent
    return restored


def _lock_bulk(bulk_movement_id: int) -> BulkMovement:
    try:
        return BulkMovement.objects.select_for_update().get(id=bulk_movement_id)
    except BulkMovement.DoesNotExist:
        raise MovementNotFound("Bulk movement not found", bulk_movement_id=bulk_movement_id)


def _ensure_open(bulk: BulkMovement) -> None:
    if bulk.status not in BulkMovement.OPEN_STATUSES:
        raise InvalidStateTransition(
            f"Bulk movement is {bulk.status} and can no longer be changed",
            bulk_movement_id=bulk.id,
            status=bulk.status,
        )


def _stock_changed(bulk: BulkMovement, action: str) -> None:
    invalidate_caches(*STOCK_KEYS)
    emit_event("bulk-updated", bulk_movement_id=bulk.id, status=bulk.status, action=action)


@transaction.atomic
def create_bulk_movement(
    *,
    items: List[dict],
    from_location_id: Optional[int] = None,
    from_area: Optional[str] = None,
    to_location_id: Optional[int] = None,
    to_area: Optional[str] = None,
    notes: Optional[str] = None,
    created_by: Optional[str] = None,
) -> BulkMovement:
    """Create an in-transit bulk movement and deduct every item from its source.

    Items are ``{"product_id", "quantity_sent"}``. With an explicit source
    location products must be there; with only a source area they may be at any
    location of that area. Every check runs before the first write.
    """

    quantities = _normalize_items(items)

    source = _get_location(from_location_id) if from_location_id else None
    source_area = source.area if source else normalize_area(from_area)
    destination = _get_location(to_location_id) if to_location_id else None
    destination_area = destination.area if destination else normalize_area(to_area)
    if not source_area:
        raise InvalidDestination("A source location or area is required")
    if not destination_area:
        raise InvalidDestination("A destination location or area is required")
    if source and destination and source.id == destination.id:
        raise InvalidDestination("Source and destination must differ", location_id=source.id)
    if not source and not destination and source_area == destination_area:
        raise InvalidDestination("Source and destination must differ", area=source_area)

    candidates = Product.objects.select_for_update().filter(
        id__in=list(quantities), column_status=Product.STATUS_STORED
    )
    if source:
        candidates = candidates.filter(location_id=source.id)
    else:
        candidates = candidates.filter(location_id__in=Location.objects.filter(area=source_area).values("id"))
    products = {p.id: p for p in candidates}
    missing = [product_id for product_id in quantities if product_id not in products]
    if missing:
        raise ValidationFailed(NOT_AT_SOURCE, product_ids=missing)
    _check_available(products, quantities)

    source = source or resolve_or_create_general(area=source_area)
    destination = destination or resolve_or_create_general(area=destination_area)
    if source.id == destination.id:
        raise InvalidDestination("Source and destination must differ", location_id=source.id)

    bulk = BulkMovement.objects.create(
        from_location=source,
        to_location=destination,
        status=BulkMovement.STATUS_IN_TRANSIT,
        public_token=generate_public_token(),
        token_expires_at=bulk_token_expiry(),
        created_by=created_by,
        notes=notes or None,
    )
    for product_id, quantity in quantities.items():
        product = products[product_id]
        BulkMovementItem.objects.create(
            bulk_movement=bulk, product=product, quantity_sent=quantity, **_snapshot(product)
        )
        _deduct(product, quantity)

    logger.info(
        "bulk_movement.created",
        extra={
            "event": "bulk_movement.created",
            "bulk_movement_id": bulk.id,
            "from_location_id": source.id,
            "to_location_id": destination.id,
            "items": len(quantities),
            "quantity": sum(quantities.values()),
            "created_by": created_by,
        },
    )
    _stock_changed(bulk, "created")
    return bulk


def _at_source(product: Product, source: Location) -> bool:
    if product.location_id is None:
        return False
    return product.location_id == source.id or product.location.area == source.area


@transaction.atomic
def update_bulk_movement(
    *,
    bulk_movement_id: int,
    to_location_id: Optional[int] = None,
    items: Optional[List[dict]] = None,
    notes: Optional[str] = None,
) -> BulkMovement:
    """Edit destination, items or notes of an open bulk movement.

    Stock deltas are reconciled symmetrically: removed lines and reduced
    quantities go back to the source, added lines and increases are deducted.
    """

    bulk = _lock_bulk(bulk_movement_id)
    _ensure_open(bulk)

    new_destination = None
    if to_location_id and int(to_location_id) != bulk.to_location_id:
        if int(to_location_id) == bulk.from_location_id:
            raise InvalidDestination("Destination must differ from the source", location_id=to_location_id)
        new_destination = _get_location(to_location_id)

    if items:
        quantities = _normalize_items(items)
        existing = {item.product_id: item for item in bulk.items.select_for_update()}
        products = {
            p.id: p for p in Product.objects.select_for_update().filter(id__in=set(existing) | set(quantities))
        }

        missing = [
            product_id
            for product_id in quantities
            if product_id not in existing
            and (
                product_id not in products
                or products[product_id].column_status != Product.STATUS_STORED
                or not _at_source(products[product_id], bulk.from_location)
            )
        ]
        if missing:
            raise ValidationFailed(NOT_AT_SOURCE, product_ids=missing)

        deltas = {
            product_id: quantity - (existing[product_id].quantity_sent if product_id in existing else 0)
            for product_id, quantity in quantities.items()
        }
        _check_available(products, {pid: delta for pid, delta in deltas.items() if delta > 0})

        for product_id, item in existing.items():
            if product_id not in quantities:
                _restore(products[product_id], item.quantity_sent)
                item.delete()
        for product_id, quantity in quantities.items():
            product = products[product_id]
            delta = deltas[product_id]
            if product_id in existing:
                item = existing[product_id]
                if delta > 0:
                    _deduct(product, delta)
                elif delta < 0:
                    _restore(product, -delta)
                if delta:
                    item.quantity_sent = quantity
                    item.save(update_fields=["quantity_sent", "updated_at"])
            else:
                BulkMovementItem.objects.create(
                    bulk_movement=bulk, product=product, quantity_sent=quantity, **_snapshot(product)
                )
                _deduct(product, quantity)

    update_fields = ["updated_at"]
    if new_destination is not None:
        bulk.to_location = new_destination
        update_fields.append("to_location")
    if notes is not None:
        bulk.notes = notes or None
        update_fields.append("notes")
    bulk.save(update_fields=update_fields)

    logger.info(
        "bulk_movement.updated",
        extra={
            "event": "bulk_movement.updated",
            "bulk_movement_id": bulk.id,
            "to_location_id": bulk.to_location_id,
            "items_replaced": bool(items),
        },
    )
    _stock_changed(bulk, "updated")
    return bulk


@transaction.atomic
def cancel_bulk_movement(*, bulk_movement_id: int) -> BulkMovement:
    """Cancel an open bulk movement, giving every item's stock back to its source."""

    bulk = _lock_bulk(bulk_movement_id)
    _ensure_open(bulk)
    restored = _restore_items(bulk)
    bulk.status = BulkMovement.STATUS_EXPIRED
    bulk.cancelled_at = timezone.now()
    bulk.save(update_fields=["status", "cancelled_at", "updated_at"])
    logger.info(
        "bulk_movement.cancelled",
        extra={"event": "bulk_movement.cancelled", "bulk_movement_id": bulk.id, "quantity_restored": restored},
    )
    _stock_changed(bulk, "cancelled")
    return bulk


@transaction.atomic
def expire_bulk_movement(*, bulk_movement_id: int) -> bool:
    """Expire one open bulk movement. Returns False if it was already terminal.

    Pending movements get their stock back. In-transit stock is not reversed:
    whatever was not received stays unreconciled and is logged for follow-up.
    """

    try:
        bulk = BulkMovement.objects.select_for_update().get(id=bulk_movement_id)
    except BulkMovement.DoesNotExist:
        return False
    if bulk.status not in BulkMovement.OPEN_STATUSES:
        return False

    if bulk.status == BulkMovement.STATUS_PENDING:
        restored = _restore_items(bulk)
        logger.info(
            "bulk_movement.expired",
            extra={"event": "bulk_movement.expired", "bulk_movement_id": bulk.id, "quantity_restored": restored},
        )
    else:
        outstanding = sum(item.quantity_sent - (item.quantity_received or 0) for item in bulk.items.all())
        logger.warning(
            "bulk_movement.lost_in_transit",
            extra={"event": "bulk_movement.lost_in_transit", "bulk_movement_id": bulk.id, "quantity": outstanding},
        )
    bulk.status = BulkMovement.STATUS_EXPIRED
    bulk.save(update_fields=["status", "updated_at"])
    _stock_changed(bulk, "expired")
    return True


def expire_bulk_movements(*, now: Optional[datetime] = None) -> int:
    """Expire every open bulk movement whose token has lapsed. Returns the number flipped."""

    now = now or timezone.now()
    count = 0
    with transaction.atomic():
        stale = BulkMovement.objects.filter(status__in=BulkMovement.OPEN_STATUSES, token_expires_at__lt=now)
        for bulk in stale.select_for_update(skip_locked=True):
            if expire_bulk_movement(bulk_movement_id=bulk.id):
                count += 1
    return count


def get_public_bulk_movement(*, token: str) -> BulkMovement:
    """Look up a bulk movement by token, expiring it if its link has lapsed."""

    bulk = BulkMovement.objects.select_related("from_location", "to_location").filter(public_token=token).first()
    if bulk is None:
        raise MovementNotFound("Bulk movement not found")
    if bulk.status in BulkMovement.OPEN_STATUSES and bulk.is_expired:
        expire_bulk_movement(bulk_movement_id=bulk.id)
        bulk.refresh_from_db()
    return bulk


@transaction.atomic
def _apply_bulk_confirmation(*, token: str, confirmed_by: str, items: List[dict], notes: Optional[str]) -> dict:
    try:
        bulk = BulkMovement.objects.select_for_update().get(public_token=token)
    except BulkMovement.DoesNotExist:
        raise MovementNotFound("Bulk movement not found")
    if bulk.status == BulkMovement.STATUS_RECEIVED:
        raise AlreadyConfirmed("Bulk movement has already been confirmed", bulk_movement_id=bulk.id)
    if bulk.status == BulkMovement.STATUS_EXPIRED:
        raise Expired("Bulk movement has expired", bulk_movement_id=bulk.id)
    if bulk.is_expired:
        raise TokenExpired("Bulk movement has expired", pk=bulk.id, bulk_movement_id=bulk.id)
    if not (confirmed_by or "").strip():
        raise ValidationFailed("Confirmer name is required", field="confirmed_by")

    bulk_items = {item.id: item for item in bulk.items.select_for_update()}
    received: Dict[int, int] = {}
    for entry in items or []:
        item_id = int(entry["item_id"])
        quantity = int(entry["quantity_received"])
        item = bulk_items.get(item_id)
        if item is None:
            raise ValidationFailed("Item does not belong to this bulk movement", item_id=item_id)
        if item_id in received:
            raise ValidationFailed("Item confirmed more than once", item_id=item_id)
        if quantity < 0 or quantity > item.quantity_sent:
            raise InvalidQuantity(
                f"Quantity received cannot exceed quantity sent ({item.quantity_sent})",
                item_id=item_id,
                quantity_received=quantity,
                quantity_sent=item.quantity_sent,
            )
        received[item_id] = quantity

    from_area = bulk.from_location.area
    to_area = bulk.to_location.area
    originals = Product.objects.in_bulk([item.product_id for item in bulk_items.values()])
    created: List[Product] = []
    for item_id, item in bulk_items.items():
        quantity = received.get(item_id, 0)
        item.quantity_received = quantity
        item.save(update_fields=["quantity_received", "updated_at"])
        if quantity == 0:
            continue
        original = originals[item.product_id]
        product = materialize_stock(
            source=original,
            quantity=quantity,
            location_id=bulk.to_location_id,
            notes=notes or original.notes,
        )
        created.append(product)
        MovementLog.objects.create(
            product=product,
            bulk_movement=bulk,
            from_location_id=bulk.from_location_id,
            to_location_id=bulk.to_location_id,
            from_area=from_area,
            to_area=to_area,
            from_stock_level=item.quantity_sent,
            quantity_moved=quantity,
            to_stock_level=total_stock_for(product, location_id=bulk.to_location_id),
            notes=f"Bulk movement confirmation. {notes or ''}".strip(),
            moved_by=confirmed_by,
            status=MovementLog.STATUS_COMPLETED,
        )

    bulk.status = BulkMovement.STATUS_RECEIVED
    bulk.confirmed_by = confirmed_by
    bulk.confirmed_at = timezone.now()
    bulk.save(update_fields=["status", "confirmed_by", "confirmed_at", "updated_at"])

    logger.info(
        "bulk_movement.confirmed",
        extra={
            "event": "bulk_movement.confirmed",
            "bulk_movement_id": bulk.id,
            "confirmed_by": confirmed_by,
            "created_products": len(created),
            "quantity_received": sum(received.values()),
            "quantity_sent": sum(item.quantity_sent for item in bulk_items.values()),
        },
    )
    _stock_changed(bulk, "confirmed")
    return {
        "bulk_movement_id": bulk.id,
        "created_products_count": len(created),
        "confirmed_items_count": len(received),
    }


def confirm_bulk_movement(
    *, token: str, confirmed_by: str, items: List[dict], notes: Optional[str] = None
) -> dict:
    """Confirm receipt of a bulk movement by its public token.

    Items are ``{"item_id", "quantity_received"}``; lines left out count as
    nothing received. A lapsed token flips the movement to expired in its own
    transaction before Expired propagates.
    """

    try:
        return _apply_bulk_confirmation(token=token, confirmed_by=confirmed_by, items=items, notes=notes)
    except TokenExpired as exc:
        expire_bulk_movement(bulk_movement_id=exc.pk)
        raise


# EOF
