"""Single-product movement services.

A movement either applies the stock ledger immediately or, when confirmation
is required, records a ``pending`` log with a 7-day public token and leaves
stock untouched until the token is confirmed.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

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
    PersonNotFound,
    TokenExpired,
    ValidationFailed,
)
from django.db import transaction
from django.utils import timezone
from inventory.models import Product
from inventory.selectors import total_stock_for
from inventory.services import StockMoveResult, lock_product, materialize_stock, move_stock
from locations.models import Location, Person
from locations.services import normalize_area, resolve_or_create_general

from .models import MovementLog
from .tokens import generate_public_token, movement_token_expiry

logger = logging.getLogger("stockroute.movements")


@dataclass
class MovementOutcome:
    movement: MovementLog
    source: Optional[Product] = None
    destination: Optional[Product] = None


@dataclass
class DistributionOutcome:
    source: Product
    products: List[Product] = field(default_factory=list)
    movements: List[MovementLog] = field(default_factory=list)


def _get_location(location_id: int) -> Location:
    try:
        return Location.objects.get(id=location_id)
    except Location.DoesNotExist:
        raise LocationNotFound("Target location not found", location_id=location_id)


def _get_person(person_id: int) -> Person:
    try:
        return Person.objects.get(id=person_id)
    except Person.DoesNotExist:
        raise PersonNotFound("Target person not found", person_id=person_id)


def _require_stored(product: Product) -> None:
    if product.column_status != Product.STATUS_STORED:
        raise InvalidStateTransition(
            'Only products with "Stored" status can be moved',
            product_id=product.id,
            column_status=product.column_status,
        )


def _with_split_note(notes: Optional[str], destination_id: int) -> str:
    suffix = f"New product created at destination: {destination_id}"
    return f"{notes} - {suffix}" if notes else suffix


def _stock_changed(movement: MovementLog, result: StockMoveResult) -> None:
    logger.info(
        "movement.completed",
        extra={
            "event": "movement.completed",
            "movement_id": movement.id,
            "product_id": result.source.id,
            "destination_product_id": result.destination.id,
            "quantity": movement.quantity_moved,
            "split": result.split,
        },
    )
    invalidate_caches(*STOCK_KEYS)
    emit_event(
        "product-moved",
        movement_id=movement.id,
        product_id=result.source.id,
        destination_product_id=result.destination.id,
        to_location_id=movement.to_location_id,
        to_person_id=movement.to_person_id,
    )
    emit_event(
        "stock-changed",
        product_id=result.source.id,
        stock_level=result.source.stock_level,
        destination_total_stock=result.destination_total_stock,
    )


@transaction.atomic
def create_movement(
    *,
    product_id: int,
    quantity: int,
    to_location_id: Optional[int] = None,
    to_person_id: Optional[int] = None,
    to_area: Optional[str] = None,
    from_area: Optional[str] = None,
    requires_confirmation: bool = False,
    notes: Optional[str] = None,
    moved_by: Optional[str] = None,
) -> MovementOutcome:
    """Move a stored product to a location, area or person.

    With ``requires_confirmation`` only a pending log with a public token is
    written; stock moves when the token is confirmed.
    """

    if not (to_location_id or to_person_id or normalize_area(to_area)):
        raise InvalidDestination("Either to_area, to_location_id or to_person_id must be provided")
    quantity = int(quantity)
    if quantity <= 0:
        raise InvalidQuantity("Quantity to move must be positive", quantity=quantity)

    product = lock_product(product_id)
    _require_stored(product)

    to_location = None
    if to_location_id:
        to_location = _get_location(to_location_id)
    elif normalize_area(to_area):
        to_location = resolve_or_create_general(area=to_area)
    to_person = _get_person(to_person_id) if to_person_id else None

    same_location = to_location is None or to_location.id == product.location_id
    same_person = to_person is None or to_person.id == product.assigned_to_person_id
    if same_location and same_person:
        raise InvalidDestination("Destination is the product's current placement", product_id=product.id)

    current = int(product.stock_level or 0)
    if quantity > current:
        raise InsufficientStock(product_id=product.id, requested=quantity, available=current)

    source_area = normalize_area(from_area) or (product.location.area if product.location_id else None)
    log_fields = dict(
        product=product,
        from_location_id=product.location_id,
        to_location=to_location,
        from_person_id=product.assigned_to_person_id,
        to_person=to_person,
        from_area=source_area,
        to_area=to_location.area if to_location else None,
        from_stock_level=current,
        quantity_moved=quantity,
        moved_by=moved_by,
    )

    if requires_confirmation:
        movement = MovementLog.objects.create(
            **log_fields,
            notes=notes or None,
            status=MovementLog.STATUS_PENDING,
            requires_confirmation=True,
            public_token=generate_public_token(),
            token_expires_at=movement_token_expiry(),
        )
        logger.info(
            "movement.pending",
            extra={
                "event": "movement.pending",
                "movement_id": movement.id,
                "product_id": product.id,
                "quantity": quantity,
                "expires_at": movement.token_expires_at.isoformat(),
            },
        )
        emit_event("movement-pending", movement_id=movement.id, product_id=product.id)
        return MovementOutcome(movement=movement, source=product)

    result = move_stock(
        product_id=product.id,
        quantity=quantity,
        to_location_id=to_location.id if to_location else None,
        to_person_id=to_person.id if to_person else None,
    )
    movement = MovementLog.objects.create(
        **log_fields,
        notes=_with_split_note(notes, result.destination.id) if result.split else (notes or None),
        status=MovementLog.STATUS_COMPLETED,
        to_stock_level=result.destination_total_stock,
    )
    _stock_changed(movement, result)
    return MovementOutcome(movement=movement, source=result.source, destination=result.destination)


def _lock_movement_by_token(token: str) -> MovementLog:
    try:
        return MovementLog.objects.select_for_update().get(public_token=token, requires_confirmation=True)
    except MovementLog.DoesNotExist:
        raise MovementNotFound()


def _ensure_confirmable(movement: MovementLog) -> None:
    if movement.status == MovementLog.STATUS_RECEIVED:
        raise AlreadyConfirmed(movement_id=movement.id)
    if movement.status == MovementLog.STATUS_CANCELLED:
        raise InvalidStateTransition("Movement has been cancelled", movement_id=movement.id)
    if movement.status == MovementLog.STATUS_EXPIRED:
        raise Expired(movement_id=movement.id)
    if movement.status != MovementLog.STATUS_PENDING:
        raise InvalidStateTransition("Movement does not require confirmation", movement_id=movement.id)
    if movement.is_expired:
        raise TokenExpired(pk=movement.id, movement_id=movement.id)


@transaction.atomic
def _apply_confirmation(
    *, token: str, confirmed_by: str, quantity_received: Optional[int], notes: Optional[str]
) -> MovementOutcome:
    movement = _lock_movement_by_token(token)
    _ensure_confirmable(movement)

    sent = int(movement.quantity_moved)
    received = sent if quantity_received is None else int(quantity_received)
    if received < 0 or received > sent:
        raise InvalidQuantity(
            f"Quantity received cannot exceed quantity sent ({sent})",
            quantity_received=received,
            quantity_sent=sent,
        )

    product = lock_product(movement.product_id)
    _require_stored(product)

    movement.status = MovementLog.STATUS_RECEIVED
    movement.confirmed_by = confirmed_by
    movement.confirmed_at = timezone.now()
    if notes:
        movement.notes = f"{movement.notes}\n{notes}" if movement.notes else notes
    update_fields = ["status", "confirmed_by", "confirmed_at", "notes", "quantity_moved", "updated_at"]

    if received == 0:
        movement.quantity_moved = 0
        movement.save(update_fields=update_fields)
        logger.info(
            "movement.confirmed",
            extra={"event": "movement.confirmed", "movement_id": movement.id, "quantity": 0},
        )
        return MovementOutcome(movement=movement, source=product)

    stock_before = int(product.stock_level or 0)
    result = move_stock(
        product_id=product.id,
        quantity=received,
        to_location_id=movement.to_location_id,
        to_person_id=movement.to_person_id,
    )
    movement.quantity_moved = received
    movement.from_stock_level = stock_before
    movement.to_stock_level = result.destination_total_stock
    if result.split:
        movement.notes = _with_split_note(movement.notes, result.destination.id)
    movement.save(update_fields=update_fields + ["from_stock_level", "to_stock_level"])
    logger.info(
        "movement.confirmed",
        extra={
            "event": "movement.confirmed",
            "movement_id": movement.id,
            "quantity": received,
            "confirmed_by": confirmed_by,
        },
    )
    _stock_changed(movement, result)
    return MovementOutcome(movement=movement, source=result.source, destination=result.destination)


def confirm_movement(
    *,
    token: str,
    confirmed_by: str,
    quantity_received: Optional[int] = None,
    notes: Optional[str] = None,
) -> MovementOutcome:
    """Confirm a pending movement by its public token and apply the stock move.

    A token past its expiry is flipped to ``expired`` in its own transaction
    before Expired propagates, so the flip survives the failed confirmation.
    """

    try:
        return _apply_confirmation(
            token=token, confirmed_by=confirmed_by, quantity_received=quantity_received, notes=notes
        )
    except TokenExpired as exc:
        expire_movement(movement_id=exc.pk)
        raise


def get_public_movement(*, token: str) -> MovementLog:
    """Look up a deferred movement by token, expiring it if its link has lapsed."""

    movement = (
        MovementLog.objects.select_related("product", "from_location", "to_location", "to_person")
        .filter(public_token=token, requires_confirmation=True)
        .first()
    )
    if movement is None:
        raise MovementNotFound()
    if movement.status == MovementLog.STATUS_PENDING and movement.is_expired:
        expire_movement(movement_id=movement.id)
        movement.refresh_from_db()
    return movement


@transaction.atomic
def expire_movement(*, movement_id: int) -> bool:
    """Flip a pending movement to expired. Returns False if it was no longer pending."""

    try:
        movement = MovementLog.objects.select_for_update().get(id=movement_id)
    except MovementLog.DoesNotExist:
        return False
    if movement.status != MovementLog.STATUS_PENDING:
        return False
    movement.status = MovementLog.STATUS_EXPIRED
    movement.save(update_fields=["status", "updated_at"])
    logger.info("movement.expired", extra={"event": "movement.expired", "movement_id": movement.id})
    return True


@transaction.atomic
def cancel_movement(*, movement_id: int) -> MovementLog:
    try:
        movement = MovementLog.objects.select_for_update().get(id=movement_id)
    except MovementLog.DoesNotExist:
        raise MovementNotFound(movement_id=movement_id)
    if movement.status != MovementLog.STATUS_PENDING:
        raise InvalidStateTransition(
            "Only pending movements can be cancelled", movement_id=movement.id, status=movement.status
        )
    movement.status = MovementLog.STATUS_CANCELLED
    movement.cancelled_at = timezone.now()
    movement.save(update_fields=["status", "cancelled_at", "updated_at"])
    logger.info("movement.cancelled", extra={"event": "movement.cancelled", "movement_id": movement.id})
    return movement


def expire_movements(*, now: Optional[datetime] = None) -> int:
    """Expire pending single movements whose token has lapsed. Returns the number flipped."""

    now = now or timezone.now()
    count = 0
    with transaction.atomic():
        stale = MovementLog.objects.filter(status=MovementLog.STATUS_PENDING, token_expires_at__lt=now)
        for movement in stale.select_for_update(skip_locked=True):
            if expire_movement(movement_id=movement.id):
                count += 1
    return count


@transaction.atomic
def distribute_stock(*, source_product_id: int, distributions: List[dict], moved_by: Optional[str] = None):
    """Split one stored product across several distinct destinations.

    Each distribution is ``{"to_location_id", "to_person_id", "quantity", "notes"}``
    and yields a new product plus a movement log; the source loses the total.
    """

    if not distributions:
        raise ValidationFailed("At least one distribution is required")

    seen = set()
    for entry in distributions:
        location_id = entry.get("to_location_id")
        person_id = entry.get("to_person_id")
        if not location_id and not person_id:
            raise InvalidDestination("Each distribution needs a location or a person")
        if int(entry.get("quantity") or 0) <= 0:
            raise InvalidQuantity("Distribution quantity must be positive", quantity=entry.get("quantity"))
        key = (location_id or None, person_id or None)
        if key in seen:
            raise InvalidDestination(
                "Duplicate destination in distribution", to_location_id=location_id, to_person_id=person_id
            )
        seen.add(key)

    source = lock_product(source_product_id)
    if source.column_status != Product.STATUS_STORED:
        raise InvalidStateTransition(
            'Only products with "Stored" status can be distributed',
            product_id=source.id,
            column_status=source.column_status,
        )
    locations = {
        e["to_location_id"]: _get_location(e["to_location_id"]) for e in distributions if e.get("to_location_id")
    }
    for entry in distributions:
        if entry.get("to_person_id"):
            _get_person(entry["to_person_id"])

    current = int(source.stock_level or 0)
    total = sum(int(e["quantity"]) for e in distributions)
    if total > current:
        raise InsufficientStock(product_id=source.id, requested=total, available=current)

    from_area = source.location.area if source.location_id else None
    source.stock_level = current - total
    source.save(update_fields=["stock_level", "updated_at"])

    outcome = DistributionOutcome(source=source)
    remaining = current
    for entry in distributions:
        quantity = int(entry["quantity"])
        location = locations.get(entry.get("to_location_id"))
        destination = materialize_stock(
            source=source,
            quantity=quantity,
            location_id=location.id if location else None,
            person_id=entry.get("to_person_id") or None,
        )
        movement = MovementLog.objects.create(
            product=source,
            from_location_id=source.location_id,
            to_location=location,
            from_person_id=source.assigned_to_person_id,
            to_person_id=entry.get("to_person_id") or None,
            from_area=from_area,
            to_area=location.area if location else None,
            from_stock_level=remaining,
            quantity_moved=quantity,
            to_stock_level=total_stock_for(destination, location_id=location.id if location else None),
            notes=_with_split_note(entry.get("notes"), destination.id),
            moved_by=moved_by,
            status=MovementLog.STATUS_COMPLETED,
        )
        remaining -= quantity
        outcome.products.append(destination)
        outcome.movements.append(movement)

    logger.info(
        "movement.distributed",
        extra={
            "event": "movement.distributed",
            "product_id": source.id,
            "destinations": len(distributions),
            "quantity": total,
        },
    )
    invalidate_caches(*STOCK_KEYS)
    emit_event("stock-changed", product_id=source.id, stock_level=source.stock_level)
    emit_event(
        "product-moved",
        product_id=source.id,
        destination_product_ids=[p.id for p in outcome.products],
    )
    return outcome


# EOF
