from datetime import timedelta

import pytest
from common.exceptions import (
    AlreadyConfirmed,
    Expired,
    InsufficientStock,
    InvalidDestination,
    InvalidQuantity,
    InvalidStateTransition,
    MovementNotFound,
    ValidationFailed,
)
from django.core.management import call_command
from django.utils import timezone
from inventory.models import Product
from inventory.tests.factories import ProductFactory
from locations.models import GENERAL_LOCATION_NAME, Location
from locations.tests.factories import LocationFactory
from movements.bulk_services import (
    cancel_bulk_movement,
    confirm_bulk_movement,
    create_bulk_movement,
    expire_bulk_movements,
    get_public_bulk_movement,
    update_bulk_movement,
)
from movements.models import BulkMovement, MovementLog


@pytest.fixture
def places():
    return LocationFactory(area="Warehouse", name="Rack 1"), LocationFactory(area="Shop", name="Front")


def _lapse(bulk):
    BulkMovement.objects.filter(id=bulk.id).update(token_expires_at=timezone.now() - timedelta(minutes=1))


@pytest.mark.django_db
def test_create_deducts_stock_and_snapshots_items(places):
    rack, front = places
    mic = ProductFactory(location=rack, stock_level=10, sku="MIC", product_details="Microphone", unit="pcs")
    stand = ProductFactory(location=rack, stock_level=2, sku="STAND")

    bulk = create_bulk_movement(
        items=[{"product_id": mic.id, "quantity_sent": 4}, {"product_id": stand.id, "quantity_sent": 2}],
        from_location_id=rack.id,
        to_location_id=front.id,
        created_by="ann",
    )

    assert bulk.status == BulkMovement.STATUS_IN_TRANSIT
    assert len(bulk.public_token) == 32
    remaining = bulk.token_expires_at - timezone.now()
    assert timedelta(hours=23) < remaining <= timedelta(hours=24)
    assert bulk.public_url == f"https://app.example.test/bulk-movement/confirm/{bulk.public_token}"

    mic.refresh_from_db()
    stand.refresh_from_db()
    assert mic.stock_level == 6
    assert mic.column_status == Product.STATUS_STORED
    assert stand.stock_level == 0
    assert stand.column_status == Product.STATUS_IN_TRANSIT

    item = bulk.items.get(product=mic)
    assert item.quantity_sent == 4
    assert item.quantity_received is None
    assert (item.sku, item.product_details, item.unit) == ("MIC", "Microphone", "pcs")
    assert not Product.objects.filter(location=front).exists()


@pytest.mark.django_db
def test_create_from_area_accepts_any_location_in_it(places):
    rack, _ = places
    other_rack = LocationFactory(area="Warehouse", name="Rack 2")
    a = ProductFactory(location=rack, stock_level=3)
    b = ProductFactory(location=other_rack, stock_level=3)

    bulk = create_bulk_movement(
        items=[{"product_id": a.id, "quantity_sent": 1}, {"product_id": b.id, "quantity_sent": 1}],
        from_area="Warehouse",
        to_area="Showroom",
    )

    assert bulk.from_location.area == "Warehouse"
    assert bulk.from_location.name == GENERAL_LOCATION_NAME
    assert bulk.to_location.area == "Showroom"
    assert bulk.to_location.name == GENERAL_LOCATION_NAME


@pytest.mark.django_db
def test_create_is_all_or_nothing(places):
    rack, front = places
    good = ProductFactory(location=rack, stock_level=5)
    elsewhere = ProductFactory(location=front, stock_level=5)
    not_stored = ProductFactory(location=rack, stock_level=5, column_status=Product.STATUS_RECEIVED)

    with pytest.raises(ValidationFailed) as exc:
        create_bulk_movement(
            items=[
                {"product_id": good.id, "quantity_sent": 1},
                {"product_id": elsewhere.id, "quantity_sent": 1},
                {"product_id": not_stored.id, "quantity_sent": 1},
            ],
            from_location_id=rack.id,
            to_area="Showroom",
        )
    assert exc.value.context == {"product_ids": [elsewhere.id, not_stored.id]}

    low = ProductFactory(location=rack, stock_level=1)
    with pytest.raises(InsufficientStock) as exc:
        create_bulk_movement(
            items=[{"product_id": good.id, "quantity_sent": 2}, {"product_id": low.id, "quantity_sent": 2}],
            from_location_id=rack.id,
            to_area="Showroom",
        )
    assert exc.value.context == {"product_id": low.id, "requested": 2, "available": 1}

    good.refresh_from_db()
    low.refresh_from_db()
    assert good.stock_level == 5
    assert low.stock_level == 1
    assert not BulkMovement.objects.exists()
    # Rejected requests never create a General location
    assert not Location.objects.filter(area="Showroom").exists()


@pytest.mark.django_db
def test_create_input_guards(places):
    rack, front = places
    product = ProductFactory(location=rack, stock_level=5)

    with pytest.raises(ValidationFailed):
        create_bulk_movement(items=[], from_location_id=rack.id, to_location_id=front.id)
    with pytest.raises(ValidationFailed):
        create_bulk_movement(
            items=[{"product_id": product.id, "quantity_sent": 1}, {"product_id": product.id, "quantity_sent": 2}],
            from_location_id=rack.id,
            to_location_id=front.id,
        )
    with pytest.raises(InvalidQuantity):
        create_bulk_movement(
            items=[{"product_id": product.id, "quantity_sent": 0}], from_location_id=rack.id, to_location_id=front.id
        )
    with pytest.raises(InvalidDestination):
        create_bulk_movement(
            items=[{"product_id": product.id, "quantity_sent": 1}], from_location_id=rack.id, to_location_id=rack.id
        )
    with pytest.raises(InvalidDestination):
        create_bulk_movement(items=[{"product_id": product.id, "quantity_sent": 1}], from_location_id=rack.id)


@pytest.mark.django_db
def test_update_reconciles_stock_deltas(places):
    rack, front = places
    a = ProductFactory(location=rack, stock_level=10)
    b = ProductFactory(location=rack, stock_level=3)
    c = ProductFactory(location=rack, stock_level=4)
    bulk = create_bulk_movement(
        items=[{"product_id": a.id, "quantity_sent": 2}, {"product_id": b.id, "quantity_sent": 3}],
        from_location_id=rack.id,
        to_location_id=front.id,
    )
    b.refresh_from_db()
    assert b.column_status == Product.STATUS_IN_TRANSIT
    item_a = bulk.items.get(product=a)

    other = LocationFactory(area="Showroom")
    update_bulk_movement(
        bulk_movement_id=bulk.id,
        to_location_id=other.id,
        items=[{"product_id": a.id, "quantity_sent": 5}, {"product_id": c.id, "quantity_sent": 4}],
        notes="rerouted",
    )

    a.refresh_from_db()
    b.refresh_from_db()
    c.refresh_from_db()
    assert a.stock_level == 5
    assert b.stock_level == 3
    assert b.column_status == Product.STATUS_STORED
    assert c.stock_level == 0
    assert c.column_status == Product.STATUS_IN_TRANSIT

    bulk.refresh_from_db()
    assert bulk.to_location_id == other.id
    assert bulk.notes == "rerouted"
    assert sorted(bulk.items.values_list("product_id", "quantity_sent")) == sorted([(a.id, 5), (c.id, 4)])
    assert bulk.items.get(product=a).id == item_a.id

    update_bulk_movement(bulk_movement_id=bulk.id, items=[{"product_id": a.id, "quantity_sent": 1}])
    a.refresh_from_db()
    c.refresh_from_db()
    assert a.stock_level == 9
    assert c.stock_level == 4
    assert c.column_status == Product.STATUS_STORED


@pytest.mark.django_db
def test_update_with_empty_items_keeps_lines(places):
    rack, front = places
    product = ProductFactory(location=rack, stock_level=5)
    bulk = create_bulk_movement(
        items=[{"product_id": product.id, "quantity_sent": 2}], from_location_id=rack.id, to_location_id=front.id
    )

    update_bulk_movement(bulk_movement_id=bulk.id, items=[], notes="relabelled")

    bulk.refresh_from_db()
    assert bulk.notes == "relabelled"
    assert list(bulk.items.values_list("product_id", "quantity_sent")) == [(product.id, 2)]
    product.refresh_from_db()
    assert product.stock_level == 3


@pytest.mark.django_db
def test_update_rejects_bad_changes_without_side_effects(places):
    rack, front = places
    a = ProductFactory(location=rack, stock_level=3)
    stranger = ProductFactory(location=front, stock_level=3)
    bulk = create_bulk_movement(
        items=[{"product_id": a.id, "quantity_sent": 1}], from_location_id=rack.id, to_location_id=front.id
    )

    with pytest.raises(InsufficientStock):
        update_bulk_movement(bulk_movement_id=bulk.id, items=[{"product_id": a.id, "quantity_sent": 4}])
    with pytest.raises(ValidationFailed) as exc:
        update_bulk_movement(
            bulk_movement_id=bulk.id,
            items=[{"product_id": a.id, "quantity_sent": 1}, {"product_id": stranger.id, "quantity_sent": 1}],
        )
    assert exc.value.context["product_ids"] == [stranger.id]
    with pytest.raises(InvalidDestination):
        update_bulk_movement(bulk_movement_id=bulk.id, to_location_id=rack.id)
    with pytest.raises(MovementNotFound):
        update_bulk_movement(bulk_movement_id=999999, notes="x")

    a.refresh_from_db()
    assert a.stock_level == 2


@pytest.mark.django_db
def test_cancel_restores_stock_once(places):
    rack, front = places
    product = ProductFactory(location=rack, stock_level=4)
    bulk = create_bulk_movement(
        items=[{"product_id": product.id, "quantity_sent": 4}], from_location_id=rack.id, to_location_id=front.id
    )

    cancelled = cancel_bulk_movement(bulk_movement_id=bulk.id)

    assert cancelled.status == BulkMovement.STATUS_EXPIRED
    assert cancelled.cancelled_at is not None
    product.refresh_from_db()
    assert product.stock_level == 4
    assert product.column_status == Product.STATUS_STORED

    with pytest.raises(InvalidStateTransition):
        cancel_bulk_movement(bulk_movement_id=bulk.id)
    with pytest.raises(InvalidStateTransition):
        update_bulk_movement(bulk_movement_id=bulk.id, notes="late")
    product.refresh_from_db()
    assert product.stock_level == 4


@pytest.mark.django_db
def test_expiry_sweep_leaves_in_transit_stock_unreconciled(places, caplog, capsys):
    rack, front = places
    moving = ProductFactory(location=rack, stock_level=5)
    waiting = ProductFactory(location=rack, stock_level=5)
    in_transit = create_bulk_movement(
        items=[{"product_id": moving.id, "quantity_sent": 2}], from_location_id=rack.id, to_location_id=front.id
    )
    pending = create_bulk_movement(
        items=[{"product_id": waiting.id, "quantity_sent": 3}], from_location_id=rack.id, to_location_id=front.id
    )
    BulkMovement.objects.filter(id=pending.id).update(status=BulkMovement.STATUS_PENDING)
    fresh = create_bulk_movement(
        items=[{"product_id": moving.id, "quantity_sent": 1}], from_location_id=rack.id, to_location_id=front.id
    )
    _lapse(in_transit)
    _lapse(pending)

    with caplog.at_level("WARNING", logger="stockroute.movements"):
        assert expire_bulk_movements() == 2
    assert any(r.getMessage() == "bulk_movement.lost_in_transit" for r in caplog.records)

    for bulk in (in_transit, pending, fresh):
        bulk.refresh_from_db()
    assert in_transit.status == BulkMovement.STATUS_EXPIRED
    assert pending.status == BulkMovement.STATUS_EXPIRED
    assert fresh.status == BulkMovement.STATUS_IN_TRANSIT
    moving.refresh_from_db()
    waiting.refresh_from_db()
    assert moving.stock_level == 2
    assert waiting.stock_level == 5

    _lapse(fresh)
    call_command("expire_bulk_movements")
    assert "Expired bulk movements: 1" in capsys.readouterr().out


@pytest.mark.django_db
def test_confirm_partial_receipt_creates_destination_products(places):
    rack, front = places
    mic = ProductFactory(location=rack, stock_level=10, sku="MIC", notes="boxed")
    cable = ProductFactory(location=rack, stock_level=10, sku="CABLE")
    bulk = create_bulk_movement(
        items=[{"product_id": mic.id, "quantity_sent": 5}, {"product_id": cable.id, "quantity_sent": 2}],
        from_location_id=rack.id,
        to_location_id=front.id,
    )
    mic_item = bulk.items.get(product=mic)
    cable_item = bulk.items.get(product=cable)

    result = confirm_bulk_movement(
        token=bulk.public_token,
        confirmed_by="Front desk",
        items=[
            {"item_id": mic_item.id, "quantity_received": 3},
            {"item_id": cable_item.id, "quantity_received": 0},
        ],
    )

    assert result == {"bulk_movement_id": bulk.id, "created_products_count": 1, "confirmed_items_count": 2}
    bulk.refresh_from_db()
    assert bulk.status == BulkMovement.STATUS_RECEIVED
    assert bulk.confirmed_by == "Front desk"
    assert bulk.confirmed_at is not None

    arrived = Product.objects.get(location=front)
    assert arrived.stock_level == 3
    assert arrived.sku == "MIC"
    assert arrived.notes == "boxed"
    assert arrived.source_product_id == mic.id
    assert arrived.column_status == Product.STATUS_STORED

    mic_item.refresh_from_db()
    cable_item.refresh_from_db()
    assert mic_item.quantity_received == 3
    assert cable_item.quantity_received == 0

    log = MovementLog.objects.get(bulk_movement=bulk)
    assert log.product_id == arrived.id
    assert log.from_location_id == rack.id
    assert log.to_location_id == front.id
    assert log.from_stock_level == 5
    assert log.quantity_moved == 3
    assert log.to_stock_level == 3
    assert log.moved_by == "Front desk"
    assert log.notes == "Bulk movement confirmation."

    mic.refresh_from_db()
    assert mic.stock_level == 5


@pytest.mark.django_db
def test_confirm_omitted_items_count_as_nothing_received(places):
    rack, front = places
    a = ProductFactory(location=rack, stock_level=4)
    b = ProductFactory(location=rack, stock_level=4)
    bulk = create_bulk_movement(
        items=[{"product_id": a.id, "quantity_sent": 4}, {"product_id": b.id, "quantity_sent": 1}],
        from_location_id=rack.id,
        to_location_id=front.id,
    )
    item_a = bulk.items.get(product=a)

    result = confirm_bulk_movement(
        token=bulk.public_token,
        confirmed_by="Front desk",
        items=[{"item_id": item_a.id, "quantity_received": 4}],
        notes="One box missing",
    )

    assert result["created_products_count"] == 1
    assert result["confirmed_items_count"] == 1
    assert bulk.items.get(product=b).quantity_received == 0
    arrived = Product.objects.get(location=front)
    assert arrived.notes == "One box missing"
    assert MovementLog.objects.get(bulk_movement=bulk).notes == "Bulk movement confirmation. One box missing"


@pytest.mark.django_db
def test_confirm_rejections_leave_movement_open(places):
    rack, front = places
    product = ProductFactory(location=rack, stock_level=4)
    bulk = create_bulk_movement(
        items=[{"product_id": product.id, "quantity_sent": 2}], from_location_id=rack.id, to_location_id=front.id
    )
    item = bulk.items.get()

    with pytest.raises(InvalidQuantity):
        confirm_bulk_movement(
            token=bulk.public_token, confirmed_by="x", items=[{"item_id": item.id, "quantity_received": 3}]
        )
    with pytest.raises(ValidationFailed):
        confirm_bulk_movement(
            token=bulk.public_token, confirmed_by="x", items=[{"item_id": item.id + 999, "quantity_received": 1}]
        )
    with pytest.raises(ValidationFailed):
        confirm_bulk_movement(token=bulk.public_token, confirmed_by="  ", items=[])
    with pytest.raises(MovementNotFound):
        confirm_bulk_movement(token="missing", confirmed_by="x", items=[])

    bulk.refresh_from_db()
    assert bulk.status == BulkMovement.STATUS_IN_TRANSIT
    assert not Product.objects.filter(location=front).exists()


@pytest.mark.django_db
def test_confirm_is_idempotent(places):
    rack, front = places
    product = ProductFactory(location=rack, stock_level=4)
    bulk = create_bulk_movement(
        items=[{"product_id": product.id, "quantity_sent": 2}], from_location_id=rack.id, to_location_id=front.id
    )
    item = bulk.items.get()
    confirm_bulk_movement(
        token=bulk.public_token, confirmed_by="x", items=[{"item_id": item.id, "quantity_received": 2}]
    )

    with pytest.raises(AlreadyConfirmed):
        confirm_bulk_movement(
            token=bulk.public_token, confirmed_by="x", items=[{"item_id": item.id, "quantity_received": 2}]
        )
    with pytest.raises(InvalidStateTransition):
        cancel_bulk_movement(bulk_movement_id=bulk.id)
    assert Product.objects.filter(location=front).count() == 1


@pytest.mark.django_db
def test_confirm_after_expiry_flips_status(places):
    rack, front = places
    product = ProductFactory(location=rack, stock_level=4)
    bulk = create_bulk_movement(
        items=[{"product_id": product.id, "quantity_sent": 2}], from_location_id=rack.id, to_location_id=front.id
    )
    _lapse(bulk)

    with pytest.raises(Expired):
        confirm_bulk_movement(token=bulk.public_token, confirmed_by="x", items=[])

    bulk.refresh_from_db()
    assert bulk.status == BulkMovement.STATUS_EXPIRED
    assert not Product.objects.filter(location=front).exists()
    with pytest.raises(Expired):
        confirm_bulk_movement(token=bulk.public_token, confirmed_by="x", items=[])


@pytest.mark.django_db
def test_public_lookup_flips_lapsed_movement(places):
    rack, front = places
    product = ProductFactory(location=rack, stock_level=4)
    bulk = create_bulk_movement(
        items=[{"product_id": product.id, "quantity_sent": 2}], from_location_id=rack.id, to_location_id=front.id
    )
    assert get_public_bulk_movement(token=bulk.public_token).status == BulkMovement.STATUS_IN_TRANSIT

    _lapse(bulk)
    assert get_public_bulk_movement(token=bulk.public_token).status == BulkMovement.STATUS_EXPIRED
