from datetime import timedelta

import pytest
from django.utils import timezone
from inventory.models import Product
from inventory.tests.factories import ProductFactory
from locations.tests.factories import LocationFactory, PersonFactory, UserFactory
from movements.models import BulkMovement, MovementLog
from rest_framework.test import APIClient


@pytest.fixture
def client():
    api = APIClient()
    api.force_authenticate(user=UserFactory(email="clerk@example.com"))
    return api


@pytest.fixture
def rack():
    return LocationFactory(area="Warehouse", name="Rack 1")


def _bulk_payload(source, destination, product, quantity=1):
    return {
        "from_location_id": source.id,
        "to_location_id": destination.id,
        "items": [{"product_id": product.id, "quantity_sent": quantity}],
    }


@pytest.mark.django_db
def test_movement_endpoints_require_auth():
    api = APIClient()
    assert api.get("/api/v1/movements/").status_code == 401
    assert api.post("/api/v1/movements/", {}, format="json").status_code == 401
    assert api.get("/api/v1/bulk-movements/").status_code == 401


@pytest.mark.django_db
def test_create_immediate_movement(client, rack):
    product = ProductFactory(location=rack, stock_level=10)

    resp = client.post(
        "/api/v1/movements/", {"product_id": product.id, "quantity": 4, "to_area": "Shop"}, format="json"
    )

    assert resp.status_code == 201
    body = resp.json()
    assert body["public_token"] is None
    assert body["product"]["stock_level"] == 6
    assert body["destination_product"]["stock_level"] == 4
    assert body["movement"]["status"] == "completed"
    assert body["movement"]["moved_by"] == "clerk@example.com"
    assert body["movement"]["to_area"] == "Shop"


@pytest.mark.django_db
def test_create_movement_errors(client, rack):
    product = ProductFactory(location=rack, stock_level=2)

    resp = client.post(
        "/api/v1/movements/", {"product_id": product.id, "quantity": 3, "to_area": "Shop"}, format="json"
    )
    assert resp.status_code == 400
    assert resp.json() == {
        "detail": "Quantity exceeds available stock.",
        "code": "insufficient_stock",
        "product_id": product.id,
        "requested": 3,
        "available": 2,
    }

    resp = client.post("/api/v1/movements/", {"product_id": product.id, "quantity": 1}, format="json")
    assert resp.status_code == 400
    assert resp.json()["code"] == "invalid_destination"

    resp = client.post("/api/v1/movements/", {"product_id": 999999, "quantity": 1, "to_area": "Shop"}, format="json")
    assert resp.status_code == 404
    assert resp.json()["code"] == "product_not_found"

    resp = client.post("/api/v1/movements/", {"quantity": 1, "to_area": "Shop"}, format="json")
    assert resp.status_code == 400
    assert "product_id" in resp.json()


@pytest.mark.django_db
def test_deferred_movement_round_trip_through_public_link(client, rack):
    product = ProductFactory(location=rack, stock_level=10)
    resp = client.post(
        "/api/v1/movements/",
        {"product_id": product.id, "quantity": 5, "to_area": "Shop", "requires_confirmation": True},
        format="json",
    )
    assert resp.status_code == 201
    token = resp.json()["public_token"]
    assert resp.json()["movement"]["status"] == "pending"
    assert resp.json()["destination_product"] is None

    public = APIClient()
    view = public.get(f"/api/v1/public/movements/{token}/")
    assert view.status_code == 200
    assert view.json()["quantity_moved"] == 5
    assert view.json()["to_location"]["area"] == "Shop"
    assert "public_token" not in view.json()

    confirm = public.post(
        f"/api/v1/public/movements/{token}/confirm/",
        {"confirmed_by": "Shop floor", "quantity_received": 4},
        format="json",
    )
    assert confirm.status_code == 200
    assert confirm.json()["status"] == "received"
    assert confirm.json()["quantity_moved"] == 4
    product.refresh_from_db()
    assert product.stock_level == 6

    again = public.post(f"/api/v1/public/movements/{token}/confirm/", {"confirmed_by": "Shop floor"}, format="json")
    assert again.status_code == 409
    assert again.json()["code"] == "already_confirmed"


@pytest.mark.django_db
def test_public_movement_errors(client, rack):
    public = APIClient()
    assert public.get("/api/v1/public/movements/unknown/").status_code == 404

    product = ProductFactory(location=rack, stock_level=10)
    token = client.post(
        "/api/v1/movements/",
        {"product_id": product.id, "quantity": 5, "to_area": "Shop", "requires_confirmation": True},
        format="json",
    ).json()["public_token"]

    resp = public.post(f"/api/v1/public/movements/{token}/confirm/", {}, format="json")
    assert resp.status_code == 400

    resp = public.post(
        f"/api/v1/public/movements/{token}/confirm/", {"confirmed_by": "x", "quantity_received": 6}, format="json"
    )
    assert resp.status_code == 400
    assert resp.json()["code"] == "invalid_quantity"

    MovementLog.objects.filter(public_token=token).update(token_expires_at=timezone.now() - timedelta(minutes=1))
    resp = public.post(f"/api/v1/public/movements/{token}/confirm/", {"confirmed_by": "x"}, format="json")
    assert resp.status_code == 410
    assert resp.json()["code"] == "expired"
    assert MovementLog.objects.get(public_token=token).status == MovementLog.STATUS_EXPIRED


@pytest.mark.django_db
def test_cancel_pending_movement(client, rack):
    product = ProductFactory(location=rack, stock_level=10)
    movement_id = client.post(
        "/api/v1/movements/",
        {"product_id": product.id, "quantity": 1, "to_area": "Shop", "requires_confirmation": True},
        format="json",
    ).json()["movement"]["id"]

    resp = client.post(f"/api/v1/movements/{movement_id}/cancel/")
    assert resp.status_code == 200
    assert resp.json()["status"] == "cancelled"

    resp = client.post(f"/api/v1/movements/{movement_id}/cancel/")
    assert resp.status_code == 409
    assert resp.json()["code"] == "invalid_state_transition"


@pytest.mark.django_db
def test_list_history_and_stats(client, rack):
    shop = LocationFactory(area="Shop")
    ada = PersonFactory(name="Ada")
    product = ProductFactory(location=rack, stock_level=10)
    other = ProductFactory(location=rack, stock_level=10)
    for payload in (
        {"product_id": product.id, "quantity": 1, "to_location_id": shop.id},
        {"product_id": product.id, "quantity": 1, "to_person_id": ada.id},
        {"product_id": other.id, "quantity": 1, "to_person_id": ada.id},
    ):
        assert client.post("/api/v1/movements/", payload, format="json").status_code == 201
    client.post(
        "/api/v1/movements/",
        {"product_id": other.id, "quantity": 1, "to_area": "Shop", "requires_confirmation": True},
        format="json",
    )

    rows = client.get("/api/v1/movements/", {"location_id": shop.id}).json()["results"]
    assert len(rows) == 1
    assert rows[0]["to_location_name"] == shop.name

    pending = client.get("/api/v1/movements/", {"status": "pending"}).json()["results"]
    assert [row["product"] for row in pending] == [other.id]

    today = timezone.localdate().isoformat()
    assert client.get("/api/v1/movements/", {"start_date": today, "end_date": today}).json()["count"] == 4
    tomorrow = (timezone.localdate() + timedelta(days=1)).isoformat()
    assert client.get("/api/v1/movements/", {"start_date": tomorrow}).json()["count"] == 0

    history = client.get(f"/api/v1/movements/products/{product.id}/history/").json()["results"]
    assert len(history) == 2

    stats = client.get("/api/v1/movements/stats/").json()
    assert stats["total_movements"] == 3
    assert stats["active_products"] == 2
    assert stats["most_active_recipients"] == [{"person_id": ada.id, "name": "Ada", "movements": 2}]
    assert len(stats["recent_movements"]) == 4


@pytest.mark.django_db
def test_distribute_endpoint(client, rack):
    product = ProductFactory(location=rack, stock_level=10)
    shop = LocationFactory(area="Shop")
    person = PersonFactory()

    resp = client.post(
        "/api/v1/movements/distribute/",
        {
            "product_id": product.id,
            "distributions": [
                {"to_location_id": shop.id, "quantity": 2},
                {"to_person_id": person.id, "quantity": 3},
            ],
        },
        format="json",
    )

    assert resp.status_code == 201
    body = resp.json()
    assert body["product"]["stock_level"] == 5
    assert [p["stock_level"] for p in body["created_products"]] == [2, 3]
    assert len(body["movements"]) == 2

    resp = client.post(
        "/api/v1/movements/distribute/",
        {"product_id": product.id, "distributions": [{"to_location_id": shop.id, "quantity": 6}]},
        format="json",
    )
    assert resp.status_code == 400
    assert resp.json()["code"] == "insufficient_stock"


@pytest.mark.django_db
def test_bulk_movement_lifecycle(client, rack):
    shop = LocationFactory(area="Shop", name="Front")
    mic = ProductFactory(location=rack, stock_level=10, sku="MIC")

    resp = client.post(
        "/api/v1/bulk-movements/",
        _bulk_payload(rack, shop, mic, 5),
        format="json",
    )
    assert resp.status_code == 201
    bulk = resp.json()
    assert bulk["status"] == "in_transit"
    assert bulk["created_by"] == "clerk@example.com"
    assert bulk["from_location_name"] == "Rack 1"
    assert bulk["to_location_area"] == "Shop"
    assert bulk["public_url"].startswith("https://app.example.test/bulk-movement/confirm/")
    assert bulk["items"][0]["quantity_sent"] == 5

    resp = client.patch(
        f"/api/v1/bulk-movements/{bulk['id']}/",
        {"items": [{"product_id": mic.id, "quantity_sent": 6}], "notes": "one more"},
        format="json",
    )
    assert resp.status_code == 200
    assert resp.json()["notes"] == "one more"
    mic.refresh_from_db()
    assert mic.stock_level == 4

    detail = client.get(f"/api/v1/bulk-movements/{bulk['id']}/").json()
    item_id = detail["items"][0]["id"]

    public = APIClient()
    view = public.get(f"/api/v1/public/bulk-movements/{bulk['public_token']}/")
    assert view.status_code == 200
    assert view.json()["to_location"] == {"name": "Front", "code": shop.code, "area": "Shop"}
    assert view.json()["items"][0]["quantity_sent"] == 6

    confirm = public.post(
        f"/api/v1/public/bulk-movements/{bulk['public_token']}/confirm/",
        {"confirmed_by": "Front desk", "items": [{"item_id": item_id, "quantity_received": 6}]},
        format="json",
    )
    assert confirm.status_code == 200
    assert confirm.json() == {"bulk_movement_id": bulk["id"], "created_products_count": 1, "confirmed_items_count": 1}
    assert Product.objects.get(location=shop).stock_level == 6

    again = public.post(
        f"/api/v1/public/bulk-movements/{bulk['public_token']}/confirm/",
        {"confirmed_by": "Front desk", "items": [{"item_id": item_id, "quantity_received": 6}]},
        format="json",
    )
    assert again.status_code == 409

    resp = client.post(f"/api/v1/bulk-movements/{bulk['id']}/cancel/")
    assert resp.status_code == 409


@pytest.mark.django_db
def test_bulk_movement_validation_errors(client, rack):
    shop = LocationFactory(area="Shop")
    stranger = ProductFactory(location=shop, stock_level=10)

    resp = client.post("/api/v1/bulk-movements/", {"items": [{"product_id": 1, "quantity_sent": 1}]}, format="json")
    assert resp.status_code == 400

    resp = client.post(
        "/api/v1/bulk-movements/",
        {"from_location_id": rack.id, "to_area": "Shop", "items": [{"product_id": stranger.id, "quantity_sent": 1}]},
        format="json",
    )
    assert resp.status_code == 400
    assert resp.json()["code"] == "validation_failed"
    assert resp.json()["product_ids"] == [stranger.id]

    assert client.get("/api/v1/bulk-movements/999999/").status_code == 404
    assert client.post("/api/v1/bulk-movements/999999/cancel/").json()["code"] == "movement_not_found"


@pytest.mark.django_db
def test_bulk_list_filters_cancel_and_expiry(client, rack):
    shop = LocationFactory(area="Shop")
    product = ProductFactory(location=rack, stock_level=10)

    def create():
        return client.post(
            "/api/v1/bulk-movements/",
            _bulk_payload(rack, shop, product),
            format="json",
        ).json()["id"]

    cancelled_id = create()
    lapsed_id = create()
    open_id = create()

    resp = client.post(f"/api/v1/bulk-movements/{cancelled_id}/cancel/")
    assert resp.status_code == 200
    assert resp.json()["status"] == "expired"
    assert resp.json()["cancelled_at"] is not None

    BulkMovement.objects.filter(id=lapsed_id).update(token_expires_at=timezone.now() - timedelta(hours=1))
    assert client.post("/api/v1/bulk-movements/check-expired/").json() == {"expired": 1}

    rows = client.get("/api/v1/bulk-movements/", {"status": "in_transit"}).json()["results"]
    assert [row["id"] for row in rows] == [open_id]
    rows = client.get("/api/v1/bulk-movements/", {"status": ["expired", "in_transit"]}).json()["results"]
    assert {row["id"] for row in rows} == {cancelled_id, lapsed_id, open_id}
    rows = client.get("/api/v1/bulk-movements/", {"to_location_id": rack.id}).json()["results"]
    assert rows == []
    today = timezone.localdate().isoformat()
    assert client.get("/api/v1/bulk-movements/", {"date_from": today, "date_to": today}).json()["count"] == 3

    product.refresh_from_db()
    # Cancelled stock is restored, lapsed in-transit stock is not
    assert product.stock_level == 8


@pytest.mark.django_db
def test_public_bulk_expired_link(client, rack):
    shop = LocationFactory(area="Shop")
    product = ProductFactory(location=rack, stock_level=10)
    bulk = client.post(
        "/api/v1/bulk-movements/",
        _bulk_payload(rack, shop, product),
        format="json",
    ).json()
    BulkMovement.objects.filter(id=bulk["id"]).update(token_expires_at=timezone.now() - timedelta(hours=1))

    public = APIClient()
    resp = public.post(
        f"/api/v1/public/bulk-movements/{bulk['public_token']}/confirm/", {"confirmed_by": "x"}, format="json"
    )
    assert resp.status_code == 410
    assert BulkMovement.objects.get(id=bulk["id"]).status == BulkMovement.STATUS_EXPIRED

    view = public.get(f"/api/v1/public/bulk-movements/{bulk['public_token']}/")
    assert view.status_code == 200
    assert view.json()["status"] == "expired"
    assert public.get("/api/v1/public/bulk-movements/nope/").status_code == 404
