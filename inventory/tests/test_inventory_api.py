import pytest
from inventory.models import Kanban, Product
from inventory.tests.factories import KanbanFactory, ProductFactory
from locations.tests.factories import LocationFactory, UserFactory
from rest_framework.test import APIClient


@pytest.fixture
def client():
    api = APIClient()
    api.force_authenticate(user=UserFactory(email="clerk@example.com"))
    return api


@pytest.mark.django_db
def test_product_list_requires_auth():
    assert APIClient().get("/api/v1/inventory/").status_code == 401


@pytest.mark.django_db
def test_product_list_filters(client):
    shop = LocationFactory(area="Shop", name="Counter")
    ProductFactory(location=shop, sku="LAMP-1", product_details="Desk lamp")
    ProductFactory(sku="CHAIR-1", product_details="Office chair")
    ProductFactory(column_status=Product.STATUS_NEW_REQUEST, sku="LAMP-2", stock_level=None)

    resp = client.get("/api/v1/inventory/", {"location_id": shop.id})
    assert resp.status_code == 200
    rows = resp.json()["results"]
    assert [row["sku"] for row in rows] == ["LAMP-1"]
    assert rows[0]["location_name"] == "Counter"
    assert rows[0]["location_area"] == "Shop"

    resp = client.get("/api/v1/inventory/", {"search": "lamp", "column_status": "Stored"})
    assert [row["sku"] for row in resp.json()["results"]] == ["LAMP-1"]


@pytest.mark.django_db
def test_stats_are_cached_until_a_column_change_commits(client, django_capture_on_commit_callbacks):
    ProductFactory(stock_level=5)
    product = ProductFactory(stock_level=0)

    first = client.get("/api/v1/inventory/stats/").json()
    assert first["stored_products"] == 2
    assert first["total_stock"] == 5
    assert first["out_of_stock"] == 1

    # Direct ORM writes bypass invalidation, so the cached numbers stay
    Product.objects.filter(id=product.id).update(stock_level=7)
    assert client.get("/api/v1/inventory/stats/").json()["total_stock"] == 5

    with django_capture_on_commit_callbacks(execute=True):
        resp = client.put(
            f"/api/v1/inventory/products/{product.id}/move/", {"column_status": "In Transit"}, format="json"
        )
    assert resp.status_code == 200

    fresh = client.get("/api/v1/inventory/stats/").json()
    assert fresh["stored_products"] == 1
    assert fresh["total_stock"] == 5
    assert fresh["in_transit_products"] == 1


@pytest.mark.django_db
def test_move_column_validation_required_response(client):
    receive = KanbanFactory(type=Kanban.TYPE_RECEIVE)
    product = ProductFactory(kanban=receive, column_status=Product.STATUS_PURCHASED)

    resp = client.put(f"/api/v1/inventory/products/{product.id}/move/", {"column_status": "Received"}, format="json")

    assert resp.status_code == 409
    body = resp.json()
    assert body["code"] == "validation_required"
    assert body["product_id"] == product.id
    assert body["column_status"] == "Received"


@pytest.mark.django_db
def test_validation_then_move(client):
    receive = KanbanFactory(type=Kanban.TYPE_RECEIVE)
    product = ProductFactory(kanban=receive, column_status=Product.STATUS_PURCHASED)

    resp = client.post(
        "/api/v1/inventory/validations/",
        {
            "product_id": product.id,
            "column_status": "Received",
            "recipient_name": "Ann",
            "received_image": "https://img.example.test/box.jpg",
        },
        format="json",
    )
    assert resp.status_code == 201
    assert resp.json()["validated_by"] == "clerk@example.com"

    resp = client.put(f"/api/v1/inventory/products/{product.id}/move/", {"column_status": "Received"}, format="json")
    assert resp.status_code == 200
    assert resp.json()["column_status"] == "Received"

    history = client.get(f"/api/v1/inventory/products/{product.id}/validations/")
    assert len(history.json()) == 1


@pytest.mark.django_db
def test_transfer_endpoint_and_logs(client):
    receive = KanbanFactory(type=Kanban.TYPE_RECEIVE)
    order = KanbanFactory(type=Kanban.TYPE_ORDER, linked_kanban=receive)
    product = ProductFactory(kanban=order, column_status=Product.STATUS_IN_REVIEW)

    resp = client.post(
        f"/api/v1/inventory/products/{product.id}/transfer/", {"to_kanban_id": receive.id}, format="json"
    )
    assert resp.status_code == 200
    assert resp.json()["kanban"] == receive.id

    logs = client.get("/api/v1/inventory/transfer-logs/", {"transfer_type": "manual"}).json()["results"]
    assert len(logs) == 1
    assert logs[0]["transferred_by"] == "clerk@example.com"

    missing = client.post("/api/v1/inventory/products/999999/transfer/", {"to_kanban_id": receive.id}, format="json")
    assert missing.status_code == 404
    assert missing.json()["code"] == "product_not_found"


@pytest.mark.django_db
def test_product_detail_and_splits(client):
    product = ProductFactory()
    child = ProductFactory(source_product=product)

    assert client.get(f"/api/v1/inventory/products/{product.id}/").json()["id"] == product.id
    splits = client.get(f"/api/v1/inventory/products/{product.id}/splits/").json()
    assert [row["id"] for row in splits] == [child.id]
