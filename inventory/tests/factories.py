import factory
from factory import Faker
from factory.django import DjangoModelFactory
from inventory.models import Kanban, KanbanLink, Product, ProductValidation


class KanbanFactory(DjangoModelFactory):
    class Meta:
        model = Kanban

    name = factory.Sequence(lambda n: f"Board {n}")
    type = Kanban.TYPE_ORDER


class KanbanLinkFactory(DjangoModelFactory):
    class Meta:
        model = KanbanLink

    order_kanban = factory.SubFactory(KanbanFactory, type=Kanban.TYPE_ORDER)
    receive_kanban = factory.SubFactory(KanbanFactory, type=Kanban.TYPE_RECEIVE)


class ProductFactory(DjangoModelFactory):
    """A Stored product with stock at a Warehouse shelf."""

    class Meta:
        model = Product

    kanban = factory.SubFactory(KanbanFactory, type=Kanban.TYPE_RECEIVE)
    column_status = Product.STATUS_STORED
    product_details = Faker("sentence", nb_words=4)
    sku = factory.Sequence(lambda n: f"SKU-{n:05d}")
    stock_level = 10
    location = factory.SubFactory("locations.tests.factories.LocationFactory")
    unit = "pcs"
    tags = factory.LazyFunction(list)


class ProductValidationFactory(DjangoModelFactory):
    class Meta:
        model = ProductValidation

    product = factory.SubFactory(ProductFactory)
    column_status = Product.STATUS_RECEIVED
    recipient_name = Faker("name")
    received_image = "https://img.example.test/received.jpg"
    validated_by = "clerk@example.com"
