import factory
from django.contrib.auth import get_user_model
from factory import Faker
from factory.django import DjangoModelFactory
from locations.models import Department, Location, Person


class UserFactory(DjangoModelFactory):
    class Meta:
        model = get_user_model()

    username = factory.Sequence(lambda n: f"clerk{n}")
    email = factory.LazyAttribute(lambda o: f"{o.username}@example.com")
    password = factory.PostGenerationMethodCall("set_password", "pass")


class LocationFactory(DjangoModelFactory):
    class Meta:
        model = Location

    area = "Warehouse"
    name = factory.Sequence(lambda n: f"Shelf {n}")
    code = factory.Sequence(lambda n: f"LOC-{n:04d}")
    building = Faker("word")
    is_active = True


class DepartmentFactory(DjangoModelFactory):
    class Meta:
        model = Department

    name = factory.Sequence(lambda n: f"Department {n}")


class PersonFactory(DjangoModelFactory):
    class Meta:
        model = Person

    name = Faker("name")
    department = factory.SubFactory(DepartmentFactory)
    is_active = True
