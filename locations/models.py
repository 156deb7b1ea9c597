"""Location models.

A location belongs to an ``area`` (site or warehouse label). Each area may
carry one shared ``General`` location used when callers name only the area;
``UniqueConstraint(area, name)`` is what keeps concurrent first-time
resolution of an area down to a single row.
"""

from common.models import TimeStampedModel
from django.db import models

GENERAL_LOCATION_NAME = "General"


class Location(TimeStampedModel):
    area = models.CharField(max_length=255)
    name = models.CharField(max_length=255)
    code = models.CharField(max_length=120, unique=True)
    building = models.CharField(max_length=255, blank=True)
    floor = models.CharField(max_length=64, blank=True)
    capacity = models.PositiveIntegerField(null=True, blank=True)
    description = models.TextField(blank=True)
    is_active = models.BooleanField(default=True)

    class Meta:
        ordering = ["area", "name"]
        constraints = [
            models.UniqueConstraint(fields=["area", "name"], name="unique_location_area_name"),
        ]
        indexes = [
            models.Index(fields=["area"], name="location_area_idx"),
            models.Index(fields=["name"], name="location_name_idx"),
        ]

    @property
    def is_general(self) -> bool:
        return self.name == GENERAL_LOCATION_NAME

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.area} / {self.name} ({self.code})"


class Department(TimeStampedModel):
    name = models.CharField(max_length=255, unique=True)
    description = models.TextField(blank=True)
    is_active = models.BooleanField(default=True)

    class Meta:
        ordering = ["name"]

    def __str__(self) -> str:  # pragma: no cover
        return self.name


class Person(TimeStampedModel):
    """Someone stock can be handed to instead of a location."""

    name = models.CharField(max_length=255)
    department = models.ForeignKey(Department, on_delete=models.PROTECT, related_name="people")
    is_active = models.BooleanField(default=True)

    class Meta:
        ordering = ["name", "id"]
        indexes = [
            models.Index(fields=["name"], name="person_name_idx"),
            models.Index(fields=["is_active"], name="person_is_active_idx"),
        ]

    def __str__(self) -> str:  # pragma: no cover
        return self.name


# EOF
