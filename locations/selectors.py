"""Selectors for locations and people."""

from typing import List, Optional

from django.db.models import Q, QuerySet

from .models import Location, Person


def list_locations(
    *, area: Optional[str] = None, is_active: Optional[bool] = None, search: Optional[str] = None
) -> QuerySet[Location]:
    qs = Location.objects.all().order_by("area", "name")
    if area:
        qs = qs.filter(area__iexact=area.strip())
    if is_active is not None:
        qs = qs.filter(is_active=is_active)
    if search:
        qs = qs.filter(Q(name__icontains=search) | Q(code__icontains=search) | Q(area__icontains=search))
    return qs


def list_areas() -> List[str]:
    """Distinct area labels of active locations, alphabetically."""

    return list(Location.objects.filter(is_active=True).order_by("area").values_list("area", flat=True).distinct())


def list_people(*, department_id: Optional[int] = None, is_active: Optional[bool] = None) -> QuerySet[Person]:
    qs = Person.objects.select_related("department").order_by("name", "id")
    if department_id:
        qs = qs.filter(department_id=department_id)
    if is_active is not None:
        qs = qs.filter(is_active=is_active)
    return qs


# EOF
