"""Read-side helpers for movement logs and bulk movements."""

from datetime import datetime, time, timedelta
from typing import Optional

from django.db.models import Count, Prefetch, Q, QuerySet
from django.utils import timezone
from django.utils.dateparse import parse_date, parse_datetime

from .models import BulkMovement, BulkMovementItem, MovementLog


def _filter_created(qs: QuerySet, value, *, end: bool = False) -> QuerySet:
    """Bound ``created_at`` by an ISO datetime or a bare date; a bare end date covers the whole day."""

    if not value:
        return qs
    moment = parse_datetime(str(value))
    if moment is not None:
        if timezone.is_naive(moment):
            moment = timezone.make_aware(moment)
        return qs.filter(created_at__lte=moment) if end else qs.filter(created_at__gte=moment)
    day = parse_date(str(value))
    if day is None:
        return qs
    start = timezone.make_aware(datetime.combine(day, time.min))
    return qs.filter(created_at__lt=start + timedelta(days=1)) if end else qs.filter(created_at__gte=start)


def list_movements(
    *,
    product_id: Optional[int] = None,
    location_id: Optional[int] = None,
    start_date=None,
    end_date=None,
    status: Optional[str] = None,
) -> QuerySet[MovementLog]:
    """Return movement logs newest first.

    ``location_id`` matches either side of the move.
    """

    qs = MovementLog.objects.select_related("product", "from_location", "to_location", "from_person", "to_person")
    if product_id:
        qs = qs.filter(product_id=product_id)
    if location_id:
        qs = qs.filter(Q(from_location_id=location_id) | Q(to_location_id=location_id))
    qs = _filter_created(qs, start_date)
    qs = _filter_created(qs, end_date, end=True)
    if status:
        qs = qs.filter(status=status)
    return qs.order_by("-created_at", "-id")


def product_history(*, product_id: int) -> QuerySet[MovementLog]:
    return list_movements(product_id=product_id)


def movement_stats() -> dict:
    completed = MovementLog.objects.filter(status=MovementLog.STATUS_COMPLETED)
    recipients = (
        completed.exclude(to_person__isnull=True)
        .values("to_person_id", "to_person__name")
        .annotate(movements=Count("id"))
        .order_by("-movements", "to_person__name")[:5]
    )
    recent = list_movements()[:10]
    return {
        "total_movements": completed.count(),
        "active_products": completed.values("product_id").distinct().count(),
        "most_active_recipients": [
            {"person_id": row["to_person_id"], "name": row["to_person__name"], "movements": row["movements"]}
            for row in recipients
        ],
        "recent_movements": list(recent),
    }


def list_bulk_movements() -> QuerySet[BulkMovement]:
    """Bulk movements newest first with their items; filtering is left to the filterset."""

    return (
        BulkMovement.objects.select_related("from_location", "to_location")
        .prefetch_related(Prefetch("items", queryset=BulkMovementItem.objects.order_by("id")))
        .order_by("-created_at", "-id")
    )


def get_bulk_movement(*, bulk_movement_id: int) -> Optional[BulkMovement]:
    return list_bulk_movements().filter(id=bulk_movement_id).first()


# EOF
