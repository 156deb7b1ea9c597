from common.choices import BulkMovementStatus
from django_filters import rest_framework as filters

from .models import BulkMovement


class BulkMovementFilterSet(filters.FilterSet):
    # ?status=pending&status=in_transit
    status = filters.MultipleChoiceFilter(choices=BulkMovementStatus.choices)
    from_location_id = filters.NumberFilter(field_name="from_location_id")
    to_location_id = filters.NumberFilter(field_name="to_location_id")
    date_from = filters.DateFilter(field_name="created_at", lookup_expr="date__gte")
    date_to = filters.DateFilter(field_name="created_at", lookup_expr="date__lte")

    class Meta:
        model = BulkMovement
        fields = ["status", "from_location_id", "to_location_id", "date_from", "date_to"]


# EOF
