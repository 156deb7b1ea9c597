from django.urls import path

from .views import (
    BulkMovementCancelView,
    BulkMovementCheckExpiredView,
    BulkMovementDetailView,
    BulkMovementListCreateView,
)

urlpatterns = [
    path("", BulkMovementListCreateView.as_view(), name="bulk-movement-list"),
    path("check-expired/", BulkMovementCheckExpiredView.as_view(), name="bulk-movement-check-expired"),
    path("<int:bulk_movement_id>/", BulkMovementDetailView.as_view(), name="bulk-movement-detail"),
    path("<int:bulk_movement_id>/cancel/", BulkMovementCancelView.as_view(), name="bulk-movement-cancel"),
]

# EOF
