from django.urls import path

from .views import (
    DistributeStockView,
    MovementCancelView,
    MovementListCreateView,
    MovementStatsView,
    ProductMovementHistoryView,
)

urlpatterns = [
    path("", MovementListCreateView.as_view(), name="movement-list"),
    path("stats/", MovementStatsView.as_view(), name="movement-stats"),
    path("distribute/", DistributeStockView.as_view(), name="movement-distribute"),
    path("products/<int:product_id>/history/", ProductMovementHistoryView.as_view(), name="movement-product-history"),
    path("<int:movement_id>/cancel/", MovementCancelView.as_view(), name="movement-cancel"),
]

# EOF
