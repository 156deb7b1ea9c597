from django.urls import path

from .views import (
    InventoryHealthView,
    InventoryStatsView,
    ProductDetailView,
    ProductListView,
    ProductMoveColumnView,
    ProductSplitListView,
    ProductTransferView,
    ProductValidationListView,
    TransferLogListView,
    ValidationCreateView,
)

urlpatterns = [
    path("health/", InventoryHealthView.as_view(), name="inventory-health"),
    path("", ProductListView.as_view(), name="product-list"),
    path("stats/", InventoryStatsView.as_view(), name="inventory-stats"),
    path("products/<int:product_id>/", ProductDetailView.as_view(), name="product-detail"),
    path("products/<int:product_id>/move/", ProductMoveColumnView.as_view(), name="product-move-column"),
    path("products/<int:product_id>/transfer/", ProductTransferView.as_view(), name="product-transfer"),
    path("products/<int:product_id>/splits/", ProductSplitListView.as_view(), name="product-splits"),
    path("products/<int:product_id>/validations/", ProductValidationListView.as_view(), name="product-validations"),
    path("validations/", ValidationCreateView.as_view(), name="validation-create"),
    path("transfer-logs/", TransferLogListView.as_view(), name="transfer-log-list"),
]

# EOF
