from django.urls import path

from .public_views import (
    PublicBulkMovementConfirmView,
    PublicBulkMovementView,
    PublicMovementConfirmView,
    PublicMovementView,
)

urlpatterns = [
    path("bulk-movements/<str:token>/", PublicBulkMovementView.as_view(), name="public-bulk-movement"),
    path(
        "bulk-movements/<str:token>/confirm/",
        PublicBulkMovementConfirmView.as_view(),
        name="public-bulk-movement-confirm",
    ),
    path("movements/<str:token>/", PublicMovementView.as_view(), name="public-movement"),
    path("movements/<str:token>/confirm/", PublicMovementConfirmView.as_view(), name="public-movement-confirm"),
]

# EOF
