"""Root URL configuration for the StockRoute API."""

from common.auth import TokenObtainView, TokenRefreshScopedView
from django.contrib import admin
from django.urls import include, path
from drf_spectacular.views import SpectacularAPIView, SpectacularSwaggerView

from .health import health

admin.site.site_header = "StockRoute Admin"
admin.site.index_title = "Admin"

urlpatterns = [
    path("admin/", admin.site.urls),
    # API schema and Swagger UI
    path("api/schema/", SpectacularAPIView.as_view(), name="api-schema"),
    path("api/docs/", SpectacularSwaggerView.as_view(url_name="api-schema"), name="api-docs"),
    # Healthcheck
    path("health/", health, name="health"),
    # Versioned v1 routes only
    path("api/v1/auth/token/", TokenObtainView.as_view(), name="token-obtain"),
    path("api/v1/auth/token/refresh/", TokenRefreshScopedView.as_view(), name="token-refresh"),
    path("api/v1/locations/", include("locations.urls")),
    path("api/v1/inventory/", include("inventory.urls")),
    path("api/v1/movements/", include("movements.urls")),
    path("api/v1/bulk-movements/", include("movements.bulk_urls")),
    # Unauthenticated confirmation links
    path("api/v1/public/", include("movements.public_urls")),
]
