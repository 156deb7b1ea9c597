"""Selectors for the inventory domain."""

from typing import Optional

from common.events import INVENTORY_STATS_KEY, cache_key
from django.conf import settings
from django.core.cache import cache
from django.db.models import Count, Q, QuerySet, Sum
from django.db.models.functions import Coalesce

from .models import Product, ProductValidation, TransferLog


def destination_total_stock(
    *, location_id: Optional[int], sku: Optional[str], kanban_id: Optional[int], product_details: str
) -> Optional[int]:
    """Aggregate stock at a location for the same logical item.

    Products are grouped by SKU; without a SKU they are grouped by kanban and
    exact description. Returns None when there is no destination location.
    """

    if not location_id:
        return None
    qs = Product.objects.filter(location_id=location_id)
    if sku:
        qs = qs.filter(sku=sku)
    else:
        qs = qs.filter(product_details=product_details)
        qs = qs.filter(kanban_id=kanban_id) if kanban_id else qs.filter(kanban__isnull=True)
    return int(qs.aggregate(total=Coalesce(Sum("stock_level"), 0))["total"])


def total_stock_for(product: Product, *, location_id: Optional[int]) -> Optional[int]:
    return destination_total_stock(
        location_id=location_id,
        sku=product.sku,
        kanban_id=product.kanban_id,
        product_details=product.product_details,
    )


def list_products(
    *,
    column_status: Optional[str] = None,
    location_id: Optional[int] = None,
    kanban_id: Optional[int] = None,
    sku: Optional[str] = None,
    search: Optional[str] = None,
) -> QuerySet[Product]:
    qs = Product.objects.select_related("location", "assigned_to_person", "kanban").order_by("-updated_at", "id")
    if column_status:
        qs = qs.filter(column_status=column_status)
    if location_id:
        qs = qs.filter(location_id=location_id)
    if kanban_id:
        qs = qs.filter(kanban_id=kanban_id)
    if sku:
        qs = qs.filter(sku__iexact=sku)
    if search:
        qs = qs.filter(Q(product_details__icontains=search) | Q(sku__icontains=search))
    return qs


def list_splits(*, product_id: int) -> QuerySet[Product]:
    """Products created from the given product's stock."""

    return Product.objects.filter(source_product_id=product_id).order_by("created_at", "id")


def list_validations_for_product(*, product_id: int) -> QuerySet[ProductValidation]:
    return ProductValidation.objects.filter(product_id=product_id).order_by("created_at", "id")


def has_validation(*, product_id: int, column_status: str) -> bool:
    return ProductValidation.objects.filter(product_id=product_id, column_status=column_status).exists()


def list_transfer_logs(*, product_id: Optional[int] = None, transfer_type: Optional[str] = None):
    qs = TransferLog.objects.select_related("from_kanban", "to_kanban").order_by("-created_at", "id")
    if product_id:
        qs = qs.filter(product_id=product_id)
    if transfer_type:
        qs = qs.filter(transfer_type=transfer_type)
    return qs


def _compute_inventory_stats() -> dict:
    stored = Product.objects.filter(column_status=Product.STATUS_STORED)
    totals = stored.aggregate(
        total_products=Count("id"),
        total_stock=Coalesce(Sum("stock_level"), 0),
        out_of_stock=Count("id", filter=Q(stock_level=0)),
    )
    by_status = {
        row["column_status"]: row["n"]
        for row in Product.objects.order_by().values("column_status").annotate(n=Count("id"))
    }
    in_transit = Product.objects.filter(column_status=Product.STATUS_IN_TRANSIT).count()
    return {
        "stored_products": int(totals["total_products"]),
        "total_stock": int(totals["total_stock"]),
        "out_of_stock": int(totals["out_of_stock"]),
        "in_transit_products": in_transit,
        "by_column": by_status,
    }


def inventory_stats() -> dict:
    """Inventory summary, cached until the next stock-affecting commit evicts it."""

    timeout = int(getattr(settings, "INVENTORY_STATS_CACHE_SECONDS", 300))
    return cache.get_or_set(cache_key(INVENTORY_STATS_KEY), _compute_inventory_stats, timeout)


# EOF
