"""Inventory endpoints: product listing, column moves, validations and transfers."""

from common.auth import actor_of
from common.exceptions import MovementEngineError
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiExample, OpenApiParameter, extend_schema, inline_serializer
from rest_framework import generics, status
from rest_framework import serializers as rf_serializers
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from .models import Product
from .selectors import inventory_stats, list_products, list_splits, list_transfer_logs, list_validations_for_product
from .serializers import (
    CreateValidationSerializer,
    MoveColumnSerializer,
    ProductSerializer,
    ProductValidationSerializer,
    TransferLogSerializer,
    TransferProductSerializer,
)
from .services import change_column_status, record_validation, transfer_product

ErrorSerializer = inline_serializer(
    name="InventoryError",
    fields={"detail": rf_serializers.CharField(), "code": rf_serializers.CharField()},
)


class InventoryHealthView(APIView):
    throttle_classes = []

    @extend_schema(
        tags=["Inventory Endpoints"],
        summary="Inventory health",
        description="Simple healthcheck endpoint for the inventory app",
        examples=[OpenApiExample("Health OK", value={"status": "ok", "app": "inventory"})],
    )
    def get(self, request):
        return Response({"status": "ok", "app": "inventory"})


class ProductListView(generics.ListAPIView):
    permission_classes = [IsAuthenticated]
    throttle_scope = "inventory"
    serializer_class = ProductSerializer

    @extend_schema(
        tags=["Inventory Endpoints"],
        summary="List products",
        description="List products. Filters: column_status, location_id, kanban_id, sku, search.",
        parameters=[
            OpenApiParameter("column_status", OpenApiTypes.STR, location="query"),
            OpenApiParameter("location_id", OpenApiTypes.INT, location="query"),
            OpenApiParameter("kanban_id", OpenApiTypes.INT, location="query"),
            OpenApiParameter("sku", OpenApiTypes.STR, location="query"),
            OpenApiParameter("search", OpenApiTypes.STR, location="query"),
        ],
    )
    def get(self, request, *args, **kwargs):
        return super().get(request, *args, **kwargs)

    def get_queryset(self):
        params = self.request.query_params
        return list_products(
            column_status=params.get("column_status"),
            location_id=params.get("location_id"),
            kanban_id=params.get("kanban_id"),
            sku=params.get("sku"),
            search=params.get("search"),
        )


class ProductDetailView(generics.RetrieveAPIView):
    permission_classes = [IsAuthenticated]
    throttle_scope = "inventory"
    serializer_class = ProductSerializer
    queryset = Product.objects.select_related("location", "assigned_to_person")
    lookup_url_kwarg = "product_id"

    @extend_schema(tags=["Inventory Endpoints"], summary="Get product")
    def get(self, request, *args, **kwargs):
        return super().get(request, *args, **kwargs)


class InventoryStatsView(APIView):
    permission_classes = [IsAuthenticated]
    throttle_scope = "inventory"

    @extend_schema(
        tags=["Inventory Endpoints"],
        summary="Inventory stats",
        description="Stored product and stock totals. Cached until the next stock-affecting change.",
        examples=[
            OpenApiExample(
                "Stats",
                value={
                    "stored_products": 12,
                    "total_stock": 340,
                    "out_of_stock": 1,
                    "in_transit_products": 2,
                    "by_column": {"Stored": 12, "In Transit": 2},
                },
            )
        ],
    )
    def get(self, request):
        return Response(inventory_stats())


class ProductMoveColumnView(APIView):
    """Move a product to another kanban column."""

    permission_classes = [IsAuthenticated]
    throttle_scope = "inventory_write"

    @extend_schema(
        tags=["Inventory Endpoints"],
        summary="Move product column",
        description=(
            "Changes the product's column. Entering Received/Stored on a receive kanban requires a validation "
            "(409 validation_required). Order products entering Purchased are relocated to the linked receive kanban."
        ),
        request=MoveColumnSerializer,
        responses={200: ProductSerializer, 404: ErrorSerializer, 409: ErrorSerializer},
        examples=[
            OpenApiExample(
                "Validation required",
                value={
                    "detail": "Validation is required before moving to this column.",
                    "code": "validation_required",
                    "product_id": 7,
                    "column_status": "Received",
                },
                response_only=True,
                status_codes=["409"],
            )
        ],
    )
    def put(self, request, product_id: int):
        serializer = MoveColumnSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            product = change_column_status(
                product_id=product_id,
                column_status=serializer.validated_data["column_status"],
                changed_by=actor_of(request.user),
            )
        except MovementEngineError as exc:
            return Response(exc.as_response_data(), status=exc.status_code)
        return Response(ProductSerializer(product).data, status=status.HTTP_200_OK)


class ProductTransferView(APIView):
    permission_classes = [IsAuthenticated]
    throttle_scope = "inventory_write"

    @extend_schema(
        tags=["Inventory Endpoints"],
        summary="Transfer product to a linked kanban",
        request=TransferProductSerializer,
        responses={200: ProductSerializer, 404: ErrorSerializer, 409: ErrorSerializer},
    )
    def post(self, request, product_id: int):
        serializer = TransferProductSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            product = transfer_product(
                product_id=product_id,
                to_kanban_id=serializer.validated_data["to_kanban_id"],
                transferred_by=actor_of(request.user) or "",
                notes=serializer.validated_data.get("notes", ""),
            )
        except MovementEngineError as exc:
            return Response(exc.as_response_data(), status=exc.status_code)
        return Response(ProductSerializer(product).data, status=status.HTTP_200_OK)


class ValidationCreateView(APIView):
    permission_classes = [IsAuthenticated]
    throttle_scope = "inventory_write"

    @extend_schema(
        tags=["Inventory Endpoints"],
        summary="Record product validation",
        request=CreateValidationSerializer,
        responses={201: ProductValidationSerializer, 400: ErrorSerializer, 404: ErrorSerializer},
    )
    def post(self, request):
        serializer = CreateValidationSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        try:
            validation = record_validation(
                product_id=data["product_id"],
                column_status=data["column_status"],
                recipient_name=data["recipient_name"],
                validated_by=actor_of(request.user) or "",
                location_id=data.get("location_id"),
                received_image=data.get("received_image") or None,
                storage_photo=data.get("storage_photo") or None,
                notes=data.get("notes"),
            )
        except MovementEngineError as exc:
            return Response(exc.as_response_data(), status=exc.status_code)
        return Response(ProductValidationSerializer(validation).data, status=status.HTTP_201_CREATED)


class ProductSplitListView(generics.ListAPIView):
    permission_classes = [IsAuthenticated]
    throttle_scope = "inventory"
    serializer_class = ProductSerializer
    pagination_class = None

    @extend_schema(
        tags=["Inventory Endpoints"],
        summary="Products split off a product",
        description="Products created from this product's stock by partial moves, distributions or bulk receipts.",
    )
    def get(self, request, *args, **kwargs):
        return super().get(request, *args, **kwargs)

    def get_queryset(self):
        return list_splits(product_id=self.kwargs["product_id"])


class ProductValidationListView(generics.ListAPIView):
    permission_classes = [IsAuthenticated]
    throttle_scope = "inventory"
    serializer_class = ProductValidationSerializer
    pagination_class = None

    @extend_schema(tags=["Inventory Endpoints"], summary="Validation history for a product")
    def get(self, request, *args, **kwargs):
        return super().get(request, *args, **kwargs)

    def get_queryset(self):
        return list_validations_for_product(product_id=self.kwargs["product_id"])


class TransferLogListView(generics.ListAPIView):
    permission_classes = [IsAuthenticated]
    throttle_scope = "inventory"
    serializer_class = TransferLogSerializer

    @extend_schema(
        tags=["Inventory Endpoints"],
        summary="List transfer logs",
        description="Kanban-to-kanban transfers. Filters: product_id, transfer_type (automatic/manual).",
    )
    def get(self, request, *args, **kwargs):
        return super().get(request, *args, **kwargs)

    def get_queryset(self):
        params = self.request.query_params
        return list_transfer_logs(product_id=params.get("product_id"), transfer_type=params.get("transfer_type"))


# EOF
