"""Movement API endpoints.

Single movements (immediate or deferred behind a public token), batch
distribution and the authenticated side of bulk movements. The public token
endpoints live in ``public_views``.
"""

from common.auth import actor_of
from common.exceptions import MovementEngineError
from django.http import Http404
from django_filters import rest_framework as filters
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiExample, OpenApiParameter, extend_schema, inline_serializer
from inventory.serializers import ProductSerializer
from rest_framework import generics, status
from rest_framework import serializers as rf_serializers
from rest_framework.pagination import PageNumberPagination
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from .bulk_services import (
    cancel_bulk_movement,
    create_bulk_movement,
    expire_bulk_movements,
    update_bulk_movement,
)
from .filters import BulkMovementFilterSet
from .selectors import get_bulk_movement, list_bulk_movements, list_movements, movement_stats, product_history
from .serializers import (
    BulkMovementSerializer,
    CreateBulkMovementSerializer,
    CreateMovementSerializer,
    DistributeStockSerializer,
    MovementLogSerializer,
    MovementStatsSerializer,
    UpdateBulkMovementSerializer,
)
from .services import cancel_movement, create_movement, distribute_stock

ErrorSerializer = inline_serializer(
    name="MovementError",
    fields={"detail": rf_serializers.CharField(), "code": rf_serializers.CharField()},
)

MovementCreatedSerializer = inline_serializer(
    name="MovementCreated",
    fields={
        "movement": MovementLogSerializer(),
        "product": ProductSerializer(),
        "destination_product": ProductSerializer(allow_null=True),
        "public_token": rf_serializers.CharField(allow_null=True),
    },
)


class DefaultPagination(PageNumberPagination):
    page_size = 20
    page_size_query_param = "page_size"


class WriteScopeMixin:
    """Throttle POST/PATCH under ``write_throttle_scope`` and reads under ``throttle_scope``."""

    write_throttle_scope = None

    def get_throttles(self):
        if self.write_throttle_scope and self.request.method not in ("GET", "HEAD", "OPTIONS"):
            self.throttle_scope = self.write_throttle_scope
        return super().get_throttles()


class MovementListCreateView(WriteScopeMixin, generics.ListAPIView):
    permission_classes = [IsAuthenticated]
    throttle_scope = "movements"
    write_throttle_scope = "movements_write"
    serializer_class = MovementLogSerializer
    pagination_class = DefaultPagination

    def get_queryset(self):
        params = self.request.query_params
        return list_movements(
            product_id=params.get("product_id"),
            location_id=params.get("location_id"),
            start_date=params.get("start_date"),
            end_date=params.get("end_date"),
            status=params.get("status"),
        )

    @extend_schema(
        tags=["Movement Endpoints"],
        summary="List movements",
        description="Movement log, newest first. location_id matches either the source or the destination.",
        parameters=[
            OpenApiParameter("product_id", OpenApiTypes.INT, location="query"),
            OpenApiParameter("location_id", OpenApiTypes.INT, location="query"),
            OpenApiParameter("start_date", OpenApiTypes.STR, location="query", description="ISO date or datetime"),
            OpenApiParameter("end_date", OpenApiTypes.STR, location="query", description="ISO date or datetime"),
            OpenApiParameter("status", OpenApiTypes.STR, location="query"),
        ],
    )
    def get(self, request, *args, **kwargs):
        return super().get(request, *args, **kwargs)

    @extend_schema(
        tags=["Movement Endpoints"],
        summary="Move stock",
        description=(
            "Move a Stored product to a location, an area (its General location) or a person. "
            "A partial quantity splits the product. With requires_confirmation only a pending movement "
            "with a 7-day public token is created."
        ),
        request=CreateMovementSerializer,
        responses={201: MovementCreatedSerializer, 400: ErrorSerializer, 404: ErrorSerializer, 409: ErrorSerializer},
        examples=[
            OpenApiExample(
                "Partial move to an area",
                value={"product_id": 7, "quantity": 3, "to_area": "Shop", "notes": "Restock"},
                request_only=True,
            ),
            OpenApiExample(
                "Insufficient stock",
                value={
                    "detail": "Quantity exceeds available stock.",
                    "code": "insufficient_stock",
                    "product_id": 7,
                    "requested": 12,
                    "available": 10,
                },
                response_only=True,
                status_codes=["400"],
            ),
        ],
    )
    def post(self, request):
        serializer = CreateMovementSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        try:
            outcome = create_movement(
                product_id=data["product_id"],
                quantity=data["quantity"],
                to_location_id=data.get("to_location_id"),
                to_person_id=data.get("to_person_id"),
                to_area=data.get("to_area"),
                from_area=data.get("from_area"),
                requires_confirmation=data.get("requires_confirmation", False),
                notes=data.get("notes"),
                moved_by=actor_of(request.user),
            )
        except MovementEngineError as exc:
            return Response(exc.as_response_data(), status=exc.status_code)
        return Response(
            {
                "movement": MovementLogSerializer(outcome.movement).data,
                "product": ProductSerializer(outcome.source).data if outcome.source else None,
                "destination_product": ProductSerializer(outcome.destination).data if outcome.destination else None,
                "public_token": outcome.movement.public_token,
            },
            status=status.HTTP_201_CREATED,
        )


class ProductMovementHistoryView(generics.ListAPIView):
    permission_classes = [IsAuthenticated]
    throttle_scope = "movements"
    serializer_class = MovementLogSerializer
    pagination_class = DefaultPagination

    @extend_schema(tags=["Movement Endpoints"], summary="Movement history of a product")
    def get(self, request, *args, **kwargs):
        return super().get(request, *args, **kwargs)

    def get_queryset(self):
        return product_history(product_id=self.kwargs["product_id"])


class MovementStatsView(APIView):
    permission_classes = [IsAuthenticated]
    throttle_scope = "movements"

    @extend_schema(
        tags=["Movement Endpoints"],
        summary="Movement stats",
        description="Completed movement counts, the five most active recipients and the ten latest movements.",
        responses={200: MovementStatsSerializer},
    )
    def get(self, request):
        return Response(MovementStatsSerializer(movement_stats()).data)


class MovementCancelView(APIView):
    permission_classes = [IsAuthenticated]
    throttle_scope = "movements_write"

    @extend_schema(
        tags=["Movement Endpoints"],
        summary="Cancel a pending movement",
        request=None,
        responses={200: MovementLogSerializer, 404: ErrorSerializer, 409: ErrorSerializer},
    )
    def post(self, request, movement_id: int):
        try:
            movement = cancel_movement(movement_id=movement_id)
        except MovementEngineError as exc:
            return Response(exc.as_response_data(), status=exc.status_code)
        return Response(MovementLogSerializer(movement).data, status=status.HTTP_200_OK)


class DistributeStockView(APIView):
    permission_classes = [IsAuthenticated]
    throttle_scope = "movements_write"

    @extend_schema(
        tags=["Movement Endpoints"],
        summary="Distribute stock",
        description="Split one Stored product across several distinct locations or people in one transaction.",
        request=DistributeStockSerializer,
        responses={
            201: inline_serializer(
                name="DistributionResult",
                fields={
                    "product": ProductSerializer(),
                    "created_products": ProductSerializer(many=True),
                    "movements": MovementLogSerializer(many=True),
                },
            ),
            400: ErrorSerializer,
            404: ErrorSerializer,
        },
    )
    def post(self, request):
        serializer = DistributeStockSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        try:
            outcome = distribute_stock(
                source_product_id=data["product_id"],
                distributions=data["distributions"],
                moved_by=actor_of(request.user),
            )
        except MovementEngineError as exc:
            return Response(exc.as_response_data(), status=exc.status_code)
        return Response(
            {
                "product": ProductSerializer(outcome.source).data,
                "created_products": ProductSerializer(outcome.products, many=True).data,
                "movements": MovementLogSerializer(outcome.movements, many=True).data,
            },
            status=status.HTTP_201_CREATED,
        )


class BulkMovementListCreateView(WriteScopeMixin, generics.ListAPIView):
    permission_classes = [IsAuthenticated]
    throttle_scope = "bulk_movements"
    write_throttle_scope = "bulk_movements_write"
    serializer_class = BulkMovementSerializer
    pagination_class = DefaultPagination
    filter_backends = [filters.DjangoFilterBackend]
    filterset_class = BulkMovementFilterSet

    def get_queryset(self):
        return list_bulk_movements()

    @extend_schema(
        tags=["Bulk Movement Endpoints"],
        summary="List bulk movements",
        description="Filters: status (repeatable), from_location_id, to_location_id, date_from, date_to.",
    )
    def get(self, request, *args, **kwargs):
        return super().get(request, *args, **kwargs)

    @extend_schema(
        tags=["Bulk Movement Endpoints"],
        summary="Create bulk movement",
        description=(
            "Ship several Stored products from one location (or area) to another. Stock is deducted "
            "immediately and the movement is in_transit until the 24h public link is confirmed."
        ),
        request=CreateBulkMovementSerializer,
        responses={201: BulkMovementSerializer, 400: ErrorSerializer, 404: ErrorSerializer},
        examples=[
            OpenApiExample(
                "Warehouse to shop",
                value={
                    "from_area": "Warehouse",
                    "to_area": "Shop",
                    "items": [{"product_id": 7, "quantity_sent": 5}],
                },
                request_only=True,
            ),
            OpenApiExample(
                "Products not at source",
                value={
                    "detail": "Some products not found, not stored, or not at source location",
                    "code": "validation_failed",
                    "product_ids": [9],
                },
                response_only=True,
                status_codes=["400"],
            ),
        ],
    )
    def post(self, request):
        serializer = CreateBulkMovementSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        try:
            bulk = create_bulk_movement(
                items=data["items"],
                from_location_id=data.get("from_location_id"),
                from_area=data.get("from_area"),
                to_location_id=data.get("to_location_id"),
                to_area=data.get("to_area"),
                notes=data.get("notes"),
                created_by=actor_of(request.user),
            )
        except MovementEngineError as exc:
            return Response(exc.as_response_data(), status=exc.status_code)
        return Response(
            BulkMovementSerializer(get_bulk_movement(bulk_movement_id=bulk.id)).data, status=status.HTTP_201_CREATED
        )


class BulkMovementDetailView(WriteScopeMixin, APIView):
    permission_classes = [IsAuthenticated]
    throttle_scope = "bulk_movements"
    write_throttle_scope = "bulk_movements_write"

    @extend_schema(
        tags=["Bulk Movement Endpoints"],
        summary="Get bulk movement",
        responses={200: BulkMovementSerializer, 404: ErrorSerializer},
    )
    def get(self, request, bulk_movement_id: int):
        bulk = get_bulk_movement(bulk_movement_id=bulk_movement_id)
        if bulk is None:
            raise Http404("Not found.")
        return Response(BulkMovementSerializer(bulk).data)

    @extend_schema(
        tags=["Bulk Movement Endpoints"],
        summary="Edit bulk movement",
        description=(
            "Change the destination, the notes or the full item list of a pending or in_transit bulk movement. "
            "Removed and reduced lines give stock back to the source; added and increased lines deduct it."
        ),
        request=UpdateBulkMovementSerializer,
        responses={200: BulkMovementSerializer, 400: ErrorSerializer, 404: ErrorSerializer, 409: ErrorSerializer},
    )
    def patch(self, request, bulk_movement_id: int):
        serializer = UpdateBulkMovementSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        try:
            update_bulk_movement(
                bulk_movement_id=bulk_movement_id,
                to_location_id=data.get("to_location_id"),
                items=data.get("items"),
                notes=data.get("notes"),
            )
        except MovementEngineError as exc:
            return Response(exc.as_response_data(), status=exc.status_code)
        return Response(BulkMovementSerializer(get_bulk_movement(bulk_movement_id=bulk_movement_id)).data)


class BulkMovementCancelView(APIView):
    permission_classes = [IsAuthenticated]
    throttle_scope = "bulk_movements_write"

    @extend_schema(
        tags=["Bulk Movement Endpoints"],
        summary="Cancel bulk movement",
        description="Returns every item's stock to its source product and closes the movement as expired.",
        request=None,
        responses={200: BulkMovementSerializer, 404: ErrorSerializer, 409: ErrorSerializer},
    )
    def post(self, request, bulk_movement_id: int):
        try:
            cancel_bulk_movement(bulk_movement_id=bulk_movement_id)
        except MovementEngineError as exc:
            return Response(exc.as_response_data(), status=exc.status_code)
        return Response(BulkMovementSerializer(get_bulk_movement(bulk_movement_id=bulk_movement_id)).data)


class BulkMovementCheckExpiredView(APIView):
    permission_classes = [IsAuthenticated]
    throttle_scope = "bulk_movements_write"

    @extend_schema(
        tags=["Bulk Movement Endpoints"],
        summary="Expire lapsed bulk movements",
        request=None,
        responses={200: inline_serializer(name="ExpiredCount", fields={"expired": rf_serializers.IntegerField()})},
        examples=[OpenApiExample("Expired", value={"expired": 2}, response_only=True)],
    )
    def post(self, request):
        return Response({"expired": expire_bulk_movements()})


# EOF
