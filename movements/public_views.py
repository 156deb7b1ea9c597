"""Unauthenticated confirmation endpoints addressed by a public token."""

from common.exceptions import MovementEngineError
from common.throttling import SettingsScopedRateThrottle
from drf_spectacular.utils import OpenApiExample, extend_schema, inline_serializer
from rest_framework import serializers as rf_serializers
from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from .bulk_services import confirm_bulk_movement, get_public_bulk_movement
from .public_serializers import (
    ConfirmBulkMovementSerializer,
    ConfirmMovementSerializer,
    PublicBulkMovementSerializer,
    PublicMovementSerializer,
)
from .serializers import MovementLogSerializer
from .services import confirm_movement, get_public_movement

ErrorSerializer = inline_serializer(
    name="PublicTokenError",
    fields={"detail": rf_serializers.CharField(), "code": rf_serializers.CharField()},
)

BulkConfirmResultSerializer = inline_serializer(
    name="BulkConfirmResult",
    fields={
        "bulk_movement_id": rf_serializers.IntegerField(),
        "created_products_count": rf_serializers.IntegerField(),
        "confirmed_items_count": rf_serializers.IntegerField(),
    },
)


class PublicTokenView(APIView):
    permission_classes = [AllowAny]
    authentication_classes = []
    throttle_classes = [SettingsScopedRateThrottle]
    throttle_scope = "public_token"


class PublicBulkMovementView(PublicTokenView):
    @extend_schema(
        tags=["Public Endpoints"],
        summary="View a bulk movement by token",
        description="Shows what was sent. A lapsed link is flipped to expired on read.",
        responses={200: PublicBulkMovementSerializer, 404: ErrorSerializer},
    )
    def get(self, request, token: str):
        try:
            bulk = get_public_bulk_movement(token=token)
        except MovementEngineError as exc:
            return Response(exc.as_response_data(), status=exc.status_code)
        return Response(PublicBulkMovementSerializer(bulk).data)


class PublicBulkMovementConfirmView(PublicTokenView):
    @extend_schema(
        tags=["Public Endpoints"],
        summary="Confirm receipt of a bulk movement",
        description=(
            "Record what actually arrived. Items not listed count as nothing received. Creates destination "
            "products for every positive quantity and closes the movement."
        ),
        request=ConfirmBulkMovementSerializer,
        responses={200: BulkConfirmResultSerializer, 400: ErrorSerializer, 409: ErrorSerializer, 410: ErrorSerializer},
        examples=[
            OpenApiExample(
                "Partial receipt",
                value={"confirmed_by": "Dock B", "items": [{"item_id": 11, "quantity_received": 3}]},
                request_only=True,
            ),
            OpenApiExample(
                "Confirmed",
                value={"bulk_movement_id": 4, "created_products_count": 1, "confirmed_items_count": 1},
                response_only=True,
                status_codes=["200"],
            ),
        ],
    )
    def post(self, request, token: str):
        serializer = ConfirmBulkMovementSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        try:
            result = confirm_bulk_movement(
                token=token,
                confirmed_by=data["confirmed_by"],
                items=data.get("items") or [],
                notes=data.get("notes") or None,
            )
        except MovementEngineError as exc:
            return Response(exc.as_response_data(), status=exc.status_code)
        return Response(result, status=status.HTTP_200_OK)


class PublicMovementView(PublicTokenView):
    @extend_schema(
        tags=["Public Endpoints"],
        summary="View a pending movement by token",
        responses={200: PublicMovementSerializer, 404: ErrorSerializer},
    )
    def get(self, request, token: str):
        try:
            movement = get_public_movement(token=token)
        except MovementEngineError as exc:
            return Response(exc.as_response_data(), status=exc.status_code)
        return Response(PublicMovementSerializer(movement).data)


class PublicMovementConfirmView(PublicTokenView):
    @extend_schema(
        tags=["Public Endpoints"],
        summary="Confirm receipt of a movement",
        description="Applies the stock move. quantity_received defaults to the quantity sent; 0 closes it untouched.",
        request=ConfirmMovementSerializer,
        responses={200: MovementLogSerializer, 400: ErrorSerializer, 409: ErrorSerializer, 410: ErrorSerializer},
    )
    def post(self, request, token: str):
        serializer = ConfirmMovementSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        try:
            outcome = confirm_movement(
                token=token,
                confirmed_by=data["confirmed_by"],
                quantity_received=data.get("quantity_received"),
                notes=data.get("notes") or None,
            )
        except MovementEngineError as exc:
            return Response(exc.as_response_data(), status=exc.status_code)
        return Response(MovementLogSerializer(outcome.movement).data, status=status.HTTP_200_OK)


# EOF
