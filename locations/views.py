"""Location API endpoints: listings and area resolution."""

from common.exceptions import MovementEngineError
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiExample, OpenApiParameter, extend_schema, inline_serializer
from rest_framework import generics, status
from rest_framework import serializers as rf_serializers
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from .selectors import list_areas, list_locations, list_people
from .serializers import LocationSerializer, PersonSerializer, ResolveAreaSerializer
from .services import resolve_location


def _parse_bool(value):
    if value is None:
        return None
    return str(value).strip().lower() in ("1", "true", "yes")


class LocationListView(generics.ListAPIView):
    permission_classes = [IsAuthenticated]
    throttle_scope = "locations"
    serializer_class = LocationSerializer

    @extend_schema(
        tags=["Location Endpoints"],
        summary="List locations",
        description="List locations. Filters: area (case-insensitive), is_active, search (name/code/area).",
        parameters=[
            OpenApiParameter("area", OpenApiTypes.STR, location="query"),
            OpenApiParameter("is_active", OpenApiTypes.BOOL, location="query"),
            OpenApiParameter("search", OpenApiTypes.STR, location="query"),
        ],
    )
    def get(self, request, *args, **kwargs):
        return super().get(request, *args, **kwargs)

    def get_queryset(self):
        params = self.request.query_params
        return list_locations(
            area=params.get("area"),
            is_active=_parse_bool(params.get("is_active")),
            search=params.get("search"),
        )


class AreaListView(APIView):
    permission_classes = [IsAuthenticated]
    throttle_scope = "locations"

    @extend_schema(
        tags=["Location Endpoints"],
        summary="List areas",
        responses={200: inline_serializer(name="AreaList", fields={"areas": rf_serializers.ListField()})},
        examples=[OpenApiExample("Areas", value={"areas": ["Shop", "Warehouse"]})],
    )
    def get(self, request):
        return Response({"areas": list_areas()})


class ResolveAreaView(APIView):
    """Resolve a location id, or an area to its General location (created if needed)."""

    permission_classes = [IsAuthenticated]
    throttle_scope = "locations_write"

    @extend_schema(
        tags=["Location Endpoints"],
        summary="Resolve a location or area",
        request=ResolveAreaSerializer,
        responses={
            200: LocationSerializer,
            400: inline_serializer(name="LocationError", fields={"detail": rf_serializers.CharField()}),
        },
    )
    def post(self, request):
        serializer = ResolveAreaSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            location = resolve_location(
                location_id=serializer.validated_data.get("location_id"), area=serializer.validated_data.get("area")
            )
        except MovementEngineError as exc:
            return Response(exc.as_response_data(), status=exc.status_code)
        return Response(LocationSerializer(location).data, status=status.HTTP_200_OK)


class PersonListView(generics.ListAPIView):
    permission_classes = [IsAuthenticated]
    throttle_scope = "locations"
    serializer_class = PersonSerializer

    @extend_schema(
        tags=["Location Endpoints"],
        summary="List people",
        description="List people stock can be assigned to. Filters: department_id, is_active.",
    )
    def get(self, request, *args, **kwargs):
        return super().get(request, *args, **kwargs)

    def get_queryset(self):
        params = self.request.query_params
        return list_people(
            department_id=params.get("department_id"),
            is_active=_parse_bool(params.get("is_active")),
        )


# EOF
