"""Serializers for inventory domain.

Read-only product/audit representations plus the write inputs of the
column-move, transfer and validation endpoints.
"""

from common.choices import ColumnStatus, ValidationColumn
from rest_framework import serializers

from .models import Product, ProductValidation, TransferLog


class ProductSerializer(serializers.ModelSerializer):
    """Read-only representation of a product with its placement."""

    location_name = serializers.CharField(source="location.name", read_only=True, default=None)
    location_area = serializers.CharField(source="location.area", read_only=True, default=None)
    person_name = serializers.CharField(source="assigned_to_person.name", read_only=True, default=None)

    class Meta:
        model = Product
        fields = [
            "id",
            "kanban",
            "column_status",
            "product_details",
            "product_link",
            "location",
            "location_name",
            "location_area",
            "assigned_to_person",
            "person_name",
            "preferred_receive_kanban",
            "priority",
            "stock_level",
            "source_product",
            "product_image",
            "category",
            "tags",
            "supplier",
            "sku",
            "dimensions",
            "weight",
            "unit",
            "unit_price",
            "notes",
            "is_draft",
            "column_entered_at",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class ProductValidationSerializer(serializers.ModelSerializer):
    class Meta:
        model = ProductValidation
        fields = [
            "id",
            "product",
            "column_status",
            "recipient_name",
            "location",
            "received_image",
            "storage_photo",
            "validated_by",
            "notes",
            "created_at",
        ]
        read_only_fields = fields


class TransferLogSerializer(serializers.ModelSerializer):
    class Meta:
        model = TransferLog
        fields = [
            "id",
            "product",
            "from_kanban",
            "to_kanban",
            "from_column",
            "to_column",
            "from_location",
            "to_location",
            "transfer_type",
            "notes",
            "transferred_by",
            "created_at",
        ]
        read_only_fields = fields


class MoveColumnSerializer(serializers.Serializer):
    column_status = serializers.ChoiceField(choices=ColumnStatus.choices)


class TransferProductSerializer(serializers.Serializer):
    to_kanban_id = serializers.IntegerField(min_value=1)
    notes = serializers.CharField(max_length=1000, required=False, allow_blank=True, default="")


class CreateValidationSerializer(serializers.Serializer):
    product_id = serializers.IntegerField(min_value=1)
    column_status = serializers.ChoiceField(choices=ValidationColumn.choices)
    recipient_name = serializers.CharField(max_length=255)
    location_id = serializers.IntegerField(min_value=1, required=False, allow_null=True)
    received_image = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    storage_photo = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    notes = serializers.CharField(max_length=1000, required=False, allow_null=True, allow_blank=True)


# EOF
