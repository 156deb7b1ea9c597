"""Shapes exposed to whoever holds a confirmation link.

Only what the receiving side needs to check the delivery is exposed; internal
ids of locations and the token itself are left out.
"""

from locations.models import Location
from rest_framework import serializers

from .models import BulkMovement, BulkMovementItem, MovementLog


class PublicLocationSerializer(serializers.ModelSerializer):
    class Meta:
        model = Location
        fields = ["name", "code", "area"]
        read_only_fields = fields


class PublicBulkItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = BulkMovementItem
        fields = ["id", "sku", "product_details", "product_image", "unit", "quantity_sent", "quantity_received"]
        read_only_fields = fields


class PublicBulkMovementSerializer(serializers.ModelSerializer):
    from_location = PublicLocationSerializer(read_only=True)
    to_location = PublicLocationSerializer(read_only=True)
    items = PublicBulkItemSerializer(many=True, read_only=True)
    is_expired = serializers.BooleanField(read_only=True)

    class Meta:
        model = BulkMovement
        fields = [
            "id",
            "from_location",
            "to_location",
            "status",
            "items",
            "notes",
            "created_at",
            "token_expires_at",
            "is_expired",
            "confirmed_by",
            "confirmed_at",
        ]
        read_only_fields = fields


class PublicMovementSerializer(serializers.ModelSerializer):
    product_details = serializers.CharField(source="product.product_details", read_only=True)
    sku = serializers.CharField(source="product.sku", read_only=True, default=None)
    product_image = serializers.CharField(source="product.product_image", read_only=True, default=None)
    from_location = PublicLocationSerializer(read_only=True)
    to_location = PublicLocationSerializer(read_only=True)
    to_person_name = serializers.CharField(source="to_person.name", read_only=True, default=None)
    is_expired = serializers.BooleanField(read_only=True)

    class Meta:
        model = MovementLog
        fields = [
            "id",
            "product_details",
            "sku",
            "product_image",
            "from_location",
            "to_location",
            "to_person_name",
            "quantity_moved",
            "status",
            "notes",
            "created_at",
            "token_expires_at",
            "is_expired",
            "confirmed_by",
            "confirmed_at",
        ]
        read_only_fields = fields


class ConfirmMovementSerializer(serializers.Serializer):
    confirmed_by = serializers.CharField(max_length=255)
    quantity_received = serializers.IntegerField(required=False, allow_null=True)
    notes = serializers.CharField(max_length=1000, required=False, allow_null=True, allow_blank=True)


class ConfirmBulkItemSerializer(serializers.Serializer):
    item_id = serializers.IntegerField(min_value=1)
    quantity_received = serializers.IntegerField()


class ConfirmBulkMovementSerializer(serializers.Serializer):
    confirmed_by = serializers.CharField(max_length=255)
    items = ConfirmBulkItemSerializer(many=True, required=False, default=list)
    notes = serializers.CharField(max_length=1000, required=False, allow_null=True, allow_blank=True)


# EOF
