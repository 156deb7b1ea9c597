"""Serializers for movement logs and bulk movements (authenticated API)."""

from rest_framework import serializers

from .models import BulkMovement, BulkMovementItem, MovementLog


class MovementLogSerializer(serializers.ModelSerializer):
    product_details = serializers.CharField(source="product.product_details", read_only=True)
    sku = serializers.CharField(source="product.sku", read_only=True, default=None)
    from_location_name = serializers.CharField(source="from_location.name", read_only=True, default=None)
    to_location_name = serializers.CharField(source="to_location.name", read_only=True, default=None)
    from_person_name = serializers.CharField(source="from_person.name", read_only=True, default=None)
    to_person_name = serializers.CharField(source="to_person.name", read_only=True, default=None)

    class Meta:
        model = MovementLog
        fields = [
            "id",
            "product",
            "product_details",
            "sku",
            "bulk_movement",
            "from_location",
            "from_location_name",
            "to_location",
            "to_location_name",
            "from_person",
            "from_person_name",
            "to_person",
            "to_person_name",
            "from_area",
            "to_area",
            "from_stock_level",
            "to_stock_level",
            "quantity_moved",
            "notes",
            "moved_by",
            "status",
            "requires_confirmation",
            "token_expires_at",
            "confirmed_by",
            "confirmed_at",
            "cancelled_at",
            "created_at",
        ]
        read_only_fields = fields


class CreateMovementSerializer(serializers.Serializer):
    product_id = serializers.IntegerField(min_value=1)
    quantity = serializers.IntegerField()
    to_location_id = serializers.IntegerField(min_value=1, required=False, allow_null=True)
    to_person_id = serializers.IntegerField(min_value=1, required=False, allow_null=True)
    to_area = serializers.CharField(max_length=255, required=False, allow_null=True, allow_blank=True)
    from_area = serializers.CharField(max_length=255, required=False, allow_null=True, allow_blank=True)
    requires_confirmation = serializers.BooleanField(required=False, default=False)
    notes = serializers.CharField(max_length=1000, required=False, allow_null=True, allow_blank=True)


class DistributionEntrySerializer(serializers.Serializer):
    to_location_id = serializers.IntegerField(min_value=1, required=False, allow_null=True)
    to_person_id = serializers.IntegerField(min_value=1, required=False, allow_null=True)
    quantity = serializers.IntegerField()
    notes = serializers.CharField(max_length=1000, required=False, allow_null=True, allow_blank=True)


class DistributeStockSerializer(serializers.Serializer):
    product_id = serializers.IntegerField(min_value=1)
    distributions = DistributionEntrySerializer(many=True)


class MovementStatsSerializer(serializers.Serializer):
    total_movements = serializers.IntegerField()
    active_products = serializers.IntegerField()
    most_active_recipients = serializers.ListField(child=serializers.DictField())
    recent_movements = MovementLogSerializer(many=True)


class BulkMovementItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = BulkMovementItem
        fields = [
            "id",
            "product",
            "quantity_sent",
            "quantity_received",
            "sku",
            "product_details",
            "product_image",
            "unit",
        ]
        read_only_fields = fields


class BulkMovementSerializer(serializers.ModelSerializer):
    from_location_name = serializers.CharField(source="from_location.name", read_only=True)
    from_location_area = serializers.CharField(source="from_location.area", read_only=True)
    to_location_name = serializers.CharField(source="to_location.name", read_only=True)
    to_location_area = serializers.CharField(source="to_location.area", read_only=True)
    items = BulkMovementItemSerializer(many=True, read_only=True)
    public_url = serializers.CharField(read_only=True)
    is_expired = serializers.BooleanField(read_only=True)

    class Meta:
        model = BulkMovement
        fields = [
            "id",
            "from_location",
            "from_location_name",
            "from_location_area",
            "to_location",
            "to_location_name",
            "to_location_area",
            "status",
            "public_token",
            "public_url",
            "token_expires_at",
            "is_expired",
            "created_by",
            "confirmed_by",
            "confirmed_at",
            "cancelled_at",
            "notes",
            "items",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class BulkItemInputSerializer(serializers.Serializer):
    product_id = serializers.IntegerField(min_value=1)
    quantity_sent = serializers.IntegerField()


class CreateBulkMovementSerializer(serializers.Serializer):
    from_location_id = serializers.IntegerField(min_value=1, required=False, allow_null=True)
    from_area = serializers.CharField(max_length=255, required=False, allow_null=True, allow_blank=True)
    to_location_id = serializers.IntegerField(min_value=1, required=False, allow_null=True)
    to_area = serializers.CharField(max_length=255, required=False, allow_null=True, allow_blank=True)
    items = BulkItemInputSerializer(many=True)
    notes = serializers.CharField(max_length=1000, required=False, allow_null=True, allow_blank=True)

    def validate(self, attrs):
        if not attrs.get("from_location_id") and not (attrs.get("from_area") or "").strip():
            raise serializers.ValidationError({"from_location_id": "Provide a source location or area."})
        if not attrs.get("to_location_id") and not (attrs.get("to_area") or "").strip():
            raise serializers.ValidationError({"to_location_id": "Provide a destination location or area."})
        return attrs


class UpdateBulkMovementSerializer(serializers.Serializer):
    to_location_id = serializers.IntegerField(min_value=1, required=False, allow_null=True)
    items = BulkItemInputSerializer(many=True, required=False)
    notes = serializers.CharField(max_length=1000, required=False, allow_null=True, allow_blank=True)


# EOF
