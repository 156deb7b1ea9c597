"""Serializers for locations, people and area resolution."""

from rest_framework import serializers

from .models import Location, Person


class LocationSerializer(serializers.ModelSerializer):
    """Read-only representation of a location."""

    is_general = serializers.BooleanField(read_only=True)

    class Meta:
        model = Location
        fields = [
            "id",
            "area",
            "name",
            "code",
            "building",
            "floor",
            "capacity",
            "description",
            "is_active",
            "is_general",
            "created_at",
        ]
        read_only_fields = fields


class PersonSerializer(serializers.ModelSerializer):
    department_name = serializers.CharField(source="department.name", read_only=True)

    class Meta:
        model = Person
        fields = ["id", "name", "department", "department_name", "is_active"]
        read_only_fields = fields


class ResolveAreaSerializer(serializers.Serializer):
    location_id = serializers.IntegerField(min_value=1, required=False, allow_null=True)
    area = serializers.CharField(max_length=255, trim_whitespace=True, required=False, allow_blank=True)

    def validate(self, attrs):
        if not attrs.get("location_id") and not attrs.get("area"):
            raise serializers.ValidationError("Provide a location_id or an area.")
        return attrs


# EOF
