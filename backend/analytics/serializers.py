from rest_framework import serializers
from .models import VisitorLocation


class LocationPingSerializer(serializers.Serializer):
    """
    Incoming ping. Field names follow the app's camelCase JSON.
    """
    visitorId = serializers.CharField(max_length=128)
    latitude = serializers.FloatField()
    longitude = serializers.FloatField()
    zone = serializers.CharField(max_length=64, required=False, allow_null=True, allow_blank=True)

    def create(self, validated_data):
        return VisitorLocation.objects.create(
            visitor_id=validated_data["visitorId"],
            latitude=validated_data["latitude"],
            longitude=validated_data["longitude"],
            zone=validated_data.get("zone") or None,
        )


class VisitorLocationSerializer(serializers.ModelSerializer):
    visitorId = serializers.CharField(source="visitor_id")
    createdAt = serializers.DateTimeField(source="created_at")

    class Meta:
        model = VisitorLocation
        fields = ["id", "visitorId", "latitude", "longitude", "zone", "createdAt"]
        read_only_fields = fields


class AdminLoginSerializer(serializers.Serializer):
    password = serializers.CharField(allow_blank=True, trim_whitespace=False)
