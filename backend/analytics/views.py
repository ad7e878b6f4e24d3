import logging
import secrets
from datetime import timedelta

from django.conf import settings
from django.db import DatabaseError
from django.db.models import Count
from django.utils import timezone
from rest_framework import permissions, status
from rest_framework.response import Response
from rest_framework.views import APIView

from .authentication import AdminTokenAuthentication, HasAdminSession
from .models import AdminSession, VisitorLocation
from .serializers import AdminLoginSerializer, LocationPingSerializer, VisitorLocationSerializer

logger = logging.getLogger(__name__)

SESSION_DURATION = timedelta(hours=24)
RECENT_WINDOW = timedelta(hours=24)
MAX_LOCATIONS = 500


def recent_locations():
    # .order_by() drops Meta.ordering so DISTINCT / GROUP BY stay on the selected columns
    return VisitorLocation.objects.filter(created_at__gt=timezone.now() - RECENT_WINDOW).order_by()


class LocationView(APIView):
    """
    Public: anonymous location pings from the driver app.
    """
    authentication_classes = []
    permission_classes = [permissions.AllowAny]

    def post(self, request):
        serializer = LocationPingSerializer(data=request.data)
        if not serializer.is_valid():
            return Response({"error": "Missing required fields", "fields": serializer.errors},
                            status=status.HTTP_400_BAD_REQUEST)
        try:
            serializer.save()
        except DatabaseError as e:
            logger.error(f"Failed to save location: {e}")
            return Response({"error": "Failed to save location"}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)
        return Response({"success": True})


class AdminLoginView(APIView):
    """
    Exchange the shared admin password for a 24h bearer token.
    """
    authentication_classes = []
    permission_classes = [permissions.AllowAny]

    def post(self, request):
        serializer = AdminLoginSerializer(data=request.data)
        password = serializer.validated_data["password"] if serializer.is_valid() else ""

        if not password or not secrets.compare_digest(password.encode(), settings.ADMIN_PASSWORD.encode()):
            return Response({"error": "Invalid password"}, status=status.HTTP_401_UNAUTHORIZED)

        now = timezone.now()
        AdminSession.objects.filter(expires_at__lt=now).delete()

        session = AdminSession.objects.create(
            token=secrets.token_hex(32),
            expires_at=now + SESSION_DURATION,
        )
        return Response({"token": session.token, "expiresAt": session.expires_at.isoformat()})


class AdminLocationsView(APIView):
    """
    Last 24h of pings, newest first, capped at 500.
    """
    authentication_classes = [AdminTokenAuthentication]
    permission_classes = [HasAdminSession]

    def get(self, request):
        locations = recent_locations().order_by("-created_at", "-id")[:MAX_LOCATIONS]
        return Response({"locations": VisitorLocationSerializer(locations, many=True).data})


class AdminStatsView(APIView):
    authentication_classes = [AdminTokenAuthentication]
    permission_classes = [HasAdminSession]

    def get(self, request):
        locations = recent_locations()
        zone_stats = {}
        for row in locations.values("zone").annotate(count=Count("id")):
            key = row["zone"] or "unknown"
            zone_stats[key] = zone_stats.get(key, 0) + row["count"]

        return Response({
            "totalLocations": locations.count(),
            "uniqueVisitors": locations.values("visitor_id").distinct().count(),
            "zoneStats": zone_stats,
        })
