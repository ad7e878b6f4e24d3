from django.utils import timezone
from rest_framework import permissions
from rest_framework.authentication import BaseAuthentication
from rest_framework.exceptions import AuthenticationFailed

from .models import AdminSession


class AdminUser:
    """
    Stand-in user for requests carrying a valid admin token.
    There is a single shared admin password, so there are no admin accounts.
    """
    is_authenticated = True
    is_anonymous = False
    username = "admin"


class AdminTokenAuthentication(BaseAuthentication):
    """
    Authorization: Bearer <token>, checked against AdminSession by expiry.
    """
    keyword = "Bearer"

    def authenticate(self, request):
        header = request.META.get("HTTP_AUTHORIZATION", "")
        parts = header.split()
        if not parts or parts[0] != self.keyword:
            return None
        if len(parts) != 2:
            raise AuthenticationFailed("Invalid token header")

        session = AdminSession.objects.filter(token=parts[1], expires_at__gt=timezone.now()).first()
        if session is None:
            raise AuthenticationFailed("Unauthorized")
        return (AdminUser(), session)

    def authenticate_header(self, request):
        # makes DRF answer 401 (not 403) when the header is missing
        return self.keyword


class HasAdminSession(permissions.BasePermission):
    def has_permission(self, request, view):
        return isinstance(request.auth, AdminSession)
