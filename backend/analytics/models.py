from django.db import models
from django.utils import timezone


class VisitorLocation(models.Model):
    """
    One anonymous location ping from the driver app.
    Zone is the nearest catalog zone id resolved on the device (may be empty).
    """
    visitor_id = models.CharField(max_length=128, db_index=True)
    latitude = models.FloatField()
    longitude = models.FloatField()
    zone = models.CharField(max_length=64, blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return f"{self.visitor_id} @ {self.zone or 'unknown'}"


class AdminSession(models.Model):
    """
    Bearer token issued by the admin login. Valid until expires_at.
    """
    token = models.CharField(max_length=64, unique=True)
    expires_at = models.DateTimeField()
    created_at = models.DateTimeField(auto_now_add=True)

    def is_valid(self, now=None):
        return self.expires_at > (now or timezone.now())

    def __str__(self):
        return f"AdminSession(expires {self.expires_at.isoformat()})"
