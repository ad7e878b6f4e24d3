#Purpose: Anonymous location pings to the analytics backend.
#Sole responsibility: POST {visitorId, latitude, longitude, zone} to /api/location.
#Fire-and-forget: a failed ping is logged and reported as False, never raised.
#It should not contain zone detection rules beyond picking the nearest zone.

from __future__ import annotations

import logging
import uuid
from typing import Optional, Sequence

import requests
from sqlalchemy.exc import SQLAlchemyError

from config import settings
from zones.detector import find_nearest_zone
from zones.models import Zone
from zones.registry import KRAKOW_ZONES

logger = logging.getLogger(__name__)


class LocationReportError(Exception):
    """Custom exception for analytics backend errors."""
    pass


class LocationReporter:
    """
    Location reporter / client

    - Resolves the nearest zone for a sample
    - Sends it to the backend with a stable visitor id
    """

    def __init__(
        self,
        settings_store=None,
        base_url: Optional[str] = None,
        timeout: Optional[int] = None,
        zones: Sequence[Zone] = KRAKOW_ZONES,
    ):
        self.settings_store = settings_store
        self.base_url = (base_url or settings.api_url).rstrip("/")
        self.timeout = timeout or settings.api_timeout
        self.zones = zones
        self._visitor_id: Optional[str] = None

        if not self.base_url:
            raise ValueError("Analytics API URL not set. Please set DRIVERADAR_API_URL in the .env file.")

    def visitor_id(self) -> str:
        """
        Persisted through the settings store; a throwaway id when the store is unavailable.
        """
        if self._visitor_id is None:
            try:
                if self.settings_store is not None:
                    self._visitor_id = self.settings_store.get_or_create_visitor_id()
            except SQLAlchemyError as e:
                logger.warning(f"Could not load visitor id: {e}")
            if self._visitor_id is None:
                self._visitor_id = f"visitor-{uuid.uuid4().hex}"
        return self._visitor_id

    def send(self, latitude: float, longitude: float, zone_id: Optional[str]) -> None:
        """
        POST one ping. Raises LocationReportError on a non-success answer.
        """
        response = requests.post(
            f"{self.base_url}/api/location",
            json={
                "visitorId": self.visitor_id(),
                "latitude": latitude,
                "longitude": longitude,
                "zone": zone_id,
            },
            timeout=self.timeout,
        )
        if not response.ok:
            raise LocationReportError(f"Location endpoint answered {response.status_code}")

    def report(self, latitude: float, longitude: float) -> bool:
        zone = find_nearest_zone(latitude, longitude, self.zones)
        zone_id = zone.id if zone else None
        try:
            self.send(latitude, longitude, zone_id)
        except (requests.RequestException, LocationReportError) as e:
            logger.warning(f"Failed to send location: {e}")
            return False
        return True
