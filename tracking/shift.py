"""
Purpose: Shift tracker (the glue between GPS samples and the session store).
What it does:
- start / stop / resume a shift (one active session at a time)
- threads the zone hysteresis state through location samples, one at a time
- on a committed zone change: closes the open dwell with the distance driven
  inside it, then opens a dwell for the new zone
- reports dwell minutes in the current zone (feeds idle recommendations)

Rule: Samples must be delivered sequentially. Store errors are logged and
leave the tracker state as it was.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError

from offers.models import Session, ZoneDwell
from zones.detector import detect_zone_with_hysteresis, haversine_km
from zones.models import INITIAL_ZONE_STATE, LatLng, Zone, ZoneState
from zones.policy import ZoneDetectionPolicy, default_detection_policy
from zones.registry import KRAKOW_ZONES, get_zone_name

logger = logging.getLogger(__name__)

MS_PER_MINUTE = 60_000

# accuracy assumed when the platform does not report one
DEFAULT_ACCURACY_M = 100.0


@dataclass(frozen=True)
class ShiftState:
    is_active: bool = False
    session: Optional[Session] = None
    current_zone_id: Optional[str] = None
    current_zone_name: Optional[str] = None
    dwell_minutes: float = 0.0


class ShiftTracker:
    def __init__(
        self,
        database,
        zones: Sequence[Zone] = KRAKOW_ZONES,
        policy: Optional[ZoneDetectionPolicy] = None,
    ):
        self.database = database
        self.zones = zones
        self.policy = policy or default_detection_policy()
        self._reset()

    def _reset(self, session: Optional[Session] = None) -> None:
        self.session: Optional[Session] = session
        self.zone_state: ZoneState = INITIAL_ZONE_STATE
        self.current_dwell: Optional[ZoneDwell] = None
        self.distance_km: float = 0.0
        self.last_location: Optional[LatLng] = None

    def _now(self) -> int:
        return self.database.clock()

    # ----------------
    # lifecycle
    # ----------------
    def resume(self) -> ShiftState:
        """
        Pick up an active session left by a previous run, seeding the zone
        state from its open dwell.
        """
        try:
            session = self.database.get_active_session()
            dwell = self.database.get_open_dwell(session.id) if session else None
        except SQLAlchemyError as e:
            logger.error(f"Could not resume shift: {e}")
            return self.state()

        self._reset(session)
        if dwell is not None:
            self.current_dwell = dwell
            self.zone_state = ZoneState(current_zone_id=dwell.zone_id)
        return self.state()

    def start_shift(self) -> ShiftState:
        try:
            session = self.database.start_session()
        except SQLAlchemyError as e:
            logger.error(f"Could not start shift: {e}")
            return self.state()

        if self.session is not None and self.session.id == session.id:
            # already tracking this session
            return self.state()

        self._reset(session)
        logger.info("Shift started (session %s)", session.id)
        return self.state()

    def stop_shift(self) -> ShiftState:
        if self.session is None:
            return self.state()
        try:
            if self.current_dwell is not None:
                self.database.close_dwell(self.current_dwell.id, self.distance_km)
            self.database.stop_session(self.session.id)
        except SQLAlchemyError as e:
            logger.error(f"Could not stop shift {self.session.id}: {e}")
            return self.state()

        logger.info("Shift stopped (session %s)", self.session.id)
        self._reset()
        return self.state()

    # ----------------
    # location samples
    # ----------------
    def handle_location(
        self,
        lat: float,
        lng: float,
        accuracy_m: Optional[float] = None,
        when_ms: Optional[int] = None,
    ) -> ShiftState:
        if self.session is None:
            return self.state()

        ts = self._now() if when_ms is None else when_ms
        accuracy = DEFAULT_ACCURACY_M if accuracy_m is None else accuracy_m

        # every fix counts toward distance, including ones the accuracy gate drops below
        if self.last_location is not None:
            last_lat, last_lng = self.last_location
            self.distance_km += haversine_km(last_lat, last_lng, lat, lng)
        self.last_location = (lat, lng)

        previous_zone = self.zone_state.current_zone_id
        new_state = detect_zone_with_hysteresis(lat, lng, accuracy, ts, self.zone_state, self.zones, self.policy)
        if new_state.current_zone_id == previous_zone:
            self.zone_state = new_state
            return self.state()

        try:
            if self.current_dwell is not None:
                self.database.close_dwell(self.current_dwell.id, self.distance_km)
                self.current_dwell = None
                self.distance_km = 0.0
            if new_state.current_zone_id is not None:
                self.current_dwell = self.database.open_dwell(self.session.id, new_state.current_zone_id)
        except SQLAlchemyError as e:
            logger.error(f"Could not record zone change to {new_state.current_zone_id}: {e}")
            return self.state()

        self.zone_state = new_state
        return self.state()

    # ----------------
    # views
    # ----------------
    def dwell_minutes(self, now_ms: Optional[int] = None) -> float:
        if self.current_dwell is None:
            return 0.0
        now_ms = self._now() if now_ms is None else now_ms
        return max(0.0, (now_ms - self.current_dwell.start_ms) / MS_PER_MINUTE)

    def state(self) -> ShiftState:
        zone_id = self.current_dwell.zone_id if self.current_dwell else None
        return ShiftState(
            is_active=self.session is not None,
            session=self.session,
            current_zone_id=zone_id,
            current_zone_name=get_zone_name(zone_id) if zone_id else None,
            dwell_minutes=self.dwell_minutes(),
        )
