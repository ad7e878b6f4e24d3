"""
Purpose: Local relational store for sessions, zone dwells and offers.
What it does:
- Owns one SQLAlchemy engine over a SQLite file (open() / close(), or `with`)
- Session lifecycle: at most one active session, stopping force-closes the open dwell
- Dwell bookkeeping: open / close with a distance estimate
- Offers: append, feedback, recent list, per-bucket aggregates, money-proof counters
- CSV export of every offer

Rule: Plain SQL via sqlalchemy.text. Every public call is one transaction.
"""

from __future__ import annotations

import csv
import io
import json
import logging
from datetime import datetime, timezone
from typing import Callable, List, Optional

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine

from config import settings
from offers.models import (
    BucketStats,
    Feedback,
    MoneyProofCounters,
    Offer,
    OfferInput,
    Session,
    SessionStatus,
    ZoneDwell,
)
from offers.policy import OfferPolicy, default_offer_policy
from scoring.context import now_ms, resolve_context
from scoring.models import Platform, TimeRegime

logger = logging.getLogger(__name__)

MS_PER_DAY = 24 * 60 * 60 * 1000
MS_PER_HOUR = 60 * 60 * 1000

SCHEMA = [
    """
    CREATE TABLE IF NOT EXISTS sessions (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        startMs INTEGER NOT NULL,
        endMs INTEGER,
        status TEXT NOT NULL DEFAULT 'active' CHECK(status IN ('active', 'completed'))
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS zone_dwells (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        sessionId INTEGER NOT NULL,
        zoneId TEXT NOT NULL,
        startMs INTEGER NOT NULL,
        endMs INTEGER,
        distanceEstKm REAL DEFAULT 0,
        timeRegime TEXT NOT NULL,
        dayType TEXT NOT NULL,
        FOREIGN KEY (sessionId) REFERENCES sessions(id) ON DELETE CASCADE
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS offers (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        sessionId INTEGER,
        platform TEXT NOT NULL CHECK(platform IN ('uber', 'bolt', 'freenow')),
        pickupZone TEXT NOT NULL,
        destZone TEXT NOT NULL,
        fare REAL NOT NULL,
        etaMinutes REAL NOT NULL,
        distanceKm REAL,
        surgeFlag INTEGER DEFAULT 0,
        note TEXT,
        createdAtMs INTEGER NOT NULL,
        timeRegime TEXT NOT NULL,
        dayType TEXT NOT NULL,
        recommendationAction TEXT,
        recommendationConfidence TEXT,
        modelVersion TEXT DEFAULT 'v1',
        scoreComponents TEXT,
        feedback TEXT CHECK(feedback IS NULL OR feedback IN ('FOLLOWED', 'IGNORED')),
        actualFare REAL,
        actualDurationMin REAL,
        FOREIGN KEY (sessionId) REFERENCES sessions(id) ON DELETE SET NULL
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_offers_created ON offers(createdAtMs)",
    "CREATE INDEX IF NOT EXISTS idx_offers_bucket ON offers(destZone, timeRegime, dayType, platform)",
    "CREATE INDEX IF NOT EXISTS idx_dwells_session ON zone_dwells(sessionId)",
    "CREATE INDEX IF NOT EXISTS idx_sessions_status ON sessions(status)",
]

CSV_HEADER = [
    "id", "platform", "pickupZone", "destZone", "fare", "etaMinutes", "distanceKm",
    "surgeFlag", "createdAt", "timeRegime", "dayType", "recommendation", "confidence",
    "feedback", "actualFare", "actualDurationMin",
]


class StoreNotOpenError(RuntimeError):
    """Raised when the store is used before open() or after close()."""
    pass


def _enable_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys = ON")
    cursor.close()


def _session_from_row(row) -> Session:
    return Session(
        id=row["id"],
        start_ms=row["startMs"],
        end_ms=row["endMs"],
        status=SessionStatus(row["status"]),
    )


def _dwell_from_row(row) -> ZoneDwell:
    return ZoneDwell(
        id=row["id"],
        session_id=row["sessionId"],
        zone_id=row["zoneId"],
        start_ms=row["startMs"],
        end_ms=row["endMs"],
        distance_est_km=row["distanceEstKm"] or 0.0,
        time_regime=TimeRegime(row["timeRegime"]),
        day_type=row["dayType"],
    )


def _offer_from_row(row) -> Offer:
    return Offer(
        id=row["id"],
        session_id=row["sessionId"],
        platform=Platform(row["platform"]),
        pickup_zone=row["pickupZone"],
        dest_zone=row["destZone"],
        fare=row["fare"],
        eta_minutes=row["etaMinutes"],
        distance_km=row["distanceKm"],
        surge_flag=bool(row["surgeFlag"]),
        note=row["note"],
        created_at_ms=row["createdAtMs"],
        time_regime=TimeRegime(row["timeRegime"]),
        day_type=row["dayType"],
        recommendation_action=row["recommendationAction"],
        recommendation_confidence=row["recommendationConfidence"],
        model_version=row["modelVersion"],
        score_components=row["scoreComponents"],
        feedback=Feedback(row["feedback"]) if row["feedback"] else None,
        actual_fare=row["actualFare"],
        actual_duration_min=row["actualDurationMin"],
    )


def _csv_value(value) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _iso_utc(ms: int) -> str:
    moment = datetime.fromtimestamp(ms / 1000, tz=timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


class DriverDatabase:
    """
    Explicitly constructed store. The caller owns the lifecycle:

    with DriverDatabase("sqlite:///driveradar.db") as db:
        session = db.start_session()
    """

    def __init__(
        self,
        url: Optional[str] = None,
        clock: Callable[[], int] = now_ms,
        policy: Optional[OfferPolicy] = None,
    ):
        self.url = url or settings.database_url
        self.clock = clock  # epoch ms
        self.policy = policy or default_offer_policy()
        self._engine: Optional[Engine] = None

    # ----------------
    # lifecycle
    # ----------------
    def open(self) -> DriverDatabase:
        if self._engine is not None:
            return self
        engine = create_engine(self.url)
        event.listen(engine, "connect", _enable_foreign_keys)
        with engine.begin() as conn:
            for statement in SCHEMA:
                conn.execute(text(statement))
        self._engine = engine
        logger.info("Opened driver database at %s", self.url)
        return self

    def close(self) -> None:
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None

    def __enter__(self) -> DriverDatabase:
        return self.open()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            raise StoreNotOpenError("DriverDatabase is not open. Call open() first.")
        return self._engine

    # ----------------
    # sessions
    # ----------------
    def start_session(self) -> Session:
        """
        Idempotent: returns the active session when one already exists.
        """
        with self.engine.begin() as conn:
            row = conn.execute(
                text("SELECT * FROM sessions WHERE status = 'active' LIMIT 1")
            ).mappings().fetchone()
            if row:
                return _session_from_row(row)

            ts = self.clock()
            result = conn.execute(
                text("INSERT INTO sessions (startMs, status) VALUES (:ts, 'active')"),
                {"ts": ts},
            )
            return Session(id=result.lastrowid, start_ms=ts)

    def stop_session(self, session_id: int) -> None:
        ts = self.clock()
        with self.engine.begin() as conn:
            conn.execute(
                text("UPDATE sessions SET endMs = :ts, status = 'completed' WHERE id = :id"),
                {"ts": ts, "id": session_id},
            )
            conn.execute(
                text("UPDATE zone_dwells SET endMs = :ts WHERE sessionId = :id AND endMs IS NULL"),
                {"ts": ts, "id": session_id},
            )

    def get_active_session(self) -> Optional[Session]:
        with self.engine.begin() as conn:
            row = conn.execute(
                text("SELECT * FROM sessions WHERE status = 'active' LIMIT 1")
            ).mappings().fetchone()
        return _session_from_row(row) if row else None

    # ----------------
    # zone dwells
    # ----------------
    def open_dwell(self, session_id: int, zone_id: str) -> ZoneDwell:
        ts = self.clock()
        context = resolve_context(ts)
        with self.engine.begin() as conn:
            result = conn.execute(
                text("""
                    INSERT INTO zone_dwells (sessionId, zoneId, startMs, timeRegime, dayType)
                    VALUES (:session_id, :zone_id, :ts, :regime, :day_type)
                """),
                {
                    "session_id": session_id,
                    "zone_id": zone_id,
                    "ts": ts,
                    "regime": context.time_regime.value,
                    "day_type": context.day_type,
                },
            )
        return ZoneDwell(
            id=result.lastrowid,
            session_id=session_id,
            zone_id=zone_id,
            start_ms=ts,
            time_regime=context.time_regime,
            day_type=context.day_type,
        )

    def close_dwell(self, dwell_id: int, distance_est_km: float) -> None:
        # a closed dwell keeps its first end time and distance
        with self.engine.begin() as conn:
            conn.execute(
                text("UPDATE zone_dwells SET endMs = :ts, distanceEstKm = :km WHERE id = :id AND endMs IS NULL"),
                {"ts": self.clock(), "km": distance_est_km, "id": dwell_id},
            )

    def get_open_dwell(self, session_id: int) -> Optional[ZoneDwell]:
        with self.engine.begin() as conn:
            row = conn.execute(
                text("""
                    SELECT * FROM zone_dwells
                    WHERE sessionId = :id AND endMs IS NULL
                    ORDER BY startMs DESC LIMIT 1
                """),
                {"id": session_id},
            ).mappings().fetchone()
        return _dwell_from_row(row) if row else None

    def get_dwells_for_session(self, session_id: int) -> List[ZoneDwell]:
        with self.engine.begin() as conn:
            rows = conn.execute(
                text("SELECT * FROM zone_dwells WHERE sessionId = :id ORDER BY startMs, id"),
                {"id": session_id},
            ).mappings().fetchall()
        return [_dwell_from_row(r) for r in rows]

    # ----------------
    # offers
    # ----------------
    def save_offer(
        self,
        offer: OfferInput,
        session_id: Optional[int] = None,
        recommendation_action: Optional[str] = None,
        recommendation_confidence: Optional[str] = None,
        score_components: Optional[dict] = None,
    ) -> Offer:
        ts = self.clock()
        context = resolve_context(ts)
        components_json = json.dumps(score_components) if score_components else None
        params = {
            "session_id": session_id,
            "platform": Platform(offer.platform).value,
            "pickup": offer.pickup_zone,
            "dest": offer.dest_zone,
            "fare": offer.fare,
            "eta": offer.eta_minutes,
            "distance": offer.distance_km,
            "surge": 1 if offer.surge_flag else 0,
            "note": offer.note,
            "ts": ts,
            "regime": context.time_regime.value,
            "day_type": context.day_type,
            "action": recommendation_action,
            "confidence": recommendation_confidence,
            "version": self.policy.model_version,
            "components": components_json,
        }
        with self.engine.begin() as conn:
            result = conn.execute(
                text("""
                    INSERT INTO offers (
                        sessionId, platform, pickupZone, destZone, fare, etaMinutes, distanceKm,
                        surgeFlag, note, createdAtMs, timeRegime, dayType,
                        recommendationAction, recommendationConfidence, modelVersion, scoreComponents
                    ) VALUES (
                        :session_id, :platform, :pickup, :dest, :fare, :eta, :distance,
                        :surge, :note, :ts, :regime, :day_type,
                        :action, :confidence, :version, :components
                    )
                """),
                params,
            )

        return Offer(
            id=result.lastrowid,
            session_id=session_id,
            platform=Platform(offer.platform),
            pickup_zone=offer.pickup_zone,
            dest_zone=offer.dest_zone,
            fare=offer.fare,
            eta_minutes=offer.eta_minutes,
            distance_km=offer.distance_km,
            surge_flag=offer.surge_flag,
            note=offer.note,
            created_at_ms=ts,
            time_regime=context.time_regime,
            day_type=context.day_type,
            recommendation_action=recommendation_action,
            recommendation_confidence=recommendation_confidence,
            model_version=self.policy.model_version,
            score_components=components_json,
        )

    def record_feedback(
        self,
        offer_id: int,
        feedback: str | Feedback,
        actual_fare: Optional[float] = None,
        actual_duration_min: Optional[float] = None,
    ) -> None:
        with self.engine.begin() as conn:
            conn.execute(
                text("""
                    UPDATE offers SET feedback = :feedback, actualFare = :fare, actualDurationMin = :duration
                    WHERE id = :id
                """),
                {
                    "feedback": Feedback(feedback).value,
                    "fare": actual_fare,
                    "duration": actual_duration_min,
                    "id": offer_id,
                },
            )

    def get_recent_offers(self, limit: int = 50) -> List[Offer]:
        with self.engine.begin() as conn:
            rows = conn.execute(
                text("SELECT * FROM offers ORDER BY createdAtMs DESC, id DESC LIMIT :limit"),
                {"limit": limit},
            ).mappings().fetchall()
        return [_offer_from_row(r) for r in rows]

    def get_stats_for_bucket(
        self,
        dest_zone: str,
        time_regime: str | TimeRegime,
        day_type: str,
        platform: str | Platform,
    ) -> Optional[BucketStats]:
        """
        None when no offer matches the bucket.
        avg_rev_per_hour = avg fare / avg eta * 60
        """
        recent_since = self.clock() - self.policy.recent_window_days * MS_PER_DAY
        regime = TimeRegime(time_regime)
        platform = Platform(platform)

        with self.engine.begin() as conn:
            row = conn.execute(
                text("""
                    SELECT
                        COUNT(*) AS total,
                        SUM(CASE WHEN createdAtMs >= :since THEN 1 ELSE 0 END) AS recent,
                        AVG(fare) AS avg_fare,
                        AVG(etaMinutes) AS avg_eta,
                        SUM(CASE WHEN feedback = 'FOLLOWED' THEN 1 ELSE 0 END) AS followed
                    FROM offers
                    WHERE destZone = :dest AND timeRegime = :regime AND dayType = :day_type AND platform = :platform
                """),
                {
                    "since": recent_since,
                    "dest": dest_zone,
                    "regime": regime.value,
                    "day_type": day_type,
                    "platform": platform.value,
                },
            ).mappings().fetchone()

        if not row or not row["total"]:
            return None

        avg_eta = row["avg_eta"] or 0
        avg_rev_per_hour = (row["avg_fare"] / avg_eta) * 60 if avg_eta > 0 else 0.0

        return BucketStats(
            platform=platform,
            dest_zone=dest_zone,
            time_regime=regime,
            day_type=day_type,
            sample_count=row["total"],
            recent_sample_count=row["recent"] or 0,
            avg_rev_per_hour=avg_rev_per_hour,
            acceptance_ratio=(row["followed"] or 0) / row["total"],
        )

    def _hourly_since(self, conn, since: int, feedback_clause: str) -> tuple[int, float]:
        row = conn.execute(
            text(f"""
                SELECT
                    COUNT(*) AS count,
                    SUM(COALESCE(actualFare, fare)) AS total,
                    SUM(COALESCE(actualDurationMin, etaMinutes)) AS minutes
                FROM offers
                WHERE createdAtMs >= :since AND {feedback_clause}
            """),
            {"since": since},
        ).mappings().fetchone()
        minutes = row["minutes"] or 0
        hourly = (row["total"] / minutes) * 60 if minutes > 0 else 0.0
        return row["count"] or 0, hourly

    def get_money_proof_counters(self) -> MoneyProofCounters:
        """
        Last N hours: every offer with feedback (baseline) vs the ones the driver followed.
        """
        since = self.clock() - self.policy.money_proof_window_hours * MS_PER_HOUR
        with self.engine.begin() as conn:
            baseline_count, baseline_hourly = self._hourly_since(conn, since, "feedback IS NOT NULL")
            followed_count, followed_hourly = self._hourly_since(conn, since, "feedback = 'FOLLOWED'")

        return MoneyProofCounters(
            baseline_hourly=baseline_hourly,
            followed_hourly=followed_hourly,
            baseline_count=baseline_count,
            followed_count=followed_count,
        )

    # ----------------
    # maintenance / export
    # ----------------
    def delete_all_data(self) -> None:
        with self.engine.begin() as conn:
            conn.execute(text("DELETE FROM zone_dwells"))
            conn.execute(text("DELETE FROM offers"))
            conn.execute(text("DELETE FROM sessions"))
        logger.info("Deleted all sessions, dwells and offers")

    def export_offers_csv(self) -> str:
        with self.engine.begin() as conn:
            rows = conn.execute(
                text("SELECT * FROM offers ORDER BY createdAtMs, id")
            ).mappings().fetchall()

        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator="\n")
        writer.writerow(CSV_HEADER)
        for row in rows:
            writer.writerow([
                row["id"],
                row["platform"],
                row["pickupZone"],
                row["destZone"],
                _csv_value(row["fare"]),
                _csv_value(row["etaMinutes"]),
                _csv_value(row["distanceKm"]),
                "1" if row["surgeFlag"] else "0",
                _iso_utc(row["createdAtMs"]),
                row["timeRegime"],
                row["dayType"],
                _csv_value(row["recommendationAction"]),
                _csv_value(row["recommendationConfidence"]),
                _csv_value(row["feedback"]),
                _csv_value(row["actualFare"]),
                _csv_value(row["actualDurationMin"]),
            ])
        return buffer.getvalue().rstrip("\n")
