"""
Purpose: Typed settings tables living next to the offer store.
What it does:
- earnings_logs     : the driver's trip log (newest first)
- app_settings      : scalar key/value (selected zone, language, visitor id)
- user_preferences  : single row (name, preferred zones, notifications, temperature, scoring mode)
- parsed_receipts   : queue of parsed receipts waiting to be imported
- context_ema       : smoothed rev/hour per "platform:zone:dayMode:timeRegime"

ema_new = alpha * sample + (1 - alpha) * ema_old   (alpha = 0.3, first sample seeds)

Rule: Shares the DriverDatabase engine. One transaction per call.
"""

from __future__ import annotations

import json
import logging
import uuid
from dataclasses import dataclass, field, fields, replace
from typing import List, Optional

from sqlalchemy import text

from scoring.context import now_ms
from scoring.dual import ScoringMode
from scoring.models import DayMode, EarningsLog, Platform, TimeRegime
from receipts.models import ParseConfidence, ParsedReceipt
from receipts.parser import receipt_to_earnings_log
from zones.registry import KRAKOW_ZONES

from .database import DriverDatabase

logger = logging.getLogger(__name__)

SUPPORTED_LANGUAGES = ("en", "pl")
EMA_ALPHA = 0.3

SCHEMA = [
    """
    CREATE TABLE IF NOT EXISTS earnings_logs (
        id TEXT PRIMARY KEY,
        platform TEXT NOT NULL CHECK(platform IN ('uber', 'bolt', 'freenow')),
        amount REAL NOT NULL,
        zone TEXT NOT NULL,
        duration REAL,
        timestamp INTEGER NOT NULL
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_earnings_timestamp ON earnings_logs(timestamp)",
    """
    CREATE TABLE IF NOT EXISTS app_settings (
        key TEXT PRIMARY KEY,
        value TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS user_preferences (
        id INTEGER PRIMARY KEY CHECK(id = 1),
        name TEXT NOT NULL,
        preferredZones TEXT NOT NULL,
        notificationsEnabled INTEGER NOT NULL,
        temperature REAL NOT NULL,
        scoringMode TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS parsed_receipts (
        id TEXT PRIMARY KEY,
        platform TEXT NOT NULL,
        timestamp INTEGER NOT NULL,
        amount REAL NOT NULL,
        duration INTEGER,
        currency TEXT NOT NULL,
        rawText TEXT NOT NULL,
        parseConfidence TEXT NOT NULL,
        errors TEXT NOT NULL,
        queuedAtMs INTEGER NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS context_ema (
        key TEXT PRIMARY KEY,
        emaRevPerHour REAL NOT NULL,
        sampleCount INTEGER NOT NULL,
        lastUpdated INTEGER NOT NULL
    )
    """,
]


@dataclass(frozen=True)
class UserPreferences:
    name: str = "Driver"
    preferred_zones: List[str] = field(default_factory=list)
    notifications_enabled: bool = False
    temperature: float = 1.0
    scoring_mode: ScoringMode = ScoringMode.PILOT


@dataclass(frozen=True)
class ContextEma:
    key: str
    ema_rev_per_hour: float
    sample_count: int
    last_updated: int


def context_key(
    platform: str | Platform,
    zone_id: str,
    day_mode: str | DayMode,
    time_regime: str | TimeRegime,
) -> str:
    return f"{Platform(platform).value}:{zone_id}:{DayMode(day_mode).value}:{TimeRegime(time_regime).value}"


def _log_from_row(row) -> EarningsLog:
    return EarningsLog.new(
        platform=row["platform"],
        amount=row["amount"],
        zone=row["zone"],
        timestamp=row["timestamp"],
        duration=row["duration"],
        log_id=row["id"],
    )


def _receipt_from_row(row) -> ParsedReceipt:
    return ParsedReceipt(
        id=row["id"],
        platform=Platform(row["platform"]),
        timestamp=row["timestamp"],
        amount=row["amount"],
        duration=row["duration"],
        currency=row["currency"],
        raw_text=row["rawText"],
        parse_confidence=ParseConfidence(row["parseConfidence"]),
        errors=json.loads(row["errors"]),
    )


class SettingsStore:
    """
    store = SettingsStore(db)   # db already open
    store.save_earnings_log(log)
    """

    def __init__(self, database: DriverDatabase, alpha: float = EMA_ALPHA):
        if not 0 < alpha <= 1:
            raise ValueError("EMA alpha must be within (0, 1]")
        self.database = database
        self.alpha = alpha
        with self.engine.begin() as conn:
            for statement in SCHEMA:
                conn.execute(text(statement))

    @property
    def engine(self):
        return self.database.engine

    # ----------------
    # earnings logs
    # ----------------
    def get_earnings_logs(self) -> List[EarningsLog]:
        with self.engine.begin() as conn:
            rows = conn.execute(
                text("SELECT * FROM earnings_logs ORDER BY timestamp DESC, rowid DESC")
            ).mappings().fetchall()
        return [_log_from_row(r) for r in rows]

    def save_earnings_log(self, log: EarningsLog) -> None:
        with self.engine.begin() as conn:
            self._insert_log(conn, log)

    def _insert_log(self, conn, log: EarningsLog) -> None:
        conn.execute(
            text("""
                INSERT INTO earnings_logs (id, platform, amount, zone, duration, timestamp)
                VALUES (:id, :platform, :amount, :zone, :duration, :timestamp)
            """),
            {
                "id": log.id,
                "platform": Platform(log.platform).value,
                "amount": log.amount,
                "zone": log.zone,
                "duration": log.duration,
                "timestamp": log.timestamp,
            },
        )

    def delete_earnings_log(self, log_id: str) -> None:
        with self.engine.begin() as conn:
            conn.execute(text("DELETE FROM earnings_logs WHERE id = :id"), {"id": log_id})

    def clear_earnings_logs(self) -> None:
        with self.engine.begin() as conn:
            conn.execute(text("DELETE FROM earnings_logs"))

    # ----------------
    # scalar app settings
    # ----------------
    def _get_setting(self, key: str) -> Optional[str]:
        with self.engine.begin() as conn:
            row = conn.execute(
                text("SELECT value FROM app_settings WHERE key = :key"), {"key": key}
            ).fetchone()
        return row[0] if row else None

    def _set_setting(self, key: str, value: str) -> None:
        with self.engine.begin() as conn:
            conn.execute(
                text("""
                    INSERT INTO app_settings (key, value) VALUES (:key, :value)
                    ON CONFLICT (key) DO UPDATE SET value = excluded.value
                """),
                {"key": key, "value": value},
            )

    def get_selected_zone(self) -> str:
        return self._get_setting("selected_zone") or KRAKOW_ZONES[0].id

    def set_selected_zone(self, zone_id: str) -> None:
        self._set_setting("selected_zone", zone_id)

    def get_language(self) -> str:
        return self._get_setting("language") or SUPPORTED_LANGUAGES[0]

    def set_language(self, language: str) -> None:
        if language not in SUPPORTED_LANGUAGES:
            raise ValueError(f"Unsupported language {language!r}; expected one of {SUPPORTED_LANGUAGES}")
        self._set_setting("language", language)

    def get_or_create_visitor_id(self) -> str:
        visitor_id = self._get_setting("visitor_id")
        if visitor_id is None:
            visitor_id = f"visitor-{uuid.uuid4().hex}"
            self._set_setting("visitor_id", visitor_id)
        return visitor_id

    # ----------------
    # user preferences
    # ----------------
    def get_preferences(self) -> UserPreferences:
        with self.engine.begin() as conn:
            row = conn.execute(text("SELECT * FROM user_preferences WHERE id = 1")).mappings().fetchone()
        if not row:
            return UserPreferences()
        return UserPreferences(
            name=row["name"],
            preferred_zones=json.loads(row["preferredZones"]),
            notifications_enabled=bool(row["notificationsEnabled"]),
            temperature=row["temperature"],
            scoring_mode=ScoringMode(row["scoringMode"]),
        )

    def save_preferences(self, **changes) -> UserPreferences:
        """
        Merge `changes` over the stored (or default) preferences.
        """
        known = {f.name for f in fields(UserPreferences)}
        unknown = set(changes) - known
        if unknown:
            raise ValueError(f"Unknown preference fields: {sorted(unknown)}")

        updated = replace(self.get_preferences(), **changes)
        with self.engine.begin() as conn:
            conn.execute(
                text("""
                    INSERT INTO user_preferences (id, name, preferredZones, notificationsEnabled, temperature, scoringMode)
                    VALUES (1, :name, :zones, :notifications, :temperature, :mode)
                    ON CONFLICT (id) DO UPDATE SET
                        name = excluded.name,
                        preferredZones = excluded.preferredZones,
                        notificationsEnabled = excluded.notificationsEnabled,
                        temperature = excluded.temperature,
                        scoringMode = excluded.scoringMode
                """),
                {
                    "name": updated.name,
                    "zones": json.dumps(list(updated.preferred_zones)),
                    "notifications": 1 if updated.notifications_enabled else 0,
                    "temperature": updated.temperature,
                    "mode": ScoringMode(updated.scoring_mode).value,
                },
            )
        return updated

    def get_scoring_mode(self) -> ScoringMode:
        return self.get_preferences().scoring_mode

    def set_scoring_mode(self, mode: str | ScoringMode) -> None:
        self.save_preferences(scoring_mode=ScoringMode(mode))

    # ----------------
    # parsed receipts queue
    # ----------------
    def get_parsed_receipts(self) -> List[ParsedReceipt]:
        with self.engine.begin() as conn:
            rows = conn.execute(
                text("SELECT * FROM parsed_receipts ORDER BY queuedAtMs DESC, rowid DESC")
            ).mappings().fetchall()
        return [_receipt_from_row(r) for r in rows]

    def save_parsed_receipt(self, receipt: ParsedReceipt) -> None:
        with self.engine.begin() as conn:
            conn.execute(
                text("""
                    INSERT INTO parsed_receipts (
                        id, platform, timestamp, amount, duration, currency,
                        rawText, parseConfidence, errors, queuedAtMs
                    ) VALUES (
                        :id, :platform, :timestamp, :amount, :duration, :currency,
                        :raw_text, :confidence, :errors, :queued
                    )
                """),
                {
                    "id": receipt.id,
                    "platform": Platform(receipt.platform).value,
                    "timestamp": receipt.timestamp,
                    "amount": receipt.amount,
                    "duration": receipt.duration,
                    "currency": receipt.currency,
                    "raw_text": receipt.raw_text,
                    "confidence": ParseConfidence(receipt.parse_confidence).value,
                    "errors": json.dumps(list(receipt.errors)),
                    "queued": now_ms(),
                },
            )

    def delete_parsed_receipt(self, receipt_id: str) -> None:
        with self.engine.begin() as conn:
            conn.execute(text("DELETE FROM parsed_receipts WHERE id = :id"), {"id": receipt_id})

    def import_receipt(self, receipt_id: str, zone_id: str) -> Optional[EarningsLog]:
        """
        Move a queued receipt into the earnings log. None if the receipt is
        unknown or its amount could not be read.
        """
        with self.engine.begin() as conn:
            row = conn.execute(
                text("SELECT * FROM parsed_receipts WHERE id = :id"), {"id": receipt_id}
            ).mappings().fetchone()
            if not row:
                return None

            receipt = _receipt_from_row(row)
            if receipt.amount <= 0:
                logger.warning("Receipt %s has no amount; not importing", receipt_id)
                return None

            log = receipt_to_earnings_log(receipt, zone_id)
            self._insert_log(conn, log)
            conn.execute(text("DELETE FROM parsed_receipts WHERE id = :id"), {"id": receipt_id})
        return log

    # ----------------
    # context EMA
    # ----------------
    def get_context_ema(
        self,
        platform: str | Platform,
        zone_id: str,
        day_mode: str | DayMode,
        time_regime: str | TimeRegime,
    ) -> Optional[ContextEma]:
        key = context_key(platform, zone_id, day_mode, time_regime)
        with self.engine.begin() as conn:
            row = conn.execute(
                text("SELECT * FROM context_ema WHERE key = :key"), {"key": key}
            ).mappings().fetchone()
        if not row:
            return None
        return ContextEma(
            key=row["key"],
            ema_rev_per_hour=row["emaRevPerHour"],
            sample_count=row["sampleCount"],
            last_updated=row["lastUpdated"],
        )

    def update_context_ema(
        self,
        platform: str | Platform,
        zone_id: str,
        day_mode: str | DayMode,
        time_regime: str | TimeRegime,
        sample_rev_per_hour: float,
        when_ms: Optional[int] = None,
    ) -> ContextEma:
        key = context_key(platform, zone_id, day_mode, time_regime)
        when_ms = now_ms() if when_ms is None else when_ms
        current = self.get_context_ema(platform, zone_id, day_mode, time_regime)

        if current is None:
            updated = ContextEma(key=key, ema_rev_per_hour=sample_rev_per_hour, sample_count=1, last_updated=when_ms)
        else:
            updated = ContextEma(
                key=key,
                ema_rev_per_hour=self.alpha * sample_rev_per_hour + (1 - self.alpha) * current.ema_rev_per_hour,
                sample_count=current.sample_count + 1,
                last_updated=when_ms,
            )

        with self.engine.begin() as conn:
            conn.execute(
                text("""
                    INSERT INTO context_ema (key, emaRevPerHour, sampleCount, lastUpdated)
                    VALUES (:key, :ema, :count, :updated)
                    ON CONFLICT (key) DO UPDATE SET
                        emaRevPerHour = excluded.emaRevPerHour,
                        sampleCount = excluded.sampleCount,
                        lastUpdated = excluded.lastUpdated
                """),
                {
                    "key": key,
                    "ema": updated.ema_rev_per_hour,
                    "count": updated.sample_count,
                    "updated": updated.last_updated,
                },
            )
        return updated

    # ----------------
    # maintenance
    # ----------------
    def clear_all_data(self) -> None:
        with self.engine.begin() as conn:
            for table in ("earnings_logs", "app_settings", "user_preferences", "parsed_receipts", "context_ema"):
                conn.execute(text(f"DELETE FROM {table}"))
        logger.info("Cleared all settings tables")
