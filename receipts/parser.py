"""
Purpose: Best-effort receipt text parser (pasted Uber / Bolt / FreeNow receipts).
What it does:
- amount   : first pattern that parses to a positive float ("45,50" -> 45.5)
- duration : "H:MM hrs" or bare minutes; bare minutes must lie in (0, 300)
- date     : pandas on the captured text first, then manual D/M/Y [H:M]
             (noon when no time is present)
- currency : PLN > EUR > USD by marker, PLN when none is found

Confidence:
high   = amount and date parsed
medium = amount parsed, something else failed
low    = amount missing (amount is 0)

Rule: parse_receipt never raises. Failures are listed in `errors`.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional, Sequence

import pandas as pd

from scoring.context import now_ms, to_datetime
from scoring.models import EarningsLog, Platform

from .models import ParseConfidence, ParsedReceipt, ReceiptDisplay
from .patterns import (
    CURRENCY_MARKERS,
    DEFAULT_CURRENCY,
    MANUAL_DATE,
    MANUAL_TIME,
    PATTERNS_BY_PLATFORM,
    PLATFORM_KEYWORDS,
)

RAW_TEXT_LIMIT = 500
MAX_BARE_MINUTES = 300


def parse_amount(text: str, patterns: Sequence) -> Optional[float]:
    for pattern in patterns:
        match = pattern.search(text)
        if not match:
            continue
        try:
            amount = float(match.group(1).replace(",", "."))
        except ValueError:
            continue
        if amount > 0:
            return amount
    return None


def parse_duration(text: str, patterns: Sequence) -> Optional[int]:
    for pattern in patterns:
        match = pattern.search(text)
        if not match:
            continue
        if pattern.groups >= 2 and match.group(2):
            return int(match.group(1)) * 60 + int(match.group(2))
        minutes = int(match.group(1))
        if 0 < minutes < MAX_BARE_MINUTES:
            return minutes
    return None


def _manual_date(date_part: str, time_part: Optional[str]) -> Optional[datetime]:
    parts = MANUAL_DATE.search(date_part)
    if not parts:
        return None

    day, month, year = (int(p) for p in parts.groups())
    if year < 100:
        year += 2000

    hours, minutes = 12, 0
    time_match = MANUAL_TIME.search(time_part) if time_part else None
    if time_match:
        hours, minutes = int(time_match.group(1)), int(time_match.group(2))

    try:
        return datetime(year, month, day, hours, minutes)
    except ValueError:
        return None


def parse_date(text: str, patterns: Sequence) -> Optional[datetime]:
    for pattern in patterns:
        match = pattern.search(text)
        if not match:
            continue

        date_part = match.group(1)
        time_part = match.group(2) if pattern.groups >= 2 else None
        candidate = date_part + (f" {time_part}" if time_part else "")

        # ISO dates are year-first; everything else on these receipts is day-first
        dayfirst = not date_part[:4].isdigit()
        parsed = pd.to_datetime(candidate, dayfirst=dayfirst, errors="coerce")
        if not pd.isna(parsed):
            return parsed.to_pydatetime()

        manual = _manual_date(date_part, time_part)
        if manual is not None:
            return manual
    return None


def detect_currency(text: str) -> str:
    for currency, marker in CURRENCY_MARKERS:
        if marker.search(text):
            return currency
    return DEFAULT_CURRENCY


def auto_detect_platform(text: str) -> Optional[Platform]:
    lower = text.lower()
    for platform, keywords in PLATFORM_KEYWORDS:
        if any(keyword in lower for keyword in keywords):
            return platform
    return None


def _receipt_id() -> str:
    return f"receipt-{now_ms()}-{uuid.uuid4().hex[:9]}"


def parse_receipt(text: str, platform: Optional[str | Platform] = None) -> ParsedReceipt:
    """
    Parse pasted receipt text. Without a platform hint the platform is
    detected from keywords; unknown receipts are read with Uber patterns.
    """
    text = text or ""
    errors = []

    try:
        resolved = Platform(platform) if platform else None
    except ValueError:
        resolved = None
    if resolved is None:
        resolved = auto_detect_platform(text)
    if resolved is None:
        resolved = Platform.UBER
        errors.append("Could not detect platform")

    patterns = PATTERNS_BY_PLATFORM[resolved]

    amount = parse_amount(text, patterns.amount)
    duration = parse_duration(text, patterns.duration)
    date = parse_date(text, patterns.date)
    currency = detect_currency(text)

    if amount is None:
        errors.append("Could not parse amount")
    if date is None:
        errors.append("Could not parse date/time")

    if amount is None:
        confidence = ParseConfidence.LOW
    elif errors:
        confidence = ParseConfidence.MEDIUM
    else:
        confidence = ParseConfidence.HIGH

    timestamp = int(date.timestamp() * 1000) if date is not None else now_ms()

    return ParsedReceipt(
        id=_receipt_id(),
        platform=resolved,
        timestamp=timestamp,
        amount=amount or 0.0,
        duration=duration,
        currency=currency,
        raw_text=text[:RAW_TEXT_LIMIT],
        parse_confidence=confidence,
        errors=errors,
    )


def format_receipt_for_display(receipt: ParsedReceipt) -> ReceiptDisplay:
    moment = to_datetime(receipt.timestamp)
    rev_per_hour = None
    if receipt.duration and receipt.duration > 0:
        hourly = receipt.amount / receipt.duration * 60
        rev_per_hour = f"{hourly:.2f} {receipt.currency}/hr"

    return ReceiptDisplay(
        date=moment.strftime("%Y-%m-%d"),
        time=moment.strftime("%H:%M"),
        amount=f"{receipt.amount:.2f} {receipt.currency}",
        duration=f"{receipt.duration} min" if receipt.duration else "Unknown",
        rev_per_hour=rev_per_hour,
    )


def receipt_to_earnings_log(receipt: ParsedReceipt, zone_id: str) -> EarningsLog:
    return EarningsLog.new(
        platform=receipt.platform,
        amount=receipt.amount,
        zone=zone_id,
        timestamp=receipt.timestamp,
        duration=receipt.duration,
    )
