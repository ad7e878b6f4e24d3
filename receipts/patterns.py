"""
Purpose: Per-platform receipt extraction patterns.
What it does:
Ordered regex lists per platform. The parser tries them in order and keeps the
first one that yields a usable value. Receipts come in English and Polish.

Rule: No parsing logic here—just patterns so new receipt layouts need no code changes.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Dict, List, Pattern

from scoring.models import Platform

_I = re.IGNORECASE


@dataclass(frozen=True)
class ReceiptPatterns:
    date: List[Pattern[str]]
    amount: List[Pattern[str]]
    duration: List[Pattern[str]]


# date patterns capture (date, time?)
_DMY_WITH_TIME = re.compile(r"(\d{1,2}[/.]\d{1,2}[/.]\d{2,4})\s*[,\s]+(\d{1,2}:\d{2})", _I)
_ISO_WITH_TIME = re.compile(r"(\d{4}-\d{2}-\d{2})\s*[T\s](\d{2}:\d{2})", _I)

UBER_PATTERNS = ReceiptPatterns(
    date=[
        _DMY_WITH_TIME,
        _ISO_WITH_TIME,
        re.compile(r"(\d{1,2}\s+\w+\s+\d{4})\s*[,\s]+(\d{1,2}:\d{2})", _I),
        re.compile(r"Trip\s+on\s+(\w+\s+\d{1,2},?\s+\d{4})", _I),
    ],
    amount=[
        re.compile(r"(?:Total|Amount|Fare)[:\s]*(?:PLN|zł|€|EUR|\$)?\s*(\d+[.,]\d{2})", _I),
        re.compile(r"(\d+[.,]\d{2})\s*(?:PLN|zł|€|EUR)", _I),
        re.compile(r"(?:PLN|zł|€|EUR)\s*(\d+[.,]\d{2})", _I),
        re.compile(r"Zapłacono[:\s]*(\d+[.,]\d{2})", _I),
    ],
    duration=[
        re.compile(r"(?:Trip\s+time|Duration|Czas)[:\s]*(\d+)\s*(?:min|m)", _I),
        re.compile(r"(\d+)\s*min(?:utes?)?", _I),
        re.compile(r"(\d{1,2}):(\d{2})\s*(?:hrs?|hours?)", _I),
    ],
)

BOLT_PATTERNS = ReceiptPatterns(
    date=[
        _DMY_WITH_TIME,
        _ISO_WITH_TIME,
        re.compile(r"Ride\s+on\s+(\d{1,2}\s+\w+\s+\d{4})", _I),
    ],
    amount=[
        re.compile(r"(?:Total|Suma|Price|Cena)[:\s]*(?:PLN|zł|€|EUR)?\s*(\d+[.,]\d{2})", _I),
        re.compile(r"(\d+[.,]\d{2})\s*(?:PLN|zł)", _I),
        re.compile(r"(?:PLN|zł)\s*(\d+[.,]\d{2})", _I),
    ],
    duration=[
        re.compile(r"(?:Duration|Czas\s+przejazdu)[:\s]*(\d+)\s*(?:min|m)", _I),
        re.compile(r"(\d+)\s*min", _I),
    ],
)

FREENOW_PATTERNS = ReceiptPatterns(
    date=[
        _DMY_WITH_TIME,
        _ISO_WITH_TIME,
        re.compile(r"Trip\s+(\d{1,2}\s+\w+\s+\d{4})", _I),
    ],
    amount=[
        re.compile(r"(?:Total|Suma|Fare)[:\s]*(?:PLN|zł|€|EUR)?\s*(\d+[.,]\d{2})", _I),
        re.compile(r"(\d+[.,]\d{2})\s*(?:PLN|zł|€)", _I),
    ],
    duration=[
        re.compile(r"(?:Trip\s+duration|Czas)[:\s]*(\d+)\s*(?:min|m)", _I),
        re.compile(r"(\d+)\s*min", _I),
    ],
)

PATTERNS_BY_PLATFORM: Dict[Platform, ReceiptPatterns] = {
    Platform.UBER: UBER_PATTERNS,
    Platform.BOLT: BOLT_PATTERNS,
    Platform.FREENOW: FREENOW_PATTERNS,
}

# Used on the date group when locale parsing fails: D/M/Y with any separator.
MANUAL_DATE = re.compile(r"(\d+)[/.,-](\d+)[/.,-](\d{2,4})")
MANUAL_TIME = re.compile(r"(\d{1,2}):(\d{2})")

# checked in order, first hit wins
CURRENCY_MARKERS = [
    ("PLN", re.compile(r"PLN|zł|złoty", _I)),
    ("EUR", re.compile(r"€|EUR", _I)),
    ("USD", re.compile(r"\$|USD", _I)),
]
DEFAULT_CURRENCY = "PLN"

PLATFORM_KEYWORDS = [
    (Platform.UBER, ("uber",)),
    (Platform.BOLT, ("bolt",)),
    (Platform.FREENOW, ("freenow", "free now", "mytaxi")),
]
