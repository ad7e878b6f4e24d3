"""
Purpose: Domain models for the Receipts capability.
What it does:
- ParsedReceipt: the best-effort extraction from pasted receipt text
- ParseConfidence = high | medium | low
- ReceiptDisplay: formatted strings for a receipt card

Rule: No regexes here. Models only.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from scoring.models import Platform


class ParseConfidence(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


@dataclass(frozen=True)
class ParsedReceipt:
    """
    amount == 0 means the amount could not be read (confidence LOW);
    callers treat it as an error state.
    """
    id: str
    platform: Platform
    timestamp: int  # epoch ms
    amount: float
    duration: Optional[int]  # minutes
    currency: str
    raw_text: str
    parse_confidence: ParseConfidence
    errors: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


@dataclass(frozen=True)
class ReceiptDisplay:
    date: str
    time: str
    amount: str
    duration: str
    rev_per_hour: Optional[str]
