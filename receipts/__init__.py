"""
Receipts domain package.

Public API:
- Domain models: ParsedReceipt, ParseConfidence, ReceiptDisplay
- Parsing: parse_receipt, auto_detect_platform
- Helpers: format_receipt_for_display, receipt_to_earnings_log
"""
from .models import ParseConfidence, ParsedReceipt, ReceiptDisplay
from .parser import (
    auto_detect_platform,
    format_receipt_for_display,
    parse_receipt,
    receipt_to_earnings_log,
)

__all__ = [
    "ParseConfidence",
    "ParsedReceipt",
    "ReceiptDisplay",
    "auto_detect_platform",
    "format_receipt_for_display",
    "parse_receipt",
    "receipt_to_earnings_log",
]
