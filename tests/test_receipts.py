from datetime import datetime

import pytest

from receipts.models import ParseConfidence, ParsedReceipt
from receipts.parser import (
    auto_detect_platform,
    detect_currency,
    format_receipt_for_display,
    parse_amount,
    parse_date,
    parse_duration,
    parse_receipt,
    receipt_to_earnings_log,
)
from receipts.patterns import BOLT_PATTERNS, UBER_PATTERNS
from scoring.context import to_epoch_ms
from scoring.models import Platform

UBER_RECEIPT = """Uber
Thanks for riding, Anna
Total: PLN 45.50
Trip time: 25 min
2024-03-15T18:30
"""

BOLT_RECEIPT = """Bolt
Suma: 32,40 zł
Czas przejazdu: 18 min
15.03.2024, 21:05
"""


def test_parse_uber_receipt():
    receipt = parse_receipt(UBER_RECEIPT, "uber")

    assert receipt.platform == Platform.UBER
    assert receipt.amount == pytest.approx(45.5)
    assert receipt.duration == 25
    assert receipt.currency == "PLN"
    assert receipt.timestamp == to_epoch_ms(datetime(2024, 3, 15, 18, 30))
    assert receipt.parse_confidence == ParseConfidence.HIGH
    assert receipt.errors == []
    assert receipt.ok
    assert receipt.id.startswith("receipt-")


def test_single_line_receipt_round_trip():
    receipt = parse_receipt("Total: PLN 45.50 ... 25 min ... 2024-03-15T18:30", "uber")

    assert receipt.amount == pytest.approx(45.50)
    assert receipt.duration == 25
    assert receipt.timestamp == to_epoch_ms(datetime(2024, 3, 15, 18, 30))
    assert receipt.parse_confidence == ParseConfidence.HIGH


def test_parse_bolt_receipt_with_autodetect():
    receipt = parse_receipt(BOLT_RECEIPT)

    assert receipt.platform == Platform.BOLT
    assert receipt.amount == pytest.approx(32.4)
    assert receipt.duration == 18
    # day-first date
    assert receipt.timestamp == to_epoch_ms(datetime(2024, 3, 15, 21, 5))
    assert receipt.parse_confidence == ParseConfidence.HIGH


def test_missing_date_is_medium_confidence():
    receipt = parse_receipt("Uber trip. Total: 20.00 PLN", "uber")
    assert receipt.amount == pytest.approx(20.0)
    assert receipt.parse_confidence == ParseConfidence.MEDIUM
    assert receipt.errors == ["Could not parse date/time"]


def test_unreadable_receipt_is_low_confidence():
    receipt = parse_receipt("hello world")

    assert receipt.platform == Platform.UBER
    assert receipt.amount == 0.0
    assert receipt.parse_confidence == ParseConfidence.LOW
    assert "Could not detect platform" in receipt.errors
    assert "Could not parse amount" in receipt.errors
    assert not receipt.ok


@pytest.mark.parametrize("text", ["", None, "🚕" * 50, "Total: abc", "99/99/9999 99:99 Total: 1.00"])
def test_parse_receipt_never_raises(text):
    receipt = parse_receipt(text)
    assert isinstance(receipt, ParsedReceipt)


def test_unknown_platform_hint_falls_back_to_detection():
    receipt = parse_receipt(BOLT_RECEIPT, "lyft")
    assert receipt.platform == Platform.BOLT


def test_raw_text_is_truncated():
    receipt = parse_receipt("Total: 12.00 PLN " + "x" * 1000, "bolt")
    assert len(receipt.raw_text) == 500


def test_amount_patterns():
    assert parse_amount("Paid 45,50 PLN", UBER_PATTERNS.amount) == pytest.approx(45.5)
    assert parse_amount("Fare: €12.00", UBER_PATTERNS.amount) == pytest.approx(12.0)
    assert parse_amount("Total: 0.00 PLN", UBER_PATTERNS.amount) is None
    assert parse_amount("Cena: 19.99", BOLT_PATTERNS.amount) == pytest.approx(19.99)


def test_duration_patterns():
    assert parse_duration("Duration: 14 min", UBER_PATTERNS.duration) == 14
    assert parse_duration("took 1:15 hrs", UBER_PATTERNS.duration) == 75
    # bare minutes outside (0, 300) are rejected
    assert parse_duration("450 min", UBER_PATTERNS.duration) is None
    assert parse_duration("no time here", BOLT_PATTERNS.duration) is None


def test_date_patterns():
    assert parse_date("15/03/2024 18:30", UBER_PATTERNS.date) == datetime(2024, 3, 15, 18, 30)
    assert parse_date("Ride on 3 March 2024", BOLT_PATTERNS.date) == datetime(2024, 3, 3)
    assert parse_date("nothing", UBER_PATTERNS.date) is None


def test_currency_detection():
    assert detect_currency("12,00 zł") == "PLN"
    assert detect_currency("€12.00") == "EUR"
    assert detect_currency("$12.00") == "USD"
    assert detect_currency("12.00") == "PLN"


def test_platform_detection():
    assert auto_detect_platform("Your UBER receipt") == Platform.UBER
    assert auto_detect_platform("Thanks for riding with FREE NOW") == Platform.FREENOW
    assert auto_detect_platform("mytaxi receipt") == Platform.FREENOW
    assert auto_detect_platform("taxi") is None


def test_display_and_earnings_log():
    receipt = parse_receipt(UBER_RECEIPT, "uber")

    display = format_receipt_for_display(receipt)
    assert display.date == "2024-03-15"
    assert display.time == "18:30"
    assert display.amount == "45.50 PLN"
    assert display.duration == "25 min"
    assert display.rev_per_hour == "109.20 PLN/hr"

    log = receipt_to_earnings_log(receipt, "kazimierz")
    assert log.platform == Platform.UBER
    assert log.amount == pytest.approx(45.5)
    assert log.zone == "kazimierz"
    assert log.duration == 25
    assert log.timestamp == receipt.timestamp


def test_display_without_duration():
    receipt = parse_receipt("Uber Total: 20.00 PLN 15/03/2024 10:00", "uber")
    display = format_receipt_for_display(receipt)
    assert display.duration == "Unknown"
    assert display.rev_per_hour is None
