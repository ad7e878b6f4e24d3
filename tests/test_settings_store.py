import pytest

from receipts.parser import parse_receipt
from scoring.dual import ScoringMode
from scoring.models import EarningsLog, Platform
from storage.settings_store import EMA_ALPHA, SettingsStore, UserPreferences, context_key

UBER_RECEIPT = "Uber\nTotal: PLN 45.50\nTrip time: 25 min\n2024-03-15T18:30"


def test_earnings_logs_newest_first(store):
    older = EarningsLog.new("uber", 30, "kazimierz", 1_000, 20)
    newer = EarningsLog.new("bolt", 25.5, "airport", 2_000)
    store.save_earnings_log(older)
    store.save_earnings_log(newer)

    logs = store.get_earnings_logs()
    assert [log.id for log in logs] == [newer.id, older.id]
    assert logs[0] == newer
    assert logs[1].duration == 20

    store.delete_earnings_log(newer.id)
    assert [log.id for log in store.get_earnings_logs()] == [older.id]

    store.clear_earnings_logs()
    assert store.get_earnings_logs() == []


def test_selected_zone_and_language(store):
    assert store.get_selected_zone() == "stare-miasto"
    store.set_selected_zone("airport")
    assert store.get_selected_zone() == "airport"

    assert store.get_language() == "en"
    store.set_language("pl")
    assert store.get_language() == "pl"
    with pytest.raises(ValueError):
        store.set_language("de")
    assert store.get_language() == "pl"


def test_visitor_id_is_stable(store, db):
    visitor_id = store.get_or_create_visitor_id()
    assert visitor_id.startswith("visitor-")
    assert store.get_or_create_visitor_id() == visitor_id
    # a second store on the same database sees the same id
    assert SettingsStore(db).get_or_create_visitor_id() == visitor_id


def test_preferences_merge(store):
    assert store.get_preferences() == UserPreferences()

    store.save_preferences(name="Ola", preferred_zones=["kazimierz", "airport"])
    updated = store.save_preferences(temperature=0.5)

    assert updated.name == "Ola"
    assert updated.temperature == 0.5
    assert store.get_preferences() == updated
    assert store.get_preferences().preferred_zones == ["kazimierz", "airport"]

    with pytest.raises(ValueError):
        store.save_preferences(favourite_colour="blue")


def test_scoring_mode_round_trips_through_preferences(store):
    assert store.get_scoring_mode() == ScoringMode.PILOT
    store.set_scoring_mode("PERSONAL")
    assert store.get_scoring_mode() == ScoringMode.PERSONAL
    assert store.get_preferences().name == "Driver"

    with pytest.raises(ValueError):
        store.set_scoring_mode("AUTOPILOT")


def test_receipt_queue_and_import(store):
    receipt = parse_receipt(UBER_RECEIPT, "uber")
    store.save_parsed_receipt(receipt)

    [queued] = store.get_parsed_receipts()
    assert queued == receipt

    log = store.import_receipt(receipt.id, "kazimierz")
    assert log.platform == Platform.UBER
    assert log.amount == pytest.approx(45.5)
    assert log.zone == "kazimierz"
    assert log.duration == 25

    assert store.get_parsed_receipts() == []
    assert [entry.id for entry in store.get_earnings_logs()] == [log.id]

    assert store.import_receipt(receipt.id, "kazimierz") is None


def test_receipt_without_amount_stays_queued(store):
    receipt = parse_receipt("hello world")
    store.save_parsed_receipt(receipt)

    assert store.import_receipt(receipt.id, "kazimierz") is None
    assert [r.id for r in store.get_parsed_receipts()] == [receipt.id]
    assert store.get_earnings_logs() == []

    store.delete_parsed_receipt(receipt.id)
    assert store.get_parsed_receipts() == []


def test_context_ema(store):
    assert context_key("uber", "kazimierz", "WEEKDAY", "midday") == "uber:kazimierz:WEEKDAY:midday"
    assert store.get_context_ema("uber", "kazimierz", "WEEKDAY", "midday") is None

    first = store.update_context_ema("uber", "kazimierz", "WEEKDAY", "midday", 100.0, when_ms=1_000)
    assert first.ema_rev_per_hour == pytest.approx(100.0)
    assert first.sample_count == 1

    second = store.update_context_ema("uber", "kazimierz", "WEEKDAY", "midday", 50.0, when_ms=2_000)
    assert second.ema_rev_per_hour == pytest.approx(EMA_ALPHA * 50 + (1 - EMA_ALPHA) * 100)
    assert second.ema_rev_per_hour == pytest.approx(85.0)
    assert second.sample_count == 2
    assert second.last_updated == 2_000

    assert store.get_context_ema("uber", "kazimierz", "WEEKDAY", "midday") == second
    # other platforms keep their own average
    assert store.get_context_ema("bolt", "kazimierz", "WEEKDAY", "midday") is None


def test_invalid_alpha(db):
    with pytest.raises(ValueError):
        SettingsStore(db, alpha=0)


def test_clear_all_data(store):
    store.save_earnings_log(EarningsLog.new("uber", 30, "kazimierz", 1_000))
    store.set_language("pl")
    store.save_preferences(name="Ola")
    store.update_context_ema("uber", "kazimierz", "WEEKDAY", "midday", 100.0)

    store.clear_all_data()

    assert store.get_earnings_logs() == []
    assert store.get_language() == "en"
    assert store.get_preferences() == UserPreferences()
    assert store.get_context_ema("uber", "kazimierz", "WEEKDAY", "midday") is None
