from datetime import datetime

import pytest

from scoring.context import to_epoch_ms
from storage.database import DriverDatabase
from storage.settings_store import SettingsStore

# Wednesday, inside the midday band
WEDNESDAY_NOON = datetime(2024, 3, 13, 12, 0)


class FakeClock:
    def __init__(self, start_ms: int):
        self.now = start_ms

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


@pytest.fixture
def clock():
    return FakeClock(to_epoch_ms(WEDNESDAY_NOON))


@pytest.fixture
def db(tmp_path, clock):
    database = DriverDatabase(f"sqlite:///{tmp_path / 'driver.db'}", clock=clock)
    database.open()
    yield database
    database.close()


@pytest.fixture
def store(db):
    return SettingsStore(db)
