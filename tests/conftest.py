"""Shared fixtures for the ledger tests."""

import pytest

from redbot_ledger.config import BettingConfig, ChatConfig, RedBotConfig, StorageConfig
from redbot_ledger.exceptions import StorageError
from redbot_ledger.ledger.history import HistoryStore
from redbot_ledger.ledger.models import WagerKind, WagerRecord, WagerStatus
from redbot_ledger.ledger.storage import MemoryStore
from redbot_ledger.session import RedBotSession


class FailingStore(MemoryStore):
    """Reads fine, every write blows up like a full disk."""

    def set_item(self, key, value):
        raise StorageError("quota exceeded")

    def remove_item(self, key):
        raise StorageError("quota exceeded")


@pytest.fixture
def config(tmp_path):
    return RedBotConfig(
        chat=ChatConfig(bot_sender="redbot"),
        storage=StorageConfig(data_dir=str(tmp_path)),
        betting=BettingConfig(default_bet=2, history_page_size=30, enable_ut=False),
    )


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def history(store):
    h = HistoryStore(store, "redbot_bet_history")
    h.load()
    return h


@pytest.fixture
def session(config, store):
    s = RedBotSession(config, store=store)
    s.init()
    yield s
    s.dispose()


def make_record(i: int, status=WagerStatus.WON) -> WagerRecord:
    settlement = {WagerStatus.WON: float(i), WagerStatus.LOST: -float(i)}.get(status)
    return WagerRecord(
        id=1000 + i,
        amount=i + 1,
        kind=WagerKind.RED,
        status=status,
        settlement=settlement,
    )
