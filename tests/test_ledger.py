"""Tests for the wager model and the single-slot ledger."""

import math
from datetime import datetime, timedelta

import pytest

from redbot_ledger.chat.classifier import Classification, Outcome, classify
from redbot_ledger.exceptions import WagerStateError
from redbot_ledger.ledger.models import (
    WagerKind,
    WagerRecord,
    WagerStatus,
    parse_kind,
    sanitize_amount,
)
from redbot_ledger.ledger.wager_ledger import WagerLedger

from tests.conftest import make_record


# ---------------------------------------------------------------------------
# Model
# ---------------------------------------------------------------------------

class TestSanitizeAmount:
    @pytest.mark.parametrize("value, expected", [
        (10, 10),
        ("7", 7),
        (3.9, 3),
        ("12.5", 12),
        (1, 1),
    ])
    def test_usable_values(self, value, expected):
        assert sanitize_amount(value, 2) == expected

    @pytest.mark.parametrize("value", [
        0, 0.5, -4, "", "abc", None, math.nan, math.inf, True, [],
    ])
    def test_unusable_values_fall_back(self, value):
        assert sanitize_amount(value, 2) == 2


class TestWagerRecord:
    def test_settle_once(self):
        record = WagerRecord(id=1, amount=5, kind=WagerKind.RED)
        record.settle(WagerStatus.WON, 10.0)
        assert record.status == WagerStatus.WON
        with pytest.raises(WagerStateError):
            record.settle(WagerStatus.LOST, -5.0)

    def test_cannot_settle_to_pending(self):
        record = WagerRecord(id=1, amount=5, kind=WagerKind.RED)
        with pytest.raises(WagerStateError):
            record.settle(WagerStatus.PENDING)

    def test_not_placed_drops_settlement(self):
        record = WagerRecord(id=1, amount=5, kind=WagerKind.LO)
        record.settle(WagerStatus.NOT_PLACED, 99.0)
        assert record.settlement is None

    def test_dict_layout(self):
        record = WagerRecord(id=7, amount=3, kind=WagerKind.LO, created_at="2025-05-23T10:00:00",
                             status=WagerStatus.LOST, settlement=-3.0)
        assert record.to_dict() == {
            "id": 7,
            "timestamp": "2025-05-23T10:00:00",
            "amount": 3,
            "type": "lo",
            "status": "lost",
            "result": -3.0,
        }
        assert WagerRecord.from_dict(record.to_dict()) == record

    def test_legacy_status_names(self):
        data = {"id": 1, "timestamp": "t", "amount": 2, "type": "red", "status": "win", "result": 2}
        assert WagerRecord.from_dict(data).status == WagerStatus.WON
        data["status"] = "loss"
        assert WagerRecord.from_dict(data).status == WagerStatus.LOST

    def test_created_at_is_utc(self):
        record = WagerRecord(id=1, amount=5, kind=WagerKind.RED)
        assert datetime.fromisoformat(record.created_at).utcoffset() == timedelta(0)

    def test_parse_kind(self):
        assert parse_kind("LO") == WagerKind.LO
        assert parse_kind(WagerKind.UT) == WagerKind.UT
        with pytest.raises(ValueError):
            parse_kind("green")


# ---------------------------------------------------------------------------
# Ledger
# ---------------------------------------------------------------------------

class TestOpen:
    def test_open_creates_pending(self, history):
        ledger = WagerLedger(history)
        record = ledger.open(10, "red")
        assert ledger.pending is record
        assert record.status == WagerStatus.PENDING
        assert record.amount == 10
        assert len(history) == 0

    def test_bad_amount_uses_default(self, history):
        ledger = WagerLedger(history, default_amount=4)
        assert ledger.open("lots", WagerKind.RED).amount == 4
        assert ledger.open(0, WagerKind.RED).amount == 4

    def test_second_open_replaces_first(self, history):
        ledger = WagerLedger(history)
        first = ledger.open(1, "red")
        second = ledger.open(2, "lo")

        resolved = ledger.resolve(WagerStatus.WON, 2.0)

        assert resolved is second
        assert history.records == [second]
        assert first.status == WagerStatus.PENDING

    def test_ids_increase(self, history):
        ledger = WagerLedger(history)
        ids = [ledger.open(1, "red").id for _ in range(5)]
        assert ids == sorted(set(ids))

    def test_ids_continue_after_history(self, history):
        stored = make_record(0)
        stored.id = 10 ** 15
        history.append(stored)
        ledger = WagerLedger(history)
        assert ledger.open(1, "red").id > 10 ** 15


class TestResolve:
    def test_resolve_files_record(self, history):
        ledger = WagerLedger(history)
        ledger.open(5, "red")
        record = ledger.resolve(WagerStatus.LOST, -5.0)

        assert ledger.pending is None
        assert record.status == WagerStatus.LOST
        assert record.settlement == -5.0
        assert history.records == [record]

    def test_resolve_without_pending_is_noop(self, history):
        ledger = WagerLedger(history)
        assert ledger.resolve(WagerStatus.WON, 10.0) is None
        assert len(history) == 0

    def test_resolve_twice_only_records_once(self, history):
        ledger = WagerLedger(history)
        ledger.open(5, "red")
        ledger.resolve(WagerStatus.WON, 5.0)
        assert ledger.resolve(WagerStatus.WON, 5.0) is None
        assert len(history) == 1


class TestApply:
    def test_win(self, history):
        ledger = WagerLedger(history)
        ledger.open(5, "red")
        record = ledger.apply(classify("The game was red. You won 10 bits!"))
        assert record.status == WagerStatus.WON
        assert record.settlement == 10

    def test_loss_is_negative(self, history):
        ledger = WagerLedger(history)
        ledger.open(5, "red")
        record = ledger.apply(classify("The game was green. You lost 5 bits."))
        assert record.status == WagerStatus.LOST
        assert record.settlement == -5

    def test_closed(self, history):
        ledger = WagerLedger(history)
        ledger.open(5, "lo")
        record = ledger.apply(Classification(Outcome.CLOSED))
        assert record.status == WagerStatus.NOT_PLACED
        assert record.settlement is None

    @pytest.mark.parametrize("classification", [
        Classification(Outcome.PLACEMENT, 5.0, WagerKind.RED),
        Classification(Outcome.UNRECOGNIZED),
    ])
    def test_informational_outcomes_leave_pending(self, history, classification):
        ledger = WagerLedger(history)
        record = ledger.open(5, "red")
        assert ledger.apply(classification) is None
        assert ledger.pending is record

    def test_abandon(self, history):
        ledger = WagerLedger(history)
        record = ledger.open(5, "red")
        assert ledger.abandon() is record
        assert ledger.pending is None
        assert len(history) == 0
