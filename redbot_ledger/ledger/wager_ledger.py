"""
Wager Ledger - one bet in flight, everything else is history.

RedBot only ever tracks one wager per player per game, so neither do we:
opening a new bet while one is pending replaces it, and the replaced one is
never recorded.
"""

import logging
import time
from typing import Optional

from redbot_ledger.chat.classifier import Classification, Outcome
from redbot_ledger.ledger.history import HistoryStore
from redbot_ledger.ledger.models import (
    WagerKind,
    WagerRecord,
    WagerStatus,
    parse_kind,
    sanitize_amount,
)

logger = logging.getLogger(__name__)

_OUTCOME_STATUS = {
    Outcome.CLOSED: WagerStatus.NOT_PLACED,
    Outcome.WIN: WagerStatus.WON,
    Outcome.LOSS: WagerStatus.LOST,
}


class WagerLedger:
    """Idle -> Pending -> (resolved, handed to history) -> Idle."""

    def __init__(self, history: HistoryStore, default_amount: int = 2):
        self.history = history
        self.default_amount = default_amount
        self._pending: Optional[WagerRecord] = None
        self._last_id = max((r.id for r in history.records), default=0)

    @property
    def pending(self) -> Optional[WagerRecord]:
        return self._pending

    def _next_id(self) -> int:
        self._last_id = max(int(time.time() * 1000), self._last_id + 1)
        return self._last_id

    def open(self, amount, kind) -> WagerRecord:
        """Start tracking a new bet. Bad amounts fall back to the default."""
        wager_kind: WagerKind = parse_kind(kind)
        stake = sanitize_amount(amount, self.default_amount)

        if self._pending is not None:
            logger.debug(
                "Replacing unresolved wager %s (%s %s bits)",
                self._pending.id, self._pending.kind.value, self._pending.amount,
            )

        self._pending = WagerRecord(id=self._next_id(), amount=stake, kind=wager_kind)
        logger.info("Wager opened: %s bits on %s", stake, wager_kind.value)
        return self._pending

    def resolve(self, status: WagerStatus,
                settlement: Optional[float] = None) -> Optional[WagerRecord]:
        """Settle the pending wager and file it. Nothing pending, nothing done."""
        record = self._pending
        if record is None:
            logger.debug("Ignoring %s with no pending wager", status.value)
            return None

        record.settle(status, settlement)
        self._pending = None
        self.history.append(record)

        if record.settlement is None:
            logger.info("Wager %s: %s", record.id, record.status.value)
        else:
            logger.info("Wager %s: %s (%+g bits)", record.id, record.status.value, record.settlement)
        return record

    def apply(self, classification: Classification) -> Optional[WagerRecord]:
        """Feed a classified chat message into the ledger."""
        status = _OUTCOME_STATUS.get(classification.outcome)
        if status is None:
            return None

        settlement = None
        if classification.outcome == Outcome.WIN:
            settlement = classification.amount
        elif classification.outcome == Outcome.LOSS:
            settlement = -classification.amount

        return self.resolve(status, settlement)

    def abandon(self) -> Optional[WagerRecord]:
        """Drop the pending wager without recording it."""
        record, self._pending = self._pending, None
        return record
