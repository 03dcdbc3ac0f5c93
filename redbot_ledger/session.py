"""
The Session - one chat tab, one ledger.

Wires the pieces together:
1. Chat lines come in through on_message()
2. Lines not from RedBot are dropped, repeats are suppressed
3. What's left gets classified and fed to the ledger
4. Settled wagers land in the history, listeners get poked

The user side goes the other way: open_wager() starts tracking a bet and
hands the command to the dispatcher.
"""

import logging
from typing import Iterable, Optional

from redbot_ledger.chat.classifier import (
    Classification,
    DuplicateGuard,
    Outcome,
    classify,
    is_from_bot,
)
from redbot_ledger.commands import CommandDispatcher, DispatchResult
from redbot_ledger.config import RedBotConfig
from redbot_ledger.exceptions import SessionError
from redbot_ledger.ledger.history import HistoryListener, HistoryPage, HistoryStore
from redbot_ledger.ledger.models import WagerRecord, parse_kind
from redbot_ledger.ledger.storage import JsonFileStore, KeyValueStore, StakeMemory
from redbot_ledger.ledger.wager_ledger import WagerLedger

logger = logging.getLogger(__name__)


class RedBotSession:
    """
    Explicitly constructed, explicitly torn down.

    Nothing is shared between sessions except what they read from the same
    store. Use init()/dispose() or a with-block.
    """

    def __init__(self, config: RedBotConfig, store: Optional[KeyValueStore] = None,
                 dispatcher: Optional[CommandDispatcher] = None):
        self.config = config
        self.store = store if store is not None else JsonFileStore(config.storage_path)
        self.dispatcher = dispatcher
        self.history = HistoryStore(self.store, config.storage.history_key)
        self.stake = StakeMemory(self.store, config.storage.last_bet_key,
                                 config.betting.default_bet)
        self.guard = DuplicateGuard()
        self.ledger: Optional[WagerLedger] = None
        self.active = False

    def __enter__(self):
        self.init()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.dispose()
        return False

    def init(self):
        if self.active:
            return
        self.history.load()
        self.ledger = WagerLedger(self.history, self.config.betting.default_bet)
        self.guard.reset()
        self.active = True
        logger.info("Session started with %d bets in history", len(self.history))

    def dispose(self):
        """Tear down. A wager still pending here is lost, not recorded."""
        if not self.active:
            return
        abandoned = self.ledger.abandon()
        if abandoned is not None:
            logger.warning(
                "Session closed with wager %s (%s bits on %s) unresolved; it will not be recorded",
                abandoned.id, abandoned.amount, abandoned.kind.value,
            )
        self.active = False
        logger.info("Session closed")

    def _require_active(self):
        if not self.active:
            raise SessionError("Session is not initialised; call init() first")

    @property
    def pending(self) -> Optional[WagerRecord]:
        self._require_active()
        return self.ledger.pending

    @property
    def last_stake(self) -> int:
        return self.stake.load()

    def on_message(self, sender: str, text: str) -> Optional[Classification]:
        """Handle one observed chat line. Returns None if it was skipped."""
        self._require_active()

        if not is_from_bot(sender, self.config.chat.bot_sender):
            return None

        text = text.strip() if isinstance(text, str) else ""
        if not self.guard.admit(text):
            logger.debug("Skipping repeated message: %r", text)
            return None

        result = classify(text)
        if result.outcome == Outcome.PLACEMENT:
            logger.info("RedBot confirmed %g bits on %s", result.amount, result.kind.value)
        self.ledger.apply(result)
        return result

    def on_messages(self, messages: Iterable[tuple[str, str]]) -> list[Classification]:
        """Batched delivery, handled in order."""
        handled = []
        for sender, text in messages:
            result = self.on_message(sender, text)
            if result is not None:
                handled.append(result)
        return handled

    def open_wager(self, amount, kind) -> WagerRecord:
        """User pressed a bet button: remember the stake, track it, send it."""
        self._require_active()
        wager_kind = parse_kind(kind)
        stake = self.stake.save(amount)
        record = self.ledger.open(stake, wager_kind)

        if self.dispatcher is not None:
            self.dispatcher.place_wager(record.kind, record.amount)
        return record

    def check_balance(self) -> Optional[DispatchResult]:
        if self.dispatcher is None:
            return None
        return self.dispatcher.check_balance()

    def paginate(self, page: int = 0, page_size: Optional[int] = None) -> HistoryPage:
        self._require_active()
        return self.history.paginate(page, page_size or self.config.betting.history_page_size)

    def clear_history(self):
        self._require_active()
        self.history.clear()

    def subscribe(self, listener: HistoryListener):
        self.history.subscribe(listener)

    def unsubscribe(self, listener: HistoryListener):
        self.history.unsubscribe(listener)
