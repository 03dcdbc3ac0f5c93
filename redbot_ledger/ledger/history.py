"""
History Store - the durable bet journal.

Newest first, append only, no size cap. The only way anything leaves is
clear(), which takes everything with it.
"""

import json
import logging
import math
from dataclasses import dataclass, field, replace
from typing import Callable

from redbot_ledger.exceptions import StorageError
from redbot_ledger.ledger.models import WagerRecord, WagerStatus
from redbot_ledger.ledger.storage import KeyValueStore

logger = logging.getLogger(__name__)

HistoryListener = Callable[[str], None]


@dataclass
class HistoryPage:
    items: list[WagerRecord] = field(default_factory=list)
    current_page: int = 0
    total_pages: int = 0
    total_items: int = 0
    has_prev: bool = False
    has_next: bool = False


class HistoryStore:
    """
    Ordered record sequence plus paginated read access.

    Memory is authoritative. Every change is written through to the
    key-value store straight away; if that write fails we log it and carry on,
    so a full disk costs durability, never the running session.
    """

    def __init__(self, store: KeyValueStore, key: str):
        self.store = store
        self.key = key
        self._records: list[WagerRecord] = []
        self._listeners: list[HistoryListener] = []

    def __len__(self) -> int:
        return len(self._records)

    @property
    def records(self) -> list[WagerRecord]:
        """Copy of the full history, newest first. Changing it changes nothing."""
        return [replace(r) for r in self._records]

    def load(self):
        """(Re)load the history from storage."""
        self._records = []
        try:
            raw = self.store.get_item(self.key)
        except StorageError as e:
            logger.warning("Failed to load bet history: %s", e)
            return

        if not raw:
            return

        try:
            entries = json.loads(raw)
        except ValueError as e:
            logger.warning("Bet history is not valid JSON, starting empty: %s", e)
            return

        if not isinstance(entries, list):
            logger.warning("Bet history is not a list, starting empty")
            return

        for entry in entries:
            try:
                self._records.append(WagerRecord.from_dict(entry))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning("Skipping unreadable history entry %r: %s", entry, e)

    def append(self, record: WagerRecord):
        """Put a record at the front of the history and persist."""
        self._records.insert(0, record)
        self._save()
        self._notify("append")

    def clear(self):
        """Throw the whole history away. There is no undo."""
        self._records = []
        try:
            self.store.remove_item(self.key)
        except StorageError as e:
            logger.warning("Failed to clear bet history: %s", e)
        self._notify("clear")

    def paginate(self, page: int = 0, page_size: int = 30) -> HistoryPage:
        if page_size < 1:
            raise ValueError(f"page_size must be at least 1, got {page_size}")

        total = len(self._records)
        start = page * page_size
        end = start + page_size
        items = [replace(r) for r in self._records[start:end]] if page >= 0 else []

        return HistoryPage(
            items=items,
            current_page=page,
            total_pages=math.ceil(total / page_size),
            total_items=total,
            has_prev=page > 0,
            has_next=end < total,
        )

    def summary(self) -> dict:
        """Counts and net result across the whole history."""
        won = [r for r in self._records if r.status == WagerStatus.WON]
        lost = [r for r in self._records if r.status == WagerStatus.LOST]
        not_placed = sum(1 for r in self._records if r.status == WagerStatus.NOT_PLACED)
        settled = len(won) + len(lost)

        return {
            "total": len(self._records),
            "won": len(won),
            "lost": len(lost),
            "not_placed": not_placed,
            "net": sum(r.settlement or 0.0 for r in won + lost),
            "win_rate": len(won) / settled if settled else 0.0,
        }

    def subscribe(self, listener: HistoryListener):
        if listener not in self._listeners:
            self._listeners.append(listener)

    def unsubscribe(self, listener: HistoryListener):
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _save(self):
        payload = json.dumps([r.to_dict() for r in self._records])
        try:
            self.store.set_item(self.key, payload)
        except StorageError as e:
            logger.warning("Failed to save bet history: %s", e)

    def _notify(self, event: str):
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception("History listener failed on %s", event)
