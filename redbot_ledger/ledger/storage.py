"""
Local key-value storage.

Values are always strings, keyed by name, the way a browser userscript would
keep them in localStorage. JsonFileStore keeps every key in a
single JSON file under the data directory; MemoryStore is for tests and
throwaway sessions.
"""

import json
import logging
from pathlib import Path
from typing import Optional

from redbot_ledger.exceptions import StorageError
from redbot_ledger.ledger.models import sanitize_amount

logger = logging.getLogger(__name__)


class KeyValueStore:
    """String-in, string-out storage addressed by key."""

    def get_item(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def set_item(self, key: str, value: str):
        raise NotImplementedError

    def remove_item(self, key: str):
        raise NotImplementedError


class MemoryStore(KeyValueStore):

    def __init__(self, initial: Optional[dict] = None):
        self._items: dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str):
        self._items[key] = str(value)

    def remove_item(self, key: str):
        self._items.pop(key, None)


class JsonFileStore(KeyValueStore):
    """
    All keys in one JSON object on disk.

    The file is read once and cached; every change rewrites it. If a write
    fails the cached value still holds, so the current process keeps working
    off memory and StorageError tells the caller the disk copy is stale.
    """

    def __init__(self, path):
        self.path = Path(path)
        self._items: Optional[dict[str, str]] = None

    def _load(self) -> dict[str, str]:
        if self._items is not None:
            return self._items

        if not self.path.exists():
            self._items = {}
            return self._items

        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            raise StorageError(f"Cannot read {self.path}: {e}") from e

        if not isinstance(data, dict):
            raise StorageError(f"Cannot read {self.path}: expected a JSON object")

        self._items = {str(k): str(v) for k, v in data.items()}
        return self._items

    def _flush(self):
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "w", encoding="utf-8") as f:
                json.dump(self._items, f, indent=2)
        except OSError as e:
            raise StorageError(f"Cannot write {self.path}: {e}") from e

    def get_item(self, key: str) -> Optional[str]:
        return self._load().get(key)

    def set_item(self, key: str, value: str):
        self._load()[key] = str(value)
        self._flush()

    def remove_item(self, key: str):
        items = self._load()
        if key in items:
            del items[key]
            self._flush()


class StakeMemory:
    """Remembers the last stake the user typed so the next bet starts there."""

    def __init__(self, store: KeyValueStore, key: str, default: int):
        self.store = store
        self.key = key
        self.default = default

    def load(self) -> int:
        try:
            saved = self.store.get_item(self.key)
        except StorageError as e:
            logger.warning("Failed to read last bet amount: %s", e)
            return self.default
        if not saved:
            return self.default
        return sanitize_amount(saved, self.default)

    def save(self, amount) -> int:
        sanitized = sanitize_amount(amount, self.default)
        try:
            self.store.set_item(self.key, str(sanitized))
        except StorageError as e:
            logger.warning("Failed to save last bet amount: %s", e)
        return sanitized
