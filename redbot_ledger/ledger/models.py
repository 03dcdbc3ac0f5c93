"""
Wager records - one row per bet we tried to place.

A record is born pending when the user fires a bet command and is settled
exactly once by whatever RedBot says about the game afterwards.
"""

import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from redbot_ledger.exceptions import WagerStateError


class WagerKind(Enum):
    RED = "red"  # $bet - the game busts at or above 2x
    LO = "lo"    # $lo - the game busts under the low threshold
    UT = "ut"    # $ut - untracked variant, settled like the others


class WagerStatus(Enum):
    PENDING = "pending"
    WON = "won"
    LOST = "lost"
    NOT_PLACED = "not_placed"


# Status strings written by older exports of the history
_LEGACY_STATUSES = {
    "win": WagerStatus.WON,
    "loss": WagerStatus.LOST,
}


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


def sanitize_amount(value, default: int) -> int:
    """Coerce a stake to a whole number of bits, at least 1.

    Anything unusable (non-numeric, NaN, infinite, below 1) becomes `default`.
    This never raises.
    """
    if isinstance(value, bool):
        return default
    try:
        num = float(value)
    except (TypeError, ValueError):
        return default
    if math.isnan(num) or math.isinf(num) or num < 1:
        return default
    return max(1, math.floor(num))


def parse_kind(kind) -> WagerKind:
    """Accept a WagerKind or its string value ("red", "lo", "ut")."""
    if isinstance(kind, WagerKind):
        return kind
    try:
        return WagerKind(str(kind).strip().lower())
    except ValueError:
        raise ValueError(f"Unknown wager kind: {kind!r}") from None


@dataclass
class WagerRecord:
    id: int
    amount: int
    kind: WagerKind
    created_at: str = field(default_factory=_utc_now)
    status: WagerStatus = WagerStatus.PENDING
    settlement: Optional[float] = None  # +won / -lost, None otherwise

    @property
    def is_pending(self) -> bool:
        return self.status == WagerStatus.PENDING

    def settle(self, status: WagerStatus, settlement: Optional[float] = None):
        """Move a pending record to a terminal status. One way, one time."""
        if not self.is_pending:
            raise WagerStateError(
                f"Wager {self.id} already settled as {self.status.value}"
            )
        if status == WagerStatus.PENDING:
            raise WagerStateError("Cannot settle a wager back to pending")

        self.status = status
        self.settlement = settlement if status in (WagerStatus.WON, WagerStatus.LOST) else None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "timestamp": self.created_at,
            "amount": self.amount,
            "type": self.kind.value,
            "status": self.status.value,
            "result": self.settlement,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "WagerRecord":
        raw_status = data.get("status", WagerStatus.PENDING.value)
        status = _LEGACY_STATUSES.get(raw_status) or WagerStatus(raw_status)
        result = data.get("result")
        if result is None and status in (WagerStatus.WON, WagerStatus.LOST):
            raise ValueError(f"{status.value} wager {data.get('id')} has no result")

        return cls(
            id=int(data["id"]),
            amount=int(data["amount"]),
            kind=parse_kind(data["type"]),
            created_at=data.get("timestamp") or _utc_now(),
            status=status,
            settlement=float(result) if result is not None else None,
        )
