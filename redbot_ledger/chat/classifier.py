"""
Message Classifier - reading RedBot's mind, one chat line at a time.

RedBot announces everything in plain English: the bet it took, the moment
betting closes, and whether the game went our way. Each line is checked
against an ordered rule table and the first hit wins:

1. Placement confirmation - "You have bet 10 bits on the next game being red"
2. Round closed          - "... bets are now closed ..."
3. Win                   - "The game was red. You won 20 bits!"
4. Loss                  - "The game was green. You lost 10 bits."

Anything else is UNRECOGNIZED. Nothing in here raises on bad input.
"""

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from redbot_ledger.ledger.models import WagerKind

logger = logging.getLogger(__name__)


class Outcome(Enum):
    PLACEMENT = "placement"
    CLOSED = "closed"
    WIN = "win"
    LOSS = "loss"
    UNRECOGNIZED = "unrecognized"


@dataclass(frozen=True)
class Classification:
    outcome: Outcome
    amount: Optional[float] = None
    kind: Optional[WagerKind] = None  # only known for placement confirmations

    @property
    def recognized(self) -> bool:
        return self.outcome != Outcome.UNRECOGNIZED


UNRECOGNIZED = Classification(Outcome.UNRECOGNIZED)


def _placement(match: re.Match) -> Classification:
    kind = WagerKind.LO if match.group(2).lower().startswith("under") else WagerKind.RED
    return Classification(Outcome.PLACEMENT, float(match.group(1)), kind)


def _closed(match: re.Match) -> Classification:
    return Classification(Outcome.CLOSED)


def _win(match: re.Match) -> Classification:
    return Classification(Outcome.WIN, float(match.group(1)))


def _loss(match: re.Match) -> Classification:
    return Classification(Outcome.LOSS, float(match.group(1)))


RULES: list[tuple[re.Pattern, Callable[[re.Match], Classification]]] = [
    (re.compile(r"You have bet (\d+(?:\.\d+)?) bits on the next game being "
                r"(red|under \d+(?:\.\d+)?x)", re.IGNORECASE), _placement),
    (re.compile(r"bets are now closed", re.IGNORECASE), _closed),
    (re.compile(r"The game was (?:a low )?red\. You won ([\d.]+) bits!", re.IGNORECASE), _win),
    (re.compile(r"The game was (?:green|not a low red)\. You lost ([\d.]+) bits\.",
                re.IGNORECASE), _loss),
]


def classify(text) -> Classification:
    """Classify one RedBot message."""
    if not isinstance(text, str):
        return UNRECOGNIZED

    for pattern, build in RULES:
        match = pattern.search(text)
        if not match:
            continue
        try:
            return build(match)
        except ValueError:
            # "1.2.3 bits" matches the shape but is not a number
            logger.debug("Unparseable amount in %r", text)
            return UNRECOGNIZED

    return UNRECOGNIZED


def is_from_bot(sender, bot_sender: str = "redbot") -> bool:
    """Only the bot's own messages count. Display names vary in case and padding."""
    if not isinstance(sender, str):
        return False
    return sender.strip().lower() == bot_sender.strip().lower()


class DuplicateGuard:
    """
    Lets a message through unless it is the same text as the one right before.

    The chat observer can hand us the same line more than once when the page
    re-renders. Only the previous text is remembered.
    """

    def __init__(self):
        self.last_text: Optional[str] = None

    def admit(self, text: str) -> bool:
        if text == self.last_text:
            return False
        self.last_text = text
        return True

    def reset(self):
        self.last_text = None
