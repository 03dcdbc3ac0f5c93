"""
Command Dispatcher - turning a button press into a chat line.

RedBot takes orders in chat: "$bet 10", "$lo 5", "$bal". This module builds
the text and hands it to whatever actually types into the chat box (a
browser driver, a websocket, a test double). It never raises; a failed send
comes back as a DispatchResult with the error filled in.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Optional

from redbot_ledger.config import RedBotConfig
from redbot_ledger.ledger.models import WagerKind, sanitize_amount

logger = logging.getLogger(__name__)

WAGER_COMMANDS = {
    WagerKind.RED: "$bet",
    WagerKind.LO: "$lo",
    WagerKind.UT: "$ut",
}
BALANCE_COMMAND = "$bal"

Transport = Callable[[str], None]


@dataclass
class DispatchResult:
    success: bool
    command_text: str
    error: Optional[str] = None


class CommandDispatcher:
    """
    Formats bot commands and sends them through a transport.

    If the current chat channel is known, it has to be one RedBot reads
    (spam or redbot), otherwise nothing is sent.
    """

    def __init__(self, config: RedBotConfig, transport: Optional[Transport] = None,
                 channel: Optional[str] = None):
        self.config = config
        self.transport = transport
        self.channel = channel

    def _check_channel(self) -> Optional[str]:
        if self.channel is None:
            return None
        name = self.channel.strip().lower()
        valid = [c.lower() for c in self.config.chat.valid_chats]
        if name not in valid:
            return f"Chat must be {' or '.join(valid).upper()}"
        return None

    def format_command(self, command: str, amount=None) -> str:
        if amount is None:
            return command
        return f"{command} {sanitize_amount(amount, self.config.betting.default_bet)}"

    def dispatch(self, command: str, amount=None) -> DispatchResult:
        text = self.format_command(command, amount)

        error = self._check_channel()
        if error:
            logger.warning("Not sending %r: %s", text, error)
            return DispatchResult(success=False, command_text=text, error=error)

        if self.transport is None:
            logger.info("No transport attached, would send: %s", text)
            return DispatchResult(success=True, command_text=text)

        try:
            self.transport(text)
        except Exception as e:
            logger.error("Failed to execute command %r: %s", text, e)
            return DispatchResult(success=False, command_text=text, error=str(e))

        logger.info("Command executed: %s", text)
        return DispatchResult(success=True, command_text=text)

    def place_wager(self, kind: WagerKind, amount) -> DispatchResult:
        return self.dispatch(WAGER_COMMANDS[kind], amount)

    def check_balance(self) -> DispatchResult:
        return self.dispatch(BALANCE_COMMAND)
