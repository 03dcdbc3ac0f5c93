"""
Configuration for RedBot Ledger.

Everything can be overridden from the environment or a .env file.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from dotenv import load_dotenv

load_dotenv()


@dataclass
class ChatConfig:
    bot_sender: str = os.getenv("REDBOT_SENDER", "redbot")
    valid_chats: tuple = ("spam", "redbot")  # channels RedBot listens on


@dataclass
class StorageConfig:
    data_dir: str = os.getenv("REDBOT_DATA_DIR", "data")
    storage_file: str = "redbot_storage.json"
    last_bet_key: str = "redbot_last_bet_amount"
    history_key: str = "redbot_bet_history"


@dataclass
class BettingConfig:
    default_bet: int = int(os.getenv("REDBOT_DEFAULT_BET", "2"))
    history_page_size: int = int(os.getenv("REDBOT_PAGE_SIZE", "30"))
    enable_ut: bool = os.getenv("REDBOT_ENABLE_UT", "false").lower() in ("1", "true", "yes")


@dataclass
class RedBotConfig:
    chat: ChatConfig = field(default_factory=ChatConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    betting: BettingConfig = field(default_factory=BettingConfig)

    @property
    def storage_path(self) -> Path:
        return Path(self.storage.data_dir) / self.storage.storage_file

    @property
    def wager_kinds(self) -> list[str]:
        """Kinds offered to the user. "ut" stays hidden unless enabled."""
        kinds = ["red", "lo"]
        if self.betting.enable_ut:
            kinds.append("ut")
        return kinds
