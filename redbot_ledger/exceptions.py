"""Exception types for RedBot Ledger."""


class RedBotError(Exception):
    """Base class for all ledger errors."""


class StorageError(RedBotError):
    """The key-value store could not be read or written."""


class WagerStateError(RedBotError):
    """A wager was asked to make a transition it cannot make."""


class SessionError(RedBotError):
    """A session was used outside its init/dispose window."""
