"""
RedBot Ledger - Every bet RedBot takes, written down.

Watches the RedBot chat feed on a crash-game site, matches wager confirmations
and game outcomes back to the bet you just placed, and keeps a paginated
history of how it all went.
"""

__version__ = "0.1.0"
