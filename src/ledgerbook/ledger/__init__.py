"""Ledger package.

Public API:
- Ledger: account registry, append-only entry log, and the atomic `post`.
- Account, Entry: the records it keeps.
- replay_balances: rebuild balances from an entry log.
- LedgerError and its subclasses: typed failures raised by the ledger.
"""

from .errors import (  # re-export
    AccountNotFound,
    DuplicateAccount,
    InvalidAccount,
    InvalidAmount,
    InvalidReference,
    InvalidTransfer,
    LedgerError,
    LedgerIntegrityError,
)
from .ledger import Ledger, replay_balances, to_amount
from .model import Account, Entry

__all__ = [
    "Account",
    "AccountNotFound",
    "DuplicateAccount",
    "Entry",
    "InvalidAccount",
    "InvalidAmount",
    "InvalidReference",
    "InvalidTransfer",
    "Ledger",
    "LedgerError",
    "LedgerIntegrityError",
    "replay_balances",
    "to_amount",
]
