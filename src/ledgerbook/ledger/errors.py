"""
Ledger exception hierarchy.

All exceptions inherit from LedgerError so callers can catch the whole family.
`details` carries the offending inputs and is rendered into `str()`.
"""
from __future__ import annotations

from typing import Any, Dict, Optional


def _safe_repr(value: Any) -> str:
    try:
        return repr(value)
    except ValueError:
        # ints past the str conversion digit limit
        return f"<{type(value).__name__}>"


class LedgerError(Exception):
    """Base exception for all ledger errors"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self):
        if self.details:
            details_str = ", ".join(f"{k}={_safe_repr(v)}" for k, v in self.details.items())
            return f"{self.message} ({details_str})"
        return self.message


class DuplicateAccount(LedgerError):
    """Raised when an account id is already registered"""
    reason = "duplicate_account"


class AccountNotFound(LedgerError):
    """Raised when a referenced account id is not registered"""
    reason = "account_not_found"


class InvalidAccount(LedgerError):
    """Raised when an account id or name is empty or not a string"""
    reason = "invalid_account"


class InvalidAmount(LedgerError):
    """Raised when a posting amount is non-numeric, non-finite, zero or negative"""
    reason = "invalid_amount"


class InvalidTransfer(LedgerError):
    """Raised when debit and credit refer to the same account"""
    reason = "invalid_transfer"


class InvalidReference(LedgerError):
    """Raised when a posting reference is not a string"""
    reason = "invalid_reference"


class LedgerIntegrityError(LedgerError):
    """Raised by Ledger.verify() when balances do not add up"""
    reason = "integrity"
