from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

ZERO = Decimal("0")


class Account:
    """A ledger account. `id` and `name` are fixed at creation; only the
    owning Ledger changes `balance`."""

    __slots__ = ("_id", "_name", "balance")

    def __init__(self, id: str, name: str, balance: Decimal = ZERO):
        self._id = id
        self._name = name
        self.balance = balance

    @property
    def id(self) -> str:
        return self._id

    @property
    def name(self) -> str:
        return self._name

    def copy(self) -> "Account":
        return Account(self._id, self._name, self.balance)

    def __eq__(self, other):
        if not isinstance(other, Account):
            return NotImplemented
        return (self._id, self._name, self.balance) == (other._id, other._name, other.balance)

    def __repr__(self):
        return f"Account(id={self._id!r}, name={self._name!r}, balance={self.balance!r})"


@dataclass(frozen=True)
class Entry:
    ref: str
    debit_account_id: str
    credit_account_id: str
    amount: Decimal
    ts: int
    seq: int
