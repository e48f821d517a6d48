from __future__ import annotations

import logging
import math
import threading
import time
from decimal import Decimal
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from .errors import (
    AccountNotFound,
    DuplicateAccount,
    InvalidAccount,
    InvalidAmount,
    InvalidReference,
    InvalidTransfer,
    LedgerError,
    LedgerIntegrityError,
)
from .model import ZERO, Account, Entry
from ..events.schema import AccountOpened, BaseEvent, EntryPosted, EventEnvelope, PostRejected
from ..metrics.registry import (
    get_accounts_gauge,
    get_amount_posted_total,
    get_entries_posted_total,
    inc_post_rejected,
)

logger = logging.getLogger(__name__)

Publisher = Callable[[EventEnvelope], None]


def _now_ms() -> int:
    return int(time.time() * 1000)


def to_amount(amount: Any) -> Decimal:
    """Coerce a posting amount to an exact Decimal, or raise InvalidAmount.

    Floats go through `str` so 0.1 becomes Decimal("0.1") rather than its
    binary expansion; ints convert directly so there is no digit limit.
    """
    if isinstance(amount, bool) or not isinstance(amount, (int, float, Decimal)):
        raise InvalidAmount("amount must be a number", {"amount": amount})
    if isinstance(amount, float) and not math.isfinite(amount):
        raise InvalidAmount("amount must be finite", {"amount": amount})
    try:
        value = Decimal(str(amount)) if isinstance(amount, float) else Decimal(amount)
    except (ValueError, ArithmeticError):
        raise InvalidAmount("amount is not representable", {"amount": type(amount).__name__})
    if not value.is_finite():
        raise InvalidAmount("amount must be finite", {"amount": amount})
    if value <= 0:
        raise InvalidAmount("amount must be > 0", {"amount": amount})
    return value


def replay_balances(entries: Iterable[Entry], account_ids: Iterable[str] = ()) -> Dict[str, Decimal]:
    """Rebuild balances from all-zero by applying each entry in order.

    `account_ids` seeds accounts that may have no entries so they show up
    with a zero balance.
    """
    balances: Dict[str, Decimal] = {acc_id: ZERO for acc_id in account_ids}
    for e in entries:
        balances[e.debit_account_id] = balances.get(e.debit_account_id, ZERO) + e.amount
        balances[e.credit_account_id] = balances.get(e.credit_account_id, ZERO) - e.amount
    return balances


class Ledger:
    """In-memory double-entry ledger.

    Accounts are registered once and never removed. `post` is the only way a
    balance changes: the debit side gains `amount`, the credit side loses it,
    and one immutable Entry is appended to the log. A single lock per ledger
    makes `post` and `add_account` atomic; reads return copies.

    Events are handed to `publisher` (e.g. `events.bus.publish`) after the
    lock is released; publisher failures are logged and never undo a post.
    """

    def __init__(
        self,
        publisher: Optional[Publisher] = None,
        clock: Optional[Callable[[], int]] = None,
        run_id: str = "r1",
    ):
        self._accounts: Dict[str, Account] = {}
        self._entries: List[Entry] = []
        self._lock = threading.Lock()
        self._publisher = publisher
        self._clock = clock or _now_ms
        self.run_id = run_id
        # Metrics
        self._entries_posted = get_entries_posted_total()
        self._amount_posted = get_amount_posted_total()
        self._accounts_gauge = get_accounts_gauge()

    # ---- Account registry ----

    def add_account(self, id: str, name: str) -> Account:
        if not isinstance(id, str) or not id:
            raise InvalidAccount("account id must be a non-empty string", {"id": id})
        if not isinstance(name, str) or not name:
            raise InvalidAccount("account name must be a non-empty string", {"id": id, "name": name})
        with self._lock:
            if id in self._accounts:
                raise DuplicateAccount("account already exists", {"id": id})
            acc = Account(id=id, name=name)
            self._accounts[id] = acc
            count = len(self._accounts)
        logger.debug("account opened id=%s name=%s", id, name)
        try:
            self._accounts_gauge.set(count)
        except Exception:
            pass
        self._publish(
            f"account:{id}",
            lambda: AccountOpened(ts=self._clock(), run_id=self.run_id, account_id=id, name=name),
        )
        return acc

    def get_account(self, id: str) -> Account:
        acc = self._accounts.get(id)
        if acc is None:
            raise AccountNotFound("account not found", {"id": id})
        return acc

    def has_account(self, id: str) -> bool:
        return id in self._accounts

    def list_accounts(self) -> List[Account]:
        with self._lock:
            return [acc.copy() for acc in self._accounts.values()]

    def balances(self) -> Dict[str, Decimal]:
        """Snapshot of account id -> balance in registration order."""
        with self._lock:
            return {acc_id: acc.balance for acc_id, acc in self._accounts.items()}

    def snapshot(self) -> Tuple[List[Account], List[Entry]]:
        """Account copies and the entry log taken under one lock acquisition."""
        with self._lock:
            return [acc.copy() for acc in self._accounts.values()], list(self._entries)

    def __len__(self) -> int:
        return len(self._accounts)

    # ---- Posting ----

    def post(self, ref: str, debit_account_id: str, credit_account_id: str, amount: Any) -> Entry:
        """Move `amount` from the credit account to the debit account.

        Checks run in order and the first failure wins: amount, debit account,
        credit account, distinct accounts, then a string `ref`. Nothing is
        mutated on failure.
        """
        try:
            with self._lock:
                value = to_amount(amount)
                debit = self._lookup(debit_account_id, "debit")
                credit = self._lookup(credit_account_id, "credit")
                if debit_account_id == credit_account_id:
                    raise InvalidTransfer(
                        "debit and credit accounts must differ",
                        {"ref": ref, "account_id": debit_account_id},
                    )
                if not isinstance(ref, str):
                    raise InvalidReference("ref must be a string", {"ref": ref})
                entry = Entry(
                    ref=ref,
                    debit_account_id=debit_account_id,
                    credit_account_id=credit_account_id,
                    amount=value,
                    ts=self._clock(),
                    seq=len(self._entries) + 1,
                )
                self._entries.append(entry)
                debit.balance += value
                credit.balance -= value
        except LedgerError as e:
            self._on_rejected(ref, e)
            raise

        logger.debug(
            "posted ref=%s seq=%d debit=%s credit=%s amount=%s",
            ref, entry.seq, debit_account_id, credit_account_id, value,
        )
        try:
            self._entries_posted.inc()
            self._amount_posted.inc(float(value))
        except Exception:
            pass
        self._publish(
            f"entry:{ref}",
            lambda: EntryPosted(
                ts=entry.ts,
                run_id=self.run_id,
                ref=ref,
                debit_account_id=debit_account_id,
                credit_account_id=credit_account_id,
                amount=str(value),
            ),
            sequence=entry.seq,
        )
        return entry

    def list_entries(self) -> List[Entry]:
        with self._lock:
            return list(self._entries)

    def entries_for(self, account_id: str) -> List[Entry]:
        """Entries that debit or credit `account_id`, in posting order."""
        with self._lock:
            if account_id not in self._accounts:
                raise AccountNotFound("account not found", {"id": account_id})
            return [
                e for e in self._entries
                if e.debit_account_id == account_id or e.credit_account_id == account_id
            ]

    # ---- Integrity ----

    def total(self) -> Decimal:
        with self._lock:
            return sum((acc.balance for acc in self._accounts.values()), ZERO)

    def verify(self) -> None:
        """Check conservation and that the log replays to current balances."""
        with self._lock:
            current = {acc_id: acc.balance for acc_id, acc in self._accounts.items()}
            replayed = replay_balances(self._entries, current.keys())
        total = sum(current.values(), ZERO)
        if total != ZERO:
            raise LedgerIntegrityError("balances do not sum to zero", {"total": total})
        if replayed != current:
            drift = {
                acc_id: replayed.get(acc_id, ZERO) - current.get(acc_id, ZERO)
                for acc_id in set(current) | set(replayed)
                if replayed.get(acc_id, ZERO) != current.get(acc_id, ZERO)
            }
            raise LedgerIntegrityError("entry log does not reproduce balances", {"drift": drift})

    # ---- Internals ----

    def _lookup(self, account_id: str, side: str) -> Account:
        acc = self._accounts.get(account_id)
        if acc is None:
            raise AccountNotFound(f"{side} account not found", {"id": account_id})
        return acc

    def _on_rejected(self, ref: str, err: LedgerError) -> None:
        reason = getattr(err, "reason", "unknown")
        inc_post_rejected(reason)
        logger.info("post rejected ref=%s reason=%s: %s", ref, reason, err)
        self._publish(
            f"entry:{ref}",
            lambda: PostRejected(ts=self._clock(), run_id=self.run_id, ref=str(ref), reason=reason, detail=str(err)),
        )

    def _publish(self, correlation_id: str, build_event: Callable[[], BaseEvent], sequence: int = 0) -> None:
        if self._publisher is None:
            return
        try:
            env = EventEnvelope(correlation_id=correlation_id, sequence=sequence, event=build_event())
            self._publisher(env)
        except Exception:
            logger.warning("event publish failed for %s", correlation_id, exc_info=True)
