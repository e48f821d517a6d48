"""
Tabular views of a Ledger for reporting.

`trial_balance` lists every account with its balance plus the debit/credit
totals it has seen; `entries_frame` is the entry log as rows. Amounts are
converted to float for the frames; the Ledger itself keeps exact Decimals.
"""
from __future__ import annotations

import os
from collections import defaultdict
from typing import Dict

import pandas as pd

from ..ledger import Ledger

TRIAL_BALANCE_COLUMNS = ["account_id", "name", "debits", "credits", "balance"]
ENTRY_COLUMNS = ["seq", "ts", "ref", "debit_account_id", "credit_account_id", "amount"]


def trial_balance(ledger: Ledger) -> pd.DataFrame:
    accounts, entries = ledger.snapshot()
    debits: Dict[str, float] = defaultdict(float)
    credits: Dict[str, float] = defaultdict(float)
    for e in entries:
        debits[e.debit_account_id] += float(e.amount)
        credits[e.credit_account_id] += float(e.amount)
    rows = [
        {
            "account_id": acc.id,
            "name": acc.name,
            "debits": debits[acc.id],
            "credits": credits[acc.id],
            "balance": float(acc.balance),
        }
        for acc in accounts
    ]
    return pd.DataFrame(rows, columns=TRIAL_BALANCE_COLUMNS)


def entries_frame(ledger: Ledger) -> pd.DataFrame:
    rows = [
        {
            "seq": e.seq,
            "ts": e.ts,
            "ref": e.ref,
            "debit_account_id": e.debit_account_id,
            "credit_account_id": e.credit_account_id,
            "amount": float(e.amount),
        }
        for e in ledger.list_entries()
    ]
    return pd.DataFrame(rows, columns=ENTRY_COLUMNS)


def write_parquet(ledger: Ledger, base_dir: str = "data") -> None:
    os.makedirs(base_dir, exist_ok=True)
    trial_balance(ledger).to_parquet(os.path.join(base_dir, "trial_balance.parquet"))
    entries_frame(ledger).to_parquet(os.path.join(base_dir, "entries.parquet"))
