from __future__ import annotations

from typing import Optional
import os
from prometheus_client import Counter, Gauge, REGISTRY

_entries_posted: Optional[Counter] = None
_amount_posted: Optional[Counter] = None
_posts_rejected: Optional[Counter] = None
_accounts_gauge: Optional[Gauge] = None
_orders_total: Optional[Counter] = None
_ticks_total: Optional[Counter] = None


class _NoOp:
    def labels(self, *args, **kwargs):
        return self
    def inc(self, *args, **kwargs):
        return None
    def set(self, *args, **kwargs):
        return None


def _disabled() -> bool:
    return os.getenv("DISABLE_PROMETHEUS", "0") == "1"


def _existing(name: str, kind):
    """Find an already-registered collector by name in the default REGISTRY."""
    try:
        coll = getattr(REGISTRY, "_names_to_collectors", {}).get(name)
        if isinstance(coll, kind):
            return coll
        for coll in list(getattr(REGISTRY, "_collector_to_names", {}).keys()):  # type: ignore[attr-defined]
            if isinstance(coll, kind) and getattr(coll, "_name", None) == name:
                return coll
    except Exception:
        pass
    return None


def _safe_counter(name: str, doc: str, labelnames=()):
    if _disabled():
        return _NoOp()
    try:
        return Counter(name, doc, labelnames)
    except ValueError:
        # Counter registers "<name>" and "<name>_total"; look up both spellings
        base = name[: -len("_total")] if name.endswith("_total") else name
        return _existing(name, Counter) or _existing(base, Counter) or _NoOp()


def _safe_gauge(name: str, doc: str, labelnames=()):
    if _disabled():
        return _NoOp()
    try:
        return Gauge(name, doc, labelnames)
    except ValueError:
        return _existing(name, Gauge) or _NoOp()


def get_entries_posted_total():
    global _entries_posted
    if _entries_posted is None:
        _entries_posted = _safe_counter("ledger_entries_posted_total", "Ledger entries posted")
    return _entries_posted


def get_amount_posted_total():
    """Counter: sum of amounts moved by successful posts."""
    global _amount_posted
    if _amount_posted is None:
        _amount_posted = _safe_counter("ledger_amount_posted_total", "Total amount moved between accounts")
    return _amount_posted


def get_posts_rejected_total():
    global _posts_rejected
    if _posts_rejected is None:
        _posts_rejected = _safe_counter("ledger_posts_rejected_total", "Ledger posts rejected", ["reason"])
    return _posts_rejected


def get_accounts_gauge():
    global _accounts_gauge
    if _accounts_gauge is None:
        _accounts_gauge = _safe_gauge("ledger_accounts", "Accounts registered in the ledger")
    return _accounts_gauge


def get_orders_total():
    global _orders_total
    if _orders_total is None:
        _orders_total = _safe_counter("orders_total", "Order requests by decision", ["status"])
    return _orders_total


def get_ticks_total():
    global _ticks_total
    if _ticks_total is None:
        _ticks_total = _safe_counter("ticks_total", "Synthetic price ticks emitted", ["symbol"])
    return _ticks_total


def inc_post_rejected(reason: str) -> None:
    try:
        get_posts_rejected_total().labels(reason).inc()
    except Exception:
        pass
