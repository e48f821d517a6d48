from __future__ import annotations

from typing import List, Literal, Optional, Union
from pydantic import BaseModel


# ---- Base + envelope ----

class BaseEvent(BaseModel):
    event_type: str
    ts: int
    run_id: str = "r1"
    tags: List[str] = []


class EventEnvelope(BaseModel):
    schema_version: str = "v1"
    correlation_id: str
    sequence: int = 0
    event: BaseEvent


# ---- Ledger events ----

class AccountOpened(BaseEvent):
    event_type: Literal["account_opened"] = "account_opened"
    account_id: str
    name: str


class EntryPosted(BaseEvent):
    event_type: Literal["entry_posted"] = "entry_posted"
    ref: str
    debit_account_id: str
    credit_account_id: str
    # Decimal amounts travel as strings to keep them exact
    amount: str


class PostRejected(BaseEvent):
    event_type: Literal["post_rejected"] = "post_rejected"
    ref: str
    reason: str
    detail: str


# ---- Collaborator events ----

class OrderAccepted(BaseEvent):
    event_type: Literal["order_accepted"] = "order_accepted"
    order_id: str
    symbol: str
    side: str
    quantity: float
    price: Optional[float] = None


class OrderRejected(BaseEvent):
    event_type: Literal["order_rejected"] = "order_rejected"
    symbol: str
    reason: str


class PriceTick(BaseEvent):
    event_type: Literal["price_tick"] = "price_tick"
    symbol: str
    price: float
    size: int
    side: str


AnyEvent = Union[
    AccountOpened,
    EntryPosted,
    PostRejected,
    OrderAccepted,
    OrderRejected,
    PriceTick,
]
