from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Optional
import uuid

Side = Literal["BUY", "SELL"]
OrderType = Literal["LIMIT", "MARKET"]
Status = Literal["ACCEPTED", "REJECTED"]


def new_id() -> str:
    return uuid.uuid4().hex


@dataclass
class OrderRequest:
    symbol: str
    side: Side
    type: OrderType
    quantity: float
    price: Optional[float] = None
    client_id: str = "demo"


@dataclass
class OrderResponse:
    order_id: str
    status: Status
    received_at: str
    reason: Optional[str] = None
