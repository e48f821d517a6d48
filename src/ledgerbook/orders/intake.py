"""
Order intake: field-level validation and accept/reject decisions.

Nothing here touches a Ledger. Accepted orders carry a fresh id that a
settlement flow can use as the `ref` of a ledger post.
"""
from __future__ import annotations

import logging
import math
from datetime import datetime, timezone
from typing import Callable, List, Optional

from .model import OrderRequest, OrderResponse, Side, new_id
from ..events.schema import EventEnvelope, OrderAccepted, OrderRejected
from ..metrics.registry import get_orders_total

logger = logging.getLogger(__name__)

NO_ORDER_ID = "N/A"


def _positive(value) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value) and value > 0


def validate_order(req: OrderRequest) -> List[str]:
    """Return a list of human-readable problems; empty means valid."""
    errors: List[str] = []
    if not req.symbol:
        errors.append("symbol is required")
    if req.side not in ("BUY", "SELL"):
        errors.append("side must be BUY or SELL")
    if req.type not in ("LIMIT", "MARKET"):
        errors.append("type must be LIMIT or MARKET")
    if not _positive(req.quantity):
        errors.append("quantity must be > 0")
    if req.type == "LIMIT" and not _positive(req.price):
        errors.append("price must be > 0 for LIMIT")
    return errors


def make_limit(symbol: str, side: Side, price: float, quantity: float, client_id: str = "demo") -> OrderRequest:
    return OrderRequest(symbol=symbol, side=side, type="LIMIT", quantity=quantity, price=price, client_id=client_id)


def place_order(
    req: OrderRequest,
    publisher: Optional[Callable[[EventEnvelope], None]] = None,
) -> OrderResponse:
    now = datetime.now(timezone.utc)
    received_at = now.isoformat().replace("+00:00", "Z")
    ts = int(now.timestamp() * 1000)
    errors = validate_order(req)
    if errors:
        resp = OrderResponse(order_id=NO_ORDER_ID, status="REJECTED", received_at=received_at, reason="; ".join(errors))
        evt = OrderRejected(ts=ts, symbol=str(req.symbol or ""), reason=resp.reason or "")
        logger.info("order rejected client=%s: %s", req.client_id, resp.reason)
    else:
        resp = OrderResponse(order_id=new_id(), status="ACCEPTED", received_at=received_at)
        evt = OrderAccepted(
            ts=ts, order_id=resp.order_id, symbol=req.symbol, side=req.side,
            quantity=float(req.quantity), price=float(req.price) if req.price is not None else None,
        )
        logger.debug("order accepted id=%s %s %s x%s", resp.order_id, req.side, req.symbol, req.quantity)
    try:
        get_orders_total().labels(resp.status).inc()
    except Exception:
        pass
    if publisher is not None:
        try:
            publisher(EventEnvelope(correlation_id=f"order:{req.client_id}", event=evt))
        except Exception:
            logger.warning("event publish failed for order from %s", req.client_id, exc_info=True)
    return resp
