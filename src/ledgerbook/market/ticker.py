"""
Synthetic market-data ticker.

Produces a random-walk price series for one symbol and pushes each Tick to
subscribed listeners, either on demand (`emit`) or from a background thread
(`start`/`stop`). Independent of the ledger.
"""
from __future__ import annotations

import logging
import random
import threading
import time
from dataclasses import dataclass
from typing import Callable, List, Literal, Optional

from ..metrics.registry import get_ticks_total

logger = logging.getLogger(__name__)

MIN_PRICE = 0.01
MAX_STEP = 0.25


@dataclass
class Tick:
    ts: int
    symbol: str
    price: float
    size: int
    side: Literal["BUY", "SELL"]


TickListener = Callable[[Tick], None]


class Ticker:
    def __init__(self, symbol: str, start_price: float = 100.0, seed: Optional[int] = None):
        self.symbol = symbol
        self._price = float(start_price)
        self._rng = random.Random(seed)
        self._listeners: List[TickListener] = []
        self._listeners_lock = threading.Lock()
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._ticks = get_ticks_total()

    @property
    def last_price(self) -> float:
        return round(self._price, 2)

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def on(self, listener: TickListener) -> None:
        with self._listeners_lock:
            if listener not in self._listeners:
                self._listeners.append(listener)

    def off(self, listener: TickListener) -> None:
        with self._listeners_lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    def start(self, interval_ms: int = 500) -> None:
        if self.running:
            return
        self._stop.clear()
        interval_s = max(interval_ms, 1) / 1000.0

        def _loop():
            while not self._stop.wait(interval_s):
                self.emit()

        self._thread = threading.Thread(target=_loop, name=f"ticker-{self.symbol}", daemon=True)
        self._thread.start()
        logger.info("ticker started symbol=%s interval_ms=%d", self.symbol, interval_ms)

    def stop(self) -> None:
        if self._thread is None:
            return
        self._stop.set()
        if self._thread is not threading.current_thread():
            self._thread.join()
        self._thread = None
        logger.info("ticker stopped symbol=%s", self.symbol)

    def emit(self) -> Tick:
        """Advance the walk one step and deliver the tick to every listener."""
        delta = (self._rng.random() - 0.5) * (2 * MAX_STEP)
        self._price = max(MIN_PRICE, self._price + delta)
        tick = Tick(
            ts=int(time.time() * 1000),
            symbol=self.symbol,
            price=round(self._price, 2),
            size=self._rng.randint(1, 100),
            side="BUY" if self._rng.random() > 0.5 else "SELL",
        )
        try:
            self._ticks.labels(self.symbol).inc()
        except Exception:
            pass
        with self._listeners_lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(tick)
            except Exception:
                # One bad subscriber must not starve the others
                logger.exception("tick listener failed symbol=%s", self.symbol)
        return tick
