"""
Main entrypoint for ledgerbook.

What it does:
- Loads runtime settings from `config/config.yaml` plus environment overrides.
- Starts the Prometheus exporter and, when enabled, the Redis event bus.
- Builds one Ledger and opens the configured accounts.
- Runs the synthetic ticker for `demo_seconds`; on each tick places a LIMIT
  order at the tick price and settles accepted orders into the ledger.
- Verifies the ledger and logs the trial balance before exiting.

Invoked by `python -m ledgerbook.main` or the `ledgerbook` console script.
"""
import logging
import os
import time
from typing import Optional

from ledgerbook.config.loader import Settings, load_settings
from ledgerbook.events import bus
from ledgerbook.events.schema import EventEnvelope, PriceTick
from ledgerbook.ledger import Ledger, LedgerError
from ledgerbook.market.ticker import Tick, Ticker
from ledgerbook.metrics.core import start_server_safe
from ledgerbook.orders import make_limit, place_order
from ledgerbook.reports.balances import trial_balance


def build_ledger(settings: Settings, publisher=None) -> Ledger:
    ledger = Ledger(publisher=publisher)
    for acc in settings.accounts:
        ledger.add_account(acc.id, acc.name)
    return ledger


def make_settlement_listener(settings: Settings, ledger: Ledger, publisher=None):
    """Return a tick listener that orders one unit at the tick price and settles it."""
    settle = settings.settlement

    def _on_tick(tick: Tick) -> None:
        if publisher is not None:
            publisher(EventEnvelope(
                correlation_id=f"tick:{tick.symbol}",
                event=PriceTick(ts=tick.ts, symbol=tick.symbol, price=tick.price, size=tick.size, side=tick.side),
            ))
        req = make_limit(tick.symbol, tick.side, tick.price, 1, client_id="ledgerbook-demo")
        resp = place_order(req, publisher=publisher)
        if resp.status != "ACCEPTED" or settle is None:
            return
        try:
            ledger.post(resp.order_id, settle.debit_account, settle.credit_account, req.quantity * req.price)
        except LedgerError as e:
            logging.warning(f"Settlement failed for order {resp.order_id}: {e}")

    return _on_tick


def main(config_path: Optional[str] = None) -> None:
    settings = load_settings(config_path or os.getenv("LEDGERBOOK_CONFIG", "config/config.yaml"))
    logging.basicConfig(level=settings.log_level, format="%(asctime)s %(levelname)s %(message)s")
    start_server_safe(settings.prometheus_port)

    publisher = None
    if settings.events.enabled:
        bus.configure(settings.events.redis_url, settings.events.stream, settings.events.dlq)
        publisher = bus.publish
        logging.info(f"Event bus enabled: stream={settings.events.stream}")

    ledger = build_ledger(settings, publisher=publisher)
    logging.info(f"Ledger ready with {len(ledger)} accounts")

    ticker = Ticker(settings.ticker.symbol, settings.ticker.start_price, seed=settings.ticker.seed)
    ticker.on(make_settlement_listener(settings, ledger, publisher=publisher))
    ticker.start(settings.ticker.interval_ms)
    try:
        time.sleep(max(0.0, settings.demo_seconds))
    except KeyboardInterrupt:
        logging.info("Interrupted; stopping ticker")
    finally:
        ticker.stop()

    ledger.verify()
    logging.info(f"Posted {len(ledger.list_entries())} entries; ledger total {ledger.total()}")
    logging.info("Trial balance:\n" + trial_balance(ledger).to_string(index=False))


if __name__ == "__main__":
    main()
