"""
Configuration loader for ledgerbook.

What it does:
- Reads static settings from `config/config.yaml`.
- Applies environment overrides: `LEDGERBOOK_LOG_LEVEL`, `PROMETHEUS_PORT`,
  `REDIS_URL`, `EVENTS_ENABLED`.
- Validates the result using Pydantic models.

Where it is used:
- Called by `ledgerbook.main` to build a `Settings` object for the demo run.
"""

import logging
import os
from typing import Any, Dict, List, Optional

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator


class AccountConfig(BaseModel):
    """An account opened at startup."""
    id: str = Field(min_length=1)
    name: str = Field(min_length=1)


class SettlementConfig(BaseModel):
    """Which accounts an accepted order's notional moves between."""
    debit_account: str
    credit_account: str


class TickerConfig(BaseModel):
    symbol: str = "TSIM"
    start_price: float = Field(default=100.0, gt=0)
    interval_ms: int = Field(default=500, gt=0)
    seed: Optional[int] = None


class EventsConfig(BaseModel):
    enabled: bool = False
    redis_url: str = "redis://localhost:6379/0"
    stream: str = "ledgerbook.events"
    dlq: str = "ledgerbook.dlq"


class Settings(BaseModel):
    """Runtime settings assembled from YAML + environment variables."""
    log_level: str = "INFO"
    prometheus_port: int = 8000
    demo_seconds: float = 3.0
    accounts: List[AccountConfig] = []
    settlement: Optional[SettlementConfig] = None
    ticker: TickerConfig = Field(default_factory=TickerConfig)
    events: EventsConfig = Field(default_factory=EventsConfig)

    @field_validator("log_level")
    @classmethod
    def known_level(cls, v):
        level = str(v).upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {v}")
        return level

    @model_validator(mode="after")
    def accounts_consistent(self):
        ids = [a.id for a in self.accounts]
        dupes = sorted({i for i in ids if ids.count(i) > 1})
        if dupes:
            raise ValueError(f"Duplicate account ids in config: {', '.join(dupes)}")
        if self.settlement is not None:
            for acc_id in (self.settlement.debit_account, self.settlement.credit_account):
                if acc_id not in ids:
                    raise ValueError(f"Settlement account not configured: {acc_id}")
            if self.settlement.debit_account == self.settlement.credit_account:
                raise ValueError("Settlement debit and credit accounts must differ")
        return self


def _env_overrides(config: Dict[str, Any]) -> Dict[str, Any]:
    level = os.getenv("LEDGERBOOK_LOG_LEVEL")
    if level:
        config["log_level"] = level
    port = os.getenv("PROMETHEUS_PORT")
    if port:
        config["prometheus_port"] = port
    events = dict(config.get("events") or {})
    redis_url = os.getenv("REDIS_URL")
    if redis_url:
        events["redis_url"] = redis_url
    enabled = os.getenv("EVENTS_ENABLED")
    if enabled is not None and enabled != "":
        events["enabled"] = enabled.strip().lower() in ("1", "true", "yes", "on")
    config["events"] = events
    return config


def load_settings(path: str = "config/config.yaml") -> Settings:
    """Load YAML config, apply env overrides, and return Settings.

    Raises FileNotFoundError when `path` is missing and pydantic's
    ValidationError when the content is invalid.
    """
    with open(path, "r") as f:
        config = yaml.safe_load(f) or {}
    if not isinstance(config, dict):
        raise ValueError(f"Config root must be a mapping: {path}")
    return Settings(**_env_overrides(config))
