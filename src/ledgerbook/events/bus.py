from __future__ import annotations

import json
import os
import logging

import redis

from .schema import EventEnvelope
from .metrics import get_events_total


STREAM_EVENTS = os.getenv("EVENTS_STREAM", "ledgerbook.events")
STREAM_DLQ = os.getenv("EVENTS_DLQ", "ledgerbook.dlq")
REDIS_URL = os.getenv("REDIS_URL", "redis://localhost:6379/0")

log = logging.getLogger("ledgerbook.events")


def configure(redis_url: str, stream: str, dlq: str) -> None:
    """Point the bus at a Redis instance and stream names from settings."""
    global REDIS_URL, STREAM_EVENTS, STREAM_DLQ
    REDIS_URL = redis_url
    STREAM_EVENTS = stream
    STREAM_DLQ = dlq


def _get_redis():
    return redis.Redis.from_url(REDIS_URL, decode_responses=True)


def encode(env: EventEnvelope) -> str:
    return json.dumps({
        "schema_version": env.schema_version,
        "correlation_id": env.correlation_id,
        "sequence": env.sequence,
        "event": env.event.model_dump(),
    }, separators=(",", ":"))


def publish(env: EventEnvelope) -> None:
    """Publish an event to Redis Streams and log a single-line JSON for Loki.

    Safe: swallow errors if Redis is not reachable so callers are never affected.
    """
    try:
        get_events_total().labels(env.event.event_type).inc()
    except Exception:
        pass

    line = encode(env)
    try:
        r = _get_redis()
        r.xadd(STREAM_EVENTS, {"json": line})
    except Exception:
        try:
            # best-effort DLQ
            r = _get_redis()
            r.xadd(STREAM_DLQ, {"json": line})
        except Exception:
            pass
    # Always log for Loki ingestion
    try:
        log.info(line)
    except Exception:
        pass

