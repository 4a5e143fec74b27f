"""Redis adapter for publishing domain events to external consumers."""

import json
import logging
from dataclasses import asdict
from datetime import datetime

import redis

from config import get_redis_host_and_port
from provenance.domain.events import Event

logger = logging.getLogger(__name__)

CHANNEL_PREFIX = "provenance"

r = redis.Redis(**get_redis_host_and_port())


def _serialize_event(event: Event) -> str:
    """Serialize event to JSON, handling datetime objects."""
    event_dict = asdict(event)

    # Convert datetime objects to ISO strings
    for key, value in event_dict.items():
        if isinstance(value, datetime):
            event_dict[key] = value.isoformat()

    event_dict["event_type"] = type(event).__name__
    return json.dumps(event_dict)


def channel_for(event: Event) -> str:
    """Channel name per event type, e.g. provenance:ProductFlagged."""
    return f"{CHANNEL_PREFIX}:{type(event).__name__}"


def publish(channel: str, event: Event) -> int:
    """Publish event to Redis channel; returns the number of receivers."""
    logger.info("publishing: channel=%s, event=%s", channel, event)
    message = _serialize_event(event)
    return r.publish(channel, message)
