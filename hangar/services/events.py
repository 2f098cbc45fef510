# hangar/services/events.py
"""
Event emitter: pushes appointment events to a Redis list for external
collaborators (messaging, dashboards).

Queue: events:p2p

Best effort: without Redis, or when Redis fails, the event is logged and
dropped. The emitting operation never fails because of it.
"""

import json
import time
import logging

from redis.exceptions import RedisError

from ..redis_client import redis_client

logger = logging.getLogger(__name__)

P2P_QUEUE = "events:p2p"


def emit_event(event_type: str, payload: dict, redis=None) -> bool:
    """
    Emit a p2p event.

    Returns:
        True if the event was queued.
    """
    redis = redis if redis is not None else redis_client
    if redis is None:
        logger.debug(f"Event {event_type} skipped (no Redis)")
        return False

    event = {
        "type": event_type,
        **payload,
        "ts": int(time.time()),
    }
    try:
        redis.rpush(P2P_QUEUE, json.dumps(event, default=str))
        logger.info(f"Event emitted: {event_type} → {P2P_QUEUE}")
        return True
    except RedisError as e:
        logger.error(f"Failed to emit event {event_type}: {e}")
        return False
