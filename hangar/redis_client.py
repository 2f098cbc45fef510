# hangar/redis_client.py
"""
Shared Redis client.

Redis is optional: with an empty REDIS_URL the slot cache and the event
queue are disabled and `redis_client` is None.
"""

from redis import Redis

from .config import settings


def build_redis_client(url: str) -> Redis | None:
    if not url:
        return None
    return Redis.from_url(url, socket_timeout=2.0, decode_responses=True)


redis_client = build_redis_client(settings.redis_url)
