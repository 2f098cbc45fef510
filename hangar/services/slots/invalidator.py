# hangar/services/slots/invalidator.py
"""
Cache invalidation for business base slots.

Triggers:
✓ Weekly operating rules replaced → invalidate all dates
✓ Slot interval changed → invalidate all dates
✓ Blocked date added/removed → invalidate that date

Does NOT trigger:
✗ Appointment created/cancelled/deleted (occupancy is never cached)
"""

import logging
from datetime import date

from redis import Redis
from redis.exceptions import RedisError

from .redis_store import SlotsRedisStore

logger = logging.getLogger(__name__)


def invalidate_business_cache(
    redis: Redis | None,
    business_id: str,
    dates: list[date] | None = None,
) -> int:
    """
    Invalidate cached day slots for a business.

    Returns:
        Number of deleted cache keys (0 without Redis)
    """
    if redis is None:
        return 0

    try:
        deleted = SlotsRedisStore(redis).delete_day_slots(business_id, dates)
    except RedisError:
        logger.exception(f"Failed to invalidate slots cache for business={business_id}")
        return 0

    logger.info(f"Slots cache invalidated: business={business_id}, keys={deleted}")
    return deleted
