# hangar/services/slots/redis_store.py
"""
Redis storage for base day slots using Sorted Sets.

Key format: slots:day:{business_id}:{date}
Value: Sorted Set where member = "HH:MM", score = slot start timestamp.

Query: ZRANGEBYSCORE key ({now_ts} +inf → only starts strictly after now.
Sentinel: "__empty__" with score=0 marks "calculated, zero slots".
"""

from datetime import date, datetime
from redis import Redis

from .config import BookingConfig, get_booking_config


EMPTY_SENTINEL = "__empty__"


def _decode(member) -> str:
    return member.decode() if isinstance(member, bytes) else member


class SlotsRedisStore:
    """Redis storage wrapper using Sorted Sets for slot data."""

    KEY_PREFIX = "slots:day"

    def __init__(self, redis: Redis, config: BookingConfig | None = None):
        self.redis = redis
        self.config = config or get_booking_config()

    def _key(self, business_id: str, dt: date) -> str:
        return f"{self.KEY_PREFIX}:{business_id}:{dt.isoformat()}"

    # ── Write ────────────────────────────────────────────────────────────

    def store_day_slots(
        self,
        business_id: str,
        dt: date,
        slots: list[tuple[str, float]],
    ) -> None:
        """
        Store calculated slots for a day.

        Args:
            business_id: Business ID
            dt: Target date
            slots: List of (time_str, slot_ts) pairs.
                   Empty list → sentinel is stored.
        """
        key = self._key(business_id, dt)
        pipe = self.redis.pipeline()

        pipe.delete(key)

        if slots:
            pipe.zadd(key, {time_str: slot_ts for time_str, slot_ts in slots})
        else:
            # Empty day, sentinel so EXISTS returns True
            pipe.zadd(key, {EMPTY_SENTINEL: 0})

        end_of_day = datetime.combine(dt, datetime.max.time())
        expire_at = min(
            int(end_of_day.timestamp()) + 60,
            int(datetime.now().timestamp()) + self.config.cache_ttl_seconds,
        )
        pipe.expireat(key, expire_at)
        pipe.execute()

    # ── Read ─────────────────────────────────────────────────────────────

    def get_available_slots(
        self,
        business_id: str,
        dt: date,
        now: datetime,
    ) -> list[str] | None:
        """
        Get live slots for a day.

        Returns:
            Sorted list of "HH:MM" strings, or None on cache miss.
        """
        key = self._key(business_id, dt)
        if not self.redis.exists(key):
            return None

        members = self.redis.zrangebyscore(key, f"({now.timestamp()}", "+inf")
        return [
            _decode(m)
            for m in members
            if _decode(m) != EMPTY_SENTINEL
        ]

    # ── Delete ───────────────────────────────────────────────────────────

    def delete_day_slots(
        self,
        business_id: str,
        dates: list[date] | None = None,
    ) -> int:
        """
        Delete cached slots.

        Args:
            business_id: Business ID
            dates: Specific dates, or None to delete all for business.

        Returns:
            Number of deleted keys.
        """
        if dates:
            keys = [self._key(business_id, dt) for dt in dates]
        else:
            keys = list(self.redis.scan_iter(f"{self.KEY_PREFIX}:{business_id}:*"))

        if not keys:
            return 0

        return self.redis.delete(*keys)
