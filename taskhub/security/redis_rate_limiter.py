"""Redis-backed sliding window throttle shared by every API worker."""

from __future__ import annotations

import time
import uuid

from redis import Redis


class RedisSlidingWindowRateLimiter:
    """Per-key limiter stored in Redis sorted sets.

    Each attempt is a member scored by its timestamp in milliseconds. Trimming,
    counting and recording run in one MULTI/EXEC so concurrent workers see a
    consistent window.
    """

    def __init__(
        self,
        client: Redis,
        *,
        max_requests: int,
        window_seconds: int,
        key_prefix: str = "taskhub:throttle",
    ) -> None:
        self._client = client
        self._max_requests = max_requests
        self._window_ms = window_seconds * 1000
        self._key_prefix = key_prefix

    def _key(self, key: str) -> str:
        return f"{self._key_prefix}:{key}"

    def allow(self, key: str) -> bool:
        redis_key = self._key(key)
        now_ms = int(time.time() * 1000)
        member = f"{now_ms}:{uuid.uuid4().hex}"

        pipe = self._client.pipeline(transaction=True)
        pipe.zremrangebyscore(redis_key, 0, now_ms - self._window_ms)
        pipe.zadd(redis_key, {member: now_ms})
        pipe.zcard(redis_key)
        pipe.pexpire(redis_key, self._window_ms)
        _, _, count, _ = pipe.execute()

        if int(count) > self._max_requests:
            # Over the limit: the attempt does not occupy a slot.
            self._client.zrem(redis_key, member)
            return False
        return True

    def reset(self, key: str) -> None:
        self._client.delete(self._key(key))
