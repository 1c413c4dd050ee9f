"""Response cache and request metrics owned by the request-handling layer."""

import copy
import hashlib
import json
from dataclasses import asdict, dataclass
from datetime import datetime, timedelta
from typing import Any

from .logger import get_logger
from .scheduler.protocols import Clock

logger = get_logger()


@dataclass
class SchedulerMetrics:
    """Counters for one service instance, shared by reference."""

    requests: int = 0
    cache_hits: int = 0
    cache_misses: int = 0
    validation_errors: int = 0
    tasks_scheduled: int = 0
    tasks_unscheduled: int = 0

    def snapshot(self) -> dict[str, int]:
        return asdict(self)


class ResponseCache:
    """Time-bounded cache of schedule responses.

    Keys are digests of the canonical request plus the resolved reference
    moment, so two requests that differ only in key order share an entry.
    Entries expire ``ttl_seconds`` after they are stored and are dropped on the
    next read of the same key or the next store of any key. A TTL of zero
    disables caching.
    """

    def __init__(self, ttl_seconds: float, clock: Clock) -> None:
        self.ttl = timedelta(seconds=ttl_seconds)
        self.clock = clock
        self._entries: dict[str, tuple[datetime, dict[str, Any]]] = {}

    @staticmethod
    def make_key(request: dict[str, Any], reference: datetime) -> str:
        canonical = json.dumps(
            {"request": request, "reference": reference.isoformat()},
            sort_keys=True,
            separators=(",", ":"),
        )
        return hashlib.sha256(canonical.encode("utf-8")).hexdigest()

    def get(self, key: str) -> dict[str, Any] | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        expires_at, value = entry
        if self.clock.now() >= expires_at:
            logger.debug(f"cache entry {key[:12]} expired")
            del self._entries[key]
            return None
        return copy.deepcopy(value)

    def put(self, key: str, value: dict[str, Any]) -> None:
        if self.ttl <= timedelta(0):
            return
        now = self.clock.now()
        self._evict_expired(now)
        self._entries[key] = (now + self.ttl, copy.deepcopy(value))

    def _evict_expired(self, now: datetime) -> None:
        expired = [key for key, (expires_at, _) in self._entries.items() if now >= expires_at]
        for key in expired:
            del self._entries[key]
        if expired:
            logger.debug(f"evicted {len(expired)} expired cache entries")

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
