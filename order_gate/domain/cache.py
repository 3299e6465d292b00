"""In-memory TTL cache for validator results.

One instance per process (created in the application lifespan) or per test.
Entries are checked for freshness on read and evicted lazily.
"""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Callable, Optional

from order_gate.core.config import CACHE_KEY_PREFIX, CACHE_TTL_SECONDS, GEOFENCE_KEY_PRECISION
from order_gate.domain.states import ValidatorName

_MISSING = object()


@dataclass
class CacheEntry:
    data: Any
    timestamp: float
    ttl: float

    def is_fresh(self, now: float) -> bool:
        return now - self.timestamp <= self.ttl


class TTLCache:
    """Thread-safe key/value store with per-entry time-to-live.

    Args:
        default_ttl_seconds: TTL applied when ``set`` is called without one
        clock: Monotonic time source in seconds; tests inject a manual clock
    """

    def __init__(
        self,
        default_ttl_seconds: float = CACHE_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        if default_ttl_seconds <= 0:
            raise ValueError("default_ttl_seconds must be > 0")
        self.default_ttl_seconds = default_ttl_seconds
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    def set(self, key: str, value: Any, ttl: Optional[float] = None) -> None:
        entry = CacheEntry(
            data=value,
            timestamp=self._clock(),
            ttl=self.default_ttl_seconds if ttl is None else ttl,
        )
        with self._lock:
            self._entries[key] = entry

    def get(self, key: str, default: Any = None) -> Any:
        """Return the stored value if still fresh, else evict and return default."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return default
            if not entry.is_fresh(self._clock()):
                del self._entries[key]
                return default
            return entry.data

    def has(self, key: str) -> bool:
        return self.get(key, _MISSING) is not _MISSING

    def is_expired(self, key: str) -> bool:
        """True when the key is absent or its entry has outlived its TTL."""
        with self._lock:
            entry = self._entries.get(key)
            return entry is None or not entry.is_fresh(self._clock())

    def clear(self, key: Optional[str] = None) -> None:
        with self._lock:
            if key is None:
                self._entries.clear()
            else:
                self._entries.pop(key, None)

    def keys(self) -> list[str]:
        with self._lock:
            return list(self._entries)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


# =============================================================================
# Key builders
# =============================================================================


def _round_coordinate(value: float) -> str:
    quantum = Decimal(1).scaleb(-GEOFENCE_KEY_PRECISION)
    return str(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def customer_exists_key(customer_id: str) -> str:
    return f"{CACHE_KEY_PREFIX}:{ValidatorName.CUSTOMER_EXISTS.value}:{customer_id}"


def customer_status_key(customer_id: str) -> str:
    return f"{CACHE_KEY_PREFIX}:{ValidatorName.CUSTOMER_STATUS.value}:{customer_id}"


def restaurant_status_key() -> str:
    return f"{CACHE_KEY_PREFIX}:{ValidatorName.RESTAURANT_STATUS.value}"


def geofencing_key(latitude: float, longitude: float) -> str:
    """Key for a delivery-zone lookup; nearby points (~11 m) share an entry."""
    return f"{CACHE_KEY_PREFIX}:geofencing:{_round_coordinate(latitude)},{_round_coordinate(longitude)}"


def invalidate_customer(cache: TTLCache, customer_id: str) -> None:
    """Drop everything cached for a customer plus the shared restaurant status."""
    cache.clear(customer_exists_key(customer_id))
    cache.clear(customer_status_key(customer_id))
    cache.clear(restaurant_status_key())
