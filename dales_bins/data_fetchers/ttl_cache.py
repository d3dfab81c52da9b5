import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

logger = logging.getLogger(__name__)

COLLECTION_CACHE_TTL = 24 * 60 * 60 # 24 hours
ADDRESS_CACHE_TTL = 7 * 24 * 60 * 60 # 7 days, UPRNs rarely change


@dataclass
class CacheEntry:
    value: Any
    stored_at: float


class TTLCache:
    """
    In-memory key/value store with a per-read time-to-live.

    Entries live for the lifetime of the process. An entry read after its TTL
    has elapsed counts as a miss and is removed.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._entries: Dict[str, CacheEntry] = {}
        self._lock = threading.Lock()
        self._clock = clock

    def get(self, key: str, ttl: float = COLLECTION_CACHE_TTL) -> Optional[Any]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                logger.debug(f"Cache MISS for {key}")
                return None
            if self._clock() - entry.stored_at >= ttl:
                del self._entries[key]
                logger.info(f"Cache EXPIRED for {key}, entry evicted")
                return None
            logger.info(f"Cache HIT for {key}")
            return entry.value

    def set(self, key: str, value: Any, ttl: Optional[float] = None):
        # TTL is applied on read; accepted here so call sites name their TTL class
        with self._lock:
            self._entries[key] = CacheEntry(value=value, stored_at=self._clock())
        logger.debug(f"Cached {key}")

    def clear(self):
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return key in self._entries
