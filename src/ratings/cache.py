"""Read-through, write-invalidated cache of per-product review lists.

One ReviewCache is built per process and handed to whoever needs it; it is
not a module-level singleton. Entries live in a cachetools TTLCache, so an
entry is served only while ``now - fetched_at < ttl`` and, when a capacity
is set, the least recently used product is evicted first.

The mapping is shared between concurrent callers and guarded by a lock.
Fetches run outside the lock; generation counters (per product, plus one for
clear()) keep a fetch that started before an invalidation from re-populating
the cache with the pre-write list. A product's counter exists only while a
fetch for it is in flight, so side state never outgrows the concurrent
fetches.
"""

import math
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass

import structlog
from cachetools import TTLCache

from ratings.config import DEFAULT_CACHE_TTL_SECONDS
from ratings.review.repository import ReviewRepository
from ratings.review.review import Review

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class CacheEntry:
    product_id: str
    reviews: tuple[Review, ...]
    fetched_at: float


@dataclass(frozen=True)
class CacheStats:
    hits: int
    misses: int
    invalidations: int
    size: int


class ReviewCache:
    """Time-bounded cache in front of ReviewRepository.list_by_product."""

    def __init__(
        self,
        repository: ReviewRepository,
        ttl_seconds: float = DEFAULT_CACHE_TTL_SECONDS,
        max_entries: int | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.repository = repository
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: TTLCache = TTLCache(
            maxsize=max_entries if max_entries is not None else math.inf,
            ttl=ttl_seconds,
            timer=clock,
        )
        self._generations: dict[str, int] = {}
        self._in_flight: dict[str, int] = {}
        self._epoch = 0
        self._lock = threading.RLock()
        self._hits = 0
        self._misses = 0
        self._invalidations = 0

    def _generation(self, product_id: str) -> tuple[int, int]:
        return self._epoch, self._generations.get(product_id, 0)

    def get_reviews(self, product_id: str, allow_cache: bool = True) -> list[Review]:
        """Reviews for a product, newest first.

        With allow_cache, a valid entry is returned as is. Otherwise, or on a
        miss, the repository is asked and the result becomes the new entry.
        """
        product_id = str(product_id)

        with self._lock:
            if allow_cache:
                entry = self._entries.get(product_id)
                if entry is not None:
                    self._hits += 1
                    return list(entry.reviews)
            self._misses += 1
            self._in_flight[product_id] = self._in_flight.get(product_id, 0) + 1
            generation = self._generation(product_id)

        try:
            reviews = self.repository.list_by_product(product_id)
            fetched_at = self._clock()

            with self._lock:
                if self._generation(product_id) == generation:
                    self._entries[product_id] = CacheEntry(
                        product_id=product_id,
                        reviews=tuple(reviews),
                        fetched_at=fetched_at,
                    )
                else:
                    logger.debug("Discarding fetch that raced an invalidation", product_id=product_id)
        finally:
            with self._lock:
                self._fetch_done(product_id)

        return list(reviews)

    def _fetch_done(self, product_id: str) -> None:
        remaining = self._in_flight.get(product_id, 0) - 1
        if remaining > 0:
            self._in_flight[product_id] = remaining
        else:
            self._in_flight.pop(product_id, None)
            self._generations.pop(product_id, None)

    def peek(self, product_id: str) -> CacheEntry | None:
        """The valid entry for a product, without counting a hit or fetching."""
        with self._lock:
            return self._entries.get(str(product_id))

    def invalidate(self, product_id: str) -> None:
        product_id = str(product_id)
        with self._lock:
            # Only a fetch already under way can be stale
            if product_id in self._in_flight:
                self._generations[product_id] = self._generations.get(product_id, 0) + 1
            self._entries.pop(product_id, None)
            self._invalidations += 1
        logger.debug("Review cache invalidated", product_id=product_id)

    def clear(self) -> int:
        """Drop every entry; returns how many were dropped."""
        with self._lock:
            dropped = len(self._entries)
            # The epoch bump alone marks in-flight fetches stale
            self._epoch += 1
            self._generations.clear()
            self._entries.clear()
            self._invalidations += dropped
        logger.info("Review cache cleared", entries=dropped)
        return dropped

    def stats(self) -> CacheStats:
        with self._lock:
            self._entries.expire()
            return CacheStats(
                hits=self._hits,
                misses=self._misses,
                invalidations=self._invalidations,
                size=len(self._entries),
            )

    def __contains__(self, product_id) -> bool:
        with self._lock:
            return str(product_id) in self._entries

    def __len__(self) -> int:
        with self._lock:
            self._entries.expire()
            return len(self._entries)
