"""Runtime settings for the review engine.

Protean's own configuration (databases, brokers, event store) lives in
domain.toml. These are the knobs of the engine itself, read from the
environment once per process.
"""

import os
from dataclasses import dataclass

DEFAULT_CACHE_TTL_SECONDS = 300.0
DEFAULT_DELIVERED_STATUS = "delivered"

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off"}


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    value = raw.strip().lower()
    if value in _TRUTHY:
        return True
    if value in _FALSY:
        return False
    raise ValueError(f"{name} must be a boolean, got {raw!r}")


def _env_optional_int(name: str) -> int | None:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return None
    return int(raw)


@dataclass(frozen=True)
class EngineSettings:
    """Immutable engine configuration.

    Attributes:
        cache_ttl_seconds: How long a cached product review list stays valid.
        cache_max_entries: Upper bound on cached products; None means unbounded.
        reconcile_on_read: Run read-repair whenever a summary is read.
        delivered_status: Order status that makes its items reviewable.
        storage: "domain" for Protean-backed persistence, "memory" for FakeStore.
    """

    cache_ttl_seconds: float = DEFAULT_CACHE_TTL_SECONDS
    cache_max_entries: int | None = None
    reconcile_on_read: bool = True
    delivered_status: str = DEFAULT_DELIVERED_STATUS
    storage: str = "domain"

    def __post_init__(self):
        if self.cache_ttl_seconds <= 0:
            raise ValueError("cache_ttl_seconds must be positive")
        if self.cache_max_entries is not None and self.cache_max_entries < 1:
            raise ValueError("cache_max_entries must be at least 1")
        if self.storage not in ("domain", "memory"):
            raise ValueError(f"Unknown storage backend: {self.storage}")

    @classmethod
    def from_env(cls) -> "EngineSettings":
        return cls(
            cache_ttl_seconds=float(os.environ.get("RATINGS_CACHE_TTL_SECONDS", DEFAULT_CACHE_TTL_SECONDS)),
            cache_max_entries=_env_optional_int("RATINGS_CACHE_MAX_ENTRIES"),
            reconcile_on_read=_env_bool("RATINGS_RECONCILE_ON_READ", True),
            delivered_status=os.environ.get("RATINGS_DELIVERED_STATUS", DEFAULT_DELIVERED_STATUS),
            storage=os.environ.get("RATINGS_STORAGE", "domain"),
        )
