"""FastAPI dependency injection."""

import logging
import threading

from amcalc.config import settings
from amcalc.data.cache import (
    CalculationCache,
    InMemoryCalculationCache,
    RedisCalculationCache,
)

logger = logging.getLogger(__name__)

_calculation_cache: CalculationCache | None = None
_cache_lock = threading.Lock()


def build_cache(backend: str) -> CalculationCache | None:
    """Create the cache named by settings.cache_backend ("memory", "redis", "none")."""
    if backend == "memory":
        return InMemoryCalculationCache(
            max_entries=settings.cache_max_entries,
            ttl_seconds=settings.cache_ttl_seconds,
        )
    if backend == "redis":
        return RedisCalculationCache.from_url(settings.redis_url, ttl_seconds=settings.cache_ttl_seconds)
    if backend == "none":
        return None
    raise ValueError(f"Unknown cache backend {backend!r}; expected memory, redis or none")


def get_calculation_cache() -> CalculationCache | None:
    global _calculation_cache
    if settings.cache_backend == "none":
        return None
    # Runs in the threadpool; only one request may build the shared cache
    with _cache_lock:
        if _calculation_cache is None:
            _calculation_cache = build_cache(settings.cache_backend)
            logger.info("Using %s calculation cache", settings.cache_backend)
        return _calculation_cache
