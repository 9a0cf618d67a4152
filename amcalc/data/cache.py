"""Calculation caches for amortization results.

A cache is passed explicitly to calculate_amortization; it only saves
recomputation for repeated identical requests and never changes a result.
"""

import hashlib
import json
import logging
import threading
import time
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Callable, Protocol, runtime_checkable

import redis
from cachetools import TTLCache

from amcalc.models.amortization import (
    AmortizationInputs,
    AmortizationResult,
    AmortizationSummary,
    PaymentFrequency,
    PaymentRow,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CacheStats:
    size: int


@runtime_checkable
class CalculationCache(Protocol):
    def get(self, key: str) -> AmortizationResult | None:
        """Return a stored result or None on a miss."""
        ...

    def set(self, key: str, result: AmortizationResult) -> None:
        """Store a result. Overwriting a key with the same result is harmless."""
        ...

    def clear(self) -> None:
        ...

    def stats(self) -> CacheStats:
        ...


def cache_key(inputs: AmortizationInputs) -> str:
    """Deterministic key from (principal, rate, term, frequency)."""
    return "-".join([
        str(inputs.principal),
        str(inputs.interest_rate),
        str(inputs.term_years),
        inputs.payment_frequency.value,
    ])


class InMemoryCalculationCache:
    """Process-local cache, safe to share between request threads.

    Bounded: least recently used entries are evicted past max_entries, and
    entries expire after ttl_seconds.
    """

    def __init__(
        self,
        max_entries: int = 256,
        ttl_seconds: int = 86400,
        timer: Callable[[], float] = time.monotonic,
    ) -> None:
        self._results: TTLCache = TTLCache(maxsize=max_entries, ttl=ttl_seconds, timer=timer)
        self._lock = threading.Lock()

    def get(self, key: str) -> AmortizationResult | None:
        with self._lock:
            result = self._results.get(key)
        if result is not None:
            logger.debug("Cache hit: %s", key)
        return result

    def set(self, key: str, result: AmortizationResult) -> None:
        with self._lock:
            self._results[key] = result

    def clear(self) -> None:
        with self._lock:
            self._results.clear()

    def stats(self) -> CacheStats:
        with self._lock:
            self._results.expire()
            return CacheStats(size=len(self._results))


def result_to_payload(result: AmortizationResult) -> dict[str, Any]:
    """JSON-safe dict for a result. Decimals are kept as exact strings."""
    s = result.summary
    return {
        "payment_amount": str(result.payment_amount),
        "total_interest": str(result.total_interest),
        "total_payments": str(result.total_payments),
        "schedule": [
            [
                row.payment_number,
                str(row.payment_amount),
                str(row.principal_payment),
                str(row.interest_payment),
                str(row.remaining_balance),
            ]
            for row in result.schedule
        ],
        "summary": {
            "principal": str(s.principal),
            "interest_rate": str(s.interest_rate),
            "term_years": s.term_years,
            "number_of_payments": s.number_of_payments,
            "payment_frequency": s.payment_frequency.value,
        },
    }


def result_from_payload(payload: dict[str, Any]) -> AmortizationResult:
    s = payload["summary"]
    return AmortizationResult(
        payment_amount=Decimal(payload["payment_amount"]),
        total_interest=Decimal(payload["total_interest"]),
        total_payments=Decimal(payload["total_payments"]),
        schedule=tuple(
            PaymentRow(
                payment_number=number,
                payment_amount=Decimal(amount),
                principal_payment=Decimal(principal),
                interest_payment=Decimal(interest),
                remaining_balance=Decimal(balance),
            )
            for number, amount, principal, interest, balance in payload["schedule"]
        ),
        summary=AmortizationSummary(
            principal=Decimal(s["principal"]),
            interest_rate=Decimal(s["interest_rate"]),
            term_years=s["term_years"],
            number_of_payments=s["number_of_payments"],
            payment_frequency=PaymentFrequency(s["payment_frequency"]),
        ),
    )


class RedisCalculationCache:
    """Redis-backed cache shared across processes.

    Redis being unavailable is treated as a miss; the calculation still runs.
    """

    PREFIX = "amcalc:amortization"

    def __init__(self, client: redis.Redis, ttl_seconds: int = 86400):
        self.client = client
        self.ttl_seconds = ttl_seconds

    @classmethod
    def from_url(cls, url: str, ttl_seconds: int = 86400) -> "RedisCalculationCache":
        return cls(redis.from_url(url, decode_responses=True), ttl_seconds=ttl_seconds)

    def _redis_key(self, key: str) -> str:
        h = hashlib.sha256(key.encode()).hexdigest()[:16]
        return f"{self.PREFIX}:{h}"

    def get(self, key: str) -> AmortizationResult | None:
        rkey = self._redis_key(key)
        try:
            cached_value = self.client.get(rkey)
        except redis.RedisError:
            logger.warning("Redis unavailable, skipping cache for %s", rkey)
            return None
        if cached_value is None:
            return None
        logger.debug("Cache hit: %s", rkey)
        return result_from_payload(json.loads(cached_value))

    def set(self, key: str, result: AmortizationResult) -> None:
        rkey = self._redis_key(key)
        try:
            self.client.setex(rkey, self.ttl_seconds, json.dumps(result_to_payload(result)))
        except redis.RedisError:
            logger.warning("Failed to write cache for %s", rkey)

    def clear(self) -> None:
        try:
            keys = list(self.client.scan_iter(match=f"{self.PREFIX}:*"))
            if keys:
                self.client.delete(*keys)
        except redis.RedisError:
            logger.warning("Failed to clear Redis cache")

    def stats(self) -> CacheStats:
        try:
            size = sum(1 for _ in self.client.scan_iter(match=f"{self.PREFIX}:*"))
        except redis.RedisError:
            logger.warning("Redis unavailable, reporting empty cache")
            size = 0
        return CacheStats(size=size)
