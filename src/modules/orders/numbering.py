"""Order number generation.

Format: ``ORD-<UTC YYYYMMDDHHMMSS>-<NNNN>`` with NNNN in [1000, 9999].

The clock and the random source are injected so generation is
deterministic under test.  Random suffixes are tried a bounded number of
times; after that the generator scans the suffixes already used in the
current second and hands out the next free one.  Only when all 9000
suffixes of a second are taken does it give up with
``OrderNumberExhausted`` (transient, safe to retry).

A number that is free when generated can still be taken by a concurrent
transaction before commit; the unique index rejects the second insert
and ``OrderService.create_order`` retries the whole creation.
"""

from __future__ import annotations

import random
import secrets
from datetime import datetime, timezone
from typing import Callable, Optional, Protocol, Set

import structlog
from django.conf import settings

from modules.orders.constants import (
    ORDER_NUMBER_MAX_RETRIES,
    ORDER_NUMBER_PREFIX,
    ORDER_NUMBER_SUFFIX_MAX,
    ORDER_NUMBER_SUFFIX_MIN,
)
from modules.orders.exceptions import OrderNumberExhausted

logger = structlog.get_logger(__name__)

SUFFIX_SPACE = ORDER_NUMBER_SUFFIX_MAX - ORDER_NUMBER_SUFFIX_MIN + 1


class OrderNumberStore(Protocol):
    def order_number_exists(self, order_number: str) -> bool: ...

    def order_numbers_with_prefix(self, prefix: str) -> Set[str]: ...


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class OrderNumberGenerator:
    def __init__(
        self,
        clock: Callable[[], datetime] = utc_now,
        rng: Optional[random.Random] = None,
        max_attempts: Optional[int] = None,
    ) -> None:
        self._clock = clock
        self._rng = rng or secrets.SystemRandom()
        self._max_attempts = (
            max_attempts
            if max_attempts is not None
            else getattr(settings, "ORDER_NUMBER_MAX_RETRIES", ORDER_NUMBER_MAX_RETRIES)
        )

    def prefix_for(self, moment: datetime) -> str:
        moment = moment.astimezone(timezone.utc) if moment.tzinfo else moment
        return f"{ORDER_NUMBER_PREFIX}-{moment:%Y%m%d%H%M%S}-"

    def generate(self, store: OrderNumberStore) -> str:
        prefix = self.prefix_for(self._clock())

        for attempt in range(1, self._max_attempts + 1):
            candidate = f"{prefix}{self._random_suffix()}"
            if not store.order_number_exists(candidate):
                return candidate
            logger.info("order_number.collision", candidate=candidate, attempt=attempt)

        return self._next_free(store, prefix)

    def _random_suffix(self) -> int:
        return self._rng.randint(ORDER_NUMBER_SUFFIX_MIN, ORDER_NUMBER_SUFFIX_MAX)

    def _next_free(self, store: OrderNumberStore, prefix: str) -> str:
        """Walk the suffix space once from a random start; first unused wins."""
        used = store.order_numbers_with_prefix(prefix)
        start = self._random_suffix() - ORDER_NUMBER_SUFFIX_MIN
        for offset in range(SUFFIX_SPACE):
            suffix = ORDER_NUMBER_SUFFIX_MIN + (start + offset) % SUFFIX_SPACE
            candidate = f"{prefix}{suffix}"
            if candidate not in used:
                logger.warning(
                    "order_number.fallback_used",
                    candidate=candidate,
                    used=len(used),
                )
                return candidate

        logger.error("order_number.exhausted", prefix=prefix)
        raise OrderNumberExhausted(
            "Could not allocate an order number right now. Please retry."
        )
