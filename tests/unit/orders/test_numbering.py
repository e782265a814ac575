"""Unit tests for OrderNumberGenerator.

Uses a frozen clock, a seeded or constant random source and an
in-memory store so generation is fully deterministic.
"""

from __future__ import annotations

import random
import re
from datetime import datetime, timedelta, timezone

import pytest
from freezegun import freeze_time

from modules.core.exceptions import ErrorCategory
from modules.orders.exceptions import OrderNumberExhausted
from modules.orders.numbering import OrderNumberGenerator

pytestmark = pytest.mark.unit

FROZEN = datetime(2024, 3, 9, 14, 5, 7, tzinfo=timezone.utc)
ORDER_NUMBER_RE = re.compile(r"^ORD-\d{14}-\d{4}$")


class MemoryStore:
    def __init__(self, taken=()):
        self.numbers = set(taken)
        self.exists_calls = 0

    def order_number_exists(self, order_number):
        self.exists_calls += 1
        return order_number in self.numbers

    def order_numbers_with_prefix(self, prefix):
        return {n for n in self.numbers if n.startswith(prefix)}


class ConstantRandom(random.Random):
    def __init__(self, value):
        super().__init__()
        self.value = value

    def randint(self, a, b):
        return self.value


def frozen_clock():
    return FROZEN


class TestFormat:
    def test_matches_pattern_and_timestamp(self):
        generator = OrderNumberGenerator(clock=frozen_clock, rng=random.Random(1))
        number = generator.generate(MemoryStore())
        assert ORDER_NUMBER_RE.match(number)
        assert number.startswith("ORD-20240309140507-")
        assert 1000 <= int(number[-4:]) <= 9999

    def test_timestamp_is_utc(self):
        local = FROZEN.astimezone(timezone(timedelta(hours=-3)))
        generator = OrderNumberGenerator(clock=lambda: local, rng=random.Random(1))
        assert generator.generate(MemoryStore()).startswith("ORD-20240309140507-")


class TestUniqueness:
    def test_fifty_numbers_in_one_second_are_distinct(self):
        store = MemoryStore()
        generator = OrderNumberGenerator(clock=frozen_clock, rng=random.Random(7))
        for _ in range(50):
            store.numbers.add(generator.generate(store))
        assert len(store.numbers) == 50

    def test_collision_retries_with_new_suffix(self):
        rng = random.Random(3)
        first = OrderNumberGenerator(clock=frozen_clock, rng=random.Random(3)).generate(
            MemoryStore()
        )
        store = MemoryStore(taken={first})
        number = OrderNumberGenerator(clock=frozen_clock, rng=rng).generate(store)
        assert number != first
        assert store.exists_calls >= 2

    def test_falls_back_to_next_free_suffix(self):
        prefix = "ORD-20240309140507-"
        store = MemoryStore(taken={f"{prefix}5000", f"{prefix}5001"})
        generator = OrderNumberGenerator(
            clock=frozen_clock, rng=ConstantRandom(5000), max_attempts=3
        )
        assert generator.generate(store) == f"{prefix}5002"
        assert store.exists_calls == 3

    def test_fallback_wraps_around_the_suffix_space(self):
        prefix = "ORD-20240309140507-"
        store = MemoryStore(taken={f"{prefix}9999"})
        generator = OrderNumberGenerator(
            clock=frozen_clock, rng=ConstantRandom(9999), max_attempts=1
        )
        assert generator.generate(store) == f"{prefix}1000"

    def test_exhausted_second_raises_transient_error(self):
        prefix = "ORD-20240309140507-"
        store = MemoryStore(taken={f"{prefix}{n}" for n in range(1000, 10000)})
        generator = OrderNumberGenerator(
            clock=frozen_clock, rng=random.Random(0), max_attempts=2
        )
        with pytest.raises(OrderNumberExhausted) as exc_info:
            generator.generate(store)
        assert exc_info.value.category == ErrorCategory.TRANSIENT
        assert exc_info.value.retryable

    def test_numbers_from_other_seconds_do_not_count(self):
        store = MemoryStore(
            taken={f"ORD-20240309140506-{n}" for n in range(1000, 10000)}
        )
        generator = OrderNumberGenerator(clock=frozen_clock, rng=random.Random(0))
        assert generator.generate(store).startswith("ORD-20240309140507-")

    def test_max_attempts_defaults_from_settings(self, settings):
        settings.ORDER_NUMBER_MAX_RETRIES = 1
        prefix = "ORD-20240309140507-"
        store = MemoryStore(taken={f"{prefix}4000"})
        generator = OrderNumberGenerator(clock=frozen_clock, rng=ConstantRandom(4000))
        assert generator.generate(store) == f"{prefix}4001"
        assert store.exists_calls == 1


class TestDefaultClock:
    @freeze_time("2031-12-31 23:59:59")
    def test_uses_current_utc_time(self):
        number = OrderNumberGenerator(rng=random.Random(5)).generate(MemoryStore())
        assert number.startswith("ORD-20311231235959-")
