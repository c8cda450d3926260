"""Unit tests for the calculation cache."""

import threading
from datetime import date
from unittest.mock import MagicMock

import pytest

from nutrient_engine.cache import (
    InMemoryCacheStore,
    generate_calculation_hash,
    with_calculation_cache,
)
from nutrient_engine.models import TimeFrame


@pytest.fixture
def frame():
    return TimeFrame(start=date(2025, 1, 1), end=date(2025, 12, 31))


class TestGenerateCalculationHash:
    """Tests for cache key generation."""

    def test_equal_inputs_equal_keys(self, frame):
        same = TimeFrame(start=date(2025, 1, 1), end=date(2025, 12, 31))

        assert generate_calculation_hash("f", "1", frame) == generate_calculation_hash("f", "1", same)

    def test_key_depends_on_name_version_and_input(self, frame):
        other = TimeFrame(start=date(2025, 1, 2), end=date(2025, 12, 31))
        base = generate_calculation_hash("f", "1", frame)

        assert generate_calculation_hash("g", "1", frame) != base
        assert generate_calculation_hash("f", "2", frame) != base
        assert generate_calculation_hash("f", "1", other) != base

    def test_sha256_hex(self, frame):
        key = generate_calculation_hash("f", "1", frame)

        assert len(key) == 64
        int(key, 16)


class TestInMemoryCacheStore:
    """Tests for InMemoryCacheStore."""

    def test_get_set(self):
        store = InMemoryCacheStore()
        store.set("k", {"a": 1})

        assert store.get("k") == {"a": 1}
        assert store.get("missing") is None

    def test_values_are_copied(self):
        store = InMemoryCacheStore()
        value = {"a": [1]}
        store.set("k", value)

        value["a"].append(2)
        store.get("k")["a"].append(3)

        assert store.get("k") == {"a": [1]}

    def test_oldest_entries_evicted(self):
        store = InMemoryCacheStore(max_entries=2)
        store.set("a", 1)
        store.set("b", 2)
        store.set("c", 3)

        assert store.get("a") is None
        assert store.get("c") == 3
        assert len(store) == 2

    def test_concurrent_writes(self):
        store = InMemoryCacheStore()

        def write(i):
            for j in range(100):
                store.set(f"{i}-{j}", j)

        threads = [threading.Thread(target=write, args=(i,)) for i in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(store) == 400


class TestWithCalculationCache:
    """Tests for with_calculation_cache."""

    def test_second_call_served_from_cache(self, frame):
        calculation = MagicMock(return_value={"days": 364})
        cached = with_calculation_cache(calculation, "span", "1.0")
        store = InMemoryCacheStore()

        first = cached(store, frame)
        second = cached(store, frame)

        assert first == second == {"days": 364}
        assert calculation.call_count == 1

    def test_version_change_recalculates(self, frame):
        calculation = MagicMock(return_value={"days": 364})
        store = InMemoryCacheStore()

        with_calculation_cache(calculation, "span", "1.0")(store, frame)
        with_calculation_cache(calculation, "span", "1.1")(store, frame)

        assert calculation.call_count == 2

    def test_read_failure_calculates_without_write_back(self, frame):
        calculation = MagicMock(return_value={"days": 364})
        store = MagicMock()
        store.get.side_effect = ConnectionError("store down")

        result = with_calculation_cache(calculation, "span", "1.0")(store, frame)

        assert result == {"days": 364}
        store.set.assert_not_called()

    def test_write_failure_still_returns_result(self, frame):
        calculation = MagicMock(return_value={"days": 364})
        store = MagicMock()
        store.get.return_value = None
        store.set.side_effect = ConnectionError("store down")

        result = with_calculation_cache(calculation, "span", "1.0")(store, frame)

        assert result == {"days": 364}

    def test_calculation_failure_logged_and_reraised(self, frame, caplog):
        calculation = MagicMock(side_effect=RuntimeError("boom"))
        store = InMemoryCacheStore()

        with pytest.raises(RuntimeError, match="boom"):
            with_calculation_cache(calculation, "span", "1.0")(store, frame)

        assert "span (version 1.0) failed: boom" in caplog.text
        assert len(store) == 0

    @pytest.mark.parametrize("name, version", [("", "1.0"), ("span", "")])
    def test_name_and_version_required(self, name, version):
        with pytest.raises(ValueError, match="must not be empty"):
            with_calculation_cache(MagicMock(), name, version)
