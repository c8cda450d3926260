"""Memoization of whole calculations.

A calculation is identified by the SHA-256 hash of its function name, the
calculator version and the deterministically serialized input. Changing any
of the three yields a new key, so results of older calculator versions are
never served.

The backing store is injected; ``InMemoryCacheStore`` is provided for
single-process use and tests.
"""

import copy
import hashlib
import json
import logging
import threading
from collections import OrderedDict
from collections.abc import Callable
from typing import Any, Protocol, TypeVar

from pydantic import BaseModel

InputT = TypeVar("InputT", bound=BaseModel)
OutputT = TypeVar("OutputT")

logger = logging.getLogger(__name__)


class CacheStore(Protocol):
    """Key/value store for calculation results."""

    def get(self, key: str) -> Any | None:
        """Return the cached value, or None on a miss."""
        ...

    def set(self, key: str, value: Any) -> None:
        """Store a value, replacing any existing one."""
        ...


class InMemoryCacheStore:
    """Thread-safe in-process cache store.

    Values are copied on the way in and out so callers cannot mutate cached
    results. When ``max_entries`` is set the oldest entries are evicted
    first.

    Args:
        max_entries: Maximum number of entries (None = unbounded)
    """

    def __init__(self, max_entries: int | None = None):
        self.max_entries = max_entries
        self._entries: OrderedDict[str, Any] = OrderedDict()
        self._lock = threading.Lock()

    def get(self, key: str) -> Any | None:
        with self._lock:
            value = self._entries.get(key)
        return copy.deepcopy(value)

    def set(self, key: str, value: Any) -> None:
        value = copy.deepcopy(value)
        with self._lock:
            self._entries[key] = value
            self._entries.move_to_end(key)
            if self.max_entries is not None:
                while len(self._entries) > self.max_entries:
                    self._entries.popitem(last=False)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


def generate_calculation_hash(
    function_name: str, calculator_version: str, function_input: BaseModel
) -> str:
    """Build the cache key of a calculation.

    The input is dumped in JSON mode with sorted keys, so equal inputs give
    equal keys regardless of construction order.
    """
    serialized_input = json.dumps(
        function_input.model_dump(mode="json"),
        sort_keys=True,
        separators=(",", ":"),
        default=str,
    )
    data = f"{function_name}:{calculator_version}:{serialized_input}"
    return hashlib.sha256(data.encode("utf-8")).hexdigest()


def with_calculation_cache(
    calculation: Callable[[InputT], OutputT],
    function_name: str,
    calculator_version: str,
) -> Callable[[CacheStore, InputT], OutputT]:
    """Wrap a calculation with a write-through cache.

    A store read failure is treated as a miss; the result of that call is
    then not written back. A store write failure is logged and the result is
    still returned. Calculation failures are logged and re-raised.

    Args:
        calculation: Calculation taking a single pydantic input model
        function_name: Name used in the cache key
        calculator_version: Version used in the cache key

    Returns:
        Function of (store, input) returning the cached or calculated output

    Raises:
        ValueError: If function_name or calculator_version is empty
    """
    if not function_name:
        msg = "function_name must not be empty"
        raise ValueError(msg)
    if not calculator_version:
        msg = "calculator_version must not be empty"
        raise ValueError(msg)

    def cached(store: CacheStore, function_input: InputT) -> OutputT:
        key = generate_calculation_hash(function_name, calculator_version, function_input)

        write_back = True
        try:
            cached_result = store.get(key)
        except Exception as e:
            logger.warning(f"Cache read failed for {function_name}, calculating instead: {e}")
            cached_result = None
            write_back = False

        if cached_result is not None:
            logger.debug(f"Cache hit for {function_name} ({key[:12]})")
            return cached_result

        logger.debug(f"Cache miss for {function_name} ({key[:12]})")
        try:
            result = calculation(function_input)
        except Exception as e:
            logger.error(
                f"Calculation {function_name} (version {calculator_version}) failed: {e}"
            )
            raise

        if write_back:
            try:
                store.set(key, result)
            except Exception as e:
                logger.warning(f"Cache write failed for {function_name}: {e}")

        return result

    return cached
