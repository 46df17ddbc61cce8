"""
Checksum-keyed memoization with TTL expiry.

An entry is reused when it was stored under the same key, from input with
the same checksum, no more than ``ttl`` seconds ago. The checksum is a CRC-32
of a canonical JSON dump: cheap, not collision-proof. It is meant to detect
"the same records were passed again", not to guarantee exactness.

The cache is an explicit object owned by its caller; there is no
module-level instance.
"""

from __future__ import annotations

import json
import logging
import time
import zlib
from collections.abc import Callable
from dataclasses import asdict, dataclass, is_dataclass
from typing import Any, TypeVar

import numpy as np

log = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_TTL = 60.0


def _canonical(obj: Any) -> Any:
    if is_dataclass(obj) and not isinstance(obj, type):
        return asdict(obj)
    if isinstance(obj, np.generic):
        return obj.item()
    if isinstance(obj, np.ndarray):
        return obj.tolist()
    if isinstance(obj, (set, frozenset)):
        return sorted(obj, key=repr)
    return repr(obj)


def compute_checksum(data: Any) -> str:
    """
    Structural checksum of ``data`` as an 8-digit hex string.

    Dict key order does not matter; list order does. Dataclasses hash by
    their fields.
    """
    text = json.dumps(data, sort_keys=True, default=_canonical, separators=(",", ":"))
    return f"{zlib.crc32(text.encode('utf-8')):08x}"


@dataclass
class _Entry:
    result: Any
    timestamp: float
    checksum: str


@dataclass(frozen=True)
class CacheStats:
    """Snapshot of the cache contents (timestamps from the cache clock)."""

    size: int
    keys: list[str]
    oldest: float | None
    newest: float | None


class ComputationCache:
    """
    Memoizes expensive computations keyed by name and input checksum.

    Args:
        ttl: Default time-to-live in seconds
        clock: Zero-argument callable returning the current time in seconds

    **Example:**
        ```python
        cache = ComputationCache(ttl=60)
        data = cache.get_cached_data("dashboard", payload, lambda: compute(payload))
        ```
    """

    def __init__(self, ttl: float = DEFAULT_TTL, clock: Callable[[], float] = time.monotonic):
        self.ttl = ttl
        self._clock = clock
        self._entries: dict[str, _Entry] = {}

    def get_cached_data(
        self,
        key: str,
        input_data: Any,
        compute_fn: Callable[[], T],
        ttl: float | None = None,
    ) -> T:
        """
        Return the cached result for ``key`` or compute and store a fresh one.

        Args:
            key: Cache slot name
            input_data: Data the result was derived from; a different checksum
                invalidates the slot
            compute_fn: Called only on a miss
            ttl: Overrides the default time-to-live for this lookup

        Returns:
            The cached or freshly computed result
        """
        ttl = self.ttl if ttl is None else ttl
        now = self._clock()
        checksum = compute_checksum(input_data)

        entry = self._entries.get(key)
        if entry is not None:
            if entry.checksum == checksum and now - entry.timestamp <= ttl:
                log.debug("cache hit for %r", key)
                return entry.result
            reason = "input changed" if entry.checksum != checksum else "expired"
            log.debug("cache miss for %r (%s)", key, reason)
        else:
            log.debug("cache miss for %r (empty)", key)

        result = compute_fn()
        self._entries[key] = _Entry(result, now, checksum)
        return result

    def clear_cache(self, pattern: str | None = None) -> None:
        """Remove entries whose key contains ``pattern``, or all entries."""
        if pattern:
            for key in [k for k in self._entries if pattern in k]:
                del self._entries[key]
        else:
            self._entries.clear()

    def stats(self) -> CacheStats:
        timestamps = [e.timestamp for e in self._entries.values()]
        return CacheStats(
            size=len(self._entries),
            keys=list(self._entries),
            oldest=min(timestamps) if timestamps else None,
            newest=max(timestamps) if timestamps else None,
        )

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return key in self._entries
