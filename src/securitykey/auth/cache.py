"""Time-bounded memo of successful authentication outcomes."""

from __future__ import annotations

import threading
import time
from collections import OrderedDict
from collections.abc import Callable, Hashable

from .models import AuthenticationOutcome

DEFAULT_MAX_ENTRIES = 1024


class ClaimCache:
    """Thread-safe cache with independent per-entry expiry and LRU eviction.

    Only ever consulted for outcomes that validation already produced, so a
    hit, miss or expiry changes latency, not the decision.
    """

    def __init__(
        self,
        ttl_seconds: float,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize cache.

        Args:
            ttl_seconds: Lifetime of each entry
            max_entries: Maximum number of entries to keep (LRU eviction)
            clock: Monotonic time source (injectable for tests)
        """
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        if max_entries <= 0:
            raise ValueError("max_entries must be positive")

        self._ttl = ttl_seconds
        self._max_entries = max_entries
        self._clock = clock
        self._entries: OrderedDict[Hashable, tuple[float, AuthenticationOutcome]] = OrderedDict()
        self._lock = threading.Lock()

    @property
    def ttl_seconds(self) -> float:
        return self._ttl

    def get(self, key: Hashable) -> AuthenticationOutcome | None:
        """Get a cached outcome, dropping it if expired."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None

            expires_at, outcome = entry
            if self._clock() >= expires_at:
                del self._entries[key]
                return None

            self._entries.move_to_end(key)
            return outcome

    def set(self, key: Hashable, outcome: AuthenticationOutcome) -> None:
        """Cache an outcome for ttl_seconds."""
        with self._lock:
            self._entries[key] = (self._clock() + self._ttl, outcome)
            self._entries.move_to_end(key)

            # Evict oldest if over limit
            while len(self._entries) > self._max_entries:
                self._entries.popitem(last=False)

    def clear(self) -> None:
        """Remove all entries."""
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
