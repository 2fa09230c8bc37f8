"""Short-lived memoization of projection and scoring results.

Keys are content addressed: a SHA-256 over the operation name, the entire
profile and the assumptions, serialized as sorted JSON. Any change to any
input therefore produces a new key. Entries older than the TTL are dropped
on access and never returned.
"""

import copy
import hashlib
import json
import logging
import time
from typing import Any, Callable

logger = logging.getLogger(__name__)

_MISSING = object()


def make_key(operation: str, profile: dict, assumptions: Any = None) -> str:
    """Build a deterministic cache key from every input of a calculation."""
    if hasattr(assumptions, "to_dict"):
        assumptions = assumptions.to_dict()
    key_data = json.dumps(
        {"operation": operation, "profile": profile, "assumptions": assumptions},
        sort_keys=True, default=str,
    )
    return hashlib.sha256(key_data.encode('utf-8')).hexdigest()


class ResultCache:
    def __init__(self, ttl_seconds: float = 300, clock: Callable[[], float] = time.monotonic):
        self.ttl = ttl_seconds
        self._clock = clock
        self._cache = {}
        self.hits = 0
        self.misses = 0

    def get(self, operation: str, profile: dict, assumptions: Any = None, default=None):
        key = make_key(operation, profile, assumptions)
        entry = self._cache.get(key)
        if entry is not None:
            if self._clock() - entry['time'] < self.ttl:
                self.hits += 1
                return copy.deepcopy(entry['data'])
            del self._cache[key]
        self.misses += 1
        return default

    def set(self, operation: str, profile: dict, value, assumptions: Any = None):
        # Keys that are never requested again would otherwise stay forever
        self.purge_expired()
        key = make_key(operation, profile, assumptions)
        self._cache[key] = {
            'time': self._clock(),
            'data': copy.deepcopy(value)
        }

    def get_or_compute(self, operation: str, profile: dict, compute: Callable[[], Any],
                       assumptions: Any = None):
        """Return the cached result, or compute, store and return it."""
        cached = self.get(operation, profile, assumptions, default=_MISSING)
        if cached is not _MISSING:
            logger.debug("Cache hit for %s", operation)
            return cached
        result = compute()
        self.set(operation, profile, result, assumptions)
        return result

    def invalidate(self):
        """Drop every entry."""
        self._cache.clear()

    def purge_expired(self) -> int:
        """Remove expired entries and return how many were dropped."""
        now = self._clock()
        expired = [k for k, v in self._cache.items() if now - v['time'] >= self.ttl]
        for key in expired:
            del self._cache[key]
        return len(expired)

    def stats(self) -> dict:
        return {"entries": len(self._cache), "hits": self.hits, "misses": self.misses, "ttl_seconds": self.ttl}

    def __len__(self):
        return len(self._cache)
