"""
cache.py — In-Memory Cache Utilities

Purpose:
- Cache repeated lookups that are expensive relative to a request:
    * Session user → role (read from the `profiles` table on every
      authenticated request otherwise)
- In-process Python dict with optional per-entry TTL.

Key Notes:
- The backend runs as a single worker, so an in-memory cache is acceptable.
- Cache keys are deterministic: "<namespace>:<identifier>".
- Expired entries are dropped lazily on read.

This module does NOT:
- Connect to Redis.
- Share entries between processes.
"""

import time
from typing import Any, Dict, Optional, Tuple

# Key: "<namespace>:<identifier>"
# Value: (cached object, monotonic expiry or None for no expiry)
_cache_store: Dict[str, Tuple[Any, Optional[float]]] = {}


def make_key(namespace: str, identifier: Any) -> str:
    """
    Utility to construct consistent cache keys.

    Example:
        make_key("role", "a1b2") → "role:a1b2"
    """
    return f"{namespace}:{identifier}"


def cache_get(key: str) -> Any:
    """
    Retrieve cached object if present and not expired.
    Returns None otherwise.
    """
    entry = _cache_store.get(key)
    if entry is None:
        return None
    value, expires_at = entry
    if expires_at is not None and time.monotonic() >= expires_at:
        del _cache_store[key]
        return None
    return value


def cache_set(key: str, value: Any, ttl_seconds: Optional[float] = None) -> None:
    """
    Store object in cache. `ttl_seconds=None` keeps it until cleared.
    """
    expires_at = time.monotonic() + ttl_seconds if ttl_seconds else None
    _cache_store[key] = (value, expires_at)


def cache_clear(namespace: str = None) -> None:
    """
    Clears cache entirely, or optionally clears only a specific namespace.

    Example:
        cache_clear("role") clears keys starting with "role:"
    """
    if namespace is None:
        _cache_store.clear()
    else:
        prefix = f"{namespace}:"
        for key in list(_cache_store.keys()):
            if key.startswith(prefix):
                del _cache_store[key]
