# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""In-memory key/value store with TTL expiry."""

from restcache.cache.store import CacheStore, coerce_int

__all__ = ["CacheStore", "coerce_int"]
