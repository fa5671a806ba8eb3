"""Disk-based cache for documents fetched from URLs.

Uses :mod:`diskcache` to persist parsed documents on the filesystem with a
configurable time-to-live (TTL).  Only remote sources are cached; local
files and stdin are always read fresh.

Cache keys are SHA-256 hashes of the source URL.

See Also:
    :class:`~schemalens.models.CacheConfig` -- the Pydantic model that
    controls ``enabled`` and ``ttl_seconds``.
"""

from __future__ import annotations

import hashlib
from pathlib import Path
from typing import Any, Optional

import diskcache

from schemalens.models import CacheConfig


class DocumentCache:
    """Disk-backed cache for parsed remote documents.

    Stores document dicts in a :class:`diskcache.Cache` directory.  Entries
    expire after :attr:`~schemalens.models.CacheConfig.ttl_seconds`.  When
    the config is disabled every lookup misses and every write is skipped.

    Args:
        cache_dir: Root directory for the cache.  A ``documents/``
            subdirectory is created inside it.
        config: Cache configuration (``enabled`` flag and ``ttl_seconds``).

    Example::

        from schemalens.cache import DocumentCache
        from schemalens.models import CacheConfig

        cache = DocumentCache("/tmp/schemalens-cache", CacheConfig(ttl_seconds=60))
        cache.set("https://api.example.com/openapi.json", {"openapi": "3.1.0"})
        hit = cache.get("https://api.example.com/openapi.json")
    """

    def __init__(self, cache_dir: str | Path, config: CacheConfig) -> None:
        self._config = config
        self._cache: Optional[diskcache.Cache] = None
        self._cache_dir = Path(cache_dir)
        if config.enabled:
            self._cache = diskcache.Cache(str(self._cache_dir / "documents"))

    def get(self, url: str) -> Optional[dict[str, Any]]:
        """Return the cached document for *url*, or ``None`` on a miss."""
        if self._cache is None:
            return None
        return self._cache.get(self._make_key(url))

    def set(self, url: str, document: dict[str, Any]) -> None:
        """Store *document* under *url* with the configured TTL."""
        if self._cache is None:
            return
        self._cache.set(self._make_key(url), document, expire=self._config.ttl_seconds)

    def invalidate(self, url: str) -> None:
        """Remove the entry for *url*, if any."""
        if self._cache is None:
            return
        self._cache.delete(self._make_key(url))

    def clear(self) -> None:
        """Remove all entries from the cache."""
        if self._cache is not None:
            self._cache.clear()

    def stats(self) -> dict[str, Any]:
        """Return cache statistics.

        Returns:
            A ``dict`` with ``enabled`` (bool), and when enabled:
            ``size`` (number of entries), ``directory`` (str path), and
            ``ttl_seconds`` (int).
        """
        if self._cache is None:
            return {"enabled": False}
        return {
            "enabled": True,
            "size": len(self._cache),
            "directory": str(self._cache_dir / "documents"),
            "ttl_seconds": self._config.ttl_seconds,
        }

    def close(self) -> None:
        """Close the underlying :class:`diskcache.Cache` and release resources."""
        if self._cache is not None:
            self._cache.close()

    def _make_key(self, url: str) -> str:
        return hashlib.sha256(url.encode()).hexdigest()
