"""Disk-based caching of remote documents.

This package provides :class:`DocumentCache`, which stores parsed OpenAPI
documents fetched over HTTP(S) using :mod:`diskcache`, keyed by source URL
with a configurable TTL.

The cache is consumed by :func:`~schemalens.parser.loader.load_document`
and is controlled by the ``cache`` section of the global configuration
(:class:`~schemalens.models.CacheConfig`).
"""

from schemalens.cache.cache import DocumentCache

__all__ = ["DocumentCache"]
