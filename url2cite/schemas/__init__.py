"""Pydantic schemas for the cache file and document options."""

from url2cite.schemas.cache import (
    DEFAULT_CACHE_INFO,
    CacheEntry,
    CacheFile,
    utc_timestamp,
)
from url2cite.schemas.config import (
    DEFAULT_CACHE_PATH,
    DocumentConfig,
    LinkOutput,
)


__all__ = [
    "DEFAULT_CACHE_INFO",
    "DEFAULT_CACHE_PATH",
    "CacheEntry",
    "CacheFile",
    "DocumentConfig",
    "LinkOutput",
    "utc_timestamp",
]
