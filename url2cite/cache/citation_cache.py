"""Citation Cache - persistent, fetch-once store of CSL records keyed by URL.

Lifecycle: loaded once at the start of a run, appended to while the passes
resolve URLs, written back after every fetched entry and at the end of the
run. A URL already present is never fetched again, so hand edits to the
cache file survive.

File format: UTF-8 JSON, tab-indented, non-ASCII kept verbatim.
"""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from url2cite.core.logging import get_logger
from url2cite.schemas.cache import CacheEntry, CacheFile
from url2cite.schemas.config import DEFAULT_CACHE_PATH


logger = get_logger(__name__)


class CitationCache:
    """URL -> CacheEntry store backed by a JSON file.

    Usage:
        cache = await CitationCache.load("citation-cache.json")
        if not cache.has(url):
            cache.put(url, await adapter.fetch_record(url))
            await cache.persist()
    """

    def __init__(
        self,
        path: str | Path = DEFAULT_CACHE_PATH,
        data: CacheFile | None = None,
        unreadable: dict[str, Any] | None = None,
    ) -> None:
        """Initialize an in-memory cache bound to a file path.

        Args:
            path: Where persist() writes the cache
            data: Existing cache contents (empty if not provided)
            unreadable: Raw entries that failed validation, written back as-is
        """
        self._path = Path(path)
        self._data = data or CacheFile()
        self._unreadable = dict(unreadable or {})

    @classmethod
    async def load(cls, path: str | Path = DEFAULT_CACHE_PATH) -> "CitationCache":
        """Load the cache file, starting empty if it is missing or corrupt.

        Never raises for an unreadable file: the first run of a document has
        no cache yet. Entries that fail validation are skipped with a warning
        but kept verbatim, so the next persist() writes them back unchanged.
        """
        cache_path = Path(path)
        try:
            text = await asyncio.to_thread(cache_path.read_text, encoding="utf-8")
        except FileNotFoundError:
            logger.debug("no citation cache yet, starting empty", path=str(cache_path))
            return cls(cache_path)
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("could not read citation cache, starting empty",
                           path=str(cache_path), error=str(e))
            return cls(cache_path)

        try:
            raw = json.loads(text)
            if not isinstance(raw, dict) or not isinstance(raw.get("urls", {}), dict):
                raise ValueError("expected an object with a 'urls' object")
            data = CacheFile.model_validate({**raw, "urls": {}})
        except (ValueError, ValidationError) as e:
            logger.warning("ignoring malformed citation cache",
                           path=str(cache_path), error=str(e))
            return cls(cache_path)

        unreadable: dict[str, Any] = {}
        for url, item in raw.get("urls", {}).items():
            try:
                data.urls[url] = CacheEntry.model_validate(item)
            except ValidationError as e:
                logger.warning("skipping unreadable cache entry",
                               path=str(cache_path), url=url, error=str(e))
                unreadable[url] = item

        logger.debug("loaded citation cache", path=str(cache_path), entries=len(data.urls))
        return cls(cache_path, data, unreadable)

    @property
    def path(self) -> Path:
        return self._path

    def has(self, url: str) -> bool:
        return url in self._data.urls

    def get(self, url: str) -> CacheEntry | None:
        return self._data.urls.get(url)

    def put(self, url: str, entry: CacheEntry) -> None:
        """Add or replace the entry for ``url``."""
        self._unreadable.pop(url, None)
        self._data.urls[url] = entry

    def records(self) -> list[dict[str, Any]]:
        """All CSL records, in insertion order."""
        return [entry.record for entry in self._data.urls.values()]

    def __len__(self) -> int:
        return len(self._data.urls)

    def to_json(self) -> str:
        """Serialize the cache exactly as it is written to disk."""
        payload = self._data.model_dump(by_alias=True)
        for url, item in self._unreadable.items():
            payload["urls"].setdefault(url, item)
        return json.dumps(
            payload,
            indent="\t",
            ensure_ascii=False,
        )

    async def persist(self) -> None:
        """Write the whole cache to its path."""
        await asyncio.to_thread(self._path.write_text, self.to_json(), encoding="utf-8")
        logger.debug("wrote citation cache", path=str(self._path), entries=len(self))
