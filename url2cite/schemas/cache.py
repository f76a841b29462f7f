"""Pydantic models for the citation cache file.

On disk the cache keeps the field names pandoc-url2cite has always used
(``_info``, ``fetched``, ``bibtex``, ``csl``) so existing cache files load
unchanged. In Python the fields carry descriptive names; aliases map between
the two. Keys added by hand are kept as extra fields and written back.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


DEFAULT_CACHE_INFO = (
    "Auto-generated by pandoc-url2cite. Feel free to modify, keys will never be overwritten."
)


def utc_timestamp() -> str:
    """Current UTC time as ISO-8601 with milliseconds and a ``Z`` suffix."""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


class CacheEntry(BaseModel):
    """One resolved URL.

    Attributes:
        fetched_at: When the record was fetched (or ingested)
        raw_text: Lines of the fetched BibTeX; empty for embedded entries
        record: CSL JSON record; ``record["id"]`` is the citation key
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    fetched_at: str = Field(default_factory=utc_timestamp, alias="fetched")
    raw_text: list[str] = Field(default_factory=list, alias="bibtex")
    record: dict[str, Any] = Field(..., alias="csl")


class CacheFile(BaseModel):
    """Whole cache document: an info banner and URL-keyed entries."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    info: str = Field(default=DEFAULT_CACHE_INFO, alias="_info")
    urls: dict[str, CacheEntry] = Field(default_factory=dict)
