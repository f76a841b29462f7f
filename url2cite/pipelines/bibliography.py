"""Embedded Bibliography pass.

Code blocks with the ``url2cite-bibtex`` class hold hand-written BibTeX for
sources the citation service cannot describe. Their entries are merged into
the cache under their own ids and the blocks are dropped from the document.

Embedded ids are used as written and are not passed through escape_url().
With id escaping on (the default), a citation of a URL is rewritten to the
escaped key, so an embedded entry whose id is that URL only matches its
citations when ``url2cite-escape-ids`` is false.
"""

from __future__ import annotations

import json
from typing import Any

from url2cite.cache.citation_cache import CitationCache
from url2cite.clients.protocols import MetadataAdapterProtocol
from url2cite.core.logging import get_logger
from url2cite.document.ast import Node, NodeKind, Replacement, kind_of
from url2cite.schemas.cache import CacheEntry


logger = get_logger(__name__)

BIBTEX_BLOCK_CLASS = "url2cite-bibtex"


def _same_record(left: dict[str, Any], right: dict[str, Any]) -> bool:
    return json.dumps(left, ensure_ascii=False) == json.dumps(right, ensure_ascii=False)


class EmbeddedBibliography:
    """Pass that ingests ``url2cite-bibtex`` code blocks into the cache."""

    def __init__(self, cache: CitationCache, adapter: MetadataAdapterProtocol) -> None:
        self._cache = cache
        self._adapter = adapter

    async def __call__(self, node: Node, output_format: str, meta: dict[str, Any]) -> Replacement:
        if kind_of(node) is not NodeKind.CODE_BLOCK:
            return None
        (_identifier, classes, _attributes), content = node["c"]
        if BIBTEX_BLOCK_CLASS not in classes:
            return None

        added = 0
        for record in await self._adapter.bibtex_to_csl(content):
            key = record.get("id")
            if not key:
                logger.warning("skipping embedded bibtex entry without id", record=record)
                continue
            existing = self._cache.get(key)
            if existing is not None and _same_record(existing.record, record):
                continue
            self._cache.put(key, CacheEntry(raw_text=[], record=record))
            added += 1

        if added:
            logger.info("added embedded bibliography entries", count=added)
            await self._cache.persist()
        return []
