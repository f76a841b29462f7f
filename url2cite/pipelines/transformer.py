"""Citation/Link Transformer pass.

Rewrites the document so every citation points at a cached record:

- Cite nodes: each ``@id`` is resolved to a URL (the id itself, or a key
  from the CiteKeyTable) and replaced by the URL's citation key.
- Link nodes: converted to citations when enabled globally
  (``url2cite: all-links``) or per link, unless disabled per link.

Output shapes for converted links:
- cite-only: [text](href) becomes [@href]
- sup: [text](href) becomes [text](href)^[@href]^
- normal: [text](href) becomes [text [@href]](href)

Missing records are fetched on first use and persisted immediately, so a
URL is fetched at most once per run and a crash loses at most one fetch.
"""

from __future__ import annotations

import json
import re
from typing import Any

from url2cite.cache.citation_cache import CitationCache
from url2cite.clients.protocols import MetadataAdapterProtocol
from url2cite.core.exceptions import UnknownOutputFormatError, UnresolvedCitationError
from url2cite.core.logging import get_logger
from url2cite.document.ast import (
    Node,
    NodeKind,
    Replacement,
    attr,
    citation,
    cite,
    kind_of,
    link,
    space,
    superscript,
    walk,
)
from url2cite.document.ids import escape_url, is_url
from url2cite.pipelines.citekeys import CiteKeyTable
from url2cite.schemas.cache import CacheEntry
from url2cite.schemas.config import DocumentConfig, LinkOutput


logger = get_logger(__name__)

ENABLE_MARKER = "url2cite"
DISABLE_MARKER = "no-url2cite"
CITE_META_ATTRIBUTE = "cite-meta"

_ENABLE_TITLE = re.compile(r"\burl2cite\b")
_DISABLE_TITLE = re.compile(r"\bno-url2cite\b")

_LINK_OUTPUTS = frozenset(shape.value for shape in LinkOutput)


class CitationTransformer:
    """Pass that resolves citations and converts links."""

    def __init__(
        self,
        config: DocumentConfig,
        cache: CitationCache,
        citekeys: CiteKeyTable,
        adapter: MetadataAdapterProtocol,
    ) -> None:
        self._config = config
        self._cache = cache
        self._citekeys = citekeys
        self._adapter = adapter

    async def __call__(self, node: Node, output_format: str, meta: dict[str, Any]) -> Replacement:
        kind = kind_of(node)
        if kind is NodeKind.CITE:
            await self._resolve_citations(node)
            return None
        if kind is NodeKind.LINK:
            return await self._convert_link(node, output_format, meta)
        return None

    # =========================================================================
    # Cache
    # =========================================================================

    def citation_key(self, url: str) -> str:
        return escape_url(url, self._config.escape_ids)

    async def resolve_url(self, url: str) -> CacheEntry:
        """Return the cached entry for a URL, fetching and persisting it if new."""
        entry = self._cache.get(url)
        if entry is not None:
            return entry
        entry = await self._adapter.fetch_record(url)
        entry.record["id"] = self.citation_key(url)
        self._cache.put(url, entry)
        await self._cache.persist()
        return entry

    # =========================================================================
    # Citations
    # =========================================================================

    async def _resolve_citations(self, node: Node) -> None:
        citations, _inlines = node["c"]
        for reference in citations:
            citation_id = reference["citationId"]
            url = citation_id if is_url(citation_id) else self._citekeys.lookup(citation_id)
            if url is None:
                if self._config.allow_dangling_citations:
                    logger.debug("leaving dangling citation", citation_id=citation_id)
                    continue
                raise UnresolvedCitationError(citation_id)
            await self.resolve_url(url)
            reference["citationId"] = self.citation_key(url)

    # =========================================================================
    # Links
    # =========================================================================

    def should_convert(self, classes: list[str], title: str) -> bool:
        """Decide whether a link becomes a citation.

        A per-link disable marker always wins; otherwise either the global
        all-links mode or a per-link enable marker converts the link.
        """
        if DISABLE_MARKER in classes or _DISABLE_TITLE.search(title):
            return False
        return (
            self._config.all_links
            or ENABLE_MARKER in classes
            or bool(_ENABLE_TITLE.search(title))
        )

    async def _convert_link(
        self, node: Node, output_format: str, meta: dict[str, Any]
    ) -> Replacement:
        (identifier, classes, attributes), inlines, (url, title) = node["c"]
        if not self.should_convert(classes, title):
            return None
        if not is_url(url):
            # relative or internal target, keep it as a link
            return None

        shape = self._config.resolve_link_output(output_format)
        if shape not in _LINK_OUTPUTS:
            raise UnknownOutputFormatError(shape)

        entry = await self.resolve_url(url)
        citation_node = cite([citation(self.citation_key(url))])
        if shape == LinkOutput.CITE_ONLY.value:
            return citation_node

        # replacements are final: resolve citations in the link text now
        inlines = await walk(inlines, self, output_format, meta)

        link_attr = attr(
            identifier,
            classes,
            [
                *attributes,
                [CITE_META_ATTRIBUTE, json.dumps(entry.record, ensure_ascii=False, separators=(",", ":"))],
            ],
        )
        if shape == LinkOutput.SUP.value:
            return [
                link(link_attr, list(inlines), [url, title]),
                superscript([citation_node]),
            ]
        return link(link_attr, [*inlines, space(), citation_node], [url, title])
