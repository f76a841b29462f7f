"""Document Orchestrator.

Runs the citation passes over one pandoc JSON document:

1. load options from metadata and the cache from disk;
2. CiteKeyExtractor -> EmbeddedBibliography -> CitationTransformer,
   each over the whole document, in that order;
3. put every cached record into ``meta.references`` (ahead of any
   references already there) so citeproc can render them;
4. persist the cache and, if configured, write a BibLaTeX file.

Unused references are harmless: citeproc ignores keys nobody cites.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any, Mapping

from url2cite.cache.citation_cache import CitationCache
from url2cite.clients.metadata import MetadataAdapter
from url2cite.clients.protocols import MetadataAdapterProtocol
from url2cite.core.logging import ensure_logging, get_logger
from url2cite.document.ast import filter_document
from url2cite.document.meta import meta_to_raw, raw_to_meta
from url2cite.pipelines.bibliography import EmbeddedBibliography
from url2cite.pipelines.citekeys import CiteKeyExtractor, CiteKeyTable
from url2cite.pipelines.transformer import CitationTransformer
from url2cite.schemas.config import DocumentConfig


logger = get_logger(__name__)


def read_options(meta: Mapping[str, Any]) -> dict[str, Any]:
    """Unwrap the ``url2cite*`` entries of a document's metadata."""
    return {
        key: meta_to_raw(value)
        for key, value in meta.items()
        if key == "url2cite" or key.startswith("url2cite-")
    }


class Url2Cite:
    """Resolve citations and links in pandoc documents.

    The cache and the citekey table belong to the orchestrator and are
    handed to each pass; they are reset at the start of every transform.

    Usage:
        url2cite = Url2Cite()
        document = await url2cite.transform(document, "html")
    """

    def __init__(
        self,
        adapter: MetadataAdapterProtocol | None = None,
        overrides: Mapping[str, Any] | None = None,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            adapter: Metadata adapter (MetadataAdapter if not provided)
            overrides: Host option values that win over document metadata
        """
        ensure_logging()
        self._adapter = adapter or MetadataAdapter()
        self._overrides = dict(overrides or {})
        self.cache = CitationCache()
        self.citekeys = CiteKeyTable()
        self.config = DocumentConfig()

    async def transform(self, document: dict[str, Any], output_format: str) -> dict[str, Any]:
        """Run all passes over a document.

        Args:
            document: pandoc JSON document, rewritten in place
            output_format: pandoc output format (first filter argument)

        Returns:
            The rewritten document.

        Raises:
            Url2CiteError: On any fatal resolution error. Cache entries
                persisted before the failure stay on disk.
        """
        meta = document.setdefault("meta", {})
        self.config = DocumentConfig.from_meta(read_options(meta), self._overrides)
        self.cache = await CitationCache.load(self.config.cache_path)
        self.citekeys = CiteKeyTable()

        document = await filter_document(
            document, CiteKeyExtractor(self.citekeys), output_format
        )
        document = await filter_document(
            document, EmbeddedBibliography(self.cache, self._adapter), output_format
        )
        document = await filter_document(
            document,
            CitationTransformer(self.config, self.cache, self.citekeys, self._adapter),
            output_format,
        )
        logger.info(
            "got all citations from URLs",
            count=len(self.cache),
            citekeys=len(self.citekeys),
        )

        self.merge_references(document["meta"])
        await self.cache.persist()

        if self.config.output_bib:
            await self.write_bib(self.config.output_bib)
        return document

    def merge_references(self, meta: dict[str, Any]) -> None:
        """Set ``references`` to all cached records followed by existing ones."""
        existing = meta.get("references")
        existing_refs = (
            existing["c"]
            if isinstance(existing, dict) and existing.get("t") == "MetaList"
            else []
        )
        generated = raw_to_meta(self.cache.records())
        meta["references"] = {"t": "MetaList", "c": generated["c"] + existing_refs}

    async def write_bib(self, path: str | Path) -> None:
        """Write every cached record as BibLaTeX."""
        content = await self._adapter.csl_to_bibtex(self.cache.records())
        await asyncio.to_thread(Path(path).write_text, content, encoding="utf-8")
        logger.info("wrote bib file", path=str(path), entries=len(self.cache))
