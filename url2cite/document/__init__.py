"""Pandoc document model: AST nodes, traversal, metadata and ids."""

from url2cite.document.ast import NodeKind, filter_document, kind_of, walk
from url2cite.document.ids import escape_url, is_url
from url2cite.document.meta import meta_map_to_raw, meta_to_raw, raw_to_meta


__all__ = [
    "NodeKind",
    "escape_url",
    "filter_document",
    "is_url",
    "kind_of",
    "meta_map_to_raw",
    "meta_to_raw",
    "raw_to_meta",
    "walk",
]
