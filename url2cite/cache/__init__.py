"""Persistent citation cache."""

from url2cite.cache.citation_cache import CitationCache


__all__ = ["CitationCache"]
