"""Test package for the citation cache.

Contains unit tests for:
- CitationCache load, get/put and persist
"""
