"""Test package for schemas.

Contains unit tests for:
- DocumentConfig option parsing and link output defaults
- CacheEntry and CacheFile serialization
"""
