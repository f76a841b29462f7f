"""Test configuration and shared fixtures.

Pattern: Pytest fixtures, conftest.py
"""

from __future__ import annotations

from typing import Any

import pytest

from url2cite.core.config import Settings
from tests.fakes.fake_clients import FakeMetadataAdapter


# ============================================================================
# Configuration Fixtures
# ============================================================================

@pytest.fixture
def test_settings() -> Settings:
    """Create test settings with safe defaults."""
    return Settings(
        citation_api_url="http://citation.test/api/rest_v1/data/citation/bibtex",
        http_timeout_seconds=5,
        pandoc_path="pandoc",
        log_level="DEBUG",
    )


# ============================================================================
# Record Fixtures
# ============================================================================

@pytest.fixture
def example_record() -> dict[str, Any]:
    """CSL record as returned for http://example.com."""
    return {
        "id": "example",
        "type": "webpage",
        "title": "Example Domain",
        "URL": "http://example.com",
    }


@pytest.fixture
def fake_adapter(example_record: dict[str, Any]) -> FakeMetadataAdapter:
    """Fake adapter that knows a handful of URLs."""
    return FakeMetadataAdapter(
        records={
            "http://example.com": example_record,
            "http://x": {"id": "x", "type": "webpage", "title": "X"},
            "https://example.org/a?b=c": {"id": "org", "type": "article", "title": "A"},
        }
    )


@pytest.fixture
def cache_path(tmp_path: Any) -> Any:
    """Location for a throwaway cache file."""
    return tmp_path / "citation-cache.json"
