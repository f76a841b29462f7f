"""Unit tests for url2cite.core.config module.

Tests Settings defaults, environment overrides and the cached accessor.
"""

import pytest

from url2cite.core.config import Settings, get_settings


class TestSettings:
    """Tests for Settings class."""
    
    def test_default_service_name(self) -> None:
        """Test default service name."""
        settings = Settings()
        
        assert settings.service_name == "url2cite"
    
    def test_default_citation_api(self) -> None:
        """Citation lookups default to the Wikipedia citoid endpoint."""
        settings = Settings()
        
        assert settings.citation_api_url == (
            "https://en.wikipedia.org/api/rest_v1/data/citation/bibtex"
        )
    
    def test_default_pandoc_path(self) -> None:
        """Test pandoc is looked up on PATH by default."""
        assert Settings().pandoc_path == "pandoc"
    
    def test_env_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test URL2CITE_ prefixed environment variables override defaults."""
        monkeypatch.setenv("URL2CITE_PANDOC_PATH", "/opt/pandoc/bin/pandoc")
        monkeypatch.setenv("URL2CITE_HTTP_TIMEOUT_SECONDS", "2.5")
        
        settings = Settings()
        
        assert settings.pandoc_path == "/opt/pandoc/bin/pandoc"
        assert settings.http_timeout_seconds == 2.5
    
    def test_env_is_case_insensitive(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test lowercase environment variable names are accepted."""
        monkeypatch.setenv("url2cite_log_level", "DEBUG")
        
        assert Settings().log_level == "DEBUG"
    
    def test_timeout_must_be_positive(self) -> None:
        """Test a zero timeout is rejected."""
        with pytest.raises(ValueError):
            Settings(http_timeout_seconds=0)


class TestGetSettings:
    """Tests for get_settings function."""
    
    def test_returns_settings(self) -> None:
        assert isinstance(get_settings(), Settings)
    
    def test_is_cached(self) -> None:
        """Test get_settings returns the same instance."""
        assert get_settings() is get_settings()
