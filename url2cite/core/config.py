"""Process configuration using Pydantic Settings.

Environment variables are loaded with the URL2CITE_ prefix. Per-document
options (``url2cite-*`` metadata keys) live in
``url2cite.schemas.config.DocumentConfig``; this module only holds what the
process needs to reach its external collaborators.
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""
    
    # Service configuration
    service_name: str = "url2cite"
    environment: str = Field(default="development", description="Runtime environment")
    log_level: str = Field(default="INFO", description="Logging level")
    
    # Citation metadata service (citoid, BibTeX flavour)
    citation_api_url: str = Field(
        default="https://en.wikipedia.org/api/rest_v1/data/citation/bibtex",
        description="Base URL of the URL -> BibTeX citation service"
    )
    http_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Citation service request timeout"
    )
    user_agent: str = Field(
        default="url2cite (https://github.com/phiresky/pandoc-url2cite)",
        description="User-Agent header sent to the citation service"
    )
    
    # BibTeX <-> CSL JSON converter
    pandoc_path: str = Field(default="pandoc", description="pandoc executable")
    
    model_config = SettingsConfigDict(
        env_prefix="URL2CITE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.
    
    Returns:
        Settings: Application settings singleton
    """
    return Settings()
