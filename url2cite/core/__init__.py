"""Core module - Configuration, logging, HTTP clients, and exceptions.

Exports:
    - Settings, get_settings: Pydantic Settings configuration
    - configure_logging, ensure_logging, get_logger: Structured logging (structlog)
    - HTTPClientFactory, ServiceName: HTTP clients
    - Exception classes: Url2CiteError, FetchError, etc.
"""

from url2cite.core.config import Settings, get_settings
from url2cite.core.exceptions import (
    ConfigurationError,
    ConversionError,
    FetchError,
    MalformedReferenceError,
    UnknownOutputFormatError,
    UnresolvedCitationError,
    Url2CiteError,
)
from url2cite.core.http import HTTPClientFactory, ServiceName
from url2cite.core.logging import configure_logging, ensure_logging, get_logger


__all__ = [
    # Exceptions
    "ConfigurationError",
    "ConversionError",
    "FetchError",
    # HTTP Clients
    "HTTPClientFactory",
    "MalformedReferenceError",
    "ServiceName",
    # Configuration
    "Settings",
    "UnknownOutputFormatError",
    "UnresolvedCitationError",
    "Url2CiteError",
    # Logging
    "configure_logging",
    "ensure_logging",
    "get_logger",
    "get_settings",
]
