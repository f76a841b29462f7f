"""HTTP client factory for the citation metadata service.

All clients use httpx for async HTTP operations. Timeouts, base URL and
User-Agent come from Settings so callers never build clients by hand.
"""

from contextlib import asynccontextmanager
from enum import Enum
from typing import Any, AsyncGenerator

import httpx

from url2cite.core.config import Settings, get_settings
from url2cite.core.logging import get_logger


logger = get_logger(__name__)


class ServiceName(str, Enum):
    """External HTTP services url2cite talks to.
    
    - CITATION_API: citoid endpoint returning BibTeX for an arbitrary URL
    """
    CITATION_API = "citation-api"


class HTTPClientFactory:
    """Factory for creating HTTP clients to external services.
    
    Example:
        ```python
        factory = HTTPClientFactory()
        async with factory.get_client(ServiceName.CITATION_API) as client:
            response = await client.get(quote(url, safe=""))
        ```
    """
    
    def __init__(self, settings: Settings | None = None) -> None:
        """Initialize the HTTP client factory.
        
        Args:
            settings: Application settings. Uses get_settings() if not provided.
        """
        self._settings = settings or get_settings()
        self._service_urls = self._build_service_url_map()
    
    def _build_service_url_map(self) -> dict[ServiceName, str]:
        return {
            ServiceName.CITATION_API: self._settings.citation_api_url,
        }
    
    def get_base_url(self, service: ServiceName) -> str:
        """Get the base URL for a service.
        
        The URL always ends with a slash so relative request paths are
        appended rather than replacing the last path segment.
        
        Raises:
            ValueError: If service is not configured.
        """
        url = self._service_urls.get(service)
        if not url:
            raise ValueError(f"No URL configured for service: {service}")
        return url if url.endswith("/") else f"{url}/"
    
    def _client_kwargs(
        self,
        service: ServiceName,
        timeout: float | None,
        kwargs: dict[str, Any],
    ) -> dict[str, Any]:
        headers = {"User-Agent": self._settings.user_agent}
        headers.update(kwargs.pop("headers", None) or {})
        return {
            "base_url": self.get_base_url(service),
            "timeout": httpx.Timeout(timeout or self._settings.http_timeout_seconds),
            "headers": headers,
            "follow_redirects": True,
            **kwargs,
        }
    
    @asynccontextmanager
    async def get_client(
        self,
        service: ServiceName,
        timeout: float | None = None,
        **kwargs: Any,
    ) -> AsyncGenerator[httpx.AsyncClient, None]:
        """Get an HTTP client for a specific service.
        
        Args:
            service: Target service to communicate with.
            timeout: Request timeout in seconds. Uses settings default if not specified.
            **kwargs: Additional arguments passed to httpx.AsyncClient.
        
        Yields:
            Configured httpx.AsyncClient instance.
        """
        client_kwargs = self._client_kwargs(service, timeout, kwargs)
        
        logger.debug(
            "Creating HTTP client",
            service=service.value,
            base_url=client_kwargs["base_url"],
        )
        
        async with httpx.AsyncClient(**client_kwargs) as client:
            yield client
