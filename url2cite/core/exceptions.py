"""Custom exceptions for url2cite.

All exceptions derive from Url2CiteError so a host can catch any fatal
transform error with a single except clause. Every one of them aborts the
current document transform; nothing is retried.

Cache-load failures are deliberately absent: a missing or corrupt cache file
is recovered by starting from an empty cache.
"""

from typing import Any


class Url2CiteError(Exception):
    """Base exception for all citation resolution errors."""
    
    def __init__(self, message: str) -> None:
        """Initialize error.
        
        Args:
            message: Error description
        """
        self.message = message
        super().__init__(message)


class FetchError(Url2CiteError):
    """Raised when the citation service lookup fails or yields no record.
    
    Distinct from httpx errors so callers need not depend on the transport.
    """
    
    def __init__(
        self,
        message: str,
        url: str,
        status_code: int | None = None,
    ) -> None:
        """Initialize fetch error.
        
        Args:
            message: Error description
            url: The document URL whose metadata was requested
            status_code: HTTP status code if a response was received
        """
        self.url = url
        self.status_code = status_code
        super().__init__(message)


class ConversionError(Url2CiteError):
    """Raised when the BibTeX <-> CSL converter fails.
    
    Carries the offending input so the failing entry can be diagnosed.
    """
    
    def __init__(
        self,
        message: str,
        input_text: str,
        direction: str | None = None,
        returncode: int | None = None,
    ) -> None:
        """Initialize conversion error.
        
        Args:
            message: Error description
            input_text: The text handed to the converter
            direction: Conversion direction (e.g. "biblatex->csljson")
            returncode: Converter exit status if it ran
        """
        self.input_text = input_text
        self.direction = direction
        self.returncode = returncode
        super().__init__(f"{message}\n{input_text}")


class UnresolvedCitationError(Url2CiteError):
    """Raised when a citation id has no URL and dangling citations are off."""
    
    def __init__(self, citation_id: str) -> None:
        self.citation_id = citation_id
        super().__init__(f"Could not find URL for @{citation_id}.")


class MalformedReferenceError(Url2CiteError):
    """Raised for an unexpected token in a ``[@key]: url`` definition."""
    
    def __init__(self, token: str | None, paragraph: Any = None) -> None:
        """Initialize malformed reference error.
        
        Args:
            token: Node kind found where the URL was expected (None at end)
            paragraph: The offending paragraph node, for diagnosis
        """
        self.token = token
        self.paragraph = paragraph
        super().__init__(f"unknown thing in url2cite link: {token} ({paragraph})")


class UnknownOutputFormatError(Url2CiteError):
    """Raised when url2cite-link-output names an unsupported shape."""
    
    def __init__(self, output_format: str) -> None:
        self.output_format = output_format
        super().__init__(f"Unknown output format {output_format}")


class ConfigurationError(Url2CiteError):
    """Raised when document options fail validation.
    
    Wraps pydantic's ValidationError to keep the package's error surface
    uniform.
    """
    
    def __init__(
        self,
        message: str,
        errors: list[dict[str, Any]] | None = None,
    ) -> None:
        """Initialize configuration error.
        
        Args:
            message: Error description
            errors: Validation error details, one dict per invalid option
        """
        self.errors = errors or []
        super().__init__(message)
