"""Client Protocols.

Duck typing protocols for the metadata adapter - enables fake substitution
in tests without touching the network or spawning pandoc.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable


if TYPE_CHECKING:
    from url2cite.schemas.cache import CacheEntry


class ConversionDirection(str, Enum):
    """Bibliographic text encodings the converter translates between."""

    BIBTEX_TO_CSL = "biblatex->csljson"
    CSL_TO_BIBTEX = "csljson->biblatex"

    @property
    def source(self) -> str:
        return self.value.split("->")[0]

    @property
    def target(self) -> str:
        return self.value.split("->")[1]


@runtime_checkable
class MetadataAdapterProtocol(Protocol):
    """Protocol for the URL -> bibliographic record adapter.

    Methods:
        fetch_record: Look up a URL and return a ready cache entry
        convert_encoding: Translate bibliographic text between encodings
        bibtex_to_csl: Parse BibTeX into CSL JSON records
        csl_to_bibtex: Render CSL JSON records as BibLaTeX
    """

    async def fetch_record(self, url: str) -> CacheEntry:
        """Fetch bibliographic metadata for a URL.

        Raises:
            FetchError: If the lookup fails or yields no record
        """
        ...

    async def convert_encoding(self, text: str, direction: ConversionDirection) -> str:
        """Convert bibliographic text.

        Raises:
            ConversionError: If the converter fails
        """
        ...

    async def bibtex_to_csl(self, bibtex: str) -> list[dict[str, Any]]:
        ...

    async def csl_to_bibtex(self, records: list[dict[str, Any]]) -> str:
        ...
