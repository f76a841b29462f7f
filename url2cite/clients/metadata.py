"""Metadata Fetch Adapter.

Resolves a URL to a CSL JSON record in two steps:

1. the Wikipedia REST citation endpoint (citoid, backed by the Zotero
   translators) returns BibTeX for the page;
2. pandoc converts the BibTeX to CSL JSON.

The reverse conversion (CSL JSON -> BibLaTeX) is used to write an output
bibliography. Neither step is retried; failures surface as FetchError or
ConversionError.

Reference: https://www.mediawiki.org/wiki/Citoid/API
"""

from __future__ import annotations

import asyncio
import json
import re
from typing import Any
from urllib.parse import quote

import httpx

from url2cite.clients.protocols import ConversionDirection
from url2cite.core.config import Settings, get_settings
from url2cite.core.exceptions import ConversionError, FetchError
from url2cite.core.http import HTTPClientFactory, ServiceName
from url2cite.core.logging import get_logger
from url2cite.schemas.cache import CacheEntry, utc_timestamp


logger = get_logger(__name__)

# A backslash not followed by another backslash. pandoc emits
# markdown-escaped strings in CSL JSON; this does not handle every case
# (e.g. "\\\[test]").
_MARKDOWN_ESCAPE = re.compile(r"\\(?!\\)")


def unescape_markdown(value: str) -> str:
    """Drop markdown escaping backslashes from a converted string field."""
    return _MARKDOWN_ESCAPE.sub("", value)


def split_bibtex(bibtex: str) -> list[str]:
    """Split raw BibTeX into lines for a readable, diffable cache file."""
    return bibtex.replace("\t", "   ").split("\n")


class MetadataAdapter:
    """Adapter around the citation service and the pandoc converter.

    Implements MetadataAdapterProtocol.

    Usage:
        adapter = MetadataAdapter()
        entry = await adapter.fetch_record("https://example.com/article")
        entry.record["title"]
    """

    def __init__(
        self,
        settings: Settings | None = None,
        http_factory: HTTPClientFactory | None = None,
        client_options: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the adapter.

        Args:
            settings: Application settings. Uses get_settings() if not provided.
            http_factory: HTTP client factory (built from settings if not provided)
            client_options: Extra keyword arguments for httpx.AsyncClient
        """
        self._settings = settings or get_settings()
        self._http = http_factory or HTTPClientFactory(self._settings)
        self._client_options = client_options or {}

    # =========================================================================
    # URL lookup
    # =========================================================================

    async def fetch_record(self, url: str) -> CacheEntry:
        """Fetch the bibliographic record for a URL.

        Args:
            url: Page to describe

        Returns:
            CacheEntry with the raw BibTeX lines and the first CSL record

        Raises:
            FetchError: On transport failure, a non-2xx response or an empty result
            ConversionError: If the returned BibTeX cannot be converted
        """
        logger.info("fetching citation from url", url=url)
        try:
            async with self._http.get_client(
                ServiceName.CITATION_API, **self._client_options
            ) as client:
                response = await client.get(quote(url, safe=""))
        except httpx.HTTPError as e:
            raise FetchError(f"could not fetch citation from {url}: {e}", url=url) from e

        if not response.is_success:
            raise FetchError(
                f"could not fetch citation from {url}: {response.text}",
                url=url,
                status_code=response.status_code,
            )

        bibtex = response.text
        records = await self.bibtex_to_csl(bibtex)
        if not records:
            raise FetchError(f"fetching {url} did not yield any bibtex", url=url)

        record = {
            key: unescape_markdown(value) if isinstance(value, str) else value
            for key, value in records[0].items()
        }
        return CacheEntry(
            fetched_at=utc_timestamp(),
            raw_text=split_bibtex(bibtex),
            record=record,
        )

    # =========================================================================
    # Encoding conversion
    # =========================================================================

    async def convert_encoding(self, text: str, direction: ConversionDirection) -> str:
        """Run pandoc to convert bibliographic text.

        Raises:
            ConversionError: If pandoc cannot be started or exits non-zero
        """
        args = [
            self._settings.pandoc_path,
            f"--from={direction.source}",
            f"--to={direction.target}",
        ]
        try:
            process = await asyncio.create_subprocess_exec(
                *args,
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise ConversionError(
                f"Could not run {args[0]} to convert {direction.source} to {direction.target}: {e}",
                input_text=text,
                direction=direction.value,
            ) from e

        stdout, stderr = await process.communicate(text.encode("utf-8"))
        if process.returncode != 0:
            raise ConversionError(
                f"Could not convert the following {direction.source} to {direction.target}"
                f" ({stderr.decode('utf-8', errors='replace').strip()}):",
                input_text=text,
                direction=direction.value,
                returncode=process.returncode,
            )
        return stdout.decode("utf-8")

    async def bibtex_to_csl(self, bibtex: str) -> list[dict[str, Any]]:
        """Parse BibTeX into CSL JSON records.

        Raises:
            ConversionError: If pandoc fails or its output is not a JSON list
        """
        output = await self.convert_encoding(bibtex, ConversionDirection.BIBTEX_TO_CSL)
        try:
            records = json.loads(output)
        except ValueError as e:
            raise ConversionError(
                f"Could not parse converter output as CSL JSON: {e}",
                input_text=bibtex,
                direction=ConversionDirection.BIBTEX_TO_CSL.value,
            ) from e
        if not isinstance(records, list):
            raise ConversionError(
                "Converter output is not a list of CSL records:",
                input_text=bibtex,
                direction=ConversionDirection.BIBTEX_TO_CSL.value,
            )
        return records

    async def csl_to_bibtex(self, records: list[dict[str, Any]]) -> str:
        """Render CSL JSON records as BibLaTeX."""
        return await self.convert_encoding(
            json.dumps(records, ensure_ascii=False),
            ConversionDirection.CSL_TO_BIBTEX,
        )
