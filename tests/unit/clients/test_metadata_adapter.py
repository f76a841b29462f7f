"""Unit tests for MetadataAdapter.

HTTP is served by httpx.MockTransport; pandoc is replaced by patching
asyncio.create_subprocess_exec, so no network or subprocess is used.
"""

from __future__ import annotations

import json
from typing import Any
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from url2cite.clients.metadata import MetadataAdapter, split_bibtex, unescape_markdown
from url2cite.clients.protocols import ConversionDirection, MetadataAdapterProtocol
from url2cite.core.config import Settings
from url2cite.core.exceptions import ConversionError, FetchError
from tests.fakes.fake_clients import FakeMetadataAdapter


BIBTEX = "@misc{citekey,\n\ttitle = {Example Domain},\n\turl = {http://example.com}\n}"


def _adapter(settings: Settings, handler: Any) -> MetadataAdapter:
    return MetadataAdapter(
        settings=settings,
        client_options={"transport": httpx.MockTransport(handler)},
    )


def _process(stdout: bytes = b"", stderr: bytes = b"", returncode: int = 0) -> MagicMock:
    process = MagicMock()
    process.communicate = AsyncMock(return_value=(stdout, stderr))
    process.returncode = returncode
    return process


# =============================================================================
# Protocol conformance
# =============================================================================


class TestProtocol:
    def test_adapter_implements_protocol(self, test_settings: Settings) -> None:
        assert isinstance(MetadataAdapter(settings=test_settings), MetadataAdapterProtocol)

    def test_fake_implements_protocol(self) -> None:
        assert isinstance(FakeMetadataAdapter(), MetadataAdapterProtocol)

    def test_direction_formats(self) -> None:
        assert ConversionDirection.BIBTEX_TO_CSL.source == "biblatex"
        assert ConversionDirection.BIBTEX_TO_CSL.target == "csljson"
        assert ConversionDirection.CSL_TO_BIBTEX.source == "csljson"
        assert ConversionDirection.CSL_TO_BIBTEX.target == "biblatex"


# =============================================================================
# fetch_record
# =============================================================================


class TestFetchRecord:
    @pytest.mark.asyncio
    async def test_requests_encoded_url(self, test_settings: Settings) -> None:
        """The page URL is percent-encoded into a single path segment."""
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, text=BIBTEX)

        adapter = _adapter(test_settings, handler)
        with patch.object(adapter, "convert_encoding",
                          AsyncMock(return_value=json.dumps([{"id": "citekey"}]))):
            await adapter.fetch_record("http://example.com/a b?c=d")

        assert seen[0].url.raw_path == (
            b"/api/rest_v1/data/citation/bibtex/http%3A%2F%2Fexample.com%2Fa%20b%3Fc%3Dd"
        )

    @pytest.mark.asyncio
    async def test_builds_cache_entry(self, test_settings: Settings) -> None:
        adapter = _adapter(test_settings, lambda request: httpx.Response(200, text=BIBTEX))
        converted = [{"id": "citekey", "title": "Example Domain", "issued": {"date-parts": [[2020]]}}]

        with patch.object(adapter, "convert_encoding",
                          AsyncMock(return_value=json.dumps(converted))) as convert:
            entry = await adapter.fetch_record("http://example.com")

        convert.assert_awaited_once_with(BIBTEX, ConversionDirection.BIBTEX_TO_CSL)
        assert entry.record == converted[0]
        assert entry.raw_text == [
            "@misc{citekey,",
            "   title = {Example Domain},",
            "   url = {http://example.com}",
            "}",
        ]
        assert entry.fetched_at.endswith("Z")

    @pytest.mark.asyncio
    async def test_unescapes_string_fields(self, test_settings: Settings) -> None:
        adapter = _adapter(test_settings, lambda request: httpx.Response(200, text=BIBTEX))
        converted = [{"id": "k", "title": "Ac\\*id \\[draft\\]", "page": 5}]

        with patch.object(adapter, "convert_encoding",
                          AsyncMock(return_value=json.dumps(converted))):
            entry = await adapter.fetch_record("http://example.com")

        assert entry.record["title"] == "Ac*id [draft]"
        assert entry.record["page"] == 5

    @pytest.mark.asyncio
    async def test_http_error_status(self, test_settings: Settings) -> None:
        adapter = _adapter(test_settings, lambda request: httpx.Response(404, text="not found"))

        with pytest.raises(FetchError) as exc_info:
            await adapter.fetch_record("http://example.com")

        assert exc_info.value.status_code == 404
        assert exc_info.value.url == "http://example.com"
        assert "not found" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_transport_error(self, test_settings: Settings) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        adapter = _adapter(test_settings, handler)

        with pytest.raises(FetchError) as exc_info:
            await adapter.fetch_record("http://example.com")

        assert exc_info.value.status_code is None

    @pytest.mark.asyncio
    async def test_empty_result(self, test_settings: Settings) -> None:
        adapter = _adapter(test_settings, lambda request: httpx.Response(200, text=""))

        with patch.object(adapter, "convert_encoding", AsyncMock(return_value="[]")):
            with pytest.raises(FetchError, match="did not yield any bibtex"):
                await adapter.fetch_record("http://example.com")


# =============================================================================
# convert_encoding
# =============================================================================


class TestConvertEncoding:
    @pytest.mark.asyncio
    async def test_runs_pandoc(self, test_settings: Settings) -> None:
        adapter = MetadataAdapter(settings=test_settings)
        process = _process(stdout=b'[{"id": "a"}]')

        with patch("url2cite.clients.metadata.asyncio.create_subprocess_exec",
                   AsyncMock(return_value=process)) as spawn:
            output = await adapter.convert_encoding("@misc{a,}", ConversionDirection.BIBTEX_TO_CSL)

        assert output == '[{"id": "a"}]'
        assert spawn.call_args.args == ("pandoc", "--from=biblatex", "--to=csljson")
        process.communicate.assert_awaited_once_with(b"@misc{a,}")

    @pytest.mark.asyncio
    async def test_non_zero_exit(self, test_settings: Settings) -> None:
        adapter = MetadataAdapter(settings=test_settings)
        process = _process(stderr=b"unexpected end of input", returncode=64)

        with patch("url2cite.clients.metadata.asyncio.create_subprocess_exec",
                   AsyncMock(return_value=process)):
            with pytest.raises(ConversionError) as exc_info:
                await adapter.convert_encoding("@misc{broken", ConversionDirection.BIBTEX_TO_CSL)

        assert exc_info.value.input_text == "@misc{broken"
        assert exc_info.value.returncode == 64
        assert "unexpected end of input" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_missing_executable(self, test_settings: Settings) -> None:
        adapter = MetadataAdapter(settings=test_settings)

        with patch("url2cite.clients.metadata.asyncio.create_subprocess_exec",
                   AsyncMock(side_effect=FileNotFoundError("pandoc"))):
            with pytest.raises(ConversionError) as exc_info:
                await adapter.convert_encoding("{}", ConversionDirection.CSL_TO_BIBTEX)

        assert exc_info.value.direction == "csljson->biblatex"

    @pytest.mark.asyncio
    async def test_bibtex_to_csl_rejects_unparsable_output(self, test_settings: Settings) -> None:
        adapter = MetadataAdapter(settings=test_settings)

        with patch.object(adapter, "convert_encoding", AsyncMock(return_value="not json")):
            with pytest.raises(ConversionError) as exc_info:
                await adapter.bibtex_to_csl("@misc{a,}")

        assert exc_info.value.input_text == "@misc{a,}"

    @pytest.mark.asyncio
    async def test_bibtex_to_csl_rejects_non_list(self, test_settings: Settings) -> None:
        adapter = MetadataAdapter(settings=test_settings)

        with patch.object(adapter, "convert_encoding", AsyncMock(return_value='{"id": "a"}')):
            with pytest.raises(ConversionError):
                await adapter.bibtex_to_csl("@misc{a,}")

    @pytest.mark.asyncio
    async def test_csl_to_bibtex_serializes_records(self, test_settings: Settings) -> None:
        adapter = MetadataAdapter(settings=test_settings)

        with patch.object(adapter, "convert_encoding",
                          AsyncMock(return_value="@misc{a}")) as convert:
            output = await adapter.csl_to_bibtex([{"id": "a", "title": "Über"}])

        assert output == "@misc{a}"
        convert.assert_awaited_once_with(
            '[{"id": "a", "title": "Über"}]', ConversionDirection.CSL_TO_BIBTEX
        )


# =============================================================================
# Text helpers
# =============================================================================


class TestUnescapeMarkdown:
    def test_drops_single_backslashes(self) -> None:
        assert unescape_markdown("\\[test\\]") == "[test]"

    def test_plain_text_unchanged(self) -> None:
        assert unescape_markdown("Example Domain") == "Example Domain"

    def test_doubled_backslash_keeps_one(self) -> None:
        """Known limitation: an escaped backslash collapses to a single one."""
        assert unescape_markdown("a\\\\b") == "a\\b"

    def test_escaped_backslash_before_escaped_bracket(self) -> None:
        """Known limitation: an escaped backslash before an escaped bracket keeps two backslashes."""
        assert unescape_markdown("\\\\\\[test]") == "\\\\[test]"


class TestSplitBibtex:
    def test_expands_tabs(self) -> None:
        assert split_bibtex("@misc{a,\n\tx = 1\n}") == ["@misc{a,", "   x = 1", "}"]
