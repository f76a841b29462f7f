"""CiteKey Extractor pass.

pandoc (with the citations extension) does not parse
``[@name]: http://...`` as a link reference definition; it reads it as a
paragraph starting with a citation. This pass recovers those definitions,
records them in a CiteKeyTable and removes them from the document.

Differences from real reference definitions:
1. each run of definitions must start its own paragraph;
2. a link title after the URL is not parsed.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from url2cite.core.exceptions import MalformedReferenceError
from url2cite.core.logging import get_logger
from url2cite.document.ast import Node, NodeKind, Replacement, kind_of


logger = get_logger(__name__)


class CiteKeyTable:
    """Citation keys defined in the document, mapped to their URLs."""

    def __init__(self) -> None:
        self._urls: dict[str, str] = {}

    def define(self, key: str, url: str) -> None:
        """Record a definition; a repeated key warns and the later URL wins."""
        if key in self._urls:
            logger.warning("duplicate citekey", key=key, previous=self._urls[key], url=url)
        self._urls[key] = url

    def lookup(self, key: str) -> str | None:
        return self._urls.get(key)

    def __len__(self) -> int:
        return len(self._urls)


class ScanState(Enum):
    SEEKING_CITATION = "seeking-citation"
    SEEKING_COLON = "seeking-colon"
    SEEKING_SPACE_OR_VALUE = "seeking-space-or-value"
    SEEKING_VALUE = "seeking-value"


@dataclass(frozen=True)
class ReferenceDefinition:
    """A ``[@key]: url`` span at the start of a paragraph."""

    key: str
    url: str
    length: int  # number of inline nodes the definition spans


def match_definition(inlines: list[Node]) -> ReferenceDefinition | None:
    """Match a reference definition at the start of an inline sequence.

    Returns:
        The definition, or None if the inlines do not start with
        a single-reference citation followed by ``:``.

    Raises:
        MalformedReferenceError: If ``[@key]:`` is followed by anything
            other than an optional space and a plain string.
    """
    if len(inlines) < 3:
        return None

    state = ScanState.SEEKING_CITATION
    key = ""
    position = 0
    while True:
        node = inlines[position] if position < len(inlines) else None
        kind = kind_of(node)

        if state is ScanState.SEEKING_CITATION:
            if kind is not NodeKind.CITE or len(node["c"][0]) != 1:
                return None
            key = node["c"][0][0]["citationId"]
            state = ScanState.SEEKING_COLON
            position += 1

        elif state is ScanState.SEEKING_COLON:
            if kind is not NodeKind.STR or node["c"] != ":":
                return None
            state = ScanState.SEEKING_SPACE_OR_VALUE
            position += 1

        elif state is ScanState.SEEKING_SPACE_OR_VALUE:
            if kind in (NodeKind.SPACE, NodeKind.SOFT_BREAK):
                position += 1
            state = ScanState.SEEKING_VALUE

        else:
            if kind is NodeKind.STR:
                return ReferenceDefinition(key=key, url=node["c"], length=position + 1)
            raise MalformedReferenceError(node["t"] if node else None, paragraph=inlines)


class CiteKeyExtractor:
    """Pass that moves ``[@key]: url`` definitions into a CiteKeyTable.

    Usage:
        table = CiteKeyTable()
        document = await filter_document(document, CiteKeyExtractor(table), "html")
        table.lookup("key")
    """

    def __init__(self, citekeys: CiteKeyTable) -> None:
        self._citekeys = citekeys

    async def __call__(self, node: Node, output_format: str, meta: dict[str, Any]) -> Replacement:
        if kind_of(node) is not NodeKind.PARA:
            return None

        inlines = node["c"]
        while True:
            definition = match_definition(inlines)
            if definition is None:
                break
            self._citekeys.define(definition.key, definition.url)
            inlines = inlines[definition.length:]
            if inlines and kind_of(inlines[0]) is NodeKind.SOFT_BREAK:
                inlines = inlines[1:]
        node["c"] = inlines
        return None
