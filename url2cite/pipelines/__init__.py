"""Citation resolution passes and the orchestrator that runs them."""

from url2cite.pipelines.bibliography import BIBTEX_BLOCK_CLASS, EmbeddedBibliography
from url2cite.pipelines.citekeys import (
    CiteKeyExtractor,
    CiteKeyTable,
    ReferenceDefinition,
    match_definition,
)
from url2cite.pipelines.orchestrator import Url2Cite
from url2cite.pipelines.transformer import CitationTransformer


__all__ = [
    "BIBTEX_BLOCK_CLASS",
    "CitationTransformer",
    "CiteKeyExtractor",
    "CiteKeyTable",
    "EmbeddedBibliography",
    "ReferenceDefinition",
    "Url2Cite",
    "match_definition",
]
