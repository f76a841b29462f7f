"""Test package for pipelines.

Contains unit tests for:
- CiteKeyExtractor and the definition matcher
- EmbeddedBibliography
- CitationTransformer
- Url2Cite orchestrator
"""
