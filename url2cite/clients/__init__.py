"""Clients for the external citation service and bibliography converter."""

from url2cite.clients.metadata import MetadataAdapter, unescape_markdown
from url2cite.clients.protocols import ConversionDirection, MetadataAdapterProtocol


__all__ = [
    "ConversionDirection",
    "MetadataAdapter",
    "MetadataAdapterProtocol",
    "unescape_markdown",
]
