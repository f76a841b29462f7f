"""url2cite - turn links and URL citations in pandoc documents into
bibliographic citations, with a persistent fetch-once cache.
"""

from url2cite.pipelines.orchestrator import Url2Cite


__version__ = "0.1.0"

__all__ = ["Url2Cite", "__version__"]
