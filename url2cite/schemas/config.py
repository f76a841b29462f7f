"""Per-document options.

Options are read once per run from the document's metadata (YAML front
matter, or ``pandoc -M key=value``); host overrides win over metadata.
Field aliases are the hyphenated metadata keys.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Literal, Mapping

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from url2cite.core.exceptions import ConfigurationError


DEFAULT_CACHE_PATH = "citation-cache.json"

# Output formats whose links get a superscript citation by default
SUPERSCRIPT_FORMATS = frozenset({"html", "html4", "html5"})


class LinkOutput(str, Enum):
    """Shapes a converted link can take."""

    CITE_ONLY = "cite-only"  # [text](href) -> [@href]
    SUP = "sup"  # [text](href) -> [text](href)^[@href]^
    NORMAL = "normal"  # [text](href) -> [text [@href]](href)


class DocumentConfig(BaseModel):
    """Options controlling how one document is processed."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    mode: Literal["all-links", "citation-only"] = Field(
        default="citation-only",
        alias="url2cite",
        description="all-links converts every link; citation-only only resolves citations",
    )
    link_output: str | None = Field(
        default=None,
        alias="url2cite-link-output",
        description="Shape of converted links; default depends on the output format",
    )
    cache_path: str = Field(
        default=DEFAULT_CACHE_PATH,
        alias="url2cite-cache",
        description="Cache file location, relative to the working directory",
    )
    allow_dangling_citations: bool = Field(
        default=False,
        alias="url2cite-allow-dangling-citations",
        description="Leave citations without a URL untouched instead of failing",
    )
    output_bib: str | None = Field(
        default=None,
        alias="url2cite-output-bib",
        description="Write every cached record as BibLaTeX to this path",
    )
    escape_ids: bool = Field(
        default=True,
        alias="url2cite-escape-ids",
        description="Escape characters in cite keys that are not valid for biber",
    )

    @property
    def all_links(self) -> bool:
        return self.mode == "all-links"

    def resolve_link_output(self, output_format: str) -> str:
        """Return the configured link shape, or the format-dependent default."""
        if self.link_output:
            return self.link_output
        if output_format in SUPERSCRIPT_FORMATS:
            return LinkOutput.SUP.value
        return LinkOutput.NORMAL.value

    @classmethod
    def from_meta(
        cls,
        raw_meta: Mapping[str, Any],
        overrides: Mapping[str, Any] | None = None,
    ) -> "DocumentConfig":
        """Build the configuration from unwrapped document metadata.

        Args:
            raw_meta: Metadata as plain values (see meta_map_to_raw)
            overrides: Host-supplied values taking precedence over metadata

        Raises:
            ConfigurationError: If an option has an invalid value
        """
        values = {
            key: value for key, value in raw_meta.items()
            if key == "url2cite" or key.startswith("url2cite-")
        }
        values.update(overrides or {})
        try:
            return cls.model_validate(values)
        except ValidationError as e:
            raise ConfigurationError(
                f"invalid url2cite options: {e}",
                errors=[
                    {"loc": ".".join(str(part) for part in err["loc"]), "msg": err["msg"]}
                    for err in e.errors()
                ],
            ) from e
