"""Conversion between pandoc MetaValues and plain Python values.

Pandoc wraps every metadata value in a tagged node (MetaString, MetaList,
...). Options are read as plain values; cached CSL records are written back
as MetaMaps so pandoc's citeproc can pick them up from ``references``.
"""

from __future__ import annotations

from typing import Any

from url2cite.document.ast import stringify


def meta_to_raw(value: Any) -> Any:
    """Unwrap a single MetaValue."""
    kind = value.get("t")
    content = value.get("c")
    if kind == "MetaMap":
        return meta_map_to_raw(content)
    if kind == "MetaList":
        return [meta_to_raw(item) for item in content]
    if kind in ("MetaString", "MetaBool"):
        return content
    if kind in ("MetaInlines", "MetaBlocks"):
        return stringify(content)
    raise ValueError(f"unknown meta value type: {kind}")


def meta_map_to_raw(meta: dict[str, Any]) -> dict[str, Any]:
    """Unwrap a metadata map into plain Python values."""
    return {key: meta_to_raw(value) for key, value in meta.items()}


def raw_to_meta(value: Any) -> dict[str, Any]:
    """Wrap a plain JSON-like value as a MetaValue.

    Numbers become MetaStrings, matching how pandoc reads YAML scalars.
    """
    if isinstance(value, bool):
        return {"t": "MetaBool", "c": value}
    if isinstance(value, str):
        return {"t": "MetaString", "c": value}
    if isinstance(value, (int, float)):
        return {"t": "MetaString", "c": str(value)}
    if isinstance(value, (list, tuple)):
        return {"t": "MetaList", "c": [raw_to_meta(item) for item in value]}
    if isinstance(value, dict):
        return {"t": "MetaMap", "c": {key: raw_to_meta(item) for key, item in value.items()}}
    if value is None:
        return {"t": "MetaString", "c": ""}
    raise TypeError(f"cannot convert {type(value).__name__} to pandoc metadata")
