"""Pandoc JSON AST helpers.

The document tree is owned by the host (pandoc) and arrives as plain JSON:
every node is a ``{"t": kind, "c": content}`` dict. The passes only care
about a closed set of node kinds (NodeKind); everything else is passed
through untouched.

Pattern: visitor with explicit identity default
Reference: https://hackage.haskell.org/package/pandoc-types (Text.Pandoc.Definition)
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Awaitable, Callable


Node = dict[str, Any]
Attr = list[Any]  # [identifier, classes, [[key, value], ...]]

# None: keep the node and descend into it.
# Node: replace it. list[Node]: splice (an empty list removes the node).
Replacement = Node | list[Node] | None
Action = Callable[[Node, str, dict[str, Any]], Awaitable[Replacement]]


class NodeKind(str, Enum):
    """Node kinds the citation passes dispatch on."""

    PARA = "Para"
    PLAIN = "Plain"
    CODE_BLOCK = "CodeBlock"
    CITE = "Cite"
    LINK = "Link"
    STR = "Str"
    SPACE = "Space"
    SOFT_BREAK = "SoftBreak"
    SUPERSCRIPT = "Superscript"


_KINDS = {kind.value: kind for kind in NodeKind}


def is_node(value: Any) -> bool:
    """Check whether a JSON value is a tagged AST node."""
    return isinstance(value, dict) and isinstance(value.get("t"), str)


def kind_of(node: Any) -> NodeKind | None:
    """Return the NodeKind of a node, or None for kinds the passes ignore."""
    if not is_node(node):
        return None
    return _KINDS.get(node["t"])


# =============================================================================
# Node Constructors
# =============================================================================

def attr(identifier: str = "", classes: list[str] | None = None,
         attributes: list[list[str]] | None = None) -> Attr:
    return [identifier, list(classes or []), list(attributes or [])]


def str_node(text: str) -> Node:
    return {"t": NodeKind.STR.value, "c": text}


def space() -> Node:
    return {"t": NodeKind.SPACE.value}


def soft_break() -> Node:
    return {"t": NodeKind.SOFT_BREAK.value}


def para(inlines: list[Node]) -> Node:
    return {"t": NodeKind.PARA.value, "c": inlines}


def code_block(node_attr: Attr, text: str) -> Node:
    return {"t": NodeKind.CODE_BLOCK.value, "c": [node_attr, text]}


def superscript(inlines: list[Node]) -> Node:
    return {"t": NodeKind.SUPERSCRIPT.value, "c": inlines}


def link(node_attr: Attr, inlines: list[Node], target: list[str]) -> Node:
    """Build a Link node; target is ``[url, title]``."""
    return {"t": NodeKind.LINK.value, "c": [node_attr, inlines, target]}


def citation(citation_id: str) -> dict[str, Any]:
    """Build a single citation reference with empty prefix/suffix."""
    return {
        "citationId": citation_id,
        "citationPrefix": [],
        "citationSuffix": [],
        "citationMode": {"t": "NormalCitation"},
        "citationNoteNum": 0,
        "citationHash": 0,
    }


def cite(citations: list[dict[str, Any]], inlines: list[Node] | None = None) -> Node:
    return {"t": NodeKind.CITE.value, "c": [citations, list(inlines or [])]}


# =============================================================================
# Traversal
# =============================================================================

async def walk(
    value: Any,
    action: Action,
    output_format: str,
    meta: dict[str, Any],
) -> Any:
    """Apply an async action to every node below ``value``, depth first.

    Nodes are visited strictly one after another: the action for a node is
    awaited to completion before the next node is offered. Replacement nodes
    returned by the action are final and are not walked again.

    Args:
        value: Any JSON value (usually the document's block list)
        action: Coroutine called with (node, output_format, meta)
        output_format: Host output format, e.g. "html" or "latex"
        meta: Document metadata (raw pandoc MetaValue map)

    Returns:
        The rewritten value.
    """
    if isinstance(value, list):
        result: list[Any] = []
        for item in value:
            if is_node(item):
                replacement = await action(item, output_format, meta)
                if replacement is None:
                    result.append(await walk(item, action, output_format, meta))
                elif isinstance(replacement, list):
                    result.extend(replacement)
                else:
                    result.append(replacement)
            else:
                result.append(await walk(item, action, output_format, meta))
        return result
    if isinstance(value, dict):
        return {
            key: await walk(child, action, output_format, meta)
            for key, child in value.items()
        }
    return value


async def filter_document(
    document: dict[str, Any],
    action: Action,
    output_format: str,
) -> dict[str, Any]:
    """Run one pass over a pandoc JSON document's blocks.

    Returns:
        The document with its ``blocks`` replaced by the rewritten list.
    """
    document["blocks"] = await walk(
        document.get("blocks", []), action, output_format, document.get("meta", {})
    )
    return document


def stringify(value: Any) -> str:
    """Flatten inline content to plain text (as pandoc's stringify does)."""
    if isinstance(value, list):
        return "".join(stringify(item) for item in value)
    if not is_node(value):
        return ""
    kind = value["t"]
    if kind == "Str":
        return value["c"]
    if kind in ("Space", "SoftBreak", "LineBreak"):
        return " "
    if kind in ("Code", "Math"):
        return value["c"][1]
    if kind in ("Cite", "Quoted"):
        return stringify(value["c"][1])
    if kind in ("Link", "Image", "Span"):
        return stringify(value["c"][1])
    return stringify(value.get("c"))
