"""Serialize a structural tree back to Markdown / MDX text."""

from __future__ import annotations

from typing import Iterable, List, Optional, Tuple

from .tree import (
    Admonition,
    Block,
    Callout,
    CodeSpan,
    Comment,
    CommentBlock,
    Fence,
    HtmlTag,
    Image,
    Inline,
    JsxComment,
    JsxCommentBlock,
    Link,
    LinkDefinition,
    ParsedDocument,
    Text,
    TextLine,
)


def serialize_inlines(inlines: Iterable[Inline]) -> str:
    parts: List[str] = []
    for node in inlines:
        if isinstance(node, Text):
            parts.append(node.value)
        elif isinstance(node, CodeSpan):
            parts.append(node.raw)
        elif isinstance(node, Link):
            parts.append(f"[{serialize_inlines(node.children)}]({_destination(node.target, node.angle)}{node.title})")
        elif isinstance(node, Image):
            parts.append(f"![{node.alt}]({_destination(node.target, node.angle)}{node.title})")
        elif isinstance(node, Comment):
            parts.append(f"<!--{node.body}-->")
        elif isinstance(node, JsxComment):
            parts.append(f"{{/*{node.body}*/}}")
        elif isinstance(node, HtmlTag):
            parts.append(node.raw)
        else:  # pragma: no cover - exhaustive over Inline
            raise TypeError(f"Unsupported inline node: {node!r}")
    return "".join(parts)


def serialize_blocks(blocks: Tuple[Block, ...]) -> str:
    lines: List[str] = []
    for block in blocks:
        _emit(block, lines)
    return "\n".join(lines)


def serialize_document(document: ParsedDocument, front_matter: Optional[str] = None) -> str:
    """Render ``document``; ``front_matter`` overrides the stored block when given."""
    block = document.front_matter if front_matter is None else front_matter
    return (block or "") + serialize_blocks(document.blocks)


def _emit(block: Block, lines: List[str]) -> None:
    if isinstance(block, TextLine):
        lines.append(serialize_inlines(block.inlines))
    elif isinstance(block, Fence):
        lines.append(block.opener)
        lines.extend(block.lines)
        if block.closer is not None:
            lines.append(block.closer)
    elif isinstance(block, LinkDefinition):
        lines.append(f"{block.prefix}{block.target}{block.rest}")
    elif isinstance(block, CommentBlock):
        text = "<!--" + "\n".join(block.lines) + ("-->" if block.closed else "")
        lines.extend(_wrap(block.lead, text, block.tail).split("\n"))
    elif isinstance(block, JsxCommentBlock):
        text = "{/*" + "\n".join(block.lines) + "*/}"
        lines.extend(_wrap(block.lead, text, block.tail).split("\n"))
    elif isinstance(block, Admonition):
        lines.append(block.opener)
        for child in block.children:
            _emit(child, lines)
        if block.closer is not None:
            lines.append(block.closer)
    elif isinstance(block, Callout):
        lines.append(f"{block.indent}<{block.tag}>")
        if block.title:
            lines.append(f"{block.indent}**{block.title}**")
        for child in block.children:
            _emit(child, lines)
        lines.append(f"{block.indent}</{block.tag}>")
    else:  # pragma: no cover - exhaustive over Block
        raise TypeError(f"Unsupported block node: {block!r}")


def _wrap(lead: Tuple[Inline, ...], text: str, tail: Tuple[Inline, ...]) -> str:
    return serialize_inlines(lead) + text + serialize_inlines(tail)


def _destination(target: str, angle: bool) -> str:
    return f"<{target}>" if angle else target


__all__ = ["serialize_blocks", "serialize_document", "serialize_inlines"]
