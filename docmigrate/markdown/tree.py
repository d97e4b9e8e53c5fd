"""Immutable node types for the Markdown structural tree.

Blocks cover what the migration needs to tell apart: fenced code, admonition
containers, multi-line comments, link definitions, and ordinary lines. Every
ordinary line carries its inline tokens. Source-dialect nodes (``Admonition``,
``Comment``, ``CommentBlock``) and their target-dialect counterparts
(``Callout``, ``JsxComment``, ``JsxCommentBlock``) coexist so a tree can be
serialized at any point of the rewrite.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple, Union

# Inline nodes


@dataclass(frozen=True)
class Text:
    value: str


@dataclass(frozen=True)
class CodeSpan:
    """Inline code including its backtick fences."""

    raw: str

    @property
    def content(self) -> str:
        ticks = len(self.raw) - len(self.raw.lstrip("`"))
        inner = self.raw[ticks:-ticks] if ticks else self.raw
        if inner.startswith(" ") and inner.endswith(" ") and inner.strip():
            inner = inner[1:-1]
        return inner


@dataclass(frozen=True)
class Link:
    children: Tuple["Inline", ...]
    target: str
    title: str = ""
    angle: bool = False


@dataclass(frozen=True)
class Image:
    alt: str
    target: str
    title: str = ""
    angle: bool = False


@dataclass(frozen=True)
class Comment:
    """``<!-- body -->`` on a single line."""

    body: str


@dataclass(frozen=True)
class JsxComment:
    """``{/* body */}`` produced from a :class:`Comment`."""

    body: str


@dataclass(frozen=True)
class HtmlTag:
    name: str
    raw: str
    closing: bool = False


Inline = Union[Text, CodeSpan, Link, Image, Comment, JsxComment, HtmlTag]


# Block nodes


@dataclass(frozen=True)
class TextLine:
    line: int
    inlines: Tuple[Inline, ...]


@dataclass(frozen=True)
class Fence:
    line: int
    opener: str
    lines: Tuple[str, ...]
    closer: Optional[str]


@dataclass(frozen=True)
class LinkDefinition:
    """``[label]: target "title"`` reference definition."""

    line: int
    prefix: str
    target: str
    rest: str = ""


@dataclass(frozen=True)
class CommentBlock:
    """An HTML comment spanning several lines.

    ``lines`` holds the comment text: the first entry follows ``<!--`` on the
    opening line, the last precedes ``-->`` on the closing line.
    """

    line: int
    lead: Tuple[Inline, ...]
    lines: Tuple[str, ...]
    tail: Tuple[Inline, ...]
    closed: bool = True


@dataclass(frozen=True)
class JsxCommentBlock:
    line: int
    lead: Tuple[Inline, ...]
    lines: Tuple[str, ...]
    tail: Tuple[Inline, ...]


@dataclass(frozen=True)
class Admonition:
    """``:::kind title`` container as written in the source."""

    line: int
    indent: str
    kind: str
    title: Optional[str]
    opener: str
    children: Tuple["Block", ...]
    closer: Optional[str] = None


@dataclass(frozen=True)
class Callout:
    line: int
    indent: str
    tag: str
    title: Optional[str]
    children: Tuple["Block", ...]


Block = Union[
    TextLine,
    Fence,
    LinkDefinition,
    CommentBlock,
    JsxCommentBlock,
    Admonition,
    Callout,
]


@dataclass(frozen=True)
class ParsedDocument:
    """Version-agnostic structural form of one source document."""

    front_matter: Optional[str]
    metadata: Dict[str, Any]
    blocks: Tuple[Block, ...]
    body_line_offset: int = 0
    front_matter_ok: bool = True
    title_hint: Optional[str] = None
    description_hint: Optional[str] = None


def inline_text(inlines: Tuple[Inline, ...]) -> str:
    """Flatten inline nodes to their visible text."""
    parts = []
    for node in inlines:
        if isinstance(node, Text):
            parts.append(node.value)
        elif isinstance(node, CodeSpan):
            parts.append(node.content)
        elif isinstance(node, Link):
            parts.append(inline_text(node.children))
        elif isinstance(node, Image):
            parts.append(node.alt)
    return "".join(parts)


__all__ = [
    "Admonition",
    "Block",
    "Callout",
    "CodeSpan",
    "Comment",
    "CommentBlock",
    "Fence",
    "HtmlTag",
    "Image",
    "Inline",
    "JsxComment",
    "JsxCommentBlock",
    "Link",
    "LinkDefinition",
    "ParsedDocument",
    "Text",
    "TextLine",
    "inline_text",
]
