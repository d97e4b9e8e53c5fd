"""HTML constructs that MDX rejects or Mintlify renders differently."""

from __future__ import annotations

import re
from dataclasses import replace
from typing import FrozenSet, Iterator, List, Optional, Tuple

from ..markdown.tree import (
    Admonition,
    Block,
    Callout,
    CodeSpan,
    CommentBlock,
    HtmlTag,
    Inline,
    JsxCommentBlock,
    Link,
    Text,
    TextLine,
    inline_text,
)
from ..models import TransformIssue
from .base import Rewriter

EXPANDABLE_TAG = "Expandable"
DEFAULT_EXPANDABLE_TITLE = "Details"

VOID_ELEMENTS = frozenset(
    {"area", "base", "br", "col", "embed", "hr", "img", "input", "link", "meta", "source", "track", "wbr"}
)

COMMAND_PLACEHOLDERS = frozenset({"appd", "simd", "gaiad", "osmosisd", "junod", "yourapp"})
GENERIC_PLACEHOLDERS = frozenset(
    {"host", "port", "path", "user", "pass", "module", "version", "namespace", "service"}
)

_KEBAB_NAME = re.compile(r"^[a-z]+(?:-[a-z]+)+$")
_ARROWS = re.compile(r"<=>|<->")
_HEADING = re.compile(r"^\s{0,3}#{1,6}\s")
_HEADING_ANCHOR = re.compile(r"\s*\{#[\w.:-]+\}\s*$")


class HtmlRewriter(Rewriter):
    """``<details>`` to ``<Expandable>``, self-closing void tags, heading anchors.

    Angle-bracket placeholders that MDX would read as unclosed elements are
    turned into code spans: ``<simd>`` keeps only the command name, while
    ``<host>`` and ``<chain-id>`` keep their brackets. A name that is closed
    somewhere in the document is treated as markup instead; closed kebab-case
    elements are renamed to PascalCase.
    """

    def __init__(self) -> None:
        self._closed_names: FrozenSet[str] = frozenset()

    def rewrite(self, blocks: Tuple[Block, ...], issues: List[TransformIssue]) -> Tuple[Block, ...]:
        self._closed_names = frozenset(
            node.name.lower() for node in _iter_inlines(blocks) if isinstance(node, HtmlTag) and node.closing
        )
        return self._rewrite_sequence(blocks, issues)

    def rewrite_children(self, blocks: Tuple[Block, ...], issues: List[TransformIssue]) -> Tuple[Block, ...]:
        return self._rewrite_sequence(blocks, issues)

    def _rewrite_sequence(self, blocks: Tuple[Block, ...], issues: List[TransformIssue]) -> Tuple[Block, ...]:
        items = list(blocks)
        result: List[Block] = []
        index = 0
        while index < len(items):
            block = items[index]
            index += 1
            if isinstance(block, TextLine) and _find_tag(block.inlines, "details") is not None:
                title, inlines = _take_summary(block.inlines, leading_only=False)
                if title is None and index < len(items) and isinstance(items[index], TextLine):
                    following = items[index]
                    title, remainder = _take_summary(following.inlines, leading_only=True)
                    if title is not None:
                        index += 1
                        if remainder:
                            items.insert(index, replace(following, inlines=remainder))
                block = replace(block, inlines=_open_expandable(inlines, title))
            result.append(self.visit_block(block, issues))
        return tuple(result)

    def visit_block(self, block: Block, issues: List[TransformIssue]) -> Block:
        if isinstance(block, TextLine):
            block = _strip_heading_anchor(block)
        return super().visit_block(block, issues)

    def visit_inline(self, node: Inline, line: int, issues: List[TransformIssue]) -> Inline:
        if isinstance(node, HtmlTag):
            name = node.name.lower()
            if name == "details":
                if node.closing:
                    return HtmlTag(name=EXPANDABLE_TAG, raw=f"</{EXPANDABLE_TAG}>", closing=True)
                return _expandable(DEFAULT_EXPANDABLE_TITLE)
            if name in VOID_ELEMENTS:
                return _self_closing(node)
            bare = not node.closing and node.raw == f"<{node.name}>"
            if bare and name not in self._closed_names:
                if name in COMMAND_PLACEHOLDERS:
                    return CodeSpan(f"`{node.name}`")
                if name in GENERIC_PLACEHOLDERS or _KEBAB_NAME.match(node.name):
                    return CodeSpan(f"`{node.raw}`")
            if _KEBAB_NAME.match(node.name):
                return _pascal_case(node)
            return node
        return super().visit_inline(node, line, issues)

    def visit_inlines(
        self, inlines: Tuple[Inline, ...], line: int, issues: List[TransformIssue]
    ) -> Tuple[Inline, ...]:
        result: List[Inline] = []
        for node in inlines:
            if isinstance(node, Text) and _ARROWS.search(node.value):
                result.extend(_code_arrows(node.value))
            else:
                result.append(self.visit_inline(node, line, issues))
        return tuple(result)


def _iter_inlines(blocks: Tuple[Block, ...]) -> Iterator[Inline]:
    for block in blocks:
        if isinstance(block, TextLine):
            yield from _walk_inlines(block.inlines)
        elif isinstance(block, (Admonition, Callout)):
            yield from _iter_inlines(block.children)
        elif isinstance(block, (CommentBlock, JsxCommentBlock)):
            yield from _walk_inlines(block.lead + block.tail)


def _walk_inlines(inlines: Tuple[Inline, ...]) -> Iterator[Inline]:
    for node in inlines:
        yield node
        if isinstance(node, Link):
            yield from _walk_inlines(node.children)


def _code_arrows(text: str) -> List[Inline]:
    parts: List[Inline] = []
    cursor = 0
    for match in _ARROWS.finditer(text):
        if match.start() > cursor:
            parts.append(Text(text[cursor : match.start()]))
        parts.append(CodeSpan(f"`{match.group(0)}`"))
        cursor = match.end()
    if cursor < len(text):
        parts.append(Text(text[cursor:]))
    return parts


def _pascal_case(node: HtmlTag) -> HtmlTag:
    renamed = "".join(part[:1].upper() + part[1:] for part in node.name.split("-"))
    prefix = "</" if node.closing else "<"
    rest = node.raw[len(prefix) + len(node.name) :]
    return HtmlTag(name=renamed, raw=f"{prefix}{renamed}{rest}", closing=node.closing)


def _find_tag(inlines: Tuple[Inline, ...], name: str, *, closing: bool = False, start: int = 0) -> Optional[int]:
    for index in range(start, len(inlines)):
        node = inlines[index]
        if isinstance(node, HtmlTag) and node.name.lower() == name and node.closing == closing:
            return index
    return None


def _take_summary(
    inlines: Tuple[Inline, ...], *, leading_only: bool
) -> Tuple[Optional[str], Tuple[Inline, ...]]:
    """Remove ``<summary>...</summary>`` from ``inlines`` and return its text."""
    opening = _find_tag(inlines, "summary")
    if opening is None:
        return None, inlines
    if leading_only and inline_text(inlines[:opening]).strip():
        return None, inlines
    closing = _find_tag(inlines, "summary", closing=True, start=opening + 1)
    if closing is None:
        return None, inlines
    title = " ".join(inline_text(inlines[opening + 1 : closing]).split())
    remainder = inlines[:opening] + inlines[closing + 1 :]
    if leading_only:
        remainder = _drop_leading_blank(remainder)
    return title, remainder


def _drop_leading_blank(inlines: Tuple[Inline, ...]) -> Tuple[Inline, ...]:
    while inlines and isinstance(inlines[0], Text) and not inlines[0].value.strip():
        inlines = inlines[1:]
    return inlines


def _open_expandable(inlines: Tuple[Inline, ...], title: Optional[str]) -> Tuple[Inline, ...]:
    index = _find_tag(inlines, "details")
    if index is None:
        return inlines
    tag = _expandable(title or DEFAULT_EXPANDABLE_TITLE)
    return inlines[:index] + (tag,) + inlines[index + 1 :]


def _expandable(title: str) -> HtmlTag:
    escaped = title.replace('"', "&quot;")
    return HtmlTag(name=EXPANDABLE_TAG, raw=f'<{EXPANDABLE_TAG} title="{escaped}">')


def _self_closing(node: HtmlTag) -> HtmlTag:
    if node.raw.endswith("/>"):
        return node
    if node.closing:
        return HtmlTag(name=node.name, raw=f"<{node.name} />")
    body = node.raw[:-1].rstrip()
    return HtmlTag(name=node.name, raw=f"{body} />")


def _strip_heading_anchor(block: TextLine) -> TextLine:
    inlines = block.inlines
    if not inlines or not isinstance(inlines[0], Text) or not _HEADING.match(inlines[0].value):
        return block
    last = inlines[-1]
    if not isinstance(last, Text):
        return block
    stripped = _HEADING_ANCHOR.sub("", last.value)
    if stripped == last.value:
        return block
    return replace(block, inlines=inlines[:-1] + (Text(stripped),))


__all__ = [
    "COMMAND_PLACEHOLDERS",
    "EXPANDABLE_TAG",
    "GENERIC_PLACEHOLDERS",
    "HtmlRewriter",
    "VOID_ELEMENTS",
]
