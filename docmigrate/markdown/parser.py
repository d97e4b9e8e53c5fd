"""Block and inline parser producing the structural tree."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from ..models import ERROR, TransformIssue
from .tree import (
    Admonition,
    Block,
    CodeSpan,
    Comment,
    CommentBlock,
    Fence,
    HtmlTag,
    Image,
    Inline,
    Link,
    LinkDefinition,
    Text,
    TextLine,
)

_FENCE_OPEN = re.compile(r"^(?P<indent>[ \t]*)(?P<fence>`{3,}|~{3,})(?P<info>.*)$")
_FENCE_CLOSE = re.compile(r"^[ \t]*(?P<fence>`{3,}|~{3,})[ \t]*$")
_ADMONITION_OPEN = re.compile(
    r"^(?P<indent>[ \t]*):{3,}(?P<kind>[A-Za-z][\w-]*)"
    r"(?:\[(?P<bracket>[^\]]*)\])?(?:[ \t]+(?P<title>\S.*?))?[ \t]*$"
)
_ADMONITION_CLOSE = re.compile(r"^[ \t]*:{3,}[ \t]*$")
_LINK_DEFINITION = re.compile(
    r"^(?P<prefix>[ \t]{0,3}\[[^\]]+\]:[ \t]*)(?P<target><[^>]*>|\S+)(?P<rest>.*)$"
)
_HTML_TAG = re.compile(r"<(?P<closing>/?)(?P<name>[A-Za-z][A-Za-z0-9-]*)(?P<attrs>(?:\s[^<>]*)?)/?>")


@dataclass
class _OpenAdmonition:
    line: int
    indent: str
    kind: str
    title: Optional[str]
    opener: str
    children: List[Block] = field(default_factory=list)

    def build(self, closer: Optional[str]) -> Admonition:
        return Admonition(
            line=self.line,
            indent=self.indent,
            kind=self.kind,
            title=self.title,
            opener=self.opener,
            children=tuple(self.children),
            closer=closer,
        )


class MarkdownParser:
    """Parses a Markdown body into blocks, reporting malformed structure."""

    def parse(self, body: str, *, line_offset: int = 0) -> Tuple[Tuple[Block, ...], List[TransformIssue]]:
        lines = body.split("\n")
        issues: List[TransformIssue] = []
        root: List[Block] = []
        stack: List[_OpenAdmonition] = []
        index = 0

        while index < len(lines):
            line = lines[index]
            number = line_offset + index + 1
            container = stack[-1].children if stack else root

            if _is_fence_open(line):
                fence, index = self._read_fence(lines, index, line_offset, issues)
                container.append(fence)
                continue

            opener = _ADMONITION_OPEN.match(line)
            if opener:
                title = opener.group("bracket")
                if title is None:
                    title = opener.group("title")
                stack.append(
                    _OpenAdmonition(
                        line=number,
                        indent=opener.group("indent"),
                        kind=opener.group("kind"),
                        title=title.strip() if title and title.strip() else None,
                        opener=line,
                    )
                )
                index += 1
                continue

            if _ADMONITION_CLOSE.match(line):
                if stack:
                    frame = stack.pop()
                    parent = stack[-1].children if stack else root
                    parent.append(frame.build(closer=line))
                else:
                    issues.append(
                        TransformIssue(
                            kind=ERROR,
                            line=number,
                            message="Admonition closer ':::' without a matching opener",
                            suggestion="Remove the stray ':::' or add the missing ':::kind' line",
                        )
                    )
                    container.append(TextLine(line=number, inlines=(Text(line),)))
                index += 1
                continue

            definition = _LINK_DEFINITION.match(line)
            if definition:
                container.append(
                    LinkDefinition(
                        line=number,
                        prefix=definition.group("prefix"),
                        target=definition.group("target"),
                        rest=definition.group("rest"),
                    )
                )
                index += 1
                continue

            inlines, open_comment = parse_inlines(line)
            if open_comment is None:
                container.append(TextLine(line=number, inlines=inlines))
                index += 1
                continue

            comment, index = self._read_comment(lines, index, inlines, open_comment, line_offset, issues)
            container.append(comment)

        while stack:
            frame = stack.pop()
            issues.append(
                TransformIssue(
                    kind=ERROR,
                    line=frame.line,
                    message=f"Admonition ':::{frame.kind}' is never closed",
                    suggestion="Add a closing ':::' line; the callout was closed at the end of its container",
                )
            )
            trailing: List[Block] = []
            while frame.children and _is_blank(frame.children[-1]):
                trailing.insert(0, frame.children.pop())
            parent = stack[-1].children if stack else root
            parent.append(frame.build(closer=None))
            parent.extend(trailing)

        return tuple(root), issues

    def _read_fence(
        self,
        lines: List[str],
        start: int,
        line_offset: int,
        issues: List[TransformIssue],
    ) -> Tuple[Fence, int]:
        opener = lines[start]
        match = _FENCE_OPEN.match(opener)
        assert match is not None
        fence = match.group("fence")
        body: List[str] = []
        index = start + 1
        while index < len(lines):
            closing = _FENCE_CLOSE.match(lines[index])
            if closing and closing.group("fence")[0] == fence[0] and len(closing.group("fence")) >= len(fence):
                return (
                    Fence(line=line_offset + start + 1, opener=opener, lines=tuple(body), closer=lines[index]),
                    index + 1,
                )
            body.append(lines[index])
            index += 1
        issues.append(
            TransformIssue(
                kind=ERROR,
                line=line_offset + start + 1,
                message=f"Code fence '{fence}' is never closed",
                suggestion=f"Add a closing '{fence}' line",
            )
        )
        return Fence(line=line_offset + start + 1, opener=opener, lines=tuple(body), closer=None), index

    def _read_comment(
        self,
        lines: List[str],
        start: int,
        lead: Tuple[Inline, ...],
        first: str,
        line_offset: int,
        issues: List[TransformIssue],
    ) -> Tuple[CommentBlock, int]:
        number = line_offset + start + 1
        content = [first]
        index = start + 1
        while index < len(lines):
            line = lines[index]
            end = line.find("-->")
            if end == -1:
                content.append(line)
                index += 1
                continue
            content.append(line[:end])
            tail, reopened = parse_inlines(line[end + 3 :])
            if reopened is not None:
                issues.append(
                    TransformIssue(
                        kind=ERROR,
                        line=line_offset + index + 1,
                        message="HTML comment opened after another comment on the same line is never closed",
                        suggestion="Close the comment with '-->'",
                    )
                )
                tail = tail + (Text("<!--" + reopened),)
            block = CommentBlock(line=number, lead=lead, lines=tuple(content), tail=tail, closed=True)
            return block, index + 1
        issues.append(
            TransformIssue(
                kind=ERROR,
                line=number,
                message="HTML comment is never closed",
                suggestion="Add the missing '-->'; the comment was closed at the end of the document",
            )
        )
        return CommentBlock(line=number, lead=lead, lines=tuple(content), tail=(), closed=False), index


def _is_blank(block: Block) -> bool:
    return isinstance(block, TextLine) and all(
        isinstance(node, Text) and not node.value.strip() for node in block.inlines
    )


def _is_fence_open(line: str) -> bool:
    match = _FENCE_OPEN.match(line)
    if not match:
        return False
    return not (match.group("fence")[0] == "`" and "`" in match.group("info"))


def parse_inlines(text: str) -> Tuple[Tuple[Inline, ...], Optional[str]]:
    """Tokenise one line.

    Returns the inline nodes and, when the line opens an HTML comment that it
    does not close, the comment text following ``<!--``.
    """
    return _InlineScanner(text).run()


class _InlineScanner:
    def __init__(self, text: str) -> None:
        self.text = text
        self.pos = 0
        self.tokens: List[Inline] = []
        self.buffer: List[str] = []

    def run(self) -> Tuple[Tuple[Inline, ...], Optional[str]]:
        text = self.text
        length = len(text)
        while self.pos < length:
            char = text[self.pos]
            if char == "\\" and self.pos + 1 < length:
                self.buffer.append(text[self.pos : self.pos + 2])
                self.pos += 2
                continue
            if char == "`":
                self._code_span()
                continue
            if text.startswith("<!--", self.pos):
                end = text.find("-->", self.pos + 4)
                if end == -1:
                    rest = text[self.pos + 4 :]
                    self._flush()
                    return tuple(self.tokens), rest
                self._emit(Comment(body=text[self.pos + 4 : end]))
                self.pos = end + 3
                continue
            if char == "!" and text.startswith("[", self.pos + 1):
                parsed = _parse_link(text, self.pos + 1)
                if parsed is not None:
                    label, target, title, angle, end = parsed
                    self._emit(Image(alt=label, target=target, title=title, angle=angle))
                    self.pos = end
                    continue
            if char == "[":
                parsed = _parse_link(text, self.pos)
                if parsed is not None:
                    label, target, title, angle, end = parsed
                    children, reopened = parse_inlines(label)
                    if reopened is not None:
                        children = children + (Text("<!--" + reopened),)
                    self._emit(Link(children=children, target=target, title=title, angle=angle))
                    self.pos = end
                    continue
            if char == "<":
                match = _HTML_TAG.match(text, self.pos)
                if match:
                    self._emit(
                        HtmlTag(
                            name=match.group("name"),
                            raw=match.group(0),
                            closing=bool(match.group("closing")),
                        )
                    )
                    self.pos = match.end()
                    continue
            self.buffer.append(char)
            self.pos += 1
        self._flush()
        return tuple(self.tokens), None

    def _code_span(self) -> None:
        end = _code_span_end(self.text, self.pos)
        ticks = _tick_run(self.text, self.pos)
        if end is None:
            self.buffer.append("`" * ticks)
            self.pos += ticks
            return
        self._emit(CodeSpan(raw=self.text[self.pos : end]))
        self.pos = end

    def _emit(self, node: Inline) -> None:
        self._flush()
        self.tokens.append(node)

    def _flush(self) -> None:
        if self.buffer:
            self.tokens.append(Text("".join(self.buffer)))
            self.buffer = []


def _tick_run(text: str, start: int) -> int:
    end = start
    while end < len(text) and text[end] == "`":
        end += 1
    return end - start


def _code_span_end(text: str, start: int) -> Optional[int]:
    """Return the index just past the code span opening at ``start``."""
    ticks = _tick_run(text, start)
    search = start + ticks
    while True:
        found = text.find("`" * ticks, search)
        if found == -1:
            return None
        run = _tick_run(text, found)
        if run == ticks:
            return found + ticks
        search = found + run


def _parse_link(text: str, start: int) -> Optional[Tuple[str, str, str, bool, int]]:
    """Parse ``[label](target "title")`` starting at the opening bracket."""
    length = len(text)
    depth = 0
    index = start
    while index < length:
        char = text[index]
        if char == "\\":
            index += 2
            continue
        if char == "`":
            end = _code_span_end(text, index)
            index = end if end is not None else index + _tick_run(text, index)
            continue
        if char == "[":
            depth += 1
        elif char == "]":
            depth -= 1
            if depth == 0:
                break
        index += 1
    else:
        return None
    if index >= length:
        return None

    label = text[start + 1 : index]
    cursor = index + 1
    if cursor >= length or text[cursor] != "(":
        return None
    cursor += 1
    while cursor < length and text[cursor] in " \t":
        cursor += 1
    if cursor >= length:
        return None

    angle = False
    if text[cursor] == "<":
        close = text.find(">", cursor)
        if close == -1:
            return None
        target = text[cursor + 1 : close]
        angle = True
        cursor = close + 1
    else:
        parens = 0
        end = cursor
        while end < length:
            char = text[end]
            if char == "\\":
                end += 2
                continue
            if char.isspace():
                break
            if char == "(":
                parens += 1
            elif char == ")":
                if parens == 0:
                    break
                parens -= 1
            end += 1
        end = min(end, length)
        target = text[cursor:end]
        cursor = end

    title_start = cursor
    while cursor < length and text[cursor] in " \t":
        cursor += 1
    if cursor < length and text[cursor] in "\"'(":
        closing = ")" if text[cursor] == "(" else text[cursor]
        close = text.find(closing, cursor + 1)
        if close == -1:
            return None
        cursor = close + 1
        while cursor < length and text[cursor] in " \t":
            cursor += 1
    if cursor >= length or text[cursor] != ")":
        return None
    return label, target, text[title_start:cursor], angle, cursor + 1


__all__ = ["MarkdownParser", "parse_inlines"]
