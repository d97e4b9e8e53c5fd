"""Structural checks for MDX constructs that would fail to compile."""

from __future__ import annotations

import re
from typing import List, Tuple

from ..markdown.tree import Block, HtmlTag, Inline, Text
from ..models import ERROR, TransformIssue
from .base import Rewriter
from .html import VOID_ELEMENTS

# Any brace pair outside code except a JSX comment; ``\{`` is escaped text.
_BARE_EXPRESSION = re.compile(r"(?<!\\)\{(?!/\*)[^}\n]+\}")


def _is_component(name: str) -> bool:
    return name[:1].isupper()


def _describe(name: str) -> str:
    return f"Component <{name}>" if _is_component(name) else f"Element <{name}>"


class StructureValidator(Rewriter):
    """Reports unbalanced tags and bare ``{...}`` expressions.

    Every non-void tag must be closed in MDX, lowercase HTML included. The
    tree is never modified.
    """

    def rewrite(self, blocks: Tuple[Block, ...], issues: List[TransformIssue]) -> Tuple[Block, ...]:
        self._open: List[Tuple[str, int]] = []
        super().rewrite(blocks, issues)
        for name, line in reversed(self._open):
            issues.append(
                TransformIssue(
                    kind=ERROR,
                    line=line,
                    message=f"{_describe(name)} is never closed",
                    suggestion=f"Add a matching </{name}>",
                )
            )
        return blocks

    def rewrite_children(self, blocks: Tuple[Block, ...], issues: List[TransformIssue]) -> Tuple[Block, ...]:
        return Rewriter.rewrite(self, blocks, issues)

    def visit_inline(self, node: Inline, line: int, issues: List[TransformIssue]) -> Inline:
        if isinstance(node, Text):
            for match in _BARE_EXPRESSION.finditer(node.value):
                issues.append(
                    TransformIssue(
                        kind=ERROR,
                        line=line,
                        message=f"Unescaped expression '{match.group(0)}' is evaluated as JavaScript in MDX",
                        suggestion="Wrap in backticks",
                    )
                )
        elif isinstance(node, HtmlTag) and not node.raw.endswith("/>") and node.name.lower() not in VOID_ELEMENTS:
            self._track(node, line, issues)
        return super().visit_inline(node, line, issues)

    def _track(self, node: HtmlTag, line: int, issues: List[TransformIssue]) -> None:
        if not node.closing:
            self._open.append((node.name, line))
            return
        if self._open and self._open[-1][0] == node.name:
            self._open.pop()
            return
        issues.append(
            TransformIssue(
                kind=ERROR,
                line=line,
                message=f"Closing tag </{node.name}> has no matching opening tag",
                suggestion=f"Remove </{node.name}> or add the missing <{node.name}>",
            )
        )


__all__ = ["StructureValidator"]
