"""Curly-brace expressions and code spans that MDX parses differently."""

from __future__ import annotations

import re
from dataclasses import replace
from typing import List, Tuple

from ..markdown.tree import Block, CodeSpan, Inline, Text, TextLine
from ..models import TransformIssue
from .base import Rewriter

_TABLE_EXPRESSION = re.compile(r"(?<!\\)\{(?!/\*)[^}|\n]+\}")


def _is_table_row(block: TextLine) -> bool:
    first = block.inlines[0] if block.inlines else None
    return isinstance(first, Text) and first.value.lstrip().startswith("|")


class ExpressionRewriter(Rewriter):
    """Wraps ``{...}`` in table rows in backticks and collapses double-backtick spans.

    Table cells commonly hold JSON or template values such as
    ``{"denom":"uatom"}``, which MDX would evaluate. Expressions in prose are
    left to the validator, since their intent is ambiguous.
    """

    def visit_block(self, block: Block, issues: List[TransformIssue]) -> Block:
        if isinstance(block, TextLine) and _is_table_row(block):
            inlines = _wrap_table_expressions(block.inlines)
            if inlines != block.inlines:
                block = replace(block, inlines=inlines)
        return super().visit_block(block, issues)

    def visit_inline(self, node: Inline, line: int, issues: List[TransformIssue]) -> Inline:
        if isinstance(node, CodeSpan) and node.raw.startswith("``"):
            content = node.content
            if content and "`" not in content:
                return CodeSpan(f"`{content}`")
        return super().visit_inline(node, line, issues)


def _wrap_table_expressions(inlines: Tuple[Inline, ...]) -> Tuple[Inline, ...]:
    result: List[Inline] = []
    for node in inlines:
        if not isinstance(node, Text) or not _TABLE_EXPRESSION.search(node.value):
            result.append(node)
            continue
        cursor = 0
        for match in _TABLE_EXPRESSION.finditer(node.value):
            if match.start() > cursor:
                result.append(Text(node.value[cursor : match.start()]))
            result.append(CodeSpan(f"`{match.group(0)}`"))
            cursor = match.end()
        if cursor < len(node.value):
            result.append(Text(node.value[cursor:]))
    return tuple(result)


__all__ = ["ExpressionRewriter"]
