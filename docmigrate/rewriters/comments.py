"""HTML comments to JSX comments."""

from __future__ import annotations

from typing import List

from ..markdown.tree import Block, Comment, CommentBlock, Inline, JsxComment, JsxCommentBlock
from ..models import WARNING, TransformIssue
from .base import Rewriter

_JSX_TERMINATOR = "*/"
_NEUTRALISED = "* /"


class CommentRewriter(Rewriter):
    def visit_inline(self, node: Inline, line: int, issues: List[TransformIssue]) -> Inline:
        if isinstance(node, Comment):
            return JsxComment(body=_neutralise(node.body, line, issues))
        return super().visit_inline(node, line, issues)

    def visit_block(self, block: Block, issues: List[TransformIssue]) -> Block:
        block = super().visit_block(block, issues)
        if not isinstance(block, CommentBlock):
            return block
        lines = tuple(
            _neutralise(text, block.line + offset, issues) for offset, text in enumerate(block.lines)
        )
        return JsxCommentBlock(line=block.line, lead=block.lead, lines=lines, tail=block.tail)


def _neutralise(text: str, line: int, issues: List[TransformIssue]) -> str:
    if _JSX_TERMINATOR not in text:
        return text
    issues.append(
        TransformIssue(
            kind=WARNING,
            line=line,
            message="Comment contains '*/', which would end the JSX comment early",
            suggestion="The sequence was rewritten to '* /'",
        )
    )
    return text.replace(_JSX_TERMINATOR, _NEUTRALISED)


__all__ = ["CommentRewriter"]
