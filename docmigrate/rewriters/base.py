"""Depth-first tree visitor shared by all rewrite passes."""

from __future__ import annotations

from dataclasses import replace
from typing import List, Tuple

from ..markdown.tree import (
    Admonition,
    Block,
    Callout,
    CommentBlock,
    Inline,
    JsxCommentBlock,
    Link,
    TextLine,
)
from ..models import TransformIssue


class Rewriter:
    """Walks blocks and inlines, rebuilding only the nodes a subclass changes.

    Subclasses override :meth:`visit_block` or :meth:`visit_inline`. Issues
    are appended to the list passed to :meth:`rewrite`.
    """

    def rewrite(self, blocks: Tuple[Block, ...], issues: List[TransformIssue]) -> Tuple[Block, ...]:
        return tuple(self.visit_block(block, issues) for block in blocks)

    def rewrite_children(self, blocks: Tuple[Block, ...], issues: List[TransformIssue]) -> Tuple[Block, ...]:
        """Rewrite the children of a container block."""
        return self.rewrite(blocks, issues)

    def visit_block(self, block: Block, issues: List[TransformIssue]) -> Block:
        if isinstance(block, TextLine):
            inlines = self.visit_inlines(block.inlines, block.line, issues)
            return block if inlines == block.inlines else replace(block, inlines=inlines)
        if isinstance(block, (Admonition, Callout)):
            children = self.rewrite_children(block.children, issues)
            return block if children == block.children else replace(block, children=children)
        if isinstance(block, (CommentBlock, JsxCommentBlock)):
            lead = self.visit_inlines(block.lead, block.line, issues)
            tail = self.visit_inlines(block.tail, block.line + len(block.lines) - 1, issues)
            if lead == block.lead and tail == block.tail:
                return block
            return replace(block, lead=lead, tail=tail)
        return block

    def visit_inlines(
        self, inlines: Tuple[Inline, ...], line: int, issues: List[TransformIssue]
    ) -> Tuple[Inline, ...]:
        return tuple(self.visit_inline(node, line, issues) for node in inlines)

    def visit_inline(self, node: Inline, line: int, issues: List[TransformIssue]) -> Inline:
        if isinstance(node, Link):
            children = self.visit_inlines(node.children, line, issues)
            return node if children == node.children else replace(node, children=children)
        return node


def apply_rewriters(
    blocks: Tuple[Block, ...], rewriters: List[Rewriter], issues: List[TransformIssue]
) -> Tuple[Block, ...]:
    for rewriter in rewriters:
        blocks = rewriter.rewrite(blocks, issues)
    return blocks


__all__ = ["Rewriter", "apply_rewriters"]
