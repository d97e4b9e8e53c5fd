"""Docusaurus admonitions to Mintlify callout components."""

from __future__ import annotations

from typing import Dict, List, Optional

from ..config import DEFAULT_CALLOUTS
from ..markdown.tree import Admonition, Block, Callout
from ..models import WARNING, TransformIssue
from .base import Rewriter

FALLBACK_TAG = "Callout"


class AdmonitionRewriter(Rewriter):
    def __init__(self, callouts: Optional[Dict[str, str]] = None) -> None:
        self._callouts = dict(DEFAULT_CALLOUTS if callouts is None else callouts)

    def visit_block(self, block: Block, issues: List[TransformIssue]) -> Block:
        block = super().visit_block(block, issues)
        if not isinstance(block, Admonition):
            return block
        tag = self._callouts.get(block.kind.lower())
        if tag is None:
            issues.append(
                TransformIssue(
                    kind=WARNING,
                    line=block.line,
                    message=f"Unknown admonition type ':::{block.kind}'",
                    suggestion=f"Rendered as <{FALLBACK_TAG}>; add a mapping under 'callouts' to choose a component",
                )
            )
            tag = FALLBACK_TAG
        return Callout(
            line=block.line,
            indent=block.indent,
            tag=tag,
            title=block.title,
            children=block.children,
        )


__all__ = ["AdmonitionRewriter", "FALLBACK_TAG"]
