"""Link text cleanup and link / image target resolution."""

from __future__ import annotations

import re
from dataclasses import replace
from typing import List, Optional, Sequence

from ..markdown.tree import Block, CodeSpan, HtmlTag, Image, Inline, Link, LinkDefinition, Text
from ..models import WARNING, ResolvedPath, TransformContext, TransformIssue
from ..paths import (
    IMAGE_EXTENSIONS,
    SOURCE_EXTENSIONS,
    is_image_target,
    resolve_image,
    resolve_link,
)
from .base import Rewriter

_ATTRIBUTE = re.compile(r"""(?P<lead>\s(?P<name>src|href)\s*=\s*)(?P<quote>["'])(?P<value>.*?)(?P=quote)""")
_UNSAFE_LABEL = re.compile(r"[\[\]`<>{}]")


class LinkTextCleanup(Rewriter):
    """``[`code`](url)`` becomes ``[code](url)``.

    Code holding characters that Markdown or MDX would interpret as syntax
    stays wrapped.
    """

    def visit_inline(self, node: Inline, line: int, issues: List[TransformIssue]) -> Inline:
        if isinstance(node, Link) and len(node.children) == 1 and isinstance(node.children[0], CodeSpan):
            content = node.children[0].content
            if not _UNSAFE_LABEL.search(content):
                return replace(node, children=(Text(content),))
        return super().visit_inline(node, line, issues)


class LinkResolver(Rewriter):
    """Rewrites link and image targets for one document in one product version."""

    def __init__(
        self,
        document_path: str,
        context: TransformContext,
        *,
        source_extensions: Sequence[str] = SOURCE_EXTENSIONS,
        image_extensions: Sequence[str] = IMAGE_EXTENSIONS,
    ) -> None:
        self._document_path = document_path
        self._context = context
        self._source_extensions = tuple(source_extensions)
        self._image_extensions = tuple(image_extensions)

    def visit_block(self, block: Block, issues: List[TransformIssue]) -> Block:
        if isinstance(block, LinkDefinition):
            angle = block.target.startswith("<") and block.target.endswith(">")
            target = block.target[1:-1] if angle else block.target
            resolved = self._resolve(target, block.line, issues)
            if resolved == target:
                return block
            return replace(block, target=f"<{resolved}>" if angle else resolved)
        return super().visit_block(block, issues)

    def visit_inline(self, node: Inline, line: int, issues: List[TransformIssue]) -> Inline:
        if isinstance(node, Link):
            node = super().visit_inline(node, line, issues)
            target = self._resolve(node.target, line, issues)
            return node if target == node.target else replace(node, target=target)
        if isinstance(node, Image):
            target = self._resolve(node.target, line, issues, image=True)
            return node if target == node.target else replace(node, target=target)
        if isinstance(node, HtmlTag) and not node.closing and node.name.lower() in ("a", "img"):
            raw = _ATTRIBUTE.sub(lambda match: self._attribute(match, node.name.lower(), line, issues), node.raw)
            return node if raw == node.raw else replace(node, raw=raw)
        return super().visit_inline(node, line, issues)

    def _attribute(self, match: "re.Match[str]", tag: str, line: int, issues: List[TransformIssue]) -> str:
        name = match.group("name").lower()
        if (tag, name) not in (("a", "href"), ("img", "src")):
            return match.group(0)
        value = self._resolve(match.group("value"), line, issues, image=tag == "img")
        quote = match.group("quote")
        return f"{match.group('lead')}{quote}{value}{quote}"

    def _resolve(self, target: str, line: int, issues: List[TransformIssue], *, image: bool = False) -> str:
        context = self._context
        resolved: Optional[ResolvedPath]
        if image or is_image_target(target, self._image_extensions):
            resolved = resolve_image(
                self._document_path,
                target,
                context.product,
                assets_url=context.assets_url,
            )
        else:
            resolved = resolve_link(
                self._document_path,
                target,
                context.version,
                context.product,
                known_products=context.known_products,
                source_extensions=self._source_extensions,
            )
        if resolved is None:
            return target
        if resolved.escaped_root:
            issues.append(
                TransformIssue(
                    kind=WARNING,
                    line=line,
                    message=f"Link '{target}' points above the version root",
                    suggestion=f"Resolved to '{resolved.url}'; check the number of '../' segments",
                )
            )
        return resolved.url


__all__ = ["LinkResolver", "LinkTextCleanup"]
