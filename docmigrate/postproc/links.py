"""Static link validation for a migrated documentation tree."""

from __future__ import annotations

import os
import posixpath
import re
from pathlib import Path
from typing import Iterator, List, Sequence, Tuple

from ..logging import get_logger
from ..markdown import MarkdownParser, split_front_matter
from ..markdown.tree import Block, HtmlTag, Image, Inline, Link, LinkDefinition
from ..models import ERROR, LINK_DOCUMENT, LINK_IMAGE, LinkReference, TransformIssue
from ..paths import classify_target, split_fragment
from ..rewriters.base import Rewriter

_LOGGER = get_logger("postproc.links")

_SKIPPED_DIRS = {"node_modules"}
_HREF = re.compile(r"""\s(?:href|src)\s*=\s*(["'])(?P<value>.*?)\1""")


class LinkCollector(Rewriter):
    """Gathers link and image references; code fences and spans are never visited."""

    def __init__(self) -> None:
        self.references: List[LinkReference] = []

    def visit_block(self, block: Block, issues: List[TransformIssue]) -> Block:
        if isinstance(block, LinkDefinition):
            target = block.target[1:-1] if block.target.startswith("<") else block.target
            self._add(target, block.line)
            return block
        return super().visit_block(block, issues)

    def visit_inline(self, node: Inline, line: int, issues: List[TransformIssue]) -> Inline:
        if isinstance(node, Link):
            self._add(node.target, line)
        elif isinstance(node, Image):
            self._add(node.target, line, image=True)
        elif isinstance(node, HtmlTag) and node.name.lower() in ("a", "img"):
            for match in _HREF.finditer(node.raw):
                self._add(match.group("value"), line, image=node.name.lower() == "img")
        return super().visit_inline(node, line, issues)

    def _add(self, target: str, line: int, *, image: bool = False) -> None:
        target = target.strip()
        self.references.append(LinkReference(target=target, line=line, kind=classify_target(target, image=image)))


def collect_links(text: str) -> List[LinkReference]:
    _, body, offset, _ = split_front_matter(text.replace("\r\n", "\n"))
    blocks, _ = MarkdownParser().parse(body, line_offset=offset)
    collector = LinkCollector()
    collector.rewrite(blocks, [])
    return collector.references


class LinkValidator:
    """Reports internal links whose destination does not exist under ``root``."""

    def __init__(self, root: Path, *, extensions: Sequence[str] = (".mdx", ".md")) -> None:
        self.root = root.expanduser().resolve()
        self._extensions = tuple(extensions)

    def iter_documents(self) -> Iterator[Path]:
        for dirpath, dirnames, filenames in os.walk(self.root):
            dirnames[:] = sorted(
                name for name in dirnames if not name.startswith(".") and name not in _SKIPPED_DIRS
            )
            for filename in sorted(filenames):
                if os.path.splitext(filename)[1].lower() in self._extensions:
                    yield Path(dirpath) / filename

    def validate(self) -> Tuple[int, List[TransformIssue]]:
        """Return the number of checked documents and the issues found."""
        issues: List[TransformIssue] = []
        checked = 0
        for path in self.iter_documents():
            checked += 1
            relative = path.relative_to(self.root).as_posix()
            try:
                text = path.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as exc:
                issues.append(TransformIssue(kind=ERROR, line=0, message=f"Cannot read file: {exc}", file=relative))
                continue
            issues.extend(self.validate_text(text, document=relative))
        _LOGGER.debug("Checked %d documents under %s", checked, self.root)
        return checked, issues

    def validate_text(self, text: str, *, document: str) -> List[TransformIssue]:
        issues: List[TransformIssue] = []
        for reference in collect_links(text):
            if reference.kind not in (LINK_DOCUMENT, LINK_IMAGE):
                continue
            path, _ = split_fragment(reference.target)
            if not path:
                issues.append(
                    TransformIssue(kind=ERROR, line=reference.line, message="Empty link target", file=document)
                )
                continue
            if not self.exists(path, document=document):
                issues.append(
                    TransformIssue(
                        kind=ERROR,
                        line=reference.line,
                        message=f"Link target not found: {reference.target}",
                        suggestion="Check the path or migrate the missing page",
                        file=document,
                    )
                )
        return issues

    def exists(self, target: str, *, document: str) -> bool:
        if target.startswith("/"):
            relative = posixpath.normpath(target.lstrip("/"))
        else:
            relative = posixpath.normpath(posixpath.join(posixpath.dirname(document), target))
        if relative.startswith(".."):
            return False
        base = self.root / relative
        candidates = [base]
        candidates.extend(base.with_name(base.name + ext) for ext in self._extensions)
        candidates.extend(base / f"index{ext}" for ext in self._extensions)
        return any(candidate.is_file() for candidate in candidates)


__all__ = ["LinkCollector", "LinkValidator", "collect_links"]
