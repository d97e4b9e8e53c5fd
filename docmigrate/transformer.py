"""Docusaurus Markdown to Mintlify MDX transformation."""

from __future__ import annotations

import hashlib
import posixpath
import re
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .logging import get_logger
from .markdown import (
    MarkdownParser,
    ParsedDocument,
    inline_text,
    parse_metadata,
    render_front_matter,
    serialize_blocks,
    split_front_matter,
)
from .markdown.tree import Block, Text, TextLine
from .models import CacheEntry, SourceDocument, TransformContext, TransformIssue
from .paths import IMAGE_EXTENSIONS, SOURCE_EXTENSIONS, strip_ordering_prefix
from .rewriters import (
    AdmonitionRewriter,
    CommentRewriter,
    ExpressionRewriter,
    FenceRewriter,
    HtmlRewriter,
    LinkResolver,
    LinkTextCleanup,
    StructureValidator,
    apply_rewriters,
)

_LOGGER = get_logger("transformer")

_H1 = re.compile(r"^#\s+(?P<title>.+?)\s*#*\s*$")
_HEADING = re.compile(r"^\s{0,3}#{1,6}\s")
_FORMATTING = re.compile(r"[*_`]")
_DESCRIPTION_MIN = 10
_DESCRIPTION_MAX = 300
_DESCRIPTION_REJECT = ("|", ":::", "```")


def content_checksum(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def normalise_newlines(text: str) -> str:
    if text.startswith("\ufeff"):
        text = text[1:]
    return text.replace("\r\n", "\n").replace("\r", "\n")


class Transformer:
    """Converts one document in two stages.

    :meth:`analyse` performs every rewrite that does not depend on where the
    document lives (admonitions, comments, HTML, expressions, code fences,
    link text, validation) and returns a :class:`CacheEntry` that can be
    shared by identical files.
    :meth:`render` resolves links and images for a concrete document path,
    product, and version, then serializes the result.
    """

    def __init__(
        self,
        *,
        callouts: Optional[Dict[str, str]] = None,
        source_extensions: Sequence[str] = SOURCE_EXTENSIONS,
        image_extensions: Sequence[str] = IMAGE_EXTENSIONS,
    ) -> None:
        self._parser = MarkdownParser()
        self._callouts = callouts
        self._source_extensions = tuple(source_extensions)
        self._image_extensions = tuple(image_extensions)

    def analyse(self, raw: str, checksum: Optional[str] = None) -> CacheEntry:
        if checksum is None:
            checksum = content_checksum(raw.encode("utf-8"))
        source, issues = read_source(raw)
        front_matter_ok = not issues

        blocks, parse_issues = self._parser.parse(source.body, line_offset=source.body_line_offset)
        issues.extend(parse_issues)
        blocks = apply_rewriters(
            blocks,
            [
                AdmonitionRewriter(self._callouts),
                CommentRewriter(),
                HtmlRewriter(),
                ExpressionRewriter(),
                FenceRewriter(),
                LinkTextCleanup(),
            ],
            issues,
        )
        StructureValidator().rewrite(blocks, issues)

        document = ParsedDocument(
            front_matter=source.front_matter,
            metadata=source.metadata,
            blocks=blocks,
            body_line_offset=source.body_line_offset,
            front_matter_ok=front_matter_ok,
            title_hint=_first_heading(blocks),
            description_hint=_first_paragraph(blocks),
        )
        _LOGGER.debug("Analysed content %s (%d issues)", checksum[:12], len(issues))
        return CacheEntry(checksum=checksum, document=document, issues=tuple(issues))

    def render(
        self, entry: CacheEntry, document_path: str, context: TransformContext
    ) -> Tuple[str, List[TransformIssue]]:
        document = entry.document
        issues = list(entry.issues)
        resolver = LinkResolver(
            document_path,
            context,
            source_extensions=self._source_extensions,
            image_extensions=self._image_extensions,
        )
        blocks = resolver.rewrite(document.blocks, issues)

        front_matter = document.front_matter
        if context.rewrite_front_matter and document.front_matter_ok:
            front_matter = rewrite_front_matter(document, document_path)

        text = (front_matter or "") + serialize_blocks(blocks)
        return text, sorted(issues, key=TransformIssue.sort_key)

    def transform(
        self, raw_text: str, document_path: str, context: TransformContext
    ) -> Tuple[str, List[TransformIssue]]:
        text, issues = self.render(self.analyse(raw_text), document_path, context)
        return text, [issue.for_file(document_path) for issue in issues]


def read_source(raw: str, relative_path: str = "") -> Tuple[SourceDocument, List[TransformIssue]]:
    """Normalise newlines and split off the front matter block."""
    text = normalise_newlines(raw)
    front_matter, body, offset, issues = split_front_matter(text)
    metadata, metadata_issues = parse_metadata(front_matter)
    issues.extend(metadata_issues)
    source = SourceDocument(
        relative_path=relative_path,
        raw=text,
        front_matter=front_matter,
        metadata=metadata,
        body=body,
        body_line_offset=offset,
    )
    return source, issues


def transform(
    raw_text: str, document_path: str, context: TransformContext
) -> Tuple[str, List[TransformIssue]]:
    """Transform one document with the default settings."""
    return Transformer().transform(raw_text, document_path, context)


def rewrite_front_matter(document: ParsedDocument, document_path: str) -> Optional[str]:
    """Fill in ``title`` and ``description``; other keys are kept as they are."""
    metadata: Dict[str, Any] = dict(document.metadata)
    description = metadata.get("description") or document.description_hint
    if metadata.get("title") and (metadata.get("description") or not description):
        return document.front_matter

    updated: Dict[str, Any] = {"title": page_title(document, document_path)}
    if description:
        updated["description"] = description
    for key, value in metadata.items():
        updated.setdefault(key, value)
    return render_front_matter(updated)


def page_title(document: ParsedDocument, document_path: str) -> str:
    """Title from front matter, then the first H1, then the file name."""
    metadata = document.metadata
    for key in ("title", "sidebar_label"):
        value = metadata.get(key)
        if isinstance(value, (str, int, float)) and str(value).strip():
            return str(value).strip()
    if document.title_hint:
        return document.title_hint
    return title_from_filename(document_path)


def sidebar_position(document: ParsedDocument) -> Optional[float]:
    value = document.metadata.get("sidebar_position")
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


def title_from_filename(document_path: str) -> str:
    """``adr-046-module-params.md`` becomes ``ADR 046 Module Params``."""
    stem = posixpath.splitext(posixpath.basename(document_path.replace("\\", "/")))[0]
    if stem == "index":
        parent = posixpath.basename(posixpath.dirname(document_path.replace("\\", "/")))
        stem = parent or stem
    stem = strip_ordering_prefix(stem)
    words = re.sub(r"[-_]+", " ", stem).strip()
    if not words:
        return "Documentation"
    titled = re.sub(r"\b\w", lambda match: match.group(0).upper(), words)
    return re.sub(r"\bAdr\b", "ADR", titled)


def _line_text(block: Block) -> Optional[str]:
    if isinstance(block, TextLine):
        return inline_text(block.inlines)
    return None


def _first_heading(blocks: Tuple[Block, ...]) -> Optional[str]:
    for block in blocks:
        text = _line_text(block)
        if text is None:
            continue
        match = _H1.match(text)
        if match:
            return match.group("title").strip() or None
    return None


def _first_paragraph(blocks: Tuple[Block, ...]) -> Optional[str]:
    lines: List[str] = []
    skipped_heading = False
    for block in blocks:
        if not isinstance(block, TextLine):
            if lines:
                break
            return None
        if all(isinstance(node, Text) for node in block.inlines) and not inline_text(block.inlines).strip():
            if lines:
                break
            continue
        text = inline_text(block.inlines)
        if not lines and not skipped_heading and _HEADING.match(text):
            skipped_heading = True
            continue
        lines.append(text)
    if not lines:
        return None
    cleaned = " ".join(_FORMATTING.sub("", " ".join(lines)).split())
    if not _DESCRIPTION_MIN < len(cleaned) < _DESCRIPTION_MAX:
        return None
    if any(marker in cleaned for marker in _DESCRIPTION_REJECT) or cleaned.startswith("import "):
        return None
    return cleaned


__all__ = [
    "Transformer",
    "content_checksum",
    "normalise_newlines",
    "page_title",
    "read_source",
    "rewrite_front_matter",
    "sidebar_position",
    "title_from_filename",
    "transform",
]
