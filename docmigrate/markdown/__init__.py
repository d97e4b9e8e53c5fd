"""Markdown structural tree: parsing, node types, and serialization."""

from .frontmatter import parse_metadata, render_front_matter, split_front_matter
from .parser import MarkdownParser, parse_inlines
from .serializer import serialize_blocks, serialize_document, serialize_inlines
from .tree import ParsedDocument, inline_text

__all__ = [
    "MarkdownParser",
    "ParsedDocument",
    "inline_text",
    "parse_inlines",
    "parse_metadata",
    "render_front_matter",
    "serialize_blocks",
    "serialize_document",
    "serialize_inlines",
    "split_front_matter",
]
