"""Core data models shared across docmigrate components."""

from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, Optional, Tuple

if TYPE_CHECKING:  # pragma: no cover - typing aid
    from docmigrate.markdown.tree import ParsedDocument

ERROR = "error"
WARNING = "warning"

LINK_DOCUMENT = "document"
LINK_IMAGE = "image"
LINK_ANCHOR = "anchor"
LINK_EXTERNAL = "external"


@dataclass(frozen=True)
class TransformIssue:
    """A problem found while transforming one document."""

    kind: str
    line: int
    message: str
    suggestion: Optional[str] = None
    file: Optional[str] = None

    @property
    def is_error(self) -> bool:
        return self.kind == ERROR

    def for_file(self, path: str) -> "TransformIssue":
        """Return a copy attributed to ``path``."""
        return replace(self, file=path)

    def sort_key(self) -> Tuple[str, int, str]:
        return (self.file or "", self.line, self.message)


@dataclass(frozen=True)
class SourceDocument:
    """A Markdown file read from a version root, split into front matter and body."""

    relative_path: str
    raw: str
    front_matter: Optional[str]
    metadata: Dict[str, Any]
    body: str
    body_line_offset: int


@dataclass(frozen=True)
class VersionRoot:
    """A directory tree holding one documentation snapshot of a product."""

    label: str
    path: Path


@dataclass(frozen=True)
class LinkReference:
    """A link or image target found in a document body."""

    target: str
    line: int
    kind: str


@dataclass(frozen=True)
class ResolvedPath:
    """Canonical destination of an internal link."""

    path: str
    fragment: str = ""
    escaped_root: bool = False

    @property
    def url(self) -> str:
        return f"{self.path}{self.fragment}"


@dataclass(frozen=True)
class TransformContext:
    """Product and version parameters for rendering one document."""

    product: str
    version: str
    rewrite_front_matter: bool = False
    known_products: Tuple[str, ...] = ()
    assets_url: str = "/assets"


@dataclass(frozen=True)
class CacheEntry:
    """Version-agnostic transformation result for one content checksum."""

    checksum: str
    document: "ParsedDocument"
    issues: Tuple[TransformIssue, ...] = ()


@dataclass
class PageRecord:
    """Navigation metadata for one migrated page."""

    version: str
    page_path: str
    title: Optional[str] = None
    sidebar_position: Optional[float] = None
    from_cache: bool = False


__all__ = [
    "CacheEntry",
    "ERROR",
    "LINK_ANCHOR",
    "LINK_DOCUMENT",
    "LINK_EXTERNAL",
    "LINK_IMAGE",
    "LinkReference",
    "PageRecord",
    "ResolvedPath",
    "SourceDocument",
    "TransformContext",
    "TransformIssue",
    "VersionRoot",
    "WARNING",
]
