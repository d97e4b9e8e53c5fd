"""Link and output path resolution.

Everything in this module is a pure function of its arguments: resolution
never looks at the filesystem, so a link resolves the same way whether or not
its destination exists yet.
"""

from __future__ import annotations

import posixpath
import re
from typing import List, Optional, Sequence, Tuple

from .models import (
    LINK_ANCHOR,
    LINK_DOCUMENT,
    LINK_EXTERNAL,
    LINK_IMAGE,
    ResolvedPath,
)

SOURCE_EXTENSIONS: Tuple[str, ...] = (".md", ".mdx")
IMAGE_EXTENSIONS: Tuple[str, ...] = (".png", ".jpg", ".jpeg", ".gif", ".svg", ".webp")

_SCHEME_PATTERN = re.compile(r"^[A-Za-z][A-Za-z0-9+.-]*:")
_ORDERING_PREFIX = re.compile(r"^\d+-(?=.)")
_VERSION_LABEL = re.compile(r"^(?:next|v\d+(?:\.(?:\d+|x))*(?:-[\w.]+)?)$")
_STATIC_ROOTS = ("img", "static")


def is_external(target: str) -> bool:
    """Return True for scheme-qualified or protocol-relative targets."""
    target = target.strip()
    return bool(_SCHEME_PATTERN.match(target)) or target.startswith("//")


def is_anchor(target: str) -> bool:
    return target.strip().startswith("#")


def is_passthrough(target: str) -> bool:
    """Targets that are never rewritten: empty, anchors, and external URLs."""
    stripped = target.strip()
    return not stripped or is_anchor(stripped) or is_external(stripped)


def is_image_target(target: str, image_extensions: Sequence[str] = IMAGE_EXTENSIONS) -> bool:
    path, _ = split_fragment(target)
    return posixpath.splitext(path)[1].lower() in image_extensions


def classify_target(target: str, *, image: bool = False) -> str:
    """Classify a link target as external, anchor, image, or document."""
    if is_external(target):
        return LINK_EXTERNAL
    if is_anchor(target):
        return LINK_ANCHOR
    if image or is_image_target(target):
        return LINK_IMAGE
    return LINK_DOCUMENT


def split_fragment(target: str) -> Tuple[str, str]:
    """Split ``target`` into its path and the ``#fragment`` / ``?query`` suffix."""
    cut = len(target)
    for marker in ("#", "?"):
        index = target.find(marker)
        if index != -1:
            cut = min(cut, index)
    return target[:cut], target[cut:]


def strip_ordering_prefix(segment: str) -> str:
    """``01-learn`` becomes ``learn``; segments without a prefix are unchanged."""
    return _ORDERING_PREFIX.sub("", segment, count=1)


def strip_ordering_prefixes(path: str) -> str:
    return "/".join(strip_ordering_prefix(part) for part in path.split("/"))


def strip_source_extension(path: str, extensions: Sequence[str] = SOURCE_EXTENSIONS) -> str:
    stem, ext = posixpath.splitext(path)
    if ext.lower() in extensions:
        return stem
    return path


def output_relative_path(
    relative_path: str,
    target_extension: str = ".mdx",
    source_extensions: Sequence[str] = SOURCE_EXTENSIONS,
) -> str:
    """Destination path of a document inside its version directory."""
    cleaned = strip_ordering_prefixes(_to_posix(relative_path))
    return strip_source_extension(cleaned, source_extensions) + target_extension


def page_path(relative_path: str, source_extensions: Sequence[str] = SOURCE_EXTENSIONS) -> str:
    """Extension-less, prefix-free page path used by navigation."""
    return strip_source_extension(strip_ordering_prefixes(_to_posix(relative_path)), source_extensions)


def image_relative_path(relative_path: str) -> str:
    """Destination of an image inside the product image directory."""
    return strip_ordering_prefixes(_to_posix(relative_path))


def resolve_link(
    document_path: str,
    target: str,
    version: str,
    product: str,
    *,
    known_products: Sequence[str] = (),
    source_extensions: Sequence[str] = SOURCE_EXTENSIONS,
) -> Optional[ResolvedPath]:
    """Resolve a document link; ``None`` means the target is left untouched."""
    target = _to_posix(target.strip())
    if is_passthrough(target):
        return None
    raw_path, fragment = split_fragment(target)
    if not raw_path:
        return None

    if raw_path.startswith("/"):
        segments, escaped = _normalise(_split(raw_path), [])
        if segments and segments[0] == product:
            rest = segments[1:]
            if rest and (rest[0] == version or _VERSION_LABEL.match(rest[0])):
                namespace = [product, rest[0]]
                rest = rest[1:]
            else:
                namespace = [product, version]
        elif segments and segments[0] in known_products:
            return None
        else:
            namespace = [product, version]
            rest = segments
    else:
        base = _split(posixpath.dirname(_to_posix(document_path)))
        rest, escaped = _normalise(_split(raw_path), base)
        namespace = [product, version]

    cleaned = [strip_ordering_prefix(part) for part in rest]
    if cleaned:
        cleaned[-1] = strip_source_extension(cleaned[-1], source_extensions)
    path = "/" + "/".join(namespace + [part for part in cleaned if part])
    return ResolvedPath(path=path, fragment=fragment, escaped_root=escaped)


def resolve_image(
    document_path: str,
    target: str,
    product: str,
    *,
    assets_url: str = "/assets",
) -> Optional[ResolvedPath]:
    """Resolve an image reference into the flattened product asset namespace."""
    target = _to_posix(target.strip())
    if is_passthrough(target):
        return None
    raw_path, fragment = split_fragment(target)
    if not raw_path:
        return None

    images_root = f"{assets_url.rstrip('/')}/{product}/images"
    if raw_path == images_root or raw_path.startswith(images_root + "/"):
        return None

    escaped = False
    if raw_path.startswith("/"):
        segments, escaped = _normalise(_split(raw_path), [])
        if segments and segments[0] in _STATIC_ROOTS:
            if segments[0] == "static":
                segments = segments[1:]
            return ResolvedPath(
                path="/".join([images_root, "static"] + segments),
                fragment=fragment,
                escaped_root=escaped,
            )
    else:
        base = _split(posixpath.dirname(_to_posix(document_path)))
        segments, escaped = _normalise(_split(raw_path), base)

    cleaned = [strip_ordering_prefix(part) for part in segments]
    return ResolvedPath(
        path="/".join([images_root] + cleaned),
        fragment=fragment,
        escaped_root=escaped,
    )


def _split(path: str) -> List[str]:
    return [part for part in path.split("/") if part]


def _normalise(parts: Sequence[str], base: Sequence[str]) -> Tuple[List[str], bool]:
    """Apply ``.`` and ``..`` segments to ``base``; clamp at the root and report escapes."""
    resolved = list(base)
    escaped = False
    for part in parts:
        if part == ".":
            continue
        if part == "..":
            if resolved:
                resolved.pop()
            else:
                escaped = True
            continue
        resolved.append(part)
    return resolved, escaped


def _to_posix(path: str) -> str:
    return path.replace("\\", "/")


__all__ = [
    "IMAGE_EXTENSIONS",
    "SOURCE_EXTENSIONS",
    "classify_target",
    "image_relative_path",
    "is_anchor",
    "is_external",
    "is_image_target",
    "is_passthrough",
    "output_relative_path",
    "page_path",
    "resolve_image",
    "resolve_link",
    "split_fragment",
    "strip_ordering_prefix",
    "strip_ordering_prefixes",
    "strip_source_extension",
]
