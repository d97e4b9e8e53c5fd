"""Version root discovery and document enumeration."""

from __future__ import annotations

import hashlib
import os
import re
from dataclasses import dataclass
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Iterator, List, Optional, Sequence

from .config import DEFAULT_IMAGE_EXTENSIONS, DEFAULT_INCLUDE
from .logging import get_logger
from .models import VersionRoot

_LOGGER = get_logger("scanner")

_EXCLUDED_DIRS = {
    ".git",
    ".hg",
    ".svn",
    ".docusaurus",
    "node_modules",
    "__pycache__",
}

_EXCLUDED_FILES = {
    ".DS_Store",
    "Thumbs.db",
}

VERSIONED_DOCS_DIR = "versioned_docs"
CURRENT_DOCS_DIR = "docs"
STATIC_DIR = "static"
CURRENT_VERSION_LABEL = "next"
_VERSION_DIR_PREFIX = "version-"
_VERSION_NUMBER = re.compile(r"\d+")
_VERSION_DEPTH = 4


@dataclass
class IgnoreRule:
    """Represents an ignore rule parsed from .gitignore or ``exclude_paths``."""

    pattern: str
    directory_only: bool
    anchored: bool
    negate: bool
    has_slash: bool

    def matches(self, rel_path: str, is_dir: bool) -> bool:
        if not self.pattern:
            return False
        if self.directory_only and not is_dir:
            return False

        target = rel_path
        if self.anchored or self.has_slash:
            if fnmatchcase(target, self.pattern):
                return True
            if self.directory_only and target.startswith(f"{self.pattern}/"):
                return True
            return False

        for part in target.split("/"):
            if fnmatchcase(part, self.pattern):
                return True
        return False


def build_ignore_rule(pattern: str, negate: bool = False) -> Optional[IgnoreRule]:
    pattern = pattern.strip()
    if not pattern:
        return None

    directory_only = pattern.endswith("/")
    if directory_only:
        pattern = pattern[:-1]

    anchored = pattern.startswith("/")
    if anchored:
        pattern = pattern[1:]

    has_slash = "/" in pattern
    return IgnoreRule(
        pattern=pattern,
        directory_only=directory_only,
        anchored=anchored,
        negate=negate,
        has_slash=has_slash,
    )


def _parse_gitignore(path: Path) -> List[IgnoreRule]:
    if not path.exists():
        return []

    rules: List[IgnoreRule] = []
    for raw_line in path.read_text(encoding="utf-8").splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        negate = line.startswith("!")
        if negate:
            line = line[1:]
        rule = build_ignore_rule(line, negate=negate)
        if rule is not None:
            rules.append(rule)
    return rules


def _should_ignore(rel_path: str, is_dir: bool, rules: Sequence[IgnoreRule]) -> bool:
    ignored = False
    for rule in rules:
        if rule.matches(rel_path, is_dir):
            ignored = not rule.negate
    return ignored


def _iter_files(root: Path, rules: Sequence[IgnoreRule]) -> Iterator[str]:
    for dirpath, dirnames, filenames in os.walk(root):
        current_dir = Path(dirpath)
        rel_dir = current_dir.relative_to(root).as_posix() if current_dir != root else ""

        filtered_dirs = []
        for name in dirnames:
            if name in _EXCLUDED_DIRS:
                continue
            rel_path = f"{rel_dir}/{name}" if rel_dir else name
            if _should_ignore(rel_path, True, rules):
                continue
            filtered_dirs.append(name)
        dirnames[:] = sorted(filtered_dirs)

        for filename in sorted(filenames):
            if filename in _EXCLUDED_FILES:
                continue
            rel_path = f"{rel_dir}/{filename}" if rel_dir else filename
            if _should_ignore(rel_path, False, rules):
                continue
            yield rel_path


def checksum(path: Path) -> str:
    """SHA-256 of the raw file bytes."""
    digest = hashlib.sha256()
    with path.open("rb") as handle:
        for chunk in iter(lambda: handle.read(1024 * 1024), b""):
            digest.update(chunk)
    return digest.hexdigest()


def version_label(directory_name: str) -> str:
    """``version-0.52`` becomes ``v0.52``; ``version-v0.47`` keeps its prefix."""
    label = directory_name
    if label.startswith(_VERSION_DIR_PREFIX):
        label = label[len(_VERSION_DIR_PREFIX) :]
    return label if label.startswith("v") else f"v{label}"


def version_sort_key(label: str) -> tuple:
    """Highest version first, ``next`` last."""
    if label == CURRENT_VERSION_LABEL:
        return (1, ())
    numbers = [-int(part) for part in _VERSION_NUMBER.findall(label)]
    numbers += [0] * (_VERSION_DEPTH - len(numbers))
    return (0, tuple(numbers), label)


def discover_version_roots(source: Path, *, version: Optional[str] = None) -> List[VersionRoot]:
    """Find the version roots of a Docusaurus repository.

    With an explicit ``version`` the source directory itself is the only root.
    Otherwise ``versioned_docs/version-X`` directories become ``vX`` and
    ``docs`` becomes ``next``; a directory with neither is treated as a single
    ``next`` root.
    """
    source = source.expanduser().resolve()
    if not source.exists():
        raise FileNotFoundError(f"Source path not found: {source}")
    if not source.is_dir():
        raise NotADirectoryError(f"Source path is not a directory: {source}")

    if version:
        return [VersionRoot(label=version, path=source)]

    roots: List[VersionRoot] = []
    versioned = source / VERSIONED_DOCS_DIR
    if versioned.is_dir():
        for entry in sorted(versioned.iterdir()):
            if entry.is_dir() and entry.name.startswith(_VERSION_DIR_PREFIX):
                roots.append(VersionRoot(label=version_label(entry.name), path=entry))
    current = source / CURRENT_DOCS_DIR
    if current.is_dir():
        roots.append(VersionRoot(label=CURRENT_VERSION_LABEL, path=current))

    if not roots:
        _LOGGER.debug("No docs/ or versioned_docs/ under %s; using it as a single root", source)
        roots.append(VersionRoot(label=CURRENT_VERSION_LABEL, path=source))

    roots.sort(key=lambda root: version_sort_key(root.label))
    return roots


def static_root(source: Path) -> Optional[Path]:
    """Repository-level Docusaurus ``static/`` directory, when present."""
    candidate = source.expanduser().resolve() / STATIC_DIR
    return candidate if candidate.is_dir() else None


class DocumentScanner:
    """Enumerates documents and images of one version root in a stable order."""

    def __init__(
        self,
        include: Optional[Sequence[str]] = None,
        exclude_paths: Sequence[str] = (),
        image_extensions: Optional[Sequence[str]] = None,
    ) -> None:
        self._include = list(include or DEFAULT_INCLUDE)
        self._image_extensions = tuple(ext.lower() for ext in (image_extensions or DEFAULT_IMAGE_EXTENSIONS))
        self._exclude_rules = [rule for rule in (build_ignore_rule(p) for p in exclude_paths) if rule is not None]

    def documents(self, root: Path) -> List[str]:
        """Relative posix paths of documents matching the include patterns, sorted."""
        return sorted(path for path in _iter_files(root, self._rules(root)) if self._included(path))

    def images(self, root: Path) -> List[str]:
        return sorted(
            path
            for path in _iter_files(root, self._rules(root))
            if os.path.splitext(path)[1].lower() in self._image_extensions
        )

    def _rules(self, root: Path) -> List[IgnoreRule]:
        return _parse_gitignore(root / ".gitignore") + self._exclude_rules

    def _included(self, rel_path: str) -> bool:
        name = rel_path.rsplit("/", 1)[-1]
        for pattern in self._include:
            if "/" in pattern:
                if fnmatchcase(rel_path, pattern):
                    return True
            elif fnmatchcase(name, pattern):
                return True
        return False


__all__ = [
    "CURRENT_VERSION_LABEL",
    "DocumentScanner",
    "IgnoreRule",
    "build_ignore_rule",
    "checksum",
    "discover_version_roots",
    "static_root",
    "version_label",
    "version_sort_key",
]
