"""Code fence info-string rewrites for Mintlify code blocks."""

from __future__ import annotations

import re
from dataclasses import replace
from typing import List, Optional, Tuple

from ..markdown.tree import Block, Fence
from ..models import TransformIssue
from .base import Rewriter

REFERENCE_META = "reference"
EXPANDABLE_META = "expandable"
EXPANDABLE_MIN_LINES = 10

_FENCE_INFO = re.compile(r"^(?P<indent>[ \t]*)(?P<fence>`{3,}|~{3,})(?P<info>.*)$")
_GITHUB_URL = re.compile(r"^https://github\.com/\S+$")
_HASH_COMMENT_LANGUAGES = frozenset({"python", "py", "bash", "shell", "sh"})

# Checked in order; the first language whose markers occur in the lowercased content wins.
_LANGUAGE_MARKERS: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("go", ("package ", "func ", 'import "', "interface{")),
    ("javascript", ("const ", "let ", "function ", "=> ")),
    ("bash", ("#!/bin/bash", "echo ", "npm ", "yarn ")),
    ("python", ("def ", "class ")),
)


class FenceRewriter(Rewriter):
    """Rewrites the info string of closed code fences.

    Fence bodies stay verbatim except for Docusaurus ``reference`` blocks.

    - A fence whose only content is a GitHub URL becomes a one-line
      ``Reference: <url>`` comment; the source is not fetched.
    - The ``reference`` token is removed from the meta.
    - Fences longer than ten lines are marked ``expandable``.
    - Fences without a language get one detected from their content.
    """

    def visit_block(self, block: Block, issues: List[TransformIssue]) -> Block:
        if isinstance(block, Fence):
            return _rewrite_fence(block)
        return super().visit_block(block, issues)


def _rewrite_fence(fence: Fence) -> Fence:
    match = _FENCE_INFO.match(fence.opener)
    if fence.closer is None or match is None:
        return fence
    language, meta = _split_info(match.group("info"))
    lines = fence.lines

    url = _reference_url(lines)
    if url is not None:
        lines = (f"{match.group('indent')}{_comment_marker(language)} Reference: {url}",)
    meta = [token for token in meta if token != REFERENCE_META]
    if len(lines) > EXPANDABLE_MIN_LINES and EXPANDABLE_META not in meta:
        meta.append(EXPANDABLE_META)
    if not language:
        language = detect_language(lines) or ""

    info = " ".join([language] + meta) if language else " ".join(meta)
    opener = f"{match.group('indent')}{match.group('fence')}{info}"
    if info == match.group("info").strip():
        opener = fence.opener
    if opener == fence.opener and lines == fence.lines:
        return fence
    return replace(fence, opener=opener, lines=lines)


def _split_info(info: str) -> Tuple[str, List[str]]:
    tokens = info.split()
    if not tokens:
        return "", []
    if "=" in tokens[0] or tokens[0] == REFERENCE_META:
        return "", tokens
    return tokens[0], tokens[1:]


def _reference_url(lines: Tuple[str, ...]) -> Optional[str]:
    content = [line.strip() for line in lines if line.strip()]
    if len(content) == 1 and _GITHUB_URL.match(content[0]):
        return content[0]
    return None


def _comment_marker(language: str) -> str:
    return "#" if language.lower() in _HASH_COMMENT_LANGUAGES else "//"


def detect_language(lines: Tuple[str, ...]) -> Optional[str]:
    """Guess a fence language from its content; ``None`` when nothing matches."""
    content = "\n".join(lines).lower()
    if not content.strip():
        return None
    for language, markers in _LANGUAGE_MARKERS:
        if any(marker in content for marker in markers):
            return language
    if content.strip().startswith("{") and '"' in content:
        return "json"
    if "message " in content or "service " in content:
        return "protobuf"
    return None


__all__ = ["EXPANDABLE_META", "FenceRewriter", "detect_language"]
