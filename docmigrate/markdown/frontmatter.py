"""YAML front matter splitting, parsing, and rendering."""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

import yaml

from ..models import ERROR, TransformIssue

_DELIMITER = "---"


def split_front_matter(text: str) -> Tuple[Optional[str], str, int, List[TransformIssue]]:
    """Split ``text`` into the verbatim front matter block and the body.

    The block keeps both ``---`` delimiters and its trailing newline so that
    ``block + body`` reproduces ``text`` exactly. The third element is the
    number of lines the block occupies.
    """
    lines = text.split("\n")
    if lines[0].rstrip() != _DELIMITER:
        return None, text, 0, []
    for index in range(1, len(lines)):
        if lines[index].rstrip() == _DELIMITER:
            consumed = index + 1
            block = "\n".join(lines[:consumed])
            if consumed < len(lines):
                block += "\n"
            return block, "\n".join(lines[consumed:]), consumed, []
    issue = TransformIssue(
        kind=ERROR,
        line=1,
        message="Front matter block is never closed",
        suggestion="Add a closing '---' line after the front matter",
    )
    return None, text, 0, [issue]


def parse_metadata(block: Optional[str]) -> Tuple[Dict[str, Any], List[TransformIssue]]:
    """Parse the YAML between the delimiters; malformed YAML yields an error issue."""
    if block is None:
        return {}, []
    inner = "\n".join(block.rstrip("\n").split("\n")[1:-1])
    if not inner.strip():
        return {}, []
    try:
        loaded = yaml.safe_load(inner)
    except (yaml.YAMLError, ValueError) as exc:
        # Timestamp-shaped values such as 2024-02-30 raise ValueError from the constructor.
        mark = getattr(exc, "problem_mark", None)
        line = mark.line + 2 if mark is not None else 1
        problem = getattr(exc, "problem", None) or str(exc)
        return {}, [
            TransformIssue(
                kind=ERROR,
                line=line,
                message=f"Malformed front matter YAML: {problem}",
                suggestion="Fix the YAML syntax; the block was passed through unchanged",
            )
        ]
    if not isinstance(loaded, dict):
        return {}, [
            TransformIssue(
                kind=ERROR,
                line=1,
                message="Front matter must be a YAML mapping",
                suggestion="Use 'key: value' pairs between the '---' delimiters",
            )
        ]
    return loaded, []


def render_front_matter(metadata: Dict[str, Any]) -> str:
    dumped = yaml.safe_dump(metadata, sort_keys=False, allow_unicode=True, default_flow_style=False)
    return f"{_DELIMITER}\n{dumped}{_DELIMITER}\n"


__all__ = ["parse_metadata", "render_front_matter", "split_front_matter"]
