"""Tests for front matter splitting and parsing."""

from __future__ import annotations

from docmigrate.markdown import parse_metadata, render_front_matter, split_front_matter
from docmigrate.models import ERROR


def test_split_front_matter_keeps_block_verbatim() -> None:
    text = "---\ntitle: Intro\nsidebar_position: 2\n---\n# Intro\n"
    block, body, offset, issues = split_front_matter(text)

    assert block == "---\ntitle: Intro\nsidebar_position: 2\n---\n"
    assert body == "# Intro\n"
    assert offset == 4
    assert issues == []
    assert block + body == text


def test_split_without_front_matter() -> None:
    assert split_front_matter("# Title\n---\n") == (None, "# Title\n---\n", 0, [])


def test_unclosed_front_matter_is_an_error() -> None:
    block, body, _, issues = split_front_matter("---\ntitle: x\n")

    assert block is None
    assert body == "---\ntitle: x\n"
    assert [issue.kind for issue in issues] == [ERROR]


def test_parse_metadata() -> None:
    metadata, issues = parse_metadata("---\ntitle: Intro\ntags: [a, b]\n---\n")

    assert metadata == {"title": "Intro", "tags": ["a", "b"]}
    assert issues == []
    assert parse_metadata(None) == ({}, [])
    assert parse_metadata("---\n---\n") == ({}, [])


def test_malformed_yaml_is_reported() -> None:
    metadata, issues = parse_metadata("---\ntitle: [unclosed\n---\n")

    assert metadata == {}
    assert len(issues) == 1
    assert issues[0].kind == ERROR
    assert "Malformed front matter" in issues[0].message


def test_invalid_timestamp_is_reported_not_raised() -> None:
    metadata, issues = parse_metadata("---\ntitle: Intro\ndate: 2024-02-30\n---\n")

    assert metadata == {}
    assert [issue.kind for issue in issues] == [ERROR]
    assert "Malformed front matter" in issues[0].message


def test_non_mapping_front_matter_is_reported() -> None:
    metadata, issues = parse_metadata("---\n- a\n- b\n---\n")

    assert metadata == {}
    assert issues[0].kind == ERROR


def test_render_front_matter_keeps_key_order() -> None:
    rendered = render_front_matter({"title": "Gas & Fees", "sidebar_position": 2, "description": "Über"})

    assert rendered == "---\ntitle: Gas & Fees\nsidebar_position: 2\ndescription: Über\n---\n"
