"""Tests for the static link checker."""

from __future__ import annotations

from pathlib import Path

from docmigrate.models import LINK_ANCHOR, LINK_DOCUMENT, LINK_EXTERNAL, LINK_IMAGE
from docmigrate.postproc.links import LinkValidator, collect_links
from tests._fixtures.docs_builder import DocsTreeBuilder


def test_collect_links_ignores_code() -> None:
    text = (
        "---\ntitle: x\n---\n"
        "[a](/sdk/next/a) ![i](/assets/sdk/images/i.png) [e](https://x.io) [t](#top)\n"
        "`[code](./nope)`\n"
        "```\n[fenced](./nope)\n```\n"
        '<a href="/sdk/next/b">b</a>\n'
        "[ref]: <../c.mdx>\n"
    )

    references = collect_links(text)

    assert [(ref.target, ref.kind, ref.line) for ref in references] == [
        ("/sdk/next/a", LINK_DOCUMENT, 4),
        ("/assets/sdk/images/i.png", LINK_IMAGE, 4),
        ("https://x.io", LINK_EXTERNAL, 4),
        ("#top", LINK_ANCHOR, 4),
        ("/sdk/next/b", LINK_DOCUMENT, 9),
        ("../c.mdx", LINK_DOCUMENT, 10),
    ]


def test_validator_reports_missing_internal_targets(docs_builder: DocsTreeBuilder) -> None:
    docs_builder.write(
        {
            "sdk/next/intro.mdx": """
                [ok](/sdk/next/learn) [page](./learn/concepts#x) [gone](/sdk/next/missing)
                [ext](https://example.com/missing) [top](#top)
                ![img](/assets/sdk/images/a.png) ![lost](/assets/sdk/images/b.png)
            """,
            "sdk/next/learn/index.mdx": "[up](../intro)\n",
            "sdk/next/learn/concepts.md": "x\n",
            "node_modules/pkg/readme.md": "[broken](./nowhere)\n",
            ".hidden/notes.mdx": "[broken](./nowhere)\n",
        }
    )
    docs_builder.write_bytes("assets/sdk/images/a.png", b"png")

    checked, issues = LinkValidator(docs_builder.path()).validate()

    assert checked == 3
    assert [(issue.file, issue.line, issue.message) for issue in issues] == [
        ("sdk/next/intro.mdx", 1, "Link target not found: /sdk/next/missing"),
        ("sdk/next/intro.mdx", 3, "Link target not found: /assets/sdk/images/b.png"),
    ]


def test_validator_rejects_targets_outside_root(tmp_path: Path) -> None:
    validator = LinkValidator(tmp_path)

    assert validator.exists("../../etc/passwd", document="a.mdx") is False
    assert validator.validate_text("[empty]()", document="a.mdx")[0].message == "Empty link target"
