"""Tests for docmigrate.transformer."""

from __future__ import annotations

import textwrap

import pytest

from docmigrate.models import ERROR, WARNING, TransformContext
from docmigrate.transformer import (
    Transformer,
    page_title,
    read_source,
    sidebar_position,
    title_from_filename,
    transform,
)

DOC = "01-learn/02-advanced/architecture.md"


def _md(text: str) -> str:
    return textwrap.dedent(text).lstrip("\n")


def _run(text: str, context: TransformContext, path: str = DOC, **kwargs):
    return Transformer(**kwargs).transform(_md(text), path, context)


def test_admonitions_become_callouts(sdk_context: TransformContext) -> None:
    output, issues = _run(
        """
        :::note
        Hello
        :::

        :::warning[Be careful]
        Text
        :::

        :::danger Irreversible
        Gone
        :::
        """,
        sdk_context,
    )

    assert issues == []
    assert output == _md(
        """
        <Note>
        Hello
        </Note>

        <Warning>
        **Be careful**
        Text
        </Warning>

        <Warning>
        **Irreversible**
        Gone
        </Warning>
        """
    )


def test_nested_admonitions(sdk_context: TransformContext) -> None:
    output, issues = _run(":::info\nOuter\n::::tip\nInner\n::::\n:::", sdk_context)

    assert issues == []
    assert output == "<Info>\nOuter\n<Tip>\nInner\n</Tip>\n</Info>"


def test_unknown_admonition_falls_back_to_callout(sdk_context: TransformContext) -> None:
    output, issues = _run(":::important\nRead me\n:::", sdk_context)

    assert output == "<Callout>\nRead me\n</Callout>"
    assert [(issue.kind, issue.line) for issue in issues] == [(WARNING, 1)]


def test_callout_mapping_is_configurable(sdk_context: TransformContext) -> None:
    output, _ = _run(":::note\nx\n:::", sdk_context, callouts={"note": "Info"})

    assert output == "<Info>\nx\n</Info>"


def test_unclosed_admonition_is_closed_and_reported(sdk_context: TransformContext) -> None:
    output, issues = _run(":::tip\nNever closed\n", sdk_context)

    assert output == "<Tip>\nNever closed\n</Tip>\n"
    assert [issue.kind for issue in issues] == [ERROR]


def test_stray_admonition_closer_is_kept(sdk_context: TransformContext) -> None:
    output, issues = _run("Text\n:::\n", sdk_context)

    assert output == "Text\n:::\n"
    assert [(issue.kind, issue.line) for issue in issues] == [(ERROR, 2)]


def test_comments_outside_code_are_converted(sdk_context: TransformContext) -> None:
    output, issues = _run(
        """
        a <!-- b --> c
        ```html
        <!-- keep -->
        ```
        `<!-- span -->`
        <!--
        multi
        -->
        """,
        sdk_context,
    )

    assert issues == []
    assert output == _md(
        """
        a {/* b */} c
        ```html
        <!-- keep -->
        ```
        `<!-- span -->`
        {/*
        multi
        */}
        """
    )


def test_comment_terminator_is_neutralised(sdk_context: TransformContext) -> None:
    output, issues = _run("<!-- a */ b -->", sdk_context)

    assert output == "{/* a * / b */}"
    assert [issue.kind for issue in issues] == [WARNING]


def test_unterminated_comment_is_closed_at_end(sdk_context: TransformContext) -> None:
    output, issues = _run("<!-- open\nstill comment", sdk_context)

    assert output == "{/* open\nstill comment*/}"
    assert [issue.kind for issue in issues] == [ERROR]


def test_details_become_expandable(sdk_context: TransformContext) -> None:
    output, issues = _run(
        """
        <details>
        <summary>More info</summary>

        Body
        </details>
        <details><summary>Say "hi"</summary>
        Text
        </details>
        <details>
        Plain
        </details>
        """,
        sdk_context,
    )

    assert issues == []
    assert output == _md(
        """
        <Expandable title="More info">

        Body
        </Expandable>
        <Expandable title="Say &quot;hi&quot;">
        Text
        </Expandable>
        <Expandable title="Details">
        Plain
        </Expandable>
        """
    )


def test_void_elements_and_heading_anchors(sdk_context: TransformContext) -> None:
    output, issues = _run(
        """
        ## Setup {#setup}
        Line<br>
        <hr>
        <img src="./img/01-flow.png" alt="flow">
        """,
        sdk_context,
    )

    assert issues == []
    assert output == _md(
        """
        ## Setup
        Line<br />
        <hr />
        <img src="/assets/sdk/images/learn/advanced/img/flow.png" alt="flow" />
        """
    )


def test_links_are_resolved_for_the_context(sdk_context: TransformContext) -> None:
    output, issues = _run(
        """
        See [intro](../00-intro.md#start), [`MsgSend`](./msg.md), [site](https://cosmos.network) and [top](#top).
        ![diagram](./img/arch.svg "Architecture")
        <a href="./concepts.md">concepts</a>
        [ref]: ../00-intro.md
        """,
        sdk_context,
    )

    assert issues == []
    assert output == _md(
        """
        See [intro](/sdk/v0.52/learn/intro#start), [MsgSend](/sdk/v0.52/learn/advanced/msg), [site](https://cosmos.network) and [top](#top).
        ![diagram](/assets/sdk/images/learn/advanced/img/arch.svg "Architecture")
        <a href="/sdk/v0.52/learn/advanced/concepts">concepts</a>
        [ref]: /sdk/v0.52/learn/intro
        """
    )


def test_version_changes_only_the_namespace() -> None:
    text = "[intro](../00-intro.md)"
    current, _ = transform(text, DOC, TransformContext(product="sdk", version="next"))
    older, _ = transform(text, DOC, TransformContext(product="sdk", version="v0.47"))

    assert current == "[intro](/sdk/next/learn/intro)"
    assert older == "[intro](/sdk/v0.47/learn/intro)"


def test_escaping_link_is_a_warning(sdk_context: TransformContext) -> None:
    output, issues = _run("[x](../../../x.md)", sdk_context, path="guide.md")

    assert output == "[x](/sdk/v0.52/x)"
    assert [issue.kind for issue in issues] == [WARNING]


def test_code_is_never_rewritten(sdk_context: TransformContext) -> None:
    text = _md(
        """
        ```md
        :::note
        [a](./a.md) <!-- c --> <br> {value}
        :::
        ```
        `[a](./a.md)` and `{value}`
        """
    )
    output, issues = Transformer().transform(text, DOC, sdk_context)

    assert output == text
    assert issues == []


def test_bare_expressions_are_errors(sdk_context: TransformContext) -> None:
    _, issues = _run("Use {gasLimit} here\nbut not \\{escaped} or `{code}`", sdk_context)

    assert len(issues) == 1
    assert issues[0].kind == ERROR
    assert issues[0].suggestion == "Wrap in backticks"
    assert issues[0].line == 1


def test_unbalanced_components_are_errors(sdk_context: TransformContext) -> None:
    _, issues = _run("<Tabs>\n:::note\n</Tab>\n:::\n", sdk_context)

    messages = [issue.message for issue in issues]
    assert len(issues) == 2
    assert any("</Tab>" in message for message in messages)
    assert any("<Tabs> is never closed" in message for message in messages)


def test_issue_lines_account_for_front_matter(sdk_context: TransformContext) -> None:
    _, issues = _run("---\ntitle: X\n---\n\n{oops}\n", sdk_context)

    assert [issue.line for issue in issues] == [5]
    assert issues[0].file == DOC


def test_transform_is_idempotent(sdk_context: TransformContext) -> None:
    source = _md(
        """
        ---
        title: Architecture
        ---
        # Architecture {#arch}

        :::note[Careful]
        See [intro](../00-intro.md) and ![x](./img/x.png) <!-- c -->
        :::
        <details><summary>More</summary>
        Body<br>
        </details>
        <!--
        multi
        -->
        """
    )
    first, first_issues = Transformer().transform(source, DOC, sdk_context)
    second, second_issues = Transformer().transform(first, DOC, sdk_context)

    assert first_issues == []
    assert second_issues == []
    assert second == first


def test_front_matter_is_verbatim_by_default(sdk_context: TransformContext) -> None:
    source = "---\nsidebar_position: 3   # keep\nslug: /arch\n---\n# Architecture\n"
    output, _ = transform(source, DOC, sdk_context)

    assert output == source


def test_front_matter_rewrite_fills_title_and_description() -> None:
    context = TransformContext(product="sdk", version="v0.52", rewrite_front_matter=True)
    source = _md(
        """
        ---
        sidebar_position: 3
        ---
        # Architecture

        The architecture of the *SDK* is modular.
        """
    )
    output, issues = transform(source, DOC, context)

    assert issues == []
    assert output == _md(
        """
        ---
        title: Architecture
        description: The architecture of the SDK is modular.
        sidebar_position: 3
        ---
        # Architecture

        The architecture of the *SDK* is modular.
        """
    )


def test_front_matter_rewrite_keeps_complete_blocks() -> None:
    context = TransformContext(product="sdk", version="v0.52", rewrite_front_matter=True)
    source = "---\ntitle: A\ndescription: Already here\n---\nBody text that is long enough.\n"

    output, _ = transform(source, DOC, context)

    assert output == source


def test_front_matter_rewrite_adds_block_from_file_name() -> None:
    context = TransformContext(product="sdk", version="v0.52", rewrite_front_matter=True)
    output, _ = transform("Short.", "build/adr-046-module-params.md", context)

    assert output == "---\ntitle: ADR 046 Module Params\n---\nShort."


def test_malformed_front_matter_passes_through() -> None:
    context = TransformContext(product="sdk", version="v0.52", rewrite_front_matter=True)
    source = "---\ntitle: [broken\n---\nBody\n"

    output, issues = transform(source, DOC, context)

    assert output == source
    assert [issue.kind for issue in issues] == [ERROR]


def test_bom_and_crlf_are_normalised(sdk_context: TransformContext) -> None:
    output, _ = transform("\ufeff# Title\r\nBody\r\n", DOC, sdk_context)

    assert output == "# Title\nBody\n"


def test_analyse_is_deterministic_and_version_agnostic(sdk_context: TransformContext) -> None:
    transformer = Transformer()
    source = ":::note\n[a](./a.md)\n:::\n"

    first = transformer.analyse(source)
    second = transformer.analyse(source)
    text, _ = transformer.render(first, DOC, sdk_context)

    assert first == second
    assert "./a.md" in repr(first.document.blocks)
    assert text == "<Note>\n[a](/sdk/v0.52/learn/advanced/a)\n</Note>\n"


def test_read_source_splits_front_matter() -> None:
    source, issues = read_source("---\ntitle: T\n---\r\nBody", "intro.md")

    assert issues == []
    assert source.relative_path == "intro.md"
    assert source.metadata == {"title": "T"}
    assert source.front_matter == "---\ntitle: T\n---\n"
    assert source.body == "Body"
    assert source.body_line_offset == 3


@pytest.mark.parametrize(
    "source, path, expected",
    [
        ("---\ntitle: From Title\nsidebar_label: Label\n---\n# H1\n", "a.md", "From Title"),
        ("---\nsidebar_label: Label\n---\n# H1\n", "a.md", "Label"),
        ("# Heading One\nbody\n", "a.md", "Heading One"),
        ("body only\n", "01-learn/02-getting_started.md", "Getting Started"),
        ("body only\n", "01-learn/02-advanced/index.md", "Advanced"),
    ],
)
def test_page_title(source: str, path: str, expected: str) -> None:
    entry = Transformer().analyse(source)

    assert page_title(entry.document, path) == expected


def test_title_from_filename() -> None:
    assert title_from_filename("adr-002-docs-structure.md") == "ADR 002 Docs Structure"
    assert title_from_filename("index.md") == "Index"


@pytest.mark.parametrize(
    "front_matter, expected",
    [("sidebar_position: 3", 3.0), ("sidebar_position: '1.5'", 1.5), ("sidebar_position: true", None), ("x: 1", None)],
)
def test_sidebar_position(front_matter: str, expected) -> None:
    entry = Transformer().analyse(f"---\n{front_matter}\n---\nBody\n")

    assert sidebar_position(entry.document) == expected


def test_invalid_front_matter_date_passes_through(sdk_context: TransformContext) -> None:
    source = "---\ndate: 2024-02-30\n---\nBody\n"

    output, issues = transform(source, DOC, sdk_context)

    assert output == source
    assert [issue.kind for issue in issues] == [ERROR]
    assert "Malformed front matter" in issues[0].message


def test_links_stay_idempotent_under_wildcard_versions() -> None:
    context = TransformContext(product="ibc", version="v7.8.x")

    first, _ = transform("[b](./b.md)\n", "x/a.md", context)
    second, _ = transform(first, "x/a.md", context)

    assert first == "[b](/ibc/v7.8.x/x/b)\n"
    assert second == first


def test_angle_bracket_placeholders_become_code(sdk_context: TransformContext) -> None:
    output, issues = _run(
        """
        Run <simd> start on <host>:<port>
        Set <chain-id> before starting.
        Keys flow a <=> b and c <-> d.
        """,
        sdk_context,
    )

    assert issues == []
    assert output == _md(
        """
        Run `simd` start on `<host>`:`<port>`
        Set `<chain-id>` before starting.
        Keys flow a `<=>` b and c `<->` d.
        """
    )


def test_closed_elements_are_not_placeholders(sdk_context: TransformContext) -> None:
    output, issues = _run(
        """
        <custom-card title="x">Body</custom-card>
        <version>1</version>
        """,
        sdk_context,
    )

    assert issues == []
    assert output == _md(
        """
        <CustomCard title="x">Body</CustomCard>
        <version>1</version>
        """
    )


def test_unclosed_lowercase_element_is_reported(sdk_context: TransformContext) -> None:
    output, issues = transform("Call <foo> now\n", DOC, sdk_context)

    assert output == "Call <foo> now\n"
    assert [issue.kind for issue in issues] == [ERROR]
    assert issues[0].message == "Element <foo> is never closed"


def test_table_cell_expressions_are_wrapped(sdk_context: TransformContext) -> None:
    output, issues = _run(
        """
        | Field | Example |
        | --- | --- |
        | coin | {"denom":"uatom"} |
        """,
        sdk_context,
    )

    assert issues == []
    assert output.splitlines()[2] == '| coin | `{"denom":"uatom"}` |'


def test_prose_expressions_are_still_errors(sdk_context: TransformContext) -> None:
    output, issues = transform('Send {"denom": "uatom"} now\n', DOC, sdk_context)

    assert output == 'Send {"denom": "uatom"} now\n'
    assert [issue.kind for issue in issues] == [ERROR]


def test_double_backtick_spans_collapse(sdk_context: TransformContext) -> None:
    output, issues = transform("Use ``gas`` but keep ``a`b``.\n", DOC, sdk_context)

    assert issues == []
    assert output == "Use `gas` but keep ``a`b``.\n"


def test_reference_fences_become_comments(sdk_context: TransformContext) -> None:
    output, issues = _run(
        """
        ```go reference
        https://github.com/cosmos/cosmos-sdk/blob/v0.50.0/types/coin.go#L10-L20
        ```

        ```python reference
        https://github.com/cosmos/cosmos-sdk/blob/main/scripts/gen.py
        ```
        """,
        sdk_context,
    )

    assert issues == []
    assert output == _md(
        """
        ```go
        // Reference: https://github.com/cosmos/cosmos-sdk/blob/v0.50.0/types/coin.go#L10-L20
        ```

        ```python
        # Reference: https://github.com/cosmos/cosmos-sdk/blob/main/scripts/gen.py
        ```
        """
    )


def test_long_and_untyped_fences(sdk_context: TransformContext) -> None:
    body = "\n".join(f"x := {index}" for index in range(11))
    source = f"```go\n{body}\n```\n\n```\npackage main\n```\n"

    first, issues = transform(source, DOC, sdk_context)
    second, _ = transform(first, DOC, sdk_context)

    assert issues == []
    assert first == f"```go expandable\n{body}\n```\n\n```go\npackage main\n```\n"
    assert second == first


def test_link_text_with_syntax_characters_keeps_its_code(sdk_context: TransformContext) -> None:
    source = "[`a]b`](./u.md) and [`<simd>`](./v.md)\n"

    first, issues = transform(source, DOC, sdk_context)
    second, _ = transform(first, DOC, sdk_context)

    assert issues == []
    assert first == "[`a]b`](/sdk/v0.52/learn/advanced/u) and [`<simd>`](/sdk/v0.52/learn/advanced/v)\n"
    assert second == first
