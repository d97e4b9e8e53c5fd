"""Tests for docmigrate.report."""

from __future__ import annotations

from docmigrate.models import ERROR, WARNING, TransformIssue
from docmigrate.report import ReportAggregator


def _issue(kind: str, file: str, line: int, message: str, suggestion=None) -> TransformIssue:
    return TransformIssue(kind=kind, line=line, message=message, suggestion=suggestion, file=file)


def test_exit_code_is_gated_on_errors() -> None:
    report = ReportAggregator()
    assert report.exit_code() == 0

    report.add(_issue(WARNING, "a.md", 1, "Unknown admonition"))
    assert report.exit_code() == 0

    report.add(_issue(ERROR, "b.md", 2, "Unclosed fence"))
    assert report.exit_code() == 1


def test_issues_are_ordered_errors_first_then_file_and_line() -> None:
    report = ReportAggregator()
    report.add(_issue(WARNING, "a.md", 1, "w"))
    report.add(_issue(ERROR, "b.md", 9, "e2"))
    report.add(_issue(ERROR, "b.md", 2, "e1"))
    report.add(_issue(ERROR, "a.md", 5, "e0"))

    assert [issue.message for issue in report.issues] == ["e0", "e1", "e2", "w"]
    assert [issue.message for issue in report.errors] == ["e0", "e1", "e2"]
    assert [section.title for section in report.sections()] == ["Errors", "Warnings"]


def test_extend_attributes_file() -> None:
    report = ReportAggregator()
    report.extend([TransformIssue(kind=ERROR, line=3, message="m")], file="learn/intro.md")

    assert report.issues[0].file == "learn/intro.md"


def test_render_summarises_counters_and_issues() -> None:
    report = ReportAggregator()
    report.record_document("next", from_cache=False, written=True)
    report.record_document("v0.52", from_cache=True, written=True)
    report.record_image(copied=True)
    report.record_image(copied=False)
    report.add(_issue(WARNING, "b.md", 1, "Meh"))
    report.add(_issue(ERROR, "a.md", 3, "Bad", "Fix it"))

    rendered = report.render()
    lines = rendered.splitlines()

    assert "Files processed: 2" in lines
    assert "Cache hits: 1" in lines
    assert "Unique contents: 1" in lines
    assert "Images copied: 1" in lines
    assert lines.index("  v0.52: 1 file") < lines.index("  next: 1 file")
    assert lines.index("Errors (1)") < lines.index("a.md") < lines.index("  line 3: Bad")
    assert "    suggestion: Fix it" in lines
    assert lines.index("Warnings (1)") < lines.index("b.md")
    assert "No issues detected." not in lines


def test_render_is_deterministic_regardless_of_insertion_order() -> None:
    issues = [_issue(ERROR, "z.md", 1, "late"), _issue(WARNING, "a.md", 4, "w"), _issue(ERROR, "a.md", 2, "e")]
    forward = ReportAggregator()
    backward = ReportAggregator()
    forward.extend(issues)
    backward.extend(reversed(issues))

    assert forward.render() == backward.render()


def test_render_without_issues() -> None:
    rendered = ReportAggregator().render()

    assert rendered.startswith("Migration report\n")
    assert rendered.endswith("No issues detected.\n")
