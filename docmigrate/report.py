"""Issue aggregation, run counters, and the rendered summary."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

from jinja2 import Environment, FileSystemLoader

from .models import ERROR, WARNING, TransformIssue
from .scanner import version_sort_key

_TEMPLATES_DIR = Path(__file__).with_name("templates")
_REPORT_TEMPLATE = "report.j2"
_SECTION_TITLES = {ERROR: "Errors", WARNING: "Warnings"}


@dataclass
class RunCounters:
    files_processed: int = 0
    cache_hits: int = 0
    unique_contents: int = 0
    files_written: int = 0
    images_copied: int = 0
    per_version: Dict[str, int] = field(default_factory=dict)


@dataclass(frozen=True)
class ReportSection:
    title: str
    count: int
    files: List[Tuple[str, List[TransformIssue]]]


class ReportAggregator:
    """Collects every issue of a run and renders a deterministic summary."""

    def __init__(self, templates_dir: Optional[Path] = None) -> None:
        self._issues: List[TransformIssue] = []
        self.counters = RunCounters()
        self._env = Environment(
            loader=FileSystemLoader(str(templates_dir or _TEMPLATES_DIR)),
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
        )

    def add(self, issue: TransformIssue) -> None:
        self._issues.append(issue)

    def extend(self, issues: Iterable[TransformIssue], *, file: Optional[str] = None) -> None:
        for issue in issues:
            self.add(issue.for_file(file) if file is not None else issue)

    def record_document(self, version: str, *, from_cache: bool, written: bool) -> None:
        counters = self.counters
        counters.files_processed += 1
        if from_cache:
            counters.cache_hits += 1
        else:
            counters.unique_contents += 1
        if written:
            counters.files_written += 1
        counters.per_version[version] = counters.per_version.get(version, 0) + 1

    def record_image(self, *, copied: bool) -> None:
        if copied:
            self.counters.images_copied += 1

    @property
    def issues(self) -> List[TransformIssue]:
        return sorted(self._issues, key=lambda issue: (issue.kind != ERROR,) + issue.sort_key())

    @property
    def errors(self) -> List[TransformIssue]:
        return [issue for issue in self.issues if issue.is_error]

    @property
    def warnings(self) -> List[TransformIssue]:
        return [issue for issue in self.issues if not issue.is_error]

    def exit_code(self) -> int:
        return 1 if any(issue.is_error for issue in self._issues) else 0

    def sections(self) -> List[ReportSection]:
        sections: List[ReportSection] = []
        for kind, issues in ((ERROR, self.errors), (WARNING, self.warnings)):
            if not issues:
                continue
            grouped: Dict[str, List[TransformIssue]] = {}
            for issue in issues:
                grouped.setdefault(issue.file or "(run)", []).append(issue)
            sections.append(
                ReportSection(
                    title=_SECTION_TITLES[kind],
                    count=len(issues),
                    files=sorted(grouped.items()),
                )
            )
        return sections

    def render(self) -> str:
        template = self._env.get_template(_REPORT_TEMPLATE)
        per_version = sorted(self.counters.per_version.items(), key=lambda item: version_sort_key(item[0]))
        return template.render(
            counters=self.counters,
            per_version=per_version,
            sections=self.sections(),
        )


__all__ = ["ReportAggregator", "ReportSection", "RunCounters"]
