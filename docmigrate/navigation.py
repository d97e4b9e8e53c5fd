"""Applies per-version page lists to Mintlify ``docs.json`` / ``versions.json``."""

from __future__ import annotations

import json
import math
import re
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from .logging import get_logger
from .models import ERROR, PageRecord, TransformIssue
from .scanner import CURRENT_VERSION_LABEL, version_sort_key
from .writer import Writer

_LOGGER = get_logger("navigation")

PRODUCT_ICONS = {
    "sdk": "gear",
    "ibc": "link",
    "cometbft": "star",
    "evm": "code",
    "wasmd": "cube",
    "hermes": "rocket",
}
DEFAULT_ICON = "book"
DOCUMENTATION_TAB = "Documentation"


def product_icon(product: str) -> str:
    return PRODUCT_ICONS.get(product.lower(), DEFAULT_ICON)


def sort_versions(labels: Sequence[str]) -> List[str]:
    """Highest version first, ``next`` last."""
    return sorted(set(labels), key=version_sort_key)


def default_version(versions: Sequence[str]) -> str:
    ordered = sort_versions(versions)
    if not ordered:
        return CURRENT_VERSION_LABEL
    if ordered[0] == CURRENT_VERSION_LABEL and len(ordered) > 1:
        return ordered[1]
    return ordered[0]


def group_title(directory: str) -> str:
    words = directory.replace("-", " ").replace("_", " ")
    return re.sub(r"\b\w", lambda match: match.group(0).upper(), words)


def _position(record: PageRecord) -> float:
    return record.sidebar_position if record.sidebar_position is not None else math.inf


def order_pages(records: Sequence[PageRecord]) -> List[PageRecord]:
    """Order by ``sidebar_position``; equal or missing positions fall back to the path."""
    return sorted(records, key=lambda record: (_position(record), record.page_path))


def build_version_entry(product: str, version: str, records: Sequence[PageRecord]) -> Dict[str, Any]:
    root_pages: List[str] = []
    groups: Dict[str, List[PageRecord]] = {}
    for record in order_pages(records):
        directory, separator, _ = record.page_path.partition("/")
        if not separator:
            root_pages.append(f"{product}/{version}/{record.page_path}")
            continue
        groups.setdefault(directory, []).append(record)

    ordered_groups = sorted(
        groups.items(),
        key=lambda item: (min(_position(record) for record in item[1]), item[0]),
    )
    nav_groups: List[Dict[str, Any]] = [{"group": product.upper(), "pages": root_pages}]
    for directory, members in ordered_groups:
        nav_groups.append(
            {
                "group": group_title(directory),
                "pages": [f"{product}/{version}/{record.page_path}" for record in members],
            }
        )
    return {
        "version": version,
        "tabs": [{"tab": DOCUMENTATION_TAB, "groups": nav_groups}],
    }


def build_dropdown(product: str, pages_by_version: Mapping[str, Sequence[PageRecord]]) -> Dict[str, Any]:
    return {
        "dropdown": product.upper(),
        "icon": product_icon(product),
        "versions": [
            build_version_entry(product, version, pages_by_version[version])
            for version in sort_versions(list(pages_by_version))
        ],
    }


def apply_docs_json(
    docs: Dict[str, Any], product: str, pages_by_version: Mapping[str, Sequence[PageRecord]]
) -> Dict[str, Any]:
    """Find or create the product dropdown and replace its versions."""
    navigation = docs.setdefault("navigation", {})
    dropdowns = navigation.setdefault("dropdowns", [])
    built = build_dropdown(product, pages_by_version)
    for dropdown in dropdowns:
        name = str(dropdown.get("dropdown", ""))
        if name.lower() == product.lower():
            dropdown["versions"] = built["versions"]
            break
    else:
        dropdowns.append(built)
    return docs


def apply_versions_json(data: Dict[str, Any], product: str, versions: Sequence[str]) -> Dict[str, Any]:
    products = data.setdefault("products", {})
    ordered = sort_versions(versions)
    products[product] = {"versions": ordered, "defaultVersion": default_version(ordered)}
    return data


class NavigationUpdater:
    """Writes navigation through the run's :class:`Writer`."""

    def __init__(self, writer: Writer, *, docs_json: Path, versions_json: Path) -> None:
        self._writer = writer
        self._docs_json = docs_json
        self._versions_json = versions_json

    def update(self, product: str, pages_by_version: Mapping[str, Sequence[PageRecord]]) -> List[TransformIssue]:
        mode = self._writer.mode
        versions = list(pages_by_version)
        if mode.is_staging:
            snippet = {
                "dropdown": build_dropdown(product, pages_by_version),
                "versions": {"versions": sort_versions(versions), "defaultVersion": default_version(versions)},
            }
            path = self._writer.write_snippet(f"navigation-{product}.json", snippet)
            _LOGGER.info("Navigation snippet written to %s", path)
            return []

        # Dry-run reads and validates both files so its diagnostics match a real run.
        docs, issue = _load_json(self._docs_json, required=True)
        if issue is not None:
            return [issue]
        versions_data, issue = _load_json(self._versions_json, required=False)
        if issue is not None:
            return [issue]

        docs = apply_docs_json(docs, product, pages_by_version)
        versions_data = apply_versions_json(versions_data, product, versions)
        if mode.is_dry_run:
            _LOGGER.info("dry-run: would update %s and %s", self._docs_json, self._versions_json)
            return []
        self._writer.write_json(self._docs_json, docs)
        self._writer.write_json(self._versions_json, versions_data)
        _LOGGER.info("Updated %s and %s", self._docs_json, self._versions_json)
        return []


def _load_json(path: Path, *, required: bool) -> Tuple[Dict[str, Any], Optional[TransformIssue]]:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        if not required:
            return {}, None
        return {}, _navigation_issue(path, "not found")
    except (OSError, ValueError) as exc:
        return {}, _navigation_issue(path, f"could not be read: {exc}")
    if not isinstance(data, dict):
        return {}, _navigation_issue(path, "must contain a JSON object")
    return data, None


def _navigation_issue(path: Path, problem: str) -> TransformIssue:
    return TransformIssue(
        kind=ERROR,
        line=0,
        message=f"Navigation file {path.name} {problem}",
        suggestion="Pass the Mintlify docs.json location via 'navigation.docs_json' in .docmigrate.yml",
        file=str(path),
    )


__all__ = [
    "DEFAULT_ICON",
    "NavigationUpdater",
    "PRODUCT_ICONS",
    "apply_docs_json",
    "apply_versions_json",
    "build_dropdown",
    "build_version_entry",
    "default_version",
    "order_pages",
    "product_icon",
    "sort_versions",
]
