"""Output mode and the filesystem writer."""

from __future__ import annotations

import filecmp
import json
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from .logging import get_logger

_LOGGER = get_logger("writer")

WRITE = "write"
DRY_RUN = "dry-run"
STAGING = "staging"
_KINDS = (WRITE, DRY_RUN, STAGING)

DEFAULT_STAGING_DIR = Path("tmp") / "migration-staging"
STAGING_ASSETS_DIR = "assets"


class MigrationError(RuntimeError):
    """Raised when the run cannot continue, e.g. the destination root is uncreatable."""


@dataclass(frozen=True)
class OutputMode:
    """Where (and whether) a run writes its output."""

    kind: str = WRITE
    staging_root: Optional[Path] = None

    def __post_init__(self) -> None:
        if self.kind not in _KINDS:
            raise ValueError(f"Unknown output mode: {self.kind}")
        if self.kind == STAGING and self.staging_root is None:
            raise ValueError("Staging mode requires a staging root")

    @classmethod
    def write(cls) -> "OutputMode":
        return cls(kind=WRITE)

    @classmethod
    def dry_run(cls) -> "OutputMode":
        return cls(kind=DRY_RUN)

    @classmethod
    def staging(cls, root: Path = DEFAULT_STAGING_DIR) -> "OutputMode":
        return cls(kind=STAGING, staging_root=Path(root))

    @property
    def is_dry_run(self) -> bool:
        return self.kind == DRY_RUN

    @property
    def is_staging(self) -> bool:
        return self.kind == STAGING

    def describe(self) -> str:
        if self.is_staging:
            return f"{self.kind} ({self.staging_root})"
        return self.kind


class Writer:
    """The only component that touches the destination filesystem.

    Documents land under ``docs_root`` and images under ``assets_root``. In
    staging mode both are redirected into the staging root; in dry-run mode
    every method computes its destination and returns without writing.
    """

    def __init__(self, mode: OutputMode, *, docs_root: Path, assets_root: Path) -> None:
        self.mode = mode
        if mode.is_staging:
            assert mode.staging_root is not None
            self.docs_root = mode.staging_root
            self.assets_root = mode.staging_root / STAGING_ASSETS_DIR
        else:
            self.docs_root = docs_root
            self.assets_root = assets_root

    def prepare(self) -> None:
        """Create the destination root; failure aborts the run."""
        if self.mode.is_dry_run:
            return
        try:
            self.docs_root.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise MigrationError(f"Cannot create destination root {self.docs_root}: {exc}") from exc

    def document_path(self, relative: str) -> Path:
        return self.docs_root / relative

    def asset_path(self, relative: str) -> Path:
        return self.assets_root / relative

    def write_document(self, relative: str, text: str) -> Path:
        """Write one document and return its destination (planned only in dry-run)."""
        return self.write_text(self.document_path(relative), text)

    def write_text(self, destination: Path, text: str) -> Path:
        if self.mode.is_dry_run:
            _LOGGER.debug("dry-run: would write %s", destination)
            return destination
        destination.parent.mkdir(parents=True, exist_ok=True)
        destination.write_text(text, encoding="utf-8")
        _LOGGER.debug("Wrote %s", destination)
        return destination

    def copy_asset(self, source: Path, relative: str) -> bool:
        """Copy an image unless an identical file is already in place.

        Returns whether a copy was needed, so dry-run reports the same count.
        """
        destination = self.asset_path(relative)
        if destination.exists() and filecmp.cmp(source, destination, shallow=False):
            return False
        if self.mode.is_dry_run:
            _LOGGER.debug("dry-run: would copy %s -> %s", source, destination)
            return True
        destination.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(source, destination)
        return True

    def write_json(self, destination: Path, payload: Any) -> Optional[Path]:
        """Write a collaborator file such as ``docs.json``; only in write mode."""
        if self.mode.kind != WRITE:
            return None
        return self.write_text(destination, json.dumps(payload, indent=2, ensure_ascii=False) + "\n")

    def write_snippet(self, name: str, payload: Any) -> Optional[Path]:
        """Write a JSON snippet into the staging root; only in staging mode."""
        if not self.mode.is_staging:
            return None
        return self.write_text(self.docs_root / name, json.dumps(payload, indent=2, ensure_ascii=False) + "\n")


__all__ = [
    "DEFAULT_STAGING_DIR",
    "DRY_RUN",
    "MigrationError",
    "OutputMode",
    "STAGING",
    "WRITE",
    "Writer",
]
