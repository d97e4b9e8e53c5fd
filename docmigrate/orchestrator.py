"""Batch driver for one migration run."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from .config import MigrationConfig
from .logging import get_logger, log_issues
from .models import ERROR, WARNING, PageRecord, TransformContext, TransformIssue, VersionRoot
from .navigation import NavigationUpdater
from .paths import image_relative_path, output_relative_path, page_path
from .report import ReportAggregator
from .scanner import DocumentScanner, checksum, discover_version_roots, static_root
from .stores import ContentCache
from .transformer import Transformer, content_checksum, page_title, sidebar_position
from .writer import OutputMode, Writer

DOCS_JSON = "docs.json"
VERSIONS_JSON = "versions.json"
ASSETS_DIR = "assets"
IMAGES_DIR = "images"
STATIC_IMAGES_DIR = "static"


@dataclass
class MigrationRun:
    """State of one invocation: inputs, output mode, cache, report, and page lists."""

    source: Path
    target: Path
    product: str
    version_roots: List[VersionRoot]
    mode: OutputMode
    report: ReportAggregator = field(default_factory=ReportAggregator)
    cache: ContentCache = field(default_factory=ContentCache)
    pages: Dict[str, List[PageRecord]] = field(default_factory=dict)

    def exit_code(self) -> int:
        return self.report.exit_code()


class Migrator:
    """Drives scanning, transformation, writing, and reporting."""

    def __init__(
        self,
        config: MigrationConfig,
        *,
        transformer: Optional[Transformer] = None,
        scanner: Optional[DocumentScanner] = None,
    ) -> None:
        self.config = config
        self.transformer = transformer or Transformer(
            callouts=config.callouts,
            source_extensions=config.source_extensions,
            image_extensions=config.image_extensions,
        )
        self.scanner = scanner or DocumentScanner(
            include=config.include,
            exclude_paths=config.exclude_paths,
            image_extensions=config.image_extensions,
        )
        self.logger = get_logger("orchestrator")

    def run(
        self,
        source: Path,
        target: Path,
        product: str,
        *,
        mode: Optional[OutputMode] = None,
        version: Optional[str] = None,
        update_nav: bool = False,
        rewrite_front_matter: Optional[bool] = None,
    ) -> MigrationRun:
        source = Path(source).expanduser().resolve()
        target = Path(target).expanduser().resolve()
        mode = mode or OutputMode.write()
        config = self.config

        roots = discover_version_roots(source, version=version)
        self.logger.info(
            "Migrating %s -> %s as '%s' (%s); versions: %s",
            source,
            target,
            product,
            mode.describe(),
            ", ".join(root.label for root in roots),
        )
        run = MigrationRun(source=source, target=target, product=product, version_roots=roots, mode=mode)

        writer = Writer(mode, docs_root=target, assets_root=config.assets_root or target.parent / ASSETS_DIR)
        writer.prepare()

        rewrite = config.rewrite_front_matter if rewrite_front_matter is None else rewrite_front_matter
        assets_seen: Dict[str, Tuple[str, str]] = {}
        outputs_seen: Dict[str, Tuple[str, str]] = {}

        static = static_root(source)
        if static is not None and all(root.path != source for root in roots):
            self._copy_images(run, writer, static, f"{STATIC_IMAGES_DIR}/", "static", assets_seen)

        for root in roots:
            context = TransformContext(
                product=product,
                version=root.label,
                rewrite_front_matter=rewrite,
                known_products=tuple(config.known_products),
                assets_url=config.assets_url,
            )
            self._copy_images(run, writer, root.path, "", root.label, assets_seen)
            pages = run.pages.setdefault(root.label, [])
            for relative in self.scanner.documents(root.path):
                record = self._migrate_document(run, writer, root, relative, context, outputs_seen)
                if record is not None:
                    pages.append(record)

        if update_nav:
            navigation = config.navigation
            updater = NavigationUpdater(
                writer,
                docs_json=navigation.docs_json or target.parent / DOCS_JSON,
                versions_json=navigation.versions_json or target.parent / VERSIONS_JSON,
            )
            run.report.extend(updater.update(product, run.pages))

        stats = run.cache.stats()
        self.logger.info(
            "Processed %d files (%d unique, %d cache hits); %d errors, %d warnings",
            run.report.counters.files_processed,
            stats.invocations,
            stats.hits,
            len(run.report.errors),
            len(run.report.warnings),
        )
        return run

    def _migrate_document(
        self,
        run: MigrationRun,
        writer: Writer,
        root: VersionRoot,
        relative: str,
        context: TransformContext,
        outputs_seen: Dict[str, Tuple[str, str]],
    ) -> Optional[PageRecord]:
        path = root.path / relative
        display = _display_path(run.source, path)
        try:
            data = path.read_bytes()
        except OSError as exc:
            run.report.add(_file_error(display, f"Cannot read file: {exc}"))
            return None
        try:
            raw = data.decode("utf-8")
        except UnicodeDecodeError as exc:
            run.report.add(_file_error(display, f"File is not valid UTF-8: {exc}"))
            return None

        digest = content_checksum(data)
        try:
            entry, hit = run.cache.get_or_compute(digest, lambda: self.transformer.analyse(raw, digest))
            text, issues = self.transformer.render(entry, relative, context)
        except Exception as exc:
            self.logger.debug("Transform of %s failed", display, exc_info=True)
            run.report.add(_file_error(display, f"Transform failed: {exc}"))
            return None
        run.report.extend(issues, file=display)
        log_issues(self.logger, display, issues)

        output = output_relative_path(relative, self.config.target_extension, self.config.source_extensions)
        destination = f"{root.label}/{output}"
        text_digest = content_checksum(text.encode("utf-8"))
        previous = outputs_seen.get(destination)
        if previous is not None:
            run.report.add(_collision_issue(display, destination, previous, text_digest))
            run.report.record_document(root.label, from_cache=hit, written=False)
            return None
        outputs_seen[destination] = (display, text_digest)

        written = True
        try:
            writer.write_document(destination, text)
        except OSError as exc:
            written = False
            run.report.add(_file_error(display, f"Cannot write {destination}: {exc}"))
        run.report.record_document(root.label, from_cache=hit, written=written)
        self.logger.debug("%s -> %s%s", display, destination, " (cached)" if hit else "")

        return PageRecord(
            version=root.label,
            page_path=page_path(relative, self.config.source_extensions),
            title=page_title(entry.document, relative),
            sidebar_position=sidebar_position(entry.document),
            from_cache=hit,
        )

    def _copy_images(
        self,
        run: MigrationRun,
        writer: Writer,
        directory: Path,
        prefix: str,
        label: str,
        seen: Dict[str, Tuple[str, str]],
    ) -> None:
        for relative in self.scanner.images(directory):
            path = directory / relative
            destination = f"{run.product}/{IMAGES_DIR}/{prefix}{image_relative_path(relative)}"
            display = _display_path(run.source, path)
            try:
                digest = checksum(path)
                previous = seen.get(destination)
                if previous is not None:
                    if previous[0] != digest:
                        run.report.add(
                            TransformIssue(
                                kind=WARNING,
                                line=0,
                                message=f"Image differs from the copy already placed at {destination}",
                                suggestion=f"Kept the version from '{previous[1]}'",
                                file=display,
                            )
                        )
                    continue
                seen[destination] = (digest, label)
                copied = writer.copy_asset(path, destination)
            except OSError as exc:
                run.report.add(_file_error(display, f"Cannot copy image: {exc}"))
                continue
            run.report.record_image(copied=copied)


def _display_path(source: Path, path: Path) -> str:
    try:
        return path.relative_to(source).as_posix()
    except ValueError:
        return path.as_posix()


def _file_error(display: str, message: str) -> TransformIssue:
    return TransformIssue(kind=ERROR, line=0, message=message, file=display)


def _collision_issue(
    display: str, destination: str, previous: Tuple[str, str], text_digest: str
) -> TransformIssue:
    """Two sources map to one output; differing content is an error, a duplicate a warning."""
    first, first_digest = previous
    differs = first_digest != text_digest
    return TransformIssue(
        kind=ERROR if differs else WARNING,
        line=0,
        message=f"Output {destination} is already produced by {first}"
        + ("" if differs else " with identical content"),
        suggestion=f"Kept the output of {first}; rename or remove one of the sources",
        file=display,
    )


__all__ = ["MigrationRun", "Migrator"]
