"""CLI entrypoints for docmigrate commands."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from .config import ConfigError, MigrationConfig, load_config
from .logging import configure_logging
from .orchestrator import Migrator
from .postproc.links import LinkValidator
from .report import ReportAggregator
from .writer import DEFAULT_STAGING_DIR, MigrationError, OutputMode


def _add_verbose_option(parser: argparse.ArgumentParser) -> None:
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=False,
        help="Increase log verbosity for troubleshooting.",
    )
    verbosity.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        default=False,
        help="Only log warnings; the report is still printed.",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="docmigrate",
        description="Migrate a Docusaurus documentation tree to Mintlify MDX.",
    )
    _add_verbose_option(parser)
    parser.add_argument("source", help="Docusaurus repository or docs directory to migrate.")
    parser.add_argument("target", help="Destination directory for the product's versioned MDX tree.")
    parser.add_argument("product", help="Product name used for link namespaces and navigation (e.g. sdk).")

    mode = parser.add_mutually_exclusive_group()
    mode.add_argument(
        "--dry-run",
        action="store_true",
        help="Run the full migration and report without touching the filesystem.",
    )
    mode.add_argument(
        "--staging",
        action="store_true",
        help=f"Write output under the staging directory (default: {DEFAULT_STAGING_DIR}).",
    )
    parser.add_argument(
        "--staging-dir",
        type=Path,
        default=None,
        help="Override the staging directory used with --staging.",
    )
    parser.add_argument(
        "--update-nav",
        action="store_true",
        help="Update docs.json and versions.json with the migrated pages.",
    )
    parser.add_argument(
        "--version",
        dest="version_label",
        metavar="LABEL",
        default=None,
        help="Treat SOURCE as a single version root with this label (e.g. v0.53).",
    )
    parser.add_argument(
        "--include",
        action="append",
        metavar="GLOB",
        default=None,
        help="Document glob to include; may be repeated (default: *.md, *.mdx).",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to a .docmigrate.yml file (defaults to SOURCE/.docmigrate.yml).",
    )
    parser.add_argument(
        "--rewrite-front-matter",
        action="store_true",
        default=None,
        help="Fill in title and description in the front matter.",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Also write logs to this file.",
    )
    return parser


def _build_check_links_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="docmigrate-check-links",
        description="Check internal links of a migrated Mintlify documentation tree.",
    )
    _add_verbose_option(parser)
    parser.add_argument("root", help="Root of the documentation tree (the directory holding docs.json).")
    return parser


def _output_mode(args: argparse.Namespace, config: MigrationConfig) -> OutputMode:
    if args.dry_run:
        return OutputMode.dry_run()
    if args.staging:
        return OutputMode.staging(args.staging_dir or config.staging_dir or DEFAULT_STAGING_DIR)
    return OutputMode.write()


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entrypoint for ``docmigrate``."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose), quiet=bool(args.quiet), log_file=args.log_file)

    if args.config is not None and not args.config.is_file():
        parser.exit(1, f"Config file not found: {args.config}\n")
    try:
        config = load_config(args.config or Path(args.source))
    except ConfigError as exc:
        parser.exit(1, f"docmigrate: {exc}\n")
    if args.include:
        config.include = list(args.include)

    mode = _output_mode(args, config)
    migrator = Migrator(config)
    try:
        run = migrator.run(
            Path(args.source),
            Path(args.target),
            args.product,
            mode=mode,
            version=args.version_label,
            update_nav=bool(args.update_nav),
            rewrite_front_matter=args.rewrite_front_matter,
        )
    except (FileNotFoundError, NotADirectoryError) as exc:
        parser.exit(1, f"{exc}\n")
    except MigrationError as exc:
        parser.exit(1, f"docmigrate failed: {exc}\nRun with --verbose for more details.\n")

    print(run.report.render(), end="")
    if mode.is_dry_run:
        print("Dry run complete; no files were written.")
    elif mode.is_staging:
        print(f"Staged output in {_relativize(Path(mode.staging_root or DEFAULT_STAGING_DIR))}")
    else:
        print(f"Migration written to {_relativize(run.target)}")
    return run.exit_code()


def check_links_main(argv: Optional[List[str]] = None) -> int:
    """CLI entrypoint for ``docmigrate-check-links``."""
    parser = _build_check_links_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose), quiet=bool(args.quiet))

    root = Path(args.root)
    if not root.is_dir():
        parser.exit(1, f"Documentation root not found: {root}\n")

    checked, issues = LinkValidator(root).validate()
    report = ReportAggregator()
    report.extend(issues)
    for issue in report.issues:
        print(f"{issue.file}:{issue.line}: {issue.message}")
    print(f"Checked {checked} files; {len(report.errors)} broken links")
    return report.exit_code()


def _relativize(path: Path) -> str:
    try:
        return str(path.resolve().relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
