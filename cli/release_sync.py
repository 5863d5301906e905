"""CLI for syncing local directories with a GitHub repository's latest release."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from relsync.config import Settings, UpdaterConfig
from relsync.exceptions import RelsyncError, SyncError, SyncStage
from relsync.filesystem.metadata_store import MetadataStore
from relsync.routing import (
    ExtensionRouter,
    ExtractTarget,
    KeepAllRouter,
    SubdirRouter,
    SuffixFilter,
)
from relsync.services.updater import Updater


def _configure_logging(verbose: bool) -> None:
    """Configure CLI logging."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)-8s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    # Quiet noisy libraries
    logging.getLogger("httpx").setLevel(logging.DEBUG if verbose else logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def _dest_path(value: str) -> Path:
    return Path(value).expanduser().resolve()


def parse_target(spec: str, ext: str = "") -> ExtractTarget:
    """Parse a ``SUBDIR=DEST`` target specification."""
    subdir, sep, dest = spec.partition("=")
    subdir = subdir.strip("/")
    if not sep or not subdir or not dest:
        raise ValueError(f"Invalid target {spec!r}: expected SUBDIR=DEST")
    return ExtractTarget(router=SubdirRouter(subdir, ext), dest_dir=_dest_path(dest))


def build_targets(
    subdir_specs: list[str], keep_all_dests: list[str], ext: str = ""
) -> list[ExtractTarget]:
    """Build extraction targets from the ``--target`` and ``--all`` options."""
    targets = [parse_target(spec, ext) for spec in subdir_specs]
    for dest in keep_all_dests:
        router = ExtensionRouter(ext) if ext else KeepAllRouter()
        targets.append(ExtractTarget(router=router, dest_dir=_dest_path(dest)))
    return targets


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="relsync",
        description="Sync local directories with the latest release of a GitHub repository",
    )
    parser.add_argument("--owner", "-o", required=True, help="Repository owner")
    parser.add_argument("--repo", "-r", required=True, help="Repository name")
    parser.add_argument(
        "--metadata-file",
        "-m",
        help="Release metadata file (default: ~/.relsync/<owner>/<repo>/release.json)",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")

    subparsers = parser.add_subparsers(dest="command")

    sync_parser = subparsers.add_parser("sync", help="Download and extract the latest release")
    sync_parser.add_argument(
        "--target",
        "-t",
        action="append",
        default=[],
        metavar="SUBDIR=DEST",
        help="Extract SUBDIR of the release into DEST (repeatable)",
    )
    sync_parser.add_argument(
        "--all",
        action="append",
        default=[],
        metavar="DEST",
        help="Extract the whole release into DEST (repeatable)",
    )
    sync_parser.add_argument("--ext", default="", help="Only extract files with this suffix")
    sync_parser.add_argument(
        "--only",
        default="",
        metavar="SUFFIX",
        help="Skip archive entries not ending with SUFFIX before routing",
    )
    sync_parser.add_argument(
        "--force", action="store_true", help="Download even if already up to date"
    )

    status_parser = subparsers.add_parser("status", help="Show the recorded release")
    status_parser.add_argument(
        "--remote", action="store_true", help="Also query the latest remote release"
    )
    return parser


def _run_sync(args: argparse.Namespace, settings: Settings) -> None:
    targets = build_targets(args.target, args.all, args.ext)
    config = UpdaterConfig(
        repo_owner=args.owner,
        repo_name=args.repo,
        targets=targets,
        metadata_file=Path(args.metadata_file) if args.metadata_file else None,
        extract_filter=SuffixFilter(args.only) if args.only else None,
    )
    with Updater(config, settings=settings) as updater:
        result = updater.update(force=args.force)

    if result.downloaded:
        written = result.report.files_written if result.report else 0
        print(
            f"Synced {args.owner}/{args.repo} {result.previous_version or '<none>'} "
            f"-> {result.version}. {written} file(s) written."
        )
    else:
        print(f"{args.owner}/{args.repo} is up to date ({result.version}).")
    if not result.metadata_saved:
        print("  Warning: release metadata could not be saved")


def _run_status(args: argparse.Namespace, settings: Settings) -> None:
    metadata_file = (
        Path(args.metadata_file)
        if args.metadata_file
        else settings.default_metadata_file(args.owner, args.repo)
    )
    store = MetadataStore(metadata_file)
    version = store.read_version()
    checked_at = store.last_checked_at()
    print(f"Release status for {args.owner}/{args.repo}:")
    print(f"  Metadata file: {metadata_file}")
    print(f"  Local version: {version or '<none>'}")
    print(f"  Last checked:  {checked_at.isoformat() if checked_at else '<never>'}")

    if args.remote:
        # Only the remote lookup runs, so a placeholder target is enough.
        config = UpdaterConfig(
            repo_owner=args.owner,
            repo_name=args.repo,
            targets=[ExtractTarget(router=KeepAllRouter(), dest_dir=metadata_file.parent)],
            metadata_file=metadata_file,
        )
        with Updater(config, settings=settings) as updater:
            latest = updater.latest_version()
        marker = "" if latest == version else " (update available)"
        print(f"  Latest remote: {latest}{marker}")


def main(argv: list[str] | None = None) -> None:
    """CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)

    if args.command is None:
        parser.print_help()
        return

    settings = Settings()
    try:
        if args.command == "sync":
            _run_sync(args, settings)
        else:
            _run_status(args, settings)
    except SyncError as exc:
        hint = ""
        if exc.stage == SyncStage.REMOTE_UNAVAILABLE:
            hint = " (check network access or GITHUB_TOKEN)"
        print(f"Error: {exc}{hint}")
        sys.exit(1)
    except (RelsyncError, ValueError) as exc:
        print(f"Error: {exc}")
        sys.exit(1)


if __name__ == "__main__":
    main()
