from __future__ import annotations

import argparse
import logging
import sys
from typing import Any, Dict, List, Optional

from .archive import archive_artifact
from .environment import emit_environment
from .exceptions import LifecycleError
from .history import HISTORY_DIRNAME, merge_history_into
from .lifecycle import generate_report
from .path_utils import artifact_dir_for, resolve_directory, summary_path_for
from .request import build_request, load_request
from .summary import set_report_title


def _parse_env_pairs(pairs: Optional[List[str]]) -> Optional[Dict[str, str]]:
    if not pairs:
        return None
    parsed: Dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key.strip():
            raise ValueError(f"Expected KEY=VALUE for --env, got {pair!r}")
        parsed[key.strip()] = value
    return parsed


def _request_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    overrides: Dict[str, Any] = {
        "output_directory": args.output_dir,
        "results_directory": args.results_dir,
        "archive_directory": args.archive_dir,
        "history_source": args.history_source,
        "report_title": args.title,
        "environment_parameters": _parse_env_pairs(args.env),
        "environment_format": args.env_format,
    }
    if args.no_history:
        overrides["keep_history"] = False
    if args.keep_snapshots:
        overrides["keep_artifact_snapshots"] = True
    return overrides


def _command_generate(args: argparse.Namespace) -> int:
    try:
        overrides = _request_overrides(args)
        if args.config:
            request = load_request(resolve_directory(args.config), overrides)
        else:
            request = build_request(overrides)
        result = generate_report(request)
    except (LifecycleError, ValueError) as exc:
        print(f"generate failed: {exc}", file=sys.stderr)
        return 1

    print(f"Generated report at {result.artifact_dir}")
    if result.snapshot_dir is not None:
        print(f"Archived previous report to {result.snapshot_dir}")
    return 0


def _command_merge_history(args: argparse.Namespace) -> int:
    output_dir = resolve_directory(args.output_dir)
    source = (
        resolve_directory(args.history_source)
        if args.history_source
        else artifact_dir_for(output_dir)
    )
    try:
        history = merge_history_into(
            source / HISTORY_DIRNAME, resolve_directory(args.results_dir)
        )
    except LifecycleError as exc:
        print(f"merge-history failed: {exc}", file=sys.stderr)
        return 1
    print(f"Merged {len(history)} history file(s)")
    return 0


def _command_archive(args: argparse.Namespace) -> int:
    artifact_dir = artifact_dir_for(resolve_directory(args.output_dir))
    archive_root = resolve_directory(args.archive_dir) if args.archive_dir else None
    try:
        snapshot = archive_artifact(artifact_dir, archive_root)
    except LifecycleError as exc:
        print(f"archive failed: {exc}", file=sys.stderr)
        return 1
    if snapshot is None:
        print(f"No report found at {artifact_dir}; nothing archived")
    else:
        print(f"Archived {artifact_dir} to {snapshot}")
    return 0


def _command_set_title(args: argparse.Namespace) -> int:
    summary_path = summary_path_for(artifact_dir_for(resolve_directory(args.output_dir)))
    try:
        set_report_title(summary_path, args.title)
    except LifecycleError as exc:
        print(f"set-title failed: {exc}", file=sys.stderr)
        return 1
    print(f"Set report title to {args.title!r}")
    return 0


def _command_environment(args: argparse.Namespace) -> int:
    try:
        parameters = _parse_env_pairs(args.env) or {}
        path = emit_environment(
            parameters,
            resolve_directory(args.results_dir),
            fmt=args.env_format or "xml",
        )
    except (LifecycleError, ValueError) as exc:
        print(f"environment failed: {exc}", file=sys.stderr)
        return 1
    print(f"Wrote {len(parameters)} parameter(s) to {path}")
    return 0


def _add_env_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--env",
        action="append",
        metavar="KEY=VALUE",
        default=None,
        help="Environment parameter for the report (repeatable)",
    )
    parser.add_argument(
        "--env-format",
        choices=["xml", "properties"],
        default=None,
        help="Environment file format (default: xml)",
    )


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Manage Allure report history, snapshots and metadata",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity (default: WARNING)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    generate_parser = subparsers.add_parser(
        "generate",
        help="Merge history, archive, render and patch a report",
    )
    generate_parser.add_argument(
        "--config",
        default=None,
        help="YAML render request; flags below override its values",
    )
    generate_parser.add_argument("--output-dir", default=None, help="Report output directory")
    generate_parser.add_argument("--results-dir", default=None, help="Allure results directory")
    generate_parser.add_argument(
        "--no-history",
        action="store_true",
        help="Do not carry trend history from the previous report",
    )
    generate_parser.add_argument(
        "--keep-snapshots",
        action="store_true",
        help="Archive the previous report before rendering",
    )
    generate_parser.add_argument(
        "--archive-dir",
        default=None,
        help="Snapshot directory (default: next to the report)",
    )
    generate_parser.add_argument(
        "--history-source",
        default=None,
        help="Previous report directory to take history from",
    )
    generate_parser.add_argument("--title", default=None, help="Report display title")
    _add_env_arguments(generate_parser)
    generate_parser.set_defaults(func=_command_generate)

    history_parser = subparsers.add_parser(
        "merge-history",
        help="Copy the previous report's history into the results directory",
    )
    history_parser.add_argument("--output-dir", required=True)
    history_parser.add_argument("--results-dir", required=True)
    history_parser.add_argument("--history-source", default=None)
    history_parser.set_defaults(func=_command_merge_history)

    archive_parser = subparsers.add_parser(
        "archive",
        help="Snapshot the current report into a timestamped directory",
    )
    archive_parser.add_argument("--output-dir", required=True)
    archive_parser.add_argument("--archive-dir", default=None)
    archive_parser.set_defaults(func=_command_archive)

    title_parser = subparsers.add_parser(
        "set-title",
        help="Set the display title of a rendered report",
    )
    title_parser.add_argument("--output-dir", required=True)
    title_parser.add_argument("--title", required=True)
    title_parser.set_defaults(func=_command_set_title)

    env_parser = subparsers.add_parser(
        "environment",
        help="Write environment parameters into the results directory",
    )
    env_parser.add_argument("--results-dir", required=True)
    _add_env_arguments(env_parser)
    env_parser.set_defaults(func=_command_environment)

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_arg_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    handler = getattr(args, "func", None)
    if not handler:
        parser.print_help()
        return 2
    return handler(args)


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
