"""
ProjectDesk CLI

Run the derivations over exported record-store JSON.

Usage:
    projectdesk attention snapshot.json [--now ISO] [--env NAME] [--limit N] [--json]
    projectdesk thread sources.json [--view all|external|internal] [--json]
    projectdesk thresholds [--env NAME] [--thresholds FILE]
"""

import argparse
import json
import sys
from pathlib import Path
from typing import Any

from projectdesk import config
from projectdesk.activity import THREAD_VIEWS, build_thread, filter_thread
from projectdesk.attention import compute_attention_items, summarize
from projectdesk.contracts import ENVIRONMENT_OVERRIDES, ThresholdViolation, load_thresholds
from projectdesk.observability import configure_logging

EXIT_OK = 0
EXIT_BAD_INPUT = 2


class SnapshotLoadError(Exception):
    """Raised when an input JSON file cannot be read or decoded."""

    pass


def load_json(path: str) -> Any:
    try:
        with open(Path(path)) as f:
            return json.load(f)
    except (OSError, json.JSONDecodeError) as exc:
        raise SnapshotLoadError(f"Cannot read {path}: {exc}") from exc


def cmd_attention(args) -> int:
    """Derive attention items for one project snapshot."""
    snapshot = load_json(args.snapshot)
    thresholds = load_thresholds(environment=args.env, path=args.thresholds)
    items = compute_attention_items(snapshot, now=args.now, thresholds=thresholds, max_items=args.limit)

    if args.json:
        print(json.dumps([item.to_dict() for item in items], indent=2))
        return EXIT_OK

    if not items:
        print("Nothing needs attention")
        return EXIT_OK

    for item in items:
        print(f"[{item.priority.value:<6}] {item.category.value:<12} {item.message}  -> {item.deep_link_tab}")

    counts = summarize(items)["by_priority"]
    print(f"\n{len(items)} item(s): {counts.get('HIGH', 0)} high, {counts.get('MEDIUM', 0)} medium")
    return EXIT_OK


def cmd_thread(args) -> int:
    """Build the unified activity feed."""
    sources = load_json(args.sources)
    items = filter_thread(build_thread(sources if isinstance(sources, dict) else None), args.view)

    if args.json:
        print(json.dumps([item.to_dict() for item in items], indent=2))
        return EXIT_OK

    if not items:
        print("No activity")
        return EXIT_OK

    for item in items:
        when = item.timestamp.strftime("%Y-%m-%d %H:%M") if item.timestamp else "----------------"
        subject = f" [{item.subject}]" if item.subject else ""
        print(f"{when}  {item.type.value:<7} {item.author_name}{subject}")
        if item.preview:
            print(f"    {item.preview}")
    return EXIT_OK


def cmd_thresholds(args) -> int:
    """Show resolved attention thresholds."""
    thresholds = load_thresholds(environment=args.env, path=args.thresholds)
    for name, value in thresholds.to_dict().items():
        print(f"{name:<36} {value:g}")
    return EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="projectdesk",
        description="Project activity feed and attention derivations",
    )
    parser.add_argument("--log-level", default=config.LOG_LEVEL, help="Log level (default: %(default)s)")
    subparsers = parser.add_subparsers(dest="command", required=True)

    threshold_args = argparse.ArgumentParser(add_help=False)
    threshold_args.add_argument(
        "--env",
        default=None,
        choices=sorted(ENVIRONMENT_OVERRIDES),
        help="Threshold profile (default: PROJECTDESK_ENV)",
    )
    threshold_args.add_argument("--thresholds", default=None, help="Thresholds YAML file")

    p_attention = subparsers.add_parser("attention", parents=[threshold_args], help="Derive attention items")
    p_attention.add_argument("snapshot", help="Project snapshot JSON file")
    p_attention.add_argument("--now", default=None, help="Evaluation time (ISO 8601)")
    p_attention.add_argument("--limit", type=int, default=None, help="Show at most N items")
    p_attention.add_argument("--json", action="store_true", help="Emit JSON")
    p_attention.set_defaults(func=cmd_attention)

    p_thread = subparsers.add_parser("thread", help="Build the activity feed")
    p_thread.add_argument("sources", help="Activity sources JSON file")
    p_thread.add_argument("--view", default="all", choices=THREAD_VIEWS, help="Feed view")
    p_thread.add_argument("--json", action="store_true", help="Emit JSON")
    p_thread.set_defaults(func=cmd_thread)

    p_thresholds = subparsers.add_parser("thresholds", parents=[threshold_args], help="Show thresholds")
    p_thresholds.set_defaults(func=cmd_thresholds)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(level=args.log_level, json_format=config.LOG_JSON)

    try:
        return args.func(args)
    except SnapshotLoadError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return EXIT_BAD_INPUT
    except (ThresholdViolation, ValueError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return EXIT_BAD_INPUT


if __name__ == "__main__":
    sys.exit(main())
