"""
Reconstitute CLI

Usage:
    reconstitute harvest saved_chat.html transcript.json
    reconstitute crop transcript.json cropped.json --keep "1-20,45,60-100"
"""

from __future__ import annotations
from pathlib import Path
from typing import List, Optional
import argparse
import logging
import sys

from .config import load_config
from .contracts.base import ReconstitutionError
from .extraction import SnapshotWindowSource, load_snapshot, parse_turns
from .harvest import Harvester
from .selection import select_subset
from .storage import read_transcript, write_cropped, write_transcript


def cmd_harvest(args) -> int:
    config = load_config(Path(args.config) if args.config else None)
    html = load_snapshot(args.snapshot, timeout=args.timeout)
    records = parse_turns(html)
    print(f"[*] Parsed {len(records)} messages from {args.snapshot}")

    source = SnapshotWindowSource(
        records,
        row_height=args.row_height,
        viewport=args.viewport,
        overscan=args.overscan,
    )
    # Replayed snapshots materialize synchronously
    report = Harvester(source, config=config, sleep=lambda _: None).run()
    path = write_transcript(args.output, report, source=args.snapshot)

    print(f"[*] Saved transcript -> {path}")
    print(
        f"[*] Captured turns: {report.group_count}, messages: {report.total} "
        f"(user {report.user_total}, assistant {report.assistant_total}) "
        f"[{report.stop_reason.value}]"
    )
    return 0


def cmd_crop(args) -> int:
    document = read_transcript(args.input)
    result = select_subset(document.records, args.keep)
    path = write_cropped(
        args.output,
        result,
        source=args.input,
        original_summary=document.summary or None,
    )

    stats = result.stats
    print(f"[*] Saved cropped transcript -> {path}")
    line = f"[*] Kept {stats.kept}, removed {stats.removed}, total {stats.total}"
    if stats.missing_original_index:
        line += f" (kept w/o original index: {stats.missing_original_index})"
    print(line)
    if result.spec.skipped:
        print(f"[*] Ignored malformed tokens: {', '.join(result.spec.skipped)}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="reconstitute",
        description="Reconstitute and crop virtualized chat transcripts"
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    harvest_cmd = sub.add_parser("harvest", help="Harvest a saved page into a numbered transcript")
    harvest_cmd.add_argument("snapshot", help="Path or URL of the saved page")
    harvest_cmd.add_argument("output", help="Transcript JSON to write")
    harvest_cmd.add_argument("--config", help="Path to a JSON harvest config")
    harvest_cmd.add_argument("--viewport", type=int, default=800, help="Viewport height, in the same units as --row-height")
    harvest_cmd.add_argument("--row-height", type=int, default=100, help="Height of one turn")
    harvest_cmd.add_argument("--overscan", type=int, default=200, help="Materialized margin around the viewport")
    harvest_cmd.add_argument("--timeout", type=float, default=30.0, help="Fetch timeout for URLs (seconds)")
    harvest_cmd.set_defaults(func=cmd_harvest)

    crop_cmd = sub.add_parser("crop", help="Keep selected original indexes of a transcript")
    crop_cmd.add_argument("input", help="Transcript JSON to read")
    crop_cmd.add_argument("output", help="Cropped transcript JSON to write")
    crop_cmd.add_argument("--keep", required=True, help='Range spec, e.g. "1-20,45,60-100"')
    crop_cmd.set_defaults(func=cmd_crop)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    try:
        return args.func(args)
    except ReconstitutionError as e:
        print(f"[!] {e.code.name}: {e.message}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
