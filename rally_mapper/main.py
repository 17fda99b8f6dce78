"""Command-line tools around recorded stages.

Usage examples:

    # Show how a dictated note would be labelled and classified
    python -m rally_mapper normalize "turn write at the cattle guard"

    # Re-export a saved stage (backup or enhanced JSON) to GPX and KML
    python -m rally_mapper export rally_mapper_backup.json --formats gpx,kml

    # Build an Excel roadbook from several enhanced JSON exports
    python -m rally_mapper roadbook day1-*.json --output day1-roadbook.xlsx
"""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Optional, Sequence

from .backup import load_backup
from .config import EXPORT_FORMATS, EXPORT_OUTPUT_DIR
from .errors import RallyMapperError
from .export import decode_json, export_stage
from .icons import icon_for_category
from .models import SpeedContext, StageSnapshot
from .normalizer import classify, normalize_transcript
from .roadbook import write_roadbook

LOGGER = logging.getLogger(__name__)


def _setup_logging(level: str = "INFO") -> None:
    if not logging.getLogger().hasHandlers():
        logging.basicConfig(
            level=getattr(logging, level),
            format="[%(asctime)s] %(levelname)s %(name)s: %(message)s",
        )


def load_stage_file(path: str | Path) -> StageSnapshot:
    """Load a stage from an enhanced JSON export or a session backup.

    Raises:
        RallyMapperError: If the file holds neither.
    """

    source = Path(path)
    try:
        text = source.read_text(encoding="utf-8")
        data = json.loads(text)
    except (OSError, ValueError) as exc:
        raise RallyMapperError(f"Cannot read stage file {source}: {exc}") from exc
    if isinstance(data, dict) and "metadata" in data:
        return decode_json(text)
    snapshot = load_backup(source)
    if snapshot is None:
        raise RallyMapperError(f"{source} is not a stage export or backup")
    return snapshot


def _cmd_normalize(args: argparse.Namespace) -> int:
    speed = SpeedContext(args.speed)
    label = normalize_transcript(args.text, speed)
    category = classify(label)
    info = icon_for_category(category, label)
    print(f"label={label}")
    print(f"category={category.value}")
    print(f"icon={info.icon} type={info.gpx_type} priority={info.priority}")
    return 0


def _cmd_export(args: argparse.Namespace) -> int:
    snapshot = load_stage_file(args.source)
    formats = [f.strip() for f in args.formats.split(",") if f.strip()]
    report = export_stage(
        snapshot, args.output_dir, formats, include_roadbook=args.roadbook
    )
    for fmt, path in report.written.items():
        print(f"{fmt}: {path}")
    for fmt, reason in report.failed.items():
        print(f"{fmt}: FAILED ({reason})")
    return 0 if report.ok else 1


def _cmd_roadbook(args: argparse.Namespace) -> int:
    stages = [load_stage_file(source) for source in args.sources]
    write_roadbook(stages, args.output)
    print(args.output)
    return 0


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rally_mapper",
        description="Rally stage recording tools: label preview and exports",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Python logging level",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    p_norm = sub.add_parser("normalize", help="Preview the voice label pipeline")
    p_norm.add_argument("text", help="Transcript text as recognised")
    p_norm.add_argument(
        "--speed",
        default=SpeedContext.UNKNOWN.value,
        choices=[s.value for s in SpeedContext],
        help="Speed context used for phrasing",
    )
    p_norm.set_defaults(func=_cmd_normalize)

    p_export = sub.add_parser("export", help="Export a saved stage")
    p_export.add_argument("source", help="Enhanced JSON export or session backup")
    p_export.add_argument(
        "--output-dir",
        default=EXPORT_OUTPUT_DIR,
        help=f"Directory for exported files (default: {EXPORT_OUTPUT_DIR})",
    )
    p_export.add_argument(
        "--formats",
        default=",".join(EXPORT_FORMATS),
        help="Comma separated formats: json, simple_json, gpx, kml",
    )
    p_export.add_argument(
        "--roadbook", action="store_true", help="Also write an Excel roadbook"
    )
    p_export.set_defaults(func=_cmd_export)

    p_book = sub.add_parser("roadbook", help="Combine stages into an xlsx roadbook")
    p_book.add_argument("sources", nargs="+", help="Enhanced JSON exports or backups")
    p_book.add_argument("--output", required=True, help="Roadbook .xlsx path")
    p_book.set_defaults(func=_cmd_roadbook)
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    _setup_logging(args.log_level)
    try:
        return args.func(args)
    except RallyMapperError as exc:
        LOGGER.error("%s", exc)
        return 2
