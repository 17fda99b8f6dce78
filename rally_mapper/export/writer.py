"""Write a stage to every configured export format independently."""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Dict, Iterable, Optional

from ..config import (
    EXPORT_FORMATS,
    EXPORT_OUTPUT_DIR,
    EXPORT_ROADBOOK_ENABLED,
    TRACKING_INTERVAL_SECONDS,
)
from ..errors import ExportError
from ..models import ExportReport, StageSnapshot
from ..utils import safe_filename
from .gpx import encode_gpx
from .json_format import encode_json, encode_simple_json
from .kml import encode_kml

__all__ = ["FILE_PATTERNS", "encode_format", "export_stage"]

LOGGER = logging.getLogger(__name__)

FILE_PATTERNS: Dict[str, str] = {
    "json": "{base}-enhanced.json",
    "simple_json": "{base}-simple.json",
    "gpx": "{base}.gpx",
    "kml": "{base}.kml",
}
ROADBOOK_PATTERN = "{base}-roadbook.xlsx"


def encode_format(
    fmt: str,
    snapshot: StageSnapshot,
    *,
    exported_at: Optional[datetime] = None,
    tracking_interval_s: float = TRACKING_INTERVAL_SECONDS,
) -> str:
    """Encode ``snapshot`` in a single named format.

    Raises:
        ExportError: If ``fmt`` is not a known format.
    """

    name = snapshot.export_name
    wps, pts = snapshot.waypoints, snapshot.tracking_points
    if fmt == "json":
        return encode_json(
            wps,
            pts,
            snapshot.name,
            route_name=snapshot.route_name,
            exported_at=exported_at,
            tracking_interval_s=tracking_interval_s,
        )
    if fmt == "simple_json":
        return encode_simple_json(wps, pts, name, exported_at=exported_at)
    if fmt == "gpx":
        return encode_gpx(
            wps,
            pts,
            name,
            exported_at=exported_at,
            tracking_interval_s=tracking_interval_s,
        )
    if fmt == "kml":
        return encode_kml(wps, pts, name)
    raise ExportError(f"Unknown export format: {fmt}")


def export_stage(
    snapshot: StageSnapshot,
    output_dir: str | Path | None = None,
    formats: Iterable[str] | None = None,
    *,
    exported_at: Optional[datetime] = None,
    include_roadbook: Optional[bool] = None,
    tracking_interval_s: float = TRACKING_INTERVAL_SECONDS,
) -> ExportReport:
    """Write each requested format to ``output_dir``.

    A failure in one format, including an unusable output directory, is
    logged and recorded in the report; the remaining formats are still
    attempted and nothing is raised.
    """

    out_dir = Path(output_dir or EXPORT_OUTPUT_DIR)
    base = safe_filename(snapshot.export_name)
    report = ExportReport()

    for fmt in formats if formats is not None else EXPORT_FORMATS:
        pattern = FILE_PATTERNS.get(fmt, "{base}." + fmt)
        path = out_dir / pattern.format(base=base)
        try:
            content = encode_format(
                fmt,
                snapshot,
                exported_at=exported_at,
                tracking_interval_s=tracking_interval_s,
            )
            out_dir.mkdir(parents=True, exist_ok=True)
            with open(path, "w", encoding="utf-8") as f:
                f.write(content)
        except Exception as exc:
            LOGGER.exception("Export %s failed for %s", fmt, snapshot.export_name)
            report.failed[fmt] = str(exc)
            continue
        report.written[fmt] = str(path)
        LOGGER.info("Output written to %s", path)

    roadbook = EXPORT_ROADBOOK_ENABLED if include_roadbook is None else include_roadbook
    if roadbook:
        from ..roadbook import write_roadbook

        path = out_dir / ROADBOOK_PATTERN.format(base=base)
        try:
            write_roadbook([snapshot], path)
        except Exception as exc:
            LOGGER.exception("Roadbook export failed for %s", snapshot.export_name)
            report.failed["roadbook"] = str(exc)
        else:
            report.written["roadbook"] = str(path)

    if report.failed:
        LOGGER.warning(
            "%d/%d exports succeeded for %s",
            len(report.written),
            len(report.written) + len(report.failed),
            snapshot.export_name,
        )
    return report
