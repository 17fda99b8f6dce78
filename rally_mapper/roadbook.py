"""Excel roadbook writer: one summary sheet plus one sheet per stage."""

from __future__ import annotations

import logging
import re
from os import PathLike
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import pandas as pd
from openpyxl.styles import Font
from openpyxl.worksheet.worksheet import Worksheet

from .geo import distance_km, initial_bearing_deg
from .models import Category, Coordinate, StageSnapshot, StageSummary

__all__ = ["SUMMARY_SHEET", "stage_rows", "summary_row", "write_roadbook"]

LOGGER = logging.getLogger(__name__)

SUMMARY_SHEET = "Summary"
MAX_SHEET_NAME_LEN = 31
HEADER_FONT = Font(bold=True)
_INVALID_SHEET_CHARS = re.compile(r"[\[\]:*?/\\]")

STAGE_COLUMNS = [
    "No.",
    "Name",
    "Category",
    "Distance (km)",
    "Leg (km)",
    "Heading (deg)",
    "Latitude",
    "Longitude",
    "Time",
    "Method",
    "Notes",
]
SUMMARY_COLUMNS = [
    "Stage",
    "Route",
    "Waypoints",
    "Voice",
    "Manual",
    "Tracking Points",
    "Start Time",
    "End Time",
    "Total Distance (km)",
    "Notes",
]

PathInput = str | Path | PathLike[str]


def _unique_sheet_name(base: str, used: set[str]) -> str:
    base = _INVALID_SHEET_CHARS.sub("-", base)[:MAX_SHEET_NAME_LEN] or "Stage"
    name = base
    i = 1
    while name in used:
        suffix = f"_{i}"
        name = base[: MAX_SHEET_NAME_LEN - len(suffix)] + suffix
        i += 1
    used.add(name)
    return name


def _autosize(ws: Worksheet) -> None:
    from .config import (
        EXCEL_AUTOSIZE_COLUMNS,
        EXCEL_AUTOSIZE_MAX_WIDTH,
        EXCEL_AUTOSIZE_MIN_WIDTH,
        EXCEL_AUTOSIZE_PADDING,
        EXCEL_AUTOSIZE_MAX_ROWS,
    )

    if not EXCEL_AUTOSIZE_COLUMNS or ws.max_row > EXCEL_AUTOSIZE_MAX_ROWS:
        return
    for col_cells in ws.columns:
        max_len = max(
            (len(str(cell.value)) for cell in col_cells if cell.value is not None),
            default=0,
        )
        width = min(
            EXCEL_AUTOSIZE_MAX_WIDTH,
            max(EXCEL_AUTOSIZE_MIN_WIDTH, max_len + EXCEL_AUTOSIZE_PADDING),
        )
        ws.column_dimensions[col_cells[0].column_letter].width = width


def _bold_header(ws: Worksheet) -> None:
    for cell in ws[1]:
        cell.font = HEADER_FONT


def stage_rows(snapshot: StageSnapshot) -> List[Dict[str, Any]]:
    """Roadbook lines for one stage: leg length and heading per waypoint.

    Legs are measured between consecutive waypoints, the same path the
    cumulative distance follows, so the first leg is always zero.
    """

    rows: List[Dict[str, Any]] = []
    previous: Optional[Coordinate] = None
    for index, wp in enumerate(snapshot.waypoints, start=1):
        if previous is None:
            leg = 0.0
            heading = None
        else:
            leg = round(distance_km(previous, wp.coordinate), 2)
            heading = None
            if leg:
                heading = round(initial_bearing_deg(previous, wp.coordinate))
        rows.append(
            {
                "No.": index,
                "Name": wp.name,
                "Category": (wp.category or Category.GENERAL).value,
                "Distance (km)": wp.distance_from_start,
                "Leg (km)": leg,
                "Heading (deg)": heading,
                "Latitude": wp.lat,
                "Longitude": wp.lon,
                "Time": wp.full_timestamp,
                "Method": "voice" if wp.voice_created else "manual",
                "Notes": wp.note,
            }
        )
        previous = wp.coordinate
    return rows


def summary_row(summary: StageSummary) -> Dict[str, Any]:
    return {
        "Stage": summary.name,
        "Route": summary.route_name,
        "Waypoints": summary.waypoint_count,
        "Voice": summary.voice_waypoint_count,
        "Manual": summary.manual_waypoint_count,
        "Tracking Points": summary.tracking_point_count,
        "Start Time": summary.start_time or "N/A",
        "End Time": summary.end_time or "N/A",
        "Total Distance (km)": summary.total_distance_km,
        "Notes": "; ".join(summary.notes),
    }


def write_roadbook(stages: Sequence[StageSnapshot], filepath: PathInput) -> None:
    """Write ``stages`` to an xlsx roadbook at ``filepath``."""

    path = Path(filepath)
    path.parent.mkdir(parents=True, exist_ok=True)
    used: set[str] = {SUMMARY_SHEET}
    summary_df = pd.DataFrame(
        [summary_row(StageSummary.from_snapshot(stage)) for stage in stages],
        columns=SUMMARY_COLUMNS,
    )
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        summary_df.to_excel(writer, sheet_name=SUMMARY_SHEET, index=False)
        for stage in stages:
            sheet = _unique_sheet_name(stage.name, used)
            rows = stage_rows(stage)
            df = pd.DataFrame(rows, columns=STAGE_COLUMNS)
            df.to_excel(writer, sheet_name=sheet, index=False)
        for ws in writer.book.worksheets:
            _bold_header(ws)
            _autosize(ws)
    LOGGER.info("Roadbook with %d stages written to %s", len(stages), path)
