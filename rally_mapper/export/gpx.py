"""GPX 1.1 encoder for a recorded stage.

The document is assembled line by line so element order follows the GPX 1.1
schema (``time``, ``name``, ``cmt``, ``desc``, ``sym``, ``type``,
``extensions`` for waypoints). Rally specific details live in namespaced
extension elements so the file still validates against ``gpx.xsd``.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional, Sequence

from ..config import (
    APP_CREATOR,
    GPX_EXTENSIONS_NAMESPACE,
    TRACKING_INTERVAL_SECONDS,
)
from ..icons import icon_for_category
from ..models import Category, TrackingPoint, Waypoint
from ..utils import escape_xml, interval_label, iso_timestamp, utc_now

GPX_NAMESPACE = "http://www.topografix.com/GPX/1/1"

__all__ = ["GPX_NAMESPACE", "encode_gpx"]


def _category(wp: Waypoint) -> str:
    return (wp.category or Category.GENERAL).value


def _waypoint_lines(index: int, wp: Waypoint) -> List[str]:
    info = icon_for_category(wp.category, wp.name)
    lines = [
        f'  <wpt lat="{wp.lat}" lon="{wp.lon}">',
        f"    <time>{escape_xml(wp.full_timestamp)}</time>",
        f"    <name>{escape_xml(wp.name)}</name>",
        f"    <cmt>WP{index:03d} - {wp.distance_from_start:.2f} km</cmt>",
    ]
    if wp.note:
        lines.append(f"    <desc>{escape_xml(wp.note)}</desc>")
    lines.extend(
        [
            f"    <sym>{info.icon}</sym>",
            f"    <type>{info.gpx_type}</type>",
            "    <extensions>",
            f"      <rally:category>{_category(wp)}</rally:category>",
            f"      <rally:priority>{info.priority}</rally:priority>",
            f"      <rally:distance_from_start>{wp.distance_from_start}"
            "</rally:distance_from_start>",
            f"      <rally:voice_created>{str(wp.voice_created).lower()}"
            "</rally:voice_created>",
        ]
    )
    if wp.speed_context:
        lines.append(
            f"      <rally:speed_context>{wp.speed_context.value}</rally:speed_context>"
        )
    if wp.raw_transcript:
        lines.append(
            "      <rally:original_transcript>"
            f"{escape_xml(wp.raw_transcript)}</rally:original_transcript>"
        )
    lines.extend(["    </extensions>", "  </wpt>"])
    return lines


def _route_lines(waypoints: Sequence[Waypoint], name: str, created: str) -> List[str]:
    voice = sum(1 for wp in waypoints if wp.voice_created)
    total = waypoints[-1].distance_from_start
    lines = [
        "  <rte>",
        f"    <name>{escape_xml(name)} - Navigation Route</name>",
        f"    <desc>Rally navigation route with {len(waypoints)} waypoints"
        f" - Total distance: {total}km</desc>",
        "    <extensions>",
        f"      <rally:total_waypoints>{len(waypoints)}</rally:total_waypoints>",
        f"      <rally:voice_waypoints>{voice}</rally:voice_waypoints>",
        f"      <rally:creation_date>{created}</rally:creation_date>",
        "    </extensions>",
    ]
    for index, wp in enumerate(waypoints, start=1):
        info = icon_for_category(wp.category, wp.name)
        lines.extend(
            [
                f'    <rtept lat="{wp.lat}" lon="{wp.lon}">',
                f"      <name>WP{index:03d}: {escape_xml(wp.name)}</name>",
                f"      <desc>{escape_xml(wp.name)} - {wp.distance_from_start}km</desc>",
                f"      <sym>{info.icon}</sym>",
                f"      <type>{info.gpx_type}</type>",
                "    </rtept>",
            ]
        )
    lines.append("  </rte>")
    return lines


def _track_lines(
    points: Sequence[TrackingPoint], name: str, interval_s: float
) -> List[str]:
    lines = [
        "  <trk>",
        f"    <name>{escape_xml(name)} - GPS Track</name>",
        f"    <desc>Auto-recorded GPS breadcrumbs - {len(points)} points</desc>",
        "    <extensions>",
        f"      <rally:track_points>{len(points)}</rally:track_points>",
        f"      <rally:recording_interval>{interval_label(interval_s)}"
        "</rally:recording_interval>",
        "    </extensions>",
        "    <trkseg>",
    ]
    for pt in points:
        lines.extend(
            [
                f'      <trkpt lat="{pt.coordinate.lat}" lon="{pt.coordinate.lon}">',
                f"        <time>{escape_xml(pt.timestamp)}</time>",
                "      </trkpt>",
            ]
        )
    lines.extend(["    </trkseg>", "  </trk>"])
    return lines


def encode_gpx(
    waypoints: Sequence[Waypoint],
    tracking_points: Sequence[TrackingPoint],
    stage_name: str,
    *,
    exported_at: Optional[datetime] = None,
    tracking_interval_s: float = TRACKING_INTERVAL_SECONDS,
) -> str:
    """Render waypoints, route and breadcrumb track as a GPX 1.1 document.

    Args:
        waypoints: Waypoints in capture order.
        tracking_points: Breadcrumbs in capture order.
        stage_name: Route or stage name used for document titles.
        exported_at: Export time stamped into the metadata (defaults to now).
        tracking_interval_s: Breadcrumb sampling interval recorded on the
            track.

    Returns:
        GPX XML string. A ``<rte>`` is only emitted for two or more
        waypoints and a ``<trk>`` only when breadcrumbs exist.
    """

    created = iso_timestamp(exported_at or utc_now())
    name = stage_name or "Route"
    gpx_lines = [
        '<?xml version="1.0" encoding="UTF-8"?>',
        f'<gpx version="1.1" creator="{APP_CREATOR}"',
        f'     xmlns="{GPX_NAMESPACE}"',
        f'     xmlns:rally="{GPX_EXTENSIONS_NAMESPACE}"',
        '     xmlns:xsi="http://www.w3.org/2001/XMLSchema-instance"',
        '     xsi:schemaLocation="http://www.topografix.com/GPX/1/1 '
        'http://www.topografix.com/GPX/1/1/gpx.xsd">',
        "  <metadata>",
        f"    <name>{escape_xml(name)}</name>",
        "    <desc>Rally route created with RallyMapper Voice Navigation"
        f" - {len(waypoints)} waypoints</desc>",
        "    <author>",
        "      <name>RallyMapper Voice</name>",
        "    </author>",
        f"    <time>{created}</time>",
        "    <keywords>rally,navigation,voice,waypoints</keywords>",
        "  </metadata>",
    ]

    for index, wp in enumerate(waypoints, start=1):
        gpx_lines.extend(_waypoint_lines(index, wp))

    if len(waypoints) >= 2:
        gpx_lines.extend(_route_lines(waypoints, name, created))

    if tracking_points:
        gpx_lines.extend(_track_lines(tracking_points, name, tracking_interval_s))

    gpx_lines.append("</gpx>")
    return "\n".join(gpx_lines)
