"""KML 2.2 encoder for a recorded stage."""

from __future__ import annotations

from typing import List, Sequence

from ..models import TrackingPoint, Waypoint
from ..utils import escape_xml

KML_NAMESPACE = "http://www.opengis.net/kml/2.2"

__all__ = ["KML_NAMESPACE", "encode_kml"]


def _placemark_lines(index: int, wp: Waypoint) -> List[str]:
    description = f"{wp.name} - {wp.distance_from_start}km"
    if wp.voice_created:
        description += " (Voice)"
    if wp.note:
        description += f" - {wp.note}"
    return [
        "      <Placemark>",
        f"        <name>WP{index:02d} {escape_xml(wp.name)}</name>",
        f"        <description>{escape_xml(description)}</description>",
        "        <Point>",
        f"          <coordinates>{wp.lon},{wp.lat},0</coordinates>",
        "        </Point>",
        "      </Placemark>",
    ]


def encode_kml(
    waypoints: Sequence[Waypoint],
    tracking_points: Sequence[TrackingPoint],
    stage_name: str,
) -> str:
    """Render waypoints as point placemarks and breadcrumbs as a line string.

    Coordinates use the KML ``lon,lat,alt`` order. The ``GPS Track`` folder is
    only present when breadcrumbs exist.
    """

    name = escape_xml(stage_name or "Route")
    kml_lines = [
        '<?xml version="1.0" encoding="UTF-8"?>',
        f'<kml xmlns="{KML_NAMESPACE}">',
        "  <Document>",
        f"    <name>{name}</name>",
        f"    <description>Rally route - {len(waypoints)} waypoints</description>",
        "    <Folder>",
        "      <name>Waypoints</name>",
        "      <description>Rally waypoints</description>",
    ]
    for index, wp in enumerate(waypoints, start=1):
        kml_lines.extend(_placemark_lines(index, wp))
    kml_lines.append("    </Folder>")

    if tracking_points:
        coordinates = "\n".join(
            f"{pt.coordinate.lon},{pt.coordinate.lat},0" for pt in tracking_points
        )
        kml_lines.extend(
            [
                "    <Folder>",
                "      <name>GPS Track</name>",
                "      <description>Auto-recorded GPS track</description>",
                "      <Placemark>",
                f"        <name>{name} Track</name>",
                f"        <description>GPS breadcrumbs - {len(tracking_points)}"
                " points</description>",
                "        <LineString>",
                "          <tessellate>1</tessellate>",
                f"          <coordinates>{coordinates}</coordinates>",
                "        </LineString>",
                "      </Placemark>",
                "    </Folder>",
            ]
        )

    kml_lines.extend(["  </Document>", "</kml>"])
    return "\n".join(kml_lines)
