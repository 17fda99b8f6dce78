"""Rally icon tables shared by waypoint capture and the exporters."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from .models import Category

__all__ = ["IconInfo", "PICKER_ICONS", "icon_ref_for", "icon_for_category"]


@dataclass(frozen=True, slots=True)
class IconInfo:
    """Symbol, GPX type and priority derived from a waypoint category."""

    icon: str
    gpx_type: str
    priority: str


# Icons offered to the crew for manual waypoints, grouped as in the picker.
PICKER_ICONS: Dict[str, Dict[str, str]] = {
    "On Track": {
        "Bump": "/icons/bump.svg",
        "Dip Hole": "/icons/dip-hole.svg",
        "Ditch": "/icons/ditch.svg",
        "Hole": "/icons/hole.svg",
        "Summit": "/icons/summit.svg",
        "Up hill": "/icons/uphill.svg",
        "Down hill": "/icons/downhill.svg",
        "Fence gate": "/icons/fence-gate.svg",
        "Wading / water crossing": "/icons/wading.svg",
    },
    "Abbreviations": {
        "Left": "/icons/left.svg",
        "Right": "/icons/right.svg",
        "Keep to the left": "/icons/keep-left.svg",
        "Keep to the right": "/icons/keep-right.svg",
        "Keep straight": "/icons/keep-straight.svg",
        "On Left": "/icons/on-left.svg",
        "On Right": "/icons/on-right.svg",
    },
    "Controls": {
        "Stop for Restart": "/icons/stop_for_restart.svg",
        "Arrive Selective Section": "/icons/arrive_selective_section_flag.svg",
    },
    "Safety": {
        "Danger 1": "/icons/danger-1.svg",
        "Danger 2": "/icons/danger-2.svg",
        "Danger 3": "/icons/danger-3.svg",
        "Stop": "/icons/stop.svg",
        "Caution": "/icons/caution.svg",
    },
}

_ICON_REFS: Dict[str, str] = {
    name.lower(): src for group in PICKER_ICONS.values() for name, src in group.items()
}

_DEFAULT_ICON = IconInfo(icon="waypoint", gpx_type="waypoint", priority="medium")


def icon_ref_for(name: str) -> Optional[str]:
    """Return the symbol reference for a picker icon label, if known."""

    return _ICON_REFS.get(name.strip().lower())


def _first_keyword(
    text: str, options: Tuple[Tuple[Tuple[str, ...], str], ...], fallback: str
) -> str:
    for keywords, icon in options:
        if any(keyword in text for keyword in keywords):
            return icon
    return fallback


def icon_for_category(category: Optional[Category], description: str) -> IconInfo:
    """Map a category plus the waypoint text to a rally icon.

    ``description`` refines the symbol within a category (``left`` vs
    ``right``) and upgrades safety waypoints mentioning ``severe`` or
    ``extreme`` to high priority. Unknown or missing categories fall back to
    a plain waypoint.
    """

    text = description.lower()
    if category is Category.SAFETY:
        severe = "severe" in text or "extreme" in text
        return IconInfo("danger", "danger", "high" if severe else "medium")
    if category is Category.NAVIGATION:
        icon = _first_keyword(
            text,
            ((("left",), "left"), (("right",), "right"), (("straight",), "straight")),
            "navigation",
        )
        return IconInfo(icon, "turn", "high")
    if category is Category.SURFACE:
        icon = _first_keyword(
            text,
            ((("bump",), "bump"), (("hole",), "hole"), (("rough",), "bumpy")),
            "surface",
        )
        return IconInfo(icon, "hazard", "medium")
    if category is Category.OBSTACLE:
        icon = _first_keyword(
            text,
            ((("grid", "cattle"), "grid"), (("gate",), "fence-gate")),
            "obstacle",
        )
        return IconInfo(icon, "waypoint", "medium")
    if category is Category.ELEVATION:
        icon = _first_keyword(
            text,
            ((("summit", "peak"), "summit"), (("hill",), "uphill")),
            "elevation",
        )
        return IconInfo(icon, "summit", "low")
    if category is Category.CROSSING:
        icon = _first_keyword(
            text,
            ((("bridge",), "bridge"), (("water", "ford"), "wading")),
            "crossing",
        )
        return IconInfo(icon, "water", "high")
    if category is Category.LANDMARK:
        return IconInfo("landmark", "building", "low")
    if category is Category.TIMING:
        return IconInfo("control", "checkpoint", "high")
    return _DEFAULT_ICON
