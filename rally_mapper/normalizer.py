"""Speech transcript clean-up and navigation classification.

Voice recognition regularly mishears rally vocabulary ("write" for "right",
"great" for "grid") and crews dictate in shorthand. The helpers here turn a
finished transcript into a consistent waypoint label and pick the navigation
category used for icons and priorities in the exports.

Every function is total: unmatched text passes through unchanged and nothing
raises.
"""

from __future__ import annotations

import logging
import re
from typing import Dict, List, Pattern, Sequence, Tuple

from .config import SPEED_FAST_KMH, SPEED_MEDIUM_KMH, SPEED_SLOW_KMH
from .geo import distance_km
from .models import Category, SpeedContext, TrackingPoint
from .utils import parse_iso_timestamp

__all__ = [
    "correct",
    "expand",
    "classify",
    "speed_context",
    "apply_speed_context",
    "normalize_transcript",
]

LOGGER = logging.getLogger(__name__)


def _literal(wrong: str, right: str) -> Pattern[str]:
    """Case-insensitive substring match for one correction entry.

    When the replacement extends the misheard text (``wash`` -> ``washout``)
    occurrences already followed by that extension are left alone.
    """

    pattern = re.escape(wrong)
    if right.startswith(wrong) and right != wrong:
        pattern += f"(?!{re.escape(right[len(wrong):])})"
    return re.compile(pattern, re.IGNORECASE)


# Literal substring replacements applied top to bottom. Multi-word entries sit
# above the single words they contain.
_CORRECTIONS: Sequence[Tuple[str, str]] = (
    # misheard rally terms
    ("cattle guard", "grid"),
    ("cattle grid", "grid"),
    ("wash out", "washout"),
    ("next to k", "next 2k"),
    ("next two k", "next 2k"),
    ("next 2 k", "next 2k"),
    ("for one k", "for 1k"),
    ("write", "right"),
    ("wright", "right"),
    ("rite", "right"),
    ("lift", "left"),
    ("laugh", "left"),
    ("strait", "straight"),
    ("grade", "grid"),
    ("great", "grid"),
    ("greed", "grid"),
    ("summary", "summit"),
    ("submit", "summit"),
    ("sumit", "summit"),
    ("cation", "caution"),
    ("wash", "washout"),
    # surfaces
    ("unsealed road", "gravel"),
    ("unsealed", "gravel"),
    ("gravel road", "gravel"),
    ("tarmac road", "tarmac"),
    ("sealed road", "tarmac"),
    ("dirt road", "dirt"),
    # common rally phrasing
    ("straight ahead", "straight"),
    ("keep going left", "keep left"),
    ("keep going right", "keep right"),
    ("carry straight", "keep straight"),
    ("continue straight", "keep straight"),
    ("turn left", "left turn"),
    ("turn right", "right turn"),
)

_EXPANSIONS: Sequence[Tuple[str, str]] = (
    # directional
    ("l", "left"),
    ("r", "right"),
    ("str", "straight"),
    ("kr", "keep right"),
    ("kl", "keep left"),
    ("ks", "keep straight"),
    # features
    ("cg", "cattle grid"),
    ("wg", "wire gate"),
    ("fg", "fence gate"),
    ("br", "bridge"),
    ("fd", "ford"),
    ("xing", "crossing"),
    # surfaces
    ("gr", "gravel"),
    ("tar", "tarmac"),
    ("conc", "concrete"),
    ("dt", "dirt"),
    ("rgh", "rough"),
    ("sth", "smooth"),
    # hazards
    ("dngr", "danger"),
    ("caut", "caution"),
    ("wo", "washout"),
)

_CORRECTION_RULES: List[Tuple[Pattern[str], str]] = [
    (_literal(wrong, right), right) for wrong, right in _CORRECTIONS
]
_EXPANSION_RULES: List[Tuple[Pattern[str], str]] = [
    (re.compile(rf"\b{re.escape(abbrev)}\b", re.IGNORECASE), full)
    for abbrev, full in _EXPANSIONS
]

_CATEGORY_PATTERNS: Dict[Category, List[Pattern[str]]] = {
    Category.SAFETY: [
        re.compile(r"danger|hazard|warning|careful|watch|avoid|risk|unsafe"),
        re.compile(r"severe|extreme|major|critical|emergency"),
        re.compile(r"washout|bridge out|road closed|blocked"),
    ],
    Category.NAVIGATION: [
        re.compile(r"left|right|straight|turn|continue|bear|veer|fork|junction"),
        re.compile(r"onto|into|towards|follow|take|keep"),
        re.compile(r"road|track|path|lane|route"),
    ],
    Category.SURFACE: [
        re.compile(
            r"bump|hole|rough|smooth|gravel|tarmac|concrete|dirt|mud|sand|washout|rut"
        ),
        re.compile(r"sealed|unsealed|bitumen|metal|loose|firm|soft|hard"),
        re.compile(r"surface|condition|texture"),
    ],
    Category.OBSTACLE: [
        re.compile(r"grid|gate|cattle|fence|barrier|bollard|post|sign"),
        re.compile(r"wire|electric|wooden|metal|stock"),
    ],
    Category.ELEVATION: [
        re.compile(r"hill|summit|peak|climb|descent|steep|uphill|downhill|crest|ridge"),
        re.compile(r"up|down|rise|fall|gradient|slope"),
    ],
    Category.CROSSING: [
        re.compile(r"bridge|water|ford|creek|river|stream|crossing|splash"),
        re.compile(r"culvert|causeway|low water"),
    ],
    Category.LANDMARK: [
        re.compile(r"house|building|shed|barn|tower|mast|church|pub|shop|station"),
        re.compile(r"tank|silo|windmill|monument|marker"),
    ],
    Category.TIMING: [
        re.compile(r"start|finish|checkpoint|control|timing|stage"),
        re.compile(r"stop|restart|neutralisation"),
    ],
}

_FAST_PHRASES = (
    (re.compile(r"followed by"), "→"),
    (re.compile(r"next section"), "next"),
    (re.compile(r"approximately"), "~"),
)
_SLOW_PHRASES = (
    (re.compile(r"→"), "followed by"),
    (re.compile(r"~"), "approximately"),
)


def correct(raw: str) -> str:
    """Lower-case, trim and fix common speech-recognition mistakes."""

    corrected = raw.lower().strip()
    for pattern, replacement in _CORRECTION_RULES:
        corrected = pattern.sub(replacement, corrected)
    return corrected


def expand(text: str) -> str:
    """Expand whole-word rally shorthand (``cg`` -> ``cattle grid``)."""

    expanded = text
    for pattern, replacement in _EXPANSION_RULES:
        expanded = pattern.sub(replacement, expanded)
    return expanded


def classify(text: str) -> Category:
    """Return the best scoring navigation category for ``text``.

    Each category scores one point per pattern that matches the lower-cased
    text; repeating a word does not add to the score. The first declared
    category wins a tie and text with no matches at all is ``general``.
    """

    lowered = text.lower()
    best = Category.GENERAL
    best_score = 0
    for category, patterns in _CATEGORY_PATTERNS.items():
        score = sum(1 for pattern in patterns if pattern.search(lowered))
        if score > best_score:
            best = category
            best_score = score
    LOGGER.debug("Category for %r: %s (score %d)", lowered, best.value, best_score)
    return best


def speed_context(recent_tracking_points: Sequence[TrackingPoint]) -> SpeedContext:
    """Bucket the current speed from the last two breadcrumbs."""

    if len(recent_tracking_points) < 2:
        return SpeedContext.UNKNOWN
    first, second = recent_tracking_points[-2], recent_tracking_points[-1]
    try:
        elapsed = (
            parse_iso_timestamp(second.timestamp) - parse_iso_timestamp(first.timestamp)
        ).total_seconds()
    except ValueError:
        LOGGER.debug(
            "Unparsable tracking timestamps %r/%r", first.timestamp, second.timestamp
        )
        return SpeedContext.UNKNOWN
    if elapsed <= 0:
        return SpeedContext.UNKNOWN

    speed_kmh = distance_km(first.coordinate, second.coordinate) / (elapsed / 3600.0)
    if speed_kmh > SPEED_FAST_KMH:
        return SpeedContext.FAST
    if speed_kmh > SPEED_MEDIUM_KMH:
        return SpeedContext.MEDIUM
    if speed_kmh > SPEED_SLOW_KMH:
        return SpeedContext.SLOW
    return SpeedContext.STATIONARY


def apply_speed_context(text: str, speed: SpeedContext) -> str:
    """Terse phrasing at high speed, spelled-out phrasing when slow."""

    if speed is SpeedContext.FAST:
        rules = _FAST_PHRASES
    elif speed is SpeedContext.SLOW:
        rules = _SLOW_PHRASES
    else:
        return text
    for pattern, replacement in rules:
        text = pattern.sub(replacement, text)
    return text


def normalize_transcript(raw: str, speed: SpeedContext = SpeedContext.UNKNOWN) -> str:
    """Run the full label pipeline: correct, expand, rephrase, capitalise."""

    text = apply_speed_context(expand(correct(raw)), speed)
    return text[:1].upper() + text[1:]
