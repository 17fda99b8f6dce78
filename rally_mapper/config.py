"""Central configuration for the Rally Mapper recording core.

All values are constants imported by the rest of the package. Adjust as needed
for your environment. Overrides are read from environment variables
(optionally via a local `.env`).
"""

from __future__ import annotations

import os

from dotenv import load_dotenv


def _env_float(key: str, default: float) -> float:
    value = os.getenv(key)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default


def _env_int(key: str, default: int) -> int:
    value = os.getenv(key)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _env_bool(key: str, default: bool) -> bool:
    value = os.getenv(key)
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "on"}:
        return True
    if normalized in {"0", "false", "no", "off"}:
        return False
    return default


# Load .env from the current directory or any parent folder.
load_dotenv()


# ---------------------------------------------------------------------------
# Geodesy
# ---------------------------------------------------------------------------
# Mean Earth radius used by the haversine formula.
EARTH_RADIUS_KM = 6371.0

# Decimal places kept when a cumulative distance is stored on a waypoint.
DISTANCE_DECIMALS = 2


# ---------------------------------------------------------------------------
# Auto tracking
# ---------------------------------------------------------------------------
# Seconds between breadcrumb samples while a stage is recording.
TRACKING_INTERVAL_SECONDS = _env_int("RALLY_TRACKING_INTERVAL_SECONDS", 20)

# Start the breadcrumb sampler automatically when a stage starts.
TRACKING_AUTO_START = _env_bool("RALLY_TRACKING_AUTO_START", True)


# ---------------------------------------------------------------------------
# Speed buckets (km/h) used for contextual phrasing of voice waypoints
# ---------------------------------------------------------------------------
SPEED_FAST_KMH = 80.0
SPEED_MEDIUM_KMH = 40.0
SPEED_SLOW_KMH = 10.0


# ---------------------------------------------------------------------------
# Waypoints and stage naming
# ---------------------------------------------------------------------------
DEFAULT_WAYPOINT_NAME = "Unnamed"
DEFAULT_ROUTE_NAME = os.getenv("RALLY_ROUTE_NAME", "")
STAGE_NAME_TEMPLATE = "Day{day}/Route{route}/Stage{stage}"


# ---------------------------------------------------------------------------
# Exports
# ---------------------------------------------------------------------------
# Creator string stamped into GPX and JSON metadata.
APP_CREATOR = "RallyMapper-Voice-v2.0"

# Namespace used for rally-specific GPX extension elements.
GPX_EXTENSIONS_NAMESPACE = "urn:rallymapper:gpx-extensions:1"

# Directory (absolute or relative) where stage exports are written.
EXPORT_OUTPUT_DIR = os.getenv("RALLY_EXPORT_DIR", "rally_exports")

# Text formats written when a stage ends. Unknown names are ignored.
_format_defaults = "json,simple_json,gpx,kml"
EXPORT_FORMATS = [
    fmt.strip().lower()
    for fmt in os.getenv("RALLY_EXPORT_FORMATS", _format_defaults).split(",")
    if fmt.strip()
]

# Export every format automatically when a stage ends.
EXPORT_ON_STAGE_END = _env_bool("RALLY_EXPORT_ON_STAGE_END", True)

# Also write the Excel roadbook alongside the text formats.
EXPORT_ROADBOOK_ENABLED = _env_bool("RALLY_EXPORT_ROADBOOK_ENABLED", False)


# ---------------------------------------------------------------------------
# In-progress stage backup
# ---------------------------------------------------------------------------
# Persist the open stage after every mutation so a crash can be resumed.
BACKUP_ENABLED = _env_bool("RALLY_BACKUP_ENABLED", True)
BACKUP_FILE = os.getenv("RALLY_BACKUP_FILE", "rally_mapper_backup.json")


# ---------------------------------------------------------------------------
# Excel formatting
# ---------------------------------------------------------------------------
EXCEL_AUTOSIZE_COLUMNS = True
EXCEL_AUTOSIZE_MAX_WIDTH = 50  # characters
EXCEL_AUTOSIZE_MIN_WIDTH = 6  # characters
EXCEL_AUTOSIZE_PADDING = 2  # extra characters added to the detected max
EXCEL_AUTOSIZE_MAX_ROWS = (
    5000  # skip autosize for very large sheets (performance guard)
)
