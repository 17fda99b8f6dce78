"""Stage exporters (GPX 1.1, KML 2.2 and JSON)."""

from .gpx import GPX_NAMESPACE, encode_gpx
from .json_format import decode_json, encode_json, encode_simple_json
from .kml import KML_NAMESPACE, encode_kml
from .writer import encode_format, export_stage

__all__ = [
    "GPX_NAMESPACE",
    "KML_NAMESPACE",
    "encode_gpx",
    "encode_kml",
    "encode_json",
    "encode_simple_json",
    "decode_json",
    "encode_format",
    "export_stage",
]
