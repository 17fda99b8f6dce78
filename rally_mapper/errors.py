"""Central error types used across the application."""

from __future__ import annotations


class RallyMapperError(RuntimeError):
    """Base error for recording and export failures."""


class InputUnavailableError(RallyMapperError):
    """Raised when a GPS fix or transcript needed by an operation is missing."""


class StageStateError(RallyMapperError):
    """Raised when an operation is not valid for the current stage state."""


class ExportError(RallyMapperError):
    """Raised when a single export format cannot be produced."""


__all__ = [
    "RallyMapperError",
    "InputUnavailableError",
    "StageStateError",
    "ExportError",
]
