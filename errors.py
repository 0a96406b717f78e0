"""
Exceptions raised while planning and exporting waypoint missions
"""


class WaypointError(Exception):
    """Base class for every planning/export failure."""


class ValidationError(WaypointError, ValueError):
    """Malformed or out-of-range shape or parameter data."""


class InvalidShapeError(WaypointError, ValueError):
    """The shape is geometrically impossible (zero radius, too few vertices...)."""


class UnsupportedShapeError(WaypointError):
    """No handler knows the declared shape type."""


class ExportError(WaypointError):
    """The mission cannot be serialised into a KMZ file."""
