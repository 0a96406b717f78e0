"""
Shared builders for the test suite.
"""

from geometry import LocalProjection
from models import Coordinate, ShapeData, ShapeKind, WaypointParameters

ORIGIN = (60.4045, 26.2550)


def ring_from_local(points, origin=ORIGIN):
    """Geographic ring from (east, north) metre offsets around origin."""
    projection = LocalProjection(*origin)
    return [Coordinate(*projection.to_geo(x, y)) for x, y in points]


def square(half_size, kind=ShapeKind.RECTANGLE, shape_id="1", origin=ORIGIN):
    corners = [(-half_size, -half_size), (half_size, -half_size),
               (half_size, half_size), (-half_size, half_size)]
    return ShapeData(id=shape_id, type=kind, coordinates=ring_from_local(corners, origin))


def grid_params(**overrides):
    values = dict(altitude=60.0, speed=5.0, line_spacing=10.0, use_endpoints_only=True)
    values.update(overrides)
    return WaypointParameters(**values)
