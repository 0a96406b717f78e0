"""
Path generation for each kind of drawn shape.

Every handler turns one ShapeData plus the flight parameters into an
ordered list of waypoints. Indices are local (0..n-1); the orchestrator
renumbers them for the whole mission.
"""
import logging
import math

from shapely.geometry import LineString, Polygon

from errors import InvalidShapeError, UnsupportedShapeError
from flight_calculator import resolve_line_spacing
from geometry import LocalProjection, bearing, destination
from models import ShapeKind, Waypoint

logger = logging.getLogger(__name__)

MIN_CIRCLE_POINTS = 24
MIN_AREA_M2 = 1e-3
_EPS = 1e-9
_TOLERANCE_M = 1e-6


def assign_headings(points):
    """Heading of each point towards the next one; the last point keeps the previous heading."""
    if not points:
        return []
    headings = [
        bearing(lat1, lng1, lat2, lng2)
        for (lat1, lng1), (lat2, lng2) in zip(points, points[1:])
    ]
    headings.append(headings[-1] if headings else 0.0)
    return headings


def build_waypoints(points, params, headings=None):
    if headings is None:
        headings = assign_headings(points)
    return [
        Waypoint(
            index=i,
            lat=lat,
            lng=lng,
            altitude=params.altitude,
            speed=params.speed,
            heading=heading,
            action=params.action,
        )
        for i, ((lat, lng), heading) in enumerate(zip(points, headings))
    ]


class ShapeHandler:
    kinds = ()

    def can_handle(self, shape_type):
        try:
            return ShapeKind.parse(shape_type) in self.kinds
        except UnsupportedShapeError:
            return False

    def generate(self, shape, params):
        raise NotImplementedError


class SurveyGridHandler(ShapeHandler):
    """
    Boustrophedon ("lawnmower") coverage of a closed ring.

    Scan lines run east-west, or north-south when params.is_north_south
    is set. Each line is clipped against the outline with shapely, so
    concave outlines yield several segments per line. Consecutive lines
    alternate direction.
    """
    min_vertices = 3

    def generate(self, shape, params):
        ring = _open_ring(shape.coordinates)
        if len(ring) < self.min_vertices:
            raise InvalidShapeError(
                f"{shape.type.value} needs at least {self.min_vertices} vertices, got {len(ring)}"
            )

        projection = LocalProjection.around(ring)
        outline = Polygon([self._to_scan_frame(projection.to_local(c.lat, c.lng), params) for c in ring])
        if not outline.is_valid:
            outline = outline.buffer(0)
        if outline.area < MIN_AREA_M2:
            logger.info(f"Shape {shape.id} has no area, nothing to scan")
            return []

        spacing = resolve_line_spacing(params)
        points = []
        for line_no, (v, segments) in enumerate(self._scan_lines(outline, spacing, params.flip_path)):
            forward = line_no % 2 == 0
            if not forward:
                segments = [(b, a) for a, b in reversed(segments)]
            for start, end in segments:
                for u in self._samples(start, end, params):
                    x, y = self._from_scan_frame(u, v, params)
                    points.append(projection.to_geo(x, y))

        logger.info(f"Generated {len(points)} scan points for {shape.type.value} {shape.id} "
                    f"(line spacing {spacing:.2f} m)")
        return build_waypoints(points, params)

    @staticmethod
    def _to_scan_frame(xy, params):
        # (u, v): u runs along the scan line, v across it
        x, y = xy
        return (y, x) if params.is_north_south else (x, y)

    @staticmethod
    def _from_scan_frame(u, v, params):
        return (v, u) if params.is_north_south else (u, v)

    @staticmethod
    def _scan_lines(outline, spacing, flip):
        u_min, v_min, u_max, v_max = outline.bounds
        extent = v_max - v_min
        count = max(1, math.ceil(extent / spacing - _EPS))
        offset = (extent - (count - 1) * spacing) / 2

        order = range(count - 1, -1, -1) if flip else range(count)
        for k in order:
            v = v_min + offset + k * spacing
            line = LineString([(u_min - 1.0, v), (u_max + 1.0, v)])
            segments = _segments(line.intersection(outline))
            if segments:
                yield v, segments

    @staticmethod
    def _samples(start, end, params):
        step = params.photo_distance
        if params.use_endpoints_only or step <= 0:
            return [start, end]

        length = abs(end - start)
        direction = 1.0 if end >= start else -1.0
        samples = [start + direction * step * k for k in range(int((length + _TOLERANCE_M) / step) + 1)]
        if length - step * (len(samples) - 1) > _TOLERANCE_M:
            samples.append(end)
        return samples


class RectangleHandler(SurveyGridHandler):
    kinds = (ShapeKind.RECTANGLE,)
    min_vertices = 4


class PolygonHandler(SurveyGridHandler):
    kinds = (ShapeKind.POLYGON,)
    min_vertices = 3


class CircleHandler(ShapeHandler):
    """
    Orbit sampled on the geodesic circle around the centre.

    The point count follows the photo cadence but never drops below 24.
    Headings are tangential (clockwise travel).
    """
    kinds = (ShapeKind.CIRCLE,)

    def generate(self, shape, params):
        if len(shape.coordinates) != 1:
            raise InvalidShapeError(
                f"Circle needs exactly one centre coordinate, got {len(shape.coordinates)}"
            )
        if not shape.radius or shape.radius <= 0:
            raise InvalidShapeError("Circle radius must be greater than zero.")

        count = self.point_count(shape.radius, params)
        step = 360.0 / count
        center = shape.center

        points, headings = [], []
        for i in range(count):
            angle = i * step
            point = destination(center.lat, center.lng, angle, shape.radius)
            points.append(point.as_tuple())
            headings.append((angle + 90.0) % 360.0)

        logger.info(f"Generated {count} orbit points for circle {shape.id} (radius {shape.radius:.1f} m)")
        return build_waypoints(points, params, headings)

    @staticmethod
    def point_count(radius, params):
        circumference = 2 * math.pi * radius
        spacing = params.photo_distance
        if spacing <= 0:
            return MIN_CIRCLE_POINTS
        return max(MIN_CIRCLE_POINTS, int(circumference / spacing))


class PolylineHandler(ShapeHandler):
    """Every vertex of the line becomes a waypoint, in drawing order."""
    kinds = (ShapeKind.POLYLINE,)

    def generate(self, shape, params):
        if not shape.coordinates:
            raise InvalidShapeError("Polyline needs at least one coordinate.")
        points = [c.as_tuple() for c in shape.coordinates]
        return build_waypoints(points, params)


DEFAULT_HANDLERS = (
    RectangleHandler(),
    PolygonHandler(),
    CircleHandler(),
    PolylineHandler(),
)


def _open_ring(coordinates):
    ring = list(coordinates)
    if len(ring) > 1 and ring[0].as_tuple() == ring[-1].as_tuple():
        ring = ring[:-1]
    return ring


def _segments(clipped):
    """Sorted (start, end) u intervals of a clipped scan line; touching pieces are merged."""
    if clipped.is_empty:
        return []
    if clipped.geom_type == "LineString":
        parts = [clipped]
    else:
        parts = [g for g in getattr(clipped, "geoms", ()) if g.geom_type == "LineString"]

    intervals = sorted(
        (min(u for u, _ in part.coords), max(u for u, _ in part.coords)) for part in parts
    )
    merged = []
    for start, end in intervals:
        if merged and start - merged[-1][1] <= _EPS:
            merged[-1] = (merged[-1][0], max(end, merged[-1][1]))
        else:
            merged.append((start, end))
    return [(a, b) for a, b in merged if b - a > _EPS]
