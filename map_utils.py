import logging
import math

import folium
from folium.plugins import Draw
from geopy.exc import GeocoderServiceError, GeocoderTimedOut
from geopy.geocoders import Nominatim

from errors import InvalidShapeError, ValidationError
from geometry import destination, distance, polygon_area
from models import Coordinate, ShapeData, ShapeKind

logger = logging.getLogger(__name__)

DEFAULT_CENTER = [20.0, 0.0]

BASEMAPS = {
    "OpenStreetMap": "OpenStreetMap",
    "Esri World Imagery": "https://server.arcgisonline.com/ArcGIS/rest/services/World_Imagery/MapServer/tile/{z}/{y}/{x}",
    "Google Satellite": "https://mt1.google.com/vt/lyrs=s&x={x}&y={y}&z={z}",
}

ACTION_COLORS = {
    "noAction": "blue",
    "takePhoto": "blue",
    "startRecord": "red",
    "stopRecord": "orange",
}


GEOCODER_AGENT = "waypoint_planner"

# one Leaflet-draw tool per shape kind the planner can fly
DRAW_OPTIONS = {kind.value: True for kind in ShapeKind}
DRAW_OPTIONS.update(marker=False, circlemarker=False)
EDIT_OPTIONS = {"edit": False}


def search_location(query, timeout=5):
    """Geocode a place name; (None, None) when nothing matches or the service fails."""
    geolocator = Nominatim(user_agent=GEOCODER_AGENT, timeout=timeout)
    try:
        location = geolocator.geocode(query)
    except (GeocoderTimedOut, GeocoderServiceError) as e:
        logger.warning(f"Location search failed: {e}")
        return None, None
    if location is None:
        return None, None
    return location.latitude, location.longitude


def create_map(center=None, zoom=None, basemap="OpenStreetMap"):
    """Folium map with one drawing tool per supported shape kind."""
    center = center or DEFAULT_CENTER
    zoom = zoom or (2 if center == DEFAULT_CENTER else 16)

    m = folium.Map(location=center, zoom_start=zoom, tiles=None)
    folium.TileLayer(BASEMAPS.get(basemap, basemap), attr=f"{basemap} tiles", name=basemap).add_to(m)
    m.add_child(Draw(draw_options=DRAW_OPTIONS, edit_options=EDIT_OPTIONS))
    folium.LayerControl().add_to(m)
    return m


def create_preview_map(waypoints, zoom=17):
    """Map of the generated mission: a marker per waypoint and the flight line."""
    if not waypoints:
        return create_map()

    first = waypoints[0]
    m = folium.Map(location=[first.lat, first.lng], zoom_start=zoom)
    points = []
    for wp in waypoints:
        points.append([wp.lat, wp.lng])
        folium.CircleMarker(
            location=[wp.lat, wp.lng],
            radius=4,
            color=ACTION_COLORS.get(wp.action.value, "blue"),
            fill=True,
            popup=f"#{wp.index} {wp.action.value} {wp.heading:.0f}°",
        ).add_to(m)

    folium.PolyLine(points, weight=2, color="blue", opacity=0.8).add_to(m)
    m.fit_bounds([[min(p[0] for p in points), min(p[1] for p in points)],
                  [max(p[0] for p in points), max(p[1] for p in points)]])
    return m


# Shape adapters
def shape_from_bounds(bounds_type, bounds, shape_id="1", radius=None):
    """
    Build a ShapeData from a bounds type and a list of coordinates.

    bounds items may be Coordinate objects or {"Lat", "Lng", "Radius"} dicts.
    """
    kind = ShapeKind.parse(bounds_type)
    coords = [_coordinate(b) for b in bounds or []]
    if not coords:
        raise ValidationError("Bounds cannot be empty")

    if kind is ShapeKind.CIRCLE:
        center = coords[0]
        if radius is None:
            radius = center.radius
        if not radius or radius <= 0:
            raise InvalidShapeError("Circle bounds need a positive radius")
        return ShapeData(id=shape_id, type=kind, coordinates=(center,), radius=float(radius))

    return ShapeData(id=shape_id, type=kind, coordinates=tuple(coords))


def _coordinate(item):
    if isinstance(item, Coordinate):
        return item
    try:
        lat = float(item.get("Lat", item.get("lat")))
        lng = float(item.get("Lng", item.get("lng")))
    except (AttributeError, TypeError, ValueError):
        raise ValidationError(f"Invalid coordinate: {item!r}") from None
    radius = item.get("Radius", item.get("radius"))
    return Coordinate(lat=lat, lng=lng, radius=float(radius) if radius is not None else None)


def shape_from_drawing(feature, shape_id="1"):
    """Convert a Leaflet-draw GeoJSON feature (as returned by st_folium) into a ShapeData."""
    geometry = feature.get("geometry", feature)
    properties = feature.get("properties") or {}
    geo_type = geometry.get("type")
    raw = geometry.get("coordinates")

    if geo_type == "Point":
        radius = properties.get("radius", geometry.get("radius"))
        if radius is None:
            raise ValidationError("Point drawings must be circles with a radius")
        lng, lat = raw[:2]
        return shape_from_bounds(ShapeKind.CIRCLE, [Coordinate(lat, lng)], shape_id, radius)

    if geo_type == "LineString":
        coords = [Coordinate(lat, lng) for lng, lat, *_ in raw]
        return ShapeData(id=shape_id, type=ShapeKind.POLYLINE, coordinates=coords)

    if geo_type == "Polygon":
        coords = [Coordinate(lat, lng) for lng, lat, *_ in raw[0]]
        kind = ShapeKind.RECTANGLE if _is_axis_aligned_box(coords) else ShapeKind.POLYGON
        return ShapeData(id=shape_id, type=kind, coordinates=coords)

    raise ValidationError(f"Unsupported drawing geometry: {geo_type}")


def _is_axis_aligned_box(coords):
    ring = coords[:-1] if len(coords) > 1 and coords[0] == coords[-1] else coords
    if len(ring) != 4:
        return False
    lats = {round(c.lat, 9) for c in ring}
    lngs = {round(c.lng, 9) for c in ring}
    return len(lats) == 2 and len(lngs) == 2


def calculate_area_bounds(shape):
    """Calculate the bounds and center of a shape"""
    if shape.type is ShapeKind.CIRCLE:
        center = shape.center
        north, east, south, west = (
            destination(center.lat, center.lng, b, shape.radius) for b in (0, 90, 180, 270)
        )
        return {
            'min_lat': south.lat,
            'max_lat': north.lat,
            'min_lon': west.lng,
            'max_lon': east.lng,
            'center_lat': center.lat,
            'center_lon': center.lng,
            'width': shape.radius * 2,
            'height': shape.radius * 2,
            'area': math.pi * shape.radius ** 2
        }

    lats = [c.lat for c in shape.coordinates]
    lons = [c.lng for c in shape.coordinates]
    min_lat, max_lat = min(lats), max(lats)
    min_lon, max_lon = min(lons), max(lons)

    return {
        'min_lat': min_lat,
        'max_lat': max_lat,
        'min_lon': min_lon,
        'max_lon': max_lon,
        'center_lat': (min_lat + max_lat) / 2,
        'center_lon': (min_lon + max_lon) / 2,
        'width': distance(min_lat, min_lon, min_lat, max_lon),
        'height': distance(min_lat, min_lon, max_lat, min_lon),
        'area': polygon_area(shape.coordinates) if shape.type is not ShapeKind.POLYLINE else 0.0
    }
