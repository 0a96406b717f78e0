"""
Tests for map drawing adapters and map helpers.
"""

import unittest
from unittest import mock

import folium
from geopy.exc import GeocoderTimedOut

from errors import InvalidShapeError, UnsupportedShapeError, ValidationError
from geometry import distance
from helpers import square
from map_utils import (
    DRAW_OPTIONS,
    calculate_area_bounds,
    create_map,
    create_preview_map,
    search_location,
    shape_from_bounds,
    shape_from_drawing,
)
from models import Coordinate, ShapeData, ShapeKind, Waypoint
from utils import create_flight_path_plot

BOX = [
    {"Lat": 60.404, "Lng": 26.254},
    {"Lat": 60.404, "Lng": 26.256},
    {"Lat": 60.405, "Lng": 26.256},
    {"Lat": 60.405, "Lng": 26.254},
]


class TestShapeFromBounds(unittest.TestCase):

    def test_rectangle(self):
        shape = shape_from_bounds("Rectangle", BOX, shape_id="7")
        self.assertIs(shape.type, ShapeKind.RECTANGLE)
        self.assertEqual(shape.id, "7")
        self.assertEqual(shape.coordinates[0], Coordinate(60.404, 26.254))

    def test_circle_radius_from_bounds(self):
        shape = shape_from_bounds("circle", [{"Lat": 60.4, "Lng": 26.25, "Radius": 80}])
        self.assertEqual(shape.radius, 80.0)
        self.assertEqual(len(shape.coordinates), 1)

    def test_circle_without_radius(self):
        with self.assertRaises(InvalidShapeError):
            shape_from_bounds("circle", [{"Lat": 60.4, "Lng": 26.25}])

    def test_empty_bounds(self):
        with self.assertRaises(ValidationError):
            shape_from_bounds("polygon", [])

    def test_unknown_type(self):
        with self.assertRaises(UnsupportedShapeError):
            shape_from_bounds("hexagon", BOX)

    def test_bad_coordinate(self):
        with self.assertRaises(ValidationError):
            shape_from_bounds("polyline", [{"Lat": "north", "Lng": 26.0}])


class TestShapeFromDrawing(unittest.TestCase):

    def test_circle(self):
        feature = {"geometry": {"type": "Point", "coordinates": [26.25, 60.4]},
                   "properties": {"radius": 50}}
        shape = shape_from_drawing(feature)
        self.assertIs(shape.type, ShapeKind.CIRCLE)
        self.assertEqual(shape.center, Coordinate(60.4, 26.25))
        self.assertEqual(shape.radius, 50.0)

    def test_marker_is_rejected(self):
        with self.assertRaises(ValidationError):
            shape_from_drawing({"geometry": {"type": "Point", "coordinates": [26.25, 60.4]}})

    def test_line(self):
        feature = {"geometry": {"type": "LineString", "coordinates": [[26.25, 60.4], [26.26, 60.41]]}}
        shape = shape_from_drawing(feature, shape_id="3")
        self.assertIs(shape.type, ShapeKind.POLYLINE)
        self.assertEqual(shape.coordinates[1], Coordinate(60.41, 26.26))

    def test_box_becomes_rectangle(self):
        ring = [[26.254, 60.404], [26.256, 60.404], [26.256, 60.405], [26.254, 60.405], [26.254, 60.404]]
        shape = shape_from_drawing({"geometry": {"type": "Polygon", "coordinates": [ring]}})
        self.assertIs(shape.type, ShapeKind.RECTANGLE)

    def test_free_polygon(self):
        ring = [[26.254, 60.404], [26.256, 60.404], [26.255, 60.405], [26.254, 60.404]]
        shape = shape_from_drawing({"geometry": {"type": "Polygon", "coordinates": [ring]}})
        self.assertIs(shape.type, ShapeKind.POLYGON)

    def test_unsupported_geometry(self):
        with self.assertRaises(ValidationError):
            shape_from_drawing({"geometry": {"type": "MultiPoint", "coordinates": []}})


class TestAreaBounds(unittest.TestCase):

    def test_rectangle(self):
        bounds = calculate_area_bounds(shape_from_bounds("rectangle", BOX))
        self.assertEqual(bounds["min_lat"], 60.404)
        self.assertEqual(bounds["max_lon"], 26.256)
        self.assertAlmostEqual(bounds["center_lat"], 60.4045)
        self.assertAlmostEqual(bounds["width"], distance(60.404, 26.254, 60.404, 26.256))

    def test_circle(self):
        shape = ShapeData(id="c", type=ShapeKind.CIRCLE, coordinates=[Coordinate(60.4, 26.25)], radius=100)
        bounds = calculate_area_bounds(shape)
        self.assertLess(bounds["min_lon"], 26.25)
        self.assertGreater(bounds["max_lon"], 26.25)
        self.assertAlmostEqual(distance(60.4, 26.25, bounds["max_lat"], 26.25), 100.0, delta=0.01)
        self.assertEqual(bounds["width"], 200)
        self.assertAlmostEqual(bounds["area"], 31415.93, delta=0.01)

    def test_polygon_area(self):
        bounds = calculate_area_bounds(square(50))
        self.assertAlmostEqual(bounds["area"], 10000.0, delta=50.0)

    def test_polyline_has_no_area(self):
        line = shape_from_bounds("polyline", BOX[:3])
        self.assertEqual(calculate_area_bounds(line)["area"], 0.0)


class TestMaps(unittest.TestCase):

    def setUp(self):
        self.waypoints = [Waypoint(i, c.lat, c.lng, 60, 5) for i, c in enumerate(square(50).coordinates)]

    def test_create_map(self):
        self.assertIsInstance(create_map(), folium.Map)
        self.assertIsInstance(create_map(center=[60.4, 26.25], basemap="Esri World Imagery"), folium.Map)

    def test_preview_map(self):
        self.assertIsInstance(create_preview_map(self.waypoints), folium.Map)

    def test_flight_path_plot(self):
        fig = create_flight_path_plot(self.waypoints)
        self.assertEqual([t.name for t in fig.data], ["Flight Path", "Start", "End"])
        self.assertAlmostEqual(fig.data[0].x[0], -50.0, places=3)

    @mock.patch("map_utils.Nominatim")
    def test_search_location(self, nominatim):
        nominatim.return_value.geocode.return_value = mock.Mock(latitude=60.4, longitude=26.25)
        self.assertEqual(search_location("Porvoo"), (60.4, 26.25))

    def test_draw_tools_match_shape_kinds(self):
        enabled = {name for name, on in DRAW_OPTIONS.items() if on}
        self.assertEqual(enabled, {kind.value for kind in ShapeKind})
        self.assertFalse(DRAW_OPTIONS["marker"])

    @mock.patch("map_utils.Nominatim")
    def test_search_location_timeout(self, nominatim):
        nominatim.return_value.geocode.side_effect = GeocoderTimedOut("slow")
        self.assertEqual(search_location("Porvoo"), (None, None))

    @mock.patch("map_utils.Nominatim")
    def test_search_location_not_found(self, nominatim):
        nominatim.return_value.geocode.return_value = None
        self.assertEqual(search_location("nowhere"), (None, None))


if __name__ == '__main__':
    unittest.main()
