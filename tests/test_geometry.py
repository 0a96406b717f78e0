"""
Tests for the great-circle helpers.
"""

import unittest

from geometry import (
    LocalProjection,
    bearing,
    destination,
    distance,
    heading_to_wpml,
    normalize_heading,
    leg_lengths,
    path_length,
    polygon_area,
    wrap_longitude,
)
from helpers import ring_from_local


class TestDistance(unittest.TestCase):

    def test_one_degree_on_equator(self):
        self.assertAlmostEqual(distance(0, 0, 0, 1), 111319.49, delta=1.0)

    def test_same_point(self):
        self.assertEqual(distance(60.0, 25.0, 60.0, 25.0), 0.0)

    def test_symmetry(self):
        self.assertAlmostEqual(distance(60, 25, 61, 26), distance(61, 26, 60, 25), places=6)

    def test_path_length(self):
        self.assertAlmostEqual(path_length([0, 0, 0], [0, 1, 2]), 2 * distance(0, 0, 0, 1), places=3)
        self.assertEqual(path_length([10], [10]), 0.0)

    def test_leg_lengths(self):
        legs = leg_lengths([0, 0, 1], [0, 1, 1])
        self.assertEqual(len(legs), 2)
        self.assertAlmostEqual(legs[0], distance(0, 0, 0, 1), places=3)
        self.assertAlmostEqual(legs[1], distance(0, 1, 1, 1), places=3)
        self.assertEqual(len(leg_lengths([5], [5])), 0)


class TestDestination(unittest.TestCase):

    def test_travelled_distance(self):
        for b in (0, 45, 135, 300):
            point = destination(60.4, 26.25, b, 250.0)
            self.assertAlmostEqual(distance(60.4, 26.25, point.lat, point.lng), 250.0, delta=0.01)

    def test_bearing_back(self):
        point = destination(60.4, 26.25, 90, 500.0)
        self.assertAlmostEqual(bearing(60.4, 26.25, point.lat, point.lng), 90.0, delta=0.01)

    def test_longitude_wraps(self):
        point = destination(0.0, 179.9999, 90, 1000.0)
        self.assertLess(point.lng, -179.0)


class TestBearing(unittest.TestCase):

    def test_cardinal_directions(self):
        self.assertAlmostEqual(bearing(0, 0, 0, 1), 90.0, places=6)
        self.assertAlmostEqual(bearing(0, 0, 1, 0), 0.0, places=6)
        self.assertAlmostEqual(bearing(1, 0, 0, 0), 180.0, places=6)
        self.assertAlmostEqual(bearing(0, 1, 0, 0), 270.0, places=6)

    def test_normalize_heading(self):
        self.assertEqual(normalize_heading(-90), 270.0)
        self.assertEqual(normalize_heading(360), 0.0)
        self.assertAlmostEqual(normalize_heading(720.5), 0.5)

    def test_heading_to_wpml(self):
        self.assertEqual(heading_to_wpml(270), -90.0)
        self.assertEqual(heading_to_wpml(180), 180.0)
        self.assertEqual(heading_to_wpml(90), 90.0)
        self.assertEqual(heading_to_wpml(-30), -30.0)


class TestArea(unittest.TestCase):

    def test_square(self):
        ring = ring_from_local([(-50, -50), (50, -50), (50, 50), (-50, 50)])
        self.assertAlmostEqual(polygon_area(ring), 10000.0, delta=50.0)

    def test_closed_ring_same_area(self):
        ring = ring_from_local([(-50, -50), (50, -50), (50, 50), (-50, 50)])
        self.assertAlmostEqual(polygon_area(ring + ring[:1]), polygon_area(ring), places=6)

    def test_degenerate(self):
        ring = ring_from_local([(0, 0), (10, 0)])
        self.assertEqual(polygon_area(ring), 0.0)


class TestLocalProjection(unittest.TestCase):

    def test_round_trip(self):
        projection = LocalProjection(60.4, 26.25)
        lat, lng = projection.to_geo(120.0, -80.0)
        x, y = projection.to_local(lat, lng)
        self.assertAlmostEqual(x, 120.0, places=6)
        self.assertAlmostEqual(y, -80.0, places=6)

    def test_metres_match_haversine(self):
        projection = LocalProjection(60.4, 26.25)
        lat, lng = projection.to_geo(0.0, 100.0)
        self.assertAlmostEqual(distance(60.4, 26.25, lat, lng), 100.0, delta=0.01)

    def test_around_uses_bounding_box_centre(self):
        ring = ring_from_local([(-50, -50), (50, -50), (50, 50), (-50, 50)])
        projection = LocalProjection.around(ring)
        self.assertAlmostEqual(projection.origin_lat, 60.4045, places=9)
        self.assertAlmostEqual(projection.origin_lng, 26.2550, places=9)



class TestAntimeridian(unittest.TestCase):

    def setUp(self):
        self.ring = ring_from_local([(-50, -50), (50, -50), (50, 50), (-50, 50)], origin=(10.0, 180.0))

    def test_wrap_longitude(self):
        self.assertEqual(wrap_longitude(26.25), 26.25)
        self.assertEqual(wrap_longitude(180.0), 180.0)
        self.assertAlmostEqual(wrap_longitude(190.0), -170.0)
        self.assertAlmostEqual(wrap_longitude(-359.0), 1.0)

    def test_ring_straddles_180(self):
        lngs = sorted(c.lng for c in self.ring)
        self.assertLess(lngs[0], -179.99)
        self.assertGreater(lngs[-1], 179.99)

    def test_projection_stays_local(self):
        projection = LocalProjection.around(self.ring)
        for c in self.ring:
            x, y = projection.to_local(c.lat, c.lng)
            self.assertAlmostEqual(abs(x), 50.0, delta=0.01)
            self.assertAlmostEqual(abs(y), 50.0, delta=0.01)

    def test_to_geo_wraps(self):
        lat, lng = LocalProjection(10.0, 179.9999).to_geo(1000.0, 0.0)
        self.assertTrue(-180.0 <= lng <= 180.0)
        self.assertAlmostEqual(distance(10.0, 179.9999, lat, lng), 1000.0, delta=0.1)

    def test_area(self):
        self.assertAlmostEqual(polygon_area(self.ring), 10000.0, delta=50.0)


if __name__ == '__main__':
    unittest.main()
