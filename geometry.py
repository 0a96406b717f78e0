"""
Great-circle helpers shared by the shape handlers and the exporter.

All distances are metres on a sphere with the WGS-84 equatorial radius.
"""
import math

import numpy as np

from models import Coordinate

EARTH_RADIUS = 6378137.0  # metres


def distance(lat1, lng1, lat2, lng2):
    """
    Calculate the great circle distance between two points
    on the earth (specified in decimal degrees)
    """
    lat1, lng1, lat2, lng2 = map(np.radians, [lat1, lng1, lat2, lng2])

    # Haversine formula
    dlng = lng2 - lng1
    dlat = lat2 - lat1
    a = np.sin(dlat / 2)**2 + np.cos(lat1) * np.cos(lat2) * np.sin(dlng / 2)**2
    c = 2 * np.arcsin(np.sqrt(np.clip(a, 0.0, 1.0)))
    return float(c * EARTH_RADIUS)


def leg_lengths(lats, lngs):
    """Haversine length of every leg of a polyline, as a numpy array (one shorter than the input)."""
    lats = np.radians(np.asarray(lats, dtype=float))
    lngs = np.radians(np.asarray(lngs, dtype=float))
    if lats.size < 2:
        return np.zeros(0)

    dlat = np.diff(lats)
    dlng = np.diff(lngs)
    a = np.sin(dlat / 2)**2 + np.cos(lats[:-1]) * np.cos(lats[1:]) * np.sin(dlng / 2)**2
    return 2 * np.arcsin(np.sqrt(np.clip(a, 0.0, 1.0))) * EARTH_RADIUS


def path_length(lats, lngs):
    """Total length of a polyline given as parallel latitude/longitude sequences."""
    return float(leg_lengths(lats, lngs).sum())


def destination(lat, lng, bearing_deg, distance_m):
    """Point reached by travelling distance_m from (lat, lng) along bearing_deg."""
    angular = distance_m / EARTH_RADIUS
    theta = math.radians(bearing_deg)
    phi1 = math.radians(lat)
    lambda1 = math.radians(lng)

    phi2 = math.asin(
        math.sin(phi1) * math.cos(angular)
        + math.cos(phi1) * math.sin(angular) * math.cos(theta)
    )
    lambda2 = lambda1 + math.atan2(
        math.sin(theta) * math.sin(angular) * math.cos(phi1),
        math.cos(angular) - math.sin(phi1) * math.sin(phi2),
    )
    lng2 = (math.degrees(lambda2) + 540.0) % 360.0 - 180.0
    return Coordinate(lat=math.degrees(phi2), lng=lng2)


def bearing(lat1, lng1, lat2, lng2):
    """Initial bearing from the first point to the second, in [0, 360)."""
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    dlng = math.radians(lng2 - lng1)
    y = math.sin(dlng) * math.cos(phi2)
    x = math.cos(phi1) * math.sin(phi2) - math.sin(phi1) * math.cos(phi2) * math.cos(dlng)
    return normalize_heading(math.degrees(math.atan2(y, x)))


def normalize_heading(deg):
    heading = math.fmod(deg, 360.0)
    if heading < 0:
        heading += 360.0
    # fmod(-1e-15, 360) + 360 rounds to 360.0
    return 0.0 if heading >= 360.0 else heading


def heading_to_wpml(deg):
    """WPML wants headings in [-180, 180]."""
    heading = normalize_heading(deg)
    return heading - 360.0 if heading > 180.0 else heading


def wrap_longitude(deg):
    """Bring a longitude (or longitude difference) back into [-180, 180]."""
    if -180.0 <= deg <= 180.0:
        return deg
    return (deg + 180.0) % 360.0 - 180.0


def polygon_area(coordinates):
    """Area in square metres of the ring described by coordinates (spherical excess)."""
    points = [(c.lat, c.lng) for c in coordinates]
    if len(points) > 1 and points[0] == points[-1]:
        points = points[:-1]
    if len(points) < 3:
        return 0.0

    total = 0.0
    for (lat1, lng1), (lat2, lng2) in zip(points, points[1:] + points[:1]):
        total += math.radians(wrap_longitude(lng2 - lng1)) * (
            2 + math.sin(math.radians(lat1)) + math.sin(math.radians(lat2))
        )
    return abs(total * EARTH_RADIUS ** 2 / 2.0)


class LocalProjection:
    """
    Equirectangular projection to east/north metres around an origin.

    Accurate enough for areas a drone can survey on one battery. Longitudes
    are measured the short way round, so areas across the antimeridian
    stay compact.
    """

    def __init__(self, origin_lat, origin_lng):
        self.origin_lat = origin_lat
        self.origin_lng = origin_lng
        self._m_per_deg_lat = math.radians(1.0) * EARTH_RADIUS
        self._m_per_deg_lng = self._m_per_deg_lat * math.cos(math.radians(origin_lat))

    @classmethod
    def around(cls, coordinates):
        coordinates = list(coordinates)
        lats = [c.lat for c in coordinates]
        ref = coordinates[0].lng
        lngs = [ref + wrap_longitude(c.lng - ref) for c in coordinates]
        return cls((min(lats) + max(lats)) / 2, wrap_longitude((min(lngs) + max(lngs)) / 2))

    def to_local(self, lat, lng):
        x = wrap_longitude(lng - self.origin_lng) * self._m_per_deg_lng
        y = (lat - self.origin_lat) * self._m_per_deg_lat
        return x, y

    def to_geo(self, x, y):
        lat = self.origin_lat + y / self._m_per_deg_lat
        lng = wrap_longitude(self.origin_lng + x / self._m_per_deg_lng)
        return lat, lng
