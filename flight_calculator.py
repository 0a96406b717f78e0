import math

import numpy as np

from errors import ValidationError
from geometry import leg_lengths


def validate_parameters(params, drone_specs):
    errors = []
    if params.altitude > drone_specs.get("max_altitude", 120):
        errors.append("Altitude exceeds drone's max altitude.")
    if params.altitude < drone_specs.get("min_altitude", 0):
        errors.append("Altitude is below drone's min altitude.")
    if params.speed > drone_specs.get("max_speed", 15):
        errors.append("Speed exceeds drone's max speed.")
    if params.photo_interval and params.photo_interval < drone_specs.get("min_interval", 0):
        errors.append("Photo interval is shorter than the camera can shoot.")
    return errors


def ground_footprint(altitude, focal_length, sensor_size):
    """Ground distance covered by one sensor dimension at the given altitude."""
    fov = 2 * math.atan(sensor_size / (2 * focal_length))
    return 2 * altitude * math.tan(fov / 2)


def line_spacing_from_camera(params):
    footprint = ground_footprint(params.altitude, params.focal_length, params.sensor_width)
    return footprint * (1 - params.overlap / 100)


def photo_spacing_from_camera(params):
    sensor = params.sensor_height or params.sensor_width
    footprint = ground_footprint(params.altitude, params.focal_length, sensor)
    return footprint * (1 - params.overlap / 100)


def speed_from_camera(params):
    """Speed that keeps the front overlap at the configured photo interval."""
    if params.photo_interval <= 0:
        raise ValidationError("Photo interval must be positive to derive speed.")
    return photo_spacing_from_camera(params) / params.photo_interval


def resolve_line_spacing(params):
    if params.line_spacing > 0:
        return params.line_spacing
    if params.has_camera and 0 <= params.overlap < 100:
        spacing = line_spacing_from_camera(params)
        if spacing > 0:
            return spacing
    raise ValidationError("Line spacing or camera parameters are required for area scans.")


def estimate_flight_metrics(waypoints):
    """Return (distance in metres, duration in seconds) for flying the waypoints in order."""
    if len(waypoints) < 2:
        return 0.0, 0.0

    legs = leg_lengths([wp.lat for wp in waypoints], [wp.lng for wp in waypoints])
    speeds = np.array([wp.speed for wp in waypoints[:-1]], dtype=float)
    times = np.divide(legs, speeds, out=np.zeros_like(legs), where=speeds > 0)
    return float(legs.sum()), float(times.sum())
