"""
Turns drawn shapes plus one parameter set into a single numbered mission.
"""
import dataclasses
import logging
import math

from errors import UnsupportedShapeError, ValidationError
from flight_calculator import resolve_line_spacing
from models import ShapeKind
from shape_handlers import DEFAULT_HANDLERS

logger = logging.getLogger(__name__)

NULL_ISLAND_TOLERANCE = 1e-9
AREA_KINDS = (ShapeKind.RECTANGLE, ShapeKind.POLYGON)


def handler_for(shape_type, handlers=DEFAULT_HANDLERS):
    for handler in handlers:
        if handler.can_handle(shape_type):
            return handler
    raise UnsupportedShapeError(f"No handler for shape type {shape_type!r}")


def validate_shape(shape):
    """Reject coordinates a handler should never see."""
    for coord in shape.coordinates:
        if not (math.isfinite(coord.lat) and math.isfinite(coord.lng)):
            raise ValidationError(f"Shape {shape.id} has a non-numeric coordinate.")
        if not -90 <= coord.lat <= 90:
            raise ValidationError(f"Latitude out of range: {coord.lat}")
        if not -180 <= coord.lng <= 180:
            raise ValidationError(f"Longitude out of range: {coord.lng}")

    if shape.type is ShapeKind.CIRCLE and shape.coordinates:
        center = shape.center
        if abs(center.lat) < NULL_ISLAND_TOLERANCE and abs(center.lng) < NULL_ISLAND_TOLERANCE:
            raise ValidationError("Circle centre is (0, 0); supply the real centre coordinates.")


def validate_parameters(params, shapes=()):
    if not params.altitude > 0:
        raise ValidationError("Altitude must be greater than zero.")
    if not params.speed > 0:
        raise ValidationError("Speed must be greater than zero.")
    if params.line_spacing < 0:
        raise ValidationError("Line spacing cannot be negative.")
    if params.photo_interval < 0:
        raise ValidationError("Photo interval cannot be negative.")
    if not 0 <= params.overlap < 100:
        raise ValidationError("Overlap must be between 0 and 100 percent.")
    if not -90 <= params.angle <= 90:
        raise ValidationError("Angle must be between -90 and 90 degrees.")
    if params.starting_index < 0:
        raise ValidationError("Starting index must be non-negative.")

    if any(shape.type in AREA_KINDS for shape in shapes):
        resolve_line_spacing(params)


def generate_waypoints(shapes, params, handlers=DEFAULT_HANDLERS):
    """
    Generate the waypoints for every shape, in submission order.

    Indices run contiguously from params.starting_index. Nothing is
    returned if any shape fails.
    """
    shapes = list(shapes)
    validate_parameters(params, shapes)

    generated = []
    for shape in shapes:
        validate_shape(shape)
        handler = handler_for(shape.type, handlers)
        waypoints = handler.generate(shape, params)
        logger.info(f"{type(handler).__name__} produced {len(waypoints)} waypoints for shape {shape.id}")
        generated.extend(waypoints)

    last = len(generated) - 1
    mission = []
    for offset, waypoint in enumerate(generated):
        changes = {"index": params.starting_index + offset}
        if params.angle:
            changes["gimbal_pitch"] = params.angle
        if offset == last and params.final_action is not None:
            changes["action"] = params.final_action
        mission.append(dataclasses.replace(waypoint, **changes))

    logger.info(f"Generated {len(mission)} waypoints from {len(shapes)} shapes")
    return mission
