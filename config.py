"""
Settings and request shaping.

This is the only place where planner defaults live. Both the waypoint
request and the export request go through here before reaching the
generator or the exporter.
"""
import logging
import os
from dataclasses import dataclass, replace

from dotenv import load_dotenv

from errors import ValidationError
from flight_calculator import speed_from_camera
from models import (
    DroneInfo,
    FlightMission,
    WaypointAction,
    WaypointParameters,
)

load_dotenv()

logger = logging.getLogger(__name__)

METRIC = 0
IMPERIAL = 1


def meters_to_feet(meters):
    return meters * 3.28084


def feet_to_meters(feet):
    return feet / 3.28084


def mps_to_mph(mps):
    return mps * 2.23694


def mph_to_mps(mph):
    return mph / 2.23694


def _env_float(name, default):
    raw = os.getenv(name)
    if raw in (None, ""):
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValidationError(f"{name} must be a number, got {raw!r}") from None


def _env_bool(name, default):
    raw = os.getenv(name)
    if raw in (None, ""):
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    altitude: float = 60.0
    speed: float = 2.5
    angle: float = -45.0
    line_spacing: float = 0.0
    photo_interval: float = 2.0
    overlap: float = 83.0
    focal_length: float = 24.0
    sensor_width: float = 9.6
    sensor_height: float = 7.2
    action: str = WaypointAction.TAKE_PHOTO.value
    is_north_south: bool = True
    drone_enum_value: int = 68
    drone_sub_enum_value: int = 0
    global_transitional_speed: float = 2.5
    log_level: str = "INFO"


def load_settings():
    """Read WAYPOINT_* variables (from the environment or a .env file)."""
    return Settings(
        altitude=_env_float("WAYPOINT_ALTITUDE", Settings.altitude),
        speed=_env_float("WAYPOINT_SPEED", Settings.speed),
        angle=_env_float("WAYPOINT_GIMBAL_ANGLE", Settings.angle),
        line_spacing=_env_float("WAYPOINT_LINE_SPACING", Settings.line_spacing),
        photo_interval=_env_float("WAYPOINT_PHOTO_INTERVAL", Settings.photo_interval),
        overlap=_env_float("WAYPOINT_OVERLAP", Settings.overlap),
        focal_length=_env_float("WAYPOINT_FOCAL_LENGTH", Settings.focal_length),
        sensor_width=_env_float("WAYPOINT_SENSOR_WIDTH", Settings.sensor_width),
        sensor_height=_env_float("WAYPOINT_SENSOR_HEIGHT", Settings.sensor_height),
        action=os.getenv("WAYPOINT_ACTION", Settings.action),
        is_north_south=_env_bool("WAYPOINT_NORTH_SOUTH", Settings.is_north_south),
        drone_enum_value=int(_env_float("WAYPOINT_DRONE_ENUM", Settings.drone_enum_value)),
        drone_sub_enum_value=int(_env_float("WAYPOINT_DRONE_SUB_ENUM", Settings.drone_sub_enum_value)),
        global_transitional_speed=_env_float("WAYPOINT_TRANSITIONAL_SPEED",
                                             Settings.global_transitional_speed),
        log_level=os.getenv("LOG_LEVEL", Settings.log_level),
    )


def configure_logging(level=None):
    level = level or load_settings().log_level
    logging.basicConfig(level=getattr(logging, str(level).upper(), logging.INFO))


# Request shaping
def _pick(request, *keys):
    """First present, non-None value among keys (PascalCase, camelCase or legacy names)."""
    for key in keys:
        if request.get(key) is not None:
            return request[key]
    return None


def _number(request, keys, default):
    value = _pick(request, *keys)
    if value is None or value == "":
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{keys[0]} must be a number, got {value!r}") from None


def _flag(request, keys, default):
    value = _pick(request, *keys)
    if value is None:
        return default
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


def _action(value):
    # the client sends "0" for "no final action"
    if value in (None, "", "0", 0):
        return None
    return WaypointAction.parse(value)


def resolve_parameters(request=None, settings=None):
    """
    Build WaypointParameters from a raw request dictionary.

    Missing values fall back to settings. Imperial requests (UnitType=1)
    are converted to metres and m/s. Unless ManualSpeedSet is true, the
    speed is derived from the camera so the front overlap holds.
    """
    request = request or {}
    settings = settings or load_settings()

    unit_type = int(_number(request, ("UnitType", "unitType"), METRIC))
    if unit_type not in (METRIC, IMPERIAL):
        raise ValidationError("UnitType must be 0 (Metric) or 1 (Imperial)")

    altitude = _number(request, ("Altitude", "altitude"), None)
    speed = _number(request, ("Speed", "speed"), None)
    line_spacing = _number(request, ("LineSpacing", "lineSpacing", "distance"), None)
    if unit_type == IMPERIAL:
        altitude = feet_to_meters(altitude) if altitude is not None else None
        speed = mph_to_mps(speed) if speed is not None else None
        line_spacing = feet_to_meters(line_spacing) if line_spacing is not None else None

    params = WaypointParameters(
        altitude=settings.altitude if altitude is None else altitude,
        speed=settings.speed if speed is None else speed,
        angle=_number(request, ("Angle", "angle"), settings.angle),
        line_spacing=settings.line_spacing if line_spacing is None else line_spacing,
        photo_interval=_number(request, ("PhotoInterval", "photoInterval", "interval"),
                               settings.photo_interval),
        overlap=_number(request, ("Overlap", "overlap"), settings.overlap),
        focal_length=_number(request, ("FocalLength", "focalLength"), settings.focal_length),
        sensor_width=_number(request, ("SensorWidth", "sensorWidth"), settings.sensor_width),
        sensor_height=_number(request, ("SensorHeight", "sensorHeight"), settings.sensor_height),
        starting_index=int(_number(request, ("StartingIndex", "startingIndex"), 0)),
        action=_pick(request, "AllPointsAction", "allPointsAction", "Action", "action") or settings.action,
        is_north_south=_flag(request, ("IsNorthSouth", "isNorthSouth"), settings.is_north_south),
        use_endpoints_only=_flag(request, ("UseEndpointsOnly", "useEndpointsOnly"), False),
        unit_type=unit_type,
        manual_speed_set=_flag(request, ("ManualSpeedSet", "manualSpeedSet"), False),
        final_action=_action(_pick(request, "FinalAction", "finalAction")),
        flip_path=_flag(request, ("FlipPath", "flipPath"), False),
    )

    if not params.manual_speed_set and params.has_camera and params.photo_interval > 0:
        derived = speed_from_camera(params)
        if derived > 0:
            logger.info(f"Speed derived from camera settings: {derived:.2f} m/s")
            params = replace(params, speed=derived)
    return params


def resolve_mission(request, waypoints, settings=None):
    """Build the FlightMission for an export request."""
    request = request or {}
    settings = settings or load_settings()

    drone = _pick(request, "DroneInfo", "droneInfo") or {}
    drone_info = DroneInfo(
        enum_value=int(_number(drone, ("DroneEnumValue", "droneEnumValue"), settings.drone_enum_value)),
        sub_enum_value=int(_number(drone, ("DroneSubEnumValue", "droneSubEnumValue"),
                                   settings.drone_sub_enum_value)),
    )

    transitional = _number(request, ("GlobalTransitionalSpeed", "globalTransitionalSpeed"), 0.0)
    if transitional <= 0:
        transitional = settings.global_transitional_speed

    interval = _number(request, ("PhotoInterval", "Interval", "interval"), 0.0)
    return FlightMission(
        waypoints=tuple(waypoints),
        fly_to_wayline_mode=_pick(request, "FlyToWaylineMode", "flyToWaylineMode") or "safely",
        finish_action=_pick(request, "FinishAction", "finishAction") or "noAction",
        exit_on_rc_lost=_pick(request, "ExitOnRCLost", "exitOnRCLost") or "executeLostAction",
        execute_rc_lost_action=_pick(request, "ExecuteRCLostAction", "executeRCLostAction") or "hover",
        global_transitional_speed=transitional,
        drone_info=drone_info,
        photo_interval=interval or None,
        name=_pick(request, "MissionName", "missionName") or "Mission",
    )
