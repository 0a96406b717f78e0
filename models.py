"""
Value types shared by the waypoint generator and the mission exporter.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

from errors import UnsupportedShapeError, ValidationError


class ShapeKind(str, Enum):
    RECTANGLE = "rectangle"
    POLYGON = "polygon"
    CIRCLE = "circle"
    POLYLINE = "polyline"

    @classmethod
    def parse(cls, value) -> "ShapeKind":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise UnsupportedShapeError(f"Unknown shape type: {value!r}") from None


class WaypointAction(str, Enum):
    NO_ACTION = "noAction"
    TAKE_PHOTO = "takePhoto"
    START_RECORD = "startRecord"
    STOP_RECORD = "stopRecord"

    @classmethod
    def parse(cls, value) -> "WaypointAction":
        if isinstance(value, cls):
            return value
        wanted = str(value).strip().lower()
        for action in cls:
            if action.value.lower() == wanted:
                return action
        raise ValidationError(f"Unknown waypoint action: {value!r}")


# Mission-level vocabulary (DJI WPML)
class FlyToWaylineMode(str, Enum):
    SAFELY = "safely"
    POINT_TO_POINT = "pointToPoint"


class FinishAction(str, Enum):
    GO_HOME = "goHome"
    NO_ACTION = "noAction"
    AUTO_LAND = "autoLand"
    GOTO_FIRST_WAYPOINT = "gotoFirstWaypoint"


class ExitOnRCLost(str, Enum):
    GO_CONTINUE = "goContinue"
    EXECUTE_LOST_ACTION = "executeLostAction"


class RCLostAction(str, Enum):
    GO_BACK = "goBack"
    LANDING = "landing"
    HOVER = "hover"


@dataclass(frozen=True)
class Coordinate:
    lat: float
    lng: float
    radius: Optional[float] = None

    def as_tuple(self) -> Tuple[float, float]:
        return self.lat, self.lng


@dataclass(frozen=True)
class ShapeData:
    """A user-drawn area or route."""
    id: str
    type: ShapeKind
    coordinates: Tuple[Coordinate, ...]
    radius: float = 0.0

    def __post_init__(self):
        object.__setattr__(self, "type", ShapeKind.parse(self.type))
        object.__setattr__(self, "coordinates", tuple(self.coordinates))

    @property
    def center(self) -> Coordinate:
        return self.coordinates[0]


@dataclass(frozen=True)
class WaypointParameters:
    """
    Flight and camera settings for one generation request.

    Defaults are neutral; use config.resolve_parameters to get the
    planner's real defaults.
    """
    altitude: float
    speed: float
    angle: float = 0.0
    line_spacing: float = 0.0
    photo_interval: float = 0.0
    overlap: float = 0.0
    focal_length: float = 0.0
    sensor_width: float = 0.0
    sensor_height: float = 0.0
    starting_index: int = 0
    action: WaypointAction = WaypointAction.NO_ACTION
    is_north_south: bool = False
    use_endpoints_only: bool = False
    unit_type: int = 0
    manual_speed_set: bool = False
    final_action: Optional[WaypointAction] = None
    flip_path: bool = False

    def __post_init__(self):
        object.__setattr__(self, "action", WaypointAction.parse(self.action))
        if self.final_action is not None:
            object.__setattr__(self, "final_action", WaypointAction.parse(self.final_action))

    @property
    def has_camera(self) -> bool:
        return self.focal_length > 0 and self.sensor_width > 0

    @property
    def photo_distance(self) -> float:
        """Ground distance flown between two photo triggers."""
        return self.photo_interval * self.speed


@dataclass(frozen=True)
class Waypoint:
    index: int
    lat: float
    lng: float
    altitude: float
    speed: float
    heading: float = 0.0
    action: WaypointAction = WaypointAction.NO_ACTION
    gimbal_pitch: Optional[float] = None

    def to_dict(self):
        return {
            "Index": self.index,
            "Lat": self.lat,
            "Lng": self.lng,
            "Altitude": self.altitude,
            "Speed": self.speed,
            "Heading": self.heading,
            "Action": self.action.value,
        }


@dataclass(frozen=True)
class DroneInfo:
    enum_value: int = 68
    sub_enum_value: int = 0


@dataclass(frozen=True)
class WaypointExportOptions:
    """Per-placemark WPML settings; None means "use the exporter default"."""
    heading_mode: Optional[str] = None
    heading_path_mode: Optional[str] = None
    poi_point: Optional[Tuple[float, float, float]] = None
    turn_mode: Optional[str] = None
    turn_damping_dist: Optional[float] = None
    use_straight_line: Optional[bool] = None


@dataclass(frozen=True)
class FlightMission:
    waypoints: Tuple[Waypoint, ...]
    fly_to_wayline_mode: FlyToWaylineMode = FlyToWaylineMode.SAFELY
    finish_action: FinishAction = FinishAction.NO_ACTION
    exit_on_rc_lost: ExitOnRCLost = ExitOnRCLost.EXECUTE_LOST_ACTION
    execute_rc_lost_action: RCLostAction = RCLostAction.HOVER
    global_transitional_speed: float = 2.5
    drone_info: DroneInfo = field(default_factory=DroneInfo)
    auto_flight_speed: Optional[float] = None
    photo_interval: Optional[float] = None
    options: WaypointExportOptions = field(default_factory=WaypointExportOptions)
    name: str = "Mission"

    def __post_init__(self):
        object.__setattr__(self, "waypoints", tuple(self.waypoints))
        for attr, enum_type in (
            ("fly_to_wayline_mode", FlyToWaylineMode),
            ("finish_action", FinishAction),
            ("exit_on_rc_lost", ExitOnRCLost),
            ("execute_rc_lost_action", RCLostAction),
        ):
            value = getattr(self, attr)
            try:
                object.__setattr__(self, attr, enum_type(value))
            except ValueError:
                raise ValidationError(f"Invalid {attr}: {value!r}") from None

    @property
    def flight_speed(self) -> float:
        if self.auto_flight_speed and self.auto_flight_speed > 0:
            return self.auto_flight_speed
        return self.global_transitional_speed


def waypoint_rows(waypoints: List[Waypoint]):
    return [wp.to_dict() for wp in waypoints]
