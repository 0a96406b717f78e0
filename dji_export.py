# dji_export.py
"""
Mission export: DJI WPML KMZ for flight apps, plus a plain KMZ preview
and a CSV table.

The WPML KMZ is a zip with exactly two entries, ``template.kml`` (mission
configuration) and ``waylines.wpml`` (one Placemark per waypoint).
"""
import io
import logging
import math
import zipfile
import xml.etree.ElementTree as ET

import pandas as pd
from simplekml import Kml

from errors import ExportError
from flight_calculator import estimate_flight_metrics
from geometry import heading_to_wpml
from models import WaypointAction, waypoint_rows

logger = logging.getLogger(__name__)

KML_NS = "http://www.opengis.net/kml/2.2"
WPML_NS = "http://www.dji.com/wpmz/1.0.2"
ET.register_namespace("", KML_NS)
ET.register_namespace("wpml", WPML_NS)

TEMPLATE_ENTRY = "template.kml"
WAYLINES_ENTRY = "waylines.wpml"

DEFAULT_HEADING_MODE = "smoothTransition"
DEFAULT_HEADING_PATH_MODE = "followBadArc"
DEFAULT_POI_POINT = (0.0, 0.0, 0.0)
DEFAULT_TURN_MODE = "toPointAndPassWithContinuityCurvature"
DEFAULT_TURN_DAMPING_DIST = 0.0
PAYLOAD_POSITION = 0

ACTUATOR_FUNCS = {
    WaypointAction.TAKE_PHOTO: "takePhoto",
    WaypointAction.START_RECORD: "startRecord",
    WaypointAction.STOP_RECORD: "stopRecord",
}

COORDINATE_PRECISION = 14
ZIP_DATE_TIME = (1980, 1, 1, 0, 0, 0)


def _k(tag):
    return ET.QName(KML_NS, tag)


def _w(tag):
    return ET.QName(WPML_NS, tag)


def _num(value):
    """Compact decimal text: 50.0 -> '50', 2.5 -> '2.5'."""
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, int):
        return str(value)
    text = f"{value:.6f}".rstrip("0").rstrip(".")
    return "0" if text in ("", "-0") else text


def _sub(parent, tag, text=None):
    el = ET.SubElement(parent, tag)
    if text is not None:
        el.text = text
    return el


# template.kml
def _mission_config(parent, mission):
    config = _sub(parent, _w("missionConfig"))
    _sub(config, _w("flyToWaylineMode"), mission.fly_to_wayline_mode.value)
    _sub(config, _w("finishAction"), mission.finish_action.value)
    _sub(config, _w("exitOnRCLost"), mission.exit_on_rc_lost.value)
    _sub(config, _w("executeRCLostAction"), mission.execute_rc_lost_action.value)
    _sub(config, _w("globalTransitionalSpeed"), _num(mission.global_transitional_speed))
    drone = _sub(config, _w("droneInfo"))
    _sub(drone, _w("droneEnumValue"), str(mission.drone_info.enum_value))
    _sub(drone, _w("droneSubEnumValue"), str(mission.drone_info.sub_enum_value))
    return config


def build_template_kml(mission):
    root = ET.Element(_k("kml"))
    document = _sub(root, _k("Document"))
    _sub(document, _k("name"), mission.name)
    _mission_config(document, mission)

    if mission.photo_interval:
        group = _sub(document, _w("actionGroup"))
        _sub(group, _w("actionGroupId"), "0")
        _sub(group, _w("actionGroupMode"), "parallel")
        trigger = _sub(group, _w("actionTrigger"))
        _sub(trigger, _w("actionTriggerType"), "multipleTiming")
        _sub(trigger, _w("actionTriggerParam"), _num(mission.photo_interval))
        _append_action(group, 0, "takePhoto")
    return root


# waylines.wpml
def _append_action(group, action_id, func, params=None):
    action = _sub(group, _w("action"))
    _sub(action, _w("actionId"), str(action_id))
    _sub(action, _w("actionActuatorFunc"), func)
    func_params = _sub(action, _w("actionActuatorFuncParam"))
    for key, value in (params or {}).items():
        _sub(func_params, _w(key), value)
    _sub(func_params, _w("payloadPositionIndex"), str(PAYLOAD_POSITION))


def _action_group(placemark, group_id, index):
    group = _sub(placemark, _w("actionGroup"))
    _sub(group, _w("actionGroupId"), str(group_id))
    _sub(group, _w("actionGroupStartIndex"), str(index))
    _sub(group, _w("actionGroupEndIndex"), str(index))
    _sub(group, _w("actionGroupMode"), "parallel")
    trigger = _sub(group, _w("actionTrigger"))
    _sub(trigger, _w("actionTriggerType"), "reachPoint")
    return group


def _placemark(folder, waypoint, options, next_group_id):
    """Append one Placemark; return the next free action group id."""
    for field in ("lat", "lng", "altitude", "speed", "heading"):
        if not math.isfinite(getattr(waypoint, field)):
            raise ExportError(f"Waypoint {waypoint.index} has a non-finite {field}.")
    if waypoint.gimbal_pitch is not None and not math.isfinite(waypoint.gimbal_pitch):
        raise ExportError(f"Waypoint {waypoint.index} has a non-finite gimbal pitch.")

    placemark = _sub(folder, _k("Placemark"))
    point = _sub(placemark, _k("Point"))
    _sub(point, _k("coordinates"),
         f"{waypoint.lng:.{COORDINATE_PRECISION}f},{waypoint.lat:.{COORDINATE_PRECISION}f}")
    _sub(placemark, _w("index"), str(waypoint.index))
    _sub(placemark, _w("executeHeight"), _num(waypoint.altitude))
    _sub(placemark, _w("waypointSpeed"), _num(waypoint.speed))

    heading = _sub(placemark, _w("waypointHeadingParam"))
    _sub(heading, _w("waypointHeadingMode"), options.heading_mode or DEFAULT_HEADING_MODE)
    _sub(heading, _w("waypointHeadingAngle"), _num(heading_to_wpml(waypoint.heading)))
    poi = options.poi_point or DEFAULT_POI_POINT
    _sub(heading, _w("waypointPoiPoint"), ",".join(f"{v:.6f}" for v in poi))
    _sub(heading, _w("waypointHeadingAngleEnable"), "1")
    _sub(heading, _w("waypointHeadingPathMode"), options.heading_path_mode or DEFAULT_HEADING_PATH_MODE)

    turn = _sub(placemark, _w("waypointTurnParam"))
    _sub(turn, _w("waypointTurnMode"), options.turn_mode or DEFAULT_TURN_MODE)
    damping = DEFAULT_TURN_DAMPING_DIST if options.turn_damping_dist is None else options.turn_damping_dist
    _sub(turn, _w("waypointTurnDampingDist"), _num(damping))
    _sub(placemark, _w("useStraightLine"), _num(bool(options.use_straight_line)))

    func = ACTUATOR_FUNCS.get(waypoint.action)
    if func:
        group = _action_group(placemark, next_group_id, waypoint.index)
        _append_action(group, 0, func)
        next_group_id += 1

    if waypoint.gimbal_pitch is not None:
        group = _action_group(placemark, next_group_id, waypoint.index)
        _append_action(group, 0, "gimbalRotate", {
            "gimbalRotateMode": "absoluteAngle",
            "gimbalPitchRotateEnable": "1",
            "gimbalPitchRotateAngle": _num(waypoint.gimbal_pitch),
            "gimbalRollRotateEnable": "0",
            "gimbalRollRotateAngle": "0",
            "gimbalYawRotateEnable": "0",
            "gimbalYawRotateAngle": "0",
            "gimbalRotateTimeEnable": "0",
            "gimbalRotateTime": "0",
        })
        next_group_id += 1
    return next_group_id


def build_waylines_wpml(mission):
    root = ET.Element(_k("kml"))
    document = _sub(root, _k("Document"))
    _mission_config(document, mission)

    distance, duration = estimate_flight_metrics(mission.waypoints)
    folder = _sub(document, _k("Folder"))
    _sub(folder, _w("templateId"), "0")
    _sub(folder, _w("executeHeightMode"), "relativeToStartPoint")
    _sub(folder, _w("waylineId"), "0")
    _sub(folder, _w("distance"), _num(distance))
    _sub(folder, _w("duration"), _num(duration))
    _sub(folder, _w("autoFlightSpeed"), _num(mission.flight_speed))

    group_id = 0
    for waypoint in mission.waypoints:
        group_id = _placemark(folder, waypoint, mission.options, group_id)
    return root


def _zip_entry(name):
    # fixed timestamp so equal missions give equal bytes
    info = zipfile.ZipInfo(name, date_time=ZIP_DATE_TIME)
    info.compress_type = zipfile.ZIP_DEFLATED
    info.external_attr = 0o644 << 16
    return info


def _to_bytes(root):
    ET.indent(root)
    return ET.tostring(root, encoding="utf-8", xml_declaration=True)


def export_kmz(mission):
    """Serialise the mission into KMZ bytes."""
    if not mission.waypoints:
        raise ExportError("A mission needs at least one waypoint.")

    try:
        template = _to_bytes(build_template_kml(mission))
        waylines = _to_bytes(build_waylines_wpml(mission))
    except (TypeError, ValueError) as exc:
        raise ExportError(f"Could not serialise mission: {exc}") from exc

    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as kmz:
        kmz.writestr(_zip_entry(TEMPLATE_ENTRY), template)
        kmz.writestr(_zip_entry(WAYLINES_ENTRY), waylines)

    logger.info(f"Exported mission with {len(mission.waypoints)} waypoints ({buffer.tell()} bytes)")
    return buffer.getvalue()


# Preview and table exports
def build_preview_kml(waypoints, name="Flight Path"):
    kml = Kml(name=name)
    for wp in waypoints:
        point = kml.newpoint(name=str(wp.index), coords=[(wp.lng, wp.lat, wp.altitude)])
        point.description = f"{wp.action.value} @ {wp.heading:.0f}°"
    if len(waypoints) > 1:
        line = kml.newlinestring(name=name, coords=[(wp.lng, wp.lat, wp.altitude) for wp in waypoints])
        line.altitudemode = "relativeToGround"
    return kml


def export_preview_kmz(waypoints, name="Flight Path"):
    """Plain KMZ for Google Earth style viewers."""
    if not waypoints:
        raise ExportError("Nothing to preview: no waypoints.")
    kmz_buff = io.BytesIO()
    build_preview_kml(waypoints, name).savekmz(kmz_buff)
    return kmz_buff.getvalue()


def waypoints_to_dataframe(waypoints):
    return pd.DataFrame(
        waypoint_rows(waypoints),
        columns=["Index", "Lat", "Lng", "Altitude", "Speed", "Heading", "Action"],
    )


def export_csv(waypoints):
    return waypoints_to_dataframe(waypoints).to_csv(index=False)
