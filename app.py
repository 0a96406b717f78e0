import logging
from datetime import datetime

import streamlit as st
from streamlit_folium import st_folium

from config import configure_logging, feet_to_meters, load_settings, mph_to_mps, resolve_mission, resolve_parameters
from dji_export import export_csv, export_kmz, export_preview_kmz, waypoints_to_dataframe
from drone_specs import DEFAULT_DRONE, DRONE_SPECS, get_drone_spec
from errors import WaypointError
from flight_calculator import estimate_flight_metrics, validate_parameters
from map_utils import calculate_area_bounds, create_map, create_preview_map, search_location, shape_from_drawing
from models import WaypointAction
from utils import create_flight_path_plot
from waypoint_service import generate_waypoints

configure_logging()
logger = logging.getLogger(__name__)

ACTION_LABELS = {
    WaypointAction.NO_ACTION.value: "No Action",
    WaypointAction.TAKE_PHOTO.value: "Take Picture",
    WaypointAction.START_RECORD.value: "Start Recording",
    WaypointAction.STOP_RECORD.value: "Stop Recording",
}

st.set_page_config(page_title="Waypoint Planner", layout="wide")

if "waypoints" not in st.session_state:
    st.session_state.update({
        "waypoints": [],
        "map_center": None,
        "shapes": [],
    })

settings = load_settings()

left, right = st.columns([1, 2], gap="large")
with left:
    with st.expander("🛠️ Flight Settings", expanded=True):
        drone_model = st.selectbox("drone model", list(DRONE_SPECS.keys()),
                                   index=list(DRONE_SPECS.keys()).index(DEFAULT_DRONE))
        specs = get_drone_spec(drone_model)

        imperial = st.radio("units", ["metric", "imperial"], horizontal=True) == "imperial"
        if imperial:
            altitude = feet_to_meters(st.number_input("altitude (ft AGL)", 10, 1600, 200))
            speed = mph_to_mps(st.number_input("speed (mph)", 1.0, 50.0, 5.6))
        else:
            altitude = st.number_input("altitude (m AGL)", 2.0, 500.0, settings.altitude)
            speed = st.number_input("speed (m/s)", 0.1, 25.0, settings.speed)
        manual_speed = st.checkbox("use this speed (otherwise derived from overlap)", value=False)

        interval = st.number_input("photo interval (s)", 0.1, 100.0, settings.photo_interval)
        overlap = st.slider("overlap (%)", 0, 95, int(settings.overlap))
        angle = st.slider("gimbal pitch (°)", -90, 0, int(settings.angle))
        line_spacing = st.number_input("line spacing (m, 0 = from camera)", 0.0, 1000.0, 0.0)

        direction = st.radio("scan direction", ["north_south", "east_west"],
                             format_func=lambda x: "North-South" if x == "north_south" else "East-West")
        use_endpoints = st.checkbox("endpoints only", value=False)
        flip_path = st.checkbox("flip path", value=False)

        action = st.selectbox("waypoint action", list(ACTION_LABELS),
                              index=1, format_func=ACTION_LABELS.get)
        final_action = st.selectbox("final waypoint action", ["0"] + list(ACTION_LABELS),
                                    format_func=lambda a: "Same as others" if a == "0" else ACTION_LABELS[a])

with right:
    st.subheader("📐 Define area or route")
    query = st.text_input("search location", "")
    if query:
        lat, lon = search_location(query)
        if lat is not None:
            st.session_state.map_center = [lat, lon]
        else:
            st.warning("Location not found.")

    m = create_map(center=st.session_state.map_center)
    map_output = st_folium(m, height=500, returned_objects=["all_drawings"])

    if st.button("🛫 Generate Waypoints"):
        drawings = (map_output or {}).get("all_drawings") or []
        if not drawings:
            st.warning("Please draw a shape first.")
            st.stop()

        request = {
            "Altitude": altitude,
            "Speed": speed,
            "ManualSpeedSet": manual_speed,
            "PhotoInterval": interval,
            "Overlap": overlap,
            "Angle": angle,
            "LineSpacing": line_spacing,
            "FocalLength": specs["focal_length"],
            "SensorWidth": specs["sensor_width"],
            "SensorHeight": specs["sensor_height"],
            "IsNorthSouth": direction == "north_south",
            "UseEndpointsOnly": use_endpoints,
            "FlipPath": flip_path,
            "AllPointsAction": action,
            "FinalAction": final_action,
        }
        try:
            params = resolve_parameters(request, settings)
            errors = validate_parameters(params, specs)
            if errors:
                for e in errors:
                    st.error(e)
                st.stop()

            shapes = [shape_from_drawing(d, shape_id=str(i + 1)) for i, d in enumerate(drawings)]
            st.session_state.shapes = shapes
            st.session_state.waypoints = generate_waypoints(shapes, params)
        except WaypointError as e:
            logger.warning(f"Rejected waypoint request: {e}")
            st.error(f"❌ {e}")
            st.stop()

waypoints = st.session_state.waypoints
if waypoints:
    st.success(f"✅ Generated {len(waypoints)} waypoints")
    st.dataframe(waypoints_to_dataframe(waypoints), use_container_width=True)

    dist_m, seconds = estimate_flight_metrics(waypoints)
    area_m2 = sum(calculate_area_bounds(s)["area"] for s in st.session_state.shapes)
    st.info(f"🧭 Distance: {dist_m / 1000:.2f} km   ⏱ Duration: {seconds / 60:.1f} min   "
            f"📐 Area: {area_m2 / 10000:.2f} ha")

    st.subheader("🛰️ Preview Flight Path")
    st_folium(create_preview_map(waypoints), height=400, returned_objects=[])
    st.plotly_chart(create_flight_path_plot(waypoints), use_container_width=True)

    ts = datetime.now().strftime("%Y%m%d_%H%M%S")
    try:
        mission = resolve_mission({
            "DroneInfo": {"DroneEnumValue": specs["enum"], "DroneSubEnumValue": specs["sub_enum"]},
            "MissionName": f"mission_{ts}",
        }, waypoints, settings)
        kmz = export_kmz(mission)
    except WaypointError as e:
        logger.warning(f"Export failed: {e}")
        st.error(f"❌ {e}")
        st.stop()

    dl1, dl2, dl3 = st.columns(3)
    with dl1:
        st.download_button("⬇️ DJI KMZ", data=kmz, file_name=f"mission_{ts}.kmz",
                           mime="application/vnd.google-earth.kmz")
    with dl2:
        st.download_button("⬇️ Preview KMZ", data=export_preview_kmz(waypoints),
                           file_name=f"flight_path_{ts}.kmz", mime="application/vnd.google-earth.kmz")
    with dl3:
        st.download_button("⬇️ CSV", data=export_csv(waypoints), file_name=f"waypoints_{ts}.csv",
                           mime="text/csv")
