"""
Drone specifications for different DJI models

enum / sub_enum are the WPML droneEnumValue / droneSubEnumValue written
into exported missions.
"""

DRONE_SPECS = {
    "DJI Mini 4 Pro": {
        "enum": 68,
        "sub_enum": 0,
        "max_speed": 16.0,  # m/s
        "min_altitude": 2,  # meters
        "max_altitude": 120,  # meters
        "focal_length": 6.72,  # mm
        "sensor_width": 9.6,  # mm
        "sensor_height": 7.2,  # mm
        "min_interval": 2.0  # seconds
    },
    "DJI Mavic 3 Enterprise": {
        "enum": 77,
        "sub_enum": 0,
        "max_speed": 15.0,
        "min_altitude": 2,
        "max_altitude": 500,
        "focal_length": 12.29,
        "sensor_width": 17.3,
        "sensor_height": 13.0,
        "min_interval": 0.7
    },
    "DJI Mavic 3 Thermal": {
        "enum": 77,
        "sub_enum": 1,
        "max_speed": 15.0,
        "min_altitude": 2,
        "max_altitude": 500,
        "focal_length": 4.4,
        "sensor_width": 6.4,
        "sensor_height": 4.8,
        "min_interval": 0.7
    },
    "DJI Matrice 30": {
        "enum": 67,
        "sub_enum": 0,
        "max_speed": 23.0,
        "min_altitude": 2,
        "max_altitude": 500,
        "focal_length": 4.5,
        "sensor_width": 6.4,
        "sensor_height": 4.8,
        "min_interval": 0.5
    },
    "DJI Air 3": {
        "enum": 68,
        "sub_enum": 0,
        "max_speed": 19.0,
        "min_altitude": 2,
        "max_altitude": 120,
        "focal_length": 6.72,
        "sensor_width": 9.6,
        "sensor_height": 7.2,
        "min_interval": 2.0
    }
}

DEFAULT_DRONE = "DJI Mini 4 Pro"


def get_drone_spec(name=None):
    try:
        return DRONE_SPECS[name or DEFAULT_DRONE]
    except KeyError:
        raise KeyError(f"Unknown drone model: {name}") from None
