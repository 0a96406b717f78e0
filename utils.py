import plotly.graph_objects as go

from geometry import LocalProjection

ACTION_MARKERS = {
    "noAction": "circle",
    "takePhoto": "circle",
    "startRecord": "triangle-up",
    "stopRecord": "triangle-down",
}


def create_flight_path_plot(waypoints):
    """Plot the mission in east/north metres around the centre of its waypoints."""
    projection = LocalProjection.around(waypoints)
    east, north = zip(*(projection.to_local(wp.lat, wp.lng) for wp in waypoints))

    fig = go.Figure(go.Scatter(
        x=east,
        y=north,
        mode='lines+markers',
        name='Flight Path',
        text=[f"#{wp.index} {wp.action.value} {wp.heading:.0f}°" for wp in waypoints],
        hoverinfo='text',
        line=dict(color='blue', width=2),
        marker=dict(size=6, symbol=[ACTION_MARKERS.get(wp.action.value, "circle") for wp in waypoints]),
    ))

    for name, i, color, symbol in (("Start", 0, 'green', 'star'), ("End", -1, 'red', 'square')):
        fig.add_trace(go.Scatter(
            x=[east[i]],
            y=[north[i]],
            mode='markers',
            name=name,
            marker=dict(size=12, color=color, symbol=symbol),
        ))

    fig.update_layout(
        title=f"Flight Path ({len(waypoints)} waypoints)",
        xaxis_title="East (meters)",
        yaxis_title="North (meters)",
        xaxis_scaleanchor="y",
        xaxis_scaleratio=1,
    )
    return fig
