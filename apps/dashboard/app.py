from __future__ import annotations

import logging
import time

import pandas as pd
import plotly.graph_objects as go
import streamlit as st
from plant_3d_component import render_plant_3d

from atucha.capabilities.probe import CapabilityProbe, DeviceCapabilities, HostMetricsBackend
from atucha.config import PlantConfig, load_plant_config
from atucha.errors import UnsupportedRenderingError
from atucha.lattice.generator import LatticeCache, LatticeGeometry, LatticeNode
from atucha.lattice.visuals import lattice_to_frame, summarize_lattice
from atucha.logging_config import setup_logging
from atucha.quality.controller import QualityController, QualityLevel
from atucha.scene.frame import build_scene_frame
from atucha.tour.controller import CameraPose, TourController
from atucha.tour.waypoints import DEFAULT_TOUR, tour_duration_s, tour_timeline

st.set_page_config(page_title="Atucha II Plant Explorer", layout="wide")

st.markdown(
    """
<style>
.stApp {
    background-color: #0b1220;
    color: #e5edf7;
    font-family: "JetBrains Mono", "SFMono-Regular", monospace;
}
[data-testid="stSidebar"] {
    background-color: #0e1627;
    border-right: 1px solid #1f2a3f;
}
[data-testid="stMetric"] {
    background-color: #111b2f;
    border: 1px solid #2a3b58;
    border-radius: 8px;
    padding: 10px 12px;
}
h1, h2, h3 {
    color: #dce7ff;
}
</style>
""",
    unsafe_allow_html=True,
)

PLOT_TEMPLATE = "plotly_dark"
ACCENT_BLUE = "#4c8dff"
ACCENT_GREEN = "#33d17a"
ACCENT_ORANGE = "#f6a04d"
ACCENT_PURPLE = "#a371f7"

TEXTURE_SIZE_OPTIONS = (1024, 2048, 3072, 4096, 8192, 16384)
RENDERBUFFER_SIZE_OPTIONS = (512, 1024, 2048, 4096, 8192, 16384)
AUTO_QUALITY = "Auto"
MOBILE_USER_AGENT = "Mozilla/5.0 (iPhone; CPU iPhone OS 17_0 like Mac OS X)"
DESKTOP_USER_AGENT = "Mozilla/5.0 (X11; Linux x86_64)"
AUTO_ADVANCE_INTERVAL_S = 0.25


@st.cache_resource(show_spinner=False)
def _init_logging() -> logging.Logger:
    return setup_logging(logging.INFO)


@st.cache_data(show_spinner=False)
def _load_config() -> PlantConfig:
    return load_plant_config()


@st.cache_data(show_spinner=False)
def _tour_timeline_frame() -> pd.DataFrame:
    return tour_timeline(DEFAULT_TOUR, step_s=0.1)


def _session_objects(config: PlantConfig) -> tuple[QualityController, LatticeCache, TourController]:
    if "quality_controller" not in st.session_state:
        st.session_state["quality_controller"] = QualityController(
            depth_texture_extension=config.depth_texture_extension
        )
    if "lattice_cache" not in st.session_state:
        st.session_state["lattice_cache"] = LatticeCache(LatticeGeometry.from_config(config))
    if "tour_controller" not in st.session_state:
        st.session_state["tour_controller"] = TourController(
            initial_pose=CameraPose(
                position=config.default_camera_position,
                target=config.default_camera_target,
            ),
            min_orbit_viewport_width_px=config.min_orbit_viewport_width_px,
        )
        st.session_state["started_at"] = time.monotonic()
        st.session_state["last_tick_at"] = time.monotonic()
    return (
        st.session_state["quality_controller"],
        st.session_state["lattice_cache"],
        st.session_state["tour_controller"],
    )


def _probe_capabilities(host_metrics: dict[str, object]) -> DeviceCapabilities:
    # Probe once per simulated device; changing the sidebar counts as a new context.
    if st.session_state.get("host_metrics") != host_metrics:
        st.session_state["host_metrics"] = host_metrics
        st.session_state["capability_probe"] = CapabilityProbe(HostMetricsBackend(host_metrics))
    probe: CapabilityProbe = st.session_state["capability_probe"]
    return probe.probe()


def _lattice_figure(tubes: list[LatticeNode], rods: list[LatticeNode]) -> go.Figure:
    df = lattice_to_frame(tubes, rods)
    rod_df = df[df["is_control_rod"]]
    fig = go.Figure()
    fig.add_trace(
        go.Scatter(
            x=df["x"],
            y=df["z"],
            mode="markers",
            name="Pressure tubes",
            marker=dict(
                size=7,
                color=df["temperature_c"],
                colorscale="Inferno",
                colorbar=dict(title="Temp (C)"),
            ),
            customdata=df[["id", "flux_fraction"]],
            hovertemplate="Tube %{customdata[0]}<br>flux %{customdata[1]:.3f}<extra></extra>",
        )
    )
    fig.add_trace(
        go.Scatter(
            x=rod_df["x"],
            y=rod_df["z"],
            mode="markers",
            name="Control rods",
            marker=dict(size=11, color="rgba(0,0,0,0)", line=dict(color=ACCENT_GREEN, width=2)),
        )
    )
    fig.update_layout(
        template=PLOT_TEMPLATE,
        title="Core Lattice: Temperature Map",
        xaxis_title="x",
        yaxis_title="z",
        yaxis=dict(scaleanchor="x", scaleratio=1),
        height=560,
    )
    return fig


def _timeline_figure(timeline: pd.DataFrame) -> go.Figure:
    fig = go.Figure()
    for column, color in (
        ("position_x", ACCENT_BLUE),
        ("position_y", ACCENT_ORANGE),
        ("position_z", ACCENT_PURPLE),
    ):
        fig.add_trace(
            go.Scatter(
                x=timeline["time_s"],
                y=timeline[column],
                mode="lines",
                name=column,
                line=dict(color=color, width=2.2),
            )
        )
    fig.update_layout(
        template=PLOT_TEMPLATE,
        title="Guided Tour: Camera Position Over Time",
        xaxis_title="Time (s)",
        yaxis_title="World units",
    )
    return fig


_init_logging()
config = _load_config()
quality, lattice_cache, tour = _session_objects(config)

with st.sidebar:
    st.header("Host Device")
    webgl_available = st.checkbox("WebGL available", value=True)
    webgl2_available = st.checkbox("WebGL2 available", value=True)
    max_texture_size = st.select_slider(
        "Max texture size", options=TEXTURE_SIZE_OPTIONS, value=8192
    )
    max_renderbuffer_size = st.select_slider(
        "Max renderbuffer size", options=RENDERBUFFER_SIZE_OPTIONS, value=8192
    )
    depth_texture = st.checkbox("Depth texture extension", value=True)
    mobile_device = st.checkbox("Mobile device", value=False)
    device_pixel_ratio = st.slider(
        "Device pixel ratio", min_value=0.5, max_value=3.0, value=1.0, step=0.25
    )
    viewport_width = st.slider(
        "Viewport width (px)", min_value=320, max_value=2560, value=1440, step=16
    )

    st.header("Rendering")
    quality_choice = st.selectbox(
        "Quality", [AUTO_QUALITY, *(level.name for level in QualityLevel)], index=0
    )
    shadows_preferred = st.toggle("Shadows", value=True)
    post_processing_preferred = st.toggle("Post-processing", value=True)
    playing = st.toggle("Animate plant", value=True)

    st.header("Core Lattice")
    target_tube_count = st.number_input(
        "Pressure tubes", min_value=1, max_value=479, value=config.target_tube_count
    )
    rod_stride = st.number_input("Control rod stride", min_value=1, value=config.rod_stride)
    max_rod_count = st.number_input("Control rod cap", min_value=0, value=config.max_rod_count)

host_metrics = {
    "webgl": webgl_available,
    "webgl2": webgl2_available,
    "maxTextureSize": max_texture_size,
    "maxRenderbufferSize": max_renderbuffer_size,
    "maxVertexUniforms": 4096,
    "maxFragmentUniforms": 1024,
    "extensions": [config.depth_texture_extension] if depth_texture else [],
    "userAgent": MOBILE_USER_AGENT if mobile_device else DESKTOP_USER_AGENT,
}

capabilities: DeviceCapabilities | None
try:
    capabilities = _probe_capabilities(host_metrics)
except UnsupportedRenderingError:
    capabilities = None

tubes, rods = lattice_cache.get(int(target_tube_count), int(rod_stride), int(max_rod_count))
summary = summarize_lattice(tubes, rods)

st.title("Atucha II Nuclear Power Plant")
st.caption("Educational schematic (non-operational): PHWR core lattice, 745 MWe")

kpi_cols = st.columns(4)
kpi_cols[0].metric("Pressure tubes", f"{int(summary['tube_count'])}")
kpi_cols[1].metric("Control rods", f"{int(summary['control_rod_count'])}")
kpi_cols[2].metric("Mean tube temp (C)", f"{summary['mean_temperature_c']:.1f}")
kpi_cols[3].metric("Mean flux fraction", f"{summary['mean_flux_fraction']:.3f}")

if capabilities is None:
    st.error("No WebGL context is available; showing the 2D core map instead of the 3D plant.")
    st.plotly_chart(_lattice_figure(tubes, rods), width="stretch")
    st.stop()

quality.initialize(capabilities)
quality.set_override(None if quality_choice == AUTO_QUALITY else QualityLevel[quality_choice])
quality.set_shadow_preference(shadows_preferred)
quality.set_post_processing_preference(post_processing_preferred)
quality.set_pixel_ratio_source(lambda: device_pixel_ratio)
parameters = quality.current_parameters()

now = time.monotonic()
tour.tick(now - st.session_state["last_tick_at"])
st.session_state["last_tick_at"] = now
elapsed_s = now - st.session_state["started_at"]

tab_plant, tab_lattice, tab_rendering, tab_tour = st.tabs(
    ["Plant 3D", "Core Lattice", "Rendering", "Guided Tour"]
)

with tab_plant:
    tour_cols = st.columns(5)
    if tour_cols[0].button("Start tour", type="primary"):
        tour.start(DEFAULT_TOUR)
    if tour_cols[1].button("Next stop"):
        tour.skip()
    if tour_cols[2].button("Stop tour"):
        tour.stop()
    if tour_cols[3].button("Reset view"):
        tour.reset_camera()
    auto_advance = tour_cols[4].toggle("Auto-advance", value=True)

    state = tour.state
    waypoint = tour.current_waypoint
    if state.active and waypoint is not None:
        st.info(f"Tour: {waypoint.name} ({state.phase.value})")

    frame = build_scene_frame(
        parameters,
        tubes,
        rods,
        tour.pose,
        tour_state=state,
        tour_waypoint=waypoint.name if waypoint is not None else None,
        free_orbit_enabled=tour.is_free_orbit_enabled(viewport_width),
        elapsed_s=elapsed_s,
        playing=playing,
    )
    render_plant_3d(frame)

with tab_lattice:
    st.plotly_chart(_lattice_figure(tubes, rods), width="stretch")
    st.dataframe(lattice_to_frame(tubes, rods), width="stretch", hide_index=True)

with tab_rendering:
    rendering_cols = st.columns(2)
    with rendering_cols[0]:
        st.subheader("Detected capabilities")
        st.json(capabilities.to_dict())
    with rendering_cols[1]:
        st.subheader("Derived parameters")
        st.json(parameters.to_dict())
        st.caption(
            f"Capability tier: {quality.capability_level.name}. "
            f"Free orbit: {'on' if tour.is_free_orbit_enabled(viewport_width) else 'off'}."
        )

with tab_tour:
    st.caption(f"Default tour length: {tour_duration_s(DEFAULT_TOUR):.1f} s")
    timeline = _tour_timeline_frame()
    st.plotly_chart(_timeline_figure(timeline), width="stretch")
    st.dataframe(
        pd.DataFrame(
            [
                {
                    "waypoint": item.name,
                    "transition_s": item.transition_duration_s,
                    "hold_s": item.hold_duration_s,
                }
                for item in DEFAULT_TOUR
            ]
        ),
        width="stretch",
        hide_index=True,
    )

if tour.active and auto_advance:
    time.sleep(AUTO_ADVANCE_INTERVAL_S)
    st.rerun()
