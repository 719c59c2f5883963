"""
Huvudapplikation för Streamlit ruttritare
"""

import logging
import os
from datetime import datetime

import streamlit as st
from streamlit_folium import st_folium

from config import (
    DEFAULT_CENTER,
    DEFAULT_GAP_DISTANCE,
    DEFAULT_PACE,
    DEFAULT_SHAPE_RADIUS,
    SETTINGS_FILE,
    TEMPLATES_FILE,
)
from elevation import ElevationService
from errors import InvalidInputError
from map_utils import create_map
from models import LoopConfig, PipelineConfig, SnapProfile, to_coordinates
from route_templates import LOOP_TYPES, TemplateLibrary
from route_optimization import ALGORITHMS
from routing import RouteSnapper
from routing_providers import build_default_providers
from session import RouteSession, load_gps_offsets, save_gps_offsets
from shapes import SHAPES
from timestamps import combine_start_time
from utils import format_route_summary, parse_pace

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)
logger = logging.getLogger(__name__)


def get_secret(name: str):
    """Läs en nyckel från st.secrets, annars från miljön"""
    try:
        if name in st.secrets:
            return st.secrets[name]
    except FileNotFoundError:
        pass
    return os.environ.get(name)


@st.cache_resource
def get_services():
    """Tjänster delas mellan sessioner så att cacharna överlever omkörningar"""
    mapbox_token = get_secret("MAPBOX_TOKEN")
    snapper = RouteSnapper(build_default_providers(
        ors_api_key=get_secret("ORS_API_KEY"),
        mapbox_token=mapbox_token,
        graphhopper_api_key=get_secret("GRAPHHOPPER_API_KEY")
    ))
    elevation_service = ElevationService(
        mapbox_token=mapbox_token,
        google_api_key=get_secret("GOOGLE_ELEVATION_API_KEY")
    )
    return snapper, elevation_service


def init_session_state():
    """Initiera session state"""
    if "route_session" not in st.session_state:
        snapper, elevation_service = get_services()
        st.session_state.route_session = RouteSession(
            snapper,
            elevation_service,
            templates=TemplateLibrary(TEMPLATES_FILE),
            gps_offsets=load_gps_offsets(SETTINGS_FILE)
        )
    if "last_click" not in st.session_state:
        st.session_state.last_click = None
    if "route" not in st.session_state:
        st.session_state.route = None


def sidebar_config(session: RouteSession) -> PipelineConfig:
    """Läs alla reglage och bygg en PipelineConfig"""
    st.header("Inställningar")

    profile = st.selectbox(
        "Färdsätt",
        [p.value for p in SnapProfile],
        format_func=lambda x: {"walking": "Gång/löpning", "cycling": "Cykel", "driving": "Bil"}[x]
    )
    auto_snap = st.checkbox("Snappa automatiskt", value=False)
    pace = st.text_input("Tempo (min/km)", value=DEFAULT_PACE)

    st.divider()
    st.subheader("Varv")
    loop_type = st.selectbox("Varvtyp", list(LOOP_TYPES), format_func=lambda x: LOOP_TYPES[x]["name"])
    lap_count = st.number_input("Antal varv", min_value=1, max_value=20, value=1, step=1)
    gap_distance = st.number_input("Mellanrum (m)", min_value=0, max_value=500, value=DEFAULT_GAP_DISTANCE, step=10)

    st.divider()
    st.subheader("Start")
    run_date = st.date_input("Datum", value=datetime.now().date())
    run_time = st.time_input("Starttid", value=datetime.now().time().replace(second=0, microsecond=0))

    st.divider()
    st.subheader("GPS-korrigering")
    lat_offset = st.number_input("Latitud", value=session.gps_lat_offset, format="%.6f", step=0.00001)
    lng_offset = st.number_input("Longitud", value=session.gps_lng_offset, format="%.6f", step=0.00001)
    if st.button("Spara korrigering", use_container_width=True):
        session.set_gps_offsets(lat_offset, lng_offset)
        save_gps_offsets(lat_offset, lng_offset, SETTINGS_FILE)
        st.toast("Korrigering sparad")

    return PipelineConfig(
        profile=SnapProfile(profile),
        auto_snap=auto_snap,
        loop=LoopConfig(lap_count=int(lap_count), gap_distance_m=float(gap_distance)),
        loop_type=loop_type,
        pace_min_per_km=parse_pace(pace),
        start_time=combine_start_time(run_date.isoformat(), run_time.strftime("%H:%M")),
        route_name=f"Route {datetime.now().strftime('%Y-%m-%d')}"
    )


def snap(session: RouteSession, config: PipelineConfig):
    with st.spinner("Snappar rutten till vägar..."):
        snapped = session.snap_route(config)
    if snapped:
        st.session_state.route = None
        st.toast("Rutten snappad till vägar!")


def route_actions(session: RouteSession, config: PipelineConfig):
    """Knappar för mallar, former, varv och snappning"""
    templates = session.templates.get_all_templates()
    col1, col2 = st.columns(2)
    with col1:
        template_key = st.selectbox("Mall", [""] + list(templates),
                                    format_func=lambda k: templates[k].name if k else "Välj mall")
        if st.button("Använd mall", use_container_width=True):
            if not template_key:
                st.warning("Välj en mall")
            else:
                st.toast(f"Mallen \"{session.apply_template(template_key)}\" används")
    with col2:
        shape = st.selectbox("Form", list(SHAPES))
        radius = st.number_input("Radie (m)", min_value=50, max_value=1000, value=DEFAULT_SHAPE_RADIUS, step=50)
        if st.button("Rita form", use_container_width=True):
            center = session.current_route[-1] if session.current_route else tuple(DEFAULT_CENTER)
            session.apply_shape(shape, center, float(radius))

    col_opt, col_opt_btn = st.columns([2, 1])
    algorithm = col_opt.selectbox("Optimering", list(ALGORITHMS), label_visibility="collapsed")
    if col_opt_btn.button("Optimera", use_container_width=True):
        session.optimize(algorithm)
        st.session_state.route = None

    with st.expander("Spara som mall"):
        template_name = st.text_input("Namn på mallen")
        if st.button("Spara mall", use_container_width=True):
            st.toast(f"Mallen \"{session.save_as_template(template_name)}\" sparad")

    col_a, col_b, col_c, col_d = st.columns(4)
    if col_a.button("Ångra", use_container_width=True):
        session.undo_last_point()
    if col_b.button("Rensa", use_container_width=True):
        session.clear_route()
        st.toast("Rutten rensad")
    if col_c.button("Skapa varv", use_container_width=True):
        session.create_loop(config)
        st.toast(f"Skapade {config.loop.lap_count} varv")
    if col_d.button("Snappa", type="primary", use_container_width=True):
        snap(session, config)


def current_route_data(session: RouteSession):
    """Höjder och tider gäller bara så länge den aktiva rutten är oförändrad"""
    route = st.session_state.route
    if route is not None and route.coordinates != to_coordinates(session.active_route):
        st.session_state.route = None
        return None
    return route


def summary(session: RouteSession, config: PipelineConfig):
    st.subheader("Sammanfattning")
    route = current_route_data(session)
    stats = session.statistics(config, route.elevations if route else None)
    text = format_route_summary(stats)

    st.metric("Distans", text["distance"])
    st.metric("Tid", text["duration"])
    st.metric("Höjdökning", text["elevation"])
    st.metric("Tempo", text["pace"])

    if len(session.active_route) < 2:
        st.info("Klicka på kartan för att rita en rutt")
        return

    if st.button("Hämta höjddata", use_container_width=True):
        with st.spinner("Hämtar höjddata..."):
            st.session_state.route = session.build_route(config)

    st.divider()
    st.subheader("Export")
    route = current_route_data(session) or session.build_route(config, with_elevation=False)
    for fmt in ("gpx", "kml", "json"):
        content, filename, mime = session.export(fmt, config, route)
        st.download_button(
            label=f"Ladda ner {fmt.upper()}",
            data=content,
            file_name=filename,
            mime=mime,
            use_container_width=True,
            key=f"download_{fmt}"
        )


def main():
    """Huvudfunktion för Streamlit-appen"""
    st.set_page_config(
        page_title="Ruttritare",
        page_icon="🏃",
        layout="wide"
    )

    init_session_state()
    session: RouteSession = st.session_state.route_session

    st.title("Ruttritare")
    st.markdown("Rita din runda, snappa den till vägar och exportera GPX, KML eller JSON")

    with st.sidebar:
        config = sidebar_config(session)

    col1, col2 = st.columns([2, 1])

    with col1:
        try:
            route_actions(session, config)
        except InvalidInputError as e:
            st.warning(str(e))

        center = session.active_route[-1] if session.active_route else DEFAULT_CENTER
        m = create_map(center, session.current_route, session.snapped_route)
        map_state = st_folium(m, key="map", width=None, height=500)

        click = (map_state or {}).get("last_clicked")
        if click and click != st.session_state.last_click:
            st.session_state.last_click = click
            try:
                session.add_point(click["lat"], click["lng"])
                st.session_state.route = None
                if config.auto_snap and len(session.current_route) > 1:
                    snap(session, config)
            except InvalidInputError as e:
                st.warning(str(e))
            st.rerun()

    with col2:
        try:
            summary(session, config)
        except InvalidInputError as e:
            st.warning(str(e))

    st.divider()
    st.markdown(
        """
        <div style='text-align: center; color: gray; font-size: 0.8em;'>
        Använder OpenRouteService, Mapbox, OSRM & OpenStreetMap
        </div>
        """,
        unsafe_allow_html=True
    )


if __name__ == "__main__":
    main()
