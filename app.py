import logging
import os

import pandas as pd
import streamlit as st
from dotenv import load_dotenv

# === Dashboard core ===
from floodcast.aggregate import format_score
from floodcast.client import ForecastClient, NetworkError
from floodcast.config import load_settings
from floodcast.geometry import render_svg
from floodcast.mapping import community_deck
from floodcast.risk import InvalidScore, classify, risk_legend, thresholds_for
from floodcast.series import METRICS, series_to_frame
from floodcast.state import CHART_TYPES, HISTORY_METRIC, DashboardState, load_forecast

PAN_STEP_PX = 100          # screen pixels per pan button press
CHART_HEIGHT_PX = 320
FULLSCREEN_HEIGHT_PX = 520


def _seed_env_from_secrets():
    try:
        keys = ["FLOODCAST_API_BASE", "FLOODCAST_HTTP_TIMEOUT", "FLOODCAST_CACHE_TTL", "FLOODCAST_LOG_LEVEL"]
        for k in keys:
            if k in st.secrets and st.secrets[k]:
                os.environ[k] = str(st.secrets[k])
    except FileNotFoundError:
        # no secrets.toml: environment / .env only
        pass


# -----------------------------
# Environment
# -----------------------------
_seed_env_from_secrets()
load_dotenv()
SETTINGS = load_settings()

logging.basicConfig(
    level=getattr(logging, SETTINGS.log_level, logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("floodcast.app")


# -----------------------------
# App config
# -----------------------------
st.set_page_config(page_title="Flood Risk Forecast", page_icon="🌊", layout="wide")

SESSION_KEYS = {
    "state": "dashboard_state",      # the one DashboardState for this browser session
    "client": "forecast_client",     # requests session is not shared across browser sessions
    "catalog": "catalog_loaded",     # discovery endpoint already consulted
}

if SESSION_KEYS["state"] not in st.session_state:
    st.session_state[SESSION_KEYS["state"]] = DashboardState()
state: DashboardState = st.session_state[SESSION_KEYS["state"]]


# -----------------------------
# API access (one client per browser session, responses cached)
# -----------------------------
def get_client() -> ForecastClient:
    if SESSION_KEYS["client"] not in st.session_state:
        st.session_state[SESSION_KEYS["client"]] = ForecastClient(SETTINGS.api_base, timeout=SETTINGS.http_timeout)
    return st.session_state[SESSION_KEYS["client"]]


# _client is left out of the cache key; api_base stands in for it
@st.cache_data(ttl=SETTINGS.cache_ttl, show_spinner=False)
def fetch_catalog(api_base: str, _client: ForecastClient) -> dict:
    return _client.get_values()


@st.cache_data(ttl=SETTINGS.cache_ttl, show_spinner=False)
def fetch_forecast(api_base: str, community: str, period: str, _client: ForecastClient):
    return _client.get_forecast(community, period)


def ensure_catalog():
    if st.session_state.get(SESSION_KEYS["catalog"]):
        return
    try:
        values = fetch_catalog(SETTINGS.api_base, get_client())
    except NetworkError as e:
        logger.warning("Community/period discovery failed, using fallback lists: %s", e)
        values = None
    state.apply_catalog(values)
    st.session_state[SESSION_KEYS["catalog"]] = True


def ensure_forecast():
    if state.pending is None:
        return
    with st.spinner("Loading forecast data..."):
        load_forecast(state, lambda c, p: fetch_forecast(SETTINGS.api_base, c, p, get_client()))


# -----------------------------
# Chart block (one metric)
# -----------------------------
def render_chart(metric: str, height_px: int):
    vp = state.viewports[metric]
    geo, view_box = state.chart(metric)
    if not geo.points:
        st.info("No data yet for this metric.")
        return
    st.html(render_svg(geo, view_box, height_px=height_px))

    def focus():
        # cursor in canvas units: slider picks x, y stays centered
        return (st.session_state.get(f"focus_{metric}", 50) / 100.0 * vp.width, vp.height / 2)

    cols = st.columns([1, 1, 1, 1, 1, 1, 1.4, 2.6])
    cols[0].button("➕", key=f"zin_{metric}", help="Zoom in",
                   on_click=lambda: vp.zoom_at(+1, focus()))
    cols[1].button("➖", key=f"zout_{metric}", help="Zoom out",
                   on_click=lambda: vp.zoom_at(-1, focus()))
    cols[2].button("◀", key=f"pl_{metric}", help="Pan left", on_click=lambda: vp.pan_by(PAN_STEP_PX, 0))
    cols[3].button("▶", key=f"pr_{metric}", help="Pan right", on_click=lambda: vp.pan_by(-PAN_STEP_PX, 0))
    cols[4].button("▲", key=f"pu_{metric}", help="Pan up", on_click=lambda: vp.pan_by(0, PAN_STEP_PX))
    cols[5].button("▼", key=f"pd_{metric}", help="Pan down", on_click=lambda: vp.pan_by(0, -PAN_STEP_PX))
    cols[6].button("Reset Zoom", key=f"reset_{metric}", on_click=vp.reset)
    with cols[7]:
        st.slider("Zoom focus (%)", 0, 100, 50, key=f"focus_{metric}", label_visibility="collapsed")
    st.caption(f"Zoom {vp.zoom:.2f}× · view {view_box.as_attr()}")


def render_summary_card(metric: str):
    st.markdown(f"#### {METRICS[metric]}")
    try:
        s = state.risk_summary(metric)
    except InvalidScore as e:
        st.error(f"Risk score for {METRICS[metric]} is not usable: {e}")
        return
    avg_tier = s["average_tier"]
    if avg_tier is None:
        st.error(f"Average risk for {METRICS[metric]} is not usable: {s['average_error']}")
    else:
        st.markdown(
            f"<div style='text-align:center;font-size:3.5rem;font-weight:700;color:{avg_tier.color}'>"
            f"{format_score(s['average_risk'])}</div>",
            unsafe_allow_html=True,
        )
    st.markdown(f"<p style='text-align:center'>{s['message']}</p>", unsafe_allow_html=True)
    if s["empty"]:
        st.caption(f"No {state.timeframe} data yet.")
    else:
        st.markdown(
            f"**{state.timeframe.capitalize()} score:** {format_score(s['score'])} "
            f"<span style='color:{s['tier'].color}'>({s['tier'].name} Risk)</span>",
            unsafe_allow_html=True,
        )


# -----------------------------
# Pages
# -----------------------------
def home_page():
    st.title("🌊 Select a Community")
    if not state.catalog_live:
        st.caption("Community list from bundled defaults (forecast service list unavailable).")
    elif state.catalog_message:
        st.caption(state.catalog_message)

    cols = st.columns(3)
    for i, community in enumerate(state.communities):
        with cols[i % 3]:
            st.button(community, key=f"community_{community}", use_container_width=True,
                      on_click=state.select_community, args=(community,))

    deck = community_deck(state.communities, state.selected_community)
    if deck is not None:
        st.pydeck_chart(deck, use_container_width=True)


def prediction_page():
    if state.selected_community is None or state.forecast is None:
        st.info("Pick a community on the Home page to view flood predictions.")
        return

    title_col, btn_col = st.columns([4, 1])
    with title_col:
        st.title(f"{state.selected_community} Flood Prediction")
    with btn_col:
        st.button("Exit Fullscreen" if state.fullscreen else "Fullscreen",
                  on_click=state.toggle_fullscreen, use_container_width=True)

    if state.fetch_error:
        st.warning("Could not reach the forecast service. Showing sample data.")

    if state.fullscreen:
        for metric in METRICS:
            st.subheader(METRICS[metric])
            render_chart(metric, FULLSCREEN_HEIGHT_PX)
        return

    st.markdown("##### Time Frame")
    tcols = st.columns(max(len(state.periods), 1))
    for col, period in zip(tcols, state.periods):
        col.button(period.capitalize(), key=f"tf_{period}", use_container_width=True,
                   type="primary" if period == state.timeframe else "secondary",
                   on_click=state.select_timeframe, args=(period,))

    c1, c2 = st.columns(2)
    for col, metric in zip((c1, c2), METRICS):
        with col:
            with st.container(border=True):
                render_summary_card(metric)

    kcols = st.columns([1, 1, 4])
    kcols[0].button("Line Chart", use_container_width=True,
                    type="primary" if state.chart_type == "line" else "secondary",
                    on_click=state.set_chart_type, args=("line",))
    kcols[1].button("Bar Chart", use_container_width=True,
                    type="primary" if state.chart_type == "bar" else "secondary",
                    on_click=state.set_chart_type, args=("bar",))

    for metric in METRICS:
        with st.container(border=True):
            st.subheader(METRICS[metric])
            render_chart(metric, CHART_HEIGHT_PX)
            with st.expander("Risk levels", expanded=False):
                st.dataframe(pd.DataFrame(risk_legend(thresholds_for(metric))),
                             hide_index=True, use_container_width=True)

    report = series_to_frame(state.forecast)
    with st.expander("Forecast data", expanded=False):
        st.dataframe(report, hide_index=True, use_container_width=True)
    st.download_button(
        "Download Report (CSV)",
        data=report.to_csv(index=False).encode("utf-8"),
        file_name=f"flood_forecast_{state.selected_community.lower()}_{state.timeframe}.csv",
        mime="text/csv",
        use_container_width=True,
    )


def history_page():
    st.title("Search History")
    if not state.history:
        st.info("No search history available")
        return
    table = thresholds_for(HISTORY_METRIC)
    for item in state.history:
        tier = classify(item.risk, table)
        with st.container(border=True):
            st.markdown(
                f"**{item.community}** · {item.date}<br/>"
                f"Risk Score: <span style='color:{tier.color}'>{format_score(item.risk)} ({tier.name})</span>"
                + (f"<br/><small>{item.message}</small>" if item.message else ""),
                unsafe_allow_html=True,
            )
    hcols = st.columns(2)
    hcols[0].download_button(
        "Download history (CSV)",
        data=state.history_frame().to_csv(index=False).encode("utf-8"),
        file_name="flood_search_history.csv",
        mime="text/csv",
        use_container_width=True,
    )
    hcols[1].button("Clear history", on_click=state.clear_history, use_container_width=True)


def settings_page():
    st.title("Settings")
    with st.container(border=True):
        st.subheader("Chart Settings")
        kind = st.radio("Default chart type", CHART_TYPES, horizontal=True,
                        index=CHART_TYPES.index(state.chart_type),
                        format_func=str.capitalize)
        if kind != state.chart_type:
            state.set_chart_type(kind)

        st.subheader("Data Settings")
        tf = st.selectbox("Default time period", state.periods,
                          index=state.periods.index(state.default_timeframe),
                          format_func=str.capitalize)
        state.default_timeframe = tf

    st.caption(f"Forecast service: {SETTINGS.api_base}")


# -----------------------------
# Router + sidebar
# -----------------------------
def sidebar_and_route():
    with st.sidebar:
        st.markdown("### Flood Risk Forecast")
        st.button("🏠 Home", use_container_width=True, on_click=lambda: setattr(state, "page", "home"))
        st.button("📈 Prediction", use_container_width=True, on_click=lambda: setattr(state, "page", "prediction"))
        st.button("🕘 History", use_container_width=True, on_click=lambda: setattr(state, "page", "history"))
        st.button("⚙️ Settings", use_container_width=True, on_click=lambda: setattr(state, "page", "settings"))
        st.divider()
        if state.selected_community:
            st.caption(f"Community: **{state.selected_community}** · {state.timeframe}")

    if state.page == "home":
        home_page()
    elif state.page == "prediction":
        prediction_page()
    elif state.page == "history":
        history_page()
    elif state.page == "settings":
        settings_page()


# ===== Render =====
ensure_catalog()
ensure_forecast()
sidebar_and_route()
