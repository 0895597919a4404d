"""WeatherSensor AI: Streamlit dashboard with AI weather briefings.

Run with: streamlit run weathersensor/app.py

Resolves a location from the browser's GPS or a US ZIP code, shows a
today card and a multi-day list from Open-Meteo, and asks the AI proxy
(weathersensor-proxy) for a plain-language summary and chat answers.
"""

from __future__ import annotations

import html

import streamlit as st
from streamlit_js_eval import get_geolocation

from weathersensor import config
from weathersensor.chat import ChatBusyError
from weathersensor.forecast import ForecastAPIError
from weathersensor.geocoding import DeviceLocationError, GeocodingError
from weathersensor.presenter import DayCard, ForecastView
from weathersensor.prompts import PromptBuilder, TemplateUnavailableError, load_prompt_templates
from weathersensor.session import WeatherSession


# ---------------------------------------------------------------------------
# Dynamic gradient backgrounds
# ---------------------------------------------------------------------------

_WEATHER_GRADIENTS: dict[str, str] = {
    "clear_day": "linear-gradient(180deg, #1e88e5 0%, #42a5f5 40%, #64b5f6 100%)",
    "rain": "linear-gradient(180deg, #37474f 0%, #455a64 50%, #546e7a 100%)",
    "snow": "linear-gradient(180deg, #546e7a 0%, #78909c 50%, #90a4ae 100%)",
    "windy": "linear-gradient(180deg, #263238 0%, #37474f 50%, #455a64 100%)",
    "default": "linear-gradient(180deg, #1a1a2e 0%, #16213e 50%, #0f3460 100%)",
}

_ICON_GRADIENTS: dict[str, str] = {
    "\U0001f327\ufe0f": "rain",
    "\U0001f326\ufe0f": "rain",
    "\U0001f328\ufe0f": "snow",
    "\U0001f32c\ufe0f": "windy",
    "\u2600\ufe0f": "clear_day",
}


def _get_gradient(today: DayCard | None) -> str:
    """Choose a background gradient from today's conditions."""
    if today is None:
        return _WEATHER_GRADIENTS["default"]
    return _WEATHER_GRADIENTS[_ICON_GRADIENTS.get(today.icon, "default")]


# ---------------------------------------------------------------------------
# CSS injection: glassmorphism cards
# ---------------------------------------------------------------------------

def _inject_css(gradient: str) -> None:
    """Inject the dashboard CSS with a dynamic background gradient."""
    st.markdown(f"""
    <style>
    .stApp {{ background: {gradient} !important; }}
    .block-container {{ max-width: 680px !important; padding-top: 1.5rem !important; }}
    .stMarkdown, .stMarkdown p, .stMarkdown li {{ color: #f5f7fa !important; }}

    .ws-panel {{
        background: rgba(255, 255, 255, 0.1);
        backdrop-filter: blur(16px);
        border: 1px solid rgba(255, 255, 255, 0.15);
        border-radius: 14px;
        padding: 12px 16px;
        margin-bottom: 12px;
    }}
    .ws-label {{
        color: rgba(255, 255, 255, 0.6);
        font-size: 0.72rem;
        font-weight: 600;
        letter-spacing: 0.06em;
        margin: 8px 0;
    }}

    .ws-today {{ text-align: center; color: #ffffff; margin-bottom: 12px; }}
    .ws-today .place {{ font-size: 1.35rem; }}
    .ws-today .date {{ color: rgba(255, 255, 255, 0.7); }}
    .ws-today .temp {{ font-size: 3.6rem; font-weight: 200; }}
    .ws-today .meta {{ color: rgba(255, 255, 255, 0.8); }}

    .ws-row {{
        display: flex;
        align-items: center;
        gap: 6px;
        padding: 8px 0;
        color: #ffffff;
        font-size: 0.85rem;
    }}
    .ws-row + .ws-row {{ border-top: 1px solid rgba(255, 255, 255, 0.08); }}
    .ws-row .name {{ width: 88px; font-weight: 600; }}
    .ws-row .name small {{ display: block; font-weight: 400; opacity: 0.6; }}
    .ws-row .icon {{ width: 32px; text-align: center; font-size: 1.15rem; }}
    .ws-row .lo, .ws-row .hi {{ width: 46px; }}
    .ws-row .lo {{ text-align: right; opacity: 0.6; }}
    .ws-row .track {{
        flex: 1;
        position: relative;
        height: 5px;
        border-radius: 3px;
        background: rgba(255, 255, 255, 0.15);
    }}
    .ws-row .fill {{ position: absolute; top: 0; height: 100%; border-radius: 3px; }}
    .ws-row .extra {{ width: 116px; text-align: right; font-size: 0.75rem; opacity: 0.65; }}

    .ws-chat-user {{
        background: rgba(30, 136, 229, 0.3);
        border-radius: 14px 14px 4px 14px;
        color: #ffffff;
        padding: 8px 12px;
        margin: 6px 0;
    }}
    </style>
    """, unsafe_allow_html=True)



# ---------------------------------------------------------------------------
# Session management
# ---------------------------------------------------------------------------

def _init_session() -> WeatherSession:
    """Create the per-browser WeatherSession on first run."""
    if "weather_session" not in st.session_state:
        try:
            builder = PromptBuilder(load_prompt_templates())
            st.session_state.template_error = None
        except TemplateUnavailableError as exc:
            builder = PromptBuilder(None)
            st.session_state.template_error = str(exc)
        st.session_state.weather_session = WeatherSession(builder)
    st.session_state.setdefault("gps_wait", False)
    return st.session_state.weather_session


def _after_location_loaded(session: WeatherSession) -> None:
    with st.spinner("Generating AI summary..."):
        session.generate_summary()


# ---------------------------------------------------------------------------
# Location inputs
# ---------------------------------------------------------------------------

def _clear_zip() -> None:
    st.session_state.zip_input = ""


def _search_zip(session: WeatherSession, code: str) -> None:
    """Load the forecast for a ZIP code, surfacing failures as alerts."""
    # A ZIP search supersedes a pending GPS request.
    st.session_state.gps_wait = False
    with st.spinner("Finding location..."):
        try:
            loaded = session.load_from_postal_code(code)
        except GeocodingError as exc:
            st.error(str(exc))
            return
        except ForecastAPIError as exc:
            st.error(f"Unable to fetch weather data. {exc}")
            return
    if loaded:
        _after_location_loaded(session)


def _poll_device_location(session: WeatherSession) -> None:
    """Ask the browser for its position; reruns until it answers."""
    payload = get_geolocation()
    if payload is None:
        st.caption("Waiting for your browser to share its location...")
        return

    st.session_state.gps_wait = False
    with st.spinner("Fetching forecast for your location..."):
        try:
            loaded = session.load_from_device(payload)
        except DeviceLocationError as exc:
            st.error(f"Failed to get location. {exc}")
            return
        except ForecastAPIError as exc:
            st.error(f"Unable to fetch weather data. {exc}")
            return
    if loaded:
        _after_location_loaded(session)


def _render_location_inputs(session: WeatherSession) -> None:
    """ZIP search, clear and "use my location" controls."""
    st.text_input(
        "US ZIP code",
        placeholder="e.g., 66044",
        key="zip_input",
        max_chars=5,
    )
    col1, col2, col3 = st.columns([2, 1, 2])
    search = col1.button("Search", key="zip_search_btn", type="primary", use_container_width=True)
    col2.button("Clear", key="zip_clear_btn", on_click=_clear_zip, use_container_width=True)
    if col3.button("\U0001f4cd Use my location", key="gps_btn", use_container_width=True):
        st.session_state.gps_wait = True

    if search:
        _search_zip(session, st.session_state.get("zip_input", ""))
    elif st.session_state.gps_wait:
        _poll_device_location(session)


# ---------------------------------------------------------------------------
# Render: today card and daily list
# ---------------------------------------------------------------------------

def _render_today(view: ForecastView) -> None:
    """Render the highlighted card for the first forecast day."""
    today = view.today
    if today is None:
        return
    location = html.escape(view.place_name) if view.place_name else "Your location"
    st.markdown(
        f'<div class="ws-today">'
        f'<div class="place">{location}</div>'
        f'<div class="date">{today.weekday} ({today.date_label})</div>'
        f'<div class="temp">{today.icon} {today.high}</div>'
        f'<div class="meta">High: {today.high} | Low: {today.low}</div>'
        f'<div class="meta">\U0001f4a7 Rain: {today.rain} &nbsp; '
        f'\U0001f32c\ufe0f Wind: {today.wind}</div>'
        f'</div>',
        unsafe_allow_html=True,
    )


def _render_daily(view: ForecastView) -> None:
    """Render one row per forecast day with a colored temperature bar."""
    if not view.days:
        return

    rows = ""
    for day in view.days:
        rows += (
            f'<div class="ws-row">'
            f'<div class="name">{day.weekday[:3]}<small>{day.date_label}</small></div>'
            f'<div class="icon">{day.icon}</div>'
            f'<div class="lo">{day.low}</div>'
            f'<div class="track">'
            f'<div class="fill" style="left:{day.bar_left_pct:.1f}%;'
            f'width:{day.bar_width_pct:.1f}%;'
            f'background:linear-gradient(90deg,{day.bar_color_lo},{day.bar_color_hi});">'
            f'</div></div>'
            f'<div class="hi">{day.high}</div>'
            f'<div class="extra">{day.rain} | {day.wind}</div>'
            f'</div>'
        )

    st.markdown(
        f'<div class="ws-panel">'
        f'<div class="ws-label">\U0001f4c5 {len(view.days)}-DAY FORECAST</div>'
        f'{rows}'
        f'</div>',
        unsafe_allow_html=True,
    )


def render(view: ForecastView) -> None:
    """Replace the forecast area with the given view."""
    if view.placeholder:
        st.info(view.placeholder)
        return
    _render_today(view)
    _render_daily(view)


# ---------------------------------------------------------------------------
# Render: AI summary and chat
# ---------------------------------------------------------------------------

def _render_summary(session: WeatherSession) -> None:
    """Render the AI briefing; AI text goes through markdown without raw HTML."""
    if not session.forecasts:
        return
    st.markdown(
        '<div class="ws-label">\U0001f916 AI SUMMARY</div>',
        unsafe_allow_html=True,
    )
    if session.summary:
        st.markdown(session.summary)
    if st.button("Regenerate summary", key="summary_btn"):
        with st.spinner("Generating AI summary..."):
            session.generate_summary()
        st.rerun()


def _on_chat_submit() -> None:
    """Send the typed question; the input is cleared afterwards."""
    session: WeatherSession = st.session_state.weather_session
    question = st.session_state.get("chat_input", "")
    try:
        session.send_chat(question)
    except ChatBusyError as exc:
        st.session_state.chat_notice = str(exc)
        return
    st.session_state.chat_input = ""


def _render_chat(session: WeatherSession) -> None:
    """Render the chat transcript and question input."""
    if session.location is None:
        return
    st.markdown(
        '<div class="ws-label">\U0001f4ac ASK ABOUT THE WEATHER</div>',
        unsafe_allow_html=True,
    )

    for turn in session.chat.turns:
        if turn.role == "user":
            st.markdown(
                f'<div class="ws-chat-user"><strong>You:</strong> {html.escape(turn.text)}</div>',
                unsafe_allow_html=True,
            )
        else:
            st.markdown(f"**AI:** {turn.text}")

    notice = st.session_state.pop("chat_notice", None)
    if notice:
        st.warning(notice)

    st.text_input(
        "Ask a question",
        key="chat_input",
        placeholder="Will it rain tomorrow? Should I bring a jacket?",
        disabled=session.chat.busy,
    )
    st.button(
        "Ask \u2192",
        key="chat_btn",
        type="primary",
        use_container_width=True,
        disabled=session.chat.busy,
        on_click=_on_chat_submit,
    )


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------

def main():
    """Main Streamlit application entry point."""
    config.configure_logging()
    st.set_page_config(
        page_title="WeatherSensor AI",
        page_icon="\U0001f326\ufe0f",
        layout="centered",
    )
    session = _init_session()

    st.markdown("## \U0001f326\ufe0f WeatherSensor AI")
    if st.session_state.template_error:
        st.warning(st.session_state.template_error)

    _render_location_inputs(session)

    view = session.view
    _inject_css(_get_gradient(view.today))
    if session.location is None:
        st.caption("Search a ZIP code or use your location to see the forecast.")
        return

    render(view)
    _render_summary(session)
    _render_chat(session)


if __name__ == "__main__":
    main()
