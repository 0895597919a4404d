"""Display model and AI context text for a loaded forecast.

Everything here is pure: the Streamlit layer in app.py turns a
ForecastView into markup, and build_context_text produces the flattened
text the AI prompts are grounded on.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from weathersensor.forecast import DailyForecast
from weathersensor.geocoding import Location

NO_DATA_MESSAGE = "No daily data available."


@dataclass(frozen=True)
class DayCard:
    """One rendered forecast day.

    Attributes:
        weekday: Full weekday name (e.g. "Sunday").
        date_label: US-style date without padding (e.g. "12/7/2025").
        high: Formatted high temperature (e.g. "45°F").
        low: Formatted low temperature.
        rain: Formatted precipitation (e.g. "0in").
        wind: Formatted wind speed (e.g. "10 mph").
        icon: Emoji summarizing the day.
        bar_left_pct: Temperature bar offset within the week's range.
        bar_width_pct: Temperature bar width within the week's range.
        bar_color_lo: CSS color for the low end of the bar.
        bar_color_hi: CSS color for the high end of the bar.
    """

    weekday: str
    date_label: str
    high: str
    low: str
    rain: str
    wind: str
    icon: str
    bar_left_pct: float = 0.0
    bar_width_pct: float = 100.0
    bar_color_lo: str = "rgba(255,255,255,0.3)"
    bar_color_hi: str = "rgba(255,255,255,0.3)"


@dataclass(frozen=True)
class ForecastView:
    """Everything the dashboard shows for one location.

    Attributes:
        place_name: Heading for the today card, may be empty.
        today: Highlight card for the first forecast day.
        days: One card per forecast day, in date order.
        placeholder: Message shown instead of cards when there is no data.
    """

    place_name: str
    today: DayCard | None = None
    days: list[DayCard] = field(default_factory=list)
    placeholder: str = ""


def format_number(value: float | None) -> str:
    """Shortest readable form of a number: 45, 0, 0.25; "n/a" for None."""
    if value is None:
        return "n/a"
    return f"{value:g}"


def format_date(forecast: DailyForecast) -> str:
    """Format the forecast date as M/D/YYYY."""
    d = forecast.date
    return f"{d.month}/{d.day}/{d.year}"


def format_weekday(forecast: DailyForecast) -> str:
    """Return the full weekday name of the forecast date."""
    return forecast.date.strftime("%A")


def format_context_line(forecast: DailyForecast) -> str:
    """One context line, e.g. "Sunday (12/7/2025): High 45°F Low 28°F, ..."."""
    return (
        f"{format_weekday(forecast)} ({format_date(forecast)}): "
        f"High {format_number(forecast.high_temp)}°F "
        f"Low {format_number(forecast.low_temp)}°F, "
        f"Rain {format_number(forecast.precipitation)}in, "
        f"Wind {format_number(forecast.wind_speed)} mph"
    )


def build_context_text(location: Location | None, forecasts: list[DailyForecast]) -> str:
    """Flatten a location and its forecast into AI context text.

    The place name (when known) comes first, then one line per day.
    Identical inputs always give identical text.
    """
    lines = []
    if location is not None and location.place_name:
        lines.append(location.place_name)
    lines.extend(format_context_line(f) for f in forecasts)
    return "\n".join(lines)


# ---------------------------------------------------------------------------
# Temperature color mapping (Apple Weather style)
# ---------------------------------------------------------------------------

def temp_to_color(temp_f: float) -> str:
    """Map a temperature (F) to an Apple Weather-style CSS color."""
    if temp_f <= 10:
        return "#4a148c"  # frigid
    if temp_f <= 32:
        return "#5c6bc0"  # freezing
    if temp_f <= 50:
        return "#42a5f5"
    if temp_f <= 65:
        return "#26c6da"
    if temp_f <= 75:
        return "#66bb6a"  # comfortable
    if temp_f <= 85:
        return "#ffca28"
    if temp_f <= 95:
        return "#ff7043"
    return "#ef5350"  # extreme heat


def _day_icon(forecast: DailyForecast) -> str:
    """Pick an emoji from rain, wind and temperature."""
    rain = forecast.precipitation or 0.0
    high = forecast.high_temp
    if rain >= 0.1:
        if high is not None and high <= 32:
            return "\U0001f328\ufe0f"
        return "\U0001f327\ufe0f"
    if rain > 0:
        return "\U0001f326\ufe0f"
    if (forecast.wind_speed or 0.0) >= 25:
        return "\U0001f32c\ufe0f"
    return "\u2600\ufe0f"


def _bar_geometry(
    forecast: DailyForecast, global_min: float, global_max: float
) -> dict:
    """Position a day's temperature bar within the week's overall range."""
    spread = max(global_max - global_min, 1)
    lo = forecast.low_temp if forecast.low_temp is not None else global_min
    hi = forecast.high_temp if forecast.high_temp is not None else global_max
    return {
        "bar_left_pct": ((lo - global_min) / spread) * 100,
        "bar_width_pct": max(((hi - lo) / spread) * 100, 3),
        "bar_color_lo": temp_to_color(lo),
        "bar_color_hi": temp_to_color(hi),
    }


def _make_card(forecast: DailyForecast, bars: dict) -> DayCard:
    return DayCard(
        weekday=format_weekday(forecast),
        date_label=format_date(forecast),
        high=f"{format_number(forecast.high_temp)}°F",
        low=f"{format_number(forecast.low_temp)}°F",
        rain=f"{format_number(forecast.precipitation)}in",
        wind=f"{format_number(forecast.wind_speed)} mph",
        icon=_day_icon(forecast),
        **bars,
    )


def build_view(location: Location | None, forecasts: list[DailyForecast]) -> ForecastView:
    """Build the today highlight and per-day list for a forecast.

    Returns a view with a placeholder message and no cards when the
    forecast is empty.
    """
    place_name = location.place_name if location is not None else ""
    if not forecasts:
        return ForecastView(place_name=place_name, placeholder=NO_DATA_MESSAGE)

    lows = [f.low_temp for f in forecasts if f.low_temp is not None]
    highs = [f.high_temp for f in forecasts if f.high_temp is not None]

    cards = []
    for forecast in forecasts:
        bars = _bar_geometry(forecast, min(lows), max(highs)) if lows and highs else {}
        cards.append(_make_card(forecast, bars))

    return ForecastView(place_name=place_name, today=cards[0], days=cards)
