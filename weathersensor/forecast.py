"""Open-Meteo client for multi-day daily forecasts.

Requests high/low temperature, precipitation sum and max wind speed per day
in imperial units, with timezone=auto so the days line up with the
location's local calendar. No API key is required.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date

import httpx

from weathersensor import config
from weathersensor.geocoding import Location

logger = logging.getLogger(__name__)


class ForecastAPIError(Exception):
    """Raised when the forecast API returns an error or unexpected response."""


@dataclass(frozen=True)
class DailyForecast:
    """One calendar day of aggregated forecast values.

    Attributes:
        date: Local calendar date at the forecast location.
        high_temp: Daily maximum temperature (F).
        low_temp: Daily minimum temperature (F).
        precipitation: Precipitation sum (inches).
        wind_speed: Maximum 10 m wind speed (mph).

    Metric fields are None when the API had no value for that day.
    """

    date: date
    high_temp: float | None
    low_temp: float | None
    precipitation: float | None
    wind_speed: float | None


DAILY_FIELDS = (
    "temperature_2m_max",
    "temperature_2m_min",
    "precipitation_sum",
    "wind_speed_10m_max",
)


def parse_local_date(value: str) -> date:
    """Parse "YYYY-MM-DD" as a local calendar date.

    The string is never interpreted as a UTC instant, so the day cannot
    shift when the viewer is east or west of UTC.
    """
    return date.fromisoformat(value.strip()[:10])


def _value_at(values: list, index: int) -> float | None:
    """Return values[index] as a float, or None if absent or null."""
    if index >= len(values) or values[index] is None:
        return None
    return float(values[index])


def _request(params: dict) -> dict:
    """GET the forecast endpoint and return parsed JSON.

    Raises:
        ForecastAPIError: On HTTP errors, timeouts, or invalid JSON.
    """
    try:
        response = httpx.get(
            f"{config.OPEN_METEO_BASE_URL}/forecast",
            params=params,
            timeout=config.FORECAST_REQUEST_TIMEOUT,
        )
    except httpx.TimeoutException:
        raise ForecastAPIError("Request to the forecast service timed out. Please try again.")
    except httpx.HTTPError as exc:
        raise ForecastAPIError(f"HTTP error communicating with the forecast service: {exc}")

    if response.status_code != 200:
        raise ForecastAPIError(
            f"Unexpected response from the forecast service (HTTP {response.status_code})."
        )

    try:
        return response.json()
    except ValueError:
        raise ForecastAPIError("Received invalid JSON from the forecast service.")


def parse_daily(data: dict) -> list[DailyForecast]:
    """Parse the "daily" block of an Open-Meteo response."""
    try:
        daily = data["daily"]
        days = daily.get("time") or []
        columns = [daily.get(name) or [] for name in DAILY_FIELDS]
    except (KeyError, TypeError, AttributeError):
        raise ForecastAPIError("Unexpected forecast response format.")

    forecasts = []
    try:
        for i, day in enumerate(days):
            high, low, rain, wind = (_value_at(col, i) for col in columns)
            forecasts.append(
                DailyForecast(
                    date=parse_local_date(day),
                    high_temp=high,
                    low_temp=low,
                    precipitation=rain,
                    wind_speed=wind,
                )
            )
    except (TypeError, ValueError, AttributeError):
        raise ForecastAPIError("Forecast response contained unreadable values.")

    return sorted(forecasts, key=lambda f: f.date)


def fetch_forecast(location: Location) -> list[DailyForecast]:
    """Fetch the daily forecast for a location.

    Args:
        location: Where to forecast.

    Returns:
        One DailyForecast per day, ascending by date; the first entry is
        today in the location's time zone. Empty when the API has no data.

    Raises:
        ForecastAPIError: On API communication errors.
    """
    params = {
        "latitude": round(location.latitude, 4),
        "longitude": round(location.longitude, 4),
        "daily": ",".join(DAILY_FIELDS),
        "timezone": "auto",
        "temperature_unit": "fahrenheit",
        "wind_speed_unit": "mph",
        "precipitation_unit": "inch",
        "forecast_days": config.FORECAST_DAYS,
    }
    forecasts = parse_daily(_request(params))
    if not forecasts:
        logger.warning(
            "No daily forecast data for %s,%s", location.latitude, location.longitude
        )
    return forecasts
