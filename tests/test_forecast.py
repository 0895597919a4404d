"""Tests for the Open-Meteo forecast client."""

import time
from datetime import date

import httpx
import pytest
import respx

from weathersensor import config
from weathersensor.forecast import (
    DailyForecast,
    ForecastAPIError,
    fetch_forecast,
    parse_daily,
    parse_local_date,
)

FORECAST_URL = f"{config.OPEN_METEO_BASE_URL}/forecast"


class TestFetchForecastSuccess:
    """Test successful forecast retrieval."""

    @respx.mock
    def test_single_day(self, lawrence, single_day_response):
        respx.get(FORECAST_URL).mock(
            return_value=httpx.Response(200, json=single_day_response)
        )

        result = fetch_forecast(lawrence)

        assert result == [
            DailyForecast(
                date=date(2025, 12, 7),
                high_temp=45.0,
                low_temp=28.0,
                precipitation=0.0,
                wind_speed=10.0,
            )
        ]

    @respx.mock
    def test_requests_imperial_units_and_local_timezone(self, lawrence, single_day_response):
        route = respx.get(FORECAST_URL).mock(
            return_value=httpx.Response(200, json=single_day_response)
        )

        fetch_forecast(lawrence)

        params = route.calls.last.request.url.params
        assert params["latitude"] == "39.0288"
        assert params["longitude"] == "-95.2316"
        assert params["timezone"] == "auto"
        assert params["temperature_unit"] == "fahrenheit"
        assert params["wind_speed_unit"] == "mph"
        assert params["precipitation_unit"] == "inch"
        assert params["daily"] == (
            "temperature_2m_max,temperature_2m_min,precipitation_sum,wind_speed_10m_max"
        )
        assert params["forecast_days"] == "7"

    @respx.mock
    def test_multiple_days_with_null(self, lawrence, week_response):
        respx.get(FORECAST_URL).mock(return_value=httpx.Response(200, json=week_response))

        result = fetch_forecast(lawrence)

        assert [f.date for f in result] == [
            date(2025, 12, 7),
            date(2025, 12, 8),
            date(2025, 12, 9),
        ]
        assert result[1].precipitation == 0.25
        assert result[2].precipitation is None

    @respx.mock
    def test_empty_days_returns_empty_list(self, lawrence, empty_response):
        respx.get(FORECAST_URL).mock(return_value=httpx.Response(200, json=empty_response))

        assert fetch_forecast(lawrence) == []


class TestFetchForecastErrors:
    """Test error handling in the forecast client."""

    @respx.mock
    def test_server_error_raises(self, lawrence):
        respx.get(FORECAST_URL).mock(return_value=httpx.Response(503))

        with pytest.raises(ForecastAPIError, match="HTTP 503"):
            fetch_forecast(lawrence)

    @respx.mock
    def test_server_error_is_not_retried(self, lawrence):
        route = respx.get(FORECAST_URL).mock(return_value=httpx.Response(500))

        with pytest.raises(ForecastAPIError):
            fetch_forecast(lawrence)

        assert route.call_count == 1

    @respx.mock
    def test_timeout_raises(self, lawrence):
        respx.get(FORECAST_URL).mock(side_effect=httpx.ReadTimeout("slow"))

        with pytest.raises(ForecastAPIError, match="timed out"):
            fetch_forecast(lawrence)

    @respx.mock
    def test_invalid_json_raises(self, lawrence):
        respx.get(FORECAST_URL).mock(return_value=httpx.Response(200, text="not json"))

        with pytest.raises(ForecastAPIError, match="invalid JSON"):
            fetch_forecast(lawrence)

    @respx.mock
    def test_missing_daily_block_raises(self, lawrence):
        respx.get(FORECAST_URL).mock(
            return_value=httpx.Response(200, json={"error": True, "reason": "bad"})
        )

        with pytest.raises(ForecastAPIError, match="format"):
            fetch_forecast(lawrence)


class TestParseDaily:
    """Test parsing of the daily block directly."""

    def test_sorted_by_date(self):
        data = {
            "daily": {
                "time": ["2025-12-09", "2025-12-07"],
                "temperature_2m_max": [40, 45],
                "temperature_2m_min": [20, 28],
                "precipitation_sum": [0, 0],
                "wind_speed_10m_max": [5, 10],
            }
        }

        result = parse_daily(data)

        assert [f.date.day for f in result] == [7, 9]
        assert result[0].high_temp == 45.0

    def test_short_columns_yield_none(self):
        data = {"daily": {"time": ["2025-12-07"], "temperature_2m_max": [45]}}

        result = parse_daily(data)

        assert result[0].high_temp == 45.0
        assert result[0].low_temp is None
        assert result[0].wind_speed is None

    def test_bad_date_raises(self):
        with pytest.raises(ForecastAPIError):
            parse_daily({"daily": {"time": ["not-a-date"]}})


class TestParseLocalDate:
    """Dates must be local calendar dates, never shifted by UTC offset."""

    def test_basic(self):
        result = parse_local_date("2025-12-07")
        assert (result.year, result.month, result.day) == (2025, 12, 7)

    @pytest.mark.parametrize(
        "tz", ["UTC", "America/Los_Angeles", "Pacific/Honolulu", "Asia/Tokyo", "Pacific/Kiritimati"]
    )
    def test_same_day_in_every_timezone(self, tz, monkeypatch):
        if not hasattr(time, "tzset"):
            pytest.skip("time.tzset is not available on this platform")
        monkeypatch.setenv("TZ", tz)
        time.tzset()
        try:
            result = parse_local_date("2025-12-07")
        finally:
            monkeypatch.undo()
            time.tzset()

        assert (result.year, result.month, result.day) == (2025, 12, 7)
        assert result.strftime("%A") == "Sunday"
