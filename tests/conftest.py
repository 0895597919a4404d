"""Shared test fixtures for geocoding, forecast and prompt data."""

import json

import pytest

from weathersensor.geocoding import Location
from weathersensor.prompts import PromptBuilder, PromptTemplates


@pytest.fixture()
def zip_response():
    """Sample Zippopotam.us response for 66044 (Lawrence, KS)."""
    return {
        "post code": "66044",
        "country": "United States",
        "country abbreviation": "US",
        "places": [
            {
                "place name": "Lawrence",
                "longitude": "-95.2316",
                "state": "Kansas",
                "state abbreviation": "KS",
                "latitude": "39.0288",
            }
        ],
    }


@pytest.fixture()
def single_day_response():
    """Open-Meteo daily response with one day."""
    return {
        "latitude": 39.03,
        "longitude": -95.23,
        "timezone": "America/Chicago",
        "daily": {
            "time": ["2025-12-07"],
            "temperature_2m_max": [45],
            "temperature_2m_min": [28],
            "precipitation_sum": [0],
            "wind_speed_10m_max": [10],
        },
    }


@pytest.fixture()
def week_response():
    """Open-Meteo daily response with three days and one null value."""
    return {
        "daily": {
            "time": ["2025-12-07", "2025-12-08", "2025-12-09"],
            "temperature_2m_max": [45.0, 52.3, 38.1],
            "temperature_2m_min": [28.0, 33.4, 21.0],
            "precipitation_sum": [0.0, 0.25, None],
            "wind_speed_10m_max": [10.0, 14.2, 22.5],
        },
    }


@pytest.fixture()
def empty_response():
    """Open-Meteo response with no days."""
    return {
        "daily": {
            "time": [],
            "temperature_2m_max": [],
            "temperature_2m_min": [],
            "precipitation_sum": [],
            "wind_speed_10m_max": [],
        },
    }


@pytest.fixture()
def lawrence():
    return Location(latitude=39.0288, longitude=-95.2316, place_name="Lawrence, KS")


@pytest.fixture()
def templates():
    return PromptTemplates(
        summary_prompt="Summarize this forecast:\n",
        chat_prompt="Answer the weather question.\n",
    )


@pytest.fixture()
def prompt_builder(templates):
    return PromptBuilder(templates)


@pytest.fixture()
def prompts_file(tmp_path):
    """Write a prompt configuration document and return its path."""
    path = tmp_path / "prompts.json"
    path.write_text(
        json.dumps({"summary_prompt": "Summary: ", "chat_prompt": "Chat: "}),
        encoding="utf-8",
    )
    return path
