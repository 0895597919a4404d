"""Centralized configuration loaded from environment variables.

All settings are read from environment variables with sensible defaults.
A local .env file is loaded first so the dashboard and the AI proxy can
share one set of settings during development. The Anthropic key is read
lazily, and Streamlit secrets are checked for Streamlit Cloud deployments.
"""

import logging
import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()


def get_anthropic_api_key() -> str:
    """Get the Anthropic API key lazily so st.secrets is ready.

    Must be called at runtime (not import time) because Streamlit
    Cloud only makes st.secrets available after the app starts.
    """
    try:
        import streamlit as st
        if hasattr(st, "secrets") and "ANTHROPIC_API_KEY" in st.secrets:
            return str(st.secrets["ANTHROPIC_API_KEY"])
    except Exception:
        pass
    return os.environ.get("ANTHROPIC_API_KEY", "")


def _get_int(key: str, default: int) -> int:
    """Read an integer environment variable with a default."""
    return int(os.environ.get(key, str(default)))


def configure_logging() -> None:
    """Set up root logging once for whichever process imports us."""
    logging.basicConfig(level=LOG_LEVEL, format=LOG_FORMAT)


# Forecast (Open-Meteo)
OPEN_METEO_BASE_URL: str = os.environ.get(
    "OPEN_METEO_BASE_URL", "https://api.open-meteo.com/v1"
)
FORECAST_DAYS: int = _get_int("FORECAST_DAYS", 7)
FORECAST_REQUEST_TIMEOUT: int = _get_int("FORECAST_REQUEST_TIMEOUT", 15)

# Postal-code geocoding (Zippopotam)
ZIP_API_BASE_URL: str = os.environ.get("ZIP_API_BASE_URL", "https://api.zippopotam.us")
ZIP_COUNTRY: str = os.environ.get("ZIP_COUNTRY", "us")
ZIP_REQUEST_TIMEOUT: int = _get_int("ZIP_REQUEST_TIMEOUT", 10)

# Reverse geocoding (Nominatim)
NOMINATIM_USER_AGENT: str = os.environ.get("NOMINATIM_USER_AGENT", "weathersensor-ai")
NOMINATIM_TIMEOUT: int = _get_int("NOMINATIM_TIMEOUT", 10)

# Prompt templates
PROMPTS_PATH: Path = Path(
    os.environ.get("PROMPTS_PATH", str(Path(__file__).with_name("prompts.json")))
)

# AI proxy, as seen from the dashboard
AI_PROXY_URL: str = os.environ.get("AI_PROXY_URL", "http://localhost:5173/api/gemini")
AI_REQUEST_TIMEOUT: int = _get_int("AI_REQUEST_TIMEOUT", 60)

# AI proxy server: model and tokens from env vars, key is lazy via function
ANTHROPIC_MODEL: str = os.environ.get("ANTHROPIC_MODEL", "claude-sonnet-4-20250514")
AI_MAX_TOKENS: int = _get_int("AI_MAX_TOKENS", 1024)
PROXY_HOST: str = os.environ.get("PROXY_HOST", "127.0.0.1")
PROXY_PORT: int = _get_int("PROXY_PORT", 5173)

# Logging
LOG_LEVEL: str = os.environ.get("LOG_LEVEL", "INFO").upper()
LOG_FORMAT = "[%(asctime)s] %(levelname)s: %(message)s"
