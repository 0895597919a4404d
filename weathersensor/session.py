"""Per-page-view controller for location, forecast, summary and chat.

WeatherSession is the single owner of the current Location, its forecast
and the derived context text. The presenter and prompt builder only read
from it. Each user-triggered control gets a request token; a result is
applied only if no newer request for the same control has started, so
the most recent request wins. ZIP lookup and "use my location" share the
"location" control.
"""

from __future__ import annotations

import itertools
import logging
from typing import Callable

from weathersensor import ai_gateway, forecast, geocoding
from weathersensor.chat import ChatSession, ChatTurn
from weathersensor.forecast import DailyForecast
from weathersensor.geocoding import Location
from weathersensor.presenter import ForecastView, build_context_text, build_view
from weathersensor.prompts import PromptBuilder, PromptKind, TemplateUnavailableError

logger = logging.getLogger(__name__)

LOCATION = "location"
SUMMARY = "summary"


class WeatherSession:
    """State and operations for one dashboard session."""

    def __init__(
        self,
        prompt_builder: PromptBuilder,
        query: Callable[[str], str] = ai_gateway.query,
    ):
        self.prompt_builder = prompt_builder
        self.query = query
        self.location: Location | None = None
        self.forecasts: list[DailyForecast] = []
        self.context_text = ""
        self.summary = ""
        self.chat = ChatSession(prompt_builder, query)
        self._counter = itertools.count(1)
        self._latest: dict[str, int] = {}

    # -- request tokens ----------------------------------------------------

    def begin(self, control: str) -> int:
        """Start a request for a control and return its token."""
        token = next(self._counter)
        self._latest[control] = token
        return token

    def is_current(self, control: str, token: int) -> bool:
        return self._latest.get(control) == token

    # -- state updates -----------------------------------------------------

    def apply_location(
        self, token: int, location: Location, forecasts: list[DailyForecast]
    ) -> bool:
        """Install a newly loaded location unless a newer one was requested.

        Regenerates the context text in full and clears the summary and
        the chat transcript, which referred to the previous location.
        """
        if not self.is_current(LOCATION, token):
            logger.info("Discarding stale location result (token %s)", token)
            return False
        self.location = location
        self.forecasts = list(forecasts)
        self.context_text = build_context_text(location, self.forecasts)
        self.summary = ""
        self._latest.pop(SUMMARY, None)
        self.chat.reset()
        return True

    def apply_summary(self, token: int, text: str) -> bool:
        if not self.is_current(SUMMARY, token):
            logger.info("Discarding stale summary (token %s)", token)
            return False
        self.summary = text
        return True

    # -- operations --------------------------------------------------------

    def _load(self, token: int, location: Location) -> bool:
        forecasts = forecast.fetch_forecast(location)
        return self.apply_location(token, location, forecasts)

    def load_from_postal_code(self, code: str) -> bool:
        """Resolve a ZIP code, fetch its forecast and make it current.

        Returns:
            False if a newer location request superseded this one.

        Raises:
            GeocodingError: If the ZIP is malformed or unknown.
            ForecastAPIError: If the forecast cannot be fetched.
        """
        token = self.begin(LOCATION)
        location = geocoding.resolve_from_postal_code(code)
        return self._load(token, location)

    def load_from_device(self, payload: dict | None) -> bool:
        """Use the browser's position, naming it by reverse geocoding.

        Raises:
            DeviceLocationError: If the position could not be obtained.
            ForecastAPIError: If the forecast cannot be fetched.
        """
        token = self.begin(LOCATION)
        location = geocoding.with_place_name(geocoding.resolve_from_device(payload))
        return self._load(token, location)

    def generate_summary(self) -> str:
        """Ask the AI for a briefing of the current forecast.

        Returns the text now shown as the summary (possibly an error
        message). Does nothing when there is no forecast to summarize.
        """
        if not self.forecasts:
            return self.summary
        token = self.begin(SUMMARY)
        try:
            prompt = self.prompt_builder.build(PromptKind.SUMMARY, self.context_text)
        except TemplateUnavailableError as exc:
            logger.warning("Summary prompt unavailable: %s", exc)
            text = f"Error: {exc}"
        else:
            text = self.query(prompt)
        self.apply_summary(token, text)
        return self.summary

    @property
    def view(self) -> ForecastView:
        return build_view(self.location, self.forecasts)

    def send_chat(self, message: str) -> ChatTurn | None:
        """Send a chat message grounded on the current context text."""
        return self.chat.send(message, self.context_text)
