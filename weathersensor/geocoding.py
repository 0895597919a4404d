"""Location resolution: device GPS, US ZIP codes, and reverse geocoding.

Three ways to get a Location:
1. The browser's geolocation result (GPS), passed in as a payload
2. Zippopotam.us for 5-digit US ZIP codes (via httpx)
3. Nominatim reverse geocoding (via geopy) to name a coordinate pair

Reverse geocoding is cosmetic: it never raises, it returns "" instead.
"""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass, replace

import httpx
from geopy.exc import GeopyError
from geopy.geocoders import Nominatim

from weathersensor import config

logger = logging.getLogger(__name__)


class GeocodingError(Exception):
    """Raised when a location cannot be resolved to coordinates."""


class InvalidInputError(GeocodingError):
    """Raised when the user input is malformed (e.g. not a 5-digit ZIP)."""


class NotFoundError(GeocodingError):
    """Raised when the postal-code service has no match for the input."""


class DeviceLocationError(GeocodingError):
    """Raised when the device position could not be obtained."""


class PermissionDeniedError(DeviceLocationError):
    """Raised when the user refused to share their position."""


class LocationUnavailableError(DeviceLocationError):
    """Raised when the host has no usable location capability."""


class LocationTimeoutError(DeviceLocationError):
    """Raised when the device did not report a position in time."""


@dataclass(frozen=True)
class Location:
    """A resolved geographic location with coordinates.

    Attributes:
        latitude: Decimal latitude.
        longitude: Decimal longitude.
        place_name: Human-readable place name, empty when unknown.
    """

    latitude: float
    longitude: float
    place_name: str = ""


# ASCII digits only; str patterns let \d match any Unicode digit
_ZIP_PATTERN = re.compile(r"[0-9]{5}")

# W3C GeolocationPositionError codes
_DEVICE_ERRORS: dict[int, tuple[type[DeviceLocationError], str]] = {
    1: (PermissionDeniedError, "Location permission was denied."),
    2: (LocationUnavailableError, "Your device could not determine its position."),
    3: (LocationTimeoutError, "Timed out waiting for your device's position."),
}

_LOCALITY_KEYS = ("city", "town", "village", "hamlet", "municipality", "locality", "county")


def _valid_coordinates(lat: float, lon: float) -> bool:
    """Check that a coordinate pair is finite and on the globe."""
    return (
        math.isfinite(lat)
        and math.isfinite(lon)
        and -90.0 <= lat <= 90.0
        and -180.0 <= lon <= 180.0
    )


def resolve_from_device(payload: dict | None) -> Location:
    """Turn the browser's geolocation result into a Location.

    Args:
        payload: What the browser reported, either
            {"coords": {"latitude": ..., "longitude": ...}} or
            {"error": {"code": 1|2|3, "message": "..."}}.

    Returns:
        Location without a place name.

    Raises:
        PermissionDeniedError: Error code 1.
        LocationUnavailableError: Error code 2, or no usable payload.
        LocationTimeoutError: Error code 3.
    """
    if not isinstance(payload, dict):
        raise LocationUnavailableError("Geolocation is not supported by this browser.")

    error = payload.get("error")
    if error:
        code = error.get("code") if isinstance(error, dict) else None
        exc_cls, message = _DEVICE_ERRORS.get(
            code, (LocationUnavailableError, "Failed to get your location.")
        )
        raise exc_cls(message)

    coords = payload.get("coords")
    try:
        lat = float(coords["latitude"])
        lon = float(coords["longitude"])
    except (KeyError, TypeError, ValueError):
        raise LocationUnavailableError("Your browser returned an unreadable position.")

    if not _valid_coordinates(lat, lon):
        raise LocationUnavailableError("Your browser returned an invalid position.")
    return Location(latitude=lat, longitude=lon)


def resolve_from_postal_code(code: str) -> Location:
    """Look up a 5-digit US ZIP code with Zippopotam.us.

    Args:
        code: The ZIP code as typed by the user.

    Returns:
        Location named "<place name>, <state abbreviation>".

    Raises:
        InvalidInputError: If the code is not exactly five digits.
        NotFoundError: If the service has no match or cannot be reached.
    """
    code = (code or "").strip()
    if not _ZIP_PATTERN.fullmatch(code):
        raise InvalidInputError("Please enter a valid 5-digit ZIP code.")

    url = f"{config.ZIP_API_BASE_URL}/{config.ZIP_COUNTRY}/{code}"
    try:
        response = httpx.get(url, timeout=config.ZIP_REQUEST_TIMEOUT)
    except httpx.HTTPError as exc:
        logger.warning("ZIP lookup for %s failed: %s", code, exc)
        raise NotFoundError(f"ZIP code {code} could not be looked up right now.")

    if response.status_code != 200:
        raise NotFoundError(f"ZIP code {code} not found.")

    try:
        place = response.json()["places"][0]
        lat = float(place["latitude"])
        lon = float(place["longitude"])
    except (ValueError, KeyError, IndexError, TypeError):
        raise NotFoundError(f"ZIP code {code} not found.")

    if not _valid_coordinates(lat, lon):
        raise NotFoundError(f"ZIP code {code} returned invalid coordinates.")

    parts = [place.get("place name", ""), place.get("state abbreviation", "")]
    return Location(
        latitude=lat,
        longitude=lon,
        place_name=", ".join(p for p in parts if p),
    )


def build_place_name(address: dict) -> str:
    """Build "<locality>, <state>, <country>" from a Nominatim address block.

    The locality is the first of city, town, village, or a more generic
    locality name. Missing parts are skipped.
    """
    locality = next((address[k] for k in _LOCALITY_KEYS if address.get(k)), "")
    parts = [locality, address.get("state", ""), address.get("country", "")]
    return ", ".join(p for p in parts if p)


def reverse_geocode(latitude: float, longitude: float) -> str:
    """Name a coordinate pair with Nominatim. Returns "" on any failure."""
    try:
        geolocator = Nominatim(
            user_agent=config.NOMINATIM_USER_AGENT,
            timeout=config.NOMINATIM_TIMEOUT,
        )
        result = geolocator.reverse((latitude, longitude), exactly_one=True, language="en")
        if result is None:
            return ""
        return build_place_name(result.raw.get("address") or {})
    except (GeopyError, ValueError, KeyError, TypeError, AttributeError) as exc:
        logger.warning("Reverse geocoding %s,%s failed: %s", latitude, longitude, exc)
    return ""


def with_place_name(location: Location) -> Location:
    """Fill in a missing place name by reverse geocoding (best-effort)."""
    if location.place_name:
        return location
    name = reverse_geocode(location.latitude, location.longitude)
    return replace(location, place_name=name)
