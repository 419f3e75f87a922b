"""Optional request parameters accepted by the image request endpoint."""

from __future__ import annotations

from typing import Mapping
from urllib.parse import urlencode

DEFAULT_LOCALE = "en-US"

LOCALE_KEY = "image_request[locale]"
LANGUAGE_KEY = "image_request[language]"
DEVICE_ID_KEY = "image_request[device_id]"
LATITUDE_KEY = "image_request[latitude]"
LONGITUDE_KEY = "image_request[longitude]"
ALTITUDE_KEY = "image_request[altitude]"
TTL_KEY = "image_request[ttl]"
REMOTE_IMAGE_URL_KEY = "image_request[remote_image_url]"
FOCUS_X_KEY = "focus[x]"
FOCUS_Y_KEY = "focus[y]"


def format_number(value: float | int) -> str:
    """Render a number the way the API expects it (``50.0`` becomes ``"50"``)."""
    if isinstance(value, bool):
        raise TypeError("boolean is not a valid numeric parameter")
    if isinstance(value, int):
        return str(value)
    number = float(value)
    if number.is_integer() and abs(number) < 1e21:
        return str(int(number))
    return repr(number)


def encode_params(params: Mapping[str, str]) -> str:
    """Form-encode parameters with keys in sorted order."""
    return urlencode(sorted(params.items()))


class Params(dict):
    """Mapping of additional API parameters with validating setters."""

    def set_locale(self, locale: str) -> None:
        """Set the locale of the request. Default is ``en-US``."""
        self[LOCALE_KEY] = locale

    def set_language(self, language: str) -> None:
        """Set the language the annotation is returned in. Default is ``en``."""
        self[LANGUAGE_KEY] = language

    def set_device_id(self, device_id: str) -> None:
        """Set a unique identifier of the device sending the request, ideally a UUID."""
        self[DEVICE_ID_KEY] = device_id

    def set_latitude(self, latitude: float) -> None:
        _check_latitude(latitude)
        self[LATITUDE_KEY] = format_number(latitude)

    def set_longitude(self, longitude: float) -> None:
        _check_longitude(longitude)
        self[LONGITUDE_KEY] = format_number(longitude)

    def set_altitude(self, altitude: float) -> None:
        self[ALTITUDE_KEY] = format_number(altitude)

    def set_position(self, latitude: float, longitude: float, altitude: float) -> None:
        """Set the full geolocation context. Nothing is written if a coordinate is invalid."""
        _check_latitude(latitude)
        _check_longitude(longitude)
        self.set_latitude(latitude)
        self.set_longitude(longitude)
        self.set_altitude(altitude)

    def set_ttl(self, ttl: int) -> None:
        """Set the deadline in seconds before the job expires.

        Use a high value for low-priority requests, or :meth:`set_max_ttl`
        for the longest deadline the API allows.
        """
        if isinstance(ttl, bool) or not isinstance(ttl, int):
            raise ValueError(f"invalid ttl: {ttl!r}, should be an integer")
        if ttl <= 0:
            raise ValueError(f"invalid ttl: {ttl}, should be greater than 0")
        self[TTL_KEY] = str(ttl)

    def set_max_ttl(self) -> None:
        self[TTL_KEY] = "max"

    def set_focus_relative(self, x: float, y: float) -> None:
        """Set a focal point using relative coordinates (0.0 through 1.0).

        The point uses north-west gravity, so ``(0.0, 0.0)`` is the upper-left
        corner. When the image holds several identifiable objects the API
        favours the ones closest to the focal point.
        """
        if not 0.0 <= x <= 1.0:
            raise ValueError(f"invalid focus X parameter: {x}, should be [0.0, 1.0]")
        if not 0.0 <= y <= 1.0:
            raise ValueError(f"invalid focus Y parameter: {y}, should be [0.0, 1.0]")
        self[FOCUS_X_KEY] = format_number(x)
        self[FOCUS_Y_KEY] = format_number(y)

    def set_focus_absolute(self, x: int, y: int) -> None:
        """Set a focal point in pixels, e.g. 0 through 400 on a 400x400 image."""
        if x < 0:
            raise ValueError(f"invalid focus X parameter: {x}, should be greater or equal to 0")
        if y < 0:
            raise ValueError(f"invalid focus Y parameter: {y}, should be greater or equal to 0")
        self[FOCUS_X_KEY] = format_number(int(x))
        self[FOCUS_Y_KEY] = format_number(int(y))

    def with_defaults(self, locale: str = DEFAULT_LOCALE) -> "Params":
        """Return a copy with the locale filled in when none was set."""
        merged = Params(self)
        merged.setdefault(LOCALE_KEY, locale)
        return merged

    def encode(self) -> str:
        return encode_params(self)


def _check_latitude(latitude: float) -> None:
    if not -90.0 <= latitude <= 90.0:
        raise ValueError(f"invalid latitude: {latitude}")


def _check_longitude(longitude: float) -> None:
    if not -180.0 <= longitude <= 180.0:
        raise ValueError(f"invalid longitude: {longitude}")


__all__ = ["Params", "DEFAULT_LOCALE", "encode_params", "format_number"]
