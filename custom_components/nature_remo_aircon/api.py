"""API client for the Nature Remo cloud.

This module provides functions to interact with the Nature Remo API,
including appliance and device listing, settings writes and response
validation.
"""

import logging
from typing import Any

import httpx
from homeassistant.core import HomeAssistant
from homeassistant.helpers.httpx_client import create_async_httpx_client
from httpx_retries import Retry, RetryTransport

from .const import BASE_URL, SENSOR_HUMIDITY, SENSOR_TEMPERATURE, USER_AGENT
from .models import (
    AirconCapability,
    AirconSettings,
    ApplianceRecord,
    DeviceReading,
    ModeRange,
)

_LOGGER = logging.getLogger(__name__)

# HTTP status codes
HTTP_BAD_REQUEST = 400
HTTP_UNAUTHORIZED = 401

# Error codes carried in the body of a rejected request
API_CODE_UNAUTHORIZED = 401001


class NatureRemoApiClientError(Exception):
    """Base exception for Nature Remo API client errors."""


class NatureRemoApiAuthError(NatureRemoApiClientError):
    """Exception raised for authentication errors."""


class NatureRemoConnectionError(NatureRemoApiClientError):
    """Exception raised when the request did not reach the API."""


class NatureRemoParseError(NatureRemoApiClientError):
    """Exception raised for empty or malformed response bodies."""


class NatureRemoRejectedError(NatureRemoApiClientError):
    """Exception raised when the API answers with an error code.

    Attributes:
        code: Error code reported by the API.

    """

    def __init__(self, message: str, code: int | str | None = None) -> None:
        super().__init__(message)
        self.code = code


def create_headers(access_token: str | None = None) -> dict[str, str]:
    """Create HTTP headers for Nature Remo API requests.

    Args:
        access_token: Optional OAuth access token to include in headers.

    Returns:
        Dictionary containing HTTP headers for API requests.

    """
    headers = {
        "accept": "application/json",
        "user-agent": USER_AGENT,
    }
    if access_token:
        headers["authorization"] = f"Bearer {access_token}"
    return headers


def is_http_error(status: int) -> bool:
    """Check if HTTP status code indicates an error."""
    return status >= HTTP_BAD_REQUEST


def is_auth_error(status: int) -> bool:
    """Check if HTTP status code indicates authentication error."""
    return status == HTTP_UNAUTHORIZED


def is_api_error(data: Any) -> bool:  # noqa: ANN401
    """Check if a parsed body carries an error code.

    The API answers unsupported values (e.g. a temperature outside the
    range of the current mode) with a regular body holding ``code``.

    Args:
        data: Parsed response body.

    Returns:
        True if the body is an object with a ``code`` field, False otherwise.

    """
    return isinstance(data, dict) and "code" in data


def is_auth_api_error(data: Any) -> bool:  # noqa: ANN401
    """Check if a parsed body carries the unauthorized error code."""
    return is_api_error(data) and data.get("code") == API_CODE_UNAUTHORIZED


def parse_body(response: httpx.Response) -> Any:  # noqa: ANN401
    """Parse the JSON body of a response.

    Raises:
        NatureRemoParseError: If the body is empty, null or not JSON.

    """
    if not response.content:
        error_msg = "Empty response body"
        raise NatureRemoParseError(error_msg)

    try:
        data = response.json()
    except ValueError as err:
        error_msg = f"Invalid JSON response: {err}"
        raise NatureRemoParseError(error_msg) from err

    if data is None:
        error_msg = "Empty response body"
        raise NatureRemoParseError(error_msg)
    return data


def validate_response(response: httpx.Response) -> Any:  # noqa: ANN401
    """Validate HTTP response and return parsed JSON data.

    Args:
        response: HTTP response object to validate.

    Returns:
        Parsed JSON data from response.

    Raises:
        NatureRemoApiAuthError: If authentication error is detected.
        NatureRemoRejectedError: If the body carries an error code.
        NatureRemoParseError: If the body is empty or malformed.
        NatureRemoApiClientError: If any other HTTP error is detected.

    """
    _validate_http_status(response)
    data = parse_body(response)
    _validate_api_status(data)
    return data


def _validate_http_status(response: httpx.Response) -> None:
    if not is_http_error(response.status_code):
        return

    if is_auth_error(response.status_code):
        auth_error = "Authentication error"
        raise NatureRemoApiAuthError(auth_error)

    try:
        data = parse_body(response)
    except NatureRemoParseError:
        data = None
    _validate_api_status(data)

    client_error = f"Request failed: {response.status_code}"
    raise NatureRemoApiClientError(client_error)


def _validate_api_status(data: Any) -> None:  # noqa: ANN401
    if not is_api_error(data):
        return

    error_message = data.get("message") or "Unknown API error"

    if is_auth_api_error(data):
        raise NatureRemoApiAuthError(error_message)

    raise NatureRemoRejectedError(error_message, data.get("code"))


def _as_str(value: Any) -> str:  # noqa: ANN401
    return "" if value is None else str(value)


def _as_options(values: Any) -> tuple[str, ...]:  # noqa: ANN401
    if not isinstance(values, list):
        return ()
    return tuple(_as_str(value) for value in values)


def extract_settings(data: Any) -> AirconSettings:  # noqa: ANN401
    """Extract aircon settings from an appliance or a settings write response.

    Args:
        data: Settings object as returned by the API.

    Returns:
        AirconSettings with missing values as empty strings.

    Raises:
        NatureRemoParseError: If data is not an object.

    """
    if not isinstance(data, dict):
        error_msg = f"Unexpected settings payload: {data!r}"
        raise NatureRemoParseError(error_msg)

    return AirconSettings(
        temp=_as_str(data.get("temp")),
        temp_unit=_as_str(data.get("temp_unit")),
        mode=_as_str(data.get("mode")),
        vol=_as_str(data.get("vol")),
        dir=_as_str(data.get("dir")),
        button=_as_str(data.get("button")),
        updated_at=data.get("updated_at"),
    )


def extract_capability(data: Any) -> AirconCapability | None:  # noqa: ANN401
    """Extract the capability descriptor of an aircon appliance.

    Returns:
        AirconCapability, or None when the appliance is not an aircon.

    """
    if not isinstance(data, dict):
        return None

    range_data = data.get("range") or {}
    modes = {
        str(name): ModeRange(
            temp=_as_options(options.get("temp")),
            vol=_as_options(options.get("vol")),
            dir=_as_options(options.get("dir")),
        )
        for name, options in (range_data.get("modes") or {}).items()
        if isinstance(options, dict)
    }
    return AirconCapability(
        modes=modes,
        temp_unit=_as_str(data.get("tempUnit")),
        fixed_buttons=_as_options(range_data.get("fixedButtons")),
    )


def extract_appliance(data: Any) -> ApplianceRecord:  # noqa: ANN401
    """Extract one appliance record from the appliance list.

    Raises:
        NatureRemoParseError: If the entry has no identifier.

    """
    if not isinstance(data, dict) or not data.get("id"):
        error_msg = f"Appliance entry without id: {data!r}"
        raise NatureRemoParseError(error_msg)

    device = data.get("device") or {}
    settings = data.get("settings")
    return ApplianceRecord(
        id=str(data["id"]),
        nickname=_as_str(data.get("nickname")),
        device_id=device.get("id"),
        settings=extract_settings(settings) if settings is not None else None,
        aircon=extract_capability(data.get("aircon")),
    )


def extract_appliances(data: Any) -> list[ApplianceRecord]:  # noqa: ANN401
    """Extract appliance list from API response, keeping the API order."""
    if not isinstance(data, list):
        error_msg = "Expected a list of appliances"
        raise NatureRemoParseError(error_msg)
    return [extract_appliance(item) for item in data]


def _event_value(events: dict[str, Any], sensor: str) -> float | None:
    event = events.get(sensor)
    if not isinstance(event, dict):
        return None
    try:
        return float(event["val"])
    except (KeyError, TypeError, ValueError):
        _LOGGER.debug("Ignoring malformed %s event: %s", sensor, event)
        return None


def extract_device_readings(data: Any) -> dict[str, DeviceReading]:  # noqa: ANN401
    """Extract newest sensor readings from the device list, keyed by device id."""
    if not isinstance(data, list):
        error_msg = "Expected a list of devices"
        raise NatureRemoParseError(error_msg)

    readings = {}
    for device in data:
        if not isinstance(device, dict) or not device.get("id"):
            continue
        device_id = str(device["id"])
        events = device.get("newest_events") or {}
        readings[device_id] = DeviceReading(
            device_id=device_id,
            temperature=_event_value(events, SENSOR_TEMPERATURE),
            humidity=_event_value(events, SENSOR_HUMIDITY),
        )
        _LOGGER.debug(
            "Decoded reading for device %s: %s", device_id, readings[device_id]
        )

    return readings


def create_session_client(hass: HomeAssistant) -> httpx.AsyncClient:
    """Create HTTP client with retry logic for Nature Remo API.

    Args:
        hass: Home Assistant instance.

    Returns:
        Configured httpx AsyncClient with retry transport.

    """
    base_client = create_async_httpx_client(hass, timeout=10.0)
    retry = Retry(total=3, backoff_factor=0.5)
    base_client._transport = RetryTransport(  # noqa: SLF001
        transport=base_client._transport,  # noqa: SLF001
        retry=retry,
    )
    return base_client


async def _async_request(
    session: httpx.AsyncClient,
    method: str,
    path: str,
    access_token: str,
    form: dict[str, str] | None = None,
) -> Any:  # noqa: ANN401
    url = f"{BASE_URL}{path}"
    headers = create_headers(access_token)

    try:
        response = await session.request(method, url, headers=headers, data=form)
    except httpx.RequestError as err:
        error_msg = f"Connection error: {err}"
        raise NatureRemoConnectionError(error_msg) from err

    _LOGGER.debug("%s %s -> %s", method, path, response.status_code)
    return validate_response(response)


async def async_get_appliances(
    session: httpx.AsyncClient,
    access_token: str,
) -> list[ApplianceRecord]:
    """Fetch all appliances registered on the account.

    Args:
        session: HTTP client session.
        access_token: OAuth access token.

    Returns:
        List of ApplianceRecord objects in API order.

    Raises:
        NatureRemoApiAuthError: If authentication fails.
        NatureRemoApiClientError: If API request fails.

    """
    _LOGGER.debug("Fetching appliances from Nature Remo API")
    data = await _async_request(session, "GET", "/appliances", access_token)
    appliances = extract_appliances(data)
    _LOGGER.debug("Retrieved %d appliances from Nature Remo API", len(appliances))
    return appliances


async def async_get_devices(
    session: httpx.AsyncClient,
    access_token: str,
) -> dict[str, DeviceReading]:
    """Fetch Remo devices and their newest sensor readings.

    Args:
        session: HTTP client session.
        access_token: OAuth access token.

    Returns:
        Mapping of device id to DeviceReading.

    Raises:
        NatureRemoApiAuthError: If authentication fails.
        NatureRemoApiClientError: If API request fails.

    """
    _LOGGER.debug("Fetching devices from Nature Remo API")
    data = await _async_request(session, "GET", "/devices", access_token)
    readings = extract_device_readings(data)
    _LOGGER.debug("Retrieved %d devices from Nature Remo API", len(readings))
    return readings


async def async_update_aircon_settings(
    session: httpx.AsyncClient,
    access_token: str,
    appliance_id: str,
    params: dict[str, str],
) -> AirconSettings:
    """Send one settings write to an aircon appliance.

    Args:
        session: HTTP client session.
        access_token: OAuth access token.
        appliance_id: Target appliance identifier.
        params: Form parameters (temperature, operation_mode, air_volume,
            air_direction, button).

    Returns:
        Settings reported by the API after the write.

    Raises:
        NatureRemoApiAuthError: If authentication fails.
        NatureRemoRejectedError: If the API rejects a value.
        NatureRemoApiClientError: If API request fails.

    """
    _LOGGER.debug("Updating aircon %s with %s", appliance_id, params)
    data = await _async_request(
        session,
        "POST",
        f"/appliances/{appliance_id}/aircon_settings",
        access_token,
        form=params,
    )
    settings = extract_settings(data)
    _LOGGER.debug("Aircon %s reported settings: %s", appliance_id, settings)
    return settings
