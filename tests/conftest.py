"""Pytest configuration and fixtures for Nature Remo Aircon tests."""

from typing import Any

import pytest

from custom_components.nature_remo_aircon import api
from custom_components.nature_remo_aircon.models import (
    AirconSettings,
    ApplianceRecord,
    DeviceReading,
)

AIRCON_ID = "aircon-1"
DEVICE_ID = "device-1"


@pytest.fixture
def sample_settings_response() -> dict[str, Any]:
    """Fixture providing the settings object of a running aircon.

    Returns:
        A dictionary as returned by the settings write endpoint.

    """
    return {
        "temp": "25",
        "temp_unit": "c",
        "mode": "cool",
        "vol": "auto",
        "dir": "swing",
        "button": "",
        "updated_at": "2024-07-01T10:00:00Z",
    }


@pytest.fixture
def sample_aircon_response() -> dict[str, Any]:
    """Fixture providing the capability descriptor of an aircon."""
    return {
        "range": {
            "modes": {
                "cool": {
                    "temp": ["20", "22", "24"],
                    "vol": ["auto", "1", "2"],
                    "dir": ["auto", "swing"],
                },
                "warm": {
                    "temp": ["24", "26"],
                    "vol": ["auto", "1", "2"],
                    "dir": ["auto", "swing"],
                },
                "dry": {
                    "temp": ["-2", "-1", "0", "1", "2"],
                    "vol": ["auto"],
                    "dir": ["auto"],
                },
            },
            "fixedButtons": ["power-off"],
        },
        "tempUnit": "c",
    }


@pytest.fixture
def sample_appliances_response(
    sample_settings_response: dict[str, Any],
    sample_aircon_response: dict[str, Any],
) -> list[dict[str, Any]]:
    """Fixture providing an appliance list with a TV followed by an aircon.

    Args:
        sample_settings_response: Aircon settings fixture.
        sample_aircon_response: Aircon capability fixture.

    Returns:
        A list representing an appliances API response.

    """
    return [
        {
            "id": "tv-1",
            "nickname": "TV",
            "type": "IR",
            "device": {"id": DEVICE_ID, "name": "Remo"},
            "aircon": None,
            "settings": None,
        },
        {
            "id": AIRCON_ID,
            "nickname": "Living Aircon",
            "type": "AC",
            "device": {"id": DEVICE_ID, "name": "Remo"},
            "aircon": sample_aircon_response,
            "settings": sample_settings_response,
        },
    ]


@pytest.fixture
def sample_devices_response() -> list[dict[str, Any]]:
    """Fixture providing a device list with sensor events."""
    return [
        {
            "id": DEVICE_ID,
            "name": "Remo",
            "newest_events": {
                "te": {"val": 23.5, "created_at": "2024-07-01T10:00:00Z"},
                "hu": {"val": 48, "created_at": "2024-07-01T10:00:00Z"},
            },
        },
        {
            "id": "device-2",
            "name": "Remo mini",
            "newest_events": {},
        },
    ]


@pytest.fixture
def sample_settings(sample_settings_response: dict[str, Any]) -> AirconSettings:
    """Fixture providing parsed aircon settings."""
    return api.extract_settings(sample_settings_response)


@pytest.fixture
def sample_appliances(
    sample_appliances_response: list[dict[str, Any]],
) -> list[ApplianceRecord]:
    """Fixture providing parsed appliance records."""
    return api.extract_appliances(sample_appliances_response)


@pytest.fixture
def sample_appliance(sample_appliances: list[ApplianceRecord]) -> ApplianceRecord:
    """Fixture providing the parsed aircon record."""
    return sample_appliances[1]


@pytest.fixture
def sample_reading() -> DeviceReading:
    """Fixture providing a parsed sensor reading."""
    return DeviceReading(device_id=DEVICE_ID, temperature=23.5, humidity=48.0)
