"""Data models for Nature Remo Aircon integration."""

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class AirconSettings:
    """Represents the aircon settings last reported by the Nature Remo API."""

    temp: str
    temp_unit: str
    mode: str
    vol: str
    dir: str
    button: str
    updated_at: str | None = None


@dataclass(frozen=True, slots=True)
class ModeRange:
    """Valid option values of one operation mode."""

    temp: tuple[str, ...] = ()
    vol: tuple[str, ...] = ()
    dir: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class AirconCapability:
    """Capability descriptor of an aircon appliance."""

    modes: dict[str, ModeRange]
    temp_unit: str
    fixed_buttons: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class ApplianceRecord:
    """Represents one appliance registered on a Nature Remo account.

    Attributes:
        id: Unique appliance identifier.
        nickname: Human-readable appliance name.
        device_id: Identifier of the Remo device that controls the appliance.
        settings: Current aircon settings, None for non-aircon appliances.
        aircon: Capability descriptor, None for non-aircon appliances.

    """

    id: str
    nickname: str
    device_id: str | None
    settings: AirconSettings | None
    aircon: AirconCapability | None


@dataclass(frozen=True, slots=True)
class DeviceReading:
    """Newest sensor values of a Remo device."""

    device_id: str
    temperature: float | None
    humidity: float | None = None


@dataclass(frozen=True, slots=True)
class TemperatureBounds:
    """Target temperature range advertised to Home Assistant."""

    min_temp: float
    max_temp: float
    step: float


@dataclass(frozen=True, slots=True)
class NatureRemoAirconData:
    """Snapshot published by the coordinator to its listeners."""

    appliance: ApplianceRecord | None = None
    reading: DeviceReading | None = None
