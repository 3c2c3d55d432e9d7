"""Translation between Nature Remo aircon settings and climate values."""

from __future__ import annotations

import logging
import re

from homeassistant.components.climate import HVACAction, HVACMode
from homeassistant.const import UnitOfTemperature

from .const import (
    BUTTON_POWER_OFF,
    BUTTON_POWER_ON,
    DEFAULT_MAX_TEMP,
    DEFAULT_MIN_TEMP,
    DEFAULT_TEMP_STEP,
    HVAC_MODE_MAP,
    HVAC_MODE_REVERSE_MAP,
    MODE_AUTO,
    TEMPERATURE_MODES,
)
from .exceptions import InvalidStateError, UnsupportedOperationError
from .models import AirconCapability, AirconSettings, ApplianceRecord, TemperatureBounds

_LOGGER = logging.getLogger(__name__)

_NUMERIC_TEMPERATURE = re.compile(r"\d+(\.\d+)?")

_HVAC_ACTION_MAP = {
    HVACMode.OFF: HVACAction.OFF,
    HVACMode.HEAT: HVACAction.HEATING,
    HVACMode.COOL: HVACAction.COOLING,
}

_TEMPERATURE_UNIT_MAP = {
    "c": UnitOfTemperature.CELSIUS,
    "f": UnitOfTemperature.FAHRENHEIT,
}


def translate_hvac_mode(settings: AirconSettings | None) -> HVACMode | None:
    """Return the HVAC mode shown for the given settings.

    A powered off aircon is OFF whatever its mode. Modes without a climate
    counterpart (dry, blow) yield None.
    """
    if settings is None:
        return None
    if settings.button == BUTTON_POWER_OFF:
        return HVACMode.OFF
    return HVAC_MODE_REVERSE_MAP.get(settings.mode)


def translate_hvac_action(settings: AirconSettings | None) -> HVACAction | None:
    """Return the current action for the given settings.

    The API does not report whether an aircon in auto mode is heating or
    cooling, so auto yields None rather than a guessed action.
    """
    return _HVAC_ACTION_MAP.get(translate_hvac_mode(settings))


def build_hvac_mode_params(
    hvac_mode: HVACMode,
    appliance: ApplianceRecord | None,
) -> dict[str, str]:
    """Build settings write parameters selecting an HVAC mode.

    Auto is replaced by the last known mode when the aircon does not list it.

    Raises:
        UnsupportedOperationError: If the mode has no aircon counterpart.

    """
    if hvac_mode == HVACMode.OFF:
        return {"button": BUTTON_POWER_OFF}

    mode = HVAC_MODE_MAP.get(hvac_mode)
    if mode is None:
        error_msg = f"Unsupported HVAC mode: {hvac_mode}"
        raise UnsupportedOperationError(error_msg)

    if (
        mode == MODE_AUTO
        and appliance is not None
        and appliance.aircon is not None
        and MODE_AUTO not in appliance.aircon.modes
        and appliance.settings is not None
        and appliance.settings.mode
    ):
        _LOGGER.debug(
            "Aircon %s has no auto mode, keeping %s",
            appliance.id,
            appliance.settings.mode,
        )
        mode = appliance.settings.mode

    return {"button": BUTTON_POWER_ON, "operation_mode": mode}


def _numeric_temperatures(capability: AirconCapability) -> list[float]:
    temperatures = []
    for mode in TEMPERATURE_MODES:
        mode_range = capability.modes.get(mode)
        if mode_range is None:
            continue
        temperatures.extend(
            float(value)
            for value in mode_range.temp
            if _NUMERIC_TEMPERATURE.fullmatch(value)
        )
    return temperatures


def temperature_bounds(capability: AirconCapability | None) -> TemperatureBounds:
    """Compute target temperature min, max and step from the capability.

    The step is the smallest gap between distinct selectable temperatures.
    Defaults apply when the aircon lists no numeric temperature.
    """
    temperatures = sorted(set(_numeric_temperatures(capability))) if capability else []
    if not temperatures:
        return TemperatureBounds(DEFAULT_MIN_TEMP, DEFAULT_MAX_TEMP, DEFAULT_TEMP_STEP)

    gaps = [high - low for low, high in zip(temperatures, temperatures[1:])]
    step = round(min(gaps), 2) if gaps else DEFAULT_TEMP_STEP
    return TemperatureBounds(temperatures[0], temperatures[-1], step)


def format_temperature(value: float) -> str:
    """Format a target temperature the way the API lists it ("25", "25.5")."""
    return f"{float(value):g}"


def parse_temperature(value: str | None) -> float | None:
    """Parse a temperature setting, None when the mode has no target."""
    if not value:
        return None
    try:
        return float(value)
    except ValueError:
        _LOGGER.debug("Ignoring non numeric temperature setting %r", value)
        return None


def translate_temperature_unit(unit: str) -> UnitOfTemperature:
    """Return the temperature unit of an aircon capability.

    Raises:
        InvalidStateError: If the unit is neither "c" nor "f".

    """
    try:
        return _TEMPERATURE_UNIT_MAP[unit]
    except KeyError as err:
        error_msg = f"Unknown temperature unit: {unit!r}"
        raise InvalidStateError(error_msg) from err
