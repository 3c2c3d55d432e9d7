"""Climate entity for a Nature Remo controlled aircon.

This module exposes the aircon managed by the coordinator as a Home
Assistant climate entity. Reads come from the coordinator cache, set
calls go through the coordinator's coalesced write path.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import voluptuous as vol
from homeassistant.components.climate import (
    ATTR_HVAC_MODE,
    ClimateEntity,
    ClimateEntityFeature,
    HVACAction,
    HVACMode,
)
from homeassistant.const import ATTR_TEMPERATURE, UnitOfTemperature
from homeassistant.exceptions import HomeAssistantError
from homeassistant.helpers import entity_platform

from . import api
from .const import (
    ATTR_UNIT,
    BUTTON_POWER_ON,
    DEFAULT_MAX_TEMP,
    DEFAULT_MIN_TEMP,
    DEFAULT_TEMP_STEP,
    DISPLAY_UNIT_CELSIUS,
    DISPLAY_UNIT_FAHRENHEIT,
    DOMAIN,
    SERVICE_SET_TEMPERATURE_DISPLAY_UNIT,
)
from .exceptions import InvalidStateError, UnsupportedOperationError
from .translation import (
    build_hvac_mode_params,
    format_temperature,
    parse_temperature,
    translate_hvac_action,
    translate_hvac_mode,
    translate_temperature_unit,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

    from homeassistant.config_entries import ConfigEntry
    from homeassistant.core import HomeAssistant
    from homeassistant.helpers.entity_platform import AddEntitiesCallback

    from .coordinator import NatureRemoAirconCoordinator
    from .models import AirconSettings

_LOGGER = logging.getLogger(__name__)


async def async_setup_entry(
    hass: HomeAssistant,
    entry: ConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    """Set up the climate entity of the configured aircon."""
    coordinator = hass.data[DOMAIN][entry.entry_id]["coordinator"]
    async_add_entities([NatureRemoAirconClimateEntity(coordinator)])

    platform = entity_platform.async_get_current_platform()
    platform.async_register_entity_service(
        SERVICE_SET_TEMPERATURE_DISPLAY_UNIT,
        {
            vol.Required(ATTR_UNIT): vol.In(
                [DISPLAY_UNIT_CELSIUS, DISPLAY_UNIT_FAHRENHEIT]
            ),
        },
        "async_set_temperature_display_unit",
    )


class NatureRemoAirconClimateEntity(ClimateEntity):
    """Climate entity for a Nature Remo aircon.

    Provides heating/cooling mode, current and target temperature and
    temperature unit of the aircon resolved by the coordinator.
    """

    _attr_has_entity_name = True
    _attr_should_poll = False
    _attr_hvac_modes = [HVACMode.OFF, HVACMode.HEAT, HVACMode.COOL, HVACMode.AUTO]
    _attr_supported_features = (
        ClimateEntityFeature.TARGET_TEMPERATURE
        | ClimateEntityFeature.TURN_OFF
        | ClimateEntityFeature.TURN_ON
    )

    def __init__(self, coordinator: NatureRemoAirconCoordinator) -> None:
        """Initialize the climate entity.

        Args:
            coordinator: Coordinator owning the aircon state.

        """
        self._coordinator = coordinator
        appliance = coordinator.appliance
        if appliance is None:
            error_msg = "The aircon record is not available yet"
            raise InvalidStateError(error_msg)
        self._attr_unique_id = appliance.id
        self._attr_name = appliance.nickname or "Aircon"
        self._coordinator_listener_unsub: Callable[[], None] | None = None

    @property
    def _settings(self) -> AirconSettings | None:
        appliance = self._coordinator.appliance
        return appliance.settings if appliance else None

    @property
    def hvac_mode(self) -> HVACMode | None:
        """Return the current HVAC mode, None for modes without a counterpart."""
        return translate_hvac_mode(self._settings)

    @property
    def hvac_action(self) -> HVACAction | None:
        return translate_hvac_action(self._settings)

    @property
    def current_temperature(self) -> float | None:
        reading = self._coordinator.reading
        return reading.temperature if reading else None

    @property
    def current_humidity(self) -> float | None:
        reading = self._coordinator.reading
        return reading.humidity if reading else None

    @property
    def target_temperature(self) -> float | None:
        settings = self._settings
        return parse_temperature(settings.temp) if settings else None

    @property
    def temperature_unit(self) -> str:
        """Return the unit the aircon reports temperatures in."""
        appliance = self._coordinator.appliance
        if appliance is None or appliance.aircon is None:
            return UnitOfTemperature.CELSIUS
        try:
            return translate_temperature_unit(appliance.aircon.temp_unit)
        except InvalidStateError:
            _LOGGER.debug(
                "%s: unknown temperature unit %r, assuming Celsius",
                self.name,
                appliance.aircon.temp_unit,
            )
            return UnitOfTemperature.CELSIUS

    @property
    def min_temp(self) -> float:
        bounds = self._coordinator.temperature_bounds
        return bounds.min_temp if bounds else DEFAULT_MIN_TEMP

    @property
    def max_temp(self) -> float:
        bounds = self._coordinator.temperature_bounds
        return bounds.max_temp if bounds else DEFAULT_MAX_TEMP

    @property
    def target_temperature_step(self) -> float:
        bounds = self._coordinator.temperature_bounds
        return bounds.step if bounds else DEFAULT_TEMP_STEP

    async def async_added_to_hass(self) -> None:
        """Subscribe to coordinator updates."""
        await super().async_added_to_hass()
        self._coordinator_listener_unsub = self._coordinator.async_add_listener(
            self._handle_coordinator_update
        )

    async def async_will_remove_from_hass(self) -> None:
        """Handle entity being removed from Home Assistant."""
        await super().async_will_remove_from_hass()

        if self._coordinator_listener_unsub is not None:
            self._coordinator_listener_unsub()
            self._coordinator_listener_unsub = None

    def _handle_coordinator_update(self) -> None:
        """Publish the settled state of the coordinator."""
        _LOGGER.debug(
            "%s: notifying values: %s, temperature %s",
            self.name,
            self._settings,
            self.current_temperature,
        )
        self.async_write_ha_state()

    async def _async_request_change(self, params: Mapping[str, str]) -> None:
        try:
            await self._coordinator.async_request_change(params)
        except api.NatureRemoApiClientError as err:
            error_msg = f"Failed to update {self.name}: {err}"
            raise HomeAssistantError(error_msg) from err

    async def async_set_hvac_mode(self, hvac_mode: HVACMode) -> None:
        """Set the HVAC mode.

        Args:
            hvac_mode: The HVAC mode to set.

        """
        params = build_hvac_mode_params(hvac_mode, self._coordinator.appliance)
        await self._async_request_change(params)

    async def async_set_temperature(self, **kwargs: Any) -> None:  # noqa: ANN401
        """Set the target temperature, optionally together with the HVAC mode.

        Args:
            **kwargs: Keyword arguments containing temperature data.

        """
        params: dict[str, str] = {}
        if (hvac_mode := kwargs.get(ATTR_HVAC_MODE)) is not None:
            params.update(
                build_hvac_mode_params(hvac_mode, self._coordinator.appliance)
            )
        if (temperature := kwargs.get(ATTR_TEMPERATURE)) is not None:
            params["temperature"] = format_temperature(temperature)
        if not params:
            return
        await self._async_request_change(params)

    async def async_turn_on(self) -> None:
        """Power the aircon on in its last mode."""
        await self._async_request_change({"button": BUTTON_POWER_ON})

    async def async_turn_off(self) -> None:
        """Power the aircon off."""
        await self.async_set_hvac_mode(HVACMode.OFF)

    async def async_set_temperature_display_unit(self, unit: str) -> None:
        """Change the temperature display unit.

        Only Celsius is accepted, the unit is fixed by the aircon.

        Raises:
            UnsupportedOperationError: If Fahrenheit is requested.
            InvalidStateError: If the unit is unknown.

        """
        if unit == DISPLAY_UNIT_CELSIUS:
            return
        if unit == DISPLAY_UNIT_FAHRENHEIT:
            _LOGGER.info("%s: temperature display unit cannot be set", self.name)
            error_msg = "Temperature display unit cannot be changed"
            raise UnsupportedOperationError(error_msg)
        error_msg = f"Unexpected temperature display unit: {unit}"
        raise InvalidStateError(error_msg)
