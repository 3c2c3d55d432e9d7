"""Coordinator for Nature Remo Aircon integration."""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import timedelta
from typing import TYPE_CHECKING

from homeassistant.exceptions import ConfigEntryAuthFailed
from homeassistant.helpers.update_coordinator import DataUpdateCoordinator, UpdateFailed

from . import api
from .coalescer import AirconUpdateCoalescer
from .const import (
    CONF_ACCESS_TOKEN,
    CONF_APPLIANCE_ID,
    CONF_SCAN_INTERVAL,
    CONF_SKIP_UNCHANGED,
    DEFAULT_SCAN_INTERVAL,
    DEFAULT_SKIP_UNCHANGED,
    DOMAIN,
)
from .exceptions import ApplianceNotFoundError, InvalidStateError
from .models import NatureRemoAirconData
from .resolver import resolve_appliance
from .translation import temperature_bounds

if TYPE_CHECKING:
    from collections.abc import Mapping

    import httpx
    from homeassistant.config_entries import ConfigEntry
    from homeassistant.core import HomeAssistant

    from .models import AirconSettings, ApplianceRecord, DeviceReading, TemperatureBounds

_LOGGER = logging.getLogger(__name__)


class NatureRemoAirconCoordinator(DataUpdateCoordinator[NatureRemoAirconData]):
    """Coordinator that polls one aircon and writes its settings."""

    def __init__(
        self,
        hass: HomeAssistant,
        session: httpx.AsyncClient,
        config_entry: ConfigEntry,
    ) -> None:
        """Initialize the coordinator."""
        super().__init__(
            hass,
            _LOGGER,
            config_entry=config_entry,
            name=DOMAIN,
            update_interval=timedelta(
                seconds=config_entry.options.get(
                    CONF_SCAN_INTERVAL, DEFAULT_SCAN_INTERVAL
                )
            ),
            always_update=False,
        )
        self.session = session
        self.access_token: str = config_entry.data[CONF_ACCESS_TOKEN]
        # Pinned to the first resolved appliance and never cleared
        self.appliance_id: str | None = config_entry.data.get(CONF_APPLIANCE_ID) or None
        self.temperature_bounds: TemperatureBounds | None = None
        self.data = NatureRemoAirconData()
        self.coalescer = AirconUpdateCoalescer(
            self._async_send_update,
            self._get_settings,
            self._handle_update_success,
            skip_unchanged=config_entry.options.get(
                CONF_SKIP_UNCHANGED, DEFAULT_SKIP_UNCHANGED
            ),
        )

    @property
    def appliance(self) -> ApplianceRecord | None:
        """Return the cached appliance record."""
        return self.data.appliance if self.data else None

    @property
    def reading(self) -> DeviceReading | None:
        """Return the cached sensor reading."""
        return self.data.reading if self.data else None

    async def _async_update_data(self) -> NatureRemoAirconData:
        try:
            appliances = await api.async_get_appliances(
                self.session, self.access_token
            )
        except api.NatureRemoApiAuthError as err:
            _LOGGER.error("Access token was rejected: %s", err)
            raise ConfigEntryAuthFailed(str(err)) from err
        except api.NatureRemoApiClientError as err:
            raise UpdateFailed(f"Failed to refresh appliances: {err}") from err

        try:
            appliance = resolve_appliance(appliances, self.appliance_id)
        except ApplianceNotFoundError as err:
            _LOGGER.warning(
                "Target aircon could not be found (%s). Leave the appliance id "
                "empty to use the first aircon automatically",
                err,
            )
            raise UpdateFailed(str(err)) from err

        if self.appliance_id != appliance.id:
            _LOGGER.info("Target aircon ID: %s", appliance.id)
            self.appliance_id = appliance.id
        self._announce_capabilities_if_needed(appliance)

        reading = await self._async_refresh_reading(appliance)
        return NatureRemoAirconData(appliance=appliance, reading=reading)

    async def _async_refresh_reading(
        self, appliance: ApplianceRecord
    ) -> DeviceReading | None:
        """Fetch the room temperature, keeping the previous one on failure."""
        previous = self.reading
        if appliance.device_id is None:
            _LOGGER.warning("Aircon %s has no associated device", appliance.id)
            return previous

        try:
            readings = await api.async_get_devices(self.session, self.access_token)
        except api.NatureRemoApiClientError as err:
            _LOGGER.warning("Failed to refresh temperature record: %s", err)
            return previous

        reading = readings.get(appliance.device_id)
        if reading is None:
            _LOGGER.warning("Device %s not found in device list", appliance.device_id)
            return previous

        _LOGGER.debug("Temperature: %s", reading.temperature)
        return reading

    def _announce_capabilities_if_needed(self, appliance: ApplianceRecord) -> None:
        if self.temperature_bounds is not None:
            return
        self.temperature_bounds = temperature_bounds(appliance.aircon)
        _LOGGER.info(
            "Target temperature range of %s: %s", appliance.id, self.temperature_bounds
        )

    async def async_request_change(self, params: Mapping[str, str]) -> None:
        """Request a settings change, merged with concurrent requests.

        Raises:
            InvalidStateError: If no appliance has been resolved yet.
            api.NatureRemoApiClientError: If the merged write failed.

        """
        if self.appliance is None:
            error_msg = "The aircon record is not available yet"
            raise InvalidStateError(error_msg)
        await self.coalescer.async_request_change(params)

    async def _async_send_update(self, params: dict[str, str]) -> AirconSettings:
        appliance = self.appliance
        if appliance is None:
            error_msg = "The aircon record is not available yet"
            raise InvalidStateError(error_msg)
        return await api.async_update_aircon_settings(
            self.session, self.access_token, appliance.id, params
        )

    def _get_settings(self) -> AirconSettings | None:
        appliance = self.appliance
        return appliance.settings if appliance else None

    def _handle_update_success(self, settings: AirconSettings) -> None:
        """Replace the cached settings with the write response."""
        appliance = self.appliance
        if appliance is None:
            return
        _LOGGER.debug("Notifying values: %s", settings)
        self.async_set_updated_data(
            replace(self.data, appliance=replace(appliance, settings=settings))
        )

    async def async_shutdown(self) -> None:
        """Cancel pending writes and stop polling."""
        await super().async_shutdown()
        await self.coalescer.async_shutdown()
