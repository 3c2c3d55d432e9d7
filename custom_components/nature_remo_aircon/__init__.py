from __future__ import annotations

import logging

from homeassistant.config_entries import ConfigEntry
from homeassistant.const import Platform
from homeassistant.core import HomeAssistant

from .api import create_session_client
from .const import CONF_ACCESS_TOKEN, DOMAIN
from .coordinator import NatureRemoAirconCoordinator

_LOGGER = logging.getLogger(__name__)

PLATFORMS = [Platform.CLIMATE]


async def async_setup_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    _LOGGER.info(
        "Setting up Nature Remo Aircon integration for entry %s", entry.entry_id
    )

    if CONF_ACCESS_TOKEN not in entry.data:
        _LOGGER.error(
            "Missing access token in configuration for entry %s", entry.entry_id
        )
        return False

    session = create_session_client(hass)
    coordinator = NatureRemoAirconCoordinator(hass, session, entry)

    # Raises ConfigEntryNotReady until an appliance can be resolved
    await coordinator.async_config_entry_first_refresh()

    hass.data.setdefault(DOMAIN, {})[entry.entry_id] = {
        "session": session,
        "coordinator": coordinator,
    }
    _LOGGER.debug(
        "Stored data for entry %s: aircon %s", entry.entry_id, coordinator.appliance_id
    )

    entry.async_on_unload(entry.add_update_listener(async_reload_entry))
    await hass.config_entries.async_forward_entry_setups(entry, PLATFORMS)
    _LOGGER.info(
        "Successfully setup Nature Remo Aircon integration for entry %s",
        entry.entry_id,
    )
    return True


async def async_reload_entry(hass: HomeAssistant, entry: ConfigEntry) -> None:
    """Reload the entry after its options changed."""
    _LOGGER.debug("Reloading entry %s after options update", entry.entry_id)
    await hass.config_entries.async_reload(entry.entry_id)


async def async_unload_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    _LOGGER.info(
        "Unloading Nature Remo Aircon integration for entry %s", entry.entry_id
    )

    unload_ok = await hass.config_entries.async_unload_platforms(entry, PLATFORMS)
    if unload_ok:
        if DOMAIN in hass.data and entry.entry_id in hass.data[DOMAIN]:
            entry_data = hass.data[DOMAIN].pop(entry.entry_id)
            await entry_data["coordinator"].async_shutdown()
            _LOGGER.debug("Cleaned up data for entry %s", entry.entry_id)
        _LOGGER.info(
            "Successfully unloaded Nature Remo Aircon integration for entry %s",
            entry.entry_id,
        )
    else:
        _LOGGER.warning("Failed to unload some platforms for entry %s", entry.entry_id)

    return unload_ok
