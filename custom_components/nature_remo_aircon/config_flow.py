"""
Configuration flow for Nature Remo Aircon integration.

This module handles the setup and configuration of the Nature Remo Aircon
integration through Home Assistant's config flow system.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

import voluptuous as vol
from homeassistant.config_entries import (
    ConfigEntry,
    ConfigFlow,
    ConfigFlowResult,
    OptionsFlow,
)
from homeassistant.core import callback
from homeassistant.helpers.httpx_client import get_async_client

from . import api
from .const import (
    CONF_ACCESS_TOKEN,
    CONF_APPLIANCE_ID,
    CONF_SCAN_INTERVAL,
    CONF_SKIP_UNCHANGED,
    DEFAULT_SCAN_INTERVAL,
    DEFAULT_SKIP_UNCHANGED,
    DOMAIN,
    ERROR_API_ERROR,
    ERROR_APPLIANCE_NOT_FOUND,
    ERROR_CANNOT_CONNECT,
    ERROR_INVALID_AUTH,
    ERROR_UNKNOWN,
    MAX_SCAN_INTERVAL,
    MIN_SCAN_INTERVAL,
)
from .exceptions import ApplianceNotFoundError
from .resolver import resolve_appliance

_LOGGER = logging.getLogger(__name__)


class NatureRemoAirconConfigFlow(ConfigFlow, domain=DOMAIN):
    """Handle configuration flow for Nature Remo Aircon integration."""

    VERSION = 1

    @staticmethod
    @callback
    def async_get_options_flow(config_entry: ConfigEntry) -> OptionsFlow:
        """Return the options flow handler."""
        return NatureRemoAirconOptionsFlow(config_entry)

    async def async_step_user(
        self, user_input: dict[str, Any] | None = None
    ) -> ConfigFlowResult:
        """
        Handle the initial step of the config flow.

        Args:
            user_input: User input data containing the access token and an
                optional appliance id.

        Returns:
            ConfigFlowResult indicating the next step or errors.

        """
        errors: dict[str, str] = {}

        if user_input is not None:
            access_token = user_input[CONF_ACCESS_TOKEN].strip()
            appliance_id = (user_input.get(CONF_APPLIANCE_ID) or "").strip() or None

            try:
                session = get_async_client(self.hass)
                appliances = await api.async_get_appliances(session, access_token)
                appliance = resolve_appliance(appliances, appliance_id)
                _LOGGER.info("Found aircon %s on Nature Remo account", appliance.id)

            except api.NatureRemoApiAuthError as err:
                _LOGGER.warning(
                    "Authentication failed (%s): %s", ERROR_INVALID_AUTH, err
                )
                errors["base"] = ERROR_INVALID_AUTH
            except api.NatureRemoConnectionError:
                _LOGGER.exception("Connection error (%s)", ERROR_CANNOT_CONNECT)
                errors["base"] = ERROR_CANNOT_CONNECT
            except api.NatureRemoApiClientError:
                _LOGGER.exception("API client error (%s)", ERROR_API_ERROR)
                errors["base"] = ERROR_API_ERROR
            except ApplianceNotFoundError as err:
                _LOGGER.warning(
                    "No matching aircon (%s): %s", ERROR_APPLIANCE_NOT_FOUND, err
                )
                errors["base"] = ERROR_APPLIANCE_NOT_FOUND
            except Exception:
                _LOGGER.exception(
                    "Unexpected error during validation (%s)",
                    ERROR_UNKNOWN,
                )
                errors["base"] = ERROR_UNKNOWN

            else:
                await self.async_set_unique_id(appliance.id)
                self._abort_if_unique_id_configured()

                data = {CONF_ACCESS_TOKEN: access_token}
                if appliance_id:
                    data[CONF_APPLIANCE_ID] = appliance_id
                return self.async_create_entry(
                    title=appliance.nickname or f"Aircon {appliance.id}",
                    data=data,
                )

        return self.async_show_form(
            step_id="user",
            data_schema=vol.Schema(
                {
                    vol.Required(CONF_ACCESS_TOKEN): str,
                    vol.Optional(CONF_APPLIANCE_ID): str,
                }
            ),
            errors=errors,
        )

    async def async_step_reauth(
        self, entry_data: Mapping[str, Any]
    ) -> ConfigFlowResult:
        """Handle a rejected access token."""
        return await self.async_step_reauth_confirm()

    async def async_step_reauth_confirm(
        self, user_input: dict[str, Any] | None = None
    ) -> ConfigFlowResult:
        """Ask for a new access token and check it against the API."""
        errors: dict[str, str] = {}

        if user_input is not None:
            access_token = user_input[CONF_ACCESS_TOKEN].strip()
            try:
                session = get_async_client(self.hass)
                await api.async_get_appliances(session, access_token)
            except api.NatureRemoApiAuthError as err:
                _LOGGER.warning(
                    "Authentication failed (%s): %s", ERROR_INVALID_AUTH, err
                )
                errors["base"] = ERROR_INVALID_AUTH
            except api.NatureRemoConnectionError:
                _LOGGER.exception("Connection error (%s)", ERROR_CANNOT_CONNECT)
                errors["base"] = ERROR_CANNOT_CONNECT
            except api.NatureRemoApiClientError:
                _LOGGER.exception("API client error (%s)", ERROR_API_ERROR)
                errors["base"] = ERROR_API_ERROR
            except Exception:
                _LOGGER.exception(
                    "Unexpected error during validation (%s)", ERROR_UNKNOWN
                )
                errors["base"] = ERROR_UNKNOWN
            else:
                return self.async_update_reload_and_abort(
                    self._get_reauth_entry(),
                    data_updates={CONF_ACCESS_TOKEN: access_token},
                )

        return self.async_show_form(
            step_id="reauth_confirm",
            data_schema=vol.Schema({vol.Required(CONF_ACCESS_TOKEN): str}),
            errors=errors,
        )


class NatureRemoAirconOptionsFlow(OptionsFlow):
    """Handle polling and write options."""

    def __init__(self, config_entry: ConfigEntry) -> None:
        self._config_entry = config_entry

    async def async_step_init(
        self, user_input: dict[str, Any] | None = None
    ) -> ConfigFlowResult:
        """Manage the options."""
        if user_input is not None:
            return self.async_create_entry(title="", data=user_input)

        current = self._config_entry.options
        schema = vol.Schema(
            {
                vol.Optional(
                    CONF_SCAN_INTERVAL,
                    default=current.get(CONF_SCAN_INTERVAL, DEFAULT_SCAN_INTERVAL),
                ): vol.All(
                    vol.Coerce(int),
                    vol.Range(min=MIN_SCAN_INTERVAL, max=MAX_SCAN_INTERVAL),
                ),
                vol.Optional(
                    CONF_SKIP_UNCHANGED,
                    default=current.get(CONF_SKIP_UNCHANGED, DEFAULT_SKIP_UNCHANGED),
                ): bool,
            }
        )
        return self.async_show_form(step_id="init", data_schema=schema)
