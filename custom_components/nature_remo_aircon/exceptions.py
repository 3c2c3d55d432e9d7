"""Errors raised by the Nature Remo Aircon integration outside the API client."""

from homeassistant.exceptions import HomeAssistantError


class NatureRemoAirconError(HomeAssistantError):
    """Base exception for Nature Remo Aircon errors."""


class ApplianceNotFoundError(NatureRemoAirconError):
    """Exception raised when no appliance matches the configured identity."""


class UnsupportedOperationError(NatureRemoAirconError):
    """Exception raised for a request the aircon cannot carry out."""


class InvalidStateError(NatureRemoAirconError):
    """Exception raised when cached state is missing or malformed."""
