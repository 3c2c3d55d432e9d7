"""Constants for Nature Remo Aircon integration.

This module contains all the constants used throughout the integration,
including API endpoints, configuration keys, and mapping dictionaries.
"""

from homeassistant.components.climate import HVACMode

DOMAIN = "nature_remo_aircon"

BASE_URL = "https://api.nature.global/1"
USER_AGENT = "HomeAssistant-NatureRemoAircon"

CONF_ACCESS_TOKEN = "access_token"
CONF_APPLIANCE_ID = "appliance_id"
CONF_SCAN_INTERVAL = "scan_interval"
CONF_SKIP_UNCHANGED = "skip_unchanged"

DEFAULT_SCAN_INTERVAL = 60  # Seconds, the API is rate limited per token
MIN_SCAN_INTERVAL = 10
MAX_SCAN_INTERVAL = 3600
DEFAULT_SKIP_UNCHANGED = True
UPDATE_DEBOUNCE_DELAY = 0.1  # Seconds to collect set calls into one write

ERROR_INVALID_AUTH = "invalid_auth"
ERROR_CANNOT_CONNECT = "cannot_connect"
ERROR_API_ERROR = "api_error"
ERROR_APPLIANCE_NOT_FOUND = "appliance_not_found"
ERROR_UNKNOWN = "unknown_error"

SERVICE_SET_TEMPERATURE_DISPLAY_UNIT = "set_temperature_display_unit"
ATTR_UNIT = "unit"
DISPLAY_UNIT_CELSIUS = "celsius"
DISPLAY_UNIT_FAHRENHEIT = "fahrenheit"

BUTTON_POWER_OFF = "power-off"
BUTTON_POWER_ON = ""

MODE_WARM = "warm"
MODE_COOL = "cool"
MODE_AUTO = "auto"
TEMPERATURE_MODES = (MODE_COOL, MODE_WARM, MODE_AUTO)

HVAC_MODE_MAP = {
    HVACMode.HEAT: MODE_WARM,
    HVACMode.COOL: MODE_COOL,
    HVACMode.AUTO: MODE_AUTO,
}
HVAC_MODE_REVERSE_MAP = {value: key for key, value in HVAC_MODE_MAP.items()}

SENSOR_TEMPERATURE = "te"
SENSOR_HUMIDITY = "hu"

DEFAULT_MIN_TEMP = 10.0
DEFAULT_MAX_TEMP = 122.0
DEFAULT_TEMP_STEP = 1.0

# Form parameter of the settings write -> field of the returned settings
PARAM_TO_SETTINGS_FIELD = {
    "temperature": "temp",
    "operation_mode": "mode",
    "air_volume": "vol",
    "air_direction": "dir",
    "button": "button",
}
