"""Selection of the aircon appliance managed by a config entry."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .exceptions import ApplianceNotFoundError

if TYPE_CHECKING:
    from collections.abc import Iterable

    from .models import ApplianceRecord

_LOGGER = logging.getLogger(__name__)


def resolve_appliance(
    appliances: Iterable[ApplianceRecord],
    appliance_id: str | None,
) -> ApplianceRecord:
    """Pick the appliance to manage from the account's appliance list.

    With an appliance id the matching entry is returned. Without one the
    first entry that declares aircon capability is used.

    Args:
        appliances: Appliances in the order reported by the API.
        appliance_id: Configured or previously discovered appliance id.

    Returns:
        The selected ApplianceRecord.

    Raises:
        ApplianceNotFoundError: If no entry matches.

    """
    if appliance_id:
        for appliance in appliances:
            if appliance.id == appliance_id:
                return appliance
        error_msg = f"Appliance {appliance_id} not found"
        raise ApplianceNotFoundError(error_msg)

    for appliance in appliances:
        if appliance.aircon is not None:
            _LOGGER.info(
                "Discovered aircon %s (%s)", appliance.id, appliance.nickname
            )
            return appliance

    error_msg = "No aircon appliance found"
    raise ApplianceNotFoundError(error_msg)
