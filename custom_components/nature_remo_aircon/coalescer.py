"""Coalescing of aircon settings writes.

Companion apps tend to resend the whole thermostat state in bursts, one set
call per characteristic. Calls that arrive within a short window are merged
into one settings write and every caller of the batch shares its outcome.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .const import PARAM_TO_SETTINGS_FIELD, UPDATE_DEBOUNCE_DELAY

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Mapping

    from .models import AirconSettings

_LOGGER = logging.getLogger(__name__)


def has_changes(
    params: Mapping[str, str],
    settings: AirconSettings | None,
) -> bool:
    """Check whether applying params would change the known settings.

    Args:
        params: Settings write parameters.
        settings: Last settings reported by the API.

    Returns:
        True if any parameter differs from its settings field, or cannot be
        compared, False otherwise.

    """
    if settings is None:
        return True

    for key, value in params.items():
        settings_field = PARAM_TO_SETTINGS_FIELD.get(key)
        if settings_field is None:
            return True
        if str(value) != getattr(settings, settings_field):
            return True
    return False


def _consume_future_exception(future: asyncio.Future[None]) -> None:
    # Marks the outcome retrieved when every waiter was cancelled
    if not future.cancelled():
        future.exception()


@dataclass
class PendingUpdateBatch:
    """Parameters merged while a debounce window is open."""

    params: dict[str, str]
    future: asyncio.Future[None]
    task: asyncio.Task[None] | None = field(default=None, repr=False)


class AirconUpdateCoalescer:
    """Merge concurrent settings requests into single writes.

    At most one batch is open at a time and at most one write is in flight.
    A batch is detached before its write starts, so requests made during the
    write open the next batch.
    """

    def __init__(
        self,
        send: Callable[[dict[str, str]], Awaitable[AirconSettings]],
        get_settings: Callable[[], AirconSettings | None],
        on_success: Callable[[AirconSettings], None],
        *,
        delay: float = UPDATE_DEBOUNCE_DELAY,
        skip_unchanged: bool = True,
    ) -> None:
        """Initialize the coalescer.

        Args:
            send: Coroutine function performing one settings write.
            get_settings: Callback returning the last known settings.
            on_success: Callback receiving the settings returned by a write.
            delay: Debounce window in seconds.
            skip_unchanged: Complete requests that change nothing without
                writing.

        """
        self._send = send
        self._get_settings = get_settings
        self._on_success = on_success
        self._delay = delay
        self.skip_unchanged = skip_unchanged
        self._pending: PendingUpdateBatch | None = None
        self._write_lock = asyncio.Lock()
        self._tasks: set[asyncio.Task[None]] = set()

    @property
    def pending_params(self) -> dict[str, str] | None:
        """Return the parameters of the open batch, if any."""
        return dict(self._pending.params) if self._pending else None

    @property
    def write_in_progress(self) -> bool:
        """Return True while a settings write is in flight."""
        return self._write_lock.locked()

    async def async_request_change(self, params: Mapping[str, str]) -> None:
        """Request a settings change and wait for the write carrying it.

        Raises:
            Exception: Whatever the write of the batch raised.

        """
        batch = self._pending
        is_new_batch = batch is None
        if batch is None:
            batch = PendingUpdateBatch(
                params={},
                future=asyncio.get_running_loop().create_future(),
            )
            batch.future.add_done_callback(_consume_future_exception)
        batch.params.update(params)

        # The cache is stale while a write is in flight
        if (
            self.skip_unchanged
            and not self.write_in_progress
            and not has_changes(batch.params, self._get_settings())
        ):
            _LOGGER.debug("Skipping update without changes: %s", dict(params))
            return

        if is_new_batch:
            self._pending = batch
            batch.task = asyncio.create_task(self._async_dispatch_later(batch))
            self._tasks.add(batch.task)
            batch.task.add_done_callback(self._tasks.discard)

        await asyncio.shield(batch.future)

    async def _async_dispatch_later(self, batch: PendingUpdateBatch) -> None:
        try:
            await asyncio.sleep(self._delay)
            async with self._write_lock:
                if self._pending is batch:
                    self._pending = None
                await self._async_dispatch(batch)
        except asyncio.CancelledError:
            if not batch.future.done():
                batch.future.cancel()
            raise

    async def _async_dispatch(self, batch: PendingUpdateBatch) -> None:
        payload = {}
        settings = self._get_settings()
        if settings is not None:
            # Without an explicit button the API treats the write as power on
            payload["button"] = settings.button
        payload.update(batch.params)

        _LOGGER.debug("Sending merged update: %s", payload)
        try:
            result = await self._send(payload)
            self._on_success(result)
        except Exception as err:  # noqa: BLE001
            _LOGGER.warning("Failed to update aircon settings: %s", err)
            batch.future.set_exception(err)
        else:
            batch.future.set_result(None)

    async def async_shutdown(self) -> None:
        """Cancel scheduled writes and fail their waiters."""
        tasks = [task for task in self._tasks if not task.done()]
        for task in tasks:
            task.cancel()
        self._pending = None
        await asyncio.gather(*tasks, return_exceptions=True)
