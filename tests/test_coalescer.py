"""Tests for the aircon update coalescer."""

import asyncio
import gc
from dataclasses import replace
from unittest.mock import AsyncMock, Mock

import pytest

from custom_components.nature_remo_aircon.api import NatureRemoRejectedError
from custom_components.nature_remo_aircon.coalescer import (
    AirconUpdateCoalescer,
    has_changes,
)
from custom_components.nature_remo_aircon.models import AirconSettings

DEBOUNCE_DELAY = 0.01


def _create_coalescer(
    settings: AirconSettings | None,
    send: AsyncMock | None = None,
    *,
    skip_unchanged: bool = True,
    delay: float = DEBOUNCE_DELAY,
) -> tuple[AirconUpdateCoalescer, AsyncMock, Mock]:
    send = send or AsyncMock(return_value=settings)
    on_success = Mock()
    coalescer = AirconUpdateCoalescer(
        send,
        lambda: settings,
        on_success,
        delay=delay,
        skip_unchanged=skip_unchanged,
    )
    return coalescer, send, on_success


class TestHasChanges:
    """Tests for has_changes function."""

    def test_has_changes_false_when_all_fields_match(
        self, sample_settings: AirconSettings
    ) -> None:
        """Test that parameters equal to the settings are not a change."""
        params = {
            "temperature": "25",
            "operation_mode": "cool",
            "air_volume": "auto",
            "air_direction": "swing",
            "button": "",
        }
        assert has_changes(params, sample_settings) is False

    def test_has_changes_true_when_one_field_differs(
        self, sample_settings: AirconSettings
    ) -> None:
        """Test that a single differing field is a change."""
        assert has_changes({"button": "", "temperature": "26"}, sample_settings)

    def test_has_changes_true_for_unknown_key(
        self, sample_settings: AirconSettings
    ) -> None:
        """Test that a key without settings field counts as a change."""
        assert has_changes({"air_direction_h": "left"}, sample_settings)

    def test_has_changes_true_without_settings(self) -> None:
        """Test that anything is a change when no settings are known."""
        assert has_changes({"button": ""}, None)


class TestAirconUpdateCoalescerSkipUnchanged:
    """Tests for the skip-unchanged policy."""

    @pytest.mark.asyncio
    async def test_unchanged_request_does_not_write(
        self, sample_settings: AirconSettings
    ) -> None:
        """Test that a request matching the settings completes without a write."""
        coalescer, send, on_success = _create_coalescer(sample_settings)
        await coalescer.async_request_change({"button": "", "temperature": "25"})
        await asyncio.sleep(DEBOUNCE_DELAY * 3)
        send.assert_not_awaited()
        on_success.assert_not_called()
        assert coalescer.pending_params is None

    @pytest.mark.asyncio
    async def test_unchanged_request_writes_when_policy_disabled(
        self, sample_settings: AirconSettings
    ) -> None:
        """Test that the write is issued when skipping is disabled."""
        coalescer, send, _ = _create_coalescer(sample_settings, skip_unchanged=False)
        await coalescer.async_request_change({"temperature": "25"})
        send.assert_awaited_once_with({"button": "", "temperature": "25"})

    @pytest.mark.asyncio
    async def test_unchanged_merge_returns_while_open_batch_is_sent(
        self, sample_settings: AirconSettings
    ) -> None:
        """Test that a request cancelling out the open batch returns at once."""
        coalescer, send, _ = _create_coalescer(sample_settings)
        first = asyncio.create_task(
            coalescer.async_request_change({"temperature": "26"})
        )
        await asyncio.sleep(0)

        await coalescer.async_request_change({"temperature": "25"})
        send.assert_not_awaited()
        assert coalescer.pending_params == {"temperature": "25"}

        await first
        send.assert_awaited_once_with({"button": "", "temperature": "25"})

    @pytest.mark.asyncio
    async def test_changed_merge_joins_open_batch(
        self, sample_settings: AirconSettings
    ) -> None:
        """Test that a request still changing something waits for the batch."""
        coalescer, send, _ = _create_coalescer(sample_settings)
        first = asyncio.create_task(
            coalescer.async_request_change({"temperature": "26"})
        )
        await asyncio.sleep(0)
        second = asyncio.create_task(
            coalescer.async_request_change({"operation_mode": "warm"})
        )
        await asyncio.sleep(0)
        assert not second.done()
        assert coalescer.pending_params == {
            "temperature": "26",
            "operation_mode": "warm",
        }

        await asyncio.gather(first, second)
        send.assert_awaited_once_with(
            {"button": "", "temperature": "26", "operation_mode": "warm"}
        )


class TestAirconUpdateCoalescerBatching:
    """Tests for merging requests into one write."""

    @pytest.mark.asyncio
    async def test_requests_within_window_produce_one_write(
        self, sample_settings: AirconSettings
    ) -> None:
        """Test that a burst of requests is sent as one write."""
        coalescer, send, _ = _create_coalescer(sample_settings)
        await asyncio.gather(
            coalescer.async_request_change({"temperature": "26"}),
            coalescer.async_request_change({"temperature": "27"}),
            coalescer.async_request_change({"temperature": "28"}),
        )
        send.assert_awaited_once_with({"button": "", "temperature": "28"})

    @pytest.mark.asyncio
    async def test_disjoint_requests_are_merged(
        self, sample_settings: AirconSettings
    ) -> None:
        """Test that disjoint keys end up in the same write."""
        coalescer, send, _ = _create_coalescer(sample_settings)
        await asyncio.gather(
            coalescer.async_request_change({"temperature": "26"}),
            coalescer.async_request_change({"operation_mode": "warm"}),
        )
        send.assert_awaited_once_with(
            {"button": "", "temperature": "26", "operation_mode": "warm"}
        )

    @pytest.mark.asyncio
    async def test_current_button_is_sent_by_default(
        self, sample_settings: AirconSettings
    ) -> None:
        """Test that the known button state is kept when not requested."""
        settings = replace(sample_settings, button="power-off")
        coalescer, send, _ = _create_coalescer(settings)
        await coalescer.async_request_change({"temperature": "26"})
        send.assert_awaited_once_with({"button": "power-off", "temperature": "26"})

    @pytest.mark.asyncio
    async def test_requested_button_overrides_default(
        self, sample_settings: AirconSettings
    ) -> None:
        """Test that an explicit button wins over the known state."""
        settings = replace(sample_settings, button="power-off")
        coalescer, send, _ = _create_coalescer(settings)
        await coalescer.async_request_change({"button": "", "operation_mode": "warm"})
        send.assert_awaited_once_with({"button": "", "operation_mode": "warm"})

    @pytest.mark.asyncio
    async def test_success_is_reported_once(
        self, sample_settings: AirconSettings
    ) -> None:
        """Test that the write result is handed to on_success once per batch."""
        result = replace(sample_settings, temp="26")
        coalescer, _, on_success = _create_coalescer(
            sample_settings, AsyncMock(return_value=result)
        )
        await asyncio.gather(
            coalescer.async_request_change({"temperature": "26"}),
            coalescer.async_request_change({"air_volume": "2"}),
        )
        on_success.assert_called_once_with(result)


class TestAirconUpdateCoalescerFailures:
    """Tests for failed writes."""

    @pytest.mark.asyncio
    async def test_failure_is_shared_by_all_callers(
        self, sample_settings: AirconSettings
    ) -> None:
        """Test that every caller of a batch receives the same error."""
        error = NatureRemoRejectedError("Invalid temperature", 400002)
        coalescer, send, on_success = _create_coalescer(
            sample_settings, AsyncMock(side_effect=error)
        )
        results = await asyncio.gather(
            coalescer.async_request_change({"temperature": "99"}),
            coalescer.async_request_change({"operation_mode": "warm"}),
            return_exceptions=True,
        )
        assert results == [error, error]
        send.assert_awaited_once()
        on_success.assert_not_called()

    @pytest.mark.asyncio
    async def test_next_batch_after_failure_is_sent(
        self, sample_settings: AirconSettings
    ) -> None:
        """Test that a failed batch does not block later requests."""
        send = AsyncMock(
            side_effect=[NatureRemoRejectedError("boom"), sample_settings]
        )
        coalescer, _, on_success = _create_coalescer(sample_settings, send)
        with pytest.raises(NatureRemoRejectedError):
            await coalescer.async_request_change({"temperature": "99"})
        await coalescer.async_request_change({"temperature": "26"})
        assert send.await_count == 2
        on_success.assert_called_once_with(sample_settings)

    @pytest.mark.asyncio
    async def test_failure_without_waiters_is_not_reported_unretrieved(
        self, sample_settings: AirconSettings
    ) -> None:
        """Test that a failed batch whose callers were cancelled logs nothing."""
        loop = asyncio.get_running_loop()
        exception_handler = Mock()
        loop.set_exception_handler(exception_handler)
        try:
            error = NatureRemoRejectedError("boom")
            coalescer, send, _ = _create_coalescer(
                sample_settings, AsyncMock(side_effect=error)
            )
            request = asyncio.create_task(
                coalescer.async_request_change({"temperature": "99"})
            )
            await asyncio.sleep(0)
            request.cancel()
            await asyncio.gather(request, return_exceptions=True)

            await asyncio.sleep(DEBOUNCE_DELAY * 5)
            send.assert_awaited_once()
            del coalescer, send, error, request
            gc.collect()
            exception_handler.assert_not_called()
        finally:
            loop.set_exception_handler(None)


class TestAirconUpdateCoalescerInFlight:
    """Tests for the single in-flight write."""

    @pytest.mark.asyncio
    async def test_requests_during_write_wait_for_next_batch(
        self, sample_settings: AirconSettings
    ) -> None:
        """Test that a request made during a write is sent after it."""
        release = asyncio.Event()
        started = asyncio.Event()
        payloads: list[dict[str, str]] = []

        async def send(payload: dict[str, str]) -> AirconSettings:
            payloads.append(payload)
            started.set()
            await release.wait()
            return sample_settings

        coalescer = AirconUpdateCoalescer(
            send, lambda: sample_settings, Mock(), delay=DEBOUNCE_DELAY
        )
        first = asyncio.create_task(
            coalescer.async_request_change({"temperature": "26"})
        )
        await started.wait()
        assert coalescer.write_in_progress
        assert coalescer.pending_params is None

        second = asyncio.create_task(
            coalescer.async_request_change({"temperature": "27"})
        )
        await asyncio.sleep(DEBOUNCE_DELAY * 5)
        assert len(payloads) == 1
        assert coalescer.pending_params == {"temperature": "27"}

        release.set()
        await asyncio.gather(first, second)
        assert payloads == [
            {"button": "", "temperature": "26"},
            {"button": "", "temperature": "27"},
        ]
        assert not coalescer.write_in_progress

    @pytest.mark.asyncio
    async def test_revert_during_write_is_sent_after_it(
        self, sample_settings: AirconSettings
    ) -> None:
        """Test that a request undoing the in-flight change is not skipped."""
        release = asyncio.Event()
        started = asyncio.Event()
        cache = {"settings": sample_settings}
        payloads: list[dict[str, str]] = []

        async def send(payload: dict[str, str]) -> AirconSettings:
            payloads.append(payload)
            started.set()
            await release.wait()
            return replace(cache["settings"], mode=payload["operation_mode"])

        def on_success(settings: AirconSettings) -> None:
            cache["settings"] = settings

        coalescer = AirconUpdateCoalescer(
            send, lambda: cache["settings"], on_success, delay=DEBOUNCE_DELAY
        )
        first = asyncio.create_task(
            coalescer.async_request_change({"operation_mode": "warm"})
        )
        await started.wait()
        second = asyncio.create_task(
            coalescer.async_request_change({"operation_mode": "cool"})
        )
        await asyncio.sleep(0)
        assert not second.done()
        assert coalescer.pending_params == {"operation_mode": "cool"}

        release.set()
        await asyncio.gather(first, second)
        assert [payload["operation_mode"] for payload in payloads] == ["warm", "cool"]
        assert cache["settings"].mode == "cool"


class TestAirconUpdateCoalescerShutdown:
    """Tests for async_shutdown method."""

    @pytest.mark.asyncio
    async def test_shutdown_cancels_scheduled_write(
        self, sample_settings: AirconSettings
    ) -> None:
        """Test that shutdown cancels a scheduled write and its waiters."""
        coalescer, send, _ = _create_coalescer(sample_settings, delay=10)
        request = asyncio.create_task(
            coalescer.async_request_change({"temperature": "26"})
        )
        await asyncio.sleep(0)
        assert coalescer.pending_params == {"temperature": "26"}

        await coalescer.async_shutdown()

        with pytest.raises(asyncio.CancelledError):
            await request
        send.assert_not_awaited()
        assert coalescer.pending_params is None
