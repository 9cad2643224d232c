import asyncio
import typing

import pytest

import clipwatch.poller
import clipwatch.reconciler
import clipwatch.status_store

import conftest


PAYLOAD = {"buttons": [conftest.button(1, "playing", label="a")], "currentPage": 0}


class BlockingTransport (conftest.FakeTransport):

	"""Fetches wait until the test releases them."""

	def __init__ (self, payload: typing.Any) -> None:

		super().__init__([payload])
		self.release = asyncio.Event()

	async def fetch_status (self) -> typing.Any:

		"""Block on the release event, then return the payload."""

		self.fetches += 1
		await self.release.wait()
		return self.payloads[0]


class UncancellableTransport (BlockingTransport):

	"""Fetches run to completion even when their task is cancelled."""

	async def fetch_status (self) -> typing.Any:

		"""Wait for the release event, ignoring one cancellation."""

		self.fetches += 1

		try:
			await self.release.wait()
		except asyncio.CancelledError:
			await self.release.wait()

		return self.payloads[0]


def test_clamp_interval () -> None:

	"""Missing or zero uses the default; everything else is clamped to 100-10000."""

	assert clipwatch.poller.clamp_interval(None) == 1000
	assert clipwatch.poller.clamp_interval(0) == 1000
	assert clipwatch.poller.clamp_interval(50) == 100
	assert clipwatch.poller.clamp_interval(20000) == 10000
	assert clipwatch.poller.clamp_interval(250.7) == 250


@pytest.mark.asyncio
async def test_start_polls_immediately (reconciler: clipwatch.reconciler.Reconciler, store: clipwatch.status_store.StatusStore) -> None:

	"""The first poll does not wait for the interval."""

	transport = conftest.FakeTransport([PAYLOAD])
	scheduler = clipwatch.poller.PollScheduler(transport, reconciler)

	await scheduler.start(5000)
	await asyncio.sleep(0.05)

	assert scheduler.running
	assert transport.fetches == 1
	assert store.get(1).state == "playing"
	assert reconciler.variables["current_page"] == 1

	await scheduler.stop()


@pytest.mark.asyncio
async def test_polls_on_interval (reconciler: clipwatch.reconciler.Reconciler) -> None:

	"""A 100 ms interval polls about three times in a quarter second."""

	transport = conftest.FakeTransport([PAYLOAD])
	scheduler = clipwatch.poller.PollScheduler(transport, reconciler)

	await scheduler.start(100)
	await asyncio.sleep(0.25)
	await scheduler.stop()

	assert 2 <= transport.fetches <= 4


@pytest.mark.asyncio
async def test_rapid_restarts_leave_one_timer (reconciler: clipwatch.reconciler.Reconciler) -> None:

	"""Starting many times in a row never stacks timers."""

	transport = conftest.FakeTransport([PAYLOAD])
	scheduler = clipwatch.poller.PollScheduler(transport, reconciler)

	for _ in range(10):
		await scheduler.start(100)

	fetches_after_start = transport.fetches

	await asyncio.sleep(0.25)
	await scheduler.stop()

	assert transport.fetches - fetches_after_start <= 5


@pytest.mark.asyncio
async def test_stop_halts_polling (reconciler: clipwatch.reconciler.Reconciler) -> None:

	"""No fetches happen after stop()."""

	transport = conftest.FakeTransport([PAYLOAD])
	scheduler = clipwatch.poller.PollScheduler(transport, reconciler)

	await scheduler.start(100)
	await asyncio.sleep(0.05)
	await scheduler.stop()

	count = transport.fetches
	await asyncio.sleep(0.25)

	assert not scheduler.running
	assert transport.fetches == count


@pytest.mark.asyncio
async def test_stop_when_not_running_is_harmless (reconciler: clipwatch.reconciler.Reconciler) -> None:

	"""stop() can be called any number of times."""

	scheduler = clipwatch.poller.PollScheduler(conftest.FakeTransport(), reconciler)

	await scheduler.stop()
	await scheduler.stop()

	assert not scheduler.running


@pytest.mark.asyncio
async def test_in_flight_poll_skips_ticks (reconciler: clipwatch.reconciler.Reconciler) -> None:

	"""A slow response makes the next ticks skip instead of overlapping."""

	transport = conftest.FakeTransport([PAYLOAD], delay=0.35)
	scheduler = clipwatch.poller.PollScheduler(transport, reconciler)

	await scheduler.start(100)
	await asyncio.sleep(0.3)

	assert transport.fetches == 1
	assert scheduler.skipped_ticks >= 2

	await scheduler.stop()


@pytest.mark.asyncio
async def test_response_after_stop_is_discarded (reconciler: clipwatch.reconciler.Reconciler, store: clipwatch.status_store.StatusStore) -> None:

	"""A fetch that finishes while stop() is waiting for it never reaches the reconciler."""

	transport = UncancellableTransport(PAYLOAD)
	scheduler = clipwatch.poller.PollScheduler(transport, reconciler)

	await scheduler.start(5000)
	await asyncio.sleep(0.01)

	stopping = asyncio.create_task(scheduler.stop())
	await asyncio.sleep(0.01)

	assert not stopping.done()

	transport.release.set()
	await stopping
	await asyncio.sleep(0.01)

	assert transport.fetches == 1
	assert len(store) == 0
	assert reconciler.variables == {}


@pytest.mark.asyncio
async def test_concurrent_starts_leave_one_timer (reconciler: clipwatch.reconciler.Reconciler) -> None:

	"""Overlapping start() calls end with exactly one timer task."""

	transport = conftest.FakeTransport([PAYLOAD])
	scheduler = clipwatch.poller.PollScheduler(transport, reconciler)

	await scheduler.start(100)
	await asyncio.gather(scheduler.start(100), scheduler.start(100), scheduler.reconfigure(100))

	timers = [
		task for task in asyncio.all_tasks()
		if getattr(task.get_coro(), "__qualname__", "") == "PollScheduler._timer_loop"
	]

	assert timers == [scheduler._timer_task]

	await scheduler.stop()

	assert not scheduler.running


@pytest.mark.asyncio
async def test_stop_cancels_outstanding_poll (reconciler: clipwatch.reconciler.Reconciler, store: clipwatch.status_store.StatusStore) -> None:

	"""Releasing a fetch after stop() changes nothing."""

	transport = BlockingTransport(PAYLOAD)
	scheduler = clipwatch.poller.PollScheduler(transport, reconciler)

	await scheduler.start(5000)
	await asyncio.sleep(0.01)
	await scheduler.stop()

	transport.release.set()
	await asyncio.sleep(0.01)

	assert len(store) == 0


@pytest.mark.asyncio
async def test_failed_fetch_keeps_polling (reconciler: clipwatch.reconciler.Reconciler) -> None:

	"""An exception from the transport is logged and the timer keeps going."""

	transport = conftest.FakeTransport([RuntimeError("boom"), PAYLOAD])
	scheduler = clipwatch.poller.PollScheduler(transport, reconciler)

	await scheduler.start(100)
	await asyncio.sleep(0.15)
	await scheduler.stop()

	assert transport.fetches >= 2
	assert reconciler.active_clip is not None


@pytest.mark.asyncio
async def test_none_payload_is_ignored (reconciler: clipwatch.reconciler.Reconciler) -> None:

	"""A failed request (None) does not touch the variables."""

	transport = conftest.FakeTransport([None])
	scheduler = clipwatch.poller.PollScheduler(transport, reconciler)

	await scheduler.start(5000)
	await asyncio.sleep(0.02)
	await scheduler.stop()

	assert reconciler.variables == {}


@pytest.mark.asyncio
async def test_reconfigure_applies_address_and_interval (reconciler: clipwatch.reconciler.Reconciler) -> None:

	"""reconfigure() restarts with the new host, port and interval."""

	transport = conftest.FakeTransport([PAYLOAD])
	scheduler = clipwatch.poller.PollScheduler(transport, reconciler)

	await scheduler.start(1000)
	await scheduler.reconfigure(interval_ms=200, host="10.0.0.5", port=9000)

	assert scheduler.running
	assert scheduler.interval_ms == 200
	assert transport.base_url == "http://10.0.0.5:9000"

	await scheduler.stop()
