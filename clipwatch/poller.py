"""Recurring status poll.

The scheduler has two states, stopped and scheduled.

``start()`` always stops first, so at most one timer exists at any moment, then
arms a repeating timer and fires one poll straight away so the first update
does not wait a full interval.  ``stop()`` cancels the timer and any poll that
is still waiting on the network.  Changing the interval or the device address
goes through ``reconfigure()``, which is exactly ``stop()`` then ``start()``.
The three lifecycle calls hold one lock, so overlapping calls run one after
another.

Overlap: if the previous poll has not finished when the timer fires, that tick
is skipped.  Results are tagged with the generation they were started in, and
every ``stop()`` starts a new generation, so a response that lands after
``stop()`` is thrown away instead of reaching the reconciler.
"""

import asyncio
import logging
import typing

import clipwatch.constants
import clipwatch.reconciler
import clipwatch.transport


logger = logging.getLogger(__name__)


def clamp_interval (interval_ms: typing.Optional[float]) -> int:

	"""Return a usable poll interval in milliseconds (default 1000, range 100-10000)."""

	if not interval_ms:
		return clipwatch.constants.DEFAULT_POLL_INTERVAL_MS

	return int(max(clipwatch.constants.MIN_POLL_INTERVAL_MS, min(clipwatch.constants.MAX_POLL_INTERVAL_MS, interval_ms)))


class PollScheduler:

	"""Drives ``transport.fetch_status()`` into ``reconciler.apply()`` on a timer."""

	def __init__ (
		self,
		transport: clipwatch.transport.RemoteTransport,
		reconciler: clipwatch.reconciler.Reconciler
	) -> None:

		self._transport = transport
		self._reconciler = reconciler

		self.interval_ms: int = clipwatch.constants.DEFAULT_POLL_INTERVAL_MS
		self.poll_count: int = 0
		self.skipped_ticks: int = 0

		self._generation: int = 0
		self._timer_task: typing.Optional[asyncio.Task] = None
		self._poll_task: typing.Optional[asyncio.Task] = None
		self._lock = asyncio.Lock()

	@property
	def running (self) -> bool:

		"""True while a timer is scheduled."""

		return self._timer_task is not None

	async def start (self, interval_ms: typing.Optional[float] = None) -> None:

		"""
		Arm the repeating timer and poll once immediately.

		Any timer already running is stopped first.  Concurrent calls are
		serialized, so the last one to run owns the only timer.
		"""

		async with self._lock:
			await self._stop()
			self._start(interval_ms)

	async def stop (self) -> None:

		"""
		Cancel the timer and any in-flight poll.

		After this returns the reconciler will not be called again until the
		next ``start()``.  Safe to call when already stopped.
		"""

		async with self._lock:
			await self._stop()

	async def reconfigure (
		self,
		interval_ms: typing.Optional[float] = None,
		host: typing.Optional[str] = None,
		port: typing.Optional[int] = None
	) -> None:

		"""Stop, apply new connection parameters, and start again."""

		async with self._lock:
			await self._stop()

			if host is not None:
				self._transport.host = host

			if port is not None:
				self._transport.port = port

			self._start(interval_ms if interval_ms is not None else self.interval_ms)

	def _start (self, interval_ms: typing.Optional[float]) -> None:

		self.interval_ms = clamp_interval(interval_ms)
		self._timer_task = asyncio.create_task(self._timer_loop(self._generation, self.interval_ms / 1000.0))

		logger.info(f"Polling {self._transport.base_url} every {self.interval_ms} ms")

		self._tick()

	async def _stop (self) -> None:

		if self._timer_task is None and self._poll_task is None:
			return

		self._generation += 1

		tasks = [task for task in (self._timer_task, self._poll_task) if task is not None]
		self._timer_task = None
		self._poll_task = None

		for task in tasks:
			task.cancel()

		await asyncio.gather(*tasks, return_exceptions=True)

		logger.info("Polling stopped")

	async def _timer_loop (self, generation: int, interval: float) -> None:

		"""Fire ``_tick()`` every *interval* seconds until the generation changes."""

		loop = asyncio.get_running_loop()
		next_tick = loop.time() + interval

		while generation == self._generation:

			await asyncio.sleep(max(0.0, next_tick - loop.time()))

			if generation != self._generation:
				break

			self._tick()

			next_tick += interval

			# After a stall, resume the cadence from now rather than firing a burst.
			if next_tick < loop.time():
				next_tick = loop.time() + interval

	def _tick (self) -> None:

		"""Start a poll unless the previous one is still in flight."""

		if self._poll_task is not None and not self._poll_task.done():
			self.skipped_ticks += 1
			logger.debug("Previous poll still in flight - skipping tick")
			return

		self.poll_count += 1
		self._poll_task = asyncio.create_task(self._poll(self._generation))

	async def _poll (self, generation: int) -> None:

		"""Fetch once and hand the result to the reconciler if still current."""

		try:
			payload = await self._transport.fetch_status()

		except Exception as exc:
			logger.warning(f"Status fetch failed: {exc}")
			return

		if generation != self._generation:
			logger.debug("Discarding status that arrived after polling stopped")
			return

		if payload is None:
			# The transport has already reported why.
			return

		try:
			self._reconciler.apply(payload)
		except Exception as exc:
			logger.warning(f"Failed to apply status: {exc}")
