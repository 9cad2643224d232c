import asyncio
import typing


CallbackType = typing.Callable[..., typing.Any]


class EventEmitter:

	"""
	Named-event fan-out used to publish projections.

	Events used by clipwatch:

	- ``"variables"``: ``(values: dict)`` after each applied poll.
	- ``"feedbacks"``: ``(*feedback_types: str)`` feedback types to re-check.
	- ``"feedback"``: ``(results: dict)`` fresh feedback results by instance id.
	- ``"status"``: ``(status: str, message: str | None)`` connection status changes.
	"""

	def __init__ (self) -> None:

		"""
		Initialize an empty event registry.
		"""

		self._listeners: typing.Dict[str, typing.List[CallbackType]] = {}
		self._pending: typing.Set[asyncio.Task] = set()


	def on (self, event_name: str, callback: CallbackType) -> None:

		"""
		Register a callback for an event name.
		"""

		self._listeners.setdefault(event_name, []).append(callback)

	def off (self, event_name: str, callback: CallbackType) -> None:

		"""
		Unregister a previously registered callback.

		Raises ``ValueError`` if the callback is not registered for the event.
		"""

		if callback not in self._listeners.get(event_name, []):
			raise ValueError(f"Callback not registered for event {event_name!r}")

		self._listeners[event_name].remove(callback)

	def listeners (self, event_name: str) -> typing.Tuple[CallbackType, ...]:

		"""Return the callbacks currently registered for an event."""

		return tuple(self._listeners.get(event_name, []))


	def emit (self, event_name: str, *args: typing.Any) -> None:

		"""
		Call every listener for *event_name* in registration order.

		Plain callbacks run immediately.  Coroutine functions are started as
		tasks on the running loop; calling ``emit`` with an async listener
		outside a running loop raises ``RuntimeError``.
		"""

		for callback in self.listeners(event_name):

			if asyncio.iscoroutinefunction(callback):
				task = asyncio.get_running_loop().create_task(callback(*args))
				self._pending.add(task)
				task.add_done_callback(self._pending.discard)

			else:
				callback(*args)
