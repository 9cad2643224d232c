import asyncio
import typing

import pytest

import clipwatch.event_emitter
import clipwatch.reconciler
import clipwatch.status_store


class FakeTransport:

	"""Scripted stand-in for ``RemoteTransport``.

	Each ``fetch_status()`` returns the next scripted payload (the last one
	repeats).  An optional delay keeps a poll in flight; a scripted exception is
	raised instead of returned.
	"""

	def __init__ (self, payloads: typing.Optional[typing.List[typing.Any]] = None, delay: float = 0.0) -> None:

		"""Store the scripted payloads and the per-fetch delay."""

		self.host = "localhost"
		self.port = 8090
		self.payloads = list(payloads or [])
		self.delay = delay
		self.fetches = 0
		self.commands: typing.List[typing.Tuple[str, str, typing.Any]] = []
		self.closed = False

	@property
	def base_url (self) -> str:
		return f"http://{self.host}:{self.port}"

	async def fetch_status (self) -> typing.Any:

		"""Return the next scripted payload after the configured delay."""

		self.fetches += 1

		if self.delay:
			await asyncio.sleep(self.delay)

		if not self.payloads:
			return None

		payload = self.payloads.pop(0) if len(self.payloads) > 1 else self.payloads[0]

		if isinstance(payload, Exception):
			raise payload

		return payload

	async def send_command (self, path: str, method: str = "GET", body: typing.Any = None) -> typing.Any:

		"""Record the command instead of sending it."""

		self.commands.append((path, method, body))
		return {"success": True}

	async def close (self) -> None:

		"""Mark the fake as closed."""

		self.closed = True


def button (number: int, state: str = "idle", **extra: typing.Any) -> typing.Dict[str, typing.Any]:

	"""Build one wire-format button record."""

	record: typing.Dict[str, typing.Any] = {"buttonNumber": number, "state": state}
	record.update(extra)
	return record


@pytest.fixture
def events () -> clipwatch.event_emitter.EventEmitter:

	"""A fresh event emitter."""

	return clipwatch.event_emitter.EventEmitter()


@pytest.fixture
def store () -> clipwatch.status_store.StatusStore:

	"""An empty status snapshot."""

	return clipwatch.status_store.StatusStore()


@pytest.fixture
def reconciler (store: clipwatch.status_store.StatusStore, events: clipwatch.event_emitter.EventEmitter) -> clipwatch.reconciler.Reconciler:

	"""A reconciler writing to the shared store and emitter."""

	return clipwatch.reconciler.Reconciler(store, events)
