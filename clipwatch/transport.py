"""HTTP transport to the playback device.

``RemoteTransport.send_command()`` performs exactly one request to
``http://<host>:<port><path>`` and never raises for network or HTTP problems.
Instead it reports them through the ``StatusReporter``:

- connection refused, DNS failure, timeout → ``connection_failure``, returns None
- non-2xx response → ``unknown_warning``; the body is still parsed and returned
  when it is JSON (an unparseable error body is dropped at debug level)
- 2xx response → ``ok``; a body that is not JSON → ``unknown_warning``, returns None

No retries are attempted; the poll scheduler simply tries again next tick.
"""

import asyncio
import json
import logging
import typing

import aiohttp

import clipwatch.constants
import clipwatch.instance_status


logger = logging.getLogger(__name__)


class TransportError (Exception):

	"""Base class for transport problems."""


class TransportFailure (TransportError):

	"""The request never produced an HTTP response (network, DNS, timeout)."""


class RemoteError (TransportError):

	"""The device answered with a non-success HTTP status."""

	def __init__ (self, status: int, reason: str, body: str) -> None:

		super().__init__(f"HTTP Error: {status} {reason}")
		self.status = status
		self.reason = reason
		self.body = body


class ParseFailure (TransportError):

	"""A response body could not be decoded as JSON."""


def parse_json (text: str) -> typing.Any:

	"""Decode a response body; an empty body decodes to None."""

	if not text.strip():
		return None

	try:
		return json.loads(text)
	except ValueError as exc:
		raise ParseFailure(f"Invalid JSON body: {text[:200]!r}") from exc


class RemoteTransport:

	"""One ``aiohttp`` session talking to one device."""

	def __init__ (
		self,
		host: str = clipwatch.constants.DEFAULT_HOST,
		port: int = clipwatch.constants.DEFAULT_PORT,
		reporter: typing.Optional[clipwatch.instance_status.StatusReporter] = None,
		timeout: float = clipwatch.constants.DEFAULT_TIMEOUT_SECONDS
	) -> None:

		"""
		Parameters:
			host: Device host name or IP address.
			port: Device HTTP port.
			reporter: Where connection status is reported; a private one is
				created when omitted.
			timeout: Total time allowed for one request, in seconds.
		"""

		self.host = host
		self.port = port
		self.reporter = reporter if reporter is not None else clipwatch.instance_status.StatusReporter()
		self.timeout = timeout
		self._session: typing.Optional[aiohttp.ClientSession] = None

	@property
	def base_url (self) -> str:
		return f"http://{self.host}:{self.port}"

	def _get_session (self) -> aiohttp.ClientSession:

		if self._session is None or self._session.closed:
			self._session = aiohttp.ClientSession(headers={"Content-Type": "application/json"})

		return self._session

	async def close (self) -> None:

		"""Close the HTTP session; the next request opens a new one."""

		if self._session is not None:
			await self._session.close()
			self._session = None

	async def _request (self, method: str, url: str, body: typing.Optional[typing.Dict[str, typing.Any]]) -> str:

		"""Perform the request and return the body text, raising ``TransportError`` subclasses."""

		session = self._get_session()

		try:
			async with session.request(method, url, json=body, timeout=aiohttp.ClientTimeout(total=self.timeout)) as response:
				text = await response.text()

				if response.status >= 300:
					raise RemoteError(response.status, response.reason or "", text)

				return text

		except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
			raise TransportFailure(str(exc) or type(exc).__name__) from exc

	async def send_command (
		self,
		path: str,
		method: str = "GET",
		body: typing.Optional[typing.Dict[str, typing.Any]] = None
	) -> typing.Any:

		"""
		Send one request and return the decoded JSON body, or None.

		Example:
			```python
			await transport.send_command("/api/button/button-0/play", "POST")
			```
		"""

		url = f"{self.base_url}{path}"

		try:
			text = await self._request(method, url, body)

		except TransportFailure as exc:
			logger.error(f"Network error: {exc}")
			self.reporter.update(clipwatch.instance_status.STATUS_CONNECTION_FAILURE, str(exc))
			return None

		except RemoteError as exc:
			logger.error(str(exc))
			self.reporter.update(clipwatch.instance_status.STATUS_UNKNOWN_WARNING, f"HTTP Error: {exc.status}")

			try:
				return parse_json(exc.body)
			except ParseFailure as parse_exc:
				logger.debug(f"Could not parse error body from {url}: {parse_exc}")
				return None

		self.reporter.update(clipwatch.instance_status.STATUS_OK)

		try:
			return parse_json(text)
		except ParseFailure as exc:
			logger.warning(f"{method} {url}: {exc}")
			self.reporter.update(clipwatch.instance_status.STATUS_UNKNOWN_WARNING, "Invalid JSON response")
			return None

	async def fetch_status (self) -> typing.Any:

		"""Fetch the device status document (``{"buttons": [...], "currentPage": n}``)."""

		return await self.send_command(clipwatch.constants.STATUS_PATH, "GET")
