"""OSC bridge between the monitor and a control surface.

Enable it with ``monitor.osc()`` before ``monitor.run()``.  The bridge listens
on a UDP port (default 9000) for commands and sends projection updates to a
target host/port (default 127.0.0.1:9001).

Receive Handlers
────────────────
- ``/play/<n>``, ``/stop/<n>``, ``/toggle/<n>``, ``/pause/<n>``: Button transport
- ``/fade/<n> [seconds]``: Fade a button out (default 3 seconds)
- ``/loop/<n> [on|off|toggle]``: Set a button's loop mode (default toggle)
- ``/page <int>``: Change page (1-based)
- ``/stop_all``: Stop every button
- ``/next``: Play the next button

Send Events
───────────
- ``/variable/<name> <value>``: A variable whose value changed
- ``/feedback/<id> <0|1>``: A feedback whose result changed
"""

import asyncio
import logging
import typing

import pythonosc.dispatcher
import pythonosc.osc_server
import pythonosc.udp_client

if typing.TYPE_CHECKING:
	from clipwatch.monitor import Monitor


logger = logging.getLogger(__name__)


class OscServer:

	"""Async OSC server/client for the control surface."""

	def __init__ (
		self,
		monitor: "Monitor",
		receive_port: int = 9000,
		send_port: int = 9001,
		send_host: str = "127.0.0.1"
	) -> None:

		self._monitor = monitor
		self._receive_port = receive_port
		self._send_port = send_port
		self._send_host = send_host

		self._server: typing.Optional[typing.Any] = None
		self._transport: typing.Optional[asyncio.BaseTransport] = None
		self._client: typing.Optional[pythonosc.udp_client.SimpleUDPClient] = None
		self._dispatcher = pythonosc.dispatcher.Dispatcher()
		self._sent: typing.Dict[str, typing.Any] = {}
		self._tasks: typing.Set[asyncio.Task] = set()

		self._dispatcher.map("/play/*", self._handle_button)
		self._dispatcher.map("/stop/*", self._handle_button)
		self._dispatcher.map("/toggle/*", self._handle_button)
		self._dispatcher.map("/pause/*", self._handle_button)
		self._dispatcher.map("/fade/*", self._handle_fade)
		self._dispatcher.map("/loop/*", self._handle_loop)
		self._dispatcher.map("/page", self._handle_page)
		self._dispatcher.map("/stop_all", self._handle_stop_all)
		self._dispatcher.map("/next", self._handle_next)


	@property
	def receive_port (self) -> int:

		"""The bound receive port (useful when constructed with port 0)."""

		if self._transport is not None:
			return self._transport.get_extra_info("sockname")[1]

		return self._receive_port

	async def start (self) -> None:

		"""Start the OSC server and client."""

		self._client = pythonosc.udp_client.SimpleUDPClient(self._send_host, self._send_port)

		self._server = pythonosc.osc_server.AsyncIOOSCUDPServer(
			("0.0.0.0", self._receive_port),
			self._dispatcher,
			asyncio.get_running_loop()  # type: ignore[arg-type]
		)

		transport, _ = await self._server.create_serve_endpoint()
		self._transport = transport

		logger.info(f"OSC listening on :{self.receive_port}, sending to {self._send_host}:{self._send_port}")

	async def stop (self) -> None:

		"""Stop the OSC server."""

		if self._transport:
			self._transport.close()
			self._transport = None
			self._client = None
			self._sent = {}
			logger.info("OSC server stopped")

	def send (self, address: str, *args: typing.Any) -> None:

		"""Send an OSC message."""

		if self._client:
			try:
				self._client.send_message(address, list(args))
			except Exception as e:
				logger.warning(f"OSC send error: {e}")

	def publish_variables (self, values: typing.Dict[str, typing.Any]) -> None:

		"""Send each variable whose value differs from the last one sent."""

		if not self._client:
			return

		for name, value in values.items():
			key = f"/variable/{name}"
			if self._sent.get(key) != value:
				self._sent[key] = value
				self.send(key, value)

	def publish_feedback (self, results: typing.Dict[str, bool]) -> None:

		"""Send each feedback result that changed, as 0 or 1."""

		if not self._client:
			return

		for feedback_id, value in results.items():
			key = f"/feedback/{feedback_id}"
			flag = 1 if value else 0
			if self._sent.get(key) != flag:
				self._sent[key] = flag
				self.send(key, flag)

	def map (self, address: str, handler: typing.Callable) -> None:

		"""Register a custom OSC handler."""

		self._dispatcher.map(address, handler)


	# Handlers

	def _spawn (self, coro: typing.Coroutine) -> None:

		task = asyncio.get_running_loop().create_task(coro)
		self._tasks.add(task)
		task.add_done_callback(self._command_done)

	def _command_done (self, task: asyncio.Task) -> None:

		self._tasks.discard(task)

		if not task.cancelled() and task.exception() is not None:
			logger.warning(f"OSC command failed: {task.exception()}")

	@staticmethod
	def _button_number (address: str) -> typing.Optional[int]:

		# address is like /play/3
		parts = address.split("/")

		if len(parts) >= 3 and parts[2].isdigit():
			return int(parts[2])

		logger.warning(f"Invalid OSC button address: {address}")
		return None

	def _handle_button (self, address: str, *args: typing.Any) -> None:

		button = self._button_number(address)

		if button is None:
			return

		commands = self._monitor.commands
		action = address.split("/")[1]

		handlers = {
			"play": commands.play_button,
			"stop": commands.stop_button,
			"toggle": commands.toggle_button,
			"pause": commands.pause_button,
		}

		self._spawn(handlers[action](button))

	def _handle_fade (self, address: str, *args: typing.Any) -> None:

		button = self._button_number(address)

		if button is None:
			return

		try:
			seconds = float(args[0]) if args else 3.0
		except (ValueError, TypeError):
			logger.warning(f"Invalid OSC fade argument: {args[0]}")
			return

		self._spawn(self._monitor.commands.fade_button(button, seconds))

	def _handle_loop (self, address: str, *args: typing.Any) -> None:

		button = self._button_number(address)

		if button is None:
			return

		mode = str(args[0]) if args else "toggle"
		self._spawn(self._monitor.commands.set_loop(button, mode))

	def _handle_page (self, address: str, *args: typing.Any) -> None:

		if not args:
			return

		try:
			page = int(args[0])
		except (ValueError, TypeError):
			logger.warning(f"Invalid OSC page argument: {args[0]}")
			return

		self._spawn(self._monitor.commands.change_page(page))

	def _handle_stop_all (self, address: str, *args: typing.Any) -> None:
		self._spawn(self._monitor.commands.stop_all())

	def _handle_next (self, address: str, *args: typing.Any) -> None:
		self._spawn(self._monitor.commands.next_button())
