import asyncio
import logging
import signal
import typing

import clipwatch.commands
import clipwatch.config
import clipwatch.constants
import clipwatch.display
import clipwatch.event_emitter
import clipwatch.feedbacks
import clipwatch.instance_status
import clipwatch.osc
import clipwatch.poller
import clipwatch.reconciler
import clipwatch.status_store
import clipwatch.transport
import clipwatch.variables


logger = logging.getLogger(__name__)


class Monitor:

	"""
	Mirrors one playback device and publishes its state.

	The ``Monitor`` wires the pieces together: a ``RemoteTransport`` talks to
	the device, a ``PollScheduler`` fetches its status on a timer, the
	``Reconciler`` turns each status into the snapshot and the variable
	projection, and the ``FeedbackEvaluator`` answers boolean feedback queries
	from that snapshot.  Optional outputs (OSC, terminal display) subscribe to
	the monitor's events.

	Lifecycle mirrors a host module: ``init()`` once, ``config_updated()`` on
	every settings change, ``destroy()`` on teardown.  ``run()`` does all three
	for standalone use and blocks until interrupted.

	Example:
		```python
		monitor = clipwatch.Monitor(host="192.168.1.20", port=8090, poll_interval=500)
		monitor.feedback("deck_1_playing", "buttonState", buttonNumber=1)
		monitor.display()
		monitor.run()
		```
	"""

	def __init__ (
		self,
		host: str = clipwatch.constants.DEFAULT_HOST,
		port: int = clipwatch.constants.DEFAULT_PORT,
		poll_interval: int = clipwatch.constants.DEFAULT_POLL_INTERVAL_MS,
		enable_polling: bool = True,
		timeout: float = clipwatch.constants.DEFAULT_TIMEOUT_SECONDS
	) -> None:

		"""
		Parameters:
			host: Device host name or IP address (default ``localhost``).
			port: Device HTTP port (default 8090).
			poll_interval: Status poll period in milliseconds (100-10000).
			enable_polling: When False, commands work but status is never fetched.
			timeout: Per-request timeout in seconds.
		"""

		self.config = clipwatch.config.MonitorConfig(
			host = host,
			port = port,
			enable_polling = enable_polling,
			poll_interval = poll_interval,
			timeout = timeout
		)

		self.events = clipwatch.event_emitter.EventEmitter()
		self.reporter = clipwatch.instance_status.StatusReporter(self.events)
		self.transport = clipwatch.transport.RemoteTransport(host, port, self.reporter, timeout)
		self.store = clipwatch.status_store.StatusStore()
		self.reconciler = clipwatch.reconciler.Reconciler(self.store, self.events)
		self.feedbacks = clipwatch.feedbacks.FeedbackEvaluator(self.store, self.events)
		self.poller = clipwatch.poller.PollScheduler(self.transport, self.reconciler)
		self.commands = clipwatch.commands.Commands(self.transport)

		self._osc_server: typing.Optional[clipwatch.osc.OscServer] = None
		self._display: typing.Optional[clipwatch.display.Display] = None
		self._initialized: bool = False

		self.events.on("feedbacks", self.feedbacks.check)

	@classmethod
	def from_config (cls, config: clipwatch.config.MonitorConfig) -> "Monitor":

		"""Build a monitor (with OSC and display, if configured) from a ``MonitorConfig``."""

		config.validate()

		monitor = cls(
			host = config.host,
			port = config.port,
			poll_interval = config.poll_interval,
			enable_polling = config.enable_polling,
			timeout = config.timeout
		)

		monitor.config = config

		if config.osc is not None:
			monitor.osc(config.osc.receive_port, config.osc.send_port, config.osc.send_host)

		if config.display:
			monitor.display()

		for entry in config.feedbacks:
			options = {key: value for key, value in entry.items() if key not in ("id", "type")}
			monitor.feedback(entry["id"], entry["type"], **options)

		return monitor

	@property
	def variables (self) -> typing.Dict[str, clipwatch.variables.VariableValue]:
		"""Every variable value published so far."""
		return self.reconciler.variables

	@property
	def status (self) -> str:
		"""The current connection status (see ``clipwatch.instance_status``)."""
		return self.reporter.status

	@property
	def active_clip (self) -> typing.Optional[clipwatch.status_store.ButtonStatus]:
		"""The clip in focus after the last poll, or None."""
		return self.reconciler.active_clip

	def variable_definitions (self) -> typing.List[clipwatch.variables.VariableDefinition]:
		"""The full variable catalog."""
		return clipwatch.variables.variable_definitions()

	def feedback (self, feedback_id: str, feedback_type: str, **options: typing.Any) -> bool:

		"""
		Register a feedback to be re-checked after every poll; returns its current value.

		Example:
			```python
			monitor.feedback("any_playing", "playerStatus", status="playing")
			monitor.feedback("loop_4", "loopStatus", buttonNumber=4, loopSetting="on")
			```
		"""

		return self.feedbacks.register(feedback_id, feedback_type, options)

	def osc (self, receive_port: int = 9000, send_port: int = 9001, send_host: str = "127.0.0.1") -> None:

		"""
		Enable the OSC control-surface bridge.

		Parameters:
			receive_port: Port to listen for commands (default 9000).
			send_port: Port to send variable and feedback updates to (default 9001).
			send_host: The IP address to send updates to (default "127.0.0.1").
		"""

		self._osc_server = clipwatch.osc.OscServer(
			self,
			receive_port = receive_port,
			send_port = send_port,
			send_host = send_host
		)

	def display (self, enabled: bool = True) -> None:

		"""Show (or hide) the terminal status line."""

		self._display = clipwatch.display.Display(self) if enabled else None

	async def init (self, config: typing.Optional[clipwatch.config.MonitorConfig] = None) -> None:

		"""
		Validate the configuration, start outputs and begin polling.

		Raises ``ValueError`` (after reporting ``bad_config``) when the
		configuration is invalid.
		"""

		if config is not None:
			self.config = config

		self._validate(self.config)
		self._apply_connection(self.config)

		if self._osc_server is not None:
			await self._osc_server.start()
			self.events.on("variables", self._osc_server.publish_variables)
			self.events.on("feedback", self._osc_server.publish_feedback)

		if self._display is not None:
			self._display.start()
			self.events.on("variables", self._display.update)
			self.events.on("status", self._display.update)

		self._initialized = True

		if self.config.enable_polling:
			self.reporter.update(clipwatch.instance_status.STATUS_CONNECTING)
			await self.poller.start(self.config.poll_interval)
		else:
			self.reporter.update(clipwatch.instance_status.STATUS_OK)

	async def config_updated (self, config: clipwatch.config.MonitorConfig) -> None:

		"""Apply new settings: polling is stopped, reconfigured, and restarted if enabled."""

		self._validate(config)

		await self.poller.stop()

		self.config = config
		self._apply_connection(config)

		if config.enable_polling:
			await self.poller.start(config.poll_interval)

	async def destroy (self) -> None:

		"""Stop polling and outputs and release the HTTP session."""

		await self.poller.stop()

		if self._osc_server is not None and self._initialized:
			self.events.off("variables", self._osc_server.publish_variables)
			self.events.off("feedback", self._osc_server.publish_feedback)
			await self._osc_server.stop()

		if self._display is not None and self._initialized:
			self.events.off("variables", self._display.update)
			self.events.off("status", self._display.update)
			self._display.stop()

		await self.transport.close()

		self._initialized = False
		self.reporter.update(clipwatch.instance_status.STATUS_DISCONNECTED)

	def run (self) -> None:

		"""
		Start monitoring and block until the program is interrupted (Ctrl+C).
		"""

		try:
			asyncio.run(self._run())

		except KeyboardInterrupt:
			pass

	async def _run (self) -> None:

		"""
		Async entry point: init, wait for a stop signal, destroy.
		"""

		await self.init()

		logger.info("Monitoring. Press Ctrl+C to stop.")

		stop_event = asyncio.Event()
		loop = asyncio.get_running_loop()

		def _request_stop () -> None:

			"""
			Signal handler to request a clean shutdown.
			"""

			stop_event.set()

		for sig in (signal.SIGINT, signal.SIGTERM):
			loop.add_signal_handler(sig, _request_stop)

		try:
			await stop_event.wait()
		finally:
			await self.destroy()

	def _validate (self, config: clipwatch.config.MonitorConfig) -> None:

		try:
			config.validate()
		except ValueError as exc:
			self.reporter.update(clipwatch.instance_status.STATUS_BAD_CONFIG, str(exc))
			raise

	def _apply_connection (self, config: clipwatch.config.MonitorConfig) -> None:

		self.transport.host = config.host
		self.transport.port = config.port
		self.transport.timeout = config.timeout
