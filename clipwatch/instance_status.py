import logging
import typing

import clipwatch.event_emitter


logger = logging.getLogger(__name__)


STATUS_OK = "ok"
STATUS_CONNECTING = "connecting"
STATUS_DISCONNECTED = "disconnected"
STATUS_UNKNOWN_WARNING = "unknown_warning"
STATUS_CONNECTION_FAILURE = "connection_failure"
STATUS_BAD_CONFIG = "bad_config"

STATUSES = (
	STATUS_OK,
	STATUS_CONNECTING,
	STATUS_DISCONNECTED,
	STATUS_UNKNOWN_WARNING,
	STATUS_CONNECTION_FAILURE,
	STATUS_BAD_CONFIG,
)


class StatusReporter:

	"""
	Tracks the connection status shown to the host.

	Repeating the current status and message is a no-op, so a device that stays
	unreachable produces one log line and one ``"status"`` event, not one per
	poll.
	"""

	def __init__ (self, events: typing.Optional[clipwatch.event_emitter.EventEmitter] = None) -> None:

		self.events = events if events is not None else clipwatch.event_emitter.EventEmitter()
		self.status: str = STATUS_DISCONNECTED
		self.message: typing.Optional[str] = None

	def update (self, status: str, message: typing.Optional[str] = None) -> None:

		"""Set the status, logging and emitting ``"status"`` when it changes."""

		if status not in STATUSES:
			raise ValueError(f"Unknown status {status!r}")

		if (status, message) == (self.status, self.message):
			return

		self.status = status
		self.message = message

		detail = f" ({message})" if message else ""

		if status in (STATUS_OK, STATUS_CONNECTING, STATUS_DISCONNECTED):
			logger.info(f"Status: {status}{detail}")
		else:
			logger.warning(f"Status: {status}{detail}")

		self.events.emit("status", status, message)
