"""Monitor configuration.

A YAML file maps onto ``MonitorConfig``; every key is optional::

    host: 192.168.1.20
    port: 8090
    enable_polling: true
    poll_interval: 500      # milliseconds, 100-10000
    timeout: 5.0            # seconds per request

    osc:
      receive_port: 9000
      send_port: 9001
      send_host: 127.0.0.1

    display: true

    feedbacks:
      - {id: deck_1_playing, type: buttonState, buttonNumber: 1}
      - {id: idle, type: playerStatus, status: stopped}
"""

import dataclasses
import logging
import os
import re
import typing

import yaml

import clipwatch.constants


logger = logging.getLogger(__name__)

_HOSTNAME = re.compile(
	r"^(([a-zA-Z0-9]|[a-zA-Z0-9][a-zA-Z0-9\-]*[a-zA-Z0-9])\.)*([A-Za-z0-9]|[A-Za-z0-9][A-Za-z0-9\-]*[A-Za-z0-9])$"
)


@dataclasses.dataclass
class OscConfig:

	"""Where the OSC bridge listens and sends."""

	receive_port: int = 9000
	send_port: int = 9001
	send_host: str = "127.0.0.1"


@dataclasses.dataclass
class MonitorConfig:

	"""
	Connection and polling settings for one playback device.

	Attributes:
		host: Device host name or IPv4 address.
		port: Device HTTP port.
		enable_polling: When False the monitor sends commands but never polls.
		poll_interval: Poll period in milliseconds (100-10000).
		timeout: Per-request timeout in seconds.
		osc: OSC bridge settings, or None to leave the bridge off.
		display: Show the terminal status line.
		feedbacks: Feedbacks to register at start-up, each a mapping with
			``id``, ``type`` and the feedback options.
	"""

	host: str = clipwatch.constants.DEFAULT_HOST
	port: int = clipwatch.constants.DEFAULT_PORT
	enable_polling: bool = True
	poll_interval: int = clipwatch.constants.DEFAULT_POLL_INTERVAL_MS
	timeout: float = clipwatch.constants.DEFAULT_TIMEOUT_SECONDS
	osc: typing.Optional[OscConfig] = None
	display: bool = False
	feedbacks: typing.List[typing.Dict[str, typing.Any]] = dataclasses.field(default_factory=list)

	def validate (self) -> None:

		"""Raise ``ValueError`` naming the first invalid field."""

		if not isinstance(self.host, str) or not _HOSTNAME.match(self.host):
			raise ValueError(f"host is not a valid host name or address: {self.host!r}")

		if isinstance(self.port, bool) or not isinstance(self.port, int) or not 1 <= self.port <= 65535:
			raise ValueError(f"port must be between 1 and 65535, got {self.port!r}")

		if isinstance(self.poll_interval, bool) or not isinstance(self.poll_interval, (int, float)) or not (
			clipwatch.constants.MIN_POLL_INTERVAL_MS <= self.poll_interval <= clipwatch.constants.MAX_POLL_INTERVAL_MS
		):
			raise ValueError(
				f"poll_interval must be between {clipwatch.constants.MIN_POLL_INTERVAL_MS} and "
				f"{clipwatch.constants.MAX_POLL_INTERVAL_MS} ms, got {self.poll_interval!r}"
			)

		if isinstance(self.timeout, bool) or not isinstance(self.timeout, (int, float)) or self.timeout <= 0:
			raise ValueError(f"timeout must be positive, got {self.timeout!r}")

		for entry in self.feedbacks:
			if not isinstance(entry, dict) or "id" not in entry or "type" not in entry:
				raise ValueError(f"feedbacks entries need an id and a type, got {entry!r}")

	@classmethod
	def from_dict (cls, data: typing.Dict[str, typing.Any]) -> "MonitorConfig":

		"""Build a config from a parsed YAML mapping, ignoring unknown keys."""

		config = cls()

		for field in ("host", "enable_polling", "poll_interval", "timeout", "display"):
			if field in data:
				setattr(config, field, data[field])

		if "port" in data:
			# Ports are commonly written as strings in host UIs.
			port = data["port"]
			config.port = int(port) if isinstance(port, str) and port.strip().isdigit() else port

		feedbacks = data.get("feedbacks")

		if feedbacks:
			config.feedbacks = list(feedbacks)

		osc = data.get("osc")

		if osc:
			osc_data = osc if isinstance(osc, dict) else {}
			config.osc = OscConfig(
				receive_port = osc_data.get("receive_port", 9000),
				send_port = osc_data.get("send_port", 9001),
				send_host = osc_data.get("send_host", "127.0.0.1")
			)

		return config


def load_config (config_path: str = "clipwatch.yaml") -> MonitorConfig:

	"""
	Load configuration from a YAML file.

	A missing file logs a warning and yields the defaults.
	"""

	if not os.path.exists(config_path):
		logger.warning(f"Config file {config_path} not found. Using defaults.")
		return MonitorConfig()

	with open(config_path, "r") as f:
		data = yaml.safe_load(f) or {}

	if not isinstance(data, dict):
		raise ValueError(f"Config file {config_path} must contain a mapping")

	return MonitorConfig.from_dict(data)
