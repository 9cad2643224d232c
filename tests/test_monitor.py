import asyncio
import typing

import aiohttp.test_utils
import aiohttp.web
import pytest

import clipwatch
import clipwatch.config
import clipwatch.instance_status

import conftest


class FakeDevice:

	"""A local HTTP server speaking the device's status and command API."""

	def __init__ (self) -> None:

		"""Start with one playing clip and no recorded commands."""

		self.buttons: typing.List[typing.Dict[str, typing.Any]] = [
			conftest.button(1, "idle", label="one.mp4"),
			conftest.button(2, "playing", label="two.mp4", currentTime=10.5, remaining=20, isLooping=True),
		]
		self.page = 0
		self.commands: typing.List[str] = []
		self.server: typing.Optional[aiohttp.test_utils.TestServer] = None

	async def start (self) -> None:

		"""Serve on an ephemeral port."""

		app = aiohttp.web.Application()
		app.add_routes([
			aiohttp.web.get("/api/status", self._status),
			aiohttp.web.post("/api/button/{button}/{action}", self._button),
		])

		self.server = aiohttp.test_utils.TestServer(app, host="127.0.0.1")
		await self.server.start_server()

	async def close (self) -> None:

		"""Stop serving."""

		if self.server is not None:
			await self.server.close()

	async def _status (self, request: aiohttp.web.Request) -> aiohttp.web.Response:
		return aiohttp.web.json_response({"buttons": self.buttons, "currentPage": self.page})

	async def _button (self, request: aiohttp.web.Request) -> aiohttp.web.Response:
		self.commands.append(f"{request.match_info['button']}/{request.match_info['action']}")
		return aiohttp.web.json_response({"success": True})


@pytest.mark.asyncio
async def test_monitor_polls_and_publishes () -> None:

	"""init() polls the device and fills variables and feedbacks."""

	device = FakeDevice()
	await device.start()

	monitor = clipwatch.Monitor(host="127.0.0.1", port=device.server.port, poll_interval=100)
	monitor.feedback("two_playing", "buttonState", buttonNumber=2)
	monitor.feedback("idle", "playerStatus", status="stopped")

	try:
		await monitor.init()
		await asyncio.sleep(0.15)

		assert monitor.status == clipwatch.instance_status.STATUS_OK
		assert monitor.active_clip.button_number == 2
		assert monitor.variables["clip_id"] == 2
		assert monitor.variables["loop"] == "on"
		assert monitor.variables["button_1_label"] == "one.mp4"
		assert monitor.variables["current_page"] == 1
		assert monitor.feedbacks.results == {"two_playing": True, "idle": False}

		device.buttons[1]["state"] = "stopped"
		await asyncio.sleep(0.2)

		assert monitor.variables["clip_id"] == ""
		assert monitor.feedbacks.results == {"two_playing": False, "idle": True}

	finally:
		await monitor.destroy()
		await device.close()

	assert monitor.status == clipwatch.instance_status.STATUS_DISCONNECTED
	assert not monitor.poller.running


@pytest.mark.asyncio
async def test_commands_reach_device () -> None:

	"""Commands go to the configured device."""

	device = FakeDevice()
	await device.start()

	monitor = clipwatch.Monitor(host="127.0.0.1", port=device.server.port, enable_polling=False)

	try:
		await monitor.init()
		await monitor.commands.play_button(3)
		await monitor.commands.set_loop(1, "off")
	finally:
		await monitor.destroy()
		await device.close()

	assert device.commands == ["button-2/play", "button-0/loop"]


@pytest.mark.asyncio
async def test_polling_disabled_reports_ok () -> None:

	"""With polling off the monitor is ready but never fetches."""

	monitor = clipwatch.Monitor(host="127.0.0.1", port=1, enable_polling=False)

	try:
		await monitor.init()

		assert monitor.status == clipwatch.instance_status.STATUS_OK
		assert not monitor.poller.running
	finally:
		await monitor.destroy()


@pytest.mark.asyncio
async def test_unreachable_device_reports_failure () -> None:

	"""Polling a closed port sets connection_failure and leaves variables empty."""

	device = FakeDevice()
	await device.start()
	port = device.server.port
	await device.close()

	monitor = clipwatch.Monitor(host="127.0.0.1", port=port, poll_interval=100, timeout=1.0)

	try:
		await monitor.init()
		await asyncio.sleep(0.1)

		assert monitor.status == clipwatch.instance_status.STATUS_CONNECTION_FAILURE
		assert monitor.variables == {}
	finally:
		await monitor.destroy()


@pytest.mark.asyncio
async def test_invalid_config_reports_bad_config () -> None:

	"""init() with a bad config raises and reports bad_config."""

	monitor = clipwatch.Monitor()

	with pytest.raises(ValueError):
		await monitor.init(clipwatch.config.MonitorConfig(poll_interval=5))

	assert monitor.status == clipwatch.instance_status.STATUS_BAD_CONFIG
	assert not monitor.poller.running


@pytest.mark.asyncio
async def test_config_updated_moves_to_new_device () -> None:

	"""A settings change restarts polling against the new address."""

	first = FakeDevice()
	second = FakeDevice()
	second.buttons = [conftest.button(9, "paused", label="nine.mp4")]

	await first.start()
	await second.start()

	monitor = clipwatch.Monitor(host="127.0.0.1", port=first.server.port, poll_interval=100)

	try:
		await monitor.init()
		await asyncio.sleep(0.1)

		assert monitor.variables["clip_id"] == 2

		await monitor.config_updated(clipwatch.config.MonitorConfig(host="127.0.0.1", port=second.server.port, poll_interval=200))
		await asyncio.sleep(0.1)

		assert monitor.transport.port == second.server.port
		assert monitor.poller.interval_ms == 200
		assert monitor.variables["clip_id"] == 9
		assert monitor.variables["status"] == "paused"

		await monitor.config_updated(clipwatch.config.MonitorConfig(host="127.0.0.1", port=second.server.port, enable_polling=False))

		assert not monitor.poller.running

	finally:
		await monitor.destroy()
		await first.close()
		await second.close()


def test_from_config_registers_feedbacks () -> None:

	"""Feedbacks listed in the config are placed at construction."""

	config = clipwatch.config.MonitorConfig.from_dict({
		"feedbacks": [{"id": "idle", "type": "playerStatus", "status": "stopped"}],
		"display": True,
	})

	monitor = clipwatch.Monitor.from_config(config)

	assert [instance.feedback_id for instance in monitor.feedbacks.instances()] == ["idle"]
	assert monitor.feedbacks.instances()[0].options == {"status": "stopped"}
	assert monitor.feedbacks.results == {"idle": True}
	assert monitor.config is config


def test_variable_definitions () -> None:

	"""The monitor exposes the full catalog."""

	ids = {definition.variable_id for definition in clipwatch.Monitor().variable_definitions()}

	assert "button_128_timecode" in ids
	assert "asset_name_127" in ids
	assert "clip_id" in ids
