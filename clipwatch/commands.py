"""Button, page and output commands sent to the playback device.

Button numbers are 1-based here and converted to the device's 0-based
``button-<n - 1>`` ids.  Arguments are range-checked before anything is sent;
out-of-range values raise ``ValueError``.
"""

import typing

import clipwatch.transport


LOOP_MODES = ("on", "off", "toggle")


def _check_range (name: str, value: float, low: float, high: float) -> None:

	if isinstance(value, bool) or not isinstance(value, (int, float)) or not low <= value <= high:
		raise ValueError(f"{name} must be between {low} and {high}, got {value!r}")


def button_id (button_number: int) -> str:

	"""Device id for a 1-based button number (``1`` → ``"button-0"``)."""

	_check_range("Button number", button_number, 1, 999)

	return f"button-{int(button_number) - 1}"


def _number (value: float) -> str:

	"""Render a path number without a trailing ``.0``."""

	if float(value).is_integer():
		return str(int(value))

	return str(value)


class Commands:

	"""Thin wrappers that build request paths and hand them to the transport."""

	def __init__ (self, transport: clipwatch.transport.RemoteTransport) -> None:

		self._transport = transport

	async def _button (self, button_number: int, action: str, body: typing.Optional[typing.Dict[str, typing.Any]] = None) -> typing.Any:
		return await self._transport.send_command(f"/api/button/{button_id(button_number)}/{action}", "POST", body)

	async def play_button (self, button_number: int) -> typing.Any:
		return await self._button(button_number, "play")

	async def select_clip (self, button_number: int) -> typing.Any:

		"""Select and play a clip (same request as ``play_button``)."""

		return await self._button(button_number, "play")

	async def stop_button (self, button_number: int) -> typing.Any:
		return await self._button(button_number, "stop")

	async def toggle_button (self, button_number: int) -> typing.Any:
		return await self._button(button_number, "toggle")

	async def pause_button (self, button_number: int) -> typing.Any:
		return await self._button(button_number, "pause")

	async def fade_button (self, button_number: int, seconds: float = 3.0) -> typing.Any:

		"""Fade a button out over *seconds* (0.1-30); the device takes milliseconds."""

		_check_range("Fade duration", seconds, 0.1, 30.0)

		return await self._button(button_number, "fade", {"duration": round(seconds * 1000)})

	async def goto_time (self, button_number: int, seconds: float) -> typing.Any:

		"""Seek a button to *seconds* (0-86400)."""

		_check_range("Seek time", seconds, 0, 86400)

		return await self._button(button_number, f"goto/{_number(seconds)}")

	async def set_volume (self, button_number: int, percent: float) -> typing.Any:

		"""Set a button's volume as a percentage (0-200); the device takes a 0-2 gain."""

		_check_range("Volume", percent, 0, 200)

		return await self._button(button_number, f"volume/{_number(percent / 100)}")

	async def set_loop (self, button_number: int, mode: str = "toggle") -> typing.Any:

		if mode not in LOOP_MODES:
			raise ValueError(f"Loop mode must be one of {LOOP_MODES}, got {mode!r}")

		return await self._button(button_number, f"loop/{mode}")

	async def change_page (self, page_number: int) -> typing.Any:

		_check_range("Page number", page_number, 1, 99)

		return await self._transport.send_command(f"/api/page/{int(page_number)}", "POST")

	async def stop_all (self) -> typing.Any:
		return await self._transport.send_command("/api/stop-all", "POST")

	async def next_button (self) -> typing.Any:

		"""Play the next button in sequence (the device wraps after the last)."""

		return await self._transport.send_command("/api/next", "POST")

	async def toggle_fullscreen (self) -> typing.Any:
		return await self._transport.send_command("/api/output/fullscreen", "GET")

	async def move_output_to_screen (self, screen_id: int) -> typing.Any:

		_check_range("Screen id", screen_id, 0, 10)

		return await self._transport.send_command(f"/api/output/move/{int(screen_id)}", "GET")
