"""Live terminal status line for the active clip.

Enable it with a single call before ``run()``:

```python
monitor.display()
monitor.run()
```

The line is redrawn after every applied poll and every connection status
change, and looks like::

	Clip 3: intro.mp4  playing  00:01:02:15  -00:03:10:00  Loop: off  Page: 1  [ok]

Log records are printed above the line, which is then drawn again.
"""

import logging
import sys
import typing

if typing.TYPE_CHECKING:
	from clipwatch.monitor import Monitor


CLEAR = "\r\033[K"


class DisplayLogHandler (logging.Handler):

	"""Prints log records on stderr without leaving a half-drawn status line behind them."""

	def __init__ (self, display: "Display") -> None:

		super().__init__()
		self._display = display

	def emit (self, record: logging.LogRecord) -> None:

		try:
			text = self.format(record)
		except Exception:
			self.handleError(record)
			return

		self._display.clear_line()
		sys.stderr.write(f"{text}\n")
		sys.stderr.flush()
		self._display.draw()


class Display:

	"""
	One persistent stderr line built from the monitor's global variables.

	While active, the display owns the root logger: ``start()`` moves the
	existing handlers aside and ``stop()`` puts them back.
	"""

	def __init__ (self, monitor: "Monitor") -> None:

		self._monitor = monitor
		self._active: bool = False
		self._line: str = ""
		self._handler: typing.Optional[DisplayLogHandler] = None
		self._parked: typing.List[logging.Handler] = []

	@property
	def line (self) -> str:

		"""The last status line drawn."""

		return self._line

	def start (self) -> None:

		if self._active:
			return

		root = logging.getLogger()
		self._parked = list(root.handlers)

		# Keep the user's log format if basicConfig (or similar) set one.
		formatter = next((h.formatter for h in self._parked if h.formatter is not None), None)

		self._handler = DisplayLogHandler(self)
		self._handler.setFormatter(formatter or logging.Formatter("%(levelname)s:%(name)s:%(message)s"))

		for handler in self._parked:
			root.removeHandler(handler)

		root.addHandler(self._handler)
		self._active = True

	def stop (self) -> None:

		if not self._active:
			return

		self.clear_line()
		self._active = False

		root = logging.getLogger()

		if self._handler is not None:
			root.removeHandler(self._handler)
			self._handler = None

		for handler in self._parked:
			root.addHandler(handler)

		self._parked = []

	def update (self, *_: typing.Any) -> None:

		"""Rebuild and redraw the line; listens to ``"variables"`` and ``"status"``."""

		if self._active:
			self._line = self._format_status()
			self.draw()

	def draw (self) -> None:

		if self._active and self._line:
			self._write(CLEAR + self._line)

	def clear_line (self) -> None:

		if self._active:
			self._write(CLEAR)

	@staticmethod
	def _write (text: str) -> None:

		sys.stderr.write(text)
		sys.stderr.flush()

	def _format_status (self) -> str:

		values = self._monitor.variables
		clip_id = values.get("clip_id", "")

		if clip_id == "":
			parts = ["No clip active"]

		else:
			name = values.get("clip_name", "")

			parts = [
				f"Clip {clip_id}: {name}" if name else f"Clip {clip_id}",
				str(values.get("status", "")),
				str(values.get("timecode", "")),
				f"-{values.get('remaining_timecode', '')}",
				f"Loop: {values.get('loop', 'off')}",
			]

			next_id = values.get("next_clip_id", "")
			next_name = values.get("next_clip_name", "")

			if next_id != "":
				parts.append(f"Next: {next_id} ({next_name})" if next_name else f"Next: {next_id}")

		if "current_page" in values:
			parts.append(f"Page: {values['current_page']}")

		parts.append(f"[{self._monitor.status}]")

		return "  ".join(parts)
