"""Duration formatting for clip positions.

All functions take a duration in seconds and never raise for odd input:
negative, ``NaN``, infinite or non-numeric values are treated as zero.

Two display forms are produced:

- ``format_short()``: ``MM:SS`` for compact per-button labels.  Minutes do not
  carry into hours, so 2 hours reads ``120:00``.
- ``format_timecode()``: fixed-width ``HH:MM:SS:FF`` at 30 frames per second.
  Every field is always present; zero is ``00:00:00:00``.

``components()`` returns the four timecode fields separately for surfaces that
lay out individual digits.
"""

import dataclasses
import math
import typing

import clipwatch.constants


@dataclasses.dataclass(frozen=True)
class TimecodeComponents:

	"""The four zero-padded fields of a timecode.

	Attributes:
		hh: Hours (at least two digits; grows past two for 100 hours or more).
		mm: Minutes within the hour.
		ss: Seconds within the minute.
		ff: Frames within the second (``00``-``29``).
	"""

	hh: str
	mm: str
	ss: str
	ff: str

	def __str__ (self) -> str:
		return f"{self.hh}:{self.mm}:{self.ss}:{self.ff}"


ZERO_TIMECODE = TimecodeComponents(hh="00", mm="00", ss="00", ff="00")


def clamp_seconds (seconds: typing.Any) -> float:

	"""Coerce a wire value to a finite, non-negative number of seconds."""

	if isinstance(seconds, bool):
		return 0.0

	try:
		value = float(seconds)
	except (TypeError, ValueError):
		return 0.0

	if not math.isfinite(value) or value < 0:
		return 0.0

	return value


def _pad (value: int) -> str:
	return str(value).zfill(2)


def format_short (seconds: typing.Any) -> str:

	"""Format a duration as ``MM:SS``.

	Example:
		```python
		format_short(75.9)   # "01:15"
		format_short(-3)     # "00:00"
		```
	"""

	value = clamp_seconds(seconds)

	minutes = math.floor(value / 60)
	secs = math.floor(value % 60)

	return f"{_pad(minutes)}:{_pad(secs)}"


def components (seconds: typing.Any) -> TimecodeComponents:

	"""Split a duration into hours, minutes, seconds and 30 fps frames."""

	value = clamp_seconds(seconds)

	hours = math.floor(value / 3600)
	minutes = math.floor((value % 3600) / 60)
	secs = math.floor(value % 60)
	frames = math.floor((value % 1) * clipwatch.constants.FRAMES_PER_SECOND)

	# (value % 1) * 30 is strictly below 30, but guard against float rounding.
	frames = min(frames, clipwatch.constants.FRAMES_PER_SECOND - 1)

	return TimecodeComponents(hh=_pad(hours), mm=_pad(minutes), ss=_pad(secs), ff=_pad(frames))


def format_timecode (seconds: typing.Any) -> str:

	"""Format a duration as fixed-width ``HH:MM:SS:FF``.

	Example:
		```python
		format_timecode(3725.5)   # "01:02:05:15"
		format_timecode(0)        # "00:00:00:00"
		```
	"""

	return str(components(seconds))
