import dataclasses
import typing


@dataclasses.dataclass(frozen=True)
class ButtonStatus:

	"""
	Last-known status of one remote button, as the device reported it.

	Optional fields are kept as ``None`` when the device omitted them.  Defaults
	(``idle``, empty label, zero times, loop off) are applied by whoever reads
	the status, never stored here.
	"""

	button_number: int
	state: typing.Optional[str] = None
	label: typing.Optional[str] = None
	current_time: typing.Optional[float] = None
	remaining: typing.Optional[float] = None
	is_looping: typing.Optional[bool] = None
	goto_button_number: typing.Optional[int] = None
	goto_button_label: typing.Optional[str] = None


	@classmethod
	def from_wire (cls, record: typing.Any) -> typing.Optional["ButtonStatus"]:

		"""
		Build a status from one entry of the device's ``buttons`` list.

		Returns ``None`` when the entry is not a mapping or has no usable
		``buttonNumber``.
		"""

		if not isinstance(record, dict):
			return None

		button_number = parse_button_number(record.get("buttonNumber"))

		if button_number is None:
			return None

		return cls(
			button_number = button_number,
			state = record.get("state"),
			label = record.get("label"),
			current_time = record.get("currentTime"),
			remaining = record.get("remaining"),
			is_looping = record.get("isLooping"),
			goto_button_number = record.get("gotoButtonNumber"),
			goto_button_label = record.get("gotoButtonLabel")
		)


def parse_button_number (value: typing.Any) -> typing.Optional[int]:

	"""Return a positive integer button number, or None if *value* isn't one."""

	if isinstance(value, bool):
		return None

	if isinstance(value, float):
		if not value.is_integer():
			return None
		value = int(value)

	if isinstance(value, str):
		value = value.strip()
		if not value.isdigit():
			return None
		value = int(value)

	if not isinstance(value, int) or value < 1:
		return None

	return value


class StatusStore:

	"""
	The current snapshot: button number to ``ButtonStatus``.

	The snapshot is never edited in place.  ``replace()`` builds a complete new
	mapping and then swaps the reference, so a reader holding the previous
	mapping (or reading while a cycle is being applied) always sees one whole
	poll result.
	"""

	def __init__ (self) -> None:

		self._buttons: typing.Dict[int, ButtonStatus] = {}

	def replace (self, buttons: typing.Iterable[ButtonStatus]) -> None:

		"""Discard the current snapshot and publish one built from *buttons*."""

		snapshot: typing.Dict[int, ButtonStatus] = {}

		for status in buttons:
			snapshot[status.button_number] = status

		self._buttons = snapshot

	def get (self, button_number: typing.Any) -> typing.Optional[ButtonStatus]:

		"""Return the status of a button, or None if it was not in the last poll."""

		number = parse_button_number(button_number)

		if number is None:
			return None

		return self._buttons.get(number)

	def all_entries (self) -> typing.List[typing.Tuple[int, ButtonStatus]]:

		"""Return ``(button_number, status)`` pairs from one consistent snapshot."""

		return list(self._buttons.items())

	def __len__ (self) -> int:
		return len(self._buttons)

	def __contains__ (self, button_number: typing.Any) -> bool:
		return self.get(button_number) is not None
