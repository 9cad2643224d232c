"""Variable catalog for the host control surface.

Three families of variables are published:

Per-button, 1-indexed (``button_<n>_<field>``)
──────────────────────────────────────────────
``state``, ``label``, ``time`` (MM:SS), ``remaining`` (MM:SS), ``timecode``,
``timecode_hh/mm/ss/ff``, ``remaining_timecode``, ``remaining_hh/mm/ss/ff``.

Per-asset, 0-indexed (asset index = button number - 1)
───────────────────────────────────────────────────────
``asset_name_<i>``, ``asset_<i>_timecode``, ``asset_<i>_remaining``,
``asset_<i>_state``.

Global (the active clip)
────────────────────────
``clip_id``, ``clip_name``, ``status``, ``loop``, ``timecode`` and components,
``remaining_timecode`` and components, ``current_page``, ``next_clip_id``,
``next_clip_name``.
"""

import dataclasses
import typing

import clipwatch.constants
import clipwatch.timecode


VariableValue = typing.Union[str, int]


@dataclasses.dataclass(frozen=True)
class VariableDefinition:

	"""A published variable id and its human-readable name."""

	variable_id: str
	name: str


BUTTON_FIELDS: typing.List[typing.Tuple[str, str]] = [
	("state", "State"),
	("label", "Label"),
	("time", "Current Time (MM:SS)"),
	("remaining", "Remaining Time (MM:SS)"),
	("timecode", "Timecode (HH:MM:SS:FF)"),
	("timecode_hh", "Timecode Hours"),
	("timecode_mm", "Timecode Minutes"),
	("timecode_ss", "Timecode Seconds"),
	("timecode_ff", "Timecode Frames"),
	("remaining_timecode", "Remaining Timecode (HH:MM:SS:FF)"),
	("remaining_hh", "Remaining Hours"),
	("remaining_mm", "Remaining Minutes"),
	("remaining_ss", "Remaining Seconds"),
	("remaining_ff", "Remaining Frames"),
]

GLOBAL_VARIABLES: typing.List[typing.Tuple[str, str]] = [
	("clip_id", "Current Clip ID (Button Number)"),
	("clip_name", "Current Clip Name (File Name)"),
	("status", "Player Status"),
	("loop", "Loop Status"),
	("timecode", "Current Timecode (HH:MM:SS:FF)"),
	("timecode_hh", "Timecode Hours"),
	("timecode_mm", "Timecode Minutes"),
	("timecode_ss", "Timecode Seconds"),
	("timecode_ff", "Timecode Frames"),
	("remaining_timecode", "Remaining Timecode (HH:MM:SS:FF)"),
	("remaining_hh", "Remaining Hours"),
	("remaining_mm", "Remaining Minutes"),
	("remaining_ss", "Remaining Seconds"),
	("remaining_ff", "Remaining Frames"),
	("current_page", "Current Page"),
	("next_clip_id", "Next Clip ID (Button Number)"),
	("next_clip_name", "Next Clip Name (File Name)"),
]


def button_variable (button_number: int, field: str) -> str:
	return f"button_{button_number}_{field}"


def asset_name_variable (asset_index: int) -> str:
	return f"asset_name_{asset_index}"


def asset_variable (asset_index: int, field: str) -> str:
	return f"asset_{asset_index}_{field}"


def timecode_values (prefix: str, seconds: typing.Any) -> typing.Dict[str, VariableValue]:

	"""Return the ``<prefix>_hh/mm/ss/ff`` component variables for a duration."""

	parts = clipwatch.timecode.components(seconds)

	return {
		f"{prefix}_hh": parts.hh,
		f"{prefix}_mm": parts.mm,
		f"{prefix}_ss": parts.ss,
		f"{prefix}_ff": parts.ff,
	}


def cleared_globals () -> typing.Dict[str, VariableValue]:

	"""Global variable values when no clip is playing or paused."""

	zero = str(clipwatch.timecode.ZERO_TIMECODE)

	values: typing.Dict[str, VariableValue] = {
		"clip_id": "",
		"clip_name": "",
		"status": clipwatch.constants.STATE_STOPPED,
		"loop": "off",
		"timecode": zero,
		"remaining_timecode": zero,
		"next_clip_id": "",
		"next_clip_name": "",
	}

	values.update(timecode_values("timecode", 0))
	values.update(timecode_values("remaining", 0))

	return values


def variable_definitions (button_count: int = clipwatch.constants.MAX_BUTTONS) -> typing.List[VariableDefinition]:

	"""
	Build the full variable catalog for *button_count* buttons.

	Asset variables come first (0-indexed), then button variables (1-indexed),
	then the global set.
	"""

	definitions: typing.List[VariableDefinition] = []

	for i in range(button_count):
		definitions.append(VariableDefinition(asset_name_variable(i), f"Asset {i} Filename"))
		definitions.append(VariableDefinition(asset_variable(i, "timecode"), f"Asset {i} Timecode (HH:MM:SS:FF)"))
		definitions.append(VariableDefinition(asset_variable(i, "remaining"), f"Asset {i} Remaining (HH:MM:SS:FF)"))
		definitions.append(VariableDefinition(asset_variable(i, "state"), f"Asset {i} State"))

	for n in range(1, button_count + 1):
		for field, name in BUTTON_FIELDS:
			definitions.append(VariableDefinition(button_variable(n, field), f"Button {n} {name}"))

	for variable_id, name in GLOBAL_VARIABLES:
		definitions.append(VariableDefinition(variable_id, name))

	return definitions
