"""Turns device status payloads into the snapshot and the variable projection.

One call to ``Reconciler.apply()`` handles one poll response:

1. Parse every entry of ``buttons`` into a ``ButtonStatus``.
2. Pick the active clip: the first entry, in payload order, that is playing or
   paused.  Payload order is authoritative; later matches are ignored.
3. Build the per-button and per-asset variables for every entry.
4. Build the global variables from the active clip, or the cleared set when
   there is none.  The cleared set is published on every such poll, not just
   on the transition, so nothing from an earlier clip can linger.
5. Publish ``current_page`` (1-indexed) when the payload carries one.
6. Swap in the new snapshot, emit ``"variables"``, then emit ``"feedbacks"``
   for every feedback type.

A payload without a ``buttons`` list changes nothing and emits nothing.
"""

import logging
import math
import typing

import clipwatch.constants
import clipwatch.event_emitter
import clipwatch.feedbacks
import clipwatch.status_store
import clipwatch.timecode
import clipwatch.variables


logger = logging.getLogger(__name__)


def _text (value: typing.Any) -> str:
	return "" if value is None else str(value)


def resolve_active_clip (buttons: typing.Iterable[clipwatch.status_store.ButtonStatus]) -> typing.Optional[clipwatch.status_store.ButtonStatus]:

	"""Return the first button that is playing or paused, or None."""

	for status in buttons:
		if status.state in clipwatch.constants.ACTIVE_STATES:
			return status

	return None


def button_values (status: clipwatch.status_store.ButtonStatus) -> typing.Dict[str, clipwatch.variables.VariableValue]:

	"""Per-button (1-indexed) and per-asset (0-indexed) variables for one button."""

	n = status.button_number
	asset = n - 1

	state = status.state or clipwatch.constants.STATE_IDLE
	label = _text(status.label)
	current = clipwatch.timecode.clamp_seconds(status.current_time)
	remaining = clipwatch.timecode.clamp_seconds(status.remaining)

	current_tc = clipwatch.timecode.format_timecode(current)
	remaining_tc = clipwatch.timecode.format_timecode(remaining)

	values: typing.Dict[str, clipwatch.variables.VariableValue] = {
		clipwatch.variables.button_variable(n, "state"): state,
		clipwatch.variables.button_variable(n, "label"): label,
		clipwatch.variables.button_variable(n, "time"): clipwatch.timecode.format_short(current),
		clipwatch.variables.button_variable(n, "remaining"): clipwatch.timecode.format_short(remaining),
		clipwatch.variables.button_variable(n, "timecode"): current_tc,
		clipwatch.variables.button_variable(n, "remaining_timecode"): remaining_tc,
	}

	values.update(clipwatch.variables.timecode_values(f"button_{n}_timecode", current))
	values.update(clipwatch.variables.timecode_values(f"button_{n}_remaining", remaining))

	values[clipwatch.variables.asset_name_variable(asset)] = label
	values[clipwatch.variables.asset_variable(asset, "timecode")] = current_tc
	values[clipwatch.variables.asset_variable(asset, "remaining")] = remaining_tc
	values[clipwatch.variables.asset_variable(asset, "state")] = state

	return values


def global_values (active: clipwatch.status_store.ButtonStatus) -> typing.Dict[str, clipwatch.variables.VariableValue]:

	"""Global variables describing the active clip."""

	current = clipwatch.timecode.clamp_seconds(active.current_time)
	remaining = clipwatch.timecode.clamp_seconds(active.remaining)

	values: typing.Dict[str, clipwatch.variables.VariableValue] = {
		"clip_id": active.button_number,
		"clip_name": _text(active.label),
		"status": _text(active.state),
		"loop": "on" if active.is_looping else "off",
		"timecode": clipwatch.timecode.format_timecode(current),
		"remaining_timecode": clipwatch.timecode.format_timecode(remaining),
		"next_clip_id": active.goto_button_number or "",
		"next_clip_name": active.goto_button_label or "",
	}

	values.update(clipwatch.variables.timecode_values("timecode", current))
	values.update(clipwatch.variables.timecode_values("remaining", remaining))

	return values


class Reconciler:

	"""Single writer of the status snapshot and the published variables."""

	def __init__ (
		self,
		store: clipwatch.status_store.StatusStore,
		events: typing.Optional[clipwatch.event_emitter.EventEmitter] = None
	) -> None:

		"""
		Parameters:
			store: The snapshot this reconciler owns.
			events: Emitter for ``"variables"`` and ``"feedbacks"``; a private
				one is created when omitted.
		"""

		self.store = store
		self.events = events if events is not None else clipwatch.event_emitter.EventEmitter()

		# Everything published so far, like the host's variable table.
		self.variables: typing.Dict[str, clipwatch.variables.VariableValue] = {}
		self.active_clip: typing.Optional[clipwatch.status_store.ButtonStatus] = None

	def apply (self, payload: typing.Any) -> bool:

		"""
		Reconcile one status payload.

		Returns True when the payload was applied, False when it carried no
		``buttons`` list and was ignored.
		"""

		if not isinstance(payload, dict) or not isinstance(payload.get("buttons"), list):
			logger.debug("Status payload has no buttons list - ignoring this cycle")
			return False

		parsed: typing.List[clipwatch.status_store.ButtonStatus] = []

		for record in payload["buttons"]:

			status = clipwatch.status_store.ButtonStatus.from_wire(record)

			if status is None:
				logger.debug(f"Skipping button record without a usable buttonNumber: {record!r}")
				continue

			parsed.append(status)

		active = resolve_active_clip(parsed)

		values: typing.Dict[str, clipwatch.variables.VariableValue] = {}

		for status in parsed:
			values.update(button_values(status))

		if active is not None:
			values.update(global_values(active))
		else:
			values.update(clipwatch.variables.cleared_globals())

		page = payload.get("currentPage")

		if page is not None:
			if isinstance(page, (int, float)) and not isinstance(page, bool) and math.isfinite(page):
				values["current_page"] = int(page) + 1
			else:
				logger.debug(f"Ignoring non-numeric or non-finite currentPage: {page!r}")

		self.store.replace(parsed)
		self.active_clip = active
		self.variables.update(values)

		self.events.emit("variables", values)
		self.events.emit("feedbacks", *clipwatch.feedbacks.FEEDBACK_TYPES)

		return True
