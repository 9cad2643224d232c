"""Boolean feedbacks computed from the status snapshot.

Each feedback type wraps one predicate.  Button numbers are 1-based, and a
button missing from the last poll answers False to every per-button question.

Feedback types
──────────────
- ``buttonState``: button is playing (``buttonNumber``)
- ``buttonFading``: button is fading (``buttonNumber``)
- ``buttonPaused``: button is paused (``buttonNumber``)
- ``currentClip``: button is playing or paused (``buttonNumber``)
- ``playerStatus``: player as a whole is playing / paused / stopped (``status``)
- ``loopStatus``: button loop flag equals on / off (``buttonNumber``, ``loopSetting``)

"Stopped" for ``playerStatus`` is not a button state: it means no button at
all is playing or paused.  A single paused button therefore makes
``playerStatus(stopped)`` False even though nothing is playing.
"""

import dataclasses
import logging
import typing

import clipwatch.constants
import clipwatch.event_emitter
import clipwatch.status_store


logger = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True)
class FeedbackDefinition:

	"""Name, description and default options of a feedback type."""

	feedback_type: str
	name: str
	description: str
	default_options: typing.Dict[str, typing.Any]


FEEDBACK_DEFINITIONS: typing.Dict[str, FeedbackDefinition] = {
	definition.feedback_type: definition for definition in [
		FeedbackDefinition("buttonState", "Button Playing State", "Button is playing", {"buttonNumber": 1}),
		FeedbackDefinition("buttonFading", "Button Fading State", "Button is fading", {"buttonNumber": 1}),
		FeedbackDefinition("buttonPaused", "Button Paused State", "Button is paused", {"buttonNumber": 1}),
		FeedbackDefinition("currentClip", "Current Clip", "Button is the playing or paused clip", {"buttonNumber": 1}),
		FeedbackDefinition("playerStatus", "Player Status", "Any clip is playing, paused, or nothing is", {"status": clipwatch.constants.STATE_PLAYING}),
		FeedbackDefinition("loopStatus", "Loop Status", "Loop flag of a button is on or off", {"buttonNumber": 1, "loopSetting": "on"}),
	]
}

FEEDBACK_TYPES: typing.Tuple[str, ...] = tuple(FEEDBACK_DEFINITIONS)


@dataclasses.dataclass
class FeedbackInstance:

	"""A feedback placed on the control surface."""

	feedback_id: str
	feedback_type: str
	options: typing.Dict[str, typing.Any]


class FeedbackEvaluator:

	"""
	Answers feedback queries against a ``StatusStore``.

	The predicates only read the store.  Registered feedback instances are
	re-evaluated by ``check()``, which the reconciler triggers after every
	applied poll.
	"""

	def __init__ (
		self,
		store: clipwatch.status_store.StatusStore,
		events: typing.Optional[clipwatch.event_emitter.EventEmitter] = None
	) -> None:

		self._store = store
		self.events = events if events is not None else clipwatch.event_emitter.EventEmitter()
		self._instances: typing.Dict[str, FeedbackInstance] = {}
		self.results: typing.Dict[str, bool] = {}

	# ------------------------------------------------------------------
	# Predicates
	# ------------------------------------------------------------------

	def _state (self, button_number: typing.Any) -> typing.Optional[str]:

		status = self._store.get(button_number)
		return status.state if status is not None else None

	def is_playing (self, button_number: typing.Any) -> bool:
		return self._state(button_number) == clipwatch.constants.STATE_PLAYING

	def is_fading (self, button_number: typing.Any) -> bool:
		return self._state(button_number) == clipwatch.constants.STATE_FADING

	def is_paused (self, button_number: typing.Any) -> bool:
		return self._state(button_number) == clipwatch.constants.STATE_PAUSED

	def is_active_clip (self, button_number: typing.Any) -> bool:
		return self._state(button_number) in clipwatch.constants.ACTIVE_STATES

	def player_status_matches (self, target: str) -> bool:

		"""
		Whether the player as a whole is in *target* state.

		``playing`` / ``paused`` (or any other button state): at least one
		button is in that state.  ``stopped``: no button is playing or paused,
		which includes an empty snapshot.
		"""

		states = [status.state for _, status in self._store.all_entries()]

		if target == clipwatch.constants.STATE_STOPPED:
			return all(state not in clipwatch.constants.ACTIVE_STATES for state in states)

		return any(state == target for state in states)

	def loop_matches (self, button_number: typing.Any, desired_on: bool) -> bool:

		"""
		Whether the button's loop flag equals *desired_on*.

		A missing flag counts as off.  A missing button is always False.
		"""

		status = self._store.get(button_number)

		if status is None:
			return False

		return bool(status.is_looping) == bool(desired_on)

	# ------------------------------------------------------------------
	# Registry
	# ------------------------------------------------------------------

	def evaluate (self, feedback_type: str, options: typing.Optional[typing.Dict[str, typing.Any]] = None) -> bool:

		"""Evaluate one feedback type with the given options (missing options use defaults)."""

		if feedback_type not in FEEDBACK_DEFINITIONS:
			raise ValueError(f"Unknown feedback type {feedback_type!r}")

		merged = dict(FEEDBACK_DEFINITIONS[feedback_type].default_options)
		merged.update(options or {})

		if feedback_type == "buttonState":
			return self.is_playing(merged["buttonNumber"])

		if feedback_type == "buttonFading":
			return self.is_fading(merged["buttonNumber"])

		if feedback_type == "buttonPaused":
			return self.is_paused(merged["buttonNumber"])

		if feedback_type == "currentClip":
			return self.is_active_clip(merged["buttonNumber"])

		if feedback_type == "playerStatus":
			return self.player_status_matches(str(merged["status"]))

		return self.loop_matches(merged["buttonNumber"], merged["loopSetting"] == "on")

	def register (self, feedback_id: str, feedback_type: str, options: typing.Optional[typing.Dict[str, typing.Any]] = None) -> bool:

		"""
		Place a feedback instance and return its current value.

		Registering an existing id replaces that instance.
		"""

		if feedback_type not in FEEDBACK_DEFINITIONS:
			raise ValueError(f"Unknown feedback type {feedback_type!r}")

		self._instances[feedback_id] = FeedbackInstance(feedback_id, feedback_type, dict(options or {}))

		value = self.evaluate(feedback_type, options)
		self.results[feedback_id] = value

		return value

	def unregister (self, feedback_id: str) -> None:

		"""Remove a feedback instance; unknown ids are ignored."""

		self._instances.pop(feedback_id, None)
		self.results.pop(feedback_id, None)

	def instances (self) -> typing.List[FeedbackInstance]:
		return list(self._instances.values())

	def check (self, *feedback_types: str) -> typing.Dict[str, bool]:

		"""
		Re-evaluate every registered instance of the given types.

		All types are checked when none are given.  Emits ``"feedback"`` with the
		fresh results and returns them.
		"""

		wanted = set(feedback_types) if feedback_types else set(FEEDBACK_TYPES)
		fresh: typing.Dict[str, bool] = {}

		for instance in self._instances.values():
			if instance.feedback_type in wanted:
				fresh[instance.feedback_id] = self.evaluate(instance.feedback_type, instance.options)

		self.results.update(fresh)

		logger.debug(f"Checked {len(fresh)} feedback(s)")

		self.events.emit("feedback", fresh)

		return fresh
