"""Chord-progression state machine.

:class:`HarmonyEngine` walks a cyclic progression of scale degrees, holding
each chord for ``bars_per_chord`` bars. It does not keep time itself: the
host calls :meth:`HarmonyEngine.advance_bar` once per bar from whatever clock
it runs.

Two events fire synchronously from inside ``advance_bar()``:

- ``"cadence"`` ``(cycle_count, chord)``: a chord change landed on the
  tonic (degree 0) from another degree.
- ``"modulation"`` ``(old_root, new_root, scale)``: with ``modulate=True``,
  every third completed cycle moves the key up a fourth or a fifth.

Modulation replaces the scale and rebuilds every diatonic chord, so chords
fetched before it are stale; fetch them again after the event.

Example:
	```python
	space = PitchSpace()
	harmony = HarmonyEngine(space, space.build_scale("C", "major"), progression="I-V-vi-IV")
	harmony.on("cadence", lambda cycle, chord: print("home again", cycle))

	for bar in range(8):
		if harmony.advance_bar():
			print(harmony.get_current_chord().name())
	```
"""

import dataclasses
import logging
import random
import typing

import tessitura.chords
import tessitura.event_emitter
import tessitura.pitch_space


logger = logging.getLogger(__name__)


DEFAULT_BARS_PER_CHORD: int = 2

# Completed cycles between modulations.
MODULATION_CYCLES: int = 3

# Fourth and fifth, in semitones above the current root.
MODULATION_INTERVALS: typing.Tuple[int, int] = (5, 7)


@dataclasses.dataclass(frozen=True)
class ProgressionPattern:

	"""A named cycle of 0-based scale degrees."""

	name: str
	degrees: typing.Tuple[int, ...]


	def __post_init__ (self) -> None:

		if not self.degrees:
			raise ValueError("A progression needs at least one degree")

		if any(d < 0 or d > 6 for d in self.degrees):
			raise ValueError(f"Progression degrees must be between 0 and 6: {self.degrees}")


PROGRESSIONS: typing.Dict[str, ProgressionPattern] = {
	"I-V-vi-IV": ProgressionPattern("Pop (I–V–vi–IV)", (0, 4, 5, 3)),
	"ii-V-I": ProgressionPattern("Jazz (ii–V–I)", (1, 4, 0)),
	"i-VI-III-VII": ProgressionPattern("Minor (i–VI–III–VII)", (0, 5, 2, 6)),
	"I-vi-IV-V": ProgressionPattern("Classic (I–vi–IV–V)", (0, 5, 3, 4)),
	"I-IV-V-IV": ProgressionPattern("Rock (I–IV–V–IV)", (0, 3, 4, 3)),
	"vi-IV-I-V": ProgressionPattern("Emotional (vi–IV–I–V)", (5, 3, 0, 4)),
	"I-bVII-IV-I": ProgressionPattern("Modal (I–bVII–IV–I)", (0, 6, 3, 0)),
}


def resolve_progression (progression: typing.Union[str, typing.Sequence[int], ProgressionPattern]) -> ProgressionPattern:

	"""Accept a progression name, a degree list, or a pattern."""

	if isinstance(progression, ProgressionPattern):
		return progression

	if isinstance(progression, str):

		if progression not in PROGRESSIONS:
			raise ValueError(f"Unknown progression: {progression!r}. Available: {sorted(PROGRESSIONS)}")

		return PROGRESSIONS[progression]

	return ProgressionPattern("custom", tuple(progression))


def build_diatonic_chords (
	pitch_space: tessitura.pitch_space.PitchSpace,
	scale: tessitura.pitch_space.Scale,
) -> typing.List[tessitura.chords.Chord]:

	"""Return the seven diatonic triads for a scale.

	Qualities come from the pitch space's tables. Pentatonic scales use the
	chords of their parent heptatonic scale on the same root.
	"""

	tables = pitch_space.tables
	mode = scale.mode or "major"
	source, qualities = tables.chord_qualities(mode)
	intervals = tables.scale_intervals[source]

	return [
		tessitura.chords.Chord(root_pc=(scale.root + interval) % 12, quality=quality)
		for interval, quality in zip(intervals, qualities)
	]


class HarmonyEngine:

	"""Holds the current chord and key, advanced one bar at a time."""

	def __init__ (
		self,
		pitch_space: tessitura.pitch_space.PitchSpace,
		scale: tessitura.pitch_space.Scale,
		progression: typing.Union[str, typing.Sequence[int], ProgressionPattern] = "I-V-vi-IV",
		bars_per_chord: int = DEFAULT_BARS_PER_CHORD,
		modulate: bool = False,
		rng: typing.Optional[random.Random] = None,
	) -> None:

		"""
		Parameters:
			pitch_space: Builds scales and holds the chord-quality tables.
			scale: Starting key.
			progression: A name from :data:`PROGRESSIONS`, a list of degrees,
				or a :class:`ProgressionPattern`.
			bars_per_chord: Bars each chord is held for.
			modulate: Move the key by a fourth or fifth every third cycle.
			rng: Optional seeded ``random.Random`` for the modulation choice.
		"""

		if bars_per_chord < 1:
			raise ValueError("Bars per chord must be at least 1")

		self.pitch_space = pitch_space
		self.scale = scale
		self.progression = resolve_progression(progression)
		self.bars_per_chord = bars_per_chord
		self.modulate = modulate
		self.rng = rng or random.Random()
		self.events = tessitura.event_emitter.EventEmitter()

		self.progression_index = 0
		self.bar_counter = 0
		self.cycle_count = 0
		self.diatonic_chords = build_diatonic_chords(pitch_space, scale)


	def on (self, event_name: str, callback: tessitura.event_emitter.CallbackType) -> None:

		"""Register a listener for ``"cadence"`` or ``"modulation"``."""

		self.events.on(event_name, callback)


	def off (self, event_name: str, callback: tessitura.event_emitter.CallbackType) -> None:

		"""Remove a listener registered with :meth:`on`."""

		self.events.off(event_name, callback)


	@property
	def current_degree (self) -> int:

		"""Scale degree of the current chord."""

		return self.progression.degrees[self.progression_index]


	def get_current_chord (self) -> tessitura.chords.Chord:

		"""Return the current chord."""

		return self.diatonic_chords[self.current_degree % len(self.diatonic_chords)]


	def get_next_chord (self) -> tessitura.chords.Chord:

		"""Return the chord the next change will move to."""

		degrees = self.progression.degrees
		degree = degrees[(self.progression_index + 1) % len(degrees)]

		return self.diatonic_chords[degree % len(self.diatonic_chords)]


	def advance_bar (self) -> bool:

		"""Count one bar. Return True if the chord changed.

		The chord changes every ``bars_per_chord`` calls. Cadence and
		modulation listeners run before this returns.
		"""

		self.bar_counter += 1

		if self.bar_counter < self.bars_per_chord:
			return False

		self.bar_counter = 0

		previous_degree = self.current_degree
		self.progression_index = (self.progression_index + 1) % len(self.progression.degrees)
		wrapped = self.progression_index == 0

		if wrapped:
			self.cycle_count += 1

		logger.debug(f"Chord change to {self.get_current_chord().name()} (degree {self.current_degree})")

		if self.current_degree == 0 and previous_degree != 0:
			logger.info(f"Cadence on {self.get_current_chord().name()} (cycle {self.cycle_count})")
			self.events.emit("cadence", self.cycle_count, self.get_current_chord())

		if wrapped and self.modulate and self.cycle_count % MODULATION_CYCLES == 0:
			self._modulate()

		return True


	def _modulate (self) -> None:

		"""Move the key up a fourth or a fifth and rebuild the chords."""

		old_root = self.scale.root
		interval = self.rng.choice(MODULATION_INTERVALS)

		self.set_scale(self.pitch_space.transpose_scale(self.scale, interval))

		logger.info(f"Modulation to {self.scale.name} after {self.cycle_count} cycles")
		self.events.emit("modulation", old_root, self.scale.root, self.scale)


	def set_scale (self, scale: tessitura.pitch_space.Scale) -> None:

		"""Replace the key and rebuild all diatonic chords. Position is kept."""

		self.scale = scale
		self.diatonic_chords = build_diatonic_chords(self.pitch_space, scale)


	def set_progression (self, progression: typing.Union[str, typing.Sequence[int], ProgressionPattern]) -> None:

		"""Switch progressions and restart from its first chord."""

		self.progression = resolve_progression(progression)
		self.progression_index = 0
		self.bar_counter = 0


	def reset (self) -> None:

		"""Return to the first chord of the progression."""

		self.progression_index = 0
		self.bar_counter = 0


	def progression_chord_names (self) -> typing.List[str]:

		"""Return the chord name for each step of the progression."""

		return [self.diatonic_chords[d % len(self.diatonic_chords)].name() for d in self.progression.degrees]


	def progression_info (self) -> typing.Dict[str, typing.Any]:

		"""Summary for display: current chord name, position and length."""

		return {
			"chord_name": self.get_current_chord().name(),
			"progression_index": self.progression_index,
			"total_chords": len(self.progression.degrees),
			"cycle_count": self.cycle_count,
			"key": self.scale.name,
		}
