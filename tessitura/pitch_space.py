"""Scales, scale degrees and scale snapping over a MIDI working range.

A :class:`Scale` is an immutable set of pitch classes with a distinguished
root. :class:`PitchSpace` builds scales from root and mode names using an
explicit :class:`~tessitura.intervals.TheoryTables` bundle, and answers the
pitch questions the rest of the engine asks: which MIDI pitches are playable,
which degree a pitch sits on, and where the nearest scale tone is.

Degrees are counted by semitone distance from the root, so in D dorian the
pitch class D is degree 0 and C is degree 6.
"""

import dataclasses
import typing

import tessitura.intervals


DEFAULT_LOW: int = 48
DEFAULT_HIGH: int = 84

# Largest distance snap_to_scale searches on either side of a pitch.
SNAP_RADIUS: int = 6


class UnknownRootError (ValueError):

	"""Raised when a root note name is not in the note-name table."""


class UnknownModeError (ValueError):

	"""Raised when a mode name is not in the scale table."""


@dataclasses.dataclass(frozen=True)
class Scale:

	"""
	An immutable pitch-class set with a root.
	"""

	root: int
	pitch_classes: typing.FrozenSet[int]
	name: str
	mode: str = ""
	root_name: str = ""


	def __post_init__ (self) -> None:

		if self.root not in self.pitch_classes:
			raise ValueError(f"Scale root {self.root} must be one of its pitch classes")


	def contains (self, pitch: int) -> bool:

		"""Return True if the MIDI pitch's class belongs to the scale."""

		return pitch % 12 in self.pitch_classes


	def sorted_pitch_classes (self) -> typing.List[int]:

		"""Return pitch classes ordered by semitone distance above the root."""

		return sorted(self.pitch_classes, key=lambda pc: (pc - self.root) % 12)


class PitchSpace:

	"""Scale construction and pitch queries over a fixed MIDI range."""

	def __init__ (
		self,
		tables: tessitura.intervals.TheoryTables = tessitura.intervals.DEFAULT_TABLES,
		low: int = DEFAULT_LOW,
		high: int = DEFAULT_HIGH,
	) -> None:

		"""
		Parameters:
			tables: Note-name and scale tables used by :meth:`build_scale`.
			low: Lowest MIDI pitch (inclusive) of the working range.
			high: Highest MIDI pitch (inclusive) of the working range.
		"""

		if not 0 <= low <= high <= 127:
			raise ValueError(f"Invalid MIDI range {low}-{high}")

		self.tables = tables
		self.low = low
		self.high = high


	def build_scale (self, root_name: str, mode_name: str) -> Scale:

		"""Build a scale from a root note name and a mode name.

		Parameters:
			root_name: Note name such as ``"C"``, ``"F#"`` or ``"Bb"``.
			mode_name: Mode name such as ``"major"``, ``"dorian"`` or
				``"harmonic minor"``. Spacing, hyphens and camelCase are
				accepted.

		Raises:
			UnknownRootError: If the root name is not recognised.
			UnknownModeError: If the mode name is not recognised.

		Example:
			```python
			space = PitchSpace()
			scale = space.build_scale("A", "minor")
			scale.name            # → "A minor"
			sorted(scale.pitch_classes)  # → [0, 2, 4, 5, 7, 9, 11]
			```
		"""

		if root_name not in self.tables.note_names:
			raise UnknownRootError(
				f"Unknown root: {root_name!r}. Available: {self.available_roots()}"
			)

		mode = self.tables.resolve_mode(mode_name)

		if mode is None:
			raise UnknownModeError(
				f"Unknown mode: {mode_name!r}. Available: {self.available_modes()}"
			)

		root = self.tables.note_names[root_name]
		intervals = self.tables.scale_intervals[mode]

		return Scale(
			root = root,
			pitch_classes = frozenset((root + i) % 12 for i in intervals),
			name = f"{root_name} {mode.replace('_', ' ')}",
			mode = mode,
			root_name = root_name,
		)


	def spell_pitch_class (self, pc: int, like: str = "") -> typing.Optional[str]:

		"""Return a name for pitch class ``pc`` from the note-name table, or None.

		When several names share the pitch class, one with the same accidental
		as ``like`` wins (``"Eb"`` over ``"D#"`` when ``like`` is ``"Ab"``),
		then a natural, then the first in table order.
		"""

		names = [name for name, value in self.tables.note_names.items() if value % 12 == pc % 12]

		if not names:
			return None

		for accidental in ("b", "#"):
			if accidental in like[1:]:
				for name in names:
					if accidental in name[1:]:
						return name

		naturals = [name for name in names if len(name) == 1]

		return naturals[0] if naturals else names[0]


	def transpose_scale (self, scale: Scale, semitones: int) -> Scale:

		"""Return the same mode rebuilt on a root ``semitones`` higher.

		The new root is spelled from the note-name table in the old root's
		accidental style. A pitch class the table cannot name keeps the
		transposed pitch classes under a generic sharp name.
		"""

		new_root = (scale.root + semitones) % 12
		root_name = self.spell_pitch_class(new_root, like=scale.root_name)

		if scale.mode and root_name is not None and self.tables.resolve_mode(scale.mode):
			return self.build_scale(root_name, scale.mode)

		if root_name is None:
			root_name = tessitura.intervals.PC_TO_NOTE_NAME[new_root]

		pitch_classes = frozenset((pc + semitones) % 12 for pc in scale.pitch_classes)
		label = scale.mode.replace("_", " ") if scale.mode else "custom"

		return Scale(root=new_root, pitch_classes=pitch_classes, name=f"{root_name} {label}", mode=scale.mode, root_name=root_name)


	def scale_pitches (
		self,
		scale: Scale,
		low: typing.Optional[int] = None,
		high: typing.Optional[int] = None,
	) -> typing.List[int]:

		"""Return every in-scale MIDI pitch in ``[low, high]``, ascending.

		Defaults to the working range given at construction.
		"""

		low = self.low if low is None else low
		high = self.high if high is None else high

		return [p for p in range(low, high + 1) if p % 12 in scale.pitch_classes]


	def scale_degree (self, pitch: int, scale: Scale) -> typing.Optional[int]:

		"""Return the pitch's scale degree (0-based), or None if it is not in the scale.

		Example:
			```python
			c_major = space.build_scale("C", "major")
			space.scale_degree(67, c_major)  # → 4  (G, the dominant)
			space.scale_degree(61, c_major)  # → None
			```
		"""

		pc = pitch % 12

		if pc not in scale.pitch_classes:
			return None

		return scale.sorted_pitch_classes().index(pc)


	def is_in_scale (self, pitch: int, scale: Scale) -> bool:

		"""Return True if the pitch's class belongs to the scale."""

		return scale.contains(pitch)


	def snap_to_scale (self, pitch: int, scale: Scale) -> int:

		"""Move a pitch to the nearest scale tone.

		Searches outward one semitone at a time, checking below before above,
		so equidistant neighbours resolve to the lower pitch. Returns the
		pitch unchanged if it is already in the scale or no scale tone lies
		within :data:`SNAP_RADIUS` semitones.

		Example:
			```python
			space.snap_to_scale(61, c_major)  # → 60 (C# is equidistant from C and D)
			space.snap_to_scale(66, c_major)  # → 65
			```
		"""

		if scale.contains(pitch):
			return pitch

		for distance in range(1, SNAP_RADIUS + 1):

			if scale.contains(pitch - distance):
				return pitch - distance

			if scale.contains(pitch + distance):
				return pitch + distance

		return pitch


	def clamp (self, pitch: float) -> int:

		"""Round a raw pitch and clamp it to the working range."""

		return max(self.low, min(self.high, int(round(pitch))))


	def available_modes (self) -> typing.List[str]:

		"""Return the canonical mode names."""

		return list(self.tables.scale_intervals)


	def available_roots (self) -> typing.List[str]:

		"""Return the accepted root note names."""

		return list(self.tables.note_names)


def midi_to_note_name (pitch: int) -> str:

	"""Return a note name with octave, e.g. ``60`` → ``"C4"``."""

	octave = pitch // 12 - 1

	return f"{tessitura.intervals.PC_TO_NOTE_NAME[pitch % 12]}{octave}"
