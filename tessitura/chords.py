"""Chord qualities and the :class:`Chord` value type.

Each quality maps to its shape above the root and the suffix used in chord
names, so ``Chord(7, "dominant_7th").name()`` is ``"G7"`` and
``Chord(11, "diminished").name()`` is ``"Bdim"``.
"""

import dataclasses
import typing

import tessitura.intervals


# Quality -> (semitones above the root, name suffix).
CHORD_QUALITIES: typing.Dict[str, typing.Tuple[typing.Tuple[int, ...], str]] = {
	"major":               ((0, 4, 7), ""),
	"minor":               ((0, 3, 7), "m"),
	"diminished":          ((0, 3, 6), "dim"),
	"augmented":           ((0, 4, 8), "+"),
	"dominant_7th":        ((0, 4, 7, 10), "7"),
	"major_7th":           ((0, 4, 7, 11), "maj7"),
	"minor_7th":           ((0, 3, 7, 10), "m7"),
	"half_diminished_7th": ((0, 3, 6, 10), "m7b5"),
}


@dataclasses.dataclass(frozen=True)
class Chord:

	"""A chord root (pitch class 0-11) and a quality from :data:`CHORD_QUALITIES`."""

	root_pc: int
	quality: str


	def __post_init__ (self) -> None:

		if self.quality not in CHORD_QUALITIES:
			raise ValueError(f"Unknown chord quality {self.quality!r}. Available: {sorted(CHORD_QUALITIES)}")


	def ordered_pitch_classes (self) -> typing.List[int]:

		"""Pitch classes in chord order: root, third, fifth (, seventh)."""

		return [(self.root_pc + i) % 12 for i in CHORD_QUALITIES[self.quality][0]]


	@property
	def pitch_classes (self) -> typing.FrozenSet[int]:

		return frozenset(self.ordered_pitch_classes())


	def contains (self, pitch: int) -> bool:

		"""Return True if the MIDI pitch's class is a chord tone."""

		return pitch % 12 in self.pitch_classes


	def bass_note (self, root_midi: int) -> int:

		"""Return the lowest MIDI note at or above ``root_midi`` with the chord's root pitch class.

		Example:
			```python
			Chord(root_pc=7, quality="major").bass_note(36)   # → 43  (G2)
			```
		"""

		return root_midi + (self.root_pc - root_midi) % 12


	def name (self) -> str:

		root_name = tessitura.intervals.PC_TO_NOTE_NAME[self.root_pc % 12]

		return f"{root_name}{CHORD_QUALITIES[self.quality][1]}"
