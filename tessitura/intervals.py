"""Scale and chord-quality tables.

The tables here are plain module constants, gathered into an immutable
:class:`TheoryTables` bundle that :mod:`tessitura.pitch_space` and
:mod:`tessitura.harmony_engine` receive explicitly. Build a different bundle
to run the engine against alternative tables (tests do this).
"""

import dataclasses
import re
import types
import typing


NOTE_NAME_TO_PC: typing.Dict[str, int] = {
	"C": 0,
	"C#": 1,
	"Db": 1,
	"D": 2,
	"D#": 3,
	"Eb": 3,
	"E": 4,
	"F": 5,
	"F#": 6,
	"Gb": 6,
	"G": 7,
	"G#": 8,
	"Ab": 8,
	"A": 9,
	"A#": 10,
	"Bb": 10,
	"B": 11,
}

PC_TO_NOTE_NAME: typing.List[str] = [
	"C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B",
]


SCALE_INTERVALS: typing.Dict[str, typing.List[int]] = {
	"major":            [0, 2, 4, 5, 7, 9, 11],
	"minor":            [0, 2, 3, 5, 7, 8, 10],
	"dorian":           [0, 2, 3, 5, 7, 9, 10],
	"mixolydian":       [0, 2, 4, 5, 7, 9, 10],
	"phrygian":         [0, 1, 3, 5, 7, 8, 10],
	"lydian":           [0, 2, 4, 6, 7, 9, 11],
	"harmonic_minor":   [0, 2, 3, 5, 7, 8, 11],
	"melodic_minor":    [0, 2, 3, 5, 7, 9, 11],
	"major_pentatonic": [0, 2, 4, 7, 9],
	"minor_pentatonic": [0, 3, 5, 7, 10],
}

MODE_ALIASES: typing.Dict[str, str] = {
	"ionian": "major",
	"aeolian": "minor",
	"natural_minor": "minor",
	"pentatonic_major": "major_pentatonic",
	"pentatonic_minor": "minor_pentatonic",
}


# ---------------------------------------------------------------------------
# Diatonic chord qualities, one per scale degree (I–VII).
# ---------------------------------------------------------------------------

IONIAN_QUALITIES: typing.List[str] = [
	"major", "minor", "minor", "major", "major", "minor", "diminished"
]

DORIAN_QUALITIES: typing.List[str] = [
	"minor", "minor", "major", "major", "minor", "diminished", "major"
]

PHRYGIAN_QUALITIES: typing.List[str] = [
	"minor", "major", "major", "minor", "diminished", "major", "minor"
]

LYDIAN_QUALITIES: typing.List[str] = [
	"major", "major", "minor", "diminished", "major", "minor", "minor"
]

MIXOLYDIAN_QUALITIES: typing.List[str] = [
	"major", "minor", "diminished", "major", "minor", "minor", "major"
]

AEOLIAN_QUALITIES: typing.List[str] = [
	"minor", "diminished", "major", "minor", "minor", "major", "major"
]

HARMONIC_MINOR_QUALITIES: typing.List[str] = [
	"minor", "diminished", "augmented", "minor", "major", "major", "diminished"
]

MELODIC_MINOR_QUALITIES: typing.List[str] = [
	"minor", "minor", "augmented", "major", "major", "diminished", "diminished"
]


# Mode -> (mode whose degrees carry the chord roots, qualities per degree).
# Pentatonic scales have five tones, so they borrow the seven chords of the
# heptatonic scale they are drawn from.
DIATONIC_CHORD_MAP: typing.Dict[str, typing.Tuple[str, typing.List[str]]] = {
	"major":            ("major",          IONIAN_QUALITIES),
	"minor":            ("minor",          AEOLIAN_QUALITIES),
	"dorian":           ("dorian",         DORIAN_QUALITIES),
	"mixolydian":       ("mixolydian",     MIXOLYDIAN_QUALITIES),
	"phrygian":         ("phrygian",       PHRYGIAN_QUALITIES),
	"lydian":           ("lydian",         LYDIAN_QUALITIES),
	"harmonic_minor":   ("harmonic_minor", HARMONIC_MINOR_QUALITIES),
	"melodic_minor":    ("melodic_minor",  MELODIC_MINOR_QUALITIES),
	"major_pentatonic": ("major",          IONIAN_QUALITIES),
	"minor_pentatonic": ("minor",          AEOLIAN_QUALITIES),
}

# Substrings that mark a mode outside DIATONIC_CHORD_MAP as minor-family.
MINOR_FAMILY_MARKERS: typing.Tuple[str, ...] = ("minor", "dorian", "phrygian")


def normalize_mode_name (mode_name: str) -> str:

	"""Fold spacing, hyphens and camelCase into the snake_case table key.

	Example:
		```python
		normalize_mode_name("Harmonic Minor")   # → "harmonic_minor"
		normalize_mode_name("pentatonicMajor")  # → "pentatonic_major"
		```
	"""

	snake = re.sub(r"(?<=[a-z0-9])([A-Z])", r"_\1", mode_name.strip())

	return re.sub(r"[\s\-]+", "_", snake).lower()


@dataclasses.dataclass(frozen=True)
class TheoryTables:

	"""
	Read-only lookup tables shared by the pitch space and the harmony engine.
	"""

	note_names: typing.Mapping[str, int]
	scale_intervals: typing.Mapping[str, typing.Tuple[int, ...]]
	mode_aliases: typing.Mapping[str, str]
	diatonic_chords: typing.Mapping[str, typing.Tuple[str, typing.Tuple[str, ...]]]


	@classmethod
	def build (
		cls,
		note_names: typing.Mapping[str, int],
		scale_intervals: typing.Mapping[str, typing.Sequence[int]],
		mode_aliases: typing.Optional[typing.Mapping[str, str]] = None,
		diatonic_chords: typing.Optional[typing.Mapping[str, typing.Tuple[str, typing.Sequence[str]]]] = None,
	) -> "TheoryTables":

		"""Copy the given tables into read-only mappings.

		Raises:
			ValueError: If a scale does not start on its root (interval 0),
				or a quality list does not have one entry per degree.
		"""

		for mode, intervals in scale_intervals.items():
			if not intervals or intervals[0] != 0:
				raise ValueError(f"Scale {mode!r} must start with interval 0")

		chord_map = diatonic_chords or {}

		for mode, (source, qualities) in chord_map.items():
			if source not in scale_intervals:
				raise ValueError(f"Chord source {source!r} for mode {mode!r} is not a known scale")

			if len(qualities) != len(scale_intervals[source]):
				raise ValueError(f"Mode {mode!r} needs one chord quality per degree of {source!r}")

		return cls(
			note_names = types.MappingProxyType(dict(note_names)),
			scale_intervals = types.MappingProxyType({k: tuple(v) for k, v in scale_intervals.items()}),
			mode_aliases = types.MappingProxyType(dict(mode_aliases or {})),
			diatonic_chords = types.MappingProxyType({k: (s, tuple(q)) for k, (s, q) in chord_map.items()}),
		)


	def resolve_mode (self, mode_name: str) -> typing.Optional[str]:

		"""Return the canonical mode key for a user-facing name, or None."""

		if mode_name in self.scale_intervals:
			return mode_name

		key = normalize_mode_name(mode_name)
		key = self.mode_aliases.get(key, key)

		return key if key in self.scale_intervals else None


	def chord_qualities (self, mode: str) -> typing.Tuple[str, typing.Tuple[str, ...]]:

		"""Return ``(source_mode, qualities)`` for building a mode's diatonic chords.

		Modes without an explicit entry are classified by name: anything
		containing a :data:`MINOR_FAMILY_MARKERS` substring uses natural minor
		chords, everything else uses major chords. A seven-tone mode keeps its
		own degrees as chord roots; other sizes fall back to the family's
		parent scale.
		"""

		if mode in self.diatonic_chords:
			return self.diatonic_chords[mode]

		is_minor = any(marker in mode for marker in MINOR_FAMILY_MARKERS)
		qualities = tuple(AEOLIAN_QUALITIES if is_minor else IONIAN_QUALITIES)

		if len(self.scale_intervals[mode]) == len(qualities):
			return mode, qualities

		return ("minor" if is_minor else "major"), qualities


DEFAULT_TABLES: TheoryTables = TheoryTables.build(
	note_names = NOTE_NAME_TO_PC,
	scale_intervals = SCALE_INTERVALS,
	mode_aliases = MODE_ALIASES,
	diatonic_chords = DIATONIC_CHORD_MAP,
)
