import pytest

import tessitura.intervals
import tessitura.pitch_space


def test_build_scale_c_major (pitch_space: tessitura.pitch_space.PitchSpace) -> None:

	"""C major should have the white-key pitch classes and a readable name."""

	scale = pitch_space.build_scale("C", "major")

	assert scale.root == 0
	assert scale.pitch_classes == frozenset({0, 2, 4, 5, 7, 9, 11})
	assert scale.name == "C major"


def test_build_scale_accepts_mode_spellings (pitch_space: tessitura.pitch_space.PitchSpace) -> None:

	"""Spaces, hyphens, camelCase and aliases should all resolve."""

	a = pitch_space.build_scale("A", "harmonic minor")
	b = pitch_space.build_scale("A", "harmonic-minor")
	c = pitch_space.build_scale("A", "harmonicMinor")

	assert a.pitch_classes == b.pitch_classes == c.pitch_classes
	assert a.name == "A harmonic minor"

	assert pitch_space.build_scale("D", "ionian").pitch_classes == pitch_space.build_scale("D", "major").pitch_classes
	assert pitch_space.build_scale("C", "pentatonicMajor").mode == "major_pentatonic"


def test_build_scale_flat_root (pitch_space: tessitura.pitch_space.PitchSpace) -> None:

	"""Flat and sharp spellings should give the same root."""

	assert pitch_space.build_scale("Bb", "major").root == pitch_space.build_scale("A#", "major").root == 10


def test_unknown_root_raises (pitch_space: tessitura.pitch_space.PitchSpace) -> None:

	"""An unknown root should raise UnknownRootError, which is a ValueError."""

	with pytest.raises(tessitura.pitch_space.UnknownRootError):
		pitch_space.build_scale("H", "major")

	with pytest.raises(ValueError):
		pitch_space.build_scale("X", "major")


def test_unknown_mode_raises (pitch_space: tessitura.pitch_space.PitchSpace) -> None:

	"""An unknown mode should raise UnknownModeError."""

	with pytest.raises(tessitura.pitch_space.UnknownModeError):
		pitch_space.build_scale("C", "bebop")


def test_scale_pitches_ascending_and_in_scale (pitch_space: tessitura.pitch_space.PitchSpace) -> None:

	"""Scale pitches should be strictly ascending, unique, and all in scale."""

	for mode in pitch_space.available_modes():
		scale = pitch_space.build_scale("E", mode)
		pitches = pitch_space.scale_pitches(scale)

		assert pitches
		assert all(a < b for a, b in zip(pitches, pitches[1:]))
		assert all(p % 12 in scale.pitch_classes for p in pitches)
		assert pitches[0] >= pitch_space.low
		assert pitches[-1] <= pitch_space.high


def test_scale_pitches_custom_range (pitch_space: tessitura.pitch_space.PitchSpace, c_major: tessitura.pitch_space.Scale) -> None:

	"""An explicit range should override the working range."""

	assert pitch_space.scale_pitches(c_major, 60, 72) == [60, 62, 64, 65, 67, 69, 71, 72]


def test_scale_pitches_empty_range (pitch_space: tessitura.pitch_space.PitchSpace, c_major: tessitura.pitch_space.Scale) -> None:

	"""A range holding no scale tone should give an empty list."""

	assert pitch_space.scale_pitches(c_major, 61, 61) == []


def test_scale_degree (pitch_space: tessitura.pitch_space.PitchSpace, c_major: tessitura.pitch_space.Scale) -> None:

	"""Degrees count from the root; out-of-scale pitches have none."""

	assert pitch_space.scale_degree(60, c_major) == 0
	assert pitch_space.scale_degree(67, c_major) == 4
	assert pitch_space.scale_degree(83, c_major) == 6
	assert pitch_space.scale_degree(61, c_major) is None


def test_scale_degree_counts_from_root (pitch_space: tessitura.pitch_space.PitchSpace) -> None:

	"""In D dorian, D is degree 0 and C is degree 6."""

	d_dorian = pitch_space.build_scale("D", "dorian")

	assert pitch_space.scale_degree(62, d_dorian) == 0
	assert pitch_space.scale_degree(72, d_dorian) == 6


def test_snap_to_scale_unchanged_when_in_scale (pitch_space: tessitura.pitch_space.PitchSpace, c_major: tessitura.pitch_space.Scale) -> None:

	"""In-scale pitches come back unchanged."""

	for p in pitch_space.scale_pitches(c_major):
		assert pitch_space.snap_to_scale(p, c_major) == p


def test_snap_to_scale_nearest_with_lower_tie (pitch_space: tessitura.pitch_space.PitchSpace, c_major: tessitura.pitch_space.Scale) -> None:

	"""Out-of-scale pitches move to the nearest scale tone, ties going lower."""

	# C# is one semitone from both C and D.
	assert pitch_space.snap_to_scale(61, c_major) == 60
	assert pitch_space.snap_to_scale(66, c_major) == 65
	assert pitch_space.snap_to_scale(70, c_major) == 69


def test_snap_to_scale_minimal_distance (pitch_space: tessitura.pitch_space.PitchSpace) -> None:

	"""With a sparse scale, the snapped pitch is the closest one."""

	pentatonic = pitch_space.build_scale("C", "minor pentatonic")  # C Eb F G Bb

	# A (69) is 2 from G (67) and 1 from Bb (70).
	assert pitch_space.snap_to_scale(69, pentatonic) == 70

	for p in range(48, 85):
		snapped = pitch_space.snap_to_scale(p, pentatonic)
		best = min(abs(q - p) for q in range(36, 97) if pentatonic.contains(q))
		assert abs(snapped - p) == best


def test_clamp (pitch_space: tessitura.pitch_space.PitchSpace) -> None:

	"""Raw pitches are rounded and held inside the range."""

	assert pitch_space.clamp(10) == 48
	assert pitch_space.clamp(200) == 84
	assert pitch_space.clamp(63.6) == 64


def test_transpose_scale (pitch_space: tessitura.pitch_space.PitchSpace, c_major: tessitura.pitch_space.Scale) -> None:

	"""Transposing by a fifth gives G major."""

	g_major = pitch_space.transpose_scale(c_major, 7)

	assert g_major.root == 7
	assert g_major.name == "G major"
	assert 6 in g_major.pitch_classes
	assert 5 not in g_major.pitch_classes


FLAT_NOTE_NAMES = {
	"C": 0, "Db": 1, "D": 2, "Eb": 3, "E": 4, "F": 5,
	"Gb": 6, "G": 7, "Ab": 8, "A": 9, "Bb": 10, "B": 11,
}


def test_transpose_scale_keeps_flat_spelling (pitch_space: tessitura.pitch_space.PitchSpace) -> None:

	"""A flat key transposes to a flat-spelled key."""

	e_flat = pitch_space.transpose_scale(pitch_space.build_scale("Ab", "major"), 7)

	assert e_flat.root == 3
	assert e_flat.name == "Eb major"


def test_transpose_scale_with_flat_only_names () -> None:

	"""Transposition only uses names the injected table knows."""

	tables = tessitura.intervals.TheoryTables.build(
		note_names = FLAT_NOTE_NAMES,
		scale_intervals = tessitura.intervals.SCALE_INTERVALS,
	)
	space = tessitura.pitch_space.PitchSpace(tables)

	scale = space.build_scale("Ab", "major")

	for _ in range(12):
		scale = space.transpose_scale(scale, 7)
		assert scale.root_name in FLAT_NOTE_NAMES
		assert scale.mode == "major"

	assert scale.root == 8


def test_transpose_scale_unnamed_root () -> None:

	"""A root the table cannot name still transposes, with a generic name."""

	tables = tessitura.intervals.TheoryTables.build(
		note_names = {"C": 0, "D": 2},
		scale_intervals = {"major": [0, 2, 4, 5, 7, 9, 11]},
	)
	space = tessitura.pitch_space.PitchSpace(tables)

	g_major = space.transpose_scale(space.build_scale("C", "major"), 7)

	assert g_major.root == 7
	assert g_major.name == "G major"
	assert g_major.pitch_classes == frozenset({7, 9, 11, 0, 2, 4, 6})


def test_scale_root_must_be_member () -> None:

	"""A scale whose root is not among its pitch classes is rejected."""

	with pytest.raises(ValueError):
		tessitura.pitch_space.Scale(root=1, pitch_classes=frozenset({0, 4, 7}), name="broken")


def test_invalid_range_rejected () -> None:

	"""Low above high should be rejected."""

	with pytest.raises(ValueError):
		tessitura.pitch_space.PitchSpace(low=80, high=60)


def test_custom_tables () -> None:

	"""A pitch space built on its own tables should only know those modes."""

	tables = tessitura.intervals.TheoryTables.build(
		note_names = {"C": 0, "D": 2},
		scale_intervals = {"major": [0, 2, 4, 5, 7, 9, 11], "whole_tone": [0, 2, 4, 6, 8, 10]},
	)
	space = tessitura.pitch_space.PitchSpace(tables)

	scale = space.build_scale("D", "whole tone")

	assert scale.pitch_classes == frozenset({2, 4, 6, 8, 10, 0})
	assert space.available_modes() == ["major", "whole_tone"]

	with pytest.raises(tessitura.pitch_space.UnknownModeError):
		space.build_scale("C", "dorian")

	with pytest.raises(tessitura.pitch_space.UnknownRootError):
		space.build_scale("E", "major")


def test_tables_reject_scale_without_root () -> None:

	"""Every scale must include interval 0."""

	with pytest.raises(ValueError):
		tessitura.intervals.TheoryTables.build(note_names={"C": 0}, scale_intervals={"odd": [2, 4, 7]})


def test_tables_are_read_only () -> None:

	"""The default tables cannot be modified in place."""

	with pytest.raises(TypeError):
		tessitura.intervals.DEFAULT_TABLES.scale_intervals["new"] = (0, 1)  # type: ignore[index]


def test_normalize_mode_name () -> None:

	"""Mode names fold to snake_case."""

	assert tessitura.intervals.normalize_mode_name("Harmonic Minor") == "harmonic_minor"
	assert tessitura.intervals.normalize_mode_name("pentatonicMajor") == "pentatonic_major"
	assert tessitura.intervals.normalize_mode_name("melodic-minor") == "melodic_minor"


def test_midi_to_note_name () -> None:

	"""MIDI pitches convert to note names with octave."""

	assert tessitura.pitch_space.midi_to_note_name(60) == "C4"
	assert tessitura.pitch_space.midi_to_note_name(69) == "A4"
	assert tessitura.pitch_space.midi_to_note_name(37) == "C#2"
