import pytest

import tessitura.chords


def test_chord_names () -> None:

	"""Names combine the sharp-spelled root with the quality suffix."""

	assert tessitura.chords.Chord(0, "major").name() == "C"
	assert tessitura.chords.Chord(9, "minor").name() == "Am"
	assert tessitura.chords.Chord(7, "dominant_7th").name() == "G7"
	assert tessitura.chords.Chord(11, "half_diminished_7th").name() == "Bm7b5"
	assert tessitura.chords.Chord(3, "major_7th").name() == "D#maj7"


def test_pitch_classes_wrap () -> None:

	"""Chord tones above B wrap around to low pitch classes."""

	chord = tessitura.chords.Chord(11, "diminished")

	assert chord.ordered_pitch_classes() == [11, 2, 5]
	assert chord.pitch_classes == frozenset({11, 2, 5})


def test_contains_any_octave () -> None:

	"""Membership ignores the octave."""

	chord = tessitura.chords.Chord(0, "major")

	assert chord.contains(40)
	assert chord.contains(79)
	assert not chord.contains(62)


def test_bass_note () -> None:

	"""The bass note is the first root-class pitch at or above the base."""

	assert tessitura.chords.Chord(7, "major").bass_note(36) == 43
	assert tessitura.chords.Chord(0, "major").bass_note(36) == 36
	assert tessitura.chords.Chord(11, "minor").bass_note(36) == 47


def test_unknown_quality () -> None:

	"""Only known qualities can be built."""

	with pytest.raises(ValueError):
		tessitura.chords.Chord(0, "sus4")
