"""Post-hoc melodic quality scoring and auto-correction.

The score of a finished note sequence is

	score = 0.3 * scale_conformity
	      + 0.3 * chord_tones_on_strong_beats
	      - 0.2 * average_leap
	      - 0.2 * dissonance_rate

with every sub-score normalized to 0–1. A score under the threshold flags
the melody for :func:`auto_correct_melody`.
"""

import dataclasses
import typing

import tessitura.chords
import tessitura.notes
import tessitura.pitch_space


DEFAULT_THRESHOLD: float = 0.6

# Sixteenth-note grid per bar; beats 1 and 3 fall on steps 0 and 8.
STEPS_PER_BAR: int = 16
STRONG_STEPS: typing.Tuple[int, ...] = (0, 8)

# Minor second, tritone, major seventh.
DISSONANT_INTERVALS: typing.FrozenSet[int] = frozenset({1, 6, 11})

SCORE_WEIGHTS: typing.Tuple[float, float, float, float] = (0.3, 0.3, -0.2, -0.2)

OCTAVE: int = 12


@dataclasses.dataclass(frozen=True)
class MelodicScore:

	"""The combined score and the four sub-scores behind it."""

	score: float
	scale_conformity: float
	chord_tones_on_strong_beats: float
	average_leap: float
	dissonance_rate: float
	needs_correction: bool


def is_strong_beat (time: float, bpm: float, steps_per_bar: int = STEPS_PER_BAR) -> bool:

	"""True if ``time`` (seconds) falls within half a step of beat 1 or beat 3."""

	step_duration = (60.0 / bpm) / (steps_per_bar / 4)
	position = (time / step_duration) % steps_per_bar

	return any(abs(position - step) < 0.5 for step in STRONG_STEPS) or position > steps_per_bar - 0.5


def compute_melodic_score (
	notes: typing.Sequence[tessitura.notes.NoteEvent],
	scale: tessitura.pitch_space.Scale,
	chord: tessitura.chords.Chord,
	bpm: float,
	threshold: float = DEFAULT_THRESHOLD,
) -> MelodicScore:

	"""Score a note sequence against a scale and the chord it was played over.

	An empty sequence scores 1.0 and never needs correction.
	"""

	if bpm <= 0:
		raise ValueError("BPM must be positive")

	if not notes:
		return MelodicScore(
			score = 1.0,
			scale_conformity = 1.0,
			chord_tones_on_strong_beats = 1.0,
			average_leap = 0.0,
			dissonance_rate = 0.0,
			needs_correction = False,
		)

	scale_conformity = sum(1 for n in notes if scale.contains(n.pitch)) / len(notes)

	strong = [n for n in notes if is_strong_beat(n.time, bpm)]
	chord_tones_on_strong_beats = (
		sum(1 for n in strong if chord.contains(n.pitch)) / len(strong) if strong else 1.0
	)

	intervals = [abs(b.pitch - a.pitch) for a, b in zip(notes, notes[1:])]

	if intervals:
		average_leap = min(sum(intervals) / len(intervals) / OCTAVE, 1.0)
		dissonance_rate = sum(1 for i in intervals if i % OCTAVE in DISSONANT_INTERVALS) / len(intervals)
	else:
		average_leap = 0.0
		dissonance_rate = 0.0

	w_scale, w_chord, w_leap, w_dissonance = SCORE_WEIGHTS

	score = (
		w_scale * scale_conformity
		+ w_chord * chord_tones_on_strong_beats
		+ w_leap * average_leap
		+ w_dissonance * dissonance_rate
	)

	return MelodicScore(
		score = score,
		scale_conformity = scale_conformity,
		chord_tones_on_strong_beats = chord_tones_on_strong_beats,
		average_leap = average_leap,
		dissonance_rate = dissonance_rate,
		needs_correction = score < threshold,
	)


def auto_correct_melody (
	notes: typing.Sequence[tessitura.notes.NoteEvent],
	scale: tessitura.pitch_space.Scale,
	pitch_space: typing.Optional[tessitura.pitch_space.PitchSpace] = None,
) -> typing.List[tessitura.notes.NoteEvent]:

	"""Snap out-of-scale notes and fold leaps wider than an octave.

	Each note is compared with its already-corrected predecessor and moved
	by octaves until it is within 12 semitones of it. Octave moves keep the
	pitch class, so a corrected melody passes through unchanged a second
	time.
	"""

	pitch_space = pitch_space or tessitura.pitch_space.PitchSpace()
	corrected: typing.List[tessitura.notes.NoteEvent] = []

	for note in notes:
		pitch = pitch_space.snap_to_scale(note.pitch, scale)

		if corrected:
			prev = corrected[-1].pitch

			while pitch - prev > OCTAVE:
				pitch -= OCTAVE

			while prev - pitch > OCTAVE:
				pitch += OCTAVE

		corrected.append(note if pitch == note.pitch else note.with_pitch(pitch))

	return corrected


def validate_melody (
	notes: typing.Sequence[tessitura.notes.NoteEvent],
	scale: tessitura.pitch_space.Scale,
	chord: tessitura.chords.Chord,
	bpm: float,
	threshold: float = DEFAULT_THRESHOLD,
	pitch_space: typing.Optional[tessitura.pitch_space.PitchSpace] = None,
) -> typing.Tuple[typing.List[tessitura.notes.NoteEvent], MelodicScore]:

	"""Score a melody and correct it if the score is under the threshold.

	Returns the (possibly corrected) notes with the score of the input.
	"""

	result = compute_melodic_score(notes, scale, chord, bpm, threshold=threshold)

	if result.needs_correction:
		return auto_correct_melody(notes, scale, pitch_space=pitch_space), result

	return list(notes), result
