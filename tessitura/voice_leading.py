"""Four-voice voice leading.

Chooses a bass/tenor/alto/soprano voicing for the next chord that moves as
little as possible from the previous one. Cost of a candidate is

	Σ |next[v] - previous[v]| + CROSSING_PENALTY * inversions

where an inversion is a pair of voices whose order differs from the
previous voicing.

The search is bounded on purpose: each voice keeps at most
:data:`MAX_OCTAVE_CANDIDATES` pitches nearest the middle of its range, and
at most :data:`MAX_VOICINGS` valid voicings are scored. Raise either for
better voicings at more CPU per chord change. A pinned soprano first caps
each lower voice's range below it, so a soprano low in its range still
leaves room. A pinned pitch under the alto's range cannot be voiced; hosts
fold melody pitches with :func:`fold_into_range` first.

Example:
	```python
	state = VoiceLeadingState()
	first = state.next(Chord(root_pc=0, quality="major"))
	second = state.next(Chord(root_pc=7, quality="major"), melody_pitch=67)
	second.voices.pitches[-1]  # → 67
	```
"""

import dataclasses
import itertools
import logging
import math
import typing

import tessitura.chords


logger = logging.getLogger(__name__)


VOICE_COUNT: int = 4
MAX_OCTAVE_CANDIDATES: int = 3
MAX_VOICINGS: int = 50
CROSSING_PENALTY: float = 10.0


@dataclasses.dataclass(frozen=True)
class VoiceRange:

	"""Inclusive MIDI range of one voice."""

	low: int
	high: int


	@property
	def midpoint (self) -> float:

		return (self.low + self.high) / 2.0


# Bass, tenor, alto, soprano.
VOICE_RANGES: typing.Tuple[VoiceRange, ...] = (
	VoiceRange(36, 60),
	VoiceRange(48, 67),
	VoiceRange(55, 74),
	VoiceRange(60, 84),
)


@dataclasses.dataclass(frozen=True)
class VoiceState:

	"""MIDI pitches for each voice, bass first."""

	pitches: typing.Tuple[int, ...]


	def __post_init__ (self) -> None:

		if len(self.pitches) != VOICE_COUNT:
			raise ValueError(f"A voice state needs {VOICE_COUNT} pitches, got {len(self.pitches)}")


	@property
	def soprano (self) -> int:

		return self.pitches[-1]


	@property
	def bass (self) -> int:

		return self.pitches[0]


	def is_ordered (self) -> bool:

		"""True when every voice is strictly above the one below it."""

		return all(a < b for a, b in zip(self.pitches, self.pitches[1:]))


@dataclasses.dataclass(frozen=True)
class VoiceLeadingResult:

	"""The chosen voicing and its cost; ``math.inf`` means no voicing was found."""

	voices: VoiceState
	cost: float


def count_inversions (previous: typing.Sequence[int], candidate: typing.Sequence[int]) -> int:

	"""Count voice pairs whose relative order differs between two voicings."""

	inversions = 0

	for i, j in itertools.combinations(range(len(previous)), 2):
		if (previous[i] < previous[j] and candidate[i] > candidate[j]) or (previous[i] > previous[j] and candidate[i] < candidate[j]):
			inversions += 1

	return inversions


def voice_leading_cost (previous: typing.Sequence[int], candidate: typing.Sequence[int]) -> float:

	"""Total voice motion plus the crossing penalty."""

	motion = sum(abs(b - a) for a, b in zip(previous, candidate))

	return motion + CROSSING_PENALTY * count_inversions(previous, candidate)


def chord_voice_pitch_classes (chord: tessitura.chords.Chord) -> typing.List[int]:

	"""Chord pitch classes in interval order, root doubled up to four voices."""

	pcs = chord.ordered_pitch_classes()

	while len(pcs) < VOICE_COUNT:
		pcs.append(chord.root_pc)

	return pcs


def voice_candidates (pitch_classes: typing.Iterable[int], voice_range: VoiceRange, limit: int = MAX_OCTAVE_CANDIDATES) -> typing.List[int]:

	"""Return up to ``limit`` chord pitches in a voice's range, nearest the midpoint first kept.

	The result is ascending.
	"""

	pcs = set(pitch_classes)
	in_range = [p for p in range(voice_range.low, voice_range.high + 1) if p % 12 in pcs]

	if len(in_range) <= limit:
		return in_range

	middle = len(in_range) // 2
	start = max(0, min(middle - (limit - 1) // 2, len(in_range) - limit))

	return in_range[start:start + limit]


def fold_into_range (pitch: int, voice_range: VoiceRange) -> int:

	"""Move a pitch by whole octaves until it lies inside ``voice_range``, where it fits."""

	while pitch < voice_range.low and pitch + 12 <= voice_range.high:
		pitch += 12

	while pitch > voice_range.high and pitch - 12 >= voice_range.low:
		pitch -= 12

	return pitch


def generate_voicings (
	chord: tessitura.chords.Chord,
	melody_pitch: typing.Optional[int] = None,
	max_voicings: int = MAX_VOICINGS,
) -> typing.List[typing.Tuple[int, ...]]:

	"""Return valid voicings of a chord, bass first.

	A voicing is valid when it contains every chord pitch class and each
	voice is strictly above the one below. A melody pitch, when given,
	replaces the soprano's candidates, and the lower voices only consider
	pitches that leave room beneath it.
	"""

	pcs = chord_voice_pitch_classes(chord)
	required = chord.pitch_classes
	ranges = list(VOICE_RANGES)

	if melody_pitch is not None:
		for v, voice_range in enumerate(ranges[:-1]):
			ceiling = melody_pitch - (VOICE_COUNT - 1 - v)
			ranges[v] = VoiceRange(voice_range.low, min(voice_range.high, ceiling))

	per_voice = [voice_candidates(pcs, r) for r in ranges[:-1]]
	per_voice.append([melody_pitch] if melody_pitch is not None else voice_candidates(pcs, ranges[-1]))

	voicings: typing.List[typing.Tuple[int, ...]] = []

	for combination in itertools.product(*per_voice):

		if len(voicings) >= max_voicings:
			break

		if any(a >= b for a, b in zip(combination, combination[1:])):
			continue

		if not required <= {p % 12 for p in combination}:
			continue

		voicings.append(combination)

	return voicings


def initialize_voices (chord: tessitura.chords.Chord) -> VoiceState:

	"""Voice a chord with no previous state: each voice takes its chord tone nearest its range midpoint."""

	pcs = chord_voice_pitch_classes(chord)
	pitches: typing.List[int] = []

	for pc, voice_range in zip(pcs, VOICE_RANGES):
		options = [p for p in range(voice_range.low, voice_range.high + 1) if p % 12 == pc]
		pitches.append(min(options, key=lambda p: (abs(p - voice_range.midpoint), p)))

	pitches.sort()

	# Unisons after sorting are split by moving the upper note up an octave.
	for i in range(1, len(pitches)):
		while pitches[i] <= pitches[i - 1]:
			pitches[i] += 12

	return VoiceState(tuple(pitches))


def solve_voice_leading (
	previous: VoiceState,
	chord: tessitura.chords.Chord,
	melody_pitch: typing.Optional[int] = None,
	max_voicings: int = MAX_VOICINGS,
) -> VoiceLeadingResult:

	"""Find the cheapest voicing of ``chord`` from ``previous``.

	Parameters:
		previous: The voicing currently sounding.
		chord: The chord to move to.
		melody_pitch: Optional pitch the soprano must take.
		max_voicings: Cap on the number of valid voicings scored.

	Returns:
		The best voicing and its cost. If the chord cannot be voiced (for
		example the melody pitch leaves no room below it), the previous
		voicing is returned unchanged with cost ``math.inf``.
	"""

	voicings = generate_voicings(chord, melody_pitch=melody_pitch, max_voicings=max_voicings)

	if not voicings:
		logger.warning(f"No voicing for {chord.name()} with melody {melody_pitch}; holding previous voicing")
		return VoiceLeadingResult(voices=previous, cost=math.inf)

	best_voicing = voicings[0]
	best_cost = math.inf

	for voicing in voicings:
		cost = voice_leading_cost(previous.pitches, voicing)

		if cost < best_cost:
			best_cost = cost
			best_voicing = voicing

	return VoiceLeadingResult(voices=VoiceState(tuple(best_voicing)), cost=best_cost)


class VoiceLeadingState:

	"""Track the previous voicing across chord changes."""

	def __init__ (self, voices: typing.Optional[VoiceState] = None) -> None:

		"""Start from an existing voicing, or from none."""

		self.voices = voices


	def next (
		self,
		chord: tessitura.chords.Chord,
		melody_pitch: typing.Optional[int] = None,
	) -> VoiceLeadingResult:

		"""Voice the next chord and remember the result.

		The first chord is voiced with :func:`initialize_voices` (cost 0)
		unless a melody pitch is pinned, in which case it is solved against
		that initial voicing.
		"""

		if self.voices is None:
			self.voices = initialize_voices(chord)

			if melody_pitch is None:
				return VoiceLeadingResult(voices=self.voices, cost=0.0)

		result = solve_voice_leading(self.voices, chord, melody_pitch=melody_pitch)
		self.voices = result.voices

		return result
