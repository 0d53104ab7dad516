"""Events the engine hands to synthesis and visualization."""

import dataclasses
import typing

import tessitura.chords
import tessitura.voice_leading


@dataclasses.dataclass(frozen=True)
class NoteEvent:

	"""
	One melody note. ``time`` and ``duration`` are in seconds.
	"""

	time: float
	duration: float
	pitch: int
	velocity: int


	def with_pitch (self, pitch: int) -> "NoteEvent":

		"""Return a copy with a different pitch."""

		return dataclasses.replace(self, pitch=pitch)


@dataclasses.dataclass(frozen=True)
class ChordChange:

	"""Everything an accompaniment needs when the chord changes."""

	chord: tessitura.chords.Chord
	chord_tones: typing.Tuple[int, ...]
	bass_pitch: int
	voicing: tessitura.voice_leading.VoiceState
	voicing_cost: float
