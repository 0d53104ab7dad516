"""Hand-off to a synthesizer as MIDI messages.

The engine only decides pitches; something else makes sound. These helpers
turn :class:`~tessitura.notes.NoteEvent` and
:class:`~tessitura.notes.ChordChange` objects into ``mido`` messages and
send them to any output port, e.g. one from ``mido.open_output()``.

Message lists are returned as ``(time_seconds, message)`` pairs sorted by
time, so a host scheduler can release each one when it is due.
"""

import logging
import typing

import mido

import tessitura.notes


logger = logging.getLogger(__name__)


TimedMessage = typing.Tuple[float, mido.Message]

DEFAULT_MELODY_CHANNEL: int = 0
DEFAULT_CHORD_CHANNEL: int = 1
DEFAULT_BASS_CHANNEL: int = 2
DEFAULT_CHORD_VELOCITY: int = 70
DEFAULT_BASS_VELOCITY: int = 90


def note_event_to_messages (
	event: tessitura.notes.NoteEvent,
	channel: int = DEFAULT_MELODY_CHANNEL,
) -> typing.List[TimedMessage]:

	"""Return the note_on/note_off pair for one melody note."""

	velocity = max(1, min(127, int(event.velocity)))

	return [
		(event.time, mido.Message("note_on", channel=channel, note=event.pitch, velocity=velocity)),
		(event.time + event.duration, mido.Message("note_off", channel=channel, note=event.pitch, velocity=0)),
	]


def chord_change_to_messages (
	change: tessitura.notes.ChordChange,
	time: float,
	duration: float,
	chord_channel: int = DEFAULT_CHORD_CHANNEL,
	bass_channel: int = DEFAULT_BASS_CHANNEL,
	chord_velocity: int = DEFAULT_CHORD_VELOCITY,
	bass_velocity: int = DEFAULT_BASS_VELOCITY,
	use_voicing: bool = True,
) -> typing.List[TimedMessage]:

	"""Return messages sounding a chord change for ``duration`` seconds.

	Plays the four-voice voicing (or the plain chord tones when
	``use_voicing`` is False) on the chord channel and the root on the bass
	channel.
	"""

	pitches = change.voicing.pitches if use_voicing else change.chord_tones
	messages: typing.List[TimedMessage] = []

	for pitch in pitches:
		messages.append((time, mido.Message("note_on", channel=chord_channel, note=pitch, velocity=chord_velocity)))
		messages.append((time + duration, mido.Message("note_off", channel=chord_channel, note=pitch, velocity=0)))

	messages.append((time, mido.Message("note_on", channel=bass_channel, note=change.bass_pitch, velocity=bass_velocity)))
	messages.append((time + duration, mido.Message("note_off", channel=bass_channel, note=change.bass_pitch, velocity=0)))

	messages.sort(key=lambda pair: (pair[0], pair[1].type == "note_on"))

	return messages


class MidiSink:

	"""Sends timed messages to an output port as their time comes due.

	The host calls :meth:`flush` with its own clock; the sink never sleeps or
	schedules anything itself.

	Example:
		```python
		sink = MidiSink(mido.open_output("My Synth"))
		sink.queue(note_event_to_messages(note))
		sink.flush(now)
		```
	"""

	def __init__ (self, port: typing.Any) -> None:

		"""
		Parameters:
			port: Anything with ``send(message)``, usually a ``mido`` output port.
		"""

		self.port = port
		self._pending: typing.List[TimedMessage] = []


	def queue (self, messages: typing.Iterable[TimedMessage]) -> None:

		"""Add messages to the pending list."""

		self._pending.extend(messages)
		self._pending.sort(key=lambda pair: pair[0])


	def flush (self, now: float) -> int:

		"""Send every message due at or before ``now``. Returns how many were sent."""

		due = [pair for pair in self._pending if pair[0] <= now]
		self._pending = [pair for pair in self._pending if pair[0] > now]

		for _, message in due:
			try:
				self.port.send(message)
			except OSError:
				logger.exception("MIDI send failed (device may be disconnected)")
				raise

		return len(due)


	def pending (self) -> int:

		"""Number of messages not yet sent."""

		return len(self._pending)


	def panic (self) -> None:

		"""Drop pending messages and send note_off for any note still pending release."""

		releases = [message for _, message in self._pending if message.type == "note_off"]
		self._pending = []

		for message in releases:
			self.port.send(message)

		logger.info("Panic: released pending notes.")
