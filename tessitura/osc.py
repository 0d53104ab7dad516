"""OSC broadcasting of engine state for visualizers.

Attach an :class:`OscBroadcaster` to a :class:`~tessitura.engine.MelodyEngine`
and every note, chord change, cadence and modulation is sent over UDP to a
target host/port (default 127.0.0.1:9001).

Sent Messages
─────────────
- ``/note <pitch> <degree>``: On every melody note (degree -1 if out of scale)
- ``/chord <string>``: On chord change
- ``/cadence <int>``: On a cadence, with the progression cycle count
- ``/modulation <int> <int>``: On a key change, old and new root pitch class
"""

import logging
import typing

import pythonosc.udp_client

import tessitura.chords
import tessitura.notes
import tessitura.pitch_space

if typing.TYPE_CHECKING:
	from tessitura.engine import MelodyEngine


logger = logging.getLogger(__name__)


class OscBroadcaster:

	"""Forwards engine events to an OSC client."""

	def __init__ (
		self,
		engine: "MelodyEngine",
		host: typing.Optional[str] = None,
		port: typing.Optional[int] = None,
		client: typing.Optional[typing.Any] = None,
	) -> None:

		"""
		Parameters:
			engine: The engine to listen to.
			host: Target host; defaults to the engine config's ``osc_host``.
			port: Target port; defaults to the engine config's ``osc_port``.
			client: Anything with ``send_message(address, args)``. A
				``SimpleUDPClient`` is created when omitted.
		"""

		self._host = host or engine.config.osc_host
		self._port = port or engine.config.osc_port
		self._client = client or pythonosc.udp_client.SimpleUDPClient(self._host, self._port)

		engine.on("note", self._on_note)
		engine.on("chord", self._on_chord)
		engine.on("cadence", self._on_cadence)
		engine.on("modulation", self._on_modulation)

		logger.info(f"OSC sending to {self._host}:{self._port}")


	def send (self, address: str, *args: typing.Any) -> None:

		"""Send an OSC message."""

		try:
			self._client.send_message(address, list(args))
		except OSError as e:
			logger.warning(f"OSC send error: {e}")


	# Handlers

	def _on_note (self, event: tessitura.notes.NoteEvent, degree: typing.Optional[int]) -> None:
		self.send("/note", event.pitch, -1 if degree is None else degree)

	def _on_chord (self, change: tessitura.notes.ChordChange) -> None:
		self.send("/chord", change.chord.name())

	def _on_cadence (self, cycle_count: int, chord: tessitura.chords.Chord) -> None:
		self.send("/cadence", cycle_count)

	def _on_modulation (self, old_root: int, new_root: int, scale: tessitura.pitch_space.Scale) -> None:
		self.send("/modulation", old_root, new_root)
