"""
Tessitura — Sensor-Driven Melody with Phrase Lookahead

A random walk stands in for a sensor (a distance sensor, a pitch tracker,
a hand position). The engine turns the wandering value into a melody in
D dorian over an i-VI-III-VII progression, voicing a four-part
accompaniment on every chord change.

How it works
────────────
Stability rises slowly from 0 to 1 over the piece. Early on the melody
follows the walk closely through the scale; by the end it settles onto
chord tones and small steps.

Targets are buffered four at a time and chosen as a phrase with
``queue_raw()``, so each group of four notes tends to end on a chord tone
or the tonic. The accompaniment soprano is pinned to the melody note
sounding when the chord changes.

Every note, chord, cadence and modulation is also broadcast over OSC for
a visualizer listening on 127.0.0.1:9001.

How to run
──────────
1. Set MIDI_DEVICE below to your MIDI output name (or None to only log).
2. Run: python examples/sensor_melody.py
3. Press Ctrl+C to stop.

Tweakable parameters
────────────────────
- HORIZON: Longer phrases plan further ahead, at more CPU per phrase.
- WALK_STEP: Larger steps make a jumpier sensor.
- modulate: Set False to stay in D dorian.
"""

import logging
import random
import time
import typing

import mido

import tessitura
import tessitura.midi_utils
import tessitura.notes
import tessitura.pitch_space


logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


# ─── Setup ───────────────────────────────────────────────────────────

MIDI_DEVICE = None
BPM = 96
BARS = 32
HORIZON = 4
WALK_STEP = 2.5

STEPS_PER_BAR = 16
STEP_SECONDS = 60.0 / BPM / 4


def main () -> None:

	config = tessitura.EngineConfig(
		root = "D",
		mode = "dorian",
		progression = "i-VI-III-VII",
		bars_per_chord = 1,
		modulate = True,
		horizon = HORIZON,
		stability = 0.0,
		seed = 2024,
	)

	engine = tessitura.MelodyEngine(config)
	tessitura.OscBroadcaster(engine)

	engine.on("cadence", lambda cycle, chord: logger.info(f"Cadence on {chord.name()}"))
	engine.on("modulation", lambda old, new, scale: logger.info(f"Now in {scale.name}"))

	sink = tessitura.midi_utils.MidiSink(mido.open_output(MIDI_DEVICE)) if MIDI_DEVICE else None
	walk_rng = random.Random(7)
	sensor = 62.0
	sounding: typing.Optional[int] = None
	start = time.monotonic()

	def on_note (note: tessitura.notes.NoteEvent, degree: typing.Optional[int]) -> None:
		nonlocal sounding
		sounding = note.pitch
		logger.info(f"{tessitura.pitch_space.midi_to_note_name(note.pitch)}")
		if sink:
			sink.queue(tessitura.midi_utils.note_event_to_messages(note))

	engine.on("note", on_note)

	opening = engine.start()
	if sink:
		sink.queue(tessitura.midi_utils.chord_change_to_messages(opening, 0.0, STEPS_PER_BAR * STEP_SECONDS))

	try:
		for step in range(BARS * STEPS_PER_BAR):

			at = step * STEP_SECONDS

			if step % STEPS_PER_BAR == 0 and step:
				change = engine.advance_bar(melody_pitch=sounding)
				if change and sink:
					sink.queue(tessitura.midi_utils.chord_change_to_messages(change, at, STEPS_PER_BAR * STEP_SECONDS))

			# Eighth notes: read the sensor every other step.
			if step % 2 == 0:
				sensor = max(40.0, min(92.0, sensor + walk_rng.uniform(-WALK_STEP, WALK_STEP)))
				engine.set_stability(min(1.0, step / (BARS * STEPS_PER_BAR * 0.8)))

				# Each target plays one phrase later, once its phrase is chosen.
				engine.queue_raw(
					sensor,
					time = at + HORIZON * 2 * STEP_SECONDS,
					duration = 2 * STEP_SECONDS,
					velocity = 90,
				)

			if sink:
				time.sleep(max(0.0, start + at - time.monotonic()))
				sink.flush(time.monotonic() - start)

	except KeyboardInterrupt:
		logger.info("Stopping...")

	finally:
		if sink:
			sink.panic()
			sink.port.close()


if __name__ == "__main__":
	main()
