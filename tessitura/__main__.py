import argparse
import logging
import math
import time

import mido

import tessitura.config
import tessitura.engine
import tessitura.midi_utils
import tessitura.notes
import tessitura.pitch_space


# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


STEPS_PER_BAR = 16


def raw_contour (step: int) -> float:

	"""A slow wandering target standing in for a sensor."""

	return 66 + 9 * math.sin(step / 11.0) + 3 * math.sin(step / 3.7)


def main () -> None:

	"""
	Play a synthetic contour through the engine, logging each note and chord.
	"""

	parser = argparse.ArgumentParser(prog="tessitura")
	parser.add_argument("--config", default="tessitura.yaml", help="YAML config file")
	parser.add_argument("--bars", type=int, default=8, help="Number of bars to generate")
	parser.add_argument("--bpm", type=float, default=100.0)
	parser.add_argument("--midi", default=None, help="MIDI output port name; omit to only log")
	args = parser.parse_args()

	logger.info("Tessitura starting...")

	config = tessitura.config.load_config(args.config)
	engine = tessitura.engine.MelodyEngine(config)

	step_seconds = 60.0 / args.bpm / 4
	sink = tessitura.midi_utils.MidiSink(mido.open_output(args.midi)) if args.midi else None

	engine.on("cadence", lambda cycle, chord: logger.info(f"Cadence on {chord.name()} (cycle {cycle})"))
	engine.on("modulation", lambda old, new, scale: logger.info(f"Modulated to {scale.name}"))

	notes = []
	start = time.monotonic()

	def play_change (change: tessitura.notes.ChordChange, at: float) -> None:
		logger.info(f"Chord {change.chord.name()} voiced {list(change.voicing.pitches)}")
		if sink:
			sink.queue(tessitura.midi_utils.chord_change_to_messages(change, at, step_seconds * STEPS_PER_BAR))

	play_change(engine.start(), 0.0)

	try:
		for step in range(args.bars * STEPS_PER_BAR):

			at = step * step_seconds

			if step and step % STEPS_PER_BAR == 0:
				change = engine.advance_bar(melody_pitch=notes[-1].pitch if notes else None)
				if change:
					play_change(change, at)

			if step % 2:
				continue

			note = engine.next_pitch(raw_contour(step), time=at, duration=step_seconds * 2)
			notes.append(note)
			logger.info(f"{at:6.2f}s  {tessitura.pitch_space.midi_to_note_name(note.pitch)}")

			if sink:
				sink.queue(tessitura.midi_utils.note_event_to_messages(note))
				time.sleep(max(0.0, start + at - time.monotonic()))
				sink.flush(time.monotonic() - start)

	except KeyboardInterrupt:
		logger.info("Stopping...")

	finally:
		if sink:
			sink.panic()
			sink.port.close()

	_, score = engine.validate(notes, args.bpm)
	logger.info(f"Melodic score {score.score:.2f}{' (needs correction)' if score.needs_correction else ''}")


if __name__ == "__main__":
	main()
