"""The melody and harmony engine as one object.

:class:`MelodyEngine` owns the pitch history, the harmony state machine and
the accompaniment voicing, and answers the two questions a host loop asks:

- :meth:`MelodyEngine.next_pitch`: "the clock says play a note now, the
  input says roughly *this* pitch; which pitch?"
- :meth:`MelodyEngine.advance_bar`: "a bar went by; did the chord change,
  and what should the accompaniment play?"

Listeners can subscribe to ``"note"`` ``(event, degree)``, ``"chord"``
``(change)``, and the harmony engine's ``"cadence"`` and ``"modulation"``
events through :meth:`MelodyEngine.on`.

Example:
	```python
	engine = MelodyEngine(EngineConfig(root="A", mode="minor", seed=1))
	opening = engine.start()

	for step, raw in enumerate(raw_pitches):
		if step % 16 == 0 and step:
			engine.advance_bar()
		note = engine.next_pitch(raw, velocity=96, time=step * 0.125)
	```
"""

import logging
import random
import typing

import tessitura.chords
import tessitura.config
import tessitura.cost
import tessitura.event_emitter
import tessitura.harmony_engine
import tessitura.intervals
import tessitura.melodic_score
import tessitura.notes
import tessitura.phrase
import tessitura.pitch_space
import tessitura.selector
import tessitura.voice_leading


logger = logging.getLogger(__name__)


# Octaves synthesis plays chord tones and the bass root in (C4 and C2).
CHORD_TONE_BASE: int = 60
BASS_BASE: int = 36

HARMONY_EVENTS: typing.Tuple[str, ...] = ("cadence", "modulation")


class MelodyEngine:

	"""Turns raw pitch targets into melody notes over a running chord progression."""

	def __init__ (
		self,
		config: typing.Optional[tessitura.config.EngineConfig] = None,
		tables: tessitura.intervals.TheoryTables = tessitura.intervals.DEFAULT_TABLES,
		rng: typing.Optional[random.Random] = None,
	) -> None:

		"""
		Parameters:
			config: Settings; defaults to :class:`~tessitura.config.EngineConfig`.
			tables: Theory tables for scales and chord qualities.
			rng: Random source shared by sampling and modulation. Defaults to
				``random.Random(config.seed)``.
		"""

		self.config = config or tessitura.config.EngineConfig()
		self.rng = rng or random.Random(self.config.seed)

		self.pitch_space = tessitura.pitch_space.PitchSpace(tables, low=self.config.low, high=self.config.high)
		self.scale = self.pitch_space.build_scale(self.config.root, self.config.mode)

		self.cost_function = tessitura.cost.CostFunction(self.pitch_space, self.config.weights)
		self.selector = tessitura.selector.Selector(self.cost_function, rng=self.rng)
		self.phrase_optimizer = tessitura.phrase.PhraseOptimizer(
			self.cost_function,
			self.pitch_space,
			horizon = self.config.horizon,
			end_penalty = self.config.end_penalty,
		)

		self.harmony = tessitura.harmony_engine.HarmonyEngine(
			self.pitch_space,
			self.scale,
			progression = self.config.progression,
			bars_per_chord = self.config.bars_per_chord,
			modulate = self.config.modulate,
			rng = self.rng,
		)
		self.harmony.on("modulation", self._on_modulation)

		self.voice_state = tessitura.voice_leading.VoiceLeadingState()
		self.events = tessitura.event_emitter.EventEmitter()

		self.stability = self.config.stability
		self.p_prev = self.pitch_space.clamp((self.config.low + self.config.high) / 2)
		self.p_prev_prev = self.p_prev
		self._raw_buffer: typing.List[typing.Tuple[float, tessitura.notes.NoteEvent]] = []


	def on (self, event_name: str, callback: tessitura.event_emitter.CallbackType) -> None:

		"""Subscribe to ``"note"``, ``"chord"``, ``"cadence"`` or ``"modulation"``."""

		if event_name in HARMONY_EVENTS:
			self.harmony.on(event_name, callback)

		else:
			self.events.on(event_name, callback)


	@property
	def current_chord (self) -> tessitura.chords.Chord:

		"""The chord currently in force."""

		return self.harmony.get_current_chord()


	def set_stability (self, stability: float) -> None:

		"""Set the default melodic stability (0–1)."""

		if stability < 0 or stability > 1:
			raise ValueError("Stability must be between 0 and 1")

		self.stability = stability


	def set_scale (self, root_name: str, mode_name: str) -> tessitura.pitch_space.Scale:

		"""Change key. Raises ``UnknownRootError``/``UnknownModeError`` for bad names."""

		self.scale = self.pitch_space.build_scale(root_name, mode_name)
		self.harmony.set_scale(self.scale)

		logger.info(f"Scale set to {self.scale.name}")

		return self.scale


	def set_progression (self, progression: typing.Union[str, typing.Sequence[int]]) -> None:

		"""Switch chord progression and restart it."""

		self.harmony.set_progression(progression)


	def context (self, p_raw: float, stability: typing.Optional[float] = None) -> tessitura.cost.CostContext:

		"""Build the cost context for a raw target from the current state."""

		return tessitura.cost.CostContext(
			p_raw = p_raw,
			p_prev = self.p_prev,
			p_prev_prev = self.p_prev_prev,
			scale = self.scale,
			chord = self.current_chord,
			stability = self.stability if stability is None else stability,
		)


	def _remember (self, pitch: int) -> None:

		self.p_prev_prev = self.p_prev
		self.p_prev = pitch


	def next_pitch (
		self,
		p_raw: float,
		stability: typing.Optional[float] = None,
		velocity: int = 100,
		duration: float = 0.125,
		time: float = 0.0,
		deterministic: typing.Optional[bool] = None,
	) -> tessitura.notes.NoteEvent:

		"""Choose the next melody pitch for a raw target.

		Parameters:
			p_raw: Desired pitch from the input source; clamped to the range.
			stability: Overrides the engine's stability for this note.
			velocity: MIDI velocity passed through to the event.
			duration: Note length in seconds.
			time: Note onset in seconds.
			deterministic: Force or forbid deterministic selection. By default
				it is used once stability reaches ``deterministic_threshold``.
		"""

		ctx = self.context(self.pitch_space.clamp(p_raw), stability)

		if deterministic is None:
			deterministic = ctx.stability >= self.config.deterministic_threshold

		candidates = self.pitch_space.scale_pitches(self.scale)
		selection = self.selector.select(candidates, ctx, deterministic=deterministic)

		self._remember(selection.pitch)

		event = tessitura.notes.NoteEvent(time=time, duration=duration, pitch=selection.pitch, velocity=velocity)
		self.events.emit("note", event, self.pitch_space.scale_degree(selection.pitch, self.scale))

		return event


	def plan_phrase (
		self,
		raw_targets: typing.Sequence[float],
		stability: typing.Optional[float] = None,
		start_time: float = 0.0,
		step: float = 0.125,
		velocity: int = 100,
	) -> tessitura.phrase.PhraseResult:

		"""Optimize a phrase for a run of raw targets and advance the history past it.

		Each chosen pitch is emitted as a ``"note"`` event, the i-th starting
		at ``start_time + i * step`` and lasting ``step`` seconds.
		"""

		slots = [
			tessitura.notes.NoteEvent(time=start_time + i * step, duration=step, pitch=0, velocity=velocity)
			for i in range(len(raw_targets))
		]

		return self._optimize_phrase(list(raw_targets), slots, stability)


	def _optimize_phrase (
		self,
		raw_targets: typing.List[float],
		slots: typing.List[tessitura.notes.NoteEvent],
		stability: typing.Optional[float],
	) -> tessitura.phrase.PhraseResult:

		ctx = self.context(0.0, stability)
		targets = [self.pitch_space.clamp(p) for p in raw_targets]

		result = self.phrase_optimizer.optimize(
			targets,
			self.p_prev,
			self.p_prev_prev,
			self.scale,
			ctx.chord,
			ctx.stability,
		)

		for pitch, slot in zip(result.pitches, slots):
			self._remember(pitch)
			self.events.emit("note", slot.with_pitch(pitch), self.pitch_space.scale_degree(pitch, self.scale))

		return result


	def queue_raw (
		self,
		p_raw: float,
		time: float = 0.0,
		duration: float = 0.125,
		velocity: int = 100,
	) -> typing.Optional[tessitura.phrase.PhraseResult]:

		"""Buffer a raw target; once a full horizon is buffered, optimize and return the phrase.

		``time``, ``duration`` and ``velocity`` describe the note this target
		becomes. Notes are emitted as ``"note"`` events when the phrase is
		optimized, so ``time`` is usually a slot in the future.
		"""

		self._raw_buffer.append((p_raw, tessitura.notes.NoteEvent(time=time, duration=duration, pitch=0, velocity=velocity)))

		if len(self._raw_buffer) < max(1, self.phrase_optimizer.horizon):
			return None

		return self.flush_phrase()


	def flush_phrase (self) -> tessitura.phrase.PhraseResult:

		"""Optimize whatever is buffered (possibly nothing) and clear the buffer."""

		buffered, self._raw_buffer = self._raw_buffer, []

		return self._optimize_phrase([p for p, _ in buffered], [slot for _, slot in buffered], None)


	def start (self, melody_pitch: typing.Optional[int] = None) -> tessitura.notes.ChordChange:

		"""Voice and announce the chord in force now, usually the opening chord.

		:meth:`advance_bar` only reports chord *changes*, so hosts call this
		once before the first bar to sound bar 1. Emits ``"chord"``.
		"""

		return self._voice_current_chord(melody_pitch)


	def advance_bar (self, melody_pitch: typing.Optional[int] = None) -> typing.Optional[tessitura.notes.ChordChange]:

		"""Count one bar. On a chord change, voice the new chord and return it.

		Parameters:
			melody_pitch: Optional pitch to pin the accompaniment's soprano
				to. It is moved by octaves into the soprano range first.
		"""

		if not self.harmony.advance_bar():
			return None

		return self._voice_current_chord(melody_pitch)


	def _voice_current_chord (self, melody_pitch: typing.Optional[int]) -> tessitura.notes.ChordChange:

		chord = self.current_chord

		if melody_pitch is not None:
			melody_pitch = tessitura.voice_leading.fold_into_range(melody_pitch, tessitura.voice_leading.VOICE_RANGES[-1])

		result = self.voice_state.next(chord, melody_pitch=melody_pitch)

		change = tessitura.notes.ChordChange(
			chord = chord,
			chord_tones = tuple(sorted(CHORD_TONE_BASE + pc for pc in chord.pitch_classes)),
			bass_pitch = chord.bass_note(BASS_BASE),
			voicing = result.voices,
			voicing_cost = result.cost,
		)

		self.events.emit("chord", change)

		return change


	def _on_modulation (self, old_root: int, new_root: int, scale: tessitura.pitch_space.Scale) -> None:

		self.scale = scale


	def validate (
		self,
		notes: typing.Sequence[tessitura.notes.NoteEvent],
		bpm: float,
	) -> typing.Tuple[typing.List[tessitura.notes.NoteEvent], tessitura.melodic_score.MelodicScore]:

		"""Score a finished melody against the current key and chord, correcting it if needed."""

		return tessitura.melodic_score.validate_melody(
			notes,
			self.scale,
			self.current_chord,
			bpm,
			threshold = self.config.score_threshold,
			pitch_space = self.pitch_space,
		)
