"""
Tessitura - an adaptive melody and harmony engine for Python.

Tessitura takes a stream of approximate pitch targets (from a sensor, a
gesture tracker, a pitch detector, a random walk) and turns each one into
a musically coherent note. It does not make sound and it does not keep
time: the host calls it when a note is due and when a bar has passed, and
hands the results to whatever synthesizer or visualizer it likes.

What it does:

- **Cost-based note choice.** Every in-range scale pitch is scored by a
  six-term cost (closeness to the target, step size, leaps, tonal center,
  chord tones, repetition) whose weights ramp with a single *stability*
  control. Low stability samples freely through a softmax; high stability
  picks the cheapest note.
- **Phrase lookahead.** ``PhraseOptimizer`` chooses a whole run of notes
  at once with dynamic programming, preferring phrases that resolve on a
  chord tone or the tonic.
- **Running harmony.** ``HarmonyEngine`` steps through a Roman-numeral
  progression on a bar clock, reports cadences, and can modulate up a
  fourth or fifth every few cycles.
- **Four-voice accompaniment.** ``VoiceLeadingState`` voices each new
  chord for bass, tenor, alto and soprano with minimal motion, optionally
  pinning the soprano to the melody.
- **Melodic scoring.** ``validate_melody()`` scores a finished line for
  scale fit, strong-beat chord tones, leap size and dissonance, and
  corrects it when it falls short.

Integration:

- **MIDI.** ``tessitura.midi_utils`` converts notes and chord changes to
  ``mido`` messages and releases them to any output port.
- **OSC.** ``OscBroadcaster`` sends ``/note``, ``/chord``, ``/cadence``
  and ``/modulation`` to a visualizer.
- **YAML config.** ``load_config()`` reads every setting, including the
  cost weight ramps, from a file.

Minimal example:

    ```python
    import tessitura

    engine = tessitura.MelodyEngine(tessitura.EngineConfig(root="D", mode="dorian", seed=7))

    for step, raw in enumerate([62.3, 64.8, 67.1, 65.2, 63.9]):
        note = engine.next_pitch(raw, stability=0.8, time=step * 0.125)
        print(note.pitch)

    change = engine.advance_bar()
    ```

Package-level exports: ``MelodyEngine``, ``EngineConfig``, ``load_config``,
``PitchSpace``, ``Scale``, ``Chord``, ``CostWeights``, ``Ramp``,
``HarmonyEngine``, ``PhraseOptimizer``, ``VoiceLeadingState``,
``OscBroadcaster``, ``validate_melody``.
"""

import tessitura.chords
import tessitura.config
import tessitura.cost
import tessitura.engine
import tessitura.harmony_engine
import tessitura.melodic_score
import tessitura.osc
import tessitura.phrase
import tessitura.pitch_space
import tessitura.voice_leading


MelodyEngine = tessitura.engine.MelodyEngine
EngineConfig = tessitura.config.EngineConfig
load_config = tessitura.config.load_config
PitchSpace = tessitura.pitch_space.PitchSpace
Scale = tessitura.pitch_space.Scale
Chord = tessitura.chords.Chord
CostWeights = tessitura.cost.CostWeights
Ramp = tessitura.cost.Ramp
HarmonyEngine = tessitura.harmony_engine.HarmonyEngine
PhraseOptimizer = tessitura.phrase.PhraseOptimizer
VoiceLeadingState = tessitura.voice_leading.VoiceLeadingState
OscBroadcaster = tessitura.osc.OscBroadcaster
validate_melody = tessitura.melodic_score.validate_melody
