import itertools
import random

import pytest

import conftest
import tessitura.chords
import tessitura.cost
import tessitura.phrase
import tessitura.pitch_space
import tessitura.selector


def _optimizer (
	pitch_space: tessitura.pitch_space.PitchSpace,
	cost_function: tessitura.cost.CostFunction,
	horizon: int = 8,
	end_penalty: float = 5.0,
) -> tessitura.phrase.PhraseOptimizer:

	return tessitura.phrase.PhraseOptimizer(cost_function, pitch_space, horizon=horizon, end_penalty=end_penalty)


def test_horizon_one_matches_deterministic_select (pitch_space: tessitura.pitch_space.PitchSpace, cost_function: tessitura.cost.CostFunction) -> None:

	"""A one-step phrase is exactly the deterministic single-note choice."""

	optimizer = _optimizer(pitch_space, cost_function, horizon=1)
	selector = tessitura.selector.Selector(cost_function, rng=random.Random(0))
	chord = tessitura.chords.Chord(root_pc=9, quality="minor")

	for mode in ("major", "minor", "lydian"):
		scale = pitch_space.build_scale("A", mode)
		candidates = pitch_space.scale_pitches(scale)

		for raw in (49.0, 58.6, 66.2, 81.9):
			for m in (0.0, 0.4, 1.0):
				ctx = conftest.make_context(scale, chord, raw, p_prev=69, p_prev_prev=64, stability=m)
				result = optimizer.optimize([raw], 69, 64, scale, chord, m)
				expected = selector.deterministic_select(candidates, ctx)

				assert result.pitches == (expected,)
				assert result.total_cost == cost_function(expected, ctx)


def test_extra_targets_beyond_horizon_ignored (pitch_space: tessitura.pitch_space.PitchSpace, cost_function: tessitura.cost.CostFunction, c_major: tessitura.pitch_space.Scale, c_major_chord: tessitura.chords.Chord) -> None:

	"""Only the first ``horizon`` targets are optimized."""

	optimizer = _optimizer(pitch_space, cost_function, horizon=3)
	result = optimizer.optimize([60, 62, 64, 65, 67], 60, 60, c_major, c_major_chord, 0.5)

	assert len(result.pitches) == 3


def test_empty_inputs_give_empty_phrase (pitch_space: tessitura.pitch_space.PitchSpace, cost_function: tessitura.cost.CostFunction, c_major: tessitura.pitch_space.Scale, c_major_chord: tessitura.chords.Chord) -> None:

	"""No targets, a zero horizon, or no candidates all give an empty phrase."""

	optimizer = _optimizer(pitch_space, cost_function)

	assert optimizer.optimize([], 60, 60, c_major, c_major_chord, 0.5) == tessitura.phrase.PhraseResult((), 0.0)

	zero = _optimizer(pitch_space, cost_function, horizon=0)
	assert zero.optimize([60, 62], 60, 60, c_major, c_major_chord, 0.5).pitches == ()

	narrow = tessitura.pitch_space.PitchSpace(low=61, high=61)
	empty = tessitura.phrase.PhraseOptimizer(tessitura.cost.CostFunction(narrow), narrow)
	assert empty.optimize([61], 60, 60, c_major, c_major_chord, 0.5).pitches == ()


def test_phrase_pitches_are_in_scale_and_range (pitch_space: tessitura.pitch_space.PitchSpace, cost_function: tessitura.cost.CostFunction) -> None:

	"""Every optimized pitch is an in-range scale tone."""

	scale = pitch_space.build_scale("E", "phrygian")
	chord = tessitura.chords.Chord(root_pc=4, quality="minor")
	optimizer = _optimizer(pitch_space, cost_function)

	result = optimizer.optimize([40, 55.5, 63, 90, 71, 70, 68, 52], 64, 64, scale, chord, 0.6)

	assert len(result.pitches) == 8
	assert all(scale.contains(p) and pitch_space.low <= p <= pitch_space.high for p in result.pitches)


def test_phrase_ends_on_stable_pitch (pitch_space: tessitura.pitch_space.PitchSpace, cost_function: tessitura.cost.CostFunction, c_major: tessitura.pitch_space.Scale, c_major_chord: tessitura.chords.Chord) -> None:

	"""A large end penalty pulls the last note onto a chord tone or the tonic."""

	optimizer = _optimizer(pitch_space, cost_function, horizon=4, end_penalty=100.0)

	# The last raw target is D, which is neither a chord tone nor the tonic.
	result = optimizer.optimize([64, 65, 64, 62], 60, 60, c_major, c_major_chord, 0.3)

	assert optimizer.is_stable_ending(result.pitches[-1], c_major, c_major_chord)


def test_dp_matches_brute_force (c_major: tessitura.pitch_space.Scale, c_major_chord: tessitura.chords.Chord) -> None:

	"""On a small range, the DP total equals the best exhaustive phrase cost.

	The repeat term looks two notes back, which a first-order DP only
	approximates, so it is switched off here.
	"""

	space = tessitura.pitch_space.PitchSpace(low=60, high=67)
	weights = tessitura.cost.CostWeights(repeat=tessitura.cost.Ramp(0.0, 0.0))
	cost_function = tessitura.cost.CostFunction(space, weights)
	optimizer = tessitura.phrase.PhraseOptimizer(cost_function, space, horizon=3, end_penalty=5.0)
	candidates = space.scale_pitches(c_major)
	targets = [61.0, 66.0, 63.0]

	def phrase_cost (phrase: tuple) -> float:
		total = 0.0
		prev, prev_prev = 64, 62
		for raw, p in zip(targets, phrase):
			total += cost_function(p, conftest.make_context(c_major, c_major_chord, raw, prev, prev_prev, 0.7))
			prev, prev_prev = p, prev
		if not optimizer.is_stable_ending(phrase[-1], c_major, c_major_chord):
			total += 5.0
		return total

	best = min(phrase_cost(phrase) for phrase in itertools.product(candidates, repeat=3))
	result = optimizer.optimize(targets, 64, 62, c_major, c_major_chord, 0.7)

	assert result.total_cost == pytest.approx(best)
	assert phrase_cost(result.pitches) == pytest.approx(result.total_cost)


def test_negative_settings_rejected (pitch_space: tessitura.pitch_space.PitchSpace, cost_function: tessitura.cost.CostFunction) -> None:

	"""Negative horizon or end penalty is a configuration error."""

	with pytest.raises(ValueError):
		_optimizer(pitch_space, cost_function, horizon=-1)

	with pytest.raises(ValueError):
		_optimizer(pitch_space, cost_function, end_penalty=-1.0)
