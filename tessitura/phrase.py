"""Finite-horizon phrase optimization.

Instead of choosing each note greedily, :class:`PhraseOptimizer` looks at a
short run of upcoming raw targets and picks the whole phrase at once with a
Viterbi-style dynamic program over the in-scale candidates:

	dp[0][i] = J(c_i | raw[0], p_prev, p_prev_prev)
	dp[t][i] = min_j dp[t-1][j] + J(c_i | raw[t], c_j, pred(j))

where ``pred(j)`` is the pitch the best path into ``c_j`` came from. The
final step adds an end penalty to candidates that are neither the tonic nor
a chord tone, so phrases tend to land somewhere stable.

Cost is ``O(H * N^2)`` evaluations of J, so keep the horizon and the range
small enough for the host's frame time.
"""

import dataclasses
import logging
import math
import typing

import tessitura.chords
import tessitura.cost
import tessitura.pitch_space


logger = logging.getLogger(__name__)


DEFAULT_HORIZON: int = 8
DEFAULT_END_PENALTY: float = 5.0


@dataclasses.dataclass(frozen=True)
class PhraseResult:

	"""An optimized phrase and its total cost (end penalty included)."""

	pitches: typing.Tuple[int, ...]
	total_cost: float


class PhraseOptimizer:

	"""Chooses a whole phrase of pitches for a run of raw targets."""

	def __init__ (
		self,
		cost_function: tessitura.cost.CostFunction,
		pitch_space: tessitura.pitch_space.PitchSpace,
		horizon: int = DEFAULT_HORIZON,
		end_penalty: float = DEFAULT_END_PENALTY,
		end_penalty_weight: float = 1.0,
	) -> None:

		"""
		Parameters:
			cost_function: The J(p) evaluator.
			pitch_space: Supplies the candidate pitches and the working range.
			horizon: Maximum number of steps optimized at once.
			end_penalty: Added at the last step to pitches that are neither
				the tonic nor a chord tone.
			end_penalty_weight: Multiplier for ``end_penalty``.
		"""

		if horizon < 0:
			raise ValueError("Horizon must not be negative")

		if end_penalty < 0 or end_penalty_weight < 0:
			raise ValueError("End penalty must not be negative")

		self.cost_function = cost_function
		self.pitch_space = pitch_space
		self.horizon = horizon
		self.end_penalty = end_penalty
		self.end_penalty_weight = end_penalty_weight


	def is_stable_ending (
		self,
		pitch: int,
		scale: tessitura.pitch_space.Scale,
		chord: tessitura.chords.Chord,
	) -> bool:

		"""True for a chord tone or the tonic."""

		return chord.contains(pitch) or pitch % 12 == scale.root


	def optimize (
		self,
		raw_targets: typing.Sequence[float],
		p_prev: int,
		p_prev_prev: int,
		scale: tessitura.pitch_space.Scale,
		chord: tessitura.chords.Chord,
		stability: float,
	) -> PhraseResult:

		"""Return the minimum-cost phrase for the first ``horizon`` raw targets.

		An empty target list, a zero horizon, or a scale with no pitches in
		range gives an empty phrase with cost 0. A single step is the same
		choice :meth:`~tessitura.selector.Selector.deterministic_select`
		makes, since there is no phrase ending to shape.
		"""

		steps = min(self.horizon, len(raw_targets))
		candidates = self.pitch_space.scale_pitches(scale)
		n = len(candidates)

		if steps == 0 or n == 0:
			return PhraseResult(pitches=(), total_cost=0.0)

		def context (step: int, prev: int, prev_prev: int) -> tessitura.cost.CostContext:

			return tessitura.cost.CostContext(
				p_raw = raw_targets[step],
				p_prev = prev,
				p_prev_prev = prev_prev,
				scale = scale,
				chord = chord,
				stability = stability,
			)

		first = context(0, p_prev, p_prev_prev)
		dp: typing.List[typing.List[float]] = [[self.cost_function(p, first) for p in candidates]]
		back: typing.List[typing.List[int]] = [[0] * n]

		for step in range(1, steps):

			row: typing.List[float] = []
			pointers: typing.List[int] = []

			for p in candidates:
				best_cost = math.inf
				best_j = 0

				for j, prev in enumerate(candidates):
					# The best path into candidate j at step 1 started from the caller's p_prev.
					prev_prev = candidates[back[step - 1][j]] if step >= 2 else p_prev
					total = dp[step - 1][j] + self.cost_function(p, context(step, prev, prev_prev))

					if total < best_cost:
						best_cost = total
						best_j = j

				row.append(best_cost)
				pointers.append(best_j)

			dp.append(row)
			back.append(pointers)

		final = list(dp[-1])

		if steps > 1:
			penalty = self.end_penalty * self.end_penalty_weight

			for i, p in enumerate(candidates):
				if not self.is_stable_ending(p, scale, chord):
					final[i] += penalty

		best_index = 0
		best_total = math.inf

		for i, total in enumerate(final):
			if total < best_total:
				best_total = total
				best_index = i

		indices = [best_index]

		for step in range(steps - 1, 0, -1):
			indices.append(back[step][indices[-1]])

		indices.reverse()
		pitches = tuple(candidates[i] for i in indices)

		logger.debug(f"Optimized {steps}-step phrase over {n} candidates: {pitches} (cost {best_total:.2f})")

		return PhraseResult(pitches=pitches, total_cost=best_total)
