"""Candidate pitch selection from cost scores.

Two modes:

- **Softmax**: every candidate gets probability
  ``exp(-(J(p) - J_min) / τ(m)) / Σ``, then one pitch is drawn. High
  temperature (low stability) spreads probability across neighbours; low
  temperature concentrates it on the cheapest pitch.
- **Deterministic**: the cheapest pitch, ties going to the lowest. Used for
  zero-variance output such as offline rendering or stability close to 1.

Randomness comes from the ``random.Random`` passed in, so a seeded instance
replays the same choices.
"""

import dataclasses
import math
import random
import typing

import tessitura.cost


@dataclasses.dataclass(frozen=True)
class Selection:

	"""The chosen pitch, its cost, and the distribution it was drawn from."""

	pitch: int
	cost: float
	probabilities: typing.Dict[int, float]


class Selector:

	"""Chooses one pitch from a candidate list using J(p)."""

	def __init__ (
		self,
		cost_function: tessitura.cost.CostFunction,
		rng: typing.Optional[random.Random] = None,
	) -> None:

		"""
		Parameters:
			cost_function: The J(p) evaluator.
			rng: Optional seeded ``random.Random`` for reproducible sampling.
		"""

		self.cost_function = cost_function
		self.rng = rng or random.Random()


	def softmax_select (
		self,
		candidates: typing.Sequence[int],
		ctx: tessitura.cost.CostContext,
		temperature: typing.Optional[float] = None,
	) -> typing.Dict[int, float]:

		"""Return a probability for every candidate, in candidate order.

		Parameters:
			candidates: Pitches to score.
			ctx: Cost context for this decision.
			temperature: Overrides τ(m) when given. Must be positive.
		"""

		if not candidates:
			return {}

		tau = self.cost_function.temperature(ctx.stability) if temperature is None else temperature

		if tau <= 0:
			raise ValueError("Temperature must be positive")

		costs = [self.cost_function(p, ctx) for p in candidates]

		# Shift by the minimum so the best candidate's exponent is exactly zero.
		min_cost = min(costs)
		exps = [math.exp(-(c - min_cost) / tau) for c in costs]
		total = sum(exps)

		return {p: e / total for p, e in zip(candidates, exps)}


	def sample (self, distribution: typing.Mapping[int, float]) -> int:

		"""Draw one pitch from a distribution using a single uniform draw.

		If rounding leaves the cumulative sum short of the draw, the last
		candidate is returned.
		"""

		if not distribution:
			raise ValueError("Distribution cannot be empty")

		roll = self.rng.random()
		cumulative = 0.0

		for pitch, probability in distribution.items():
			cumulative += probability
			if roll <= cumulative:
				return pitch

		return next(reversed(list(distribution)))


	def deterministic_select (
		self,
		candidates: typing.Sequence[int],
		ctx: tessitura.cost.CostContext,
	) -> int:

		"""Return the lowest-cost candidate; equal costs go to the lowest pitch."""

		if not candidates:
			raise ValueError("Candidates cannot be empty")

		best_pitch = None
		best_cost = math.inf

		for p in sorted(candidates):
			c = self.cost_function(p, ctx)

			if c < best_cost:
				best_cost = c
				best_pitch = p

		assert best_pitch is not None
		return best_pitch


	def select (
		self,
		candidates: typing.Sequence[int],
		ctx: tessitura.cost.CostContext,
		deterministic: bool = False,
	) -> Selection:

		"""Pick a pitch and report its cost.

		An empty candidate list returns the raw target (rounded) with cost 0.
		"""

		if not candidates:
			return Selection(pitch=int(round(ctx.p_raw)), cost=0.0, probabilities={})

		if deterministic:
			pitch = self.deterministic_select(candidates, ctx)
			probabilities = {pitch: 1.0}

		else:
			probabilities = self.softmax_select(candidates, ctx)
			pitch = self.sample(probabilities)

		return Selection(pitch=pitch, cost=self.cost_function(pitch, ctx), probabilities=probabilities)
