"""The melodic cost function J(p).

J scores one candidate pitch against the current context as a weighted sum
of six penalty terms:

	J(p) = w_raw(m)    * |p - p_raw|
	     + w_step(m)   * |p - p_prev|
	     + w_leap(m)   * leap(p, p_prev, L(m))
	     + w_tonic(m)  * tonic(p)
	     + w_chord(m)  * chord(p)
	     + w_repeat(m) * repeat(p)

Every weight is a :class:`Ramp` over the melodic stability ``m``. At
``m = 0`` the raw target dominates and the output follows the input
gesture; at ``m = 1`` the tonal terms dominate and the line settles onto
stable degrees and chord tones with small steps.
"""

import dataclasses
import typing

import tessitura.chords
import tessitura.pitch_space


@dataclasses.dataclass(frozen=True)
class Ramp:

	"""A linear function of stability, given by its values at m=0 and m=1."""

	at_zero: float
	at_one: float


	def __call__ (self, m: float) -> float:

		return self.at_zero + (self.at_one - self.at_zero) * m


	@property
	def increasing (self) -> bool:

		return self.at_one >= self.at_zero


@dataclasses.dataclass(frozen=True)
class CostWeights:

	"""
	Stability-dependent weights for each cost term, plus the leap limit and
	softmax temperature curves.

	Defaults are hand-tuned so that, at full stability, a chord-tone raw target
	a step away beats repeating the previous note.
	"""

	raw: Ramp = Ramp(1.0, 0.5)
	step: Ramp = Ramp(0.5, 1.0)
	leap: Ramp = Ramp(0.5, 3.5)
	tonic: Ramp = Ramp(0.2, 1.4)
	chord: Ramp = Ramp(0.2, 1.7)
	repeat: Ramp = Ramp(0.2, 2.5)
	leap_limit: Ramp = Ramp(24.0, 7.0)
	temperature: Ramp = Ramp(2.5, 0.5)


	def __post_init__ (self) -> None:

		for name in ("raw", "step", "leap", "tonic", "chord", "repeat", "leap_limit", "temperature"):
			ramp = getattr(self, name)

			if min(ramp.at_zero, ramp.at_one) < 0:
				raise ValueError(f"Cost weight {name!r} must be non-negative")

		if self.raw.at_one > self.raw.at_zero:
			raise ValueError("Raw-fidelity weight must not increase with stability")

		for name in ("step", "leap", "tonic", "chord", "repeat"):
			if not getattr(self, name).increasing:
				raise ValueError(f"Cost weight {name!r} must not decrease with stability")

		if self.leap_limit.at_one > self.leap_limit.at_zero:
			raise ValueError("Leap limit must not grow with stability")

		if self.temperature.at_one > self.temperature.at_zero or self.temperature.at_one <= 0:
			raise ValueError("Temperature must be positive and must not grow with stability")


	@classmethod
	def from_dict (cls, values: typing.Mapping[str, typing.Sequence[float]]) -> "CostWeights":

		"""Build weights from ``{"step": [0.5, 2.5], ...}``; missing terms keep their defaults."""

		known = {f.name for f in dataclasses.fields(cls)}
		unknown = set(values) - known

		if unknown:
			raise ValueError(f"Unknown cost weights: {sorted(unknown)}")

		return cls(**{name: Ramp(float(pair[0]), float(pair[1])) for name, pair in values.items()})


@dataclasses.dataclass(frozen=True)
class CostContext:

	"""Everything J(p) needs besides the candidate itself. Built fresh per decision."""

	p_raw: float
	p_prev: int
	p_prev_prev: int
	scale: tessitura.pitch_space.Scale
	chord: tessitura.chords.Chord
	stability: float


	def __post_init__ (self) -> None:

		if self.stability < 0 or self.stability > 1:
			raise ValueError("Stability must be between 0 and 1")


@dataclasses.dataclass(frozen=True)
class CostBreakdown:

	"""Unweighted term values and the weighted total for one candidate."""

	raw: float
	step: float
	leap: float
	tonic: float
	chord: float
	repeat: float
	total: float


def step_penalty (p: int, p_prev: int) -> float:

	"""Absolute interval from the previous pitch."""

	return float(abs(p - p_prev))


def leap_penalty (p: int, p_prev: int, limit: float) -> float:

	"""Quadratic penalty for the part of an interval beyond ``limit``."""

	delta = abs(p - p_prev)

	if delta <= limit:
		return 0.0

	return (delta - limit) ** 2


def tonic_penalty (degree: typing.Optional[int]) -> float:

	"""0 for degrees 0/2/4, 1 for 1/3/5, 2 for degree 6, 3 outside the scale."""

	if degree is None:
		return 3.0

	if degree in (0, 2, 4):
		return 0.0

	if degree in (1, 3, 5):
		return 1.0

	return 2.0


def chord_penalty (p: int, chord: tessitura.chords.Chord, scale: tessitura.pitch_space.Scale) -> float:

	"""0 for a chord tone, 1 for another scale tone, 3 outside the scale."""

	if chord.contains(p):
		return 0.0

	if scale.contains(p):
		return 1.0

	return 3.0


def repeat_penalty (p: int, p_prev: int, p_prev_prev: int) -> float:

	"""1 for repeating the previous pitch, 0.5 for returning to the one before."""

	if p == p_prev:
		return 1.0

	if p == p_prev_prev:
		return 0.5

	return 0.0


class CostFunction:

	"""Evaluates J(p) for candidate pitches."""

	def __init__ (
		self,
		pitch_space: tessitura.pitch_space.PitchSpace,
		weights: typing.Optional[CostWeights] = None,
	) -> None:

		self.pitch_space = pitch_space
		self.weights = weights or CostWeights()


	def temperature (self, stability: float) -> float:

		"""Softmax temperature for a stability value."""

		return self.weights.temperature(stability)


	def leap_limit (self, stability: float) -> float:

		"""Interval size beyond which the quadratic leap penalty applies."""

		return self.weights.leap_limit(stability)


	def breakdown (self, p: int, ctx: CostContext) -> CostBreakdown:

		"""Return each term of J(p) alongside the weighted total."""

		m = ctx.stability
		w = self.weights

		raw = abs(p - ctx.p_raw)
		step = step_penalty(p, ctx.p_prev)
		leap = leap_penalty(p, ctx.p_prev, w.leap_limit(m))
		tonic = tonic_penalty(self.pitch_space.scale_degree(p, ctx.scale))
		chord = chord_penalty(p, ctx.chord, ctx.scale)
		repeat = repeat_penalty(p, ctx.p_prev, ctx.p_prev_prev)

		total = (
			w.raw(m) * raw
			+ w.step(m) * step
			+ w.leap(m) * leap
			+ w.tonic(m) * tonic
			+ w.chord(m) * chord
			+ w.repeat(m) * repeat
		)

		return CostBreakdown(raw=raw, step=step, leap=leap, tonic=tonic, chord=chord, repeat=repeat, total=total)


	def cost (self, p: int, ctx: CostContext) -> float:

		"""Return J(p), a non-negative float."""

		return self.breakdown(p, ctx).total


	def __call__ (self, p: int, ctx: CostContext) -> float:

		return self.cost(p, ctx)
