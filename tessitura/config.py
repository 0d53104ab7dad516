"""Engine configuration.

:class:`EngineConfig` holds every tunable the engine reads. It can be
built in code or loaded from YAML:

```yaml
root: D
mode: dorian
progression: i-VI-III-VII
bars_per_chord: 2
modulate: true
stability: 0.7
seed: 42
weights:
  step: [0.5, 1.5]
```

Every key is optional; missing keys keep their defaults.
"""

import dataclasses
import logging
import os
import typing

import yaml

import tessitura.cost
import tessitura.melodic_score
import tessitura.phrase
import tessitura.pitch_space


logger = logging.getLogger(__name__)


@dataclasses.dataclass
class EngineConfig:

	"""Tunable settings for :class:`~tessitura.engine.MelodyEngine`."""

	root: str = "C"
	mode: str = "major"
	progression: typing.Union[str, typing.List[int]] = "I-V-vi-IV"
	bars_per_chord: int = 2
	modulate: bool = False
	low: int = tessitura.pitch_space.DEFAULT_LOW
	high: int = tessitura.pitch_space.DEFAULT_HIGH
	stability: float = 0.5
	deterministic_threshold: float = 0.98
	horizon: int = tessitura.phrase.DEFAULT_HORIZON
	end_penalty: float = tessitura.phrase.DEFAULT_END_PENALTY
	score_threshold: float = tessitura.melodic_score.DEFAULT_THRESHOLD
	seed: typing.Optional[int] = None
	osc_host: str = "127.0.0.1"
	osc_port: int = 9001
	weights: tessitura.cost.CostWeights = dataclasses.field(default_factory=tessitura.cost.CostWeights)


	def __post_init__ (self) -> None:

		if self.stability < 0 or self.stability > 1:
			raise ValueError("Stability must be between 0 and 1")

		if self.deterministic_threshold < 0 or self.deterministic_threshold > 1:
			raise ValueError("Deterministic threshold must be between 0 and 1")

		if not 0 <= self.low <= self.high <= 127:
			raise ValueError(f"Invalid MIDI range {self.low}-{self.high}")

		if self.bars_per_chord < 1:
			raise ValueError("Bars per chord must be at least 1")

		if self.horizon < 0:
			raise ValueError("Horizon must not be negative")


	@classmethod
	def from_dict (cls, values: typing.Mapping[str, typing.Any]) -> "EngineConfig":

		"""Build a config from a plain mapping, such as parsed YAML.

		Raises:
			ValueError: For keys that are not config fields.
		"""

		known = {f.name for f in dataclasses.fields(cls)}
		unknown = set(values) - known

		if unknown:
			raise ValueError(f"Unknown config keys: {sorted(unknown)}")

		kwargs = dict(values)

		if "weights" in kwargs and not isinstance(kwargs["weights"], tessitura.cost.CostWeights):
			kwargs["weights"] = tessitura.cost.CostWeights.from_dict(kwargs["weights"] or {})

		return cls(**kwargs)


def load_config (config_path: str = "tessitura.yaml") -> EngineConfig:

	"""
	Load configuration from a YAML file. A missing file gives the defaults.
	"""

	if not os.path.exists(config_path):
		logger.warning(f"Config file {config_path} not found. Using defaults.")
		return EngineConfig()

	with open(config_path, "r") as f:
		data = yaml.safe_load(f) or {}

	if not isinstance(data, dict):
		logger.error(f"Config file {config_path} must contain a mapping")
		raise ValueError(f"Config file {config_path} must contain a mapping")

	return EngineConfig.from_dict(data)
