import random
import typing

import mido
import pytest

import tessitura.chords
import tessitura.config
import tessitura.cost
import tessitura.engine
import tessitura.pitch_space


class FakeMidiOut:

	"""Minimal MIDI output stub that records what it is sent."""

	def __init__ (self) -> None:

		self.sent: typing.List[mido.Message] = []
		self.closed = False


	def send (self, message: mido.Message) -> None:

		"""Record an outgoing MIDI message."""

		self.sent.append(message)


	def close (self) -> None:

		"""Mark the fake device closed."""

		self.closed = True


class FakeOscClient:

	"""Stands in for ``SimpleUDPClient``; records every message."""

	def __init__ (self) -> None:

		self.messages: typing.List[typing.Tuple[str, typing.List[typing.Any]]] = []


	def send_message (self, address: str, value: typing.Any) -> None:

		"""Record an outgoing OSC message."""

		self.messages.append((address, list(value)))


	def addresses (self) -> typing.List[str]:

		"""Addresses sent so far, in order."""

		return [address for address, _ in self.messages]


def _fake_open_output (name: typing.Optional[str] = None) -> FakeMidiOut:

	"""Return a fake MIDI output regardless of the name."""

	return FakeMidiOut()


@pytest.fixture
def patch_midi (monkeypatch: pytest.MonkeyPatch) -> None:

	"""Patch mido so opening an output port never touches real hardware."""

	monkeypatch.setattr(mido, "open_output", _fake_open_output)


@pytest.fixture
def midi_out () -> FakeMidiOut:

	"""A recording MIDI output."""

	return FakeMidiOut()


@pytest.fixture
def osc_client () -> FakeOscClient:

	"""A recording OSC client."""

	return FakeOscClient()


@pytest.fixture
def pitch_space () -> tessitura.pitch_space.PitchSpace:

	"""The default 48-84 pitch space."""

	return tessitura.pitch_space.PitchSpace()


@pytest.fixture
def c_major (pitch_space: tessitura.pitch_space.PitchSpace) -> tessitura.pitch_space.Scale:

	"""C major scale."""

	return pitch_space.build_scale("C", "major")


@pytest.fixture
def c_major_chord () -> tessitura.chords.Chord:

	"""C major triad."""

	return tessitura.chords.Chord(root_pc=0, quality="major")


@pytest.fixture
def cost_function (pitch_space: tessitura.pitch_space.PitchSpace) -> tessitura.cost.CostFunction:

	"""J(p) with the default weights."""

	return tessitura.cost.CostFunction(pitch_space)


@pytest.fixture
def engine () -> tessitura.engine.MelodyEngine:

	"""A seeded engine in C major, changing chord every bar."""

	config = tessitura.config.EngineConfig(seed=1, bars_per_chord=1)

	return tessitura.engine.MelodyEngine(config, rng=random.Random(1))


def make_context (
	scale: tessitura.pitch_space.Scale,
	chord: tessitura.chords.Chord,
	p_raw: float,
	p_prev: int = 60,
	p_prev_prev: int = 60,
	stability: float = 1.0,
) -> tessitura.cost.CostContext:

	"""Shorthand for building a cost context in tests."""

	return tessitura.cost.CostContext(
		p_raw = p_raw,
		p_prev = p_prev,
		p_prev_prev = p_prev_prev,
		scale = scale,
		chord = chord,
		stability = stability,
	)
