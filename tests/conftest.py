import typing

import mido
import pytest

import drumscribe.grid


class FakeMidiOut:

	"""MIDI output stub that records every message sent."""

	def __init__ (self) -> None:

		self.sent: typing.List[mido.Message] = []
		self.closed = False

	def send (self, message: mido.Message) -> None:

		"""Record an outgoing MIDI message."""

		self.sent.append(message)


	def close (self) -> None:

		"""Mark the fake device closed."""

		self.closed = True


# Module-level reference so tests can inspect the most recently opened FakeMidiOut.
_current_fake_output: typing.Optional[FakeMidiOut] = None


def _fake_get_output_names () -> list[str]:

	"""Return a fixed list of MIDI output names for tests."""

	return ["Dummy MIDI"]


def _fake_open_output (name: str) -> FakeMidiOut:

	"""Return a fake MIDI output regardless of the name."""

	global _current_fake_output
	_current_fake_output = FakeMidiOut()
	return _current_fake_output


@pytest.fixture
def patch_midi (monkeypatch: pytest.MonkeyPatch) -> None:

	"""Patch mido to use a fake MIDI output for all tests that need it."""

	monkeypatch.setattr(mido, "get_output_names", _fake_get_output_names)
	monkeypatch.setattr(mido, "open_output", _fake_open_output)


@pytest.fixture
def fake_output () -> typing.Callable[[], typing.Optional[FakeMidiOut]]:

	"""Accessor for the most recently opened fake output."""

	return lambda: _current_fake_output


class SimulatedClock:

	"""A clock that only moves when told to."""

	def __init__ (self, start: float = 100.0) -> None:

		self.time = start

	def now (self) -> float:

		return self.time


class ManualTimerHandle:

	def __init__ (self, timer: "ManualTimer", interval: float, callback: typing.Callable[[], None]) -> None:

		self.timer = timer
		self.interval = interval
		self.callback = callback
		self.cancelled = False

	def cancel (self) -> None:

		self.cancelled = True


class ManualTimer:

	"""Periodic timer driven by ``advance()`` against a ``SimulatedClock``."""

	def __init__ (self, clock: SimulatedClock) -> None:

		self.clock = clock
		self.handles: typing.List[ManualTimerHandle] = []

	def call_every (self, interval: float, callback: typing.Callable[[], None]) -> ManualTimerHandle:

		handle = ManualTimerHandle(self, interval, callback)
		self.handles.append(handle)
		return handle

	def fire (self) -> None:

		"""Fire every live handle once without moving the clock."""

		for handle in list(self.handles):
			if not handle.cancelled:
				handle.callback()

	def advance (self, seconds: float, interval: float = 0.025) -> None:

		"""Move the clock forward in ``interval`` ticks, firing the live handles each tick."""

		ticks = int(round(seconds / interval))

		for _ in range(ticks):
			self.clock.time += interval
			self.fire()


class FakeBackend:

	"""Audio backend that records triggers on a simulated clock."""

	def __init__ (self, clock: SimulatedClock, missing: typing.Iterable[str] = ()) -> None:

		self.clock = clock
		self.missing = set(missing)
		self.triggers: typing.List[typing.Tuple[str, float, int]] = []
		self.ensure_calls = 0

	def now (self) -> float:

		return self.clock.now()

	async def ensure_running (self) -> None:

		self.ensure_calls += 1

	def trigger_sample (self, instrument_id: str, scheduled_time: float, velocity: int) -> None:

		if instrument_id in self.missing:
			return

		self.triggers.append((instrument_id, scheduled_time, velocity))


@pytest.fixture
def clock () -> SimulatedClock:

	return SimulatedClock()


@pytest.fixture
def timer (clock: SimulatedClock) -> ManualTimer:

	return ManualTimer(clock)


@pytest.fixture
def backend (clock: SimulatedClock) -> FakeBackend:

	return FakeBackend(clock)


def make_grid (resolution: int = 8, bars: int = 1, time_signature: str = "4/4", **hits: typing.Iterable[int]) -> drumscribe.grid.Grid:

	"""Build a grid with ``instrument_id=[steps]`` hits at the default velocity."""

	grid = drumscribe.grid.Grid(resolution=resolution, bars=bars, time_signature=time_signature)

	for instrument_id, steps in hits.items():
		for step in steps:
			grid.toggle(instrument_id, step)

	return grid


@pytest.fixture
def grid_factory () -> typing.Callable[..., drumscribe.grid.Grid]:

	"""Expose ``make_grid`` to tests."""

	return make_grid


@pytest.fixture
def fake_backend_class () -> typing.Type[FakeBackend]:

	"""The recording backend class, for tests that need a customised one."""

	return FakeBackend
