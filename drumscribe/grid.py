"""The grid model.

``Grid`` owns the hit data for one drum pattern and the parameters that shape
it (resolution, time signature, bar count). The host UI, the notation path and
the playback scheduler all hold a reference to the same ``Grid`` and only change
it through its named operations, each of which emits a ``"change"`` event.

```python
grid = drumscribe.Grid(resolution=8, bars=2, time_signature="4/4")
grid.toggle("snare", 2)
grid.set_resolution(16)        # the snare hit moves from step 2 to step 4
```
"""

import dataclasses
import logging
import typing

import drumscribe.constants.instruments
import drumscribe.constants.velocity
import drumscribe.event_emitter
import drumscribe.remap
import drumscribe.timing


logger = logging.getLogger(__name__)


@dataclasses.dataclass (frozen=True)
class GridSnapshot:

	"""
	A copy of the grid taken for one scheduler tick or render pass.
	"""

	grid: typing.Dict[str, typing.List[int]]
	instruments: typing.Tuple[drumscribe.constants.instruments.Instrument, ...]
	columns: int

	def velocity_at (self, instrument_id: str, step: int) -> int:

		"""Velocity of one cell, 0 for unknown instruments or out-of-range steps."""

		velocities = self.grid.get(instrument_id)

		if velocities is None or step < 0 or step >= len(velocities):
			return 0

		return velocities[step]


class Grid:

	"""
	Instrument id -> velocity sequence, plus the parameters that size it.

	Invariant: every sequence is exactly ``columns = bars * steps_per_bar``
	cells long.
	"""

	def __init__ (
		self,
		instruments: typing.Sequence[drumscribe.constants.instruments.Instrument] = drumscribe.constants.instruments.DEFAULT_INSTRUMENTS,
		resolution: int = drumscribe.constants.EIGHTH_RESOLUTION,
		bars: int = 2,
		time_signature: typing.Union[drumscribe.timing.TimeSignature, str, typing.Tuple[int, int]] = "4/4",
		keep_timing: bool = True,
		velocity_cycle: typing.Sequence[int] = drumscribe.constants.velocity.VELOCITY_CYCLE
	) -> None:

		"""Create a zero-filled grid.

		Parameters:
			instruments: The kit catalog; one row per instrument.
			resolution: Step subdivision, 4, 8 or 16.
			bars: Number of bars (positive).
			time_signature: A ``TimeSignature``, ``"3/4"`` or ``(3, 4)``.
			keep_timing: When True, resolution and time signature changes remap
				hits to their nearest new step; when False the sequences are
				only truncated or zero-padded.
			velocity_cycle: Values ``toggle()`` steps through.
		"""

		if bars <= 0:
			raise ValueError("Bar count must be positive")

		if not velocity_cycle:
			raise ValueError("Velocity cycle cannot be empty")

		self.instruments: typing.Tuple[drumscribe.constants.instruments.Instrument, ...] = tuple(instruments)
		self.resolution = drumscribe.timing.validate_resolution(resolution)
		self.bars = bars
		self.time_signature = drumscribe.timing.TimeSignature.parse(time_signature)
		self.keep_timing = keep_timing
		self.velocity_cycle: typing.Tuple[int, ...] = tuple(velocity_cycle)
		self.events = drumscribe.event_emitter.EventEmitter()

		self._data: typing.Dict[str, typing.List[int]] = {
			instrument.id: [0] * self.columns for instrument in self.instruments
		}

	@property
	def steps_per_bar (self) -> int:

		return drumscribe.timing.steps_per_bar(self.time_signature, self.resolution)

	@property
	def steps_per_beat (self) -> int:

		return drumscribe.timing.steps_per_beat(self.time_signature, self.resolution)

	@property
	def columns (self) -> int:

		return self.bars * self.steps_per_bar

	@property
	def data (self) -> typing.Dict[str, typing.List[int]]:

		"""The live cells. Change them through the named operations, not by editing these lists."""

		return self._data

	# ------------------------------------------------------------------
	# Cell access
	# ------------------------------------------------------------------

	def velocity_at (self, instrument_id: str, step: int) -> int:

		"""Velocity of one cell, 0 for unknown instruments or out-of-range steps."""

		velocities = self._data.get(instrument_id)

		if velocities is None or step < 0 or step >= len(velocities):
			return 0

		return velocities[step]

	def _check_cell (self, instrument_id: str, step: int) -> None:

		if instrument_id not in self._data:
			raise KeyError(f"Unknown instrument {instrument_id!r}")

		if step < 0 or step >= self.columns:
			raise IndexError(f"Step {step} outside grid of {self.columns} columns")

	def toggle (self, instrument_id: str, step: int) -> int:

		"""Advance one cell to the next value in the velocity cycle and return it.

		A value that is not part of the cycle (set with ``set_velocity()``)
		restarts the cycle at its first entry.
		"""

		self._check_cell(instrument_id, step)

		current = self._data[instrument_id][step]

		if current in self.velocity_cycle:
			next_value = self.velocity_cycle[(self.velocity_cycle.index(current) + 1) % len(self.velocity_cycle)]
		else:
			next_value = self.velocity_cycle[0]

		self._data[instrument_id][step] = next_value
		self.events.emit("change", self)

		return next_value

	def set_velocity (self, instrument_id: str, step: int, velocity: int) -> None:

		"""Write one cell, clamping to the MIDI velocity range."""

		self._check_cell(instrument_id, step)

		velocity = max(drumscribe.constants.velocity.MIN_VELOCITY, min(drumscribe.constants.velocity.MAX_VELOCITY, int(velocity)))

		self._data[instrument_id][step] = velocity
		self.events.emit("change", self)

	def clear (self) -> None:

		"""Silence every cell."""

		self._data = {instrument_id: [0] * self.columns for instrument_id in self._data}
		self.events.emit("change", self)

	def snapshot (self) -> GridSnapshot:

		"""Copy the current cells for the scheduler or a render pass."""

		return GridSnapshot(
			grid = {instrument_id: list(velocities) for instrument_id, velocities in self._data.items()},
			instruments = self.instruments,
			columns = self.columns
		)

	# ------------------------------------------------------------------
	# Parameter changes
	# ------------------------------------------------------------------

	def _reshape (self, old_steps_per_bar: int) -> None:

		"""Bring the cells in line with the current parameters."""

		new_steps_per_bar = self.steps_per_bar

		if self.keep_timing and old_steps_per_bar != new_steps_per_bar:
			self._data = drumscribe.remap.remap(self._data, old_steps_per_bar, new_steps_per_bar, self.bars)
		else:
			self._data = drumscribe.remap.resize(self._data, self.columns)

		self.events.emit("change", self)

	def set_resolution (self, resolution: int) -> None:

		"""Change the step subdivision (4, 8 or 16)."""

		drumscribe.timing.validate_resolution(resolution)

		if resolution == self.resolution:
			return

		old_steps_per_bar = self.steps_per_bar
		self.resolution = resolution

		logger.info(f"Resolution set to {resolution} ({self.steps_per_bar} steps per bar)")

		self._reshape(old_steps_per_bar)

	def set_time_signature (self, time_signature: typing.Union[drumscribe.timing.TimeSignature, str, typing.Tuple[int, int]]) -> None:

		"""Change the time signature, e.g. ``grid.set_time_signature("6/8")``."""

		time_signature = drumscribe.timing.TimeSignature.parse(time_signature)

		if time_signature == self.time_signature:
			return

		old_steps_per_bar = self.steps_per_bar
		self.time_signature = time_signature

		if not drumscribe.timing.is_exact(time_signature, self.resolution):
			logger.warning(f"{time_signature} does not divide evenly at resolution {self.resolution}; bars are rounded to {self.steps_per_bar} steps")

		logger.info(f"Time signature set to {time_signature}")

		self._reshape(old_steps_per_bar)

	def set_bars (self, bars: int) -> None:

		"""Change the number of bars. Existing bars keep their hits; new bars start empty."""

		if bars <= 0:
			raise ValueError("Bar count must be positive")

		if bars == self.bars:
			return

		self.bars = bars
		self._data = drumscribe.remap.resize(self._data, self.columns)

		logger.info(f"Bar count set to {bars}")

		self.events.emit("change", self)

	def set_keep_timing (self, keep_timing: bool) -> None:

		self.keep_timing = keep_timing
