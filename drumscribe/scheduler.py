"""Lookahead playback scheduler.

A timer wakes the scheduler every ``lookahead`` seconds (25 ms by default).
Each wake-up schedules every step that falls inside the next
``schedule_ahead`` seconds (120 ms) at its exact time on the audio backend's
own clock. Timer jitter therefore only decides *when* a step is handed to the
backend, never *when it sounds*, and errors cannot accumulate into drift.

```python
backend = drumscribe.midi_backend.MidiBackend()
scheduler = drumscribe.scheduler.PlaybackScheduler(backend, bpm=120, resolution=grid.resolution)
scheduler.set_on_step(lambda step, when: print(step))

await scheduler.play(grid.snapshot, start_step=0)
...
scheduler.stop()
```

The clock and timer are injectable so the scheduling logic can be driven by a
simulated clock in tests.
"""

import asyncio
import logging
import typing

import drumscribe.constants
import drumscribe.event_emitter
import drumscribe.grid
import drumscribe.timing


logger = logging.getLogger(__name__)


DEFAULT_LOOKAHEAD = 0.025			# seconds between timer wake-ups
DEFAULT_SCHEDULE_AHEAD = 0.12		# how far ahead of the clock steps are scheduled
DEFAULT_START_OFFSET = 0.03			# delay before the first step after play()


SnapshotProvider = typing.Callable[[], drumscribe.grid.GridSnapshot]
StepCallback = typing.Callable[[int, float], typing.Any]


@typing.runtime_checkable
class Clock (typing.Protocol):

	"""
	A monotonic clock in seconds.
	"""

	def now (self) -> float:

		...


@typing.runtime_checkable
class TimerHandle (typing.Protocol):

	def cancel (self) -> None:

		...


@typing.runtime_checkable
class Timer (typing.Protocol):

	"""
	Something that can call a function periodically until cancelled.
	"""

	def call_every (self, interval: float, callback: typing.Callable[[], None]) -> TimerHandle:

		...


@typing.runtime_checkable
class AudioBackend (typing.Protocol):

	"""
	The capability surface the scheduler needs from an audio (or MIDI) output.

	``trigger_sample()`` must start the sound at ``scheduled_time`` on the
	backend's own clock, and silently skip instruments it cannot play.

	A backend that holds triggers until their time may also provide
	``cancel_pending()``; ``PlaybackScheduler.stop()`` calls it so nothing
	already handed over sounds after the stop.
	"""

	def now (self) -> float:

		...

	async def ensure_running (self) -> None:

		...

	def trigger_sample (self, instrument_id: str, scheduled_time: float, velocity: int) -> None:

		...


class _AsyncioTimerHandle:

	"""
	Re-arms ``loop.call_later()`` after every call until cancelled.
	"""

	def __init__ (self, loop: asyncio.AbstractEventLoop, interval: float, callback: typing.Callable[[], None]) -> None:

		self._loop = loop
		self._interval = interval
		self._callback = callback
		self._handle: typing.Optional[asyncio.TimerHandle] = None
		self.cancelled = False

		self._arm()

	def _arm (self) -> None:

		self._handle = self._loop.call_later(self._interval, self._fire)

	def _fire (self) -> None:

		if self.cancelled:
			return

		try:
			self._callback()
		except Exception:
			logger.exception("Periodic timer callback failed")

		if not self.cancelled:
			self._arm()

	def cancel (self) -> None:

		self.cancelled = True

		if self._handle is not None:
			self._handle.cancel()
			self._handle = None


class AsyncioTimer:

	"""
	Periodic callbacks on the running asyncio event loop.
	"""

	def __init__ (self, loop: typing.Optional[asyncio.AbstractEventLoop] = None) -> None:

		self._loop = loop

	def call_every (self, interval: float, callback: typing.Callable[[], None]) -> _AsyncioTimerHandle:

		if interval <= 0:
			raise ValueError("Timer interval must be positive")

		loop = self._loop if self._loop is not None else asyncio.get_running_loop()

		return _AsyncioTimerHandle(loop, interval, callback)


class PlaybackScheduler:

	"""
	Loops a grid through an audio backend with sample-accurate step times.

	Two states: stopped and playing. ``play()`` moves to playing, ``stop()``
	back to stopped; both are safe to call in either state.
	"""

	def __init__ (
		self,
		backend: AudioBackend,
		bpm: float = 120,
		resolution: int = drumscribe.constants.SIXTEENTH_RESOLUTION,
		timer: typing.Optional[Timer] = None,
		clock: typing.Optional[Clock] = None,
		lookahead: float = DEFAULT_LOOKAHEAD,
		schedule_ahead: float = DEFAULT_SCHEDULE_AHEAD,
		start_offset: float = DEFAULT_START_OFFSET
	) -> None:

		"""Set up a stopped scheduler.

		Parameters:
			backend: Receives triggers and provides the clock they are timed on.
			bpm: Tempo in quarter notes per minute.
			resolution: Grid resolution (4, 8 or 16); sets the step length.
			timer: Periodic callback provider (defaults to ``AsyncioTimer``).
			clock: Clock used for scheduling decisions (defaults to the backend).
				Only override this with a clock that runs in step with the
				backend's, such as a simulated clock in tests.
			lookahead: Seconds between timer wake-ups.
			schedule_ahead: Seconds ahead of the clock to schedule steps.
			start_offset: Seconds between ``play()`` and the first step.
		"""

		if lookahead <= 0:
			raise ValueError("Lookahead must be positive")

		if schedule_ahead <= 0:
			raise ValueError("Schedule-ahead window must be positive")

		if start_offset < 0:
			raise ValueError("Start offset cannot be negative")

		self.backend = backend
		self.timer: Timer = timer if timer is not None else AsyncioTimer()
		self.clock: Clock = clock if clock is not None else backend
		self.lookahead = lookahead
		self.schedule_ahead = schedule_ahead
		self.start_offset = start_offset

		self.bpm: float = 120
		self.resolution: int = drumscribe.constants.SIXTEENTH_RESOLUTION
		self.set_transport(bpm=bpm, resolution=resolution)

		self.events = drumscribe.event_emitter.EventEmitter()

		self.playing = False
		self.current_step = 0
		self.next_event_time = 0.0

		self._on_step: typing.Optional[StepCallback] = None
		self._get_snapshot: typing.Optional[SnapshotProvider] = None
		self._poll_handle: typing.Optional[TimerHandle] = None

		# Bumped on every play() and stop(); a tick that finds a different
		# value than it was armed with belongs to an earlier run and does nothing.
		self._generation = 0

	def set_transport (self, bpm: typing.Optional[float] = None, resolution: typing.Optional[int] = None) -> None:

		"""Change tempo and/or resolution; takes effect from the next scheduled step."""

		if bpm is not None:
			if bpm <= 0:
				raise ValueError("BPM must be positive")
			self.bpm = bpm

		if resolution is not None:
			self.resolution = drumscribe.timing.validate_resolution(resolution)

		logger.info(f"Transport set to {self.bpm:.2f} BPM at resolution {self.resolution}")

	def set_on_step (self, callback: typing.Optional[StepCallback]) -> None:

		"""Register the step cursor callback, called as ``callback(step, scheduled_time)``."""

		self._on_step = callback

	def on_event (self, event_name: str, callback: typing.Callable[..., typing.Any]) -> None:

		"""Listen for ``"start"``, ``"stop"`` or ``"step"`` events."""

		self.events.on(event_name, callback)

	def seconds_per_step (self) -> float:

		return drumscribe.timing.seconds_per_step(self.bpm, self.resolution)

	async def play (self, get_grid_snapshot: SnapshotProvider, start_step: int = 0) -> None:

		"""Start looping the grid returned by ``get_grid_snapshot``.

		Waits for the backend to become ready first. Does nothing if already
		playing, or if ``stop()`` is called while waiting for the backend.
		"""

		generation = self._generation

		await self.backend.ensure_running()

		if self.playing:
			return

		if generation != self._generation:
			logger.info("Stopped while waiting for the audio backend - not starting")
			return

		snapshot = get_grid_snapshot()
		max_step = max(0, snapshot.columns - 1)

		self._get_snapshot = get_grid_snapshot
		self.current_step = max(0, min(max_step, start_step))
		self.next_event_time = self.clock.now() + self.start_offset
		self.playing = True

		self._generation += 1
		generation = self._generation
		self._poll_handle = self.timer.call_every(self.lookahead, lambda: self._tick(generation))

		logger.info(f"Playback started at step {self.current_step} ({self.bpm:.2f} BPM)")

		self.events.emit("start", self.current_step)

	def stop (self) -> None:

		"""Stop playback. No trigger is issued or sounds after this returns."""

		self._generation += 1

		if not self.playing:
			return

		self.playing = False

		if self._poll_handle is not None:
			self._poll_handle.cancel()
			self._poll_handle = None

		# Backends that hold triggers until their time drop what they still hold.
		cancel_pending = getattr(self.backend, "cancel_pending", None)

		if callable(cancel_pending):
			try:
				cancel_pending()
			except Exception:
				logger.exception("Failed to cancel pending triggers")

		logger.info("Playback stopped")

		self.events.emit("stop")

	def _tick (self, generation: int) -> None:

		"""Schedule every step that starts before ``now + schedule_ahead``."""

		if generation != self._generation or not self.playing or self._get_snapshot is None:
			return

		snapshot = self._get_snapshot()
		columns = snapshot.columns

		if columns <= 0:
			return

		if self.current_step >= columns:
			self.current_step = 0

		horizon = self.clock.now() + self.schedule_ahead

		while self.next_event_time < horizon:

			self._schedule_step(snapshot, self.current_step, self.next_event_time)

			if self._on_step is not None:
				try:
					self._on_step(self.current_step, self.next_event_time)
				except Exception:
					logger.exception("Step callback failed")

			self.events.emit("step", self.current_step, self.next_event_time)

			# A step callback may have stopped (or restarted) playback.
			if generation != self._generation:
				return

			self.next_event_time += self.seconds_per_step()
			self.current_step = (self.current_step + 1) % columns

	def _schedule_step (self, snapshot: drumscribe.grid.GridSnapshot, step: int, when: float) -> None:

		"""Trigger every active instrument at ``step``."""

		for instrument in snapshot.instruments:

			velocity = snapshot.velocity_at(instrument.id, step)

			if velocity <= 0:
				continue

			try:
				self.backend.trigger_sample(instrument.id, when, velocity)
			except Exception:
				logger.exception(f"Failed to trigger {instrument.id!r} at step {step}")
