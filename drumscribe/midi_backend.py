"""MIDI output backend for the playback scheduler.

Plays the grid on a General MIDI drum module (or any DAW / sampler listening
on the drum channel) through ``mido``. Each trigger becomes a ``note_on`` sent
at its scheduled time, followed by a short ``note_off``.

MIDI has no timestamped send, so the backend holds each message on the
asyncio loop until its scheduled time. The scheduler hands steps over up to
120 ms early, which leaves the loop plenty of slack to hit the exact time.
"""

import asyncio
import logging
import time
import typing

import mido

import drumscribe.constants.instruments
import drumscribe.constants.velocity
import drumscribe.midi_utils


logger = logging.getLogger(__name__)


GM_DRUM_CHANNEL = 9
DEFAULT_NOTE_LENGTH = 0.05


class MidiBackend:

	"""
	Implements the scheduler's audio backend surface on a MIDI output port.
	"""

	def __init__ (
		self,
		output_device_name: typing.Optional[str] = None,
		channel: int = GM_DRUM_CHANNEL,
		note_map: typing.Optional[typing.Mapping[str, int]] = None,
		note_length: float = DEFAULT_NOTE_LENGTH
	) -> None:

		"""Create a backend; the port is opened by ``ensure_running()`` or ``open()``.

		Parameters:
			output_device_name: MIDI output to open. When omitted, the first
				available output is used.
			channel: MIDI channel (0-15). GM drums live on channel 9.
			note_map: Instrument id -> MIDI note. Defaults to the GM kit map;
				instruments missing from the map are skipped.
			note_length: Seconds between each note_on and its note_off.
		"""

		if not 0 <= channel <= 15:
			raise ValueError("MIDI channel must be between 0 and 15")

		if note_length <= 0:
			raise ValueError("Note length must be positive")

		self.output_device_name = output_device_name
		self.channel = channel
		self.note_map: typing.Dict[str, int] = dict(note_map if note_map is not None else drumscribe.constants.instruments.GM_NOTE_MAP)
		self.note_length = note_length

		self.midi_out: typing.Any = None
		self._loop: typing.Optional[asyncio.AbstractEventLoop] = None
		self._ready: typing.Optional[asyncio.Event] = None
		self._pending: typing.Set[asyncio.TimerHandle] = set()
		self.active_notes: typing.Set[int] = set()

	def now (self) -> float:

		"""Monotonic clock the trigger times refer to."""

		return time.perf_counter()

	@property
	def running (self) -> bool:

		return self.midi_out is not None

	def open (self, device_name: typing.Optional[str] = None) -> bool:

		"""Try to open the output port; returns True once a port is open.

		A pending ``ensure_running()`` is released as soon as this succeeds, so
		a host can recover from a missing device by calling ``open()`` again
		with another name.
		"""

		if self.midi_out is not None:
			return True

		if device_name is not None:
			self.output_device_name = device_name

		name, midi_out = drumscribe.midi_utils.select_output_device(self.output_device_name)

		if midi_out is None:
			return False

		self.output_device_name = name
		self.midi_out = midi_out

		if self._ready is not None:
			self._ready.set()

		return True

	async def ensure_running (self) -> None:

		"""Wait until an output port is open.

		Opens the port on first use. If that fails the wait continues until a
		later ``open()`` succeeds; playback simply does not start meanwhile.
		"""

		self._loop = asyncio.get_running_loop()

		if self._ready is None:
			self._ready = asyncio.Event()

		if self.open():
			self._ready.set()
			return

		logger.warning("MIDI output not available - playback will start once a device is opened")

		await self._ready.wait()

	def trigger_sample (self, instrument_id: str, scheduled_time: float, velocity: int = drumscribe.constants.velocity.DEFAULT_VELOCITY) -> None:

		"""Play ``instrument_id`` at ``scheduled_time`` (on ``now()``'s clock)."""

		note = self.note_map.get(instrument_id)

		if note is None:
			logger.debug(f"No MIDI note for {instrument_id!r} - skipped")
			return

		if self.midi_out is None or self._loop is None:
			logger.debug(f"MIDI output not open - {instrument_id!r} skipped")
			return

		velocity = max(1, min(drumscribe.constants.velocity.MAX_VELOCITY, int(velocity)))
		delay = max(0.0, scheduled_time - self.now())

		self._call_later(delay, mido.Message("note_on", channel=self.channel, note=note, velocity=velocity))
		self._call_later(delay + self.note_length, mido.Message("note_off", channel=self.channel, note=note, velocity=0))

	def _call_later (self, delay: float, message: mido.Message) -> None:

		assert self._loop is not None

		handle: typing.Optional[asyncio.TimerHandle] = None

		def fire () -> None:

			self._pending.discard(handle)  # type: ignore[arg-type]
			self._send(message)

		handle = self._loop.call_later(delay, fire)
		self._pending.add(handle)

	def _send (self, message: mido.Message) -> None:

		"""Send a message now, tracking sounding notes."""

		if self.midi_out is None:
			return

		if message.type == "note_on" and message.velocity > 0:
			self.active_notes.add(message.note)
		elif message.type == "note_off":
			self.active_notes.discard(message.note)

		try:
			self.midi_out.send(message)
		except Exception:
			logger.exception("MIDI send failed (device may be disconnected)")

	def cancel_pending (self) -> None:

		"""Drop every message not yet sent and silence sounding notes."""

		for handle in list(self._pending):
			handle.cancel()

		self._pending.clear()

		for note in list(self.active_notes):
			self._send(mido.Message("note_off", channel=self.channel, note=note, velocity=0))

	def close (self) -> None:

		"""Silence everything and close the port."""

		self.cancel_pending()

		if self.midi_out is not None:
			try:
				self.midi_out.close()
			except Exception:
				logger.exception("Failed to close MIDI output")
			self.midi_out = None

		if self._ready is not None:
			self._ready.clear()

		logger.info("MIDI backend closed")
