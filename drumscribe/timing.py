"""Step arithmetic shared by the grid, transcription and playback.

A grid step is one subdivision of the chosen resolution (4 = quarter,
8 = eighth, 16 = sixteenth). Everything that converts between steps, beats,
bars and seconds lives here so the components agree on rounding.
"""

import dataclasses
import fractions
import math
import typing

import drumscribe.constants


@dataclasses.dataclass (frozen=True)
class TimeSignature:

	"""
	A time signature such as 4/4 or 6/8.
	"""

	numerator: int = 4
	denominator: int = 4

	def __post_init__ (self) -> None:

		"""Reject non-positive parts."""

		if self.numerator <= 0 or self.denominator <= 0:
			raise ValueError(f"Time signature parts must be positive, got {self.numerator}/{self.denominator}")

	@classmethod
	def parse (cls, value: typing.Union["TimeSignature", str, typing.Tuple[int, int]]) -> "TimeSignature":

		"""Accept a ``TimeSignature``, a ``"6/8"`` string or a ``(6, 8)`` tuple."""

		if isinstance(value, TimeSignature):
			return value

		if isinstance(value, str):
			try:
				numerator, denominator = (int(part) for part in value.split("/"))
			except ValueError:
				raise ValueError(f"Cannot parse time signature {value!r}") from None
			return cls(numerator, denominator)

		numerator, denominator = value
		return cls(int(numerator), int(denominator))

	@property
	def bar_length (self) -> fractions.Fraction:

		"""Length of one bar as a fraction of a whole note."""

		return fractions.Fraction(self.numerator, self.denominator)

	def __str__ (self) -> str:

		return f"{self.numerator}/{self.denominator}"


def round_half_up (value: float) -> int:

	"""Round to the nearest integer, with halves rounding up.

	Python's ``round()`` uses banker's rounding (``round(2.5) == 2``), which
	would make 5/8 at quarter resolution shrink to two steps and shift remapped
	hits on odd grids. Grid arithmetic always rounds halves up.
	"""

	return int(math.floor(value + 0.5))


def validate_resolution (resolution: int) -> int:

	"""Return ``resolution`` unchanged, or raise ``ValueError`` if it is not 4, 8 or 16."""

	if resolution not in drumscribe.constants.RESOLUTIONS:
		raise ValueError(f"Resolution must be one of {drumscribe.constants.RESOLUTIONS}, got {resolution!r}")

	return resolution


def steps_per_bar (time_signature: TimeSignature, resolution: int) -> int:

	"""Number of grid steps in one bar (never less than one)."""

	return max(1, round_half_up(time_signature.numerator * resolution / time_signature.denominator))


def steps_per_beat (time_signature: TimeSignature, resolution: int) -> int:

	"""Number of grid steps in one beat unit (``1 / denominator``), never less than one."""

	return max(1, round_half_up(resolution / time_signature.denominator))


def is_exact (time_signature: TimeSignature, resolution: int) -> bool:

	"""True when a whole number of steps fills the bar exactly.

	Only for these combinations can transcribed bars add up to precisely one
	bar; the others are clamped by rounding in ``steps_per_bar``.
	"""

	return (time_signature.numerator * resolution) % time_signature.denominator == 0


def seconds_per_step (bpm: float, resolution: int) -> float:

	"""Duration of one step in seconds. ``bpm`` counts quarter notes per minute."""

	if bpm <= 0:
		raise ValueError("BPM must be positive")

	return (60.0 / bpm) * (4.0 / resolution)
