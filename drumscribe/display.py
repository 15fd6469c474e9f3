"""Terminal rendering of the grid and its notation.

Draws the hit grid as text, one row per instrument with cymbals on top and
the kick at the bottom, a header counting the beats (``1 e & a`` at 16ths in
x/4) and a gap between bars::

	               1 e & a 2 e & a 3 e & a 4 e & a    1 e & a ...
	  Crash 2     |. . . . . . . . . . . . . . . .|  |. . . ...
	  Hi-Hat      |O . O . O . O . O . O . O . O .|  |O . O ...
	  Kick        |O . . . . . . . O . O . . . . .|  |O . . ...

``format_notation()`` gives a compact textual version of the render model,
useful in logs and tests when no notation backend is attached.
"""

import typing

import drumscribe.constants.durations
import drumscribe.grid
import drumscribe.notation
import drumscribe.timing


_LABEL_WIDTH = 12
_BAR_GAP = "  "

_SIXTEENTH_LABELS = ("", "e", "&", "a")


def beat_label (step_in_bar: int, resolution: int, time_signature: drumscribe.timing.TimeSignature) -> str:

	"""Count-in label for a step: the beat number on the beat, ``e``/``&``/``a`` between.

	Subdivisions other than two or four steps per beat show ``·``.
	"""

	steps_per_beat = drumscribe.timing.steps_per_beat(time_signature, resolution)
	beat = step_in_bar // steps_per_beat + 1
	sub = step_in_bar % steps_per_beat

	if sub == 0:
		return str(beat)

	if steps_per_beat == 2:
		return "&"

	if steps_per_beat == 4:
		return _SIXTEENTH_LABELS[sub]

	return "·"


def velocity_char (velocity: int) -> str:

	"""Map a velocity (0-127) to a single character.

	``"."`` for no hit, ``"o"`` for soft (1-80), ``"O"`` for medium
	(81-110), ``"X"`` for loud (111-127).
	"""

	if velocity <= 0:
		return "."
	if velocity <= 80:
		return "o"
	if velocity <= 110:
		return "O"
	return "X"


class GridDisplay:

	"""
	Text rendering of a ``Grid``.
	"""

	def __init__ (self, grid: drumscribe.grid.Grid) -> None:

		self._grid = grid
		self._lines: typing.List[str] = []

	@property
	def lines (self) -> typing.List[str]:

		return list(self._lines)

	def build (self) -> None:

		"""Rebuild the text lines from the current grid state."""

		grid = self._grid
		steps_per_bar = grid.steps_per_bar

		labels = [beat_label(step, grid.resolution, grid.time_signature) for step in range(steps_per_bar)]

		# Cells widen to fit two-digit beat numbers (12/8 at eighths).
		width = max([1] + [len(label) for label in labels])

		header_cells = [" ".join(label.ljust(width) for label in labels)] * grid.bars

		lines = [" " * (_LABEL_WIDTH + 3) + (_BAR_GAP + "  ").join(header_cells)]

		for instrument in reversed(grid.instruments):

			label = f"  {instrument.label[:_LABEL_WIDTH].ljust(_LABEL_WIDTH)}"
			bars = []

			for bar in range(grid.bars):
				start = bar * steps_per_bar
				cells = " ".join(velocity_char(grid.velocity_at(instrument.id, start + step)).ljust(width) for step in range(steps_per_bar))
				bars.append(f"|{cells}|")

			lines.append(label + _BAR_GAP.join(bars))

		self._lines = lines

	def render (self) -> str:

		self.build()

		return "\n".join(self._lines)


def format_event (event: typing.Any) -> str:

	"""``8(c/5,g/5/x2)`` for a note, ``qr`` for a rest."""

	code = drumscribe.constants.durations.BACKEND_CODES[event.duration]

	if event.is_rest:
		return f"{code}r"

	return f"{code}({','.join(sorted(event.pitches))})"


def format_notation (model: drumscribe.notation.RenderModel) -> typing.List[str]:

	"""One line per bar: the events in order, with beamed runs in brackets."""

	lines: typing.List[str] = []

	for bar in model.bars:

		starts = {group.indices[0] for group in bar.beams}
		ends = {group.indices[-1] for group in bar.beams}
		parts = []

		for index, event in enumerate(bar.events):
			text = format_event(event)
			if index in starts:
				text = "[" + text
			if index in ends:
				text = text + "]"
			parts.append(text)

		lines.append(f"{bar.index + 1}: {' '.join(parts)}")

	return lines
