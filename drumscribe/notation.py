"""Render model for a notation backend.

Combines transcription and beam grouping into one structure per bar. The
backend owns staff layout, clef glyphs and barlines; it only needs to turn
each event into a note (or rest) and join the notes listed in each beam group.

```python
model = drumscribe.notation.build_render_model(grid, merge_notes=True, merge_rests=True)

for bar in model.bars:
	for code, event in zip(bar.backend_durations(), bar.events):
		...
```
"""

import dataclasses
import logging
import typing

import drumscribe.beams
import drumscribe.constants.durations
import drumscribe.constants.instruments
import drumscribe.grid
import drumscribe.timing
import drumscribe.transcription


logger = logging.getLogger(__name__)


CLEF = "percussion"


@dataclasses.dataclass (frozen=True)
class BarNotation:

	"""
	The notes, rests and beams of one bar.
	"""

	index: int
	events: typing.Tuple[drumscribe.transcription.NotationEvent, ...]
	beams: typing.Tuple[drumscribe.beams.BeamGroup, ...]

	def backend_durations (self) -> typing.List[str]:

		"""Duration codes (``q``, ``8``, ``16``; rests with an ``r`` suffix) for each event."""

		return [
			drumscribe.constants.durations.BACKEND_CODES[event.duration] + ("r" if event.is_rest else "")
			for event in self.events
		]

	def keys (self) -> typing.List[typing.List[str]]:

		"""Staff keys for each event; rests sit on the middle line."""

		return [
			[drumscribe.constants.instruments.REST_KEY] if event.is_rest else sorted(event.pitches)
			for event in self.events
		]


@dataclasses.dataclass (frozen=True)
class RenderModel:

	"""
	Everything a notation backend needs to draw the pattern.
	"""

	time_signature: drumscribe.timing.TimeSignature
	bars: typing.Tuple[BarNotation, ...]
	clef: str = CLEF


def build_render_model (grid: drumscribe.grid.Grid, merge_notes: bool = True, merge_rests: bool = True) -> RenderModel:

	"""Transcribe and beam every bar of ``grid``."""

	per_bar = drumscribe.transcription.transcribe(
		grid.data,
		grid.resolution,
		grid.bars,
		grid.steps_per_bar,
		grid.time_signature,
		merge_notes = merge_notes,
		merge_rests = merge_rests,
		instruments = grid.instruments
	)

	bars = tuple(
		BarNotation(
			index = index,
			events = tuple(events),
			beams = tuple(drumscribe.beams.group_beams(events, grid.time_signature))
		)
		for index, events in enumerate(per_bar)
	)

	logger.debug(f"Built render model: {len(bars)} bars, {sum(len(bar.events) for bar in bars)} events")

	return RenderModel(time_signature=grid.time_signature, bars=bars)
