"""Grid remapping.

When the resolution or time signature changes, the number of steps per bar
changes with it. ``remap()`` moves every hit to the step closest to its old
position within the same bar so the groove keeps its timing. ``resize()`` is
the plain alternative used when "keep timing" is off: cells stay at the same
index and the sequences are truncated or zero-padded.

Both functions are pure: they build new sequences and never touch the input.
"""

import logging
import typing

import drumscribe.timing


logger = logging.getLogger(__name__)


GridData = typing.Dict[str, typing.List[int]]


def remap_step (step: int, old_steps_per_bar: int, new_steps_per_bar: int) -> int:

	"""Map a bar-local step index onto a grid with a different number of steps per bar."""

	new_local = drumscribe.timing.round_half_up(step * new_steps_per_bar / old_steps_per_bar)

	return min(new_steps_per_bar - 1, max(0, new_local))


def remap (prev_grid: typing.Mapping[str, typing.Sequence[int]], old_steps_per_bar: int, new_steps_per_bar: int, bars: int) -> GridData:

	"""Relocate every active cell onto a grid with ``new_steps_per_bar`` steps per bar.

	Each bar is handled independently; hits never move into a neighbouring bar.
	When two old steps land on the same new step (the resolution got coarser)
	the louder velocity is kept, so an accent is never replaced by a quieter hit.

	Parameters:
		prev_grid: Instrument id -> velocities, ``bars * old_steps_per_bar`` long.
			Shorter sequences read as zero past their end.
		old_steps_per_bar: Steps per bar of ``prev_grid``.
		new_steps_per_bar: Steps per bar of the result.
		bars: Number of bars in both grids.

	Returns:
		A new instrument id -> velocities mapping, ``bars * new_steps_per_bar`` long.
	"""

	if old_steps_per_bar <= 0 or new_steps_per_bar <= 0:
		raise ValueError("Steps per bar must be positive")

	if bars <= 0:
		raise ValueError("Bar count must be positive")

	next_grid: GridData = {}

	for instrument_id, velocities in prev_grid.items():

		out = [0] * (bars * new_steps_per_bar)

		for bar in range(bars):
			for step in range(old_steps_per_bar):

				old_global = bar * old_steps_per_bar + step

				if old_global >= len(velocities):
					break

				velocity = velocities[old_global]

				if velocity == 0:
					continue

				new_global = bar * new_steps_per_bar + remap_step(step, old_steps_per_bar, new_steps_per_bar)

				out[new_global] = max(out[new_global], velocity)

		next_grid[instrument_id] = out

	logger.debug(f"Remapped {len(next_grid)} rows from {old_steps_per_bar} to {new_steps_per_bar} steps per bar over {bars} bars")

	return next_grid


def resize (prev_grid: typing.Mapping[str, typing.Sequence[int]], columns: int) -> GridData:

	"""Truncate or zero-pad every sequence to ``columns`` cells without moving any hit."""

	if columns < 0:
		raise ValueError("Column count cannot be negative")

	return {
		instrument_id: [velocities[i] if i < len(velocities) else 0 for i in range(columns)]
		for instrument_id, velocities in prev_grid.items()
	}
