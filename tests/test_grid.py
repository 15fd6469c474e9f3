import pytest

import drumscribe.grid
import drumscribe.timing


def test_grid_starts_empty_and_sized () -> None:

	"""A new grid is zero filled with bars * steps_per_bar columns per row."""

	grid = drumscribe.grid.Grid(resolution=16, bars=2, time_signature="3/4")

	assert grid.steps_per_bar == 12
	assert grid.columns == 24
	assert all(len(row) == 24 and not any(row) for row in grid.data.values())


def test_toggle_cycles_and_returns_to_original () -> None:

	"""Toggling twice through the 0 -> 100 cycle restores the cell."""

	grid = drumscribe.grid.Grid()

	assert grid.toggle("snare", 3) == 100
	assert grid.velocity_at("snare", 3) == 100
	assert grid.toggle("snare", 3) == 0
	assert grid.velocity_at("snare", 3) == 0


def test_toggle_restarts_cycle_for_foreign_values () -> None:

	grid = drumscribe.grid.Grid()
	grid.set_velocity("kick", 0, 64)

	assert grid.toggle("kick", 0) == 0


def test_toggle_rejects_unknown_cells () -> None:

	grid = drumscribe.grid.Grid(resolution=8, bars=1)

	with pytest.raises(KeyError):
		grid.toggle("cowbell", 0)

	with pytest.raises(IndexError):
		grid.toggle("kick", 8)


def test_set_velocity_clamps () -> None:

	grid = drumscribe.grid.Grid()
	grid.set_velocity("ride", 1, 300)
	grid.set_velocity("ride", 2, -5)

	assert grid.velocity_at("ride", 1) == 127
	assert grid.velocity_at("ride", 2) == 0


def test_velocity_at_out_of_range_is_zero () -> None:

	grid = drumscribe.grid.Grid()

	assert grid.velocity_at("kick", 999) == 0
	assert grid.velocity_at("kick", -1) == 0
	assert grid.velocity_at("cowbell", 0) == 0


def test_mutations_emit_change () -> None:

	"""Every named operation notifies listeners."""

	grid = drumscribe.grid.Grid()
	changes: list[int] = []

	grid.events.on("change", lambda g: changes.append(g.columns))

	grid.toggle("kick", 0)
	grid.set_resolution(16)
	grid.set_bars(3)
	grid.clear()

	assert changes == [16, 32, 48, 48]


def test_resolution_change_keeps_timing () -> None:

	"""With keep timing on, a snare on beat 2 stays on beat 2."""

	grid = drumscribe.grid.Grid(resolution=8, bars=2)
	grid.toggle("snare", 2)
	grid.toggle("snare", 10)

	grid.set_resolution(16)

	assert grid.columns == 32
	assert [i for i, v in enumerate(grid.data["snare"]) if v] == [4, 20]


def test_resolution_change_without_keep_timing_resizes () -> None:

	"""With keep timing off, hits keep their index."""

	grid = drumscribe.grid.Grid(resolution=8, bars=2, keep_timing=False)
	grid.toggle("snare", 2)

	grid.set_resolution(16)

	assert len(grid.data["snare"]) == 32
	assert [i for i, v in enumerate(grid.data["snare"]) if v] == [2]


def test_time_signature_change_remaps () -> None:

	"""4/4 to 3/4 at eighths squeezes eight steps into six."""

	grid = drumscribe.grid.Grid(resolution=8, bars=1, time_signature="4/4")
	grid.toggle("kick", 4)

	grid.set_time_signature("3/4")

	assert grid.time_signature == drumscribe.timing.TimeSignature(3, 4)
	assert grid.data["kick"] == [0, 0, 0, 100, 0, 0]


def test_set_bars_preserves_existing_bars () -> None:

	grid = drumscribe.grid.Grid(resolution=4, bars=1)
	grid.toggle("kick", 0)

	grid.set_bars(2)

	assert grid.data["kick"] == [100, 0, 0, 0, 0, 0, 0, 0]

	grid.set_bars(1)

	assert grid.data["kick"] == [100, 0, 0, 0]


def test_invalid_parameters_raise () -> None:

	grid = drumscribe.grid.Grid()

	with pytest.raises(ValueError):
		grid.set_resolution(12)

	with pytest.raises(ValueError):
		grid.set_bars(0)

	with pytest.raises(ValueError):
		drumscribe.grid.Grid(bars=0)


def test_snapshot_is_a_copy () -> None:

	"""Later edits do not leak into an earlier snapshot."""

	grid = drumscribe.grid.Grid(resolution=4, bars=1)
	snapshot = grid.snapshot()

	grid.toggle("kick", 0)

	assert snapshot.velocity_at("kick", 0) == 0
	assert snapshot.columns == 4
	assert snapshot.instruments == grid.instruments


def test_keep_timing_can_be_switched_at_runtime () -> None:

	"""The flag decides, per change, between remapping and resizing."""

	grid = drumscribe.grid.Grid(resolution=8, bars=1)
	grid.toggle("kick", 2)

	grid.set_keep_timing(False)
	grid.set_resolution(16)

	assert [i for i, v in enumerate(grid.data["kick"]) if v] == [2]

	grid.set_keep_timing(True)
	grid.set_resolution(8)

	assert grid.data["kick"] == [0, 100, 0, 0, 0, 0, 0, 0]


def test_time_signature_change_without_keep_timing_resizes () -> None:

	"""Shrinking the bar drops the cut-off steps; growing it pads with silence."""

	grid = drumscribe.grid.Grid(resolution=8, bars=1, time_signature="4/4", keep_timing=False)
	grid.toggle("kick", 7)
	grid.toggle("snare", 4)

	grid.set_time_signature("3/4")

	assert grid.data["kick"] == [0] * 6
	assert grid.data["snare"] == [0, 0, 0, 0, 100, 0]

	grid.set_time_signature("4/4")

	assert grid.data["snare"] == [0, 0, 0, 0, 100, 0, 0, 0]
	assert grid.data["kick"] == [0] * 8
