import fractions
import itertools
import random

import pytest

import drumscribe.constants.durations as dur
import drumscribe.constants.instruments as instruments
import drumscribe.transcription

from drumscribe.timing import TimeSignature


def _durations (events: list) -> list:

	"""(duration, is_rest) pairs for compact assertions."""

	return [(event.duration, event.is_rest) for event in events]


def test_eighth_hit_merges_into_quarter (grid_factory) -> None:

	"""A hit on beat 1 with an empty "&" is written as a quarter note."""

	grid = grid_factory(resolution=8, kick=[0])
	events = drumscribe.transcription.transcribe_bar(grid.data, 0, 8, 8, grid.time_signature, merge_notes=True, merge_rests=False)

	assert _durations(events)[0] == (dur.QUARTER, False)
	assert len(events) == 7


def test_eighth_hit_without_merging (grid_factory) -> None:

	"""Without note merging the same hit is an eighth note followed by an eighth rest."""

	grid = grid_factory(resolution=8, kick=[0])
	events = drumscribe.transcription.transcribe_bar(grid.data, 0, 8, 8, grid.time_signature, merge_notes=False, merge_rests=True)

	assert _durations(events)[:2] == [(dur.EIGHTH, False), (dur.EIGHTH, True)]


def test_empty_beat_merges_into_quarter_rest (grid_factory) -> None:

	"""Four empty sixteenths on beat 1 become one quarter rest."""

	grid = grid_factory(resolution=16, snare=[4])
	merged = drumscribe.transcription.transcribe_bar(grid.data, 0, 16, 16, grid.time_signature, merge_notes=False, merge_rests=True)
	unmerged = drumscribe.transcription.transcribe_bar(grid.data, 0, 16, 16, grid.time_signature, merge_notes=False, merge_rests=False)

	assert _durations(merged)[0] == (dur.QUARTER, True)
	assert _durations(unmerged)[:4] == [(dur.SIXTEENTH, True)] * 4


def test_sixteenth_pairs_merge_into_eighths (grid_factory) -> None:

	"""Hits on "1" and "&" with empty "e" and "a" are two eighth notes."""

	grid = grid_factory(resolution=16, hihat=[0, 2])
	events = drumscribe.transcription.transcribe_bar(grid.data, 0, 16, 16, grid.time_signature)

	assert _durations(events) == [
		(dur.EIGHTH, False),
		(dur.EIGHTH, False),
		(dur.QUARTER, True),
		(dur.QUARTER, True),
		(dur.QUARTER, True),
	]


def test_offbeat_sixteenths_stay_atomic (grid_factory) -> None:

	"""A hit on "e" cannot start a merge."""

	grid = grid_factory(resolution=16, snare=[1])
	events = drumscribe.transcription.transcribe_bar(grid.data, 0, 16, 16, grid.time_signature)

	assert _durations(events)[:3] == [(dur.SIXTEENTH, True), (dur.SIXTEENTH, False), (dur.EIGHTH, True)]


def test_compound_meter_merges_to_eighths (grid_factory) -> None:

	"""Sixteenths in 6/8 merge in pairs up to the eighth-note beat."""

	grid = grid_factory(resolution=16, time_signature="6/8", kick=[0])
	events = drumscribe.transcription.transcribe_bar(grid.data, 0, 16, 12, grid.time_signature)

	assert _durations(events) == [(dur.EIGHTH, False)] + [(dur.EIGHTH, True)] * 5


def test_chords_collect_every_active_pitch (grid_factory) -> None:

	grid = grid_factory(resolution=4, kick=[0], hihat=[0])
	events = drumscribe.transcription.transcribe_bar(grid.data, 0, 4, 4, grid.time_signature)

	assert events[0].pitches == frozenset({instruments.KICK.pitch_key, instruments.HI_HAT.pitch_key})
	assert events[1].pitches == frozenset()


def test_notes_have_stems_up (grid_factory) -> None:

	grid = grid_factory(resolution=8, kick=[0], snare=[3])
	events = drumscribe.transcription.transcribe_bar(grid.data, 0, 8, 8, grid.time_signature)

	assert all(event.stem_up for event in events if not event.is_rest)
	assert not any(event.stem_up for event in events if event.is_rest)


def test_rule_never_reaches_past_bar_end () -> None:

	"""A rule whose span would not fit in the bar does not apply."""

	quarter_rule = drumscribe.transcription.MERGE_RULES[0]

	assert quarter_rule.applies(16, 4, 12, 16) is True
	assert quarter_rule.applies(16, 4, 12, 14) is False


def test_rules_are_checked_in_order (grid_factory) -> None:

	"""Reordering the table changes which rule wins."""

	grid = grid_factory(resolution=16, kick=[0])
	eighth_first = (drumscribe.transcription.MERGE_RULES[1], drumscribe.transcription.MERGE_RULES[0])

	default = drumscribe.transcription.transcribe_bar(grid.data, 0, 16, 16, grid.time_signature)
	swapped = drumscribe.transcription.transcribe_bar(grid.data, 0, 16, 16, grid.time_signature, rules=eighth_first)

	assert default[0].duration == dur.QUARTER
	assert swapped[0].duration == dur.EIGHTH


def test_bars_are_transcribed_independently (grid_factory) -> None:

	"""The last hit of bar one is not merged with the start of bar two."""

	grid = grid_factory(resolution=8, bars=2, kick=[7, 8])
	per_bar = drumscribe.transcription.transcribe(grid.data, 8, 2, 8, grid.time_signature)

	assert len(per_bar) == 2
	assert _durations(per_bar[0])[-1] == (dur.EIGHTH, False)
	assert _durations(per_bar[1])[0] == (dur.QUARTER, False)


@pytest.mark.parametrize("resolution", [4, 8, 16])
@pytest.mark.parametrize("signature", ["4/4", "3/4", "2/4", "6/8"])
def test_every_bar_adds_up_to_one_bar (resolution: int, signature: str, grid_factory) -> None:

	"""Whatever the content and merge settings, each bar's events fill exactly one bar."""

	time_signature = TimeSignature.parse(signature)
	rng = random.Random(f"{resolution}-{signature}")

	for bars in range(1, 9):

		grid = grid_factory(resolution=resolution, bars=bars, time_signature=signature)

		for instrument in grid.instruments:
			for step in range(grid.columns):
				if rng.random() < 0.2:
					grid.toggle(instrument.id, step)

		for merge_notes, merge_rests in itertools.product((True, False), repeat=2):

			per_bar = drumscribe.transcription.transcribe(
				grid.data, resolution, bars, grid.steps_per_bar, time_signature,
				merge_notes=merge_notes, merge_rests=merge_rests
			)

			assert len(per_bar) == bars

			for events in per_bar:
				assert drumscribe.transcription.bar_length(events) == time_signature.bar_length


def test_bar_length_sums_fractions () -> None:

	events = [
		drumscribe.transcription.NotationEvent(frozenset(), dur.QUARTER, True),
		drumscribe.transcription.NotationEvent(frozenset({"f/4"}), dur.EIGHTH, False),
	]

	assert drumscribe.transcription.bar_length(events) == fractions.Fraction(3, 8)
