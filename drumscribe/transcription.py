"""Grid to notation transcription.

Walks each bar of the grid left to right and emits one ``NotationEvent`` per
written note or rest. Where a hit (or a silence) is followed by empty steps
that complete a beat-aligned note value, the steps are merged into one longer
event, so a kick on beat 1 followed by an empty "&" is written as a quarter
note instead of two eighths.

The merge rules live in ``MERGE_RULES``, an ordered table checked top to
bottom; the first rule that matches wins. Each rule states the resolution and
beat subdivision it applies to, the beat positions it may start on, how many
steps it spans and the duration it writes. When no rule matches, the step is
written at its native duration.
"""

import dataclasses
import fractions
import logging
import typing

import drumscribe.constants.durations
import drumscribe.constants.instruments
import drumscribe.timing


logger = logging.getLogger(__name__)


GridData = typing.Mapping[str, typing.Sequence[int]]


@dataclasses.dataclass (frozen=True)
class NotationEvent:

	"""
	One written note (a chord of drum voices) or rest.
	"""

	pitches: typing.FrozenSet[str]
	duration: str
	is_rest: bool
	stem_up: bool = True

	@property
	def length (self) -> fractions.Fraction:

		"""Written length as a fraction of a whole note."""

		return drumscribe.constants.durations.length(self.duration)


@dataclasses.dataclass (frozen=True)
class MergeRule:

	"""
	Collapses ``span`` steps (one hit or silence plus ``span - 1`` empty
	steps) into a single event of ``duration``.
	"""

	name: str
	resolution: int
	steps_per_beat: int
	sub_in_beat: typing.FrozenSet[int]
	span: int
	duration: str

	def applies (self, resolution: int, steps_per_beat: int, step_in_bar: int, steps_per_bar: int) -> bool:

		"""True when this rule may start at ``step_in_bar``; the followers are checked separately."""

		return (
			resolution == self.resolution
			and steps_per_beat == self.steps_per_beat
			and (step_in_bar % steps_per_beat) in self.sub_in_beat
			and step_in_bar + self.span - 1 < steps_per_bar
		)


MERGE_RULES: typing.Tuple[MergeRule, ...] = (
	# 16ths in x/4: [hit][ ][ ][ ] on the beat -> quarter
	MergeRule("sixteenths_to_quarter", 16, 4, frozenset({0}), 4, drumscribe.constants.durations.QUARTER),
	# 16ths in x/4: [hit][ ] on an eighth boundary -> eighth
	MergeRule("sixteenths_to_eighth", 16, 4, frozenset({0, 2}), 2, drumscribe.constants.durations.EIGHTH),
	# 8ths in x/4: [hit][ ] on the beat -> quarter
	MergeRule("eighths_to_quarter", 8, 2, frozenset({0}), 2, drumscribe.constants.durations.QUARTER),
	# 16ths in x/8: [hit][ ] on the beat -> eighth
	MergeRule("sixteenths_to_eighth_beat", 16, 2, frozenset({0}), 2, drumscribe.constants.durations.EIGHTH),
)


def active_pitches (
	grid: GridData,
	instruments: typing.Sequence[drumscribe.constants.instruments.Instrument],
	step: int
) -> typing.FrozenSet[str]:

	"""Staff keys of every instrument hit at a global step."""

	pitches = set()

	for instrument in instruments:
		velocities = grid.get(instrument.id, ())
		if step < len(velocities) and velocities[step] != 0:
			pitches.add(instrument.pitch_key)

	return frozenset(pitches)


def _is_empty (grid: GridData, instruments: typing.Sequence[drumscribe.constants.instruments.Instrument], step: int) -> bool:

	return not active_pitches(grid, instruments, step)


def match_rule (
	rules: typing.Sequence[MergeRule],
	grid: GridData,
	instruments: typing.Sequence[drumscribe.constants.instruments.Instrument],
	resolution: int,
	steps_per_beat: int,
	bar_start: int,
	step_in_bar: int,
	steps_per_bar: int
) -> typing.Optional[MergeRule]:

	"""Return the first rule whose position matches and whose following steps are all empty."""

	for rule in rules:

		if not rule.applies(resolution, steps_per_beat, step_in_bar, steps_per_bar):
			continue

		followers = range(bar_start + step_in_bar + 1, bar_start + step_in_bar + rule.span)

		if all(_is_empty(grid, instruments, step) for step in followers):
			return rule

	return None


def transcribe_bar (
	grid: GridData,
	bar: int,
	resolution: int,
	steps_per_bar: int,
	time_signature: drumscribe.timing.TimeSignature,
	merge_notes: bool = True,
	merge_rests: bool = True,
	instruments: typing.Sequence[drumscribe.constants.instruments.Instrument] = drumscribe.constants.instruments.DEFAULT_INSTRUMENTS,
	rules: typing.Sequence[MergeRule] = MERGE_RULES
) -> typing.List[NotationEvent]:

	"""Transcribe one bar into an ordered list of notes and rests.

	Merging never reaches past the end of the bar. Every note carries an
	upward stem.
	"""

	native = drumscribe.constants.durations.for_resolution(resolution)
	steps_per_beat = drumscribe.timing.steps_per_beat(time_signature, resolution)
	bar_start = bar * steps_per_bar

	events: typing.List[NotationEvent] = []
	step = 0

	while step < steps_per_bar:

		pitches = active_pitches(grid, instruments, bar_start + step)
		is_rest = not pitches

		rule: typing.Optional[MergeRule] = None

		if (merge_rests if is_rest else merge_notes):
			rule = match_rule(rules, grid, instruments, resolution, steps_per_beat, bar_start, step, steps_per_bar)

		if rule is not None:
			duration, span = rule.duration, rule.span
		else:
			duration, span = native, 1

		events.append(NotationEvent(pitches=pitches, duration=duration, is_rest=is_rest, stem_up=not is_rest))
		step += span

	return events


def transcribe (
	grid: GridData,
	resolution: int,
	bars: int,
	steps_per_bar: int,
	time_signature: drumscribe.timing.TimeSignature,
	merge_notes: bool = True,
	merge_rests: bool = True,
	instruments: typing.Sequence[drumscribe.constants.instruments.Instrument] = drumscribe.constants.instruments.DEFAULT_INSTRUMENTS,
	rules: typing.Sequence[MergeRule] = MERGE_RULES
) -> typing.List[typing.List[NotationEvent]]:

	"""Transcribe every bar of a grid.

	Parameters:
		grid: Instrument id -> velocities, ``bars * steps_per_bar`` long.
		resolution: Step subdivision (4, 8 or 16).
		bars: Number of bars to transcribe.
		steps_per_bar: Steps in one bar.
		time_signature: Used to find beat boundaries for merging.
		merge_notes: Merge a hit with the empty steps after it.
		merge_rests: Merge runs of empty steps into longer rests.
		instruments: Which rows are read and how they are written on the staff.
		rules: Merge rule table, checked in order.

	Returns:
		One list of events per bar.
	"""

	drumscribe.timing.validate_resolution(resolution)

	if not drumscribe.timing.is_exact(time_signature, resolution):
		logger.debug(f"{time_signature} at resolution {resolution} is rounded to {steps_per_bar} steps; bar lengths will not add up exactly")

	return [
		transcribe_bar(grid, bar, resolution, steps_per_bar, time_signature, merge_notes, merge_rests, instruments, rules)
		for bar in range(bars)
	]


def bar_length (events: typing.Iterable[NotationEvent]) -> fractions.Fraction:

	"""Total written length of a bar's events, in whole notes."""

	return sum((event.length for event in events), fractions.Fraction(0))
