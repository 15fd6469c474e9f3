"""Beam grouping.

Decides which notes of a bar are joined by a beam. Notes are grouped by the
beat window they start in: one beat unit (``1/denominator``) in simple meters
and a dotted quarter (``3/8``) in 6/8. Rests are never beamed and split a
window in two; quarter notes and longer have no flag to beam.

Only membership and stem direction are decided here. Beam geometry is up to
the notation backend.
"""

import dataclasses
import fractions
import typing

import drumscribe.constants.durations
import drumscribe.timing
import drumscribe.transcription


COMPOUND_BEAM_FRACTION = fractions.Fraction(3, 8)


@dataclasses.dataclass (frozen=True)
class BeamGroup:

	"""
	Consecutive notes of one bar that share a beam.

	``indices`` point into the bar's event list so a backend can match the
	group to the notes it has already built.
	"""

	indices: typing.Tuple[int, ...]
	events: typing.Tuple[drumscribe.transcription.NotationEvent, ...]
	window: int
	stem_up: bool = True


def beam_fraction (time_signature: drumscribe.timing.TimeSignature) -> fractions.Fraction:

	"""Length of one beaming window in whole notes."""

	if time_signature.numerator == 6 and time_signature.denominator == 8:
		return COMPOUND_BEAM_FRACTION

	return fractions.Fraction(1, time_signature.denominator)


def is_beamable (event: drumscribe.transcription.NotationEvent) -> bool:

	"""Notes shorter than a quarter carry a flag and can be beamed."""

	return not event.is_rest and event.length < drumscribe.constants.durations.LENGTHS[drumscribe.constants.durations.QUARTER]


def group_beams (
	bar_events: typing.Sequence[drumscribe.transcription.NotationEvent],
	time_signature: drumscribe.timing.TimeSignature
) -> typing.List[BeamGroup]:

	"""Partition the beamable notes of one bar into beat-aligned beam groups.

	A group never spans two windows and never contains a rest. Windows that
	hold a single beamable note produce no group.
	"""

	fraction = beam_fraction(time_signature)

	groups: typing.List[BeamGroup] = []
	current: typing.List[int] = []
	current_window = -1
	position = fractions.Fraction(0)

	def close () -> None:

		if len(current) >= 2:
			groups.append(BeamGroup(
				indices = tuple(current),
				events = tuple(bar_events[i] for i in current),
				window = current_window
			))

		current.clear()

	for index, event in enumerate(bar_events):

		window = int(position // fraction)

		if not is_beamable(event):
			close()

		else:
			if current and window != current_window:
				close()

			if not current:
				current_window = window

			current.append(index)

		position += event.length

	close()

	return groups
