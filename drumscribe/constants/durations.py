"""Notation duration classes.

A duration class names a written note value. Lengths are expressed as
``fractions.Fraction`` of a whole note so that a bar's events can be summed
exactly and compared against ``numerator / denominator``::

    import drumscribe.constants.durations as dur

    dur.LENGTHS[dur.QUARTER]       # Fraction(1, 4)
    dur.for_resolution(16)         # "sixteenth"
"""

import fractions
import typing


QUARTER = "quarter"
EIGHTH = "eighth"
SIXTEENTH = "sixteenth"

LENGTHS: typing.Dict[str, fractions.Fraction] = {
	QUARTER: fractions.Fraction(1, 4),
	EIGHTH: fractions.Fraction(1, 8),
	SIXTEENTH: fractions.Fraction(1, 16),
}

# Duration codes understood by VexFlow-style notation backends.
BACKEND_CODES: typing.Dict[str, str] = {
	QUARTER: "q",
	EIGHTH: "8",
	SIXTEENTH: "16",
}

_BY_RESOLUTION: typing.Dict[int, str] = {
	4: QUARTER,
	8: EIGHTH,
	16: SIXTEENTH,
}


def for_resolution (resolution: int) -> str:

	"""Return the native (unmerged) duration class of one step at ``resolution``."""

	try:
		return _BY_RESOLUTION[resolution]
	except KeyError:
		raise ValueError(f"Unsupported resolution {resolution!r}; expected one of {sorted(_BY_RESOLUTION)}") from None


def length (duration: str) -> fractions.Fraction:

	"""Length of a duration class as a fraction of a whole note."""

	return LENGTHS[duration]
