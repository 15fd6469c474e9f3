"""The drum kit catalog.

Each instrument has a stable id (the grid key), a display label, the staff
position used by the notation backend (``pitch_key``, in ``note/octave``
form with an optional notehead suffix) and a General MIDI percussion note
number used by the MIDI backend.

The catalog is fixed at import time::

    import drumscribe.constants.instruments as instruments

    instruments.GM_NOTE_MAP["snare"]   # 38
"""

import dataclasses
import typing


@dataclasses.dataclass (frozen=True)
class Instrument:

	"""
	An immutable drum kit voice.
	"""

	id: str
	label: str
	pitch_key: str
	midi_note: int


KICK = Instrument("kick", "Kick", "f/4", 36)
SNARE = Instrument("snare", "Snare", "c/5", 38)
HI_HAT = Instrument("hihat", "Hi-Hat", "g/5/x2", 42)
HI_HAT_FOOT = Instrument("hihatFoot", "HH Foot", "f/4/x2", 44)
TOM_2 = Instrument("tom2", "Tom 2", "a/4", 45)
TOM_1 = Instrument("tom1", "Tom 1", "c/5", 48)
FLOOR_TOM = Instrument("floorTom", "Floor Tom", "f/4", 41)
RIDE = Instrument("ride", "Ride", "f/5/x2", 51)
CRASH_1 = Instrument("crash1", "Crash 1", "a/5/x2", 49)
CRASH_2 = Instrument("crash2", "Crash 2", "c/6/x2", 57)

DEFAULT_INSTRUMENTS: typing.Tuple[Instrument, ...] = (
	KICK,
	SNARE,
	HI_HAT,
	HI_HAT_FOOT,
	TOM_2,
	TOM_1,
	FLOOR_TOM,
	RIDE,
	CRASH_1,
	CRASH_2,
)

# Instrument id -> GM note, in the shape the MIDI backend expects.
GM_NOTE_MAP: typing.Dict[str, int] = {instrument.id: instrument.midi_note for instrument in DEFAULT_INSTRUMENTS}

# Staff position for rests in a percussion clef.
REST_KEY = "b/4"
