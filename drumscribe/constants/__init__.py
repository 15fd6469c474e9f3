"""Constants for drumscribe.

This package contains three sets of constants:

- ``drumscribe.constants.durations`` - Notation duration classes and their lengths
- ``drumscribe.constants.velocity`` - Hit velocities and the cell toggle cycle
- ``drumscribe.constants.instruments`` - The fixed drum kit catalog

The legal grid resolutions are re-exported here since nearly every module needs them.
"""

QUARTER_RESOLUTION = 4
EIGHTH_RESOLUTION = 8
SIXTEENTH_RESOLUTION = 16

RESOLUTIONS = (QUARTER_RESOLUTION, EIGHTH_RESOLUTION, SIXTEENTH_RESOLUTION)
