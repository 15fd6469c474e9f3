"""Hit velocity constants.

Velocity is the hit strength stored in each grid cell (0-127, MIDI range).
Zero means the cell is inactive.
"""

# Primary defaults
DEFAULT_VELOCITY = 100          # A plain click on a cell

# Cell toggle cycle: Off -> 100 -> Off
VELOCITY_CYCLE = (0, DEFAULT_VELOCITY)

# MIDI standard range
MIN_VELOCITY = 0
MAX_VELOCITY = 127
