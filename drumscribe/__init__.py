"""
drumscribe - turn a drum step grid into notation and tightly timed playback.

A step sequencer grid is easy to program but hard to read; written drum
notation is easy to read but slow to write. drumscribe keeps one grid model
and derives both from it:

- **Notation.** Each bar is transcribed into notes and rests, merging a hit
  with the empty steps after it into a longer note value where it lands on
  a beat (an eighth followed by an empty "&" is written as a quarter).
  Notes are grouped into beat-aligned beams (dotted quarters in 6/8) and
  handed to a notation backend as a render model.
- **Playback.** A lookahead scheduler hands each step to the audio backend
  ahead of time, stamped with its exact start time on the backend's clock,
  so timer jitter never drifts into the groove. A ``mido`` backend plays
  the kit on any General MIDI drum module.
- **Editing.** Changing resolution or time signature remaps every hit to
  its nearest new step (the louder hit wins when two collapse), or simply
  resizes the grid when "keep timing" is off.

Minimal example:

    ```python
    import asyncio

    import drumscribe
    import drumscribe.display

    grid = drumscribe.Grid(resolution=8, bars=1, time_signature="4/4")

    for step in range(8):
        grid.toggle("hihat", step)

    grid.toggle("kick", 0)
    grid.toggle("snare", 4)

    model = drumscribe.build_render_model(grid)
    print("\\n".join(drumscribe.display.format_notation(model)))

    async def main ():
        scheduler = drumscribe.PlaybackScheduler(drumscribe.MidiBackend(), bpm=100, resolution=grid.resolution)
        await scheduler.play(grid.snapshot)
        await asyncio.sleep(8)
        scheduler.stop()

    asyncio.run(main())
    ```

Package-level exports: ``Grid``, ``TimeSignature``, ``PlaybackScheduler``,
``MidiBackend``, ``build_render_model``, ``transcribe``, ``group_beams``,
``remap_grid``.
"""

import drumscribe.beams
import drumscribe.grid
import drumscribe.midi_backend
import drumscribe.notation
import drumscribe.remap
import drumscribe.scheduler
import drumscribe.timing
import drumscribe.transcription


Grid = drumscribe.grid.Grid
TimeSignature = drumscribe.timing.TimeSignature
PlaybackScheduler = drumscribe.scheduler.PlaybackScheduler
MidiBackend = drumscribe.midi_backend.MidiBackend
build_render_model = drumscribe.notation.build_render_model
transcribe = drumscribe.transcription.transcribe
group_beams = drumscribe.beams.group_beams
remap_grid = drumscribe.remap.remap
