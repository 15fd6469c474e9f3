import asyncio
import logging

import drumscribe
import drumscribe.display

logging.basicConfig(level=logging.INFO)

BPM = 96


def build_groove () -> drumscribe.Grid:

	grid = drumscribe.Grid(resolution=16, bars=1, time_signature="4/4")

	for step in range(16):
		grid.toggle("hihat", step)

	for step in (0, 3, 8, 10):
		grid.toggle("kick", step)

	for step in (4, 12):
		grid.toggle("snare", step)

	grid.set_velocity("snare", 7, 40)

	return grid


async def main () -> None:

	grid = build_groove()
	print(drumscribe.display.GridDisplay(grid).render())

	backend = drumscribe.MidiBackend()
	scheduler = drumscribe.PlaybackScheduler(backend, bpm=BPM, resolution=grid.resolution)

	scheduler.set_on_step(lambda step, when: print(f"\rstep {step + 1:>2}", end="", flush=True))

	await scheduler.play(grid.snapshot)

	try:
		# Halfway through, drop the hats to eighths while it keeps playing
		await asyncio.sleep(8)
		for step in range(1, 16, 2):
			grid.toggle("hihat", step)
		await asyncio.sleep(8)
	finally:
		scheduler.stop()
		backend.close()


if __name__ == "__main__":
	print("Press Ctrl+C to stop.")
	asyncio.run(main())
