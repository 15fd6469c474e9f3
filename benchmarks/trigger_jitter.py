"""Lookahead scheduler jitter benchmark.

Loops a grid through the playback scheduler on the real asyncio timer and
measures, for every trigger:

- **lead time**: how long before its scheduled time the step was handed to the
  backend (negative means the scheduler was late),
- **dispatch jitter**: how far the asyncio loop fired the held message from
  its scheduled time, which is what a MIDI device actually hears.

Usage:
    python benchmarks/trigger_jitter.py [--bpm BPM] [--bars N] [--resolution R]

Options:
    --bpm BPM           Tempo in BPM (default: 120)
    --bars N            Number of bars to measure (default: 8)
    --resolution R      Grid resolution, 4, 8 or 16 (default: 16)
"""

import argparse
import asyncio
import logging
import statistics
import time

# Suppress scheduler logging during benchmark - we want clean output.
logging.basicConfig(level=logging.ERROR)

import drumscribe.grid
import drumscribe.scheduler


class _MeasuringBackend:

	"""Holds each trigger until its time, like the MIDI backend, and records timing."""

	def __init__ (self) -> None:

		self.lead: list[float] = []
		self.jitter: list[float] = []

	def now (self) -> float:

		return time.perf_counter()

	async def ensure_running (self) -> None:

		self._loop = asyncio.get_running_loop()

	def trigger_sample (self, instrument_id: str, scheduled_time: float, velocity: int) -> None:

		self.lead.append(scheduled_time - self.now())
		delay = max(0.0, scheduled_time - self.now())
		self._loop.call_later(delay, lambda: self.jitter.append(self.now() - scheduled_time))


def _run_benchmark (bpm: float, bars: int, resolution: int) -> _MeasuringBackend:

	"""Play a one-bar hi-hat loop for *bars* bars and return the measurements."""

	grid = drumscribe.grid.Grid(resolution=resolution, bars=1)

	for step in range(grid.columns):
		grid.toggle("hihat", step)

	backend = _MeasuringBackend()
	scheduler = drumscribe.scheduler.PlaybackScheduler(backend, bpm=bpm, resolution=resolution)
	total_seconds = scheduler.seconds_per_step() * grid.columns * bars

	async def _run () -> None:

		await scheduler.play(grid.snapshot)
		await asyncio.sleep(total_seconds)
		scheduler.stop()
		await asyncio.sleep(scheduler.schedule_ahead)

	asyncio.run(_run())

	return backend


def _print_report (backend: _MeasuringBackend, bpm: float, bars: int, resolution: int) -> None:

	if not backend.jitter:
		print("No timing data collected.")
		return

	lead_ms = [v * 1000 for v in backend.lead]
	jitter_ms = [v * 1000 for v in backend.jitter]

	print(f"\nTrigger Jitter Benchmark - {bars} bars of 1/{resolution} steps at {bpm:.0f} BPM")
	print(f"{'─' * 62}")
	print(f"  Triggers        : {len(jitter_ms)}")
	print(f"  Min lead time   : {min(lead_ms):>8.3f} ms  (negative = scheduled late)")
	print(f"  Mean lead time  : {statistics.mean(lead_ms):>8.3f} ms")
	print(f"{'─' * 62}")
	print(f"  Mean jitter     : {statistics.mean(jitter_ms):>8.3f} ms")
	print(f"  Std deviation   : {statistics.stdev(jitter_ms) if len(jitter_ms) > 1 else 0.0:>8.3f} ms")
	print(f"  P95 jitter      : {sorted(jitter_ms)[int(len(jitter_ms) * 0.95)]:>8.3f} ms")
	print(f"  Max jitter      : {max(jitter_ms):>8.3f} ms")
	print(f"  Late triggers   : {sum(1 for v in lead_ms if v < 0)}")
	print()


def main () -> None:

	parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
	parser.add_argument("--bpm",        type=float, default=120, help="Tempo in BPM (default: 120)")
	parser.add_argument("--bars",       type=int,   default=8,   help="Bars to measure (default: 8)")
	parser.add_argument("--resolution", type=int,   default=16,  choices=(4, 8, 16), help="Grid resolution (default: 16)")
	args = parser.parse_args()

	backend = _run_benchmark(args.bpm, args.bars, args.resolution)
	_print_report(backend, args.bpm, args.bars, args.resolution)


if __name__ == "__main__":
	main()
