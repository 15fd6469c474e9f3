import logging

import drumscribe
import drumscribe.display

logging.basicConfig(level=logging.INFO)

grid = drumscribe.Grid(resolution=16, bars=2, time_signature="4/4")

# Bar 1: straight eighth hats, kick on 1 and the "a" of 2, snare on 2 and 4
for step in range(0, 16, 2):
	grid.toggle("hihat", step)

for step in (0, 7):
	grid.toggle("kick", step)

for step in (4, 12):
	grid.toggle("snare", step)

# Bar 2: crash on the one, then a tom fill
grid.toggle("crash1", 16)
grid.toggle("kick", 16)

for step, tom in zip(range(24, 32), ("tom1", "tom1", "tom2", "tom2", "floorTom", "floorTom", "floorTom", "floorTom")):
	grid.toggle(tom, step)

print(drumscribe.display.GridDisplay(grid).render())
print()

for merge in (True, False):
	model = drumscribe.build_render_model(grid, merge_notes=merge, merge_rests=merge)
	print(f"Merging {'on' if merge else 'off'}:")
	print("\n".join(drumscribe.display.format_notation(model)))
	print()

# Switch to 6/8 and keep the hits where they were in the bar
grid.set_time_signature("6/8")

print(drumscribe.display.GridDisplay(grid).render())
print("\n".join(drumscribe.display.format_notation(drumscribe.build_render_model(grid))))
