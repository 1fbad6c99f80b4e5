"""
compass_example.py
==================

Purpose
-------
Minimal example showing how to drive ``CompassSession`` by hand: one
observer fix, a few heading readings, and an offline gazetteer for names.

Usage
-----
Run from the repository root:

    python examples/compass_example.py
"""

from aurora_compass.compass_core.display import frame_summary
from aurora_compass.compass_core.model import GeoPoint, HeadingReading, OverlayConfig
from aurora_compass.compass_core.session import CompassSession
from aurora_compass.compass_io.gazetteer import GazetteerResolver
from aurora_compass.compass_io.targets import load_targets

# 1) Targets and names from the bundled sample tables.
targets = load_targets("data/aurora_grid.csv", min_probability=5.0)
resolver = GazetteerResolver.from_file("data/places.csv", max_distance_km=300.0)

# 2) Observer in Tromsø, default 110 km emission altitude, northern oval.
session = CompassSession(OverlayConfig(), resolver, targets)
session.update_location(GeoPoint(69.6492, 18.9553, 10.0))

# 3) The user turns around; watch the arrow rotation stay continuous.
for heading in (10.0, 90.0, 200.0, 350.0, 5.0):
    frame = session.update_heading(HeadingReading(true_heading_deg=heading))
    print(f"heading {heading:6.1f} deg -> arrow {frame.rotation_deg:8.2f} deg")

# 4) Apply finished name lookups and print the overlay text.
for line in frame_summary(session.poll()):
    print(line)
