"""
display.py
==========
Text renditions of the overlay fields. Widgets and the CLI share these so
that numbers are formatted identically everywhere.
"""

from __future__ import annotations

from typing import List, Optional

from .model import Target

DEFAULT_TITLE = "AURORA TARGET"


def format_coordinates(latitude_deg: float, longitude_deg: float) -> str:
    ns = "N" if latitude_deg >= 0 else "S"
    ew = "E" if longitude_deg >= 0 else "W"
    return f"{abs(latitude_deg):.1f}°{ns}, {abs(longitude_deg):.1f}°{ew}"


def format_distance_km(distance_m: float) -> str:
    return f"{distance_m / 1000.0:.0f} km away"


def format_probability(probability: float) -> str:
    # Truncated, not rounded.
    return f"{int(probability)}% PROBABILITY"


def format_azimuth(azimuth_deg: float) -> str:
    return f"{azimuth_deg:.0f}°"


def format_elevation(elevation_deg: float) -> str:
    return f"{elevation_deg:.1f}° Elev"


def title_for(target: Optional[Target]) -> str:
    if target is None or not target.display_name:
        return DEFAULT_TITLE
    return target.display_name.upper()


def frame_summary(frame) -> List[str]:
    """Human-readable lines for a ``CompassFrame``."""
    if frame.status == "no_location":
        return ["Enable Location"]
    if frame.status == "no_data" or frame.selection is None:
        return ["No aurora data"]

    look = frame.selection.look
    shown = frame.target or frame.selection.target
    lines = [
        title_for(shown),
        format_coordinates(shown.latitude_deg, shown.longitude_deg),
        f"{format_azimuth(look.azimuth_deg)}  {format_elevation(look.elevation_deg)}",
        f"{format_distance_km(look.surface_distance_m)}  "
        f"{format_probability(shown.probability)}",
    ]
    if frame.rotation_deg is not None:
        lines.append(f"Arrow rotation: {frame.rotation_deg:.1f}°")
    return lines


__all__ = [
    "DEFAULT_TITLE",
    "format_coordinates",
    "format_distance_km",
    "format_probability",
    "format_azimuth",
    "format_elevation",
    "title_for",
    "frame_summary",
]
