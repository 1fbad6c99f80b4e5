from __future__ import annotations

import math
from typing import Optional

from .geolook import normalize_azimuth
from .model import HeadingReading


def _usable(value: Optional[float]) -> bool:
    # Platform APIs report an invalid heading as a negative value.
    return value is not None and math.isfinite(value) and value >= 0.0


def resolve_heading(reading: Optional[HeadingReading]) -> float:
    """Return the true heading if valid, else the magnetic one, else 0."""
    if reading is None:
        return 0.0
    if _usable(reading.true_heading_deg):
        return normalize_azimuth(reading.true_heading_deg)
    if _usable(reading.magnetic_heading_deg):
        return normalize_azimuth(reading.magnetic_heading_deg)
    return 0.0


__all__ = ["resolve_heading"]
