"""
rotation.py
===========
Continuous rotation for an arrow that points at a target bearing.

The arrow angle relative to the device is ``target_azimuth - heading``.
Feeding that raw value to an animation makes the arrow spin the long way
round whenever the value crosses the 0/360 seam. ``RotationTracker`` keeps an
unbounded accumulator instead: every update moves it by the shortest signed
delta (|delta| <= 180 deg) toward the new angle, so the emitted value evolves
continuously and may leave [0, 360) freely.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional

from .geolook import normalize_azimuth


@dataclass(frozen=True)
class RotationState:
    # Accumulated rotation in degrees (unbounded).
    continuous_rotation: float = 0.0
    # Last heading seen; None while uninitialized. Diagnostic only.
    last_heading: Optional[float] = None


def shortest_delta_deg(current_deg: float, target_deg: float) -> float:
    """Signed delta in [-180, 180] taking ``current`` onto ``target`` mod 360."""
    delta = normalize_azimuth(target_deg) - normalize_azimuth(current_deg)
    if delta > 180.0:
        delta -= 360.0
    elif delta < -180.0:
        delta += 360.0
    return delta


class RotationTracker:
    """Two-state smoother: uninitialized, then tracking."""

    def __init__(self) -> None:
        self._rotation = 0.0
        self._last_heading: Optional[float] = None

    @property
    def initialized(self) -> bool:
        return self._last_heading is not None

    @property
    def continuous_rotation(self) -> float:
        return self._rotation

    @property
    def state(self) -> RotationState:
        return RotationState(self._rotation, self._last_heading)

    def update(self, new_heading: float, target_azimuth: float) -> float:
        """Advance with a new heading and target azimuth (degrees).

        The first update after construction or ``reset()`` emits the angle
        normalized into [0, 360). Later updates add the shortest delta to the
        accumulated value.
        """
        if not (math.isfinite(new_heading) and math.isfinite(target_azimuth)):
            raise ValueError("heading and target azimuth must be finite")

        target_rotation = target_azimuth - new_heading
        if not self.initialized:
            self._rotation = normalize_azimuth(target_rotation)
        else:
            self._rotation += shortest_delta_deg(self._rotation, target_rotation)
        self._last_heading = float(new_heading)
        return self._rotation

    def reset(self) -> None:
        self._rotation = 0.0
        self._last_heading = None


__all__ = ["RotationState", "RotationTracker", "shortest_delta_deg"]
