"""
model.py
========
Minimal data models shared across the aurora compass core.

Geometry, selection, rotation smoothing and label caching all exchange these
value types, so they live in one small module without I/O or UI details.
"""

from __future__ import annotations

import math
from concurrent.futures import Future
from dataclasses import dataclass, replace
from enum import Enum
from typing import List, Optional, Protocol, Sequence

# Lowest altitude accepted for a point (meters, below mean sea level).
MIN_ALTITUDE_M = -1000.0

# Default altitude of the auroral emission layer (meters).
DEFAULT_TARGET_ALTITUDE_M = 110_000.0


class Hemisphere(str, Enum):
    NORTH = "north"
    SOUTH = "south"

    @classmethod
    def parse(cls, value: "Hemisphere | str") -> "Hemisphere":
        """Accept ``north``/``south`` or ``N``/``S`` in any case."""
        if isinstance(value, Hemisphere):
            return value
        key = str(value).strip().lower()
        if key in ("n", "north"):
            return cls.NORTH
        if key in ("s", "south"):
            return cls.SOUTH
        raise ValueError(f"Unknown hemisphere: {value!r}. Use 'north' or 'south'.")

    def contains(self, latitude_deg: float) -> bool:
        if self is Hemisphere.NORTH:
            return latitude_deg >= 0.0
        return latitude_deg < 0.0


# A point on or above the spherical Earth.
@dataclass(frozen=True)
class GeoPoint:
    # Latitude in decimal degrees (south negative).
    latitude_deg: float
    # Longitude in decimal degrees (east positive).
    longitude_deg: float
    # Altitude above the sphere surface in meters.
    altitude_m: float = 0.0

    def __post_init__(self) -> None:
        if not math.isfinite(self.altitude_m):
            raise ValueError("altitude_m must be a finite float")
        if self.altitude_m < MIN_ALTITUDE_M:
            raise ValueError(f"altitude_m must be >= {MIN_ALTITUDE_M}")


# One scored aurora activity point.
@dataclass(frozen=True)
class Target:
    # Stable identifier of the real-world point.
    id: str
    latitude_deg: float
    longitude_deg: float
    # Aurora probability in percent.
    probability: float
    # Reverse-geocoded label, when one has been resolved.
    display_name: Optional[str] = None

    def __post_init__(self) -> None:
        if not (0.0 <= self.probability <= 100.0):
            raise ValueError("probability must be in [0, 100]")

    def with_name(self, name: Optional[str]) -> "Target":
        return replace(self, display_name=name)

    def at_altitude(self, altitude_m: float) -> GeoPoint:
        return GeoPoint(self.latitude_deg, self.longitude_deg, altitude_m)


@dataclass(frozen=True)
class LookResult:
    # Compass bearing from the observer, degrees in [0, 360).
    azimuth_deg: float
    # Angle above the local horizontal, degrees in [-90, 90].
    elevation_deg: float
    # Great-circle distance between surface projections, meters.
    surface_distance_m: float


@dataclass(frozen=True)
class Selection:
    """The winning target together with its look angles and ranking score."""

    target: Target
    look: LookResult
    score: float


@dataclass(frozen=True)
class HeadingReading:
    # True heading in degrees, None or negative when unavailable.
    true_heading_deg: Optional[float] = None
    # Magnetic heading in degrees, None or negative when unavailable.
    magnetic_heading_deg: Optional[float] = None


# Tunable parameters of the overlay.
@dataclass(frozen=True)
class OverlayConfig:
    # Altitude applied uniformly to every target (meters).
    target_altitude_m: float = DEFAULT_TARGET_ALTITUDE_M
    hemisphere: Hemisphere = Hemisphere.NORTH
    # Apply a late resolution even if its target is no longer selected.
    apply_stale_resolutions: bool = True
    # L1 distance (deg) above which a cached label for another id is dropped.
    clear_distance_deg: float = 0.1
    # Elevation bias (deg) added before clipping the score at zero.
    horizon_bias_deg: float = 5.0

    def __post_init__(self) -> None:
        if not math.isfinite(self.target_altitude_m):
            raise ValueError("target_altitude_m must be a finite float")
        if self.target_altitude_m < MIN_ALTITUDE_M:
            raise ValueError(f"target_altitude_m must be >= {MIN_ALTITUDE_M}")


class NameResolver(Protocol):
    """Asynchronous reverse geocoder for a batch of targets.

    The returned future yields the targets in input order, each optionally
    annotated with ``display_name``. Failures may surface as an exception on
    the future or as an empty list.
    """

    def resolve_names(self, points: Sequence[Target]) -> "Future[List[Target]]": ...


__all__ = [
    "MIN_ALTITUDE_M",
    "DEFAULT_TARGET_ALTITUDE_M",
    "Hemisphere",
    "GeoPoint",
    "Target",
    "LookResult",
    "Selection",
    "HeadingReading",
    "OverlayConfig",
    "NameResolver",
]
