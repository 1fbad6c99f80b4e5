"""Look-angle geometry from a ground observer to a point at altitude.

Given an observer (latitude, longitude, altitude) and a target point placed at
a fixed altitude above the Earth's surface, this module computes:
  - azimuth: compass bearing of the target's horizontal direction,
  - elevation: angle above (positive) or below (negative) the local horizon,
  - surface distance: great-circle distance between the surface projections.

Earth model
-----------
A sphere of radius R = 6,371,000 m. Altitudes are added to R along the
radial direction of each point. Geodetic subtleties (flattening, geoid
undulation, refraction) are ignored; at the scales of interest (auroral
ovals hundreds of km away, emission ~110 km up) they move the look angles
by far less than the spread of the target itself.

Local frame
-----------
At the observer we build a right-handed East-North-Up frame:
  up    = radial unit vector,
  north = unit tangent toward increasing latitude,
  east  = north x up  (points toward increasing longitude).

With v = target_xyz - observer_xyz:
  elevation = asin(v.up / |v|)
  azimuth   = atan2(v.east, v.north), normalized into [0, 360)

Surface distance
----------------
R * gamma, with gamma the central angle between the two surface projections
computed with the haversine formula (stable for small separations).

Degenerate case
---------------
When gamma is ~0 the observer sits directly below/above the target and the
azimuth is undefined: azimuth is reported as 0 and elevation as +/-90
depending on the sign of the altitude difference.

Input hygiene
-------------
Coordinates come from sensors and web services, so latitude is clamped to
[-90, 90] and longitude wrapped into [-180, 180) instead of raising.
"""

from __future__ import annotations

import math
from typing import Tuple

import numpy as np

from .model import GeoPoint, LookResult

EARTH_RADIUS_M = 6_371_000.0

# Central angles below this (radians, ~6 mm on the surface) count as zero.
COINCIDENT_ANGLE_RAD = 1e-9


# ----- Angle helpers -----
def clamp_latitude(lat_deg: float) -> float:
    return float(min(90.0, max(-90.0, lat_deg)))


def wrap_longitude(lon_deg: float) -> float:
    """Wrap a longitude into [-180, 180)."""
    wrapped = (float(lon_deg) + 180.0) % 360.0 - 180.0
    # Float rounding can land exactly on +180 for tiny negative inputs.
    if wrapped >= 180.0:
        wrapped -= 360.0
    return wrapped


def normalize_azimuth(az_deg: float) -> float:
    """Map any angle into [0, 360)."""
    a = float(az_deg) % 360.0
    if a >= 360.0:
        a = 0.0
    return a


def normalize_point(point: GeoPoint) -> GeoPoint:
    """Return ``point`` with latitude clamped and longitude wrapped."""
    return GeoPoint(
        clamp_latitude(point.latitude_deg),
        wrap_longitude(point.longitude_deg),
        point.altitude_m,
    )


# ----- Cartesian helpers -----
def to_ecef(point: GeoPoint, radius_m: float = EARTH_RADIUS_M) -> np.ndarray:
    """Earth-centered Cartesian position (meters) on the spherical model."""
    lat = math.radians(point.latitude_deg)
    lon = math.radians(point.longitude_deg)
    r = radius_m + point.altitude_m
    return np.array(
        [
            r * math.cos(lat) * math.cos(lon),
            r * math.cos(lat) * math.sin(lon),
            r * math.sin(lat),
        ]
    )


def enu_basis(lat_deg: float, lon_deg: float) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Return the (east, north, up) unit vectors at a surface location."""
    lat = math.radians(lat_deg)
    lon = math.radians(lon_deg)
    up = np.array(
        [math.cos(lat) * math.cos(lon), math.cos(lat) * math.sin(lon), math.sin(lat)]
    )
    north = np.array(
        [-math.sin(lat) * math.cos(lon), -math.sin(lat) * math.sin(lon), math.cos(lat)]
    )
    east = np.cross(north, up)
    return east, north, up


# ----- Great circle -----
def central_angle_rad(
    lat1_deg: float, lon1_deg: float, lat2_deg: float, lon2_deg: float
) -> float:
    """Haversine central angle between two surface points (radians)."""
    phi1 = math.radians(lat1_deg)
    phi2 = math.radians(lat2_deg)
    dphi = phi2 - phi1
    dlmb = math.radians(lon2_deg - lon1_deg)
    a = (
        math.sin(dphi / 2.0) ** 2
        + math.cos(phi1) * math.cos(phi2) * math.sin(dlmb / 2.0) ** 2
    )
    a = min(1.0, max(0.0, a))
    return 2.0 * math.atan2(math.sqrt(a), math.sqrt(1.0 - a))


def central_angles_rad(
    lat_deg: float, lon_deg: float, lats_deg, lons_deg
) -> np.ndarray:
    """Vectorized haversine from one point to many (radians)."""
    phi1 = np.radians(lat_deg)
    phi2 = np.radians(np.asarray(lats_deg, dtype=float))
    dphi = phi2 - phi1
    dlmb = np.radians(np.asarray(lons_deg, dtype=float) - lon_deg)
    a = np.sin(dphi / 2.0) ** 2 + np.cos(phi1) * np.cos(phi2) * np.sin(dlmb / 2.0) ** 2
    a = np.clip(a, 0.0, 1.0)
    return 2.0 * np.arctan2(np.sqrt(a), np.sqrt(1.0 - a))


def great_circle_distance_m(a: GeoPoint, b: GeoPoint) -> float:
    """Surface distance between the projections of ``a`` and ``b``."""
    a = normalize_point(a)
    b = normalize_point(b)
    gamma = central_angle_rad(
        a.latitude_deg, a.longitude_deg, b.latitude_deg, b.longitude_deg
    )
    return EARTH_RADIUS_M * gamma


# ----- Public API -----
def compute_look(observer: GeoPoint, target: GeoPoint) -> LookResult:
    """Azimuth, elevation and surface distance from ``observer`` to ``target``.

    Parameters
    ----------
    observer : GeoPoint
        Observer position; altitude is the device-reported altitude.
    target : GeoPoint
        Target position with its modeled altitude above the surface.

    Returns
    -------
    LookResult
        ``azimuth_deg`` in [0, 360), ``elevation_deg`` in [-90, 90] and
        ``surface_distance_m`` >= 0.
    """
    obs = normalize_point(observer)
    tgt = normalize_point(target)

    gamma = central_angle_rad(
        obs.latitude_deg, obs.longitude_deg, tgt.latitude_deg, tgt.longitude_deg
    )
    distance_m = EARTH_RADIUS_M * gamma

    if gamma < COINCIDENT_ANGLE_RAD:
        sign = float(np.sign(tgt.altitude_m - obs.altitude_m))
        return LookResult(
            azimuth_deg=0.0,
            elevation_deg=90.0 * sign,
            surface_distance_m=distance_m,
        )

    east, north, up = enu_basis(obs.latitude_deg, obs.longitude_deg)
    v = to_ecef(tgt) - to_ecef(obs)
    norm = float(np.linalg.norm(v))

    sin_el = float(np.clip(np.dot(v, up) / norm, -1.0, 1.0))
    elevation = max(-90.0, min(90.0, math.degrees(math.asin(sin_el))))
    azimuth = normalize_azimuth(
        math.degrees(math.atan2(float(np.dot(v, east)), float(np.dot(v, north))))
    )

    return LookResult(
        azimuth_deg=azimuth,
        elevation_deg=elevation,
        surface_distance_m=distance_m,
    )


__all__ = [
    "EARTH_RADIUS_M",
    "COINCIDENT_ANGLE_RAD",
    "clamp_latitude",
    "wrap_longitude",
    "normalize_azimuth",
    "normalize_point",
    "to_ecef",
    "enu_basis",
    "central_angle_rad",
    "central_angles_rad",
    "great_circle_distance_m",
    "compute_look",
]
