"""
compass_io.gazetteer
====================

Offline reverse geocoding against a table of named places.

The gazetteer is a CSV/TSV file with columns ``name, latitude, longitude``
(comment lines start with '#'). A point is labelled with the nearest place
whose great-circle distance does not exceed ``max_distance_km``; points with
no place in range are returned without a name.

``GazetteerResolver`` satisfies the ``NameResolver`` contract by running the
lookup inline and returning an already completed future. Wrap
``GazetteerResolver.lookup`` in ``ExecutorResolver`` to move it off-thread.
"""

from __future__ import annotations

import logging
from concurrent.futures import Future
from typing import List, Optional, Sequence

import numpy as np
import pandas as pd

from ..compass_core.geolook import EARTH_RADIUS_M, central_angles_rad
from ..compass_core.model import Target
from ..compass_core.resolvers import SyncResolver
from .tables import read_table

_log = logging.getLogger(__name__)

GAZETTEER_COLUMNS = ("name", "latitude", "longitude")


def load_gazetteer(path: str) -> pd.DataFrame:
    """Read a place table; rows missing a name or coordinate are dropped."""
    df = read_table(path)
    missing = [c for c in GAZETTEER_COLUMNS if c not in df.columns]
    if missing:
        raise ValueError(
            f"Missing required columns {missing} in '{path}'. "
            f"Found columns: {list(df.columns)}"
        )
    df["latitude"] = pd.to_numeric(df["latitude"], errors="coerce")
    df["longitude"] = pd.to_numeric(df["longitude"], errors="coerce")
    df = df[df["name"].notna()].copy()
    df["name"] = df["name"].astype(str).str.strip()
    df = df.dropna(subset=["latitude", "longitude"])
    df = df[df["name"] != ""]
    return df[list(GAZETTEER_COLUMNS)].reset_index(drop=True)


class GazetteerResolver:
    def __init__(self, places: pd.DataFrame, max_distance_km: float = 500.0) -> None:
        self._names = places["name"].to_numpy(dtype=object)
        self._lats = places["latitude"].to_numpy(dtype=float)
        self._lons = places["longitude"].to_numpy(dtype=float)
        self._max_angle = max_distance_km * 1000.0 / EARTH_RADIUS_M
        self._sync = SyncResolver(self.lookup)

    @classmethod
    def from_file(cls, path: str, max_distance_km: float = 500.0) -> "GazetteerResolver":
        return cls(load_gazetteer(path), max_distance_km=max_distance_km)

    def nearest(self, latitude_deg: float, longitude_deg: float) -> Optional[str]:
        if self._names.size == 0:
            return None
        angles = central_angles_rad(latitude_deg, longitude_deg, self._lats, self._lons)
        idx = int(np.argmin(angles))
        if angles[idx] > self._max_angle:
            return None
        return str(self._names[idx])

    def lookup(self, points: Sequence[Target]) -> List[Target]:
        out = [p.with_name(self.nearest(p.latitude_deg, p.longitude_deg)) for p in points]
        named = sum(1 for p in out if p.display_name)
        _log.debug("Gazetteer resolved %d/%d points", named, len(out))
        return out

    def resolve_names(self, points: Sequence[Target]) -> "Future[List[Target]]":
        return self._sync.resolve_names(points)


__all__ = ["GAZETTEER_COLUMNS", "load_gazetteer", "GazetteerResolver"]
