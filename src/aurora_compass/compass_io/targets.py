"""
compass_io.targets
==================

Read aurora activity points from a delimited text table.

Expected columns
----------------
- ``latitude``    (deg, required)
- ``longitude``   (deg, required; 0..360 grids are wrapped to -180..180)
- ``probability`` (percent, required; clipped to [0, 100])
- ``id``          (optional; derived from the coordinates when absent)
- ``name``        (optional; copied into ``Target.display_name``)

Notes
-----
- The delimiter is auto-detected (tab, comma, semicolon, or whitespace).
- Lines starting with '#' are comments.
- Column names are matched case-insensitively after stripping spaces;
  ``lat``/``lon``/``prob`` are accepted as short forms.
- Rows with a missing required value are dropped.
"""

from __future__ import annotations

from typing import List

import numpy as np
import pandas as pd

from ..compass_core.geolook import wrap_longitude
from ..compass_core.model import Target
from .tables import read_table

REQUIRED_COLUMNS = ("latitude", "longitude", "probability")

_ALIASES = {
    "lat": "latitude",
    "lon": "longitude",
    "lng": "longitude",
    "prob": "probability",
    "aurora": "probability",
    "display_name": "name",
}


def target_id_for(latitude_deg: float, longitude_deg: float) -> str:
    """Stable id for a grid cell: coordinates rounded to 1e-4 deg."""
    return f"{latitude_deg:.4f},{longitude_deg:.4f}"


def read_targets_table(path: str, *, min_probability: float = 0.0) -> pd.DataFrame:
    """
    Load and normalize a target table.

    Parameters
    ----------
    path : str
        CSV/TSV file.
    min_probability : float
        Rows with probability strictly below this value are dropped.

    Returns
    -------
    pandas.DataFrame
        Columns ``id, latitude, longitude, probability, name`` in file order.

    Raises
    ------
    ValueError
        If a required column is missing.
    """
    df = read_table(path)
    df = df.rename(columns={k: v for k, v in _ALIASES.items() if k in df.columns})

    missing = [c for c in REQUIRED_COLUMNS if c not in df.columns]
    if missing:
        raise ValueError(
            f"Missing required columns {missing} in '{path}'. "
            f"Found columns: {list(df.columns)}"
        )

    for c in REQUIRED_COLUMNS:
        df[c] = pd.to_numeric(df[c], errors="coerce")
    df = df.dropna(subset=list(REQUIRED_COLUMNS)).reset_index(drop=True)

    df["latitude"] = df["latitude"].clip(-90.0, 90.0)
    df["longitude"] = df["longitude"].map(wrap_longitude)
    df["probability"] = df["probability"].clip(0.0, 100.0)
    df = df[df["probability"] >= min_probability].reset_index(drop=True)

    if "id" in df.columns:
        ids = df["id"].astype(str)
    else:
        ids = pd.Series(
            [target_id_for(a, b) for a, b in zip(df["latitude"], df["longitude"])],
            dtype=object,
        )
    df["id"] = ids.to_numpy()

    if "name" not in df.columns:
        df["name"] = None
    df["name"] = df["name"].astype(object).where(df["name"].notna(), None)

    return df[["id", "latitude", "longitude", "probability", "name"]]


def targets_from_frame(df: pd.DataFrame) -> List[Target]:
    out: List[Target] = []
    for row in df.itertuples(index=False):
        name = row.name if isinstance(row.name, str) and row.name.strip() else None
        out.append(
            Target(
                id=str(row.id),
                latitude_deg=float(row.latitude),
                longitude_deg=float(row.longitude),
                probability=float(np.clip(row.probability, 0.0, 100.0)),
                display_name=name,
            )
        )
    return out


def load_targets(path: str, *, min_probability: float = 0.0) -> List[Target]:
    """Shortcut: ``read_targets_table`` followed by ``targets_from_frame``."""
    return targets_from_frame(read_targets_table(path, min_probability=min_probability))


__all__ = [
    "REQUIRED_COLUMNS",
    "target_id_for",
    "read_targets_table",
    "targets_from_frame",
    "load_targets",
]
