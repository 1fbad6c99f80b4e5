"""
compass_io.report
=================

Write look-angle records to a tab-separated values (TSV) file with a fixed
schema.

What this module provides
-------------------------
- `ReportMetadata`: file-level metadata (observer, target altitude,
  hemisphere, software version, creation timestamp).
- `LookRecord`: one evaluated target at one instant (look angles, score,
  heading and arrow rotation when known, resolved name when known).
- `write_look_report_tsv(path, metadata, rows, append=True)`: write or
  append using the fixed column schema and a commented header.
- `SchemaMismatchError`: raised when appending to a file whose column header
  differs from the expected schema.

File format
-----------
1) A commented metadata block (lines starting with '#'): observer, target
   altitude, hemisphere, column dictionary with units, provenance.
2) One header line:
   timestamp, target_id, latitude, longitude, probability, azimuth,
   elevation, distance_km, score, heading, rotation, name
3) Data rows separated by tab. Angles are written with exactly four
   decimals; missing values (None or non-finite) are written as "NaN".

When appending, the on-disk header is validated first. Overwriting
(`append=False`) is atomic on POSIX: the file is written to `path + ".tmp"`
and then moved with `os.replace`.
"""

from __future__ import annotations

import math
import os
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterable, Optional, TextIO

from ..compass_core.model import MIN_ALTITUDE_M, GeoPoint, Selection

__all__ = [
    "ReportMetadata",
    "LookRecord",
    "SchemaMismatchError",
    "record_from_selection",
    "write_look_report_tsv",
]


# =============================================================================
# Exceptions
# =============================================================================


class SchemaMismatchError(ValueError):
    """
    Raised when appending to an existing file whose column header line does
    not match the expected TSV schema. The message carries the path, the
    expected header and the header found on disk.
    """


# =============================================================================
# Data models
# =============================================================================


@dataclass(frozen=True)
class ReportMetadata:
    """
    Container for file-level metadata written as commented header lines.

    Attributes
    ----------
    observer_name : str
        Free-form observer label (e.g., "Tromsø").
    observer : GeoPoint
        Observer position.
    target_altitude_m : float
        Altitude applied to every target. Must be >= MIN_ALTITUDE_M.
    hemisphere : str
        "north" or "south".
    software_version : str
        Version string of the generating software.
    created_at_iso : Optional[str], default None
        ISO 8601 creation instant; current UTC time when None.
    """

    observer_name: str
    observer: GeoPoint
    target_altitude_m: float
    hemisphere: str
    software_version: str
    created_at_iso: Optional[str] = None

    def __post_init__(self) -> None:
        if self.target_altitude_m < MIN_ALTITUDE_M:
            raise ValueError(f"target_altitude_m must be >= {MIN_ALTITUDE_M}")


@dataclass(frozen=True)
class LookRecord:
    """
    One report row. Angles in degrees, distance in kilometers.
    """

    timestamp_iso: str
    target_id: str
    latitude_deg: float
    longitude_deg: float
    probability: float
    azimuth_deg: float
    elevation_deg: float
    distance_km: float
    score: float
    heading_deg: Optional[float] = None
    rotation_deg: Optional[float] = None
    name: Optional[str] = None

    def __post_init__(self) -> None:
        if not (0.0 <= self.azimuth_deg < 360.0):
            raise ValueError("azimuth_deg must be in [0, 360)")
        if not (-90.0 <= self.elevation_deg <= 90.0):
            raise ValueError("elevation_deg must be in [-90, 90]")
        if self.name is not None and ("\t" in self.name or "\n" in self.name):
            raise ValueError("name must not contain tabs or newlines")


def record_from_selection(
    timestamp_iso: str,
    selection: Selection,
    heading_deg: Optional[float] = None,
    rotation_deg: Optional[float] = None,
    name: Optional[str] = None,
) -> LookRecord:
    t = selection.target
    look = selection.look
    return LookRecord(
        timestamp_iso=timestamp_iso,
        target_id=t.id,
        latitude_deg=t.latitude_deg,
        longitude_deg=t.longitude_deg,
        probability=t.probability,
        azimuth_deg=look.azimuth_deg,
        elevation_deg=look.elevation_deg,
        distance_km=look.surface_distance_m / 1000.0,
        score=selection.score,
        heading_deg=heading_deg,
        rotation_deg=rotation_deg,
        name=name if name is not None else t.display_name,
    )


# =============================================================================
# Public API
# =============================================================================


def write_look_report_tsv(
    path: str,
    metadata: ReportMetadata,
    rows: Iterable[LookRecord],
    append: bool = True,
) -> None:
    """
    Write (or append) a look report.

    Parameters
    ----------
    path : str
        Output file path.
    metadata : ReportMetadata
        Written as the commented header when the file is created.
    rows : Iterable[LookRecord]
        Rows to write.
    append : bool, default True
        Append after header validation when the file exists; otherwise
        create/overwrite atomically.

    Raises
    ------
    SchemaMismatchError
        When appending to a file with a different column header.
    ValueError
        If the existing file contains no header line.
    """
    creating_new = not os.path.exists(path)

    if not append:
        tmp_path = f"{path}.tmp"
        with open(tmp_path, "w", newline="", encoding="utf-8") as f:
            _write_metadata_block(f, metadata)
            _write_column_header(f)
            for r in rows:
                f.write(_row_to_tsv(r))
        os.replace(tmp_path, path)
        return

    mode = "a" if not creating_new else "w"
    with open(path, mode, newline="", encoding="utf-8") as f:
        if creating_new:
            _write_metadata_block(f, metadata)
            _write_column_header(f)
        else:
            _check_header_or_raise(path)
        for r in rows:
            f.write(_row_to_tsv(r))


# =============================================================================
# Internal helpers
# =============================================================================


def _write_metadata_block(f: TextIO, md: ReportMetadata) -> None:
    created = md.created_at_iso or datetime.now(timezone.utc).strftime(
        "%Y-%m-%dT%H:%M:%SZ"
    )
    obs = md.observer

    f.write(f"# Observer: {md.observer_name}\n")
    f.write(
        f"# Observer position: lat {obs.latitude_deg:.4f} deg, "
        f"lon {obs.longitude_deg:.4f} deg, alt {obs.altitude_m:.1f} m\n"
    )
    f.write(f"# Target altitude: {md.target_altitude_m:.1f} m\n")
    f.write(f"# Hemisphere: {md.hemisphere}\n")

    f.write("# timestamp: ISO 8601\n")
    f.write("# target_id: stable target identifier\n")
    f.write("# latitude, longitude: target position, deg\n")
    f.write("# probability: aurora probability, percent\n")
    f.write("# azimuth: bearing from observer, deg clockwise from north\n")
    f.write("# elevation: angle above local horizon, deg\n")
    f.write("# distance_km: great-circle surface distance, km\n")
    f.write("# score: probability * max(0, elevation + bias)\n")
    f.write("# heading: device heading, deg\n")
    f.write("# rotation: continuous arrow rotation, deg (unbounded)\n")
    f.write("# name: resolved place name\n")

    f.write(f"# Generated with software version: {md.software_version}\n")
    f.write(f"# Created at: {created}\n")
    f.write("\n")


def _write_column_header(f: TextIO) -> None:
    f.write("\t".join(_expected_columns()) + "\n")


def _fmt_4dec_or_nan(x: Optional[float]) -> str:
    if x is None or not math.isfinite(x):
        return "NaN"
    return f"{x:.4f}"


def _fmt_default_or_nan(x: Optional[float | str]) -> str:
    if x is None:
        return "NaN"
    if isinstance(x, float) and not math.isfinite(x):
        return "NaN"
    return str(x)


def _row_to_tsv(r: LookRecord) -> str:
    fields = [
        _fmt_default_or_nan(r.timestamp_iso),
        _fmt_default_or_nan(r.target_id),
        _fmt_4dec_or_nan(r.latitude_deg),
        _fmt_4dec_or_nan(r.longitude_deg),
        _fmt_default_or_nan(r.probability),
        _fmt_4dec_or_nan(r.azimuth_deg),
        _fmt_4dec_or_nan(r.elevation_deg),
        f"{r.distance_km:.1f}" if math.isfinite(r.distance_km) else "NaN",
        _fmt_4dec_or_nan(r.score),
        _fmt_4dec_or_nan(r.heading_deg),
        _fmt_4dec_or_nan(r.rotation_deg),
        _fmt_default_or_nan(r.name),
    ]
    return "\t".join(fields) + "\n"


def _expected_columns() -> list[str]:
    return [
        "timestamp",
        "target_id",
        "latitude",
        "longitude",
        "probability",
        "azimuth",
        "elevation",
        "distance_km",
        "score",
        "heading",
        "rotation",
        "name",
    ]


def _check_header_or_raise(path: str) -> None:
    """
    Ensure the existing file at `path` has the expected column schema.

    Comment lines and blank lines are skipped; the first remaining line is
    compared (split on tab) with the expected columns.
    """
    expected_cols = _expected_columns()

    header_line: Optional[str] = None
    with open(path, "r", newline="", encoding="utf-8") as f:
        for raw in f:
            line = raw.strip()
            if not line or line.startswith("#"):
                continue
            header_line = line
            break

    if header_line is None:
        raise ValueError(f"File '{path}' appears to contain no column header")

    if header_line.split("\t") != expected_cols:
        raise SchemaMismatchError(
            "Existing file schema does not match expected header.\n"
            f"Path:     {path}\n"
            f"Expected: {chr(9).join(expected_cols)}\n"
            f"Found:    {header_line}\n"
            "Hint: If you intend to replace the file, "
            "call write_look_report_tsv(..., append=False)."
        )
