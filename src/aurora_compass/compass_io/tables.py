"""
compass_io.tables
=================

Shared ingestion helper for the small delimited tables used by the compass
(target grids, gazetteers). The delimiter is chosen from the first
non-comment, non-blank line: tab, comma or semicolon by frequency, falling
back to runs of whitespace.
"""

from __future__ import annotations

import pandas as pd

_CANDIDATES = ("\t", ",", ";")


def detect_delimiter(path: str) -> str:
    with open(path, "r", encoding="utf-8") as f:
        for raw in f:
            line = raw.strip()
            if not line or line.startswith("#"):
                continue
            counts = {d: line.count(d) for d in _CANDIDATES}
            best = max(_CANDIDATES, key=lambda d: counts[d])
            return best if counts[best] > 0 else r"\s+"
    raise ValueError(f"File '{path}' appears to contain no column header")


def read_table(path: str) -> pd.DataFrame:
    """Read a commented, delimited table with lower-cased, stripped column names."""
    df = pd.read_csv(
        path, sep=detect_delimiter(path), comment="#", skip_blank_lines=True, encoding="utf-8"
    )
    df.columns = [str(c).strip().lower() for c in df.columns]
    return df


__all__ = ["detect_delimiter", "read_table"]
