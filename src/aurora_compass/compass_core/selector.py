"""
selector.py
===========
Pick the single aurora target worth pointing at.

Targets are filtered by hemisphere, look angles are computed for each with
one configured emission altitude, and the score

    score = probability * max(0, elevation_deg + horizon_bias_deg)

ranks them. The bias (5 deg by default) keeps targets slightly below the
horizon in play, since visibility fades gradually rather than cutting off at
0 deg. The highest score wins; ties keep the first target in input order.
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from .geolook import compute_look
from .model import (
    DEFAULT_TARGET_ALTITUDE_M,
    GeoPoint,
    Hemisphere,
    Selection,
    Target,
)

_log = logging.getLogger(__name__)


def score_target(
    probability: float, elevation_deg: float, horizon_bias_deg: float = 5.0
) -> float:
    return probability * max(0.0, elevation_deg + horizon_bias_deg)


def filter_hemisphere(
    targets: Iterable[Target], hemisphere: Hemisphere | str
) -> List[Target]:
    """Keep targets whose latitude sign matches ``hemisphere`` (order kept)."""
    hemi = Hemisphere.parse(hemisphere)
    return [t for t in targets if hemi.contains(t.latitude_deg)]


def _evaluate(
    observer: GeoPoint,
    targets: List[Target],
    target_altitude_m: float,
    horizon_bias_deg: float,
) -> List[Selection]:
    out: List[Selection] = []
    for t in targets:
        look = compute_look(observer, t.at_altitude(target_altitude_m))
        out.append(
            Selection(
                target=t,
                look=look,
                score=score_target(t.probability, look.elevation_deg, horizon_bias_deg),
            )
        )
    return out


def select_best(
    observer: GeoPoint,
    targets: Iterable[Target],
    hemisphere: Hemisphere | str,
    target_altitude_m: float = DEFAULT_TARGET_ALTITUDE_M,
    horizon_bias_deg: float = 5.0,
) -> Optional[Selection]:
    """Return the best-scoring target in ``hemisphere``, or None.

    Parameters
    ----------
    observer : GeoPoint
        Current observer position.
    targets : iterable of Target
        Candidate points. Input order decides ties.
    hemisphere : Hemisphere or str
        ``north`` keeps latitude >= 0, ``south`` keeps latitude < 0.
    target_altitude_m : float
        Altitude applied to every target (default 110 km).
    horizon_bias_deg : float
        Elevation bias used by the score.

    Returns
    -------
    Selection or None
        None when no target lies in the requested hemisphere.
    """
    eligible = filter_hemisphere(targets, hemisphere)
    if not eligible:
        return None

    best: Optional[Selection] = None
    for sel in _evaluate(observer, eligible, target_altitude_m, horizon_bias_deg):
        if best is None or sel.score > best.score:
            best = sel

    _log.debug(
        "Selected %s (score=%.3f) among %d targets",
        best.target.id,
        best.score,
        len(eligible),
    )
    return best


def rank_targets(
    observer: GeoPoint,
    targets: Iterable[Target],
    hemisphere: Hemisphere | str,
    target_altitude_m: float = DEFAULT_TARGET_ALTITUDE_M,
    horizon_bias_deg: float = 5.0,
) -> List[Selection]:
    """All eligible targets by descending score; equal scores keep input order."""
    eligible = filter_hemisphere(targets, hemisphere)
    ranked = _evaluate(observer, eligible, target_altitude_m, horizon_bias_deg)
    # sorted() is stable, so ties stay in input order.
    return sorted(ranked, key=lambda s: s.score, reverse=True)


__all__ = ["score_target", "filter_hemisphere", "select_best", "rank_targets"]
