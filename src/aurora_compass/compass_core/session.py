"""
session.py
==========
Event-driven wiring of selection, rotation smoothing and label caching.

A ``CompassSession`` is driven by three event kinds, all delivered on the
owner's thread:
  - ``update_location(observer)``: reselect the best target; when the
    selected id changes, the label cache is told about it.
  - ``update_heading(reading)``: feed (heading, best azimuth) to the
    rotation tracker.
  - ``poll()``: apply finished name resolutions.

Every call returns a ``CompassFrame`` snapshot for the presentation layer.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Union

from .heading import resolve_heading
from .label_cache import LabelCache
from .model import (
    GeoPoint,
    HeadingReading,
    Hemisphere,
    NameResolver,
    OverlayConfig,
    Selection,
    Target,
)
from .rotation import RotationTracker
from .selector import select_best

_log = logging.getLogger(__name__)

STATUS_NO_LOCATION = "no_location"
STATUS_NO_DATA = "no_data"
STATUS_TRACKING = "tracking"


@dataclass(frozen=True)
class CompassFrame:
    status: str
    selection: Optional[Selection] = None
    # None until a heading has been applied to a selection.
    rotation_deg: Optional[float] = None
    label: Optional[str] = None
    # Cached resolved entry when present, else the selected target.
    target: Optional[Target] = None


class CompassSession:
    def __init__(
        self,
        config: OverlayConfig,
        resolver: NameResolver,
        targets: Iterable[Target] = (),
    ) -> None:
        self._config = config
        self._hemisphere = config.hemisphere
        self._targets: List[Target] = list(targets)
        self._observer: Optional[GeoPoint] = None
        self._selection: Optional[Selection] = None
        self._heading: Optional[float] = None
        self.rotation = RotationTracker()
        self.labels = LabelCache(
            resolver,
            clear_distance_deg=config.clear_distance_deg,
            apply_stale=config.apply_stale_resolutions,
        )

    @property
    def config(self) -> OverlayConfig:
        return self._config

    @property
    def hemisphere(self) -> Hemisphere:
        return self._hemisphere

    @property
    def selection(self) -> Optional[Selection]:
        return self._selection

    # ----- Inputs -----
    def set_targets(self, targets: Iterable[Target]) -> CompassFrame:
        self._targets = list(targets)
        self._reselect()
        return self.frame()

    def set_hemisphere(self, hemisphere: Union[Hemisphere, str]) -> CompassFrame:
        self._hemisphere = Hemisphere.parse(hemisphere)
        self._reselect()
        return self.frame()

    def update_location(self, observer: Optional[GeoPoint]) -> CompassFrame:
        self._observer = observer
        self._reselect()
        return self.frame()

    def update_heading(
        self, reading: Union[HeadingReading, float, None]
    ) -> CompassFrame:
        if isinstance(reading, (int, float)):
            reading = HeadingReading(true_heading_deg=float(reading))
        self._heading = resolve_heading(reading)
        if self._selection is not None:
            self.rotation.update(self._heading, self._selection.look.azimuth_deg)
        return self.frame()

    def poll(self) -> CompassFrame:
        self.labels.process_completions()
        return self.frame()

    def reset_rotation(self) -> None:
        self.rotation.reset()

    # ----- Output -----
    def frame(self) -> CompassFrame:
        if self._observer is None:
            return CompassFrame(status=STATUS_NO_LOCATION)
        if self._selection is None:
            return CompassFrame(status=STATUS_NO_DATA)
        shown = self.labels.resolved or self._selection.target
        return CompassFrame(
            status=STATUS_TRACKING,
            selection=self._selection,
            rotation_deg=(
                self.rotation.continuous_rotation if self.rotation.initialized else None
            ),
            label=self.labels.display_name,
            target=shown,
        )

    # ----- Internals -----
    def _reselect(self) -> None:
        previous = self._selection
        if self._observer is None:
            self._selection = None
            return
        self._selection = select_best(
            self._observer,
            self._targets,
            self._hemisphere,
            target_altitude_m=self._config.target_altitude_m,
            horizon_bias_deg=self._config.horizon_bias_deg,
        )
        if self._selection is None:
            return
        new_id = self._selection.target.id
        if previous is None or previous.target.id != new_id:
            _log.debug("Best target is now %s", new_id)
            self.labels.note_selection(self._selection.target)


__all__ = [
    "STATUS_NO_LOCATION",
    "STATUS_NO_DATA",
    "STATUS_TRACKING",
    "CompassFrame",
    "CompassSession",
]
