"""
label_cache.py
==============
Dedup and staleness policy for the reverse-geocoded name of the selected
target.

Design
------
- ``note_selection(target)`` decides whether a new lookup is needed and
  whether the currently cached label must be dropped. It returns the issued
  ``ResolutionRequest`` (or None when nothing was issued).
- The resolver is asynchronous: it returns a ``concurrent.futures.Future``.
  Completions are applied only when the owner calls
  ``process_completions()``, so the cache is mutated from a single thread.
- In-flight requests are never cancelled. A newer selection is reconciled
  by the policy below, not by cancellation.
- No timeout is imposed here. The pending list holds one entry per issued
  request and only shrinks as futures finish, so against a service that never
  answers it grows by one per selection change. Resolvers that can hang
  should time out their own calls.

Policy
------
1) Same id already cached with a non-empty name: nothing happens.
2) Otherwise, when the cached entry belongs to another id, it is cleared only
   if ``|dlat| + |dlon| > clear_distance_deg`` (0.1 deg by default), so small
   coordinate jitter never blanks the label.
3) A resolution request is issued for the target.

On completion, a first result entry carrying a non-empty name overwrites the
cache. With ``apply_stale=False`` the overwrite additionally requires that
the request was issued for the most recently noted selection (the ids the
resolver puts on its returned points are not consulted).

Resolver failures (exception on the future, empty result, unnamed entry)
leave the cache untouched and are not retried.
"""

from __future__ import annotations

import itertools
import logging
from concurrent.futures import Future
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from .model import NameResolver, Target

_log = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolutionRequest:
    # Monotonic request number, in issue order.
    seq: int
    target: Target
    future: "Future[List[Target]]" = field(compare=False, repr=False)


def l1_distance_deg(a: Target, b: Target) -> float:
    return abs(a.latitude_deg - b.latitude_deg) + abs(a.longitude_deg - b.longitude_deg)


class LabelCache:
    def __init__(
        self,
        resolver: NameResolver,
        clear_distance_deg: float = 0.1,
        apply_stale: bool = True,
    ) -> None:
        self._resolver = resolver
        self._clear_distance_deg = float(clear_distance_deg)
        self._apply_stale = bool(apply_stale)
        self._resolved: Optional[Target] = None
        self._selected_id: Optional[str] = None
        self._pending: List[ResolutionRequest] = []
        self._seq = itertools.count(1)

    @property
    def resolved(self) -> Optional[Target]:
        """Cached resolved entry, or None."""
        return self._resolved

    @property
    def display_name(self) -> Optional[str]:
        return self._resolved.display_name if self._resolved is not None else None

    @property
    def pending(self) -> int:
        return len(self._pending)

    def note_selection(self, target: Target) -> Optional[ResolutionRequest]:
        """Record ``target`` as the current selection and maybe request its name."""
        self._selected_id = target.id
        current = self._resolved

        if current is not None and current.id == target.id and current.display_name:
            return None

        if current is not None and current.id != target.id:
            if l1_distance_deg(current, target) > self._clear_distance_deg:
                _log.debug("Clearing label %r for %s", current.display_name, current.id)
                self._resolved = None

        request = ResolutionRequest(
            seq=next(self._seq),
            target=target,
            future=self._resolver.resolve_names([target]),
        )
        self._pending.append(request)
        return request

    def complete(self, request: ResolutionRequest, points: Sequence[Target]) -> bool:
        """Apply a resolution result. Returns True when the cache changed."""
        if not points:
            _log.info("No name resolved for %s", request.target.id)
            return False
        first = points[0]
        if not first.display_name:
            return False
        if not self._apply_stale and request.target.id != self._selected_id:
            _log.debug("Dropping stale resolution for %s", request.target.id)
            return False
        self._resolved = first
        return True

    def process_completions(self) -> int:
        """Apply every finished request in issue order; return how many changed the cache."""
        changed = 0
        still_pending: List[ResolutionRequest] = []
        for req in self._pending:
            if not req.future.done():
                still_pending.append(req)
                continue
            if req.future.cancelled():
                continue
            exc = req.future.exception()
            if exc is not None:
                _log.warning("Name resolution failed for %s: %s", req.target.id, exc)
                continue
            if self.complete(req, req.future.result()):
                changed += 1
        self._pending = still_pending
        return changed

    def reset(self) -> None:
        """Forget the cached entry and pending requests (futures keep running)."""
        self._resolved = None
        self._selected_id = None
        self._pending = []


__all__ = ["ResolutionRequest", "LabelCache", "l1_distance_deg"]
